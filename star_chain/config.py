"""
StarChain - Configuration Management
======================================
Gestione centralizzata configurazione con Pydantic Settings.
Supporta environment variables, file .env, override runtime.

Security Level: HIGH
Last Updated: 2026-10-19
Version: 1.0.0

Features:
- Validazione automatica tipi
- Environment variables con prefisso STARCHAIN_
- File .env support
- Profile multipli (dev/test/prod)
"""

import os
from pathlib import Path
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from star_chain.constants import (
    CHALLENGE_TAG,
    CHALLENGE_SEPARATOR,
    CHALLENGE_WINDOW_SECONDS,
    CHALLENGE_MAX_CLOCK_SKEW_SECONDS,
    ADDRESS_VERSION_MAINNET,
    ADDRESS_VERSION_TESTNET,
)


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

class ChainSettings(BaseSettings):
    """
    Configurazione principale StarChain.

    Supporta:
    - Caricamento da environment variables (STARCHAIN_*)
    - Caricamento da file .env
    - Override programmatici
    - Validazione automatica

    Example:
        # Da environment
        export STARCHAIN_CHALLENGE_WINDOW_SECONDS=120

        # Da codice
        config = ChainSettings(node_name="TestRegistry")
    """

    model_config = SettingsConfigDict(
        env_prefix='STARCHAIN_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
        validate_assignment=True,
    )

    # ========================================================================
    # NODE IDENTIFICATION
    # ========================================================================

    node_name: str = Field(
        default="StarChain-Registry",
        description="Nome identificativo registry"
    )

    network: str = Field(
        default="mainnet",
        description="Network type: mainnet, testnet, regtest"
    )

    # ========================================================================
    # OWNERSHIP PROTOCOL
    # ========================================================================

    challenge_window_seconds: int = Field(
        default=CHALLENGE_WINDOW_SECONDS,
        ge=1,
        le=86400,
        description="Validità challenge dal timestamp di emissione (secondi)"
    )

    challenge_max_clock_skew_seconds: int = Field(
        default=CHALLENGE_MAX_CLOCK_SKEW_SECONDS,
        ge=0,
        le=3600,
        description="Tolleranza per timestamp challenge nel futuro (secondi)"
    )

    challenge_tag: str = Field(
        default=CHALLENGE_TAG,
        description="Tag protocollo in coda al messaggio challenge"
    )

    # ========================================================================
    # CRYPTOGRAPHY
    # ========================================================================

    crypto_algorithm: str = Field(
        default="ecdsa",
        description="Algoritmo firma messaggi: ecdsa"
    )

    # ========================================================================
    # LOGGING
    # ========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    log_to_file: bool = Field(
        default=False,
        description="Salva log su file"
    )

    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory log files"
    )

    log_format: str = Field(
        default="json",
        description="Formato log: json, text"
    )

    log_rotation_mb: int = Field(
        default=100,
        ge=1,
        description="Dimensione max file log prima rotation (MB)"
    )

    log_retention_days: int = Field(
        default=30,
        ge=1,
        description="Numero file log mantenuti"
    )

    audit_enabled: bool = Field(
        default=True,
        description="Registra audit trail dei blocchi aggiunti"
    )

    # ========================================================================
    # DEVELOPMENT & DEBUG
    # ========================================================================

    dev_mode: bool = Field(
        default=False,
        description="Modalità sviluppo"
    )

    # ========================================================================
    # VALIDATORS
    # ========================================================================

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valida log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log_level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Valida formato log"""
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError(f"Invalid log_format: {v}. Must be json or text")
        return v_lower

    @field_validator('crypto_algorithm')
    @classmethod
    def validate_crypto_algorithm(cls, v: str) -> str:
        """Valida algoritmo crypto"""
        valid_algos = ['ecdsa']
        v_lower = v.lower()
        if v_lower not in valid_algos:
            raise ValueError(f"Invalid crypto_algorithm: {v}. Must be one of {valid_algos}")
        return v_lower

    @field_validator('network')
    @classmethod
    def validate_network(cls, v: str) -> str:
        """Valida network type"""
        valid_networks = ['mainnet', 'testnet', 'regtest']
        v_lower = v.lower()
        if v_lower not in valid_networks:
            raise ValueError(f"Invalid network: {v}. Must be one of {valid_networks}")
        return v_lower

    @field_validator('challenge_tag')
    @classmethod
    def validate_challenge_tag(cls, v: str) -> str:
        """Il tag non può contenere il separatore del messaggio"""
        if not v or CHALLENGE_SEPARATOR in v:
            raise ValueError(
                f"Invalid challenge_tag: {v!r}. Must be non-empty without '{CHALLENGE_SEPARATOR}'"
            )
        return v

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def is_mainnet(self) -> bool:
        """Check se mainnet"""
        return self.network == "mainnet"

    def get_address_version(self) -> bytes:
        """Ottieni address version per network"""
        if self.is_mainnet():
            return ADDRESS_VERSION_MAINNET
        return ADDRESS_VERSION_TESTNET

    def get_audit_dir(self) -> Optional[Path]:
        """Directory audit log (None = nessun file)"""
        if self.audit_enabled and self.log_to_file:
            return self.log_dir
        return None

    def to_dict(self) -> dict:
        """Serializza config"""
        return self.model_dump()

    def to_json(self) -> str:
        """Serializza config in JSON"""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "ChainSettings":
        """Carica config da JSON"""
        return cls.model_validate_json(json_str)

    def __repr__(self) -> str:
        return (
            f"ChainSettings("
            f"node_name={self.node_name}, "
            f"network={self.network}, "
            f"challenge_window_seconds={self.challenge_window_seconds})"
        )


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

@lru_cache(maxsize=1)
def get_settings() -> ChainSettings:
    """
    Ottieni singleton instance di ChainSettings.

    Cached (chiamate multiple restituiscono stessa istanza).

    Example:
        >>> config = get_settings()
        >>> config.challenge_window_seconds
        300
    """
    return ChainSettings()


def reload_settings() -> ChainSettings:
    """
    Ricarica settings (invalida cache).

    Usare quando si cambiano environment variables runtime.
    """
    get_settings.cache_clear()
    return get_settings()


def override_settings(**kwargs) -> ChainSettings:
    """
    Override settings con valori custom. Utile per testing.

    Example:
        >>> test_config = override_settings(challenge_window_seconds=10)
    """
    return ChainSettings(**kwargs)


# ============================================================================
# PROFILE PRESETS
# ============================================================================

def get_development_config() -> ChainSettings:
    """
    Config preset per development.

    Features:
    - Dev mode enabled
    - Regtest network
    - Log DEBUG
    """
    return ChainSettings(
        dev_mode=True,
        network="regtest",
        log_level="DEBUG",
    )


# ============================================================================
# CONFIGURATION VALIDATION
# ============================================================================

def validate_config(config: ChainSettings) -> tuple[bool, list[str]]:
    """
    Valida configurazione completa.

    Returns:
        tuple: (is_valid, errors_list)

    Example:
        >>> is_valid, errors = validate_config(get_settings())
    """
    errors = []

    if config.challenge_max_clock_skew_seconds >= config.challenge_window_seconds:
        errors.append(
            "challenge_max_clock_skew_seconds must be smaller than challenge_window_seconds"
        )

    if config.log_to_file and config.log_dir.exists() and not os.access(config.log_dir, os.W_OK):
        errors.append(f"Directory not writable: {config.log_dir}")

    if config.dev_mode and config.is_mainnet():
        errors.append("dev_mode should not be enabled on mainnet")

    return (len(errors) == 0, errors)


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "ChainSettings",
    "get_settings",
    "reload_settings",
    "override_settings",
    "get_development_config",
    "validate_config",
]

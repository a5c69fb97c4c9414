"""
StarChain - Custom Exceptions
===============================
Gerarchia di eccezioni per gestione errori granulare.

Security Level: HIGH
Last Updated: 2026-10-19
Version: 1.0.0
"""

from typing import Optional, Any


# ============================================================================
# BASE EXCEPTION
# ============================================================================

class StarChainException(Exception):
    """
    Eccezione base per tutte le eccezioni StarChain.

    Attributes:
        message (str): Messaggio errore
        code (str): Codice errore (es. "CHALLENGE_EXPIRED")
        details (dict): Dettagli aggiuntivi
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serializza eccezione per API/logging"""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} | Details: {self.details}"
        return f"[{self.code}] {self.message}"


# ============================================================================
# CONFIGURATION ERRORS
# ============================================================================

class ConfigError(StarChainException):
    """Errore configurazione sistema"""
    pass


class InvalidConfigError(ConfigError):
    """Configurazione invalida"""
    pass


# ============================================================================
# BLOCKCHAIN ERRORS
# ============================================================================

class BlockchainError(StarChainException):
    """Errore generico blockchain"""
    pass


class GenesisError(BlockchainError):
    """Errore genesis block"""
    pass


class ChainInvalidError(BlockchainError):
    """Append rifiutato: la chain corrente non supera la validazione"""
    pass


class AppendError(BlockchainError):
    """Errore interno durante sealing/push di un blocco"""
    pass


# ============================================================================
# VALIDATION ERRORS
# ============================================================================

class ValidationError(StarChainException):
    """Errore validazione (base)"""
    pass


class BlockError(ValidationError):
    """Errore validazione blocco"""
    pass


class InvalidBlockError(BlockError):
    """Blocco invalido"""
    pass


class DecodeError(BlockError):
    """Payload del blocco non decodificabile"""
    pass


# ============================================================================
# OWNERSHIP PROTOCOL ERRORS
# ============================================================================

class OwnershipError(ValidationError):
    """Errore protocollo verifica ownership"""
    pass


class ExpiredError(OwnershipError):
    """Challenge fuori dalla finestra di validità"""
    pass


class SignatureError(OwnershipError):
    """Firma non valida per (message, address)"""
    pass


class MalformedChallengeError(OwnershipError):
    """Messaggio challenge non conforme al formato atteso"""
    pass


# ============================================================================
# CRYPTOGRAPHY ERRORS
# ============================================================================

class CryptoError(StarChainException):
    """Errore crittografia"""
    pass


class InvalidKeyError(CryptoError):
    """Chiave crittografica invalida"""
    pass


class InvalidAddressError(StarChainException):
    """Indirizzo invalido"""
    pass


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def format_validation_error(
    field: str,
    value: Any,
    expected: str,
    code: Optional[str] = None
) -> ValidationError:
    """
    Helper per creare ValidationError formattati.

    Args:
        field: Nome campo invalido
        value: Valore ricevuto
        expected: Valore/tipo atteso
        code: Codice errore custom

    Returns:
        ValidationError: Eccezione formattata

    Example:
        >>> raise format_validation_error("height", -1, "non-negative integer")
    """
    return ValidationError(
        message=f"Invalid field '{field}': expected {expected}, got {value}",
        code=code or "VALIDATION_FAILED",
        details={"field": field, "value": value, "expected": expected}
    )


# ============================================================================
# EXPORT ALL
# ============================================================================

__all__ = [
    # Base
    "StarChainException",

    # Config
    "ConfigError",
    "InvalidConfigError",

    # Blockchain
    "BlockchainError",
    "GenesisError",
    "ChainInvalidError",
    "AppendError",

    # Validation
    "ValidationError",
    "BlockError",
    "InvalidBlockError",
    "DecodeError",

    # Ownership
    "OwnershipError",
    "ExpiredError",
    "SignatureError",
    "MalformedChallengeError",

    # Crypto
    "CryptoError",
    "InvalidKeyError",
    "InvalidAddressError",

    # Helpers
    "format_validation_error",
]

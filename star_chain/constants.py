"""
StarChain - Core Constants
============================
Costanti immutabili del protocollo star registry.

Security Level: CRITICAL
Last Updated: 2026-10-19
Version: 1.0.0

IMPORTANTE: formato hash e formato challenge fanno parte del protocollo.
Ogni modifica rompe la compatibilità con le chain esistenti.
"""

from enum import Enum
from typing import Final

# ============================================================================
# GENESIS BLOCK
# ============================================================================

# Payload sentinella del blocco 0
GENESIS_PAYLOAD: Final[dict] = {"data": "Genesis Block"}
GENESIS_HEIGHT: Final[int] = 0

# Height di una chain vuota (non inizializzata)
EMPTY_CHAIN_HEIGHT: Final[int] = -1

# ============================================================================
# HASHING (formato congelato)
# ============================================================================

# Ordine campi nel preimage hash. NON modificare.
HASH_FIELD_ORDER: Final[tuple] = ("data", "previousBlockHash", "height", "time")

HASH_HEX_LENGTH: Final[int] = 64

# Separatori JSON compatti (nessuno spazio)
CANONICAL_JSON_SEPARATORS: Final[tuple] = (",", ":")

# ============================================================================
# OWNERSHIP CHALLENGE
# ============================================================================

CHALLENGE_TAG: Final[str] = "starRegistry"
CHALLENGE_SEPARATOR: Final[str] = ":"
CHALLENGE_FIELD_COUNT: Final[int] = 3

# Finestra validità challenge (5 minuti)
CHALLENGE_WINDOW_SECONDS: Final[int] = 300

# Tolleranza clock client (timestamp nel futuro)
CHALLENGE_MAX_CLOCK_SKEW_SECONDS: Final[int] = 60

# ============================================================================
# SIGNED MESSAGES
# ============================================================================

# Prefisso anteposto al messaggio prima della firma ECDSA
MESSAGE_PREFIX: Final[bytes] = b"\x1aStarChain Signed Message:\n"

# Public key secp256k1 compressa (SEC1)
COMPRESSED_PUBKEY_SIZE: Final[int] = 33

# ============================================================================
# ADDRESSING
# ============================================================================

ADDRESS_VERSION_MAINNET: Final[bytes] = b'\x00'
ADDRESS_VERSION_TESTNET: Final[bytes] = b'\x6f'

ADDRESS_MIN_LENGTH: Final[int] = 26
ADDRESS_MAX_LENGTH: Final[int] = 35


# ============================================================================
# CHAIN ISSUE KINDS
# ============================================================================

class ChainIssueKind(str, Enum):
    """Tipi di errore rilevati dal validatore di chain"""
    BLOCK_TAMPERED = "BlockTampered"
    CHAIN_BROKEN = "ChainBroken"


__all__ = [
    "GENESIS_PAYLOAD",
    "GENESIS_HEIGHT",
    "EMPTY_CHAIN_HEIGHT",
    "HASH_FIELD_ORDER",
    "HASH_HEX_LENGTH",
    "CANONICAL_JSON_SEPARATORS",
    "CHALLENGE_TAG",
    "CHALLENGE_SEPARATOR",
    "CHALLENGE_FIELD_COUNT",
    "CHALLENGE_WINDOW_SECONDS",
    "CHALLENGE_MAX_CLOCK_SKEW_SECONDS",
    "MESSAGE_PREFIX",
    "COMPRESSED_PUBKEY_SIZE",
    "ADDRESS_VERSION_MAINNET",
    "ADDRESS_VERSION_TESTNET",
    "ADDRESS_MIN_LENGTH",
    "ADDRESS_MAX_LENGTH",
    "ChainIssueKind",
]

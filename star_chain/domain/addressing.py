"""
StarChain - Claimant Addresses
================================
Address Base58Check dei claimant, derivati dalla public key di firma.

Security Level: HIGH
Last Updated: 2026-10-19
Version: 1.0.0

Layout (25 bytes prima dell'encoding):
    version (1) || hash160(pubkey) (20) || checksum (4)

Il registry usa l'address come identità dell'owner: la signature
string contiene la public key, il verifier ne ricava l'address e lo
confronta con quello dichiarato nella challenge.
"""

from typing import Optional

# Internal imports
from star_chain.domain.crypto_core import (
    compute_double_sha256,
    compute_hash160,
)
from star_chain.errors import (
    InvalidAddressError,
    CryptoError,
)
from star_chain.logging_setup import get_logger
from star_chain.constants import (
    ADDRESS_VERSION_MAINNET,
    ADDRESS_MIN_LENGTH,
    ADDRESS_MAX_LENGTH,
)


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("addressing")


# ============================================================================
# BASE58
# ============================================================================

BASE58_ALPHABET = '123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz'
_BASE58_INDEX = {char: index for index, char in enumerate(BASE58_ALPHABET)}

# version byte + hash160
_ADDRESS_PAYLOAD_SIZE = 21
_CHECKSUM_SIZE = 4


def encode_base58(data: bytes) -> str:
    """
    Encode Base58 (zero iniziali → '1').

    Examples:
        >>> encode_base58(b'hello')
        'Cn8eVZg'
    """
    zeros = len(data) - len(data.lstrip(b'\x00'))
    value = int.from_bytes(data, byteorder='big')

    digits = []
    while value:
        value, digit = divmod(value, 58)
        digits.append(BASE58_ALPHABET[digit])

    return '1' * zeros + ''.join(reversed(digits))


def decode_base58(encoded: str) -> bytes:
    """
    Decode Base58.

    Raises:
        CryptoError: Carattere fuori alfabeto
    """
    zeros = len(encoded) - len(encoded.lstrip('1'))

    value = 0
    for char in encoded:
        digit = _BASE58_INDEX.get(char)
        if digit is None:
            raise CryptoError(
                f"Invalid Base58 character: {char!r}",
                code="INVALID_BASE58_CHAR"
            )
        value = value * 58 + digit

    body = value.to_bytes((value.bit_length() + 7) // 8, byteorder='big') if value else b''
    return b'\x00' * zeros + body


def encode_base58_check(payload: bytes) -> str:
    """Base58 di payload || double_sha256(payload)[:4]"""
    return encode_base58(payload + compute_double_sha256(payload)[:_CHECKSUM_SIZE])


def decode_base58_check(encoded: str) -> bytes:
    """
    Decode Base58Check.

    Returns:
        bytes: Payload senza checksum

    Raises:
        CryptoError: Dati troppo corti o checksum errato
    """
    raw = decode_base58(encoded)

    if len(raw) <= _CHECKSUM_SIZE:
        raise CryptoError(
            "Decoded data too short for Base58Check",
            code="INVALID_BASE58CHECK"
        )

    payload, checksum = raw[:-_CHECKSUM_SIZE], raw[-_CHECKSUM_SIZE:]

    if compute_double_sha256(payload)[:_CHECKSUM_SIZE] != checksum:
        raise CryptoError(
            "Base58Check checksum verification failed",
            code="CHECKSUM_MISMATCH",
            details={"address": encoded}
        )

    return payload


# ============================================================================
# ADDRESSES
# ============================================================================

def public_key_to_address(
    public_key: bytes,
    version: bytes = ADDRESS_VERSION_MAINNET
) -> str:
    """
    Address del claimant per una public key.

    Args:
        public_key: Public key SEC1 compressa
        version: Version byte della network

    Raises:
        InvalidAddressError: Public key vuota o non bytes

    Examples:
        >>> from star_chain.domain.keypairs import KeyPair
        >>> public_key_to_address(KeyPair.generate().public_key).startswith('1')
        True
    """
    if not isinstance(public_key, bytes) or not public_key:
        raise InvalidAddressError(
            "Invalid public_key: must be non-empty bytes",
            code="INVALID_PUBLIC_KEY"
        )

    return encode_base58_check(version + compute_hash160(public_key))


def validate_address(address: str, version: Optional[bytes] = None) -> bool:
    """
    True se address è un Base58Check ben formato (e della network indicata).

    Examples:
        >>> validate_address("A1")
        False
    """
    if not isinstance(address, str):
        return False

    if not ADDRESS_MIN_LENGTH <= len(address) <= ADDRESS_MAX_LENGTH:
        return False

    try:
        payload = decode_base58_check(address)
    except CryptoError as e:
        logger.debug("Address rejected", extra_data={"address": address, "reason": e.code})
        return False

    if len(payload) != _ADDRESS_PAYLOAD_SIZE:
        return False

    return version is None or payload[:1] == version


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "BASE58_ALPHABET",
    "encode_base58",
    "decode_base58",
    "encode_base58_check",
    "decode_base58_check",
    "public_key_to_address",
    "validate_address",
]

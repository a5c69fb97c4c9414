"""
StarChain - Cryptographic Core Layer
======================================
Primitive crittografiche per hashing blocchi e verifica messaggi firmati.

Security Level: CRITICAL
Last Updated: 2026-10-19
Version: 1.0.0

SECURITY NOTICE:
Questo modulo implementa primitive crittografiche critiche.
Ogni modifica deve essere sottoposta a security audit.

Algorithms:
- Hash: SHA-256, double SHA-256, RIPEMD-160
- Signature: ECDSA (secp256k1) su messaggi con prefisso

Signed message format:
    base64( compressed_pubkey (33 bytes) || DER signature )
    firmato su MESSAGE_PREFIX + message (UTF-8)

Dependencies:
- cryptography (>=41.0.0)
- hashlib (stdlib)
"""

import base64
import binascii
import hashlib
from abc import abstractmethod
from typing import Protocol, Tuple

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.exceptions import InvalidSignature as CryptoInvalidSignature

# Internal imports
from star_chain.constants import (
    MESSAGE_PREFIX,
    COMPRESSED_PUBKEY_SIZE,
    ADDRESS_VERSION_MAINNET,
)
from star_chain.errors import (
    CryptoError,
    InvalidKeyError,
)
from star_chain.logging_setup import get_logger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("crypto")


# ============================================================================
# HASH FUNCTIONS
# ============================================================================

def compute_sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash.

    SHA-256 è l'hash primario per:
    - Block hashes
    - Address derivation

    Args:
        data: Input data da hashare

    Returns:
        bytes: 32-byte hash digest

    Examples:
        >>> compute_sha256(b"").hex()
        'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    """
    if not isinstance(data, bytes):
        raise CryptoError(
            f"compute_sha256 requires bytes, got {type(data).__name__}",
            code="INVALID_INPUT_TYPE"
        )

    return hashlib.sha256(data).digest()


def compute_sha256_hex(data: bytes) -> str:
    """SHA-256 in formato hex lowercase (64 caratteri)"""
    return compute_sha256(data).hex()


def compute_double_sha256(data: bytes) -> bytes:
    """
    Compute double SHA-256 (SHA256(SHA256(data))).

    Usato per checksum Base58Check.
    """
    return compute_sha256(compute_sha256(data))


def compute_ripemd160(data: bytes) -> bytes:
    """
    Compute RIPEMD-160 hash.

    Note:
        RIPEMD-160 non disponibile su tutte le build OpenSSL.
        Fallback a SHA-256 troncato se non disponibile.
    """
    if not isinstance(data, bytes):
        raise CryptoError("compute_ripemd160 requires bytes input")

    try:
        return hashlib.new('ripemd160', data).digest()
    except ValueError:
        logger.warning(
            "RIPEMD-160 not available, using SHA-256 truncated fallback",
            extra_data={"platform": "unsupported"}
        )
        return compute_sha256(data)[:20]


def compute_hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data)), usato per address"""
    return compute_ripemd160(compute_sha256(data))


# ============================================================================
# MESSAGE VERIFIER PROTOCOL
# ============================================================================

class MessageVerifier(Protocol):
    """
    Capability di verifica firma messaggi.

    Il protocollo ownership la consuma come black box: qualunque
    implementazione (ECDSA, Bitcoin message, HSM remoto) è valida.
    """

    @abstractmethod
    def verify(self, message: str, address: str, signature: str) -> bool:
        """
        Verifica che signature autentichi message per address.

        Returns:
            bool: True se firma valida

        Raises:
            Exception: Input malformato (trattato come firma invalida)
        """
        pass


# ============================================================================
# ECDSA PROVIDER (secp256k1)
# ============================================================================

def _message_digest_input(message: str) -> bytes:
    if not isinstance(message, str):
        raise CryptoError(
            f"Message must be str, got {type(message).__name__}",
            code="INVALID_MESSAGE_TYPE"
        )
    return MESSAGE_PREFIX + message.encode('utf-8')


class ECDSAProvider:
    """
    Provider ECDSA con curva secp256k1 (compatibile Bitcoin).

    Features:
    - Curve: secp256k1
    - Hash: SHA-256
    - Signature: DER encoded
    - Private key: PEM (PKCS8), public key: SEC1 compressed
    """

    def __init__(self):
        self.curve = ec.SECP256K1()
        self.hash_algo = hashes.SHA256()

    def generate_keypair(self) -> Tuple[bytes, bytes]:
        """
        Genera keypair ECDSA.

        Returns:
            tuple: (private_key_pem, compressed_public_key)
        """
        try:
            private_key_obj = ec.generate_private_key(self.curve)

            private_pem = private_key_obj.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.PKCS8,
                encryption_algorithm=serialization.NoEncryption()
            )

            public_bytes = private_key_obj.public_key().public_bytes(
                encoding=serialization.Encoding.X962,
                format=serialization.PublicFormat.CompressedPoint
            )

            logger.debug("ECDSA keypair generated")

            return (private_pem, public_bytes)

        except Exception as e:
            raise CryptoError(f"ECDSA keypair generation failed: {e}", code="KEYGEN_ERROR")

    def sign(self, message: bytes, private_key: bytes) -> bytes:
        """
        Firma messaggio con ECDSA.

        Args:
            message: Messaggio da firmare
            private_key: Private key in formato PEM

        Returns:
            bytes: Firma DER-encoded
        """
        try:
            private_key_obj = serialization.load_pem_private_key(private_key, password=None)
            return private_key_obj.sign(message, ec.ECDSA(self.hash_algo))

        except Exception as e:
            raise InvalidKeyError(f"ECDSA signing failed: {e}", code="SIGN_ERROR")

    def load_public_key(self, public_key: bytes) -> ec.EllipticCurvePublicKey:
        """Carica public key SEC1 (compressa o non)"""
        try:
            return ec.EllipticCurvePublicKey.from_encoded_point(self.curve, public_key)
        except (ValueError, TypeError) as e:
            raise InvalidKeyError(f"Invalid public key: {e}", code="INVALID_PUBLIC_KEY")

    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool:
        """
        Verifica firma ECDSA.

        Returns:
            bool: True se firma valida, False se firma non corrisponde

        Raises:
            InvalidKeyError: Public key non decodificabile
        """
        public_key_obj = self.load_public_key(public_key)

        try:
            public_key_obj.verify(signature, message, ec.ECDSA(self.hash_algo))
            return True
        except CryptoInvalidSignature:
            logger.debug("ECDSA signature verification failed: invalid signature")
            return False


# ============================================================================
# SIGNED MESSAGE ENCODING
# ============================================================================

def encode_message_signature(public_key: bytes, der_signature: bytes) -> str:
    """Impacchetta public key compressa + firma DER in base64"""
    if len(public_key) != COMPRESSED_PUBKEY_SIZE:
        raise InvalidKeyError(
            f"Compressed public key must be {COMPRESSED_PUBKEY_SIZE} bytes, got {len(public_key)}",
            code="INVALID_PUBLIC_KEY"
        )
    return base64.b64encode(public_key + der_signature).decode('ascii')


def decode_message_signature(signature: str) -> Tuple[bytes, bytes]:
    """
    Spacchetta signature string → (public_key, der_signature).

    Raises:
        CryptoError: Base64 invalido o lunghezza insufficiente
    """
    if not isinstance(signature, str) or not signature:
        raise CryptoError("Signature must be a non-empty string", code="INVALID_SIGNATURE_FORMAT")

    try:
        raw = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CryptoError(f"Signature is not valid base64: {e}", code="INVALID_SIGNATURE_FORMAT")

    if len(raw) <= COMPRESSED_PUBKEY_SIZE:
        raise CryptoError(
            "Signature too short",
            code="INVALID_SIGNATURE_FORMAT",
            details={"length": len(raw)}
        )

    return raw[:COMPRESSED_PUBKEY_SIZE], raw[COMPRESSED_PUBKEY_SIZE:]


def sign_message(message: str, private_key: bytes, public_key: bytes) -> str:
    """
    Firma un messaggio testuale producendo la signature string.

    Examples:
        >>> priv, pub = ECDSAProvider().generate_keypair()
        >>> sig = sign_message("addr:1700000000:starRegistry", priv, pub)
    """
    der_signature = ECDSAProvider().sign(_message_digest_input(message), private_key)
    return encode_message_signature(public_key, der_signature)


class ECDSAMessageVerifier:
    """
    MessageVerifier di default.

    Verifica:
        1. Signature string decodificabile
        2. hash160(public_key) corrisponde all'address
        3. Firma ECDSA valida su MESSAGE_PREFIX + message
    """

    def __init__(self, address_version: bytes = ADDRESS_VERSION_MAINNET):
        self.address_version = address_version
        self._provider = ECDSAProvider()

    def verify(self, message: str, address: str, signature: str) -> bool:
        # Import locale: addressing dipende da questo modulo
        from star_chain.domain.addressing import public_key_to_address

        public_key, der_signature = decode_message_signature(signature)

        derived_address = public_key_to_address(public_key, version=self.address_version)
        if derived_address != address:
            logger.debug(
                "Signature public key does not match address",
                extra_data={"address": address[:16], "derived": derived_address[:16]}
            )
            return False

        return self._provider.verify(
            _message_digest_input(message),
            der_signature,
            public_key
        )


# ============================================================================
# PROVIDER FACTORY
# ============================================================================

def get_message_verifier(
    algorithm: str = "ecdsa",
    address_version: bytes = ADDRESS_VERSION_MAINNET
) -> MessageVerifier:
    """
    Factory per ottenere il verifier di default.

    Raises:
        CryptoError: Se algorithm non supportato
    """
    algorithm = algorithm.lower()

    if algorithm == "ecdsa":
        return ECDSAMessageVerifier(address_version=address_version)

    raise CryptoError(
        f"Unsupported crypto algorithm: {algorithm}",
        code="UNSUPPORTED_ALGORITHM",
        details={"supported": ["ecdsa"]}
    )


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    # Hash functions
    "compute_sha256",
    "compute_sha256_hex",
    "compute_double_sha256",
    "compute_ripemd160",
    "compute_hash160",

    # Signatures
    "MessageVerifier",
    "ECDSAProvider",
    "ECDSAMessageVerifier",
    "encode_message_signature",
    "decode_message_signature",
    "sign_message",
    "get_message_verifier",
]

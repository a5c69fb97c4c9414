"""
StarChain - Key Pair Management
=================================
Coppie di chiavi lato claimant: generazione, address, firma challenge.

Security Level: HIGH
Last Updated: 2026-10-19
Version: 1.0.0

Il registry non custodisce chiavi. KeyPair serve ai client (CLI, test,
integrazioni) per produrre firme verificabili da ECDSAMessageVerifier.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict

from star_chain.constants import ADDRESS_VERSION_MAINNET, COMPRESSED_PUBKEY_SIZE
from star_chain.domain.crypto_core import ECDSAProvider, sign_message
from star_chain.domain.addressing import public_key_to_address
from star_chain.errors import InvalidKeyError, CryptoError
from star_chain.logging_setup import get_logger


logger = get_logger("keypairs")


@dataclass(frozen=True)
class KeyPair:
    """
    Coppia chiavi ECDSA secp256k1 immutabile.

    Attributes:
        private_key (bytes): Chiave privata (PEM PKCS8)
        public_key (bytes): Chiave pubblica SEC1 compressa (33 bytes)
        address_version (bytes): Version byte per address derivato

    Examples:
        >>> keypair = KeyPair.generate()
        >>> message = f"{keypair.address}:1700000000:starRegistry"
        >>> signature = keypair.sign_message(message)
    """

    private_key: bytes = field(repr=False)
    public_key: bytes
    address_version: bytes = ADDRESS_VERSION_MAINNET

    def __post_init__(self):
        """Validazione post-init"""
        if not self.private_key or not isinstance(self.private_key, bytes):
            raise InvalidKeyError(
                "Invalid private_key: must be non-empty bytes",
                code="INVALID_PRIVATE_KEY"
            )

        if not self.private_key.startswith(b'-----BEGIN'):
            raise InvalidKeyError(
                "private_key must be in PEM format",
                code="INVALID_KEY_FORMAT"
            )

        if not isinstance(self.public_key, bytes) or len(self.public_key) != COMPRESSED_PUBKEY_SIZE:
            raise InvalidKeyError(
                f"public_key must be {COMPRESSED_PUBKEY_SIZE} bytes (compressed)",
                code="INVALID_PUBLIC_KEY"
            )

    @classmethod
    def generate(cls, address_version: bytes = ADDRESS_VERSION_MAINNET) -> KeyPair:
        """Genera nuova coppia chiavi"""
        private_key, public_key = ECDSAProvider().generate_keypair()
        return cls(
            private_key=private_key,
            public_key=public_key,
            address_version=address_version,
        )

    @property
    def address(self) -> str:
        """Address Base58Check derivato dalla public key"""
        return public_key_to_address(self.public_key, version=self.address_version)

    def sign_message(self, message: str) -> str:
        """
        Firma messaggio challenge.

        Returns:
            str: Signature string (base64 pubkey || DER)

        Raises:
            CryptoError: Messaggio vuoto
            InvalidKeyError: Se firma fallisce
        """
        if not message:
            raise CryptoError("Message cannot be empty", code="EMPTY_MESSAGE")

        signature = sign_message(message, self.private_key, self.public_key)

        logger.debug(
            "Message signed",
            extra_data={"address": self.address[:16], "message_size": len(message)}
        )

        return signature

    def get_public_key_hex(self) -> str:
        """Public key in formato hex"""
        return self.public_key.hex()

    def to_dict(self, include_private: bool = False) -> Dict[str, Any]:
        """
        Serializza keypair.

        Args:
            include_private: Include chiave privata (ATTENZIONE)
        """
        data = {
            "address": self.address,
            "public_key": self.get_public_key_hex(),
            "address_version": self.address_version.hex(),
        }
        if include_private:
            data["private_key"] = self.private_key.decode('ascii')
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> KeyPair:
        """Deserializza keypair (richiede private_key)"""
        if "private_key" not in data:
            raise InvalidKeyError("private_key missing", code="MISSING_PRIVATE_KEY")

        return cls(
            private_key=data["private_key"].encode('ascii'),
            public_key=bytes.fromhex(data["public_key"]),
            address_version=bytes.fromhex(data.get("address_version", "00")),
        )


__all__ = [
    "KeyPair",
]

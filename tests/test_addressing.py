"""
StarChain - Addressing & Keys Tests
=====================================
Unit tests for Base58Check addresses and key pairs.
"""

import pytest

from star_chain.constants import ADDRESS_VERSION_MAINNET, ADDRESS_VERSION_TESTNET
from star_chain.domain.addressing import (
    decode_base58,
    decode_base58_check,
    encode_base58,
    encode_base58_check,
    public_key_to_address,
    validate_address,
)
from star_chain.domain.crypto_core import (
    ECDSAMessageVerifier,
    decode_message_signature,
    get_message_verifier,
)
from star_chain.domain.keypairs import KeyPair
from star_chain.errors import CryptoError, InvalidAddressError, InvalidKeyError


class TestBase58:
    """Test Base58 encoding"""

    def test_known_vector(self):
        """Test known encoding"""
        assert encode_base58(b"hello") == "Cn8eVZg"
        assert decode_base58("Cn8eVZg") == b"hello"

    def test_leading_zeros(self):
        """Test leading zero bytes map to '1'"""
        assert encode_base58(b"\x00\x00\x01") == "112"
        assert decode_base58("112") == b"\x00\x00\x01"
        assert decode_base58("1") == b"\x00"

    def test_invalid_character(self):
        """Test characters outside the alphabet"""
        with pytest.raises(CryptoError):
            decode_base58("0OIl")

    def test_checksum(self):
        """Test Base58Check checksum verification"""
        encoded = encode_base58_check(b"\x00payload")

        assert decode_base58_check(encoded) == b"\x00payload"

        corrupted = encoded[:-1] + ("2" if encoded[-1] != "2" else "3")
        with pytest.raises(CryptoError):
            decode_base58_check(corrupted)


class TestAddress:
    """Test address derivation and validation"""

    def test_mainnet_address(self):
        """Test mainnet addresses start with '1'"""
        keypair = KeyPair.generate(ADDRESS_VERSION_MAINNET)

        assert keypair.address.startswith("1")
        assert validate_address(keypair.address, ADDRESS_VERSION_MAINNET)
        assert not validate_address(keypair.address, ADDRESS_VERSION_TESTNET)

    def test_testnet_address(self, keypair):
        """Test testnet address version"""
        assert keypair.address[0] in "mn"
        assert validate_address(keypair.address, ADDRESS_VERSION_TESTNET)

    def test_address_deterministic(self, keypair):
        """Test same key gives same address"""
        assert public_key_to_address(keypair.public_key, ADDRESS_VERSION_TESTNET) == keypair.address

    def test_invalid_addresses(self):
        """Test rejection of malformed addresses"""
        assert not validate_address("invalid")
        assert not validate_address("A1")
        assert not validate_address(None)

    def test_invalid_public_key(self):
        """Test empty public key"""
        with pytest.raises(InvalidAddressError):
            public_key_to_address(b"")


class TestKeyPair:
    """Test KeyPair"""

    def test_sign_message_format(self, keypair):
        """Test signature string embeds the compressed public key"""
        signature = keypair.sign_message("A1:1:starRegistry")
        public_key, der_signature = decode_message_signature(signature)

        assert public_key == keypair.public_key
        assert len(der_signature) > 0

    def test_verifier_roundtrip(self, keypair):
        """Test ECDSAMessageVerifier accepts KeyPair signatures"""
        verifier = ECDSAMessageVerifier(ADDRESS_VERSION_TESTNET)
        message = f"{keypair.address}:1700000000:starRegistry"
        signature = keypair.sign_message(message)

        assert verifier.verify(message, keypair.address, signature)
        assert not verifier.verify(message + "x", keypair.address, signature)

    def test_verifier_wrong_network(self, keypair):
        """Test address version mismatch is rejected"""
        verifier = ECDSAMessageVerifier(ADDRESS_VERSION_MAINNET)
        message = f"{keypair.address}:1700000000:starRegistry"

        assert not verifier.verify(message, keypair.address, keypair.sign_message(message))

    def test_empty_message(self, keypair):
        """Test empty message cannot be signed"""
        with pytest.raises(CryptoError):
            keypair.sign_message("")

    def test_dict_roundtrip(self, keypair):
        """Test to_dict/from_dict with private key"""
        restored = KeyPair.from_dict(keypair.to_dict(include_private=True))

        assert restored.address == keypair.address
        assert "private_key" not in keypair.to_dict()

    def test_from_dict_requires_private_key(self, keypair):
        """Test missing private key"""
        with pytest.raises(InvalidKeyError):
            KeyPair.from_dict(keypair.to_dict())

    def test_unsupported_algorithm(self):
        """Test verifier factory"""
        with pytest.raises(CryptoError):
            get_message_verifier("rsa")

"""
StarChain - Ownership Tests
=============================
Unit tests for the ownership challenge/response protocol.
"""

import pytest

from star_chain.domain.ownership import OwnershipVerifier, VerifiedClaim
from star_chain.errors import (
    ExpiredError,
    MalformedChallengeError,
    OwnershipError,
    SignatureError,
)


@pytest.fixture
def ownership(test_config, fixed_clock, stub_verifier):
    return OwnershipVerifier(test_config, verifier=stub_verifier, clock=fixed_clock)


class TestChallenge:
    """Test challenge issuance and parsing"""

    def test_challenge_format(self, ownership, fixed_clock):
        """Test message is address:time:starRegistry"""
        assert ownership.request_challenge("A1") == f"A1:{fixed_clock.now}:starRegistry"

    def test_challenge_rejects_bad_address(self, ownership):
        """Test empty or separator-containing addresses"""
        for address in ["", "   ", "A1:B2"]:
            with pytest.raises(MalformedChallengeError):
                ownership.request_challenge(address)

    def test_parse_challenge(self, ownership):
        """Test parsing fields"""
        challenge = ownership.parse_challenge("A1:1700000000:starRegistry")

        assert challenge.address == "A1"
        assert challenge.issued_at == 1_700_000_000
        assert challenge.to_message() == "A1:1700000000:starRegistry"

    def test_parse_malformed(self, ownership):
        """Test malformed messages"""
        for message in ["", "A1", "A1:123", "A1:abc:starRegistry", "A1:1:other", "A1:1:starRegistry:x"]:
            with pytest.raises(MalformedChallengeError):
                ownership.parse_challenge(message)


class TestVerify:
    """Test verify()"""

    def test_accepts_fresh_signed_message(self, ownership, stub_verifier):
        """Test valid message yields a VerifiedClaim"""
        message = ownership.request_challenge("A1")

        claim = ownership.verify("A1", message, "sig", {"ra": "1h"})

        assert isinstance(claim, VerifiedClaim)
        assert claim.owner == "A1"
        assert claim.star == {"ra": "1h"}
        assert claim.to_payload() == {"owner": "A1", "star": {"ra": "1h"}}
        assert stub_verifier.calls == [(message, "A1", "sig")]

    def test_within_window(self, ownership, fixed_clock):
        """Test message 299 seconds old is still valid"""
        message = ownership.request_challenge("A1")
        fixed_clock.advance(299)

        assert ownership.verify("A1", message, "sig", "s").owner == "A1"

    def test_expired_at_window_boundary(self, ownership, fixed_clock, stub_verifier):
        """Test message exactly 300 seconds old is expired"""
        message = ownership.request_challenge("A1")
        fixed_clock.advance(300)

        with pytest.raises(ExpiredError):
            ownership.verify("A1", message, "sig", "s")

        # freshness is checked before the signature
        assert stub_verifier.calls == []

    def test_future_timestamp(self, ownership, fixed_clock):
        """Test messages beyond the allowed clock skew"""
        ok = f"A1:{fixed_clock.now + 60}:starRegistry"
        future = f"A1:{fixed_clock.now + 61}:starRegistry"

        assert ownership.verify("A1", ok, "sig", "s").owner == "A1"
        with pytest.raises(ExpiredError):
            ownership.verify("A1", future, "sig", "s")

    def test_address_mismatch(self, ownership):
        """Test challenge issued to another address"""
        message = ownership.request_challenge("A1")

        with pytest.raises(MalformedChallengeError) as exc_info:
            ownership.verify("B2", message, "sig", "s")
        assert exc_info.value.code == "ADDRESS_MISMATCH"

    def test_bad_signature(self, test_config, fixed_clock, make_verifier):
        """Test verifier returning False"""
        ownership = OwnershipVerifier(test_config, verifier=make_verifier(result=False), clock=fixed_clock)
        message = ownership.request_challenge("A1")

        with pytest.raises(SignatureError) as exc_info:
            ownership.verify("A1", message, "sig", "s")
        assert exc_info.value.code == "SIGNATURE_INVALID"

    def test_verifier_raising(self, test_config, fixed_clock, make_verifier):
        """Test verifier exceptions become SignatureError"""
        ownership = OwnershipVerifier(
            test_config,
            verifier=make_verifier(error=ValueError("bad encoding")),
            clock=fixed_clock
        )
        message = ownership.request_challenge("A1")

        with pytest.raises(SignatureError) as exc_info:
            ownership.verify("A1", message, "sig", "s")
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_custom_window(self, fixed_clock, stub_verifier):
        """Test configurable window"""
        from star_chain.config import override_settings

        config = override_settings(network="regtest", challenge_window_seconds=10)
        ownership = OwnershipVerifier(config, verifier=stub_verifier, clock=fixed_clock)
        message = ownership.request_challenge("A1")
        fixed_clock.advance(10)

        with pytest.raises(ExpiredError):
            ownership.verify("A1", message, "sig", "s")


class TestVerifiedClaim:
    """Test claim construction boundary"""

    def test_cannot_forge_claim(self):
        """Test direct construction is refused"""
        with pytest.raises(OwnershipError):
            VerifiedClaim(owner="A1", star="s", issued_at=1, verified_at=1)


class TestECDSAOwnership:
    """Test protocol with real ECDSA signatures"""

    def test_real_signature_accepted(self, test_config, fixed_clock, keypair):
        """Test KeyPair signature verifies"""
        ownership = OwnershipVerifier(test_config, clock=fixed_clock)
        message = ownership.request_challenge(keypair.address)

        claim = ownership.verify(keypair.address, message, keypair.sign_message(message), "s")

        assert claim.owner == keypair.address

    def test_signature_from_other_key(self, test_config, fixed_clock, keypair):
        """Test signature by a different key is rejected"""
        from star_chain.domain.keypairs import KeyPair

        other = KeyPair.generate(test_config.get_address_version())
        ownership = OwnershipVerifier(test_config, clock=fixed_clock)
        message = ownership.request_challenge(keypair.address)

        with pytest.raises(SignatureError):
            ownership.verify(keypair.address, message, other.sign_message(message), "s")

    def test_signature_over_other_message(self, test_config, fixed_clock, keypair):
        """Test signature does not transfer to another message"""
        ownership = OwnershipVerifier(test_config, clock=fixed_clock)
        signed = ownership.request_challenge(keypair.address)
        fixed_clock.advance(1)
        submitted = ownership.request_challenge(keypair.address)

        with pytest.raises(SignatureError):
            ownership.verify(keypair.address, submitted, keypair.sign_message(signed), "s")

    def test_garbage_signature(self, test_config, fixed_clock, keypair):
        """Test undecodable signature"""
        ownership = OwnershipVerifier(test_config, clock=fixed_clock)
        message = ownership.request_challenge(keypair.address)

        for signature in ["", "not base64!", "AAAA"]:
            with pytest.raises(SignatureError):
                ownership.verify(keypair.address, message, signature, "s")

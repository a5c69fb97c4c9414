"""
StarChain - Star Registry Service Tests
=========================================
Integration tests for the registry facade.
"""

import dataclasses

import pytest

from star_chain.domain.blockchain import Blockchain
from star_chain.errors import (
    ChainInvalidError,
    DecodeError,
    ExpiredError,
    SignatureError,
)
from star_chain.services.star_service import StarRegistryService
from star_chain.utils.serialization import encode_payload


class TestRegistryScenario:
    """Test end-to-end registry scenario"""

    def test_new_service_has_genesis(self, service):
        """Test new service starts at height 0 with the genesis marker"""
        genesis = service.get_block_by_height(0)

        assert service.get_height() == 0
        assert genesis.previous_hash is None
        assert genesis.decode_payload() == {"data": "Genesis Block"}

    def test_register_one_star(self, service, sample_star):
        """Test single star registration"""
        message = service.request_challenge("A1")

        block = service.submit_star("A1", message, "sig", sample_star)
        stars = service.get_stars_by_owner("A1")

        assert service.get_height() == 1
        assert block.previous_hash == service.get_block_by_height(0).hash
        assert len(stars) == 1
        assert stars[0].owner == "A1"
        assert stars[0].star == sample_star
        assert stars[0].block_hash == block.hash
        assert service.validate_chain() == []

    def test_stars_by_owner_order(self, service, fixed_clock):
        """Test multiple owners and chain order"""
        for owner, name in [("A1", "first"), ("B2", "other"), ("A1", "second")]:
            fixed_clock.advance(5)
            message = service.request_challenge(owner)
            service.submit_star(owner, message, "sig", {"name": name})

        assert [s.star["name"] for s in service.get_stars_by_owner("A1")] == ["first", "second"]
        assert [s.star["name"] for s in service.get_stars_by_owner("B2")] == ["other"]
        assert service.get_stars_by_owner("C3") == []

    def test_lookup_queries(self, service):
        """Test lookups by hash and height"""
        message = service.request_challenge("A1")
        block = service.submit_star("A1", message, "sig", "s")

        assert service.get_block_by_hash(block.hash) == block
        assert service.get_block_by_hash("f" * 64) is None
        assert service.get_block_by_height(2) is None
        assert service.get_latest_block() == block

    def test_existing_blockchain_reused(self, test_config, fixed_clock, stub_verifier):
        """Test facade initializes an injected empty chain"""
        chain = Blockchain(test_config, clock=fixed_clock, initialize=False)

        service = StarRegistryService(test_config, blockchain=chain, verifier=stub_verifier)

        assert service.blockchain is chain
        assert chain.get_height() == 0
        assert chain.get_block_by_height(0).time == fixed_clock.now
        assert service.get_block_by_height(0) == chain.get_block_by_height(0)


class TestRejections:
    """Test rejected submissions leave the chain unchanged"""

    def test_expired_submission(self, service, fixed_clock):
        """Test expired message is rejected"""
        message = service.request_challenge("A1")
        fixed_clock.advance(300)

        with pytest.raises(ExpiredError):
            service.submit_star("A1", message, "sig", "s")

        assert service.get_height() == 0
        assert service.get_stars_by_owner("A1") == []

    def test_bad_signature_submission(self, test_config, fixed_clock, make_verifier):
        """Test rejected signature"""
        service = StarRegistryService(
            test_config, verifier=make_verifier(result=False), clock=fixed_clock
        )
        message = service.request_challenge("A1")

        with pytest.raises(SignatureError):
            service.submit_star("A1", message, "sig", "s")

        assert service.get_height() == 0

    def test_submission_on_tampered_chain(self, service, fixed_clock):
        """Test append refused after tampering"""
        message = service.request_challenge("A1")
        block = service.submit_star("A1", message, "sig", "s")
        service.blockchain._blocks[1] = dataclasses.replace(
            block, data=encode_payload({"owner": "B2", "star": "s"})
        )

        issues = service.validate_chain()
        assert [issue.message for issue in issues] == ["Block 1 has been tampered"]

        fixed_clock.advance(1)
        message = service.request_challenge("A1")
        with pytest.raises(ChainInvalidError):
            service.submit_star("A1", message, "sig", "t")

        assert service.get_height() == 1

    def test_undecodable_block_propagates(self, service):
        """Test decode failures surface from owner queries"""
        message = service.request_challenge("A1")
        block = service.submit_star("A1", message, "sig", "s")
        service.blockchain._blocks[1] = dataclasses.replace(block, data="zz")

        with pytest.raises(DecodeError):
            service.get_stars_by_owner("A1")


class TestChainInfo:
    """Test get_chain_info"""

    def test_chain_info(self, service, test_config):
        """Test summary fields"""
        message = service.request_challenge("A1")
        block = service.submit_star("A1", message, "sig", "s")

        info = service.get_chain_info()

        assert info == {
            "network": test_config.network,
            "height": 1,
            "blocks": 2,
            "tip_hash": block.hash,
            "valid": True,
            "issues": 0,
        }


class TestECDSARegistry:
    """Test registry with real signatures"""

    def test_signed_star_registered(self, ecdsa_service, keypair, sample_star):
        """Test full flow with KeyPair"""
        message = ecdsa_service.request_challenge(keypair.address)
        signature = keypair.sign_message(message)

        block = ecdsa_service.submit_star(keypair.address, message, signature, sample_star)

        assert block.decode_payload() == {"owner": keypair.address, "star": sample_star}
        assert ecdsa_service.get_stars_by_owner(keypair.address)[0].star == sample_star
        assert ecdsa_service.validate_chain() == []

    def test_signature_for_other_address(self, ecdsa_service, keypair, test_config):
        """Test a key cannot register stars for someone else"""
        from star_chain.domain.keypairs import KeyPair

        victim = KeyPair.generate(test_config.get_address_version())
        message = ecdsa_service.request_challenge(victim.address)

        with pytest.raises(SignatureError):
            ecdsa_service.submit_star(victim.address, message, keypair.sign_message(message), "s")

        assert ecdsa_service.get_height() == 0


class TestServiceConfig:
    """Test configuration checks"""

    def test_invalid_config_rejected(self, stub_verifier):
        """Test inconsistent window and skew"""
        from star_chain.config import ChainSettings
        from star_chain.errors import InvalidConfigError

        config = ChainSettings(
            network="regtest", challenge_window_seconds=30, challenge_max_clock_skew_seconds=60
        )

        with pytest.raises(InvalidConfigError) as exc_info:
            StarRegistryService(config, verifier=stub_verifier)
        assert exc_info.value.details["errors"]

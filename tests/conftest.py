"""
StarChain - Pytest Configuration
==================================
Fixtures e configurazione per testing.

Last Updated: 2026-10-19
Version: 1.0.0
"""

import pytest

# Internal imports
from star_chain.config import ChainSettings
from star_chain.domain.blockchain import Blockchain
from star_chain.domain.keypairs import KeyPair
from star_chain.services.star_service import StarRegistryService


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================

@pytest.fixture
def test_config():
    """Test configuration"""
    return ChainSettings(
        network="regtest",
        dev_mode=True,
        log_to_file=False,
        challenge_window_seconds=300,
        challenge_max_clock_skew_seconds=60,
    )


# ============================================================================
# CLOCK FIXTURES
# ============================================================================

class FixedClock:
    """Clock controllabile dai test"""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@pytest.fixture
def fixed_clock():
    """Clock fermo a un istante noto"""
    return FixedClock(1_700_000_000)


# ============================================================================
# VERIFIER FIXTURES
# ============================================================================

class StubVerifier:
    """MessageVerifier con risultato configurabile"""

    def __init__(self, result=True, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def verify(self, message, address, signature):
        self.calls.append((message, address, signature))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def stub_verifier():
    """Verifier che accetta ogni firma"""
    return StubVerifier()


@pytest.fixture
def make_verifier():
    """Factory per verifier stub configurabili"""
    return StubVerifier


# ============================================================================
# BLOCKCHAIN FIXTURES
# ============================================================================

@pytest.fixture
def blockchain(test_config, fixed_clock):
    """Blockchain instance per test (genesis incluso)"""
    return Blockchain(test_config, clock=fixed_clock)


@pytest.fixture
def service(test_config, fixed_clock, stub_verifier):
    """Registry service con verifier stub"""
    return StarRegistryService(test_config, verifier=stub_verifier, clock=fixed_clock)


@pytest.fixture
def ecdsa_service(test_config, fixed_clock):
    """Registry service con verifier ECDSA reale"""
    return StarRegistryService(test_config, clock=fixed_clock)


# ============================================================================
# KEY FIXTURES
# ============================================================================

@pytest.fixture
def keypair(test_config):
    """KeyPair sulla network di test"""
    return KeyPair.generate(test_config.get_address_version())


# ============================================================================
# HELPER FIXTURES
# ============================================================================

@pytest.fixture
def sample_star():
    """Sample star payload per test"""
    return {
        "dec": "68° 52' 56.9",
        "ra": "16h 29m 1.0s",
        "story": "Found star using https://www.google.com/sky/"
    }

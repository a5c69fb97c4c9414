"""
StarChain - Domain Package
============================
Core domain logic della chain.
"""

# Models
from star_chain.domain.models import (
    Block,
    StarRecord,
    ChainIssue,
)

# Validation
from star_chain.domain.validation import ChainValidator

# Ownership
from star_chain.domain.ownership import (
    Challenge,
    VerifiedClaim,
    OwnershipVerifier,
)

# Blockchain
from star_chain.domain.blockchain import Blockchain

# Keys
from star_chain.domain.keypairs import KeyPair

__all__ = [
    "Block",
    "StarRecord",
    "ChainIssue",
    "ChainValidator",
    "Challenge",
    "VerifiedClaim",
    "OwnershipVerifier",
    "Blockchain",
    "KeyPair",
]

"""
StarChain - Star Registry Blockchain
======================================
Registry append-only di stelle con verifica ownership tramite firma.

Version: 1.0.0
Author: StarChain Team
License: MIT
"""

__version__ = "1.0.0"
__author__ = "StarChain Team"
__license__ = "MIT"

# Core imports
from star_chain.domain.blockchain import Blockchain
from star_chain.domain.keypairs import KeyPair
from star_chain.config import ChainSettings, get_settings

# Services
from star_chain.services.star_service import StarRegistryService

# Constants
from star_chain.constants import ChainIssueKind

__all__ = [
    # Version
    "__version__",

    # Core
    "Blockchain",
    "KeyPair",
    "ChainSettings",
    "get_settings",

    # Services
    "StarRegistryService",

    # Constants
    "ChainIssueKind",
]

"""
StarChain - Services Package
==============================
High-level service layer.
"""

from star_chain.services.star_service import StarRegistryService

__all__ = [
    "StarRegistryService",
]

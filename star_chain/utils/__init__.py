"""
StarChain - Utilities Package
===============================
Common utility functions and helpers.
"""

from star_chain.utils.serialization import (
    encode_payload,
    decode_payload,
    canonical_block_preimage,
)

__all__ = [
    # Serialization
    "encode_payload",
    "decode_payload",
    "canonical_block_preimage",
]

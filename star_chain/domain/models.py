"""
StarChain - Core Domain Models
================================
Strutture dati fondamentali della chain.

Security Level: CRITICAL
Last Updated: 2026-10-19
Version: 1.0.0

Models:
- Block: Blocco sigillato (height, time, previous_hash, data, hash)
- StarRecord: Star decodificata appartenente a un owner
- ChainIssue: Errore rilevato dalla validazione chain

Tutte le strutture sono immutabili (frozen).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, Any
import re

# Internal imports
from star_chain.constants import (
    ChainIssueKind,
    HASH_HEX_LENGTH,
    GENESIS_HEIGHT,
)
from star_chain.domain.crypto_core import compute_sha256_hex
from star_chain.errors import (
    InvalidBlockError,
    format_validation_error,
)
from star_chain.utils.serialization import (
    encode_payload,
    decode_payload,
    canonical_block_preimage,
)


_HASH_PATTERN = re.compile(r"^[0-9a-f]{%d}$" % HASH_HEX_LENGTH)


# ============================================================================
# BLOCK
# ============================================================================

@dataclass(frozen=True)
class Block:
    """
    Blocco della chain, immutabile dopo il sealing.

    Attributes:
        height (int): Altezza (0 = genesis)
        time (int): Unix timestamp assegnato all'append
        previous_hash (Optional[str]): Hash blocco height-1 (None per genesis)
        data (str): Payload encodato (hex del JSON UTF-8)
        hash (str): SHA-256 hex calcolato su data, previousBlockHash, height, time

    Security:
        - hash escluso dal proprio preimage
        - ordine campi nel preimage fisso (vedi canonical_block_preimage)
        - qualunque modifica post-sealing rende validate() False

    Examples:
        >>> block = Block.seal({"data": "Genesis Block"}, None, 0, 1700000000)
        >>> block.validate()
        True
        >>> block.decode_payload()
        {'data': 'Genesis Block'}
    """

    height: int
    time: int
    previous_hash: Optional[str]
    data: str
    hash: str

    def __post_init__(self):
        """Validazione strutturale post-init"""
        if not isinstance(self.height, int) or self.height < 0:
            raise format_validation_error(
                "height", self.height, "non-negative integer", code="INVALID_HEIGHT"
            )

        if not isinstance(self.time, int) or self.time < 0:
            raise format_validation_error(
                "time", self.time, "non-negative unix timestamp", code="INVALID_TIMESTAMP"
            )

        if not isinstance(self.data, str):
            raise InvalidBlockError(
                f"data must be an encoded string, got {type(self.data).__name__}",
                code="INVALID_DATA"
            )

        if not isinstance(self.hash, str) or not _HASH_PATTERN.match(self.hash):
            raise InvalidBlockError(
                "hash must be 64 lowercase hex characters",
                code="INVALID_HASH"
            )

    # ========================================================================
    # SEALING
    # ========================================================================

    @staticmethod
    def compute_hash(
        data: str,
        previous_hash: Optional[str],
        height: int,
        time: int
    ) -> str:
        """
        Calcola hash blocco dai campi hashati.

        Returns:
            str: SHA-256 hex (64 caratteri)
        """
        return compute_sha256_hex(
            canonical_block_preimage(data, previous_hash, height, time)
        )

    @classmethod
    def seal(
        cls,
        payload: Any,
        previous_hash: Optional[str],
        height: int,
        time: int
    ) -> Block:
        """
        Sigilla un nuovo blocco.

        Ordine: encode payload, previous_hash, height, time, infine hash.

        Args:
            payload: Valore JSON-serializzabile
            previous_hash: Hash blocco precedente (None per genesis)
            height: Altezza del nuovo blocco
            time: Unix timestamp

        Returns:
            Block: Blocco immutabile
        """
        data = encode_payload(payload)
        block_hash = cls.compute_hash(data, previous_hash, height, time)

        return cls(
            height=height,
            time=time,
            previous_hash=previous_hash,
            data=data,
            hash=block_hash,
        )

    # ========================================================================
    # INTEGRITY
    # ========================================================================

    def recompute_hash(self) -> str:
        """Ricalcola l'hash dai campi correnti (nessun side effect)"""
        return self.compute_hash(self.data, self.previous_hash, self.height, self.time)

    def validate(self) -> bool:
        """True se hash memorizzato == hash ricalcolato"""
        return self.recompute_hash() == self.hash

    # ========================================================================
    # PAYLOAD
    # ========================================================================

    def decode_payload(self) -> Any:
        """
        Decodifica il payload (on demand, niente cache).

        Raises:
            DecodeError: Se data malformato
        """
        return decode_payload(self.data)

    def is_genesis(self) -> bool:
        return self.height == GENESIS_HEIGHT and self.previous_hash is None

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializza block in dict.

        Returns:
            dict: Block serializzato (payload ancora encodato)
        """
        return {
            "hash": self.hash,
            "height": self.height,
            "body": self.data,
            "time": self.time,
            "previousBlockHash": self.previous_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Block:
        """Deserializza block da dict prodotto da to_dict()"""
        try:
            return cls(
                height=data["height"],
                time=data["time"],
                previous_hash=data.get("previousBlockHash"),
                data=data["body"],
                hash=data["hash"],
            )
        except KeyError as e:
            raise InvalidBlockError(
                f"Missing block field: {e.args[0]}",
                code="MISSING_FIELD"
            )

    def __repr__(self) -> str:
        """Safe repr"""
        prev = self.previous_hash[:16] + "..." if self.previous_hash else None
        return (
            f"Block(height={self.height}, "
            f"hash={self.hash[:16]}..., "
            f"prev={prev}, "
            f"time={self.time})"
        )


# ============================================================================
# STAR RECORD
# ============================================================================

@dataclass(frozen=True)
class StarRecord:
    """
    Star registrata, decodificata dal payload di un blocco.

    Attributes:
        owner (str): Address del proprietario
        star (Any): Payload star così come inviato
        height (int): Altezza blocco contenitore
        block_hash (str): Hash blocco contenitore
    """

    owner: str
    star: Any
    height: int
    block_hash: str

    @classmethod
    def from_block(cls, block: Block) -> Optional[StarRecord]:
        """
        Estrai StarRecord da un blocco.

        Returns:
            StarRecord, o None se il payload non è un claim {owner, star}

        Raises:
            DecodeError: Payload non decodificabile
        """
        payload = block.decode_payload()

        if not isinstance(payload, dict) or "owner" not in payload:
            return None

        return cls(
            owner=payload["owner"],
            star=payload.get("star"),
            height=block.height,
            block_hash=block.hash,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "star": self.star,
            "height": self.height,
            "hash": self.block_hash,
        }


# ============================================================================
# CHAIN ISSUE
# ============================================================================

@dataclass(frozen=True)
class ChainIssue:
    """
    Errore rilevato dalla validazione chain (non fatale, accumulato).

    Attributes:
        kind (ChainIssueKind): BLOCK_TAMPERED o CHAIN_BROKEN
        height (int): Altezza blocco coinvolto
        message (str): Descrizione leggibile
    """

    kind: ChainIssueKind
    height: int
    message: str

    @classmethod
    def block_tampered(cls, height: int) -> ChainIssue:
        return cls(ChainIssueKind.BLOCK_TAMPERED, height, f"Block {height} has been tampered")

    @classmethod
    def chain_broken(cls, height: int, reason: str = "is out of chain") -> ChainIssue:
        return cls(ChainIssueKind.CHAIN_BROKEN, height, f"Block {height} {reason}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "height": self.height,
            "message": self.message,
        }

    def __str__(self) -> str:
        return self.message


__all__ = [
    "Block",
    "StarRecord",
    "ChainIssue",
]

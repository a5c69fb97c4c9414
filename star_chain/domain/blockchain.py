"""
StarChain - Blockchain Core
=============================
Chain store append-only con gestione genesis, append e query.

Security Level: CRITICAL
Last Updated: 2026-10-19
Version: 1.0.0

Features:
- Genesis idempotente (ensure_initialized)
- Append serializzato (RLock) con validazione pre-append
- Unico append pubblico: add_star(VerifiedClaim)
- Query API (height, hash, owner)
"""

from __future__ import annotations
from typing import Any, Callable, List, Optional
import threading

# Internal imports
from star_chain.domain.models import Block, StarRecord, ChainIssue
from star_chain.domain.validation import ChainValidator
from star_chain.domain.ownership import VerifiedClaim, unix_now
from star_chain.constants import (
    GENESIS_PAYLOAD,
    GENESIS_HEIGHT,
    EMPTY_CHAIN_HEIGHT,
)
from star_chain.errors import (
    StarChainException,
    GenesisError,
    ChainInvalidError,
    AppendError,
    OwnershipError,
)
from star_chain.logging_setup import get_logger, PerformanceLogger, AuditLogger
from star_chain.config import ChainSettings


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("blockchain")


# ============================================================================
# BLOCKCHAIN CLASS
# ============================================================================

class Blockchain:
    """
    Blockchain principale (in-memory, append-only).

    Gestisce:
    - Sequenza blocchi e height
    - Genesis
    - Append validato
    - Query API

    Attributes:
        config: Chain configuration
        validator: ChainValidator usato prima di ogni append
        clock: Sorgente tempo Unix seconds

    Thread Safety:
        - Append e genesis serializzati da RLock
        - Le query copiano uno snapshot sotto lock

    Examples:
        >>> from star_chain.config import get_settings
        >>> blockchain = Blockchain(get_settings())
        >>> blockchain.get_height()
        0
    """

    def __init__(
        self,
        config: ChainSettings,
        validator: Optional[ChainValidator] = None,
        clock: Optional[Callable[[], int]] = None,
        initialize: bool = True
    ):
        """
        Inizializza blockchain.

        Args:
            config: Chain configuration
            validator: Validator custom (default ChainValidator)
            clock: Clock custom (default time.time() troncato)
            initialize: Se True, crea subito il genesis block
        """
        self.config = config
        self.validator = validator or ChainValidator()
        self.clock = clock or unix_now
        self.audit_logger = AuditLogger(config.get_audit_dir())

        # Chain state
        self._blocks: List[Block] = []

        # Thread safety
        self._lock = threading.RLock()

        if initialize:
            self.ensure_initialized()

    # ========================================================================
    # GENESIS
    # ========================================================================

    def ensure_initialized(self) -> Block:
        """
        Garantisce la presenza del genesis block.

        Idempotente: se la chain è vuota aggiunge il genesis, altrimenti
        ritorna il blocco 0 esistente.

        Raises:
            GenesisError: Se creazione genesis fallisce
        """
        with self._lock:
            if self._blocks:
                return self._blocks[GENESIS_HEIGHT]

            try:
                genesis = self._add_block(dict(GENESIS_PAYLOAD))
            except StarChainException as e:
                raise GenesisError(
                    f"Failed to create genesis block: {e.message}",
                    code="GENESIS_FAILED"
                ) from e

            logger.info(
                "Blockchain initialized",
                extra_data={
                    "network": self.config.network,
                    "genesis_hash": genesis.hash[:16] + "...",
                    "time": genesis.time
                }
            )

            return genesis

    # ========================================================================
    # BLOCK OPERATIONS
    # ========================================================================

    def _add_block(self, payload: Any) -> Block:
        """
        Aggiungi blocco alla chain.

        Steps:
            1. Validazione chain corrente
            2. Height, previous_hash, time
            3. Sealing
            4. Push

        Args:
            payload: Valore JSON-serializzabile

        Returns:
            Block: Blocco aggiunto

        Raises:
            ChainInvalidError: Chain corrente non valida
            AppendError: Errore interno durante l'append

        Thread Safety:
            Atomic operation (protected da lock)
        """
        with self._lock:
            issues = self.validator.validate_chain(self._blocks)
            if issues:
                logger.error(
                    "Append refused: chain is not valid",
                    extra_data={"issues": [issue.message for issue in issues]}
                )
                raise ChainInvalidError(
                    "Cannot add a block to an invalid chain",
                    code="CHAIN_INVALID",
                    details={"issues": [issue.to_dict() for issue in issues]}
                )

            new_height = len(self._blocks)

            with PerformanceLogger(logger, f"add_block(height={new_height})"):
                try:
                    previous_hash = None if new_height == GENESIS_HEIGHT else self._blocks[-1].hash
                    block = Block.seal(payload, previous_hash, new_height, self.clock())
                except StarChainException as e:
                    raise AppendError(
                        f"Failed to seal block {new_height}: {e.message}",
                        code="APPEND_FAILED",
                        details={"height": new_height, "cause": e.to_dict()}
                    ) from e
                except Exception as e:
                    raise AppendError(
                        f"Failed to seal block {new_height}: {e}",
                        code="APPEND_FAILED",
                        details={"height": new_height}
                    ) from e

                self._blocks.append(block)

            owner = payload.get("owner") if isinstance(payload, dict) else None
            self.audit_logger.log_block_added(block.height, block.hash, owner)

            logger.info(
                "Block added to chain",
                extra_data={
                    "height": block.height,
                    "hash": block.hash[:16] + "...",
                    "size": len(block.data)
                }
            )

            return block

    def add_star(self, claim: VerifiedClaim) -> Block:
        """
        Registra una star verificata.

        Args:
            claim: VerifiedClaim emesso da OwnershipVerifier.verify()

        Returns:
            Block: Blocco con payload {owner, star}

        Raises:
            OwnershipError: Se claim non è un VerifiedClaim
            ChainInvalidError / AppendError: Vedi _add_block
        """
        if not isinstance(claim, VerifiedClaim):
            raise OwnershipError(
                "add_star requires a VerifiedClaim",
                code="UNVERIFIED_CLAIM"
            )

        block = self._add_block(claim.to_payload())

        self.audit_logger.log_star_registered(claim.owner, block.height, block.hash)

        return block

    # ========================================================================
    # QUERY API
    # ========================================================================

    @property
    def blocks(self) -> List[Block]:
        """Snapshot della sequenza blocchi"""
        with self._lock:
            return list(self._blocks)

    @property
    def height(self) -> int:
        """Height corrente (-1 se chain vuota)"""
        with self._lock:
            return len(self._blocks) - 1 if self._blocks else EMPTY_CHAIN_HEIGHT

    def get_height(self) -> int:
        return self.height

    def get_block_by_height(self, height: int) -> Optional[Block]:
        """
        Ottieni blocco per height.

        Returns:
            Block, o None se height fuori range (negativi inclusi)
        """
        with self._lock:
            if 0 <= height < len(self._blocks):
                return self._blocks[height]
            return None

    def get_block_by_hash(self, block_hash: str) -> Optional[Block]:
        """
        Ottieni blocco per hash (prima occorrenza).

        Performance:
            O(n) - scansione lineare chain
        """
        for block in self.blocks:
            if block.hash == block_hash:
                return block
        return None

    def get_latest_block(self) -> Optional[Block]:
        with self._lock:
            return self._blocks[-1] if self._blocks else None

    def get_stars_by_owner(self, address: str) -> List[StarRecord]:
        """
        Star registrate da un address, in ordine di chain.

        Il genesis (previous_hash None) è escluso.

        Raises:
            DecodeError: Payload non decodificabile
        """
        stars: List[StarRecord] = []

        for block in self.blocks:
            if block.previous_hash is None:
                continue

            record = StarRecord.from_block(block)
            if record is not None and record.owner == address:
                stars.append(record)

        return stars

    def validate_chain(self) -> List[ChainIssue]:
        """Valida snapshot consistente della chain"""
        with self._lock:
            return self.validator.validate_chain(self._blocks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._blocks)

    def __repr__(self) -> str:
        return (
            f"Blockchain(network={self.config.network}, "
            f"height={self.height})"
        )


__all__ = [
    "Blockchain",
]

"""
StarChain - Star Registry Service
===================================
Facade pubblica del registry: challenge, submit e query.

Security Level: CRITICAL
Last Updated: 2026-10-19
Version: 1.0.0

Features:
- Ownership challenge/response
- Submit star verificata
- Query per hash, height, owner
- Validazione chain e summary
"""

from typing import Any, Callable, Dict, List, Optional

# Internal imports
from star_chain.domain.blockchain import Blockchain
from star_chain.domain.crypto_core import MessageVerifier
from star_chain.domain.models import Block, StarRecord, ChainIssue
from star_chain.domain.ownership import OwnershipVerifier
from star_chain.errors import OwnershipError, InvalidConfigError
from star_chain.logging_setup import get_logger
from star_chain.config import ChainSettings, validate_config


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("star_service")


# ============================================================================
# STAR REGISTRY SERVICE
# ============================================================================

class StarRegistryService:
    """
    Servizio registry stelle.

    High-level API per:
    - Richiesta challenge ownership
    - Registrazione star
    - Query chain

    Attributes:
        config: Chain configuration
        blockchain: Blockchain instance
        ownership: OwnershipVerifier instance

    Examples:
        >>> service = StarRegistryService(config)
        >>> message = service.request_challenge(keypair.address)
        >>> block = service.submit_star(
        ...     keypair.address, message, keypair.sign_message(message), {"dec": "68° 52'"}
        ... )
        >>> service.get_height()
        1
    """

    def __init__(
        self,
        config: ChainSettings,
        blockchain: Optional[Blockchain] = None,
        verifier: Optional[MessageVerifier] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        is_valid, errors = validate_config(config)
        if not is_valid:
            raise InvalidConfigError(
                "Invalid registry configuration",
                code="INVALID_CONFIG",
                details={"errors": errors}
            )

        self.config = config
        self.blockchain = (
            blockchain if blockchain is not None
            else Blockchain(config, clock=clock, initialize=False)
        )
        self.ownership = OwnershipVerifier(
            config,
            verifier=verifier,
            clock=clock or self.blockchain.clock
        )

        self.blockchain.ensure_initialized()

    # ========================================================================
    # OWNERSHIP
    # ========================================================================

    def request_challenge(self, address: str) -> str:
        """Emetti messaggio challenge per address"""
        return self.ownership.request_challenge(address)

    def submit_star(
        self,
        address: str,
        message: str,
        signature: str,
        star: Any
    ) -> Block:
        """
        Registra star dopo verifica ownership.

        Args:
            address: Address del claimant
            message: Challenge emessa da request_challenge
            signature: Firma del messaggio
            star: Payload star (JSON-serializzabile)

        Returns:
            Block: Blocco aggiunto

        Raises:
            ExpiredError: Challenge fuori finestra
            SignatureError: Firma invalida
            MalformedChallengeError: Messaggio malformato
            ChainInvalidError: Chain corrente non valida
            AppendError: Errore interno append
        """
        try:
            claim = self.ownership.verify(address, message, signature, star)
        except OwnershipError as e:
            self.blockchain.audit_logger.log_submission_rejected(address, e.code)
            logger.warning(
                "Star submission rejected",
                extra_data={"address": address, "reason": e.code, "error": e.message}
            )
            raise

        block = self.blockchain.add_star(claim)

        logger.info(
            "Star registered",
            extra_data={
                "owner": address,
                "height": block.height,
                "hash": block.hash[:16] + "..."
            }
        )

        return block

    # ========================================================================
    # QUERY API
    # ========================================================================

    def get_height(self) -> int:
        return self.blockchain.get_height()

    def get_block_by_hash(self, block_hash: str) -> Optional[Block]:
        return self.blockchain.get_block_by_hash(block_hash)

    def get_block_by_height(self, height: int) -> Optional[Block]:
        return self.blockchain.get_block_by_height(height)

    def get_latest_block(self) -> Optional[Block]:
        return self.blockchain.get_latest_block()

    def get_stars_by_owner(self, address: str) -> List[StarRecord]:
        """
        Star registrate da address.

        Returns:
            List[StarRecord]: In ordine di chain ([] se nessuna)

        Raises:
            DecodeError: Payload blocco non decodificabile
        """
        return self.blockchain.get_stars_by_owner(address)

    def validate_chain(self) -> List[ChainIssue]:
        return self.blockchain.validate_chain()

    def get_chain_info(self) -> Dict[str, Any]:
        """
        Summary stato chain.

        Returns:
            dict: {network, height, blocks, tip_hash, valid, issues}
        """
        latest = self.blockchain.get_latest_block()
        issues = self.blockchain.validate_chain()

        return {
            "network": self.config.network,
            "height": self.blockchain.get_height(),
            "blocks": len(self.blockchain),
            "tip_hash": latest.hash if latest else None,
            "valid": not issues,
            "issues": len(issues),
        }


__all__ = [
    "StarRegistryService",
]

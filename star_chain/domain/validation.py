"""
StarChain - Chain Validation
==============================
Validazione integrità chain: tamper detection e continuità link.

Security Level: CRITICAL
Last Updated: 2026-10-19
Version: 1.0.0

Checks:
1. Hash memorizzato == hash ricalcolato (BlockTampered)
2. previous_hash == hash del blocco precedente (ChainBroken)
3. height == posizione nella sequenza (ChainBroken)

Gli errori sono accumulati in ordine di height, senza early exit.
"""

from __future__ import annotations
from typing import List, Optional, Sequence

# Internal imports
from star_chain.domain.models import Block, ChainIssue
from star_chain.logging_setup import get_logger, PerformanceLogger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("validation")


# ============================================================================
# CHAIN VALIDATOR
# ============================================================================

class ChainValidator:
    """
    Validatore integrità chain.

    Stateless e senza side effect: può essere invocato in qualunque
    momento, anche durante un append (sotto lock del chiamante).

    Examples:
        >>> validator = ChainValidator()
        >>> validator.validate_chain(blockchain.blocks)
        []
    """

    def validate_block(
        self,
        block: Block,
        previous_block: Optional[Block] = None,
        expected_height: Optional[int] = None
    ) -> List[ChainIssue]:
        """
        Valida un singolo blocco e il suo link.

        Args:
            block: Blocco da validare
            previous_block: Blocco alla posizione precedente (None per index 0)
            expected_height: Posizione del blocco nella sequenza

        Returns:
            List[ChainIssue]: Errori trovati (vuota se valido)
        """
        issues: List[ChainIssue] = []

        # Errori riportati alla posizione nella sequenza
        height = block.height if expected_height is None else expected_height

        # 1. Tamper check
        if not block.validate():
            issues.append(ChainIssue.block_tampered(height))

        # 2. Height continuity
        if block.height != height:
            issues.append(
                ChainIssue.chain_broken(
                    height,
                    f"has height out of sequence (found {block.height})"
                )
            )

        # 3. Link check (indipendente dal tamper check)
        if previous_block is not None and block.previous_hash != previous_block.hash:
            issues.append(ChainIssue.chain_broken(height))

        return issues

    def validate_chain(self, blocks: Sequence[Block]) -> List[ChainIssue]:
        """
        Valida l'intera sequenza.

        Oltre a hash e link, segnala ChainBroken quando la height di un
        blocco non coincide con la sua posizione: un blocco risigillato
        alla height sbagliata, con hash e link corretti, non è valido.

        Args:
            blocks: Blocchi in ordine di height

        Returns:
            List[ChainIssue]: Errori in ordine ascendente di height
        """
        issues: List[ChainIssue] = []

        with PerformanceLogger(logger, f"validate_chain(blocks={len(blocks)})"):
            previous_block: Optional[Block] = None

            for index, block in enumerate(blocks):
                issues.extend(
                    self.validate_block(block, previous_block, expected_height=index)
                )
                previous_block = block

        if issues:
            logger.warning(
                "Chain validation found errors",
                extra_data={
                    "blocks": len(blocks),
                    "issues": [issue.message for issue in issues]
                }
            )

        return issues


__all__ = [
    "ChainValidator",
]

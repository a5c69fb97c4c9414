"""
StarChain - Ownership Verification Protocol
=============================================
Challenge/response time-bounded che autorizza l'append di un blocco star.

Security Level: CRITICAL
Last Updated: 2026-10-19
Version: 1.0.0

Flow:
    1. request_challenge(address) → "{address}:{unix_time}:starRegistry"
    2. Il claimant firma il messaggio con il wallet dell'address
    3. verify(address, message, signature, star) → VerifiedClaim
    4. Blockchain.add_star(claim) esegue l'append

Nessuno stato server-side: la freshness è derivata dal timestamp
incorporato nel messaggio. La sicurezza dipende dalla firma; il
timestamp limita solo il replay alla finestra di validità.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
import time

# Internal imports
from star_chain.config import ChainSettings
from star_chain.constants import CHALLENGE_SEPARATOR, CHALLENGE_FIELD_COUNT
from star_chain.domain.crypto_core import MessageVerifier, get_message_verifier
from star_chain.errors import (
    OwnershipError,
    ExpiredError,
    SignatureError,
    MalformedChallengeError,
)
from star_chain.logging_setup import get_logger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("ownership")

# Solo OwnershipVerifier conosce questo token
_CLAIM_TOKEN = object()


def unix_now() -> int:
    """Clock di default (Unix seconds)"""
    return int(time.time())


# ============================================================================
# MODELS
# ============================================================================

@dataclass(frozen=True)
class Challenge:
    """
    Challenge ownership decodificata dal messaggio.

    Attributes:
        address (str): Address del claimant
        issued_at (int): Unix timestamp di emissione
        tag (str): Tag protocollo
    """

    address: str
    issued_at: int
    tag: str

    def to_message(self) -> str:
        return CHALLENGE_SEPARATOR.join([self.address, str(self.issued_at), self.tag])

    def age(self, now: int) -> int:
        return now - self.issued_at


@dataclass(frozen=True)
class VerifiedClaim:
    """
    Claim di ownership verificato, unico lasciapassare per l'append.

    Creato esclusivamente da OwnershipVerifier.verify().
    """

    owner: str
    star: Any
    issued_at: int
    verified_at: int
    _token: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._token is not _CLAIM_TOKEN:
            raise OwnershipError(
                "VerifiedClaim can only be issued by OwnershipVerifier",
                code="UNVERIFIED_CLAIM"
            )

    def to_payload(self) -> dict:
        """Payload del blocco: {owner, star}"""
        return {"owner": self.owner, "star": self.star}


# ============================================================================
# OWNERSHIP VERIFIER
# ============================================================================

class OwnershipVerifier:
    """
    Protocollo verifica ownership.

    Stati per tentativo:
        ChallengeIssued → Accepted | Rejected(Expired) | Rejected(BadSignature)

    Args:
        config: Chain configuration (finestra, skew, tag)
        verifier: Capability verify(message, address, signature) -> bool
        clock: Sorgente tempo Unix seconds

    Examples:
        >>> ownership = OwnershipVerifier(config)
        >>> message = ownership.request_challenge(keypair.address)
        >>> claim = ownership.verify(
        ...     keypair.address, message, keypair.sign_message(message), {"ra": "16h"}
        ... )
    """

    def __init__(
        self,
        config: ChainSettings,
        verifier: Optional[MessageVerifier] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        self.config = config
        self.verifier = verifier or get_message_verifier(
            config.crypto_algorithm,
            address_version=config.get_address_version()
        )
        self.clock = clock or unix_now

    # ========================================================================
    # CHALLENGE
    # ========================================================================

    def request_challenge(self, address: str) -> str:
        """
        Emetti messaggio challenge da firmare.

        Args:
            address: Address del claimant

        Returns:
            str: "{address}:{now}:{tag}"

        Raises:
            MalformedChallengeError: Address vuoto o contenente ':'
        """
        if not isinstance(address, str) or not address.strip():
            raise MalformedChallengeError("Address must be a non-empty string", code="EMPTY_ADDRESS")

        if CHALLENGE_SEPARATOR in address:
            raise MalformedChallengeError(
                f"Address cannot contain '{CHALLENGE_SEPARATOR}'",
                code="INVALID_ADDRESS",
                details={"address": address}
            )

        challenge = Challenge(address=address, issued_at=self.clock(), tag=self.config.challenge_tag)

        logger.debug(
            "Ownership challenge issued",
            extra_data={"address": address, "issued_at": challenge.issued_at}
        )

        return challenge.to_message()

    def parse_challenge(self, message: str) -> Challenge:
        """
        Decodifica messaggio challenge.

        Raises:
            MalformedChallengeError: Formato non valido
        """
        if not isinstance(message, str):
            raise MalformedChallengeError("Challenge message must be a string", code="INVALID_MESSAGE")

        parts = message.split(CHALLENGE_SEPARATOR)
        if len(parts) != CHALLENGE_FIELD_COUNT:
            raise MalformedChallengeError(
                f"Challenge message must have {CHALLENGE_FIELD_COUNT} fields, got {len(parts)}",
                code="INVALID_MESSAGE",
                details={"message": message}
            )

        address, issued_at_str, tag = parts

        try:
            issued_at = int(issued_at_str)
        except ValueError:
            raise MalformedChallengeError(
                f"Invalid challenge timestamp: {issued_at_str!r}",
                code="INVALID_TIMESTAMP",
                details={"message": message}
            )

        if tag != self.config.challenge_tag:
            raise MalformedChallengeError(
                f"Unknown challenge tag: {tag!r}",
                code="INVALID_TAG",
                details={"expected": self.config.challenge_tag}
            )

        return Challenge(address=address, issued_at=issued_at, tag=tag)

    # ========================================================================
    # VERIFICATION
    # ========================================================================

    def check_freshness(self, challenge: Challenge, now: Optional[int] = None) -> None:
        """
        Verifica finestra di validità.

        Valido se: now - window < issued_at <= now + skew

        Raises:
            ExpiredError: Challenge scaduta o non ancora valida
        """
        now = self.clock() if now is None else now
        window = self.config.challenge_window_seconds

        if challenge.issued_at <= now - window:
            raise ExpiredError(
                "Message has expired",
                code="CHALLENGE_EXPIRED",
                details={
                    "issued_at": challenge.issued_at,
                    "now": now,
                    "window_seconds": window
                }
            )

        if challenge.issued_at > now + self.config.challenge_max_clock_skew_seconds:
            raise ExpiredError(
                "Message is not valid yet",
                code="CHALLENGE_FROM_FUTURE",
                details={"issued_at": challenge.issued_at, "now": now}
            )

    def check_signature(self, address: str, message: str, signature: str) -> None:
        """
        Verifica firma tramite la capability esterna.

        Raises:
            SignatureError: Firma invalida o verifier in errore
        """
        try:
            is_valid = self.verifier.verify(message, address, signature)
        except Exception as e:
            raise SignatureError(
                f"Message verification failed: {e}",
                code="SIGNATURE_MALFORMED",
                details={"address": address}
            ) from e

        if not is_valid:
            raise SignatureError(
                "Message verification failed",
                code="SIGNATURE_INVALID",
                details={"address": address}
            )

    def verify(
        self,
        address: str,
        message: str,
        signature: str,
        star: Any
    ) -> VerifiedClaim:
        """
        Esegui il protocollo completo.

        Steps:
            1. Parse timestamp dal messaggio
            2. Freshness check (prima della firma)
            3. Address del messaggio == address dichiarato
            4. Verifica firma

        Returns:
            VerifiedClaim: Lasciapassare per Blockchain.add_star

        Raises:
            MalformedChallengeError | ExpiredError | SignatureError
        """
        now = self.clock()

        challenge = self.parse_challenge(message)

        self.check_freshness(challenge, now)

        if challenge.address != address:
            raise MalformedChallengeError(
                "Challenge was issued for a different address",
                code="ADDRESS_MISMATCH",
                details={"address": address, "challenge_address": challenge.address}
            )

        self.check_signature(address, message, signature)

        logger.info(
            "Ownership verified",
            extra_data={"address": address, "challenge_age": challenge.age(now)}
        )

        return VerifiedClaim(
            owner=address,
            star=star,
            issued_at=challenge.issued_at,
            verified_at=now,
            _token=_CLAIM_TOKEN,
        )


__all__ = [
    "Challenge",
    "VerifiedClaim",
    "OwnershipVerifier",
    "unix_now",
]

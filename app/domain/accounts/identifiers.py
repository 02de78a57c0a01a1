"""
Identifier generation for account records.

Formats:
    Account         ``A`` + 3 digits, sequential
    Funding source  ``F`` + 6 digits, sequential
    Contact         ``C`` + 4 digits, random, collision-checked
    Bank account    19 random digits

Sequential IDs are derived from the highest stored value. Random contact
IDs are retried against an injected existence check, so the same check
can run on the caller's open transaction (or be faked in tests).
"""

import logging
import random
from typing import Callable, Optional

from app.domain.accounts.errors import IdentifierExhaustedError
from app.domain.accounts.ports import AccountRepository

logger = logging.getLogger(__name__)

ACCOUNT_PREFIX = "A"
ACCOUNT_DIGITS = 3
FUNDING_PREFIX = "F"
FUNDING_DIGITS = 6
CONTACT_PREFIX = "C"
CONTACT_DIGITS = 4
BANK_ACCOUNT_DIGITS = 19
MAX_CONTACT_ID_ATTEMPTS = 100


def next_sequential_id(prefix: str, digits: int, current_max: Optional[str]) -> str:
    """Return the ID after ``current_max`` in the ``prefix`` + ``digits`` format.

    Args:
        prefix: Single-letter entity prefix.
        digits: Width of the zero-padded numeric suffix.
        current_max: Highest stored ID, or None when nothing is stored yet.

    Returns:
        The next identifier, e.g. ``A004`` after ``A003``.

    Raises:
        ValueError: If ``current_max`` is not in the expected format.
        IdentifierExhaustedError: If the numeric suffix would overflow.
    """
    if current_max is None:
        number = 1
    else:
        suffix = current_max[len(prefix):]
        if not current_max.startswith(prefix) or not suffix.isdigit():
            raise ValueError(f"Malformed stored identifier: {current_max!r}")
        number = int(suffix) + 1

    if number >= 10**digits:
        raise IdentifierExhaustedError(prefix, number - 1)
    return f"{prefix}{number:0{digits}d}"


def generate_unique(
    factory: Callable[[], str],
    exists: Callable[[str], bool],
    max_attempts: int,
    label: str,
) -> str:
    """Return the first candidate from ``factory`` that ``exists`` rejects.

    Raises:
        IdentifierExhaustedError: After ``max_attempts`` collisions.
    """
    for attempt in range(1, max_attempts + 1):
        candidate = factory()
        if not exists(candidate):
            if attempt > 1:
                logger.debug("Found free %s id after %d attempts.", label, attempt)
            return candidate

    logger.error("Exhausted %d attempts generating a %s id.", max_attempts, label)
    raise IdentifierExhaustedError(label, max_attempts)


class IdentifierGenerator:
    """Produces account, funding, bank and contact identifiers.

    Args:
        rng: Random source for bank and contact IDs. Defaults to
            ``random.SystemRandom`` so IDs are not predictable.
        max_contact_attempts: Retry budget for contact ID collisions.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_contact_attempts: int = MAX_CONTACT_ID_ATTEMPTS,
    ) -> None:
        self._rng = rng or random.SystemRandom()
        self._max_contact_attempts = max_contact_attempts

    def next_account_id(self, repo: AccountRepository) -> str:
        """Return the next ``A###`` ID after the highest stored one."""
        return next_sequential_id(ACCOUNT_PREFIX, ACCOUNT_DIGITS, repo.max_account_id())

    def next_funding_id(self, repo: AccountRepository) -> str:
        """Return the next ``F######`` ID after the highest stored one."""
        return next_sequential_id(FUNDING_PREFIX, FUNDING_DIGITS, repo.max_funding_id())

    def next_bank_account_number(self) -> str:
        """Return a random 19-digit account number without a leading zero."""
        first = str(self._rng.randint(1, 9))
        rest = "".join(
            str(self._rng.randint(0, 9)) for _ in range(BANK_ACCOUNT_DIGITS - 1)
        )
        return first + rest

    def random_contact_id(self) -> str:
        """Return a random ``C####`` candidate (not checked for uniqueness)."""
        number = self._rng.randint(0, 10**CONTACT_DIGITS - 1)
        return f"{CONTACT_PREFIX}{number:0{CONTACT_DIGITS}d}"

    def next_contact_id(self, exists: Callable[[str], bool]) -> str:
        """Return a contact ID for which ``exists`` reports no collision.

        Raises:
            IdentifierExhaustedError: After the retry budget is spent.
        """
        return generate_unique(
            self.random_contact_id,
            exists,
            self._max_contact_attempts,
            CONTACT_PREFIX,
        )

"""
Ordered transaction scripts.

A TransactionScript is a named list of steps run in order against one
repository inside one transaction. The first failing step stops the
script; the store's transaction scope then rolls everything back.
"""

import logging
from typing import Callable

from app.domain.accounts.errors import AccountDomainError
from app.domain.accounts.ports import AccountRepository, AccountStore

logger = logging.getLogger(__name__)

StepAction = Callable[[AccountRepository], None]


class TransactionScript:
    """Named, ordered steps executed under a single transaction.

    Args:
        name: Label used in log lines, e.g. ``"registration"``.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._steps: list[tuple[str, StepAction]] = []

    def step(self, label: str, action: StepAction) -> "TransactionScript":
        """Append a step and return the script for chaining."""
        self._steps.append((label, action))
        return self

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self._steps]

    def run(self, store: AccountStore) -> None:
        """Run every step in order; any failure rolls back the whole script."""
        with store.transaction() as repo:
            for label, action in self._steps:
                try:
                    action(repo)
                except AccountDomainError as exc:
                    logger.warning(
                        "%s rejected at step '%s': %s", self.name, label, exc.message
                    )
                    raise
                except Exception as exc:
                    logger.error(
                        "%s failed at step '%s' (%s); rolling back.",
                        self.name,
                        label,
                        type(exc).__name__,
                    )
                    raise
        logger.debug("%s committed %d steps.", self.name, len(self._steps))

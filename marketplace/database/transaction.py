"""Compensating transactions over the in-memory stores.

The stores only guarantee that a single call is atomic. A multi-step write
(such as placing an order) registers an undo action after every step that
succeeded; rolling back runs them newest first. Commit hooks run only once
the whole unit has committed.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """Collects compensations for a unit of work"""

    def __init__(self, name: str = "transaction"):
        self.name = name
        self.state = TransactionState.ACTIVE
        self._compensations: list[tuple[str, Callable[[], Any]]] = []
        self._commit_hooks: list[Callable[[], Any]] = []

    @property
    def is_active(self) -> bool:
        return self.state == TransactionState.ACTIVE

    def on_rollback(self, description: str, action: Callable[[], Any]) -> None:
        """Register an undo action for a step that already happened"""
        self._ensure_active()
        self._compensations.append((description, action))

    def on_commit(self, hook: Callable[[], Any]) -> None:
        """Register work that must wait until the unit has committed"""
        self._ensure_active()
        self._commit_hooks.append(hook)

    def commit(self) -> None:
        self._ensure_active()
        self.state = TransactionState.COMMITTED
        self._compensations.clear()
        hooks, self._commit_hooks = self._commit_hooks, []
        for hook in hooks:
            hook()

    def rollback(self) -> None:
        self._ensure_active()
        self.state = TransactionState.ROLLED_BACK
        self._commit_hooks.clear()

        logger.warning(
            f"[{self.name}] rolling back {len(self._compensations)} step(s)"
        )
        while self._compensations:
            description, action = self._compensations.pop()
            try:
                action()
                logger.info(f"[{self.name}] compensated: {description}")
            except Exception:
                # Keep undoing the remaining steps
                logger.exception(f"[{self.name}] compensation failed: {description}")

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise RuntimeError(f"Transaction {self.name} is already {self.state.value}")

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self.is_active:
            return False
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False


@contextmanager
def transactional(
    transaction: Optional[Transaction] = None,
    name: str = "transaction",
) -> Iterator[Transaction]:
    """Join the caller's transaction, or run in a new one.

    A joined transaction is left open: the caller that created it decides
    whether to commit or roll back.
    """
    if transaction is not None:
        yield transaction
        return

    with Transaction(name) as tx:
        yield tx

"""
Host Ledger

Executes each protocol operation as one indivisible unit: operations are
serialized, and every record write and token movement made inside a
transaction is discarded if the transaction raises.
"""
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from .store import RecordStore
from .tokens import TokenLedger

logger = logging.getLogger(__name__)


class HostLedger:
    """Record store plus token ledger with all-or-nothing transactions."""

    def __init__(self, store: RecordStore | None = None, tokens: TokenLedger | None = None):
        self.store = store or RecordStore()
        self.tokens = tokens or TokenLedger()
        self._lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["HostLedger"]:
        """
        Run a block atomically.

        Nested transactions join the outermost one; only the outermost
        snapshot is restored on failure.
        """
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                records = self.store.snapshot()
                balances = self.tokens.snapshot()
            self._depth += 1
            try:
                yield self
            except BaseException:
                if outermost:
                    self.store.restore(records)
                    self.tokens.restore(balances)
                    logger.debug("Transaction rolled back")
                raise
            finally:
                self._depth -= 1

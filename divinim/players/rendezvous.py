"""
Action Slot - Single-slot rendezvous between an event source and the turn loop.

The turn loop awaits the slot; an event handler (UI click, HTTP request)
resolves it. Only one wait may be outstanding at a time.
"""

from __future__ import annotations
import asyncio
import logging
from typing import TYPE_CHECKING

from ..engine_core.errors import PlayerBusyError

if TYPE_CHECKING:
    from .base import PlayerDecision

logger = logging.getLogger(__name__)


class ActionSlot:
    """
    Usage:
        slot = ActionSlot()

        # Turn loop side
        decision = await slot.wait()

        # Event handler side (same event loop)
        slot.resolve(decision)
    """

    def __init__(self, name: str = "slot"):
        self.name = name
        self._future: asyncio.Future | None = None
        self._requested = asyncio.Event()

    @property
    def pending(self) -> bool:
        """Whether someone is waiting for a decision."""
        return self._future is not None and not self._future.done()

    async def wait(self) -> PlayerDecision:
        """Wait until resolve() or fail() is called."""
        if self.pending:
            raise PlayerBusyError(
                "An action request is already outstanding",
                context={"slot": self.name},
            )
        future = asyncio.get_running_loop().create_future()
        self._future = future
        self._requested.set()
        try:
            return await future
        finally:
            if self._future is future:
                self._future = None
                self._requested.clear()

    async def wait_for_request(self, timeout: float | None = None) -> bool:
        """
        Wait until someone is waiting on the slot.

        Returns False if timeout passed first.
        """
        if self.pending:
            return True
        try:
            await asyncio.wait_for(self._requested.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return self.pending

    def resolve(self, decision: PlayerDecision) -> bool:
        """
        Hand a decision to the waiter.

        Returns False if nobody is waiting; the decision is dropped.
        """
        if not self.pending:
            logger.debug("Dropping decision for %s: nobody is waiting", self.name)
            return False
        self._future.set_result(decision)
        return True

    def fail(self, error: BaseException) -> bool:
        """Make the waiter raise error. Returns False if nobody is waiting."""
        if not self.pending:
            return False
        self._future.set_exception(error)
        return True

"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols that establish
contracts for collaborators without requiring inheritance.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CancellationSignal(Protocol):
    """Protocol for cooperative cancellation signals.

    Satisfied by ``asyncio.Event`` and ``threading.Event``. The signal is
    advisory: it is consulted before starting each root and never unwinds a
    walk that is already running.
    """

    def is_set(self) -> bool:
        """Report whether cancellation has been requested.

        Returns:
            True once cancellation has been requested
        """
        ...

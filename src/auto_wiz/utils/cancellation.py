"""
Cooperative cancellation for flow runs.
"""

import asyncio
from typing import Optional


class CancellationToken:
    """
    Explicit stop signal passed into a flow run.

    The runner checks it between steps and the wait loop checks it on every
    poll tick. Nothing is interrupted at any other point.

    Example:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(runner.run(flow, cancel_token=token))
        >>> token.cancel("Stopped by user")
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "Stopped by user") -> None:
        """Request cancellation. Idempotent; the first reason is kept."""
        if not self._cancelled:
            self._cancelled = True
            self._reason = reason

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


async def cancellable_sleep(
    delay_ms: float,
    cancel_token: Optional[CancellationToken] = None,
    tick_ms: float = 100,
) -> bool:
    """
    Sleep for ``delay_ms``, waking every ``tick_ms`` to check the token.

    Returns:
        False if the token was cancelled before the delay elapsed
    """
    if cancel_token is None:
        await asyncio.sleep(max(delay_ms, 0) / 1000)
        return True

    loop = asyncio.get_running_loop()
    deadline = loop.time() + max(delay_ms, 0) / 1000
    while not cancel_token.is_cancelled:
        remaining = deadline - loop.time()
        if remaining <= 0:
            return True
        await asyncio.sleep(min(tick_ms / 1000, remaining))
    return False

"""
Display-Balance Smoothing

The balance shown on screen counts toward the real balance in steps
instead of jumping. This value is cosmetic: nothing in the ledger ever
reads it, and stopping the animation early only leaves the counter short
of the target.

Step rule, recomputed every tick:
    step = ceil((target - current) / steps)   when moving up
    step = floor((target - current) / steps)  when moving down
and a step that would pass the target lands exactly on it.
"""

import asyncio
import math
from decimal import Decimal
from typing import Callable, Iterator, Optional, Union

Number = Union[Decimal, int]

DEFAULT_STEPS = 20
DEFAULT_INTERVAL = 0.05


def next_display_value(current: Number, target: Number, steps: int = DEFAULT_STEPS) -> Number:
    """One animation tick from current toward target."""
    difference = target - current
    if difference == 0:
        return target

    if difference > 0:
        step = math.ceil(difference / steps)
        candidate = current + step
        return target if candidate >= target else candidate

    step = math.floor(difference / steps)
    candidate = current + step
    return target if candidate <= target else candidate


class BalanceAnimator:
    """
    Tracks the on-screen balance as it catches up with the real one.

    Usage:
        animator = BalanceAnimator()
        animator.set_target(ledger.current_balance())
        for value in animator.frames():
            render(value)
    """

    def __init__(
        self,
        current: Number = Decimal("0"),
        steps: int = DEFAULT_STEPS,
        interval: float = DEFAULT_INTERVAL,
    ):
        if steps < 1:
            raise ValueError("steps must be at least 1")
        self.current = Decimal(current)
        self.target = Decimal(current)
        self.steps = steps
        self.interval = interval

    @property
    def settled(self) -> bool:
        return self.current == self.target

    def set_target(self, target: Number) -> None:
        self.target = Decimal(target)

    def tick(self) -> Decimal:
        """Advance one step and return the new display value."""
        self.current = Decimal(next_display_value(self.current, self.target, self.steps))
        return self.current

    def frames(self) -> Iterator[Decimal]:
        """Yield every display value until the target is reached (inclusive)."""
        while not self.settled:
            yield self.tick()

    async def run(
        self,
        on_frame: Optional[Callable[[Decimal], None]] = None,
        interval: Optional[float] = None,
    ) -> Decimal:
        """
        Tick on a fixed interval until settled.

        Cancel the surrounding task to stop early; the display value
        simply stays where it was.
        """
        delay = self.interval if interval is None else interval
        while not self.settled:
            await asyncio.sleep(delay)
            value = self.tick()
            if on_frame is not None:
                on_frame(value)
        return self.current

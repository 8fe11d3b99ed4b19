"""Tests for the on-screen balance counter."""

import asyncio

import pytest
from decimal import Decimal

from src.ledger import BalanceAnimator, next_display_value


class TestNextDisplayValue:
    """One tick of the counter."""

    def test_moves_up_by_ceiling_step(self):
        # 100 / 20 = 5
        assert next_display_value(0, 100) == 5
        # 7 / 20 rounds up to 1
        assert next_display_value(0, 7) == 1

    def test_moves_down_by_floor_step(self):
        assert next_display_value(0, -100) == -5
        assert next_display_value(0, -7) == -1

    def test_never_overshoots(self):
        assert next_display_value(99, 100, steps=1) == 100
        assert next_display_value(Decimal("99.5"), Decimal("100")) == Decimal("100")
        assert next_display_value(Decimal("-99.5"), Decimal("-100")) == Decimal("-100")

    def test_settled_stays_put(self):
        assert next_display_value(42, 42) == 42


class TestBalanceAnimator:
    """The counter as a whole."""

    def test_frames_reach_target(self):
        animator = BalanceAnimator()
        animator.set_target(Decimal("35000"))
        frames = list(animator.frames())
        assert frames[-1] == Decimal("35000")
        assert animator.settled

    def test_frames_are_monotonic(self):
        animator = BalanceAnimator(current=Decimal("1000"))
        animator.set_target(Decimal("-15000"))
        frames = list(animator.frames())
        assert all(a > b for a, b in zip(frames, frames[1:]))

    def test_no_frames_when_settled(self):
        animator = BalanceAnimator(current=Decimal("10"))
        animator.set_target(Decimal("10"))
        assert list(animator.frames()) == []

    def test_retarget_mid_animation(self):
        animator = BalanceAnimator()
        animator.set_target(Decimal("1000"))
        animator.tick()
        animator.set_target(Decimal("-500"))
        assert list(animator.frames())[-1] == Decimal("-500")

    def test_rejects_zero_steps(self):
        with pytest.raises(ValueError):
            BalanceAnimator(steps=0)

    @pytest.mark.asyncio
    async def test_run_reports_every_frame(self):
        seen = []
        animator = BalanceAnimator(interval=0)
        animator.set_target(Decimal("40"))
        final = await animator.run(on_frame=seen.append)
        assert final == Decimal("40")
        assert seen[-1] == Decimal("40")

    @pytest.mark.asyncio
    async def test_cancel_leaves_value_short(self):
        """Stopping early is harmless: the counter just stays where it was."""
        animator = BalanceAnimator(interval=10)
        animator.set_target(Decimal("100"))
        task = asyncio.create_task(animator.run())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert animator.current == Decimal("0")

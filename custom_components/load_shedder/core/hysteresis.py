"""Debounce and hysteresis between computed and applied allocations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .allocator import PriorityAllocator
from .logger import log_debug, log_info
from .models import Allocation, Device, PendingTransition, StepDirection


@dataclass
class GateOutcome:
    """Result of one gate evaluation."""

    allocation: Allocation
    desired: Allocation
    applied: Optional[PendingTransition] = None
    cancelled: List[int] = field(default_factory=list)


class HysteresisGate:
    """Promote a computed allocation only after sustained, separated signal.

    Pending transitions are keyed by their target expected draw in integer
    watts. Two different allocations that happen to share a total draw are
    coalesced into one pending transition holding the most recent of them.
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        catalog: List[Device],
        allocator: PriorityAllocator,
        hysteresis_span_w: float,
        increase_duration: timedelta,
        decrease_duration: timedelta,
    ):
        self._catalog = catalog
        self._allocator = allocator
        self._half_span = float(hysteresis_span_w) / 2
        self._increase_duration = increase_duration
        self._decrease_duration = decrease_duration
        self._current = Allocation.all_off(catalog)
        self._pending: Dict[int, PendingTransition] = {}

    @property
    def current(self) -> Allocation:
        """The applied allocation."""
        return self._current

    @property
    def pending(self) -> Dict[int, PendingTransition]:
        """Pending transitions keyed by target draw."""
        return dict(self._pending)

    @property
    def headroom_w(self) -> float:
        return self._allocator.headroom_w

    def _create_transition(
        self, desired: Allocation, now: datetime
    ) -> PendingTransition:
        target = desired.expected_power_draw
        if target > self._current.expected_power_draw:
            direction = StepDirection.STEP_UP
            activation = now + self._increase_duration
        else:
            direction = StepDirection.STEP_DOWN
            activation = now + self._decrease_duration

        transition = PendingTransition(
            target_draw=target,
            direction=direction,
            created_at=now,
            activation_time=activation,
            allocation=desired,
        )
        log_debug(
            f"New {direction} candidate {self._current.expected_power_draw}W -> "
            f"{target}W, activation at {activation.isoformat()}"
        )
        return transition

    def is_valid(
        self, transition: PendingTransition, desired: Allocation, surplus: float
    ) -> bool:
        """Return True while the live signal still supports the transition."""
        target = transition.target_draw
        current_draw = self._current.expected_power_draw
        available = -surplus

        if transition.direction == StepDirection.STEP_UP:
            return (
                target > current_draw
                and desired.expected_power_draw >= target
                and target + self.headroom_w + self._half_span <= available
            )

        return (
            target < current_draw
            and desired.expected_power_draw <= target
            and current_draw + self.headroom_w - self._half_span > available
        )

    def evaluate(self, surplus: float, now: datetime) -> GateOutcome:
        """Run one tick of the state machine.

        surplus is the uncontrolled grid balance (negative means export).
        """
        desired = self._allocator.compute_allocation(surplus, self._catalog)
        target = desired.expected_power_draw

        if target != self._current.expected_power_draw:
            if target not in self._pending:
                self._pending[target] = self._create_transition(desired, now)
            else:
                self._pending[target].allocation = desired

        outcome = GateOutcome(allocation=self._current, desired=desired)

        for transition in sorted(
            self._pending.values(), key=lambda t: (t.activation_time, t.target_draw)
        ):
            if not self.is_valid(transition, desired, surplus):
                del self._pending[transition.target_draw]
                outcome.cancelled.append(transition.target_draw)
                log_debug(
                    f"Cancelled {transition.direction} candidate "
                    f"{transition.target_draw}W (surplus {surplus}W)"
                )
                continue

            if outcome.applied is None and now >= transition.activation_time:
                outcome.applied = transition

        if outcome.applied is not None:
            self._apply(outcome.applied)
            outcome.allocation = self._current

        return outcome

    def _apply(self, transition: PendingTransition) -> None:
        previous = self._current.expected_power_draw
        self._current = transition.allocation
        self._pending.pop(transition.target_draw, None)
        # A candidate for the draw we just reached has nothing left to do.
        self._pending.pop(self._current.expected_power_draw, None)
        log_info(
            f"Applied {transition.direction} allocation {previous}W -> "
            f"{self._current.expected_power_draw}W, on: {self._current.devices_on}"
        )

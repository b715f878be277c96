"""The load shedding controller: one owned instance per config entry."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional

import homeassistant.util.dt as dt_util

from .aggregator import PowerAggregator
from .allocator import PriorityAllocator
from .device_state import DeviceStateTracker
from .dispatcher import CallDispatcher, IssueCommand, TaskFactory
from .exceptions import InvalidDirectionError, UnknownDeviceError
from .hysteresis import GateOutcome, HysteresisGate
from .logger import log_debug, log_error, log_info, journal_event
from .models import Allocation, ControllerSettings, Device

from ..const import EVENT_ALLOCATION_APPLIED, EVENT_DEVICE_COMMAND

EventCallback = Callable[[str, Dict[str, Any]], None]


class LoadShedController:
    """Wire aggregation, allocation, hysteresis, tracking and dispatch."""

    # pylint: disable=too-many-instance-attributes
    def __init__(
        self,
        settings: ControllerSettings,
        catalog: List[Device],
        issue_command: IssueCommand,
        create_task: Optional[TaskFactory] = None,
        emit_event: Optional[EventCallback] = None,
    ):
        self.settings = settings
        self.catalog = catalog
        self._devices_by_name = {device.name: device for device in catalog}

        self.aggregator = PowerAggregator(
            invert_power_readings=settings.invert_power_readings,
            simulation_enabled=settings.simulation_enabled,
            simulation_power=settings.simulation_power,
        )
        self.allocator = PriorityAllocator(settings.power_headroom_w)
        self.gate = HysteresisGate(
            catalog,
            self.allocator,
            settings.power_hysteresis_span_w,
            settings.increase_threshold_duration,
            settings.decrease_threshold_duration,
        )
        self.tracker = DeviceStateTracker(catalog)
        self.dispatcher = CallDispatcher(
            issue_command, settings.max_parallel_calls, create_task
        )

        self._emit_event = emit_event
        self._listeners: List[Callable[[], None]] = []
        self.last_outcome: Optional[GateOutcome] = None
        self.last_tick: Optional[datetime] = None

    def device(self, name: str) -> Device:
        """Return a catalog device by name."""
        try:
            return self._devices_by_name[name]
        except KeyError as exc:
            raise UnknownDeviceError(name) from exc

    @property
    def uncontrolled_surplus(self) -> float:
        """Metered balance with the applied allocation's draw taken out.

        A simulated balance never includes the controlled loads and is used
        as is.
        """
        if self.aggregator.simulation_enabled:
            return self.aggregator.current_surplus()
        return self.aggregator.current_surplus() - self.gate.current.expected_power_draw

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run after every tick; returns its remover."""
        self._listeners.append(listener)

        def _remove():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def async_handle_sample(
        self, channel: Hashable, value: Any, now: Optional[datetime] = None
    ) -> Optional[GateOutcome]:
        """Ingest one power sample and run a control tick."""
        if not self.aggregator.update(channel, value):
            return None
        return self.async_tick(now)

    def async_tick(self, now: Optional[datetime] = None) -> GateOutcome:
        """Evaluate the gate and submit the current allocation."""
        now = now or dt_util.utcnow()
        surplus = self.uncontrolled_surplus
        outcome = self.gate.evaluate(surplus, now)
        log_debug(
            f"Tick: metered={self.aggregator.current_surplus()}W "
            f"uncontrolled={surplus}W desired={outcome.desired.expected_power_draw}W "
            f"current={outcome.allocation.expected_power_draw}W "
            f"pending={sorted(self.gate.pending)}"
        )

        if outcome.applied is not None:
            data = {
                "expected_power_draw": outcome.allocation.expected_power_draw,
                "direction": str(outcome.applied.direction),
                "allocation": outcome.allocation.as_dict(),
            }
            journal_event("allocation_applied", data)
            self._fire(EVENT_ALLOCATION_APPLIED, data)

        self._submit_allocation(outcome.allocation)

        self.last_outcome = outcome
        self.last_tick = now
        self._notify()
        return outcome

    def _submit_allocation(self, allocation: Allocation) -> None:
        for name, direction in allocation.states.items():
            device = self.device(name)
            try:
                request = self.tracker.request_for(device, direction)
            except InvalidDirectionError as exc:
                log_error(f"Not sending command to {name}: {exc}")
                continue
            if request is None:
                continue

            self.dispatcher.submit(request)
            self._fire(
                EVENT_DEVICE_COMMAND,
                {
                    "device": device.name,
                    "direction": str(request.direction),
                    "reason": str(request.reason),
                    "expected_power_draw": allocation.expected_power_draw,
                },
            )

    def request_resync(self) -> None:
        """Force the next tick to re-assert every device's state."""
        self.tracker.flag_all_for_resync()

    def resync_devices(self, names: Iterable[str]) -> None:
        """Force the next tick to re-assert the named devices."""
        self.tracker.flag_for_resync([self.device(name) for name in names])

    def set_simulation(self, enabled: bool, power: Optional[float] = None) -> None:
        """Switch the simulated power override on or off."""
        self.aggregator.set_simulation(enabled, power)
        log_info(
            f"Simulation {'enabled' if enabled else 'disabled'} "
            f"({self.aggregator.simulation_power}W)"
        )
        self._notify()

    def snapshot(self) -> Dict[str, Any]:
        """Return the controller state for diagnostics and sensors."""
        desired = self.last_outcome.desired if self.last_outcome else None
        return {
            "surplus": self.aggregator.current_surplus(),
            "uncontrolled_surplus": self.uncontrolled_surplus,
            "channels": {str(k): v for k, v in self.aggregator.channels.items()},
            "simulation": self.aggregator.simulation_enabled,
            "expected_power_draw": self.gate.current.expected_power_draw,
            "desired_power_draw": desired.expected_power_draw if desired else None,
            "allocation": self.gate.current.as_dict(),
            "pending_transitions": [
                transition.as_dict()
                for transition in sorted(
                    self.gate.pending.values(), key=lambda t: t.activation_time
                )
            ],
            "presumed_states": {
                device.name: str(device.presumed_state) for device in self.catalog
            },
            "in_flight_calls": self.dispatcher.in_flight,
            "queued_calls": self.dispatcher.queued,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
        }

    def _fire(self, event_type: str, data: Dict[str, Any]) -> None:
        if self._emit_event is not None:
            self._emit_event(event_type, data)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    async def async_shutdown(self) -> None:
        """Let in-flight commands run to completion."""
        await self.dispatcher.async_drain()

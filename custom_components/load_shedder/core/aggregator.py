"""Reduce per-channel meter readings to one signed grid balance."""

import math
from typing import Any, Dict, Hashable

from .logger import log_debug


def parse_power_value(value: Any):
    """Return value as a finite float, or None if it is not a usable reading."""
    if value is None or isinstance(value, bool):
        return None
    try:
        power = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(power):
        return None
    return power


class PowerAggregator:
    """Latest-value-wins store of channel readings.

    The aggregate follows the meter convention: negative values mean power is
    exported to the grid (surplus available), positive values mean import.
    """

    def __init__(
        self,
        invert_power_readings: bool = False,
        simulation_enabled: bool = False,
        simulation_power: float = 0.0,
    ):
        self._channels: Dict[Hashable, float] = {}
        self._invert = invert_power_readings
        self._simulation_enabled = simulation_enabled
        self._simulation_power = float(simulation_power)

    @property
    def channels(self) -> Dict[Hashable, float]:
        """Return a copy of the latest reading per channel."""
        return dict(self._channels)

    @property
    def simulation_enabled(self) -> bool:
        return self._simulation_enabled

    @property
    def simulation_power(self) -> float:
        return self._simulation_power

    def update(self, channel: Hashable, value: Any) -> bool:
        """Store the latest reading for a channel.

        Returns False and leaves the aggregate untouched when the value is
        missing or not numeric.
        """
        power = parse_power_value(value)
        if power is None:
            log_debug(f"Ignoring malformed power sample on {channel}: {value!r}")
            return False
        self._channels[channel] = power
        return True

    def set_simulation(self, enabled: bool, power: float = None) -> None:
        """Enable or disable the simulated power override."""
        self._simulation_enabled = bool(enabled)
        if power is not None:
            self._simulation_power = float(power)

    def current_surplus(self) -> float:
        """Return the signed grid balance over all known channels."""
        if self._simulation_enabled:
            return self._simulation_power
        total = sum(self._channels.values())
        return -total if self._invert else total

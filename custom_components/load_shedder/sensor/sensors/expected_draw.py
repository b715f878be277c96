"""Expected draw of the applied allocation."""

from typing import Any, Dict

from homeassistant.components.sensor import SensorDeviceClass, SensorStateClass
from homeassistant.core import HomeAssistant
from homeassistant.const import UnitOfPower

from .base import BaseLoadShedderSensor

from ...const import SENSOR_EXPECTED_DRAW_SUFFIX


class LoadShedderExpectedDrawSensor(BaseLoadShedderSensor):
    """Representation of the applied allocation and pending transitions."""

    _attr_icon = "mdi:flash"
    _attr_native_unit_of_measurement = UnitOfPower.WATT
    _attr_device_class = SensorDeviceClass.POWER
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, hass: HomeAssistant, entry_id: str):
        """Initialize the expected draw sensor."""
        super().__init__(
            hass=hass,
            entry_id=entry_id,
            name="expected_draw",
            unique_id_suffix=SENSOR_EXPECTED_DRAW_SUFFIX,
        )

    def _calculate_value(self, snapshot: Dict[str, Any]) -> int:
        return int(snapshot["expected_power_draw"])

    def _get_attributes(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "allocation": snapshot["allocation"],
            "desired_power_draw": snapshot["desired_power_draw"],
            "pending_transitions": snapshot["pending_transitions"],
            "in_flight_calls": snapshot["in_flight_calls"],
            "queued_calls": snapshot["queued_calls"],
            "last_tick": snapshot["last_tick"],
        }

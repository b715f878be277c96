"""Grid balance sensor for Load Shedder."""

from typing import Any, Dict

from homeassistant.components.sensor import SensorDeviceClass, SensorStateClass
from homeassistant.core import HomeAssistant
from homeassistant.const import UnitOfPower

from .base import BaseLoadShedderSensor

from ...const import SENSOR_SURPLUS_SUFFIX


class LoadShedderSurplusSensor(BaseLoadShedderSensor):
    """Aggregated grid balance; negative while exporting."""

    _attr_icon = "mdi:transmission-tower-export"
    _attr_native_unit_of_measurement = UnitOfPower.WATT
    _attr_device_class = SensorDeviceClass.POWER
    _attr_state_class = SensorStateClass.MEASUREMENT

    def __init__(self, hass: HomeAssistant, entry_id: str):
        """Initialize the surplus sensor."""
        super().__init__(
            hass=hass,
            entry_id=entry_id,
            name="surplus",
            unique_id_suffix=SENSOR_SURPLUS_SUFFIX,
        )

    def _calculate_value(self, snapshot: Dict[str, Any]) -> float:
        return round(float(snapshot["surplus"]), 1)

    def _get_attributes(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "uncontrolled_surplus": round(float(snapshot["uncontrolled_surplus"]), 1),
            "channels": snapshot["channels"],
            "simulation": snapshot["simulation"],
        }

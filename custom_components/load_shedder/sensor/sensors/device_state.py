"""Sensor for the presumed state of a single device."""

from __future__ import annotations
from typing import Any, Dict

from homeassistant.components.sensor import SensorDeviceClass
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import DeviceInfo

from .base import BaseLoadShedderSensor
from ...core.models import PresumedState

from ...const import (
    DOMAIN,
    SENSOR_DEVICE_STATE_SUFFIX,
    CONF_DEVICE_ID,
    CONF_DEVICE_NAME,
    CONF_DEVICE_PROTOCOL,
    CONF_DEVICE_EXPECTED_W,
)


class LoadShedderDeviceStateSensor(BaseLoadShedderSensor):
    """Representation of what the controller last commanded a device to be."""

    _attr_icon = "mdi:power-plug"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [state.value for state in PresumedState]

    def __init__(
        self, hass: HomeAssistant, entry_id: str, device_config: Dict[str, Any]
    ):
        """Initialize the sensor."""
        self._device_id = device_config.get(CONF_DEVICE_ID)
        self._device_name = device_config.get(CONF_DEVICE_NAME)
        self._protocol = device_config.get(CONF_DEVICE_PROTOCOL)
        self._expected_power_w = device_config.get(CONF_DEVICE_EXPECTED_W)
        super().__init__(
            hass=hass,
            entry_id=entry_id,
            name="presumed_state",
            unique_id_suffix=f"{self._device_id}_{SENSOR_DEVICE_STATE_SUFFIX}",
        )
        self._attr_name = self._device_name

    @property
    def device_info(self) -> DeviceInfo:
        """Return device information."""
        return DeviceInfo(
            identifiers={(DOMAIN, self._device_id)},
            name=self._device_name,
            manufacturer="Load Shedder",
            via_device=(DOMAIN, self._entry_id),
        )

    def _calculate_value(self, snapshot: Dict[str, Any]) -> str:
        return snapshot["presumed_states"][self._device_name]

    def _get_attributes(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "device_id": self._device_id,
            "protocol": self._protocol,
            "expected_power_w": self._expected_power_w,
            "allocated": snapshot["allocation"].get(self._device_name),
        }

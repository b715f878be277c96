"""Base sensor class for Load Shedder sensors."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from homeassistant.components.sensor import ENTITY_ID_FORMAT, SensorEntity
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.typing import StateType
from homeassistant.util import slugify

from ...core.logger import log_error, journal_event

from ...const import DOMAIN, SIGNAL_STATE_UPDATED


class BaseLoadShedderSensor(SensorEntity, ABC):
    """Base class for all Load Shedder sensors."""

    _attr_should_poll = False

    def __init__(
        self,
        hass: HomeAssistant,
        entry_id: str,
        name: str,
        unique_id_suffix: str,
    ):
        """Initialize the base sensor."""
        self._hass = hass
        self._entry_id = entry_id

        # Sensor identification
        self._attr_translation_key = name
        self._attr_unique_id = f"{entry_id}_{unique_id_suffix}"
        self.entity_id = ENTITY_ID_FORMAT.format(
            slugify(f"{DOMAIN}_{entry_id}_{unique_id_suffix}")
        )

        self._state: StateType = None
        self._attr_extra_state_attributes: Dict[str, Any] = {}

    @property
    def device_info(self) -> DeviceInfo:
        """Return device information."""
        return DeviceInfo(
            identifiers={(DOMAIN, self._entry_id)},
            name="Load Shedder",
            manufacturer="Load Shedder",
        )

    def _get_controller(self):
        """Return the controller of this entry, or None while unloading."""
        entry_data = self._hass.data.get(DOMAIN, {}).get(self._entry_id)
        if not entry_data:
            return None
        return entry_data.get("controller")

    async def async_added_to_hass(self) -> None:
        """Register callbacks when entity is added."""
        await super().async_added_to_hass()

        @callback
        def _update_sensor(*_):
            """Update the sensor when the controller ticks."""
            self.async_write_ha_state()

        self.async_on_remove(
            async_dispatcher_connect(
                self._hass,
                f"{SIGNAL_STATE_UPDATED}_{self._entry_id}",
                _update_sensor,
            )
        )

    @property
    def native_value(self) -> StateType:
        """Return the state of the sensor."""
        controller = self._get_controller()
        if controller is None:
            return self._state

        try:
            snapshot = controller.snapshot()
            value = self._calculate_value(snapshot)
            self._attr_extra_state_attributes = self._get_attributes(snapshot)
            self._state = value
            return value
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            log_error(f"Error calculating {self.entity_id}: {exc}")
            journal_event(
                "sensor_calc_error", {"sensor": self.entity_id, "error": str(exc)}
            )
            return self._state

    def _get_attributes(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        """Return the extra state attributes for a snapshot."""
        return {}

    @abstractmethod
    def _calculate_value(self, snapshot: Dict[str, Any]) -> Optional[StateType]:
        """
        Calculate the sensor-specific value.

        This method must be implemented by each sensor subclass.

        Args:
            snapshot: Controller diagnostics as returned by snapshot()

        Returns:
            Calculated sensor value
        """

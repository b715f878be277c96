"""Load Shedder sensor platform."""

from homeassistant.core import HomeAssistant
from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .sensors import (
    LoadShedderSurplusSensor,
    LoadShedderExpectedDrawSensor,
    LoadShedderDeviceStateSensor,
)

from ..const import CONF_DEVICES, CONF_DEVICE_ID
from ..core.logger import log_debug


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Load Shedder sensors from a config entry."""
    sensors = [
        LoadShedderSurplusSensor(hass, config_entry.entry_id),
        LoadShedderExpectedDrawSensor(hass, config_entry.entry_id),
    ]

    # Create a presumed state sensor for each configured device
    devices = config_entry.data.get(CONF_DEVICES, [])
    for device_config in devices:
        if device_config.get(CONF_DEVICE_ID):
            sensors.append(
                LoadShedderDeviceStateSensor(
                    hass, config_entry.entry_id, device_config
                )
            )

    log_debug("Sensors: %s", [sensor.entity_id for sensor in sensors])
    async_add_entities(sensors)

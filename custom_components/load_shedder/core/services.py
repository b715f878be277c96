"""Service handlers for Load Shedder."""

from .exceptions import UnknownDeviceError
from .logger import log_error, log_info, audit_action

from ..const import DOMAIN, CONF_DEVICE_NAME

ATTR_ENABLED = "enabled"
ATTR_POWER = "power"


def _iter_entry_data(hass):
    """Yield the runtime data of every loaded config entry."""
    domain_data = hass.data.get(DOMAIN, {})
    for entry_id, entry_data in domain_data.items():
        if entry_id.startswith("_"):  # Skip internal keys like _entry_count
            continue
        yield entry_data


async def handle_force_resync(hass, call):
    """Handle the force_resync service call."""
    device_name = call.data.get(CONF_DEVICE_NAME)
    audit_action("force_resync", {"device_name": device_name})

    if not device_name:
        for entry_data in _iter_entry_data(hass):
            entry_data["controller"].request_resync()
        log_info("Resync requested for all devices")
        return

    found = False
    for entry_data in _iter_entry_data(hass):
        controller = entry_data["controller"]
        try:
            controller.resync_devices([device_name])
        except UnknownDeviceError:
            continue
        found = True

    if not found:
        log_error(f"Device with name {device_name} not found")
        return
    log_info(f"Resync requested for {device_name}")


async def handle_set_simulation(hass, call):
    """Handle the set_simulation service call."""
    enabled = call.data[ATTR_ENABLED]
    power = call.data.get(ATTR_POWER)
    audit_action("set_simulation", {"enabled": enabled, "power": power})

    for entry_data in _iter_entry_data(hass):
        entry_data["executor"].simulate = enabled
        entry_data["controller"].set_simulation(enabled, power)

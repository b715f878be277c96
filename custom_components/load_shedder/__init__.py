"""The Load Shedder integration."""

import voluptuous as vol

from homeassistant.core import HomeAssistant, callback
from homeassistant.config_entries import ConfigEntry
from homeassistant.exceptions import ConfigEntryError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.event import (
    async_track_state_change_event,
    async_track_time_interval,
)
from homeassistant.const import STATE_UNKNOWN, STATE_UNAVAILABLE

from .core.commands import CommandExecutor
from .core.controller import LoadShedController
from .core.exceptions import ConfigurationError
from .core.logger import log_info, log_debug, log_warning
from .core.models import ControllerSettings, build_catalog
from .core.services import (
    ATTR_ENABLED,
    ATTR_POWER,
    handle_force_resync,
    handle_set_simulation,
)
from .core.settings import LOG_STARTUP_DEVICES

from .const import (
    DOMAIN,
    SERVICE_FORCE_RESYNC,
    SERVICE_SET_SIMULATION,
    SIGNAL_STATE_UPDATED,
    CONF_POWER_SENSORS,
    CONF_DEVICES,
    CONF_DEVICE_ID,
    CONF_DEVICE_NAME,
    CONF_DEVICE_PROTOCOL,
    CONF_DEVICE_EXPECTED_W,
)

PLATFORMS = ["sensor"]

# Service schema for force_resync
FORCE_RESYNC_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_DEVICE_NAME): cv.string,
    }
)

# Service schema for set_simulation
SET_SIMULATION_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_ENABLED): cv.boolean,
        vol.Optional(ATTR_POWER): vol.Coerce(float),
    }
)


def get_power_sensors(config):
    """Return the configured power sensor entity ids as a list."""
    sensors = config.get(CONF_POWER_SENSORS) or []
    if isinstance(sensors, str):
        sensors = [sensors]
    return [entity_id for entity_id in sensors if entity_id]


def _seed_power_readings(hass, controller, power_sensors):
    """Feed the current state of every power sensor to the aggregator."""
    seeded = False
    for entity_id in power_sensors:
        state = hass.states.get(entity_id)
        if state is None or state.state in (STATE_UNKNOWN, STATE_UNAVAILABLE):
            log_debug(f"Power sensor {entity_id} has no reading yet")
            continue
        seeded = controller.aggregator.update(entity_id, state.state) or seeded
    return seeded


def _register_services(hass):
    """Register the services once (global) and track entry count."""
    root = hass.data[DOMAIN]
    root.setdefault("_entry_count", 0)
    root.setdefault("_services_registered", False)
    if not root["_services_registered"]:

        async def _handle_force_resync(call):
            await handle_force_resync(hass, call)

        async def _handle_set_simulation(call):
            await handle_set_simulation(hass, call)

        hass.services.async_register(
            DOMAIN,
            SERVICE_FORCE_RESYNC,
            _handle_force_resync,
            schema=FORCE_RESYNC_SCHEMA,
        )
        hass.services.async_register(
            DOMAIN,
            SERVICE_SET_SIMULATION,
            _handle_set_simulation,
            schema=SET_SIMULATION_SCHEMA,
        )
        root["_services_registered"] = True
    # Increment active entry count
    root["_entry_count"] = int(root.get("_entry_count", 0)) + 1


async def async_setup_entry(hass: HomeAssistant, config_entry: ConfigEntry):
    """Set up Load Shedder from a config entry."""
    log_info(
        "--- COMPONENT SETUP ---: Loading entry. Data: %s",
        config_entry.data,
    )
    config = config_entry.data

    try:
        settings = ControllerSettings.from_config(config)
        catalog = build_catalog(config.get(CONF_DEVICES, []))
    except ConfigurationError as exc:
        raise ConfigEntryError(str(exc)) from exc

    # --- Log all loaded devices for diagnostics ---
    if LOG_STARTUP_DEVICES:
        devices = config.get(CONF_DEVICES, [])
        if devices:
            log_info("[Startup] Loaded %d devices from config:", len(devices))
            for dev in devices:
                log_info(
                    "[Startup] Device: id=%s, name=%s, protocol=%s, expected=%sW",
                    dev.get(CONF_DEVICE_ID),
                    dev.get(CONF_DEVICE_NAME),
                    dev.get(CONF_DEVICE_PROTOCOL),
                    dev.get(CONF_DEVICE_EXPECTED_W),
                )
        else:
            log_info("[Startup] No devices loaded from config.")

    executor = CommandExecutor(hass, simulate=settings.simulation_enabled)

    @callback
    def _emit_event(event_type, data):
        hass.bus.async_fire(event_type, data)

    controller = LoadShedController(
        settings,
        catalog,
        executor.async_issue,
        create_task=hass.async_create_task,
        emit_event=_emit_event,
    )

    hass.data.setdefault(DOMAIN, {})
    entry_data = {
        "config": config,
        "controller": controller,
        "executor": executor,
        "unsub_update_listener": None,
        "unsub_power_listener": None,
        "unsub_resync_timer": None,
        "unsub_controller_listener": None,
    }
    hass.data[DOMAIN][config_entry.entry_id] = entry_data

    @callback
    def _notify_sensors():
        async_dispatcher_send(hass, f"{SIGNAL_STATE_UPDATED}_{config_entry.entry_id}")

    entry_data["unsub_controller_listener"] = controller.add_listener(_notify_sensors)

    # Set up sensors
    await hass.config_entries.async_forward_entry_setups(config_entry, PLATFORMS)

    _register_services(hass)

    power_sensors = get_power_sensors(config)
    if not power_sensors:
        log_warning("No power sensors configured; the controller will stay idle")

    @callback
    def _handle_power_sample(event):
        """Handle a state change of one of the power sensors."""
        new_state = event.data.get("new_state")
        if not new_state or new_state.state in (STATE_UNKNOWN, STATE_UNAVAILABLE):
            return
        controller.async_handle_sample(event.data.get("entity_id"), new_state.state)

    if power_sensors:
        entry_data["unsub_power_listener"] = async_track_state_change_event(
            hass, power_sensors, _handle_power_sample
        )

    @callback
    def _handle_resync_timer(_now):
        """Periodically re-assert every device's presumed state."""
        log_debug("Resync timer fired")
        controller.request_resync()

    entry_data["unsub_resync_timer"] = async_track_time_interval(
        hass, _handle_resync_timer, settings.sync_interval
    )

    # Initial pass with whatever the power sensors report right now
    if _seed_power_readings(hass, controller, power_sensors):
        controller.async_tick()

    # Listen for config entry updates
    entry_data["unsub_update_listener"] = config_entry.add_update_listener(
        update_listener
    )

    log_info(
        f"Load Shedder set up with {len(catalog)} devices and "
        f"{len(power_sensors)} power sensors"
    )
    return True


async def update_listener(hass: HomeAssistant, config_entry: ConfigEntry):
    """Handle options update."""
    log_debug("--- UPDATE LISTENER ---: Entry updated. Data: %s", config_entry.data)
    await hass.config_entries.async_reload(config_entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, config_entry: ConfigEntry):
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(
        config_entry, PLATFORMS
    )

    entry_data = hass.data[DOMAIN][config_entry.entry_id]
    for key in (
        "unsub_update_listener",
        "unsub_power_listener",
        "unsub_resync_timer",
        "unsub_controller_listener",
    ):
        if entry_data.get(key):
            entry_data[key]()

    # In-flight commands always run to completion
    await entry_data["controller"].async_shutdown()

    root = hass.data.get(DOMAIN, {})
    root.pop(config_entry.entry_id, None)

    try:
        root["_entry_count"] = max(0, int(root.get("_entry_count", 1)) - 1)
    except (TypeError, ValueError):
        root["_entry_count"] = 0

    if root.get("_entry_count", 0) == 0 and root.get("_services_registered"):
        hass.services.async_remove(DOMAIN, SERVICE_FORCE_RESYNC)
        hass.services.async_remove(DOMAIN, SERVICE_SET_SIMULATION)
        root["_services_registered"] = False

    return unload_ok

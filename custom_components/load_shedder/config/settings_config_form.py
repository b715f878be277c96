"""Controller settings form schema for Load Shedder config flow."""

from voluptuous import Schema, Required, Optional

from ..config.ui_helpers import (
    EntitySelectorBuilder,
    NumberSelectorBuilder,
    BooleanSelectorBuilder,
)
from ..core.settings import (
    MAX_HEADROOM_W,
    MAX_HYSTERESIS_SPAN_W,
    MAX_THRESHOLD_DURATION_SECONDS,
    MIN_SYNC_INTERVAL_SECONDS,
    MAX_SYNC_INTERVAL_SECONDS,
    MAX_PARALLEL_CALLS_LIMIT,
)

from ..const import (
    CONF_POWER_SENSORS,
    CONF_INVERT_POWER_READINGS,
    CONF_POWER_HEADROOM_W,
    CONF_POWER_HYSTERESIS_SPAN_W,
    CONF_INCREASE_THRESHOLD_DURATION,
    CONF_DECREASE_THRESHOLD_DURATION,
    CONF_SYNC_INTERVAL,
    CONF_MAX_PARALLEL_CALLS,
    CONF_SIMULATION_ENABLED,
    CONF_SIMULATION_POWER,
    DEFAULT_POWER_HEADROOM_W,
    DEFAULT_POWER_HYSTERESIS_SPAN_W,
    DEFAULT_INCREASE_THRESHOLD_DURATION,
    DEFAULT_DECREASE_THRESHOLD_DURATION,
    DEFAULT_SYNC_INTERVAL,
    DEFAULT_MAX_PARALLEL_CALLS,
    DEFAULT_SIMULATION_POWER,
)


def build_settings_schema(defaults=None):
    """Build schema for the controller settings."""
    if defaults is None:
        defaults = {}

    return Schema({
        Required(
            CONF_POWER_SENSORS,
            default=defaults.get(CONF_POWER_SENSORS, []),
        ): EntitySelectorBuilder("sensor", multiple=True, device_class="power").build(),

        Optional(
            CONF_INVERT_POWER_READINGS,
            default=defaults.get(CONF_INVERT_POWER_READINGS, False),
        ): BooleanSelectorBuilder().build(),

        Required(
            CONF_POWER_HEADROOM_W,
            default=defaults.get(CONF_POWER_HEADROOM_W, DEFAULT_POWER_HEADROOM_W),
        ): NumberSelectorBuilder(0, MAX_HEADROOM_W, 1, unit="W").build(),

        Required(
            CONF_POWER_HYSTERESIS_SPAN_W,
            default=defaults.get(
                CONF_POWER_HYSTERESIS_SPAN_W, DEFAULT_POWER_HYSTERESIS_SPAN_W
            ),
        ): NumberSelectorBuilder(0, MAX_HYSTERESIS_SPAN_W, 1, unit="W").build(),

        Required(
            CONF_INCREASE_THRESHOLD_DURATION,
            default=defaults.get(
                CONF_INCREASE_THRESHOLD_DURATION, DEFAULT_INCREASE_THRESHOLD_DURATION
            ),
        ): NumberSelectorBuilder(0, MAX_THRESHOLD_DURATION_SECONDS, 1, unit="s").build(),

        Required(
            CONF_DECREASE_THRESHOLD_DURATION,
            default=defaults.get(
                CONF_DECREASE_THRESHOLD_DURATION, DEFAULT_DECREASE_THRESHOLD_DURATION
            ),
        ): NumberSelectorBuilder(0, MAX_THRESHOLD_DURATION_SECONDS, 1, unit="s").build(),

        Required(
            CONF_SYNC_INTERVAL,
            default=defaults.get(CONF_SYNC_INTERVAL, DEFAULT_SYNC_INTERVAL),
        ): NumberSelectorBuilder(
            MIN_SYNC_INTERVAL_SECONDS, MAX_SYNC_INTERVAL_SECONDS, 1, unit="s"
        ).build(),

        Required(
            CONF_MAX_PARALLEL_CALLS,
            default=defaults.get(CONF_MAX_PARALLEL_CALLS, DEFAULT_MAX_PARALLEL_CALLS),
        ): NumberSelectorBuilder(1, MAX_PARALLEL_CALLS_LIMIT, 1).build(),

        Optional(
            CONF_SIMULATION_ENABLED,
            default=defaults.get(CONF_SIMULATION_ENABLED, False),
        ): BooleanSelectorBuilder().build(),

        Optional(
            CONF_SIMULATION_POWER,
            default=defaults.get(CONF_SIMULATION_POWER, DEFAULT_SIMULATION_POWER),
        ): NumberSelectorBuilder(-100000, 100000, 1, unit="W").build(),
    })

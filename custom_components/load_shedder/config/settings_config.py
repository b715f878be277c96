"""Controller settings module for Load Shedder config flow."""

from typing import Dict, Any, Optional

import voluptuous as vol

from ..core.logger import log_error, log_exception
from ..core.settings import (
    MAX_HEADROOM_W,
    MAX_HYSTERESIS_SPAN_W,
    MAX_THRESHOLD_DURATION_SECONDS,
    MIN_SYNC_INTERVAL_SECONDS,
    MAX_SYNC_INTERVAL_SECONDS,
    MAX_PARALLEL_CALLS_LIMIT,
)
from .settings_config_form import build_settings_schema

from ..const import (
    CONF_POWER_SENSORS,
    CONF_POWER_HEADROOM_W,
    CONF_POWER_HYSTERESIS_SPAN_W,
    CONF_INCREASE_THRESHOLD_DURATION,
    CONF_DECREASE_THRESHOLD_DURATION,
    CONF_SYNC_INTERVAL,
    CONF_MAX_PARALLEL_CALLS,
    CONF_SIMULATION_POWER,
)

# Numeric fields: (key, min, max, error)
_RANGE_FIELDS = [
    (CONF_POWER_HEADROOM_W, 0, MAX_HEADROOM_W, "invalid_headroom"),
    (CONF_POWER_HYSTERESIS_SPAN_W, 0, MAX_HYSTERESIS_SPAN_W, "invalid_span"),
    (
        CONF_INCREASE_THRESHOLD_DURATION,
        0,
        MAX_THRESHOLD_DURATION_SECONDS,
        "invalid_duration",
    ),
    (
        CONF_DECREASE_THRESHOLD_DURATION,
        0,
        MAX_THRESHOLD_DURATION_SECONDS,
        "invalid_duration",
    ),
    (
        CONF_SYNC_INTERVAL,
        MIN_SYNC_INTERVAL_SECONDS,
        MAX_SYNC_INTERVAL_SECONDS,
        "invalid_sync_interval",
    ),
]


class SettingsConfigMixin:
    """Mixin for the controller settings step."""

    def _validate_settings(self, user_input: Dict[str, Any]) -> Dict[str, str]:
        """Validate controller settings."""
        errors = {}

        sensors = user_input.get(CONF_POWER_SENSORS)
        if isinstance(sensors, str):
            sensors = [sensors]
        if not sensors or any("." not in str(entity_id) for entity_id in sensors):
            errors[CONF_POWER_SENSORS] = "invalid_power_sensor"

        for key, min_val, max_val, error in _RANGE_FIELDS:
            if key not in user_input:
                continue
            try:
                value = float(user_input[key])
                if not min_val <= value <= max_val:
                    errors[key] = error
            except (ValueError, TypeError) as exc:
                errors[key] = error
                log_error("[SettingsConfigMixin] Invalid %s: %s", key, user_input[key])
                log_exception(f"settings_config_{key}", exc)

        if CONF_MAX_PARALLEL_CALLS in user_input:
            try:
                value = float(user_input[CONF_MAX_PARALLEL_CALLS])
                if (
                    value != int(value)
                    or not 1 <= value <= MAX_PARALLEL_CALLS_LIMIT
                ):
                    errors[CONF_MAX_PARALLEL_CALLS] = "invalid_max_parallel_calls"
            except (ValueError, TypeError):
                errors[CONF_MAX_PARALLEL_CALLS] = "invalid_max_parallel_calls"

        return errors

    def _process_settings_input(self, user_input: Dict[str, Any]) -> Dict[str, Any]:
        """Process and clean settings input."""
        sensors = user_input.get(CONF_POWER_SENSORS)
        if isinstance(sensors, str):
            user_input[CONF_POWER_SENSORS] = [sensors]

        if CONF_MAX_PARALLEL_CALLS in user_input:
            user_input[CONF_MAX_PARALLEL_CALLS] = int(user_input[CONF_MAX_PARALLEL_CALLS])
        if user_input.get(CONF_SIMULATION_POWER) is None:
            user_input.pop(CONF_SIMULATION_POWER, None)

        return user_input

    def _get_settings_schema(
        self, defaults: Optional[Dict[str, Any]] = None
    ) -> vol.Schema:
        """Get the schema for the controller settings using settings_config_form.py."""
        return build_settings_schema(defaults)

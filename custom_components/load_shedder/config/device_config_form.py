"""Device config form builders for Load Shedder."""

from voluptuous import Schema, Required, Optional

from ..config.ui_helpers import (
    EntitySelectorBuilder,
    NumberSelectorBuilder,
    SelectSelectorBuilder,
)
from ..core.settings import MAX_DEVICE_CHANNEL

from ..const import (
    CONF_DEVICE_NAME,
    CONF_DEVICE_PROTOCOL,
    CONF_DEVICE_EXPECTED_W,
    CONF_DEVICE_ADDRESS,
    CONF_DEVICE_CHANNEL,
    CONF_DEVICE_RELAY_TYPE,
    CONF_DEVICE_ON_URL,
    CONF_DEVICE_OFF_URL,
    CONF_DEVICE_ENTITY,
    DEFAULT_RELAY_TYPE,
    DEFAULT_RPC_COMPONENT,
    DEVICE_PROTOCOLS,
    PROTOCOL_SHELLY_GEN1,
    PROTOCOL_SHELLY_RPC,
    PROTOCOL_URL,
    PROTOCOL_ENTITY,
    SUPPORTED_ENTITY_DOMAINS,
)

GEN1_RELAY_TYPES = ["relay", "light", "white", "color"]
RPC_COMPONENTS = ["Switch", "Light"]


def build_device_name_type_schema(defaults=None):
    """Builds the schema for device name, protocol and expected power."""
    if defaults is None:
        defaults = {}

    expected = defaults.get(CONF_DEVICE_EXPECTED_W)
    expected_key = (
        Optional(CONF_DEVICE_EXPECTED_W)
        if expected is None
        else Optional(CONF_DEVICE_EXPECTED_W, default=expected)
    )

    return Schema(
        {
            Required(
                CONF_DEVICE_NAME,
                default=defaults.get(CONF_DEVICE_NAME, ""),
            ): str,
            Required(
                CONF_DEVICE_PROTOCOL,
                default=defaults.get(CONF_DEVICE_PROTOCOL, PROTOCOL_SHELLY_GEN1),
            ): SelectSelectorBuilder(
                options=DEVICE_PROTOCOLS,
                translation_key=CONF_DEVICE_PROTOCOL,
            ).build(),
            expected_key: NumberSelectorBuilder(0, 100000, 1, unit="W").build(),
        }
    )


def build_device_connection_schema(protocol, defaults=None):
    """Builds the connection schema for a device protocol."""
    if defaults is None:
        defaults = {}

    if protocol in (PROTOCOL_SHELLY_GEN1, PROTOCOL_SHELLY_RPC):
        if protocol == PROTOCOL_SHELLY_GEN1:
            type_options, type_default = GEN1_RELAY_TYPES, DEFAULT_RELAY_TYPE
        else:
            type_options, type_default = RPC_COMPONENTS, DEFAULT_RPC_COMPONENT
        relay_type = defaults.get(CONF_DEVICE_RELAY_TYPE)
        if relay_type not in type_options:
            relay_type = type_default

        return Schema(
            {
                Required(
                    CONF_DEVICE_ADDRESS,
                    default=defaults.get(CONF_DEVICE_ADDRESS, ""),
                ): str,
                Required(
                    CONF_DEVICE_CHANNEL,
                    default=defaults.get(CONF_DEVICE_CHANNEL, 0),
                ): NumberSelectorBuilder(0, MAX_DEVICE_CHANNEL, 1).build(),
                Required(
                    CONF_DEVICE_RELAY_TYPE,
                    default=relay_type,
                ): SelectSelectorBuilder(options=type_options).build(),
            }
        )

    if protocol == PROTOCOL_URL:
        return Schema(
            {
                Required(
                    CONF_DEVICE_ON_URL,
                    default=defaults.get(CONF_DEVICE_ON_URL, ""),
                ): str,
                Required(
                    CONF_DEVICE_OFF_URL,
                    default=defaults.get(CONF_DEVICE_OFF_URL, ""),
                ): str,
            }
        )

    if protocol == PROTOCOL_ENTITY:
        entity = defaults.get(CONF_DEVICE_ENTITY)
        entity_key = (
            Required(CONF_DEVICE_ENTITY)
            if entity is None
            else Required(CONF_DEVICE_ENTITY, default=entity)
        )
        return Schema(
            {entity_key: EntitySelectorBuilder(SUPPORTED_ENTITY_DOMAINS).build()}
        )

    return Schema({})

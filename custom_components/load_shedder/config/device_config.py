"""Device configuration module for Load Shedder config flow."""

import uuid
from typing import Dict, Any, Optional

import voluptuous as vol

from ..core.logger import log_info, audit_action
from ..core.settings import MAX_DEVICE_CHANNEL
from .device_config_form import (
    build_device_name_type_schema,
    build_device_connection_schema,
)

from ..const import (
    CONF_DEVICE_ID,
    CONF_DEVICE_NAME,
    CONF_DEVICE_PROTOCOL,
    CONF_DEVICE_EXPECTED_W,
    CONF_DEVICE_ADDRESS,
    CONF_DEVICE_CHANNEL,
    CONF_DEVICE_RELAY_TYPE,
    CONF_DEVICE_ON_URL,
    CONF_DEVICE_OFF_URL,
    CONF_DEVICE_ENTITY,
    DEVICE_PROTOCOLS,
    PROTOCOL_SHELLY_GEN1,
    PROTOCOL_SHELLY_RPC,
    PROTOCOL_URL,
    PROTOCOL_ENTITY,
    STEP_DEVICE_NAME_TYPE,
    STEP_DEVICE_CONNECTION,
    ACTION_ADD,
    SUPPORTED_ENTITY_DOMAINS,
)

# Keys that belong to one protocol only; dropped when the protocol changes
_CONNECTION_KEYS = [
    CONF_DEVICE_ADDRESS,
    CONF_DEVICE_CHANNEL,
    CONF_DEVICE_RELAY_TYPE,
    CONF_DEVICE_ON_URL,
    CONF_DEVICE_OFF_URL,
    CONF_DEVICE_ENTITY,
]


class DeviceConfigMixin:
    """Mixin for device configuration steps."""

    def _validate_device_name_type(self, user_input: Dict[str, Any]) -> Dict[str, str]:
        """Validate device name, protocol and expected power."""
        errors = {}
        device_name = (user_input.get(CONF_DEVICE_NAME) or "").strip()
        if not device_name:
            errors[CONF_DEVICE_NAME] = "device_name_required"
        else:
            # Check for duplicates, excluding the device being edited
            device_id_to_edit = self._device_config.get(CONF_DEVICE_ID)
            for d in getattr(self, "_devices", []):
                if (
                    d.get(CONF_DEVICE_ID) != device_id_to_edit
                    and d.get(CONF_DEVICE_NAME) == device_name
                ):
                    errors[CONF_DEVICE_NAME] = "duplicate_device_name"
                    break

        if user_input.get(CONF_DEVICE_PROTOCOL) not in DEVICE_PROTOCOLS:
            errors[CONF_DEVICE_PROTOCOL] = "invalid_protocol"

        expected = user_input.get(CONF_DEVICE_EXPECTED_W)
        if expected not in (None, ""):
            try:
                if float(expected) < 0:
                    errors[CONF_DEVICE_EXPECTED_W] = "invalid_expected_power"
            except (ValueError, TypeError):
                errors[CONF_DEVICE_EXPECTED_W] = "invalid_expected_power"

        return errors

    def _validate_device_connection(
        self, protocol: str, user_input: Dict[str, Any]
    ) -> Dict[str, str]:
        """Validate the connection fields of a protocol."""
        errors = {}

        if protocol in (PROTOCOL_SHELLY_GEN1, PROTOCOL_SHELLY_RPC):
            if not (user_input.get(CONF_DEVICE_ADDRESS) or "").strip():
                errors[CONF_DEVICE_ADDRESS] = "address_required"
            try:
                channel = float(user_input.get(CONF_DEVICE_CHANNEL, 0))
                if channel != int(channel) or not 0 <= channel <= MAX_DEVICE_CHANNEL:
                    errors[CONF_DEVICE_CHANNEL] = "invalid_channel"
            except (ValueError, TypeError):
                errors[CONF_DEVICE_CHANNEL] = "invalid_channel"

        elif protocol == PROTOCOL_URL:
            for key in (CONF_DEVICE_ON_URL, CONF_DEVICE_OFF_URL):
                url = (user_input.get(key) or "").strip()
                if not url.startswith(("http://", "https://")):
                    errors[key] = "url_required"

        elif protocol == PROTOCOL_ENTITY:
            entity_id = user_input.get(CONF_DEVICE_ENTITY) or ""
            if entity_id.split(".", 1)[0] not in SUPPORTED_ENTITY_DOMAINS:
                errors[CONF_DEVICE_ENTITY] = "entity_required"

        return errors

    def _process_device_name_type_input(
        self, user_input: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Process and clean the name step input."""
        user_input[CONF_DEVICE_NAME] = user_input[CONF_DEVICE_NAME].strip()

        expected = user_input.get(CONF_DEVICE_EXPECTED_W)
        user_input[CONF_DEVICE_EXPECTED_W] = (
            None if expected in (None, "") else int(float(expected))
        )

        if user_input[CONF_DEVICE_PROTOCOL] != self._device_config.get(
            CONF_DEVICE_PROTOCOL
        ):
            for key in _CONNECTION_KEYS:
                self._device_config.pop(key, None)

        return user_input

    def _process_device_connection_input(
        self, user_input: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Process and clean the connection step input."""
        if CONF_DEVICE_ADDRESS in user_input:
            user_input[CONF_DEVICE_ADDRESS] = user_input[CONF_DEVICE_ADDRESS].strip()
        if CONF_DEVICE_CHANNEL in user_input:
            user_input[CONF_DEVICE_CHANNEL] = int(float(user_input[CONF_DEVICE_CHANNEL]))
        for key in (CONF_DEVICE_ON_URL, CONF_DEVICE_OFF_URL):
            if key in user_input:
                user_input[key] = user_input[key].strip()

        return user_input

    def _get_device_name_type_schema(
        self, defaults: Optional[Dict[str, Any]] = None
    ) -> vol.Schema:
        """Get the schema for device name and protocol configuration."""
        return build_device_name_type_schema(defaults)

    def _get_device_connection_schema(
        self, protocol: str, defaults: Optional[Dict[str, Any]] = None
    ) -> vol.Schema:
        """Get the schema for device connection configuration."""
        return build_device_connection_schema(protocol, defaults)

    async def _finalize_device_config(self):
        """Finalize device configuration, persist, and reload."""
        if self._action == ACTION_ADD:
            self._device_config[CONF_DEVICE_ID] = str(uuid.uuid4())
            self._devices.append(self._device_config)
            log_info("[DeviceConfigMixin] Added device: %s", self._device_config)
            audit_action("device_add", {"device": self._device_config})
        else:
            self._device_config[CONF_DEVICE_ID] = self._device_config.get(
                CONF_DEVICE_ID
            ) or str(uuid.uuid4())
            if self._device_index is not None:
                self._devices[self._device_index] = self._device_config
                log_info("[DeviceConfigMixin] Edited device: %s", self._device_config)
                audit_action("device_edit", {"device": self._device_config})

        self._persist()
        return await self.async_step_manage_devices()

    async def async_step_device_name_type(self, user_input=None):
        """Handle the device name and protocol step."""
        errors = {}

        if user_input is not None:
            errors = self._validate_device_name_type(user_input)

            if not errors:
                user_input = self._process_device_name_type_input(user_input)
                self._device_config.update(user_input)
                return await self.async_step_device_connection()

        schema = self._get_device_name_type_schema(self._device_config)

        return self.async_show_form(
            step_id=STEP_DEVICE_NAME_TYPE,
            data_schema=schema,
            description_placeholders={
                "action": "Add" if self._action == ACTION_ADD else "Edit",
                "device_name": self._device_config.get(CONF_DEVICE_NAME, "New Device"),
            },
            errors=errors,
        )

    async def async_step_device_connection(self, user_input=None):
        """Handle the protocol specific connection step."""
        errors = {}
        protocol = self._device_config.get(CONF_DEVICE_PROTOCOL)

        if user_input is not None:
            errors = self._validate_device_connection(protocol, user_input)

            if not errors:
                user_input = self._process_device_connection_input(user_input)
                self._device_config.update(user_input)
                return await self._finalize_device_config()

        schema = self._get_device_connection_schema(protocol, self._device_config)

        return self.async_show_form(
            step_id=STEP_DEVICE_CONNECTION,
            data_schema=schema,
            description_placeholders={
                "device_name": self._device_config.get(CONF_DEVICE_NAME, "New Device"),
                "protocol": protocol,
            },
            errors=errors,
        )

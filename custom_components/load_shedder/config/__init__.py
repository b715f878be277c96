"""Load Shedder config flow."""

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import device_registry as dr
from homeassistant.helpers.selector import selector

from . import settings_config
from . import device_config
from ..core.logger import log_debug, audit_action

from ..const import (
    DOMAIN,
    CONF_DEVICES,
    CONF_DEVICE_ID,
    CONF_DEVICE_NAME,
    CONF_ACTION,
    CONF_CONFIRM,
    STEP_USER,
    STEP_MAIN_MENU,
    STEP_SETTINGS,
    STEP_MANAGE_DEVICES,
    STEP_CONFIRM_REMOVE,
    ACTION_ADD,
    ACTION_EDIT,
    ACTION_REMOVE,
    ACTION_SETTINGS,
    ACTION_ADD_DEVICE,
    ACTION_MANAGE_DEVICES,
    ACTION_BACK,
)


class LoadShedderConfigFlow(
    settings_config.SettingsConfigMixin,
    config_entries.ConfigFlow,
    domain=DOMAIN,
):
    """Handle a config flow for Load Shedder."""

    VERSION = 1

    def __init__(self):
        """Initialize the config flow."""
        self._settings = {}

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the options flow."""
        return LoadShedderOptionsFlowHandler()

    async def async_step_user(self, user_input=None):
        """Handle the initial step - controller settings."""
        errors = {}

        if user_input is not None:
            errors = self._validate_settings(user_input)

            if not errors:
                self._settings = self._process_settings_input(user_input)
                audit_action("settings_saved", {"config": self._settings})
                return self._create_entry()

        return self.async_show_form(
            step_id=STEP_USER,
            data_schema=self._get_settings_schema(self._settings),
            errors=errors,
        )

    def _create_entry(self):
        """Create the config entry."""
        data = self._settings.copy()
        data[CONF_DEVICES] = []

        return self.async_create_entry(
            title="Load Shedder",
            data=data,
        )


class LoadShedderOptionsFlowHandler(
    settings_config.SettingsConfigMixin,
    device_config.DeviceConfigMixin,
    config_entries.OptionsFlow,
):
    """Handle options flow for Load Shedder."""

    def __init__(self):
        """Initialize options flow."""
        super().__init__()
        self._settings = {}
        self._devices = []
        self._device_config = {}
        self._device_index = None
        self._action = None
        self._device_to_remove = None

    async def async_step_init(self, _user_input=None):
        """Manage the options for the custom component."""
        self._settings = {
            k: v for k, v in self.config_entry.data.items() if k != CONF_DEVICES
        }
        self._devices = [
            dict(device) for device in self.config_entry.data.get(CONF_DEVICES, [])
        ]

        log_debug("Loaded %d devices", len(self._devices))
        return await self.async_step_main_menu()

    async def async_step_main_menu(self, user_input=None):
        """Handle the main menu step."""
        if user_input is not None:
            action = user_input.get(CONF_ACTION, "")

            if action == ACTION_SETTINGS:
                return await self.async_step_settings()
            if action == ACTION_MANAGE_DEVICES:
                return await self.async_step_manage_devices()

        return self.async_show_form(
            step_id=STEP_MAIN_MENU,
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_ACTION,
                        default=ACTION_SETTINGS,
                    ): selector(
                        {
                            "select": {
                                "options": [ACTION_SETTINGS, ACTION_MANAGE_DEVICES],
                                "translation_key": "main_menu_action",
                            }
                        }
                    ),
                }
            ),
            description_placeholders={"devices_count": str(len(self._devices))},
        )

    async def async_step_settings(self, user_input=None):
        """Handle the settings step."""
        errors = {}

        if user_input is not None:
            errors = self._validate_settings(user_input)

            if not errors:
                self._settings.update(self._process_settings_input(user_input))
                audit_action("settings_saved", {"config": self._settings})
                return await self._save_and_return()

        return self.async_show_form(
            step_id=STEP_SETTINGS,
            data_schema=self._get_settings_schema(self._settings),
            errors=errors,
        )

    async def async_step_manage_devices(self, user_input=None):
        """Handle device management step."""
        errors = {}

        if user_input is not None:
            action = user_input.get(CONF_ACTION, "")
            selected_device_id = user_input.get(CONF_DEVICE_ID)

            if action == ACTION_ADD_DEVICE:
                self._action = ACTION_ADD
                self._device_config = {}
                self._device_index = None
                return await self.async_step_device_name_type()

            if action == ACTION_EDIT:
                self._action = ACTION_EDIT
                if selected_device_id:
                    self._device_index = next(
                        (
                            i
                            for i, d in enumerate(self._devices)
                            if d[CONF_DEVICE_ID] == selected_device_id
                        ),
                        None,
                    )
                    if self._device_index is not None:
                        self._device_config = self._devices[self._device_index].copy()
                        return await self.async_step_device_name_type()
                errors[CONF_DEVICE_ID] = "device_name_required"

            if action == ACTION_REMOVE:
                if selected_device_id:
                    self._device_to_remove = selected_device_id
                    return await self.async_step_confirm_remove()
                errors[CONF_DEVICE_ID] = "device_name_required"

            if action == ACTION_BACK:
                return await self.async_step_main_menu()

        device_options = {d[CONF_DEVICE_ID]: d[CONF_DEVICE_NAME] for d in self._devices}

        schema_dict = {}

        if self._devices:
            schema_dict[
                vol.Required(
                    CONF_DEVICE_ID,
                    default=self._devices[0][CONF_DEVICE_ID],
                )
            ] = vol.In(device_options)

        schema_dict[
            vol.Required(
                CONF_ACTION,
                default=ACTION_ADD_DEVICE if not self._devices else ACTION_EDIT,
            )
        ] = selector(
            {
                "select": {
                    "options": [ACTION_ADD_DEVICE, ACTION_EDIT, ACTION_REMOVE, ACTION_BACK],
                    "translation_key": "manage_devices_action",
                }
            }
        )

        devices_list_str = ", ".join([d[CONF_DEVICE_NAME] for d in self._devices])
        return self.async_show_form(
            step_id=STEP_MANAGE_DEVICES,
            data_schema=vol.Schema(schema_dict),
            description_placeholders={
                "devices_count": str(len(self._devices)),
                "devices_list": devices_list_str or "None",
            },
            errors=errors,
        )

    async def async_step_confirm_remove(self, user_input=None):
        """Confirmation step for device removal."""
        if user_input is not None:
            if user_input.get(CONF_CONFIRM):
                # Remove device from device registry
                device_registry = dr.async_get(self.hass)
                device_to_remove = device_registry.async_get_device(
                    identifiers={(DOMAIN, self._device_to_remove)}
                )
                if device_to_remove:
                    device_registry.async_remove_device(device_to_remove.id)

                audit_action(
                    "device_remove",
                    {"device": self._get_device_name(self._device_to_remove)},
                )
                self._devices = [
                    d
                    for d in self._devices
                    if d[CONF_DEVICE_ID] != self._device_to_remove
                ]
                self._persist()

            return await self.async_step_manage_devices()

        return self.async_show_form(
            step_id=STEP_CONFIRM_REMOVE,
            data_schema=vol.Schema({vol.Required(CONF_CONFIRM, default=False): bool}),
            description_placeholders={
                "device_name": self._get_device_name(self._device_to_remove)
            },
        )

    def _get_device_name(self, device_id):
        """Get device name by its ID."""
        for device in self._devices:
            if device[CONF_DEVICE_ID] == device_id:
                return device.get(CONF_DEVICE_NAME, "Unnamed device")
        return "Unknown device"

    def _persist(self):
        """Write settings and devices to the config entry; the entry reloads."""
        data = dict(self.config_entry.data)
        data.update(self._settings)
        data[CONF_DEVICES] = self._devices
        log_debug(
            "--- CONFIG FLOW SAVE ---: Saving %d devices. Data: %s",
            len(self._devices),
            data,
        )
        self.hass.config_entries.async_update_entry(self.config_entry, data=data)

    async def _save_and_return(self):
        """Save configuration and return to main menu."""
        self._persist()
        return await self.async_step_main_menu()


@callback
def async_get_options_flow(config_entry):
    """Get the options flow."""
    return LoadShedderOptionsFlowHandler()


# Export classes for Home Assistant
__all__ = ["LoadShedderConfigFlow", "async_get_options_flow"]

"""Exceptions raised by the Load Shedder controller."""

from homeassistant.exceptions import HomeAssistantError


class LoadShedderError(HomeAssistantError):
    """Base error for the Load Shedder integration."""


class ConfigurationError(LoadShedderError):
    """The device catalog or controller settings are invalid."""


class UnknownDeviceError(LoadShedderError):
    """A device name does not exist in the catalog."""

    def __init__(self, name):
        super().__init__(f"Unknown device '{name}'")
        self.name = name


class InvalidDirectionError(LoadShedderError):
    """A command direction is not one of on/off."""

    def __init__(self, direction):
        super().__init__(f"Invalid command direction: {direction!r}")
        self.direction = direction

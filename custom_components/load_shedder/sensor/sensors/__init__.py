"""Load Shedder sensor classes."""

from .base import BaseLoadShedderSensor
from .surplus import LoadShedderSurplusSensor
from .expected_draw import LoadShedderExpectedDrawSensor
from .device_state import LoadShedderDeviceStateSensor

__all__ = [
    "BaseLoadShedderSensor",
    "LoadShedderSurplusSensor",
    "LoadShedderExpectedDrawSensor",
    "LoadShedderDeviceStateSensor",
]

import sys
import unittest.mock
import pytest

from pytest_homeassistant_custom_component.common import MockConfigEntry
from homeassistant.const import CONF_NAME
import homeassistant.util.dt as dt_util

from tests.const import MOCK_CONFIG

from custom_components.load_shedder.const import (
    DOMAIN,
    CONF_DEVICES,
    CONF_DEVICE_ID,
    CONF_DEVICE_NAME,
    CONF_DEVICE_PROTOCOL,
    CONF_DEVICE_EXPECTED_W,
    CONF_DEVICE_ENTITY,
    PROTOCOL_ENTITY,
)
from custom_components.load_shedder.core.models import Device, EntityTarget

# Mock the 'resource' module on Windows
if sys.platform == "win32":
    sys.modules["resource"] = unittest.mock.MagicMock()


# Automatically enable custom integrations defined in the test environment
@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    yield


@pytest.fixture
def patch_time(freezer, monkeypatch):
    """Make dt_util follow the frozen clock."""
    monkeypatch.setattr(
        dt_util, "utcnow", lambda: freezer.time_to_freeze.replace(tzinfo=dt_util.UTC)
    )
    monkeypatch.setattr(
        dt_util, "now", lambda: freezer.time_to_freeze.replace(tzinfo=dt_util.UTC)
    )


def create_test_config_entry(extra_data=None, **kwargs):
    """Create a test config entry for Load Shedder."""
    data = {
        CONF_NAME: "Test Load Shedder",
        **MOCK_CONFIG,
        CONF_DEVICES: [],
    }
    if extra_data:
        data.update(extra_data)

    config = {
        "domain": DOMAIN,
        "title": "Test Load Shedder",
        "data": data,
        "version": 1,
        "entry_id": "test_entry_id",
        "unique_id": "test_unique_id",
        "source": "user",
        "options": {},
        **kwargs,
    }

    return MockConfigEntry(**config)


def create_test_device(device_name, expected_power_w=1000, extra_data=None):
    """Create an entity device configuration."""
    data = {
        CONF_DEVICE_ID: device_name,
        CONF_DEVICE_NAME: device_name,
        CONF_DEVICE_PROTOCOL: PROTOCOL_ENTITY,
        CONF_DEVICE_EXPECTED_W: expected_power_w,
        CONF_DEVICE_ENTITY: f"switch.{device_name}",
    }

    if extra_data:
        data.update(extra_data)

    return data


def make_device(name, expected_power_w):
    """Create a catalog device switched through a switch entity."""
    return Device(
        name=name,
        expected_power_w=expected_power_w,
        target=EntityTarget(entity_id=f"switch.{name.lower()}"),
    )

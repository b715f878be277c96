"""Tests for the Load Shedder services."""

import pytest

from homeassistant.core import HomeAssistant

from conftest import create_test_config_entry
from tests.const import MOCK_CONFIG

from custom_components.load_shedder.const import (
    DOMAIN,
    SERVICE_FORCE_RESYNC,
    SERVICE_SET_SIMULATION,
    CONF_DEVICES,
    CONF_DEVICE_ID,
    CONF_DEVICE_NAME,
    CONF_DEVICE_PROTOCOL,
    CONF_DEVICE_EXPECTED_W,
    CONF_DEVICE_ADDRESS,
    CONF_DEVICE_CHANNEL,
    CONF_DEVICE_RELAY_TYPE,
    PROTOCOL_SHELLY_GEN1,
)

GRID_SENSOR = "sensor.grid_power_l1"
BOILER_OFF = "http://10.0.0.5/relay/0?turn=off"
PUMP_OFF = "http://10.0.0.6/relay/0?turn=off"


def _shelly_device(name, address, expected_power_w):
    return {
        CONF_DEVICE_ID: name,
        CONF_DEVICE_NAME: name,
        CONF_DEVICE_PROTOCOL: PROTOCOL_SHELLY_GEN1,
        CONF_DEVICE_EXPECTED_W: expected_power_w,
        CONF_DEVICE_ADDRESS: address,
        CONF_DEVICE_CHANNEL: 0,
        CONF_DEVICE_RELAY_TYPE: "relay",
    }


@pytest.fixture
async def config_entry(hass: HomeAssistant, aioclient_mock):
    """Set up an entry with two Shelly relays that start switched off."""
    aioclient_mock.get(BOILER_OFF, status=200)
    aioclient_mock.get(PUMP_OFF, status=200)

    config_data = {
        **MOCK_CONFIG,
        CONF_DEVICES: [
            _shelly_device("boiler", "10.0.0.5", 1000),
            _shelly_device("pump", "10.0.0.6", 800),
        ],
    }
    entry = create_test_config_entry(config_data)
    hass.states.async_set(GRID_SENSOR, "0")

    await hass.config_entries.async_add(entry)
    await hass.async_block_till_done()
    assert aioclient_mock.call_count == 2

    yield entry

    await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()


@pytest.mark.asyncio
async def test_force_resync_all(hass: HomeAssistant, aioclient_mock, config_entry):
    """Test the force_resync service without a device name."""
    assert hass.services.has_service(DOMAIN, SERVICE_FORCE_RESYNC)

    await hass.services.async_call(DOMAIN, SERVICE_FORCE_RESYNC, {}, blocking=True)
    await hass.async_block_till_done()

    # Nothing is sent until the next power sample
    assert aioclient_mock.call_count == 2

    hass.states.async_set(GRID_SENSOR, "5")
    await hass.async_block_till_done()

    assert aioclient_mock.call_count == 4
    urls = [str(url) for _, url, _, _ in aioclient_mock.mock_calls[2:]]
    assert sorted(urls) == sorted([BOILER_OFF, PUMP_OFF])


@pytest.mark.asyncio
async def test_force_resync_single_device(
    hass: HomeAssistant, aioclient_mock, config_entry
):
    """Test the force_resync service for one device."""
    await hass.services.async_call(
        DOMAIN,
        SERVICE_FORCE_RESYNC,
        {CONF_DEVICE_NAME: "pump"},
        blocking=True,
    )
    hass.states.async_set(GRID_SENSOR, "5")
    await hass.async_block_till_done()

    assert aioclient_mock.call_count == 3
    _, url, _, _ = aioclient_mock.mock_calls[-1]
    assert str(url) == PUMP_OFF


@pytest.mark.asyncio
async def test_force_resync_unknown_device(
    hass: HomeAssistant, aioclient_mock, config_entry
):
    """An unknown device name is logged and ignored."""
    await hass.services.async_call(
        DOMAIN,
        SERVICE_FORCE_RESYNC,
        {CONF_DEVICE_NAME: "pool"},
        blocking=True,
    )
    hass.states.async_set(GRID_SENSOR, "5")
    await hass.async_block_till_done()

    assert aioclient_mock.call_count == 2


@pytest.mark.asyncio
async def test_set_simulation(hass: HomeAssistant, aioclient_mock, config_entry):
    """Simulation overrides the meter and keeps commands off the network."""
    await hass.services.async_call(
        DOMAIN,
        SERVICE_SET_SIMULATION,
        {"enabled": True, "power": -2000},
        blocking=True,
    )
    await hass.async_block_till_done()

    entry_data = hass.data[DOMAIN][config_entry.entry_id]
    assert entry_data["executor"].simulate
    assert entry_data["controller"].aggregator.current_surplus() == -2000

    state = hass.states.get(f"sensor.load_shedder_{config_entry.entry_id}_surplus")
    assert float(state.state) == -2000
    assert state.attributes["simulation"] is True

    # A resync would normally hit the network
    await hass.services.async_call(DOMAIN, SERVICE_FORCE_RESYNC, {}, blocking=True)
    hass.states.async_set(GRID_SENSOR, "5")
    await hass.async_block_till_done()
    assert aioclient_mock.call_count == 2

    await hass.services.async_call(
        DOMAIN,
        SERVICE_SET_SIMULATION,
        {"enabled": False},
        blocking=True,
    )
    await hass.async_block_till_done()

    assert not entry_data["executor"].simulate
    assert entry_data["controller"].aggregator.current_surplus() == 5

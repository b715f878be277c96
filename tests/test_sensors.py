"""Tests for the Load Shedder sensors."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from homeassistant.core import HomeAssistant

from conftest import create_test_config_entry
from tests.const import MOCK_CONFIG_WITH_DEVICES

from custom_components.load_shedder.const import DOMAIN
from custom_components.load_shedder.sensor.sensors import (
    LoadShedderSurplusSensor,
    LoadShedderExpectedDrawSensor,
)

GRID_SENSOR = "sensor.grid_power_l1"
PREFIX = "sensor.load_shedder_test_entry_id"


@pytest.mark.asyncio
async def test_sensors_are_created(hass: HomeAssistant) -> None:
    """Test that the sensors are created."""
    config_entry = create_test_config_entry(MOCK_CONFIG_WITH_DEVICES)
    await hass.config_entries.async_add(config_entry)
    await hass.async_block_till_done()

    try:
        assert hass.states.get(f"{PREFIX}_surplus") is not None
        assert hass.states.get(f"{PREFIX}_expected_draw") is not None

        heater = hass.states.get(f"{PREFIX}_heater_presumed_state")
        boiler = hass.states.get(f"{PREFIX}_boiler_presumed_state")
        assert heater is not None
        assert boiler is not None
        assert heater.attributes["protocol"] == "entity"
        assert heater.attributes["expected_power_w"] == 3000
        assert boiler.attributes["protocol"] == "shelly_gen1"
    finally:
        await hass.config_entries.async_unload(config_entry.entry_id)


@pytest.mark.asyncio
async def test_sensors_follow_controller(hass: HomeAssistant, aioclient_mock) -> None:
    """Sensor states are refreshed after every control tick."""
    aioclient_mock.get("http://10.0.0.5/relay/0?turn=off", status=200)
    config_entry = create_test_config_entry(MOCK_CONFIG_WITH_DEVICES)

    with patch(
        "homeassistant.core.ServiceRegistry.async_call", new_callable=AsyncMock
    ):
        try:
            await hass.config_entries.async_add(config_entry)
            await hass.async_block_till_done()

            hass.states.async_set(GRID_SENSOR, "-1800")
            await hass.async_block_till_done()

            surplus = hass.states.get(f"{PREFIX}_surplus")
            assert float(surplus.state) == -1800
            assert surplus.attributes["channels"] == {GRID_SENSOR: -1800.0}
            assert surplus.attributes["simulation"] is False

            draw = hass.states.get(f"{PREFIX}_expected_draw")
            assert draw.state == "0"
            assert draw.attributes["desired_power_draw"] == 1000
            assert draw.attributes["pending_transitions"][0]["target_draw"] == 1000

            heater = hass.states.get(f"{PREFIX}_heater_presumed_state")
            boiler = hass.states.get(f"{PREFIX}_boiler_presumed_state")
            assert heater.state == "off"
            assert boiler.state == "off"
            assert boiler.attributes["allocated"] == "off"
        finally:
            await hass.config_entries.async_unload(config_entry.entry_id)


@pytest.mark.asyncio
async def test_sensor_keeps_last_value_on_error(hass: HomeAssistant) -> None:
    """A broken snapshot leaves the previous value in place."""
    controller = MagicMock()
    controller.snapshot.return_value = {
        "surplus": -500.04,
        "uncontrolled_surplus": -500.04,
        "channels": {},
        "simulation": False,
    }
    hass.data[DOMAIN] = {"entry": {"controller": controller}}

    sensor = LoadShedderSurplusSensor(hass, "entry")
    assert sensor.native_value == -500.0

    controller.snapshot.return_value = {}
    assert sensor.native_value == -500.0


@pytest.mark.asyncio
async def test_sensor_without_controller(hass: HomeAssistant) -> None:
    sensor = LoadShedderExpectedDrawSensor(hass, "missing")

    assert sensor.entity_id == "sensor.load_shedder_missing_expected_draw"
    assert sensor.native_value is None

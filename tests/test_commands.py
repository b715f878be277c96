"""Tests for command building and the command executor."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from homeassistant.exceptions import HomeAssistantError

from custom_components.load_shedder.core.commands import (
    CommandExecutor,
    HttpCommand,
    ServiceCommand,
    build_command,
)
from custom_components.load_shedder.core.exceptions import InvalidDirectionError
from custom_components.load_shedder.core.models import (
    CommandReason,
    CommandRequest,
    Device,
    Direction,
    EntityTarget,
    ShellyGen1Target,
    ShellyRpcTarget,
    UrlTarget,
)

GEN1_TARGET = ShellyGen1Target("10.0.0.5", "relay", 1)


def _request(target, direction=Direction.ON):
    device = Device(name="Boiler", expected_power_w=1000, target=target)
    return CommandRequest(device=device, direction=direction, reason=CommandReason.CHANGE)


@pytest.mark.parametrize(
    "target,direction,expected",
    [
        (GEN1_TARGET, Direction.ON, HttpCommand("http://10.0.0.5/relay/1?turn=on")),
        (
            ShellyGen1Target("10.0.0.6", "light", 0),
            Direction.OFF,
            HttpCommand("http://10.0.0.6/light/0?turn=off"),
        ),
        (
            ShellyRpcTarget("10.0.0.7", "Switch", 2),
            Direction.ON,
            HttpCommand("http://10.0.0.7/rpc/Switch.Set?id=2&on=true"),
        ),
        (
            ShellyRpcTarget("10.0.0.7", "Switch", 2),
            Direction.OFF,
            HttpCommand("http://10.0.0.7/rpc/Switch.Set?id=2&on=false"),
        ),
        (
            UrlTarget("http://fan/on", "http://fan/off"),
            Direction.OFF,
            HttpCommand("http://fan/off"),
        ),
        (
            EntityTarget("light.garage"),
            Direction.ON,
            ServiceCommand("light", "turn_on", "light.garage"),
        ),
        (
            EntityTarget("switch.heater"),
            Direction.OFF,
            ServiceCommand("switch", "turn_off", "switch.heater"),
        ),
    ],
)
def test_build_command(target, direction, expected):
    assert build_command(target, direction) == expected


def test_build_command_rejects_invalid_direction():
    with pytest.raises(InvalidDirectionError):
        build_command(GEN1_TARGET, "toggle")


@pytest.mark.asyncio
async def test_http_command_success(hass, aioclient_mock):
    aioclient_mock.get("http://10.0.0.5/relay/1?turn=on", status=200)
    executor = CommandExecutor(hass)

    result = await executor.async_issue(_request(GEN1_TARGET))

    assert result.success
    assert aioclient_mock.call_count == 1


@pytest.mark.asyncio
async def test_http_error_status_is_reported(hass, aioclient_mock):
    aioclient_mock.get("http://10.0.0.5/relay/1?turn=off", status=500)
    executor = CommandExecutor(hass)

    result = await executor.async_issue(_request(GEN1_TARGET, Direction.OFF))

    assert not result.success
    assert result.error_code == 500


@pytest.mark.asyncio
async def test_http_timeout_is_reported(hass, aioclient_mock):
    aioclient_mock.get("http://10.0.0.5/relay/1?turn=on", exc=asyncio.TimeoutError())
    executor = CommandExecutor(hass, timeout=1)

    result = await executor.async_issue(_request(GEN1_TARGET))

    assert not result.success
    assert result.error_code is None
    assert "Timeout" in result.error_message


@pytest.mark.asyncio
async def test_http_connection_error_is_reported(hass, aioclient_mock):
    aioclient_mock.get(
        "http://10.0.0.5/relay/1?turn=on",
        exc=aiohttp.ClientConnectionError("connection refused"),
    )
    executor = CommandExecutor(hass)

    result = await executor.async_issue(_request(GEN1_TARGET))

    assert not result.success
    assert "connection refused" in result.error_message


@pytest.mark.asyncio
async def test_entity_command_calls_service(hass):
    executor = CommandExecutor(hass)

    with patch(
        "homeassistant.core.ServiceRegistry.async_call", new_callable=AsyncMock
    ) as mock_call:
        result = await executor.async_issue(_request(EntityTarget("switch.heater")))

    assert result.success
    mock_call.assert_awaited_once_with(
        "switch", "turn_on", {"entity_id": "switch.heater"}, blocking=True
    )


@pytest.mark.asyncio
async def test_entity_command_failure_is_reported(hass):
    executor = CommandExecutor(hass)

    with patch(
        "homeassistant.core.ServiceRegistry.async_call",
        new_callable=AsyncMock,
        side_effect=HomeAssistantError("entity unavailable"),
    ):
        result = await executor.async_issue(
            _request(EntityTarget("switch.heater"), Direction.OFF)
        )

    assert not result.success
    assert result.error_message == "entity unavailable"


@pytest.mark.asyncio
async def test_simulation_sends_nothing(hass, aioclient_mock):
    executor = CommandExecutor(hass, simulate=True)

    with patch(
        "homeassistant.core.ServiceRegistry.async_call", new_callable=AsyncMock
    ) as mock_call:
        http_result = await executor.async_issue(_request(GEN1_TARGET))
        entity_result = await executor.async_issue(
            _request(EntityTarget("switch.heater"))
        )

    assert http_result.success
    assert entity_result.success
    assert aioclient_mock.call_count == 0
    mock_call.assert_not_called()

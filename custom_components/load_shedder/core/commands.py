"""Build and issue device commands for each supported protocol."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Union

import aiohttp

from homeassistant.core import HomeAssistant
from homeassistant.const import ATTR_ENTITY_ID, SERVICE_TURN_ON, SERVICE_TURN_OFF
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .exceptions import InvalidDirectionError
from .logger import log_debug, log_info
from .models import (
    CommandRequest,
    CommandResult,
    DeviceTarget,
    Direction,
    EntityTarget,
    ShellyGen1Target,
    ShellyRpcTarget,
    UrlTarget,
)
from .settings import COMMAND_TIMEOUT_SECONDS, HTTP_SCHEME, LOG_DEVICE_ACTIONS


@dataclass(frozen=True)
class HttpCommand:
    """An HTTP GET that switches a device."""

    url: str


@dataclass(frozen=True)
class ServiceCommand:
    """A Home Assistant service call that switches an entity."""

    domain: str
    service: str
    entity_id: str


Command = Union[HttpCommand, ServiceCommand]


def build_command(target: DeviceTarget, direction: Direction) -> Command:
    """Translate a device target and direction into a concrete command."""
    if not isinstance(direction, Direction):
        raise InvalidDirectionError(direction)

    match target:
        case ShellyGen1Target(address=address, relay_type=relay_type, channel=channel):
            return HttpCommand(
                f"{HTTP_SCHEME}://{address}/{relay_type}/{channel}?turn={direction}"
            )
        case ShellyRpcTarget(address=address, component=component, channel=channel):
            on = "true" if direction == Direction.ON else "false"
            return HttpCommand(
                f"{HTTP_SCHEME}://{address}/rpc/{component}.Set?id={channel}&on={on}"
            )
        case UrlTarget(on_url=on_url, off_url=off_url):
            return HttpCommand(on_url if direction == Direction.ON else off_url)
        case EntityTarget(entity_id=entity_id):
            return ServiceCommand(
                domain=entity_id.split(".", 1)[0],
                service=SERVICE_TURN_ON if direction == Direction.ON else SERVICE_TURN_OFF,
                entity_id=entity_id,
            )
    raise TypeError(f"Unsupported device target: {target!r}")


class CommandExecutor:
    """Issue commands over HTTP or through the Home Assistant service registry."""

    def __init__(
        self,
        hass: HomeAssistant,
        timeout: float = COMMAND_TIMEOUT_SECONDS,
        simulate: bool = False,
    ):
        self._hass = hass
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self.simulate = simulate

    async def async_issue(self, request: CommandRequest) -> CommandResult:
        """Issue one command and report its outcome."""
        device = request.device
        try:
            command = build_command(device.target, request.direction)
        except InvalidDirectionError as exc:
            return CommandResult(success=False, error_message=str(exc))

        if LOG_DEVICE_ACTIONS:
            log_info(f"Turn {device.name} {request.direction} ({request.reason})")

        if self.simulate:
            log_info(f"Simulation active, not sending {command}")
            return CommandResult(success=True)

        if isinstance(command, ServiceCommand):
            return await self._async_call_service(command)
        return await self._async_fetch(command)

    async def _async_fetch(self, command: HttpCommand) -> CommandResult:
        session = async_get_clientsession(self._hass)
        log_debug(f"GET {command.url}")
        try:
            async with session.get(command.url, timeout=self._timeout) as response:
                if response.status >= 400:
                    return CommandResult(
                        success=False,
                        error_code=response.status,
                        error_message=f"HTTP {response.status} from {command.url}",
                    )
        except asyncio.TimeoutError:
            return CommandResult(
                success=False, error_message=f"Timeout requesting {command.url}"
            )
        except aiohttp.ClientError as exc:
            return CommandResult(success=False, error_message=str(exc))
        return CommandResult(success=True)

    async def _async_call_service(self, command: ServiceCommand) -> CommandResult:
        log_debug(
            f"Calling service {command.domain}.{command.service} for {command.entity_id}"
        )
        try:
            await self._hass.services.async_call(
                command.domain,
                command.service,
                {ATTR_ENTITY_ID: command.entity_id},
                blocking=True,
            )
        except HomeAssistantError as exc:
            return CommandResult(success=False, error_message=str(exc))
        return CommandResult(success=True)

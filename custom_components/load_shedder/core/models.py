"""Data model for the Load Shedder controller."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any, Dict, List, Mapping, Optional, Union

from .exceptions import ConfigurationError

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
    CONF_POWER_HEADROOM_W,
    CONF_POWER_HYSTERESIS_SPAN_W,
    CONF_INCREASE_THRESHOLD_DURATION,
    CONF_DECREASE_THRESHOLD_DURATION,
    CONF_SYNC_INTERVAL,
    CONF_INVERT_POWER_READINGS,
    CONF_MAX_PARALLEL_CALLS,
    CONF_SIMULATION_ENABLED,
    CONF_SIMULATION_POWER,
    DEFAULT_POWER_HEADROOM_W,
    DEFAULT_POWER_HYSTERESIS_SPAN_W,
    DEFAULT_INCREASE_THRESHOLD_DURATION,
    DEFAULT_DECREASE_THRESHOLD_DURATION,
    DEFAULT_SYNC_INTERVAL,
    DEFAULT_MAX_PARALLEL_CALLS,
    DEFAULT_SIMULATION_POWER,
    DEFAULT_RELAY_TYPE,
    DEFAULT_RPC_COMPONENT,
    PROTOCOL_SHELLY_GEN1,
    PROTOCOL_SHELLY_RPC,
    PROTOCOL_URL,
    PROTOCOL_ENTITY,
)


class Direction(StrEnum):
    """Commanded relay direction."""

    ON = "on"
    OFF = "off"


class PresumedState(StrEnum):
    """The controller's belief about a device's last commanded state."""

    UNKNOWN = "unknown"
    ON = "on"
    OFF = "off"


class StepDirection(StrEnum):
    """Direction of a pending allocation change."""

    STEP_UP = "step_up"
    STEP_DOWN = "step_down"


class CommandReason(StrEnum):
    """Why a command is being sent."""

    CHANGE = "change"
    RESYNC = "resync"


@dataclass(frozen=True)
class ShellyGen1Target:
    """Shelly gen1 relay, switched with /relay/<channel>?turn=on|off."""

    address: str
    relay_type: str = DEFAULT_RELAY_TYPE
    channel: int = 0


@dataclass(frozen=True)
class ShellyRpcTarget:
    """Shelly gen2+ device, switched through the RPC <component>.Set call."""

    address: str
    component: str = DEFAULT_RPC_COMPONENT
    channel: int = 0


@dataclass(frozen=True)
class UrlTarget:
    """Arbitrary device switched by fetching one URL per direction."""

    on_url: str
    off_url: str


@dataclass(frozen=True)
class EntityTarget:
    """Home Assistant entity switched with turn_on/turn_off."""

    entity_id: str


DeviceTarget = Union[ShellyGen1Target, ShellyRpcTarget, UrlTarget, EntityTarget]


@dataclass(eq=False)
class Device:
    """A controllable load and its presumed state."""

    name: str
    expected_power_w: Optional[int]
    target: DeviceTarget
    device_id: Optional[str] = None
    presumed_state: PresumedState = PresumedState.UNKNOWN
    requires_resync: bool = False

    @property
    def is_allocatable(self) -> bool:
        """Return True if the device has a usable expected power."""
        return self.expected_power_w is not None and self.expected_power_w > 0


@dataclass(frozen=True)
class Allocation:
    """Desired on/off assignment for the catalog."""

    states: Mapping[str, Direction]
    expected_power_draw: int

    @classmethod
    def all_off(cls, catalog: List[Device]) -> "Allocation":
        """Return the allocation with every allocatable device off."""
        return cls(
            states={d.name: Direction.OFF for d in catalog if d.is_allocatable},
            expected_power_draw=0,
        )

    @property
    def devices_on(self) -> List[str]:
        """Names of devices switched on, in catalog order."""
        return [name for name, state in self.states.items() if state == Direction.ON]

    def as_dict(self) -> Dict[str, str]:
        """Return a JSON friendly representation of the states."""
        return {name: str(state) for name, state in self.states.items()}


@dataclass
class PendingTransition:
    """A candidate allocation awaiting confirmation."""

    target_draw: int
    direction: StepDirection
    created_at: datetime
    activation_time: datetime
    allocation: Allocation

    def as_dict(self) -> Dict[str, Any]:
        """Return a JSON friendly representation of the transition."""
        return {
            "target_draw": self.target_draw,
            "direction": str(self.direction),
            "created_at": self.created_at.isoformat(),
            "activation_time": self.activation_time.isoformat(),
            "devices_on": self.allocation.devices_on,
        }


@dataclass(frozen=True)
class CommandRequest:
    """One outbound device command."""

    device: Device
    direction: Direction
    reason: CommandReason = CommandReason.CHANGE


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an issued command."""

    success: bool
    error_code: Optional[int] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class ControllerSettings:
    """Read-only tuning values consumed by the controller."""

    power_headroom_w: float = DEFAULT_POWER_HEADROOM_W
    power_hysteresis_span_w: float = DEFAULT_POWER_HYSTERESIS_SPAN_W
    increase_threshold_duration: timedelta = timedelta(
        seconds=DEFAULT_INCREASE_THRESHOLD_DURATION
    )
    decrease_threshold_duration: timedelta = timedelta(
        seconds=DEFAULT_DECREASE_THRESHOLD_DURATION
    )
    sync_interval: timedelta = timedelta(seconds=DEFAULT_SYNC_INTERVAL)
    invert_power_readings: bool = False
    max_parallel_calls: int = DEFAULT_MAX_PARALLEL_CALLS
    simulation_enabled: bool = False
    simulation_power: float = DEFAULT_SIMULATION_POWER

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ControllerSettings":
        """Build settings from config entry data."""
        try:
            settings = cls(
                power_headroom_w=float(
                    config.get(CONF_POWER_HEADROOM_W, DEFAULT_POWER_HEADROOM_W)
                ),
                power_hysteresis_span_w=float(
                    config.get(
                        CONF_POWER_HYSTERESIS_SPAN_W, DEFAULT_POWER_HYSTERESIS_SPAN_W
                    )
                ),
                increase_threshold_duration=timedelta(
                    seconds=float(
                        config.get(
                            CONF_INCREASE_THRESHOLD_DURATION,
                            DEFAULT_INCREASE_THRESHOLD_DURATION,
                        )
                    )
                ),
                decrease_threshold_duration=timedelta(
                    seconds=float(
                        config.get(
                            CONF_DECREASE_THRESHOLD_DURATION,
                            DEFAULT_DECREASE_THRESHOLD_DURATION,
                        )
                    )
                ),
                sync_interval=timedelta(
                    seconds=float(config.get(CONF_SYNC_INTERVAL, DEFAULT_SYNC_INTERVAL))
                ),
                invert_power_readings=bool(config.get(CONF_INVERT_POWER_READINGS, False)),
                max_parallel_calls=int(
                    config.get(CONF_MAX_PARALLEL_CALLS, DEFAULT_MAX_PARALLEL_CALLS)
                ),
                simulation_enabled=bool(config.get(CONF_SIMULATION_ENABLED, False)),
                simulation_power=float(
                    config.get(CONF_SIMULATION_POWER, DEFAULT_SIMULATION_POWER) or 0.0
                ),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid controller settings: {exc}") from exc

        if settings.max_parallel_calls < 1:
            raise ConfigurationError("max_parallel_calls must be at least 1")
        if settings.sync_interval.total_seconds() <= 0:
            raise ConfigurationError("sync_interval must be positive")
        return settings


def build_target(device_config: Mapping[str, Any]) -> DeviceTarget:
    """Build the protocol target for one configured device."""
    protocol = device_config.get(CONF_DEVICE_PROTOCOL)
    name = device_config.get(CONF_DEVICE_NAME)

    if protocol in (PROTOCOL_SHELLY_GEN1, PROTOCOL_SHELLY_RPC):
        address = (device_config.get(CONF_DEVICE_ADDRESS) or "").strip()
        if not address:
            raise ConfigurationError(f"Device '{name}' has no address")
        try:
            channel = int(device_config.get(CONF_DEVICE_CHANNEL, 0) or 0)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Device '{name}' has an invalid channel") from exc
        if protocol == PROTOCOL_SHELLY_GEN1:
            return ShellyGen1Target(
                address=address,
                relay_type=device_config.get(CONF_DEVICE_RELAY_TYPE) or DEFAULT_RELAY_TYPE,
                channel=channel,
            )
        return ShellyRpcTarget(
            address=address,
            component=device_config.get(CONF_DEVICE_RELAY_TYPE) or DEFAULT_RPC_COMPONENT,
            channel=channel,
        )

    if protocol == PROTOCOL_URL:
        on_url = device_config.get(CONF_DEVICE_ON_URL)
        off_url = device_config.get(CONF_DEVICE_OFF_URL)
        if not on_url or not off_url:
            raise ConfigurationError(f"Device '{name}' needs both on and off URLs")
        return UrlTarget(on_url=on_url, off_url=off_url)

    if protocol == PROTOCOL_ENTITY:
        entity_id = device_config.get(CONF_DEVICE_ENTITY)
        if not entity_id or "." not in entity_id:
            raise ConfigurationError(f"Device '{name}' has no valid entity_id")
        return EntityTarget(entity_id=entity_id)

    raise ConfigurationError(f"Device '{name}' has unsupported protocol {protocol!r}")


def build_catalog(devices_config: List[Mapping[str, Any]]) -> List[Device]:
    """Build the ordered device catalog from configuration."""
    catalog = []
    seen = set()
    for device_config in devices_config:
        name = (device_config.get(CONF_DEVICE_NAME) or "").strip()
        if not name:
            raise ConfigurationError("Device without a name in configuration")
        if name in seen:
            raise ConfigurationError(f"Duplicate device name '{name}'")
        seen.add(name)

        expected = device_config.get(CONF_DEVICE_EXPECTED_W)
        try:
            expected_power_w = int(expected) if expected not in (None, "") else None
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Device '{name}' has an invalid expected power: {expected!r}"
            ) from exc

        catalog.append(
            Device(
                name=name,
                expected_power_w=expected_power_w,
                target=build_target(device_config),
                device_id=device_config.get(CONF_DEVICE_ID),
            )
        )
    return catalog

"""Presumed device state tracking and no-op command suppression."""

from typing import Iterable, List, Optional

from .exceptions import InvalidDirectionError
from .logger import log_debug
from .models import CommandReason, CommandRequest, Device, Direction, PresumedState


class DeviceStateTracker:
    """Decide whether a command for a device is worth sending.

    Presumed state is updated optimistically when a command is submitted, not
    when the device confirms it.
    """

    def __init__(self, catalog: List[Device]):
        self._catalog = catalog

    def should_send(self, device: Device, direction: Direction) -> bool:
        """Return True if a command must be sent, updating presumed state."""
        if not isinstance(direction, Direction):
            raise InvalidDirectionError(direction)

        if device.presumed_state == PresumedState(direction):
            if not device.requires_resync:
                return False
            device.requires_resync = False
            log_debug(f"Re-asserting {device.name} {direction} after resync request")
            return True

        device.presumed_state = PresumedState(direction)
        device.requires_resync = False
        return True

    def request_for(
        self, device: Device, direction: Direction
    ) -> Optional[CommandRequest]:
        """Return the command to submit for a device, or None to skip it."""
        if not isinstance(direction, Direction):
            raise InvalidDirectionError(direction)

        reason = (
            CommandReason.RESYNC
            if device.presumed_state == PresumedState(direction)
            else CommandReason.CHANGE
        )
        if not self.should_send(device, direction):
            return None
        return CommandRequest(device=device, direction=direction, reason=reason)

    def flag_all_for_resync(self) -> None:
        """Force the next cycle to re-assert every device."""
        for device in self._catalog:
            device.requires_resync = True
        log_debug(f"Flagged {len(self._catalog)} devices for resync")

    def flag_for_resync(self, devices: Iterable[Device]) -> None:
        """Force the next cycle to re-assert the given devices."""
        for device in devices:
            device.requires_resync = True

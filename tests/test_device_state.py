"""Tests for presumed state tracking."""

import pytest

from conftest import make_device
from custom_components.load_shedder.core.device_state import DeviceStateTracker
from custom_components.load_shedder.core.exceptions import InvalidDirectionError
from custom_components.load_shedder.core.models import (
    CommandReason,
    Direction,
    PresumedState,
)


@pytest.fixture
def device():
    return make_device("Heater", 2000)


@pytest.fixture
def tracker(device):
    return DeviceStateTracker([device])


def test_unknown_state_always_sends(tracker, device):
    """The first command for a device is always sent."""
    assert tracker.should_send(device, Direction.OFF)
    assert device.presumed_state == PresumedState.OFF


def test_matching_state_is_suppressed(tracker, device):
    """A command equal to the presumed state is a no-op."""
    tracker.should_send(device, Direction.ON)

    for _ in range(3):
        assert not tracker.should_send(device, Direction.ON)
    assert tracker.request_for(device, Direction.ON) is None


def test_change_updates_presumed_state(tracker, device):
    """Presumed state follows the last submitted command."""
    tracker.should_send(device, Direction.ON)

    request = tracker.request_for(device, Direction.OFF)
    assert request.direction == Direction.OFF
    assert request.reason == CommandReason.CHANGE
    assert device.presumed_state == PresumedState.OFF


def test_resync_sends_exactly_once(tracker, device):
    """A resync flag re-sends the presumed state once and clears itself."""
    tracker.should_send(device, Direction.ON)
    tracker.flag_all_for_resync()
    assert device.requires_resync

    request = tracker.request_for(device, Direction.ON)
    assert request is not None
    assert request.reason == CommandReason.RESYNC
    assert not device.requires_resync

    assert tracker.request_for(device, Direction.ON) is None


def test_resync_flag_cleared_by_change(tracker, device):
    """A real state change also satisfies a pending resync."""
    tracker.should_send(device, Direction.ON)
    tracker.flag_for_resync([device])

    assert tracker.should_send(device, Direction.OFF)
    assert not device.requires_resync
    assert not tracker.should_send(device, Direction.OFF)


def test_flag_subset_for_resync():
    """Only the given devices are flagged."""
    first, second = make_device("A", 100), make_device("B", 200)
    tracker = DeviceStateTracker([first, second])

    tracker.flag_for_resync([second])

    assert not first.requires_resync
    assert second.requires_resync


@pytest.mark.parametrize("direction", ["on", "toggle", None, True])
def test_invalid_direction_rejected(tracker, device, direction):
    """Anything but a Direction is refused without touching state."""
    with pytest.raises(InvalidDirectionError):
        tracker.should_send(device, direction)
    assert device.presumed_state == PresumedState.UNKNOWN

"""Priority based load allocation."""

from typing import List

from .models import Allocation, Device, Direction


def priority_order(catalog: List[Device]) -> List[Device]:
    """Return allocatable devices, highest expected power first.

    The sort is stable, so devices with equal power keep catalog order.
    Devices without an expected power are left out entirely.
    """
    allocatable = [device for device in catalog if device.is_allocatable]
    return sorted(allocatable, key=lambda device: device.expected_power_w, reverse=True)


class PriorityAllocator:
    """Single pass greedy bin fill over the priority ordered catalog."""

    def __init__(self, headroom_w: float = 0.0):
        self.headroom_w = float(headroom_w)

    def compute_allocation(self, surplus: float, catalog: List[Device]) -> Allocation:
        """Compute the ideal allocation for a grid balance.

        A device is switched on when the balance after adding its draw stays at
        or below -headroom. Skipped devices are never reconsidered.
        """
        states = {device.name: Direction.OFF for device in catalog if device.is_allocatable}
        remaining = float(surplus)
        draw = 0

        for device in priority_order(catalog):
            if remaining + device.expected_power_w <= -self.headroom_w:
                states[device.name] = Direction.ON
                remaining += device.expected_power_w
                draw += device.expected_power_w

        return Allocation(states=states, expected_power_draw=draw)

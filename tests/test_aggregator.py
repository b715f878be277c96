"""Tests for power sample aggregation."""

import pytest

from custom_components.load_shedder.core.aggregator import (
    PowerAggregator,
    parse_power_value,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("-1200.5", -1200.5),
        (300, 300.0),
        (0, 0.0),
        ("unavailable", None),
        ("unknown", None),
        ("", None),
        (None, None),
        (True, None),
        ("nan", None),
        ("inf", None),
    ],
)
def test_parse_power_value(value, expected):
    assert parse_power_value(value) == expected


def test_empty_aggregator_reports_zero():
    assert PowerAggregator().current_surplus() == 0


def test_sum_over_channels():
    """The balance is the sum of the latest value per channel."""
    aggregator = PowerAggregator()
    aggregator.update("l1", -1000)
    aggregator.update("l2", 400)
    aggregator.update("l3", -200)

    assert aggregator.current_surplus() == -800


def test_latest_value_wins():
    aggregator = PowerAggregator()
    aggregator.update("l1", -1000)
    aggregator.update("l1", -300)

    assert aggregator.current_surplus() == -300
    assert aggregator.channels == {"l1": -300}


def test_malformed_sample_keeps_last_good_value():
    """A bad reading is ignored and the previous aggregate stays."""
    aggregator = PowerAggregator()
    aggregator.update("l1", -1000)

    assert not aggregator.update("l1", "unavailable")
    assert not aggregator.update("l2", None)
    assert aggregator.current_surplus() == -1000
    assert aggregator.channels == {"l1": -1000}


def test_invert_readings():
    """Meters reporting export as positive are flipped."""
    aggregator = PowerAggregator(invert_power_readings=True)
    aggregator.update("l1", 1500)
    aggregator.update("l2", -500)

    assert aggregator.current_surplus() == -1000


def test_simulation_overrides_readings():
    """The simulated value wins over every reading, zero included."""
    aggregator = PowerAggregator(simulation_enabled=True, simulation_power=0)
    aggregator.update("l1", -5000)

    assert aggregator.current_surplus() == 0

    aggregator.set_simulation(True, -2500)
    assert aggregator.current_surplus() == -2500


def test_disabling_simulation_restores_readings():
    aggregator = PowerAggregator(simulation_enabled=True, simulation_power=-2500)
    aggregator.update("l1", -700)

    aggregator.set_simulation(False)

    assert not aggregator.simulation_enabled
    assert aggregator.simulation_power == -2500
    assert aggregator.current_surplus() == -700

"""Tests for unit conversions."""

import pytest

from scuba_log_server.interchange import units


class TestUnitConversions:
    """Conversions between metric storage and display units."""

    def test_depth(self) -> None:
        assert units.meters_to_feet(10.0) == pytest.approx(32.8084)
        assert units.feet_to_meters(33.0) == pytest.approx(10.0584, abs=1e-4)

    def test_weight(self) -> None:
        assert units.kg_to_lb(10.0) == pytest.approx(22.0462)
        assert units.lb_to_kg(22.0462) == pytest.approx(10.0)

    def test_pressure(self) -> None:
        assert units.bar_to_psi(200.0) == pytest.approx(2900.76)
        assert units.psi_to_bar(3000.0) == pytest.approx(206.84, abs=0.01)
        assert units.bar_to_pascal(200.0) == 20_000_000.0
        assert units.pascal_to_bar(5_000_000.0) == 50.0

    def test_temperature(self) -> None:
        assert units.celsius_to_fahrenheit(0.0) == 32.0
        assert units.celsius_to_fahrenheit(100.0) == 212.0
        assert units.fahrenheit_to_celsius(77.0) == pytest.approx(25.0)
        assert units.celsius_to_kelvin(24.0) == pytest.approx(297.15)
        assert units.kelvin_to_celsius(297.15) == pytest.approx(24.0)

    def test_volume(self) -> None:
        assert units.liters_to_cubic_feet(28.3168) == pytest.approx(1.0)
        assert units.cubic_feet_to_liters(80.0) == pytest.approx(2265.344)

    @pytest.mark.parametrize(
        ("forward", "back", "value"),
        [
            (units.meters_to_feet, units.feet_to_meters, 42.7),
            (units.kg_to_lb, units.lb_to_kg, 7.5),
            (units.bar_to_psi, units.psi_to_bar, 187.0),
            (units.celsius_to_fahrenheit, units.fahrenheit_to_celsius, -1.5),
            (units.liters_to_cubic_feet, units.cubic_feet_to_liters, 15.0),
        ],
    )
    def test_inverse_pairs(self, forward, back, value) -> None:
        assert back(forward(value)) == pytest.approx(value)

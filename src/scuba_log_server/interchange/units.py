"""Unit conversions between metric storage and display units.

Records always hold metric values. These helpers are applied only at the
format boundaries (CSV headers and values, UDDF SI units).
"""

from enum import Enum

METERS_TO_FEET = 3.28084
KG_TO_LB = 2.20462
BAR_TO_PSI = 14.5038
BAR_TO_PASCAL = 100_000.0
LITERS_PER_CUBIC_FOOT = 28.3168
KELVIN_OFFSET = 273.15


class UnitSystem(str, Enum):
    """Unit system used when rendering values for people."""

    METRIC = "metric"
    IMPERIAL = "imperial"


def meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET


def feet_to_meters(feet: float) -> float:
    return feet / METERS_TO_FEET


def kg_to_lb(kg: float) -> float:
    return kg * KG_TO_LB


def lb_to_kg(lb: float) -> float:
    return lb / KG_TO_LB


def bar_to_psi(bar: float) -> float:
    return bar * BAR_TO_PSI


def psi_to_bar(psi: float) -> float:
    return psi / BAR_TO_PSI


def bar_to_pascal(bar: float) -> float:
    return bar * BAR_TO_PASCAL


def pascal_to_bar(pascal: float) -> float:
    return pascal / BAR_TO_PASCAL


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    return (fahrenheit - 32) * 5 / 9


def celsius_to_kelvin(celsius: float) -> float:
    return celsius + KELVIN_OFFSET


def kelvin_to_celsius(kelvin: float) -> float:
    return kelvin - KELVIN_OFFSET


def liters_to_cubic_feet(liters: float) -> float:
    return liters / LITERS_PER_CUBIC_FOOT


def cubic_feet_to_liters(cubic_feet: float) -> float:
    return cubic_feet * LITERS_PER_CUBIC_FOOT

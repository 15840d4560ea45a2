# pyGrowatt - Unit Normalizer
# -*- coding: utf-8 -*-
"""
 Convert the vendor's power and energy representations into canonical units.

 The platform reports power as raw watts, kilowatts, or unit-suffixed
 strings depending on device family. Nothing here raises and nothing
 returns NaN: unparsable input is 0.

 Functions
    normalize_power(value)    # kW from number / string / None
    parse_energy(value)       # kWh from "12,456.3 kWh", "3.1 MWh", 45.7 ...
    parse_number(value)       # plain float from a decorated string
"""
import math
import re
from typing import Any

# Above this a bare number is taken as watts (no single inverter exceeds 100 kW)
WATT_THRESHOLD = 100

NUMERIC_CHARS = re.compile(r'[^\d.\-]')


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        stripped = NUMERIC_CHARS.sub('', str(value))
        try:
            number = float(stripped)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _watt_heuristic(number: float) -> float:
    if abs(number) > WATT_THRESHOLD:
        return number / 1000.0
    return number


def normalize_power(value: Any) -> float:
    """
    Return power in kW.

        None            -> 0
        1454.5          -> 1.4545   (raw watts)
        3.2             -> 3.2      (already kW)
        "220kW"         -> 220
        "50W"           -> 0.05
        "garbage"       -> 0
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _watt_heuristic(_to_float(value))
    text = str(value)
    number = _to_float(text)
    if number == 0.0:
        return 0.0
    lowered = text.lower()
    if 'kw' in lowered:
        return number
    if 'w' in lowered:
        return number / 1000.0
    return _watt_heuristic(number)


def parse_number(value: Any) -> float:
    if value is None:
        return 0.0
    return _to_float(value)


def parse_energy(value: Any) -> float:
    """Return energy in kWh, honouring MWh / GWh suffixes."""
    if value is None:
        return 0.0
    number = _to_float(value)
    if isinstance(value, str):
        lowered = value.lower()
        if 'gwh' in lowered:
            number *= 1000000.0
        elif 'mwh' in lowered:
            number *= 1000.0
    return number

"""
Sun position helpers.

Only answers one question: is there enough daylight that lights are not
needed? "Enough" means the sun is above the golden-hour elevation.
Uses the NOAA general solar position approximation (good to a fraction
of a degree, which is plenty here).
"""

import math
from dataclasses import dataclass
from datetime import datetime, UTC

GOLDEN_HOUR_ELEVATION = 6.0  # degrees above the horizon


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float


TAMPERE = Location(latitude=61.4978, longitude=23.7610)


def solar_elevation(ts: datetime, location: Location) -> float:
    """Sun elevation in degrees at the given time and place."""
    ts = ts.astimezone(UTC)
    day_of_year = ts.timetuple().tm_yday
    hours = ts.hour + ts.minute / 60 + ts.second / 3600

    gamma = 2 * math.pi / 365 * (day_of_year - 1 + (hours - 12) / 24)

    eqtime = 229.18 * (
        0.000075
        + 0.001868 * math.cos(gamma)
        - 0.032077 * math.sin(gamma)
        - 0.014615 * math.cos(2 * gamma)
        - 0.040849 * math.sin(2 * gamma)
    )
    decl = (
        0.006918
        - 0.399912 * math.cos(gamma)
        + 0.070257 * math.sin(gamma)
        - 0.006758 * math.cos(2 * gamma)
        + 0.000907 * math.sin(2 * gamma)
        - 0.002697 * math.cos(3 * gamma)
        + 0.00148 * math.sin(3 * gamma)
    )

    true_solar_minutes = hours * 60 + eqtime + 4 * location.longitude
    hour_angle = math.radians(true_solar_minutes / 4 - 180)

    lat = math.radians(location.latitude)
    cos_zenith = math.sin(lat) * math.sin(decl) + math.cos(lat) * math.cos(decl) * math.cos(
        hour_angle
    )
    cos_zenith = max(-1.0, min(1.0, cos_zenith))

    return 90 - math.degrees(math.acos(cos_zenith))


def is_between_golden_hours(ts: datetime, location: Location) -> bool:
    """True if the sun is above the golden-hour elevation."""
    return solar_elevation(ts, location) > GOLDEN_HOUR_ELEVATION

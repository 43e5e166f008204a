"""Astronomy computation layer: skyfield moon ephemerides and timezone lookup."""

import logging
import math
import os
from datetime import datetime, timedelta, tzinfo
from pathlib import Path
from typing import Protocol

from pytz import UnknownTimeZoneError, timezone, utc
from skyfield import almanac
from skyfield.api import Loader, wgs84
from timezonefinder import TimezoneFinder

from lunarcard.models import MoonData, MoonIllumination, MoonPosition, MoonTimes

_LOGGER = logging.getLogger(__name__)

_ROOT = Path(__file__).parent.parent.parent
_tf = TimezoneFinder()

EPHEMERIS_FILE = "de421.bsp"
SYNODIC_MONTH_DAYS = 29.530588853

# Upper phase-value bound → phase id. Principal phases span ±1 day around
# their exact moment; intermediate phases fill the gaps.
_DAY = 1 / SYNODIC_MONTH_DAYS
_PHASE_BOUNDS: tuple[tuple[float, str], ...] = (
    (_DAY, "newMoon"),
    (0.25 - _DAY, "waxingCrescentMoon"),
    (0.25 + _DAY, "firstQuarterMoon"),
    (0.50 - _DAY, "waxingGibbousMoon"),
    (0.50 + _DAY, "fullMoon"),
    (0.75 - _DAY, "waningGibbousMoon"),
    (0.75 + _DAY, "thirdQuarterMoon"),
    (1.00 - _DAY, "waningCrescentMoon"),
    (1.00, "newMoon"),
)

_FULL_MOON = 2
_NEW_MOON = 0


class AstronomicalSource(Protocol):
    """Anything that can answer the three moon queries the adapter needs."""

    def moon_data(self, instant: datetime, lat: float, lon: float) -> MoonData: ...

    def moon_position(
        self, instant: datetime, lat: float, lon: float
    ) -> MoonPosition: ...

    def moon_times(
        self, instant: datetime, lat: float, lon: float, tz: tzinfo
    ) -> MoonTimes: ...


def phase_id(phase_value: float) -> str:
    """Name the phase for a phase value in [0, 1)."""
    for upper, name in _PHASE_BOUNDS:
        if phase_value < upper:
            return name
    return "newMoon"


def parallactic_angle(hour_angle: float, declination: float, latitude: float) -> float:
    """Parallactic angle in radians. All inputs in radians."""
    return math.atan2(
        math.sin(hour_angle),
        math.tan(latitude) * math.cos(declination)
        - math.sin(declination) * math.cos(hour_angle),
    )


def bright_limb_angle(
    sun_ra: float, sun_dec: float, moon_ra: float, moon_dec: float
) -> float:
    """Position angle of the moon's bright limb, radians, from equatorial coordinates."""
    return math.atan2(
        math.cos(sun_dec) * math.sin(sun_ra - moon_ra),
        math.sin(sun_dec) * math.cos(moon_dec)
        - math.cos(sun_dec) * math.sin(moon_dec) * math.cos(sun_ra - moon_ra),
    )


def resolve_timezone(lat: float, lon: float) -> tzinfo:
    """Wall-clock timezone for a coordinate. UTC when the lookup fails."""
    tz_str = _tf.timezone_at(lat=lat, lng=lon)
    if tz_str is None:
        _LOGGER.warning("Timezone not found: lat=%s, lng=%s; using UTC", lat, lon)
        return utc
    try:
        return timezone(tz_str)
    except UnknownTimeZoneError:
        _LOGGER.warning("Unknown timezone %r; using UTC", tz_str)
        return utc


def start_of_local_day(instant: datetime, tz: tzinfo) -> datetime:
    """Local midnight of the calendar day containing `instant`, tz-aware."""
    local = instant.astimezone(tz)
    midnight = datetime(local.year, local.month, local.day)
    if hasattr(tz, "localize"):
        return tz.localize(midnight)  # type: ignore[attr-defined]
    return midnight.replace(tzinfo=tz)


class SkyfieldMoonSource:
    """Moon ephemerides from skyfield and the JPL DE421 kernel.

    The kernel is downloaded on first use into the data directory
    (``LUNARCARD_DATA_DIR`` or ``resources/`` at the project root).
    """

    def __init__(self, loader: Loader | None = None):
        if loader is None:
            data_dir = Path(os.environ.get("LUNARCARD_DATA_DIR", str(_ROOT / "resources")))
            data_dir.mkdir(parents=True, exist_ok=True)
            loader = Loader(str(data_dir), verbose=False)
        self._loader = loader
        self._eph = loader(EPHEMERIS_FILE)
        self._ts = loader.timescale()
        self._earth = self._eph["earth"]
        self._moon = self._eph["moon"]
        self._sun = self._eph["sun"]

    def _apparent_moon(self, instant: datetime, lat: float, lon: float):
        t = self._ts.from_datetime(instant)
        topos = wgs84.latlon(latitude_degrees=lat, longitude_degrees=lon)
        return (self._earth + topos).at(t).observe(self._moon).apparent()

    def moon_position(self, instant: datetime, lat: float, lon: float) -> MoonPosition:
        apparent = self._apparent_moon(instant, lat, lon)
        alt, az, distance = apparent.altaz()
        ha, dec, _ = apparent.hadec()
        return MoonPosition(
            azimuth_degrees=float(az.degrees),
            altitude_degrees=float(alt.degrees),
            distance_km=float(distance.km),
            parallactic_angle=parallactic_angle(
                float(ha.radians), float(dec.radians), math.radians(lat)
            ),
        )

    def _next_phases(self, t) -> tuple[datetime, datetime]:
        times, phases = almanac.find_discrete(t, t + 40.0, almanac.moon_phases(self._eph))
        next_full: datetime | None = None
        next_new: datetime | None = None
        for ti, pv in zip(times, phases):
            if int(pv) == _FULL_MOON and next_full is None:
                next_full = ti.utc_datetime()
            elif int(pv) == _NEW_MOON and next_new is None:
                next_new = ti.utc_datetime()
        # A synodic month always fits in 40 days.
        assert next_full is not None and next_new is not None
        return next_full, next_new

    def moon_data(self, instant: datetime, lat: float, lon: float) -> MoonData:
        t = self._ts.from_datetime(instant)
        geocentric = self._earth.at(t)
        moon_app = geocentric.observe(self._moon).apparent()
        sun_app = geocentric.observe(self._sun).apparent()

        phase_value = float(almanac.moon_phase(self._eph, t).degrees) / 360.0 % 1.0
        next_full, next_new = self._next_phases(t)
        illumination = MoonIllumination(
            fraction=float(moon_app.fraction_illuminated(self._sun)),
            phase_value=phase_value,
            phase_id=phase_id(phase_value),
            next_full_moon=next_full,
            next_new_moon=next_new,
        )

        position = self.moon_position(instant, lat, lon)
        moon_ra, moon_dec, _ = moon_app.radec(epoch="date")
        sun_ra, sun_dec, _ = sun_app.radec(epoch="date")
        limb = bright_limb_angle(
            float(sun_ra.radians),
            float(sun_dec.radians),
            float(moon_ra.radians),
            float(moon_dec.radians),
        )
        _LOGGER.debug(
            "moon_data %s lat=%s lon=%s phase=%.4f limb=%.4f",
            instant.isoformat(),
            lat,
            lon,
            phase_value,
            limb,
        )
        return MoonData(
            illumination=illumination,
            position=position,
            zenith_angle=limb - position.parallactic_angle,
        )

    def moon_times(
        self, instant: datetime, lat: float, lon: float, tz: tzinfo
    ) -> MoonTimes:
        """Rise, set and upper transit during the local calendar day of `instant`."""
        start = start_of_local_day(instant, tz)
        t0 = self._ts.from_datetime(start)
        t1 = self._ts.from_datetime(start + timedelta(days=1))
        topos = wgs84.latlon(latitude_degrees=lat, longitude_degrees=lon)

        rise: datetime | None = None
        set_: datetime | None = None
        times, events = almanac.find_discrete(
            t0, t1, almanac.risings_and_settings(self._eph, self._moon, topos)
        )
        for ti, event in zip(times, events):
            if event and rise is None:
                rise = ti.utc_datetime()
            elif not event and set_ is None:
                set_ = ti.utc_datetime()

        highest: datetime | None = None
        times, events = almanac.find_discrete(
            t0, t1, almanac.meridian_transits(self._eph, self._moon, topos)
        )
        for ti, event in zip(times, events):
            if event == 1:
                when = ti.utc_datetime()
                if self.moon_position(when, lat, lon).altitude_degrees > 0:
                    highest = when
                break

        always_up = always_down = False
        if rise is None and set_ is None:
            up = self.moon_position(start, lat, lon).altitude_degrees > 0
            always_up, always_down = up, not up

        return MoonTimes(
            rise=rise,
            set=set_,
            highest=highest,
            always_up=always_up,
            always_down=always_down,
        )

import math
from datetime import datetime, timedelta

import pytest
from pytz import utc

from lunarcard.models import (
    LocaleSettings,
    MoonData,
    MoonIllumination,
    MoonPosition,
    MoonTimes,
    ObservationContext,
)

EPOCH = datetime(2024, 1, 1, tzinfo=utc)


def wave_altitude(instant: datetime) -> float:
    """Smooth fake altitude curve: ±40° over a 24.8 h lunar day."""
    hours = (instant - EPOCH).total_seconds() / 3600
    return 40 * math.sin(2 * math.pi * hours / 24.8)


class FakeMoonSource:
    """Deterministic stand-in for SkyfieldMoonSource."""

    def __init__(
        self,
        phase_value: float = 0.2,
        fraction: float = 0.5,
        azimuth: float = 123.456,
        altitude: float = 23.456,
        distance_km: float = 384400.0,
        parallactic_angle: float = 0.3,
        zenith_angle: float = 1.2,
        times: MoonTimes | None = None,
        altitude_fn=None,
    ):
        self.phase_value = phase_value
        self.fraction = fraction
        self.azimuth = azimuth
        self.altitude = altitude
        self.distance_km = distance_km
        self.parallactic_angle = parallactic_angle
        self.zenith_angle = zenith_angle
        self.times = times or MoonTimes(
            rise=EPOCH + timedelta(hours=3),
            set=EPOCH + timedelta(hours=15, minutes=20),
            highest=EPOCH + timedelta(hours=9, minutes=10),
        )
        self.altitude_fn = altitude_fn
        self.position_calls: list[datetime] = []
        self.data_calls: list[datetime] = []
        self.times_calls: list[datetime] = []

    def moon_position(self, instant, lat, lon):
        self.position_calls.append(instant)
        altitude = self.altitude_fn(instant) if self.altitude_fn else self.altitude
        return MoonPosition(
            azimuth_degrees=self.azimuth,
            altitude_degrees=altitude,
            distance_km=self.distance_km,
            parallactic_angle=self.parallactic_angle,
        )

    def moon_data(self, instant, lat, lon):
        self.data_calls.append(instant)
        return MoonData(
            illumination=MoonIllumination(
                fraction=self.fraction,
                phase_value=self.phase_value,
                phase_id="waxingCrescentMoon",
                next_full_moon=datetime(2024, 1, 25, 17, 54, tzinfo=utc),
                next_new_moon=datetime(2024, 1, 11, 11, 57, tzinfo=utc),
            ),
            position=self.moon_position(instant, lat, lon),
            zenith_angle=self.zenith_angle,
        )

    def moon_times(self, instant, lat, lon, tz):
        self.times_calls.append(instant)
        return self.times


def make_context(
    lang: str = "en",
    number_format: str = "language",
    use_12_hour: bool = False,
    use_miles: bool = False,
    timezone=utc,
    date: datetime = EPOCH,
    latitude: float = 21.0285,
    longitude: float = 105.8542,
) -> ObservationContext:
    return ObservationContext(
        date=date,
        latitude=latitude,
        longitude=longitude,
        locale=LocaleSettings(language=lang, number_format=number_format),
        use_12_hour=use_12_hour,
        use_miles=use_miles,
        timezone=timezone,
    )


@pytest.fixture
def source():
    return FakeMoonSource()


@pytest.fixture
def context():
    return make_context()

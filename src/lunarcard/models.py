"""Data model definitions shared by the compute and render layers."""

from dataclasses import dataclass
from datetime import datetime, tzinfo

from pytz import utc


@dataclass(frozen=True)
class LocaleSettings:
    """Host locale descriptor."""

    language: str  # UI language ("en", "fr", "de-CH", ...)
    number_format: str = "language"  # language / system / comma_decimal / decimal_comma / space_comma / none


@dataclass(frozen=True)
class ObservationContext:
    """Where, when, and how to present. Input to the moon adapter."""

    date: datetime  # Evaluation instant (tz-aware)
    latitude: float  # Decimal degrees
    longitude: float  # Decimal degrees
    locale: LocaleSettings
    use_12_hour: bool = False
    use_miles: bool = False
    timezone: tzinfo = utc  # Wall-clock zone for labels and day boundaries

    @property
    def lang(self) -> str:
        return self.locale.language


@dataclass(frozen=True)
class MoonIllumination:
    """Illumination state at one instant."""

    fraction: float  # Lit fraction of the disk (0..1)
    phase_value: float  # Fraction of the synodic month elapsed (0..1)
    phase_id: str  # "newMoon", "waxingCrescentMoon", ...
    next_full_moon: datetime
    next_new_moon: datetime


@dataclass(frozen=True)
class MoonPosition:
    """Topocentric position at one instant."""

    azimuth_degrees: float  # 0=N, 90=E, 180=S, 270=W
    altitude_degrees: float
    distance_km: float
    parallactic_angle: float  # Radians


@dataclass(frozen=True)
class MoonData:
    """Raw astronomical sample. Read-only input to the adapter."""

    illumination: MoonIllumination
    position: MoonPosition
    zenith_angle: float  # Radians; bright-limb angle minus parallactic angle


@dataclass(frozen=True)
class MoonTimes:
    """Rise, set, and upper transit for one local calendar day."""

    rise: datetime | None = None
    set: datetime | None = None
    highest: datetime | None = None
    always_up: bool = False
    always_down: bool = False


@dataclass(frozen=True)
class DisplayItem:
    """A single formatted fact, ready to show."""

    label: str
    value: str  # Includes the unit, already spaced
    unit: str | None = None
    second_value: str | None = None


@dataclass(frozen=True)
class MoonImage:
    moon_pic: str  # Image identifier from MOON_IMAGES
    phase_index: int  # 0..30
    rotate_deg: float  # Raw rotation, not clamped


@dataclass(frozen=True)
class MoonSnapshot:
    """Everything the card shows for one instant."""

    moon_fraction: DisplayItem
    moon_age: DisplayItem
    moon_rise: DisplayItem | None
    moon_set: DisplayItem | None
    moon_highest: DisplayItem | None
    distance: DisplayItem
    azimuth_degrees: DisplayItem
    altitude_degrees: DisplayItem
    next_full_moon: DisplayItem
    next_new_moon: DisplayItem
    phase_name: str
    image: MoonImage

    def fields(self) -> dict[str, DisplayItem]:
        """Named display items in card order. Absent events are left out."""
        items = {
            "moonFraction": self.moon_fraction,
            "moonAge": self.moon_age,
            "moonRise": self.moon_rise,
            "moonSet": self.moon_set,
            "moonHighest": self.moon_highest,
            "distance": self.distance,
            "azimuthDegrees": self.azimuth_degrees,
            "altitudeDegrees": self.altitude_degrees,
            "nextFullMoon": self.next_full_moon,
            "nextNewMoon": self.next_new_moon,
        }
        return {k: v for k, v in items.items() if v is not None}


@dataclass(frozen=True)
class AltitudeSample:
    time: datetime
    time_label: str  # Wall-clock label ("14:30", "02:30 PM")
    altitude: float  # Degrees, rounded to 2 decimals


@dataclass(frozen=True)
class AltitudeProfile:
    """One day of altitude samples at 30-minute steps."""

    samples: tuple[AltitudeSample, ...]
    suggested_y_max: int  # Chart headroom above the peak
    suggested_y_min: float  # Chart headroom below the trough

    @property
    def time_labels(self) -> list[str]:
        return [s.time_label for s in self.samples]

    @property
    def altitudes(self) -> list[float]:
        return [s.altitude for s in self.samples]


@dataclass(frozen=True)
class TodayDataItem:
    """Compact summary shown next to the chart."""

    position: DisplayItem  # Over / under the horizon
    direction: DisplayItem  # Whole-degree azimuth + cardinal bucket
    altitude: DisplayItem
    fraction: DisplayItem
    distance: DisplayItem


@dataclass(frozen=True)
class RiseSetMarker:
    index: int  # Half-hour slot in the day profile
    altitude: float


@dataclass(frozen=True)
class TodayChartData:
    """The sole input to the chart renderer."""

    times: MoonTimes
    profile: AltitudeProfile
    illumination: MoonIllumination
    rise_label: str
    set_label: str
    rise_marker: RiseSetMarker | None = None
    set_marker: RiseSetMarker | None = None

"""Moon data adapter: turns raw ephemerides into display items and chart series."""

import logging
import math
from collections.abc import MutableMapping
from datetime import datetime, timedelta

from pytz import utc

from lunarcard.compute import AstronomicalSource, start_of_local_day
from lunarcard.formatting import (
    cardinal_direction,
    convert_distance,
    format_number,
    format_relative_time,
    format_short_date,
    format_time_label,
    with_unit,
)
from lunarcard.i18n import localize
from lunarcard.images import MOON_IMAGES, phase_image_index
from lunarcard.models import (
    AltitudeProfile,
    AltitudeSample,
    DisplayItem,
    MoonData,
    MoonImage,
    MoonSnapshot,
    MoonTimes,
    ObservationContext,
    RiseSetMarker,
    TodayChartData,
    TodayDataItem,
)

_LOGGER = logging.getLogger(__name__)

MOON_AGE_DAYS = 29.53
PROFILE_SAMPLES = 48
PROFILE_STEP = timedelta(minutes=30)
CHART_HEADROOM_DEG = 10
STORAGE_KEY = "moonImages"


def compute_image_selection(sample: MoonData) -> MoonImage:
    """Pick the phase illustration and the angle to rotate it by.

    The rotation is passed through unclamped; it may exceed ±360°.
    """
    index = phase_image_index(sample.illumination.phase_value)
    rotate_deg = math.degrees(sample.zenith_angle - sample.position.parallactic_angle)
    return MoonImage(moon_pic=MOON_IMAGES[index], phase_index=index, rotate_deg=rotate_deg)


class MoonDataAdapter:
    """Formats moon data for one observation context.

    Args:
        context: Where, when, and how to present.
        source: Astronomical data source (see lunarcard.compute).
        now: Reference moment for relative times. Defaults to the current time.
    """

    def __init__(
        self,
        context: ObservationContext,
        source: AstronomicalSource,
        now: datetime | None = None,
    ):
        self.context = context
        self.source = source
        self.now = now or datetime.now(utc)
        self._sample: MoonData | None = None
        self._times: dict[datetime, MoonTimes] = {}

    # --- formatting helpers ---

    def localize(self, key: str, search: str = "", replace: str = "") -> str:
        return localize(key, self.context.lang, search, replace)

    def format_time(self, when: datetime) -> str:
        ctx = self.context
        return format_time_label(when, ctx.use_12_hour, ctx.lang, ctx.timezone)

    def format_number(self, value: float, decimals: int = 2) -> str:
        return format_number(value, self.context.locale, decimals)

    def create_item(
        self,
        label: str,
        value: str,
        unit: str | None = None,
        second_value: str | None = None,
    ) -> DisplayItem:
        return DisplayItem(
            label=self.localize(f"card.{label}"),
            value=with_unit(value, unit, self.context.lang),
            unit=unit or None,
            second_value=second_value or None,
        )

    def localize_relative_time(self, when: datetime) -> str:
        relative = format_relative_time(when, self.now)
        if relative.value is not None:
            return self.localize(relative.key, "{0}", relative.value)
        return self.localize(relative.key)

    def create_moon_time(self, label: str, when: datetime | None) -> DisplayItem | None:
        if when is None:
            return None
        return self.create_item(
            label, self.format_time(when), second_value=self.localize_relative_time(when)
        )

    # --- source queries (memoized per adapter) ---

    def _moon_data(self) -> MoonData:
        if self._sample is None:
            ctx = self.context
            self._sample = self.source.moon_data(ctx.date, ctx.latitude, ctx.longitude)
        return self._sample

    def _moon_times(self, when: datetime | None = None) -> MoonTimes:
        ctx = self.context
        when = when or ctx.date
        if when not in self._times:
            self._times[when] = self.source.moon_times(
                when, ctx.latitude, ctx.longitude, ctx.timezone
            )
        return self._times[when]

    # --- card data ---

    def phase_name(self, sample: MoonData | None = None) -> str:
        sample = sample or self._moon_data()
        return self.localize(f"card.phase.{sample.illumination.phase_id}")

    def build_snapshot(self, sample: MoonData, times: MoonTimes) -> MoonSnapshot:
        """Assemble every display item for one instant."""
        ctx = self.context
        illumination = sample.illumination
        position = sample.position
        distance = convert_distance(position.distance_km, ctx.use_miles)

        return MoonSnapshot(
            moon_fraction=self.create_item(
                "illumination", self.format_number(illumination.fraction * 100), "%"
            ),
            moon_age=self.create_item(
                "moonAge",
                self.format_number(illumination.phase_value * MOON_AGE_DAYS),
                self.localize("card.relativeTime.days"),
            ),
            moon_rise=self.create_moon_time("moonRise", times.rise),
            moon_set=self.create_moon_time("moonSet", times.set),
            moon_highest=self.create_moon_time("moonHigh", times.highest),
            distance=self.create_item(
                "distance", self.format_number(distance), "mi" if ctx.use_miles else "km"
            ),
            azimuth_degrees=self.create_item(
                "azimuth", self.format_number(position.azimuth_degrees), "°"
            ),
            altitude_degrees=self.create_item(
                "altitude", self.format_number(position.altitude_degrees), "°"
            ),
            next_full_moon=self.create_item(
                "fullMoon",
                format_short_date(illumination.next_full_moon, ctx.lang, ctx.timezone),
            ),
            next_new_moon=self.create_item(
                "newMoon",
                format_short_date(illumination.next_new_moon, ctx.lang, ctx.timezone),
            ),
            phase_name=self.phase_name(sample),
            image=compute_image_selection(sample),
        )

    def evaluate(self) -> MoonSnapshot:
        sample = self._moon_data()
        snapshot = self.build_snapshot(sample, self._moon_times())
        _LOGGER.debug(
            "Evaluated %s at %s: %s",
            self.context.date.isoformat(),
            (self.context.latitude, self.context.longitude),
            snapshot.image.moon_pic,
        )
        return snapshot

    def today_data_item(self, snapshot: MoonSnapshot | None = None) -> TodayDataItem:
        """Position summary; reuses `snapshot` when the caller already evaluated."""
        sample = self._moon_data()
        snapshot = snapshot or self.build_snapshot(sample, self._moon_times())
        azimuth = sample.position.azimuth_degrees
        over = sample.position.altitude_degrees > 0
        return TodayDataItem(
            position=self.create_item(
                "position",
                self.localize("card.overHorizon" if over else "card.underHorizon"),
            ),
            direction=self.create_item(
                "direction", self.format_number(azimuth, 0), "°", cardinal_direction(azimuth)
            ),
            altitude=snapshot.altitude_degrees,
            fraction=snapshot.moon_fraction,
            distance=snapshot.distance,
        )

    # --- chart data ---

    def daily_altitude_profile(self, day_start: datetime) -> AltitudeProfile:
        """Sample the altitude every 30 minutes for one day from `day_start`."""
        ctx = self.context
        samples = []
        for i in range(PROFILE_SAMPLES):
            when = day_start + i * PROFILE_STEP
            position = self.source.moon_position(when, ctx.latitude, ctx.longitude)
            samples.append(
                AltitudeSample(
                    time=when,
                    time_label=self.format_time(when),
                    altitude=round(position.altitude_degrees, 2),
                )
            )
        # Bounds come from finite samples only; the full altitude range otherwise.
        altitudes = [s.altitude for s in samples if math.isfinite(s.altitude)] or [-90.0, 90.0]
        return AltitudeProfile(
            samples=tuple(samples),
            suggested_y_max=math.ceil(max(altitudes) + CHART_HEADROOM_DEG),
            suggested_y_min=min(altitudes) - CHART_HEADROOM_DEG,
        )

    def rise_set_marker(self, when: datetime | None) -> RiseSetMarker | None:
        """Half-hour slot and altitude of a rise/set event in the local day."""
        if when is None:
            return None
        ctx = self.context
        local = when.astimezone(ctx.timezone)
        hours = local.hour + local.minute / 60
        position = self.source.moon_position(when, ctx.latitude, ctx.longitude)
        return RiseSetMarker(index=math.floor(hours * 2), altitude=position.altitude_degrees)

    def today_data(self, today: datetime | None = None) -> TodayChartData:
        """Chart input for the local calendar day containing `today` (default: now)."""
        today = today or self.now
        day_start = start_of_local_day(today, self.context.timezone)
        times = self._moon_times(today)
        return TodayChartData(
            times=times,
            profile=self.daily_altitude_profile(day_start),
            illumination=self._moon_data().illumination,
            rise_label=self.localize("card.moonRise"),
            set_label=self.localize("card.moonSet"),
            rise_marker=self.rise_set_marker(times.rise),
            set_marker=self.rise_set_marker(times.set),
        )

    def store_moon_images(self, storage: MutableMapping) -> None:
        """Best-effort write of the image list into a key-value store."""
        try:
            storage[STORAGE_KEY] = list(MOON_IMAGES)
        except Exception:
            _LOGGER.debug("Could not store moon images", exc_info=True)


def evaluate(
    context: ObservationContext,
    source: AstronomicalSource,
    now: datetime | None = None,
) -> MoonSnapshot:
    """Top-level entry point: snapshot for `context.date`."""
    return MoonDataAdapter(context, source, now).evaluate()


def daily_altitude_profile(
    context: ObservationContext,
    day_start: datetime,
    source: AstronomicalSource,
) -> AltitudeProfile:
    """Top-level entry point: 48-point altitude profile from `day_start`."""
    return MoonDataAdapter(context, source).daily_altitude_profile(day_start)

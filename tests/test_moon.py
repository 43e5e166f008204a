import math
from datetime import datetime, timedelta

import pytest
from pytz import timezone, utc

from conftest import EPOCH, FakeMoonSource, make_context, wave_altitude
from lunarcard.formatting import HAIRLINE_SPACE
from lunarcard.images import MOON_IMAGES
from lunarcard.models import MoonTimes
from lunarcard.moon import (
    STORAGE_KEY,
    MoonDataAdapter,
    compute_image_selection,
    daily_altitude_profile,
    evaluate,
)

ALL_FIELDS = [
    "moonFraction",
    "moonAge",
    "moonRise",
    "moonSet",
    "moonHighest",
    "distance",
    "azimuthDegrees",
    "altitudeDegrees",
    "nextFullMoon",
    "nextNewMoon",
]


def adapter_for(source=None, **context_kwargs) -> MoonDataAdapter:
    return MoonDataAdapter(
        make_context(**context_kwargs), source or FakeMoonSource(), now=EPOCH
    )


class TestImageSelection:
    def test_index_always_in_range(self):
        source = FakeMoonSource()
        for i in range(1000):
            source.phase_value = i / 1000
            image = compute_image_selection(source.moon_data(EPOCH, 0, 0))
            assert 0 <= image.phase_index <= 30
            assert image.moon_pic == MOON_IMAGES[image.phase_index]

    def test_just_below_one(self):
        source = FakeMoonSource(phase_value=0.9999999)
        assert compute_image_selection(source.moon_data(EPOCH, 0, 0)).phase_index == 30

    def test_full_moon_index(self):
        source = FakeMoonSource(phase_value=0.5)
        assert compute_image_selection(source.moon_data(EPOCH, 0, 0)).phase_index == 15

    def test_rotation(self):
        source = FakeMoonSource(zenith_angle=1.2, parallactic_angle=0.3)
        image = compute_image_selection(source.moon_data(EPOCH, 0, 0))
        assert image.rotate_deg == pytest.approx(math.degrees(0.9))

    def test_rotation_not_clamped(self):
        source = FakeMoonSource(zenith_angle=10.0, parallactic_angle=-1.0)
        image = compute_image_selection(source.moon_data(EPOCH, 0, 0))
        assert image.rotate_deg == pytest.approx(11.0 * 180 / math.pi)
        assert image.rotate_deg > 360

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_phase_uses_new_moon_image(self, value):
        snapshot = adapter_for(FakeMoonSource(phase_value=value)).evaluate()
        assert snapshot.image.phase_index == 0
        assert snapshot.image.moon_pic == MOON_IMAGES[0]


class TestSnapshot:
    def test_all_ten_fields(self):
        snapshot = adapter_for().evaluate()
        assert list(snapshot.fields()) == ALL_FIELDS

    def test_missing_transit_is_omitted(self):
        source = FakeMoonSource(
            times=MoonTimes(rise=EPOCH + timedelta(hours=3), set=EPOCH + timedelta(hours=15))
        )
        snapshot = adapter_for(source).evaluate()
        assert snapshot.moon_highest is None
        assert "moonHighest" not in snapshot.fields()
        assert len(snapshot.fields()) == 9

    def test_missing_rise_and_set_are_omitted(self):
        source = FakeMoonSource(times=MoonTimes(always_down=True))
        snapshot = adapter_for(source).evaluate()
        assert snapshot.moon_rise is None
        assert snapshot.moon_set is None

    def test_percent_english(self):
        item = adapter_for(lang="en").evaluate().moon_fraction
        assert item.value == "50.00%"
        assert item.unit == "%"
        assert item.label == "Illumination"

    def test_percent_french_hairline(self):
        item = adapter_for(lang="fr").evaluate().moon_fraction
        assert item.value == f"50,00{HAIRLINE_SPACE}%"

    def test_degrees_never_spaced(self):
        snapshot = adapter_for(lang="fr").evaluate()
        assert snapshot.azimuth_degrees.value == "123,46°"
        assert snapshot.altitude_degrees.value == "23,46°"

    def test_distance_km(self):
        assert adapter_for().evaluate().distance.value == "384,400.00 km"

    def test_distance_miles(self):
        item = adapter_for(use_miles=True).evaluate().distance
        assert item.value == "238,855.01 mi"
        assert item.unit == "mi"

    def test_moon_age(self):
        item = adapter_for().evaluate().moon_age
        assert item.value == "5.91 days"
        assert item.label == "Moon age"

    def test_rise_time_and_relative(self):
        item = adapter_for().evaluate().moon_rise
        assert item.label == "Moonrise"
        assert item.value == "03:00"
        assert item.second_value == "in 3 hours"

    def test_rise_time_12_hour_local(self):
        item = adapter_for(use_12_hour=True, timezone=timezone("Asia/Ho_Chi_Minh")).evaluate().moon_rise
        assert item.value == "10:00 AM"

    def test_next_phases_dates(self):
        snapshot = adapter_for().evaluate()
        assert snapshot.next_full_moon.value == "Thu, Jan 25"
        assert snapshot.next_new_moon.value == "Thu, Jan 11"
        assert snapshot.next_full_moon.second_value is None

    def test_phase_name(self):
        assert adapter_for().evaluate().phase_name == "Waxing Crescent"
        assert adapter_for(lang="de").evaluate().phase_name == "Zunehmende Sichel"

    def test_nan_position_does_not_raise(self):
        source = FakeMoonSource(azimuth=float("nan"), altitude=float("nan"))
        adapter = adapter_for(source)
        snapshot = adapter.evaluate()
        assert snapshot.azimuth_degrees.value == "nan°"
        assert adapter.today_data_item().direction.second_value is None

    def test_deterministic(self):
        assert adapter_for().evaluate() == adapter_for().evaluate()

    def test_module_level_evaluate(self):
        snapshot = evaluate(make_context(), FakeMoonSource(), now=EPOCH)
        assert snapshot == adapter_for().evaluate()


def test_hanoi_new_year_scenario():
    tz = timezone("Asia/Ho_Chi_Minh")
    ctx = make_context(
        latitude=21.0285,
        longitude=105.8542,
        date=datetime(2024, 1, 1, tzinfo=utc),
        timezone=tz,
    )
    source = FakeMoonSource()
    first = MoonDataAdapter(ctx, source, now=EPOCH).evaluate()
    second = MoonDataAdapter(ctx, source, now=EPOCH).evaluate()

    assert list(first.fields()) == ALL_FIELDS
    assert first.moon_rise is not None
    assert first.moon_set is not None
    assert first.image == second.image


class TestTodayDataItem:
    def test_over_horizon(self):
        item = adapter_for().today_data_item()
        assert item.position.value == "Over horizon"
        assert item.direction.value == "123°"
        assert item.direction.second_value == "SE"
        assert item.fraction.value == "50.00%"

    def test_under_horizon(self):
        item = adapter_for(FakeMoonSource(altitude=-5.0)).today_data_item()
        assert item.position.value == "Under horizon"

    def test_reuses_evaluated_snapshot(self):
        source = FakeMoonSource()
        adapter = adapter_for(source)
        snapshot = adapter.evaluate()
        item = adapter.today_data_item(snapshot)
        adapter.today_data(EPOCH)
        assert item.fraction is snapshot.moon_fraction
        assert len(source.data_calls) == 1
        assert len(source.times_calls) == 1


class TestAltitudeProfile:
    def test_48_samples_30_minutes_apart(self):
        profile = adapter_for(FakeMoonSource(altitude_fn=wave_altitude)).daily_altitude_profile(EPOCH)
        assert len(profile.samples) == 48
        assert profile.samples[0].time == EPOCH
        for a, b in zip(profile.samples, profile.samples[1:]):
            assert b.time - a.time == timedelta(minutes=30)
        assert profile.samples[-1].time == EPOCH + timedelta(hours=23, minutes=30)

    def test_labels(self):
        profile = adapter_for().daily_altitude_profile(EPOCH)
        assert profile.time_labels[0] == "00:00"
        assert profile.time_labels[1] == "00:30"
        assert profile.time_labels[-1] == "23:30"

    def test_labels_12_hour(self):
        profile = adapter_for(use_12_hour=True).daily_altitude_profile(EPOCH)
        assert profile.time_labels[0] == "12:00 AM"
        assert profile.time_labels[27] == "01:30 PM"

    def test_altitudes_rounded(self):
        profile = adapter_for(FakeMoonSource(altitude_fn=wave_altitude)).daily_altitude_profile(EPOCH)
        for sample in profile.samples:
            assert sample.altitude == round(wave_altitude(sample.time), 2)

    def test_suggested_bounds(self):
        profile = adapter_for(FakeMoonSource(altitude_fn=wave_altitude)).daily_altitude_profile(EPOCH)
        assert profile.suggested_y_max == math.ceil(max(profile.altitudes) + 10)
        assert profile.suggested_y_min == pytest.approx(min(profile.altitudes) - 10)

    def test_constant_altitude_bounds(self):
        profile = adapter_for().daily_altitude_profile(EPOCH)
        assert profile.suggested_y_max == 34
        assert profile.suggested_y_min == pytest.approx(13.46)

    def test_nan_altitudes_skipped_in_bounds(self):
        def gappy(instant):
            return float("nan") if instant.hour % 2 else 20.0

        profile = adapter_for(FakeMoonSource(altitude_fn=gappy)).daily_altitude_profile(EPOCH)
        assert len(profile.samples) == 48
        assert math.isnan(profile.samples[2].altitude)
        assert profile.suggested_y_max == 30
        assert profile.suggested_y_min == pytest.approx(10.0)

    def test_all_nan_altitudes_use_full_range(self):
        profile = adapter_for(FakeMoonSource(altitude=float("nan"))).daily_altitude_profile(EPOCH)
        assert profile.suggested_y_max == 100
        assert profile.suggested_y_min == pytest.approx(-100.0)

    def test_samples_the_source_48_times(self):
        source = FakeMoonSource()
        daily_altitude_profile(make_context(), EPOCH, source)
        assert len(source.position_calls) == 48


class TestTodayData:
    def test_day_starts_at_local_midnight(self):
        tz = timezone("Asia/Ho_Chi_Minh")
        adapter = adapter_for(timezone=tz)
        data = adapter.today_data(datetime(2024, 1, 1, 20, 0, tzinfo=utc))
        first = data.profile.samples[0]
        assert first.time_label == "00:00"
        assert first.time.astimezone(tz).date() == datetime(2024, 1, 2).date()

    def test_markers(self):
        data = adapter_for().today_data(EPOCH)
        assert data.rise_marker.index == 6
        assert data.set_marker.index == 30
        assert data.rise_label == "Moonrise"
        assert data.set_label == "Moonset"

    def test_missing_rise_has_no_marker(self):
        source = FakeMoonSource(times=MoonTimes(set=EPOCH + timedelta(hours=4)))
        data = adapter_for(source).today_data(EPOCH)
        assert data.rise_marker is None
        assert data.set_marker.index == 8

    def test_illumination_carried(self):
        data = adapter_for().today_data(EPOCH)
        assert data.illumination.phase_id == "waxingCrescentMoon"


class TestStoreMoonImages:
    def test_writes_image_list(self):
        storage = {}
        adapter_for().store_moon_images(storage)
        assert storage[STORAGE_KEY] == list(MOON_IMAGES)
        assert len(storage[STORAGE_KEY]) == 31

    def test_failures_are_ignored(self):
        class BrokenStorage(dict):
            def __setitem__(self, key, value):
                raise OSError("quota exceeded")

        adapter_for().store_moon_images(BrokenStorage())

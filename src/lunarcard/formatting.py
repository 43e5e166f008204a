"""Locale-aware formatting of numbers, clock times and relative times."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, tzinfo
from functools import lru_cache

from babel import Locale, UnknownLocaleError
from babel.dates import format_skeleton, format_time
from babel.numbers import format_decimal
from pytz import utc

from lunarcard.models import LocaleSettings

_LOGGER = logging.getLogger(__name__)

KM_TO_MILES = 0.621371

HAIRLINE_SPACE = "\u200a"

# Space inserted between a value and its unit, keyed by unit then language.
# "*" is the default for languages not listed. Units missing from the table
# get a single regular space.
SPACE_BEFORE_UNIT: dict[str, dict[str, str]] = {
    "%": {
        "cs": HAIRLINE_SPACE,
        "de": HAIRLINE_SPACE,
        "fi": HAIRLINE_SPACE,
        "fr": HAIRLINE_SPACE,
        "sk": HAIRLINE_SPACE,
        "sv": HAIRLINE_SPACE,
        "*": "",
    },
    "°": {"*": ""},
}

CARDINAL_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

# Host number_format → locale whose separators are used
_NUMBER_FORMAT_LOCALES: dict[str, str] = {
    "comma_decimal": "en",
    "decimal_comma": "de",
    "space_comma": "fr",
    "system": "en",
    "none": "en",
}


@dataclass(frozen=True)
class RelativeTime:
    """Localization key plus an optional value for its {0} placeholder."""

    key: str
    value: str | None = None


def _js_round(x: float) -> int:
    """Round half up, the way browsers round (Math.round)."""
    return math.floor(x + 0.5)


def base_language(lang: str) -> str:
    return lang.replace("_", "-").split("-")[0].lower() if lang else ""


@lru_cache(maxsize=32)
def babel_locale(lang: str) -> Locale:
    """Parse a host language tag into a Babel Locale, falling back to English."""
    try:
        return Locale.parse(lang.replace("-", "_"))
    except (UnknownLocaleError, ValueError, TypeError, AttributeError):
        _LOGGER.warning("Unknown locale %r, falling back to 'en'", lang)
        return Locale.parse("en")


def number_locale(settings: LocaleSettings) -> Locale:
    """Locale whose separators apply under the configured number format."""
    return babel_locale(
        _NUMBER_FORMAT_LOCALES.get(settings.number_format, settings.language)
    )


def format_number(value: float, settings: LocaleSettings, decimals: int = 2) -> str:
    """Render with exactly `decimals` fraction digits and the locale's separators.

    NaN and infinities are passed through as ``str(value)``.
    """
    if math.isnan(value) or math.isinf(value):
        return str(value)
    pattern = "#,##0." + "0" * decimals if decimals > 0 else "#,##0"
    return format_decimal(
        round(value, decimals),
        format=pattern,
        locale=number_locale(settings),
        group_separator=settings.number_format != "none",
    )


def convert_distance(km: float, use_miles: bool) -> float:
    """Kilometres to miles when `use_miles`, else unchanged. Not rounded."""
    return km * KM_TO_MILES if use_miles else km


def space_before_unit(unit: str, lang: str) -> str:
    rule = SPACE_BEFORE_UNIT.get(unit)
    if rule is None:
        return " "
    return rule.get(base_language(lang), rule["*"])


def with_unit(value: str, unit: str | None, lang: str) -> str:
    """Append `unit` to `value` using the language's spacing rule."""
    if not unit:
        return value
    return f"{value}{space_before_unit(unit, lang)}{unit}"


def cardinal_direction(azimuth_degrees: float) -> str:
    """Bucket an azimuth into one of 8 compass points (45° buckets centred on N).

    Returns an empty string for NaN/infinite input.
    """
    if math.isnan(azimuth_degrees) or math.isinf(azimuth_degrees):
        return ""
    return CARDINAL_POINTS[_js_round(azimuth_degrees / 45) % 8]


def format_time_label(
    when: datetime, use_12_hour: bool, lang: str, tz: tzinfo = utc
) -> str:
    """Two-digit wall-clock time in `tz` ("07:30" or "07:30 AM")."""
    pattern = "hh:mm a" if use_12_hour else "HH:mm"
    return format_time(when, pattern, tzinfo=tz, locale=babel_locale(lang))


def format_short_date(when: datetime, lang: str, tz: tzinfo = utc) -> str:
    """Weekday, month and day in the locale's order ("Mon, Jan 1")."""
    return format_skeleton("MMMEd", when, tzinfo=tz, locale=babel_locale(lang))


def format_relative_time(target: datetime, now: datetime) -> RelativeTime:
    """Bucket the signed distance from `now` to `target` into a localization key.

    Minutes under an hour, hours under a day, then tomorrow/yesterday for
    exactly one day, then whole days. Each step rounds half up.
    """
    diff = (target - now).total_seconds()
    seconds = _js_round(diff)
    minutes = _js_round(seconds / 60)
    hours = _js_round(minutes / 60)
    days = _js_round(hours / 24)
    future = diff > 0

    if abs(minutes) < 60:
        key = "inMinutes" if future else "minutesAgo"
        return RelativeTime(f"card.relativeTime.{key}", str(abs(minutes)))
    if abs(hours) < 24:
        key = "inHours" if future else "hoursAgo"
        return RelativeTime(f"card.relativeTime.{key}", str(abs(hours)))
    if abs(days) == 1:
        key = "tomorrow" if future else "yesterday"
        return RelativeTime(f"card.relativeTime.{key}")
    key = "inDays" if future else "daysAgo"
    return RelativeTime(f"card.relativeTime.{key}", str(abs(days)))

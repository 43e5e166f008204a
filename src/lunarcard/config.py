"""Card configuration from the host's config mapping or environment variables."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from lunarcard.compute import resolve_timezone
from lunarcard.models import LocaleSettings, ObservationContext

NUMBER_FORMATS = (
    "language",
    "system",
    "comma_decimal",
    "decimal_comma",
    "space_comma",
    "none",
)

_TRUE_STRINGS = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Invalid or incomplete card configuration."""


@dataclass(frozen=True)
class CardConfig:
    """Validated card settings."""

    latitude: float
    longitude: float
    use_12_hour: bool = False
    use_miles: bool = False
    language: str = "en"
    number_format: str = "language"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CardConfig":
        """Build from the card's config keys.

        Keys: latitude, longitude, 12hr_format, mile_unit, selected_language,
        number_format.

        Raises:
            ConfigError: When coordinates are missing, non-numeric or out of range,
                or number_format is unknown.
        """
        latitude = _coordinate(data, "latitude", 90.0)
        longitude = _coordinate(data, "longitude", 180.0)
        number_format = data.get("number_format") or "language"
        if number_format not in NUMBER_FORMATS:
            raise ConfigError(f"Unknown number_format: {number_format!r}")
        return cls(
            latitude=latitude,
            longitude=longitude,
            use_12_hour=_flag(data.get("12hr_format")),
            use_miles=_flag(data.get("mile_unit")),
            language=data.get("selected_language") or "en",
            number_format=number_format,
        )

    @classmethod
    def from_env(cls) -> "CardConfig":
        """Build from LUNARCARD_* environment variables."""
        return cls.from_mapping(
            {
                "latitude": os.environ.get("LUNARCARD_LATITUDE"),
                "longitude": os.environ.get("LUNARCARD_LONGITUDE"),
                "12hr_format": os.environ.get("LUNARCARD_12HR"),
                "mile_unit": os.environ.get("LUNARCARD_MILES"),
                "selected_language": os.environ.get("LUNARCARD_LANGUAGE"),
                "number_format": os.environ.get("LUNARCARD_NUMBER_FORMAT"),
            }
        )

    @property
    def locale(self) -> LocaleSettings:
        return LocaleSettings(language=self.language, number_format=self.number_format)

    def context_at(self, date: datetime) -> ObservationContext:
        """ObservationContext for `date`, with the timezone looked up from the coordinates."""
        return ObservationContext(
            date=date,
            latitude=self.latitude,
            longitude=self.longitude,
            locale=self.locale,
            use_12_hour=self.use_12_hour,
            use_miles=self.use_miles,
            timezone=resolve_timezone(self.latitude, self.longitude),
        )


def _coordinate(data: Mapping[str, Any], key: str, limit: float) -> float:
    raw = data.get(key)
    if raw is None or raw == "":
        raise ConfigError(f"Missing {key}")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None
    if not -limit <= value <= limit:
        raise ConfigError(f"{key} out of range: {value}")
    return value


def _flag(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in _TRUE_STRINGS
    return bool(raw)

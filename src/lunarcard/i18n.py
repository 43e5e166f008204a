"""Card translation tables (en/de/fr/ko) with single-placeholder substitution."""

_STRINGS: dict[str, dict[str, str]] = {
    "card.illumination": {
        "en": "Illumination",
        "de": "Beleuchtung",
        "fr": "Illumination",
        "ko": "조명률",
    },
    "card.moonAge": {
        "en": "Moon age",
        "de": "Mondalter",
        "fr": "Âge de la lune",
        "ko": "월령",
    },
    "card.moonRise": {
        "en": "Moonrise",
        "de": "Mondaufgang",
        "fr": "Lever de lune",
        "ko": "월출",
    },
    "card.moonSet": {
        "en": "Moonset",
        "de": "Monduntergang",
        "fr": "Coucher de lune",
        "ko": "월몰",
    },
    "card.moonHigh": {
        "en": "Highest",
        "de": "Höchststand",
        "fr": "Culmination",
        "ko": "남중",
    },
    "card.distance": {
        "en": "Distance",
        "de": "Entfernung",
        "fr": "Distance",
        "ko": "거리",
    },
    "card.azimuth": {
        "en": "Azimuth",
        "de": "Azimut",
        "fr": "Azimut",
        "ko": "방위각",
    },
    "card.altitude": {
        "en": "Altitude",
        "de": "Höhe",
        "fr": "Altitude",
        "ko": "고도",
    },
    "card.fullMoon": {
        "en": "Next full moon",
        "de": "Nächster Vollmond",
        "fr": "Prochaine pleine lune",
        "ko": "다음 보름달",
    },
    "card.newMoon": {
        "en": "Next new moon",
        "de": "Nächster Neumond",
        "fr": "Prochaine nouvelle lune",
        "ko": "다음 삭",
    },
    "card.position": {
        "en": "Position",
        "de": "Position",
        "fr": "Position",
        "ko": "위치",
    },
    "card.direction": {
        "en": "Direction",
        "de": "Richtung",
        "fr": "Direction",
        "ko": "방향",
    },
    "card.overHorizon": {
        "en": "Over horizon",
        "de": "Über dem Horizont",
        "fr": "Au-dessus de l'horizon",
        "ko": "지평선 위",
    },
    "card.underHorizon": {
        "en": "Under horizon",
        "de": "Unter dem Horizont",
        "fr": "Sous l'horizon",
        "ko": "지평선 아래",
    },
    "card.phase.newMoon": {
        "en": "New Moon",
        "de": "Neumond",
        "fr": "Nouvelle lune",
        "ko": "삭",
    },
    "card.phase.waxingCrescentMoon": {
        "en": "Waxing Crescent",
        "de": "Zunehmende Sichel",
        "fr": "Premier croissant",
        "ko": "초승달",
    },
    "card.phase.firstQuarterMoon": {
        "en": "First Quarter",
        "de": "Erstes Viertel",
        "fr": "Premier quartier",
        "ko": "상현달",
    },
    "card.phase.waxingGibbousMoon": {
        "en": "Waxing Gibbous",
        "de": "Zunehmender Mond",
        "fr": "Gibbeuse croissante",
        "ko": "차오르는 달",
    },
    "card.phase.fullMoon": {
        "en": "Full Moon",
        "de": "Vollmond",
        "fr": "Pleine lune",
        "ko": "보름달",
    },
    "card.phase.waningGibbousMoon": {
        "en": "Waning Gibbous",
        "de": "Abnehmender Mond",
        "fr": "Gibbeuse décroissante",
        "ko": "기우는 달",
    },
    "card.phase.thirdQuarterMoon": {
        "en": "Last Quarter",
        "de": "Letztes Viertel",
        "fr": "Dernier quartier",
        "ko": "하현달",
    },
    "card.phase.waningCrescentMoon": {
        "en": "Waning Crescent",
        "de": "Abnehmende Sichel",
        "fr": "Dernier croissant",
        "ko": "그믐달",
    },
    "card.relativeTime.days": {
        "en": "days",
        "de": "Tage",
        "fr": "jours",
        "ko": "일",
    },
    "card.relativeTime.inMinutes": {
        "en": "in {0} minutes",
        "de": "in {0} Minuten",
        "fr": "dans {0} minutes",
        "ko": "{0}분 후",
    },
    "card.relativeTime.minutesAgo": {
        "en": "{0} minutes ago",
        "de": "vor {0} Minuten",
        "fr": "il y a {0} minutes",
        "ko": "{0}분 전",
    },
    "card.relativeTime.inHours": {
        "en": "in {0} hours",
        "de": "in {0} Stunden",
        "fr": "dans {0} heures",
        "ko": "{0}시간 후",
    },
    "card.relativeTime.hoursAgo": {
        "en": "{0} hours ago",
        "de": "vor {0} Stunden",
        "fr": "il y a {0} heures",
        "ko": "{0}시간 전",
    },
    "card.relativeTime.tomorrow": {
        "en": "tomorrow",
        "de": "morgen",
        "fr": "demain",
        "ko": "내일",
    },
    "card.relativeTime.yesterday": {
        "en": "yesterday",
        "de": "gestern",
        "fr": "hier",
        "ko": "어제",
    },
    "card.relativeTime.inDays": {
        "en": "in {0} days",
        "de": "in {0} Tagen",
        "fr": "dans {0} jours",
        "ko": "{0}일 후",
    },
    "card.relativeTime.daysAgo": {
        "en": "{0} days ago",
        "de": "vor {0} Tagen",
        "fr": "il y a {0} jours",
        "ko": "{0}일 전",
    },
    "card.chart.title": {
        "en": "Moon altitude today",
        "de": "Mondhöhe heute",
        "fr": "Altitude de la lune aujourd'hui",
        "ko": "오늘의 달 고도",
    },
    "card.chart.horizon": {
        "en": "Horizon",
        "de": "Horizont",
        "fr": "Horizon",
        "ko": "지평선",
    },
    "card.error.config": {
        "en": "Invalid card configuration: {0}",
        "de": "Ungültige Kartenkonfiguration: {0}",
        "fr": "Configuration de carte invalide : {0}",
        "ko": "카드 설정이 올바르지 않아요: {0}",
    },
}


def localize(key: str, lang: str, search: str = "", replace: str = "") -> str:
    """Return the translated string for key in lang.

    Regional variants ("de-CH") use their base language table. Falls back to
    'en', then to the key itself if not found. When `search` is given, its
    first occurrence is replaced with `replace`.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        text = key
    else:
        base = lang.replace("_", "-").split("-")[0].lower() if lang else ""
        text = entry.get(lang) or entry.get(base) or entry.get("en") or key
    if search:
        text = text.replace(search, replace, 1)
    return text

"""Static geography tables for clustering events by country."""

# ISO 3166 alpha-2 code -> (name, latitude, longitude) of an approximate centre
COUNTRY_COORDINATES: dict[str, tuple[str, float, float]] = {
    "US": ("United States", 39.8, -98.5),
    "GB": ("United Kingdom", 54.0, -2.0),
    "DE": ("Germany", 51.1, 10.4),
    "FR": ("France", 46.2, 2.2),
    "IT": ("Italy", 41.9, 12.5),
    "ES": ("Spain", 40.4, -3.7),
    "CA": ("Canada", 56.1, -106.3),
    "AU": ("Australia", -25.3, 133.8),
    "JP": ("Japan", 36.2, 138.2),
    "BR": ("Brazil", -14.2, -51.9),
    "IN": ("India", 20.6, 78.9),
    "CN": ("China", 35.8, 104.2),
    "RU": ("Russia", 61.5, 105.3),
    "MX": ("Mexico", 23.6, -102.5),
    "KR": ("South Korea", 35.9, 127.8),
    "NL": ("Netherlands", 52.1, 5.3),
    "SE": ("Sweden", 60.1, 18.6),
    "CH": ("Switzerland", 46.8, 8.2),
    "IR": ("Iran", 32.4, 53.7),
    "UA": ("Ukraine", 48.4, 31.2),
    "SY": ("Syria", 34.8, 39.0),
    "IQ": ("Iraq", 33.2, 43.7),
    "AF": ("Afghanistan", 33.9, 67.7),
    "PK": ("Pakistan", 30.4, 69.3),
    "MM": ("Myanmar", 21.9, 95.9),
    "KP": ("North Korea", 40.3, 127.5),
    "VE": ("Venezuela", 6.4, -66.6),
    "CU": ("Cuba", 21.5, -77.8),
    "SD": ("Sudan", 12.9, 30.2),
    "ET": ("Ethiopia", 9.1, 40.5),
    "YE": ("Yemen", 15.6, 48.5),
    "LY": ("Libya", 26.3, 17.2),
}

# Upper-cased spellings providers use -> canonical code
REGION_ALIASES: dict[str, str] = {
    "USA": "US",
    "UNITED STATES OF AMERICA": "US",
    "UK": "GB",
    "GREAT BRITAIN": "GB",
    "ENGLAND": "GB",
    "RUSSIAN FEDERATION": "RU",
    "REPUBLIC OF KOREA": "KR",
    "KOREA, REPUBLIC OF": "KR",
    "DPRK": "KP",
    "THE NETHERLANDS": "NL",
    "IRAN, ISLAMIC REPUBLIC OF": "IR",
    **{name.upper(): code for code, (name, _, _) in COUNTRY_COORDINATES.items()},
}

# Event kinds that always need a map marker; unknown regions get a random one
FALLBACK_KINDS: frozenset[str] = frozenset({"outage"})

JITTER_DEGREES = 5.0  # total spread, i.e. +/-2.5 degrees


def canonical_region(value: str | None) -> str | None:
    """Canonical upper-case key for a country code or name, None if blank."""
    if value is None:
        return None
    key = value.strip().upper()
    if not key:
        return None
    return REGION_ALIASES.get(key, key)


def region_label(key: str) -> str:
    entry = COUNTRY_COORDINATES.get(key)
    return entry[0] if entry else key

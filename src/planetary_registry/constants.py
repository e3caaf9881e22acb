"""Shared constants for planetary-registry-mcp.

Centralizes the fixed astrological tables used by the ephemeris engine and the
calculators, so they are defined once and imported wherever needed.
"""

import swisseph as swe

# Zodiac signs in ecliptic order (index 0 = Aries, index 11 = Pisces).
# Used to convert an absolute longitude to a sign name: sign = ZODIAC_SIGNS[int(lon // 30)]
ZODIAC_SIGNS: list[str] = [
    "Aries", "Taurus", "Gemini", "Cancer",
    "Leo", "Virgo", "Libra", "Scorpio",
    "Sagittarius", "Capricorn", "Aquarius", "Pisces",
]

# The four physical elements, repeating in sign order from Aries.
ELEMENTS: list[str] = ["Fire", "Earth", "Air", "Water"]

SIGN_ELEMENTS: dict[str, str] = {
    sign: ELEMENTS[i % 4] for i, sign in enumerate(ZODIAC_SIGNS)
}

# Seven classical bodies in the order we calculate them.
# Each entry is a (pysweph_constant, display_name) pair so the two lists stay in sync.
_BODY_PAIRS: list[tuple[int, str]] = [
    (swe.SUN,     "Sun"),
    (swe.MOON,    "Moon"),
    (swe.MERCURY, "Mercury"),
    (swe.VENUS,   "Venus"),
    (swe.MARS,    "Mars"),
    (swe.JUPITER, "Jupiter"),
    (swe.SATURN,  "Saturn"),
]

BODY_IDS: dict[str, int] = {name: body_id for body_id, name in _BODY_PAIRS}
BODIES: list[str] = [p[1] for p in _BODY_PAIRS]

# Weekday rulers, index 0 = Sunday.
DAY_RULERS: list[str] = [
    "Sun", "Moon", "Mars", "Mercury", "Jupiter", "Venus", "Saturn",
]

# Descending apparent speed; planetary hours step through this sequence.
CHALDEAN_ORDER: list[str] = [
    "Saturn", "Jupiter", "Mars", "Sun", "Venus", "Mercury", "Moon",
]

# Planet -> element used for planetary-hour influence. Distinct from the
# sign/element table above.
PLANET_ELEMENTS: dict[str, str] = {
    "Sun": "Fire",
    "Mars": "Fire",
    "Mercury": "Air",
    "Jupiter": "Air",
    "Moon": "Water",
    "Venus": "Water",
    "Saturn": "Earth",
}

# Essential dignity table. Domicile/exaltation/detriment/fall are checked in
# that order.
DIGNITY_TABLE: dict[str, dict[str, list[str]]] = {
    "Sun": {
        "domicile": ["Leo"],
        "exaltation": ["Aries"],
        "detriment": ["Aquarius"],
        "fall": ["Libra"],
    },
    "Moon": {
        "domicile": ["Cancer"],
        "exaltation": ["Taurus"],
        "detriment": ["Capricorn"],
        "fall": ["Scorpio"],
    },
    "Mercury": {
        "domicile": ["Gemini", "Virgo"],
        "exaltation": ["Virgo"],
        "detriment": ["Sagittarius", "Pisces"],
        "fall": ["Pisces"],
    },
    "Venus": {
        "domicile": ["Taurus", "Libra"],
        "exaltation": ["Pisces"],
        "detriment": ["Aries", "Scorpio"],
        "fall": ["Virgo"],
    },
    "Mars": {
        "domicile": ["Aries", "Scorpio"],
        "exaltation": ["Capricorn"],
        "detriment": ["Libra", "Taurus"],
        "fall": ["Cancer"],
    },
    "Jupiter": {
        "domicile": ["Sagittarius", "Pisces"],
        "exaltation": ["Cancer"],
        "detriment": ["Gemini", "Virgo"],
        "fall": ["Capricorn"],
    },
    "Saturn": {
        "domicile": ["Capricorn", "Aquarius"],
        "exaltation": ["Libra"],
        "detriment": ["Cancer", "Leo"],
        "fall": ["Aries"],
    },
}

DIGNITY_SCORES: dict[str, int] = {
    "Domicile": 5,
    "Exaltation": 4,
    "Detriment": -5,
    "Fall": -4,
    "Neutral": 0,
}

RETROGRADE_PENALTY = 2
SCORE_MIN = -10
SCORE_MAX = 10

# Tattva cycle from sunrise: five 24-minute slices repeating every 2 hours.
TATTVAS: list[tuple[str, str]] = [
    ("Akasha", "Spirit"),
    ("Vayu", "Air"),
    ("Tejas", "Fire"),
    ("Apas", "Water"),
    ("Prithvi", "Earth"),
]
TATTVA_MINUTES = 24
TATTVA_CYCLE_MINUTES = TATTVA_MINUTES * len(TATTVAS)

SYNODIC_MONTH_DAYS = 29.53058867

# Maps full house system names to single-letter codes used by swe.houses().
# Single-letter codes pass through unchanged (looked up as their own key).
HOUSE_SYSTEM_CODES: dict[str, str] = {
    "Placidus":          "P",
    "Koch":              "K",
    "Porphyrius":        "O",
    "Regiomontanus":     "R",
    "Campanus":          "C",
    "Equal":             "E",
    "Whole Sign":        "W",
    "Alcabitus":         "B",
}

HOUSE_SYSTEM_NAMES: dict[str, str] = {
    code: name for name, code in HOUSE_SYSTEM_CODES.items()
}

"""Short interpretive text for a body's placement."""

from typing import Optional

from ..models import BodyPlacement

BODY_MEANINGS = {
    "Sun": "Core identity, will and vitality",
    "Moon": "Emotions, instincts and inner needs",
    "Mercury": "Communication, thinking and learning",
    "Venus": "Values, affection and aesthetic taste",
    "Mars": "Drive, energy and how action is taken",
    "Jupiter": "Growth, expansion and outlook",
    "Saturn": "Discipline, limits and long lessons",
}

SIGN_QUALITIES = {
    "Aries": "assertive, pioneering and independent",
    "Taurus": "stable, sensual and practical",
    "Gemini": "curious, communicative and adaptable",
    "Cancer": "nurturing, emotional and protective",
    "Leo": "creative, confident and expressive",
    "Virgo": "analytical, precise and service-minded",
    "Libra": "harmonious, diplomatic and relational",
    "Scorpio": "intense, transformative and private",
    "Sagittarius": "adventurous, philosophical and free",
    "Capricorn": "ambitious, disciplined and traditional",
    "Aquarius": "inventive, independent and humanitarian",
    "Pisces": "intuitive, compassionate and dreamy",
}

HOUSE_TOPICS = {
    1: "self-image and how you present yourself",
    2: "possessions, values and material security",
    3: "communication, siblings and short journeys",
    4: "home, family and roots",
    5: "creativity, romance and self-expression",
    6: "work, health and daily routine",
    7: "partnerships and close relationships",
    8: "transformation and shared resources",
    9: "philosophy, higher learning and travel",
    10: "career, reputation and public standing",
    11: "friendships, groups and hopes",
    12: "the subconscious, retreat and hidden matters",
}

DIGNITY_MEANINGS = {
    "Domicile": "strong and at home",
    "Exaltation": "honored, expressing its best qualities",
    "Detriment": "uncomfortable, needs extra effort",
    "Fall": "weakened, needs support",
    "Neutral": "balanced and adaptable",
}

ELEMENT_QUALITIES = {
    "Fire": "passionate and action-oriented",
    "Earth": "practical and grounded",
    "Air": "intellectual and social",
    "Water": "emotional and intuitive",
}


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def interpret_placement(placement: BodyPlacement, house: Optional[int] = None) -> str:
    """
    Plain-language reading of a placement.

    Args:
        placement: Evaluated body placement
        house: House number (1-12), if houses were calculated

    Returns:
        Multi-line text: body meaning, sign, house, dignity and element.
    """
    lines = [
        f"{BODY_MEANINGS[placement.body]}.",
        f"In {placement.sign}: expressed in a {SIGN_QUALITIES[placement.sign]} way.",
    ]
    if house is not None:
        lines.append(f"In the {ordinal(house)} house: focused on {HOUSE_TOPICS[house]}.")

    dignity = f"Dignity: {placement.dignity}, {DIGNITY_MEANINGS[placement.dignity]}"
    if placement.is_retrograde:
        dignity += " (retrograde, energy turned inward)"
    lines.append(dignity + ".")

    element = placement.element
    lines.append(f"Element: {element}, {ELEMENT_QUALITIES[element]}.")
    return "\n".join(lines)

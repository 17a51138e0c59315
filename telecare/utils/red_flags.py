"""Red flag detection for high-severity symptom text."""

import re
from typing import Dict, List, Tuple


# Emergency symptom patterns by category
RED_FLAG_PATTERNS: Dict[str, List[str]] = {
    "cardiac": [
        r"chest pain",
        r"(crushing|pressure|tight\w*).*chest",
        r"chest.*(tight|pressure|heavy)",
        r"pain.*radiating.*(arm|jaw|shoulder)",
        r"heart attack",
        r"palpitations?.*(faint|dizz)",
    ],
    "respiratory": [
        r"shortness of breath",
        r"short of breath",
        r"can'?t breathe",
        r"difficulty breathing",
        r"breathing difficulty",
        r"gasping",
        r"lips.*blue",
        r"coughing (up )?blood",
    ],
    "neurological": [
        r"worst headache",
        r"sudden.*severe.*headache",
        r"(loss of|lost) consciousness",
        r"unconscious",
        r"passed out",
        r"seizure",
        r"convulsion",
        r"stroke",
        r"slurred speech",
        r"face.*droop",
        r"numbness.*(one side|arm|face)",
    ],
    "psychiatric": [
        r"suicid",
        r"kill myself",
        r"self[- ]harm",
        r"want to die",
    ],
    "bleeding": [
        r"heavy bleeding",
        r"bleeding.*won'?t stop",
        r"vomiting blood",
        r"blood in (my )?(stool|urine|vomit)",
        r"black.*stool",
    ],
    "abdominal": [
        r"severe.*(abdominal|stomach) pain",
        r"(abdomen|stomach).*rigid",
    ],
    "allergic": [
        r"anaphyla",
        r"throat.*(closing|swelling)",
        r"(tongue|lips?|face).*swell",
        r"severe allergic",
    ],
}

RED_FLAG_SPECIALIZATIONS: Dict[str, str] = {
    "cardiac": "Cardiologist",
    "respiratory": "Pulmonologist",
    "neurological": "Neurologist",
    "psychiatric": "Psychiatrist",
    "bleeding": "Gastroenterologist",
    "abdominal": "Gastroenterologist",
    "allergic": "Allergist",
}


def detect_red_flags(text: str) -> Tuple[bool, List[str]]:
    """
    Detect red flags in symptom text.

    Args:
        text: Symptom description

    Returns:
        Tuple of (has_red_flags, list_of_detected_categories)
    """
    text_lower = (text or "").lower()
    detected_flags = []

    for category, patterns in RED_FLAG_PATTERNS.items():
        for pattern in patterns:
            if re.search(pattern, text_lower):
                detected_flags.append(category)
                break  # Only add category once

    return len(detected_flags) > 0, detected_flags


def get_red_flag_description(category: str) -> str:
    """Get human-readable description of red flag category."""
    descriptions = {
        "cardiac": "possible heart-related problem",
        "respiratory": "serious breathing difficulty",
        "neurological": "possible neurological emergency",
        "psychiatric": "mental health crisis",
        "bleeding": "significant bleeding",
        "abdominal": "severe abdominal problem",
        "allergic": "severe allergic reaction",
    }
    return descriptions.get(category, category)

"""
Greek text normalization for name comparison.
"""

# Accented vowels (tonos and tonos+dialytika) folded to their base letters
GREEK_ACCENT_MAP = str.maketrans(
    {
        "ά": "α",
        "έ": "ε",
        "ή": "η",
        "ί": "ι",
        "ό": "ο",
        "ύ": "υ",
        "ώ": "ω",
        "ΐ": "ι",
        "ΰ": "υ",
    }
)


def normalize_greek(text: str) -> str:
    """Lowercase, trim and strip Greek accents, e.g. 'Άννα ' -> 'αννα'."""
    return text.lower().strip().translate(GREEK_ACCENT_MAP)

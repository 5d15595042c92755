"""
Event title to client name matching.

Calendar titles are typed by hand: names appear reversed ("Surname Firstname"),
partially, with or without accents, and next to free text ("- session").
Each client is tested with progressively looser rules and the first rule that
hits wins for that client.
"""

import re
from collections.abc import Iterable, Sequence

from core.config import FIRST_NAME_MIN_LENGTH, SURNAME_MIN_LENGTH
from core.normalize import normalize_greek


def contains_word(text: str, word: str) -> bool:
    """Check if word appears in text on word boundaries (Unicode aware)."""
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


def find_special_keyword(title: str, keywords: Iterable[str]) -> str | None:
    """Return the first keyword found in the title, ignoring case and accents."""
    normalized_title = normalize_greek(title)
    for keyword in keywords:
        normalized_keyword = normalize_greek(keyword)
        if normalized_keyword and normalized_keyword in normalized_title:
            return keyword
    return None


def matches_client(
    title: str,
    normalized_title: str,
    client_name: str,
    first_name_min_length: int = FIRST_NAME_MIN_LENGTH,
) -> bool:
    """
    Test one client name against an event title.

    Rules, in order:
    1. Full normalized name is a substring of the title
    2. Single-word names: the word is a substring (no further rules)
    3. Reversed "last first" is a substring
    4. Surname on word boundaries (if long enough)
    5. First name on word boundaries (if long enough)
    6. Hyphenated names: any part is a substring of the lowercased title
    """
    normalized_name = normalize_greek(client_name)
    name_parts = normalized_name.split()
    if not name_parts:
        return False

    if normalized_name in normalized_title:
        return True

    if len(name_parts) < 2:
        return name_parts[0] in normalized_title

    first_name = name_parts[0]
    surname = name_parts[-1]

    if f"{surname} {first_name}" in normalized_title:
        return True

    if len(surname) >= SURNAME_MIN_LENGTH and contains_word(normalized_title, surname):
        return True

    if len(first_name) >= first_name_min_length and contains_word(normalized_title, first_name):
        return True

    if "-" in client_name:
        title_lower = title.lower()
        for part in client_name.split("-"):
            part = part.strip().lower()
            if part and part in title_lower:
                return True

    return False


def find_client_matches(
    title: str,
    client_names: Sequence[str],
    special_keywords: Sequence[str] = (),
    first_name_min_length: int = FIRST_NAME_MIN_LENGTH,
) -> list[str]:
    """
    Find all clients an event title refers to.

    A special keyword (e.g. "Supervision") in the title short-circuits client
    matching and is returned as the only match.

    Returns:
        Matching client names in roster order; empty if nothing matched
    """
    if not title or not title.strip():
        return []

    keyword = find_special_keyword(title, special_keywords)
    if keyword is not None:
        return [keyword]

    normalized_title = normalize_greek(title)
    matches = []

    for client_name in client_names:
        if not client_name or not client_name.strip():
            continue
        if client_name in matches:
            continue
        if matches_client(title, normalized_title, client_name, first_name_min_length):
            matches.append(client_name)

    return matches

"""
Description Generator

Turns the labels of one cycle into a single sentence for narration.

    ["Alice"]                  -> "I see Alice"
    ["you", "laptop"]          -> "I see you and a laptop"
    ["Alice", "laptop", "cup"] -> "I see Alice, a laptop, and a cup"

Names are spoken without an article, objects with "a". The article is
always "a" (never "an") and a label counts as a name when it is "you" or a
single capitalized word, so multi-word names are read as objects and
capitalized object labels as names.
"""

from typing import Iterable, List, Optional

from .correlation import UNKNOWN_PERSON_LABEL
from .models import PERSON_LABEL

SELF_LABEL = "you"

# Capitalized labels that must still be narrated as objects
EXCLUDED_NAME_LABELS = frozenset({
    "TV",
    "Person",
    "Unknown",
})


def dedupe_labels(labels: Iterable[str]) -> List[str]:
    """Drop repeated labels, keeping first-seen order."""
    seen = set()
    unique = []
    for label in labels:
        if label not in seen:
            seen.add(label)
            unique.append(label)
    return unique


def is_name(label: str) -> bool:
    """Check whether a label is grammatically a name (no article)."""
    if label in (PERSON_LABEL, UNKNOWN_PERSON_LABEL):
        return False
    if label in EXCLUDED_NAME_LABELS:
        return False
    if label == SELF_LABEL:
        return True
    return bool(label) and label[0].isupper() and " " not in label


def with_article(label: str) -> str:
    return label if is_name(label) else f"a {label}"


def generate_description(labels: Iterable[str]) -> Optional[str]:
    """
    Render labels as one sentence.

    Args:
        labels: Narration labels of one cycle, possibly repeated

    Returns:
        The sentence, or None when there is nothing to narrate
    """
    phrases = [with_article(label) for label in dedupe_labels(labels)]

    if not phrases:
        return None
    if len(phrases) == 1:
        return f"I see {phrases[0]}"
    if len(phrases) == 2:
        return f"I see {phrases[0]} and {phrases[1]}"
    return f"I see {', '.join(phrases[:-1])}, and {phrases[-1]}"

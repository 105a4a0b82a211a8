"""Category codes derived from catalog classification strings.

Catalog books carry a Chinese Library Classification call number such as
``"I247.5/1"`` or ``"TP312,TP311"``. The first letter of the first call
number is the top-level class used as the preference dimension.
"""

from typing import Dict, Optional

# Catch-all class for comprehensive works
UNCATEGORIZED = "Z"

CATEGORY_NAMES: Dict[str, str] = {
    "A": "Marxism, Leninism, Mao Zedong Thought",
    "B": "Philosophy and Religion",
    "C": "Social Sciences",
    "D": "Politics and Law",
    "E": "Military Science",
    "F": "Economics",
    "G": "Culture, Science, Education and Sports",
    "H": "Languages and Linguistics",
    "I": "Literature",
    "J": "Arts",
    "K": "History and Geography",
    "N": "Natural Sciences",
    "O": "Mathematics, Physics and Chemistry",
    "P": "Astronomy and Earth Sciences",
    "Q": "Biological Sciences",
    "R": "Medicine and Health",
    "S": "Agriculture",
    "T": "Industrial Technology",
    "U": "Transportation",
    "V": "Aviation and Aerospace",
    "X": "Environmental Science and Safety",
    "Z": "Comprehensive Works",
}


def extract_category_code(classification: Optional[str]) -> str:
    """Return the category code of a classification string.

    Only the part before the first comma is considered. The first alphabetic
    character is returned uppercased; inputs without one fall back to
    :data:`UNCATEGORIZED`.

    Example:
        >>> extract_category_code("A41/2-1=2")
        'A'
        >>> extract_category_code("  i247.5/1, K825")
        'I'
        >>> extract_category_code("")
        'Z'
    """
    if not classification or not classification.strip():
        return UNCATEGORIZED

    first_part = classification.split(",")[0].strip()
    for char in first_part:
        if char.isalpha():
            return char.upper()

    return UNCATEGORIZED


def category_name(code: str) -> str:
    """Human-readable name of a top-level class."""
    return CATEGORY_NAMES.get(code.upper() if code else "", CATEGORY_NAMES[UNCATEGORIZED])

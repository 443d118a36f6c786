"""Edit-distance similarity using RapidFuzz.

Levenshtein distance with unit cost for insertion, deletion and
substitution, computed over whole strings.
"""

from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning a into b."""
    return Levenshtein.distance(a, b)


def similarity_ratio(a: str, b: str) -> float:
    """Similarity in [0, 1]: 1 - distance / longer length.

    Two empty strings are identical (1.0).
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / longest

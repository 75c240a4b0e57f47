"""
Label Similarity Scorer
Scores how alike two survey labels are (specialty names, column headers, regions).
Percentile-style suffixes are kept apart so "tcc_p50" never passes for "tcc_p90".
"""

import re

from rapidfuzz.distance import Levenshtein

from config import DATA_TYPE_BONUS, DIFFERENT_NUMBERS_SCORE, DIFFERENT_PREFIX_SCORE

_NON_ALNUM = re.compile(r'[^a-z0-9]')
_DIGITS = re.compile(r'[0-9]')
_DIGIT_RUNS = re.compile(r'[0-9]+')


def normalize_label(label):
    """
    Aggressively normalize a label for comparison.
    Lowercases and removes ALL punctuation and spaces.

    Args:
        label: Raw label string (None is treated as empty)

    Returns:
        Normalized label
    """
    if label is None:
        return ""
    return _NON_ALNUM.sub('', str(label).lower())


def digit_runs(label):
    """Ordered digit runs of the normalized label ("tcc_p50" -> ['50'])."""
    return _DIGIT_RUNS.findall(normalize_label(label))


def levenshtein_distance(str1, str2):
    """Standard edit distance (insertions, deletions, substitutions all cost 1)."""
    return Levenshtein.distance(str1, str2)


def similarity_score(str1, str2, type1=None, type2=None):
    """
    Calculate similarity between two labels in [0, 1].

    Rules, in order:
    1. Identical after normalization -> 1.0
    2. Letter-only prefixes differ -> 0.1
    3. Both carry digit runs and the runs differ (p50 vs p90) -> 0.2
    4. Otherwise 1 - levenshtein / longest length, +0.1 when both
       data types are known and equal (capped at 1.0)

    Args:
        str1, str2: Labels to compare
        type1, type2: Optional inferred data types of the labelled columns

    Returns:
        Similarity score
    """
    norm1 = normalize_label(str1)
    norm2 = normalize_label(str2)

    if norm1 == norm2:
        return 1.0

    prefix1 = _DIGITS.sub('', norm1)
    prefix2 = _DIGITS.sub('', norm2)
    if prefix1 != prefix2:
        return DIFFERENT_PREFIX_SCORE

    numbers1 = _DIGIT_RUNS.findall(norm1)
    numbers2 = _DIGIT_RUNS.findall(norm2)
    if numbers1 and numbers2 and numbers1 != numbers2:
        return DIFFERENT_NUMBERS_SCORE

    distance = levenshtein_distance(norm1, norm2)
    similarity = 1 - distance / max(len(norm1), len(norm2))

    if type1 is not None and type2 is not None and type1 == type2:
        similarity += DATA_TYPE_BONUS

    return min(similarity, 1.0)

"""
Auto-Mapper
Suggests canonical categories for unmapped survey labels using exact matches,
synonym tables and fuzzy string similarity, and bulk-applies confident matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from config import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    PERSIST_RETRIES,
    SUGGESTION_DISPLAY_FLOOR,
    SUGGESTION_DISPLAY_LIMIT,
    SYNONYM_MATCH_CONFIDENCE,
)
from errors import InvalidInput, PersistenceFailure
from mappers.models import (
    AppliedMapping,
    AutoMapReport,
    CanonicalCategory,
    MappingFailure,
    MappingSuggestion,
    UnmappedLabel,
)
from utils.similarity import digit_runs, normalize_label, similarity_score
from utils.synonyms import keys_for_category, label_hits_entry, synonyms_for

logger = logging.getLogger(__name__)

# Absorbs float noise such as 0.30000000000000004 around the display floor
_FLOAT_TOLERANCE = 1e-9

Scorer = Callable[..., float]


@dataclass(frozen=True)
class AutoMapConfig:
    """Switches for the auto-mapper."""

    use_string_matching: bool = True
    use_synonyms: bool = True
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD


def score_category(label: str, category: CanonicalCategory, config: AutoMapConfig,
                   data_type: Optional[str] = None, scorer: Scorer = similarity_score,
                   learned_target: Optional[str] = None) -> float:
    """
    Confidence that a label belongs to one category.

    Maximum of: similarity to the standardized name, best similarity to any
    confirmed source label, and the synonym floor (0.8) when the label hits a
    synonym entry describing the category. A learned correction pointing at
    the category scores 1.0.
    """
    if learned_target and learned_target.strip().lower() == category.key:
        return 1.0

    candidates = [category.standardized_name] + [source.label for source in category.source_labels]
    max_confidence = 0.0

    if config.use_string_matching:
        for candidate in candidates:
            max_confidence = max(max_confidence, scorer(label, candidate, data_type, category.data_type))
    else:
        # Exact matches still count with fuzzy matching switched off
        normalized = normalize_label(label)
        if any(normalize_label(candidate) == normalized for candidate in candidates):
            max_confidence = 1.0

    # "Total Cash P90" must not inherit the tcc entry of a tcc_p50 column
    if (config.use_synonyms and max_confidence < SYNONYM_MATCH_CONFIDENCE
            and digit_runs(label) == digit_runs(category.standardized_name)):
        table = synonyms_for(category.kind)
        for key in keys_for_category(category.standardized_name, table):
            if label_hits_entry(label, key, table[key]):
                max_confidence = max(max_confidence, SYNONYM_MATCH_CONFIDENCE)
                break

    return max_confidence


def suggest_mapping(label, vendor=None, categories=(), config: Optional[AutoMapConfig] = None, *,
                    limit: Optional[int] = None, scorer: Scorer = similarity_score,
                    learned: Optional[Dict[str, str]] = None) -> List[MappingSuggestion]:
    """
    Rank canonical categories for one unmapped label.

    Args:
        label: Label text or an UnmappedLabel
        vendor: Originating vendor (taken from the UnmappedLabel when omitted)
        categories: A CategoryMappingStore or a sequence of CanonicalCategory
        config: AutoMapConfig (defaults apply when omitted)
        limit: Keep only the top N suggestions (None keeps all)
        scorer: Similarity function, injectable for testing
        learned: Learned corrections (lowercase label -> name); read from the
            store when one is passed

    Returns:
        Suggestions scoring at least 0.3, highest first, ties in category order.
        An empty list means no match and the label goes to manual mapping.

    Raises:
        InvalidInput: the label is blank
    """
    config = config or AutoMapConfig()
    name, vendor, data_type = _unpack_label(label, vendor)

    if hasattr(categories, 'categories'):
        if learned is None:
            learned = categories.learned_mappings()
        categories = categories.categories()
    learned_target = (learned or {}).get(name.lower())

    scored = []
    for category in categories:
        confidence = score_category(name, category, config, data_type=data_type,
                                    scorer=scorer, learned_target=learned_target)
        if confidence + _FLOAT_TOLERANCE >= SUGGESTION_DISPLAY_FLOOR:
            scored.append(MappingSuggestion(category.standardized_name, confidence))

    # sorted() is stable, so equal scores keep category insertion order
    suggestions = sorted(scored, key=lambda s: s.confidence, reverse=True)
    if limit is not None:
        suggestions = suggestions[:limit]

    logger.debug("Label '%s' (%s): %d suggestion(s)", name, vendor, len(suggestions))
    return suggestions


def suggest_for_display(label, vendor=None, categories=(), config: Optional[AutoMapConfig] = None,
                        **kwargs) -> List[MappingSuggestion]:
    """Top suggestions for the manual mapping screen."""
    return suggest_mapping(label, vendor, categories, config, limit=SUGGESTION_DISPLAY_LIMIT, **kwargs)


def accepted_suggestion(suggestions: List[MappingSuggestion],
                        config: AutoMapConfig) -> Optional[MappingSuggestion]:
    """The top suggestion if it clears the auto-accept threshold."""
    if suggestions and suggestions[0].confidence + _FLOAT_TOLERANCE >= config.confidence_threshold:
        return suggestions[0]
    return None


def auto_map_all(labels: Iterable[UnmappedLabel], store, config: Optional[AutoMapConfig] = None, *,
                 retries: int = PERSIST_RETRIES, backoff: float = 0.0,
                 scorer: Scorer = similarity_score,
                 sleep: Optional[Callable[[float], None]] = None) -> AutoMapReport:
    """
    Suggest mappings for every label and apply the confident ones.

    Suggestions for the whole batch are computed against one snapshot of the
    store, so a label accepted early in the batch never influences a later
    one. Accepted labels are then appended to their matched category and
    saved; a save that still fails after the retries is reported for that
    label only.

    Args:
        labels: UnmappedLabel objects (anything else raises InvalidInput)
        store: CategoryMappingStore providing the snapshot and save_mapping
        config: AutoMapConfig (defaults apply when omitted)
        retries: Save attempts per label
        backoff: Base delay in seconds between attempts, doubled after each
            failure; only used together with sleep
        scorer: Similarity function, injectable for testing
        sleep: Delay function supplied by the storage layer; None retries
            immediately so the batch never blocks

    Returns:
        AutoMapReport with applied, unmatched and failed labels; suggestions
        are keyed by (label name, vendor)
    """
    config = config or AutoMapConfig()
    labels = list(labels)
    for label in labels:
        if not isinstance(label, UnmappedLabel):
            raise InvalidInput(f"auto_map_all expects UnmappedLabel items, got {type(label).__name__}")
        _unpack_label(label, None)

    snapshot = store.categories()
    learned = store.learned_mappings()
    report = AutoMapReport()

    decisions = []
    for label in labels:
        suggestions = suggest_mapping(label, None, snapshot, config, scorer=scorer, learned=learned)
        report.suggestions[(label.name, label.vendor)] = suggestions
        decisions.append((label, accepted_suggestion(suggestions, config)))

    for label, best in decisions:
        if best is None:
            report.unmatched.append(label)
            continue

        error = _persist_with_retry(store, best.standardized_name, label, retries, backoff, sleep)
        if error is None:
            report.applied.append(AppliedMapping(label.name, label.vendor,
                                                 best.standardized_name, best.confidence))
        else:
            report.failed.append(MappingFailure(label.name, label.vendor,
                                                best.standardized_name, str(error)))

    logger.info("Auto-mapping completed: %d applied, %d unmatched, %d failed",
                len(report.applied), len(report.unmatched), len(report.failed))
    if report.failed:
        logger.warning("Failed mappings: %s", [f.label for f in report.failed])
    return report


def _persist_with_retry(store, standardized_name, label, retries, backoff, sleep):
    attempts = max(1, retries)
    for attempt in range(1, attempts + 1):
        try:
            store.add_source_label(standardized_name, label.name, label.vendor)
            return None
        except PersistenceFailure as e:
            logger.warning("Attempt %d/%d to save '%s' -> '%s' failed: %s",
                           attempt, attempts, label.name, standardized_name, e)
            if attempt == attempts:
                return e
            if backoff and sleep is not None:
                sleep(backoff * 2 ** (attempt - 1))
    return None


def _unpack_label(label, vendor):
    if isinstance(label, UnmappedLabel):
        name, vendor, data_type = label.name, label.vendor if vendor is None else vendor, label.data_type
    else:
        name, data_type = label, None
    if name is None or not str(name).strip():
        raise InvalidInput("A non-blank label is required")
    return str(name).strip(), vendor, data_type

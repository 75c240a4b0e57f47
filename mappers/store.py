"""
Category Mapping Store
Holds the confirmed mappings (canonical name -> vendor labels) for one category kind.
Persistence is delegated to an injected saver callable so any backend can sit behind it.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from errors import InvalidInput, PersistenceFailure
from mappers.models import CanonicalCategory, CategoryKind, UnmappedLabel

logger = logging.getLogger(__name__)

Saver = Callable[[CanonicalCategory], None]


class CategoryMappingStore:
    """Confirmed mappings for a single CategoryKind, in insertion order."""

    def __init__(self, kind=CategoryKind.SPECIALTY, categories: Iterable[CanonicalCategory] = (),
                 saver: Optional[Saver] = None, deleter: Optional[Callable[[str], None]] = None):
        self.kind = CategoryKind(kind)
        self._saver = saver
        self._deleter = deleter
        self._categories: Dict[str, CanonicalCategory] = {}
        self._learned: Dict[str, str] = {}
        for category in categories:
            if category.kind != self.kind:
                raise InvalidInput(
                    f"Category '{category.standardized_name}' is a {category.kind.value}, "
                    f"not a {self.kind.value}"
                )
            if category.key in self._categories:
                raise InvalidInput(f"Duplicate category '{category.standardized_name}'")
            self._categories[category.key] = category

    def __len__(self):
        return len(self._categories)

    def __contains__(self, name):
        return isinstance(name, str) and name.strip().lower() in self._categories

    def categories(self) -> Tuple[CanonicalCategory, ...]:
        """Immutable snapshot of the current categories."""
        return tuple(self._categories.values())

    def get(self, name: str) -> Optional[CanonicalCategory]:
        if not name:
            return None
        return self._categories.get(name.strip().lower())

    def create_category(self, standardized_name: str, source_labels: Iterable[Tuple[str, str]] = (),
                        data_type: Optional[str] = None) -> CanonicalCategory:
        """Create and persist a new category; the name must be unique within this kind."""
        name = _require_text(standardized_name, "standardized name")
        if name.lower() in self._categories:
            raise InvalidInput(f"Category '{name}' already exists for {self.kind.value}")

        category = CanonicalCategory(standardized_name=name, kind=self.kind, data_type=data_type)
        for label, vendor in source_labels:
            category = category.with_source_label(_require_text(label, "label"), vendor)

        self.save_mapping(category)
        return category

    def save_mapping(self, category: CanonicalCategory) -> CanonicalCategory:
        """
        Persist a category through the backend saver, then update memory.

        Raises:
            PersistenceFailure: the backend rejected the write; memory is left unchanged
        """
        if category.kind != self.kind:
            raise InvalidInput(
                f"Cannot save a {category.kind.value} category into the {self.kind.value} store"
            )
        _require_text(category.standardized_name, "standardized name")

        if self._saver is not None:
            try:
                self._saver(category)
            except PersistenceFailure:
                raise
            except Exception as e:
                raise PersistenceFailure(category.standardized_name, e) from e

        self._categories[category.key] = category
        logger.debug("Saved %s mapping '%s' (%d source labels)",
                     self.kind.value, category.standardized_name, len(category.source_labels))
        return category

    def add_source_label(self, standardized_name: str, label: str, vendor: str) -> CanonicalCategory:
        """Append a confirmed vendor label to an existing category and persist it."""
        category = self.get(standardized_name)
        if category is None:
            raise InvalidInput(f"Unknown {self.kind.value} category '{standardized_name}'")
        extended = category.with_source_label(_require_text(label, "label"), vendor)
        if extended is category:
            return category
        return self.save_mapping(extended)

    def delete_category(self, standardized_name: str) -> bool:
        """Remove a whole category. Returns False when it did not exist."""
        key = (standardized_name or "").strip().lower()
        if key not in self._categories:
            return False
        if self._deleter is not None:
            try:
                self._deleter(self._categories[key].standardized_name)
            except Exception as e:
                raise PersistenceFailure(standardized_name, e) from e
        del self._categories[key]
        self._learned = {label: name for label, name in self._learned.items() if name.lower() != key}
        return True

    # Learned mappings (user corrections)

    def learn(self, label: str, standardized_name: str) -> None:
        """Remember that a label was manually mapped to a category."""
        label = _require_text(label, "label")
        if self.get(standardized_name) is None:
            raise InvalidInput(f"Unknown {self.kind.value} category '{standardized_name}'")
        self._learned[label.lower()] = self.get(standardized_name).standardized_name

    def learned_mapping(self, label: str) -> Optional[str]:
        if not label:
            return None
        return self._learned.get(label.strip().lower())

    def forget(self, label: str) -> None:
        self._learned.pop((label or "").strip().lower(), None)

    def learned_mappings(self) -> Dict[str, str]:
        return dict(self._learned)

    # Lookups

    def resolve(self, label: str, vendor: str) -> Optional[str]:
        """
        Resolve a raw label to its canonical name without fuzzy matching.

        Returns:
            The category name when the label is confirmed for this vendor,
            else the learned mapping, else None
        """
        if not label or not label.strip():
            return None
        for category in self._categories.values():
            if category.has_source_label(label, vendor):
                return category.standardized_name
        return self.learned_mapping(label)

    def find_unmapped(self, observations: Iterable) -> List[UnmappedLabel]:
        """
        Diff observed labels against the confirmed mappings.

        Args:
            observations: (label, vendor) or (label, vendor, data_type) tuples,
                one per occurrence

        Returns:
            UnmappedLabel list, deduplicated case-insensitively per vendor,
            in first-seen order with occurrence counts summed
        """
        confirmed = {
            (source.label.strip().lower(), source.vendor)
            for category in self._categories.values()
            for source in category.source_labels
        }
        counts: Dict[Tuple[str, str], List] = {}
        for observation in observations:
            label, vendor = observation[0], observation[1]
            data_type = observation[2] if len(observation) > 2 else None
            if label is None or not str(label).strip():
                continue
            label = str(label).strip()
            key = (label.lower(), vendor)
            if key in confirmed:
                continue
            if key in counts:
                counts[key][1] += 1
            else:
                counts[key] = [label, 1, data_type]

        return [
            UnmappedLabel(name=label, vendor=vendor, occurrence_count=count, data_type=data_type)
            for (_, vendor), (label, count, data_type) in counts.items()
        ]


def _require_text(value, what):
    if value is None or not str(value).strip():
        raise InvalidInput(f"A non-blank {what} is required")
    return str(value).strip()



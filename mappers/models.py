"""
Mapping data model: canonical categories, their confirmed vendor labels,
labels still waiting for a mapping, and auto-mapper suggestions.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple


class CategoryKind(str, Enum):
    SPECIALTY = "specialty"
    PROVIDER_TYPE = "provider_type"
    REGION = "region"
    COLUMN = "column"


@dataclass(frozen=True)
class SourceLabel:
    """A raw vendor label confirmed as belonging to a canonical category."""

    label: str
    vendor: str

    def same_as(self, label: str, vendor: str) -> bool:
        return self.vendor == vendor and self.label.strip().lower() == label.strip().lower()


@dataclass(frozen=True)
class CanonicalCategory:
    """A standardized name plus every vendor spelling confirmed for it."""

    standardized_name: str
    kind: CategoryKind = CategoryKind.SPECIALTY
    source_labels: Tuple[SourceLabel, ...] = ()
    data_type: Optional[str] = None

    def has_source_label(self, label: str, vendor: str) -> bool:
        return any(source.same_as(label, vendor) for source in self.source_labels)

    def with_source_label(self, label: str, vendor: str) -> "CanonicalCategory":
        """Return a copy extended with (label, vendor); unchanged if already present."""
        if self.has_source_label(label, vendor):
            return self
        return replace(self, source_labels=self.source_labels + (SourceLabel(label.strip(), vendor),))

    @property
    def key(self) -> str:
        return self.standardized_name.strip().lower()


@dataclass(frozen=True)
class UnmappedLabel:
    """A label seen in uploaded data with no confirmed mapping for its vendor."""

    name: str
    vendor: str
    occurrence_count: int = 1
    data_type: Optional[str] = None


@dataclass(frozen=True)
class MappingSuggestion:
    standardized_name: str
    confidence: float


@dataclass(frozen=True)
class AppliedMapping:
    label: str
    vendor: str
    standardized_name: str
    confidence: float


@dataclass(frozen=True)
class MappingFailure:
    label: str
    vendor: str
    standardized_name: str
    error: str


@dataclass
class AutoMapReport:
    """Outcome of one bulk auto-mapping pass."""

    applied: list = field(default_factory=list)
    unmatched: list = field(default_factory=list)
    failed: list = field(default_factory=list)
    suggestions: dict = field(default_factory=dict)  # (label, vendor) -> [MappingSuggestion]

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    def summary(self) -> dict:
        return {
            'applied': len(self.applied),
            'unmatched': len(self.unmatched),
            'failed': len(self.failed),
        }

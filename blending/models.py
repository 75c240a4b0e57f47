"""
Blending data model: normalized survey rows, blend selections and results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from config import PERCENTILES, TRACKED_METRICS


@dataclass(frozen=True)
class MetricValues:
    """Percentiles and sample counts for one metric on one survey row."""

    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    org_count: int = 0
    incumbent_count: int = 0

    @property
    def is_complete(self) -> bool:
        """A usable median: finite and positive (NaN, inf and 0 are incomplete)."""
        return math.isfinite(self.p50) and self.p50 > 0

    def percentile(self, name: str) -> float:
        value = getattr(self, name)
        return value or 0.0


@dataclass(frozen=True)
class SurveyRow:
    """A normalized compensation data point (one specialty/region/vendor/year)."""

    specialty: str
    provider_type: str = ""
    geographic_region: str = ""
    vendor: str = ""
    year: str = ""
    metrics: Dict[str, MetricValues] = field(default_factory=dict)

    def metric(self, name: str) -> Optional[MetricValues]:
        """The metric's values when it is complete, else None."""
        values = self.metrics.get(name)
        if values is None or not values.is_complete:
            return None
        return values

    def _primary(self) -> Optional[MetricValues]:
        for name in TRACKED_METRICS:
            values = self.metric(name)
            if values is not None:
                return values
        return None

    @property
    def org_count(self) -> int:
        primary = self._primary()
        return primary.org_count if primary else 0

    @property
    def incumbent_count(self) -> int:
        primary = self._primary()
        return primary.incumbent_count if primary else 0

    def is_complete(self, metrics=TRACKED_METRICS) -> bool:
        return all(self.metric(name) is not None for name in metrics)


@dataclass
class SpecialtyItem:
    """A selectable unit on the blending screen; weight is a percentage."""

    id: str
    name: str
    record_count: int = 0
    vendor: str = ""
    year: str = ""
    geographic_region: str = ""
    provider_type: str = ""
    weight: float = 0.0


@dataclass(frozen=True)
class BlendedResult:
    tcc_p25: float = 0.0
    tcc_p50: float = 0.0
    tcc_p75: float = 0.0
    tcc_p90: float = 0.0
    wrvu_p25: float = 0.0
    wrvu_p50: float = 0.0
    wrvu_p75: float = 0.0
    wrvu_p90: float = 0.0
    cf_p25: float = 0.0
    cf_p50: float = 0.0
    cf_p75: float = 0.0
    cf_p90: float = 0.0
    total_records: int = 0
    confidence: float = 0.0
    specialties: Tuple[str, ...] = ()
    method: str = "simple"
    weights: Tuple[float, ...] = ()
    warnings: Tuple[str, ...] = ()

    def percentiles(self, metric: str) -> Dict[str, float]:
        return {p: getattr(self, f"{metric}_{p}") for p in PERCENTILES}

    def as_dict(self) -> dict:
        data = {f"{m}_{p}": getattr(self, f"{m}_{p}") for m in TRACKED_METRICS for p in PERCENTILES}
        data.update({
            'total_records': self.total_records,
            'confidence': self.confidence,
            'specialties': list(self.specialties),
            'method': self.method,
            'weights': list(self.weights),
            'warnings': list(self.warnings),
        })
        return data

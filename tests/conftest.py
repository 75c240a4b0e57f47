"""
Test configuration: puts the repo root on sys.path and provides shared builders.

This allows tests to import the top-level packages (mappers, blending, utils)
and the config/errors modules without installing the project.
"""

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from blending.models import MetricValues, SurveyRow  # noqa: E402
from mappers.models import CanonicalCategory, CategoryKind, SourceLabel  # noqa: E402
from mappers.store import CategoryMappingStore  # noqa: E402


def build_row(specialty, tcc_p50=0.0, incumbents=0, orgs=0, wrvu_p50=0.0, cf_p50=0.0,
              vendor="MGMA", year="2024", region="National", provider_type="Physician"):
    """Survey row whose P25/P75/P90 are fixed offsets of P50 (absent when P50 is 0)."""
    metrics = {}
    for name, p50 in (('tcc', tcc_p50), ('wrvu', wrvu_p50), ('cf', cf_p50)):
        if p50:
            metrics[name] = MetricValues(
                p25=p50 * 0.8, p50=p50, p75=p50 * 1.2, p90=p50 * 1.5,
                org_count=orgs, incumbent_count=incumbents,
            )
    return SurveyRow(
        specialty=specialty,
        provider_type=provider_type,
        geographic_region=region,
        vendor=vendor,
        year=year,
        metrics=metrics,
    )


@pytest.fixture
def make_row():
    return build_row


@pytest.fixture
def scenario_rows():
    """Three specialties: TCC P50 300k/320k/450k with 135/28/43 incumbents."""
    return [
        build_row("Cardiology", tcc_p50=300000, incumbents=135, orgs=60, wrvu_p50=7000, cf_p50=55.0),
        build_row("Electrophysiology", tcc_p50=320000, incumbents=28, orgs=15, wrvu_p50=7500, cf_p50=58.0),
        build_row("Interventional Cardiology", tcc_p50=450000, incumbents=43, orgs=25, wrvu_p50=9000, cf_p50=60.0),
    ]


@pytest.fixture
def specialty_categories():
    return [
        CanonicalCategory("Cardiology", CategoryKind.SPECIALTY,
                          (SourceLabel("Cardiology - General", "MGMA"),)),
        CanonicalCategory("Family Medicine", CategoryKind.SPECIALTY,
                          (SourceLabel("Family Practice (w/o OB)", "SullivanCotter"),)),
        CanonicalCategory("Orthopedics", CategoryKind.SPECIALTY),
    ]


@pytest.fixture
def specialty_store(specialty_categories):
    return CategoryMappingStore(CategoryKind.SPECIALTY, specialty_categories)

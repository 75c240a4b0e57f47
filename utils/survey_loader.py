"""
Survey Loader
Reads vendor survey exports (CSV/Excel) and normalizes their column naming
into SurveyRow objects for the mapping and blending engines.
"""

import logging

import pandas as pd

from blending.models import MetricValues, SurveyRow
from config import PERCENTILES, TRACKED_METRICS
from errors import InvalidInput
from mappers.models import CategoryKind
from utils.similarity import normalize_label

logger = logging.getLogger(__name__)

# Canonical column -> vendor spellings (compared after normalize_label)
FIELD_ALIASES = {
    'specialty': ['specialty', 'specialty_name', 'specialtyname', 'specialty type', 'survey specialty'],
    'provider_type': ['provider_type', 'provider type', 'providertype', 'provider category'],
    'geographic_region': ['geographic_region', 'region', 'geographic region', 'geo_region'],
    'vendor': ['vendor', 'survey_source', 'survey source', 'survey_provider', 'surveyprovider'],
    'year': ['year', 'survey_year', 'survey year', 'data year'],
    'n_orgs': ['n_orgs', 'orgs', 'org_count', 'number of organizations', '# orgs'],
    'n_incumbents': ['n_incumbents', 'incumbents', 'incumbent_count', 'number of incumbents', '# incumbents'],
}

METRIC_ALIASES = {
    'tcc': ['tcc', 'total cash compensation', 'total_cash'],
    'wrvu': ['wrvu', 'wrvus', 'work rvus', 'work_rvu'],
    'cf': ['cf', 'conversion factor', 'tcc per wrvu'],
}

PERCENTILE_FORMS = {
    'p25': ['p25', '25th', '25th percentile'],
    'p50': ['p50', '50th', '50th percentile', 'median'],
    'p75': ['p75', '75th', '75th percentile'],
    'p90': ['p90', '90th', '90th percentile'],
}

KIND_FIELDS = {
    CategoryKind.SPECIALTY: 'specialty',
    CategoryKind.PROVIDER_TYPE: 'provider_type',
    CategoryKind.REGION: 'geographic_region',
}


def _build_alias_lookup():
    lookup = {}
    for canonical, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            lookup.setdefault(normalize_label(alias), canonical)
    for metric, metric_aliases in METRIC_ALIASES.items():
        for percentile, forms in PERCENTILE_FORMS.items():
            for metric_alias in metric_aliases:
                for form in forms:
                    lookup.setdefault(normalize_label(f"{metric_alias} {form}"), f"{metric}_{percentile}")
    return lookup


ALIAS_LOOKUP = _build_alias_lookup()


def read_survey_file(file):
    """
    Read a survey export into a DataFrame.

    Args:
        file: Path/str or file-like object with a .name (e.g. an upload)

    Returns:
        DataFrame with the raw columns
    """
    name = str(getattr(file, 'name', file)).lower()
    if name.endswith('.csv'):
        return pd.read_csv(file)
    if name.endswith(('.xlsx', '.xls')):
        return pd.read_excel(file)
    raise InvalidInput(f"Unsupported survey file type: {name}")


def normalize_columns(df):
    """
    Rename vendor column spellings to canonical names.
    The first column claiming a canonical name wins; later duplicates keep
    their original header.
    """
    renames = {}
    claimed = set()
    for column in df.columns:
        canonical = ALIAS_LOOKUP.get(normalize_label(column))
        if canonical and canonical not in claimed:
            renames[column] = canonical
            claimed.add(canonical)
    return df.rename(columns=renames)


def _numeric(df, column):
    if column not in df.columns:
        return pd.Series(0, index=df.index, dtype=float)
    return pd.to_numeric(df[column], errors='coerce').fillna(0)


def _text(df, column, default=""):
    if column not in df.columns:
        return pd.Series(default, index=df.index, dtype=object)
    return df[column].fillna(default).astype(str).str.strip()


def rows_from_frame(df, vendor=None, year=None):
    """
    Convert a wide survey DataFrame into SurveyRow objects.

    A metric whose p50 is missing or zero is left out of the row's metrics.
    Rows without a specialty are skipped.
    """
    df = normalize_columns(df)
    if 'specialty' not in df.columns:
        raise InvalidInput(f"Survey is missing a specialty column. Available columns: {', '.join(map(str, df.columns))}")

    specialties = _text(df, 'specialty')
    provider_types = _text(df, 'provider_type')
    regions = _text(df, 'geographic_region')
    vendors = _text(df, 'vendor', vendor or "")
    years = _text(df, 'year', str(year) if year is not None else "")
    orgs = _numeric(df, 'n_orgs').astype(int)
    incumbents = _numeric(df, 'n_incumbents').astype(int)
    percentiles = {
        f"{m}_{p}": _numeric(df, f"{m}_{p}") for m in TRACKED_METRICS for p in PERCENTILES
    }

    rows = []
    skipped = 0
    for idx in df.index:
        specialty = specialties[idx]
        if not specialty or specialty.lower() == 'nan':
            skipped += 1
            continue

        metrics = {}
        for metric in TRACKED_METRICS:
            values = MetricValues(
                **{p: float(percentiles[f"{metric}_{p}"][idx]) for p in PERCENTILES},
                org_count=int(orgs[idx]),
                incumbent_count=int(incumbents[idx]),
            )
            if values.is_complete:
                metrics[metric] = values

        rows.append(SurveyRow(
            specialty=specialty,
            provider_type=provider_types[idx],
            geographic_region=regions[idx],
            vendor=vendor or vendors[idx],
            year=str(year) if year is not None else years[idx],
            metrics=metrics,
        ))

    if skipped:
        logger.info("Skipped %d row(s) without a specialty", skipped)
    return rows


def load_survey_rows(file, vendor=None, year=None):
    """Read and normalize a survey export in one step."""
    return rows_from_frame(read_survey_file(file), vendor=vendor, year=year)


def observed_labels(rows, kind=CategoryKind.SPECIALTY):
    """(label, vendor) observations of one kind, ready for CategoryMappingStore.find_unmapped."""
    field = KIND_FIELDS.get(CategoryKind(kind))
    if field is None:
        raise InvalidInput(f"Rows carry no {CategoryKind(kind).value} labels; use observed_columns")
    return [(getattr(row, field), row.vendor) for row in rows if getattr(row, field)]


def infer_data_type(values, sample_size=5):
    """Infer 'number', 'date' or 'string' from the first non-empty values."""
    sample = pd.Series(values).dropna()
    sample = sample[sample.astype(str).str.strip() != ''].head(sample_size)
    if sample.empty:
        return 'string'
    if pd.to_numeric(sample, errors='coerce').notna().all():
        return 'number'
    if pd.to_datetime(sample.astype(str), errors='coerce', format='mixed').notna().all():
        return 'date'
    return 'string'


def observed_columns(df, vendor):
    """(header, vendor, data_type) observations for column mapping."""
    return [(str(column).strip(), vendor, infer_data_type(df[column])) for column in df.columns]

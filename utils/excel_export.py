"""
Excel Export Utilities
"""
import pandas as pd
from io import BytesIO

from config import PERCENTILES, TRACKED_METRICS

METRIC_LABELS = {
    'tcc': 'Total Cash Compensation',
    'wrvu': 'Work RVUs',
    'cf': 'Conversion Factor',
}


def convert_df_to_excel(df: pd.DataFrame, sheet_name: str = "Data") -> bytes:
    """
    Convert DataFrame to Excel bytes for download.

    Args:
        df: pandas DataFrame
        sheet_name: Name for the Excel sheet

    Returns:
        bytes: Excel file as bytes
    """
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return output.getvalue()


def blend_result_to_frame(result) -> pd.DataFrame:
    """One row per metric with the blended P25-P90."""
    records = []
    for metric in TRACKED_METRICS:
        record = {'Metric': METRIC_LABELS[metric]}
        record.update({p.upper(): value for p, value in result.percentiles(metric).items()})
        records.append(record)
    return pd.DataFrame(records, columns=['Metric'] + [p.upper() for p in PERCENTILES])


def auto_map_report_to_frame(report) -> pd.DataFrame:
    """One row per label with its auto-mapping outcome."""
    records = []
    for applied in report.applied:
        records.append({'Label': applied.label, 'Vendor': applied.vendor, 'Status': 'mapped',
                        'Standardized Name': applied.standardized_name,
                        'Confidence': round(applied.confidence, 3), 'Error': ''})
    for failure in report.failed:
        records.append({'Label': failure.label, 'Vendor': failure.vendor, 'Status': 'failed',
                        'Standardized Name': failure.standardized_name,
                        'Confidence': None, 'Error': failure.error})
    for label in report.unmatched:
        suggestions = report.suggestions.get((label.name, label.vendor)) or []
        top = suggestions[0] if suggestions else None
        records.append({'Label': label.name, 'Vendor': label.vendor, 'Status': 'unmatched',
                        'Standardized Name': top.standardized_name if top else '',
                        'Confidence': round(top.confidence, 3) if top else None, 'Error': ''})
    return pd.DataFrame(records, columns=['Label', 'Vendor', 'Status', 'Standardized Name', 'Confidence', 'Error'])

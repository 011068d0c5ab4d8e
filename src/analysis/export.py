"""Data export for dashboard tables and metric snapshots."""

import pandas as pd
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterable, Mapping
from datetime import datetime
import io

from config import config
from config.logging_config import get_logger
from src.records import ensure_records
from .metrics import MetricsSnapshot
from .statistics import date_span, summary_statistics

logger = get_logger("export")

DATA_SHEET = "Data"
SUMMARY_SHEET = "Summary"
STATISTICS_SHEET = "Statistics"

# Columns checked (in order) for the date range row of the statistics sheet
DATE_COLUMNS = ["createdAt", "date", "scheduledDate", "startDate", "startAt"]

DEFAULT_COLUMN_WIDTH = 18


def _cell_value(value: Any) -> Any:
    """Excel cells hold scalars only and no timezone-aware datetimes."""
    if isinstance(value, (list, dict)):
        return str(value)
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.isoformat()
    return value


def records_to_dataframe(
    records: Optional[Iterable[Any]],
    columns: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Build a DataFrame from dashboard records.

    Nested records are flattened into dotted column names
    (``customer.name``); lists of child records stay as single cells.

    Args:
        records: Records (mappings).
        columns: Columns to keep (only those that exist).

    Returns:
        DataFrame (empty when there are no records).
    """
    rows = [dict(r) for r in ensure_records(records) if isinstance(r, Mapping)]
    df = pd.json_normalize(rows) if rows else pd.DataFrame()
    if columns:
        existing_cols = [c for c in columns if c in df.columns]
        df = df[existing_cols]
    return df


def snapshot_to_dataframe(snapshot: MetricsSnapshot) -> pd.DataFrame:
    """Flatten a metrics snapshot into Area / Metric / Value rows."""
    rows = []
    for area, metrics in snapshot.to_dict().items():
        if not isinstance(metrics, dict):
            continue
        for name, value in metrics.items():
            if isinstance(value, dict):
                for key, count in value.items():
                    rows.append({"Area": area, "Metric": f"{name}.{key}", "Value": count})
            else:
                rows.append({"Area": area, "Metric": name, "Value": value})
    return pd.DataFrame(rows, columns=["Area", "Metric", "Value"])


class DataExporter:
    """Export dashboard records to CSV and Excel."""

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize exporter.

        Args:
            output_dir: Directory for file exports.
        """
        self.output_dir = Path(output_dir) if output_dir else config.data.exports_path

    def _ensure_output_dir(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_to_csv(
        self,
        records: Optional[Iterable[Any]],
        filename: Optional[str] = None,
        columns: Optional[List[str]] = None,
        base_name: str = "dashboard_export",
    ) -> Path:
        """
        Export records to a CSV file.

        Args:
            records: Records to export.
            filename: Output filename (generated if None).
            columns: Columns to include (all if None).
            base_name: Prefix of generated filenames.

        Returns:
            Path to exported file.
        """
        df = records_to_dataframe(records, columns)
        filename = filename or self.generate_filename(base_name, "csv")

        self._ensure_output_dir()
        filepath = self.output_dir / filename
        df.to_csv(filepath, index=False, encoding="utf-8")

        logger.info(f"Exported {len(df)} records to {filepath}")
        return filepath

    def export_to_csv_buffer(
        self,
        records: Optional[Iterable[Any]],
        columns: Optional[List[str]] = None,
    ) -> io.StringIO:
        """
        Export records to an in-memory CSV buffer (for downloads).

        Returns:
            StringIO buffer with CSV data.
        """
        df = records_to_dataframe(records, columns)
        buffer = io.StringIO()
        df.to_csv(buffer, index=False, encoding="utf-8")
        buffer.seek(0)
        return buffer

    def export_to_excel(
        self,
        records: Optional[Iterable[Any]],
        filename: Optional[str] = None,
        snapshot: Optional[MetricsSnapshot] = None,
        columns: Optional[List[str]] = None,
        base_name: str = "dashboard_export",
    ) -> Path:
        """
        Export records to a formatted Excel workbook.

        Args:
            records: Records to export.
            filename: Output filename (generated if None).
            snapshot: Metrics for an optional summary sheet.
            columns: Columns to include (all if None).
            base_name: Prefix of generated filenames.

        Returns:
            Path to exported file.
        """
        df = records_to_dataframe(records, columns)
        filename = filename or self.generate_filename(base_name, "xlsx")

        self._ensure_output_dir()
        filepath = self.output_dir / filename
        self._write_workbook(filepath, df, snapshot)

        logger.info(f"Exported {len(df)} records to Excel: {filepath}")
        return filepath

    def export_to_excel_buffer(
        self,
        records: Optional[Iterable[Any]],
        snapshot: Optional[MetricsSnapshot] = None,
        columns: Optional[List[str]] = None,
    ) -> io.BytesIO:
        """
        Export records to an in-memory Excel buffer (for downloads).

        Returns:
            BytesIO buffer with Excel data.
        """
        df = records_to_dataframe(records, columns)
        buffer = io.BytesIO()
        self._write_workbook(buffer, df, snapshot)
        buffer.seek(0)
        return buffer

    def _write_workbook(self, target, df: pd.DataFrame, snapshot: Optional[MetricsSnapshot]) -> None:
        with pd.ExcelWriter(target, engine="openpyxl") as writer:
            sheet_df = df.apply(lambda col: col.map(_cell_value)) if not df.empty else df
            sheet_df.to_excel(writer, sheet_name=DATA_SHEET, index=False)
            self._format_sheet(writer.sheets[DATA_SHEET])

            if snapshot is not None:
                summary_df = snapshot_to_dataframe(snapshot)
                summary_df.to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)
                self._format_sheet(writer.sheets[SUMMARY_SHEET], {"Area": 14, "Metric": 28})

            stats_df = self._create_statistics_df(df)
            stats_df.to_excel(writer, sheet_name=STATISTICS_SHEET, index=False)
            self._format_sheet(writer.sheets[STATISTICS_SHEET], {"Metric": 32})

    def _format_sheet(
        self,
        worksheet,
        column_widths: Optional[Dict[str, int]] = None,
    ) -> None:
        """Apply formatting to Excel worksheet."""
        from openpyxl.styles import Font, PatternFill, Alignment

        if worksheet.max_row < 1:
            return

        # Header formatting
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

        widths = column_widths or {}
        for cell in worksheet[1]:
            if cell.value is None:
                continue
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
            worksheet.column_dimensions[cell.column_letter].width = widths.get(
                cell.value, DEFAULT_COLUMN_WIDTH
            )

        # Freeze header row
        worksheet.freeze_panes = "A2"

        # Auto-filter
        worksheet.auto_filter.ref = worksheet.dimensions

    def _create_statistics_df(self, df: pd.DataFrame) -> pd.DataFrame:
        """Create summary statistics DataFrame."""
        stats = summary_statistics(df)

        for column in DATE_COLUMNS:
            if column not in df.columns:
                continue
            span = date_span(df[column])
            if span is not None:
                stats.append({"Metric": "Date Range Start", "Value": span[0].strftime("%Y-%m-%d")})
                stats.append({"Metric": "Date Range End", "Value": span[1].strftime("%Y-%m-%d")})
                break

        stats.append({
            "Metric": "Export Date",
            "Value": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        })

        return pd.DataFrame(stats, columns=["Metric", "Value"])

    def generate_filename(
        self,
        base_name: str = "dashboard_export",
        extension: str = "csv",
        include_timestamp: bool = True,
    ) -> str:
        """Generate export filename."""
        if include_timestamp:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            return f"{base_name}_{timestamp}.{extension}"
        return f"{base_name}.{extension}"

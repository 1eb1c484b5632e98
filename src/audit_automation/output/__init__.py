"""Report output for CSV and Excel exports."""

from audit_automation.output.csv_exporter import CSVExporter, flatten_flagged
from audit_automation.output.excel_writer import ExcelWriter

__all__ = ["CSVExporter", "ExcelWriter", "flatten_flagged"]

"""Excel workbook writer for audit results."""

from pathlib import Path
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from audit_automation.config import Config
from audit_automation.models.report import ProcessedData
from audit_automation.output.csv_exporter import REASON_SEPARATOR
from audit_automation.utils.logging_config import get_logger
from audit_automation.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)


def money_number_format(decimal_places: int) -> str:
    """Excel number format with grouping and a fixed number of decimals."""
    if decimal_places <= 0:
        return "#,##0"
    return "#,##0." + "0" * decimal_places


class ExcelWriter:
    """Writes audit results to a multi-sheet Excel workbook.

    Generates sheets:
    - Summary
    - Flagged Transactions
    - Policy Violations
    - Spend by Category
    - Monthly Trend
    - Policy Compliance
    """

    def __init__(self, config: Config):
        """Initialize Excel writer.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.output_config = config.output

        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )
        self.flagged_font = Font(color="CC0000")
        self.money_format = money_number_format(self.output_config.decimal_places)

    def write(self, output_path: Path, data: ProcessedData) -> None:
        """Write all views to an Excel workbook.

        Args:
            output_path: Path for output file.
            data: Processed audit results.
        """
        logger.info(f"Writing Excel workbook to {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_summary(wb, data)
        self._create_flagged_sheet(wb, data)
        self._create_violations_sheet(wb, data)
        self._create_table(
            wb,
            "Spend by Category",
            ["Category", "Amount"],
            [[leader.name, leader.amount] for leader in data.spend_by_category],
            money_columns=(2,),
        )
        self._create_table(
            wb,
            "Monthly Trend",
            ["Month", "Amount"],
            [[point.date, point.amount] for point in data.spend_trend],
            money_columns=(2,),
        )
        self._create_table(
            wb,
            "Policy Compliance",
            ["Bucket", "Transactions"],
            [[bucket.name, bucket.value] for bucket in data.policy_compliance],
        )

        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel workbook saved: {output_path}")

    def _write_header(self, ws: object, headers: Sequence[str], row: int = 1) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)  # type: ignore[attr-defined]
            cell.font = self.header_font
            cell.fill = self.header_fill

    def _create_summary(self, wb: Workbook, data: ProcessedData) -> None:
        """Create the Summary sheet with KPIs and top spenders."""
        ws = wb.create_sheet("Summary")
        summary = data.audit_summary

        ws.cell(row=1, column=1, value="AUDIT SUMMARY").font = Font(bold=True, size=14)
        rows = [
            ("Total Transactions", summary.total_transactions),
            ("Total Amount", summary.total_amount),
            ("Flagged for Audit", summary.flagged_for_audit_count),
            ("Policy Violations", summary.policy_violations_count),
        ]
        row = 2
        for label, value in rows:
            ws.cell(row=row, column=1, value=label)
            cell = ws.cell(row=row, column=2, value=value)
            if label == "Total Amount":
                cell.number_format = self.money_format
            row += 1

        row += 1
        for title, leaders in (
            ("Top Categories", data.highest_spending_categories),
            ("Top Vendors", data.highest_spending_vendors),
            ("Top Accounts", data.highest_spending_accounts),
        ):
            self._write_header(ws, [title, "Amount"], row=row)
            row += 1
            for leader in leaders:
                ws.cell(row=row, column=1, value=sanitize_for_csv(leader.name))
                ws.cell(row=row, column=2, value=leader.amount).number_format = self.money_format
                row += 1
            row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 18

    def _create_flagged_sheet(self, wb: Workbook, data: ProcessedData) -> None:
        """Create the Flagged Transactions sheet."""
        ws = wb.create_sheet("Flagged Transactions")
        headers = [
            "Transaction ID", "Date", "Amount", "Account", "Category",
            "Vendor", "Policy Code", "Risk Reasons",
        ]
        self._write_header(ws, headers)

        for row, txn in enumerate(data.flagged_transactions, 2):
            ws.cell(row=row, column=1, value=sanitize_for_csv(txn.transaction_id))
            ws.cell(row=row, column=2, value=txn.date)
            amount_cell = ws.cell(row=row, column=3, value=txn.amount)
            amount_cell.number_format = self.money_format
            amount_cell.font = self.flagged_font
            ws.cell(row=row, column=4, value=sanitize_for_csv(txn.account))
            ws.cell(row=row, column=5, value=sanitize_for_csv(txn.category))
            ws.cell(row=row, column=6, value=sanitize_for_csv(txn.vendor))
            ws.cell(row=row, column=7, value=sanitize_for_csv(txn.policy_code or ""))
            ws.cell(row=row, column=8, value=sanitize_for_csv(REASON_SEPARATOR.join(txn.risk_reasons)))

        self._autosize(ws, len(headers))
        ws.freeze_panes = "A2"
        logger.debug(f"Created Flagged Transactions sheet with {len(data.flagged_transactions)} rows")

    def _create_violations_sheet(self, wb: Workbook, data: ProcessedData) -> None:
        """Create the Policy Violations sheet."""
        self._create_table(
            wb,
            "Policy Violations",
            ["Transaction ID", "Date", "Amount", "Category", "Vendor", "Reason", "Details"],
            [
                [v.transaction_id, v.date, v.amount, v.category, v.vendor, v.reason, v.details]
                for v in data.policy_violations
            ],
            money_columns=(3,),
        )

    def _create_table(
        self,
        wb: Workbook,
        title: str,
        headers: list[str],
        rows: list[list[object]],
        money_columns: tuple[int, ...] = (),
    ) -> None:
        """Create a plain sheet with a header row and data rows."""
        ws = wb.create_sheet(title)
        self._write_header(ws, headers)

        for row_idx, values in enumerate(rows, 2):
            for col, value in enumerate(values, 1):
                if isinstance(value, str):
                    value = sanitize_for_csv(value)
                cell = ws.cell(row=row_idx, column=col, value=value)
                if col in money_columns:
                    cell.number_format = self.money_format

        self._autosize(ws, len(headers))
        ws.freeze_panes = "A2"
        logger.debug(f"Created {title} sheet with {len(rows)} rows")

    def _autosize(self, ws: object, num_columns: int) -> None:
        """Size columns to their longest value, capped at 60 characters."""
        for col in range(1, num_columns + 1):
            letter = get_column_letter(col)
            longest = max(
                (len(str(cell.value)) for cell in ws[letter] if cell.value is not None),  # type: ignore[index]
                default=10,
            )
            ws.column_dimensions[letter].width = min(max(longest + 2, 10), 60)  # type: ignore[attr-defined]

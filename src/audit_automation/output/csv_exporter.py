"""CSV export of audit results."""

import csv
from pathlib import Path

from audit_automation.config import Config
from audit_automation.models.report import PolicyViolation, ProcessedData
from audit_automation.models.transaction import FlaggedTransaction
from audit_automation.utils.decimal_utils import format_currency
from audit_automation.utils.logging_config import get_logger
from audit_automation.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

FLAGGED_FILENAME = "auditable_transactions_flagged.csv"
VIOLATIONS_FILENAME = "policy_violations_list.csv"
SAMPLE_FILENAME = "sampled_transactions_for_review.csv"
SUMMARY_FILENAME = "audit_summary.csv"

FLAGGED_HEADERS = [
    "transaction_id", "date", "amount", "account", "category", "vendor",
    "policy_code", "riskReasons", "isFlagged",
]
VIOLATION_HEADERS = [
    "transaction_id", "date", "amount", "category", "vendor", "reason", "details",
]

REASON_SEPARATOR = "; "


def flatten_flagged(txn: FlaggedTransaction, decimal_places: int = 2) -> dict[str, str]:
    """Flatten an evaluated transaction into one export row.

    Risk reasons are joined into a single ``"; "``-separated field.
    """
    return {
        "transaction_id": txn.transaction_id,
        "date": txn.date,
        "amount": format_currency(txn.amount, decimal_places),
        "account": txn.account,
        "category": txn.category,
        "vendor": txn.vendor,
        "policy_code": txn.policy_code or "",
        "riskReasons": REASON_SEPARATOR.join(txn.risk_reasons),
        "isFlagged": "true" if txn.is_flagged else "false",
    }


def flatten_violation(violation: PolicyViolation, decimal_places: int = 2) -> dict[str, str]:
    """Flatten a policy violation into one export row."""
    return {
        "transaction_id": violation.transaction_id,
        "date": violation.date,
        "amount": format_currency(violation.amount, decimal_places),
        "category": violation.category,
        "vendor": violation.vendor,
        "reason": violation.reason,
        "details": violation.details,
    }


def review_sample(data: ProcessedData) -> list[FlaggedTransaction]:
    """Flagged transactions ordered for manual review.

    Most reasons first, then largest amount. Input order breaks ties.
    """
    return sorted(
        data.flagged_transactions,
        key=lambda t: (len(t.findings), t.amount),
        reverse=True,
    )


class CSVExporter:
    """Exports audit results to CSV files.

    Creates in the output directory:
    - auditable_transactions_flagged.csv
    - policy_violations_list.csv
    - sampled_transactions_for_review.csv
    - audit_summary.csv

    Datasets with no rows are skipped.
    """

    def __init__(self, config: Config):
        """Initialize CSV exporter.

        Args:
            config: Application configuration.
        """
        self.config = config
        self.output_config = config.output

    def export(self, output_dir: Path, data: ProcessedData) -> list[Path]:
        """Export every report to CSV files.

        Args:
            output_dir: Directory for the CSV files (created if missing).
            data: Processed audit results.

        Returns:
            Paths of the files written.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        places = self.output_config.decimal_places

        files = [
            self._write_rows(
                output_dir / FLAGGED_FILENAME,
                FLAGGED_HEADERS,
                [flatten_flagged(t, places) for t in data.flagged_transactions],
            ),
            self._write_rows(
                output_dir / VIOLATIONS_FILENAME,
                VIOLATION_HEADERS,
                [flatten_violation(v, places) for v in data.policy_violations],
            ),
            self._write_rows(
                output_dir / SAMPLE_FILENAME,
                FLAGGED_HEADERS,
                [flatten_flagged(t, places) for t in review_sample(data)],
            ),
            self._export_summary(output_dir / SUMMARY_FILENAME, data),
        ]
        created = [f for f in files if f is not None]

        logger.info(f"Exported {len(created)} CSV files to {output_dir}")
        return created

    def _write_rows(
        self,
        output_path: Path,
        headers: list[str],
        rows: list[dict[str, str]],
    ) -> Path | None:
        """Write header-keyed rows, or skip the file when there are none."""
        if not rows:
            logger.warning(f"No data for {output_path.name}, skipping export")
            return None

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=headers)
            writer.writeheader()
            for row in rows:
                writer.writerow({k: sanitize_for_csv(v) for k, v in row.items()})

        logger.info(f"Exported {len(rows)} rows to {output_path}")
        return output_path

    def _export_summary(self, output_path: Path, data: ProcessedData) -> Path:
        """Export headline counts and aggregate views.

        Args:
            output_path: Target file.
            data: Processed audit results.

        Returns:
            Path to created file.
        """
        places = self.output_config.decimal_places
        summary = data.audit_summary

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)

            writer.writerow(["AUDIT SUMMARY", ""])
            writer.writerow(["Total Transactions", summary.total_transactions])
            writer.writerow(["Total Amount", format_currency(summary.total_amount, places)])
            writer.writerow(["Flagged for Audit", summary.flagged_for_audit_count])
            writer.writerow(["Policy Violations", summary.policy_violations_count])
            writer.writerow([])

            writer.writerow(["SPEND BY CATEGORY", ""])
            for leader in data.spend_by_category:
                writer.writerow([sanitize_for_csv(leader.name), format_currency(leader.amount, places)])
            writer.writerow([])

            writer.writerow(["MONTHLY TREND", ""])
            for point in data.spend_trend:
                writer.writerow([point.date, format_currency(point.amount, places)])
            writer.writerow([])

            writer.writerow(["POLICY COMPLIANCE", ""])
            for bucket in data.policy_compliance:
                writer.writerow([bucket.name, bucket.value])

        logger.info(f"Exported audit summary to {output_path}")
        return output_path

"""Tests for statistical outlier detection."""

from decimal import Decimal

from audit_automation.config import AuditConfig
from audit_automation.models.transaction import FindingKind, Transaction
from audit_automation.processing.anomaly_detector import AnomalyDetector, detect_outliers


def create_transaction(
    amount: Decimal,
    category: str = "Travel & Expenses",
    transaction_id: str = "TX",
) -> Transaction:
    """Helper to create a Transaction for testing."""
    return Transaction(
        transaction_id=transaction_id,
        date="2024-02-01",
        amount=amount,
        account="ACC-1",
        category=category,
        vendor="Airline",
        policy_code="P001",
    )


def travel_batch() -> list[Transaction]:
    """Eleven 100.00 trips and one 5000.00 trip."""
    batch = [create_transaction(Decimal("100"), transaction_id=f"T{i}") for i in range(11)]
    batch.append(create_transaction(Decimal("5000"), transaction_id="T11"))
    return batch


class TestDetectOutliers:
    """Tests for AnomalyDetector.detect_outliers."""

    def test_flags_extreme_amount(self) -> None:
        """The single large trip is flagged, nothing else is."""
        findings = detect_outliers(travel_batch(), AuditConfig())

        assert list(findings) == [11]
        finding = findings[11][0]
        assert finding.kind is FindingKind.STATISTICAL_OUTLIER
        assert finding.message.startswith(
            "Outlier: Amount $5,000.00 is significantly higher than category "
            "'Travel & Expenses' average ($508.33, threshold $3,894."
        )

    def test_population_statistics(self) -> None:
        """Mean and deviation divide by N, not N - 1."""
        detector = AnomalyDetector(AuditConfig())

        (stats,) = detector.category_statistics(travel_batch())

        assert stats.count == 12
        assert round(stats.mean, 2) == Decimal("508.33")
        # Population std dev is ~1354.29; the sample std dev would be ~1414.5
        assert Decimal("1354") < stats.std_dev < Decimal("1355")
        assert stats.threshold is not None
        assert Decimal("3894") < stats.threshold < Decimal("3895")

    def test_small_category_never_checked(self) -> None:
        """Categories below the sample minimum are skipped whatever the amount."""
        batch = [create_transaction(Decimal("1")) for _ in range(8)]
        batch.append(create_transaction(Decimal("1000000")))

        assert detect_outliers(batch, AuditConfig()) == {}

        (stats,) = AnomalyDetector(AuditConfig()).category_statistics(batch)
        assert stats.threshold is None

    def test_identical_amounts_have_no_outliers(self) -> None:
        """Zero spread is skipped instead of producing a degenerate threshold."""
        batch = [create_transaction(Decimal("250.00")) for _ in range(20)]

        assert detect_outliers(batch, AuditConfig()) == {}

    def test_categories_evaluated_independently(self) -> None:
        """A large amount in one category does not shift another's statistics."""
        batch = travel_batch()
        batch.extend(create_transaction(Decimal("5000"), category="Legal Fees") for _ in range(12))

        findings = detect_outliers(batch, AuditConfig())

        assert list(findings) == [11]

    def test_min_samples_configurable(self) -> None:
        """Lowering the minimum lets small categories be checked."""
        batch = [create_transaction(Decimal("10")) for _ in range(5)]
        batch.append(create_transaction(Decimal("100000")))
        config = AuditConfig(min_samples_for_outlier_detection=3, outlier_std_dev_factor=Decimal("2"))

        assert list(detect_outliers(batch, config)) == [5]

    def test_batch_composition_changes_outcome(self) -> None:
        """The same transaction can be an outlier in one batch and not another."""
        big = create_transaction(Decimal("5000"), transaction_id="BIG")
        crowded = travel_batch()[:11] + [big]
        varied = [create_transaction(Decimal(str(v))) for v in range(1000, 12000, 1000)] + [big]

        assert 11 in detect_outliers(crowded, AuditConfig())
        assert 11 not in detect_outliers(varied, AuditConfig())

    def test_empty_batch(self) -> None:
        """An empty batch produces no findings and no statistics."""
        detector = AnomalyDetector(AuditConfig())
        assert detector.detect_outliers([]) == {}
        assert detector.category_statistics([]) == []

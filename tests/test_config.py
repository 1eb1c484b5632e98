"""Tests for configuration loading."""

import dataclasses
from decimal import Decimal
from pathlib import Path

import pytest

from audit_automation.config import (
    DEFAULT_CATEGORY_THRESHOLDS,
    AuditConfig,
    Config,
    ConfigError,
    InsightsConfig,
    load_config,
    load_yaml_file,
)
from audit_automation.models.transaction import FindingKind, Transaction
from audit_automation.processing import process_transactions


def create_transaction(
    transaction_id: str,
    amount: str,
    category: str = "Office Supplies",
) -> Transaction:
    """Helper to create a Transaction for testing."""
    return Transaction(
        transaction_id=transaction_id,
        date="2024-05-02",
        amount=Decimal(amount),
        account="ACC-1",
        category=category,
        vendor="Acme",
        policy_code="P001",
    )


class TestAuditConfig:
    """Tests for AuditConfig."""

    def test_defaults(self) -> None:
        """Built-in thresholds and codes."""
        config = AuditConfig()

        assert config.general_threshold == Decimal("10000")
        assert config.outlier_std_dev_factor == Decimal("2.5")
        assert config.min_samples_for_outlier_detection == 10
        assert config.category_thresholds["Travel & Expenses"] == Decimal("1000")
        assert "P001" in config.valid_policy_codes
        assert config.flag_first_duplicate is True

    def test_is_immutable(self) -> None:
        """Fields and containers cannot be changed after creation."""
        config = AuditConfig(category_thresholds={"Catering": Decimal("50")})

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.general_threshold = Decimal("1")  # type: ignore[misc]
        with pytest.raises(TypeError):
            config.category_thresholds["Catering"] = Decimal("1")  # type: ignore[index]
        assert isinstance(config.valid_policy_codes, frozenset)

    def test_replace_leaves_original(self) -> None:
        """dataclasses.replace derives a new config."""
        base = AuditConfig()
        override = dataclasses.replace(base, general_threshold=Decimal("500"))

        assert override.general_threshold == Decimal("500")
        assert base.general_threshold == Decimal("10000")

    def test_from_dict(self) -> None:
        """Values are read from a plain mapping."""
        config = AuditConfig.from_dict({
            "valid_policy_codes": [" A1 ", "B2"],
            "category_thresholds": {"Catering": 250.5},
            "general_threshold": "9000",
            "outlier_std_dev_factor": 3,
            "min_samples_for_outlier_detection": 4,
            "flag_first_duplicate": False,
            "top_spending_count": 3,
        })

        assert config.valid_policy_codes == frozenset({"A1", "B2"})
        assert dict(config.category_thresholds) == {"Catering": Decimal("250.5")}
        assert config.general_threshold == Decimal("9000")
        assert config.outlier_std_dev_factor == Decimal("3")
        assert config.min_samples_for_outlier_detection == 4
        assert config.flag_first_duplicate is False
        assert config.top_spending_count == 3

    def test_from_dict_empty_uses_defaults(self) -> None:
        """Missing keys fall back to defaults."""
        config = AuditConfig.from_dict({})

        assert dict(config.category_thresholds) == dict(DEFAULT_CATEGORY_THRESHOLDS)
        assert config == AuditConfig()

    def test_from_dict_rejects_bad_values(self) -> None:
        """Wrong types raise ConfigError."""
        with pytest.raises(ConfigError):
            AuditConfig.from_dict({"valid_policy_codes": "P001"})
        with pytest.raises(ConfigError):
            AuditConfig.from_dict({"category_thresholds": ["Catering"]})
        with pytest.raises(ConfigError):
            AuditConfig.from_dict({"general_threshold": "lots"})
        with pytest.raises(ConfigError):
            AuditConfig.from_dict({"general_threshold": True})
        with pytest.raises(ConfigError):
            AuditConfig.from_dict({"min_samples_for_outlier_detection": 0})


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """A missing settings file yields the default Config."""
        config = load_config(config_dir=tmp_path)

        assert config == Config()

    def test_loads_sections(self, tmp_path: Path) -> None:
        """Every section in the file is applied."""
        settings = tmp_path / "settings.yaml"
        settings.write_text(
            "audit:\n"
            "  general_threshold: 2500\n"
            "  category_thresholds:\n"
            "    Catering: 300\n"
            "insights:\n"
            "  max_transactions: 5\n"
            "output:\n"
            "  currency_symbol: \"€\"\n"
            "logging:\n"
            "  level: DEBUG\n",
            encoding="utf-8",
        )

        config = load_config(config_dir=tmp_path)

        assert config.audit.general_threshold == Decimal("2500")
        assert dict(config.audit.category_thresholds) == {"Catering": Decimal("300")}
        assert config.insights.max_transactions == 5
        assert config.output.currency_symbol == "€"
        assert config.logging.level == "DEBUG"

    def test_explicit_path(self, tmp_path: Path) -> None:
        """settings_path wins over config_dir."""
        settings = tmp_path / "custom.yaml"
        settings.write_text("audit:\n  top_spending_count: 2\n", encoding="utf-8")

        config = load_config(settings_path=settings, config_dir=tmp_path / "unused")

        assert config.audit.top_spending_count == 2

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file is the same as no overrides."""
        settings = tmp_path / "settings.yaml"
        settings.write_text("", encoding="utf-8")

        assert load_config(config_dir=tmp_path) == Config()

    def test_non_mapping_top_level(self, tmp_path: Path) -> None:
        """A YAML list at the top level is rejected."""
        settings = tmp_path / "settings.yaml"
        settings.write_text("- audit\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(config_dir=tmp_path)

    def test_non_mapping_section(self, tmp_path: Path) -> None:
        """A scalar section is rejected."""
        settings = tmp_path / "settings.yaml"
        settings.write_text("audit: 5\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(config_dir=tmp_path)

    def test_load_yaml_file_missing(self, tmp_path: Path) -> None:
        """load_yaml_file raises for a missing path."""
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "nope.yaml")


class TestPlainNumberOverrides:
    """Tests for building AuditConfig from int and float values."""

    def test_values_become_decimal(self) -> None:
        """int and float settings are stored as Decimal."""
        config = AuditConfig(
            general_threshold=5000,  # type: ignore[arg-type]
            outlier_std_dev_factor=2.5,  # type: ignore[arg-type]
            category_thresholds={"Catering": 250},  # type: ignore[dict-item]
        )

        assert config.general_threshold == Decimal("5000")
        assert isinstance(config.general_threshold, Decimal)
        assert config.outlier_std_dev_factor == Decimal("2.5")
        assert config.category_thresholds["Catering"] == Decimal("250")
        assert isinstance(config.category_thresholds["Catering"], Decimal)

    def test_pipeline_runs_with_int_thresholds(self) -> None:
        """Threshold messages quote plain-number overrides."""
        batch = [
            create_transaction("T1", "6000", category="Legal Retainers"),
            create_transaction("T2", "300", category="Catering"),
        ]
        config = AuditConfig(
            general_threshold=5000,  # type: ignore[arg-type]
            category_thresholds={"Catering": 250},  # type: ignore[dict-item]
        )

        data = process_transactions(batch, config)

        assert [t.risk_reasons for t in data.all_transactions_with_flags] == [
            ("Amount exceeds general high value threshold ($5,000).",),
            ("Amount exceeds category threshold ($250) for Catering.",),
        ]

    def test_pipeline_runs_with_float_factor(self) -> None:
        """A float outlier factor still flags the outlier."""
        batch = [create_transaction(f"T{i}", "100") for i in range(11)]
        batch.append(create_transaction("T11", "5000"))

        data = process_transactions(batch, AuditConfig(outlier_std_dev_factor=2.5))  # type: ignore[arg-type]

        assert data.all_transactions_with_flags[-1].has_finding(FindingKind.STATISTICAL_OUTLIER)

    def test_replace_with_int(self) -> None:
        """dataclasses.replace converts too."""
        config = dataclasses.replace(AuditConfig(), general_threshold=750)

        assert config.general_threshold == Decimal("750")

    def test_non_numeric_rejected(self) -> None:
        """Values that are not numbers raise ConfigError."""
        with pytest.raises(ConfigError):
            AuditConfig(general_threshold="lots")  # type: ignore[arg-type]
        with pytest.raises(ConfigError):
            AuditConfig(category_thresholds={"Catering": "cheap"})  # type: ignore[dict-item]


class TestTypedSettings:
    """Tests for booleans and floats read from settings."""

    @pytest.mark.parametrize("value", ["false", "no", 0, None])
    def test_duplicate_mode_must_be_bool(self, value: object) -> None:
        """A quoted or numeric flag is rejected instead of coerced."""
        with pytest.raises(ConfigError, match="flag_first_duplicate"):
            AuditConfig.from_dict({"flag_first_duplicate": value})

    def test_duplicate_mode_bool(self) -> None:
        """Real YAML booleans are accepted."""
        assert AuditConfig.from_dict({"flag_first_duplicate": False}).flag_first_duplicate is False

    def test_quoted_false_in_yaml(self, tmp_path: Path) -> None:
        """A quoted "false" in settings.yaml is a configuration error."""
        (tmp_path / "settings.yaml").write_text(
            'audit:\n  flag_first_duplicate: "false"\n', encoding="utf-8"
        )

        with pytest.raises(ConfigError):
            load_config(config_dir=tmp_path)

    @pytest.mark.parametrize("key", ["temperature", "timeout"])
    def test_insights_float_rejected(self, key: str) -> None:
        """Non-numeric insight floats raise ConfigError."""
        with pytest.raises(ConfigError, match=key):
            InsightsConfig.from_dict({key: "warm"})

    def test_insights_floats(self) -> None:
        """Numeric strings and ints are accepted."""
        config = InsightsConfig.from_dict({"temperature": "0.5", "timeout": 30})

        assert config.temperature == 0.5
        assert config.timeout == 30.0

"""Configuration loading and validation for audit automation."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

from audit_automation.utils.logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


# Default values for AuditConfig
DEFAULT_VALID_POLICY_CODES = frozenset(
    {"P001", "P002", "P003", "P004", "P005", "P006", "P007", "P008", "P009", "P010"}
)
DEFAULT_CATEGORY_THRESHOLDS: Mapping[str, Decimal] = MappingProxyType({
    "Software Licensing": Decimal("2000"),
    "Consulting Services": Decimal("5000"),
    "Travel & Expenses": Decimal("1000"),
    "Hardware Purchases": Decimal("3000"),
    "Marketing & Advertising": Decimal("2500"),
    "Office Supplies": Decimal("500"),
    "Legal Fees": Decimal("7000"),
    "Training & Development": Decimal("1500"),
})
DEFAULT_GENERAL_THRESHOLD = Decimal("10000")
DEFAULT_OUTLIER_STD_DEV_FACTOR = Decimal("2.5")
DEFAULT_MIN_SAMPLES_FOR_OUTLIER_DETECTION = 10
DEFAULT_TOP_SPENDING_COUNT = 5


def _to_decimal(value: object, name: str) -> Decimal:
    """Convert a YAML scalar to Decimal, going through str to keep precision."""
    if isinstance(value, bool):
        raise ConfigError(f"'{name}' must be a number, got {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigError(f"'{name}' must be a number, got {value!r}") from e


def _to_int(value: object, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"'{name}' must be an integer, got {value!r}")
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{name}' must be an integer, got {value!r}") from e


def _to_float(value: object, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"'{name}' must be a number, got {value!r}")
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{name}' must be a number, got {value!r}") from e


def _to_bool(value: object, name: str) -> bool:
    # Quoted YAML strings such as "false" are rejected rather than coerced
    if not isinstance(value, bool):
        raise ConfigError(f"'{name}' must be true or false, got {value!r}")
    return value


@dataclass(frozen=True)
class AuditConfig:
    """Rule and statistics settings for one audit run.

    Instances are immutable and safe to share between threads. Use
    ``dataclasses.replace`` to derive a per-call override.

    Attributes:
        valid_policy_codes: Allow-list of approval codes.
        category_thresholds: Category name to maximum allowed amount.
        general_threshold: Fallback maximum for categories without their own.
        outlier_std_dev_factor: Standard deviations above the category mean
            before an amount counts as an outlier.
        min_samples_for_outlier_detection: Categories with fewer transactions
            are never outlier-checked.
        flag_first_duplicate: Flag every occurrence of a repeated identifier.
            When False only the second and later occurrences are flagged.
        top_spending_count: Size of the spend leader slices.
    """

    valid_policy_codes: frozenset[str] = DEFAULT_VALID_POLICY_CODES
    category_thresholds: Mapping[str, Decimal] = field(
        default_factory=lambda: DEFAULT_CATEGORY_THRESHOLDS
    )
    general_threshold: Decimal = DEFAULT_GENERAL_THRESHOLD
    outlier_std_dev_factor: Decimal = DEFAULT_OUTLIER_STD_DEV_FACTOR
    min_samples_for_outlier_detection: int = DEFAULT_MIN_SAMPLES_FOR_OUTLIER_DETECTION
    flag_first_duplicate: bool = True
    top_spending_count: int = DEFAULT_TOP_SPENDING_COUNT

    def __post_init__(self) -> None:
        # Freeze caller-supplied containers so a shared config cannot drift
        if not isinstance(self.valid_policy_codes, frozenset):
            object.__setattr__(self, "valid_policy_codes", frozenset(self.valid_policy_codes))
        if not (
            isinstance(self.category_thresholds, MappingProxyType)
            and all(isinstance(v, Decimal) for v in self.category_thresholds.values())
        ):
            object.__setattr__(
                self,
                "category_thresholds",
                MappingProxyType({
                    str(category): _to_decimal(value, f"category_thresholds.{category}")
                    for category, value in self.category_thresholds.items()
                }),
            )

        # Plain int and float overrides become Decimal
        object.__setattr__(
            self, "general_threshold", _to_decimal(self.general_threshold, "general_threshold")
        )
        object.__setattr__(
            self,
            "outlier_std_dev_factor",
            _to_decimal(self.outlier_std_dev_factor, "outlier_std_dev_factor"),
        )
        object.__setattr__(
            self,
            "flag_first_duplicate",
            _to_bool(self.flag_first_duplicate, "flag_first_duplicate"),
        )
        if self.min_samples_for_outlier_detection < 1:
            raise ConfigError("'min_samples_for_outlier_detection' must be at least 1")
        if self.top_spending_count < 0:
            raise ConfigError("'top_spending_count' must not be negative")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "AuditConfig":
        """Create from dictionary."""
        codes = DEFAULT_VALID_POLICY_CODES
        if "valid_policy_codes" in data:
            raw_codes = data["valid_policy_codes"]
            if not isinstance(raw_codes, list):
                raise ConfigError(
                    f"'valid_policy_codes' must be a list, got {type(raw_codes).__name__}"
                )
            codes = frozenset(str(code).strip() for code in raw_codes)

        thresholds: Mapping[str, Decimal] = DEFAULT_CATEGORY_THRESHOLDS
        if "category_thresholds" in data:
            raw_thresholds = data["category_thresholds"] or {}
            if not isinstance(raw_thresholds, dict):
                raise ConfigError(
                    f"'category_thresholds' must be a mapping, got {type(raw_thresholds).__name__}"
                )
            thresholds = {
                str(category): _to_decimal(value, f"category_thresholds.{category}")
                for category, value in raw_thresholds.items()
            }

        general = DEFAULT_GENERAL_THRESHOLD
        if "general_threshold" in data:
            general = _to_decimal(data["general_threshold"], "general_threshold")

        factor = DEFAULT_OUTLIER_STD_DEV_FACTOR
        if "outlier_std_dev_factor" in data:
            factor = _to_decimal(data["outlier_std_dev_factor"], "outlier_std_dev_factor")

        return cls(
            valid_policy_codes=codes,
            category_thresholds=thresholds,
            general_threshold=general,
            outlier_std_dev_factor=factor,
            min_samples_for_outlier_detection=_to_int(
                data.get("min_samples_for_outlier_detection", DEFAULT_MIN_SAMPLES_FOR_OUTLIER_DETECTION),
                "min_samples_for_outlier_detection",
            ),
            flag_first_duplicate=_to_bool(
                data.get("flag_first_duplicate", True), "flag_first_duplicate"
            ),
            top_spending_count=_to_int(
                data.get("top_spending_count", DEFAULT_TOP_SPENDING_COUNT),
                "top_spending_count",
            ),
        )


@dataclass
class InsightsConfig:
    """Configuration for narrative insight generation.

    Attributes:
        api_key_env: Environment variable holding the API key.
        model: Model used for the summary request.
        max_tokens: Maximum tokens for the response.
        temperature: Sampling temperature (low for factual output).
        max_transactions: Flagged transactions sent per request.
        timeout: Request timeout in seconds.
    """

    api_key_env: str = "ANTHROPIC_API_KEY"
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 1024
    temperature: float = 0.3
    max_transactions: int = 20
    timeout: float = 60.0

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "InsightsConfig":
        """Create from dictionary."""
        return cls(
            api_key_env=str(data.get("api_key_env", "ANTHROPIC_API_KEY")),
            model=str(data.get("model", "claude-sonnet-4-5-20250929")),
            max_tokens=_to_int(data.get("max_tokens", 1024), "max_tokens"),
            temperature=_to_float(data.get("temperature", 0.3), "temperature"),
            max_transactions=_to_int(data.get("max_transactions", 20), "max_transactions"),
            timeout=_to_float(data.get("timeout", 60.0), "timeout"),
        )


@dataclass
class OutputConfig:
    """Configuration for report output.

    Attributes:
        currency_symbol: Currency symbol for display.
        decimal_places: Number of decimal places.
    """

    currency_symbol: str = "$"
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        return cls(
            currency_symbol=str(data.get("currency_symbol", "$")),
            decimal_places=_to_int(data.get("decimal_places", 2), "decimal_places"),
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "audit_automation.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "audit_automation.log")),
        )


@dataclass
class Config:
    """Main configuration container.

    Attributes:
        audit: Rule thresholds and outlier settings.
        insights: Narrative insight settings.
        output: Report output settings.
        logging: Logging settings.
    """

    audit: AuditConfig = field(default_factory=AuditConfig)
    insights: InsightsConfig = field(default_factory=InsightsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the top level is not a mapping.
        yaml.YAMLError: If file is invalid YAML.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        content = yaml.safe_load(f)

    if not content:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"Top level of {path} must be a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_settings(path: Path) -> Config:
    """Load settings from settings.yaml.

    Args:
        path: Path to settings.yaml.

    Returns:
        Config with every section present in the file applied over defaults.
    """
    data = load_yaml_file(path)

    return Config(
        audit=AuditConfig.from_dict(_section(data, "audit")),
        insights=InsightsConfig.from_dict(_section(data, "insights")),
        output=OutputConfig.from_dict(_section(data, "output")),
        logging=LoggingConfig.from_dict(_section(data, "logging")),
    )


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load complete configuration.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object. Defaults are used when the file is missing.
    """
    if config_dir is None:
        config_dir = Path("config")

    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    if not settings_path.exists():
        logger.warning(f"Settings file not found: {settings_path}, using defaults")
        return Config()

    config = load_settings(settings_path)
    logger.info(
        f"Loaded settings from {settings_path} "
        f"({len(config.audit.valid_policy_codes)} policy codes, "
        f"{len(config.audit.category_thresholds)} category thresholds)"
    )
    return config

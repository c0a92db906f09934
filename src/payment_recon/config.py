"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class StatementInputConfig(BaseModel):
    """Configuration for the fixed-column bank CSV export."""

    encoding: str = "utf-8"
    delimiter: str = ";"
    date_format: str = "%Y-%m-%d"
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "date": "Date",
            "description": "Description",
            "debit": "Debit",
            "credit": "Credit",
            "reference": "Reference",
        }
    )


class FeedInputConfig(BaseModel):
    """Configuration for structured bank-feed records."""

    date_format: str = "%Y-%m-%d"
    # Some providers report money leaving the account as positive
    invert_amounts: bool = False
    skip_pending: bool = True


class LedgerInputConfig(BaseModel):
    """Configuration for payment ledger exports."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_format: str = "%Y-%m-%d"
    document_prefix: str = "PMT-"
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "id": "id",
            "amount": "amount",
            "quote_number": "quote_number",
            "method": "method",
            "paid_at": "paid_at",
        }
    )


class InputConfig(BaseModel):
    """Configuration for input parsing."""

    statement: StatementInputConfig = Field(default_factory=StatementInputConfig)
    feed: FeedInputConfig = Field(default_factory=FeedInputConfig)
    ledger: LedgerInputConfig = Field(default_factory=LedgerInputConfig)


class TierWeights(BaseModel):
    """Rank weight for each confidence tier."""

    high: int = 1000
    medium: int = 100
    low: int = 10


class MatchingConfig(BaseModel):
    """Configuration for candidate scoring."""

    high_max_date_delta_days: int = Field(default=3, ge=0)
    medium_max_date_delta_days: int = Field(default=10, ge=0)
    weights: TierWeights = Field(default_factory=TierWeights)
    case_sensitive: bool = True
    digit_only_quote: bool = True

    @model_validator(mode="after")
    def _check_windows(self) -> "MatchingConfig":
        if self.medium_max_date_delta_days < self.high_max_date_delta_days:
            raise ValueError("medium date window must not be narrower than the high window")
        w = self.weights
        if not (w.high > w.medium > w.low):
            raise ValueError("tier weights must decrease from high to low")
        return self


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "payment_reconciliation_{date}_{time}.xlsx"
    include_timestamp: bool = True


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matches: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matches"))
    unmatched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Unmatched"))
    parse_errors: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Parse Errors"))


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return ReconConfig().model_dump(exclude={"config_file_path"})


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Top level of {config_path} must be a mapping")

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Bank statement to payment ledger reconciliation configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")

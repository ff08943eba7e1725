"""
Invease Configuration Types and Schema
Type-safe configuration objects for the invoice core
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from invease.models.numbering import NumberingConfig, ResetPeriod
from invease.models.tax import VatRate
from invease.services.numbering import validate_pattern, validate_reset_period


class StorageBackend(str, Enum):
    """Where store state is persisted"""
    FILE = "file"
    MEMORY = "memory"


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigDefaults:
    """Default configuration values"""
    STORAGE_BACKEND = StorageBackend.FILE
    STORAGE_DIR = "./invease-data"
    DEFAULT_PAYMENT_TERMS = 30
    DEFAULT_VAT_RATE = VatRate.STANDARD
    RECENT_CUSTOMER_LIMIT = 5
    INVOICE_PATTERN = "INV-{SEQ:4}"
    INVOICE_PREFIX = "INV"
    CREDIT_NOTE_PATTERN = "CN-{SEQ:4}"
    CREDIT_NOTE_PREFIX = "CN"
    SEQUENCE_DIGITS = 4
    RESET_PERIOD = ResetPeriod.NEVER
    LOG_LEVEL = "WARNING"


# Environment variable mapping
ENV_VAR_MAPPING = {
    "INVEASE_STORAGE_BACKEND": "storage_backend",
    "INVEASE_STORAGE_DIR": "storage_dir",
    "INVEASE_DEFAULT_PAYMENT_TERMS": "default_payment_terms",
    "INVEASE_DEFAULT_VAT_RATE": "default_vat_rate",
    "INVEASE_RECENT_CUSTOMER_LIMIT": "recent_customer_limit",
    "INVEASE_INVOICE_PATTERN": "invoice_pattern",
    "INVEASE_INVOICE_PREFIX": "invoice_prefix",
    "INVEASE_CREDIT_NOTE_PATTERN": "credit_note_pattern",
    "INVEASE_CREDIT_NOTE_PREFIX": "credit_note_prefix",
    "INVEASE_SEQUENCE_DIGITS": "sequence_digits",
    "INVEASE_RESET_PERIOD": "reset_period",
    "INVEASE_LOG_LEVEL": "log_level",
}


class InveaseConfig(BaseModel):
    """
    Main Invease configuration class
    Every option has a default, so an empty configuration is valid
    """

    # Storage
    storage_backend: StorageBackend = Field(
        default=ConfigDefaults.STORAGE_BACKEND,
        description="Storage backend: 'file' or 'memory'"
    )
    storage_dir: str = Field(
        default=ConfigDefaults.STORAGE_DIR,
        description="Directory holding one JSON file per store",
        min_length=1
    )

    # New document defaults
    default_payment_terms: int = Field(
        default=ConfigDefaults.DEFAULT_PAYMENT_TERMS,
        description="Payment terms (days) of a fresh draft",
        ge=0,
        le=365
    )
    default_vat_rate: VatRate = Field(
        default=ConfigDefaults.DEFAULT_VAT_RATE,
        description="VAT rate of new line items"
    )
    recent_customer_limit: int = Field(
        default=ConfigDefaults.RECENT_CUSTOMER_LIMIT,
        description="Number of recent customers offered for re-use",
        ge=1,
        le=50
    )

    # Numbering defaults (used until the user changes them in settings)
    invoice_pattern: str = Field(default=ConfigDefaults.INVOICE_PATTERN)
    invoice_prefix: str = Field(default=ConfigDefaults.INVOICE_PREFIX)
    credit_note_pattern: str = Field(default=ConfigDefaults.CREDIT_NOTE_PATTERN)
    credit_note_prefix: str = Field(default=ConfigDefaults.CREDIT_NOTE_PREFIX)
    sequence_digits: int = Field(
        default=ConfigDefaults.SEQUENCE_DIGITS,
        description="Zero padding of {SEQ}",
        ge=1,
        le=10
    )
    reset_period: ResetPeriod = Field(default=ConfigDefaults.RESET_PERIOD)

    # Logging
    log_level: str = Field(
        default=ConfigDefaults.LOG_LEVEL,
        description="Level applied to the 'invease' logger"
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("invoice_pattern", "credit_note_pattern")
    @classmethod
    def validate_number_pattern(cls, v: str) -> str:
        """Validate numbering patterns with the numbering engine rules"""
        result = validate_pattern(v)
        if not result.valid:
            raise ValueError(result.error)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name"""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @model_validator(mode="after")
    def validate_reset_tokens(self) -> "InveaseConfig":
        """Both patterns must show the period that reset_period restarts on"""
        for pattern in (self.invoice_pattern, self.credit_note_pattern):
            result = validate_reset_period(pattern, self.reset_period)
            if not result.valid:
                raise ValueError(result.error)
        return self

    def invoice_numbering(self) -> NumberingConfig:
        return NumberingConfig(
            pattern=self.invoice_pattern,
            prefix=self.invoice_prefix,
            sequence_digits=self.sequence_digits,
            reset_period=self.reset_period,
        )

    def credit_note_numbering(self) -> NumberingConfig:
        return NumberingConfig(
            pattern=self.credit_note_pattern,
            prefix=self.credit_note_prefix,
            sequence_digits=self.sequence_digits,
            reset_period=self.reset_period,
        )

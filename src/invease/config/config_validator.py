"""
Configuration Validator
Validates Invease configuration with clear error messages
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from invease.config.invease_config import LOG_LEVELS, ConfigDefaults, StorageBackend
from invease.models.numbering import ResetPeriod
from invease.models.tax import VatRate
from invease.services.numbering import validate_pattern, validate_reset_period


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)


def _enum_value(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


class ConfigValidator:
    """
    ConfigValidator class
    Collects every problem in a configuration dictionary before reporting
    """

    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []

    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate the entire configuration dictionary

        Args:
            config: Configuration dictionary to validate

        Returns:
            ValidationResult with any errors
        """
        self._errors = []

        self._validate_storage(config)
        self._validate_ranges(config)
        self._validate_choices(config)
        self._validate_numbering(config)

        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )

    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate and raise if invalid

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValidationError: If configuration is invalid
        """
        from invease.exceptions import ValidationError

        result = self.validate(config)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ValidationError(
                f"Configuration validation failed: {error_messages}",
                field=result.errors[0].field,
            )

    def _validate_storage(self, config: Dict[str, Any]) -> None:
        """Validate storage backend and directory"""
        backend = config.get("storage_backend")
        if backend is not None:
            valid_backends = [b.value for b in StorageBackend]
            if _enum_value(backend) not in valid_backends:
                self._errors.append(ValidationErrorDetail(
                    field="storage_backend",
                    message=f"storage_backend must be one of: {', '.join(valid_backends)}",
                    value=backend
                ))

        storage_dir = config.get("storage_dir")
        if storage_dir is not None:
            if not isinstance(storage_dir, str):
                self._errors.append(ValidationErrorDetail(
                    field="storage_dir",
                    message="storage_dir must be a string",
                    value=storage_dir
                ))
            elif storage_dir.strip() == "":
                self._errors.append(ValidationErrorDetail(
                    field="storage_dir",
                    message="storage_dir cannot be empty",
                    value=storage_dir
                ))

    def _check_int_range(
        self, config: Dict[str, Any], name: str, minimum: int, maximum: int
    ) -> None:
        value = config.get(name)
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, int):
            self._errors.append(ValidationErrorDetail(
                field=name,
                message=f"{name} must be an integer",
                value=value
            ))
        elif value < minimum or value > maximum:
            self._errors.append(ValidationErrorDetail(
                field=name,
                message=f"{name} must be between {minimum} and {maximum}",
                value=value
            ))

    def _validate_ranges(self, config: Dict[str, Any]) -> None:
        """Validate numeric ranges"""
        self._check_int_range(config, "default_payment_terms", 0, 365)
        self._check_int_range(config, "recent_customer_limit", 1, 50)
        self._check_int_range(config, "sequence_digits", 1, 10)

    def _validate_choices(self, config: Dict[str, Any]) -> None:
        """Validate enumerated settings"""
        vat_rate = config.get("default_vat_rate")
        if vat_rate is not None:
            valid_rates = [r.value for r in VatRate]
            if _enum_value(vat_rate) not in valid_rates:
                self._errors.append(ValidationErrorDetail(
                    field="default_vat_rate",
                    message=f"default_vat_rate must be one of: {', '.join(valid_rates)}",
                    value=vat_rate
                ))

        reset_period = config.get("reset_period")
        if reset_period is not None:
            valid_periods = [p.value for p in ResetPeriod]
            if _enum_value(reset_period) not in valid_periods:
                self._errors.append(ValidationErrorDetail(
                    field="reset_period",
                    message=f"reset_period must be one of: {', '.join(valid_periods)}",
                    value=reset_period
                ))

        log_level = config.get("log_level")
        if log_level is not None:
            if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
                self._errors.append(ValidationErrorDetail(
                    field="log_level",
                    message=f"log_level must be one of: {', '.join(LOG_LEVELS)}",
                    value=log_level
                ))

    def _validate_numbering(self, config: Dict[str, Any]) -> None:
        """Validate numbering patterns, prefixes and the reset period they share"""
        reset_period = _enum_value(config.get("reset_period", ConfigDefaults.RESET_PERIOD))
        if reset_period not in [p.value for p in ResetPeriod]:
            reset_period = None

        defaults = {
            "invoice_pattern": ConfigDefaults.INVOICE_PATTERN,
            "credit_note_pattern": ConfigDefaults.CREDIT_NOTE_PATTERN,
        }
        for pattern_field, default_pattern in defaults.items():
            pattern = config.get(pattern_field)
            if pattern is None:
                pattern = default_pattern
            if not isinstance(pattern, str):
                self._errors.append(ValidationErrorDetail(
                    field=pattern_field,
                    message=f"{pattern_field} must be a string",
                    value=pattern
                ))
                continue
            result = validate_pattern(pattern)
            if result.valid and reset_period is not None:
                result = validate_reset_period(pattern, ResetPeriod(reset_period))
            if not result.valid:
                self._errors.append(ValidationErrorDetail(
                    field=pattern_field,
                    message=result.error or "invalid pattern",
                    value=pattern
                ))

        for prefix_field in ("invoice_prefix", "credit_note_prefix"):
            prefix = config.get(prefix_field)
            if prefix is not None and not isinstance(prefix, str):
                self._errors.append(ValidationErrorDetail(
                    field=prefix_field,
                    message=f"{prefix_field} must be a string",
                    value=prefix
                ))

"""
Configuration Module Unit Tests
"""

import json
from pathlib import Path
import pytest

from invease.config import (
    InveaseConfig,
    StorageBackend,
    ConfigLoader,
    ConfigValidator,
    ConfigDefaults,
)
from invease.config.config_loader import merge_sources
from invease.exceptions import ConfigError, InveaseErrorCategory, ValidationError
from invease.models.numbering import ResetPeriod
from invease.models.tax import VatRate


class TestConfigValidator:
    """Tests for ConfigValidator"""

    @pytest.fixture
    def validator(self) -> ConfigValidator:
        return ConfigValidator()

    @pytest.fixture
    def valid_config(self) -> dict:
        return {
            "storage_backend": "file",
            "storage_dir": "./data",
            "default_payment_terms": 14,
            "default_vat_rate": "20",
            "invoice_pattern": "{PREFIX}-{YEAR}-{SEQ:3}",
            "invoice_prefix": "ACME",
            "credit_note_pattern": "CN-{YY}-{SEQ:3}",
            "reset_period": "yearly",
            "log_level": "info",
        }

    def test_validate_valid_config(self, validator: ConfigValidator, valid_config: dict):
        """Should pass with valid configuration"""
        result = validator.validate(valid_config)
        assert result.valid is True
        assert len(result.errors) == 0

    def test_validate_empty_config(self, validator: ConfigValidator):
        """Should pass with an empty configuration since every option has a default"""
        result = validator.validate({})
        assert result.valid is True

    def test_validate_invalid_backend(self, validator: ConfigValidator, valid_config: dict):
        """Should fail with an unknown storage backend"""
        valid_config["storage_backend"] = "s3"
        result = validator.validate(valid_config)
        assert result.valid is False
        assert any(e.field == "storage_backend" for e in result.errors)

    def test_validate_empty_storage_dir(self, validator: ConfigValidator, valid_config: dict):
        """Should fail when storage_dir is empty"""
        valid_config["storage_dir"] = "  "
        result = validator.validate(valid_config)
        assert result.valid is False
        assert any(
            e.field == "storage_dir" and "empty" in e.message
            for e in result.errors
        )

    def test_validate_negative_payment_terms(self, validator: ConfigValidator, valid_config: dict):
        """Should fail with negative payment terms"""
        valid_config["default_payment_terms"] = -5
        result = validator.validate(valid_config)
        assert result.valid is False
        assert any(e.field == "default_payment_terms" for e in result.errors)

    def test_validate_non_integer_sequence_digits(self, validator: ConfigValidator, valid_config: dict):
        """Should fail when sequence_digits is not an integer"""
        valid_config["sequence_digits"] = "four"
        result = validator.validate(valid_config)
        assert result.valid is False
        assert any(
            e.field == "sequence_digits" and "integer" in e.message
            for e in result.errors
        )

    def test_validate_invalid_vat_rate(self, validator: ConfigValidator, valid_config: dict):
        """Should fail with a VAT rate that is not a UK rate"""
        valid_config["default_vat_rate"] = "17.5"
        result = validator.validate(valid_config)
        assert result.valid is False
        assert any(e.field == "default_vat_rate" for e in result.errors)

    def test_validate_invalid_reset_period(self, validator: ConfigValidator, valid_config: dict):
        """Should fail with an unknown reset period"""
        valid_config["reset_period"] = "weekly"
        result = validator.validate(valid_config)
        assert result.valid is False
        assert any(e.field == "reset_period" for e in result.errors)

    def test_validate_pattern_without_sequence(self, validator: ConfigValidator, valid_config: dict):
        """Should fail with a numbering pattern that has no sequence token"""
        valid_config["invoice_pattern"] = "{PREFIX}-{YEAR}"
        result = validator.validate(valid_config)
        assert result.valid is False
        assert any(e.field == "invoice_pattern" for e in result.errors)

    def test_validate_reset_without_date_token(self, validator: ConfigValidator):
        """Should fail when a reset period is not visible in a pattern"""
        result = validator.validate({"reset_period": "yearly", "invoice_pattern": "INV-{YEAR}-{SEQ}"})

        assert result.valid is False
        assert [e.field for e in result.errors] == ["credit_note_pattern"]

    def test_validate_monthly_reset_needs_month(self, validator: ConfigValidator):
        """Should require {MONTH} as well as the year for a monthly reset"""
        result = validator.validate({
            "reset_period": "monthly",
            "invoice_pattern": "INV-{YEAR}-{MONTH}-{SEQ}",
            "credit_note_pattern": "CN-{YEAR}-{SEQ}",
        })

        assert result.valid is False
        assert "{MONTH}" in result.errors[0].message

    def test_validate_collects_all_errors(self, validator: ConfigValidator, valid_config: dict):
        """Should report every invalid field, not just the first"""
        valid_config["storage_backend"] = "s3"
        valid_config["log_level"] = "LOUD"
        result = validator.validate(valid_config)
        fields = {e.field for e in result.errors}
        assert fields == {"storage_backend", "log_level"}

    def test_validate_or_raise_invalid(self, validator: ConfigValidator, valid_config: dict):
        """Should raise ValidationError with invalid configuration"""
        valid_config["storage_backend"] = "s3"
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_or_raise(valid_config)

        assert exc_info.value.field == "storage_backend"
        assert exc_info.value.is_category(InveaseErrorCategory.VALIDATION)


class TestConfigLoader:
    """Tests for ConfigLoader"""

    @pytest.fixture
    def loader(self) -> ConfigLoader:
        return ConfigLoader()

    @pytest.fixture
    def valid_config(self) -> dict:
        return {
            "storage_backend": "memory",
            "invoice_prefix": "ACME",
            "default_payment_terms": 14,
        }

    def test_from_env(self, loader: ConfigLoader, monkeypatch):
        """Should load configuration from environment variables"""
        monkeypatch.setenv("INVEASE_STORAGE_BACKEND", "MEMORY")
        monkeypatch.setenv("INVEASE_DEFAULT_PAYMENT_TERMS", "14")
        monkeypatch.setenv("INVEASE_INVOICE_PREFIX", "ACME")
        monkeypatch.setenv("INVEASE_RESET_PERIOD", "Yearly")

        result = loader.from_env()

        assert result["storage_backend"] == StorageBackend.MEMORY
        assert result["default_payment_terms"] == 14
        assert result["invoice_prefix"] == "ACME"
        assert result["reset_period"] == "yearly"

    def test_from_env_ignores_empty_values(self, loader: ConfigLoader, monkeypatch):
        """Should skip variables that are set but empty"""
        monkeypatch.setenv("INVEASE_STORAGE_DIR", "")
        result = loader.from_env()
        assert "storage_dir" not in result

    def test_from_env_explicit_mapping(self, loader: ConfigLoader):
        """Should read from a given mapping instead of the process environment"""
        result = loader.from_env({"INVEASE_SEQUENCE_DIGITS": "six", "OTHER": "x"})
        assert result == {"sequence_digits": "six"}

    def test_merge(self):
        """Should merge multiple configurations with priority"""
        base = {"invoice_prefix": "BASE", "storage_dir": "./base"}
        override = {"invoice_prefix": "OVR", "sequence_digits": 6}

        result = merge_sources(base, override)

        assert result["invoice_prefix"] == "OVR"
        assert result["storage_dir"] == "./base"
        assert result["sequence_digits"] == 6

    def test_merge_filters_none(self):
        """Should not include None values from overrides"""
        base = {"invoice_prefix": "BASE", "sequence_digits": 5}
        override = {"invoice_prefix": "OVR", "sequence_digits": None}

        result = merge_sources(base, override)

        assert result["invoice_prefix"] == "OVR"
        assert result["sequence_digits"] == 5

    def test_resolve_applies_defaults(self, loader: ConfigLoader):
        """Should apply default values"""
        result = loader.resolve({})

        assert result.storage_backend == ConfigDefaults.STORAGE_BACKEND
        assert result.storage_dir == ConfigDefaults.STORAGE_DIR
        assert result.default_payment_terms == ConfigDefaults.DEFAULT_PAYMENT_TERMS
        assert result.default_vat_rate == VatRate.STANDARD
        assert result.invoice_pattern == ConfigDefaults.INVOICE_PATTERN
        assert result.reset_period == ResetPeriod.NEVER
        assert result.log_level == "WARNING"

    def test_resolve_invalid_raises(self, loader: ConfigLoader):
        """Should raise ValidationError before building the config"""
        with pytest.raises(ValidationError):
            loader.resolve({"recent_customer_limit": 0})

    def test_from_file(self, loader: ConfigLoader, valid_config: dict, tmp_path: Path):
        """Should load configuration from JSON file"""
        config_file = tmp_path / "invease.json"
        config_file.write_text(json.dumps(valid_config))

        result = loader.from_file(config_file)
        assert result["invoice_prefix"] == "ACME"

    def test_from_file_resolves_relative_storage_dir(self, loader: ConfigLoader, tmp_path: Path):
        """Should resolve storage_dir relative to the config file"""
        config_file = tmp_path / "invease.json"
        config_file.write_text(json.dumps({"storage_dir": "data"}))

        result = loader.from_file(config_file)
        assert Path(result["storage_dir"]) == tmp_path.resolve() / "data"

    def test_from_file_not_found(self, loader: ConfigLoader):
        """Should raise error for missing file"""
        with pytest.raises(ConfigError) as exc_info:
            loader.from_file("/nonexistent/path.json")

        assert "CONFIG_FILE_NOT_FOUND" in str(exc_info.value.code)
        assert exc_info.value.is_category(InveaseErrorCategory.CONFIG)

    def test_from_file_invalid_json(self, loader: ConfigLoader, tmp_path: Path):
        """Should raise error for malformed JSON"""
        config_file = tmp_path / "broken.json"
        config_file.write_text("{not json")

        with pytest.raises(ConfigError) as exc_info:
            loader.from_file(config_file)

        assert exc_info.value.code == "CONFIG_PARSE_ERROR"

    def test_load_from_config(self, loader: ConfigLoader, valid_config: dict):
        """Should load and resolve configuration from dict"""
        result = loader.load(config=valid_config, env=False)

        assert result.storage_backend == StorageBackend.MEMORY
        assert result.invoice_prefix == "ACME"
        assert result.default_payment_terms == 14

    def test_load_dict_overrides_environment(self, loader: ConfigLoader, monkeypatch):
        """Should let programmatic config win over environment variables"""
        monkeypatch.setenv("INVEASE_INVOICE_PREFIX", "ENV")
        result = loader.load(config={"invoice_prefix": "DICT"})
        assert result.invoice_prefix == "DICT"

    def test_create_template(self, loader: ConfigLoader, tmp_path: Path):
        """Should create template configuration file"""
        template_path = tmp_path / "config" / "template.json"
        loader.create_template(template_path)

        assert template_path.exists()

        with open(template_path) as f:
            template = json.load(f)

        assert template["storage_backend"] == "file"
        assert "invoice_pattern" in template
        assert loader.load(file=template_path, env=False).sequence_digits == 4


class TestInveaseConfig:
    """Tests for InveaseConfig Pydantic model"""

    def test_create_default_config(self):
        """Should create config with defaults only"""
        config = InveaseConfig()
        assert config.storage_backend == StorageBackend.FILE
        assert config.recent_customer_limit == 5

    def test_log_level_is_normalised(self):
        """Should upper-case the log level"""
        config = InveaseConfig(log_level="debug")
        assert config.log_level == "DEBUG"

    def test_invalid_pattern(self):
        """Should reject a pattern without a sequence token"""
        with pytest.raises(ValueError):
            InveaseConfig(credit_note_pattern="CN-{YEAR}")

    def test_numbering_configs(self):
        """Should build numbering configs for both series"""
        config = InveaseConfig(
            invoice_prefix="ACME",
            invoice_pattern="{PREFIX}/{YEAR}/{MONTH}/{SEQ}",
            credit_note_pattern="CN-{YY}{MONTH}-{SEQ}",
            sequence_digits=6,
            reset_period=ResetPeriod.MONTHLY,
        )

        invoice = config.invoice_numbering()
        credit_note = config.credit_note_numbering()

        assert invoice.prefix == "ACME"
        assert invoice.sequence_digits == 6
        assert invoice.current_sequence == 0
        assert credit_note.pattern == "CN-{YY}{MONTH}-{SEQ}"
        assert credit_note.reset_period == ResetPeriod.MONTHLY

    def test_reset_period_needs_date_tokens(self):
        """Should reject a reset period the default patterns cannot show"""
        with pytest.raises(ValueError):
            InveaseConfig(reset_period=ResetPeriod.YEARLY)

"""
Configuration Loader
Builds an InveaseConfig from a JSON file, INVEASE_* variables and overrides
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from invease.config.invease_config import InveaseConfig, ENV_VAR_MAPPING
from invease.config.config_validator import ConfigValidator
from invease.exceptions import ConfigError

INT_OPTIONS = frozenset({"default_payment_terms", "recent_customer_limit", "sequence_digits"})
LOWERCASE_OPTIONS = frozenset({"storage_backend", "reset_period"})


def merge_sources(*sources: Dict[str, Any]) -> Dict[str, Any]:
    """Combine option dictionaries; later sources win and None means unset"""
    return {
        key: value
        for source in sources
        for key, value in source.items()
        if value is not None
    }


def parse_env_value(option: str, value: str) -> Any:
    """Convert an environment string to the type the option expects"""
    if option in INT_OPTIONS:
        try:
            return int(value)
        except ValueError:
            # left as text so the validator reports it
            return value
    if option in LOWERCASE_OPTIONS:
        return value.lower()
    return value


class ConfigLoader:
    """
    ConfigLoader class

    Sources are applied in the order file, environment, overrides and
    validated once, after merging.
    """

    def __init__(self) -> None:
        self._validator = ConfigValidator()

    def from_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Read options from a JSON file

        A relative ``storage_dir`` is taken relative to the file.

        Raises:
            ConfigError: If the file is missing or not a JSON object
        """
        file_path = Path(path).resolve()
        if not file_path.exists():
            raise ConfigError(
                f"Configuration file not found: {file_path}",
                code="CONFIG_FILE_NOT_FOUND"
            )

        try:
            options = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file: {file_path}",
                code="CONFIG_PARSE_ERROR"
            ) from e

        if not isinstance(options, dict):
            raise ConfigError(
                f"Configuration file must contain a JSON object: {file_path}",
                code="CONFIG_PARSE_ERROR"
            )

        storage_dir = options.get("storage_dir")
        if isinstance(storage_dir, str) and storage_dir.strip():
            dir_path = Path(storage_dir).expanduser()
            if not dir_path.is_absolute():
                options["storage_dir"] = str(file_path.parent / dir_path)
        return options

    def from_env(self, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Options set through INVEASE_* variables; empty variables are ignored"""
        environ = os.environ if environ is None else environ
        return {
            option: parse_env_value(option, environ[name])
            for name, option in ENV_VAR_MAPPING.items()
            if environ.get(name)
        }

    def resolve(self, options: Dict[str, Any]) -> InveaseConfig:
        """
        Validate merged options and fill in the defaults

        Raises:
            ValidationError: If any option is invalid
        """
        self._validator.validate_or_raise(options)
        return InveaseConfig(**options)

    def load(
        self,
        file: Optional[Union[str, Path]] = None,
        env: bool = True,
        config: Optional[Dict[str, Any]] = None,
    ) -> InveaseConfig:
        """
        Load and resolve the configuration

        Args:
            file: JSON configuration file (optional)
            env: Whether INVEASE_* variables apply (default: True)
            config: Overrides that win over every other source (optional)
        """
        file_options = self.from_file(file) if file is not None else {}
        env_options = self.from_env() if env else {}
        return self.resolve(merge_sources(file_options, env_options, config or {}))

    def create_template(self, path: Union[str, Path]) -> None:
        """Write a JSON file holding every option at its default"""
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(
            json.dumps(InveaseConfig().model_dump(mode="json"), indent=2),
            encoding="utf-8",
        )

"""Environment variable layer of the Settings Sync configuration."""

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from settings_sync.core.exceptions import ConfigError
from settings_sync.utils.logging import get_logger

logger = get_logger("config.env_manager")

DEFAULT_ENV_PREFIX = "SETTINGS_SYNC_"
NESTING_SEPARATOR = "__"


class EnvManager:
    """Reads ``SETTINGS_SYNC_*`` variables into a nested configuration mapping.

    ``SETTINGS_SYNC_PROVIDER__REFRESH_INTERVAL=60`` becomes
    ``{"provider": {"refresh_interval": 60}}``.
    """

    def __init__(
        self,
        env_prefix: str = DEFAULT_ENV_PREFIX,
        env_paths: list[Path] | None = None,
    ):
        """Initialize the environment manager.

        Args:
            env_prefix: Prefix selecting the variables that configure the app
            env_paths: .env files to load, later ones overriding earlier ones
                (default: ``.env`` and ``.env.local`` in the working directory)
        """
        self.env_prefix = env_prefix
        self.env_paths = env_paths or [Path.cwd() / ".env", Path.cwd() / ".env.local"]

    def with_prefix(self, key: str) -> str:
        if key.startswith(self.env_prefix):
            return key
        return f"{self.env_prefix}{key}"

    def load_env_files(self) -> None:
        """Load the configured .env files into the process environment.

        Raises:
            ConfigError: If an existing .env file cannot be loaded
        """
        from dotenv import load_dotenv

        existing = [path for path in self.env_paths if path.exists()]
        if not existing:
            logger.debug("No .env files found to load")
            return

        for index, env_path in enumerate(existing):
            try:
                # The first file never clobbers the real environment.
                load_dotenv(env_path, override=index > 0)
            except Exception as e:
                raise ConfigError(f"Failed to load .env file {env_path}: {e}") from e
            logger.info(f"Loaded environment variables from {env_path}")

    def get_config_from_env(self) -> dict[str, Any]:
        """Build a nested configuration mapping from prefixed variables.

        Raises:
            ConfigError: If the environment cannot be parsed
        """
        config_data: dict[str, Any] = {}
        try:
            variables = dict(self._prefixed_variables(os.environ))
        except Exception as e:
            raise ConfigError(f"Failed to parse environment variables: {e}") from e

        for config_key, raw_value in variables.items():
            self._set_nested_value(
                config_data,
                config_key.split(NESTING_SEPARATOR),
                raw_value,
            )

        if variables:
            logger.debug(
                f"Read {len(variables)} settings from {self.env_prefix}* variables"
            )
        return config_data

    def _prefixed_variables(
        self, environ: Mapping[str, str]
    ) -> Iterator[tuple[str, str]]:
        prefix = self.env_prefix.upper()
        for key, value in environ.items():
            if key.upper().startswith(prefix):
                yield key[len(prefix) :].lower(), value

    def _set_nested_value(
        self, data: dict[str, Any], key_parts: list[str], value: str
    ) -> None:
        """Store ``value`` under the path ``key_parts``.

        A path whose parent already holds a scalar is skipped with a warning.
        """
        *parents, leaf = key_parts
        current = data
        for part in parents:
            child = current.setdefault(part, {})
            if not isinstance(child, dict):
                logger.warning(
                    f"Ignoring {self.with_prefix(NESTING_SEPARATOR.join(key_parts))}: "
                    f"{part!r} is already set to a plain value"
                )
                return
            current = child

        current[leaf] = self._convert_env_value(value)

    def _convert_env_value(self, value: str) -> Any:
        """Interpret ``true``/``false``, ``null`` and numbers; keep anything else."""
        lowered = value.lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        if value == "null":
            return None

        for parse in (int, float):
            try:
                return parse(value)
            except ValueError:
                continue
        return value

"""
Engine configuration from environment variables.

Variables:
    SKILLFORGE_SIMILARITY_THRESHOLD   float in [0, 1], default 0.7
    SKILLFORGE_EXCLUDED_MECHANICS     comma-separated mechanic names, default
                                      delay,wait,pause (empty for none)
    SKILLFORGE_CATALOG_PATH           YAML/JSON catalog file (built-in if unset)
    SKILLFORGE_LOG_LEVEL              DEBUG, INFO, WARNING, ERROR or CRITICAL,
                                      default WARNING
    ALLOWED_ORIGINS                   comma-separated CORS origins, default *
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping
import logging
import os

from .analysis.similarity import DEFAULT_EXCLUDED_MECHANICS
from .catalog import Catalog, default_catalog, load_catalog

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when an environment value is invalid."""


@dataclass(frozen=True)
class EngineSettings:
    similarity_threshold: float = 0.7
    excluded_mechanics: tuple[str, ...] = DEFAULT_EXCLUDED_MECHANICS
    catalog_path: str | None = None
    log_level: str = "WARNING"
    allowed_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineSettings:
        """
        Read settings from the environment (or the given mapping).

        Raises ConfigError for values that cannot be used.
        """
        env = os.environ if environ is None else environ

        raw_threshold = env.get("SKILLFORGE_SIMILARITY_THRESHOLD", "0.7")
        try:
            threshold = float(raw_threshold)
        except ValueError as exc:
            raise ConfigError(
                f"SKILLFORGE_SIMILARITY_THRESHOLD must be a number, got {raw_threshold!r}"
            ) from exc
        if not 0.0 <= threshold <= 1.0:
            raise ConfigError(
                f"SKILLFORGE_SIMILARITY_THRESHOLD must be between 0 and 1, got {threshold}"
            )

        log_level = env.get("SKILLFORGE_LOG_LEVEL", "WARNING").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(
                f"SKILLFORGE_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        return cls(
            similarity_threshold=threshold,
            excluded_mechanics=_split_list(
                env.get("SKILLFORGE_EXCLUDED_MECHANICS", ",".join(DEFAULT_EXCLUDED_MECHANICS))
            ),
            catalog_path=env.get("SKILLFORGE_CATALOG_PATH") or None,
            log_level=log_level,
            allowed_origins=_split_list(env.get("ALLOWED_ORIGINS", "*")) or ("*",),
        )

    def load_catalog(self) -> Catalog:
        """The configured catalog file, or the built-in catalog."""
        if self.catalog_path:
            return load_catalog(self.catalog_path)
        return default_catalog()


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())

"""Configuration module for smart-search.

Loads configuration from an optional YAML settings file and environment
variables. Environment variables take precedence over the file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from smart_search.indexer.analyzer import DEFAULT_CACHE_SIZE, NLP_DEPTHS

SETTINGS_FILENAME = ".smart-search.yaml"

TRUE_VALUES = ("1", "true", "yes")


def _split_list(value: str) -> list[str]:
    """Split a comma-separated env value, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_int(name: str, value: str, minimum: int = 0) -> int:
    try:
        result = int(value)
        if result < minimum:
            raise ValueError(f"must be >= {minimum}, got {result}")
    except ValueError as e:
        raise ValueError(f"Invalid {name} value '{value}': {e}") from e
    return result


def load_settings_file(path: Path) -> dict:
    """Load the YAML settings file. A missing file yields an empty mapping."""
    if not path.is_file():
        return {}
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid settings file {path}: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return raw


@dataclass
class Config:
    """Application configuration."""

    vault_root: Path
    port: int = 8080
    excluded_folders: list[str] = field(default_factory=list)
    excluded_tags: list[str] = field(default_factory=list)
    exclude_wikilinks: bool = False
    nlp_depth: str = "deep"
    sync_interval: int = 30
    cache_size: int = DEFAULT_CACHE_SIZE

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from the settings file and environment variables."""
        default_root = str(Path.home() / "vault")
        vault_root = Path(os.getenv("SMART_SEARCH_VAULT", default_root)).expanduser()

        default_settings = str(vault_root / SETTINGS_FILENAME)
        settings_path = Path(
            os.getenv("SMART_SEARCH_CONFIG", default_settings)
        ).expanduser()
        settings = load_settings_file(settings_path)

        port_str = os.getenv("SMART_SEARCH_PORT", str(settings.get("port", 8080)))
        try:
            port = int(port_str)
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        except ValueError as e:
            raise ValueError(f"Invalid SMART_SEARCH_PORT value '{port_str}': {e}") from e

        folders_env = os.getenv("SMART_SEARCH_EXCLUDED_FOLDERS")
        if folders_env is not None:
            excluded_folders = _split_list(folders_env)
        else:
            excluded_folders = [str(f) for f in settings.get("excluded_folders") or []]

        tags_env = os.getenv("SMART_SEARCH_EXCLUDED_TAGS")
        if tags_env is not None:
            excluded_tags = _split_list(tags_env)
        else:
            excluded_tags = [str(t) for t in settings.get("excluded_tags") or []]

        wikilinks_env = os.getenv("SMART_SEARCH_EXCLUDE_WIKILINKS")
        if wikilinks_env is not None:
            exclude_wikilinks = wikilinks_env.lower() in TRUE_VALUES
        else:
            exclude_wikilinks = bool(settings.get("exclude_wikilinks", False))

        nlp_depth = os.getenv("SMART_SEARCH_NLP_DEPTH", str(settings.get("nlp_depth", "deep")))
        nlp_depth = nlp_depth.lower()
        if nlp_depth not in NLP_DEPTHS:
            raise ValueError(
                f"Invalid SMART_SEARCH_NLP_DEPTH value '{nlp_depth}': "
                f"must be one of {', '.join(NLP_DEPTHS)}"
            )

        sync_interval = _parse_int(
            "SMART_SEARCH_SYNC_INTERVAL",
            os.getenv("SMART_SEARCH_SYNC_INTERVAL", str(settings.get("sync_interval", 30))),
        )
        cache_size = _parse_int(
            "SMART_SEARCH_CACHE_SIZE",
            os.getenv("SMART_SEARCH_CACHE_SIZE", str(settings.get("cache_size", DEFAULT_CACHE_SIZE))),
            minimum=1,
        )

        return cls(
            vault_root=vault_root,
            port=port,
            excluded_folders=excluded_folders,
            excluded_tags=excluded_tags,
            exclude_wikilinks=exclude_wikilinks,
            nlp_depth=nlp_depth,
            sync_interval=sync_interval,
            cache_size=cache_size,
        )


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None

"""
Runtime settings for the record store and the read pipeline.

Usage:
    from topicboard.config.settings import load_settings

    # Will raise ConfigError if anything required is missing
    settings = load_settings()

Secrets come from the environment (a .env file at the repo root is loaded
first). Non-secret knobs may also live in config/topicboard.yaml; environment
variables win over the file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from dotenv import load_dotenv

from ..ingest.record_store import DEFAULT_API_URL
from ..logging_config import parse_level
from ..pipeline.models import (
    DEFAULT_BACK_REFERENCE_FIELD,
    DEFAULT_VIEWPOINT_LINK_FIELD,
    LinkageStrategy,
    SortSpec,
)

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent  # topicboard/config/settings.py -> repo root
DEFAULT_CONFIG_PATH = _REPO_ROOT / "config" / "topicboard.yaml"
CONFIG_PATH_ENV = "TOPICBOARD_CONFIG"

DEFAULT_TOPICS_LIMIT = 10
DEFAULT_VIEWPOINT_PAGE_SIZE = 20
DEFAULT_REQUEST_TIMEOUT = (10.0, 30.0)
MAX_PAGE_SIZE = 100

# Environment variable -> settings key
REQUIRED_SETTINGS = {
    "AIRTABLE_BASE_ID": "base_id",
    "AIRTABLE_TOPICS_TABLE_ID": "topics_table",
    "AIRTABLE_VIEWPOINTS_TABLE_ID": "viewpoints_table",
    "AIRTABLE_API_KEY": "api_key",
    "TOPICBOARD_REVALIDATE_SECONDS": "revalidate_seconds",
}

OPTIONAL_SETTINGS = {
    "AIRTABLE_API_URL": "api_url",
    "TOPICBOARD_NEWEST_FIRST_VIEW": "newest_first_view",
    "TOPICBOARD_TOPICS_LIMIT": "topics_limit",
    "TOPICBOARD_VIEWPOINT_PAGE_SIZE": "viewpoint_page_size",
    "TOPICBOARD_LINKAGE": "linkage",
    "TOPICBOARD_BACK_REFERENCE_FIELD": "back_reference_field",
    "TOPICBOARD_VIEWPOINT_LINK_FIELD": "viewpoint_link_field",
    "TOPICBOARD_LOG_LEVEL": "log_level",
    "TOPICBOARD_LOG_FILE": "log_file",
}

# Reported by check_settings when neither the view nor the sort is set
ORDERING_SETTING = "TOPICBOARD_NEWEST_FIRST_VIEW or sort"


class ConfigError(Exception):
    """Raised when a required setting is missing or a value is invalid."""
    pass


@dataclass(frozen=True)
class Settings:
    base_id: str
    topics_table: str
    viewpoints_table: str
    api_key: str
    revalidate_seconds: int
    api_url: str = DEFAULT_API_URL
    newest_first_view: Optional[str] = None
    sort: Optional[SortSpec] = None
    topics_limit: int = DEFAULT_TOPICS_LIMIT
    viewpoint_page_size: int = DEFAULT_VIEWPOINT_PAGE_SIZE
    linkage: LinkageStrategy = LinkageStrategy.BACK_REFERENCE
    back_reference_field: str = DEFAULT_BACK_REFERENCE_FIELD
    viewpoint_link_field: str = DEFAULT_VIEWPOINT_LINK_FIELD
    request_timeout: Tuple[float, float] = DEFAULT_REQUEST_TIMEOUT
    log_level: int = logging.INFO
    log_file: Optional[str] = None

    def __repr__(self) -> str:
        # Keep the API key out of logs and tracebacks
        return (
            f"Settings(base_id={self.base_id!r}, topics_table={self.topics_table!r}, "
            f"viewpoints_table={self.viewpoints_table!r}, linkage={self.linkage.value!r}, "
            f"revalidate_seconds={self.revalidate_seconds})"
        )


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load non-secret settings from a YAML file.

    Args:
        path: Explicit file. When None, config/topicboard.yaml is looked up
            at the repo root and then in the current directory.

    Returns:
        Config dict, or empty dict if no default file exists

    Raises:
        ConfigError: If an explicit path is missing or any file is not valid YAML
    """
    if path is not None:
        candidates = [Path(path)]
        if not candidates[0].exists():
            raise ConfigError(f"Config file not found: {path}")
    else:
        candidates = [DEFAULT_CONFIG_PATH, Path("config") / "topicboard.yaml"]

    for candidate in candidates:
        if not candidate.exists():
            continue
        try:
            with open(candidate, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {candidate}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {candidate} must contain a mapping")
        logger.debug(f"Loaded settings file {candidate}")
        return data

    return {}


def _load_dotenv() -> None:
    env_path = _REPO_ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _merge_values(environ: Mapping[str, str], file_values: Mapping[str, Any]) -> Dict[str, Any]:
    values = dict(file_values)
    for env_name, key in {**REQUIRED_SETTINGS, **OPTIONAL_SETTINGS}.items():
        raw = environ.get(env_name, "")
        if raw and raw.strip():
            values[key] = raw.strip()
    return values


def _as_int(values: Mapping[str, Any], key: str, default: Optional[int] = None,
            minimum: int = 0, maximum: Optional[int] = None) -> int:
    raw = values.get(key)
    if _is_blank(raw):
        if default is None:
            raise ConfigError(f"{key} is required")
        return default
    if isinstance(raw, bool):
        raise ConfigError(f"{key} must be an integer, got {raw!r}")
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise ConfigError(f"{key} must be {bounds}, got {value}")
    return value


def _parse_sort(raw: Any) -> Optional[SortSpec]:
    if raw is None:
        return None
    if not isinstance(raw, dict) or _is_blank(raw.get("field")):
        raise ConfigError("sort must be a mapping with a 'field' key")
    try:
        return SortSpec(field=str(raw["field"]), direction=str(raw.get("direction", "asc")))
    except ValueError as e:
        raise ConfigError(str(e)) from e


def _parse_timeout(raw: Any) -> Tuple[float, float]:
    if raw is None:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        if isinstance(raw, (list, tuple)):
            connect, read = raw
            timeout = (float(connect), float(read))
        else:
            timeout = (float(raw), float(raw))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"request_timeout must be a number or [connect, read], got {raw!r}") from e
    if min(timeout) <= 0:
        raise ConfigError(f"request_timeout values must be positive, got {raw!r}")
    return timeout


def _parse_log_level(raw: Any) -> int:
    if _is_blank(raw):
        return logging.INFO
    try:
        return parse_level(raw)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def _parse_linkage(raw: Any) -> LinkageStrategy:
    if _is_blank(raw):
        return LinkageStrategy.BACK_REFERENCE
    try:
        return LinkageStrategy(str(raw).strip().lower())
    except ValueError as e:
        choices = ", ".join(s.value for s in LinkageStrategy)
        raise ConfigError(f"linkage must be one of {choices}, got {raw!r}") from e


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> Settings:
    """
    Build Settings from the environment and the optional YAML file.

    Args:
        environ: Environment mapping. When None, .env is loaded and
            os.environ is used.
        config_path: YAML file to read instead of the default lookup.

    Returns:
        Settings: Fully validated settings

    Raises:
        ConfigError: If any required setting is missing or invalid
    """
    if environ is None:
        _load_dotenv()
        environ = os.environ

    if config_path is None and environ.get(CONFIG_PATH_ENV, "").strip():
        config_path = Path(environ[CONFIG_PATH_ENV].strip())

    values = _merge_values(environ, load_config_file(config_path))

    missing = [env_name for env_name, key in REQUIRED_SETTINGS.items() if _is_blank(values.get(key))]
    if missing:
        raise ConfigError(
            f"Missing required settings: {', '.join(missing)}. "
            "Copy .env.example to .env and fill them in."
        )

    newest_first_view = None if _is_blank(values.get("newest_first_view")) else str(values["newest_first_view"])
    sort = _parse_sort(values.get("sort"))
    if newest_first_view is None and sort is None:
        raise ConfigError(
            "The topic index needs an order: set TOPICBOARD_NEWEST_FIRST_VIEW "
            "(newest_first_view) or a sort field in the config file."
        )

    return Settings(
        base_id=str(values["base_id"]).strip(),
        topics_table=str(values["topics_table"]).strip(),
        viewpoints_table=str(values["viewpoints_table"]).strip(),
        api_key=str(values["api_key"]).strip(),
        revalidate_seconds=_as_int(values, "revalidate_seconds"),
        api_url=str(values.get("api_url") or DEFAULT_API_URL).rstrip("/"),
        newest_first_view=newest_first_view,
        sort=sort,
        topics_limit=_as_int(values, "topics_limit", DEFAULT_TOPICS_LIMIT, minimum=1),
        viewpoint_page_size=_as_int(values, "viewpoint_page_size", DEFAULT_VIEWPOINT_PAGE_SIZE,
                                    minimum=1, maximum=MAX_PAGE_SIZE),
        linkage=_parse_linkage(values.get("linkage")),
        back_reference_field=str(values.get("back_reference_field") or DEFAULT_BACK_REFERENCE_FIELD),
        viewpoint_link_field=str(values.get("viewpoint_link_field") or DEFAULT_VIEWPOINT_LINK_FIELD),
        request_timeout=_parse_timeout(values.get("request_timeout")),
        log_level=_parse_log_level(values.get("log_level")),
        log_file=None if _is_blank(values.get("log_file")) else str(values["log_file"]),
    )


def check_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> Dict[str, str]:
    """
    Check which required settings are configured.

    Returns:
        dict: Status of each required setting ("OK" or "MISSING")
    """
    if environ is None:
        _load_dotenv()
        environ = os.environ

    if config_path is None and environ.get(CONFIG_PATH_ENV, "").strip():
        config_path = Path(environ[CONFIG_PATH_ENV].strip())

    values = _merge_values(environ, load_config_file(config_path))
    status = {
        env_name: "MISSING" if _is_blank(values.get(key)) else "OK"
        for env_name, key in REQUIRED_SETTINGS.items()
    }
    has_order = not _is_blank(values.get("newest_first_view")) or values.get("sort") is not None
    status[ORDERING_SETTING] = "OK" if has_order else "MISSING"
    return status

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("dashboard_api.config.yaml")
DEFAULT_DEBUG_HEADER_PREFIX = "x-plausible"

ENV_BASE_URL = "DASHBOARD_API_BASE_URL"
ENV_SHARED_LINK_AUTH = "DASHBOARD_API_SHARED_LINK_AUTH"


class ClientConfig(BaseModel):
    """Runtime settings for a dashboard API client."""

    base_url: str = Field(default="", description="Prefix joined with relative request paths")
    shared_link_auth: Optional[str] = Field(default=None, description="Initial shared-link auth token")
    debug_header_prefix: str = Field(
        default=DEFAULT_DEBUG_HEADER_PREFIX,
        description="Lowercase prefix marking diagnostic response headers",
    )
    user_agent: str = Field(default="dashboard-api/0.1", description="User-Agent sent by the default transport")


def load_config_dict(path: Path | None = None) -> Dict[str, Any]:
    """
    Load the raw client configuration mapping from a YAML file.

    Args:
        path: Optional path to the config file. Defaults to dashboard_api.config.yaml

    Returns:
        Dictionary with client configuration (empty for an empty file)

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the document is not a mapping
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError("Client config must be a dictionary")
    return config


def apply_env_overrides(config: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Return a copy of ``config`` with environment overrides applied."""
    environ = os.environ if environ is None else environ
    merged = dict(config)
    if environ.get(ENV_BASE_URL):
        merged["base_url"] = environ[ENV_BASE_URL]
    if environ.get(ENV_SHARED_LINK_AUTH):
        merged["shared_link_auth"] = environ[ENV_SHARED_LINK_AUTH]
    return merged


def load_config(path: Path | None = None, *, environ: Optional[Dict[str, str]] = None) -> ClientConfig:
    """
    Load and validate client configuration.

    A missing file is an error only when ``path`` is given explicitly; the
    default location is optional and falls back to built-in defaults.
    """
    try:
        raw = load_config_dict(path)
    except FileNotFoundError:
        if path is not None:
            raise
        raw = {}
    return ClientConfig.model_validate(apply_env_overrides(raw, environ))

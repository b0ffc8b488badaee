"""Notary client configuration from YAML file and environment.

Loads from notarytool.yaml (or the path in NOTARYTOOL_CONFIG) under a
``notarytool:`` section. Environment variables ARE supported using
${VAR_NAME} and ${VAR_NAME:-default} syntax in the YAML file, and a .env
file in the working directory is loaded first.

Example:
    notarytool:
      key_id: ${NOTARY_KEY_ID}
      issuer_id: ${NOTARY_ISSUER_ID}
      private_key_file: ~/.keys/AuthKey_ABC123DEFG.p8
      token_lifetime_seconds: 900
      connect_timeout_seconds: 10
"""

import logging
import os
import re
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from notarytool.api.pipeline import (
    BASE_URL,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_READ_TIMEOUT_SECONDS,
    USER_AGENT,
)
from notarytool.auth.token_manager import DEFAULT_TOKEN_LIFETIME, MAX_TOKEN_LIFETIME

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("notarytool.yaml")
CONFIG_SECTION = "notarytool"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def get_config_value(env_var: str, yaml_value: Any, default: Any = "") -> Any:
    """Environment variable wins over YAML, YAML wins over default."""
    return os.getenv(env_var) or yaml_value or default


@dataclass
class NotaryConfig:
    """Settings for constructing a NotaryToolClient.

    Attributes:
        key_id: App Store Connect API key id (``kid``)
        issuer_id: App Store Connect issuer id (``iss``)
        private_key_file: Path to the ``.p8`` private key
        token_lifetime_seconds: Bearer token lifetime (max 1200)
        base_url: Notary API base URL
        connect_timeout_seconds: TCP connect timeout
        read_timeout_seconds: Socket read timeout
        user_agent: User-Agent header value
    """

    key_id: str = ""
    issuer_id: str = ""
    private_key_file: str = ""
    token_lifetime_seconds: int = int(DEFAULT_TOKEN_LIFETIME.total_seconds())
    base_url: str = BASE_URL
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS
    user_agent: str = USER_AGENT

    def __post_init__(self):
        """Ensure proper types from YAML/env vars."""
        self.key_id = str(self.key_id or "")
        self.issuer_id = str(self.issuer_id or "")
        self.private_key_file = str(self.private_key_file or "")
        self.token_lifetime_seconds = int(self.token_lifetime_seconds)
        self.connect_timeout_seconds = float(self.connect_timeout_seconds)
        self.read_timeout_seconds = float(self.read_timeout_seconds)

    @property
    def token_lifetime(self) -> timedelta:
        return timedelta(seconds=self.token_lifetime_seconds)

    @property
    def private_key_path(self) -> Path:
        return Path(self.private_key_file).expanduser()

    def validate(self) -> None:
        """Validate required settings and numeric ranges.

        Raises:
            ValueError: On the first invalid setting
        """
        for name in ("key_id", "issuer_id", "private_key_file"):
            if not getattr(self, name):
                raise ValueError(f"{name} is required in the {CONFIG_SECTION} section")

        max_lifetime = int(MAX_TOKEN_LIFETIME.total_seconds())
        if not 1 <= self.token_lifetime_seconds <= max_lifetime:
            raise ValueError(
                f"token_lifetime_seconds must be between 1 and {max_lifetime}, "
                f"got {self.token_lifetime_seconds}"
            )

        for name in ("connect_timeout_seconds", "read_timeout_seconds"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be > 0, got {value}")

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got '{self.base_url}'")


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    dotenv_path: Optional[Path] = None,
) -> NotaryConfig:
    """Load notary client configuration.

    Priority (highest to lowest):
        1. ``overrides``
        2. NOTARYTOOL_KEY_ID / NOTARYTOOL_ISSUER_ID / NOTARYTOOL_PRIVATE_KEY_FILE
        3. YAML file (with ${VAR} expansion)
        4. Dataclass defaults

    Raises:
        FileNotFoundError: If ``config_path`` is given and does not exist
        ValueError: If the resulting configuration is invalid
    """
    load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        config_path = Path(os.getenv("NOTARYTOOL_CONFIG") or DEFAULT_CONFIG_FILE)

    if config_path.exists():
        logger.info("Loading configuration from file: %s", config_path)
    yaml_data = _expand_env_vars(load_yaml(config_path))
    section = yaml_data.get(CONFIG_SECTION, {}) or {}
    if overrides:
        logger.debug("Applying overrides: %s", list(overrides.keys()))
        section = {**section, **overrides}

    config = NotaryConfig(
        key_id=get_config_value("NOTARYTOOL_KEY_ID", section.get("key_id")),
        issuer_id=get_config_value("NOTARYTOOL_ISSUER_ID", section.get("issuer_id")),
        private_key_file=get_config_value(
            "NOTARYTOOL_PRIVATE_KEY_FILE", section.get("private_key_file")
        ),
        token_lifetime_seconds=section.get(
            "token_lifetime_seconds", int(DEFAULT_TOKEN_LIFETIME.total_seconds())
        ),
        base_url=section.get("base_url") or BASE_URL,
        connect_timeout_seconds=section.get(
            "connect_timeout_seconds", DEFAULT_CONNECT_TIMEOUT_SECONDS
        ),
        read_timeout_seconds=section.get(
            "read_timeout_seconds", DEFAULT_READ_TIMEOUT_SECONDS
        ),
        user_agent=section.get("user_agent") or USER_AGENT,
    )
    if overrides:
        for key in ("key_id", "issuer_id", "private_key_file"):
            if overrides.get(key):
                setattr(config, key, str(overrides[key]))

    config.validate()
    logger.debug(
        "Configuration loaded",
        extra={"key_id": config.key_id, "private_key_file": config.private_key_file},
    )
    return config


_notary_config: Optional[NotaryConfig] = None


def get_config() -> NotaryConfig:
    """Get or load the singleton config instance."""
    global _notary_config
    if _notary_config is None:
        _notary_config = load_config()
    return _notary_config


def set_config(config: NotaryConfig) -> None:
    """Set the singleton config instance (useful for testing)."""
    global _notary_config
    _notary_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _notary_config
    _notary_config = None

"""Configuration loading for the notary client.

Main Functions
--------------

    - load_config(): Load configuration from YAML, .env and environment
    - get_config(): Get or load the singleton config instance
    - set_config(): Replace the singleton (useful for testing)
    - reset_config(): Reset the singleton config instance

Usage Examples
--------------

    >>> from notarytool.config import load_config
    >>> from notarytool import NotaryToolClient
    >>>
    >>> config = load_config(config_path=Path("notarytool.yaml"))
    >>> client, error = NotaryToolClient.from_config(config)
"""

from notarytool.config.config import (
    NotaryConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)

__all__ = [
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    "NotaryConfig",
]

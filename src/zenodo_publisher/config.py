# src/zenodo_publisher/config.py

import logging
import os
from typing import Any, Dict, Mapping, Optional

import toml

CONFIG_FILE_NAME = ".zenodo.toml"
TOKEN_ENV_VAR = "ZENODO_TOKEN"

log = logging.getLogger(__name__)


def load_config() -> Dict[str, Any]:
    """Loads configuration from a .zenodo.toml file in the current or home directory."""
    search_paths = [os.path.join(os.getcwd(), CONFIG_FILE_NAME), os.path.join(os.path.expanduser("~"), CONFIG_FILE_NAME)]
    for path in search_paths:
        if os.path.exists(path):
            log.info(f"--- Loading configuration from: {path} ---")
            try:
                with open(path, "r", encoding="utf-8") as f:
                    return toml.load(f)
            except (toml.TomlDecodeError, OSError) as e:
                log.warning(f"Warning: Could not parse config file at {path}. Error: {e}")
    return {}


def resolve_token(
    cli_token: Optional[str],
    sandbox: bool,
    config: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Picks the token: --token, then $ZENODO_TOKEN, then [tokens] in the config file."""
    if cli_token:
        return cli_token
    environ = os.environ if environ is None else environ
    if environ.get(TOKEN_ENV_VAR):
        return environ[TOKEN_ENV_VAR]
    env = "sandbox" if sandbox else "production"
    return config.get("tokens", {}).get(env) or None

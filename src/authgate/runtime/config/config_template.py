"""Load ``config.yaml``: environment placeholders first, then YAML, then validation."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.authgate.runtime.config.config_data import ConfigData
from src.authgate.runtime.settings import get_environment_variables

_PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}"
)


def substitute_env_vars(text: str) -> str:
    """
    Replace environment placeholders in ``text``.

    - ``${NAME}``: required, ValueError when unset
    - ``${NAME:-default}``: ``default`` when unset
    - ``${NAME:?message}``: required, ``message`` is added to the ValueError
    """

    def resolve(match: re.Match) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = os.getenv(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        if op == ":?":
            raise ValueError(f"Required environment variable {name}: {arg}")
        raise ValueError(f"Required environment variable {name} not set")

    return _PLACEHOLDER.sub(resolve, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Expose ``<ENV>_FOO`` variables as ``FOO`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    for name, value in list(os.environ.items()):
        if name.startswith(prefix) and name != "APP_ENVIRONMENT":
            target = name[len(prefix) :]
            os.environ[target] = value
            logger.debug(f"Set environment variable {target} from {name}")


def _drop_disabled_providers(config: ConfigData) -> None:
    for name in [n for n, p in config.oauth.providers.items() if not p.enabled]:
        logger.info(f"Skipping disabled OAuth2 provider '{name}'")
        del config.oauth.providers[name]
    if not config.oauth.providers:
        logger.warning("No OAuth2 providers are enabled; only local accounts will work")


def parse_config(content: str) -> ConfigData:
    """Substitute placeholders in raw YAML text and validate it as ConfigData."""
    try:
        document = yaml.safe_load(substitute_env_vars(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(document, dict):
        raise ValueError("Configuration must be a YAML mapping with a 'config' section")

    try:
        config = ConfigData.model_validate(document.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    _drop_disabled_providers(config)
    return config


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load the configuration file at ``file_path``.

    ``<ENV>_``-prefixed variables of the active environment are applied before the
    placeholders are resolved.

    Raises:
        ValueError: A required variable is missing or the content is invalid.
        FileNotFoundError: The file does not exist.
    """
    content = Path(file_path).read_text()

    env_mode = get_environment_variables().environment
    logger.info(f"Loading configuration for environment: {env_mode}")
    apply_environment_overrides(env_mode)

    return parse_config(content)

"""Settings for ScholarSync, read from the environment or a .env file."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
	BACKEND_REMOTE,
	BACKENDS,
	CONF_API_KEY,
	CONF_API_URL,
	CONF_BACKEND,
	CONF_LATENCY_SCALE,
	CONF_LOG_LEVEL,
	DEFAULT_BACKEND,
	DEFAULT_LATENCY_SCALE,
	DEFAULT_LOG_LEVEL,
	ENV_PREFIX,
	LOG_LEVELS,
)
from .exceptions import ScholarSyncConfigError

_LOGGER = logging.getLogger(__name__)


def _require_api_url(config: Dict[str, Any]) -> Dict[str, Any]:
	"""The remote backend cannot work without somewhere to send requests."""
	if config[CONF_BACKEND] == BACKEND_REMOTE and not config.get(CONF_API_URL):
		raise vol.Invalid(f"{CONF_API_URL} is required for the {BACKEND_REMOTE} backend")
	return config


CONFIG_SCHEMA = vol.Schema(
	{
		vol.Optional(CONF_BACKEND, default=DEFAULT_BACKEND): vol.All(str, vol.Lower, vol.In(BACKENDS)),
		vol.Optional(CONF_API_URL): vol.All(str, vol.Strip, vol.Url()),
		vol.Optional(CONF_API_KEY): str,
		vol.Optional(CONF_LATENCY_SCALE, default=DEFAULT_LATENCY_SCALE): vol.All(
			vol.Coerce(float), vol.Range(min=0)
		),
		vol.Optional(CONF_LOG_LEVEL, default=DEFAULT_LOG_LEVEL): vol.All(str, vol.Upper, vol.In(LOG_LEVELS)),
	},
	extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class Settings:
	"""Validated runtime settings."""
	backend: str = DEFAULT_BACKEND
	api_url: Optional[str] = None
	api_key: Optional[str] = None
	latency_scale: float = DEFAULT_LATENCY_SCALE
	log_level: str = DEFAULT_LOG_LEVEL


def _read_environment() -> Dict[str, Any]:
	"""Collect SCHOLARSYNC_* variables as config keys."""
	config = {}
	for key in (CONF_BACKEND, CONF_API_URL, CONF_API_KEY, CONF_LATENCY_SCALE, CONF_LOG_LEVEL):
		value = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
		if value not in (None, ""):
			config[key] = value
	return config


def validate_config(config: Dict[str, Any]) -> Settings:
	"""Validate a raw config mapping and build Settings from it.

	Raises:
		ScholarSyncConfigError: if any value is invalid
	"""
	try:
		validated = _require_api_url(CONFIG_SCHEMA(dict(config)))
	except vol.Invalid as err:
		raise ScholarSyncConfigError(f"Invalid configuration: {err}") from err
	return Settings(**validated)


def load_settings(env_file: Optional[str] = None, **overrides: Any) -> Settings:
	"""Load settings from a .env file, the environment and explicit overrides.

	Args:
		env_file: Optional path of a .env file. Without it python-dotenv looks
			for one from the current directory upwards.
		overrides: Config keys that win over the environment

	Returns:
		Validated Settings
	"""
	if env_file:
		loaded = load_dotenv(env_file)
		if not loaded:
			_LOGGER.warning(f"No settings found in env file {env_file}")
	else:
		load_dotenv()

	config = _read_environment()
	config.update({key: value for key, value in overrides.items() if value is not None})
	settings = validate_config(config)
	_LOGGER.debug(f"Loaded settings: backend={settings.backend}, latency_scale={settings.latency_scale}")
	return settings


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
	"""Configure root logging for scripts; libraries only use _LOGGER."""
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)

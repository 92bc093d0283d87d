# (c) Copyright Datacraft, 2026
"""Logging setup from a YAML dict-config."""
import logging
from logging.config import dictConfig
from pathlib import Path

import yaml

from trustdoc.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
	return logging.getLogger(name)


def setup_logging(config_path: Path | None = None, settings: Settings | None = None) -> None:
	"""Configure logging from ``config_path`` or the log file in ``settings``.

	Falls back to ``basicConfig`` when no config file is available.
	"""
	if config_path is None:
		config_path = (settings or get_settings()).log_config

	if config_path is not None and config_path.exists():
		with open(config_path, "r") as f:
			dictConfig(yaml.safe_load(f))
		logger.debug(f"Logging configured from {config_path}")
		return

	logging.basicConfig(level=logging.INFO, format=DEFAULT_FORMAT)
	logger.debug("Logging config file not found, using basic config")

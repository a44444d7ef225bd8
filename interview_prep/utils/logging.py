import logging
import sys
from typing import Dict, Optional


def parse_level_overrides(spec: Optional[str]) -> Dict[str, str]:
	"""Parse ``"interview_prep.utils.json_extract=DEBUG,groq=WARNING"`` into a mapping."""
	overrides: Dict[str, str] = {}
	for item in (spec or "").split(","):
		name, sep, level = item.partition("=")
		if sep and name.strip() and level.strip():
			overrides[name.strip()] = level.strip().upper()
	return overrides


def configure_logging(level: str = "INFO", overrides: Optional[str] = None) -> None:
	# Per-logger levels apply even when a host (uvicorn, pytest) already owns the root handler
	for name, logger_level in parse_level_overrides(overrides).items():
		logging.getLogger(name).setLevel(logger_level)

	root_logger = logging.getLogger()
	if root_logger.handlers:
		return

	handler = logging.StreamHandler(sys.stdout)
	handler.setFormatter(logging.Formatter(
		"%(asctime)s | %(levelname)s | %(name)s | %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	))
	root_logger.addHandler(handler)
	root_logger.setLevel(level.upper())

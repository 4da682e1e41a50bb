"""Load suite configuration from YAML files."""

import asyncio
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from suite_orchestrator.models.config import SuiteConfiguration

log = logging.getLogger(__name__)


async def load_suite_configuration(path: Path) -> SuiteConfiguration:
    """Load and validate a suite configuration file.

    Args:
        path: Path to a YAML mapping of ``SuiteConfiguration`` fields

    Returns:
        Validated configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty, not valid YAML, or does not match
            the configuration schema

    """
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    content = await asyncio.to_thread(path.read_text, encoding="utf-8")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty configuration file: {path}")

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid configuration schema in {path}: expected a mapping, "
            f"got {type(data).__name__}"
        )

    try:
        config = SuiteConfiguration.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration schema in {path}: {e}") from e

    log.debug("Loaded suite configuration from %s", path)
    return config

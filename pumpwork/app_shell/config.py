import logging
import os
from pathlib import Path

from pumpwork.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Operational requirements are not met; the app must not start."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.

    Creates the data directory when it is missing and required.
    """
    ops = rules.ops

    if ops.data_dir_required:
        data_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(data_dir, os.W_OK):
            raise ConfigurationError(f"Data directory {data_dir} is not writable")

    missing = [name for name in ops.required_env if name not in os.environ]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    logger.info("Configuration validated (rules %s)", rules.project.rules_version)

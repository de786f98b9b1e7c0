from pathlib import Path

import yaml
from pydantic import ValidationError

from pumpwork.rules.models import Rules

DEFAULT_RULES_PATH = Path(__file__).resolve().parents[2] / "rules.yaml"


def load_rules(path: Path | None = None) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or schema is invalid.
    """
    path = path or DEFAULT_RULES_PATH
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Rules file must contain a mapping at the top level")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e

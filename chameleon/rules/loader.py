from pathlib import Path

import yaml
from pydantic import ValidationError

from chameleon.core.errors import RulesError
from chameleon.rules.models import Rules


def load_rules(path: Path) -> Rules:
    """
    Load and validate the routing rules file.
    Raises FileNotFoundError if file missing.
    Raises RulesError (a ValueError) if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise RulesError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise RulesError(f"Rules file {path} must contain a YAML mapping")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise RulesError(f"Rules validation failed:\n{e}") from e

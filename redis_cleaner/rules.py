"""
Cleanup Rules

Rules are loaded once from a YAML file and are read-only for the lifetime of
a run. The YAML keys follow the camelCase convention of existing rule files:

    - name: sessions
      pattern: "session:*"
      ttlSeconds: 3600
      batch: 100
"""

from pathlib import Path
from typing import Any, List, Union

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError


class RuleError(ValueError):
    """Rule file could not be read or contains invalid rules."""


class Rule(BaseModel):
    """A named pattern whose persistent keys get a TTL."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Human-readable rule name")
    pattern: str = Field(..., min_length=1, description="Glob-style key pattern")
    ttl_seconds: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("ttlSeconds", "ttl_seconds"),
        description="TTL to assign to persistent keys",
    )
    batch_size: int = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("batch", "batchSize", "batch_size"),
        description="SCAN COUNT hint",
    )


def parse_rules(data: Any) -> List[Rule]:
    """
    Validate a decoded rule document.

    Args:
        data: The YAML document, expected to be a list of mappings

    Returns:
        Rules in document order

    Raises:
        RuleError: If the document is not a list, an entry is invalid,
                   or two rules share a name
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise RuleError(f"Rule file must contain a list, got {type(data).__name__}")

    rules = []
    seen = set()
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise RuleError(f"Rule #{index + 1} must be a mapping")
        try:
            rule = Rule.model_validate(entry)
        except ValidationError as e:
            label = entry.get("name") or f"#{index + 1}"
            raise RuleError(f"Invalid rule {label}: {e}") from e
        if rule.name in seen:
            raise RuleError(f"Duplicate rule name: {rule.name}")
        seen.add(rule.name)
        rules.append(rule)

    return rules


def load_rules(path: Union[str, Path]) -> List[Rule]:
    """Read and validate the YAML rule file at `path`."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise RuleError(f"Cannot read rule file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RuleError(f"Invalid YAML in {path}: {e}") from e

    return parse_rules(data)

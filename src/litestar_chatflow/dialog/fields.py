"""Helpers for tracking collected information.

Field names in templates rarely match the keys the LLM chooses exactly
(``companyName`` versus ``company.name``), so field tracking compares compact,
lower-cased paths of the flattened information instead of exact keys.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from litestar_chatflow.core.definition import StepConfig

__all__ = [
    "ESSENTIAL_WEIGHT",
    "IMPORTANT_WEIGHT",
    "OPTIONAL_WEIGHT",
    "SENSITIVE_KEYS",
    "completion_percentage",
    "field_status",
    "flatten",
    "is_filled",
    "merge_information",
    "missing_fields",
    "sanitize",
]

ESSENTIAL_WEIGHT = 0.7
IMPORTANT_WEIGHT = 0.2
OPTIONAL_WEIGHT = 0.1

SENSITIVE_KEYS = frozenset(
    {
        "searchResults",
        "authorResults",
        "articles",
        "articleData",
        "metabaseResults",
        "databaseResults",
        "newsData",
    }
)
"""Keys stripped from collected information before it is shown to the LLM."""

_COMPACT = re.compile(r"[^a-z0-9]")


def _compact(value: str) -> str:
    return _COMPACT.sub("", value.casefold())


def is_filled(value: Any) -> bool:
    """Whether a collected value counts as provided."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return bool(value)
    return True


def flatten(info: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys.

    Example:
        >>> flatten({"company": {"name": "Acme"}, "tags": ["a"]})
        {'company.name': 'Acme', 'tags': ['a']}
    """
    flat: dict[str, Any] = {}
    for key, value in info.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict) and value:
            flat.update(flatten(value, path))
        else:
            flat[path] = value
    return flat


def _matches(field: str, path: str) -> bool:
    wanted = _compact(field)
    leaf = _compact(path.rsplit(".", 1)[-1])
    full = _compact(path)
    if not wanted:
        return False
    return wanted in (leaf, full) or wanted in full or (len(full) >= 4 and full in wanted)


def field_status(fields: Iterable[str], info: Mapping[str, Any]) -> dict[str, bool]:
    """Map each tracked field to whether the collected information provides it."""
    filled_paths = [path for path, value in flatten(info).items() if is_filled(value)]
    return {field: any(_matches(field, path) for path in filled_paths) for field in fields}


def missing_fields(config: StepConfig, info: Mapping[str, Any]) -> list[str]:
    """Tracked fields not yet provided, essential fields first."""
    status = field_status(config.required_fields, info)
    return [field for field in config.required_fields if not status[field]]


def completion_percentage(config: StepConfig, info: Mapping[str, Any]) -> int:
    """Weighted completion of the tracked fields of a step.

    Essential, important and optional fields contribute 70, 20 and 10 percent.
    Empty categories are left out and the remaining weights are rescaled.

    Args:
        config: The step configuration naming the tracked fields.
        info: The collected information.

    Returns:
        Completion from 0 to 100.
    """
    categories = (
        (config.essential, ESSENTIAL_WEIGHT),
        (config.important, IMPORTANT_WEIGHT),
        (config.optional, OPTIONAL_WEIGHT),
    )
    total_weight = 0.0
    score = 0.0
    for fields, weight in categories:
        if not fields:
            continue
        status = field_status(fields, info)
        total_weight += weight
        score += weight * sum(status.values()) / len(fields)

    if total_weight == 0:
        return 100 if any(is_filled(v) for v in flatten(info).values()) else 0
    return round(100 * score / total_weight)


def sanitize(info: Any) -> Any:
    """Recursively drop :data:`SENSITIVE_KEYS` from collected information."""
    if isinstance(info, dict):
        return {key: sanitize(value) for key, value in info.items() if key not in SENSITIVE_KEYS}
    if isinstance(info, list):
        return [sanitize(item) for item in info]
    return info


def merge_information(prior: Mapping[str, Any], new: Mapping[str, Any]) -> dict[str, Any]:
    """Merge newly collected information over prior information.

    Nested mappings are merged key by key and an empty value (``None``, ``""``,
    ``[]``, ``{}``) never erases a provided one, so the result always keeps every
    previously collected field.

    Example:
        >>> merge_information({"a": 1, "b": {"x": 1}}, {"a": None, "b": {"y": 2}})
        {'a': 1, 'b': {'x': 1, 'y': 2}}
    """
    merged: dict[str, Any] = dict(prior)
    for key, value in new.items():
        existing = merged.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            merged[key] = merge_information(existing, value)
        elif not is_filled(value) and is_filled(existing):
            continue
        else:
            merged[key] = value
    return merged

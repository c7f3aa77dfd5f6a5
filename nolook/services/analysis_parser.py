"""Typed parsing of the analysis service reply."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from nolook.models.note import COLUMN_FIELDS

logger = logging.getLogger(__name__)

Scalar = str | int | float | bool | None

# Expected types of the catalogued extracted fields. Fields outside this
# table accept any scalar.
FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "painIntensity": (int,),
    "screenType": (str,),
    "activityDurationMinutes": (int, float),
}

# Document keys the analysis reply may not write
RESERVED_KEYS = {"id", "ownerId", *COLUMN_FIELDS}


@dataclass(frozen=True)
class ParsedAnalysis:
    """A validated analysis: category from the closed set, non-empty summary."""

    category: str
    summary: str
    fields: dict[str, Scalar] = field(default_factory=dict)

    def to_update(self) -> dict[str, Any]:
        """Ledger fields written when the note completes."""
        return {"category": self.category, "summary": self.summary, **self.fields}


@dataclass(frozen=True)
class Unparseable:
    """An analysis reply that cannot be used."""

    reason: str
    raw: str = ""


def _strip_code_fence(content: str) -> str:
    # Some models wrap the JSON in markdown code blocks
    if "```json" in content:
        return content.split("```json", 1)[1].split("```", 1)[0].strip()
    if content.count("```") >= 2:
        return content.split("```", 2)[1].strip()
    return content.strip()


def _coerce(name: str, value: Any) -> tuple[bool, Scalar]:
    """Check a catalogued field's type. Returns (ok, value)."""
    if value is None:
        return True, None
    expected = FIELD_TYPES.get(name)
    # bool is an int subclass, but never a valid number here
    if isinstance(value, bool) and expected and bool not in expected:
        return False, None
    if expected == (int,) and isinstance(value, float) and value.is_integer():
        return True, int(value)
    if expected is None:
        return isinstance(value, (str, int, float, bool)), value
    return isinstance(value, expected), value


def parse_analysis(
    content: str, categories: Mapping[str, list[str]]
) -> ParsedAnalysis | Unparseable:
    """
    Parse and validate an analysis reply.

    Every catalogued field is present in the result; fields the resolved
    category does not support are forced to None. Extra scalar keys are
    kept, extra non-scalar keys are dropped.

    Args:
        content: Raw reply text from the analysis service
        categories: Closed category set mapped to the fields each supports

    Returns:
        ParsedAnalysis when usable, Unparseable with a reason otherwise
    """
    try:
        payload = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as e:
        return Unparseable(f"Analysis reply is not valid JSON: {e}", content)

    if not isinstance(payload, dict):
        return Unparseable("Analysis reply is not a JSON object", content)

    category = payload.get("category")
    summary = payload.get("summary")
    if not isinstance(category, str) or not category.strip():
        return Unparseable("Analysis reply is missing 'category'", content)
    if not isinstance(summary, str) or not summary.strip():
        return Unparseable("Analysis reply is missing 'summary'", content)

    category = category.strip().lower()
    if category not in categories:
        allowed = ", ".join(categories)
        return Unparseable(f"Unknown category '{category}' (expected one of: {allowed})", content)

    supported = set(categories[category])
    catalogued = {name for names in categories.values() for name in names}

    fields: dict[str, Scalar] = {}
    for name in sorted(catalogued):
        if name not in supported:
            fields[name] = None
            continue
        ok, value = _coerce(name, payload.get(name))
        if not ok:
            return Unparseable(
                f"Field '{name}' has unexpected type {type(payload.get(name)).__name__}",
                content,
            )
        fields[name] = value

    for name, value in payload.items():
        if name in catalogued or name in ("category", "summary"):
            continue
        if name in RESERVED_KEYS:
            logger.warning(f"Ignoring reserved analysis field '{name}'")
            continue
        if value is None or isinstance(value, (str, int, float, bool)):
            fields[name] = value
        else:
            logger.warning(f"Dropping non-scalar analysis field '{name}'")

    return ParsedAnalysis(category=category, summary=summary.strip(), fields=fields)

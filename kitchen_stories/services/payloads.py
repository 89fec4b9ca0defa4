"""Parsing of the JSON-encoded child arrays carried in multipart forms.

Lenient mode mirrors what browsers have always been able to send: anything
that does not decode is logged and treated as an empty list, and entries
with the wrong shape are skipped. Strict mode validates with pydantic and
raises ``ChildPayloadInvalid`` so the request fails before any write.
"""

import json
import logging
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from ..errors import ChildPayloadInvalid
from ..schemas import IngredientGroupIn

logger = logging.getLogger("kitchen_stories.payloads")

_groups_adapter = TypeAdapter(list[IngredientGroupIn])
_steps_adapter = TypeAdapter(list[str])


def _decode(raw: Optional[str], field: str, strict: bool) -> Any:
    if raw is None or raw == "":
        return []
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        if strict:
            raise ChildPayloadInvalid(field, f"{field} must be a JSON array: {e}")
        logger.error(f"Error parsing {field}: {e}")
        return []


def parse_ingredient_groups(raw: Optional[str], strict: bool = False) -> list[IngredientGroupIn]:
    data = _decode(raw, "ingredients", strict)

    if strict:
        try:
            return _groups_adapter.validate_python(data)
        except ValidationError as e:
            raise ChildPayloadInvalid("ingredients", str(e))

    if not isinstance(data, list):
        logger.error(f"Error parsing ingredients: expected a list, got {type(data).__name__}")
        return []

    groups: list[IngredientGroupIn] = []
    for entry in data:
        if not isinstance(entry, dict) or not isinstance(entry.get("items"), list):
            logger.warning(f"Skipping ingredient group without items: {entry!r}")
            continue
        label = entry.get("group")
        items = [item for item in entry["items"] if isinstance(item, str)]
        if len(items) != len(entry["items"]):
            logger.warning(f"Dropped {len(entry['items']) - len(items)} non-text ingredient(s)")
        groups.append(IngredientGroupIn(group=label if isinstance(label, str) else "", items=items))
    return groups


def parse_instructions(raw: Optional[str], strict: bool = False) -> list[str]:
    data = _decode(raw, "instructions", strict)

    if strict:
        try:
            return _steps_adapter.validate_python(data)
        except ValidationError as e:
            raise ChildPayloadInvalid("instructions", str(e))

    if not isinstance(data, list):
        logger.error(f"Error parsing instructions: expected a list, got {type(data).__name__}")
        return []

    steps = [step for step in data if isinstance(step, str)]
    if len(steps) != len(data):
        logger.warning(f"Dropped {len(data) - len(steps)} non-text instruction(s)")
    return steps

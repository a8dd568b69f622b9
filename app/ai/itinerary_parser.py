from __future__ import annotations

import json
import logging
import re
from typing import List

from pydantic import ValidationError as PydanticValidationError

from app.api.models.schemas import GeneratedItinerary
from app.core.errors import InvalidResponseFormatError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


def strip_code_fences(content: str) -> str:
    """Remove every ``` / ```json marker the model may have wrapped its JSON in."""
    return _CODE_FENCE.sub("", content).strip()


def _failed_fields(exc: PydanticValidationError) -> List[str]:
    fields: List[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ()))
        fields.append(path or "<root>")
    return fields


def parse_itinerary(content: str) -> GeneratedItinerary:
    cleaned = strip_code_fences(content)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse AI response: %s", content)
        raise InvalidResponseFormatError() from exc

    try:
        return GeneratedItinerary.model_validate(payload)
    except PydanticValidationError as exc:
        fields = _failed_fields(exc)
        logger.error("AI response failed schema validation on %s: %s", fields, content)
        raise InvalidResponseFormatError({"fields": fields}) from exc

"""Turn raw model text into validated classification results.

The gate is all-or-nothing: one malformed entry rejects the whole batch.
"""
import json
import re
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from expense_categorizer.core.errors import ValidationError
from expense_categorizer.logger import get_logger
from expense_categorizer.models import ClassificationResult, RetryClassificationResult, RunKind

logger = get_logger(__name__)

_LEADING_FENCE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*")
_TRAILING_FENCE = re.compile(r"\s*```\s*$")

_FRESH_ADAPTER = TypeAdapter(list[ClassificationResult])
_RETRY_ADAPTER = TypeAdapter(list[RetryClassificationResult])


def strip_code_fences(text: str) -> str:
    cleaned = _LEADING_FENCE.sub("", text.strip(), count=1)
    return _TRAILING_FENCE.sub("", cleaned, count=1).strip()


def extract_array_span(text: str) -> Any | None:
    """Decode the first ``[...]`` span in ``text`` that is valid JSON.

    Arrays of objects win over other arrays, so a stray ``[1]`` in leading
    commentary does not shadow the real payload.
    """
    decoder = json.JSONDecoder()
    first_list: list[Any] | None = None
    for match in re.finditer(r"\[", text):
        try:
            value, _ = decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        if not isinstance(value, list):
            continue
        if value and all(isinstance(item, dict) for item in value):
            return value
        if first_list is None:
            first_list = value
    return first_list


def _unwrap(parsed: Any) -> Any:
    if isinstance(parsed, dict):
        # Older prompts asked for {"results": [...]}
        return parsed.get("results")
    return parsed


def _decode(raw_text: str) -> Any:
    cleaned = strip_code_fences(raw_text)
    try:
        return _unwrap(json.loads(cleaned))
    except json.JSONDecodeError:
        logger.debug("[VALIDATE] Direct parse failed; searching for an embedded array.")
    extracted = extract_array_span(cleaned)
    if extracted is None:
        raise ValidationError("No JSON array found in model response", raw_text)
    return extracted


def _summarize(exc: SchemaError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{exc.error_count()} invalid field(s); first at {location or '<root>'}: {first.get('msg')}"


def parse_results(raw_text: str, kind: RunKind) -> list[ClassificationResult]:
    results_data = _decode(raw_text)
    if not isinstance(results_data, list):
        logger.error("[VALIDATE] Expected a JSON array, got %s.", type(results_data).__name__)
        raise ValidationError("Model response is not a JSON array", raw_text)

    adapter = _RETRY_ADAPTER if kind is RunKind.RETRY_REVIEW else _FRESH_ADAPTER
    try:
        results = adapter.validate_python(results_data)
    except SchemaError as exc:
        summary = _summarize(exc)
        logger.error("[VALIDATE] Rejected model response: %s", summary)
        logger.debug("[VALIDATE] Raw response: %s", raw_text)
        raise ValidationError(f"Model response failed validation: {summary}", raw_text) from exc

    logger.info("[VALIDATE] Parsed %d result(s).", len(results))
    return list(results)

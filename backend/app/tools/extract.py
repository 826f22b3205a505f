# backend/app/tools/extract.py
"""
Turn a Gemini generateContent envelope into a PriceResult.

The model is asked for a bare JSON object but routinely wraps it in ```json
fences or adds a sentence before/after, so the payload is recovered by slicing
rather than parsed directly.
"""
import json
from typing import Any, Dict, Optional

from pydantic import ValidationError

from app.errors import ParseFailure
from app.schemas import PriceResult

INVALID_STRUCTURE = "invalid response structure"
NO_JSON_OBJECT = "no JSON object found"
MALFORMED_JSON = "malformed JSON"
SCHEMA_MISMATCH = "schema mismatch"


def extract_candidate_text(envelope: Any) -> str:
    """Concatenated text parts of the first candidate."""
    if not isinstance(envelope, dict):
        raise ParseFailure(INVALID_STRUCTURE)
    candidates = envelope.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise ParseFailure(INVALID_STRUCTURE)

    first = candidates[0] if isinstance(candidates[0], dict) else {}
    content = first.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise ParseFailure(INVALID_STRUCTURE)

    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    text = "".join(texts)
    if not text.strip():
        raise ParseFailure(INVALID_STRUCTURE)
    return text


def recover_json_slice(text: str) -> Optional[str]:
    """
    Best-effort JSON slice recovery: first '{' through last '}' inclusive.

    None when there is no '{' or every '}' comes before it. A '{' that is never
    closed yields the tail from '{' so the caller reports it as malformed.
    """
    if not text:
        return None
    start = text.find("{")
    if start == -1:
        return None
    end = text.rfind("}")
    if end == -1:
        # unclosed object such as "{invalid json" is malformed, not absent
        return text[start:]
    if end < start:
        return None
    return text[start:end + 1]


def _decode(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, RecursionError):
        pass
    # several objects or a stray '}' in trailing prose: take the first complete object
    obj, _ = json.JSONDecoder().raw_decode(candidate)
    return obj


def parse_price_payload(text: str) -> PriceResult:
    candidate = recover_json_slice(text)
    if candidate is None:
        raise ParseFailure(NO_JSON_OBJECT, raw_text=text)

    try:
        data = _decode(candidate)
    except (json.JSONDecodeError, RecursionError):
        raise ParseFailure(MALFORMED_JSON, raw_text=text)

    if not isinstance(data, dict):
        raise ParseFailure(SCHEMA_MISMATCH, raw_text=text)
    try:
        return PriceResult.model_validate(data)
    except ValidationError:
        raise ParseFailure(SCHEMA_MISMATCH, raw_text=text)


def extract_price(envelope: Dict[str, Any]) -> PriceResult:
    return parse_price_payload(extract_candidate_text(envelope))

"""
services/normalizer.py
──────────────────────────────────────────────────────────────────────────────
Turns raw backend text into an ordered list of variants.

Backends are asked for a JSON array of strings but do not always comply:
some wrap the array in markdown fences, some return an object, some return
prose.  Decoding therefore has two named outcomes:

  Structured(items): the cleaned text is a JSON array; items kept in order
  Raw(text)        : anything else; the text becomes a single variant

  cleaned text is a non-array JSON value → Raw(cleaned text)
  cleaned text does not parse            → Raw(original text, fences intact)

Decoding never raises.  Deciding whether an empty Structured([]) is an error
is left to the adapters.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Union

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?")
_NOT_JSON = object()


@dataclass(frozen=True)
class Structured:
    """The reply decoded to a JSON array."""

    items: tuple[str, ...]

    @property
    def variants(self) -> list[str]:
        return list(self.items)


@dataclass(frozen=True)
class Raw:
    """The reply could not be used as an array; kept as one variant."""

    text: str

    @property
    def variants(self) -> list[str]:
        return [self.text]


DecodeOutcome = Union[Structured, Raw]


def strip_fences(raw: str) -> str:
    """Remove ```json / ``` markers and surrounding whitespace."""
    return _FENCE_RE.sub("", raw).strip()


def decode(raw: str) -> DecodeOutcome:
    """Classify raw backend text as Structured or Raw."""
    cleaned = strip_fences(raw)
    parsed = _parse_json(cleaned)

    if parsed is _NOT_JSON:
        logger.warning("Reply is not JSON, returning raw text: %.120s", raw)
        return Raw(raw)
    if not isinstance(parsed, list):
        logger.warning(
            "Reply is JSON %s, not an array, returning cleaned text",
            type(parsed).__name__,
        )
        return Raw(cleaned)
    return Structured(tuple(_as_text(item) for item in parsed))


def normalize(raw: str) -> list[str]:
    """Ordered variants for ``raw``; never raises."""
    return decode(raw).variants


# ── Private helpers ────────────────────────────────────────────────────────

def _parse_json(text: str) -> object:
    try:
        return json.loads(text)
    except (ValueError, RecursionError, TypeError):
        return _NOT_JSON


def _as_text(item: object) -> str:
    if isinstance(item, str):
        return item
    return json.dumps(item, ensure_ascii=False)

"""Strict decoding of free-text extraction output into an :class:`Extraction`."""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from src.extraction.models import Extraction, ExtractionResult
from src.pipeline_config import ExtractionOutcome

logger = logging.getLogger(__name__)

# Models often wrap JSON in markdown fences (```json ... ``` or bare ```).
_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

_PREVIEW_CHARS = 200


def strip_fences(raw: str) -> str:
    """Remove markdown code fences and surrounding whitespace."""
    return _FENCE_RE.sub("", raw).strip()


def decode_extraction(raw: str | None) -> ExtractionResult:
    """Decode model output against the extraction schema.

    Never raises: anything that is not a JSON object matching
    :class:`Extraction` yields the empty extraction tagged ``fallback``.

    Args:
        raw: The model's text response (may be ``None`` or empty).

    Returns:
        An :class:`ExtractionResult`.
    """
    cleaned = strip_fences(raw or "")
    try:
        extraction = Extraction.model_validate_json(cleaned)
    except ValidationError as exc:
        logger.warning(
            "Extraction output did not match schema (%d errors); using empty extraction. "
            "Output preview: %r",
            exc.error_count(),
            cleaned[:_PREVIEW_CHARS],
        )
        return ExtractionResult(
            outcome=ExtractionOutcome.FALLBACK,
            extraction=Extraction.empty(),
            error=str(exc),
        )

    return ExtractionResult(outcome=ExtractionOutcome.PARSED, extraction=extraction)

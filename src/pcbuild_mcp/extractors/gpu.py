"""Graphics card spec extraction: board length and recommended PSU."""

import re

from ..config import GPU_LENGTH_RANGE, GPU_PSU_MAX_WATTS, GPU_PSU_MIN_WATTS
from ..models import Listing, Spec
from ..patterns import extract_first_int
from .attributes import find_number

# Specific phrasings, most reliable first
_LENGTH_PATTERNS = (
    re.compile(r"(?:longitud|length|largo|lenght)[:\s]*(\d{2,3})\s*mm", re.IGNORECASE),
    re.compile(r"(\d{2,3})\s*mm\s*(?:de\s*)?(?:longitud|length|largo)", re.IGNORECASE),
    re.compile(r"(?:dimensiones|dimensions)[:\s]*(\d{2,3})\s*x\s*\d+\s*x\s*\d+\s*mm", re.IGNORECASE),
)
_LENGTH_ATTRIBUTE = re.compile(r"longitud|length|largo|dimensi[oó]n", re.IGNORECASE)
_MM_VALUE = re.compile(r"(\d{2,3})\s*mm", re.IGNORECASE)
_DIMENSION_TRIPLE = re.compile(r"(\d{2,3})\s*x\s*\d+\s*x\s*\d+", re.IGNORECASE)
_ANY_MM = re.compile(r"\b(\d{2,3})\s*mm", re.IGNORECASE)

_PSU_PATTERNS = (
    re.compile(
        r"(?:fuente|PSU|power\s+supply)\s*(?:recomendada?|m[ií]nima?|recommended|minimum|required)"
        r"[:\s]*(\d{3,4})\s*W",
        re.IGNORECASE,
    ),
    re.compile(r"(?:recomendada?|m[ií]nima?|recommended|minimum|required)[:\s]*(\d{3,4})\s*W", re.IGNORECASE),
    re.compile(
        r"(\d{3,4})\s*W\s*(?:fuente|PSU|power\s+supply)?\s*(?:recomendada?|m[ií]nima?|recommended|minimum|required)",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?:requiere|requires?|necesita|needs?)\s*(?:fuente|PSU|power\s+supply)?\s*(?:de|of)?\s*(\d{3,4})\s*W",
        re.IGNORECASE,
    ),
)
_PSU_ATTRIBUTE = re.compile(r"fuente|PSU|power|potencia|alimentaci[oó]n", re.IGNORECASE)
_WATTS_VALUE = re.compile(r"(\d{3,4})\s*W", re.IGNORECASE)


def extract_gpu_length(listing: Listing) -> int | None:
    """Board length in mm.

    Labelled text, then attribute tables, then the largest plausible mm
    number anywhere in the text as a last resort.
    """
    text = listing.text
    length = extract_first_int(text, _LENGTH_PATTERNS)
    if length is not None:
        return length

    low, high = GPU_LENGTH_RANGE
    for value_pattern in (_MM_VALUE, _DIMENSION_TRIPLE):
        length = find_number(listing, _LENGTH_ATTRIBUTE, value_pattern, low, high, match_name_only=True)
        if length is not None:
            return length

    candidates = [int(m) for m in _ANY_MM.findall(text) if low <= int(m) <= high]
    return max(candidates) if candidates else None


def extract_recommended_psu(listing: Listing) -> int | None:
    bounds = (GPU_PSU_MIN_WATTS, GPU_PSU_MAX_WATTS)
    watts = extract_first_int(listing.text, _PSU_PATTERNS, bounds)
    if watts is not None:
        return watts
    return find_number(listing, _PSU_ATTRIBUTE, _WATTS_VALUE, *bounds, match_name_only=True)


def extract_gpu(listing: Listing) -> Spec:
    return Spec(
        gpu_length=extract_gpu_length(listing),
        gpu_recommended_psu=extract_recommended_psu(listing),
    )

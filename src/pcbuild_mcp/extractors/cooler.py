"""CPU cooler spec extraction."""

import re

from ..models import Listing, Spec
from ..patterns import SOCKET_PATTERNS, extract_first_int, extract_number, extract_patterns
from .attributes import attribute_text

_LABELLED_HEIGHT = re.compile(r"(?:altura|height|alto)[:\s]*(\d{2,3}(?:[.,]\d+)?)\s*mm", re.IGNORECASE)
_ANY_HEIGHT = re.compile(r"(\d{2,3}(?:[.,]\d+)?)\s*mm", re.IGNORECASE)

_AIO_KEYWORDS = (
    re.compile(r"\b(?:AIO|all.in.one)\b", re.IGNORECASE),
    re.compile(r"\bl[ií]quid[oa]?\b", re.IGNORECASE),
    re.compile(r"\bwater\s*cool(?:ing|er)?\b", re.IGNORECASE),
    re.compile(r"\bwatercool(?:ing|er)?\b", re.IGNORECASE),
)
_AIR_KEYWORDS = re.compile(r"\b(?:air|tower|torre)\b|disipador", re.IGNORECASE)

# A size token that is not the tail of an "N x" multiplier
_AIO_SIZE = re.compile(r"(?<![x×]\s)(?<![x×])\b(120|140|240|280|360|420)\s*mm\b", re.IGNORECASE)
_AIO_MULTIPLIER = re.compile(r"\b([23])\s*[x×]\s*(120|140)\s*mm", re.IGNORECASE)
_AIO_ATTRIBUTE = re.compile(r"radiador|radiator|tama[ñn]o", re.IGNORECASE)
_ATTRIBUTE_SIZE = re.compile(r"\b(120|140|240|280|360|420)\s*mm\b", re.IGNORECASE)

_TDP_PATTERNS = (
    re.compile(r"(\d{2,3})\s*W\s*TDP", re.IGNORECASE),
    re.compile(r"TDP[:\s]*(\d{2,3})\s*W", re.IGNORECASE),
)


def cooler_type(text: str) -> str | None:
    """'aio' on any liquid keyword, else 'air' on a tower/heatsink keyword."""
    if any(p.search(text) for p in _AIO_KEYWORDS):
        return "aio"
    if _AIR_KEYWORDS.search(text):
        return "air"
    return None


def extract_aio_size(listing: Listing) -> int | None:
    """Radiator size in mm: direct token, then "2x120mm" style, then attributes."""
    text = listing.text

    match = _AIO_SIZE.search(text)
    if match:
        return int(match.group(1))

    match = _AIO_MULTIPLIER.search(text)
    if match:
        return int(match.group(1)) * int(match.group(2))

    for attr in listing.iter_attributes():
        attr_text = attribute_text(attr)
        if _AIO_ATTRIBUTE.search(attr_text):
            match = _ATTRIBUTE_SIZE.search(attr_text)
            if match:
                return int(match.group(1))
    return None


def extract_cooler(listing: Listing) -> Spec:
    text = listing.text

    height = extract_number(text, _LABELLED_HEIGHT)
    if height is None:
        height = extract_number(text, _ANY_HEIGHT)

    kind = cooler_type(text)

    return Spec(
        cooler_sockets=tuple(extract_patterns(text, SOCKET_PATTERNS)),
        cooler_height=height,
        cooler_type=kind,
        aio_size=extract_aio_size(listing) if kind == "aio" else None,
        cooler_tdp=extract_first_int(text, _TDP_PATTERNS),
    )

"""RAM spec extraction."""

import re

from ..models import Listing, Spec
from ..patterns import MEMORY_TYPE_PATTERNS, extract_int, extract_pattern

_SPEED_PATTERN = re.compile(r"(\d{4,5})\s*(?:MHz|MT/s)", re.IGNORECASE)
_KIT_PATTERN = re.compile(r"\b(\d{1,2})\s*x\s*(\d+)\s*GB", re.IGNORECASE)
_SINGLE_PATTERN = re.compile(r"(\d+)\s*GB", re.IGNORECASE)
_LATENCY_PATTERN = re.compile(r"\bCL?(\d{1,2})\b", re.IGNORECASE)


def extract_memory(listing: Listing) -> Spec:
    text = listing.text

    capacity = modules = None
    kit = _KIT_PATTERN.search(text)
    if kit:
        modules, capacity = int(kit.group(1)), int(kit.group(2))
    else:
        capacity = extract_int(text, _SINGLE_PATTERN)
        if capacity is not None:
            modules = 1

    latency = _LATENCY_PATTERN.search(text)

    return Spec(
        memory_type=extract_pattern(text, MEMORY_TYPE_PATTERNS),
        memory_speed=extract_int(text, _SPEED_PATTERN),
        memory_capacity=capacity,
        memory_modules=modules,
        memory_latency=f"CL{latency.group(1)}" if latency else None,
    )

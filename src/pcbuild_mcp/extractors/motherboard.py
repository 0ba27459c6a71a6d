"""Motherboard spec extraction."""

import re

from ..models import Listing, Spec
from ..patterns import (
    CHIPSET_PATTERNS,
    FORM_FACTOR_PATTERNS,
    MEMORY_TYPE_PATTERNS,
    SOCKET_PATTERNS,
    extract_first_int,
    extract_int,
    extract_pattern,
    extract_patterns,
    infer_socket_from_chipset,
)
from .attributes import find_pattern, find_patterns

DEFAULT_FORM_FACTOR = "ATX"

_FORM_FACTOR_ATTRIBUTE = re.compile(r"form.?factor|formato|tama[ñn]o", re.IGNORECASE)

_MAX_MEMORY_PATTERN = re.compile(r"(?:hasta|max|up\s+to)\s*(\d+)\s*GB", re.IGNORECASE)
_MEMORY_SLOT_PATTERNS = (
    re.compile(r"\b(\d)\s*(?:slots?|ranuras?)\s*(?:de\s*)?(?:RAM|memoria|DIMM)", re.IGNORECASE),
    re.compile(r"\b(\d)\s*x\s*DIMM", re.IGNORECASE),
    re.compile(r"(?:posee|tiene|incluye)\s*(\d)\s*ranuras?\s*DIMM", re.IGNORECASE),
)
# Count must start a token: "B550 M.2" is not 550 slots, "PCIe 4.0 M.2" is not 0
_M2_SLOT_COUNT = re.compile(r"(?<![\d.])\b(\d)\s*(?:x\s*)?(?:ranuras?\s*|slots?\s*)?M\.?2\b", re.IGNORECASE)
_M2_SLOT_LABELLED = re.compile(r"(?:ranuras?|slots?)\s*M\.?2\s*:\s*(\d)\b", re.IGNORECASE)
_M2_SLOT_RANGE = (1, 9)
_SATA_PORT_PATTERNS = (
    re.compile(r"\b(\d{1,2})\s*(?:x\s*)?(?:puertos?\s*)?SATA", re.IGNORECASE),
    re.compile(r"SATA\s*:\s*(\d{1,2})\b", re.IGNORECASE),
)


def extract_motherboard(listing: Listing) -> Spec:
    text = listing.text

    chipset = extract_pattern(text, CHIPSET_PATTERNS)
    socket = extract_pattern(text, SOCKET_PATTERNS) or infer_socket_from_chipset(chipset)

    # Form factor is never left unknown, case fit checks need a value
    form_factor = (
        extract_pattern(text, FORM_FACTOR_PATTERNS)
        or find_pattern(listing, FORM_FACTOR_PATTERNS, _FORM_FACTOR_ATTRIBUTE)
        or DEFAULT_FORM_FACTOR
    )

    # Only an explicit "Slots M.2: 0" may report zero
    m2_slots = extract_first_int(text, (_M2_SLOT_COUNT,), _M2_SLOT_RANGE)
    if m2_slots is None:
        m2_slots = extract_int(text, _M2_SLOT_LABELLED)

    memory_types = extract_patterns(text, MEMORY_TYPE_PATTERNS)
    if not memory_types:
        memory_types = find_patterns(listing, MEMORY_TYPE_PATTERNS)

    return Spec(
        socket=socket,
        chipset=chipset,
        form_factor=form_factor,
        supported_memory_types=tuple(memory_types),
        max_memory=extract_int(text, _MAX_MEMORY_PATTERN),
        memory_slots=extract_first_int(text, _MEMORY_SLOT_PATTERNS),
        m2_slots=m2_slots,
        sata_ports=extract_first_int(text, _SATA_PORT_PATTERNS),
    )

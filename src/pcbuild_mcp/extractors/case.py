"""Chassis spec extraction.

Cases carry the most free-text specs of any category: board form factors,
GPU and cooler clearance, radiator mounts and, for budget combos, a bundled
power supply. Retail copy is mostly Spanish ("Tamaño máximo VGA: 280mm",
"Soporte Watercooler: Frontal Hasta 240mm", "c/Fuente 600w").
"""

import re

from ..config import CASE_COOLER_HEIGHT_RANGE, CASE_GPU_LENGTH_RANGE
from ..models import Listing, Spec
from ..patterns import (
    FORM_FACTOR_PATTERNS,
    RADIATOR_SIZES,
    extract_first_int,
    extract_patterns,
)
from .attributes import attribute_text, find_number, find_patterns, yes_no

_MM_VALUE = re.compile(r"(\d{2,3})\s*mm", re.IGNORECASE)

# =============================================================================
# CLEARANCE
# =============================================================================

_GPU_LENGTH_PATTERNS = (
    re.compile(r"Tama[ñn]o\s+m[aá]ximo\s+VGA:\s*(\d{2,3})\s*mm", re.IGNORECASE),
    re.compile(
        r"(?:GPU|VGA|video|gr[aá]fica|tarjeta\s+de\s+video)[^\d]*"
        r"(?:hasta|max|up\s+to|m[aá]ximo|soporta)[^\d]*(\d{2,3})\s*mm",
        re.IGNORECASE,
    ),
    re.compile(r"(?:soporta|admite|support)[^\d]*(?:GPU|VGA|video)[^\d]*(\d{2,3})\s*mm", re.IGNORECASE),
    re.compile(r"(\d{2,3})\s*mm\s*(?:de\s*)?(?:GPU|VGA|video|gr[aá]fica)", re.IGNORECASE),
)
_GPU_ATTRIBUTE = re.compile(r"GPU|VGA|video|gr[aá]fica|tarjeta", re.IGNORECASE)

# Radiator sizes are not cooler heights: "Watercooler: Hasta 240mm", "water cooler de 360mm"
_NOT_WATER = r"(?<!water )(?<!water)\b"
_COOLER_HEIGHT_PATTERNS = (
    re.compile(r"Tama[ñn]o\s+m[aá]ximo\s+CPU\s+cooler:\s*(\d{2,3})\s*mm", re.IGNORECASE),
    re.compile(r"Soporte\s+de\s+disipador\s+de\s+torre:\s*(?:hasta|up\s+to)\s*(\d{2,3})\s*mm", re.IGNORECASE),
    re.compile(
        _NOT_WATER
        + r"(?:cooler|disipador|CPU)(?:\s+de\s+torre)?[^\d]*(?:hasta|max|m[aá]ximo|up\s+to)[^\d]*(\d{2,3})\s*mm",
        re.IGNORECASE,
    ),
    re.compile(r"(\d{2,3})\s*mm\s*(?:de\s*)?(?:altura|cooler|disipador|CPU)", re.IGNORECASE),
    re.compile(_NOT_WATER + r"(?:cooler|disipador)[^\d]*(\d{2,3})\s*mm", re.IGNORECASE),
)
_COOLER_ATTRIBUTE = re.compile(r"\b(?:cooler|disipador)|altura|height", re.IGNORECASE)


def extract_max_gpu_length(listing: Listing) -> int | None:
    length = extract_first_int(listing.text, _GPU_LENGTH_PATTERNS)
    if length is not None:
        return length
    return find_number(listing, _GPU_ATTRIBUTE, _MM_VALUE, *CASE_GPU_LENGTH_RANGE)


def extract_max_cooler_height(listing: Listing) -> int | None:
    height = extract_first_int(listing.text, _COOLER_HEIGHT_PATTERNS, CASE_COOLER_HEIGHT_RANGE)
    if height is not None:
        return height
    return find_number(listing, _COOLER_ATTRIBUTE, _MM_VALUE, *CASE_COOLER_HEIGHT_RANGE, match_name_only=True)


# =============================================================================
# INCLUDED PSU
# =============================================================================

_PSU_TERM = r"(?:fuente|psu|power\s+supply)"

_PSU_EXCLUDED = (
    re.compile(rf"\b(?:sin|without|no\s+incluye|not\s+included?)\s+{_PSU_TERM}", re.IGNORECASE),
    re.compile(rf"\b{_PSU_TERM}[:\s]+(?:no\s+incluida?|not\s+included?)", re.IGNORECASE),
)
# Inclusion always needs a wattage: "con fuente" alone proves nothing
_PSU_WATTAGE = (
    re.compile(rf"(?:c/|con|with|\+|incluye|incluido)\s*{_PSU_TERM}\s*(?:de\s*)?(\d{{3,4}})\s*w", re.IGNORECASE),
    re.compile(rf"{_PSU_TERM}\s*(?:de\s*)?(\d{{3,4}})\s*w", re.IGNORECASE),
    re.compile(rf"(\d{{3,4}})\s*w\s*{_PSU_TERM}", re.IGNORECASE),
)
_PSU_ATTRIBUTE = re.compile(_PSU_TERM, re.IGNORECASE)


def extract_included_psu(listing: Listing) -> tuple[bool, int | None]:
    """(includes_psu, wattage) for a case.

    Exclusion language (text or an attribute answering "no") always wins.
    Otherwise the PSU counts as included only when a wattage sits next to
    PSU wording.
    """
    text = listing.text
    if any(p.search(text) for p in _PSU_EXCLUDED):
        return False, None
    for attr in listing.iter_attributes():
        if _PSU_ATTRIBUTE.search(attr.name) and yes_no(attr.value) is False:
            return False, None

    wattage = extract_first_int(text, _PSU_WATTAGE)
    if wattage is None:
        return False, None
    return True, wattage


# =============================================================================
# WATER COOLING
# =============================================================================

_WC_TERM = (
    r"(?:water\s*cool(?:ing|er)?|watercool(?:ing|er)?|refrigeraci[oó]n\s*l[ií]quida"
    r"|\bAIO\b|radiador|radiator)"
)
_MOUNT_POSITION = r"(?:frontal|trasero|superior|inferior|top|front|rear|back|bottom)"

_WC_MENTION = re.compile(_WC_TERM, re.IGNORECASE)
# Negation is scoped to one sentence so an unrelated "no compatible" elsewhere
# does not disable radiator support
_WC_NEGATION = (
    re.compile(rf"\b(?:sin|without|no)\s+(?:soporte|support|compatible)[^.\n]*?{_WC_TERM}", re.IGNORECASE),
    re.compile(rf"{_WC_TERM}[^.\n]*?\b(?:no|not)\s+(?:compatible|soportado|supported)", re.IGNORECASE),
    re.compile(rf"{_WC_TERM}\s*:\s*no\b", re.IGNORECASE),
)


def _size_patterns(size: int) -> tuple[re.Pattern[str], ...]:
    return (
        # "Radiador 240mm", "Soporte Watercooler: Frontal Hasta 240mm", "Top: 360mm"
        re.compile(rf"(?:{_WC_TERM}|{_MOUNT_POSITION})[^.\n]*?(?<!\d){size}\s*mm\b", re.IGNORECASE),
        # "240mm radiador"
        re.compile(rf"(?<!\d){size}\s*mm\s*(?:radiador|radiator|AIO|water\s*cool)", re.IGNORECASE),
    )


_RADIATOR_SIZE_PATTERNS = {size: _size_patterns(size) for size in RADIATOR_SIZES}
_ATTRIBUTE_SIZE_PATTERNS = {
    size: re.compile(rf"(?<!\d){size}\s*mm", re.IGNORECASE) for size in RADIATOR_SIZES
}


def extract_water_cooling(listing: Listing) -> dict:
    """Radiator support for a case.

    Negation is checked first and wins. Sizes are only read from water
    cooling, radiator or mount-position context, never from a bare "hasta
    240mm". Support needs a mention, at least one size and no negation.
    """
    text = listing.text
    wc_attributes = [
        attr for attr in listing.iter_attributes() if _WC_MENTION.search(attribute_text(attr))
    ]

    mentions = bool(_WC_MENTION.search(text)) or bool(wc_attributes)
    excluded = any(p.search(text) for p in _WC_NEGATION) or any(
        yes_no(attr.value) is False for attr in wc_attributes
    )

    sizes: set[int] = set()
    if mentions and not excluded:
        for size, patterns in _RADIATOR_SIZE_PATTERNS.items():
            if any(p.search(text) for p in patterns):
                sizes.add(size)
        for attr in wc_attributes:
            attr_text = attribute_text(attr)
            for size, pattern in _ATTRIBUTE_SIZE_PATTERNS.items():
                if pattern.search(attr_text):
                    sizes.add(size)

    return {
        "mentions_water_cooling": mentions,
        "water_cooling_excluded": excluded,
        "supports_water_cooling": mentions and not excluded and bool(sizes),
        "supported_radiator_sizes": tuple(sorted(sizes)),
    }


# =============================================================================
# COMBO
# =============================================================================

_COMBO_PATTERNS = (
    re.compile(r"combo", re.IGNORECASE),
    re.compile(r"\+\s*fuente", re.IGNORECASE),
    re.compile(r"fuente\s*\+", re.IGNORECASE),
    re.compile(r"con\s*fuente", re.IGNORECASE),
    re.compile(r"c/fuente", re.IGNORECASE),
    re.compile(r"fuente\s*\d+w", re.IGNORECASE),
    re.compile(r"kit.*fuente", re.IGNORECASE),
    re.compile(r"fuente.*kit", re.IGNORECASE),
)


def is_combo(listing: Listing) -> bool:
    """Case sold as a bundle (usually with a PSU), judged by title and category tags."""
    haystacks = (listing.title, *listing.categories)
    return any(p.search(h) for h in haystacks for p in _COMBO_PATTERNS)


def extract_case(listing: Listing) -> Spec:
    text = listing.text

    form_factors = extract_patterns(text, FORM_FACTOR_PATTERNS)
    if not form_factors:
        form_factors = find_patterns(listing, FORM_FACTOR_PATTERNS)

    includes_psu, psu_wattage = extract_included_psu(listing)
    water = extract_water_cooling(listing)

    return Spec(
        supported_form_factors=tuple(form_factors),
        max_gpu_length=extract_max_gpu_length(listing),
        max_cpu_cooler_height=extract_max_cooler_height(listing),
        includes_psu=includes_psu,
        included_psu_wattage=psu_wattage,
        is_combo=is_combo(listing),
        **water,
    )

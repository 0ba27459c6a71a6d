"""CPU spec extraction."""

import re

from ..models import Listing, Spec
from ..patterns import (
    CPU_GENERATIONS,
    SOCKET_PATTERNS,
    extract_first_int,
    extract_int,
    extract_pattern,
    infer_socket_from_cpu,
)
from .attributes import iter_named, yes_no

_CORES_PATTERN = re.compile(r"(\d+)\s*(?:núcleos|nucleos|cores?)\b", re.IGNORECASE)
_THREADS_PATTERN = re.compile(r"(\d+)\s*(?:hilos|threads)\b", re.IGNORECASE)
_TDP_PATTERNS = (
    re.compile(r"(\d+)\s*W(?:atts?)?\s*TDP", re.IGNORECASE),
    re.compile(r"TDP[:\s]*(\d+)\s*W", re.IGNORECASE),
)

_FAMILY_PATTERNS = {
    "amd": (re.compile(r"Ryzen\s*([3579])", re.IGNORECASE), "Ryzen {}"),
    "intel": (re.compile(r"\bi([3579])[\s-]", re.IGNORECASE), "Core i{}"),
    "intel_ultra": (re.compile(r"Ultra\s*([3579])", re.IGNORECASE), "Core Ultra {}"),
}
_FAMILY_FALLBACK = {"amd": "Ryzen", "intel": "Core", "intel_ultra": "Core Ultra"}

# Integrated graphics signals, any one is enough
_IGPU_KEYWORD = re.compile(r"\b(?:APU|Vega|UHD|Iris)\b", re.IGNORECASE)
_AMD_G_MODEL = re.compile(r"\b(?:Ryzen|Athlon)\s*(?:[3579]\s*)?\d{4}GT?\b", re.IGNORECASE)
_INTEL_CORE_MODEL = re.compile(r"Core\s*i[3579][\s-]\d{4,5}([A-Z]*)", re.IGNORECASE)
_INTEL_ULTRA_MODEL = re.compile(r"Core\s*Ultra\s*[3579]\s*\d{3}([A-Z]*)", re.IGNORECASE)
_IGPU_EXPLICIT = re.compile(
    r"\b(?:con\s+gr[aá]ficos|integrated\s+graphics|with\s+graphics|gr[aá]ficos\s+integrados)\b",
    re.IGNORECASE,
)

# Bundled cooler classifier, checked in this order
_COOLER_EXCLUDED = (
    re.compile(r"\b(?:sin|without|no\s+incluye|not\s+included?)\s+(?:cooler|disipador|ventilador)", re.IGNORECASE),
    re.compile(r"\b(?:cooler|disipador)\s+(?:no\s+incluido|not\s+included?)", re.IGNORECASE),
    re.compile(
        r"\b(?:sin|without|no\s+incluye|not\s+included?)\s+(?:thermal\s+solution|soluci[oó]n\s+t[eé]rmica)",
        re.IGNORECASE,
    ),
)
_COOLER_INCLUDED = (
    re.compile(r"\b(?:incluye|incluido|include[sd]?|con|with)\s+(?:cooler|disipador|ventilador)", re.IGNORECASE),
    re.compile(r"\b(?:cooler|disipador)\s+(?:incluido|included)", re.IGNORECASE),
    re.compile(
        r"\b(?:included|incluido|incluye)\s+(?:thermal\s+solution|soluci[oó]n\s+t[eé]rmica)",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:thermal\s+solution|soluci[oó]n\s+t[eé]rmica)\s+(?:included|incluid[oa])",
        re.IGNORECASE,
    ),
)
_COOLER_ATTRIBUTE = re.compile(
    r"cooler|disipador|ventilador|thermal\s+solution|soluci[oó]n\s+t[eé]rmica", re.IGNORECASE
)


def _generation(text: str) -> tuple[str | None, str | None]:
    for label, vendor, pattern in CPU_GENERATIONS:
        if pattern.search(text):
            family_pattern, template = _FAMILY_PATTERNS[vendor]
            match = family_pattern.search(text)
            family = template.format(match.group(1)) if match else _FAMILY_FALLBACK[vendor]
            return label, family
    return None, None


def has_integrated_graphics(text: str) -> bool | None:
    """True when the text shows an iGPU. None (unknown) otherwise, never False.

    Intel F-suffix parts (12400F, 13700KF) ship without graphics.
    """
    if _IGPU_KEYWORD.search(text) or _AMD_G_MODEL.search(text):
        return True
    for pattern in (_INTEL_CORE_MODEL, _INTEL_ULTRA_MODEL):
        match = pattern.search(text)
        if match and "F" not in match.group(1).upper():
            return True
    if _IGPU_EXPLICIT.search(text):
        return True
    return None


def includes_cooler(listing: Listing) -> bool:
    """Whether a boxed cooler ships with the CPU.

    Precedence: exclusion text, inclusion text, attribute answers, then False.
    """
    text = listing.text
    if any(p.search(text) for p in _COOLER_EXCLUDED):
        return False
    if any(p.search(text) for p in _COOLER_INCLUDED):
        return True
    for attr in iter_named(listing, _COOLER_ATTRIBUTE):
        answer = yes_no(attr.value)
        if answer is not None:
            return answer
    return False


def extract_cpu(listing: Listing) -> Spec:
    text = listing.text

    socket = extract_pattern(text, SOCKET_PATTERNS) or infer_socket_from_cpu(text)

    generation, family = _generation(text)

    return Spec(
        socket=socket,
        cores=extract_int(text, _CORES_PATTERN),
        threads=extract_int(text, _THREADS_PATTERN),
        tdp=extract_first_int(text, _TDP_PATTERNS),
        cpu_generation=generation,
        cpu_family=family,
        integrated_graphics=has_integrated_graphics(text),
        includes_cooler=includes_cooler(listing),
    )

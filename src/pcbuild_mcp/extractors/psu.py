"""Power supply spec extraction."""

import re

from ..models import Listing, Spec
from ..patterns import extract_int

_WATTAGE_PATTERN = re.compile(r"(\d{3,4})\s*W\b", re.IGNORECASE)

# Highest tier first, bare "80+" last
_EFFICIENCY_TIERS = (
    ("80+ Titanium", re.compile(r"80\s*\+?\s*(?:plus\s*)?Titanium", re.IGNORECASE)),
    ("80+ Platinum", re.compile(r"80\s*\+?\s*(?:plus\s*)?Platinum", re.IGNORECASE)),
    ("80+ Gold", re.compile(r"80\s*\+?\s*(?:plus\s*)?Gold", re.IGNORECASE)),
    ("80+ Silver", re.compile(r"80\s*\+?\s*(?:plus\s*)?Silver", re.IGNORECASE)),
    ("80+ Bronze", re.compile(r"80\s*\+?\s*(?:plus\s*)?Bronze", re.IGNORECASE)),
    ("80+", re.compile(r"80\s*(?:\+|plus\b)", re.IGNORECASE)),
)

_FULL_MODULAR = re.compile(r"full\s*modular|totalmente\s+modular", re.IGNORECASE)
_SEMI_MODULAR = re.compile(r"semi[\s-]*modular", re.IGNORECASE)
_MODULAR = re.compile(r"modular", re.IGNORECASE)
_SFX = re.compile(r"\bSFX\b", re.IGNORECASE)


def _efficiency(text: str) -> str | None:
    for tier, pattern in _EFFICIENCY_TIERS:
        if pattern.search(text):
            return tier
    return None


def _modular(text: str) -> str | None:
    if _FULL_MODULAR.search(text):
        return "full"
    if _SEMI_MODULAR.search(text):
        return "semi"
    if _MODULAR.search(text):
        return "full"
    return None


def extract_psu(listing: Listing) -> Spec:
    text = listing.text
    return Spec(
        psu_wattage=extract_int(text, _WATTAGE_PATTERN),
        psu_efficiency=_efficiency(text),
        psu_modular=_modular(text),
        psu_form_factor="SFX" if _SFX.search(text) else "ATX",
    )

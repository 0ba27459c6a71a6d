"""Spec extraction: turn a raw listing into a normalized Spec for one category."""

import logging
from typing import Callable

from ..models import Category, Listing, Spec
from .case import extract_case
from .cooler import extract_cooler
from .cpu import extract_cpu
from .gpu import extract_gpu
from .memory import extract_memory
from .motherboard import extract_motherboard
from .psu import extract_psu
from .storage import extract_storage, is_storage_m2

logger = logging.getLogger(__name__)

EXTRACTORS: dict[Category, Callable[[Listing], Spec]] = {
    Category.CPU: extract_cpu,
    Category.MOTHERBOARD: extract_motherboard,
    Category.RAM: extract_memory,
    Category.GPU: extract_gpu,
    Category.CASE: extract_case,
    Category.PSU: extract_psu,
    Category.STORAGE: extract_storage,
    Category.COOLER: extract_cooler,
}


def extract_spec(listing: Listing, category: Category) -> Spec:
    """Extract the spec of listing as a member of category.

    Never raises: a listing that trips up an extractor yields an empty
    (all unknown) Spec.
    """
    try:
        return EXTRACTORS[category](listing)
    except Exception:
        logger.exception(f"Spec extraction failed for {category.value} listing {listing.id or listing.title[:60]!r}")
        return Spec()


__all__ = ["EXTRACTORS", "extract_spec", "is_storage_m2"]

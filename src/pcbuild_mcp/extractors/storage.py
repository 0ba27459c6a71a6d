"""Storage spec extraction.

Connection type decides which board resource a drive consumes (M.2 slot or
SATA port). Retailers fill a "Formato de disco" attribute more reliably than
they write titles, so attribute tables take priority over free text.
"""

import re

from ..models import Listing, Spec
from ..patterns import extract_first_int, extract_number

_FORMAT_ATTRIBUTE = re.compile(r"formato|form\s*factor|disk\s*format|tipo", re.IGNORECASE)

_M2 = re.compile(r"\bM\.?2\b", re.IGNORECASE)
_SATA = re.compile(r"\bSATA\b", re.IGNORECASE)
_NVME = re.compile(r"\bNVMe\b", re.IGNORECASE)
_HDD = re.compile(r"\bHDD\b", re.IGNORECASE)
_INCH_25 = re.compile(r"(?<![\d.,])2[.,]5(?!\d)", re.IGNORECASE)
_INCH_35 = re.compile(r"(?<![\d.,])3[.,]5(?!\d)", re.IGNORECASE)

# "TB" only, never "TBW" endurance ratings
_CAPACITY_TB = re.compile(r"(\d+(?:[.,]\d+)?)\s*TB\b", re.IGNORECASE)
_CAPACITY_GB = re.compile(r"(\d+)\s*GB\b", re.IGNORECASE)

_READ_PATTERNS = (
    re.compile(r"lectura[^\d]*(\d{3,5})", re.IGNORECASE),
    re.compile(r"(\d{3,5})\s*MB/s\s*(?:de\s*)?(?:lectura|read)", re.IGNORECASE),
    re.compile(r"\bread[^\d]*(\d{3,5})\s*MB", re.IGNORECASE),
)
_WRITE_PATTERNS = (
    re.compile(r"escritura[^\d]*(\d{3,5})", re.IGNORECASE),
    re.compile(r"(\d{3,5})\s*MB/s\s*(?:de\s*)?(?:escritura|write)", re.IGNORECASE),
    re.compile(r"\bwrite[^\d]*(\d{3,5})\s*MB", re.IGNORECASE),
)


def _format_from_attributes(listing: Listing) -> str | None:
    for attr in listing.iter_attributes():
        if not _FORMAT_ATTRIBUTE.search(attr.name):
            continue
        if _M2.search(attr.value):
            return "M.2"
        if _INCH_25.search(attr.value):
            return "2.5"
        if _INCH_35.search(attr.value):
            return "3.5"
    return None


def is_storage_m2(listing: Listing) -> bool:
    """Whether a drive plugs into an M.2 slot.

    A format attribute naming M.2 answers yes; one naming SATA or a 2.5"/3.5"
    bay answers no. Without such an attribute, any M.2 mention in the text
    counts. Defaults to SATA.
    """
    for attr in listing.iter_attributes():
        if not _FORMAT_ATTRIBUTE.search(attr.name):
            continue
        if _M2.search(attr.value):
            return True
        if _SATA.search(attr.value) or _INCH_25.search(attr.value) or _INCH_35.search(attr.value):
            return False
    return bool(_M2.search(listing.text))


def _capacity_gb(text: str) -> int | None:
    terabytes = extract_number(text, _CAPACITY_TB)
    if terabytes is not None:
        return int(round(terabytes * 1000))
    gigabytes = extract_number(text, _CAPACITY_GB)
    return int(gigabytes) if gigabytes is not None else None


def _form_factor_from_text(text: str) -> str | None:
    if _M2.search(text):
        return "M.2"
    if _INCH_25.search(text):
        return "2.5"
    if _INCH_35.search(text):
        return "3.5"
    return None


def extract_storage(listing: Listing) -> Spec:
    text = listing.text

    if _NVME.search(text):
        interface = "NVMe"
    elif _SATA.search(text):
        interface = "SATA"
    else:
        interface = None

    return Spec(
        storage_interface=interface,
        storage_capacity=_capacity_gb(text),
        storage_form_factor=_format_from_attributes(listing) or _form_factor_from_text(text),
        storage_type="HDD" if _HDD.search(text) else "SSD",
        storage_connection_type="M.2" if is_storage_m2(listing) else "SATA",
        read_speed=extract_first_int(text, _READ_PATTERNS),
        write_speed=extract_first_int(text, _WRITE_PATTERNS),
    )

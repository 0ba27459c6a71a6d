"""Pattern library for PC component spec extraction.

Static lookup tables mapping known engineering values to the ways retailers
write them, plus inference tables (chipset -> socket, CPU model -> socket).

Every single-value table is an ordered tuple of (value, patterns). Order is
priority: the first value whose pattern matches wins. More specific values
must come before the generic ones they overlap with (X670E before X670,
E-ATX before ATX).
"""

import re

# (value, patterns) pairs, priority ordered
PatternTable = tuple[tuple[str, tuple[re.Pattern[str], ...]], ...]


def _lga(number: str) -> tuple[re.Pattern[str], ...]:
    return (
        re.compile(rf"\bLGA\s*{number}\b", re.IGNORECASE),
        re.compile(rf"\bSocket\s*{number}\b", re.IGNORECASE),
        re.compile(rf"\bFCLGA\s*{number}\b", re.IGNORECASE),
        re.compile(rf"(?:socket|lga|fclga)[\s-]*{number}", re.IGNORECASE),
    )


# =============================================================================
# SOCKETS
# =============================================================================

SOCKET_PATTERNS: PatternTable = (
    ("AM4", (re.compile(r"\bAM4\b", re.IGNORECASE),)),
    ("AM5", (re.compile(r"\bAM5\b", re.IGNORECASE),)),
    ("LGA1851", _lga("1851")),
    ("LGA1700", _lga("1700")),
    ("LGA1200", _lga("1200")),
    ("LGA1151", _lga("1151")),
    ("sTRX4", (re.compile(r"\bsTRX4\b", re.IGNORECASE),)),
    ("TR4", (re.compile(r"\bTR4\b", re.IGNORECASE),)),
)


# =============================================================================
# CHIPSETS
# =============================================================================
# Grouped by the socket they imply. Within a group, suffixed variants first.

_CHIPSET_GROUPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("AM5", ("X670E", "X670", "B650E", "B650", "A620")),
    ("AM4", ("X570", "B550", "A520", "X470", "B450", "X370", "B350", "A320")),
    ("LGA1851", ("Z890", "B860", "H810")),
    ("LGA1700", ("Z790", "Z690", "B760", "B660", "H770", "H670", "H610")),
    ("LGA1200", ("Z590", "Z490", "B560", "B460", "H510", "H470", "H410", "W480", "Q470")),
)

# Trailing "M" covers micro board naming like "B550M-A" or "B760M DS3H"
CHIPSET_PATTERNS: PatternTable = tuple(
    (chipset, (re.compile(rf"\b{chipset}M?\b", re.IGNORECASE),))
    for _, chipsets in _CHIPSET_GROUPS
    for chipset in chipsets
)

CHIPSET_SOCKETS: dict[str, str] = {
    chipset: socket
    for socket, chipsets in _CHIPSET_GROUPS
    for chipset in chipsets
}


# =============================================================================
# CPU MODEL INFERENCE
# =============================================================================

CPU_MODEL_SOCKETS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("AM5", re.compile(r"Ryzen\s*[3579]\s*[789]\d{3}", re.IGNORECASE)),
    ("AM4", re.compile(r"Ryzen\s*[3579]\s*[35]\d{3}", re.IGNORECASE)),
    ("LGA1851", re.compile(r"Core\s*Ultra\s*[3579]", re.IGNORECASE)),
    ("LGA1700", re.compile(r"Core\s*i[3579][\s-]1[234]\d{3}", re.IGNORECASE)),
    ("LGA1200", re.compile(r"Core\s*i[3579][\s-]1[01]\d{3}", re.IGNORECASE)),
)

# (generation label, vendor, pattern)
CPU_GENERATIONS: tuple[tuple[str, str, re.Pattern[str]], ...] = (
    ("Ryzen 9000", "amd", re.compile(r"Ryzen\s*[3579]\s*9\d{3}", re.IGNORECASE)),
    ("Ryzen 8000", "amd", re.compile(r"Ryzen\s*[3579]\s*8\d{3}", re.IGNORECASE)),
    ("Ryzen 7000", "amd", re.compile(r"Ryzen\s*[3579]\s*7\d{3}", re.IGNORECASE)),
    ("Ryzen 5000", "amd", re.compile(r"Ryzen\s*[3579]\s*5\d{3}", re.IGNORECASE)),
    ("Ryzen 3000", "amd", re.compile(r"Ryzen\s*[3579]\s*3\d{3}", re.IGNORECASE)),
    ("15th Gen", "intel_ultra", re.compile(r"Core\s*Ultra\s*[3579]|15th\s*Gen", re.IGNORECASE)),
    ("14th Gen", "intel", re.compile(r"Core\s*i[3579][\s-]14\d{3}|14th\s*Gen", re.IGNORECASE)),
    ("13th Gen", "intel", re.compile(r"Core\s*i[3579][\s-]13\d{3}|13th\s*Gen", re.IGNORECASE)),
    ("12th Gen", "intel", re.compile(r"Core\s*i[3579][\s-]12\d{3}|12th\s*Gen", re.IGNORECASE)),
    ("11th Gen", "intel", re.compile(r"Core\s*i[3579][\s-]11\d{3}|11th\s*Gen", re.IGNORECASE)),
    ("10th Gen", "intel", re.compile(r"Core\s*i[3579][\s-]10\d{3}|10th\s*Gen", re.IGNORECASE)),
)


# =============================================================================
# FORM FACTORS / MEMORY
# =============================================================================

# Bare ATX must not fire inside "Micro-ATX", "Micro ATX", "E-ATX", "Extended ATX" or "mATX"
FORM_FACTOR_PATTERNS: PatternTable = (
    ("E-ATX", (
        re.compile(r"\bE-?ATX\b", re.IGNORECASE),
        re.compile(r"\bExtended\s+ATX\b", re.IGNORECASE),
    )),
    ("ATX", (re.compile(r"(?<![\w-])(?<!micro\s)(?<!extended\s)ATX\b", re.IGNORECASE),)),
    ("Micro-ATX", (
        re.compile(r"\bMicro[\s-]?ATX\b", re.IGNORECASE),
        re.compile(r"\bmATX\b", re.IGNORECASE),
        re.compile(r"\bM-ATX\b", re.IGNORECASE),
    )),
    ("Mini-ITX", (
        re.compile(r"\bMini[\s-]?ITX\b", re.IGNORECASE),
        re.compile(r"\bITX\b", re.IGNORECASE),
    )),
)

# Larger cases fit smaller boards
FORM_FACTOR_LEVELS: dict[str, int] = {
    "E-ATX": 4,
    "ATX": 3,
    "Micro-ATX": 2,
    "Mini-ITX": 1,
}

MEMORY_TYPE_PATTERNS: PatternTable = (
    ("DDR5", (re.compile(r"\bDDR5\b", re.IGNORECASE),)),
    ("DDR4", (re.compile(r"\bDDR4\b", re.IGNORECASE),)),
    ("DDR3", (re.compile(r"\bDDR3\b", re.IGNORECASE),)),
)

# Standard AIO / case radiator sizes, mm
RADIATOR_SIZES: tuple[int, ...] = (120, 140, 240, 280, 360, 420)


# =============================================================================
# SHARED HELPERS
# =============================================================================

# "LGA 1851 / 1700 / 1200" -> prefix "LGA ", list "1851 / 1700 / 1200"
_SHARED_SOCKET_PREFIX = re.compile(
    r"(\b(?:FCLGA|LGA|Socket)\s*)(\d{2,4}[A-Za-z0-9]*?(?:\s*[/,]\s*\d{2,4}[A-Za-z0-9]*)+)",
    re.IGNORECASE,
)
_LIST_SEPARATOR = re.compile(r"[/,]")


def expand_socket_prefixes(text: str) -> str:
    """Expand a socket prefix shared across a compressed list.

    'LGA 1851/1700/1200' -> 'LGA 1851 / LGA 1700 / LGA 1200'
    """
    if not text:
        return text

    def _expand(match: re.Match[str]) -> str:
        prefix = match.group(1)
        parts = [p.strip() for p in _LIST_SEPARATOR.split(match.group(2)) if p.strip()]
        return " / ".join(f"{prefix}{p}" for p in parts)

    return _SHARED_SOCKET_PREFIX.sub(_expand, text)


def extract_pattern(text: str, table: PatternTable) -> str | None:
    """Return the first value (in table order) with a matching pattern."""
    if not text:
        return None
    normalized = expand_socket_prefixes(text)
    for value, patterns in table:
        for pattern in patterns:
            if pattern.search(normalized):
                return value
    return None


def extract_patterns(text: str, table: PatternTable) -> list[str]:
    """Return every value with a matching pattern, in table order."""
    if not text:
        return []
    normalized = expand_socket_prefixes(text)
    matches = []
    for value, patterns in table:
        if any(pattern.search(normalized) for pattern in patterns):
            matches.append(value)
    return matches


def extract_number(text: str, pattern: re.Pattern[str]) -> float | None:
    """Parse the first capture group of pattern as a number. '164,8' -> 164.8"""
    if not text:
        return None
    match = pattern.search(text)
    if not match or not match.group(1):
        return None
    try:
        return float(match.group(1).replace(",", "."))
    except ValueError:
        return None


def extract_int(text: str, pattern: re.Pattern[str]) -> int | None:
    """Like extract_number, truncated to int."""
    value = extract_number(text, pattern)
    return int(value) if value is not None else None


def extract_first_int(
    text: str,
    patterns: tuple[re.Pattern[str], ...],
    bounds: tuple[float, float] | None = None,
) -> int | None:
    """Try patterns in order, return the first (in-bounds) integer found.

    An out-of-bounds hit does not stop the cascade; the next pattern is tried.
    """
    for pattern in patterns:
        value = extract_int(text, pattern)
        if value is None:
            continue
        if bounds is None or bounds[0] <= value <= bounds[1]:
            return value
    return None


def infer_socket_from_chipset(chipset: str | None) -> str | None:
    """'B550' -> 'AM4', 'Z790' -> 'LGA1700'"""
    if not chipset:
        return None
    return CHIPSET_SOCKETS.get(chipset.upper())


def infer_socket_from_cpu(text: str) -> str | None:
    """Infer the socket from a CPU model name: 'Ryzen 9 7950X' -> 'AM5'"""
    if not text:
        return None
    for socket, pattern in CPU_MODEL_SOCKETS:
        if pattern.search(text):
            return socket
    return None

"""Data model for the compatibility engine.

Listings are raw retail items, Specs are the normalized facts extracted from
them, and Candidates pair the two under one category. A Build maps each
category to the candidate currently occupying it.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Iterator, Literal, Mapping

from .config import MAX_TEXT_LENGTH


class Category(str, Enum):
    """Component slots of a PC build."""
    CPU = "cpu"
    MOTHERBOARD = "motherboard"
    RAM = "ram"
    GPU = "gpu"
    CASE = "case"
    PSU = "psu"
    STORAGE = "storage"
    COOLER = "cooler"


CompatStatus = Literal["pass", "fail", "warn", "unknown"]


@dataclass(frozen=True)
class Attribute:
    name: str
    value: str


@dataclass(frozen=True)
class AttributeGroup:
    name: str
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class Listing:
    """A raw catalog item. Read-only input to extraction."""
    title: str
    description: str = ""
    attribute_groups: tuple[AttributeGroup, ...] = ()
    categories: tuple[str, ...] = ()
    id: str = ""

    @property
    def text(self) -> str:
        """Title and description joined, the haystack for text patterns."""
        return f"{self.title} {self.description}"[:MAX_TEXT_LENGTH]

    def iter_attributes(self) -> Iterator[Attribute]:
        """Yield every attribute across all groups, in listing order."""
        for group in self.attribute_groups:
            yield from group.attributes


@dataclass(frozen=True)
class Spec:
    """Normalized engineering facts for one listing under one category.

    None (or an empty tuple for multi-value fields) means unknown, never zero.
    """
    # CPU
    socket: str | None = None
    cores: int | None = None
    threads: int | None = None
    tdp: int | None = None
    cpu_generation: str | None = None
    cpu_family: str | None = None
    integrated_graphics: bool | None = None
    includes_cooler: bool | None = None

    # Motherboard
    chipset: str | None = None
    form_factor: str | None = None
    supported_memory_types: tuple[str, ...] = ()
    max_memory: int | None = None
    memory_slots: int | None = None
    m2_slots: int | None = None
    sata_ports: int | None = None

    # RAM
    memory_type: str | None = None
    memory_speed: int | None = None
    memory_capacity: int | None = None  # GB per module
    memory_modules: int | None = None
    memory_latency: str | None = None

    # GPU
    gpu_length: int | None = None  # mm
    gpu_recommended_psu: int | None = None  # W

    # Case
    supported_form_factors: tuple[str, ...] = ()
    max_gpu_length: int | None = None
    max_cpu_cooler_height: float | None = None
    includes_psu: bool | None = None
    included_psu_wattage: int | None = None
    mentions_water_cooling: bool | None = None
    water_cooling_excluded: bool | None = None
    supports_water_cooling: bool | None = None
    supported_radiator_sizes: tuple[int, ...] = ()
    is_combo: bool | None = None

    # PSU
    psu_wattage: int | None = None
    psu_efficiency: str | None = None
    psu_modular: Literal["full", "semi", "no"] | None = None
    psu_form_factor: str | None = None

    # Storage
    storage_interface: str | None = None
    storage_capacity: int | None = None  # GB
    storage_form_factor: str | None = None
    storage_type: str | None = None
    storage_connection_type: Literal["M.2", "SATA"] | None = None
    read_speed: int | None = None  # MB/s
    write_speed: int | None = None  # MB/s

    # Cooler
    cooler_sockets: tuple[str, ...] = ()
    cooler_height: float | None = None
    cooler_type: Literal["air", "aio"] | None = None
    aio_size: int | None = None
    cooler_tdp: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Known fields only, multi-value fields as lists."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == ():
                continue
            result[f.name] = list(value) if isinstance(value, tuple) else value
        return result


@dataclass(frozen=True)
class Candidate:
    """A listing tagged for exactly one category, with its extracted spec."""
    listing: Listing
    spec: Spec
    category: Category


Build = Mapping[Category, Candidate]


@dataclass(frozen=True)
class RuleResult:
    rule_id: str
    status: CompatStatus
    reason: str
    affected_categories: tuple[Category, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "status": self.status,
            "reason": self.reason,
            "affected_categories": [c.value for c in self.affected_categories],
        }


@dataclass(frozen=True)
class Rule:
    """A stateless directional check from one category to others in the build."""
    id: str
    name: str
    description: str
    source_category: Category
    target_categories: tuple[Category, ...]
    evaluate: Callable[[Candidate, Build], RuleResult]


@dataclass
class CompatibilityResult:
    listing_id: str
    allowed: bool
    results: list[RuleResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    has_unknown_checks: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "listing_id": self.listing_id,
            "allowed": self.allowed,
            "results": [r.to_dict() for r in self.results],
            "warnings": self.warnings,
            "failures": self.failures,
            "has_unknown_checks": self.has_unknown_checks,
        }


@dataclass
class EvaluatedCandidate:
    candidate: Candidate
    compatibility: CompatibilityResult


@dataclass
class BuildSummary:
    is_complete: bool
    is_compatible: bool
    warnings: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    missing_categories: list[Category] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_complete": self.is_complete,
            "is_compatible": self.is_compatible,
            "warnings": self.warnings,
            "failures": self.failures,
            "missing_categories": [c.value for c in self.missing_categories],
        }


@dataclass(frozen=True)
class Badge:
    label: str
    color: Literal["green", "yellow", "red"]

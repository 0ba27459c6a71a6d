"""Compatibility engine.

Pure and synchronous: every function here is a deterministic function of its
arguments. The Build passed in is never mutated.
"""

import logging
from typing import Iterable

from .extractors import extract_spec
from .models import (
    Badge,
    Build,
    BuildSummary,
    Candidate,
    Category,
    CompatibilityResult,
    EvaluatedCandidate,
    Listing,
    RuleResult,
    Spec,
)
from .rules import get_rules_for_category

logger = logging.getLogger(__name__)

BASE_REQUIRED_CATEGORIES = (
    Category.CPU,
    Category.MOTHERBOARD,
    Category.RAM,
    Category.STORAGE,
    Category.PSU,
    Category.CASE,
)

INCLUDED_PSU_ID = "use-included-psu"
MISSING_COOLER_MESSAGE = "The selected CPU does not include a cooler. Add a CPU cooler."


def tag_with_spec(listing: Listing, category: Category) -> Candidate:
    """Pair a listing with its extracted spec for one category."""
    return Candidate(listing=listing, spec=extract_spec(listing, category), category=category)


def evaluate(candidate: Candidate, build: Build) -> CompatibilityResult:
    """Run every rule sourced from the candidate's category against the build.

    No short-circuit: all rules run so diagnostics are complete. A rule that
    raises is reported as unknown and does not affect the others.
    """
    results: list[RuleResult] = []
    warnings: list[str] = []
    failures: list[str] = []
    has_unknown = False

    for rule in get_rules_for_category(candidate.category):
        try:
            result = rule.evaluate(candidate, build)
        except Exception:
            logger.exception(f"Rule {rule.id} raised, reporting as unknown")
            result = RuleResult(
                rule.id,
                "unknown",
                f"{rule.name} check could not run",
                (rule.source_category, *rule.target_categories),
            )
        logger.debug(f"{rule.id}: {result.status} ({result.reason})")

        results.append(result)
        if result.status == "fail":
            failures.append(result.reason)
        elif result.status == "warn":
            warnings.append(result.reason)
        elif result.status == "unknown":
            has_unknown = True

    return CompatibilityResult(
        listing_id=candidate.listing.id,
        allowed=not failures,
        results=results,
        warnings=warnings,
        failures=failures,
        has_unknown_checks=has_unknown,
    )


def evaluate_listing(listing: Listing, category: Category, build: Build) -> CompatibilityResult:
    return evaluate(tag_with_spec(listing, category), build)


def _tier(result: CompatibilityResult) -> int:
    if not result.allowed:
        return 2
    if result.warnings:
        return 1
    return 0


def filter_by_compatibility(
    listings: Iterable[Listing],
    category: Category,
    build: Build,
    include_incompatible: bool = False,
) -> list[EvaluatedCandidate]:
    """Evaluate listings for category and order them for display.

    Fully compatible first, then those with warnings, then (only when
    include_incompatible) disallowed ones. Input order is kept within a tier.
    """
    evaluated = []
    for listing in listings:
        candidate = tag_with_spec(listing, category)
        evaluated.append(EvaluatedCandidate(candidate, evaluate(candidate, build)))

    if not include_incompatible:
        evaluated = [item for item in evaluated if item.compatibility.allowed]

    return sorted(evaluated, key=lambda item: _tier(item.compatibility))


def required_categories(build: Build) -> list[Category]:
    """Categories a complete build needs, given the CPU currently selected.

    GPU unless the CPU has integrated graphics; cooler unless it ships one.
    """
    cpu = build.get(Category.CPU)
    required = list(BASE_REQUIRED_CATEGORIES)
    if cpu is None or cpu.spec.integrated_graphics is not True:
        required.append(Category.GPU)
    if cpu is None or cpu.spec.includes_cooler is not True:
        required.append(Category.COOLER)
    return required


def _dedupe(messages: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(messages))


def summarize_build(build: Build) -> BuildSummary:
    """Re-evaluate every selected part against the rest of the build."""
    warnings: list[str] = []
    failures: list[str] = []
    is_compatible = True

    for candidate in build.values():
        result = evaluate(candidate, build)
        warnings.extend(result.warnings)
        if not result.allowed:
            is_compatible = False
            failures.extend(result.failures)

    required = required_categories(build)
    missing = [category for category in required if category not in build]

    # No rule instance exists for an absent cooler, so report it here
    if Category.COOLER in missing:
        failures.append(MISSING_COOLER_MESSAGE)

    return BuildSummary(
        is_complete=not missing,
        is_compatible=is_compatible,
        warnings=_dedupe(warnings),
        failures=_dedupe(failures),
        missing_categories=missing,
    )


def compatibility_badge(result: CompatibilityResult) -> Badge:
    """Four-tier display status. Unknown-only checks never show as Compatible."""
    if not result.allowed:
        return Badge("Incompatible", "red")
    if result.warnings:
        return Badge("Verify", "yellow")
    if result.has_unknown_checks:
        return Badge("Could not verify", "yellow")
    return Badge("Compatible", "green")


def included_psu_candidate(case: Candidate) -> Candidate | None:
    """A PSU candidate standing in for the supply bundled with case, if any."""
    if not case.spec.includes_psu or not case.spec.included_psu_wattage:
        return None
    wattage = case.spec.included_psu_wattage
    listing = Listing(
        id=INCLUDED_PSU_ID,
        title=f"PSU included with case ({wattage}W)",
        description=f"{wattage}W power supply bundled with {case.listing.title}",
    )
    return Candidate(listing=listing, spec=Spec(psu_wattage=wattage), category=Category.PSU)


def with_included_psu(build: Build) -> dict[Category, Candidate]:
    """Copy of build with the case's bundled PSU filling an empty PSU slot."""
    result = dict(build)
    case = build.get(Category.CASE)
    if case is not None and Category.PSU not in build:
        psu = included_psu_candidate(case)
        if psu is not None:
            result[Category.PSU] = psu
    return result

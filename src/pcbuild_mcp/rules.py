"""Compatibility rules.

Every pairwise constraint is one check function taking the two specs in a
fixed (canonical) order, exposed as two directional Rule records, one per
side. Both directions therefore reach the same verdict for a given pair.

Verdict policy:
- counterpart not in the build: pass (nothing to check against)
- counterpart present, data missing: warn or unknown, per rule
- data present and violated: fail
"""

import math
from typing import Callable

from .config import BASE_SYSTEM_WATTS, DEFAULT_CPU_TDP, DEFAULT_GPU_WATTS, PSU_HEADROOM
from .models import Build, Candidate, Category, CompatStatus, Rule, RuleResult, Spec
from .patterns import FORM_FACTOR_LEVELS

Verdict = tuple[CompatStatus, str]
PairCheck = Callable[[Spec, Spec], Verdict]


# =============================================================================
# PAIR CHECKS (canonical argument order)
# =============================================================================

def check_socket(cpu: Spec, board: Spec) -> Verdict:
    if not cpu.socket or not board.socket:
        return "warn", "Could not determine socket compatibility. Verify manually."
    if cpu.socket == board.socket:
        return "pass", f"Socket {cpu.socket} compatible"
    return "fail", f"Socket mismatch: CPU uses {cpu.socket}, motherboard uses {board.socket}"


def check_memory_type(board: Spec, ram: Spec) -> Verdict:
    if not board.supported_memory_types or not ram.memory_type:
        return "warn", "Could not determine memory compatibility. Verify manually."
    if ram.memory_type in board.supported_memory_types:
        return "pass", f"{ram.memory_type} memory supported"
    supported = "/".join(board.supported_memory_types)
    return "fail", f"Memory mismatch: motherboard supports {supported}, RAM is {ram.memory_type}"


def check_form_factor(board: Spec, case: Spec) -> Verdict:
    """Board fits when some supported case form factor is at least as large."""
    if not board.form_factor or not case.supported_form_factors:
        return "unknown", "Could not verify form factor"
    board_level = FORM_FACTOR_LEVELS.get(board.form_factor, 0)
    case_level = max(FORM_FACTOR_LEVELS.get(ff, 0) for ff in case.supported_form_factors)
    if board_level <= case_level:
        return "pass", f"{board.form_factor} motherboard fits the case"
    supported = "/".join(case.supported_form_factors)
    return "fail", f"Form factor mismatch: motherboard is {board.form_factor}, case supports {supported}"


def check_gpu_length(gpu: Spec, case: Spec) -> Verdict:
    if not gpu.gpu_length or not case.max_gpu_length:
        return "unknown", "Could not verify GPU length"
    if gpu.gpu_length <= case.max_gpu_length:
        return "pass", f"GPU ({gpu.gpu_length}mm) fits the case (max {case.max_gpu_length}mm)"
    return "fail", f"GPU too long: GPU is {gpu.gpu_length}mm, case supports up to {case.max_gpu_length}mm"


def _wattage_verdict(supply: int, required: int, source: str) -> Verdict:
    """Exact match is tight, not safe: equal warns, below always fails."""
    if supply > required:
        return "pass", f"{source} of {supply}W meets the {required}W required by the GPU"
    if supply == required:
        return "warn", f"{source} of {supply}W exactly meets the {required}W required by the GPU. Tight margin."
    return "fail", f"{source} too weak: {supply}W, the GPU requires at least {required}W"


def check_psu_gpu_minimum(psu: Spec, gpu: Spec) -> Verdict:
    if not psu.psu_wattage:
        return "warn", "Could not determine PSU wattage. Verify manually."
    if not gpu.gpu_recommended_psu:
        return "warn", "GPU does not state a minimum PSU wattage. Verify manually."
    return _wattage_verdict(psu.psu_wattage, gpu.gpu_recommended_psu, "PSU")


def check_included_psu_gpu(case: Spec, gpu: Spec) -> Verdict:
    if not case.includes_psu:
        return "pass", "Case does not bundle a PSU"
    if not case.included_psu_wattage:
        return "warn", "Could not determine the bundled PSU wattage. Verify manually."
    if not gpu.gpu_recommended_psu:
        return "warn", "GPU does not state a minimum PSU wattage. Verify manually."
    return _wattage_verdict(case.included_psu_wattage, gpu.gpu_recommended_psu, "Bundled PSU")


def check_build_power(psu: Spec, cpu: Spec | None, gpu: Spec | None) -> Verdict:
    """Whole-build power budget.

    A GPU's recommended PSU already covers the full system, so when present it
    is the requirement as-is. Otherwise the draw is estimated additively and
    20% headroom is required.
    """
    if cpu is None and gpu is None:
        return "pass", "No CPU or GPU to budget for"
    supply = psu.psu_wattage
    if not supply:
        return "warn", "Could not determine PSU wattage. Verify manually."

    if gpu is not None and gpu.gpu_recommended_psu:
        required = gpu.gpu_recommended_psu
        if supply >= required:
            return "pass", f"{supply}W PSU covers the GPU's recommended {required}W system supply"
        return "fail", f"Insufficient PSU: {supply}W, the GPU recommends a {required}W system supply"

    estimate = BASE_SYSTEM_WATTS
    if cpu is not None:
        estimate += cpu.tdp or DEFAULT_CPU_TDP
    if gpu is not None:
        estimate += DEFAULT_GPU_WATTS
    recommended = math.ceil(estimate * PSU_HEADROOM)

    if supply >= recommended:
        return "pass", f"{supply}W PSU is sufficient (estimated {estimate}W, recommended {recommended}W)"
    if supply >= estimate:
        return "warn", f"{supply}W PSU may be tight (estimated {estimate}W, recommended {recommended}W)"
    return "fail", f"Insufficient PSU: {supply}W (estimated {estimate}W, recommended {recommended}W)"


def check_cooler_socket(cooler: Spec, cpu: Spec) -> Verdict:
    if not cooler.cooler_sockets or not cpu.socket:
        return "warn", "Could not verify cooler socket support. Verify manually."
    if cpu.socket in cooler.cooler_sockets:
        return "pass", f"Cooler supports socket {cpu.socket}"
    supported = "/".join(cooler.cooler_sockets)
    return "fail", f"Cooler mismatch: cooler supports {supported}, CPU uses {cpu.socket}"


def check_cooler_clearance(cooler: Spec, case: Spec) -> Verdict:
    if cooler.cooler_type == "aio":
        return "pass", "AIO cooler, height clearance does not apply"
    if not cooler.cooler_height or not case.max_cpu_cooler_height:
        return "unknown", "Could not verify cooler height"
    if cooler.cooler_height <= case.max_cpu_cooler_height:
        return "pass", (
            f"Cooler ({cooler.cooler_height:g}mm) fits the case (max {case.max_cpu_cooler_height:g}mm)"
        )
    return "fail", (
        f"Cooler too tall: {cooler.cooler_height:g}mm, case supports up to {case.max_cpu_cooler_height:g}mm"
    )


def check_radiator(cooler: Spec, case: Spec) -> Verdict:
    """AIO radiator against case mounts.

    A case that never mentions water cooling fails outright: mounting an
    unsupported radiator is a physical risk, not a data gap.
    """
    if cooler.cooler_type != "aio":
        return "pass", "Not an AIO cooler, radiator support does not apply"
    if case.water_cooling_excluded:
        return "fail", "Case does not support water cooling"
    if not case.mentions_water_cooling:
        return "fail", "Case does not mention water cooling or radiator support"
    if not cooler.aio_size:
        return "warn", "Could not determine the AIO radiator size. Verify manually."
    if not case.supported_radiator_sizes:
        return "warn", "Case mentions water cooling but not the supported radiator sizes. Verify manually."
    max_size = max(case.supported_radiator_sizes)
    if cooler.aio_size <= max_size:
        return "pass", f"{cooler.aio_size}mm radiator supported (case max {max_size}mm)"
    return "fail", f"Radiator too large: AIO is {cooler.aio_size}mm, case supports up to {max_size}mm"


def check_m2_slot(storage: Spec, board: Spec) -> Verdict:
    if storage.storage_connection_type != "M.2":
        return "pass", "SATA drive, no M.2 slot needed"
    if board.m2_slots is None:
        return "unknown", "Could not verify M.2 slots on the motherboard"
    if board.m2_slots >= 1:
        return "pass", f"Motherboard has {board.m2_slots} M.2 slot(s)"
    return "fail", "Motherboard has no M.2 slot for this drive"


# =============================================================================
# RULE CONSTRUCTION
# =============================================================================

def _pair_rule(
    rule_id: str,
    name: str,
    description: str,
    source: Category,
    target: Category,
    check: PairCheck,
    order: tuple[Category, Category],
    unless_selected: Category | None = None,
) -> Rule:
    """Build one direction of a pair check.

    order names the categories in check's argument order. unless_selected
    marks the rule not applicable when that category is in the build.
    """
    affected = (source, target)

    def evaluate(candidate: Candidate, build: Build) -> RuleResult:
        counterpart = build.get(target)
        if counterpart is None:
            return RuleResult(rule_id, "pass", f"No {target.value} selected", affected)
        if unless_selected is not None and unless_selected in build:
            return RuleResult(rule_id, "pass", f"A separate {unless_selected.value} is selected", affected)
        specs = {source: candidate.spec, target: counterpart.spec}
        status, reason = check(specs[order[0]], specs[order[1]])
        return RuleResult(rule_id, status, reason, affected)

    return Rule(rule_id, name, description, source, (target,), evaluate)


def _pair(
    ids: tuple[str, str],
    name: str,
    description: str,
    order: tuple[Category, Category],
    check: PairCheck,
    unless_selected: Category | None = None,
) -> tuple[Rule, Rule]:
    """Both directions of a pair check; ids[0] is sourced from order[0]."""
    first, second = order
    return (
        _pair_rule(ids[0], name, description, first, second, check, order, unless_selected),
        _pair_rule(ids[1], name, description, second, first, check, order, unless_selected),
    )


def _power_rule(rule_id: str, source: Category) -> Rule:
    """Whole-build power budget, evaluated from the PSU, CPU or GPU side."""
    power_categories = (Category.PSU, Category.CPU, Category.GPU)
    targets = tuple(c for c in power_categories if c != source)

    def evaluate(candidate: Candidate, build: Build) -> RuleResult:
        specs = {c: build[c].spec for c in power_categories if c in build}
        specs[source] = candidate.spec
        affected = tuple(c for c in power_categories if c in specs)
        if Category.PSU not in specs:
            return RuleResult(rule_id, "pass", "No psu selected", affected)
        status, reason = check_build_power(
            specs[Category.PSU], specs.get(Category.CPU), specs.get(Category.GPU)
        )
        return RuleResult(rule_id, status, reason, affected)

    return Rule(
        rule_id,
        "Build Power Budget",
        "The PSU must supply enough power for the whole build",
        source,
        targets,
        evaluate,
    )


COMPATIBILITY_RULES: tuple[Rule, ...] = (
    *_pair(
        ("cpu-mobo-socket", "mobo-cpu-socket"),
        "CPU/Motherboard Socket",
        "The CPU socket must match the motherboard socket",
        (Category.CPU, Category.MOTHERBOARD),
        check_socket,
    ),
    *_pair(
        ("mobo-ram-type", "ram-mobo-type"),
        "Motherboard/RAM Type",
        "The RAM type must be supported by the motherboard",
        (Category.MOTHERBOARD, Category.RAM),
        check_memory_type,
    ),
    *_pair(
        ("mobo-case-formfactor", "case-mobo-formfactor"),
        "Motherboard/Case Form Factor",
        "The case must support the motherboard form factor",
        (Category.MOTHERBOARD, Category.CASE),
        check_form_factor,
    ),
    *_pair(
        ("gpu-case-length", "case-gpu-length"),
        "GPU/Case Length",
        "The GPU must fit inside the case",
        (Category.GPU, Category.CASE),
        check_gpu_length,
    ),
    *_pair(
        ("psu-gpu-minimum", "gpu-psu-minimum"),
        "PSU/GPU Minimum Power",
        "The PSU must meet the minimum wattage required by the GPU",
        (Category.PSU, Category.GPU),
        check_psu_gpu_minimum,
    ),
    *_pair(
        ("case-gpu-included-psu", "gpu-case-included-psu"),
        "Bundled PSU/GPU Minimum Power",
        "A PSU bundled with the case must meet the GPU minimum wattage",
        (Category.CASE, Category.GPU),
        check_included_psu_gpu,
        unless_selected=Category.PSU,
    ),
    _power_rule("psu-power", Category.PSU),
    _power_rule("cpu-psu-power", Category.CPU),
    _power_rule("gpu-psu-power", Category.GPU),
    *_pair(
        ("cooler-cpu-socket", "cpu-cooler-socket"),
        "Cooler/CPU Socket",
        "The cooler must support the CPU socket",
        (Category.COOLER, Category.CPU),
        check_cooler_socket,
    ),
    *_pair(
        ("cooler-case-clearance", "case-cooler-clearance"),
        "Cooler/Case Clearance",
        "An air cooler must fit under the case side panel",
        (Category.COOLER, Category.CASE),
        check_cooler_clearance,
    ),
    *_pair(
        ("cooler-case-radiator", "case-cooler-radiator"),
        "AIO/Case Radiator",
        "The case must mount the AIO radiator size",
        (Category.COOLER, Category.CASE),
        check_radiator,
    ),
    *_pair(
        ("storage-mobo-m2", "mobo-storage-m2"),
        "Storage/Motherboard M.2 Slot",
        "An M.2 drive needs an M.2 slot on the motherboard",
        (Category.STORAGE, Category.MOTHERBOARD),
        check_m2_slot,
    ),
)

_RULES_BY_ID = {rule.id: rule for rule in COMPATIBILITY_RULES}


def get_rules_for_category(category: Category) -> list[Rule]:
    """Rules sourced from category, in declaration order."""
    return [rule for rule in COMPATIBILITY_RULES if rule.source_category == category]


def get_rule(rule_id: str) -> Rule | None:
    return _RULES_BY_ID.get(rule_id)

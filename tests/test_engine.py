"""Tests for the compatibility engine: evaluation, filtering, build summary."""

import pytest
from pcbuild_mcp import engine
from pcbuild_mcp.engine import (
    INCLUDED_PSU_ID,
    MISSING_COOLER_MESSAGE,
    compatibility_badge,
    evaluate,
    evaluate_listing,
    filter_by_compatibility,
    included_psu_candidate,
    required_categories,
    summarize_build,
    tag_with_spec,
    with_included_psu,
)
from pcbuild_mcp.models import (
    Candidate,
    Category,
    CompatibilityResult,
    Listing,
    Rule,
    Spec,
)


def _cand(category, **fields):
    return Candidate(listing=Listing(title=f"test {category.value}"), spec=Spec(**fields), category=category)


def _tag(category, title, description="", id=""):
    return tag_with_spec(Listing(title=title, description=description, id=id), category)


B550_BOARD = _tag(Category.MOTHERBOARD, "Mother ASUS ROG STRIX B550-F GAMING Socket AM4 DDR4")
WC_240_CASE = _tag(Category.CASE, "Gabinete Mid Tower ATX", "Soporte Watercooler: Frontal Hasta 240mm")

# A complete, fully compatible build
CPU = _cand(Category.CPU, socket="AM4", tdp=65)
BOARD = _cand(
    Category.MOTHERBOARD, socket="AM4", form_factor="ATX", supported_memory_types=("DDR4",), m2_slots=2
)
RAM = _cand(Category.RAM, memory_type="DDR4")
GPU = _cand(Category.GPU, gpu_length=300, gpu_recommended_psu=650)
CASE = _cand(Category.CASE, supported_form_factors=("ATX",), max_gpu_length=350, max_cpu_cooler_height=165)
PSU = _cand(Category.PSU, psu_wattage=750)
STORAGE = _cand(Category.STORAGE, storage_connection_type="M.2")
COOLER = _cand(Category.COOLER, cooler_sockets=("AM4",), cooler_height=155, cooler_type="air")
FULL_BUILD = {c.category: c for c in (CPU, BOARD, RAM, GPU, CASE, PSU, STORAGE, COOLER)}


class TestScenarios:
    """End to end: raw listings through extraction and rules."""

    def test_matching_socket_allowed(self):
        result = evaluate_listing(
            Listing(title="AMD Ryzen 5 5600X Socket AM4"), Category.CPU, {Category.MOTHERBOARD: B550_BOARD}
        )
        assert result.allowed is True
        assert result.failures == []

    def test_socket_mismatch_rejected(self):
        result = evaluate_listing(
            Listing(title="AMD Ryzen 7 7800X3D Socket AM5"), Category.CPU, {Category.MOTHERBOARD: B550_BOARD}
        )
        assert result.allowed is False
        assert result.failures == ["Socket mismatch: CPU uses AM5, motherboard uses AM4"]

    def test_radiator_too_large_for_case(self):
        result = evaluate_listing(Listing(title="Watercooler AIO 360mm"), Category.COOLER, {Category.CASE: WC_240_CASE})
        assert result.allowed is False
        assert len(result.failures) == 1
        assert "240mm" in result.failures[0]

    def test_small_radiator_fits(self):
        result = evaluate_listing(Listing(title="Watercooler AIO 120mm"), Category.COOLER, {Category.CASE: WC_240_CASE})
        assert result.allowed is True

    def test_spanish_liquid_cooler_fits_radiator_mount(self):
        case = _tag(
            Category.CASE,
            "Gabinete Mid Tower ATX",
            "Tamaño máximo CPU cooler: 165mm. Soporte Watercooler: Frontal Hasta 240mm",
        )
        result = evaluate_listing(
            Listing(title="Cooler Líquido Deepcool LE520 240mm"), Category.COOLER, {Category.CASE: case}
        )
        assert result.allowed is True
        assert result.failures == []

    def test_radiator_size_not_used_as_cooler_clearance(self):
        case = _tag(Category.CASE, "Gabinete ATX", "Soporta water cooler de 360mm")
        result = evaluate_listing(
            Listing(title="Disipador Torre Noctua NH-D15", description="Altura: 165mm"),
            Category.COOLER,
            {Category.CASE: case},
        )
        clearance = next(r for r in result.results if r.rule_id == "cooler-case-clearance")
        assert clearance.status == "unknown"

    def test_m2_drive_on_board_with_pcie_wording(self):
        board = _tag(
            Category.MOTHERBOARD,
            "Motherboard ASUS TUF B550-PLUS ATX DDR4",
            "Slot PCIe 4.0 M.2 con disipador",
        )
        result = evaluate_listing(
            Listing(title="Disco SSD Kingston NV2 1TB M.2 NVMe"), Category.STORAGE, {Category.MOTHERBOARD: board}
        )
        assert result.allowed is True
        assert result.failures == []

    def test_missing_gpu_reported(self):
        cpu = _tag(Category.CPU, "AMD Ryzen 5 5600X Socket AM4")
        summary = summarize_build({Category.CPU: cpu})
        assert summary.is_complete is False
        assert Category.GPU in summary.missing_categories


class TestEvaluate:
    """Per-candidate evaluation."""

    def test_all_rules_run(self):
        intel = _cand(Category.CPU, socket="LGA1700", tdp=125)
        result = evaluate(intel, FULL_BUILD)
        assert [r.rule_id for r in result.results] == ["cpu-mobo-socket", "cpu-psu-power", "cpu-cooler-socket"]
        assert len(result.failures) == 2

    def test_allowed_with_warnings(self):
        board = _cand(Category.MOTHERBOARD, form_factor="ATX")
        result = evaluate(CPU, {Category.MOTHERBOARD: board})
        assert result.allowed is True
        assert result.warnings == ["Could not determine socket compatibility. Verify manually."]

    def test_unknown_flag(self):
        gpu = _cand(Category.GPU, gpu_recommended_psu=650)
        result = evaluate(gpu, {Category.CASE: CASE})
        assert result.allowed is True
        assert result.warnings == []
        assert result.has_unknown_checks is True

    def test_listing_id_carried(self):
        cpu = _tag(Category.CPU, "AMD Ryzen 5 5600", id="MLA1")
        assert evaluate(cpu, {}).listing_id == "MLA1"

    def test_build_not_mutated(self):
        build = dict(FULL_BUILD)
        evaluate(_cand(Category.CPU, socket="AM5"), build)
        summarize_build(build)
        assert build == FULL_BUILD

    def test_raising_rule_reported_unknown(self, monkeypatch):
        def boom(candidate, build):
            raise RuntimeError("broken rule")

        broken = Rule("broken", "Broken", "Always raises", Category.CPU, (Category.MOTHERBOARD,), boom)
        real = engine.get_rules_for_category

        monkeypatch.setattr(engine, "get_rules_for_category", lambda category: [broken, *real(category)])
        result = evaluate(CPU, FULL_BUILD)

        assert result.results[0].status == "unknown"
        assert result.results[0].reason == "Broken check could not run"
        assert result.has_unknown_checks is True
        assert result.allowed is True
        assert len(result.results) == 4


class TestFilter:
    """Ordering: compatible, then warnings, then (optionally) incompatible."""

    BUILD = {
        Category.CASE: _tag(Category.CASE, "Gabinete ATX", "Tamaño máximo VGA: 300mm"),
        Category.PSU: _tag(Category.PSU, "Fuente 650W 80+ Bronze"),
    }
    LISTINGS = [
        Listing(id="a", title="Placa de Video A", description="Longitud: 320mm. Fuente recomendada: 550W"),
        Listing(id="b", title="Placa de Video B", description="Longitud: 280mm"),
        Listing(id="c", title="Placa de Video C", description="Longitud: 280mm. Fuente recomendada: 550W"),
        Listing(id="d", title="Placa de Video D", description="Longitud: 250mm. Fuente recomendada: 600W"),
    ]

    def _ids(self, evaluated):
        return [item.candidate.listing.id for item in evaluated]

    def test_incompatible_dropped(self):
        evaluated = filter_by_compatibility(self.LISTINGS, Category.GPU, self.BUILD)
        assert self._ids(evaluated) == ["c", "d", "b"]

    def test_incompatible_kept_last(self):
        evaluated = filter_by_compatibility(self.LISTINGS, Category.GPU, self.BUILD, include_incompatible=True)
        assert self._ids(evaluated) == ["c", "d", "b", "a"]
        assert evaluated[-1].compatibility.allowed is False

    def test_specs_attached(self):
        evaluated = filter_by_compatibility(self.LISTINGS[:1], Category.GPU, {}, include_incompatible=True)
        assert evaluated[0].candidate.spec.gpu_length == 320
        assert evaluated[0].candidate.category == Category.GPU

    def test_empty(self):
        assert filter_by_compatibility([], Category.GPU, self.BUILD) == []


class TestSummary:
    """Whole-build verdict."""

    def test_complete_and_compatible(self):
        summary = summarize_build(FULL_BUILD)
        assert summary.is_complete is True
        assert summary.is_compatible is True
        assert summary.failures == []
        assert summary.warnings == []
        assert summary.missing_categories == []

    def test_failures_deduplicated(self):
        build = {**FULL_BUILD, Category.CPU: _cand(Category.CPU, socket="AM5", tdp=65)}
        summary = summarize_build(build)
        assert summary.is_compatible is False
        assert summary.failures.count("Socket mismatch: CPU uses AM5, motherboard uses AM4") == 1

    def test_warnings_deduplicated(self):
        build = {**FULL_BUILD, Category.RAM: _cand(Category.RAM)}
        summary = summarize_build(build)
        assert summary.warnings == ["Could not determine memory compatibility. Verify manually."]

    def test_missing_cooler_reported(self):
        build = {c: cand for c, cand in FULL_BUILD.items() if c != Category.COOLER}
        summary = summarize_build(build)
        assert summary.missing_categories == [Category.COOLER]
        assert summary.failures == [MISSING_COOLER_MESSAGE]
        assert summary.is_compatible is True
        assert summary.is_complete is False

    def test_cpu_with_cooler_and_graphics(self):
        cpu = _cand(Category.CPU, socket="AM4", tdp=65, integrated_graphics=True, includes_cooler=True)
        build = {
            c: cand for c, cand in FULL_BUILD.items() if c not in (Category.GPU, Category.COOLER)
        }
        build[Category.CPU] = cpu
        summary = summarize_build(build)
        assert summary.is_complete is True
        assert summary.failures == []

    def test_empty_build(self):
        summary = summarize_build({})
        assert summary.is_complete is False
        assert summary.is_compatible is True
        assert summary.missing_categories == required_categories({})


class TestRequiredCategories:
    """GPU and cooler depend on the CPU."""

    def test_no_cpu(self):
        required = required_categories({})
        assert Category.GPU in required
        assert Category.COOLER in required
        assert required[:6] == [
            Category.CPU, Category.MOTHERBOARD, Category.RAM, Category.STORAGE, Category.PSU, Category.CASE,
        ]

    @pytest.mark.parametrize("igpu,cooler,gpu_needed,cooler_needed", [
        (True, True, False, False),
        (None, True, True, False),
        (True, False, False, True),
        (None, None, True, True),
    ])
    def test_cpu_flags(self, igpu, cooler, gpu_needed, cooler_needed):
        cpu = _cand(Category.CPU, integrated_graphics=igpu, includes_cooler=cooler)
        required = required_categories({Category.CPU: cpu})
        assert (Category.GPU in required) is gpu_needed
        assert (Category.COOLER in required) is cooler_needed


class TestBadge:
    """Four display tiers."""

    @pytest.mark.parametrize("allowed,warnings,unknown,label,color", [
        (False, [], False, "Incompatible", "red"),
        (False, ["w"], True, "Incompatible", "red"),
        (True, ["w"], True, "Verify", "yellow"),
        (True, [], True, "Could not verify", "yellow"),
        (True, [], False, "Compatible", "green"),
    ])
    def test_tiers(self, allowed, warnings, unknown, label, color):
        result = CompatibilityResult(listing_id="", allowed=allowed, warnings=warnings, has_unknown_checks=unknown)
        badge = compatibility_badge(result)
        assert (badge.label, badge.color) == (label, color)


class TestIncludedPsu:
    """A case's bundled PSU can stand in for an unselected PSU."""

    COMBO = _cand(Category.CASE, includes_psu=True, included_psu_wattage=500)

    def test_candidate(self):
        psu = included_psu_candidate(self.COMBO)
        assert psu.category == Category.PSU
        assert psu.listing.id == INCLUDED_PSU_ID
        assert psu.listing.title == "PSU included with case (500W)"
        assert psu.spec.psu_wattage == 500

    def test_no_bundled_psu(self):
        assert included_psu_candidate(CASE) is None
        assert included_psu_candidate(_cand(Category.CASE, includes_psu=True)) is None

    def test_fills_empty_slot(self):
        build = {Category.CASE: self.COMBO, Category.GPU: GPU}
        filled = with_included_psu(build)
        assert filled[Category.PSU].listing.id == INCLUDED_PSU_ID
        assert Category.PSU not in build

    def test_selected_psu_kept(self):
        build = {Category.CASE: self.COMBO, Category.PSU: PSU}
        assert with_included_psu(build)[Category.PSU] is PSU

    def test_bundled_psu_checked_against_gpu(self):
        summary = summarize_build(with_included_psu({Category.CASE: self.COMBO, Category.GPU: GPU}))
        assert summary.is_compatible is False
        assert "PSU too weak: 500W, the GPU requires at least 650W" in summary.failures

"""Tests for the per-toolkit result generators."""

from __future__ import annotations

import random

import pytest

from computelab.jobs import (
    DefaultResultGenerator,
    ResultGenerator,
    ResultGeneratorRegistry,
    RetrosynthesisResults,
)


@pytest.fixture
def registry() -> ResultGeneratorRegistry:
    return ResultGeneratorRegistry.with_builtins()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


class TestRegistry:

    def test_builtin_toolkits(self, registry):
        assert registry.toolkits() == [
            "molecular_docking",
            "molecular_dynamics",
            "quantum_chemistry",
            "retrosynthesis",
            "structure_prediction",
        ]

    def test_unknown_toolkit_uses_default(self, registry, rng):
        assert isinstance(registry.get("crystal_growth"), DefaultResultGenerator)
        assert registry.generate("crystal_growth", rng) == {"message": "Results generated successfully"}

    def test_register_under_alias(self, registry, rng):
        registry.register(RetrosynthesisResults(), toolkit="retro")
        assert "pathways" in registry.generate("retro", rng)

    def test_register_requires_a_name(self, registry):
        class Nameless(ResultGenerator):
            def generate(self, rng):
                return {}

        with pytest.raises(ValueError):
            registry.register(Nameless())

    def test_same_seed_same_payload(self, registry):
        a = registry.generate("quantum_chemistry", random.Random(7))
        b = registry.generate("quantum_chemistry", random.Random(7))
        assert a == b


class TestPayloadShapes:

    def test_molecular_dynamics(self, registry, rng):
        results = registry.generate("molecular_dynamics", rng)
        assert 0 <= results["rmsd_avg"] <= 5
        assert 15 <= results["radius_of_gyration"] <= 25
        assert results["total_energy"] <= -800000
        assert results["plots"] == ["rmsd_plot.png", "rmsf_plot.png", "energy_plot.png"]

    def test_structure_prediction(self, registry, rng):
        results = registry.generate("structure_prediction", rng)
        assert 70 <= results["plddt_score"] <= 95
        assert 0.7 <= results["tm_score"] <= 0.95
        assert results["model_confidence"] in ("high", "medium")
        assert results["structure_file"] == "predicted_structure.pdb"

    def test_quantum_chemistry(self, registry, rng):
        results = registry.generate("quantum_chemistry", rng)
        assert results["homo_energy"] < 0 < results["lumo_energy"]
        assert 20 <= results["optimization_steps"] <= 69

    def test_molecular_docking(self, registry, rng):
        results = registry.generate("molecular_docking", rng)
        assert -12 <= results["binding_affinity"] <= -8
        assert 5 <= results["num_poses"] <= 14
        assert results["binding_site_residues"] == ["ARG123", "ASP45", "TYR67", "PHE89"]

    def test_retrosynthesis_pathways(self, registry, rng):
        results = registry.generate("retrosynthesis", rng)
        pathways = results["pathways"]

        assert 5 <= len(pathways) <= 9
        scores = [p["score"] for p in pathways]
        assert scores == sorted(scores, reverse=True)
        for pathway in pathways:
            assert 2 <= pathway["steps"] <= 5
            assert len(pathway["reactions"]) == pathway["steps"]
            assert [r["step"] for r in pathway["reactions"]] == list(range(1, pathway["steps"] + 1))
            assert len(pathway["starting_materials"]) == min(pathway["steps"], 3)
            assert all(r["type"] in RetrosynthesisResults.REACTION_TYPES for r in pathway["reactions"])

    def test_retrosynthesis_payloads_are_independent(self, registry, rng):
        first = registry.generate("retrosynthesis", rng)
        first["pathways"][0]["starting_materials"][0]["name"] = "Unobtainium"
        assert RetrosynthesisResults.STARTING_MATERIALS[0]["name"] == "Benzene"

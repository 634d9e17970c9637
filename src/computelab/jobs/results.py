"""
Result generators.

A ResultGenerator synthesizes the results payload for one toolkit. The
scheduler calls the registry exactly once per job, at the running ->
completed transition, and treats the output as opaque.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any


class ResultGenerator(ABC):
    """Produces the results payload for a completed job."""

    toolkit: str = ""

    @abstractmethod
    def generate(self, rng: random.Random) -> dict[str, Any]:
        ...


class MolecularDynamicsResults(ResultGenerator):
    toolkit = "molecular_dynamics"

    def generate(self, rng: random.Random) -> dict[str, Any]:
        return {
            "rmsd_avg": round(rng.random() * 5, 2),
            "rmsf_avg": round(rng.random() * 3, 2),
            "radius_of_gyration": round(15 + rng.random() * 10, 2),
            "total_energy": round(-800000 - rng.random() * 100000),
            "potential_energy": round(-900000 - rng.random() * 100000),
            "kinetic_energy": round(100000 + rng.random() * 50000),
            "plots": ["rmsd_plot.png", "rmsf_plot.png", "energy_plot.png"],
        }


class StructurePredictionResults(ResultGenerator):
    toolkit = "structure_prediction"

    def generate(self, rng: random.Random) -> dict[str, Any]:
        return {
            "plddt_score": round(70 + rng.random() * 25, 2),
            "tm_score": round(0.7 + rng.random() * 0.25, 3),
            "model_confidence": "high" if rng.random() > 0.5 else "medium",
            "structure_file": "predicted_structure.pdb",
            "alignment_file": "alignment.a3m",
        }


class QuantumChemistryResults(ResultGenerator):
    toolkit = "quantum_chemistry"

    def generate(self, rng: random.Random) -> dict[str, Any]:
        return {
            "total_energy": round(-1500.234 - rng.random() * 100, 6),
            "homo_energy": round(-0.25 - rng.random() * 0.1, 4),
            "lumo_energy": round(0.05 + rng.random() * 0.1, 4),
            "dipole_moment": round(rng.random() * 5, 3),
            "optimization_steps": rng.randint(20, 69),
        }


class MolecularDockingResults(ResultGenerator):
    toolkit = "molecular_docking"

    def generate(self, rng: random.Random) -> dict[str, Any]:
        return {
            "binding_affinity": round(-8 - rng.random() * 4, 2),
            "rmsd_lb": round(rng.random() * 2, 3),
            "num_poses": rng.randint(5, 14),
            "best_pose": "pose_1.pdbqt",
            "binding_site_residues": ["ARG123", "ASP45", "TYR67", "PHE89"],
        }


class RetrosynthesisResults(ResultGenerator):
    toolkit = "retrosynthesis"

    REACTION_TYPES = (
        "Nucleophilic Substitution",
        "Electrophilic Addition",
        "Grignard Reaction",
        "Aldol Condensation",
        "Friedel-Crafts Acylation",
        "Diels-Alder Cycloaddition",
        "Wittig Reaction",
        "Reduction",
        "Oxidation",
        "Esterification",
    )

    STARTING_MATERIALS = (
        {"name": "Benzene", "smiles": "c1ccccc1", "price": "$15/g", "availability": "commercial"},
        {"name": "Acetone", "smiles": "CC(=O)C", "price": "$8/L", "availability": "commercial"},
        {"name": "Ethanol", "smiles": "CCO", "price": "$12/L", "availability": "commercial"},
        {"name": "Acetic acid", "smiles": "CC(=O)O", "price": "$10/L", "availability": "commercial"},
    )

    def generate(self, rng: random.Random) -> dict[str, Any]:
        return {
            "num_pathways": rng.randint(5, 14),
            "pathways": self._pathways(rng),
            "sa_score": round(rng.random() * 3 + 5, 1),
            "complexity": round(rng.random() * 5 + 2, 1),
            "avg_steps": round(rng.random() * 2 + 3, 1),
            "success_probability": round(rng.random() * 20 + 70),
        }

    def _pathways(self, rng: random.Random) -> list[dict[str, Any]]:
        pathways = []
        for i in range(rng.randint(5, 9)):
            num_steps = rng.randint(2, 5)
            reactions = [
                {
                    "step": step + 1,
                    "type": rng.choice(self.REACTION_TYPES),
                    "yield": f"{round(rng.random() * 30 + 70)}%",
                    "reagents": ["Reagent A", "Reagent B"],
                    "conditions": "RT, 2h",
                }
                for step in range(num_steps)
            ]
            pathways.append({
                "id": i + 1,
                "score": round(85 + rng.random() * 15, 1),
                "steps": num_steps,
                "cost": round(rng.random() * 500 + 100),
                "reactions": reactions,
                "starting_materials": [dict(m) for m in self.STARTING_MATERIALS[:min(num_steps, 3)]],
            })
        pathways.sort(key=lambda p: p["score"], reverse=True)
        return pathways


class DefaultResultGenerator(ResultGenerator):
    """Fallback for toolkits without a dedicated generator."""

    def generate(self, rng: random.Random) -> dict[str, Any]:
        return {"message": "Results generated successfully"}


class ResultGeneratorRegistry:
    """Lookup table from toolkit identifier to ResultGenerator."""

    def __init__(
        self,
        generators: list[ResultGenerator] | None = None,
        default: ResultGenerator | None = None,
    ):
        self._generators: dict[str, ResultGenerator] = {}
        self._default = default or DefaultResultGenerator()
        for generator in generators or []:
            self.register(generator)

    @classmethod
    def with_builtins(cls) -> ResultGeneratorRegistry:
        return cls([
            MolecularDynamicsResults(),
            StructurePredictionResults(),
            QuantumChemistryResults(),
            MolecularDockingResults(),
            RetrosynthesisResults(),
        ])

    def register(self, generator: ResultGenerator, toolkit: str | None = None) -> None:
        name = toolkit or generator.toolkit
        if not name:
            raise ValueError("ResultGenerator needs a toolkit name")
        self._generators[name] = generator

    def get(self, toolkit: str) -> ResultGenerator:
        return self._generators.get(toolkit, self._default)

    def toolkits(self) -> list[str]:
        return sorted(self._generators)

    def generate(self, toolkit: str, rng: random.Random) -> dict[str, Any]:
        return self.get(toolkit).generate(rng)


__all__ = [
    "ResultGenerator",
    "ResultGeneratorRegistry",
    "DefaultResultGenerator",
    "MolecularDynamicsResults",
    "StructurePredictionResults",
    "QuantumChemistryResults",
    "MolecularDockingResults",
    "RetrosynthesisResults",
]

"""Shared fixtures: a small synthetic taxonomy in the data-feed layout."""

import copy
import json

import pytest

from coop_assessment.config import reset_config
from coop_assessment.taxonomy import build_taxonomy

MARKETING_DIGITAL = "Diagnostic Marketing - Digital"
OPS_LOGISTIQUE = "Diagnostic Opérationnel - Logistique"
STRAT_GOUVERNANCE = "Diagnostic Stratégique - Gouvernance"
STRAT_VISION = "Diagnostic Stratégique - Vision"
FINANCE = "Diagnostic Financier - Comptabilité"

TAXONOMY_DATA = {
    "Questions": [
        {MARKETING_DIGITAL: [
            {"id": "m1", "question": "Présence sur les réseaux sociaux ?", "answer": "1-5"},
            {"id": "m2", "question": "Vente en ligne ?", "answer": "1-5"},
        ]},
        {OPS_LOGISTIQUE: [
            {"id": "o1", "question": "Suivi des stocks ?", "answer": "1-5"},
            {"id": "o2", "question": "Délais respectés ?"},
        ]},
        {STRAT_GOUVERNANCE: [
            {"id": "s1", "question": "Assemblée générale annuelle ?", "answer": "1-5"},
        ]},
        {STRAT_VISION: [
            {"id": "s2", "question": "Plan d'action à trois ans ?", "answer": "1-5"},
        ]},
        {FINANCE: [
            {"id": "f1", "question": "Comptabilité régulière ?", "answer": "1-5"},
        ]},
    ],
    "Scales": {
        "GeneralInterpretation": [
            {"range": "1.00 - 1.59", "interpretation": "Très faible"},
            {"range": "1.60 - 2.59", "interpretation": "Faible"},
            {"range": "2.60 - 3.59", "interpretation": "Moyen"},
            {"range": "3.60 - 4.59", "interpretation": "Bon"},
            {"range": "4.60 - 5.00", "interpretation": "Très bon"},
        ],
        "Axes": {
            "Marketing": {
                "recommendations": ["Marketing low", "Marketing mid", "Marketing high"],
            },
            "Opérationnel": {
                "recommendations": ["Ops low", "Ops mid", "Ops high"],
            },
            "Stratégique": {
                "recommendations_summary": [
                    "Renforcer la Gouvernance avec des assemblées régulières.",
                    "Structurer les ressources humaines.",
                ],
            },
        },
    },
}


@pytest.fixture(autouse=True)
def _default_config():
    """Every test starts and ends on the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def taxonomy_data():
    """A fresh, mutable copy of the synthetic taxonomy document."""
    return copy.deepcopy(TAXONOMY_DATA)


@pytest.fixture
def taxonomy(taxonomy_data):
    return build_taxonomy(taxonomy_data, source="synthetic")


@pytest.fixture
def taxonomy_file(tmp_path, taxonomy_data):
    path = tmp_path / "taxonomy.json"
    path.write_text(json.dumps(taxonomy_data, ensure_ascii=False), encoding="utf-8")
    return path

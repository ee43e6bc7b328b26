"""Shared fixtures: a small in-memory reference table with round numbers."""

import copy

import pytest

from retirement_sim_ca.reference import ReferenceData

SIMPLE_REFERENCE = {
    "rrif_minimums": {str(age): 0.05 for age in range(55, 95)} | {"71": 0.0528, "95": 0.20},
    "tax_years": [
        {
            "year": 2025,
            "federal": {
                "basic_personal_amount": 1000.0,
                "age_amount": {"max_credit": 2000.0, "income_threshold": 30000.0, "reduction_rate": 0.15},
                "brackets": [{"limit": 10000.0, "rate": 0.10}, {"rate": 0.20}],
            },
            "provinces": {
                "ON": {
                    "basic_personal_amount": 1000.0,
                    "brackets": [{"limit": 10000.0, "rate": 0.05}, {"rate": 0.10}],
                },
            },
            "benefits": {
                "CPP": {"max_monthly": 1200.0, "ympe": 60000.0},
                "OAS": {"max_monthly": 700.0, "clawback_threshold": 50000.0, "clawback_rate": 0.15},
            },
        },
    ],
}


@pytest.fixture
def simple_provider() -> ReferenceData:
    return ReferenceData.from_dict(SIMPLE_REFERENCE)


@pytest.fixture
def simple_reference_raw() -> dict:
    """Editable copy of SIMPLE_REFERENCE."""
    return copy.deepcopy(SIMPLE_REFERENCE)

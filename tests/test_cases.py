"""
Unit tests for case geometry.
"""

import pytest

from diffusion_sim import CaseConfig, InvalidCase
from diffusion_sim.cases import DOMAIN_WIDTH


def test_bounds_for_source_cases():
    """Cases 1 and 3 share the positive half-domain and window."""
    for case in (CaseConfig.SEMI_INFINITE_SOURCE, CaseConfig.THIN_FILM_SEMI_INFINITE):
        assert case.domain_min == 0.0
        assert case.domain_max == 100.0
        assert case.visible_min == 0.0
        assert case.visible_max == 10.0


def test_bounds_for_planar_case():
    case = CaseConfig.PLANAR_SOURCE_INFINITE
    assert (case.domain_min, case.domain_max) == (-50.0, 50.0)
    assert (case.visible_min, case.visible_max) == (-5.0, 5.0)
    bounds = case.bounds()
    assert bounds.x_min == -50.0
    assert bounds.x_max == 50.0
    assert bounds.width == DOMAIN_WIDTH


def test_from_value_accepts_ints_and_members():
    assert CaseConfig.from_value(2) is CaseConfig.PLANAR_SOURCE_INFINITE
    assert CaseConfig.from_value("3") is CaseConfig.THIN_FILM_SEMI_INFINITE
    assert CaseConfig.from_value(CaseConfig.SEMI_INFINITE_SOURCE) is CaseConfig.SEMI_INFINITE_SOURCE


@pytest.mark.parametrize("bad", [0, 4, -1, "x", None, 2.5, 3.9, "2.5", float("nan"), float("inf")])
def test_from_value_rejects_unknown_cases(bad):
    with pytest.raises(InvalidCase):
        CaseConfig.from_value(bad)


def test_labels():
    assert CaseConfig.SEMI_INFINITE_SOURCE.analytical_label == "Analytical erfc"
    assert CaseConfig.PLANAR_SOURCE_INFINITE.analytical_label == "Analytical Gaussian"
    assert CaseConfig.THIN_FILM_SEMI_INFINITE.title.startswith("Thin Film")


def test_from_value_accepts_whole_floats():
    assert CaseConfig.from_value(2.0) is CaseConfig.PLANAR_SOURCE_INFINITE

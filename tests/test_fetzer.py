"""
Tests for the Fetzer coefficient decomposition.
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from gsfm.config import FetzerConfig
from gsfm.estimators.fetzer import fetzer_d, fetzer_ds, is_degenerate_geometry
from gsfm.geometry import geometry_matrix


def kruppa_terms(d, f0, f1):
    """The four terms of the bilinear form encoded by a coefficient vector."""
    return np.array([f0**2 * f1**2 * d[0], f0**2 * d[1], f1**2 * d[2], d[3]])


class TestFetzerD:

    def test_antisymmetric_in_u_v(self):
        rng = np.random.default_rng(3)
        ai, bi, aj, bj = (rng.normal(size=3) for _ in range(4))
        assert_allclose(fetzer_d(ai, bi, aj, bj, 0, 2), -fetzer_d(ai, bi, aj, bj, 2, 0))
        assert_allclose(fetzer_d(ai, bi, aj, bj, 1, 1), np.zeros(4))

    def test_components(self):
        ai = np.array([1.0, 2.0, 3.0])
        bi = np.array([4.0, 5.0, 6.0])
        aj = np.array([7.0, 8.0, 9.0])
        bj = np.array([10.0, 11.0, 12.0])
        d = fetzer_d(ai, bi, aj, bj, 1, 0)
        assert_allclose(d, [
            2 * 7 - 1 * 8,
            2 * 10 - 1 * 11,
            5 * 7 - 4 * 8,
            5 * 10 - 4 * 11,
        ])


class TestFetzerDs:

    def test_constraints_vanish_at_true_focal_lengths(self, two_view):
        G = geometry_matrix(two_view.F, two_view.pp_i, two_view.pp_j)
        ds = fetzer_ds(G)
        assert len(ds) == 3
        for d in ds:
            assert d.shape == (4,)
            assert np.isfinite(d).all()
            terms = kruppa_terms(d, two_view.f_i, two_view.f_j)
            assert abs(terms.sum()) < 1e-8 * np.abs(terms).sum()

    def test_wrong_focal_lengths_violate_constraints(self, two_view):
        G = geometry_matrix(two_view.F, two_view.pp_i, two_view.pp_j)
        d_01, _, d_12 = fetzer_ds(G)
        for d in (d_01, d_12):
            terms = kruppa_terms(d, 1.3 * two_view.f_i, 0.8 * two_view.f_j)
            assert abs(terms.sum()) > 1e-3 * np.abs(terms).sum()

    def test_quadratic_in_matrix_scale(self, two_view):
        G = geometry_matrix(two_view.F, two_view.pp_i, two_view.pp_j)
        # Singular vectors are only defined up to sign, so compare magnitudes
        for d, d_scaled in zip(fetzer_ds(G), fetzer_ds(3.0 * G)):
            assert_allclose(np.abs(d_scaled), 9.0 * np.abs(d),
                            rtol=1e-6, atol=1e-12 * np.abs(d).max())

    def test_shape_check(self):
        with pytest.raises(ValueError):
            fetzer_ds(np.zeros((2, 3)))


class TestDegenerateGeometry:

    def test_zero_matrix_does_not_crash(self, caplog):
        with caplog.at_level(logging.WARNING, logger="gsfm.estimators.fetzer"):
            ds = fetzer_ds(np.zeros((3, 3)))

        # All coefficients collapse to zero: finite, but carrying no information
        for d in ds:
            assert np.isfinite(d).all()
            assert_allclose(d, np.zeros(4))
        assert "Degenerate two-view geometry" in caplog.text

    def test_rank_one_matrix_is_flagged(self, caplog):
        G = np.outer([1.0, 2.0, 3.0], [0.5, -1.0, 2.0])
        with caplog.at_level(logging.WARNING, logger="gsfm.estimators.fetzer"):
            ds = fetzer_ds(G)
        assert "Degenerate" in caplog.text
        for d in ds:
            assert not np.isinf(d).any()

    def test_well_conditioned_is_not_flagged(self, two_view, caplog):
        G = geometry_matrix(two_view.F, two_view.pp_i, two_view.pp_j)
        with caplog.at_level(logging.WARNING, logger="gsfm.estimators.fetzer"):
            fetzer_ds(G)
        assert not [r for r in caplog.records if r.name == "gsfm.estimators.fetzer"]

    def test_is_degenerate_geometry(self):
        assert is_degenerate_geometry(np.array([0.0, 0.0, 0.0]))
        assert is_degenerate_geometry(np.array([1.0, 1e-14, 0.0]))
        assert is_degenerate_geometry(np.array([np.nan, 1.0, 0.0]))
        assert not is_degenerate_geometry(np.array([1.0, 0.5, 0.0]))

        loose = FetzerConfig(rel_singular_tol=0.6)
        assert is_degenerate_geometry(np.array([1.0, 0.5, 0.0]), loose)

from math import factorial

import numpy as np
import pytest

import empft as em

pytestmark = pytest.mark.unit


@pytest.mark.parametrize('order', [1, 2, 5, 9, 16])
def test_weights_sum_to_one(order):
    DPTs = em.gaus_quad_tri(order)
    assert DPTs.shape[0] == 4
    assert np.sum(DPTs[0]) == pytest.approx(1.0, abs=1e-14)
    assert np.allclose(np.sum(DPTs[1:], axis=0), 1.0)
    assert np.all(DPTs[1:] >= -1e-14)

@pytest.mark.parametrize('order', [2, 4, 7, 9, 12])
def test_monomials_integrated_exactly(order):
    DPTs = em.gaus_quad_tri(order)
    s, t = DPTs[2], DPTs[3]
    for p in range(order + 1):
        for q in range(order + 1 - p):
            # reference triangle area is 1/2
            numeric = 0.5*np.sum(DPTs[0]*s**p*t**q)
            exact = factorial(p)*factorial(q)/factorial(p + q + 2)
            assert numeric == pytest.approx(exact, rel=1e-12, abs=1e-15)

@pytest.mark.parametrize('order', [4, 9, 16])
def test_graded_rule_weights_and_nodes(order):
    DPTs = em.graded_quad_tri(order)
    assert DPTs.shape[0] == 4
    assert np.sum(DPTs[0]) == pytest.approx(1.0, abs=1e-13)
    assert np.allclose(np.sum(DPTs[1:], axis=0), 1.0)
    # nodes cluster towards the boundary but never reach it
    assert np.all(DPTs[1:] > 0.0)
    assert np.min(DPTs[1:]) < 1e-3

def test_graded_rule_integrates_low_degree_polynomials():
    DPTs = em.graded_quad_tri(16)
    s, t = DPTs[2], DPTs[3]
    for p in range(3):
        for q in range(3 - p):
            numeric = 0.5*np.sum(DPTs[0]*s**p*t**q)
            exact = factorial(p)*factorial(q)/factorial(p + q + 2)
            assert numeric == pytest.approx(exact, rel=1e-12, abs=1e-15)

def test_graded_rule_handles_edge_logarithm():
    # mean of log(y) over the reference triangle (0,0), (1,0), (0,1) is -3/2
    exact = -1.5
    graded = em.graded_quad_tri(16)
    plain = em.gaus_quad_tri(16)
    graded_error = abs(np.sum(graded[0]*np.log(graded[3])) - exact)
    plain_error = abs(np.sum(plain[0]*np.log(plain[3])) - exact)
    assert graded_error < 1e-4
    assert graded_error < 0.1*plain_error

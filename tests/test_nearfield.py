import numpy as np
import pytest

import empft as em

pytestmark = pytest.mark.unit

V = np.ascontiguousarray(np.array([[0.0, 1.0, 0.2],
                                   [0.0, 0.1, 0.9],
                                   [0.0, 0.0, 0.3]]))
Q = V[:, 0].copy()


def direct_potentials(V, q, x, k, order=30):
    DPTs = em.gaus_quad_tri(order)
    area = 0.5*np.linalg.norm(np.cross(V[:, 1] - V[:, 0], V[:, 2] - V[:, 0]))
    X = V @ DPTs[1:]
    w = area*DPTs[0]
    r = x[:, None] - X
    R = np.linalg.norm(r, axis=0)
    G = np.exp(1j*k*R)/(4*np.pi*R)
    dG = G*(1j*k - 1/R)/R*r
    g = (X - q[:, None])/(2*area)
    p = np.sum(w*G)/area
    a = (g*G) @ w
    dp = dG @ w/area
    da = np.einsum('n,in,jn->ij', w, dG, g)
    return p, a, dp, da


@pytest.mark.parametrize('k', [1.0, 2.0 + 0.3j])
@pytest.mark.parametrize('x', [(0.3, 0.2, 2.5), (-2.0, 1.0, 0.5)])
def test_potentials_match_direct_cubature(k, x):
    x = np.array(x)
    p, a, dp, da = em.SubtractedPotentials(order=9).potentials(V, Q, x[:, None], k)
    p_ref, a_ref, dp_ref, da_ref = direct_potentials(V, Q, x, k)
    assert p[0] == pytest.approx(p_ref, rel=1e-8)
    assert np.allclose(a[:, 0], a_ref, rtol=1e-8, atol=1e-12)
    assert np.allclose(dp[:, 0], dp_ref, rtol=1e-8, atol=1e-12)
    assert np.allclose(da[:, :, 0], da_ref, rtol=1e-8, atol=1e-12)

def test_potentials_finite_on_panel():
    X = V @ np.array([[1/3, 0.2], [1/3, 0.3], [1/3, 0.5]])
    p, a, dp, da = em.SubtractedPotentials().potentials(V, Q, X, 1.0)
    for arr in (p, a, dp, da):
        assert np.all(np.isfinite(arr))

def test_vector_potential_jacobian_matches_finite_differences():
    x = np.array([0.4, 0.3, 0.25])
    h = 1e-5
    pot = em.SubtractedPotentials(order=9)
    _, _, _, da = pot.potentials(V, Q, x[:, None], 1.3)
    X = np.stack([x + h*e for e in np.eye(3)] + [x - h*e for e in np.eye(3)], axis=1)
    _, aX, _, _ = pot.potentials(V, Q, X, 1.3)
    fd = np.array([[(aX[j, i] - aX[j, 3 + i])/(2*h) for j in range(3)] for i in range(3)])
    assert np.allclose(da[:, :, 0], fd, rtol=1e-5, atol=1e-8)

def test_reduced_edge_fields_are_signed_sum(octahedron):
    assembler = em.NearFieldAssembler(em.SubtractedPotentials(order=5))
    X = np.array([[2.0, 0.1], [0.3, 2.0], [0.5, -1.5]])
    e, h = assembler.reduced_edge_fields(octahedron, 3, X, 1.0)
    ep, hp = assembler.reduced_fields(octahedron, 3, 1, X, 1.0)
    em_, hm = assembler.reduced_fields(octahedron, 3, -1, X, 1.0)
    assert np.allclose(e, ep - em_)
    assert np.allclose(h, hp - hm)

def test_half_function_has_no_negative_panel(plate):
    surf = em.RWGSurface(plate.vertices, np.array([[0, 1, 2], [0, 2, 3]]), half_rwg=True)
    half = next(i for i, edge in enumerate(surf.edges) if edge.is_half)
    e, h = em.NearFieldAssembler().reduced_fields(surf, half, -1, np.array([2.0, 2.0, 2.0]), 1.0)
    assert np.all(e == 0) and np.all(h == 0)

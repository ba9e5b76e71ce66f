import numpy as np
import pytest

import empft as em
from conftest import octahedron_mesh, random_kn, fit_tangential_field

pytestmark = pytest.mark.unit


@pytest.fixture
def geometry(octahedron, dielectric):
    return em.RWGGeometry([octahedron], [em.VACUUM, dielectric])


def test_by_edge_sums_to_total(geometry, rng):
    NE = geometry.surfaces[0].num_edges
    kn = random_kn(rng, 2*NE)
    by_edge = np.ones((7, NE))
    result = em.get_opft(geometry, 0, 1.0, kn=kn, by_edge=by_edge)
    totals = result.as_array()
    assert np.allclose(by_edge.sum(axis=1), totals[[0, 2, 3, 4, 5, 6, 7]], rtol=1e-12, atol=1e-12)

def test_uniform_field_absorbs_no_power(geometry):
    surface = geometry.surfaces[0]
    E0 = np.array([1.0, 0.5j, 0.2 - 0.1j])*em.ZVAC
    H0 = np.array([0.3, -1.0, 0.4j])
    k_coef = fit_tangential_field(surface, lambda n: np.cross(n, H0))
    n_coef = fit_tangential_field(surface, lambda n: -np.cross(n, E0))

    kn = np.zeros((2*surface.num_edges,), dtype=np.complex128)
    kn[0::2] = k_coef
    kn[1::2] = -n_coef/em.ZVAC

    by_edge = np.zeros((7, surface.num_edges))
    result = em.get_opft(geometry, 0, 1.0, kn=kn, by_edge=by_edge)
    scale = np.sum(np.abs(by_edge[0]))
    assert scale > 1e-3
    assert abs(result.p_abs) < 1e-10*scale

def test_translation_shifts_torque(dielectric, rng):
    surface = em.RWGSurface(*octahedron_mesh())
    geo = em.RWGGeometry([surface], [em.VACUUM, dielectric])
    kn = random_kn(rng, 2*surface.num_edges)
    before = em.get_opft(geo, 0, 1.3, kn=kn)

    dx = np.array([0.5, -1.0, 2.0])
    surface.translate(dx, move_origin=False)
    after = em.get_opft(geo, 0, 1.3, kn=kn)
    assert after.p_abs == pytest.approx(before.p_abs, rel=1e-10, abs=1e-12)
    assert np.allclose(after.force, before.force, rtol=1e-10, atol=1e-12)
    assert np.allclose(after.torque, before.torque + np.cross(dx, before.force), rtol=1e-9, atol=1e-10)

    surface.translate(dx, move_origin=True)
    moved = em.get_opft(geo, 0, 1.3, kn=kn)
    assert np.allclose(moved.torque, after.torque, rtol=1e-9, atol=1e-10)

def test_rytov_matrix_matches_vector(geometry, rng):
    NE = geometry.surfaces[0].num_edges
    kn = random_kn(rng, 2*NE)
    c = kn.copy()
    c[1::2] *= -em.ZVAC
    rytov = np.outer(c, np.conj(c))
    from_vector = em.get_opft(geometry, 0, 1.0, kn=kn)
    from_rytov = em.get_opft(geometry, 0, 1.0, rytov=rytov)
    assert np.allclose(from_vector.as_array(), from_rytov.as_array(), rtol=1e-12, atol=1e-9)

def test_pec_surface_absorbs_nothing(rng):
    surface = em.RWGSurface(*octahedron_mesh(), region_indices=(0, -1))
    geo = em.RWGGeometry([surface], [em.VACUUM])
    kn = random_kn(rng, surface.num_edges)
    result = em.get_opft(geo, 0, 1.0, kn=kn)
    assert result.p_abs == 0.0
    assert np.linalg.norm(result.force) > 0

def test_scattered_power_from_extinction(geometry, rng):
    NE = geometry.surfaces[0].num_edges
    kn = random_kn(rng, 2*NE)
    rhs = random_kn(rng, 2*NE)
    result = em.get_opft(geometry, 0, 1.0, kn=kn, rhs=rhs)
    extinction = em.get_extinction(geometry, 0, kn, rhs)
    assert result.has_extinction
    assert result.p_scat == pytest.approx(extinction - result.p_abs)
    assert result.p_ext == pytest.approx(extinction)
    assert result.as_array()[1] == result.p_scat

def test_extinction_missing(geometry, rng):
    result = em.get_opft(geometry, 0, 1.0, kn=random_kn(rng, 24))
    assert result.p_scat == 0.0
    with pytest.raises(ValueError):
        result.p_ext

def test_invalid_surface_returns_zeros(geometry, rng):
    result = em.get_opft(geometry, 3, 1.0, kn=random_kn(rng, 24))
    assert np.all(result.as_array() == 0.0)
    assert result.as_array().shape == (8,)

def test_missing_currents_raise(geometry):
    with pytest.raises(ValueError):
        em.get_opft(geometry, 0, 1.0)

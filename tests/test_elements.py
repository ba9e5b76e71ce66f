import numpy as np
import pytest

import empft as em
from conftest import skew_plate_mesh


@pytest.fixture
def plate_geometry(plate):
    return em.RWGGeometry([plate], [em.VACUUM, em.VACUUM])


@pytest.mark.unit
def test_elements_add():
    a = em.EPPFTElements(be=1.0 + 1j, divbe=np.array([1, 2, 3], dtype=complex))
    b = em.EPPFTElements(be=2.0, bh=1j, divbe=np.array([1, 0, 0], dtype=complex))
    c = a + b
    assert c.be == 3.0 + 1j
    assert c.bh == 1j
    assert np.allclose(c.divbe, [2, 2, 3])
    assert np.allclose(c.rxbxh, 0)

@pytest.mark.unit
def test_regular_quantities_do_not_depend_on_singular_handling(plate_geometry):
    k = 1.0
    semi = em.EPPFTElementBuilder(plate_geometry, force_cubature=False).elements(0, 0, 0, 0, k, 7)
    cub = em.EPPFTElementBuilder(plate_geometry, force_cubature=True).elements(0, 0, 0, 0, k, 7)
    assert semi.be == cub.be
    assert semi.bh == cub.bh
    assert np.array_equal(semi.bxh, cub.bxh)
    assert np.array_equal(semi.rxbxe, cub.rxbxe)

@pytest.mark.slow
def test_nearly_coincident_cubature_converges_to_semi_analytic(skew_plate):
    lifted = em.RWGSurface(*skew_plate_mesh(), name='lifted')
    lifted.translate([0.0, 0.0, 1e-3])
    geo = em.RWGGeometry([skew_plate, lifted], [em.VACUUM, em.VACUUM])
    k = 1.0

    reference = em.EPPFTElementBuilder(geo).elements(0, 0, 0, 0, k, 9)
    forced = em.EPPFTElementBuilder(geo, force_cubature=True)

    # the normal field components jump across the panel, compare the in-plane ones
    def tangential(el):
        return np.concatenate([el.divbe[:2], el.bxe[2:]])

    target = tangential(reference)
    errors = [np.linalg.norm(tangential(forced.elements(1, 0, 0, 0, k, order)) - target) for order in (5, 15, 41)]
    scale = np.linalg.norm(target)
    assert scale > 0
    assert errors[2] < errors[1] < errors[0]
    assert errors[2] < 0.05*scale

@pytest.mark.unit
def test_different_surfaces_use_cubature_only(plate, tetrahedron):
    tetrahedron.translate([0.0, 0.0, 2.0])
    geo = em.RWGGeometry([plate, tetrahedron], [em.VACUUM, em.VACUUM])
    semi = em.EPPFTElementBuilder(geo).elements(1, 0, 2, 0, 1.0, 5)
    cub = em.EPPFTElementBuilder(geo, force_cubature=True).elements(1, 0, 2, 0, 1.0, 5)
    assert np.array_equal(semi.divbe, cub.divbe)

import numpy as np
import pytest

import empft as em


def octahedron_mesh(scale: float = 1.0) -> tuple[np.ndarray, np.ndarray]:
    vertices = scale*np.array([[1, 0, 0], [-1, 0, 0],
                               [0, 1, 0], [0, -1, 0],
                               [0, 0, 1], [0, 0, -1]], dtype=np.float64)
    def vid(axis, s):
        return 2*axis + (0 if s > 0 else 1)
    panels = []
    for sx in (1, -1):
        for sy in (1, -1):
            for sz in (1, -1):
                A, B, C = vid(0, sx), vid(1, sy), vid(2, sz)
                if sx*sy*sz > 0:
                    panels.append((A, B, C))
                else:
                    panels.append((A, C, B))
    return vertices, np.array(panels, dtype=np.int64)

def tetrahedron_mesh() -> tuple[np.ndarray, np.ndarray]:
    vertices = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=np.float64)
    panels = np.array([[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]], dtype=np.int64)
    return vertices, panels

def plate_mesh() -> tuple[np.ndarray, np.ndarray]:
    vertices = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]], dtype=np.float64)
    panels = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int64)
    return vertices, panels

def skew_plate_mesh() -> tuple[np.ndarray, np.ndarray]:
    # no mirror or point symmetry, so the singular elements of the diagonal edge do not vanish
    vertices = np.array([[0, 0, 0], [1.1, 0.1, 0], [1.3, 1.0, 0], [0.1, 1.2, 0]], dtype=np.float64)
    panels = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int64)
    return vertices, panels


@pytest.fixture
def octahedron() -> em.RWGSurface:
    return em.RWGSurface(*octahedron_mesh(), name='octahedron')

@pytest.fixture
def tetrahedron() -> em.RWGSurface:
    return em.RWGSurface(*tetrahedron_mesh(), name='tetrahedron')

@pytest.fixture
def plate() -> em.RWGSurface:
    return em.RWGSurface(*plate_mesh(), name='plate')

@pytest.fixture
def skew_plate() -> em.RWGSurface:
    return em.RWGSurface(*skew_plate_mesh(), name='skew plate')

@pytest.fixture
def dielectric() -> em.Material:
    return em.Material(er=4.0, name='dielectric')

@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)

@pytest.fixture
def fast_settings() -> em.Settings:
    return em.Settings(eppft_order=5, singular_order=8, potential_order=5, num_threads=2)


def random_kn(rng: np.random.Generator, n: int) -> np.ndarray:
    return rng.normal(size=n) + 1j*rng.normal(size=n)

def fit_tangential_field(surface: em.RWGSurface, field_of_normal) -> np.ndarray:
    """Projects a facewise constant tangential field onto the RWG functions of a surface.

    field_of_normal(n) returns the constant vector on a panel with normal n.
    """
    NE = surface.num_edges
    G = np.zeros((NE, NE), dtype=np.float64)
    for a in range(NE):
        for b in em.overlapping_edges(surface, a):
            G[a, b] = em.get_overlap(surface, a, b)[0]

    rhs = np.zeros((NE,), dtype=np.complex128)
    for a, edge in enumerate(surface.edges):
        for ip, iq, sgn in ((edge.ipanel_p, edge.iqp, 1.0), (edge.ipanel_m, edge.iqm, -1.0)):
            if ip < 0:
                continue
            panel = surface.panels[ip]
            c = field_of_normal(panel.zhat)
            rhs[a] += sgn*0.5*edge.length*np.dot(panel.centroid - surface.vertices[iq], c)
    return np.linalg.solve(G, rhs)

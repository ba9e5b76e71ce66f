# empft is an open source Python based power, force and torque module for BEM solutions.
# Copyright (C) 2025  Robert Fennis.

# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; either version 2
# of the License, or (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program; if not, see
# <https://www.gnu.org/licenses/>.


from dataclasses import dataclass
from numba import njit, f8, i8
import numpy as np

from .optimized import cross, dot
from ..mesh import RWGSurface

NOVERLAPS = 20

############################################################
#                 SINGLE PANEL OVERLAP KERNEL              #
############################################################

@njit(f8[:](f8[:,:], i8, f8[:], f8[:], f8, f8[:], f8[:]), cache=True, nogil=True)
def panel_overlaps(V: np.ndarray, iqa: int, Qb: np.ndarray, Z: np.ndarray, prefac: float, X0: np.ndarray, out: np.ndarray) -> np.ndarray:
    ''' Adds the closed form overlap integrals of two RWG half functions on one panel to out.

    Overlap indexing:
    -----------------
    0 = overlap, 1 = cross
    2, 5, 8 = bullet x, y, z
    3, 6, 9 = nabla nabla x, y, z
    4, 7, 10 = times nabla x, y, z
    11..19 = the same nine with an extra (r - X0) x for the torque

    V holds the panel vertices as columns, iqa is the local index of the free vertex of
    function a, Qb the free vertex of function b and prefac = sign*La*Lb/(2A).
    '''
    Qa = V[:,iqa].copy()
    L1 = V[:,(iqa+1) % 3] - Qa
    L2 = V[:,(iqa+2) % 3] - V[:,(iqa+1) % 3]
    DQ = Qa - Qb
    QmX = Qa - X0

    L1dL1 = dot(L1, L1)
    L1dL2 = dot(L1, L2)
    L2dL2 = dot(L2, L2)
    L1dDQ = dot(L1, DQ)
    L2dDQ = dot(L2, DQ)

    bullet_fac_1 = (L1dL1 + L1dL2)/4.0 + L1dDQ/3.0 + L2dL2/12.0 + L2dDQ/6.0
    bullet_fac_2 = (L1dL1 + L1dL2)/5.0 + L1dDQ/4.0 + L2dL2/15.0 + L2dDQ/8.0
    bullet_fac_3 = L1dL1/10.0 + 2.0*L1dL2/15.0 + L1dDQ/8.0 + L2dL2/20.0 + L2dDQ/12.0
    nabla_cross_fac = (L1dL1 + L1dL2)/2.0 + L2dL2/6.0

    ZxDQ = cross(Z, DQ)
    ZxL1 = cross(Z, L1)
    ZxL2 = cross(Z, L2)
    ZxQ = cross(QmX, Z)*(-1.0)
    QxZxL1 = cross(QmX, ZxL1)
    QxZxL2 = cross(QmX, ZxL2)

    times_fac = (2.0*dot(L1, ZxDQ) + dot(L2, ZxDQ))/6.0

    out[0] += prefac*bullet_fac_1
    out[1] += prefac*times_fac

    for i in range(3):
        out[2 + 3*i] += prefac*Z[i]*bullet_fac_1
        out[3 + 3*i] += prefac*Z[i]*2.0
        out[4 + 3*i] += prefac*(2.0*ZxL1[i] + ZxL2[i])/3.0

        out[11 + 3*i] -= prefac*(ZxQ[i]*bullet_fac_1 + ZxL1[i]*bullet_fac_2 + ZxL2[i]*bullet_fac_3)
        out[12 + 3*i] -= prefac*(2.0*ZxQ[i] + 4.0*ZxL1[i]/3.0 + 2.0*ZxL2[i]/3.0)
        out[13 + 3*i] += prefac*(Z[i]*nabla_cross_fac + 2.0*QxZxL1[i]/3.0 + QxZxL2[i]/3.0)
    return out


############################################################
#                     OVERLAP INTEGRALS                    #
############################################################

@dataclass
class OverlapIntegrals:
    """The twenty overlap integrals of two RWG functions.

    bullet = int n fa.fb
    nabla_nabla = int n (div fa)(div fb)
    times_nabla = int (n x fa)(div fb)
    The rx_ variants carry an extra (r - X0) x in front of the vector quantity.
    """
    overlap: float
    cross: float
    bullet: np.ndarray
    nabla_nabla: np.ndarray
    times_nabla: np.ndarray
    rx_bullet: np.ndarray
    rx_nabla_nabla: np.ndarray
    rx_times_nabla: np.ndarray

    @staticmethod
    def from_array(data: np.ndarray) -> "OverlapIntegrals":
        return OverlapIntegrals(overlap=float(data[0]),
                                cross=float(data[1]),
                                bullet=data[2:11:3].copy(),
                                nabla_nabla=data[3:11:3].copy(),
                                times_nabla=data[4:11:3].copy(),
                                rx_bullet=data[11:20:3].copy(),
                                rx_nabla_nabla=data[12:20:3].copy(),
                                rx_times_nabla=data[13:20:3].copy())

    def as_array(self) -> np.ndarray:
        data = np.zeros((NOVERLAPS,), dtype=np.float64)
        data[0] = self.overlap
        data[1] = self.cross
        data[2:11:3] = self.bullet
        data[3:11:3] = self.nabla_nabla
        data[4:11:3] = self.times_nabla
        data[11:20:3] = self.rx_bullet
        data[12:20:3] = self.rx_nabla_nabla
        data[13:20:3] = self.rx_times_nabla
        return data


def _half_functions(surface: RWGSurface, ne: int) -> list[tuple[int, int, float]]:
    """Returns (panel, local free vertex index, sign) for the panels of an edge"""
    edge = surface.edges[ne]
    halves = [(edge.ipanel_p, edge.pindex, 1.0)]
    if edge.ipanel_m >= 0:
        halves.append((edge.ipanel_m, edge.mindex, -1.0))
    return halves

def overlap_array(surface: RWGSurface, nea: int, neb: int, X0: np.ndarray | None = None) -> np.ndarray:
    """ Computes the twenty overlap integrals of two RWG functions as a (20,) array.

    Function pairs that do not share a panel return zeros.

    Args:
        surface (RWGSurface): The surface carrying both functions
        nea (int): The edge index of function a
        neb (int): The edge index of function b
        X0 (np.ndarray, optional): The torque centre. Defaults to the surface origin.

    Returns:
        np.ndarray: The overlap integrals in the documented order
    """
    if X0 is None:
        X0 = surface.origin
    X0 = np.asarray(X0, dtype=np.float64)
    La = surface.edges[nea].length
    Lb = surface.edges[neb].length

    out = np.zeros((NOVERLAPS,), dtype=np.float64)
    for ipa, iqa, sa in _half_functions(surface, nea):
        for ipb, iqb, sb in _half_functions(surface, neb):
            if ipa != ipb:
                continue
            panel = surface.panels[ipa]
            V = surface.panel_vertices(ipa)
            prefac = sa*sb*La*Lb/(2.0*panel.area)
            panel_overlaps(V, iqa, V[:,iqb].copy(), panel.zhat, prefac, X0, out)
    return out

def get_overlaps(surface: RWGSurface, nea: int, neb: int, X0: np.ndarray | None = None) -> OverlapIntegrals:
    return OverlapIntegrals.from_array(overlap_array(surface, nea, neb, X0))

def get_overlap(surface: RWGSurface, nea: int, neb: int) -> tuple[float, float]:
    """Returns the (overlap, cross) integrals of two RWG functions"""
    data = overlap_array(surface, nea, neb)
    return data[0], data[1]

def overlapping_edges(surface: RWGSurface, nea: int) -> list[int]:
    """Returns the edges whose functions overlap with function nea, starting with nea itself.

    These are the edges opposite the remaining vertices of both panels of nea, 3 or 5 in total.
    Panel edges without a basis function are skipped.
    """
    edge = surface.edges[nea]
    result = [nea]
    for ip, iq in ((edge.ipanel_p, edge.pindex), (edge.ipanel_m, edge.mindex)):
        if ip < 0:
            continue
        ei = surface.panels[ip].ei
        for neb in (ei[(iq+1) % 3], ei[(iq+2) % 3]):
            if neb >= 0:
                result.append(neb)
    return result

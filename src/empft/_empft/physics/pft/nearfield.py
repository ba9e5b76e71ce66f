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


from typing import Protocol
import numpy as np
from numba import njit, f8, c16, types

from ...mth.optimized import gaus_quad_tri, tri_points, calc_area
from ...mth.static import static_integrals
from ...mesh import RWGSurface

PI4 = 4.0*np.pi
SERIES_LIM = 1e-2


class NearFieldPotentials(Protocol):
    """Evaluates the potentials of the unit single panel basis function g(x') = (x' - q)/(2A).

    With G = exp(ikR)/(4 pi R) the returned quantities are, per observation point:

    p  = (1/A) int G dA'                      (M,)
    a  = (1/2A) int (x' - q) G dA'            (3,M)
    dp = grad p                               (3,M)
    da = da[i,j,:] = d a_j / d x_i            (3,3,M)
    """
    def potentials(self, V: np.ndarray, q: np.ndarray, X: np.ndarray, k: complex) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        ...


############################################################
#                  NUMBA COMPILED FUNCTION                 #
############################################################

@njit(types.Tuple((c16, c16))(f8, c16), cache=True, nogil=True)
def _remainder_kernel(R: float, k: complex):
    ''' Returns (exp(ikR) - 1)/R and d/dR of it divided by R, both without the 1/(4 pi) factor. '''
    z = 1j*k*R
    if abs(z) < SERIES_LIM:
        g0 = 1j*k*(1.0 + z/2.0 + z*z/6.0 + z*z*z/24.0 + z*z*z*z/120.0)
        g1 = -k*k*(0.5 + z/3.0 + z*z/8.0 + z*z*z/30.0 + z*z*z*z/144.0)
        return g0, g1
    ez = np.exp(z)
    return (ez - 1.0)/R, (ez*(z - 1.0) + 1.0)/(R*R)

@njit(types.Tuple((c16[:], c16[:,:], c16[:,:], c16[:,:,:]))(f8[:,:], f8[:], f8[:,:], c16, f8[:,:]), cache=True, nogil=True)
def subtracted_potentials(V: np.ndarray, q: np.ndarray, X: np.ndarray, k: complex, DPTs: np.ndarray):
    ''' Computes the potentials of the unit panel basis function at the points X (3,M).

    The smooth remainder G - 1/(4 pi R) is integrated with the cubature rule DPTs, the static
    part 1/(4 pi R) in closed form.
    '''
    M = X.shape[1]
    Nq = DPTs.shape[1]
    area = calc_area(V[:,0].copy(), V[:,1].copy(), V[:,2].copy())
    xs = tri_points(V, DPTs)

    p = np.zeros((M,), dtype=np.complex128)
    a = np.zeros((3, M), dtype=np.complex128)
    dp = np.zeros((3, M), dtype=np.complex128)
    da = np.zeros((3, 3, M), dtype=np.complex128)

    r = np.zeros((3,), dtype=np.float64)
    xq = np.zeros((3,), dtype=np.float64)
    for m in range(M):
        x = X[:,m].copy()

        for n in range(Nq):
            w = DPTs[0,n]
            for i in range(3):
                r[i] = x[i] - xs[i,n]
                xq[i] = xs[i,n] - q[i]
            R = np.sqrt(r[0]*r[0] + r[1]*r[1] + r[2]*r[2])
            if R == 0.0:
                g0 = 1j*k
                g1R = 0.0j
            else:
                g0, g1 = _remainder_kernel(R, k)
                g1R = g1/R
            g0 = g0/PI4
            g1R = g1R/PI4

            p[m] += w*g0
            for i in range(3):
                dp[i,m] += w*g1R*r[i]
                a[i,m] += 0.5*w*xq[i]*g0
                for j in range(3):
                    da[i,j,m] += 0.5*w*xq[j]*g1R*r[i]

        I0, gradI0, IR, T = static_integrals(V, x)
        xmq = x - q
        sfac = 1.0/(PI4*area)
        p[m] += I0*sfac
        for i in range(3):
            dp[i,m] += gradI0[i]*sfac
            a[i,m] += 0.5*(IR[i] + xmq[i]*I0)*sfac
            for j in range(3):
                da[i,j,m] += 0.5*(T[i,j] + gradI0[i]*xmq[j])*sfac
    return p, a, dp, da


############################################################
#                   MAIN PYTHON INTERFACE                  #
############################################################

class SubtractedPotentials:
    """Near field potentials by singularity subtraction.

    Args:
        order (int): The polynomial degree of the cubature rule for the smooth remainder.
    """
    def __init__(self, order: int = 7):
        self.order: int = order
        self.DPTs: np.ndarray = gaus_quad_tri(order)

    def potentials(self, V: np.ndarray, q: np.ndarray, X: np.ndarray, k: complex):
        X = np.ascontiguousarray(np.asarray(X, dtype=np.float64).reshape(3, -1))
        return subtracted_potentials(np.ascontiguousarray(V, dtype=np.float64),
                                     np.ascontiguousarray(q, dtype=np.float64),
                                     X, complex(k), self.DPTs)


class NearFieldAssembler:
    """Assembles the reduced E and H fields of RWG functions from panel potentials.

    The reduced fields of a single panel of edge b are

    e = L (a + grad p / k^2)
    h = L curl a

    They are the fields of the half function with a positive sign. The physical prefactors
    are applied by the caller.
    """
    def __init__(self, potentials: NearFieldPotentials | None = None):
        if potentials is None:
            potentials = SubtractedPotentials()
        self.potentials: NearFieldPotentials = potentials

    def reduced_fields(self, surface: RWGSurface, ne: int, panel_sign: int, X: np.ndarray, k: complex) -> tuple[np.ndarray, np.ndarray]:
        """ Returns the reduced (e, h) fields of one panel of edge ne at the points X (3,M).

        Args:
            surface (RWGSurface): The surface carrying the edge
            ne (int): The edge index
            panel_sign (int): +1 for the positive panel, -1 for the negative panel
            X (np.ndarray): The observation points
            k (complex): The wavenumber

        Returns:
            tuple[np.ndarray, np.ndarray]: e and h, both (3,M)
        """
        edge = surface.edges[ne]
        if panel_sign > 0:
            ipanel, iq = edge.ipanel_p, edge.iqp
        else:
            ipanel, iq = edge.ipanel_m, edge.iqm
        X = np.asarray(X, dtype=np.float64).reshape(3, -1)
        if ipanel < 0:
            zeros = np.zeros(X.shape, dtype=np.complex128)
            return zeros, zeros.copy()

        V = surface.panel_vertices(ipanel)
        q = surface.vertices[iq]
        p, a, dp, da = self.potentials.potentials(V, q, X, k)

        L = edge.length
        e = L*(a + dp/(k*k))
        h = L*np.stack([da[1,2] - da[2,1],
                        da[2,0] - da[0,2],
                        da[0,1] - da[1,0]])
        return e, h

    def reduced_edge_fields(self, surface: RWGSurface, ne: int, X: np.ndarray, k: complex) -> tuple[np.ndarray, np.ndarray]:
        """Returns the reduced (e, h) fields of the full RWG function ne (positive minus negative panel)"""
        ep, hp = self.reduced_fields(surface, ne, 1, X, k)
        em, hm = self.reduced_fields(surface, ne, -1, X, k)
        return ep - em, hp - hm

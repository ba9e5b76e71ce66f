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

from functools import lru_cache

import numpy as np
from numba import njit, f8
from scipy.special import roots_legendre


############################################################
#                     VECTOR OPERATIONS                    #
############################################################

@njit(f8(f8[:], f8[:]), cache=True, fastmath=True, nogil=True)
def dot(a: np.ndarray, b: np.ndarray):
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2]

@njit(f8[:](f8[:], f8[:]), cache=True, fastmath=True, nogil=True)
def cross(a: np.ndarray, b: np.ndarray):
    crossv = np.empty((3,), dtype=np.float64)
    crossv[0] = a[1]*b[2] - a[2]*b[1]
    crossv[1] = a[2]*b[0] - a[0]*b[2]
    crossv[2] = a[0]*b[1] - a[1]*b[0]
    return crossv

@njit(f8(f8[:], f8[:], f8[:]), cache=True, nogil=True)
def calc_area(v1: np.ndarray, v2: np.ndarray, v3: np.ndarray):
    e1 = v2 - v1
    e2 = v3 - v1
    c = cross(e1, e2)
    return 0.5*np.sqrt(c[0]**2 + c[1]**2 + c[2]**2)


############################################################
#                  TRIANGLE CUBATURE RULES                 #
############################################################

@lru_cache(maxsize=64)
def gaus_quad_tri(order: int) -> np.ndarray:
    """Returns a triangle cubature rule that integrates polynomials up to the given degree exactly.

    The rule is the collapsed (Stroud conical) product of two Gauss-Legendre rules, so any
    order can be generated. The output follows the DPTs layout:

    DPTs[0,:] = weights (summing to 1, multiply by the triangle area)
    DPTs[1:4,:] = barycentric coordinates of the nodes

    Args:
        order (int): The polynomial degree to integrate exactly

    Returns:
        np.ndarray: The (4,N) cubature array
    """
    order = max(int(order), 1)
    npts = (order + 3)//2

    xg, wg = roots_legendre(npts)
    xg = 0.5*(xg + 1.0)
    wg = 0.5*wg

    xi, eta = np.meshgrid(xg, xg, indexing='ij')
    wxi, weta = np.meshgrid(wg, wg, indexing='ij')

    s = xi.ravel()
    t = (eta*(1.0 - xi)).ravel()
    w = (wxi*weta*(1.0 - xi)).ravel()

    DPTs = np.empty((4, s.shape[0]), dtype=np.float64)
    DPTs[0,:] = 2.0*w
    DPTs[1,:] = 1.0 - s - t
    DPTs[2,:] = s
    DPTs[3,:] = t
    return DPTs

@lru_cache(maxsize=64)
def graded_quad_tri(order: int) -> np.ndarray:
    """Returns a triangle cubature rule with nodes clustered towards the edges and vertices.

    The triangle is split at its centroid into three sub-triangles. Each is mapped onto the
    unit square with a radial coordinate s (centroid to edge) and an edge coordinate t. The
    polynomial substitutions s = 1 - (1-u)^3 and t = u^3(10 - 15u + 6u^2) flatten logarithmic
    singularities on the edges and at the vertices, so integrands that are only singular on
    the boundary converge quickly. Polynomials stay polynomials under the mapping.

    Args:
        order (int): Sets the number of Gauss points per direction, as for gaus_quad_tri

    Returns:
        np.ndarray: The (4,N) cubature array in the DPTs layout
    """
    order = max(int(order), 1)
    npts = (order + 3)//2

    xg, wg = roots_legendre(npts)
    xg = 0.5*(xg + 1.0)
    wg = 0.5*wg

    us, ut = np.meshgrid(xg, xg, indexing='ij')
    ws, wt = np.meshgrid(wg, wg, indexing='ij')

    s = 1.0 - (1.0 - us)**3
    ds = 3.0*(1.0 - us)**2
    t = ut**3*(10.0 - 15.0*ut + 6.0*ut**2)
    dt = 30.0*ut**2*(1.0 - ut)**2

    # each sub-triangle holds a third of the area and dA/A = (2/3) s ds dt
    w = (2.0/3.0*s*ds*dt*ws*wt).ravel()
    s = s.ravel()
    t = t.ravel()

    centre = np.full((3, 1), 1.0/3.0)
    corners = np.eye(3)
    blocks = []
    for i in range(3):
        ci = corners[:, i:i+1]
        cj = corners[:, (i+1) % 3:(i+1) % 3 + 1]
        lam = centre + s*((1.0 - t)*ci + t*cj - centre)
        blocks.append(np.vstack([w[np.newaxis, :], lam]))
    return np.hstack(blocks)

@njit(f8[:,:](f8[:,:], f8[:,:]), cache=True, nogil=True)
def tri_points(vertices: np.ndarray, DPTs: np.ndarray) -> np.ndarray:
    """ Maps the barycentric cubature nodes onto a triangle with vertex columns (3,3). """
    N = DPTs.shape[1]
    xyz = np.empty((3, N), dtype=np.float64)
    for i in range(3):
        xyz[i,:] = vertices[i,0]*DPTs[1,:] + vertices[i,1]*DPTs[2,:] + vertices[i,2]*DPTs[3,:]
    return xyz

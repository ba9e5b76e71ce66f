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
import numpy as np
from numba import njit, f8, i8 # type: ignore

from ..mesh import RWGSurface


############################################################
#                  NUMBA COMPILED FUNCTION                 #
############################################################

@njit(i8[:,:](f8[:,:], f8[:,:], f8), cache=True, nogil=True)
def link_vertices(Va: np.ndarray, Vb: np.ndarray, dsmax: float) -> np.ndarray:
    """ Returns the local vertex order of two panels with the coinciding vertices first.

    Va and Vb hold one vertex per column. Row 0 holds the order for panel a, row 1 for panel b.
    The first ncv entries are matched pairs and column 3 stores ncv.
    """
    D = dsmax**2
    out = -np.ones((2, 4), dtype=np.int64)
    taken_b = np.zeros((3,), dtype=np.int64)
    taken_a = np.zeros((3,), dtype=np.int64)
    ncv = 0
    for ia in range(3):
        for ib in range(3):
            if taken_b[ib] == 1:
                continue
            dist = (Va[0,ia]-Vb[0,ib])**2 + (Va[1,ia]-Vb[1,ib])**2 + (Va[2,ia]-Vb[2,ib])**2
            if dist > D:
                continue
            out[0,ncv] = ia
            out[1,ncv] = ib
            taken_a[ia] = 1
            taken_b[ib] = 1
            ncv += 1
            break

    ia_next = ncv
    ib_next = ncv
    for i in range(3):
        if taken_a[i] == 0:
            out[0,ia_next] = i
            ia_next += 1
        if taken_b[i] == 0:
            out[1,ib_next] = i
            ib_next += 1
    out[0,3] = ncv
    out[1,3] = ncv
    return out


############################################################
#                   MAIN PYTHON INTERFACE                  #
############################################################

@dataclass
class PanelPair:
    """The classification of a pair of panels.

    ncv: The number of common vertices (0 to 3)
    rrel: The centroid distance divided by the largest panel radius
    va, vb: The (3,3) vertex coordinates (one per column) with the common vertices first
    """
    ncv: int
    rrel: float
    va: np.ndarray
    vb: np.ndarray

def assess_panel_pair(surface_a: RWGSurface, ipa: int, surface_b: RWGSurface, ipb: int) -> PanelPair:
    """ Classifies two panels as coincident, common edge, common vertex or disjoint.

    Vertices are compared by position with a tolerance relative to the panel size so that
    panels of different surfaces are treated the same way as panels of one surface.

    Args:
        surface_a (RWGSurface): The surface of the first panel
        ipa (int): The panel index on surface_a
        surface_b (RWGSurface): The surface of the second panel
        ipb (int): The panel index on surface_b

    Returns:
        PanelPair: The classification
    """
    Pa = surface_a.panels[ipa]
    Pb = surface_b.panels[ipb]
    Va = surface_a.panel_vertices(ipa)
    Vb = surface_b.panel_vertices(ipb)

    rmax = max(Pa.radius, Pb.radius)
    rrel = float(np.linalg.norm(Pa.centroid - Pb.centroid)/rmax)

    order = link_vertices(Va, Vb, 1e-6*rmax)
    ncv = int(order[0,3])
    return PanelPair(ncv=ncv, rrel=rrel, va=Va[:, order[0,:3]], vb=Vb[:, order[1,:3]])

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


import numpy as np
from loguru import logger

from ...const import ZVAC, TENTHIRDS, NUMPFT
from ...mesh import RWGGeometry
from ...mth.tri import overlap_array, overlapping_edges
from .pftdata import OPFTResult, correlation_source, zero_by_edge


def get_extinction(geometry: RWGGeometry, ns: int, kn: np.ndarray, rhs: np.ndarray) -> float:
    """ Computes the total power taken from the incident field by the currents on a surface.

    Args:
        geometry (RWGGeometry): The geometry
        ns (int): The surface index
        kn (np.ndarray): The surface current coefficient vector
        rhs (np.ndarray): The incident field projections (right hand side of the linear system)

    Returns:
        float: The extinction power
    """
    surface = geometry.surfaces[ns]
    offset = geometry.bf_offsets[ns]
    extinction = 0.0
    nbf = offset
    for _ in range(surface.num_edges):
        k_alpha = kn[nbf]
        vE_alpha = -ZVAC*rhs[nbf]
        nbf += 1
        extinction += 0.5*np.real(np.conj(k_alpha)*vE_alpha)
        if surface.is_pec:
            continue
        n_alpha = -ZVAC*kn[nbf]
        vH_alpha = -1.0*rhs[nbf]
        nbf += 1
        extinction += 0.5*np.real(np.conj(n_alpha)*vH_alpha)
    return float(extinction)


def get_opft(geometry: RWGGeometry,
             ns: int,
             omega: complex,
             kn: np.ndarray | None = None,
             rhs: np.ndarray | None = None,
             rytov: np.ndarray | None = None,
             by_edge: np.ndarray | None = None) -> OPFTResult:
    """ Computes the power, force and torque on a surface from overlap integrals.

    Only basis functions that share a panel interact, the fields are those of the exterior medium.

    Args:
        geometry (RWGGeometry): The geometry
        ns (int): The surface index
        omega (complex): The angular frequency in units of 3e14 rad/s
        kn (np.ndarray, optional): The surface current coefficient vector
        rhs (np.ndarray, optional): The incident field projections, enables the scattered power
        rytov (np.ndarray, optional): The current correlation (Rytov) matrix, used if kn is None
        by_edge (np.ndarray, optional): A (7,NE) array that receives the contribution of every edge

    Returns:
        OPFTResult: The absorbed power, scattered power, force and torque
    """
    if not 0 <= ns < geometry.num_surfaces:
        logger.warning(f'OPFT requested for unknown surface {ns}.')
        return OPFTResult()

    surface = geometry.surfaces[ns]
    NE = surface.num_edges
    offset = geometry.bf_offsets[ns]

    omega = complex(omega)
    eps, mu = geometry.eps_mu(surface.exterior_region, omega)
    k2 = omega*omega*eps*mu
    ZZ = ZVAC*np.sqrt(mu/eps)

    zero_by_edge(by_edge, NE)
    correlation = correlation_source(kn, rytov, offset, surface.is_pec and kn is not None)

    logger.debug(f'Computing OPFT for surface {surface.name} ({NE} edges)')

    T = TENTHIRDS
    iw = 1j*omega
    totals = np.zeros((NUMPFT,), dtype=np.float64)
    for a in range(NE):
        row = np.zeros((NUMPFT,), dtype=np.float64)
        for b in overlapping_edges(surface, a):
            ov = overlap_array(surface, a, b)
            c = correlation(a, b)

            row[0] += 0.25*np.real((c.kn - c.nk)*ov[1])

            fac_bullet = -(c.kk*ZZ + c.nn/ZZ)
            fac_times = (c.nk - c.kn)*2.0/iw
            row[1:4] += 0.25*T*np.real(fac_bullet*(ov[2:11:3] - ov[3:11:3]/k2) + fac_times*ov[4:11:3])
            row[4:7] += 0.25*T*np.real(fac_bullet*(ov[11:20:3] - ov[12:20:3]/k2) + fac_times*ov[13:20:3])

        totals += row
        if by_edge is not None:
            by_edge[:, a] = row

    result = OPFTResult(p_abs=float(totals[0]), force=totals[1:4].copy(), torque=totals[4:7].copy())

    if kn is not None and rhs is not None:
        extinction = get_extinction(geometry, ns, np.asarray(kn), np.asarray(rhs))
        result.p_scat = extinction - result.p_abs
        result.has_extinction = True

    logger.debug(f'OPFT surface {surface.name}: P = {result.p_abs:.6g}')
    return result

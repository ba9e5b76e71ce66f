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


from concurrent.futures import ThreadPoolExecutor
import numpy as np
from loguru import logger
from numba_progress import ProgressBar

from ...const import ZVAC, TENTHIRDS, NUMPFT
from ...mesh import RWGGeometry
from ...settings import Settings, DEFAULT_SETTINGS
from ...mth.tri import overlap_array, overlapping_edges
from .elements import EPPFTElementBuilder
from .nearfield import NearFieldAssembler, SubtractedPotentials
from .pftdata import PFTResult, correlation_source, zero_by_edge, material_contrast
from .singular import SemiAnalyticIntegrator


def _valid_surface(geometry: RWGGeometry, ns: int) -> bool:
    return 0 <= ns < geometry.num_surfaces

def get_eppft(geometry: RWGGeometry,
              ns: int,
              omega: complex,
              kn: np.ndarray | None = None,
              rytov: np.ndarray | None = None,
              by_edge: np.ndarray | None = None,
              exterior: bool = True,
              settings: Settings | None = None,
              builder: EPPFTElementBuilder | None = None) -> PFTResult:
    """ Computes the power, force and torque on a surface with the equivalence principle method.

    The fields of the surface currents are evaluated on the surface itself, from the exterior
    or from the interior medium, and every pair of basis functions contributes.

    Args:
        geometry (RWGGeometry): The geometry
        ns (int): The surface index
        omega (complex): The angular frequency in units of 3e14 rad/s
        kn (np.ndarray, optional): The surface current coefficient vector
        rytov (np.ndarray, optional): The current correlation (Rytov) matrix, used if kn is None
        by_edge (np.ndarray, optional): A (7,NE) array that receives the contribution of every edge
        exterior (bool): Evaluate the fields in the exterior (True) or interior (False) medium
        settings (Settings, optional): Numerical settings. Defaults to DEFAULT_SETTINGS.
        builder (EPPFTElementBuilder, optional): A custom matrix element builder

    Returns:
        PFTResult: The absorbed power, force and torque
    """
    if settings is None:
        settings = DEFAULT_SETTINGS

    if not _valid_surface(geometry, ns):
        logger.warning(f'EPPFT requested for unknown surface {ns}.')
        return PFTResult()

    surface = geometry.surfaces[ns]
    NE = surface.num_edges
    zero_by_edge(by_edge, NE)

    nr_out, nr_in = surface.exterior_region, surface.interior_region
    if surface.is_pec or nr_in < 0:
        logger.warning(f'EPPFT is not implemented for PEC surfaces ({surface.name}), returning zeros.')
        return PFTResult()

    correlation = correlation_source(kn, rytov, geometry.bf_offsets[ns], False)

    omega = complex(omega)
    eps_out, mu_out = geometry.eps_mu(nr_out, omega)
    eps_in, mu_in = geometry.eps_mu(nr_in, omega)

    if exterior:
        sign = 1.0
        k = omega*np.sqrt(eps_out*mu_out)
        zrel = np.sqrt(mu_out/eps_out)
        gamma_e = gamma_m = 0.0
    else:
        sign = -1.0
        k = omega*np.sqrt(eps_in*mu_in)
        zrel = np.sqrt(mu_in/eps_in)
        gamma_e, gamma_m = material_contrast(eps_in, mu_in, eps_out, mu_out)

    logger.info(f'Computing EPPFT for surface {surface.name} ({"exterior" if exterior else "interior"}, Zrel={zrel:.4g})')

    ############################################################
    #                        PREFACTORS                        #
    ############################################################

    KZ = k*ZVAC*zrel
    KOZ = k/(ZVAC*zrel)
    T = TENTHIRDS
    II = 1j

    PEE = 0.5*II*KZ
    PEM = -0.5
    PME = 0.5
    PMM = 0.5*II*KOZ

    FEE1 = -0.5*T*KZ/omega
    FEE2 = 0.5*T*ZVAC
    FEM1 = 0.5*T/(II*omega)
    FEM2 = 0.5*T*II*KOZ*ZVAC
    FME1 = -0.5*T/(II*omega)
    FME2 = -0.5*T*II*KZ/ZVAC
    FMM1 = -0.5*T*KOZ/omega
    FMM2 = 0.5*T/ZVAC
    FEE3 = 0.25*T*gamma_e/(omega*omega)
    FMM3 = 0.25*T*gamma_m/(omega*omega)
    FEM3 = -0.25*T*gamma_m*ZVAC/(II*omega)
    FME3 = 0.25*T*gamma_e/(II*omega*ZVAC)

    if builder is None:
        potentials = SubtractedPotentials(settings.potential_order)
        builder = EPPFTElementBuilder(geometry,
                                      force_cubature=settings.force_cubature,
                                      assembler=NearFieldAssembler(potentials),
                                      singular=SemiAnalyticIntegrator(potentials, settings.singular_order))
    order = settings.eppft_order
    interior = not exterior

    ############################################################
    #                        ROW ROUTINE                       #
    ############################################################

    def row(a: int) -> np.ndarray:
        out = np.zeros((NUMPFT,), dtype=np.float64)
        neighbours = set(overlapping_edges(surface, a)) if interior else set()
        for b in range(NE):
            el = builder.elements(ns, ns, a, b, k, order)
            c = correlation(a, b)

            dP = sign*np.real(c.kk*PEE*el.be + c.kn*PEM*el.bh + c.nk*PME*el.bh + c.nn*PMM*el.be)

            dF = sign*np.real(c.kk*(FEE1*el.divbe + FEE2*el.bxh)
                              + c.kn*(FEM1*el.divbh + FEM2*el.bxe)
                              + c.nk*(FME1*el.divbh + FME2*el.bxe)
                              + c.nn*(FMM1*el.divbe + FMM2*el.bxh))

            dT = sign*np.real(c.kk*(FEE1*el.divbrxe + FEE2*el.rxbxh)
                              + c.kn*(FEM1*el.divbrxh + FEM2*el.rxbxe)
                              + c.nk*(FME1*el.divbrxh + FME2*el.rxbxe)
                              + c.nn*(FMM1*el.divbrxe + FMM2*el.rxbxh))

            if b in neighbours:
                ov = overlap_array(surface, a, b)
                fac_nn = FEE3*c.kk + FMM3*c.nn
                fac_tn = FEM3*c.kn + FME3*c.nk
                dF = dF - np.real(fac_nn*ov[3:11:3] + fac_tn*ov[4:11:3])
                dT = dT - np.real(fac_nn*ov[12:20:3] + fac_tn*ov[13:20:3])

            out[0] += dP
            out[1:4] += dF
            out[4:7] += dT
        return out

    ############################################################
    #                     PARALLEL PAIR LOOP                   #
    ############################################################

    nthreads = min(settings.threads, max(NE, 1))
    logger.debug(f'EPPFT pair loop over {NE}x{NE} edge pairs with {nthreads} threads')

    rows = []
    with ProgressBar(total=NE, ncols=100, dynamic_ncols=False, disable=not settings.show_progress) as pgb:
        with ThreadPoolExecutor(max_workers=nthreads) as executor:
            for values in executor.map(row, range(NE)):
                rows.append(values)
                pgb.update(1)

    totals = np.zeros((NUMPFT,), dtype=np.float64)
    for a, values in enumerate(rows):
        totals += values
        if by_edge is not None:
            by_edge[:, a] = values

    logger.debug(f'EPPFT surface {surface.name}: P = {totals[0]:.6g}')
    return PFTResult.from_array(totals)

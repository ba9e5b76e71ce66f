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


from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from loguru import logger

from ...mesh import RWGGeometry, RWGSurface
from ...mth.optimized import gaus_quad_tri
from ...mth.pairing import assess_panel_pair
from .nearfield import NearFieldAssembler
from .singular import SingularPanelIntegrator, SemiAnalyticIntegrator, SingularPairRequest, SingularKernel


def _zvec() -> np.ndarray:
    return np.zeros((3,), dtype=np.complex128)

@dataclass
class EPPFTElements:
    """The EPPFT matrix elements of an ordered pair of RWG functions (b_alpha, b_beta).

    With e, h the reduced fields of b_beta:

    be = <b_alpha, e>                    bh = <b_alpha, h>
    divbe = <div b_alpha, e>             divbh = <div b_alpha, h>
    bxe = <b_alpha x e>                  bxh = <b_alpha x h>
    divbrxe = <div b_alpha, r x e>       divbrxh = <div b_alpha, r x h>
    rxbxe = <r x (b_alpha x e)>          rxbxh = <r x (b_alpha x h)>
    """
    be: complex = 0j
    bh: complex = 0j
    divbe: np.ndarray = field(default_factory=_zvec)
    divbh: np.ndarray = field(default_factory=_zvec)
    bxe: np.ndarray = field(default_factory=_zvec)
    bxh: np.ndarray = field(default_factory=_zvec)
    divbrxe: np.ndarray = field(default_factory=_zvec)
    divbrxh: np.ndarray = field(default_factory=_zvec)
    rxbxe: np.ndarray = field(default_factory=_zvec)
    rxbxh: np.ndarray = field(default_factory=_zvec)

    def __add__(self, other: EPPFTElements) -> EPPFTElements:
        return EPPFTElements(be=self.be + other.be,
                             bh=self.bh + other.bh,
                             divbe=self.divbe + other.divbe,
                             divbh=self.divbh + other.divbh,
                             bxe=self.bxe + other.bxe,
                             bxh=self.bxh + other.bxh,
                             divbrxe=self.divbrxe + other.divbrxe,
                             divbrxh=self.divbrxh + other.divbrxh,
                             rxbxe=self.rxbxe + other.rxbxe,
                             rxbxh=self.rxbxh + other.rxbxh)


class EPPFTElementBuilder:
    """Computes EPPFT matrix elements by cubature, replacing the singular panel pairs of
    functions on one surface by semi-analytic panel integrals.

    Args:
        geometry (RWGGeometry): The geometry
        force_cubature (bool): Use cubature for every panel pair, also the singular ones
        assembler (NearFieldAssembler): The reduced field evaluator
        singular (SingularPanelIntegrator): The singular panel-panel integrator
    """
    def __init__(self,
                 geometry: RWGGeometry,
                 force_cubature: bool = False,
                 assembler: NearFieldAssembler | None = None,
                 singular: SingularPanelIntegrator | None = None):
        if assembler is None:
            assembler = NearFieldAssembler()
        if singular is None:
            singular = SemiAnalyticIntegrator()
        self.geometry: RWGGeometry = geometry
        self.force_cubature: bool = force_cubature
        self.assembler: NearFieldAssembler = assembler
        self.singular: SingularPanelIntegrator = singular

    @staticmethod
    def _panels(surface: RWGSurface, ne: int) -> list[tuple[int, int, int]]:
        """Returns (panel sign, panel index, free vertex index) for the panels of an edge."""
        edge = surface.edges[ne]
        out = [(1, edge.ipanel_p, edge.iqp)]
        if edge.ipanel_m >= 0:
            out.append((-1, edge.ipanel_m, edge.iqm))
        return out

    def singular_correction(self, Sa: RWGSurface, Sb: RWGSurface, a: int, b: int, k: complex) -> tuple[EPPFTElements, dict[tuple[int, int], bool]]:
        """ Computes the semi-analytic contributions of the touching panel pairs of two functions.

        Returns:
            tuple[EPPFTElements, dict]: The correction and, per (alpha sign, beta sign), whether
                that panel pair is omitted from the cubature
        """
        La = Sa.edges[a].length
        Lb = Sb.edges[b].length

        omitted: dict[tuple[int, int], bool] = dict()
        correction = EPPFTElements()
        for sa, ipa, iqa in self._panels(Sa, a):
            for sb, ipb, iqb in self._panels(Sb, b):
                pair = assess_panel_pair(Sa, ipa, Sb, ipb)
                if pair.ncv == 0:
                    continue
                omitted[(sa, sb)] = True
                request = SingularPairRequest(va=pair.va, qa=Sa.vertices[iqa],
                                              vb=pair.vb, qb=Sb.vertices[iqb],
                                              k=k, ncv=pair.ncv)
                result = self.singular.evaluate(request)
                fac = sa*sb*La*Lb
                k2 = k*k
                correction.divbe = correction.divbe + fac*(result[SingularKernel.DIV_A] + result[SingularKernel.DIV_GRAD_P]/k2)
                correction.divbh = correction.divbh + fac*result[SingularKernel.DIV_CURL_A]
                correction.bxe = correction.bxe + fac*(result[SingularKernel.CROSS_A] + result[SingularKernel.CROSS_GRAD_P]/k2)
        return correction, omitted

    def cubature(self, Sa: RWGSurface, Sb: RWGSurface, a: int, b: int, k: complex, order: int,
                 omitted: dict[tuple[int, int], bool] | None = None) -> EPPFTElements:
        """ Computes the EPPFT matrix elements of a pair of functions by cubature over the panels of a.

        Panel pairs listed in omitted do not contribute to divbe, divbh and bxe.
        """
        if omitted is None:
            omitted = dict()
        ea = Sa.edges[a]
        X0 = Sa.origin

        DPTs = gaus_quad_tri(order)
        w = DPTs[0,:]*ea.length/2.0
        V1 = Sa.vertices[ea.iv1]
        V2 = Sa.vertices[ea.iv2]

        def coef(sa: int, sb: int) -> float:
            if omitted.get((sa, sb), False):
                return 0.0
            return float(sa*sb)

        # Node images on the positive and negative panel of alpha
        nodes = []
        QP = Sa.vertices[ea.iqp]
        nodes.append((1, np.outer(QP, DPTs[1]) + np.outer(V1, DPTs[2]) + np.outer(V2, DPTs[3]), QP))
        if ea.ipanel_m >= 0:
            QM = Sa.vertices[ea.iqm]
            nodes.append((-1, np.outer(QM, DPTs[1]) + np.outer(V1, DPTs[2]) + np.outer(V2, DPTs[3]), QM))

        el = EPPFTElements()
        for sa, X, Q in nodes:
            bvec = X - Q[:, np.newaxis]
            rvec = X - X0[:, np.newaxis]

            eP, hP = self.assembler.reduced_fields(Sb, b, 1, X, k)
            eM, hM = self.assembler.reduced_fields(Sb, b, -1, X, k)
            e = eP - eM
            h = hP - hM
            cP = coef(sa, 1)
            cM = coef(sa, -1)
            e_div = cP*eP + cM*eM
            h_div = cP*hP + cM*hM

            # alpha on the negative panel carries the opposite sign
            ws = sa*w
            el.be += np.sum(ws*np.sum(bvec*e, axis=0))
            el.bh += np.sum(ws*np.sum(bvec*h, axis=0))
            el.divbe = el.divbe + (2.0*w*e_div).sum(axis=1)
            el.divbh = el.divbh + (2.0*w*h_div).sum(axis=1)
            el.bxe = el.bxe + (w*np.cross(bvec, e_div, axis=0)).sum(axis=1)
            el.bxh = el.bxh + (ws*np.cross(bvec, h, axis=0)).sum(axis=1)
            el.divbrxe = el.divbrxe + (2.0*ws*np.cross(rvec, e, axis=0)).sum(axis=1)
            el.divbrxh = el.divbrxh + (2.0*ws*np.cross(rvec, h, axis=0)).sum(axis=1)
            el.rxbxe = el.rxbxe + (ws*(bvec*np.sum(rvec*e, axis=0) - e*np.sum(rvec*bvec, axis=0))).sum(axis=1)
            el.rxbxh = el.rxbxh + (ws*(bvec*np.sum(rvec*h, axis=0) - h*np.sum(rvec*bvec, axis=0))).sum(axis=1)
        return el

    def elements(self, nsa: int, nsb: int, a: int, b: int, k: complex, order: int = 9) -> EPPFTElements:
        """ Computes the EPPFT matrix elements of function a on surface nsa and function b on surface nsb.

        Args:
            nsa (int): The surface index of b_alpha
            nsb (int): The surface index of b_beta
            a (int): The edge index of b_alpha
            b (int): The edge index of b_beta
            k (complex): The wavenumber
            order (int): The polynomial degree of the cubature rule

        Returns:
            EPPFTElements: The matrix elements
        """
        Sa = self.geometry.surfaces[nsa]
        Sb = self.geometry.surfaces[nsb]

        omitted: dict[tuple[int, int], bool] = dict()
        correction = None
        if nsa == nsb and not self.force_cubature:
            correction, omitted = self.singular_correction(Sa, Sb, a, b, k)
            if omitted:
                logger.trace(f'Edge pair ({a},{b}): {len(omitted)} singular panel pairs')

        el = self.cubature(Sa, Sb, a, b, k, order, omitted)
        if correction is not None:
            el = el + correction
        return el

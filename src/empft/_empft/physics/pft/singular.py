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
from enum import Enum
from typing import Protocol
import numpy as np

from ...mth.optimized import gaus_quad_tri, graded_quad_tri, tri_points
from .nearfield import NearFieldPotentials, SubtractedPotentials


class SingularKernel(Enum):
    """The panel-panel integrals needed to replace the cubature of singular EPPFT panel pairs.

    With g_a = (x - Qa)/(2A_a) and the potentials (p, a) of the unit basis function on panel b,
    every value is a complex 3-vector normalised by the area of panel a:

    DIV_A        = (1/A_a) int a dA
    DIV_GRAD_P   = (1/A_a) int grad p dA
    DIV_CURL_A   = (1/A_a) int curl a dA
    CROSS_A      = (1/A_a) int (x - Qa)/2 x a dA
    CROSS_GRAD_P = (1/A_a) int (x - Qa)/2 x grad p dA
    """
    DIV_A = 'div_a'
    DIV_GRAD_P = 'div_grad_p'
    DIV_CURL_A = 'div_curl_a'
    CROSS_A = 'cross_a'
    CROSS_GRAD_P = 'cross_grad_p'

    @property
    def kernel_type(self) -> str:
        if self in (SingularKernel.DIV_A, SingularKernel.CROSS_A):
            return 'helmholtz'
        return 'grad_helmholtz'

EPPFT_KERNELS = (SingularKernel.DIV_A,
                 SingularKernel.DIV_GRAD_P,
                 SingularKernel.DIV_CURL_A,
                 SingularKernel.CROSS_A,
                 SingularKernel.CROSS_GRAD_P)

@dataclass
class SingularPairRequest:
    """A request for the singular panel-panel integrals of two panels.

    va, vb: The (3,3) panel vertices (one per column), common vertices first.
    qa, qb: The free vertices of the two RWG half functions.
    ncv: The number of common vertices
    """
    va: np.ndarray
    qa: np.ndarray
    vb: np.ndarray
    qb: np.ndarray
    k: complex
    ncv: int
    kernels: tuple[SingularKernel, ...] = EPPFT_KERNELS

@dataclass
class SingularPairResult:
    values: dict[SingularKernel, np.ndarray] = field(default_factory=dict)
    errors: dict[SingularKernel, np.ndarray] = field(default_factory=dict)

    def __getitem__(self, kernel: SingularKernel) -> np.ndarray:
        return self.values[kernel]


class SingularPanelIntegrator(Protocol):
    def evaluate(self, request: SingularPairRequest) -> SingularPairResult:
        ...


class SemiAnalyticIntegrator:
    """Evaluates singular panel-panel integrals by an outer cubature over panel a of the
    singularity subtracted potentials of panel b.

    The inner integrals carry the 1/R singularity in closed form. What remains for the outer
    integral are logarithmic singularities on the common edges and vertices, which lie on the
    boundary of panel a for touching panels. Those pairs use the edge graded rule of
    graded_quad_tri, separated pairs the plain rule. The error estimate is the difference
    with a rule of lower degree.

    Args:
        potentials (NearFieldPotentials): The near field evaluator for the inner integral
        order (int): The polynomial degree of the outer cubature rule
    """
    def __init__(self, potentials: NearFieldPotentials | None = None, order: int = 16):
        if potentials is None:
            potentials = SubtractedPotentials()
        self.potentials: NearFieldPotentials = potentials
        self.order: int = order

    def _integrate(self, request: SingularPairRequest, order: int) -> dict[SingularKernel, np.ndarray]:
        if request.ncv > 0:
            DPTs = graded_quad_tri(order)
        else:
            DPTs = gaus_quad_tri(order)
        w = DPTs[0,:]
        X = tri_points(np.ascontiguousarray(request.va, dtype=np.float64), DPTs)
        p, a, dp, da = self.potentials.potentials(request.vb, request.qb, X, request.k)

        xq = 0.5*(X - np.asarray(request.qa, dtype=np.float64)[:, np.newaxis])
        out: dict[SingularKernel, np.ndarray] = dict()
        for kernel in request.kernels:
            if kernel is SingularKernel.DIV_A:
                out[kernel] = a @ w
            elif kernel is SingularKernel.DIV_GRAD_P:
                out[kernel] = dp @ w
            elif kernel is SingularKernel.DIV_CURL_A:
                curl = np.stack([da[1,2] - da[2,1],
                                 da[2,0] - da[0,2],
                                 da[0,1] - da[1,0]])
                out[kernel] = curl @ w
            elif kernel is SingularKernel.CROSS_A:
                out[kernel] = np.cross(xq, a, axis=0) @ w
            elif kernel is SingularKernel.CROSS_GRAD_P:
                out[kernel] = np.cross(xq, dp, axis=0) @ w
            else:
                raise ValueError(f'Unsupported singular kernel {kernel}')
        return out

    def evaluate(self, request: SingularPairRequest) -> SingularPairResult:
        values = self._integrate(request, self.order)
        coarse = self._integrate(request, max(self.order - 4, 1))
        errors = {kernel: np.abs(values[kernel] - coarse[kernel]) for kernel in values}
        return SingularPairResult(values=values, errors=errors)

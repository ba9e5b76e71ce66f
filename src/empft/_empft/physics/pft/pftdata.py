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

from ...const import ZVAC, NUMPFT


############################################################
#                   CURRENT CORRELATIONS                   #
############################################################

@dataclass
class CurrentCorrelation:
    """The products of the surface current coefficients of two RWG functions.

    KK = conj(k_a) k_b, KN = conj(k_a) n_b, NK = conj(n_a) k_b, NN = conj(n_a) n_b
    """
    kk: complex = 0j
    kn: complex = 0j
    nk: complex = 0j
    nn: complex = 0j

    @staticmethod
    def coefficients(kn: np.ndarray, offset: int, ne: int, pec: bool = False) -> tuple[complex, complex]:
        """Returns the electric and magnetic current coefficient (k, n) of edge ne.

        The magnetic coefficient is stored as -n/Z0 in the solution vector.
        """
        if pec:
            return complex(kn[offset + ne]), 0j
        return complex(kn[offset + 2*ne]), -ZVAC*complex(kn[offset + 2*ne + 1])

    @staticmethod
    def from_vector(kn: np.ndarray, offset: int, a: int, b: int, pec: bool = False) -> CurrentCorrelation:
        ka, na = CurrentCorrelation.coefficients(kn, offset, a, pec)
        kb, nb = CurrentCorrelation.coefficients(kn, offset, b, pec)
        if pec:
            return CurrentCorrelation(kk=np.conj(ka)*kb)
        return CurrentCorrelation(kk=np.conj(ka)*kb,
                                  kn=np.conj(ka)*nb,
                                  nk=np.conj(na)*kb,
                                  nn=np.conj(na)*nb)

    @staticmethod
    def from_rytov(rytov: np.ndarray, offset: int, a: int, b: int) -> CurrentCorrelation:
        """Reads the correlations of functions a and b from a Rytov (fluctuation) matrix."""
        return CurrentCorrelation(kk=complex(rytov[offset + 2*b, offset + 2*a]),
                                  kn=complex(rytov[offset + 2*b + 1, offset + 2*a]),
                                  nk=complex(rytov[offset + 2*b, offset + 2*a + 1]),
                                  nn=complex(rytov[offset + 2*b + 1, offset + 2*a + 1]))


def correlation_source(kn: np.ndarray | None, rytov: np.ndarray | None, offset: int, pec: bool):
    """Returns a function (a, b) -> CurrentCorrelation for the given current data."""
    if kn is not None:
        kn = np.asarray(kn)
        return lambda a, b: CurrentCorrelation.from_vector(kn, offset, a, b, pec)
    if rytov is not None:
        rytov = np.asarray(rytov)
        return lambda a, b: CurrentCorrelation.from_rytov(rytov, offset, a, b)
    raise ValueError('Either a current coefficient vector (kn) or a Rytov matrix (rytov) must be provided.')


############################################################
#                         RESULTS                          #
############################################################

def _z3() -> np.ndarray:
    return np.zeros((3,), dtype=np.float64)

@dataclass
class PFTResult:
    """Absorbed power (W), force (nN) and torque (nN um) on a surface."""
    p_abs: float = 0.0
    force: np.ndarray = field(default_factory=_z3)
    torque: np.ndarray = field(default_factory=_z3)

    def as_array(self) -> np.ndarray:
        """Returns [P, Fx, Fy, Fz, Tx, Ty, Tz]"""
        return np.concatenate([[self.p_abs], self.force, self.torque])

    @staticmethod
    def from_array(data: np.ndarray) -> PFTResult:
        return PFTResult(p_abs=float(data[0]),
                         force=np.array(data[1:4], dtype=np.float64),
                         torque=np.array(data[4:7], dtype=np.float64))

@dataclass
class OPFTResult(PFTResult):
    """Absorbed power, scattered power, force and torque on a surface.

    The scattered power is only available when the incident field projections were provided.
    """
    p_scat: float = 0.0
    has_extinction: bool = False

    @property
    def p_ext(self) -> float:
        if not self.has_extinction:
            raise ValueError('The extinction was not computed, provide the right hand side vector.')
        return self.p_abs + self.p_scat

    def as_array(self) -> np.ndarray:
        """Returns [P, Pscat, Fx, Fy, Fz, Tx, Ty, Tz]"""
        return np.concatenate([[self.p_abs, self.p_scat], self.force, self.torque])


def zero_by_edge(by_edge: np.ndarray | None, num_edges: int) -> None:
    """Zeros a (7,NE) by-edge array in place."""
    if by_edge is None:
        return
    if by_edge.shape != (NUMPFT, num_edges):
        raise ValueError(f'The by-edge array must have shape ({NUMPFT},{num_edges}), got {by_edge.shape}')
    by_edge[...] = 0.0


def material_contrast(eps_in: complex, mu_in: complex, eps_out: complex, mu_out: complex) -> tuple[complex, complex]:
    """Returns the electric and magnetic contrast (GammaE, GammaM) of an interface.

    GammaE = (1/eps_in - 1/eps_out) Z0
    GammaM = (1/mu_in - 1/mu_out) / Z0
    """
    gamma_e = (1.0/eps_in - 1.0/eps_out)*ZVAC
    gamma_m = (1.0/mu_in - 1.0/mu_out)/ZVAC
    return gamma_e, gamma_m

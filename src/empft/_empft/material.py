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
from typing import Callable

from .const import EPS0, OMEGA_UNIT


class MatProperty:
    """The MatProperty class is an interface for empft to deal with constant and frequency dependent
    scalar material properties.
    """
    _freq_dependent: bool = False

    def __init__(self, value: float | complex | int):
        self.value: complex = complex(value)

    def scalar(self, omega: float) -> complex:
        return self.value

    def __repr__(self) -> str:
        return f'MatProperty({self.value})'

class FreqDependent(MatProperty):
    _freq_dependent: bool = True

    def __init__(self, scalar: Callable):
        """Creates a frequency dependent property object.

        The function is called with the angular frequency in units of 3e14 rad/s and must
        return a float or complex value.

        Args:
            scalar (Callable): The scalar value function returning a float/complex.
        """
        self._func: Callable = scalar

    def scalar(self, omega: float) -> complex:
        return complex(self._func(omega))

    def __repr__(self) -> str:
        return f'FreqDependent({self._func})'


class Material:
    """The Material class describes the homogeneous medium filling one region of the geometry.

    The relative permittivity and permeability can be given as constants or as FreqDependent
    properties. Losses are added through the loss tangent and the conductivity (S/m):

    eps = er*(1 + i*tand) + i*cond/(omega*eps0)

    following the exp(-i omega t) time convention.
    """
    def __init__(self,
                 er: float | complex | MatProperty = 1.0,
                 ur: float | complex | MatProperty = 1.0,
                 tand: float | MatProperty = 0.0,
                 cond: float | MatProperty = 0.0,
                 name: str = 'unnamed'):

        if not isinstance(er, MatProperty):
            er = MatProperty(er)
        if not isinstance(ur, MatProperty):
            ur = MatProperty(ur)
        if not isinstance(tand, MatProperty):
            tand = MatProperty(tand)
        if not isinstance(cond, MatProperty):
            cond = MatProperty(cond)

        self.name: str = name
        self.er: MatProperty = er
        self.ur: MatProperty = ur
        self.tand: MatProperty = tand
        self.cond: MatProperty = cond

    def __str__(self) -> str:
        return f'Material({self.name})'

    def __repr__(self) -> str:
        return f'Material({self.name})'

    @property
    def frequency_dependent(self) -> bool:
        return self.er._freq_dependent or self.ur._freq_dependent or self.tand._freq_dependent or self.cond._freq_dependent

    def eps_mu(self, omega: float) -> tuple[complex, complex]:
        """Returns the relative complex permittivity and permeability at the angular frequency omega.

        Args:
            omega (float): The angular frequency in units of 3e14 rad/s

        Returns:
            tuple[complex, complex]: eps, mu
        """
        eps = self.er.scalar(omega)*(1 + 1j*self.tand.scalar(omega).real)
        cond = self.cond.scalar(omega).real
        if cond != 0.0:
            eps = eps + 1j*cond/(omega*OMEGA_UNIT*EPS0)
        mu = self.ur.scalar(omega)
        return eps, mu

    def refractive_index(self, omega: float) -> complex:
        eps, mu = self.eps_mu(omega)
        return np.sqrt(eps*mu)

VACUUM = Material(name='Vacuum')

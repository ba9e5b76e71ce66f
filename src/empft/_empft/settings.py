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


import os
from dataclasses import dataclass, replace

from loguru import logger

_TRUTHY = ('1', 'true', 'yes', 'on')

@dataclass(frozen=True)
class Settings:
    """Numerical settings for the power, force and torque routines.

    force_cubature: Evaluate all EPPFT edge pairs by cubature, also the singular ones.
    eppft_order: Polynomial degree of the cubature rule over the alpha panels.
    singular_order: Polynomial degree of the outer cubature of the semi-analytic integrator.
    potential_order: Polynomial degree of the source panel cubature of the near-field evaluator.
    num_threads: Worker threads for the EPPFT pair loop (None = all cores).
    show_progress: Show a progress bar for the EPPFT pair loop.
    """
    force_cubature: bool = False
    eppft_order: int = 9
    singular_order: int = 16
    potential_order: int = 7
    num_threads: int | None = None
    show_progress: bool = False

    @staticmethod
    def from_env() -> "Settings":
        """Creates a Settings object with force_cubature read from EMPFT_FORCE_CUBATURE."""
        value = os.getenv("EMPFT_FORCE_CUBATURE", default="")
        force = value.strip().lower() in _TRUTHY
        if force:
            logger.info('EMPFT_FORCE_CUBATURE is set: all EPPFT matrix elements are computed by cubature.')
        return Settings(force_cubature=force)

    @property
    def threads(self) -> int:
        if self.num_threads is None:
            return os.cpu_count() or 1
        return max(1, int(self.num_threads))

    def copy(self, **changes) -> "Settings":
        return replace(self, **changes)

DEFAULT_SETTINGS = Settings.from_env()

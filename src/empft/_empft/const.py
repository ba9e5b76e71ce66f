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


# Impedance of free space in Ohm
ZVAC = 376.73031346177

# Unit conversion between the force/torque prefactors and nN, nN*um
TENTHIRDS = 10.0/3.0

# Angular frequencies are given in units of OMEGA_UNIT rad/s so that k0 = omega in 1/um
OMEGA_UNIT = 3.0e14

EPS0 = 8.854187817e-12

# P, Fx, Fy, Fz, Tx, Ty, Tz
NUMPFT = 7

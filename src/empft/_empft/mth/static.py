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


"""
Closed form integrals of the static kernel 1/R over a flat triangle.

With x the observation point, x' the integration point on the panel and R = |x' - x|:

I0      = int 1/R dA'
gradI0  = grad_x int 1/R dA' = int (x' - x)/R^3 dA'
IR      = int (x' - x)/R dA'
T       = int (x' - x)(x' - x)/R^3 dA'

The expressions follow the edge decomposition of Wilton et al. (1984) and Graglia (1993).
Points in the plane of the panel are evaluated in the principal value sense.
"""

import numpy as np
from numba import njit, f8, types

from .optimized import cross, dot

SNAP_TOL = 1e-10
ZERO_TOL = 1e-12

@njit(types.Tuple((f8, f8[:], f8[:], f8[:,:]))(f8[:,:], f8[:]), cache=True, nogil=True)
def static_integrals(V: np.ndarray, x: np.ndarray):
    ''' Computes the static triangle integrals I0, gradI0, IR and T for a panel with vertex columns V.
    '''
    nrm = cross(V[:,1]-V[:,0], V[:,2]-V[:,0])
    nhat = nrm/np.sqrt(dot(nrm, nrm))

    size = 0.0
    for i in range(3):
        e = V[:,(i+1) % 3] - V[:,i]
        size = max(size, np.sqrt(dot(e, e)))

    d = dot(x - V[:,0], nhat)
    if abs(d) < SNAP_TOL*size:
        d = 0.0
    absd = abs(d)
    rho = x - d*nhat

    I0 = 0.0
    omega = 0.0
    sum_uf = np.zeros((3,), dtype=np.float64)
    IRrho = np.zeros((3,), dtype=np.float64)
    Tedge = np.zeros((3,3), dtype=np.float64)

    for i in range(3):
        Pm = V[:,i].copy()
        Pp = V[:,(i+1) % 3].copy()
        lvec = Pp - Pm
        lhat = lvec/np.sqrt(dot(lvec, lvec))
        uhat = cross(lhat, nhat)

        t0 = dot(Pm - rho, uhat)
        lp = dot(Pp - rho, lhat)
        lm = dot(Pm - rho, lhat)
        R02 = t0*t0 + d*d
        Rp = np.sqrt(lp*lp + R02)
        Rm = np.sqrt(lm*lm + R02)
        R0 = np.sqrt(R02)

        # R + l is formed as R0^2/(R - l) for l < 0 to keep it accurate near the edge line
        if lm >= 0.0:
            f = np.log((Rp + lp)/(Rm + lm))
        elif lp <= 0.0:
            f = np.log((Rm - lm)/(Rp - lp))
        else:
            f = np.log((Rp + lp)*(Rm - lm)/max(R02, (ZERO_TOL*size)**2))

        if R0 < ZERO_TOL*size:
            beta = 0.0
        else:
            beta = np.arctan(t0*lp/(R02 + absd*Rp)) - np.arctan(t0*lm/(R02 + absd*Rm))

        omega += beta
        if abs(t0) > ZERO_TOL*size:
            I0 += t0*f
            tf = t0*f
        else:
            tf = 0.0

        sum_uf += uhat*f

        if R0 > ZERO_TOL*size:
            IRrho += 0.5*uhat*(R02*f + lp*Rp - lm*Rm)
        else:
            IRrho += 0.5*uhat*(lp*Rp - lm*Rm)

        w = tf*uhat + (Rp - Rm)*lhat
        for a in range(3):
            for b in range(3):
                Tedge[a,b] += uhat[a]*w[b]

    I0 -= absd*omega

    sgn = 0.0
    if d > 0:
        sgn = 1.0
    elif d < 0:
        sgn = -1.0

    Vrho = -sum_uf
    gradI0 = Vrho - sgn*omega*nhat
    IR = IRrho - d*nhat*I0

    T = np.zeros((3,3), dtype=np.float64)
    for a in range(3):
        for b in range(3):
            proj = -nhat[a]*nhat[b]
            if a == b:
                proj += 1.0
            T[a,b] = proj*I0 - Tedge[a,b] - d*(Vrho[a]*nhat[b] + nhat[a]*Vrho[b]) + absd*omega*nhat[a]*nhat[b]
    return I0, gradI0, IR, T

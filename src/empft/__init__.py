"""A Python based power, force and torque module for boundary element solutions.
Copyright (C) 2025  Robert Fennis

This program is free software; you can redistribute it and/or
modify it under the terms of the GNU General Public License
as published by the Free Software Foundation; either version 2
of the License, or (at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program; if not, see
<https://www.gnu.org/licenses/>.

"""
import os

NTHREADS = "1"
os.environ.setdefault("OMP_NUM_THREADS", NTHREADS)
os.environ.setdefault("MKL_NUM_THREADS", NTHREADS)
os.environ.setdefault("OPENBLAS_NUM_THREADS", NTHREADS)
os.environ.setdefault("VECLIB_MAXIMUM_THREADS", NTHREADS)
os.environ.setdefault("NUMEXPR_NUM_THREADS", NTHREADS)

from loguru import logger
from ._empft.logsettings import LOG_CONTROLLER

logger.remove()
LOG_CONTROLLER.set_default()

logger.debug('Importing modules')

from ._empft.const import ZVAC, TENTHIRDS, NUMPFT
from ._empft.settings import Settings, DEFAULT_SETTINGS
from ._empft.material import Material, MatProperty, FreqDependent, VACUUM
from ._empft.mesh import RWGSurface, RWGGeometry, RWGPanel, RWGEdge, MeshError
from ._empft.mth.optimized import gaus_quad_tri, graded_quad_tri
from ._empft.mth.pairing import assess_panel_pair, PanelPair
from ._empft.mth.tri import get_overlaps, get_overlap, overlapping_edges, OverlapIntegrals
from ._empft.physics.pft.nearfield import NearFieldPotentials, SubtractedPotentials, NearFieldAssembler
from ._empft.physics.pft.singular import (SingularKernel, SingularPairRequest, SingularPairResult,
                                          SingularPanelIntegrator, SemiAnalyticIntegrator)
from ._empft.physics.pft.elements import EPPFTElements, EPPFTElementBuilder
from ._empft.physics.pft.pftdata import CurrentCorrelation, PFTResult, OPFTResult
from ._empft.physics.pft.eppft import get_eppft
from ._empft.physics.pft.opft import get_opft, get_extinction

logger.debug('Importing complete!')

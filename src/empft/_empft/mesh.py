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

from .material import Material


class MeshError(ValueError):
    pass


@dataclass(frozen=True)
class RWGPanel:
    """A flat triangular panel. Vertices are ordered counter-clockwise about zhat.

    ei[i] is the index of the basis function on the edge opposite vertex i (-1 if none).
    """
    index: int
    vi: tuple[int, int, int]
    area: float
    zhat: np.ndarray
    centroid: np.ndarray
    radius: float
    ei: tuple[int, int, int]


@dataclass(frozen=True)
class RWGEdge:
    """An RWG basis function living on the edge shared by the positive and negative panel.

    Half-RWG functions have ipanel_m = mindex = iqm = -1.
    """
    index: int
    ipanel_p: int
    ipanel_m: int
    pindex: int
    mindex: int
    iqp: int
    iqm: int
    iv1: int
    iv2: int
    length: float
    centroid: np.ndarray = field(repr=False)

    @property
    def is_half(self) -> bool:
        return self.ipanel_m < 0


class RWGSurface:
    """A closed or open triangulated surface carrying RWG basis functions.

    Args:
        vertices (np.ndarray): The (NV,3) vertex coordinates in um
        panels (np.ndarray): The (NP,3) vertex indices of every panel, counter-clockwise
            seen from the exterior region.
        region_indices (tuple[int,int]): The (exterior, interior) region index. An interior
            index of -1 marks a perfectly conducting surface.
        half_rwg (bool): Create half-RWG functions on boundary edges.
        name (str): The surface name
        origin (np.ndarray): The torque centre. Defaults to (0,0,0).
    """
    def __init__(self,
                 vertices: np.ndarray,
                 panels: np.ndarray,
                 region_indices: tuple[int, int] = (0, 1),
                 half_rwg: bool = False,
                 name: str = 'surface',
                 origin: np.ndarray | None = None):

        vertices = np.array(vertices, dtype=np.float64)
        panels = np.array(panels, dtype=np.int64)

        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise MeshError(f'Vertices must have shape (NV,3), got {vertices.shape}')
        if panels.ndim != 2 or panels.shape[1] != 3:
            raise MeshError(f'Panels must have shape (NP,3), got {panels.shape}')
        if panels.size > 0 and (panels.min() < 0 or panels.max() >= vertices.shape[0]):
            raise MeshError('Panel vertex indices are out of range')

        self.name: str = name
        self.vertices: np.ndarray = np.ascontiguousarray(vertices)
        self.region_indices: tuple[int, int] = (int(region_indices[0]), int(region_indices[1]))
        self.half_rwg: bool = half_rwg
        if origin is None:
            origin = np.zeros((3,), dtype=np.float64)
        self.origin: np.ndarray = np.array(origin, dtype=np.float64)

        self._panel_ids: np.ndarray = panels
        self.edges: list[RWGEdge] = []
        self.panels: list[RWGPanel] = []
        self._build()

        logger.debug(f'Surface {self.name}: {self.num_panels} panels, {self.num_edges} basis functions')

    ############################################################
    #                       CONSTRUCTION                      #
    ############################################################

    def _build(self) -> None:
        panel_ids = self._panel_ids
        V = self.vertices

        edge_map: dict[tuple[int, int], list[tuple[int, int]]] = dict()
        for ip in range(panel_ids.shape[0]):
            vi = panel_ids[ip]
            for i in range(3):
                v1, v2 = int(vi[(i+1) % 3]), int(vi[(i+2) % 3])
                if v1 == v2:
                    raise MeshError(f'Panel {ip} has a repeated vertex')
                key = (min(v1, v2), max(v1, v2))
                edge_map.setdefault(key, []).append((ip, i))

        ei = -np.ones(panel_ids.shape, dtype=np.int64)
        for key, incidences in edge_map.items():
            if len(incidences) > 2:
                raise MeshError(f'Edge {key} is shared by {len(incidences)} panels')
            if len(incidences) == 1 and not self.half_rwg:
                continue
            incidences = sorted(incidences)
            ipp, pindex = incidences[0]
            if len(incidences) == 2:
                ipm, mindex = incidences[1]
                iqm = int(panel_ids[ipm, mindex])
            else:
                ipm, mindex, iqm = -1, -1, -1
            iqp = int(panel_ids[ipp, pindex])
            iv1 = int(panel_ids[ipp, (pindex+1) % 3])
            iv2 = int(panel_ids[ipp, (pindex+2) % 3])

            index = len(self.edges)
            self.edges.append(RWGEdge(index=index, ipanel_p=ipp, ipanel_m=ipm,
                                      pindex=pindex, mindex=mindex, iqp=iqp, iqm=iqm,
                                      iv1=iv1, iv2=iv2,
                                      length=float(np.linalg.norm(V[iv2]-V[iv1])),
                                      centroid=0.5*(V[iv1]+V[iv2])))
            ei[ipp, pindex] = index
            if ipm >= 0:
                ei[ipm, mindex] = index

        for ip in range(panel_ids.shape[0]):
            vi = panel_ids[ip]
            v0, v1, v2 = V[vi[0]], V[vi[1]], V[vi[2]]
            nrm = np.cross(v1-v0, v2-v0)
            twice_area = np.linalg.norm(nrm)
            if twice_area <= 1e-14*max(np.sum((v1-v0)**2), np.sum((v2-v0)**2)):
                raise MeshError(f'Panel {ip} is degenerate (zero area)')
            centroid = (v0+v1+v2)/3
            radius = max(np.linalg.norm(v-centroid) for v in (v0, v1, v2))
            self.panels.append(RWGPanel(index=ip,
                                        vi=(int(vi[0]), int(vi[1]), int(vi[2])),
                                        area=0.5*twice_area,
                                        zhat=nrm/twice_area,
                                        centroid=centroid,
                                        radius=float(radius),
                                        ei=(int(ei[ip, 0]), int(ei[ip, 1]), int(ei[ip, 2]))))

    ############################################################
    #                        PROPERTIES                       #
    ############################################################

    @property
    def is_pec(self) -> bool:
        return self.region_indices[1] == -1

    @property
    def exterior_region(self) -> int:
        return self.region_indices[0]

    @property
    def interior_region(self) -> int:
        return self.region_indices[1]

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    @property
    def num_panels(self) -> int:
        return len(self.panels)

    @property
    def num_bfs(self) -> int:
        if self.is_pec:
            return self.num_edges
        return 2*self.num_edges

    def panel_vertices(self, ipanel: int) -> np.ndarray:
        """Returns the (3,3) vertex coordinates of a panel, one vertex per column"""
        return np.ascontiguousarray(self.vertices[list(self.panels[ipanel].vi)].T)

    def translate(self, dx: np.ndarray, move_origin: bool = True) -> None:
        """Rigidly displaces the surface.

        Args:
            dx (np.ndarray): The displacement vector
            move_origin (bool): Displace the torque centre together with the mesh.
        """
        dx = np.asarray(dx, dtype=np.float64)
        self.vertices = self.vertices + dx[np.newaxis, :]
        if move_origin:
            self.origin = self.origin + dx
        self.edges = []
        self.panels = []
        self._build()

    def __repr__(self) -> str:
        return f'RWGSurface({self.name}, NP={self.num_panels}, NE={self.num_edges})'


class RWGGeometry:
    """A collection of surfaces separating homogeneous regions.

    materials[i] describes region i. Region 0 is the exterior medium by convention.
    """
    def __init__(self, surfaces: list[RWGSurface], materials: list[Material]):
        self.surfaces: list[RWGSurface] = list(surfaces)
        self.materials: list[Material] = list(materials)

        for surf in self.surfaces:
            for region in surf.region_indices:
                if region >= len(self.materials):
                    raise MeshError(f'Surface {surf.name} refers to region {region} but only {len(self.materials)} materials are defined')

        self.bf_offsets: list[int] = []
        total = 0
        for surf in self.surfaces:
            self.bf_offsets.append(total)
            total += surf.num_bfs
        self.total_bfs: int = total

    @property
    def num_surfaces(self) -> int:
        return len(self.surfaces)

    def surface_index(self, name: str) -> int:
        for i, surf in enumerate(self.surfaces):
            if surf.name == name:
                return i
        raise KeyError(f'No surface named {name}')

    def eps_mu(self, region: int, omega: float) -> tuple[complex, complex]:
        return self.materials[region].eps_mu(omega)

# -- Spatial Hash Grid for Neighbor Search -- #

'''
Sorted-key spatial hashing for neighbor search on the SPH canvas.

The plane is divided into square cells whose side equals the
smoothing radius. Every rebuild computes an integer key per particle,
stable-sorts the (key, particleIndex) pairs by key and records where
the run of each key starts. A query then only has to look at the 3x3
block of cells around the query point: with cells as wide as the
interaction radius, no particle outside that block can be within
range.

Cell keys pack the two cell coordinates using the bounds of the
occupied cells at the last rebuild:

    key = (cx - originX) + (cy - originY) * nColumns

which is injective inside the bounds. Cells outside the bounds hold
no particles and are never keyed, so distinct cells can never share
a run.

References:
-----------
Ihmsen et al. (2011) -- Parallel Neighbor-Search for SPH
Green (2010) -- Particle Simulation using CUDA
'''

from __future__ import annotations

import math
from typing import Callable, Protocol

import numpy as np


#--------------------------------------------------------------------#
# -- Neighbor Search Protocol -- #
#--------------------------------------------------------------------#

class NeighborSearch(Protocol):
    '''Protocol for neighbor search structures.'''

    def rebuild(self, positions: np.ndarray) -> None:
        '''Rebuild the index from particle positions.'''
        ...

    def neighborsWithinRadius(self, x: float, y: float) -> tuple[np.ndarray, np.ndarray]:
        '''(indices, distances) of particles closer than the radius.'''
        ...

    def queryPairs(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        '''(i, j, distances) of every unordered pair within the radius.'''
        ...


# Half of the 3x3 stencil (excluding the centre): each pair of
# neighbouring cells is visited from exactly one side.
_HALF_STENCIL: tuple[tuple[int, int], ...] = (
    (1, -1), (1, 0), (1, 1),
    (0, 1),
)

_EMPTY_INDICES = np.zeros(0, dtype=np.int64)
_EMPTY_DISTANCES = np.zeros(0, dtype=np.float64)


#--------------------------------------------------------------------#
# -- Spatial Hash Grid -- #
#--------------------------------------------------------------------#

class SpatialHashGrid:
    '''
    Uniform grid index over particle positions.

    Parameters:
    -----------
    smoothingRadius : float
        Interaction cutoff [px], also the cell size. A non-positive
        radius gives a grid that never reports any neighbor.
    '''

    def __init__(self, smoothingRadius: float) -> None:
        self._radius = float(smoothingRadius)
        self._positions = np.zeros((0, 2))
        self._lookup = np.zeros((0, 2), dtype=np.int64)
        self._startIndices: dict[int, int] = {}
        self._runLengths: dict[int, int] = {}
        self._origin = (0, 0)
        self._nColumns = 0
        self._nRows = 0

    @property
    def smoothingRadius(self) -> float:
        return self._radius

    @property
    def cellSize(self) -> float:
        '''Side length of a grid cell [px].'''
        return self._radius

    @property
    def nParticles(self) -> int:
        '''Number of particles indexed at the last rebuild.'''
        return self._positions.shape[0]

    @property
    def spatialLookup(self) -> np.ndarray:
        '''
        Sorted index: rows of (cellKey, particleIndex), shape (N, 2),
        ascending by cellKey.
        '''
        return self._lookup.copy()

    @property
    def startIndices(self) -> dict[int, int]:
        '''Cell key -> position of the first entry with that key.'''
        return dict(self._startIndices)

    ######################################################################
    # -- Cell Addressing -- #
    ######################################################################

    def cellCoord(self, x: float, y: float) -> tuple[int, int]:
        '''Integer coordinates of the cell containing (x, y).'''
        if self._radius <= 0.0:
            raise ValueError('Cell coordinates are undefined for a non-positive smoothing radius')
        return (
            int(math.floor(x / self._radius)),
            int(math.floor(y / self._radius)),
        )

    def cellKey(self, cx: int, cy: int) -> int | None:
        '''
        Key of cell (cx, cy), or None if the cell lies outside the
        bounds of the occupied cells (and so holds no particles).
        '''
        col = cx - self._origin[0]
        row = cy - self._origin[1]
        if col < 0 or row < 0 or col >= self._nColumns or row >= self._nRows:
            return None
        return int(col + row * self._nColumns)

    def _keyToCell(self, key: int) -> tuple[int, int]:
        return (
            key % self._nColumns + self._origin[0],
            key // self._nColumns + self._origin[1],
        )

    ######################################################################
    # -- Rebuild -- #
    ######################################################################

    def rebuild(self, positions: np.ndarray) -> None:
        '''
        Rebuild the index from scratch.

        Parameters:
        -----------
        positions : np.ndarray
            Particle positions, shape (N, 2)
        '''
        self._positions = np.array(positions, dtype=np.float64).reshape(-1, 2)
        self._startIndices = {}
        self._runLengths = {}

        nParticles = self._positions.shape[0]
        if nParticles == 0 or self._radius <= 0.0:
            self._lookup = np.zeros((0, 2), dtype=np.int64)
            self._origin = (0, 0)
            self._nColumns = 0
            self._nRows = 0
            return

        # Cell coordinates for all particles (vectorized)
        cellCoords = np.floor(self._positions / self._radius).astype(np.int64)
        origin = cellCoords.min(axis=0)
        extent = cellCoords.max(axis=0) - origin + 1
        self._origin = (int(origin[0]), int(origin[1]))
        self._nColumns = int(extent[0])
        self._nRows = int(extent[1])

        keys = (cellCoords[:, 0] - origin[0]) + (cellCoords[:, 1] - origin[1]) * self._nColumns

        # Stable sort keeps particle indices ascending within a cell
        order = np.argsort(keys, kind='stable')
        sortedKeys = keys[order]
        self._lookup = np.column_stack([sortedKeys, order]).astype(np.int64)

        # First position and run length of each distinct key
        uniqueKeys, firstPositions, runLengths = np.unique(
            sortedKeys, return_index=True, return_counts=True,
        )
        self._startIndices = dict(zip(uniqueKeys.tolist(), firstPositions.tolist()))
        self._runLengths = dict(zip(uniqueKeys.tolist(), runLengths.tolist()))

    ######################################################################
    # -- Queries -- #
    ######################################################################

    def _cellParticles(self, cx: int, cy: int) -> np.ndarray | None:
        key = self.cellKey(cx, cy)
        if key is None:
            return None
        start = self._startIndices.get(key)
        if start is None:
            return None
        return self._lookup[start:start + self._runLengths[key], 1]

    def neighborsWithinRadius(self, x: float, y: float) -> tuple[np.ndarray, np.ndarray]:
        '''
        Particles strictly closer than the smoothing radius to (x, y).

        Scans the query cell and its 8 neighbors.

        Returns:
        --------
        tuple[np.ndarray, np.ndarray] :
            (indices, distances), both shape (M,)
        '''
        if self._radius <= 0.0 or self._lookup.shape[0] == 0:
            return (_EMPTY_INDICES, _EMPTY_DISTANCES)

        cx, cy = self.cellCoord(x, y)
        chunks = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                cellParticles = self._cellParticles(cx + dx, cy + dy)
                if cellParticles is not None:
                    chunks.append(cellParticles)

        if not chunks:
            return (_EMPTY_INDICES, _EMPTY_DISTANCES)

        candidates = np.concatenate(chunks)
        diff = self._positions[candidates] - np.array([x, y], dtype=np.float64)
        distances = np.sqrt(np.sum(diff * diff, axis=1))

        within = distances < self._radius
        return (candidates[within], distances[within])

    def queryWithinRadius(self, x: float, y: float, callback: Callable[[int, float], None]) -> None:
        '''
        Call callback(particleIndex, distance) for every particle
        strictly closer than the smoothing radius to (x, y).
        '''
        indices, distances = self.neighborsWithinRadius(x, y)
        for index, distance in zip(indices.tolist(), distances.tolist()):
            callback(index, distance)

    def queryPairs(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        '''
        Find all unordered particle pairs within the smoothing radius.

        Uses half-stencil traversal so each pair is found exactly
        once. Distance checks are vectorized per cell-pair group.

        Returns:
        --------
        tuple[np.ndarray, np.ndarray, np.ndarray] :
            (iIndices, jIndices, distances) with iIndices < jIndices
        '''
        if self._radius <= 0.0 or self._lookup.shape[0] == 0:
            return (_EMPTY_INDICES, _EMPTY_INDICES, _EMPTY_DISTANCES)

        radius = self._radius
        positions = self._positions
        iChunks: list[np.ndarray] = []
        jChunks: list[np.ndarray] = []
        dChunks: list[np.ndarray] = []

        def collect(groupA: np.ndarray, groupB: np.ndarray, distances: np.ndarray, mask: np.ndarray) -> None:
            if not np.any(mask):
                return
            globalI = groupA[mask]
            globalJ = groupB[mask]
            low = np.minimum(globalI, globalJ)
            high = np.maximum(globalI, globalJ)
            iChunks.append(low)
            jChunks.append(high)
            dChunks.append(distances[mask])

        for key, start in self._startIndices.items():
            cellParticles = self._lookup[start:start + self._runLengths[key], 1]
            cellPos = positions[cellParticles]
            nCell = len(cellParticles)

            # --- Pairs within the same cell (upper triangle) --- #
            if nCell > 1:
                rowIdx, colIdx = np.triu_indices(nCell, k=1)
                diff = cellPos[rowIdx] - cellPos[colIdx]
                distances = np.sqrt(np.sum(diff * diff, axis=1))
                collect(cellParticles[rowIdx], cellParticles[colIdx], distances, distances < radius)

            # --- Pairs with neighbor cells (half stencil only) --- #
            cx, cy = self._keyToCell(key)
            for dx, dy in _HALF_STENCIL:
                neighborParticles = self._cellParticles(cx + dx, cy + dy)
                if neighborParticles is None:
                    continue

                neighborPos = positions[neighborParticles]
                diff = cellPos[:, np.newaxis, :] - neighborPos[np.newaxis, :, :]
                distances = np.sqrt(np.sum(diff * diff, axis=2))

                localI, localJ = np.nonzero(distances < radius)
                if len(localI) > 0:
                    mask = np.ones(len(localI), dtype=bool)
                    collect(
                        cellParticles[localI], neighborParticles[localJ],
                        distances[localI, localJ], mask,
                    )

        if not iChunks:
            return (_EMPTY_INDICES, _EMPTY_INDICES, _EMPTY_DISTANCES)

        return (np.concatenate(iChunks), np.concatenate(jChunks), np.concatenate(dChunks))

# -- SPH Density and Pressure Fields -- #

'''
Density and pressure-force computation for the SPH canvas.

Density is reconstructed by summation over neighbors (self
included):

    rho_i = sum_j m_j * W(|x_i - x_j|)

Pressure follows a linear equation of state around the rest density,

    p = k * (rho - rho0)

which is negative below rest density, so sparse regions pull
particles together. The force on particle i sums, over its
neighbors j != i,

    F_i = sum_j  dir(i -> j) * p_shared(rho_j, rho_i) * W'(d_ij) * m_i / rho_j

where p_shared is the mean of the two pressures, so the pair (i, j)
and the pair (j, i) see the same scalar magnitude. W' is negative
inside the support: a positive shared pressure pushes i away from j.

Any density used as a divisor is floored at densityEpsilon. Two
particles at exactly the same position have no defined direction;
they are separated along a unit vector at a random angle.

The per-particle methods (densityAt, pressureForce) answer single
queries; the batch methods (computeDensities, computePressureForces)
evaluate the same sums for all particles at once from the pair list.
'''

from __future__ import annotations

import logging
import math

import numpy as np

from sphCanvas import constants as const
from sphCanvas.sph.protocols import SimulationConfig
from sphCanvas.sph.kernels import SphKernel, SpikyKernel
from sphCanvas.sph.particles import ParticleStore
from sphCanvas.sph.neighborSearch import NeighborSearch

logger = logging.getLogger(__name__)


class FieldSolver:
    '''
    Density and pressure evaluation for one configuration.

    Parameters:
    -----------
    config : SimulationConfig
        Supplies pressureMultiplier, targetDensity and smoothingRadius
    kernel : SphKernel | None
        Smoothing kernel (defaults to SpikyKernel at the config radius)
    rng : np.random.Generator | None
        Generator for the coincident-particle fallback direction
    '''

    def __init__(
        self,
        config: SimulationConfig,
        kernel: SphKernel | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._config = config
        self._kernel = kernel or SpikyKernel(config.smoothingRadius)
        self._rng = rng or np.random.default_rng()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def kernel(self) -> SphKernel:
        return self._kernel

    ######################################################################
    # -- Equation of State -- #
    ######################################################################

    def pressureFromDensity(self, density: float | np.ndarray) -> float | np.ndarray:
        '''
        Linear equation of state: k * (rho - rho0).
        '''
        return self._config.pressureMultiplier * (density - self._config.targetDensity)

    def sharedPressure(self, density1: float | np.ndarray, density2: float | np.ndarray) -> float | np.ndarray:
        '''
        Mean pressure of a particle pair; symmetric in its arguments.
        '''
        return (self.pressureFromDensity(density1) + self.pressureFromDensity(density2)) / 2.0

    def fallbackDirection(self, size: int | None = None) -> np.ndarray:
        '''
        Unit vector(s) at uniformly random angles.

        Parameters:
        -----------
        size : int | None
            Number of vectors; None for a single vector of shape (2,)

        Returns:
        --------
        np.ndarray : Shape (2,) or (size, 2)
        '''
        theta = self._rng.uniform(0.0, 2.0 * math.pi, size=size)
        return np.stack([np.cos(theta), np.sin(theta)], axis=-1)

    ######################################################################
    # -- Single Queries -- #
    ######################################################################

    def densityAt(self, x: float, y: float, grid: NeighborSearch, particles: ParticleStore) -> float:
        '''
        Density at an arbitrary point.

        A particle sitting exactly on the point contributes m * W(0).

        Parameters:
        -----------
        x, y : float
            Query point [px]
        grid : NeighborSearch
            Grid rebuilt from particles.positions
        particles : ParticleStore
            Particle set the grid was built from

        Returns:
        --------
        float : Density (0 when no particle is in range)
        '''
        indices, distances = grid.neighborsWithinRadius(x, y)
        if len(indices) == 0:
            return 0.0
        influence = self._kernel.evaluateBatch(distances)
        return float(np.sum(particles.masses[indices] * influence))

    def pressureForce(self, i: int, grid: NeighborSearch, particles: ParticleStore) -> np.ndarray:
        '''
        Pressure force on particle i from its neighbors.

        Reads particles.densities, which must hold the current
        density of every particle.

        Returns:
        --------
        np.ndarray : Force vector, shape (2,)
        '''
        position = particles.positions[i]
        indices, distances = grid.neighborsWithinRadius(position[0], position[1])

        others = indices != i
        indices = indices[others]
        distances = distances[others]
        if len(indices) == 0:
            return np.zeros(2)

        offsets = particles.positions[indices] - position
        coincident = distances < const.coincidentTolerance
        safeDistances = np.where(coincident, 1.0, distances)
        directions = offsets / safeDistances[:, np.newaxis]
        if np.any(coincident):
            directions[coincident] = self.fallbackDirection(int(np.sum(coincident)))

        slope = self._kernel.derivativeBatch(distances)
        neighborDensities = particles.densities[indices]
        shared = self.sharedPressure(neighborDensities, particles.densities[i])
        divisor = np.maximum(neighborDensities, const.densityEpsilon)

        magnitude = shared * slope * particles.masses[i] / divisor
        return np.sum(magnitude[:, np.newaxis] * directions, axis=0)

    ######################################################################
    # -- Batch Passes (Vectorized) -- #
    ######################################################################

    def computeDensities(self, grid: NeighborSearch, particles: ParticleStore) -> np.ndarray:
        '''
        Density pass: overwrite particles.densities for every particle.

        rho_i = m_i * W(0) + sum_{j in pairs} m_j * W(d_ij)

        Returns:
        --------
        np.ndarray : The updated density array, shape (N,)
        '''
        densities = particles.masses * self._kernel.evaluate(0.0)

        iIdx, jIdx, dist = grid.queryPairs()
        if len(iIdx) > 0:
            wij = self._kernel.evaluateBatch(dist)
            np.add.at(densities, iIdx, particles.masses[jIdx] * wij)
            np.add.at(densities, jIdx, particles.masses[iIdx] * wij)

        particles.densities = densities
        return densities

    def computePressureForces(self, grid: NeighborSearch, particles: ParticleStore) -> np.ndarray:
        '''
        Pressure pass: force on every particle, from the pair list.

        Must run after computeDensities for the same positions.

        Returns:
        --------
        np.ndarray : Forces, shape (N, 2)
        '''
        forces = np.zeros_like(particles.positions)

        iIdx, jIdx, dist = grid.queryPairs()
        if len(iIdx) == 0:
            return forces

        # Unit direction from i toward j
        offsets = particles.positions[jIdx] - particles.positions[iIdx]
        coincident = dist < const.coincidentTolerance
        safeDistances = np.where(coincident, 1.0, dist)
        directions = offsets / safeDistances[:, np.newaxis]
        if np.any(coincident):
            nCoincident = int(np.sum(coincident))
            logger.debug('%d coincident particle pairs, using random separation', nCoincident)
            directions[coincident] = self.fallbackDirection(nCoincident)

        densities = particles.densities
        slope = self._kernel.derivativeBatch(dist)
        shared = self.sharedPressure(densities[iIdx], densities[jIdx])
        divisorI = np.maximum(densities[iIdx], const.densityEpsilon)
        divisorJ = np.maximum(densities[jIdx], const.densityEpsilon)

        # i sees j along +direction, j sees i along -direction
        magnitudeI = shared * slope * particles.masses[iIdx] / divisorJ
        magnitudeJ = shared * slope * particles.masses[jIdx] / divisorI

        np.add.at(forces, iIdx, magnitudeI[:, np.newaxis] * directions)
        np.add.at(forces, jIdx, -magnitudeJ[:, np.newaxis] * directions)

        return forces

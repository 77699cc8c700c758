# -- SPH Particle Store -- #

'''
Struct-of-arrays store for the canvas particles.

Positions, velocities, masses and densities are parallel NumPy
arrays indexed by particle index. The index of a particle is stable
for one configuration; reset() replaces every array together so the
per-particle state never goes out of step with the particle set.
'''

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from sphCanvas import constants as const
from sphCanvas.sph.protocols import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass
class ParticleView:
    '''What the renderer needs to draw one particle.'''

    x: float
    y: float
    radius: float
    color: str
    speed: float = 0.0


@dataclass
class ParticleStore:
    '''
    Particle state for the SPH canvas.

    Vector quantities have shape (N, 2), scalar quantities (N,).

    Parameters:
    -----------
    positions : np.ndarray
        Particle positions [px], shape (N, 2)
    velocities : np.ndarray
        Particle velocities [px/frame], shape (N, 2)
    masses : np.ndarray
        Particle masses, shape (N,)
    densities : np.ndarray
        Density of each particle from the latest density pass, shape (N,)
    colors : list[str]
        Fill color of each particle
    '''

    positions: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)))
    velocities: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)))
    masses: np.ndarray = field(default_factory=lambda: np.zeros(0))
    densities: np.ndarray = field(default_factory=lambda: np.zeros(0))
    colors: list[str] = field(default_factory=list)

    @property
    def nParticles(self) -> int:
        '''Number of particles.'''
        return self.positions.shape[0]

    @property
    def radii(self) -> np.ndarray:
        '''Collision radius of each particle (mass / 2).'''
        return self.masses / 2.0

    def count(self) -> int:
        '''Number of particles.'''
        return self.nParticles

    def isEmpty(self) -> bool:
        return self.nParticles == 0

    ######################################################################
    # -- Regeneration -- #
    ######################################################################

    def reset(self, config: SimulationConfig, rng: np.random.Generator) -> None:
        '''
        Regenerate the particle set for a configuration.

        Previous positions, velocities and densities are discarded.
        Velocities start at zero and densities at zero until the
        next density pass.

        Parameters:
        -----------
        config : SimulationConfig
            Validated configuration (count, layout, mass, canvas)
        rng : np.random.Generator
            Generator used for the random layout
        '''
        nParticles = max(0, int(config.nParticles))

        if config.layout == 'grid':
            fresh = ParticleStore.createGrid(
                nParticles, config.width, config.height, config.particleMass,
            )
        else:
            fresh = ParticleStore.createRandom(
                nParticles, config.width, config.height, config.particleMass, rng,
            )

        self.positions = fresh.positions
        self.velocities = fresh.velocities
        self.masses = fresh.masses
        self.densities = fresh.densities
        self.colors = fresh.colors

        logger.debug('Generated %d particles (%s layout)', nParticles, config.layout)

    @classmethod
    def createEmpty(cls) -> ParticleStore:
        return cls()

    @classmethod
    def fromPositions(
        cls,
        positions: np.ndarray | list,
        mass: float = const.particleMass,
        velocities: np.ndarray | list | None = None,
    ) -> ParticleStore:
        '''
        Build a store from explicit positions.

        Parameters:
        -----------
        positions : np.ndarray | list
            Particle positions, shape (N, 2)
        mass : float
            Mass assigned to every particle
        velocities : np.ndarray | list | None
            Initial velocities, shape (N, 2); zeros if None
        '''
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2).copy()
        nParticles = positions.shape[0]

        if velocities is None:
            velocities = np.zeros((nParticles, 2))
        else:
            velocities = np.asarray(velocities, dtype=np.float64).reshape(nParticles, 2).copy()

        return cls(
            positions=positions,
            velocities=velocities,
            masses=np.full(nParticles, float(mass)),
            densities=np.zeros(nParticles),
            colors=[const.particleColor] * nParticles,
        )

    @classmethod
    def createRandom(
        cls,
        nParticles: int,
        width: float,
        height: float,
        mass: float,
        rng: np.random.Generator,
    ) -> ParticleStore:
        '''
        Uniformly scatter particles over the canvas.

        A margin of one particle diameter (= mass) is kept free on
        every edge.
        '''
        margin = mass
        xs = margin + rng.random(nParticles) * max(width - 2.0 * margin, 0.0)
        ys = margin + rng.random(nParticles) * max(height - 2.0 * margin, 0.0)
        return cls.fromPositions(np.column_stack([xs, ys]), mass)

    @classmethod
    def createGrid(
        cls,
        nParticles: int,
        width: float,
        height: float,
        mass: float,
    ) -> ParticleStore:
        '''
        Place particles on a square block centred on the canvas.

        The block has ceil(sqrt(n)) columns with a spacing of one
        particle diameter; the last row may be partially filled.
        '''
        if nParticles == 0:
            return cls.fromPositions(np.zeros((0, 2)), mass)

        nCols = math.ceil(math.sqrt(nParticles))
        nRows = math.ceil(nParticles / nCols)
        spacing = mass

        index = np.arange(nParticles)
        cols = index % nCols
        rows = index // nCols

        xs = width / 2.0 - nCols / 2.0 * spacing + cols * spacing
        ys = height / 2.0 - nRows / 2.0 * spacing + rows * spacing
        return cls.fromPositions(np.column_stack([xs, ys]), mass)

    ######################################################################
    # -- Renderer View and Diagnostics -- #
    ######################################################################

    def views(self) -> list[ParticleView]:
        '''Particle list handed to the renderer each frame.'''
        radii = self.radii
        speeds = self.speeds()
        return [
            ParticleView(
                x=float(self.positions[i, 0]),
                y=float(self.positions[i, 1]),
                radius=float(radii[i]),
                color=self.colors[i],
                speed=float(speeds[i]),
            )
            for i in range(self.nParticles)
        ]

    def speeds(self) -> np.ndarray:
        '''Velocity magnitude of each particle.'''
        return np.linalg.norm(self.velocities, axis=1)

    def kineticEnergy(self) -> float:
        '''
        Total kinetic energy.

        KE = (1/2) * sum_i m_i * |v_i|^2
        '''
        speedsSq = np.sum(self.velocities * self.velocities, axis=1)
        return float(0.5 * np.sum(self.masses * speedsSq))

    def maxSpeed(self) -> float:
        if self.isEmpty():
            return 0.0
        return float(np.max(self.speeds()))

    def copy(self) -> ParticleStore:
        '''Deep copy of all arrays.'''
        return ParticleStore(
            positions=self.positions.copy(),
            velocities=self.velocities.copy(),
            masses=self.masses.copy(),
            densities=self.densities.copy(),
            colors=list(self.colors),
        )

# -- SPH Time Integration -- #

'''
Explicit Euler integration with boundary reflection.

Per particle and frame, in order:

    1. v_y += gravity * dt
    2. v   += F_pressure / rho * dt
    3. on each axis, if the particle's edge (x -/+ radius) lies
       beyond 0 or the canvas extent: v_axis *= -bounce
    4. x   += v * dt

Positions are never clamped. A particle may overshoot an edge for a
frame; the reflected velocity brings it back over the following
frames. The drift uses the velocity after the reflection.
'''

from __future__ import annotations

import logging
from typing import Protocol

import numpy as np

from sphCanvas import constants as const
from sphCanvas.sph.particles import ParticleStore
from sphCanvas.sph.protocols import SimulationConfig

logger = logging.getLogger(__name__)


######################################################################
# -- Time Integrator Protocol -- #
######################################################################

class TimeIntegrator(Protocol):
    '''Protocol for time integration schemes.'''

    def integrate(
        self,
        particles: ParticleStore,
        pressureForces: np.ndarray,
        config: SimulationConfig,
        dt: float = const.defaultTimeStep,
    ) -> None:
        '''
        Advance all particles by one step, in place.

        Parameters:
        -----------
        particles : ParticleStore
            Particle system to advance
        pressureForces : np.ndarray
            Pressure force on each particle, shape (N, 2)
        config : SimulationConfig
            Supplies gravity, bounce and the canvas extent
        dt : float
            Time step [frames]
        '''
        ...


######################################################################
# -- Explicit Euler Integrator -- #
######################################################################

class ExplicitEuler:
    '''
    Explicit Euler integrator with edge reflection.

    The friction field of the configuration is not applied.
    '''

    def integrate(
        self,
        particles: ParticleStore,
        pressureForces: np.ndarray,
        config: SimulationConfig,
        dt: float = const.defaultTimeStep,
    ) -> None:
        if particles.isEmpty():
            return

        velocities = particles.velocities
        positions = particles.positions

        # Gravity
        velocities[:, 1] += config.gravity * dt

        # Pressure acceleration
        densities = np.maximum(particles.densities, const.densityEpsilon)
        velocities += pressureForces / densities[:, np.newaxis] * dt

        nonFinite = ~np.all(np.isfinite(velocities), axis=1)
        if np.any(nonFinite):
            logger.warning('Resetting %d non-finite particle velocities', int(np.sum(nonFinite)))
            velocities[nonFinite] = 0.0

        # Reflect at the canvas edges
        radii = particles.radii
        extent = np.array([config.width, config.height], dtype=np.float64)
        outside = (positions - radii[:, np.newaxis] < 0.0) | (positions + radii[:, np.newaxis] > extent)
        velocities[outside] *= -config.bounce

        # Drift
        positions += velocities * dt

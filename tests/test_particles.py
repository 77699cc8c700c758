# -- Particle Store Tests -- #

import numpy as np
import pytest

from sphCanvas.sph.particles import ParticleStore, ParticleView
from sphCanvas.sph.protocols import SimulationConfig


def testEmptyStore():
    particles = ParticleStore()
    assert particles.count() == 0
    assert particles.isEmpty()
    assert particles.kineticEnergy() == 0.0
    assert particles.maxSpeed() == 0.0
    assert particles.views() == []


def testFromPositions():
    particles = ParticleStore.fromPositions([[1.0, 2.0], [3.0, 4.0]], mass=8.0)
    assert particles.nParticles == 2
    assert np.all(particles.velocities == 0.0)
    assert np.all(particles.densities == 0.0)
    assert np.all(particles.radii == 4.0)
    assert particles.colors == ['blue', 'blue']


def testViews():
    particles = ParticleStore.fromPositions([[1.0, 2.0]], mass=10.0)
    assert particles.views() == [ParticleView(x=1.0, y=2.0, radius=5.0, color='blue')]


def testKineticEnergy():
    particles = ParticleStore.fromPositions(
        [[0.0, 0.0], [10.0, 0.0]], mass=2.0, velocities=[[3.0, 4.0], [0.0, 1.0]],
    )
    assert particles.kineticEnergy() == pytest.approx(0.5 * 2.0 * 25.0 + 0.5 * 2.0 * 1.0)
    assert particles.maxSpeed() == pytest.approx(5.0)


def testRandomLayoutInsideMargins(rng):
    config = SimulationConfig(nParticles=500, particleMass=10.0)
    particles = ParticleStore()
    particles.reset(config, rng)

    assert particles.nParticles == 500
    assert np.all(particles.positions >= 10.0)
    assert np.all(particles.positions[:, 0] <= config.width - 10.0)
    assert np.all(particles.positions[:, 1] <= config.height - 10.0)


def testSeededLayoutIsReproducible():
    config = SimulationConfig(nParticles=50, seed=7)
    first, second = ParticleStore(), ParticleStore()
    first.reset(config, np.random.default_rng(config.seed))
    second.reset(config, np.random.default_rng(config.seed))
    assert np.array_equal(first.positions, second.positions)


def testGridLayoutCentred():
    particles = ParticleStore.createGrid(900, 800, 800, 10.0)
    assert particles.nParticles == 900
    centre = particles.positions.mean(axis=0)
    assert centre == pytest.approx([395.0, 395.0])

    xs = np.unique(particles.positions[:, 0])
    assert len(xs) == 30
    assert np.allclose(np.diff(xs), 10.0)


def testGridLayoutPartialRow():
    particles = ParticleStore.createGrid(10, 800, 800, 10.0)
    assert particles.nParticles == 10
    assert len(np.unique(particles.positions[:, 0])) == 4


def testResetReplacesAllArrays(rng):
    particles = ParticleStore()
    particles.reset(SimulationConfig(nParticles=20), rng)
    particles.velocities[:] = 3.0
    particles.densities[:] = 1.0

    particles.reset(SimulationConfig(nParticles=5), rng)
    assert particles.positions.shape == (5, 2)
    assert particles.velocities.shape == (5, 2)
    assert np.all(particles.velocities == 0.0)
    assert particles.densities.shape == (5,)
    assert len(particles.colors) == 5


def testCopyIsIndependent():
    particles = ParticleStore.fromPositions([[1.0, 1.0]])
    clone = particles.copy()
    clone.positions[0] = [9.0, 9.0]
    assert particles.positions[0] == pytest.approx([1.0, 1.0])

# -- Explicit Euler Integrator Tests -- #

import numpy as np
import pytest

from sphCanvas.sph.particles import ParticleStore
from sphCanvas.sph.protocols import SimulationConfig
from sphCanvas.sph.timeIntegration import ExplicitEuler


def singleParticle(position, velocity, density=1.0):
    particles = ParticleStore.fromPositions([position], mass=10.0, velocities=[velocity])
    particles.densities = np.array([density])
    return particles


def testBounceReflectsVelocity():
    '''Particle overlapping the left edge with vx = 5 leaves with vx = -2.'''
    config = SimulationConfig(gravity=0.0, bounce=0.4)
    particles = singleParticle([2.0, 400.0], [5.0, 0.0])
    ExplicitEuler().integrate(particles, np.zeros((1, 2)), config, dt=1.0)

    assert particles.velocities[0, 0] == pytest.approx(-2.0)
    assert particles.velocities[0, 1] == 0.0
    # Drift uses the reflected velocity; no clamping
    assert particles.positions[0, 0] == pytest.approx(0.0)


def testReflectionIsPerAxis():
    config = SimulationConfig(gravity=0.0, bounce=0.5)
    particles = singleParticle([400.0, 798.0], [3.0, 4.0])
    ExplicitEuler().integrate(particles, np.zeros((1, 2)), config)

    assert particles.velocities[0] == pytest.approx([3.0, -2.0])


def testOvershootNotClamped():
    config = SimulationConfig(gravity=0.0, bounce=0.0)
    particles = singleParticle([-30.0, 400.0], [-1.0, 0.0])
    ExplicitEuler().integrate(particles, np.zeros((1, 2)), config)

    assert particles.positions[0, 0] == pytest.approx(-30.0)
    assert particles.velocities[0, 0] == 0.0


def testGravityThenPressureThenDrift():
    config = SimulationConfig(gravity=0.5, bounce=0.4)
    particles = singleParticle([400.0, 400.0], [0.0, 0.0], density=2.0)
    forces = np.array([[1.0, -3.0]])
    ExplicitEuler().integrate(particles, forces, config, dt=2.0)

    # v = (0, 0.5 * 2) + (1, -3) / 2 * 2 = (1, -2)
    assert particles.velocities[0] == pytest.approx([1.0, -2.0])
    assert particles.positions[0] == pytest.approx([402.0, 396.0])


def testZeroDensityIsFloored():
    config = SimulationConfig(gravity=0.0)
    particles = singleParticle([400.0, 400.0], [0.0, 0.0], density=0.0)
    ExplicitEuler().integrate(particles, np.array([[1e-9, 0.0]]), config)
    assert np.all(np.isfinite(particles.velocities))


def testNonFiniteVelocityReset(caplog):
    config = SimulationConfig(gravity=0.0)
    particles = singleParticle([400.0, 400.0], [0.0, 0.0])
    ExplicitEuler().integrate(particles, np.array([[np.inf, 0.0]]), config)

    assert np.all(particles.velocities == 0.0)
    assert 'non-finite' in caplog.text


def testEmptyStoreIsNoOp():
    particles = ParticleStore()
    ExplicitEuler().integrate(particles, np.zeros((0, 2)), SimulationConfig())
    assert particles.nParticles == 0


def testFrictionIsNotApplied():
    base = SimulationConfig(gravity=0.0)
    results = []
    for friction in (0.0, 1.0):
        particles = singleParticle([400.0, 400.0], [2.0, 1.0])
        ExplicitEuler().integrate(particles, np.zeros((1, 2)), base.replace(friction=friction))
        results.append(particles.velocities.copy())
    assert np.array_equal(results[0], results[1])


def testBounceAtRightEdge():
    '''x + radius beyond the width reflects vx = 5 into -2.'''
    config = SimulationConfig(gravity=0.0, bounce=0.4)
    particles = singleParticle([797.0, 400.0], [5.0, 0.0])
    ExplicitEuler().integrate(particles, np.zeros((1, 2)), config)

    assert particles.velocities[0, 0] == pytest.approx(-2.0)
    assert particles.positions[0, 0] == pytest.approx(795.0)

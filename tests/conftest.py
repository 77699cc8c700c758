# -- Shared Test Fixtures -- #

'''
Pytest fixtures for the sphCanvas test suite.
'''

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
projectRoot = Path(__file__).parent.parent
if str(projectRoot) not in sys.path:
    sys.path.insert(0, str(projectRoot))

from sphCanvas.scheduler import HeadlessScheduler
from sphCanvas.sph.fluidSimulation import FluidSimulation
from sphCanvas.sph.protocols import SimulationConfig


@pytest.fixture
def projectRootPath():
    return projectRoot


@pytest.fixture
def rng():
    '''Seeded generator so random layouts are reproducible.'''
    return np.random.default_rng(1234)


@pytest.fixture
def pairConfig():
    '''
    Two-particle setup: masses 10, radius 50, no gravity, no bounce,
    unit stiffness and zero rest density.
    '''
    return SimulationConfig(
        nParticles=2,
        gravity=0.0,
        bounce=0.0,
        pressureMultiplier=1.0,
        targetDensity=0.0,
        smoothingRadius=50.0,
        particleMass=10.0,
        seed=0,
    )


@pytest.fixture
def smallConfig():
    return SimulationConfig.small().replace(nParticles=60)


@pytest.fixture
def scheduler():
    return HeadlessScheduler()


@pytest.fixture
def simulation(scheduler):
    '''Unconfigured simulation driven by a headless scheduler.'''
    return FluidSimulation(scheduler=scheduler)

# -- SPH Engine Package -- #

'''
Core Smoothed Particle Hydrodynamics (SPH) engine for the canvas.

Provides the configuration snapshot, particle store, spatial hash
grid, smoothing kernel, density/pressure solver, explicit Euler
integrator and the simulation controller.
'''

from sphCanvas.sph.protocols import (
    SimulationConfig,
    SimulationState,
    ConfigurationError,
    SimulationStateError,
)
from sphCanvas.sph.kernels import SpikyKernel
from sphCanvas.sph.particles import ParticleStore, ParticleView
from sphCanvas.sph.neighborSearch import SpatialHashGrid
from sphCanvas.sph.fieldSolver import FieldSolver
from sphCanvas.sph.timeIntegration import ExplicitEuler
from sphCanvas.sph.debugOverlay import DebugOverlay, OverlayItems
from sphCanvas.sph.fluidSimulation import FluidSimulation, SimulationStatus, ProbeResult

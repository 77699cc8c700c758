# -- Fluid Simulation Controller -- #

'''
Lifecycle and per-frame loop of the SPH canvas simulation.

State machine:

    IDLE --configure--> CONFIGURED --start--> RUNNING --stop--> STOPPED

configure() while RUNNING keeps the simulation RUNNING; from
CONFIGURED or STOPPED it leads to CONFIGURED. start() from STOPPED
or CONFIGURED resumes from the retained positions and velocities.

Each step runs, in this order and to completion:

    1. Rebuild the spatial hash grid from the current positions
    2. Density pass (all densities written)
    3. Pressure pass (reads only densities from step 2)
    4. Integrate (gravity, pressure, edge reflection, drift)

Steps 1-3 only read positions, so every neighbor query of a step
sees the positions from before that step's integration.
'''

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from sphCanvas import constants as const
from sphCanvas.interfaces import CanvasRenderer, FrameScheduler, FrameSnapshot
from sphCanvas.sph.debugOverlay import DebugOverlay, OverlayItems
from sphCanvas.sph.fieldSolver import FieldSolver
from sphCanvas.sph.neighborSearch import SpatialHashGrid
from sphCanvas.sph.particles import ParticleStore
from sphCanvas.sph.protocols import SimulationConfig, SimulationState, SimulationStateError
from sphCanvas.sph.timeIntegration import ExplicitEuler, TimeIntegrator

logger = logging.getLogger(__name__)

# Fields whose change requires a fresh particle set
_REGENERATING_FIELDS = ('nParticles', 'layout', 'particleMass', 'seed')


class SimulationStatus(Enum):
    IDLE = 'idle'
    CONFIGURED = 'configured'
    RUNNING = 'running'
    STOPPED = 'stopped'


@dataclass
class ProbeResult:
    '''Density measured at a canvas point.'''

    x: float
    y: float
    density: float
    radius: float


class FluidSimulation:
    '''
    SPH canvas simulation controller.

    Owns the particle store, the spatial index and the field solver
    for one canvas. UI code talks to it through explicit references;
    frames are driven by an injected scheduler and drawn by an
    injected renderer.

    Parameters:
    -----------
    width : int
        Canvas width [px], fixed for the instance
    height : int
        Canvas height [px], fixed for the instance
    scheduler : FrameScheduler | None
        Receives a frame request on start() and after every running frame
    renderer : CanvasRenderer | None
        Receives a FrameSnapshot after every running frame
    integrator : TimeIntegrator | None
        Time integrator (defaults to ExplicitEuler)
    '''

    def __init__(
        self,
        width: int = const.canvasWidth,
        height: int = const.canvasHeight,
        scheduler: FrameScheduler | None = None,
        renderer: CanvasRenderer | None = None,
        integrator: TimeIntegrator | None = None,
    ) -> None:
        self._width = int(width)
        self._height = int(height)
        self._scheduler = scheduler
        self._renderer = renderer
        self._integrator = integrator or ExplicitEuler()

        self._status = SimulationStatus.IDLE
        self._config: SimulationConfig | None = None
        self._particles = ParticleStore()
        self._grid = SpatialHashGrid(0.0)
        self._solver: FieldSolver | None = None
        self._rng = np.random.default_rng()
        self._overlay = DebugOverlay()

        self._frame: int = 0
        self._time: float = 0.0
        self._inStep: bool = False
        self._pendingConfigs: list[SimulationConfig] = []

    ######################################################################
    # -- Configuration -- #
    ######################################################################

    def configure(self, config: SimulationConfig) -> None:
        '''
        Apply a new configuration.

        The config is validated before anything changes; a rejected
        config leaves the simulation untouched. The particle set is
        regenerated on the first call and whenever the particle
        count, layout, mass or seed changes. While running, the next
        step uses the new parameters.

        Raises:
        -------
        ConfigurationError : If the config cannot be applied
        '''
        if config.width != self._width or config.height != self._height:
            logger.warning(
                'Canvas size is fixed at %dx%d; ignoring configured %sx%s',
                self._width, self._height, config.width, config.height,
            )
            config = config.replace(width=self._width, height=self._height)

        validated = config.validated()

        if self._inStep:
            self._pendingConfigs.append(validated)
            return

        self._applyConfig(validated)

    def _applyConfig(self, config: SimulationConfig) -> None:
        previous = self._config
        regenerate = previous is None or any(
            getattr(previous, name) != getattr(config, name) for name in _REGENERATING_FIELDS
        )

        rng = np.random.default_rng(config.seed) if regenerate else self._rng
        grid = SpatialHashGrid(config.smoothingRadius)
        solver = FieldSolver(config, rng=rng)

        if regenerate:
            self._particles.reset(config, rng)
            self._frame = 0
            self._time = 0.0

        self._config = config
        self._rng = rng
        self._grid = grid
        self._solver = solver

        if self._status is not SimulationStatus.RUNNING:
            self._status = SimulationStatus.CONFIGURED

        logger.info('config: %s', config)

    ######################################################################
    # -- Lifecycle -- #
    ######################################################################

    def start(self) -> None:
        '''
        Begin stepping once per scheduled frame.

        Raises:
        -------
        SimulationStateError : If configure() has never been called
        '''
        if self._status is SimulationStatus.RUNNING:
            return
        if self._status is SimulationStatus.IDLE:
            raise SimulationStateError('configure() must be called before start()')

        self._status = SimulationStatus.RUNNING
        logger.info('Simulation started at frame %d', self._frame)
        self._requestFrame()

    def stop(self) -> None:
        '''Halt stepping; positions and velocities are kept.'''
        if self._status is not SimulationStatus.RUNNING:
            return
        self._status = SimulationStatus.STOPPED
        logger.info('Simulation stopped at frame %d', self._frame)

    def restart(self) -> None:
        self.stop()
        self.start()

    def _requestFrame(self) -> None:
        if self._scheduler is not None:
            self._scheduler.requestFrame(self.onFrame)

    def onFrame(self) -> None:
        '''
        Scheduler callback: one step, one draw, next request.

        A frame that arrives after stop() does nothing.
        '''
        if self._status is not SimulationStatus.RUNNING:
            return

        self.step()

        if self._renderer is not None:
            self._renderer.draw(self.snapshot())

        if self._status is SimulationStatus.RUNNING:
            self._requestFrame()

    ######################################################################
    # -- Stepping -- #
    ######################################################################

    def step(self, dt: float = const.defaultTimeStep) -> SimulationState:
        '''
        Advance the simulation by one frame.

        With no particles (or before the first configure) this is a
        no-op.

        Parameters:
        -----------
        dt : float
            Time step [frames]

        Returns:
        --------
        SimulationState : Diagnostics after the step

        Raises:
        -------
        ValueError : If dt is not a positive finite number
        '''
        if not math.isfinite(dt) or dt <= 0.0:
            raise ValueError(f'dt must be a positive finite number, got {dt}')

        if self._solver is None or self._particles.isEmpty():
            return self.currentState

        self._inStep = True
        try:
            particles = self._particles

            # 1. Spatial index from pre-integration positions
            self._grid.rebuild(particles.positions)

            # 2. Density pass
            self._solver.computeDensities(self._grid, particles)

            # 3. Pressure pass
            pressureForces = self._solver.computePressureForces(self._grid, particles)

            # 4. Integrate
            self._integrator.integrate(particles, pressureForces, self._config, dt)

            self._frame += 1
            self._time += dt
        finally:
            self._inStep = False

        while self._pendingConfigs:
            self._applyConfig(self._pendingConfigs.pop(0))

        return self.currentState

    ######################################################################
    # -- Probing and Rendering -- #
    ######################################################################

    def probe(self, x: float, y: float) -> ProbeResult:
        '''
        Measure the density at a canvas point.

        Uses a private grid over the current positions; particle
        state, the simulation grid and the lifecycle state are left
        untouched. A debug circle of the smoothing radius is added
        at the point.
        '''
        radius = self._config.smoothingRadius if self._config is not None else 0.0

        density = 0.0
        if self._solver is not None and not self._particles.isEmpty():
            probeGrid = SpatialHashGrid(radius)
            probeGrid.rebuild(self._particles.positions)
            density = self._solver.densityAt(x, y, probeGrid, self._particles)

        self._overlay.addCircle(x, y, radius, const.probeColor)
        logger.info('density at (%.1f, %.1f): %g', x, y, density)

        return ProbeResult(x=float(x), y=float(y), density=density, radius=radius)

    def snapshot(self) -> FrameSnapshot:
        '''
        Frame hand-off for the renderer.

        Drains the debug overlay: primitives appear in exactly one
        snapshot.
        '''
        return FrameSnapshot(
            width=self._width,
            height=self._height,
            particles=self._particles.views(),
            overlay=self._overlay.drain(),
            state=self.currentState,
        )

    ######################################################################
    # -- Properties -- #
    ######################################################################

    @property
    def currentState(self) -> SimulationState:
        '''Current diagnostic snapshot.'''
        p = self._particles
        densities = p.densities
        return SimulationState(
            frame=self._frame,
            time=self._time,
            nParticles=p.nParticles,
            kineticEnergy=p.kineticEnergy(),
            maxSpeed=p.maxSpeed(),
            meanDensity=float(np.mean(densities)) if len(densities) else 0.0,
            maxDensity=float(np.max(densities)) if len(densities) else 0.0,
        )

    @property
    def status(self) -> SimulationStatus:
        return self._status

    @property
    def isRunning(self) -> bool:
        '''Polled by schedulers to decide whether to keep requesting frames.'''
        return self._status is SimulationStatus.RUNNING

    @property
    def config(self) -> SimulationConfig | None:
        '''The configuration currently applied.'''
        return self._config

    @property
    def particles(self) -> ParticleStore:
        return self._particles

    @property
    def densities(self) -> np.ndarray:
        return self._particles.densities

    @property
    def grid(self) -> SpatialHashGrid:
        '''Spatial index from the latest step.'''
        return self._grid

    @property
    def solver(self) -> FieldSolver | None:
        return self._solver

    @property
    def overlay(self) -> OverlayItems:
        '''Debug primitives accumulated since the last snapshot.'''
        return self._overlay.peek()

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def time(self) -> float:
        return self._time

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

# -- SPH Canvas Protocols and Configuration -- #

'''
Configuration snapshot, diagnostic state and error types for the
SPH canvas simulation.

SimulationConfig is an immutable value: a simulation consumes one
snapshot per configure() call and never mutates it. Validation
happens here, before any simulation state is touched, so a bad
configuration is rejected as a whole.
'''

from __future__ import annotations

import json
import logging
import math
import numbers
from dataclasses import asdict, dataclass, fields, replace

from sphCanvas import constants as const

logger = logging.getLogger(__name__)


######################################################################
# -- Errors -- #
######################################################################

class ConfigurationError(ValueError):
    '''Raised when a SimulationConfig cannot be applied.'''


class SimulationStateError(RuntimeError):
    '''Raised when a lifecycle operation is invalid in the current state.'''


######################################################################
# -- Simulation Configuration -- #
######################################################################

# Keys used by the browser control panel, mapped onto field names
SNAKE_CASE_ALIASES: dict[str, str] = {
    'n_particles': 'nParticles',
    'pressure_multiplier': 'pressureMultiplier',
    'target_density': 'targetDensity',
    'smoothing_radius': 'smoothingRadius',
    'particle_mass': 'particleMass',
}

_LAYOUTS = ('random', 'grid')


@dataclass(frozen=True)
class SimulationConfig:
    '''
    Parameters for one configuration of the SPH canvas.

    Parameters:
    -----------
    width : int
        Canvas width [px]
    height : int
        Canvas height [px]
    nParticles : int
        Number of particles (negative values are clamped to 0)
    gravity : float
        Vertical velocity added per frame [px/frame^2]
    friction : float
        Reserved damping coefficient; not applied by the integrator
    bounce : float
        Restitution coefficient at the canvas edges, in [0, 1]
    pressureMultiplier : float
        Stiffness k in p = k * (rho - rho0)
    targetDensity : float
        Rest density rho0
    smoothingRadius : float
        Interaction cutoff [px]; <= 0 disables all interactions
    particleMass : float
        Mass of every particle; the radius is mass / 2
    layout : str
        Initial particle layout: 'random' or 'grid'
    seed : int | None
        Seed for the random generator (None for a fresh seed)
    '''

    width: int = const.canvasWidth
    height: int = const.canvasHeight
    nParticles: int = const.defaultParticleCount
    gravity: float = const.defaultGravity
    friction: float = const.defaultFriction
    bounce: float = const.defaultBounce
    pressureMultiplier: float = const.defaultPressureMultiplier
    targetDensity: float = const.defaultTargetDensity
    smoothingRadius: float = const.defaultSmoothingRadius
    particleMass: float = const.particleMass
    layout: str = 'random'
    seed: int | None = None

    @property
    def particleRadius(self) -> float:
        '''Collision/draw radius of a particle [px].'''
        return self.particleMass / 2.0

    @property
    def interactionsEnabled(self) -> bool:
        '''False when the smoothing radius leaves no interaction range.'''
        return self.smoothingRadius > 0.0

    def replace(self, **changes) -> SimulationConfig:
        '''Return a copy with the given fields changed.'''
        return replace(self, **changes)

    def validated(self) -> SimulationConfig:
        '''
        Check every field and return the config that will be applied.

        A negative particle count is clamped to zero; every other
        violation raises.

        Returns:
        --------
        SimulationConfig : Validated (possibly clamped) copy

        Raises:
        -------
        ConfigurationError : If a field cannot be applied
        '''
        for name in ('gravity', 'friction', 'bounce', 'pressureMultiplier',
                     'targetDensity', 'smoothingRadius', 'particleMass'):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise ConfigurationError(f'{name} must be a finite number, got {value!r}')

        try:
            width, height, nParticles = int(self.width), int(self.height), int(self.nParticles)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f'Canvas size and particle count must be integers: {e}') from e

        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f'Canvas size must be positive, got {self.width}x{self.height}'
            )
        if self.particleMass <= 0.0:
            raise ConfigurationError(f'particleMass must be positive, got {self.particleMass}')
        if not 0.0 <= self.bounce <= 1.0:
            raise ConfigurationError(f'bounce must lie in [0, 1], got {self.bounce}')
        if self.layout not in _LAYOUTS:
            raise ConfigurationError(f'Unknown layout: {self.layout}')
        if self.seed is not None and (
            isinstance(self.seed, bool) or not isinstance(self.seed, numbers.Integral) or self.seed < 0
        ):
            raise ConfigurationError(f'seed must be None or a non-negative integer, got {self.seed!r}')

        if nParticles < 0:
            logger.warning('nParticles=%d is negative, clamping to 0', nParticles)
            nParticles = 0

        if self.smoothingRadius <= 0.0:
            logger.warning(
                'smoothingRadius=%s leaves no interaction range; particles will not interact',
                self.smoothingRadius,
            )

        return replace(
            self,
            width=width,
            height=height,
            nParticles=nParticles,
        )

    ######################################################################
    # -- Serialization -- #
    ######################################################################

    def toDict(self) -> dict:
        '''Plain dict of all fields.'''
        return asdict(self)

    @classmethod
    def fromDict(cls, data: dict, base: SimulationConfig | None = None) -> SimulationConfig:
        '''
        Build a config from a flat parameter dict.

        Accepts camelCase field names and the control panel's
        snake_case names (n_particles, smoothing_radius, ...).
        Missing keys come from base (or the defaults).

        Raises:
        -------
        ConfigurationError : If an unknown key is present
        '''
        known = {f.name for f in fields(cls)}
        changes = {}
        for key, value in data.items():
            name = SNAKE_CASE_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f'Unknown configuration key: {key}')
            changes[name] = value

        return replace(base or cls(), **changes)

    @classmethod
    def fromJson(cls, configPath: str) -> SimulationConfig:
        '''
        Load configuration from a JSON file.

        Reads the 'canvas', 'particles' and 'physics' sections;
        missing keys fall back to the defaults.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        SimulationConfig : Loaded configuration
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        canvasSection = data.get('canvas', {})
        particleSection = data.get('particles', {})
        physicsSection = data.get('physics', {})

        return cls(
            width=canvasSection.get('width', const.canvasWidth),
            height=canvasSection.get('height', const.canvasHeight),
            nParticles=particleSection.get('count', const.defaultParticleCount),
            particleMass=particleSection.get('mass', const.particleMass),
            layout=particleSection.get('layout', 'random'),
            seed=particleSection.get('seed'),
            gravity=physicsSection.get('gravity', const.defaultGravity),
            friction=physicsSection.get('friction', const.defaultFriction),
            bounce=physicsSection.get('bounce', const.defaultBounce),
            pressureMultiplier=physicsSection.get('pressureMultiplier', const.defaultPressureMultiplier),
            targetDensity=physicsSection.get('targetDensity', const.defaultTargetDensity),
            smoothingRadius=physicsSection.get('smoothingRadius', const.defaultSmoothingRadius),
        )

    ######################################################################
    # -- Presets -- #
    ######################################################################

    @classmethod
    def default(cls) -> SimulationConfig:
        '''
        Control-panel defaults: 1000 randomly placed particles.
        '''
        return cls()

    @classmethod
    def gridDemo(cls) -> SimulationConfig:
        '''
        30 x 30 block of particles centred on the canvas.

        Particles start one mass apart, well inside each other's
        smoothing radius, so the block expands outward from frame one.
        '''
        return cls(
            nParticles=const.gridDemoSide * const.gridDemoSide,
            layout='grid',
        )

    @classmethod
    def small(cls) -> SimulationConfig:
        '''
        200 random particles under light gravity, runs in seconds.
        '''
        return cls(
            nParticles=200,
            gravity=0.05,
            pressureMultiplier=0.5,
            targetDensity=0.002,
            seed=0,
        )


######################################################################
# -- Simulation State -- #
######################################################################

@dataclass
class SimulationState:
    '''
    Diagnostic snapshot of the simulation after a step.

    Parameters:
    -----------
    frame : int
        Number of steps taken since the particles were generated
    time : float
        Accumulated simulated time [frames]
    nParticles : int
        Current particle count
    kineticEnergy : float
        Total kinetic energy, (1/2) sum m |v|^2
    maxSpeed : float
        Largest particle speed [px/frame]
    meanDensity : float
        Mean particle density
    maxDensity : float
        Largest particle density
    '''

    frame: int
    time: float
    nParticles: int
    kineticEnergy: float
    maxSpeed: float
    meanDensity: float
    maxDensity: float

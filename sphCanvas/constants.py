# -- Constants for the SPH Canvas Simulation -- #

'''
Numerical constants and control-panel defaults for the 2D SPH canvas.

Units are canvas units: lengths in pixels, time in frames. Gravity is
added to the vertical velocity once per frame and the canvas y axis
grows downward, so a positive gravity pulls particles toward the
bottom edge.
'''

#--------------------------------------------------------------------#
# -- Canvas -- #
#--------------------------------------------------------------------#

# Canvas extent [px], fixed for the lifetime of a simulation
canvasWidth: int = 800
canvasHeight: int = 800

#--------------------------------------------------------------------#
# -- Particle Properties -- #
#--------------------------------------------------------------------#

# Particle mass; the drawn/collision radius is mass / 2
particleMass: float = 10.0

# Default particle fill color
particleColor: str = 'blue'

# Color of the debug circle drawn by a density probe
probeColor: str = 'red'

#--------------------------------------------------------------------#
# -- Numerical Guards -- #
#--------------------------------------------------------------------#

# Floor applied to any density used as a divisor
densityEpsilon: float = 1e-6

# Pair distances below this are treated as coincident positions
coincidentTolerance: float = 1e-12

# Integration time step [frames]
defaultTimeStep: float = 1.0

#--------------------------------------------------------------------#
# -- Control Panel Defaults -- #
#--------------------------------------------------------------------#

defaultParticleCount: int = 1000
defaultGravity: float = 0.0
defaultFriction: float = 0.1
defaultBounce: float = 0.4
defaultPressureMultiplier: float = 0.007
defaultTargetDensity: float = 0.2
defaultSmoothingRadius: float = 50.0

# Slider ranges: parameter -> (min, max, step)
sliderRanges: dict[str, tuple[float, float, float]] = {
    'nParticles': (0, 5000, 1),
    'gravity': (0.0, 1.0, 0.01),
    'friction': (0.0, 1.0, 0.01),
    'bounce': (0.0, 1.0, 0.01),
    'pressureMultiplier': (0.0, 10.0, 0.01),
    'targetDensity': (0.0, 0.1, 0.001),
    'smoothingRadius': (0, 100, 1),
}

# Side length of the start-up grid layout (gridDemo preset)
gridDemoSide: int = 30

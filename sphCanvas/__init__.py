# -- sphCanvas Package -- #

'''
Two-dimensional SPH fluid sandbox on a bounded canvas.

Particles are stepped once per frame by a density/pressure SPH
kernel with a spatial hash grid for neighbor search, and drawn as
colored discs.
'''

__version__ = '0.1.0'

from sphCanvas.sph import FluidSimulation, SimulationConfig, SimulationStatus
from sphCanvas.scheduler import HeadlessScheduler
from sphCanvas.controlPanel import ControlPanel
from sphCanvas.export.frameExporter import FrameExporter

# -- External Collaborator Interfaces -- #

'''
Protocols for the collaborators around the simulation kernel.

The scheduler decides when frames happen, the renderer draws what a
frame produced. FrameSnapshot is the hand-off between the two: the
particle list and the debug primitives accumulated since the last
frame, plus the diagnostic state.
'''

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from sphCanvas.sph.debugOverlay import OverlayItems
from sphCanvas.sph.particles import ParticleView
from sphCanvas.sph.protocols import SimulationState


@dataclass
class FrameSnapshot:
    '''
    Everything a renderer needs for one frame.

    Parameters:
    -----------
    width : int
        Canvas width [px]
    height : int
        Canvas height [px]
    particles : list[ParticleView]
        Position, radius and color of every particle
    overlay : OverlayItems
        Debug primitives accumulated since the previous snapshot
    state : SimulationState
        Diagnostics after the latest step
    '''

    width: int
    height: int
    particles: list[ParticleView]
    overlay: OverlayItems
    state: SimulationState


class FrameScheduler(Protocol):
    '''Invokes a callback once per display tick.'''

    def requestFrame(self, callback: Callable[[], None]) -> None:
        '''Run callback on the next tick.'''
        ...


class CanvasRenderer(Protocol):
    '''Draws a frame snapshot onto a canvas.'''

    def draw(self, snapshot: FrameSnapshot) -> None:
        ...

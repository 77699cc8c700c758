# -- Simulation Frame Exporter -- #

'''
Exports SPH canvas frames as JSON for offline visualization.

Collects particle snapshots during a run and writes them to one
JSON file with the run's configuration and energy history. The file
is output only; simulations are never restored from it.
'''

from __future__ import annotations

import json
import os
from datetime import datetime

import numpy as np

from sphCanvas.sph.protocols import SimulationConfig, SimulationState
from sphCanvas.sph.particles import ParticleStore


class FrameExporter:
    '''
    Collects and exports simulation frame data as JSON.

    Usage:
        exporter = FrameExporter()
        # During the frame loop:
        exporter.addFrame(state, particles)
        # After the run:
        exporter.export(config, outputDir='output')

    Output JSON format:
    {
        "meta": { "type": "sphCanvas", "nFrames": 120, "created": "...", ... },
        "config": { "width": 800, "height": 800, "nParticles": 1000, ... },
        "frames": [
            {
                "frame": 0,
                "positions": [[x0, y0], [x1, y1], ...],
                "speeds": [v0, v1, ...],
                "densities": [rho0, rho1, ...]
            },
            ...
        ],
        "energy": {
            "frames": [...],
            "kinetic": [...]
        }
    }
    '''

    def __init__(self) -> None:
        self._frames: list[dict] = []
        self._energyHistory: dict[str, list[float]] = {
            'frames': [],
            'kinetic': [],
        }

    @property
    def nFrames(self) -> int:
        '''Number of collected frames.'''
        return len(self._frames)

    def addFrame(self, state: SimulationState, particles: ParticleStore) -> None:
        '''
        Record a frame.

        Parameters:
        -----------
        state : SimulationState
            Diagnostics for the frame
        particles : ParticleStore
            Particle state for the frame
        '''
        frame = {
            'frame': state.frame,
            'positions': np.round(particles.positions, 3).tolist(),
            'speeds': np.round(particles.speeds(), 4).tolist(),
            'densities': np.round(particles.densities, 6).tolist(),
        }
        self._frames.append(frame)

        self._energyHistory['frames'].append(state.frame)
        self._energyHistory['kinetic'].append(round(state.kineticEnergy, 6))

    def toDict(self, config: SimulationConfig) -> dict:
        '''Export payload as a dict.'''
        return {
            'meta': {
                'type': 'sphCanvas',
                'nFrames': len(self._frames),
                'nParticles': len(self._frames[0]['positions']) if self._frames else 0,
                'created': datetime.now().isoformat(),
            },
            'config': config.toDict(),
            'frames': self._frames,
            'energy': self._energyHistory,
        }

    def export(
        self,
        config: SimulationConfig,
        outputDir: str = 'output',
        scenarioName: str = 'default',
    ) -> str:
        '''
        Write all collected frames to a JSON file.

        Parameters:
        -----------
        config : SimulationConfig
            Configuration of the run, stored as metadata
        outputDir : str
            Output directory path
        scenarioName : str
            Scenario name for the filename

        Returns:
        --------
        str : Path to the exported JSON file
        '''
        os.makedirs(outputDir, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        filename = f'sphCanvas_{scenarioName}_{timestamp}.json'
        filepath = os.path.join(outputDir, filename)

        with open(filepath, 'w') as f:
            json.dump(self.toDict(config), f, indent=None, separators=(',', ':'))

        return filepath

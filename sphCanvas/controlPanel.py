# -- Simulation Control Panel -- #

'''
Parameter sliders and start/stop/click handling for a simulation.

The panel holds an explicit reference to the simulation it drives
and keeps the current slider values. Every slider change produces a
complete new SimulationConfig; the simulation applies it as a whole.
'''

from __future__ import annotations

import logging
import math

from sphCanvas import constants as const
from sphCanvas.sph.fluidSimulation import FluidSimulation, ProbeResult, SimulationStatus
from sphCanvas.sph.protocols import ConfigurationError, SimulationConfig, SNAKE_CASE_ALIASES

logger = logging.getLogger(__name__)


def snapToSlider(name: str, value: float) -> float | int:
    '''
    Clamp a value to its slider range and round it to the slider step.

    Parameters:
    -----------
    name : str
        Parameter name (a key of constants.sliderRanges)
    value : float
        Raw value from the control

    Returns:
    --------
    float | int : Snapped value (int for integer-step sliders)

    Raises:
    -------
    ConfigurationError : If the parameter has no slider
    '''
    if name not in const.sliderRanges:
        raise ConfigurationError(f'No slider for parameter: {name}')

    lo, hi, step = const.sliderRanges[name]
    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationError(f'{name} must be a finite number, got {value!r}')

    clamped = min(max(value, lo), hi)
    snapped = lo + round((clamped - lo) / step) * step

    if float(step).is_integer():
        return int(round(snapped))

    decimals = max(0, -int(math.floor(math.log10(step))))
    return round(snapped, decimals)


class ControlPanel:
    '''
    Slider state and event handlers for one FluidSimulation.

    Parameters:
    -----------
    simulation : FluidSimulation
        The simulation driven by this panel
    config : SimulationConfig | None
        Initial slider values (defaults to SimulationConfig.default())
    '''

    def __init__(self, simulation: FluidSimulation, config: SimulationConfig | None = None) -> None:
        self._simulation = simulation
        initial = (config or SimulationConfig.default()).replace(
            width=simulation.width, height=simulation.height,
        )
        self._config = initial

    @property
    def simulation(self) -> FluidSimulation:
        return self._simulation

    @property
    def config(self) -> SimulationConfig:
        '''Configuration described by the current slider values.'''
        return self._config

    def parameters(self) -> dict:
        '''Current slider values by parameter name.'''
        return {name: getattr(self._config, name) for name in const.sliderRanges}

    def updateParameter(self, key: str, value: float) -> float | int:
        '''
        Handle a slider change.

        Accepts camelCase or snake_case keys. If the simulation has
        been configured, the new config is applied immediately.

        Returns:
        --------
        float | int : The value actually applied
        '''
        name = SNAKE_CASE_ALIASES.get(key, key)
        snapped = snapToSlider(name, value)

        updated = self._config.replace(**{name: snapped})
        if self._simulation.status is not SimulationStatus.IDLE:
            self._simulation.configure(updated)
        self._config = updated

        logger.debug('%s -> %s', name, snapped)
        return snapped

    def startSimulation(self) -> None:
        '''Start button: configure on first use, then run.'''
        if self._simulation.isRunning:
            return
        if self._simulation.status is SimulationStatus.IDLE:
            self._simulation.configure(self._config)
        self._simulation.start()

    def stopSimulation(self) -> None:
        '''Stop button.'''
        self._simulation.stop()

    def onCanvasClick(self, x: float, y: float) -> ProbeResult:
        '''Canvas click: probe the density under the cursor.'''
        return self._simulation.probe(x, y)

# -- Code Interface (Entry-Point) -- #

'''
Main interface for the sphCanvas fluid sandbox.

Demonstrates the SPH canvas pipeline:
    1. Configure a simulation from a preset and the values below
    2. Drive it through the headless frame scheduler
    3. Probe the density field and plot the diagnostics
    4. Render the final frame with the Plotly canvas renderer

Run directly:
    python codeInterface.py
'''

import os

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from sphCanvas.controlPanel import ControlPanel
from sphCanvas.scheduler import HeadlessScheduler
from sphCanvas.sph.fluidSimulation import FluidSimulation
from sphCanvas.sph.protocols import SimulationConfig
from sphCanvas.visualization import theme
from sphCanvas.visualization.canvasRenderer import PlotlyCanvasRenderer

# Clear terminal
os.system('cls' if os.name == 'nt' else 'clear')


######################################################################
# -- Configuration -- #
######################################################################

# Starting layout -- 'default', 'grid', or 'small'
configPreset = 'small'

# Slider overrides applied through the control panel
sliderValues = {
    'gravity': 0.05,
    'bounce': 0.4,
    'pressureMultiplier': 0.5,
}

# Number of frames to simulate
nFrames = 200

# Density probe points (canvas pixels)
probePoints = [(400.0, 400.0), (400.0, 700.0), (100.0, 100.0)]


######################################################################
# -- Simulation Setup -- #
######################################################################

presetFactories = {
    'default': SimulationConfig.default,
    'grid': SimulationConfig.gridDemo,
    'small': SimulationConfig.small,
}

scheduler = HeadlessScheduler()
renderer = PlotlyCanvasRenderer()
simulation = FluidSimulation(scheduler=scheduler, renderer=renderer)
panel = ControlPanel(simulation, presetFactories[configPreset]())

for name, value in sliderValues.items():
    applied = panel.updateParameter(name, value)
    print(f'  {name:<20s} -> {applied}')

print('=' * 60)
print('  SPH CANVAS SANDBOX')
print('=' * 60)
for name, value in panel.parameters().items():
    print(f'  {name:<20s}  {value}')


######################################################################
# -- Frame Loop -- #
######################################################################

print('\nRunning frames...')
panel.startSimulation()

frames = []
kinetic = []
meanDensity = []
maxDensity = []

for _ in range(nFrames):
    if not scheduler.tick():
        break
    state = simulation.currentState
    frames.append(state.frame)
    kinetic.append(state.kineticEnergy)
    meanDensity.append(state.meanDensity)
    maxDensity.append(state.maxDensity)

panel.stopSimulation()

final = simulation.currentState
print(f'  Frames:        {final.frame}')
print(f'  Particles:     {final.nParticles}')
print(f'  Max Speed:     {final.maxSpeed:.4f} px/frame')
print(f'  Mean Density:  {final.meanDensity:.6f}')


######################################################################
# -- Density Probes -- #
######################################################################

print('\nProbing density...')
for x, y in probePoints:
    result = panel.onCanvasClick(x, y)
    print(f'  ({x:6.1f}, {y:6.1f})  density = {result.density:.6g}')

# Draw the final frame with the probe circles
renderer.draw(simulation.snapshot())
renderer.figure.show()


######################################################################
# -- Diagnostics Plot -- #
######################################################################

fig = make_subplots(
    rows=2, cols=2,
    subplot_titles=[
        'Kinetic Energy', 'Density',
        'Density Distribution', 'Speed Distribution',
    ],
    vertical_spacing=0.12,
    horizontal_spacing=0.10,
)

fig.add_trace(go.Scatter(
    x=frames, y=kinetic, mode='lines',
    line=dict(color=theme.BLUE, width=2),
    showlegend=False,
), row=1, col=1)
fig.update_xaxes(title_text='Frame', row=1, col=1)
fig.update_yaxes(title_text='Kinetic Energy', row=1, col=1)

fig.add_trace(go.Scatter(
    x=frames, y=meanDensity, mode='lines', name='Mean',
    line=dict(color=theme.GREEN, width=2),
), row=1, col=2)
fig.add_trace(go.Scatter(
    x=frames, y=maxDensity, mode='lines', name='Max',
    line=dict(color=theme.RED, width=2, dash='dash'),
), row=1, col=2)
fig.update_xaxes(title_text='Frame', row=1, col=2)
fig.update_yaxes(title_text='Density', row=1, col=2)

fig.add_trace(go.Histogram(
    x=np.asarray(simulation.densities), nbinsx=40,
    marker=dict(color=theme.ORANGE),
    showlegend=False,
), row=2, col=1)
fig.update_xaxes(title_text='Density', row=2, col=1)

fig.add_trace(go.Histogram(
    x=simulation.particles.speeds(), nbinsx=40,
    marker=dict(color=theme.BLUE),
    showlegend=False,
), row=2, col=2)
fig.update_xaxes(title_text='Speed (px/frame)', row=2, col=2)

fig.update_layout(
    title=f'SPH Canvas Diagnostics ({configPreset}, {final.nParticles} particles)',
    template=theme.TEMPLATE,
    height=800,
    width=1100,
)

fig.show()

print('\n' + '=' * 60)
print('  Done.')
print('=' * 60)

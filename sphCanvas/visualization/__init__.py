# -- Visualization Package -- #

'''
Plotly rendering of SPH canvas frames.
'''

from sphCanvas.visualization.canvasRenderer import PlotlyCanvasRenderer

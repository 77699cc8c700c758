# -- Export Package -- #

'''
Data export utilities for SPH canvas runs.

Exports frame data as JSON for offline visualization.
'''

from sphCanvas.export.frameExporter import FrameExporter

# -- Visualization Theme -- #

'''
Centralized dark-mode theme for the sphCanvas Plotly renderer.

Change colors or template here to restyle every figure at once.
'''

# Plotly template
TEMPLATE = 'plotly_dark'

# Primary color palette (Material Design, visible on dark backgrounds)
BLUE = '#42A5F5'
RED = '#EF5350'
GREEN = '#66BB6A'
ORANGE = '#FFA726'
WHITE = '#E0E0E0'

# Canvas background
CANVAS_BACKGROUND = '#121212'

# Sequential colorscale for speed coloring: slow (blue) -> fast (white)
SPEED_COLORSCALE = [
    [0.0, '#0D47A1'],
    [0.5, BLUE],
    [1.0, '#FFFFFF'],
]

# Named particle/overlay colors -> theme colors
NAMED_COLORS = {
    'blue': BLUE,
    'red': RED,
    'green': GREEN,
    'orange': ORANGE,
    'white': WHITE,
}


def resolveColor(name: str) -> str:
    '''Theme color for a named color; other values pass through.'''
    return NAMED_COLORS.get(name, name)

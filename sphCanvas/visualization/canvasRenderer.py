# -- Plotly Canvas Renderer -- #

'''
Renders SPH canvas frames as Plotly figures.

Particles are drawn as filled discs (scatter markers sized to the
particle diameter) and the debug overlay as layout shapes and
annotations. The figure is laid out at one screen pixel per canvas
pixel with the y axis pointing down, matching canvas coordinates.
'''

from __future__ import annotations

import plotly.graph_objects as go

from sphCanvas.interfaces import FrameSnapshot
from sphCanvas.visualization import theme


class PlotlyCanvasRenderer:
    '''
    CanvasRenderer that keeps the latest frame as a Plotly figure.

    Parameters:
    -----------
    title : str | None
        Figure title; None shows the frame number
    colorBy : str
        'particle' fills each disc with its own color, 'speed' maps
        particle speed onto a continuous colorscale
    '''

    def __init__(self, title: str | None = None, colorBy: str = 'particle') -> None:
        if colorBy not in ('particle', 'speed'):
            raise ValueError(f"colorBy must be 'particle' or 'speed', got {colorBy!r}")
        self._title = title
        self._colorBy = colorBy
        self._figure: go.Figure | None = None
        self._nDrawn: int = 0

    @property
    def figure(self) -> go.Figure | None:
        '''Figure of the most recent frame.'''
        return self._figure

    @property
    def nDrawn(self) -> int:
        '''Number of frames drawn.'''
        return self._nDrawn

    def draw(self, snapshot: FrameSnapshot) -> None:
        self._figure = self.buildFigure(snapshot)
        self._nDrawn += 1

    def buildFigure(self, snapshot: FrameSnapshot) -> go.Figure:
        '''
        Build the figure for one frame.

        Parameters:
        -----------
        snapshot : FrameSnapshot
            Particles, overlay and state for the frame

        Returns:
        --------
        go.Figure : Plotly figure
        '''
        particles = snapshot.particles

        marker = dict(
            size=[2.0 * p.radius for p in particles],
            line=dict(width=0),
        )
        if self._colorBy == 'speed':
            marker.update(
                color=[p.speed for p in particles],
                colorscale=theme.SPEED_COLORSCALE,
                showscale=True,
                colorbar=dict(title='Speed (px/frame)'),
            )
        else:
            marker['color'] = [theme.resolveColor(p.color) for p in particles]

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=[p.x for p in particles],
            y=[p.y for p in particles],
            mode='markers',
            name='particles',
            marker=marker,
            hoverinfo='skip',
        ))

        overlay = snapshot.overlay
        for circle in overlay.circles:
            fig.add_shape(
                type='circle',
                x0=circle.x - circle.radius, y0=circle.y - circle.radius,
                x1=circle.x + circle.radius, y1=circle.y + circle.radius,
                line=dict(color=theme.resolveColor(circle.color)),
            )
        for line in overlay.lines:
            fig.add_shape(
                type='line',
                x0=line.x1, y0=line.y1, x1=line.x2, y1=line.y2,
                line=dict(color=theme.resolveColor(line.color)),
            )
        for text in overlay.texts:
            fig.add_annotation(
                x=text.x, y=text.y, text=text.text,
                showarrow=False,
                font=dict(size=16, color=theme.resolveColor(text.color)),
            )

        title = self._title or f'Frame {snapshot.state.frame}'
        fig.update_layout(
            title=title,
            template=theme.TEMPLATE,
            width=snapshot.width,
            height=snapshot.height,
            margin=dict(l=0, r=0, t=40, b=0),
            plot_bgcolor=theme.CANVAS_BACKGROUND,
            showlegend=False,
        )
        fig.update_xaxes(range=[0, snapshot.width], visible=False)
        fig.update_yaxes(
            range=[snapshot.height, 0], visible=False,
            scaleanchor='x', scaleratio=1,
        )

        return fig

    def writeHtml(self, path: str) -> str:
        '''
        Write the latest figure to a standalone HTML file.

        Raises:
        -------
        RuntimeError : If no frame has been drawn yet
        '''
        if self._figure is None:
            raise RuntimeError('No frame has been drawn yet')
        self._figure.write_html(path)
        return path

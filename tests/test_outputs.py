# -- Export, Rendering and Runner Tests -- #

'''
Frame export, Plotly rendering, debug overlay, logging setup and
the command-line runner.
'''

import json
import logging

import pytest

from sphCanvas.export.frameExporter import FrameExporter
from sphCanvas.logConfig import setupLogging
from sphCanvas.runner import SphCanvasRunner, buildParser, main
from sphCanvas.sph.debugOverlay import DebugOverlay
from sphCanvas.visualization.canvasRenderer import PlotlyCanvasRenderer


@pytest.fixture(autouse=True)
def resetPackageLogger():
    '''Detach console handlers added by main() so they do not outlive capsys.'''
    yield
    logger = logging.getLogger('sphCanvas')
    for handler in list(logger.handlers):
        if getattr(handler, '_sphCanvasHandler', False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def steppedSimulation(simulation, smallConfig):
    simulation.configure(smallConfig)
    simulation.step()
    return simulation


######################################################################
# -- Frame Exporter -- #
######################################################################

def testExporterWritesJson(steppedSimulation, tmp_path):
    exporter = FrameExporter()
    exporter.addFrame(steppedSimulation.currentState, steppedSimulation.particles)
    steppedSimulation.step()
    exporter.addFrame(steppedSimulation.currentState, steppedSimulation.particles)

    path = exporter.export(steppedSimulation.config, outputDir=str(tmp_path), scenarioName='unit')
    assert 'sphCanvas_unit_' in path

    with open(path) as f:
        data = json.load(f)

    nParticles = steppedSimulation.particles.nParticles
    assert data['meta']['nFrames'] == 2
    assert data['meta']['nParticles'] == nParticles
    assert data['config']['nParticles'] == nParticles
    assert [frame['frame'] for frame in data['frames']] == [1, 2]
    assert len(data['frames'][0]['positions']) == nParticles
    assert len(data['frames'][0]['densities']) == nParticles
    assert data['energy']['frames'] == [1, 2]


def testExporterEmpty(steppedSimulation):
    payload = FrameExporter().toDict(steppedSimulation.config)
    assert payload['meta']['nFrames'] == 0
    assert payload['meta']['nParticles'] == 0


######################################################################
# -- Renderer -- #
######################################################################

def testRendererFigure(steppedSimulation):
    steppedSimulation.probe(400.0, 400.0)
    renderer = PlotlyCanvasRenderer()
    renderer.draw(steppedSimulation.snapshot())

    fig = renderer.figure
    assert renderer.nDrawn == 1
    assert len(fig.data) == 1
    assert len(fig.data[0].x) == steppedSimulation.particles.nParticles
    assert len(fig.layout.shapes) == 1
    assert fig.layout.shapes[0].type == 'circle'
    # Canvas y grows downward
    assert tuple(fig.layout.yaxis.range) == (800, 0)


def testRendererSpeedColoring(steppedSimulation):
    renderer = PlotlyCanvasRenderer(colorBy='speed')
    renderer.draw(steppedSimulation.snapshot())
    colors = renderer.figure.data[0].marker.color
    assert list(colors) == pytest.approx(steppedSimulation.particles.speeds().tolist())


def testRendererOverlayLinesAndText(steppedSimulation):
    snapshot = steppedSimulation.snapshot()
    overlay = DebugOverlay()
    overlay.addLine(0.0, 0.0, 100.0, 100.0, 'green')
    overlay.addText(50.0, 50.0, 'rho', 'white')
    snapshot.overlay = overlay.drain()

    fig = PlotlyCanvasRenderer(title='overlay').buildFigure(snapshot)
    assert [s.type for s in fig.layout.shapes] == ['line']
    assert fig.layout.annotations[0].text == 'rho'
    assert overlay.peek().isEmpty()


def testRendererRejectsUnknownColoring():
    with pytest.raises(ValueError):
        PlotlyCanvasRenderer(colorBy='pressure')


def testWriteHtml(steppedSimulation, tmp_path):
    renderer = PlotlyCanvasRenderer()
    with pytest.raises(RuntimeError):
        renderer.writeHtml(str(tmp_path / 'empty.html'))

    renderer.draw(steppedSimulation.snapshot())
    path = renderer.writeHtml(str(tmp_path / 'frame.html'))
    assert (tmp_path / 'frame.html').exists()
    assert path.endswith('frame.html')


def testDebugOverlayClear():
    overlay = DebugOverlay()
    overlay.addCircle(1.0, 2.0, 3.0, 'red')
    overlay.clear()
    assert overlay.drain().isEmpty()


######################################################################
# -- Logging -- #
######################################################################

def testSetupLoggingIsIdempotent():
    name = 'sphCanvas.tests.logging'
    logger = setupLogging('DEBUG', name=name)
    setupLogging('INFO', name=name)

    marked = [h for h in logger.handlers if getattr(h, '_sphCanvasHandler', False)]
    assert len(marked) == 1
    assert logger.level == logging.INFO

    for handler in marked:
        logger.removeHandler(handler)


######################################################################
# -- Runner -- #
######################################################################

def testParserDefaults():
    args = buildParser().parse_args([])
    assert args.preset == 'default'
    assert args.frames == 300
    assert args.probe == []
    assert not args.no_export


def testParserProbes():
    args = buildParser().parse_args(['--probe', '10', '20', '--probe', '30', '40'])
    assert args.probe == [[10.0, 20.0], [30.0, 40.0]]


def testRunnerPipeline(smallConfig, tmp_path, capsys):
    renderPath = str(tmp_path / 'final.html')
    summary = SphCanvasRunner().run(
        smallConfig,
        nFrames=6,
        probes=[(400.0, 400.0)],
        exportDir=str(tmp_path),
        exportInterval=2,
        renderPath=renderPath,
        showProgress=False,
    )

    assert summary['finalState'].frame == 6
    # Initial, frames 2, 4, 6, final
    assert summary['nFrames'] == 5
    assert len(summary['probes']) == 1
    assert (tmp_path / 'final.html').exists()
    with open(summary['exportPath']) as f:
        assert json.load(f)['meta']['nFrames'] == 5
    assert 'SIMULATION SUMMARY' in capsys.readouterr().out


def testMainFromConfigFile(projectRootPath, tmp_path, capsys):
    main([
        '--config', str(projectRootPath / 'configs' / 'grid_block.json'),
        '--frames', '2',
        '--output-dir', str(tmp_path),
    ])
    out = capsys.readouterr().out
    assert 'SCENARIO SETUP' in out
    assert list(tmp_path.glob('sphCanvas_custom_*.json'))


def testMainNoExport(tmp_path, capsys):
    main(['--preset', 'small', '--frames', '2', '--no-export', '--output-dir', str(tmp_path)])
    assert 'EXPORTING' not in capsys.readouterr().out
    assert not list(tmp_path.iterdir())


def testRunnerWithoutParticlesExportsOnlyEndpoints(tmp_path, capsys):
    from sphCanvas.sph.protocols import SimulationConfig

    summary = SphCanvasRunner().run(
        SimulationConfig(nParticles=0),
        nFrames=10,
        exportDir=str(tmp_path),
        exportInterval=1,
        showProgress=False,
    )

    assert summary['finalState'].frame == 0
    # Initial and final frames only
    assert summary['nFrames'] == 2
    out = capsys.readouterr().out
    tableRows = [line for line in out.splitlines() if line.strip().startswith('0 ') or line.strip() == '0']
    assert tableRows == []


def testMainRejectsNegativeSeed(tmp_path, capsys):
    with pytest.raises(SystemExit) as excInfo:
        main(['--preset', 'small', '--frames', '1', '--seed', '-1', '--output-dir', str(tmp_path)])
    assert excInfo.value.code == 2
    assert 'seed' in capsys.readouterr().err
    assert not list(tmp_path.iterdir())

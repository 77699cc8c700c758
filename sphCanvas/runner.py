# -- SPH Canvas Runner -- #

'''
Command-line entry point for running the SPH canvas headless.

Builds a simulation from a preset or JSON configuration, drives it
for a number of frames through the headless scheduler, reports
progress, and optionally probes densities, exports frame data and
renders the final frame to HTML.

Usage:
    python -m sphCanvas                                   # Default 1000 particles
    python -m sphCanvas --preset grid --frames 200        # 30x30 block
    python -m sphCanvas --config configs/canvas_default.json
    python -m sphCanvas --probe 400 400 --render final.html
    python -m sphCanvas --no-export                       # Skip frame export
'''

from __future__ import annotations

import argparse
import time as timeModule

from tqdm import tqdm

from sphCanvas.export.frameExporter import FrameExporter
from sphCanvas.logConfig import setupLogging
from sphCanvas.scheduler import HeadlessScheduler
from sphCanvas.sph.fluidSimulation import FluidSimulation
from sphCanvas.sph.protocols import ConfigurationError, SimulationConfig
from sphCanvas.visualization.canvasRenderer import PlotlyCanvasRenderer


#--------------------------------------------------------------------#
# -- CLI Argument Parser -- #
#--------------------------------------------------------------------#

PRESETS = {
    'default': SimulationConfig.default,
    'grid': SimulationConfig.gridDemo,
    'small': SimulationConfig.small,
}


def buildParser() -> argparse.ArgumentParser:
    '''Build the CLI argument parser.'''
    parser = argparse.ArgumentParser(
        description='sphCanvas -- 2D SPH fluid sandbox',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config', type=str, default=None,
        help='Path to JSON configuration file',
    )
    parser.add_argument(
        '--preset', type=str, default='default',
        choices=sorted(PRESETS),
        help='Configuration preset (default: default)',
    )
    parser.add_argument(
        '--frames', type=int, default=300,
        help='Number of frames to simulate (default: 300)',
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Seed for the particle layout',
    )
    parser.add_argument(
        '--probe', type=float, nargs=2, action='append', metavar=('X', 'Y'),
        default=[],
        help='Probe the density at X Y after the run (repeatable)',
    )
    parser.add_argument(
        '--export-interval', type=int, default=5,
        help='Frames between exported snapshots (default: 5)',
    )
    parser.add_argument(
        '--render', type=str, default=None,
        help='Write the final frame to this HTML file',
    )
    parser.add_argument(
        '--color-by', type=str, default='particle',
        choices=['particle', 'speed'],
        help='Disc coloring of the rendered frame (default: particle)',
    )
    parser.add_argument(
        '--no-export', action='store_true',
        help='Skip frame data export',
    )
    parser.add_argument(
        '--output-dir', type=str, default='output',
        help='Output directory for exported frames (default: output)',
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Log simulation events to the console',
    )

    return parser


#--------------------------------------------------------------------#
# -- Runner Class -- #
#--------------------------------------------------------------------#

class SphCanvasRunner:
    '''
    Runs the SPH canvas for a fixed number of frames.

    Handles the full pipeline: simulation setup, the frame loop with
    progress reporting, density probes, frame export and rendering.
    '''

    def __init__(self) -> None:
        self._exporter: FrameExporter = FrameExporter()

    @property
    def exporter(self) -> FrameExporter:
        return self._exporter

    def run(
        self,
        config: SimulationConfig,
        nFrames: int = 300,
        probes: list[tuple[float, float]] | None = None,
        doExport: bool = True,
        exportDir: str = 'output',
        exportInterval: int = 5,
        renderPath: str | None = None,
        colorBy: str = 'particle',
        scenarioName: str = 'default',
        showProgress: bool = True,
    ) -> dict:
        '''
        Run a simulation.

        Parameters:
        -----------
        config : SimulationConfig
            Simulation configuration
        nFrames : int
            Number of frames to simulate
        probes : list[tuple[float, float]] | None
            Canvas points to probe after the run
        doExport : bool
            Whether to export frame data
        exportDir : str
            Output directory for frame export
        exportInterval : int
            Frames between exported snapshots
        renderPath : str | None
            HTML path for the rendered final frame
        colorBy : str
            Disc coloring of the rendered frame ('particle' or 'speed')
        scenarioName : str
            Scenario name for the export filename
        showProgress : bool
            Show the tqdm progress bar

        Returns:
        --------
        dict : Run summary
        '''
        print()
        print('=' * 62)
        print('  SPHCANVAS -- 2D SPH FLUID SIMULATION')
        print('=' * 62)
        print()

        #--------------------------------------------------------------------#
        # Setup
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  SCENARIO SETUP')
        print('-' * 62)

        scheduler = HeadlessScheduler()
        simulation = FluidSimulation(config.width, config.height, scheduler=scheduler)
        simulation.configure(config)
        applied = simulation.config

        print(f'  Canvas:            {applied.width:4d} x {applied.height:4d} px')
        print(f'  Particles:         {simulation.particles.nParticles:8d}')
        print(f'  Layout:            {applied.layout:>8s}')
        print(f'  Particle Mass:     {applied.particleMass:8.2f}')
        print(f'  Smoothing Radius:  {applied.smoothingRadius:8.2f} px')
        print(f'  Gravity:           {applied.gravity:8.3f} px/frame^2')
        print(f'  Bounce:            {applied.bounce:8.2f}')
        print(f'  Pressure Mult.:    {applied.pressureMultiplier:8.4f}')
        print(f'  Target Density:    {applied.targetDensity:8.4f}')
        print(f'  Frames:            {nFrames:8d}')
        print()

        self._exporter.addFrame(simulation.currentState, simulation.particles)

        #--------------------------------------------------------------------#
        # Frame Loop
        #--------------------------------------------------------------------#
        print('-' * 62)
        print('  RUNNING SIMULATION')
        print('-' * 62)
        print()
        print(f'  {"Frame":>8}  {"MaxSpeed":>10}  {"MeanDens":>12}  {"MaxDens":>12}  {"Energy":>12}')
        print('  ' + '-' * 58)

        printInterval = max(1, nFrames // 10)
        exportInterval = max(1, exportInterval)

        lastFrame = simulation.frame
        wallClockStart = timeModule.time()
        simulation.start()

        for _ in tqdm(range(nFrames), desc='frames', disable=not showProgress, leave=False):
            if not scheduler.tick():
                break
            state = simulation.currentState
            if state.frame == lastFrame:
                continue
            lastFrame = state.frame

            if state.frame % exportInterval == 0:
                self._exporter.addFrame(state, simulation.particles)

            if state.frame % printInterval == 0:
                tqdm.write(
                    f'  {state.frame:8d}  {state.maxSpeed:10.4f}  {state.meanDensity:12.6f}  '
                    f'{state.maxDensity:12.6f}  {state.kineticEnergy:12.4f}'
                )

        simulation.stop()
        wallClockSeconds = timeModule.time() - wallClockStart

        finalState = simulation.currentState
        self._exporter.addFrame(finalState, simulation.particles)

        print()
        print('  Simulation complete.')
        print(f'  Frames stepped:    {finalState.frame:8d}')
        print(f'  Wall-clock time:   {wallClockSeconds:8.1f} s')
        print()

        #--------------------------------------------------------------------#
        # Probes
        #--------------------------------------------------------------------#
        probeResults = []
        if probes:
            print('-' * 62)
            print('  DENSITY PROBES')
            print('-' * 62)
            for x, y in probes:
                result = simulation.probe(x, y)
                probeResults.append(result)
                print(f'  ({result.x:7.1f}, {result.y:7.1f})   density: {result.density:.6g}')
            print()

        #--------------------------------------------------------------------#
        # Export and Render
        #--------------------------------------------------------------------#
        exportPath = None
        if doExport:
            print('-' * 62)
            print('  EXPORTING FRAME DATA')
            print('-' * 62)
            exportPath = self._exporter.export(
                config=applied,
                outputDir=exportDir,
                scenarioName=scenarioName,
            )
            print(f'  Exported to: {exportPath}')
            print()

        if renderPath is not None:
            renderer = PlotlyCanvasRenderer(colorBy=colorBy)
            renderer.draw(simulation.snapshot())
            renderer.writeHtml(renderPath)
            print(f'  Rendered final frame: {renderPath}')
            print()

        #--------------------------------------------------------------------#
        # Summary
        #--------------------------------------------------------------------#
        print('=' * 62)
        print('  SIMULATION SUMMARY')
        print('=' * 62)
        print(f'  Final KE:          {finalState.kineticEnergy:12.4f}')
        print(f'  Max Speed:         {finalState.maxSpeed:12.4f} px/frame')
        print(f'  Mean Density:      {finalState.meanDensity:12.6f}')
        print(f'  Max Density:       {finalState.maxDensity:12.6f}')
        print('=' * 62)
        print()

        return {
            'finalState': finalState,
            'wallClockSeconds': wallClockSeconds,
            'nFrames': self._exporter.nFrames,
            'exportPath': exportPath,
            'probes': probeResults,
            'renderPath': renderPath,
        }


#--------------------------------------------------------------------#
# -- CLI Entry Point -- #
#--------------------------------------------------------------------#

def main(argv: list[str] | None = None) -> None:
    '''CLI entry point.'''
    parser = buildParser()
    args = parser.parse_args(argv)

    setupLogging('INFO' if args.verbose else 'WARNING')

    if args.config:
        config = SimulationConfig.fromJson(args.config)
        scenarioName = 'custom'
    else:
        config = PRESETS[args.preset]()
        scenarioName = args.preset

    if args.seed is not None:
        config = config.replace(seed=args.seed)

    try:
        config = config.validated()
    except ConfigurationError as e:
        parser.error(str(e))

    runner = SphCanvasRunner()
    runner.run(
        config,
        nFrames=args.frames,
        probes=[tuple(p) for p in args.probe],
        doExport=not args.no_export,
        exportDir=args.output_dir,
        exportInterval=args.export_interval,
        renderPath=args.render,
        colorBy=args.color_by,
        scenarioName=scenarioName,
    )


if __name__ == '__main__':
    main()

# -- Headless Frame Scheduler -- #

'''
Frame scheduler for running the simulation without a display.

Plays the role of a browser's animation-frame loop: callbacks
requested during a tick run on the next tick. A callback that is
already waiting is not queued twice, so a stop/start cycle never
doubles the frame rate.
'''

from __future__ import annotations

from typing import Callable


class HeadlessScheduler:
    '''
    Tick-driven scheduler.

    Usage:
        scheduler = HeadlessScheduler()
        simulation = FluidSimulation(scheduler=scheduler)
        simulation.configure(config)
        simulation.start()
        scheduler.runFrames(100)
    '''

    def __init__(self) -> None:
        self._pending: list[Callable[[], None]] = []
        self._ticks: int = 0

    @property
    def nPending(self) -> int:
        '''Number of callbacks waiting for the next tick.'''
        return len(self._pending)

    @property
    def ticks(self) -> int:
        '''Number of ticks that ran at least one callback.'''
        return self._ticks

    def requestFrame(self, callback: Callable[[], None]) -> None:
        if callback not in self._pending:
            self._pending.append(callback)

    def cancelAll(self) -> None:
        self._pending.clear()

    def tick(self) -> bool:
        '''
        Run every callback requested before this tick.

        Returns:
        --------
        bool : True if any callback ran
        '''
        if not self._pending:
            return False

        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            callback()

        self._ticks += 1
        return True

    def runFrames(self, nFrames: int) -> int:
        '''
        Tick up to nFrames times, stopping early once nothing is pending.

        Returns:
        --------
        int : Number of ticks that ran
        '''
        ran = 0
        for _ in range(nFrames):
            if not self.tick():
                break
            ran += 1
        return ran

    def runUntilStopped(self, maxFrames: int = 10_000) -> int:
        '''
        Tick until no callback re-requests a frame (e.g. after the
        simulation stops), or until maxFrames ticks have run.

        Returns:
        --------
        int : Number of ticks that ran
        '''
        return self.runFrames(maxFrames)

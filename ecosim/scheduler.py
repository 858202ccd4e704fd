"""
Frame schedulers that drive the simulation.

FixedStepScheduler decouples logic from rendering: each frame renders once
and runs as many fixed logic steps as wall time allows, capped per frame.
LockstepScheduler runs exactly one nominal step per frame.

Both are single-threaded. A frame finishes all its work before the next
frame is requested, so the simulation is never ticked concurrently.
"""

import math
import time
from typing import Callable, Optional

from .simulation import EcosystemSimulation

RenderFn = Callable[[EcosystemSimulation], None]


class FrameScheduler:
    """
    Shared frame bookkeeping: render hook, FPS counter, start/stop.

    Subclasses implement _run_logic(now).
    """

    def __init__(
        self,
        simulation: EcosystemSimulation,
        render: Optional[RenderFn] = None,
        clock: Callable[[], float] = time.perf_counter
    ):
        """
        Args:
            simulation: Simulation to drive
            render: Called once per frame with the simulation, paused or not
            clock: Wall clock in seconds (used when frame() gets no time)
        """
        self.simulation = simulation
        self.render = render
        self._clock = clock
        self._running: bool = False
        self._stop_requested: bool = False

        self.last_time: float = 0.0
        self.fps: int = 0
        self._frame_count: int = 0
        self._last_fps_update: float = 0.0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def paused(self) -> bool:
        return self.simulation.paused

    def toggle_pause(self) -> bool:
        """Flip pause; rendering continues while paused"""
        return self.simulation.toggle_pause()

    def start(self, now: Optional[float] = None):
        """Anchor all timers at now (no-op if already running)"""
        if self._running:
            return
        now = self._clock() if now is None else now
        self.last_time = now
        self._last_fps_update = now
        self._frame_count = 0
        self._anchor(now)
        self._running = True

    def stop(self):
        self._running = False

    def request_stop(self):
        """Ask run_realtime() to return after the current frame"""
        self._stop_requested = True

    def reset_simulation(self, now: Optional[float] = None):
        """Stop, clear the population and cycle counter, start again"""
        self.stop()
        self.simulation.reset_simulation()
        self.start(now)

    def _anchor(self, now: float):
        pass

    def _run_logic(self, now: float) -> int:
        raise NotImplementedError

    def frame(self, now: Optional[float] = None) -> int:
        """
        Process one display frame.

        Args:
            now: Frame timestamp in seconds (default: clock())

        Returns:
            Number of logic steps executed
        """
        now = self._clock() if now is None else now
        if not self._running:
            self.start(now)

        self.last_time = now

        # FPS counter, updated once per second
        self._frame_count += 1
        if now - self._last_fps_update >= 1.0:
            self.fps = round(self._frame_count / (now - self._last_fps_update))
            self._frame_count = 0
            self._last_fps_update = now

        # Always render, logic only when not paused
        if self.render is not None:
            self.render(self.simulation)

        if self.simulation.paused:
            return 0

        return self._run_logic(now)

    def run_for(self, duration: float, frame_interval: float = 1.0 / 60.0,
                start: float = 0.0, on_frame: Optional[Callable[[int], None]] = None) -> int:
        """
        Drive frames on a simulated clock (headless, no sleeping).

        Args:
            duration: Simulated seconds to cover
            frame_interval: Seconds between frames
            start: Timestamp of the first frame
            on_frame: Optional callback with the frame index after each frame

        Returns:
            Total logic steps executed
        """
        if frame_interval <= 0:
            raise ValueError("frame_interval must be positive")

        self.stop()
        self.start(start)
        frames = int(duration / frame_interval)
        steps = 0
        for i in range(1, frames + 1):
            steps += self.frame(start + i * frame_interval)
            if on_frame is not None:
                on_frame(i)
        return steps

    def run_realtime(self, duration: Optional[float] = None, frame_interval: float = 1.0 / 60.0) -> int:
        """
        Drive frames against the wall clock, sleeping between frames.

        Args:
            duration: Seconds to run (None = until request_stop())
            frame_interval: Target seconds per frame

        Returns:
            Total logic steps executed
        """
        self._stop_requested = False
        self.start()
        began = self._clock()
        steps = 0

        while not self._stop_requested:
            frame_start = self._clock()
            if duration is not None and frame_start - began >= duration:
                break
            steps += self.frame(frame_start)
            sleep_time = frame_interval - (self._clock() - frame_start)
            if sleep_time > 0:
                time.sleep(sleep_time)

        return steps


class FixedStepScheduler(FrameScheduler):
    """
    Fixed logic timestep decoupled from the render rate.

    Each frame runs floor(elapsed / interval) steps of tick(interval), at
    most max_steps_per_frame. When more steps were due than the cap, the
    logic clock jumps to one interval behind now: the excess simulated time
    is dropped, not queued.
    """

    def __init__(
        self,
        simulation: EcosystemSimulation,
        logic_rate: Optional[int] = None,
        max_steps_per_frame: Optional[int] = None,
        render: Optional[RenderFn] = None,
        clock: Callable[[], float] = time.perf_counter
    ):
        """
        Args:
            simulation: Simulation to drive
            logic_rate: Logic steps per second (default config.logic_rate)
            max_steps_per_frame: Catch-up cap (default config.max_steps_per_frame)
            render: Per-frame render hook
            clock: Wall clock in seconds
        """
        super().__init__(simulation, render=render, clock=clock)
        config = simulation.config
        logic_rate = logic_rate if logic_rate is not None else config.logic_rate
        max_steps = max_steps_per_frame if max_steps_per_frame is not None else config.max_steps_per_frame

        if logic_rate <= 0:
            raise ValueError("logic_rate must be positive")
        if max_steps <= 0:
            raise ValueError("max_steps_per_frame must be positive")

        self._logic_rate = logic_rate
        self._interval = 1.0 / logic_rate
        self._max_steps = max_steps
        self.last_update_time: float = 0.0
        self._anchor_time: float = 0.0
        self._steps_since_anchor: int = 0
        self.dropped_steps: int = 0

    @property
    def logic_rate(self) -> int:
        return self._logic_rate

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def max_steps_per_frame(self) -> int:
        return self._max_steps

    def _anchor(self, now: float):
        self._anchor_time = now
        self._steps_since_anchor = 0
        self.last_update_time = now

    def _run_logic(self, now: float) -> int:
        # Rounded so frame timestamps landing on a step boundary count it
        due = math.floor(round((now - self.last_update_time) / self._interval, 9))
        if due <= 0:
            return 0

        steps = min(due, self._max_steps)
        for _ in range(steps):
            self.simulation.tick(self._interval)
            self._steps_since_anchor += 1
            # Step count times interval, so rounding error does not accumulate
            self.last_update_time = self._anchor_time + self._steps_since_anchor * self._interval

        # Running behind: drop the backlog instead of catching up
        if due > self._max_steps:
            self.dropped_steps += due - self._max_steps
            self._anchor(now - self._interval)

        return steps


class LockstepScheduler(FrameScheduler):
    """
    One logic step per frame, no timestep decoupling.

    Each step covers one nominal frame (1 / frame_rate_scale seconds)
    regardless of how much wall time passed, so speed follows the display
    refresh rate.
    """

    def _run_logic(self, now: float) -> int:
        self.simulation.tick(1.0 / self.simulation.config.frame_rate_scale)
        return 1

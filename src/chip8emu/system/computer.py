"""Computer scaffold providing instruction scheduling and control utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
from typing import Callable, List, Optional

from chip8emu.errors import Chip8Error

DEFAULT_INSTRUCTIONS_PER_SECOND = 600
TIMER_FREQUENCY = 60


@dataclass(order=True)
class _ComputerEvent:
    clock: int
    order: int
    handler: Callable[["Computer"], None] = field(compare=False)
    name: str = field(default="", compare=False)

    def apply(self, computer: "Computer") -> None:
        self.handler(computer)


class EventQueue:
    """Priority queue of events keyed by instruction clock."""

    def __init__(self) -> None:
        self._heap: List[_ComputerEvent] = []

    def add(self, event: _ComputerEvent) -> None:
        heapq.heappush(self._heap, event)

    def pop_ready(self, clock: int) -> List[_ComputerEvent]:
        ready: List[_ComputerEvent] = []
        while self._heap and self._heap[0].clock <= clock:
            ready.append(heapq.heappop(self._heap))
        return ready

    def clear(self) -> None:
        self._heap.clear()


class Computer:
    """Host machine stepping a CPU and firing the 60 Hz timer on schedule.

    The emulated clock counts executed instructions. The timer event fires
    every ``instructions_per_second / 60`` instructions, so a host that runs
    ``instructions_per_second / fps`` instructions per rendered frame gets
    real-time timers without the CPU knowing about wall-clock time.
    """

    STATUS_RUNNING = 0
    STATUS_PAUSED = 1
    STATUS_STOPPED = 2

    def __init__(self, *, instructions_per_second: int = DEFAULT_INSTRUCTIONS_PER_SECOND) -> None:
        if instructions_per_second <= 0:
            raise ValueError("instructions per second must be positive")
        self.instructions_per_second = instructions_per_second
        self.clock_count: int = 0
        self.timer_ticks: int = 0
        self.last_error: Optional[Chip8Error] = None
        self._running_status: int = self.STATUS_STOPPED
        self._event_queue = EventQueue()
        self._event_counter = 0
        self._timer_interval: int = self._compute_timer_interval()
        self._timer_active: bool = False
        self._timer_generation: int = 0

    def _compute_timer_interval(self) -> int:
        return max(1, self.instructions_per_second // TIMER_FREQUENCY)

    # ------------------------------------------------------------------
    # Hooks for concrete machines
    # ------------------------------------------------------------------
    def _step_cpu(self) -> object:
        raise NotImplementedError

    def tick_timers(self) -> None:
        raise NotImplementedError

    def _reset_machine(self) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def step(self) -> object:
        """Execute exactly one instruction and fire any due events."""

        try:
            result = self._step_cpu()
        except Chip8Error as exc:
            self.last_error = exc
            self._apply_power_off()
            raise
        self.clock_count += 1
        self._process_events()
        return result

    def tick(self, instructions: int) -> int:
        """Run up to ``instructions`` steps; returns how many were executed."""

        if instructions <= 0:
            return 0
        self._process_events()
        executed = 0
        while executed < instructions and self._running_status == self.STATUS_RUNNING:
            self.step()
            executed += 1
        return executed

    def instructions_per_frame(self, fps: int) -> int:
        if fps <= 0:
            raise ValueError("fps must be positive")
        return max(1, self.instructions_per_second // fps)

    def run_frame(self, fps: int = TIMER_FREQUENCY) -> int:
        return self.tick(self.instructions_per_frame(fps))

    # ------------------------------------------------------------------
    # Control lifecycle
    # ------------------------------------------------------------------
    def power_on(self) -> None:
        self._run_reset()
        self._running_status = self.STATUS_RUNNING
        self._start_periodic_tasks()

    def power_off(self) -> None:
        if self._running_status == self.STATUS_STOPPED:
            return
        self._schedule_event(lambda comp: comp._apply_power_off(), name="powerOff")

    def reset(self) -> None:
        self._schedule_event(lambda comp: comp._run_reset(), name="reset")

    def pause(self) -> None:
        if self._running_status != self.STATUS_RUNNING:
            return
        self._schedule_event(lambda comp: comp._apply_pause(), name="pause")

    def resume(self) -> None:
        if self._running_status != self.STATUS_PAUSED:
            return
        self._schedule_event(lambda comp: comp._apply_resume(), name="resume")

    def restore_clock(self, clock_count: int, timer_ticks: int = 0) -> None:
        """Jump the instruction clock, rescheduling the timer from the new position.

        Restoring also restarts a machine halted by a VM error.
        """

        self.clock_count = clock_count
        self.timer_ticks = timer_ticks
        self.last_error = None
        self._event_queue.clear()
        self._stop_periodic_tasks()
        self._running_status = self.STATUS_RUNNING
        self._start_periodic_tasks()

    def get_running_status(self) -> int:
        return self._running_status

    @property
    def running(self) -> bool:
        return self._running_status == self.STATUS_RUNNING

    def set_instructions_per_second(self, value: int) -> None:
        if value <= 0:
            raise ValueError("instructions per second must be positive")
        self.instructions_per_second = value
        self._timer_interval = self._compute_timer_interval()
        if self._running_status == self.STATUS_RUNNING:
            self._stop_periodic_tasks()
            self._start_periodic_tasks()

    # ------------------------------------------------------------------
    # Event dispatch helpers
    # ------------------------------------------------------------------
    def _process_events(self) -> None:
        for event in self._event_queue.pop_ready(self.clock_count):
            event.apply(self)

    def _schedule_event(self, handler: Callable[["Computer"], None], delay_cycles: int = 0, *, name: str = "") -> None:
        event_clock = max(self.clock_count + max(delay_cycles, 0), 0)
        event = _ComputerEvent(event_clock, self._event_counter, handler, name)
        self._event_counter += 1
        self._event_queue.add(event)
        if event_clock <= self.clock_count:
            self._process_events()

    def _run_reset(self) -> None:
        active = self._running_status == self.STATUS_RUNNING
        self._stop_periodic_tasks()
        self._event_queue.clear()
        self.clock_count = 0
        self.timer_ticks = 0
        self.last_error = None
        self._reset_machine()
        if active:
            self._start_periodic_tasks()

    def _apply_pause(self) -> None:
        if self._running_status != self.STATUS_RUNNING:
            return
        self._running_status = self.STATUS_PAUSED
        self._stop_periodic_tasks()

    def _apply_resume(self) -> None:
        if self._running_status == self.STATUS_RUNNING:
            return
        self._running_status = self.STATUS_RUNNING
        self._start_periodic_tasks()

    def _apply_power_off(self) -> None:
        self._running_status = self.STATUS_STOPPED
        self._stop_periodic_tasks()
        self._event_queue.clear()

    def _start_periodic_tasks(self) -> None:
        if self._running_status != self.STATUS_RUNNING or self._timer_active:
            return
        self._timer_active = True
        self._timer_generation += 1
        self._schedule_timer(self._timer_generation)

    def _stop_periodic_tasks(self) -> None:
        self._timer_active = False

    def _schedule_timer(self, generation: int) -> None:
        self._schedule_event(
            lambda comp: comp._timer_event(generation), self._timer_interval, name="timers.tick"
        )

    def _timer_event(self, generation: int) -> None:
        # Events queued before a pause or interval change are stale.
        if generation != self._timer_generation or not self._timer_active:
            return
        if self._running_status != self.STATUS_RUNNING:
            return
        self.tick_timers()
        self.timer_ticks += 1
        self._schedule_timer(generation)

"""
Three phase search for encoder settings that hit a quality target:

1. rate estimate, bracket the control value at the fastest speed against an inflated target
2. speed search, walk the speed lattice at that value and keep the best point
3. rate refine, bracket the exact bitrate at the chosen speed (bitrate mode only)
"""

import math
from typing import List

from tqdm import tqdm

from convergentEncode.core.context import RunContext
from convergentEncode.core.exception import (
    SearchException,
    ExecutorFailure,
    NonConvergence,
)
from convergentEncode.core.timer import Timer
from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.speed import SpeedDescriptor, SpeedLattice
from convergentEncode.encoder.stats import Phase, TrialRecord
from convergentEncode.search.bracketing import propose_for_phase
from convergentEncode.search.executor import TrialExecutor
from convergentEncode.search.fitness import pick_optimal_speed
from convergentEncode.search.history import TrialHistory
from convergentEncode.search.result import SearchResult
from convergentEncode.search.sinks import ResultSink

# fast settings undershoot, so phase 1 aims this fraction of the remaining headroom higher
TARGET_INFLATION = 0.3
ESTIMATE_EPSILON = 1.0
QUANTIZER_CONVERGENCE = 1


def inflated_target(target: float) -> float:
    return target + (100 - target) * TARGET_INFLATION


class PhaseController:
    def __init__(
        self,
        ctx: RunContext,
        executor: TrialExecutor,
        sinks: List[ResultSink] = None,
    ):
        self.ctx = ctx
        self.executor = executor
        self.sinks = sinks or []
        self.history = TrialHistory()
        self.lattice = SpeedLattice(
            test_alt_tunings=ctx.test_alt_tunings,
            test_fwd_keyframes=ctx.test_fwd_keyframes,
        )
        self.phase: Phase | None = None
        self.timer = Timer()
        self._bar = None

    def log(self, message: str, level: int = 1):
        if self.ctx.log_level >= level:
            tqdm.write(message)

    def run(self) -> SearchResult:
        """
        Runs all phases, never raises for search failures, they come back as a failed SearchResult
        """
        try:
            self.ctx.validate()
        except SearchException as e:
            self.log(f"Configuration rejected: {e.message}", level=0)
            return SearchResult.failed(e)

        try:
            estimate = self.estimate_rate()
            speed = self.search_speed(estimate)
            if self.ctx.control_mode == ControlMode.QUANTIZER:
                final_value = estimate
            else:
                final_value = self.refine_rate(speed, estimate)
        except SearchException as e:
            self.log(f"Search failed during {self.phase}: {e.message}", level=0)
            return SearchResult.failed(e, self.phase)
        finally:
            self._close_bar()

        self.timer.finish(loud=self.ctx.log_level >= 1)
        return SearchResult.succeeded(final_value, speed, self.history.all())

    def run_trial(
        self, phase: Phase, control_value: float, speed: SpeedDescriptor
    ) -> TrialRecord:
        outcome = self.executor.run_trial(
            control_value, self.ctx.control_mode, speed, self.ctx.get_video()
        )
        try:
            record = TrialRecord(
                phase=phase,
                control_value=control_value,
                control_mode=self.ctx.control_mode,
                speed=speed,
                quality=outcome.quality,
                cpu_time_pass1=outcome.cpu_time_pass1,
                cpu_time_pass2=outcome.cpu_time_pass2,
                wall_time=outcome.wall_time,
                output_size_bytes=outcome.output_size_bytes,
            )
        except ValueError as e:
            raise ExecutorFailure(f"Trial returned unusable measurements: {e}")

        self.history.append(record)
        for sink in self.sinks:
            sink.on_trial(record)
        if self._bar is not None:
            self._bar.update(1)
            self._bar.set_postfix(quality=f"{record.quality:.2f}")
        self.log(
            f"[{phase}] {self.ctx.control_mode.column_name()} {control_value}"
            f" -> quality {record.quality:.3f}, cpu {record.net_cpu_time:.2f}s,"
            f" wall {record.wall_time:.2f}s, {record.output_size_bytes} bytes"
        )
        return record

    def _start_phase(self, phase: Phase, desc: str):
        self._close_bar()
        self.phase = phase
        self.timer.start(str(phase))
        self.log(desc)
        self._bar = tqdm(
            desc=desc, unit="trial", leave=False, disable=not self.ctx.show_progress
        )

    def _end_phase(self):
        self.timer.stop(str(self.phase))
        self._close_bar()

    def _close_bar(self):
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def _propose(self, phase: Phase, target: float, default: float) -> float:
        return propose_for_phase(
            self.history.all(), phase, target, default, self.ctx.control_mode
        )

    def _default_value(self) -> float:
        if self.ctx.control_mode == ControlMode.QUANTIZER:
            return self.ctx.default_quantizer
        return self.ctx.default_bitrate

    def estimate_rate(self) -> float:
        """
        Phase 1, returns a rough control value for the target at the fastest speed
        """
        phase = Phase.RATE_ESTIMATE
        self._start_phase(phase, "Running fast rate optimization")
        target = inflated_target(self.ctx.quality_target)
        speed = self.lattice.fastest()
        default = self._default_value()

        for _ in range(self.ctx.max_trials_per_phase):
            value = self._propose(phase, target, default)
            record = self.run_trial(phase, value, speed)

            if self.ctx.control_mode == ControlMode.QUANTIZER:
                next_value = self._propose(phase, target, default)
                if abs(next_value - record.control_value) <= QUANTIZER_CONVERGENCE:
                    self._end_phase()
                    # the higher quantizer of the pair, cheaper and still close
                    return max(next_value, record.control_value)
            elif abs(record.quality - target) < ESTIMATE_EPSILON:
                self._end_phase()
                return record.control_value

        raise NonConvergence(
            f"Rate estimate did not reach {target:.2f} within"
            f" {self.ctx.max_trials_per_phase} trials"
        )

    def throughput(self, record: TrialRecord) -> float:
        """
        Seconds of video encoded per second of cost, cpu time is spread over the configured cores
        """
        if self.ctx.use_cpu_time:
            elapsed = record.net_cpu_time / self.ctx.cores
        else:
            elapsed = record.wall_time
        if elapsed <= 0:
            return math.inf
        return self.ctx.get_video().length / elapsed

    def search_speed(self, control_value: float) -> SpeedDescriptor:
        """
        Phase 2, returns the speed point to use for the final rate
        """
        phase = Phase.SPEED_SEARCH
        self._start_phase(phase, "Optimizing for speed.")

        if self.ctx.skips_speed_search():
            self.log("Using slowest possible cpu settings for encode")
            self._end_phase()
            return self.lattice.terminal()

        previous = None
        for point in self.lattice.walk():
            record = self.run_trial(phase, control_value, point)
            if self.ctx.uses_cost_ratio():
                continue

            achieved = self.throughput(record)
            self.log(
                f"Throughput {achieved:.4f}s/s against target {self.ctx.timescale_target}",
                level=2,
            )
            if achieved < self.ctx.timescale_target:
                if previous is None:
                    raise NonConvergence(
                        f"The fastest speed setting already misses the timescale target"
                        f" ({achieved:.4f} < {self.ctx.timescale_target})"
                    )
                self._end_phase()
                return previous.speed
            previous = record

        if self.ctx.uses_cost_ratio():
            speed = pick_optimal_speed(
                self.history.for_phase(phase),
                self.ctx.get_video().size_bytes,
                self.ctx.time_cost_ratio,
                self.ctx.use_cpu_time,
            )
            self.log(f"Fittest speed: {speed}")
        else:
            # every point was fast enough, the slowest one wins
            self.log("Speed lattice exhausted without missing the timescale target")
            speed = previous.speed

        self._end_phase()
        return speed

    def refine_rate(self, speed: SpeedDescriptor, estimate: float) -> float:
        """
        Phase 3, returns the bitrate that lands within epsilon of the exact target
        """
        phase = Phase.RATE_REFINE
        self._start_phase(phase, "Finding exact bitrate")
        target = self.ctx.quality_target

        for _ in range(self.ctx.max_trials_per_phase):
            value = self._propose(phase, target, estimate)
            record = self.run_trial(phase, value, speed)
            if abs(record.quality - target) < self.ctx.quality_epsilon:
                self._end_phase()
                return record.control_value

        raise NonConvergence(
            f"Exact bitrate did not land within {self.ctx.quality_epsilon} of {target}"
            f" in {self.ctx.max_trials_per_phase} trials"
        )

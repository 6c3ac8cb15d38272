from typing import Callable, List

import pytest

from convergentEncode.core.context import RunContext
from convergentEncode.core.exception import ExecutorFailure
from convergentEncode.core.video import VideoParams
from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.speed import SpeedDescriptor
from convergentEncode.search.executor import TrialExecutor, TrialOutcome
from convergentEncode.search.sinks import MemorySink


class ModelExecutor(TrialExecutor):
    """
    Stands in for aomenc + vmaf, every measurement comes from a plain function of the trial inputs
    """

    def __init__(
        self,
        quality_fn: Callable[[float, SpeedDescriptor], float],
        cpu_fn: Callable[[SpeedDescriptor], float] = lambda speed: 1.0,
        size_fn: Callable[[SpeedDescriptor], int] = lambda speed: 1000,
        fail_on_trial: int = -1,
    ):
        self.quality_fn = quality_fn
        self.cpu_fn = cpu_fn
        self.size_fn = size_fn
        self.fail_on_trial = fail_on_trial
        self.calls: List[tuple] = []

    def run_trial(self, control_value, control_mode, speed, video) -> TrialOutcome:
        self.calls.append((control_value, control_mode, speed))
        if len(self.calls) == self.fail_on_trial:
            raise ExecutorFailure(f"aomenc exited with 1 on trial {len(self.calls)}")
        cpu = self.cpu_fn(speed)
        return TrialOutcome(
            quality=self.quality_fn(control_value, speed),
            cpu_time_pass1=cpu * 0.25,
            cpu_time_pass2=cpu * 0.75,
            wall_time=cpu,
            output_size_bytes=self.size_fn(speed),
        )


def hyperbolic_quality(control_value: float, speed: SpeedDescriptor) -> float:
    """Quality approaches 100 as the bitrate grows, realtime loses a bit more."""
    c = 50000 if speed.is_realtime() else 60000
    return 100 - c / control_value


def linear_quantizer_quality(control_value: float, speed: SpeedDescriptor) -> float:
    return 100.0 - control_value


@pytest.fixture
def video():
    return VideoParams(
        width=1280,
        height=720,
        fps_num=30,
        fps_denom=1,
        length=10.0,
        frames=300,
        size_bytes=4000,
        depth=8,
        raw_path="/tmp/scv/rawsource.yuv",
    )


@pytest.fixture
def make_ctx(video):
    def _make_ctx(**overrides) -> RunContext:
        ctx = RunContext()
        ctx.input_file = "/videos/input.mkv"
        ctx.quality_target = 95.0
        ctx.quality_epsilon = 0.05
        ctx.control_mode = ControlMode.BITRATE
        ctx.timescale_target = None
        ctx.time_cost_ratio = 10.0
        ctx.video = video
        for key, value in overrides.items():
            setattr(ctx, key, value)
        return ctx

    return _make_ctx


@pytest.fixture
def memory_sink():
    return MemorySink()


@pytest.fixture
def make_executor():
    return ModelExecutor


@pytest.fixture
def bitrate_quality():
    return hyperbolic_quality


@pytest.fixture
def quantizer_quality():
    return linear_quantizer_quality

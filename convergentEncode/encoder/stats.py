from enum import Enum

from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.speed import SpeedDescriptor


class Phase(Enum):
    RATE_ESTIMATE: int = 1
    SPEED_SEARCH: int = 2
    RATE_REFINE: int = 3

    def __str__(self):
        return self.name


class TrialRecord:
    """
    The outcome of one encode-and-score trial, frozen once built
    """

    __slots__ = (
        "phase",
        "control_value",
        "control_mode",
        "speed",
        "quality",
        "cpu_time_pass1",
        "cpu_time_pass2",
        "wall_time",
        "output_size_bytes",
        "_frozen",
    )

    def __init__(
        self,
        phase: Phase,
        control_value: float,
        control_mode: ControlMode,
        speed: SpeedDescriptor,
        quality: float,
        cpu_time_pass1: float,
        cpu_time_pass2: float = 0.0,
        wall_time: float = 0.0,
        output_size_bytes: int = 0,
    ):
        if not 0 <= quality <= 100:
            raise ValueError(f"quality {quality} outside 0-100")
        if min(cpu_time_pass1, cpu_time_pass2, wall_time, output_size_bytes) < 0:
            raise ValueError("times and sizes can't be negative")
        self.phase = phase
        self.control_value = control_value
        self.control_mode = control_mode
        self.speed = speed
        self.quality = quality
        self.cpu_time_pass1 = cpu_time_pass1
        self.cpu_time_pass2 = cpu_time_pass2
        self.wall_time = wall_time
        self.output_size_bytes = int(output_size_bytes)
        self._frozen = True

    def __setattr__(self, key, value):
        if getattr(self, "_frozen", False):
            raise AttributeError(f"TrialRecord is immutable, can't set {key}")
        object.__setattr__(self, key, value)

    @property
    def net_cpu_time(self) -> float:
        return self.cpu_time_pass1 + self.cpu_time_pass2

    def cost(self, use_cpu_time: bool) -> float:
        return self.net_cpu_time if use_cpu_time else self.wall_time

    def dict(self) -> dict:
        return {
            "phase": str(self.phase),
            "control_value": self.control_value,
            "control_mode": str(self.control_mode),
            "speed": self.speed.dict(),
            "quality": self.quality,
            "cpu_time_pass1": self.cpu_time_pass1,
            "cpu_time_pass2": self.cpu_time_pass2,
            "net_cpu_time": self.net_cpu_time,
            "wall_time": self.wall_time,
            "output_size_bytes": self.output_size_bytes,
        }

    def __repr__(self):
        return f"TrialRecord({self.dict()})"

import json
import os

from convergentEncode.core.exception import ConfigurationError
from convergentEncode.core.video import VideoParams
from convergentEncode.encoder.rate_dist import (
    ControlMode,
    QUANTIZER_MIN,
    QUANTIZER_MAX,
)


class RunContext:
    """
    Everything a search run is configured with, read-only once the search starts
    """

    def __str__(self):
        return "RunContext(" + str(self.dict()) + ")"

    def dict(self):
        return {
            "input_file": self.input_file,
            "temp_folder": self.temp_folder,
            "output_csv": self.output_csv,
            "vmaf_model": self.vmaf_model,
            "vmaf_threads": self.vmaf_threads,
            "quality_target": self.quality_target,
            "quality_epsilon": self.quality_epsilon,
            "control_mode": self.control_mode.name,
            "timescale_target": self.timescale_target,
            "time_cost_ratio": self.time_cost_ratio,
            "cores": self.cores,
            "use_cpu_time": self.use_cpu_time,
            "two_pass": self.two_pass,
            "test_alt_tunings": self.test_alt_tunings,
            "test_fwd_keyframes": self.test_fwd_keyframes,
            "bits": self.bits,
            "test_width": self.test_width,
            "test_height": self.test_height,
            "default_bitrate": self.default_bitrate,
            "default_quantizer": self.default_quantizer,
            "max_trials_per_phase": self.max_trials_per_phase,
            "log_level": self.log_level,
            "show_progress": self.show_progress,
            "plot": self.plot,
            "assume_yes": self.assume_yes,
            "video": self.video.dict() if self.video is not None else None,
        }

    def to_json(self) -> str:
        return json.dumps(self.dict())

    # safe version
    def from_json(self, json_str):
        try:
            parsed = json.loads(json_str)
        except json.decoder.JSONDecodeError:
            raise ConfigurationError("Invalid JSON")
        for key, value in parsed.items():
            match key:
                case "control_mode":
                    value = ControlMode[value]
                case "video":
                    value = VideoParams(**value) if value is not None else None
            setattr(self, key, value)
        return self

    def __iter__(self):
        return self.dict().__iter__()

    input_file: str = ""
    temp_folder: str = "/tmp/scv"
    output_csv: str = ""
    vmaf_model: str = ""
    vmaf_threads: int = os.cpu_count() or 1

    quality_target: float = 95.0
    quality_epsilon: float = 0.05
    control_mode: ControlMode = ControlMode.BITRATE

    timescale_target: float | None = None
    time_cost_ratio: float | None = None
    cores: float = 1.0
    use_cpu_time: bool = True

    two_pass: bool = True
    test_alt_tunings: bool = False
    test_fwd_keyframes: bool = False

    bits: int = 8
    test_width: int = 0
    test_height: int = 720

    default_bitrate: float = 10000
    default_quantizer: int = 30
    max_trials_per_phase: int = 40

    log_level: int = 0
    show_progress: bool = False
    plot: bool = False
    assume_yes: bool = False

    video: VideoParams | None = None

    def get_video(self) -> VideoParams:
        if self.video is None:
            return VideoParams()
        return self.video

    def uses_cost_ratio(self) -> bool:
        return self.time_cost_ratio is not None

    def skips_speed_search(self) -> bool:
        """
        No throughput target and no positive cost ratio means the caller always wants the slowest settings
        """
        if self.timescale_target is not None:
            return False
        return self.time_cost_ratio is None or self.time_cost_ratio <= 0

    def validate(self):
        """
        Rejects contradictory or out of range settings, raises ConfigurationError
        """
        if self.timescale_target is not None and self.time_cost_ratio is not None:
            raise ConfigurationError(
                "Both a timescale target and a time cost ratio are set, pick one"
            )
        if self.timescale_target is not None and self.timescale_target <= 0:
            raise ConfigurationError(
                f"Timescale target must be positive, got {self.timescale_target}"
            )
        if not 0 <= self.quality_target <= 100:
            raise ConfigurationError(
                f"Quality target {self.quality_target} is outside 0-100"
            )
        if self.quality_epsilon <= 0:
            raise ConfigurationError(
                f"Quality epsilon must be positive, got {self.quality_epsilon}"
            )
        if not QUANTIZER_MIN <= self.default_quantizer <= QUANTIZER_MAX:
            raise ConfigurationError(
                f"Quantizer {self.default_quantizer} is outside {QUANTIZER_MIN}-{QUANTIZER_MAX}"
            )
        if self.default_bitrate <= 0:
            raise ConfigurationError(
                f"Starting bitrate must be positive, got {self.default_bitrate}"
            )
        if self.cores <= 0:
            raise ConfigurationError(f"Core count must be positive, got {self.cores}")
        if self.max_trials_per_phase < 1:
            raise ConfigurationError("At least one trial per phase is needed")
        if self.bits not in (8, 10, 12):
            raise ConfigurationError(f"Unsupported bit depth {self.bits}")
        return self

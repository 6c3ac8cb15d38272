import os
from abc import ABC, abstractmethod

from tqdm import tqdm

from convergentEncode.core.exception import ExecutorFailure
from convergentEncode.core.ffmpeg import Ffmpeg
from convergentEncode.core.util.bin_utils import BinaryNotFound
from convergentEncode.core.util.cli_executor import run_cli
from convergentEncode.core.util.path import PathConvergent
from convergentEncode.core.video import VideoParams
from convergentEncode.encoder.impl.Aomenc import EncoderAom
from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.speed import SpeedDescriptor
from convergentEncode.metrics.exception import VmafException
from convergentEncode.metrics.impl.vmaf import VmafOptions, calc_vmaf


class TrialOutcome:
    """
    What a trial measured, before the controller turns it into a TrialRecord
    """

    def __init__(
        self,
        quality: float,
        cpu_time_pass1: float,
        cpu_time_pass2: float = 0.0,
        wall_time: float = 0.0,
        output_size_bytes: int = 0,
    ):
        self.quality = quality
        self.cpu_time_pass1 = cpu_time_pass1
        self.cpu_time_pass2 = cpu_time_pass2
        self.wall_time = wall_time
        self.output_size_bytes = output_size_bytes

    def __repr__(self):
        return (
            f"TrialOutcome(quality={self.quality}, cpu_time_pass1={self.cpu_time_pass1},"
            f" cpu_time_pass2={self.cpu_time_pass2}, wall_time={self.wall_time},"
            f" output_size_bytes={self.output_size_bytes})"
        )


class TrialExecutor(ABC):
    """
    Runs one encode-and-score trial, blocking until it is done.
    Raises ExecutorFailure when the trial can't produce a score.
    """

    @abstractmethod
    def run_trial(
        self,
        control_value: float,
        control_mode: ControlMode,
        speed: SpeedDescriptor,
        video: VideoParams,
    ) -> TrialOutcome:
        pass


class AomencTrialExecutor(TrialExecutor):
    def __init__(
        self,
        temp_folder: str,
        vmaf_options: VmafOptions = None,
        bits: int = 8,
        two_pass: bool = True,
        log_level: int = 0,
    ):
        self.temp_folder = temp_folder
        self.vmaf_options = vmaf_options or VmafOptions()
        self.bits = bits
        self.two_pass = two_pass
        self.log_level = log_level

    def get_output_path(self) -> str:
        return os.path.join(self.temp_folder, "output.ivf")

    def get_raw_output_path(self) -> str:
        return os.path.join(self.temp_folder, "rawoutput.yuv")

    def run_trial(
        self,
        control_value: float,
        control_mode: ControlMode,
        speed: SpeedDescriptor,
        video: VideoParams,
    ) -> TrialOutcome:
        enc = EncoderAom(
            video=video,
            control_value=control_value,
            control_mode=control_mode,
            speed=speed,
            input_path=video.raw_path,
            output_path=self.get_output_path(),
            bits=self.bits,
            two_pass=self.two_pass,
        )
        try:
            return self._run(enc, video)
        except (RuntimeError, ValueError, VmafException, BinaryNotFound, OSError) as e:
            raise ExecutorFailure(f"Trial at {control_value} with {speed} failed: {e}")
        finally:
            self._cleanup(enc)

    def _run(self, enc: EncoderAom, video: VideoParams) -> TrialOutcome:
        if self.log_level >= 2:
            tqdm.write(enc.speed.explain())

        cpu_times = []
        wall_time = 0.0
        for command in enc.get_encode_commands():
            if self.log_level >= 2:
                tqdm.write(f"Running command:\n{command}")
            result = run_cli(command).verify(
                fail_message=f"Error running aomenc: {command}"
            )
            cpu_times.append(result.cpu_time)
            wall_time += result.time_taken

        output = PathConvergent(enc.output_path)
        output.check_video()
        output_size = output.size_bytes()

        raw_output = self.get_raw_output_path()
        Ffmpeg.convert_to_raw(output, raw_output, video)

        quality = calc_vmaf(
            reference_path=video.raw_path,
            distorted_path=raw_output,
            video=video,
            vmaf_options=self.vmaf_options,
            bits=video.depth,
        )

        return TrialOutcome(
            quality=min(max(quality, 0.0), 100.0),
            cpu_time_pass1=cpu_times[0],
            cpu_time_pass2=cpu_times[1] if len(cpu_times) > 1 else 0.0,
            wall_time=wall_time,
            output_size_bytes=output_size,
        )

    def _cleanup(self, enc: EncoderAom):
        for path in [
            enc.output_path,
            enc.get_first_pass_path(),
            self.get_raw_output_path(),
        ]:
            PathConvergent(path).remove()

from typing import List

from convergentEncode.core.util.bin_utils import get_binary
from convergentEncode.core.video import VideoParams
from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.speed import SpeedDescriptor


class EncoderAom:
    """
    Builds the aomenc command lines for one trial, raw yuv in, ivf out
    """

    def __init__(
        self,
        video: VideoParams,
        control_value: float,
        control_mode: ControlMode,
        speed: SpeedDescriptor,
        input_path: str,
        output_path: str,
        bits: int = 8,
        two_pass: bool = True,
    ):
        self.video = video
        self.control_value = control_value
        self.control_mode = control_mode
        self.speed = speed
        self.input_path = input_path
        self.output_path = output_path
        self.bits = bits
        self.two_pass = two_pass

    @property
    def passes(self) -> int:
        # realtime mode has no two-pass
        if self.two_pass and not self.speed.is_realtime():
            return 2
        return 1

    def get_first_pass_path(self) -> str:
        return f"{self.output_path}.log"

    def _base_command(self) -> str:
        encode_command = f"{get_binary('aomenc')} --quiet "
        encode_command += f"--bit-depth={self.bits} "
        encode_command += f"--input-bit-depth={self.video.depth} "
        encode_command += f"--width={self.video.width} --height={self.video.height} "
        encode_command += f"--fps={self.video.fps_num}/{self.video.fps_denom} "
        encode_command += f"{self.speed.deadline.get_flag()} "

        match self.control_mode:
            case ControlMode.BITRATE:
                encode_command += (
                    f"--end-usage=vbr --bias-pct=100 --target-bitrate={int(self.control_value)} "
                )
            case ControlMode.QUANTIZER:
                encode_command += f"--end-usage=q --cq-level={int(self.control_value)} "
                if int(self.control_value) == 0:
                    encode_command += "--lossless=1 "

        encode_command += f"--cpu-used={self.speed.cpu_level} "
        encode_command += f"--tune={self.speed.tuning} "
        encode_command += (
            f"--enable-fwd-kf={1 if self.speed.forward_keyframes else 0} "
        )
        # one keyframe every 10 seconds
        encode_command += f"--kf-max-dist={self.video.keyframe_distance()} "
        encode_command += f'--ivf -o "{self.output_path}" "{self.input_path}"'
        return encode_command

    def get_encode_commands(self) -> List[str]:
        """
        :return: one command per pass, in the order they have to run
        """
        encode_command = self._base_command()
        if self.passes == 2:
            encode_command += f' --fpf="{self.get_first_pass_path()}" --passes=2'
            return [encode_command + " --pass=1", encode_command + " --pass=2"]
        return [encode_command + " --passes=1 --pass=1"]

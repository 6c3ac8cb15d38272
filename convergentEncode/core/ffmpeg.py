import os

from convergentEncode.core.util.bin_utils import get_binary
from convergentEncode.core.util.cli_executor import run_cli
from convergentEncode.core.util.path import PathConvergent
from convergentEncode.core.video import VideoParams

PIX_FMTS = {8: "yuv420p", 10: "yuv420p10le", 12: "yuv420p12le"}


def get_pix_fmt_for_depth(depth: int) -> str:
    if depth not in PIX_FMTS:
        raise ValueError(f"No raw pixel format for a bit depth of {depth}")
    return PIX_FMTS[depth]


class Ffmpeg:
    @staticmethod
    def get_video_length(path: PathConvergent) -> float:
        """
        Returns the video length in seconds
        :param path: Path to the video
        :return: float
        """
        path.check_video()
        cli_command = (
            f"{get_binary('ffprobe')} -v error -show_entries format=duration"
            f" -of default=noprint_wrappers=1:nokey=1 {path.get_safe()}"
        )
        try:
            out = (
                run_cli(cli_command)
                .verify(
                    bad_output_hints=["N/A", "Invalid data found"],
                    fail_message=f"ffprobe failed, {cli_command}",
                )
                .strip_mp4_warning()
                .get_output()
            )
        except RuntimeError:
            frame_count = Ffmpeg.get_frame_count(path)
            fps = Ffmpeg.get_video_frame_rate(path)
            return frame_count / fps

        return float(out)

    @staticmethod
    def get_frame_count(path: PathConvergent) -> int:
        path.check_video()
        return (
            run_cli(
                f"{get_binary('ffprobe')} -v error -select_streams v:0 -count_packets"
                f" -show_entries stream=nb_read_packets"
                f" -of default=noprint_wrappers=1:nokey=1 {path.get_safe()}"
            )
            .verify()
            .strip_mp4_warning()
            .get_as_int()
        )

    @staticmethod
    def get_height(path: PathConvergent) -> int:
        path.check_video()
        return (
            run_cli(
                f"{get_binary('ffprobe')} -v error -select_streams v:0 -show_entries stream=height "
                f"-of default=noprint_wrappers=1:nokey=1 {path.get_safe()}"
            )
            .verify()
            .strip_mp4_warning()
            .get_as_int()
        )

    @staticmethod
    def get_width(path: PathConvergent) -> int:
        path.check_video()
        return (
            run_cli(
                f"{get_binary('ffprobe')} -v error -select_streams v:0 -show_entries stream=width "
                f"-of default=noprint_wrappers=1:nokey=1 {path.get_safe()}"
            )
            .verify()
            .strip_mp4_warning()
            .get_as_int()
        )

    @staticmethod
    def get_pix_fmt(path: PathConvergent) -> str:
        path.check_video()
        return (
            run_cli(
                f"{get_binary('ffprobe')} -v error -select_streams v:0 -show_entries stream=pix_fmt "
                f"-of default=noprint_wrappers=1:nokey=1 {path.get_safe()}"
            )
            .verify()
            .strip_mp4_warning()
            .get_output()
        )

    @staticmethod
    def get_bit_depth(path: PathConvergent) -> int:
        pix_fmt = Ffmpeg.get_pix_fmt(path)
        for depth, fmt in PIX_FMTS.items():
            if pix_fmt == fmt:
                return depth
        raise ValueError(
            f"Unable to determine pixel format of source video ({pix_fmt})."
            f" Please use yuv420p and little endian encoding for >8 bits"
        )

    @staticmethod
    def get_fps_fraction(path: PathConvergent) -> tuple[int, int]:
        path.check_video()
        result = (
            run_cli(
                f"{get_binary('ffprobe')} -v error -select_streams v -of default=noprint_wrappers=1:nokey=1"
                f" -show_entries stream=avg_frame_rate {path.get_safe()}"
            )
            .verify(bad_output_hints=[""])
            .strip_mp4_warning()
            .get_output()
            .split("/")
        )
        return int(result[0]), int(result[1])

    @staticmethod
    def get_video_frame_rate(path: PathConvergent) -> float:
        num, denom = Ffmpeg.get_fps_fraction(path)
        return num / denom

    @staticmethod
    def get_test_resolution(
        source_width: int, source_height: int, width: int = 0, height: int = 720
    ) -> tuple[int, int]:
        """
        Height 0 keeps the source resolution, width 0 follows the source aspect ratio
        """
        if height <= 0:
            return source_width, source_height
        if width <= 0:
            width = int(height * source_width / source_height)
            # yuv420 needs even dimensions
            width -= width % 2
        return width, height

    @staticmethod
    def probe(path: PathConvergent, width: int = 0, height: int = 720) -> VideoParams:
        """
        Collects the static video parameters the trials need
        """
        source_width = Ffmpeg.get_width(path)
        source_height = Ffmpeg.get_height(path)
        test_width, test_height = Ffmpeg.get_test_resolution(
            source_width, source_height, width, height
        )
        fps_num, fps_denom = Ffmpeg.get_fps_fraction(path)
        length = Ffmpeg.get_video_length(path)
        return VideoParams(
            width=test_width,
            height=test_height,
            fps_num=fps_num,
            fps_denom=fps_denom,
            length=length,
            frames=int(length * fps_num / fps_denom),
            size_bytes=path.size_bytes(),
            depth=Ffmpeg.get_bit_depth(path),
        )

    @staticmethod
    def convert_to_raw(
        input_path: PathConvergent, output_path: str, video: VideoParams
    ) -> str:
        """
        Decodes `input_path` into raw yuv at the test resolution and source depth
        """
        cli_command = (
            f"{get_binary('ffmpeg')} -v error -nostdin -y -i {input_path.get_safe()}"
            f" -an -sn -s {video.width}x{video.height}"
            f" -pix_fmt {get_pix_fmt_for_depth(video.depth)} -f rawvideo"
            f' "{output_path}"'
        )
        run_cli(cli_command).verify(
            fail_message=f"Unable to convert {input_path.get()} to raw format",
            files=[output_path],
        )
        return output_path

    @staticmethod
    def prepare_source(
        input_path: PathConvergent, video: VideoParams, temp_folder: str
    ) -> VideoParams:
        """
        Converts the already probed source to raw yuv in the temp folder, sets video.raw_path
        """
        if not os.path.exists(temp_folder):
            os.makedirs(temp_folder)
        video.raw_path = os.path.join(temp_folder, "rawsource.yuv")
        Ffmpeg.convert_to_raw(input_path, video.raw_path, video)
        return video

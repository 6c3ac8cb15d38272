from convergentEncode.core.exception import ConfigurationError
from convergentEncode.core.ffmpeg import Ffmpeg
from convergentEncode.core.util.bin_utils import check_bins
from convergentEncode.core.util.path import PathConvergent

REQUIRED_BINARIES = ["aomenc", "ffmpeg", "ffprobe", "vmaf"]


def validate_binaries(ctx):
    missing = check_bins(REQUIRED_BINARIES)
    if len(missing) > 0:
        raise ConfigurationError(
            f"Missing binaries: {', '.join(missing)},"
            f" set <NAME>_CLI_PATH to point at them"
        )
    return ctx


def validate_input(ctx):
    """
    Probes the input and stores the static video parameters in the context
    """
    try:
        ctx.video = Ffmpeg.probe(
            PathConvergent(ctx.input_file), ctx.test_width, ctx.test_height
        )
    except (RuntimeError, ValueError, OSError) as e:
        raise ConfigurationError(
            f'Input file parsing failed: "{e}", is it a valid video file?'
        )

    video = ctx.video
    print(
        f"Input Video: {video.fps:.2f} fps, {video.depth} bit,"
        f" {video.length:.2f}s, {video.size_bytes / 1024 / 1024:.2f}MB"
    )
    print(f"Testing video resolution is {video.width}x{video.height}")
    return ctx

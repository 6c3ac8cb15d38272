import json
import os

from convergentEncode.core.util.bin_utils import get_binary
from convergentEncode.core.util.cli_executor import run_cli
from convergentEncode.core.video import VideoParams
from convergentEncode.metrics.exception import VmafException


class VmafOptions:
    def __init__(self, model: str = "", threads: int = 1, subsample: int = -1):
        self.model = model
        self.threads = threads
        self.subsample = subsample

    def get_model(self) -> str | None:
        if self.model == "" or self.model is None:
            return None
        if not os.path.exists(self.model):
            raise VmafException(f"Vmaf model {self.model} does not exist")
        return f"path={self.model}"


def get_pixel_format_args(video: VideoParams, bits: int) -> str:
    return (
        f"--width {video.width} --height {video.height}"
        f" --pixel_format 420 --bitdepth {bits}"
    )


def calc_vmaf(
    reference_path: str,
    distorted_path: str,
    video: VideoParams,
    vmaf_options: VmafOptions,
    bits: int = 8,
    log_path="",
) -> float:
    """
    Scores two raw yuv files of the same geometry, returns the pooled mean
    """
    if log_path == "":
        log_path = f"{distorted_path}.vmaf.json"

    vmaf_command = (
        f'{get_binary("vmaf")} -q --json --output "{log_path}" '
        f'--reference "{reference_path}" '
        f'--distorted "{distorted_path}" '
        f"{get_pixel_format_args(video, bits)}"
        f" --threads {vmaf_options.threads}"
    )

    vmaf_model = vmaf_options.get_model()
    if vmaf_model is not None:
        vmaf_command += f" --model {vmaf_model}"

    if vmaf_options.subsample != -1 and vmaf_options.subsample is not None:
        vmaf_command += f" --subsample {vmaf_options.subsample}"

    cli_result = run_cli(vmaf_command)
    try:
        cli_result.verify(files=[log_path])
    except RuntimeError as e:
        raise VmafException(f"Could not run vmaf command: {e}, {cli_result.output}")

    try:
        with open(log_path) as f:
            log_decoded = json.load(f)
    except (json.decoder.JSONDecodeError, FileNotFoundError):
        raise VmafException(f"Could not decode vmaf log: {log_path}, {cli_result.output}")
    finally:
        if os.path.exists(log_path):
            os.remove(log_path)

    return parse_pooled_mean(log_decoded)


def parse_pooled_mean(log_decoded: dict) -> float:
    try:
        return float(log_decoded["pooled_metrics"]["vmaf"]["mean"])
    except (KeyError, TypeError, ValueError):
        raise VmafException("Vmaf log has no pooled vmaf mean")

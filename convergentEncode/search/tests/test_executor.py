import os

import pytest

import convergentEncode.search.executor as executor_module
from convergentEncode.core.exception import ExecutorFailure
from convergentEncode.core.ffmpeg import Ffmpeg
from convergentEncode.core.util.cli_executor import CliResult
from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.speed import GOOD_BASELINE, SpeedLattice
from convergentEncode.metrics.exception import VmafException
from convergentEncode.search.executor import AomencTrialExecutor


@pytest.fixture
def tools(monkeypatch, tmp_path):
    """Replaces aomenc, ffmpeg and vmaf, records the encode commands."""
    state = {"commands": [], "return_code": 0, "quality": 96.5, "vmaf_error": None}

    def fake_run_cli(cmd):
        state["commands"].append(cmd)
        with open(tmp_path / "output.ivf", "wb") as f:
            f.write(b"\0" * 2048)
        with open(tmp_path / "output.ivf.log", "wb") as f:
            f.write(b"\0" * 16)
        return CliResult(state["return_code"], "", time_taken=2.0, cpu_time=3.0)

    def fake_convert_to_raw(input_path, output_path, video):
        with open(output_path, "wb") as f:
            f.write(b"\0" * 64)
        return output_path

    def fake_calc_vmaf(**kwargs):
        if state["vmaf_error"] is not None:
            raise state["vmaf_error"]
        return state["quality"]

    monkeypatch.setattr(executor_module, "run_cli", fake_run_cli)
    monkeypatch.setattr(executor_module, "calc_vmaf", fake_calc_vmaf)
    monkeypatch.setattr(Ffmpeg, "convert_to_raw", fake_convert_to_raw)
    monkeypatch.setattr(
        "convergentEncode.encoder.impl.Aomenc.get_binary", lambda name: name
    )
    return state


def leftovers(tmp_path):
    return sorted(os.listdir(tmp_path))


class TestAomencTrialExecutor:
    def test_two_pass_trial(self, tools, tmp_path, video):
        executor = AomencTrialExecutor(str(tmp_path))

        outcome = executor.run_trial(5000, ControlMode.BITRATE, GOOD_BASELINE, video)

        assert len(tools["commands"]) == 2
        assert tools["commands"][0].endswith("--pass=1")
        assert tools["commands"][1].endswith("--pass=2")
        assert outcome.quality == 96.5
        assert outcome.cpu_time_pass1 == 3.0
        assert outcome.cpu_time_pass2 == 3.0
        assert outcome.wall_time == 4.0
        assert outcome.output_size_bytes == 2048

    def test_realtime_trial_is_one_pass(self, tools, tmp_path, video):
        executor = AomencTrialExecutor(str(tmp_path))

        outcome = executor.run_trial(
            5000, ControlMode.BITRATE, SpeedLattice.fastest(), video
        )

        assert len(tools["commands"]) == 1
        assert outcome.cpu_time_pass2 == 0.0
        assert outcome.wall_time == 2.0

    def test_cleans_up_after_itself(self, tools, tmp_path, video):
        AomencTrialExecutor(str(tmp_path)).run_trial(
            30, ControlMode.QUANTIZER, GOOD_BASELINE, video
        )

        assert leftovers(tmp_path) == []

    def test_quality_is_clamped(self, tools, tmp_path, video):
        tools["quality"] = 100.4

        outcome = AomencTrialExecutor(str(tmp_path)).run_trial(
            5000, ControlMode.BITRATE, GOOD_BASELINE, video
        )

        assert outcome.quality == 100.0

    def test_encoder_failure(self, tools, tmp_path, video):
        tools["return_code"] = 1

        with pytest.raises(ExecutorFailure):
            AomencTrialExecutor(str(tmp_path)).run_trial(
                5000, ControlMode.BITRATE, GOOD_BASELINE, video
            )
        assert leftovers(tmp_path) == []

    def test_scorer_failure(self, tools, tmp_path, video):
        tools["vmaf_error"] = VmafException("vmaf crashed")

        with pytest.raises(ExecutorFailure) as e:
            AomencTrialExecutor(str(tmp_path)).run_trial(
                5000, ControlMode.BITRATE, GOOD_BASELINE, video
            )
        assert "vmaf crashed" in e.value.message
        assert leftovers(tmp_path) == []

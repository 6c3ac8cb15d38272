import pytest

import convergentEncode.core.ffmpeg as ffmpeg_module
from convergentEncode.core.ffmpeg import Ffmpeg, get_pix_fmt_for_depth
from convergentEncode.core.util.cli_executor import CliResult
from convergentEncode.core.util.path import PathConvergent


class TestTestResolution:
    def test_default_height_keeps_the_aspect_ratio(self):
        assert Ffmpeg.get_test_resolution(1920, 1080) == (1280, 720)

    def test_width_is_kept_even(self):
        assert Ffmpeg.get_test_resolution(1850, 1000, height=720) == (1332, 720)
        assert Ffmpeg.get_test_resolution(1001, 1000, height=720) == (720, 720)

    def test_zero_height_keeps_the_source(self):
        assert Ffmpeg.get_test_resolution(1920, 1080, height=0) == (1920, 1080)

    def test_explicit_size(self):
        assert Ffmpeg.get_test_resolution(1920, 1080, 640, 360) == (640, 360)


class TestPixFmt:
    def test_known_depths(self):
        assert get_pix_fmt_for_depth(8) == "yuv420p"
        assert get_pix_fmt_for_depth(10) == "yuv420p10le"

    def test_unknown_depth(self):
        with pytest.raises(ValueError):
            get_pix_fmt_for_depth(16)


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "input.mkv"
    path.write_bytes(b"\0" * 5000)
    return PathConvergent(str(path))


@pytest.fixture
def ffprobe(monkeypatch):
    """Answers ffprobe queries from a table keyed by the requested entry."""
    answers = {
        "format=duration": "12.5",
        "stream=width": "1920",
        "stream=height": "1080",
        "stream=pix_fmt": "yuv420p10le",
        "stream=avg_frame_rate": "24000/1001",
        "stream=nb_read_packets": "300",
    }
    commands = []

    def fake_run_cli(cmd):
        commands.append(cmd)
        for key, answer in answers.items():
            if key in cmd:
                return CliResult(0, answer)
        return CliResult(0, "")

    monkeypatch.setattr(ffmpeg_module, "run_cli", fake_run_cli)
    monkeypatch.setattr(ffmpeg_module, "get_binary", lambda name: name)
    return answers, commands


class TestProbe:
    def test_probe(self, source, ffprobe):
        video = Ffmpeg.probe(source)

        assert (video.width, video.height) == (1280, 720)
        assert (video.fps_num, video.fps_denom) == (24000, 1001)
        assert video.length == 12.5
        assert video.frames == int(12.5 * 24000 / 1001)
        assert video.depth == 10
        assert video.size_bytes == 5000

    def test_unknown_pix_fmt(self, source, ffprobe):
        ffprobe[0]["stream=pix_fmt"] = "yuv444p"
        with pytest.raises(ValueError):
            Ffmpeg.get_bit_depth(source)

    def test_duration_falls_back_to_frame_count(self, source, ffprobe):
        ffprobe[0]["format=duration"] = "N/A"
        assert Ffmpeg.get_video_length(source) == pytest.approx(300 / (24000 / 1001))

    def test_missing_file(self, tmp_path, ffprobe):
        with pytest.raises(FileNotFoundError):
            Ffmpeg.probe(PathConvergent(str(tmp_path / "nope.mkv")))


class TestPrepareSource:
    def test_converts_to_raw_in_the_temp_folder(
        self, source, ffprobe, tmp_path, monkeypatch
    ):
        temp = tmp_path / "work"

        def fake_run_cli(cmd):
            ffprobe[1].append(cmd)
            if "rawvideo" in cmd:
                (temp / "rawsource.yuv").write_bytes(b"\0" * 100)
                return CliResult(0, "")
            for key, answer in ffprobe[0].items():
                if key in cmd:
                    return CliResult(0, answer)
            return CliResult(0, "")

        monkeypatch.setattr(ffmpeg_module, "run_cli", fake_run_cli)
        video = Ffmpeg.probe(source)
        probed = len(ffprobe[1])
        assert Ffmpeg.prepare_source(source, video, str(temp)) is video

        assert video.raw_path == str(temp / "rawsource.yuv")
        # the source is not queried again, only converted
        assert len(ffprobe[1]) == probed + 1
        convert = ffprobe[1][-1]
        assert "-s 1280x720" in convert
        assert "-pix_fmt yuv420p10le" in convert
        assert convert.endswith(f'"{temp / "rawsource.yuv"}"')

    def test_failed_conversion(self, source, ffprobe, tmp_path, video):
        with pytest.raises(RuntimeError):
            Ffmpeg.convert_to_raw(source, str(tmp_path / "raw.yuv"), video)

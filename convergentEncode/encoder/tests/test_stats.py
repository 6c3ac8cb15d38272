import json

import pytest

from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.speed import FASTEST
from convergentEncode.encoder.stats import Phase, TrialRecord


def make_record(**overrides):
    kwargs = dict(
        phase=Phase.RATE_ESTIMATE,
        control_value=10000,
        control_mode=ControlMode.BITRATE,
        speed=FASTEST,
        quality=94.2,
        cpu_time_pass1=1.25,
        cpu_time_pass2=2.5,
        wall_time=2.0,
        output_size_bytes=123456,
    )
    kwargs.update(overrides)
    return TrialRecord(**kwargs)


class TestTrialRecord:
    def test_costs(self):
        record = make_record()
        assert record.net_cpu_time == 3.75
        assert record.cost(use_cpu_time=True) == 3.75
        assert record.cost(use_cpu_time=False) == 2.0

    def test_is_frozen(self):
        record = make_record()
        with pytest.raises(AttributeError):
            record.quality = 99.0
        assert record.quality == 94.2

    @pytest.mark.parametrize(
        "overrides",
        [
            {"quality": -0.1},
            {"quality": 100.5},
            {"cpu_time_pass1": -1.0},
            {"wall_time": -0.5},
            {"output_size_bytes": -1},
        ],
    )
    def test_rejects_impossible_measurements(self, overrides):
        with pytest.raises(ValueError):
            make_record(**overrides)

    def test_dict_is_json_ready(self):
        saved = json.loads(json.dumps(make_record().dict()))

        assert saved["phase"] == "RATE_ESTIMATE"
        assert saved["control_mode"] == "BITRATE"
        assert saved["net_cpu_time"] == 3.75
        assert saved["speed"]["deadline"] == "REALTIME"

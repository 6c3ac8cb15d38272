import csv
import os
from abc import ABC, abstractmethod

from tqdm import tqdm

from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.encoder.stats import TrialRecord


def header(mode: ControlMode) -> list:
    return [
        "Phase",
        mode.column_name(),
        "Quality",
        "Pass1CTime",
        "Pass2CTime",
        "NetCTime",
        "NetRT",
        "Speed",
        "Tune",
        "FwdKF",
        "RTDeadline",
        "Size",
    ]


def row(record: TrialRecord) -> list:
    return [
        record.phase.value,
        record.control_value,
        record.quality,
        record.cpu_time_pass1,
        record.cpu_time_pass2,
        record.net_cpu_time,
        record.wall_time,
        record.speed.cpu_level,
        str(record.speed.tuning),
        int(record.speed.forward_keyframes),
        int(record.speed.is_realtime()),
        record.output_size_bytes,
    ]


class ResultSink(ABC):
    """
    Receives every finished trial, in the order they ran
    """

    @abstractmethod
    def on_trial(self, record: TrialRecord):
        pass

    def close(self):
        pass


class CsvResultSink(ResultSink):
    def __init__(self, path: str, mode: ControlMode, overwrite: bool = False):
        if os.path.exists(path) and not overwrite:
            raise FileExistsError(f"Output file {path} already exists")
        self.path = path
        self._file = open(path, "w", newline="")
        self._writer = csv.writer(self._file)
        self._writer.writerow(header(mode))
        self._file.flush()

    def on_trial(self, record: TrialRecord):
        self._writer.writerow(row(record))
        self._file.flush()

    def close(self):
        if not self._file.closed:
            self._file.close()


class ConsoleResultSink(ResultSink):
    def __init__(self, mode: ControlMode):
        self.mode = mode

    def on_trial(self, record: TrialRecord):
        tqdm.write("Results for run are:")
        tqdm.write(", ".join(header(self.mode)))
        tqdm.write(", ".join(str(v) for v in row(record)))


class MemorySink(ResultSink):
    def __init__(self):
        self.records = []

    def on_trial(self, record: TrialRecord):
        self.records.append(record)

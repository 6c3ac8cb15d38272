import os
import re
import subprocess
import time
from typing import List

import psutil

__all__ = ["run_cli", "CliResult", "children_cpu_time"]


def children_cpu_time() -> float:
    """
    CPU seconds (user + system) spent by child processes that have been waited for,
    the same numbers the kernel keeps as cutime/cstime
    """
    times = psutil.Process().cpu_times()
    return times.children_user + times.children_system


class CliResult:
    def __init__(self, return_code, output, time_taken=-1.0, cpu_time=-1.0):
        self.return_code = return_code
        self.output = output
        self.time_taken = time_taken
        self.cpu_time = cpu_time

    def __repr__(self):
        return (
            f"CliResult(return_code={self.return_code}, time_taken={self.time_taken},"
            f" cpu_time={self.cpu_time}, output={self.output})"
        )

    def __str__(self):
        return self.output

    def success(self) -> bool:
        return self.return_code == 0

    def get_output(self) -> str:
        return self.output

    def strip_mp4_warning(self):
        """
        sometimes when using ffprobe on mp4 files,
        [movmp4m4a3gp3g2mj2 @ 0x5579bcaa2fc0] Referenced QT chapter track not found\n
        appears in the output, this function removes it
        :return: self
        """
        self.output = re.sub(r"\[mov.+not found", "", self.output).strip()
        return self

    def verify(
        self,
        fail_message: str = "Cli failed",
        bad_output_hints: List[str] = None,
        files: List[str] = None,
    ):
        """
        :param fail_message: message to raise if the cli failed
        :param bad_output_hints: list of strings that,
        when found in the output, will cause the verification to fail
        :param files: a list of files that must exist and bigger than zero bytes
        :return: self for pipelining
        """
        if not self.success():
            raise RuntimeError(fail_message)
        if bad_output_hints:
            for hint in bad_output_hints:
                if hint in self.output and hint != "":
                    raise RuntimeError(fail_message)
                if hint == self.output:
                    raise RuntimeError(fail_message)
        if files:
            for file in files:
                if not os.path.exists(file) or os.path.getsize(file) == 0:
                    raise RuntimeError(fail_message)
        return self

    def get_as_int(self) -> int:
        return int(self.output.strip())


def run_cli(cmd) -> CliResult:
    """
    Runs a shell command to completion, capturing its output together with
    wall-clock time and the CPU time its process tree used
    """
    cpu_start = children_cpu_time()
    start = time.perf_counter()
    p = subprocess.Popen(
        cmd,
        shell=True,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )

    # communicate reaps the child, so its cpu time is in the children counters afterwards
    stdout, _ = p.communicate()
    output = stdout.decode(errors="ignore")

    end = time.perf_counter()
    return CliResult(
        p.returncode, output, end - start, children_cpu_time() - cpu_start
    )

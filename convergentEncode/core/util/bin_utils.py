"""
Provides a central place to get the path to the binaries, and checks if they exist.
"""

import os
from shutil import which
from typing import List

__all__ = ["get_binary", "check_bin", "check_bins", "BinaryNotFound"]


def check_bin(path) -> bool:
    if path is None:
        return False
    if which(path) is not None:
        return True
    return os.path.exists(path)


class BinaryNotFound(Exception):
    def __init__(self, name):
        self.name = name

    def __str__(self):
        return (
            f"Binary {self.name} not found,"
            f" set the {self.name.upper()}_CLI_PATH environment variable to the path of the binary."
        )


def get_binary(name):
    _bin = os.getenv(f"{name.upper()}_CLI_PATH", name)
    if check_bin(_bin):
        return _bin
    else:
        raise BinaryNotFound(name)


def check_bins(names: List[str]) -> List[str]:
    """
    :return: the names from `names` that could not be resolved
    """
    missing = []
    for name in names:
        try:
            get_binary(name)
        except BinaryNotFound:
            missing.append(name)
    return missing

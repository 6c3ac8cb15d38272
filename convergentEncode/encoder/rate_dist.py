from enum import Enum


class ControlMode(Enum):
    BITRATE: int = 0  # vbr, control value is the target bitrate in kbps
    QUANTIZER: int = 1  # constant quality, control value is the cq level

    def __str__(self):
        return self.name

    def column_name(self) -> str:
        return "Bitrate" if self == ControlMode.BITRATE else "Qfac"


QUANTIZER_MIN = 0
QUANTIZER_MAX = 68

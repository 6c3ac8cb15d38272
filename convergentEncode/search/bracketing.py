"""
Picks the next control value to try from the trials a phase already ran.

The observations are split by which side of the target they landed on. While
everything is on one side the value is pushed by a fixed factor (bitrate) or
step (quantizer) from the most recent try, once the target is bracketed the
two observations closest to the target are averaged.
"""

from typing import List, Sequence, Tuple

from convergentEncode.encoder.rate_dist import (
    ControlMode,
    QUANTIZER_MIN,
    QUANTIZER_MAX,
)
from convergentEncode.encoder.stats import Phase, TrialRecord

QUANTIZER_STEP = 8


def closest_two(qualities: Sequence[float], target: float) -> Tuple[int, int]:
    """
    Indexes of the two qualities closest to `target`, ties go to the earlier one.
    The second index is -1 when there is only one quality.
    """
    close1_index, close2_index = -1, -1
    close1, close2 = float("inf"), float("inf")
    for i, quality in enumerate(qualities):
        diff = abs(quality - target)
        if diff < close1:
            close2, close2_index = close1, close1_index
            close1, close1_index = diff, i
        elif diff < close2:
            close2, close2_index = diff, i
    return close1_index, close2_index


def propose_next(
    observations: List[Tuple[float, float]],
    target: float,
    default: float,
    mode: ControlMode = ControlMode.BITRATE,
) -> float:
    """
    :param observations: (control value, quality) pairs of one phase in the order they ran
    :param target: quality to aim at
    :param default: value returned when nothing has run yet
    :param mode: bitrate doubles/halves, quantizer steps by 8 within 0-68
    :return: the next control value to try
    """
    if len(observations) == 0:
        return default

    values = [o[0] for o in observations]
    qualities = [o[1] for o in observations]

    all_below = all(q < target for q in qualities)
    all_above = all(q >= target for q in qualities)
    last = values[-1]

    if all_below:
        if mode == ControlMode.BITRATE:
            return last * 2.0
        return max(QUANTIZER_MIN, int(last - QUANTIZER_STEP))
    elif all_above:
        if mode == ControlMode.BITRATE:
            return last * 0.5
        return min(QUANTIZER_MAX, int(last + QUANTIZER_STEP))

    # bracketed, so at least one observation on each side and both indexes are valid
    close1_index, close2_index = closest_two(qualities, target)
    middle = (values[close1_index] + values[close2_index]) / 2.0
    if mode == ControlMode.QUANTIZER:
        return int(middle)
    return middle


def propose_for_phase(
    records: List[TrialRecord],
    phase: Phase,
    target: float,
    default: float,
    mode: ControlMode,
) -> float:
    """
    Same as propose_next but takes trial records, anything from another phase is ignored
    """
    observations = [(r.control_value, r.quality) for r in records if r.phase == phase]
    return propose_next(observations, target, default, mode)


"""
Ranks the speed search trials when the user gave a time/size trade-off instead of a throughput target.

The value gain comes from the first speed trial against the source size, so it is shared by
every trial and the ranking falls to the cost relative to that first trial.
"""

import math
from typing import List, Optional

from convergentEncode.encoder.speed import SpeedDescriptor
from convergentEncode.encoder.stats import Phase, TrialRecord

MIN_COST = 1e-6


def value_gain(baseline: TrialRecord, reference_size: float, cost_ratio: float) -> float:
    return (max(baseline.output_size_bytes, 1) / max(reference_size, 1)) ** math.log2(
        cost_ratio
    )


def fitness(
    record: TrialRecord,
    baseline: TrialRecord,
    reference_size: float,
    cost_ratio: float,
    use_cpu_time: bool = True,
) -> float:
    """
    :param record: the trial to score
    :param baseline: the first speed search trial, costs are relative to it
    :param reference_size: size of the untouched source in bytes
    :param cost_ratio: time worth spending to halve the size
    :param use_cpu_time: cpu time or wall time as the cost
    """
    # clock resolution can report 0s for tiny clips
    raw_cost = max(record.cost(use_cpu_time), MIN_COST) / max(
        baseline.cost(use_cpu_time), MIN_COST
    )
    return value_gain(baseline, reference_size, cost_ratio) / raw_cost


def pick_fittest(
    records: List[TrialRecord],
    reference_size: float,
    cost_ratio: float,
    use_cpu_time: bool = True,
) -> Optional[TrialRecord]:
    """
    Best speed search trial by fitness, the first one wins a tie.
    Returns None when there are no speed search trials.
    """
    speed_trials = [r for r in records if r.phase == Phase.SPEED_SEARCH]
    if len(speed_trials) == 0:
        return None

    baseline = speed_trials[0]
    fittest = None
    fitness_max = -math.inf
    for record in speed_trials:
        score = fitness(record, baseline, reference_size, cost_ratio, use_cpu_time)
        if score > fitness_max:
            fitness_max = score
            fittest = record
    return fittest


def pick_optimal_speed(
    records: List[TrialRecord],
    reference_size: float,
    cost_ratio: float,
    use_cpu_time: bool = True,
) -> Optional[SpeedDescriptor]:
    fittest = pick_fittest(records, reference_size, cost_ratio, use_cpu_time)
    return fittest.speed if fittest is not None else None

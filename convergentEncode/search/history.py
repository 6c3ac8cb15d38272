from typing import List

from convergentEncode.encoder.stats import Phase, TrialRecord


class TrialHistory:
    """
    Append-only list of completed trials, owned by the PhaseController
    """

    def __init__(self):
        self._records: List[TrialRecord] = []

    def append(self, record: TrialRecord):
        self._records.append(record)

    def for_phase(self, phase: Phase) -> List[TrialRecord]:
        return [r for r in self._records if r.phase == phase]

    def all(self) -> List[TrialRecord]:
        return list(self._records)

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

"""
The speed side of an aomenc run: cpu-used, deadline, tuning and forward keyframes,
plus the walk that visits them from the fastest setting to the slowest one.
"""

from enum import Enum

CPU_LEVEL_MAX = 31


class DeadlineMode(Enum):
    GOOD: int = 0
    REALTIME: int = 1

    def __str__(self):
        return self.name

    def get_flag(self) -> str:
        return "--rt" if self == DeadlineMode.REALTIME else "--good"


class Tuning(Enum):
    # declaration order is the order the lattice visits them in reverse,
    # psnr is the cheapest, vmaf with preprocessing the most thorough
    VMAF_WITH_PREPROCESSING: int = 0
    VMAF_WITHOUT_PREPROCESSING: int = 1
    SSIM: int = 2
    PSNR: int = 3

    def __str__(self):
        return self.name.lower()

    def slower(self) -> "Tuning":
        if self == Tuning.VMAF_WITH_PREPROCESSING:
            return self
        return Tuning(self.value - 1)


class SpeedDescriptor:
    """
    One point of the speed lattice. Treated as a value: transitions build a new one.
    """

    def __init__(
        self,
        cpu_level: int,
        deadline: DeadlineMode = DeadlineMode.GOOD,
        tuning: Tuning = Tuning.PSNR,
        forward_keyframes: bool = False,
    ):
        if not 0 <= cpu_level <= CPU_LEVEL_MAX:
            raise ValueError(f"cpu level {cpu_level} outside 0-{CPU_LEVEL_MAX}")
        self.cpu_level = cpu_level
        self.deadline = deadline
        self.tuning = tuning
        self.forward_keyframes = forward_keyframes

    def __eq__(self, other):
        if not isinstance(other, SpeedDescriptor):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def __repr__(self):
        return (
            f"SpeedDescriptor(cpu_level={self.cpu_level}, deadline={self.deadline},"
            f" tuning={self.tuning}, forward_keyframes={self.forward_keyframes})"
        )

    def key(self) -> tuple:
        return self.cpu_level, self.deadline, self.tuning, self.forward_keyframes

    def is_realtime(self) -> bool:
        return self.deadline == DeadlineMode.REALTIME

    def dict(self) -> dict:
        return {
            "cpu_level": self.cpu_level,
            "deadline": str(self.deadline),
            "tuning": str(self.tuning),
            "forward_keyframes": self.forward_keyframes,
        }

    def explain(self) -> str:
        e = f"Using '{self.deadline.name.lower()}' deadline"
        e += f"\nUsing {self.tuning} tuning"
        if self.forward_keyframes:
            e += "\nUsing forward keyframes"
        else:
            e += "\nNot using forward keyframes"
        e += f"\nUsing cpu speed: {self.cpu_level}"
        return e


# rt, cpu-used 8, psnr, no forward keyframes
FASTEST = SpeedDescriptor(8, DeadlineMode.REALTIME, Tuning.PSNR, False)

# first point after leaving realtime
GOOD_BASELINE = SpeedDescriptor(5, DeadlineMode.GOOD, Tuning.PSNR, False)

# cpu-used 0 with everything on, also marks the end of the walk
TERMINAL = SpeedDescriptor(0, DeadlineMode.GOOD, Tuning.VMAF_WITH_PREPROCESSING, True)

# how far cpu-used jumps back up when a new tuning / keyframe tier starts
TIER_CPU_RESET = 4


class SpeedLattice:
    """
    Deterministic walk from the fastest speed point to the slowest one.
    cpu-used goes down first, then the realtime deadline is dropped in one step,
    the keyframe and tuning axes are only visited when their test flags are on.
    """

    def __init__(self, test_alt_tunings: bool = False, test_fwd_keyframes: bool = False):
        self.test_alt_tunings = test_alt_tunings
        self.test_fwd_keyframes = test_fwd_keyframes

    @staticmethod
    def fastest() -> SpeedDescriptor:
        return FASTEST

    @staticmethod
    def terminal() -> SpeedDescriptor:
        return TERMINAL

    @staticmethod
    def is_terminal(point: SpeedDescriptor) -> bool:
        return point == TERMINAL

    def next(self, point: SpeedDescriptor) -> SpeedDescriptor:
        if point.cpu_level > 1:
            return SpeedDescriptor(
                point.cpu_level - 1,
                point.deadline,
                point.tuning,
                point.forward_keyframes,
            )

        if point.is_realtime():
            return GOOD_BASELINE

        if self.test_fwd_keyframes and not point.forward_keyframes:
            return SpeedDescriptor(
                point.cpu_level + TIER_CPU_RESET,
                point.deadline,
                point.tuning,
                True,
            )
        elif (
            self.test_alt_tunings
            and point.tuning != Tuning.VMAF_WITH_PREPROCESSING
        ):
            # when the keyframe axis is tested every tuning tier starts without them again
            return SpeedDescriptor(
                point.cpu_level + TIER_CPU_RESET,
                point.deadline,
                point.tuning.slower(),
                False if self.test_fwd_keyframes else point.forward_keyframes,
            )

        return TERMINAL

    def walk(self, start: SpeedDescriptor = None):
        """
        Yields every point from `start` (default: the fastest one) up to and including the terminal one
        """
        point = start or self.fastest()
        while True:
            yield point
            if self.is_terminal(point):
                return
            point = self.next(point)

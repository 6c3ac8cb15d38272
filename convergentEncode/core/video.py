class VideoParams:
    """
    Static facts about the source that trials need, probed once before the search
    """

    def __init__(
        self,
        width: int = 1,
        height: int = 1,
        fps_num: int = 1,
        fps_denom: int = 1,
        length: float = 0.001,
        frames: int = 1,
        size_bytes: int = 4096,
        depth: int = 8,
        raw_path: str = "",
    ):
        self.width = width  # test resolution, not necessarily the source one
        self.height = height
        self.fps_num = fps_num
        self.fps_denom = fps_denom
        self.length = length  # seconds
        self.frames = frames
        self.size_bytes = size_bytes  # size of the original (compressed) source
        self.depth = depth
        self.raw_path = raw_path  # raw yuv copy of the source at test resolution

    @property
    def fps(self) -> float:
        return self.fps_num / self.fps_denom

    def keyframe_distance(self, seconds: float = 10.0) -> int:
        return int(self.frames / self.length * seconds)

    def uncompressed_size(self, bits: int = 8) -> float:
        bytes_per_sample = 1 if bits <= 8 else 2
        return self.frames * self.width * self.height * 1.5 * bytes_per_sample

    def dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "fps_num": self.fps_num,
            "fps_denom": self.fps_denom,
            "length": self.length,
            "frames": self.frames,
            "size_bytes": self.size_bytes,
            "depth": self.depth,
            "raw_path": self.raw_path,
        }

    def __repr__(self):
        return f"VideoParams({self.dict()})"

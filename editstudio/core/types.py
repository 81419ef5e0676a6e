from typing import TypeAlias, Tuple
import numpy as np
import numpy.typing as npt
from dataclasses import dataclass


# Image Types
# Floating point image 0.0 - 1.0 (Height, Width, Channels)
ImageBuffer: TypeAlias = npt.NDArray[np.float32]

# Geometry Types
# (x, y) in canvas pixels
Point: TypeAlias = Tuple[float, float]
# (x, y, width, height)
Rect: TypeAlias = Tuple[int, int, int, int]
# (Width, Height)
Dimensions: TypeAlias = Tuple[int, int]
# Normalized RGB triple 0.0 - 1.0
RGB: TypeAlias = Tuple[float, float, float]


@dataclass
class AppConfig:
    cache_dir: str
    default_export_dir: str
    model_id: str
    perf_log_enabled: bool = False

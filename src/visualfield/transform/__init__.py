from .orientation_model import OrientationModel as OrientationModel
from .smoothing import SmoothingFilter as SmoothingFilter, smooth as smooth
from .vector_math import (
    cross as cross,
    dot as dot,
    magnitude as magnitude,
    normalize as normalize,
    rotate as rotate,
    rotation_between as rotation_between,
)

"""
celestjax converts celestial coordinates between the ICRS, CIRS, galactic and observed frames using ERFA and JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    AS2RAD,
    RAD2AS,
    HOUR2RAD,
    RAD2HOUR,
    JD_MJD_OFFSET,
    JD2000,
    MJD2000,
    SECONDS_PER_DAY,
    REFRACTION_HORIZON_MARGIN,
)

from .config import set_dtype, get_dtype, CorrectionsConfig

from .exceptions import (
    CelestError,
    OutOfRangeError,
    InvalidTableError,
    UnsupportedTransformError,
    InvalidObserverStateError,
    AngleFormatError,
)

from .angle import Angle
from .timevalue import SiderealKind, TimeValue

from .eop import (
    EarthOrientationRecord,
    EarthOrientationTable,
    EOPExtrapolation,
    TableCoverage,
    load_cached_table,
    load_table_from_config,
    load_table_from_file,
    static_table,
    zero_table,
)

from .observer import ObserverState, ObservingConditions
from .coordinates import Frame, SkyPosition
from .transform import FrameTransformEngine, TransformResult, convert
from .clock import RestartPolicy, RunningClock
from .observation import Observation

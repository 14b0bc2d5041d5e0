"""
Camera constants. No YAML loading here (see trackcam.config).
Env names, numeric tolerances, default viewport and queue size.
"""
import math

# ---------------------------------------------------------------------------
# Env var names
# ---------------------------------------------------------------------------
ENV_CONFIG = "TRACKCAM_CONFIG"
ENV_LOG_LEVEL = "TRACKCAM_LOG_LEVEL"
ENV_LOG_DIR = "TRACKCAM_LOG_DIR"

# ---------------------------------------------------------------------------
# Numerics
# ---------------------------------------------------------------------------
EPSILON = 1e-12
# exp() argument bound for zoom; beyond this the scale saturates to 0 / inf
MAX_ZOOM_EXPONENT = 700.0

# ---------------------------------------------------------------------------
# Defaults (kept in sync with trackcam/config/default.yaml)
# ---------------------------------------------------------------------------
DEFAULT_VIEWPORT = (800, 600)
DEFAULT_FOV = math.pi / 4
DEFAULT_FOV_BOUNDS = (math.radians(5.0), math.radians(120.0))
DEFAULT_DISTANCE_BOUNDS = (1e-2, 1e6)
DEFAULT_CLIP_FACTORS = (1e-2, 1e3)
DEFAULT_QUEUE_SIZE = 256

# Qt reports wheel rotation in eighths of a degree; one notch = 120
WHEEL_NOTCH = 120.0

"""Named physical constants and default thresholds."""

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0

KMH_TO_M_PER_S = 1000.0 / 3600.0

# Speed zone edges (km/h); lower edge exclusive, upper edge inclusive.
WALKING_MAX_KMH = 7.0
JOGGING_MAX_KMH = 14.0
HIGH_INTENSITY_THRESHOLD_KMH = 19.8
SPRINT_THRESHOLD_KMH = 24.0

ACCELERATION_THRESHOLD_MS2 = 3.0
JUMP_VERTICAL_ACCEL_MS2 = 15.0
PLAYER_LOAD_SCALE = 100.0

INTENSITY_SPEED_DIVISOR = 30.0
INTENSITY_ACCEL_DIVISOR = 5.0
INTENSITY_CAP = 10.0

# Fatigue / tactical effort thresholds.
HIGH_INTENSITY_EFFORT_KMH = 20.0
TRANSITION_SPEED_KMH = 15.0
ASSUMED_MAX_HR_BPM = 190
HIGH_HR_ZONE_FRACTION = 0.85

# Placeholder field calibration: degrees * scale -> 0-100 field units.
FIELD_COORDINATE_SCALE = 100000.0
FIELD_ZONE_WIDTH = 33.33
FIELD_GRID_SIZE = 3

MIN_FORMATION_PLAYERS = 7

REALTIME_WINDOW_S = 300.0
INJURY_HISTORY_DAYS = 30
PERFORMANCE_HISTORY_DAYS = 14

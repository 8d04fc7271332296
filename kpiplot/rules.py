"""
Fixed rendering rules.

Every tunable of the pipeline lives here so output stays deterministic
for a given input.
"""

# --- Input ---
DELIMITERS = [",", ";", "\t", "|"]
DEFAULT_DELIMITER = ","
# Exports split on these use a comma as the decimal mark ("1,5")
DECIMAL_COMMA_DELIMITERS = (";",)
PREAMBLE_MARKER = "experience id"
BENCHMARK_WORD = "benchmark"

# First entry is the canonical export format; the second is the platform's
# timestamp form, truncated to its calendar day.
DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ")

# --- Output ---
MEDIA_TYPES = {
    "png": "image/png",
    "svg": "image/svg+xml",
}
RASTER_DPI = 100
VECTOR_DPI = 72  # 1 SVG user unit == 1 canvas unit
SVG_HASH_SALT = "kpiplot"

# --- Layout (device-independent units) ---
CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 800
MARGIN_LEFT = 100
MARGIN_RIGHT = 40
MARGIN_TOP = 110
MARGIN_BOTTOM = 80

TITLE_SIZE = 32
SUBTITLE_SIZE = 18
TICK_LABEL_SIZE = 12
CAPTION_SIZE = 14
TICK_LENGTH = 6

FONT_FAMILY = "DejaVu Sans"
BACKGROUND = "#ffffff"
FOREGROUND = "#000000"
SUBTITLE_COLOR = "#808080"
GRID_COLOR = "#e0e0e0"
RAW_COLOR = "#add8e6"  # light blue
NORMALIZED_COLOR = "#ffa500"  # orange
SERIES_WIDTH = 2.0

# --- Scales ---
Y_PADDING = 0.10
CONSTANT_SPAN_FRACTION = 0.05
CONSTANT_SPAN_MIN = 1.0
MAX_Y_TICKS = 10
MAX_X_TICKS = 12

# (unit, step) candidates, tried smallest first
X_TICK_INTERVALS = [
    ("day", 1),
    ("day", 2),
    ("week", 1),
    ("week", 2),
    ("month", 1),
    ("month", 2),
    ("month", 3),
    ("month", 6),
    ("year", 1),
    ("year", 2),
    ("year", 5),
    ("year", 10),
]
X_LABEL_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-%m-%d",
    "month": "%b %Y",
    "year": "%Y",
}

"""Protocol constants shared by the identity scheme, layout math and heuristics."""

from __future__ import annotations

# Composite identity: "<appName>-<title>" or "<appName>-window-<index>".
ID_SEPARATOR = "-"
SYNTHETIC_TITLE_PREFIX = "window-"
UNTITLED_WINDOW = "Untitled"

# Enumeration defaults for windows whose geometry cannot be read.
DEFAULT_WINDOW_EXTENT = 100

# Height of the macOS menu bar, subtracted from the usable display area.
MENU_BAR_INSET = 23

# Arrangement geometry.
CASCADE_ORIGIN = 50
CASCADE_STEP = 30
CASCADE_SCALE = 0.6
CENTER_SCALE = 0.8

# "Looks maximized" heuristic, relative to the containing display.
MAXIMIZED_WIDTH_RATIO = 0.95
MAXIMIZED_HEIGHT_RATIO = 0.90
# Restore treats a window as maximized from 1900x1000 on a 1920x1080 display.
RESTORE_WIDTH_RATIO = 1900 / 1920
RESTORE_HEIGHT_RATIO = 1000 / 1080
REFERENCE_WIDTH = 1920
REFERENCE_HEIGHT = 1080

# Default geometry applied when restoring a window that looks maximized.
RESTORE_ORIGIN = 100
RESTORE_WIDTH = 1200
RESTORE_HEIGHT = 800

# Synthetic display returned when the display service fails.
FALLBACK_DISPLAY_ID = "display-0"
FALLBACK_DISPLAY_WIDTH = 1920
FALLBACK_DISPLAY_HEIGHT = 1080

# Accessibility subroles of the standard window controls.
MINIMIZE_BUTTON = "AXMinimizeButton"
ZOOM_BUTTON = "AXZoomButton"
CLOSE_BUTTON = "AXCloseButton"

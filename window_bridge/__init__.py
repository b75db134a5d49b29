"""Window Bridge — window discovery and layout actions over the accessibility bridge.

Enumerates on-screen windows, addresses them by a composite
``"<app>-<title>"`` identity and applies structural commands (move, resize,
minimize, maximize, restore, focus, close, arrange) through the macOS System
Events automation interface.

Layers (bottom to top):
    1. Protocol   — wire models and constants
    2. Bridge     — accessibility primitives (JXA over osascript)
    3. Core       — identity codec, enumerators, locator, arrangement engine,
                    action executor
    4. Facade     — WindowManager and the ``window-bridge`` CLI
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"

from window_bridge.protocol.models import WindowAction, WindowInfo, WindowState

__all__ = [
    "__version__",
    "WindowAction",
    "WindowInfo",
    "WindowState",
]

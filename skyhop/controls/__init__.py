"""Control input module with swappable key maps."""

from .inputs import BROWSER_KEYMAP, MPL_KEYMAP, Control, ControlSnapshot, InputState

__all__ = ["BROWSER_KEYMAP", "MPL_KEYMAP", "Control", "ControlSnapshot", "InputState"]

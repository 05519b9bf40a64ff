"""Held-control state fed by keyboard collaborators."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable
import threading


class Control(Enum):
    """Logical controls the flight core understands."""

    PITCH_FORWARD = auto()
    PITCH_BACK = auto()
    ROLL_LEFT = auto()
    ROLL_RIGHT = auto()
    YAW_LEFT = auto()
    YAW_RIGHT = auto()
    THROTTLE_UP = auto()
    THROTTLE_DOWN = auto()
    RESET = auto()


# Browser KeyboardEvent.code values
BROWSER_KEYMAP: dict[str, Control] = {
    "KeyW": Control.PITCH_FORWARD,
    "KeyS": Control.PITCH_BACK,
    "KeyA": Control.ROLL_LEFT,
    "KeyD": Control.ROLL_RIGHT,
    "ArrowLeft": Control.YAW_LEFT,
    "ArrowRight": Control.YAW_RIGHT,
    "ArrowUp": Control.THROTTLE_UP,
    "ArrowDown": Control.THROTTLE_DOWN,
    "KeyR": Control.RESET,
}

# Matplotlib key_press_event names
MPL_KEYMAP: dict[str, Control] = {
    "w": Control.PITCH_FORWARD,
    "s": Control.PITCH_BACK,
    "a": Control.ROLL_LEFT,
    "d": Control.ROLL_RIGHT,
    "left": Control.YAW_LEFT,
    "right": Control.YAW_RIGHT,
    "up": Control.THROTTLE_UP,
    "down": Control.THROTTLE_DOWN,
    "r": Control.RESET,
}


@dataclass(frozen=True)
class ControlSnapshot:
    """Immutable view of which controls were held for one tick."""

    held: frozenset[Control] = frozenset()

    @classmethod
    def of(cls, *controls: Control) -> "ControlSnapshot":
        """Build a snapshot with the given controls held."""
        return cls(frozenset(controls))

    def is_held(self, control: Control) -> bool:
        return control in self.held

    def axis(self, negative: Control, positive: Control) -> int:
        """Return -1, 0 or +1; opposite holds cancel to 0."""
        return int(positive in self.held) - int(negative in self.held)

    def names(self) -> list[str]:
        """Sorted control names, for logging."""
        return sorted(c.name for c in self.held)


class InputState:
    """
    Thread-safe map of control -> held flag.

    Key-event callbacks write into it from any thread; the simulation
    reads it once per tick through snapshot().
    """

    def __init__(self, keymap: dict[str, Control] | None = None):
        self.keymap = keymap if keymap is not None else BROWSER_KEYMAP
        self._held: dict[Control, bool] = {control: False for control in Control}
        self._lock = threading.Lock()

    def set(self, control: Control | str, held: bool) -> None:
        """Set a control by enum or by name."""
        if isinstance(control, str):
            control = Control[control]
        with self._lock:
            self._held[control] = bool(held)

    def key_down(self, code: str) -> None:
        """Handle a key press; unmapped keys are ignored."""
        control = self.keymap.get(code)
        if control is not None:
            self.set(control, True)

    def key_up(self, code: str) -> None:
        """Handle a key release; unmapped keys are ignored."""
        control = self.keymap.get(code)
        if control is not None:
            self.set(control, False)

    def apply(self, held: Iterable[Control]) -> None:
        """Replace the whole held set at once."""
        held = set(held)
        with self._lock:
            for control in Control:
                self._held[control] = control in held

    def release_all(self) -> None:
        self.apply(())

    def snapshot(self) -> ControlSnapshot:
        """Copy the current held set for one tick's computation."""
        with self._lock:
            return ControlSnapshot(frozenset(c for c, held in self._held.items() if held))

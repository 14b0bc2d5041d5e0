"""
Input mapper: raw device events -> abstract trackball operations.

Default bindings:

    Mouse / Keyboard            Operation
    --------------------------  --------------------------------------------
    Left button + drag          Orbit around the target (look around in
                                first-person mode).
    Right button + drag         Slide eye and target on the focus plane.
    Scroll                      Zoom: distance in orbit mode, field of view
                                in first-person mode.
    Return                      Reset to the reset frame.
    F                           Toggle first-person mode.
    O                           Toggle orthographic / perspective projection.
"""
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from .events import (
    BeginPan,
    BeginRotate,
    ButtonChanged,
    ContinueDrag,
    DragKind,
    EndDrag,
    KeyChanged,
    Modifiers,
    MouseButton,
    Operation,
    PointerMoved,
    Reset,
    Resize,
    Resized,
    Scrolled,
    ToggleFirstPerson,
    ToggleProjection,
    Zoom,
)
from .exceptions import ConfigError, ValidationError


_KEY_FIELDS = ("reset_key", "toggle_first_person_key", "toggle_projection_key")


@dataclass(frozen=True)
class InputConfig:
    """
    Embedder-supplied bindings and sensitivities.

    rotate_button / pan_button: button starting a rotate / pan drag; None disables.
    rotate_modifiers / pan_modifiers: None accepts any modifiers; otherwise the
        exact set must be held (Modifiers.NONE = no modifier pressed).
    zoom_scroll: scroll wheel zooms.
    reset_key, toggle_first_person_key, toggle_projection_key: key names
        triggering the operation on press; None disables.
    rotation_sensitivity: radians of rotation per trackball radius dragged.
    zoom_sensitivity: zoom exponent per scroll notch.
    """

    rotate_button: Optional[MouseButton] = MouseButton.LEFT
    rotate_modifiers: Optional[Modifiers] = None
    pan_button: Optional[MouseButton] = MouseButton.RIGHT
    pan_modifiers: Optional[Modifiers] = None
    zoom_scroll: bool = True
    reset_key: Optional[str] = "Return"
    toggle_first_person_key: Optional[str] = "F"
    toggle_projection_key: Optional[str] = "O"
    rotation_sensitivity: float = 1.0
    zoom_sensitivity: float = 0.1

    def __post_init__(self) -> None:
        for name in ("rotation_sensitivity", "zoom_sensitivity"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be a finite number > 0, got {value!r}")
        if (
            self.rotate_button is not None
            and self.rotate_button == self.pan_button
            and _modifiers_overlap(self.rotate_modifiers, self.pan_modifiers)
        ):
            raise ConfigError(
                f"rotate and pan are both bound to {self.rotate_button.value} "
                "with overlapping modifiers"
            )
        for name in _KEY_FIELDS:
            object.__setattr__(self, name, normalize_key(getattr(self, name)))
        keys = [k for k in (self.reset_key, self.toggle_first_person_key, self.toggle_projection_key) if k]
        if len(set(keys)) != len(keys):
            raise ConfigError(f"key bindings collide: {keys}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "InputConfig":
        """Build from the YAML ``input`` section. Missing keys keep their defaults."""
        data = dict(data or {})
        kwargs: dict[str, Any] = {}
        try:
            for name in ("rotate_button", "pan_button"):
                if name in data:
                    kwargs[name] = MouseButton.parse(data[name])
            for name in ("rotate_modifiers", "pan_modifiers"):
                if name in data:
                    kwargs[name] = None if data[name] is None else Modifiers.parse(data[name])
        except ValidationError as e:
            raise ConfigError(str(e)) from e
        for name in _KEY_FIELDS:
            if name in data:
                kwargs[name] = None if data[name] is None else str(data[name])
        if "zoom_scroll" in data:
            kwargs["zoom_scroll"] = bool(data["zoom_scroll"])
        for name in ("rotation_sensitivity", "zoom_sensitivity"):
            if name in data:
                try:
                    kwargs[name] = float(data[name])
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"{name} must be a number, got {data[name]!r}") from e
        return cls(**kwargs)


def normalize_key(name: Optional[str]) -> Optional[str]:
    """Canonical key name: single letters upper-case ('f' -> 'F'), others trimmed."""
    if name is None:
        return None
    name = str(name).strip()
    return name.upper() if len(name) == 1 else name


def _modifiers_overlap(a: Optional[Modifiers], b: Optional[Modifiers]) -> bool:
    return a is None or b is None or a == b


class InputMapper:
    """
    Stateless per-event classification using an immutable mapping table.
    Unmapped combinations yield None and are ignored.
    """

    def __init__(self, config: InputConfig | None = None) -> None:
        self.config = config or InputConfig()
        self._buttons = MappingProxyType(self._build_button_table(self.config))
        self._keys = MappingProxyType(self._build_key_table(self.config))

    @staticmethod
    def _build_button_table(config: InputConfig) -> dict:
        table = {}
        if config.rotate_button is not None:
            table[(config.rotate_button, config.rotate_modifiers)] = DragKind.ROTATE
        if config.pan_button is not None:
            table[(config.pan_button, config.pan_modifiers)] = DragKind.PAN
        return table

    @staticmethod
    def _build_key_table(config: InputConfig) -> dict:
        table = {}
        if config.reset_key:
            table[config.reset_key] = Reset()
        if config.toggle_first_person_key:
            table[config.toggle_first_person_key] = ToggleFirstPerson()
        if config.toggle_projection_key:
            table[config.toggle_projection_key] = ToggleProjection()
        return table

    @property
    def button_table(self) -> Mapping:
        return self._buttons

    @property
    def key_table(self) -> Mapping:
        return self._keys

    def _drag_kind(self, button: MouseButton, modifiers: Modifiers) -> Optional[DragKind]:
        kind = self._buttons.get((button, modifiers))
        if kind is None:
            kind = self._buttons.get((button, None))
        return kind

    def map(self, event) -> Optional[Operation]:
        """Classify one raw event into zero or one operation."""
        if isinstance(event, PointerMoved):
            return ContinueDrag(event.x, event.y)
        if isinstance(event, ButtonChanged):
            if event.pressed:
                kind = self._drag_kind(event.button, event.modifiers)
                if kind is DragKind.ROTATE:
                    return BeginRotate()
                if kind is DragKind.PAN:
                    return BeginPan()
                return None
            kinds = {kind for (button, _mods), kind in self._buttons.items() if button == event.button}
            if not kinds:
                return None
            return EndDrag(kinds.pop() if len(kinds) == 1 else None)
        if isinstance(event, Scrolled):
            return Zoom(event.delta) if self.config.zoom_scroll else None
        if isinstance(event, KeyChanged):
            return self._keys.get(normalize_key(event.key)) if event.pressed else None
        if isinstance(event, Resized):
            return Resize(event.width, event.height)
        return None

    def map_all(self, events: Iterable) -> list:
        """Map a batch, keeping arrival order and skipping unmapped events."""
        ops = []
        for event in events:
            op = self.map(event)
            if op is not None:
                ops.append(op)
        return ops

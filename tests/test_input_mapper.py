"""
InputMapper / InputConfig: default bindings, modifier matching and
configuration validation.
"""
import math

import pytest

from trackcam.core.events import (
    BeginPan,
    BeginRotate,
    ButtonChanged,
    ContinueDrag,
    DragKind,
    EndDrag,
    KeyChanged,
    Modifiers,
    MouseButton,
    PointerMoved,
    Reset,
    Resize,
    Resized,
    Scrolled,
    ToggleFirstPerson,
    ToggleProjection,
    Zoom,
)
from trackcam.core.exceptions import ConfigError
from trackcam.core.input_mapper import InputConfig, InputMapper


@pytest.fixture
def mapper():
    return InputMapper()


def test_default_buttons(mapper):
    assert mapper.map(ButtonChanged(MouseButton.LEFT, True)) == BeginRotate()
    assert mapper.map(ButtonChanged(MouseButton.RIGHT, True, Modifiers.SHIFT)) == BeginPan()
    assert mapper.map(ButtonChanged(MouseButton.MIDDLE, True)) is None
    assert mapper.map(ButtonChanged(MouseButton.LEFT, False)) == EndDrag(DragKind.ROTATE)
    assert mapper.map(ButtonChanged(MouseButton.RIGHT, False)) == EndDrag(DragKind.PAN)
    assert mapper.map(ButtonChanged(MouseButton.MIDDLE, False)) is None


def test_default_keys(mapper):
    assert mapper.map(KeyChanged("Return", True)) == Reset()
    assert mapper.map(KeyChanged("F", True)) == ToggleFirstPerson()
    assert mapper.map(KeyChanged("O", True)) == ToggleProjection()
    assert mapper.map(KeyChanged("Return", False)) is None
    assert mapper.map(KeyChanged("Q", True)) is None


def test_pointer_scroll_and_resize(mapper):
    assert mapper.map(PointerMoved(3.0, 4.0)) == ContinueDrag(3.0, 4.0)
    assert mapper.map(Scrolled(-1.5)) == Zoom(-1.5)
    assert mapper.map(Resized(640, 480)) == Resize(640, 480)
    assert InputMapper(InputConfig(zoom_scroll=False)).map(Scrolled(1.0)) is None


def test_exact_modifiers_select_operation():
    config = InputConfig(
        rotate_modifiers=Modifiers.NONE,
        pan_button=MouseButton.LEFT,
        pan_modifiers=Modifiers.SHIFT,
    )
    mapper = InputMapper(config)
    assert mapper.map(ButtonChanged(MouseButton.LEFT, True)) == BeginRotate()
    assert mapper.map(ButtonChanged(MouseButton.LEFT, True, Modifiers.SHIFT)) == BeginPan()
    assert mapper.map(ButtonChanged(MouseButton.LEFT, True, Modifiers.CONTROL)) is None
    assert mapper.map(ButtonChanged(MouseButton.LEFT, True, Modifiers.SHIFT | Modifiers.ALT)) is None
    # one button, two drag kinds: release ends whichever drag is active
    assert mapper.map(ButtonChanged(MouseButton.LEFT, False)) == EndDrag(None)


def test_wildcard_and_exact_binding_on_one_button_collide():
    config = InputConfig(
        rotate_modifiers=None,
        pan_button=MouseButton.LEFT,
        pan_modifiers=Modifiers.CONTROL,
    )
    with pytest.raises(ConfigError):
        InputMapper(config)


def test_disabled_bindings():
    mapper = InputMapper(InputConfig(rotate_button=None, reset_key=None))
    assert mapper.map(ButtonChanged(MouseButton.LEFT, True)) is None
    assert mapper.map(KeyChanged("Return", True)) is None


def test_map_all_keeps_order_and_skips_unmapped(mapper):
    events = [
        PointerMoved(1.0, 2.0),
        ButtonChanged(MouseButton.MIDDLE, True),
        ButtonChanged(MouseButton.LEFT, True),
        KeyChanged("Z", True),
        Scrolled(1.0),
    ]
    assert mapper.map_all(events) == [ContinueDrag(1.0, 2.0), BeginRotate(), Zoom(1.0)]


def test_tables_are_read_only(mapper):
    assert mapper.button_table[(MouseButton.LEFT, None)] is DragKind.ROTATE
    with pytest.raises(TypeError):
        mapper.key_table["X"] = Reset()


@pytest.mark.parametrize("kwargs", [
    {"pan_button": MouseButton.LEFT},
    {"rotation_sensitivity": 0.0},
    {"zoom_sensitivity": -1.0},
    {"rotation_sensitivity": math.nan},
    {"zoom_sensitivity": math.inf},
    {"reset_key": "F"},
    {"toggle_projection_key": "F"},
])
def test_invalid_config_raises(kwargs):
    with pytest.raises(ConfigError):
        InputConfig(**kwargs)


def test_from_dict():
    config = InputConfig.from_dict({
        "rotate_button": "right",
        "rotate_modifiers": ["shift", "control"],
        "pan_button": "left",
        "pan_modifiers": None,
        "reset_key": "Home",
        "rotation_sensitivity": "2.5",
        "zoom_scroll": False,
    })
    assert config.rotate_button is MouseButton.RIGHT
    assert config.rotate_modifiers == Modifiers.SHIFT | Modifiers.CONTROL
    assert config.pan_button is MouseButton.LEFT
    assert config.pan_modifiers is None
    assert config.reset_key == "Home"
    assert config.rotation_sensitivity == 2.5
    assert config.zoom_scroll is False
    assert config.toggle_first_person_key == "F"
    assert InputConfig.from_dict(None) == InputConfig()


@pytest.mark.parametrize("data", [
    {"rotate_button": "thumb"},
    {"pan_modifiers": ["hyper"]},
    {"zoom_sensitivity": "fast"},
])
def test_from_dict_invalid(data):
    with pytest.raises(ConfigError):
        InputConfig.from_dict(data)


def test_single_letter_keys_match_either_case():
    config = InputConfig.from_dict({"toggle_first_person_key": "g", "toggle_projection_key": " p "})
    assert config.toggle_first_person_key == "G"
    assert config.toggle_projection_key == "P"
    mapper = InputMapper(config)
    assert mapper.map(KeyChanged("G", True)) == ToggleFirstPerson()
    assert mapper.map(KeyChanged("g", True)) == ToggleFirstPerson()
    assert mapper.map(KeyChanged("p", True)) == ToggleProjection()
    assert InputMapper().map(KeyChanged("f", True)) == ToggleFirstPerson()


def test_keys_differing_only_in_case_collide():
    with pytest.raises(ConfigError):
        InputConfig(toggle_first_person_key="f", toggle_projection_key="F")

from unittest import mock

import pytest

from speak_to_ai.config import Config
from speak_to_ai.output_factory import EnvironmentType, OutputFactory, get_outputter_from_config
from speak_to_ai.outputs import ClipboardOutputter, CombinedOutputter, OutputError, TypeOutputter

MISSING = mock.patch("speak_to_ai.outputs.shutil.which", return_value=None)
FOUND = mock.patch("speak_to_ai.outputs.shutil.which", return_value="/usr/bin/tool")


def make_config(mode="combined", clip="auto", typ="auto"):
    cfg = Config()
    cfg.output.default_mode = mode
    cfg.output.clipboard_tool = clip
    cfg.output.type_tool = typ
    return cfg


def test_new_factory_keeps_config():
    cfg = Config()
    assert OutputFactory(cfg).config is cfg


@pytest.mark.parametrize(
    "env,mode",
    [
        (EnvironmentType.X11, "clipboard"),
        (EnvironmentType.WAYLAND, "clipboard"),
        (EnvironmentType.X11, "active_window"),
        (EnvironmentType.WAYLAND, "active_window"),
        (EnvironmentType.X11, "combined"),
        (EnvironmentType.WAYLAND, "combined"),
        (EnvironmentType.UNKNOWN, "clipboard"),
        (EnvironmentType.X11, ""),
        (EnvironmentType.X11, "invalid_mode"),
    ],
)
def test_get_outputter_errors_without_tools(env, mode):
    with MISSING:
        with pytest.raises(OutputError):
            OutputFactory(make_config(mode)).get_outputter(env)


@pytest.mark.parametrize(
    "env,clip,typ,exp_clip,exp_type",
    [
        (EnvironmentType.X11, "auto", "auto", "xclip", "xdotool"),
        (EnvironmentType.WAYLAND, "auto", "auto", "wl-copy", "wl-keyboard"),
        (EnvironmentType.UNKNOWN, "auto", "auto", "xclip", "xdotool"),
        (EnvironmentType.X11, "wl-copy", "custom-tool", "wl-copy", "custom-tool"),
    ],
)
def test_tool_selection(env, clip, typ, exp_clip, exp_type):
    factory = OutputFactory(make_config("combined", clip, typ))
    assert factory.resolve_tools(env) == (exp_clip, exp_type)


@pytest.mark.parametrize(
    "mode,cls",
    [("clipboard", ClipboardOutputter), ("active_window", TypeOutputter),
     ("combined", CombinedOutputter), ("", CombinedOutputter)],
)
def test_mode_selects_class(mode, cls):
    with FOUND:
        out = OutputFactory(make_config(mode)).get_outputter(EnvironmentType.X11)
    assert type(out) is cls


def test_nil_config():
    with pytest.raises(OutputError):
        OutputFactory(None).get_outputter(EnvironmentType.X11)
    with pytest.raises(OutputError):
        get_outputter_from_config(None, EnvironmentType.X11)


def test_config_immutability():
    cfg = make_config("clipboard", "xclip", "xdotool")
    with MISSING:
        with pytest.raises(OutputError):
            OutputFactory(cfg).get_outputter(EnvironmentType.X11)
    assert cfg.output.default_mode == "clipboard"
    assert cfg.output.clipboard_tool == "xclip"
    assert cfg.output.type_tool == "xdotool"


@pytest.mark.parametrize("clip", ["xclip\n", "инструмент", "", "   "])
def test_edge_case_tools(clip):
    with MISSING:
        with pytest.raises(OutputError):
            OutputFactory(make_config("clipboard", clip, clip)).get_outputter(EnvironmentType.X11)


@pytest.mark.parametrize(
    "env,mode",
    [(EnvironmentType.X11, "clipboard"), (EnvironmentType.WAYLAND, "active_window"),
     (EnvironmentType.UNKNOWN, "combined")],
)
def test_get_outputter_from_config(env, mode):
    with MISSING:
        with pytest.raises(OutputError):
            get_outputter_from_config(make_config(mode), env)


def test_invalid_environment_defaults_to_x11():
    factory = OutputFactory(make_config())
    assert factory.resolve_tools("invalid") == ("xclip", "xdotool")


@pytest.mark.parametrize(
    "env,expected",
    [(EnvironmentType.X11, "X11"), (EnvironmentType.WAYLAND, "Wayland"),
     (EnvironmentType.UNKNOWN, "Unknown")],
)
def test_environment_constants(env, expected):
    assert env.value == expected
from speak_to_ai.config import Config, OutputSettings, WebServerSettings


def test_defaults_are_empty():
    cfg = Config()
    assert cfg.output.default_mode == ""
    assert cfg.web_server.enabled is False
    assert cfg.audio.sample_rate == 0


def test_sections_are_independent_between_instances():
    a = Config()
    b = Config()
    a.output.clipboard_tool = "xclip"
    assert b.output.clipboard_tool == ""
    assert a.output is not b.output


def test_equality_by_value():
    a = Config(output=OutputSettings(default_mode="clipboard"))
    b = Config(output=OutputSettings(default_mode="clipboard"))
    assert a == b
    b.web_server = WebServerSettings(port=1)
    assert a != b
import pytest

from teleop_link import config
from teleop_link.drive.types import LinkConfig


def test_defaults_match_link_timing():
    cfg = LinkConfig()
    assert cfg.reconnect_interval_s == 1.0
    assert cfg.sample_interval_s == 0.05
    assert cfg.coalesce_interval_s == 0.1
    assert cfg.gamepad_deadzone == 0.2
    assert cfg.touch_deadzone == 0.05
    assert cfg.fullscreen_button == 9


@pytest.mark.parametrize("field,value", [
    ("reconnect_interval_s", 0),
    ("sample_interval_s", -0.05),
    ("coalesce_interval_s", 0.0),
    ("connect_timeout_s", 0),
    ("gamepad_deadzone", 1.0),
    ("touch_deadzone", -0.1),
    ("fullscreen_button", -1),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValueError):
        LinkConfig(**{field: value})


def test_overrides_keep_field_types():
    cfg = LinkConfig().with_overrides({"reconnect_interval_s": 2, "fullscreen_button": "7", "log_tx": 1})
    assert cfg.reconnect_interval_s == 2.0 and isinstance(cfg.reconnect_interval_s, float)
    assert cfg.fullscreen_button == 7
    assert cfg.log_tx is True


def test_overrides_reject_unknown_keys():
    with pytest.raises(ValueError, match="Unknown config keys"):
        LinkConfig().with_overrides({"reconect_interval_s": 2})


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("X_BOOL", "Yes")
    monkeypatch.setenv("X_INT", "12")
    monkeypatch.setenv("X_FLOAT", "0.25")
    monkeypatch.delenv("X_MISSING", raising=False)

    assert config.env_bool("X_BOOL", False) is True
    assert config.env_int("X_INT", 0) == 12
    assert config.env_float("X_FLOAT", 0.0) == 0.25
    assert config.env_str("X_MISSING", "dflt") == "dflt"
    assert config.env_bool("X_MISSING", True) is True


def test_yaml_overrides_nested_under_link(tmp_path):
    path = tmp_path / "teleop.yaml"
    path.write_text(
        "link:\n"
        "  url: ws://robot.local:8080/ws/\n"
        "  coalesce_interval_s: 0.2\n"
        "  gamepad_deadzone: 0.1\n",
        encoding="utf-8",
    )

    cfg = config.link_config(str(path))

    assert cfg.url == "ws://robot.local:8080/ws/"
    assert cfg.coalesce_interval_s == 0.2
    assert cfg.gamepad_deadzone == 0.1
    assert cfg.sample_interval_s == config.SAMPLE_INTERVAL_S


def test_yaml_overrides_flat(tmp_path):
    path = tmp_path / "teleop.yaml"
    path.write_text("touch_deadzone: 0.1\n", encoding="utf-8")

    cfg = config.load_yaml_overrides(LinkConfig(), path)
    assert cfg.touch_deadzone == 0.1


def test_empty_yaml_changes_nothing(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert config.load_yaml_overrides(LinkConfig(), path) == LinkConfig()


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_yaml_overrides(LinkConfig(), path)


@pytest.mark.parametrize("raw,expected", [("false", False), ("No", False), ("0", False), ("true", True), (" on ", True)])
def test_quoted_booleans_parse_like_env(monkeypatch, raw, expected):
    monkeypatch.setenv("X_FLAG", raw)

    cfg = LinkConfig(log_rx=not expected).with_overrides({"log_rx": raw})

    assert cfg.log_rx is expected
    assert config.env_bool("X_FLAG", not expected) is expected


def test_quoted_false_in_yaml_disables_flag(tmp_path):
    path = tmp_path / "teleop.yaml"
    path.write_text('link:\n  log_rx: "false"\n', encoding="utf-8")

    assert config.load_yaml_overrides(LinkConfig(), path).log_rx is False

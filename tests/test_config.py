import json

import pytest

from iconsmith.config import DEFAULT_CONFIG, Config, Settings
from iconsmith.errors import ConfigError


def _write(path, data):
    path.write_text(json.dumps(data))
    return path


def test_defaults_when_missing(tmp_path):
    config = Config(tmp_path / "missing.json")
    assert config.data == DEFAULT_CONFIG
    assert config.get("sizes", "pixmap") == 128
    assert config.get("names", "nope", default="x") == "x"


def test_saved_values_merge_over_defaults(tmp_path):
    path = _write(tmp_path / "config.json",
                  {"names": {"ico": "icon.ico"}, "resample": "bicubic"})
    config = Config(path)
    assert config.get("names", "ico") == "icon.ico"
    assert config.get("names", "png") == "output.png"
    assert config.get("resample") == "bicubic"
    assert DEFAULT_CONFIG["names"]["ico"] == "app.ico"


def test_invalid_json_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert Config(path).data == DEFAULT_CONFIG


@pytest.mark.parametrize("data", [[1, 2], "text", {"sizes": [16]}, {"names": "a.png"}])
def test_wrongly_shaped_config_is_rejected(tmp_path, data):
    with pytest.raises(ConfigError):
        Config(_write(tmp_path / "config.json", data))


@pytest.mark.parametrize("data", [
    {"sizes": {"hicolor": 16}},
    {"sizes": {"ico": [16, "32"]}},
    {"sizes": {"pixmap": True}},
    {"names": {"png": 5}},
    {"resample": ["lanczos"]},
    {"output_dir": 3},
])
def test_wrongly_typed_values_are_rejected(tmp_path, data):
    config = Config(_write(tmp_path / "config.json", data))
    with pytest.raises(ConfigError):
        Settings.from_config(config)


def test_settings_from_config_with_overrides(tmp_path):
    config = Config(_write(tmp_path / "config.json", {"names": {"icns": "Mine.icns"}}))
    settings = Settings.from_config(config, ico_name="x.ico", png_name=None,
                                    output_dir=str(tmp_path))
    assert settings.ico_name == "x.ico"
    assert settings.png_name == "output.png"
    assert settings.icns_name == "Mine.icns"
    assert settings.output_dir == tmp_path
    assert settings.ico_sizes == [16, 24, 32, 48, 64, 96, 128, 256]
    assert settings.hicolor_sizes[-1] == 512


def test_explicit_empty_ico_sizes_are_kept(tmp_path):
    config = Config(_write(tmp_path / "config.json", {"sizes": {"ico": []}}))
    assert Settings.from_config(config).ico_sizes == []
    assert Settings(ico_sizes=[]).ico_sizes == []


@pytest.mark.parametrize("kwargs", [
    {"ico_sizes": [16, 20]},
    {"hicolor_sizes": [16, 512], "ico_sizes": [16, 512]},
    {"hicolor_sizes": [16, 16]},
    {"pixmap_size": 0},
    {"png_name": "sub/out.png"},
    {"ico_name": ""},
    {"ico_name": "same", "icns_name": "same"},
    {"ico_name": "icons"},
    {"icns_name": "pixmaps"},
    {"resample": "sharpest"},
])
def test_settings_validation(kwargs):
    with pytest.raises(ConfigError):
        Settings(**kwargs)

import json

import pytest

from iconsmith import cli


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "_setup_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr("iconsmith.config.CONFIG_FILE", tmp_path / "no-config.json")


def test_defaults():
    args = cli.build_parser().parse_args([])
    assert args.input == "input.png"
    assert args.png_name is None
    assert args.config is None


def test_run_with_defaults_in_cwd(source_png, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert cli.main([]) == 0
    assert (tmp_path / "app.ico").is_file()
    assert (tmp_path / "AppIcon.icns").is_file()
    assert (tmp_path / "pixmaps" / "output.png").is_file()
    assert (tmp_path / "icons" / "hicolor" / "512x512" / "apps" / "output.png").is_file()


def test_run_with_flags(source_png, tmp_path):
    out = tmp_path / "dist"
    code = cli.main(["-i", str(source_png), "-o", "myapp.png", "-w", "my.ico",
                     "-m", "My.icns", "-d", str(out)])
    assert code == 0
    assert (out / "my.ico").is_file()
    assert (out / "My.icns").is_file()
    assert (out / "icons" / "hicolor" / "16x16" / "apps" / "myapp.png").is_file()


def test_config_file(source_png, tmp_path):
    cfg = tmp_path / "settings.json"
    cfg.write_text(json.dumps({"names": {"ico": "from-config.ico"},
                               "output_dir": str(tmp_path / "cfg-out")}))
    assert cli.main(["-i", str(source_png), "-c", str(cfg)]) == 0
    assert (tmp_path / "cfg-out" / "from-config.ico").is_file()


def test_missing_config_file(source_png, tmp_path):
    assert cli.main(["-i", str(source_png), "-c", str(tmp_path / "nope.json")]) == 1


def test_missing_input(tmp_path):
    assert cli.main(["-i", str(tmp_path / "missing.png"), "-d", str(tmp_path)]) == 1


def test_invalid_settings(source_png, tmp_path):
    assert cli.main(["-i", str(source_png), "-w", "a/b.ico", "-d", str(tmp_path)]) == 1


def test_ico_named_previous(source_png, tmp_path):
    out = tmp_path / "out"
    assert cli.main(["-i", str(source_png), "-w", "previous", "-d", str(out)]) == 0
    assert (out / "previous").read_bytes()[:4] == b"\x00\x00\x01\x00"


def test_same_container_names(source_png, tmp_path):
    out = tmp_path / "out"
    assert cli.main(["-i", str(source_png), "-w", "same", "-m", "same", "-d", str(out)]) == 1
    assert not (out / "same").exists()


@pytest.mark.parametrize("data", [[1, 2], {"sizes": {"hicolor": 16}}, {"names": {"png": 5}}])
def test_malformed_config_file(source_png, tmp_path, data):
    cfg = tmp_path / "settings.json"
    cfg.write_text(json.dumps(data))
    assert cli.main(["-i", str(source_png), "-c", str(cfg), "-d", str(tmp_path / "o")]) == 1

from __future__ import annotations

import io
import json
import runpy
from pathlib import Path

import pytest
from PIL import Image

import pixelart_app.__main__ as cli_main
from pixelart_app import cli
from pixelart_core.config import AppConfig
from pixelart_pipeline import IntensityGrid, encode


def test_main_defaults_to_help(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(cli_main, "_cli_main", lambda argv=None: calls.append(list(argv or [])) or 0)

    rc = cli_main.main([])
    assert rc == 0
    assert calls == [["--help"]]


def test_main_passes_through_args(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(cli_main, "_cli_main", lambda argv=None: calls.append(list(argv or [])) or 0)

    rc = cli_main.main(["themes"])
    assert rc == 0
    assert calls == [["themes"]]


def test_main_module_runpath_without_package_context() -> None:
    main_path = Path(__file__).resolve().parents[1] / "apps" / "cli" / "pixelart_app" / "__main__.py"
    result = runpy.run_path(str(main_path))
    assert "main" in result


def _isolate(monkeypatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "load_config", lambda: AppConfig())


def test_encode_then_render_end_to_end(monkeypatch, tmp_path, capsys) -> None:
    _isolate(monkeypatch)
    photo = tmp_path / "photo.png"
    Image.new("RGB", (40, 30), (200, 200, 200)).save(photo)
    artifact = tmp_path / "art.txt"

    assert cli.main(["encode", str(photo), "--size", "8", "--out", str(artifact)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["success"] is True
    assert out["size"] == 8
    assert artifact.read_text(encoding="utf-8")

    png = tmp_path / "art.png"
    assert cli.main(["render", str(artifact), "--out", str(png), "--width", "32"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["grid_size"] == 8
    assert out["exact"] is True
    with Image.open(png) as im:
        assert im.size == (32, AppConfig().render.display_height)


def test_themes_lists_default(monkeypatch, capsys) -> None:
    _isolate(monkeypatch)
    assert cli.main(["themes"]) == 0
    assert "Cobalt" in json.loads(capsys.readouterr().out)


def test_bad_artifact_reports_error(monkeypatch, tmp_path, capsys) -> None:
    _isolate(monkeypatch)
    bad = tmp_path / "bad.txt"
    bad.write_text("%%% not base64", encoding="utf-8")

    rc = cli.main(["render", str(bad), "--out", str(tmp_path / "x.png")])
    assert rc == 2
    out = json.loads(capsys.readouterr().out)
    assert out["success"] is False
    assert out["type"] == "InvalidArtifact"


def test_slideshow_simulated_clock(monkeypatch, tmp_path, capsys) -> None:
    _isolate(monkeypatch)
    paths = []
    for value in (0, 5, 10):
        p = tmp_path / f"a{value}.txt"
        p.write_text(encode(IntensityGrid.from_levels([value] * 4)), encoding="utf-8")
        paths.append(str(p))

    rc = cli.main(["slideshow", *paths, "--seconds", "16", "--seed", "2", "--out-dir", str(tmp_path / "frames")])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["frames"] == 3
    assert out["visited"][:4] == [0, 1, 2, 0]
    assert all(3000 <= d <= 5000 for d in out["delays_ms"])
    assert len(out["written"]) == len(out["visited"])


def test_encode_rejects_level_count_above_byte_range(monkeypatch, tmp_path, capsys) -> None:
    _isolate(monkeypatch)
    photo = tmp_path / "photo.png"
    Image.new("RGB", (4, 4), (255, 255, 255)).save(photo)

    with pytest.raises(SystemExit) as exc:
        cli.main(["encode", str(photo), "--levels", "300"])
    assert exc.value.code == 2
    assert "levels must be in 1..256" in capsys.readouterr().err

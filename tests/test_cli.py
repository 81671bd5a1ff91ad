import json

from fbxcli.main import build_parser, main


def test_parser_requires_command():
    p = build_parser()
    args = p.parse_args(["export", "x.fbx", "--no-overwrite", "--app-name", "tool"])
    assert args.out == "x.fbx"
    assert args.no_overwrite is True
    assert args.app_name == "tool"


def test_export_summary_dump_verify(tmp_path, capsys):
    out = tmp_path / "scene.fbx"
    assert main(["export", str(out), "--app-name", "tool", "--app-version", "2.0"]) == 0
    assert out.exists()

    assert main(["summary", str(out)]) == 0
    text = capsys.readouterr().out
    assert "tool v2.0 release" in text
    assert "FBXHeaderExtension" in text

    assert main(["dump", str(out), "--depth", "1"]) == 0
    assert "GlobalSettings" in capsys.readouterr().out

    assert main(["verify-roundtrip", str(out)]) == 0
    assert "IDENTICAL" in capsys.readouterr().out


def test_export_no_overwrite(tmp_path):
    out = tmp_path / "scene.fbx"
    out.write_bytes(b"existing")
    assert main(["export", str(out), "--no-overwrite"]) == 0
    assert out.read_bytes() == b"existing"


def test_export_with_config(tmp_path):
    cfg = tmp_path / "app.json"
    cfg.write_text(json.dumps({"name": "cfgapp", "flavour": "nightly"}))
    out = tmp_path / "scene.fbx"
    assert main(["export", str(out), "--config", str(cfg), "--flavour", "beta"]) == 0
    assert b"cfgapp v0.1.0 beta" in out.read_bytes()


def test_bad_input_returns_2(tmp_path):
    bad = tmp_path / "bad.fbx"
    bad.write_bytes(b"not an fbx file at all......")
    assert main(["summary", str(bad)]) == 2
    assert main(["verify-roundtrip", str(bad)]) == 2
    assert main(["dump", str(tmp_path / "missing.fbx")]) == 2


def test_null_config_value_returns_2(tmp_path):
    cfg = tmp_path / "app.json"
    cfg.write_text(json.dumps({"name": None}))
    out = tmp_path / "scene.fbx"
    assert main(["export", str(out), "--config", str(cfg)]) == 2
    assert not out.exists()

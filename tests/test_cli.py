"""CLI commands against a temporary SQLite placement store."""

import json

import pytest

from ad_entity.config.runtime import get_settings
from ad_entity.interface.cli import main


@pytest.fixture(autouse=True)
def _db(monkeypatch, tmp_path):
    monkeypatch.setenv("PLACEMENT_DB_PATH", str(tmp_path / "placements.db"))
    monkeypatch.delenv("PLACEMENT_STORE", raising=False)
    monkeypatch.delenv("RULE_PLUGINS", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_add_and_list(capsys):
    main(["placements", "add", "p2", "Sidebar"])
    main(["placements", "add", "p1", "Header"])
    capsys.readouterr()
    main(["placements"])
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == ["p1\tHeader\tenabled", "p2\tSidebar\tenabled"]


def test_add_duplicate_exits(capsys):
    main(["placements", "add", "p1", "Header"])
    with pytest.raises(SystemExit) as excinfo:
        main(["placements", "add", "p1", "Again"])
    assert excinfo.value.code == 1
    assert "already exists" in capsys.readouterr().err


def test_add_invalid_id_exits(capsys):
    with pytest.raises(SystemExit):
        main(["placements", "add", "Not Valid", "Header"])
    assert "Error" in capsys.readouterr().err


def test_delete_missing_exits(capsys):
    with pytest.raises(SystemExit):
        main(["placements", "delete", "nope"])
    assert "not found" in capsys.readouterr().err


def test_seed(tmp_path, capsys):
    path = _write(tmp_path, "seed.json", [{"id": "p1", "label": "Header"}, {"id": "p2", "label": "Sidebar"}])
    main(["seed", "--file", path])
    assert "Saved 2 placements" in capsys.readouterr().out


def test_seed_invalid_entry_saves_nothing(tmp_path, capsys):
    path = _write(tmp_path, "seed.json", [{"id": "p1", "label": "Header"}, {"id": "BAD", "label": "x"}])
    with pytest.raises(SystemExit):
        main(["seed", "--file", path])
    assert "index 1" in capsys.readouterr().err
    main(["placements", "list"])
    assert capsys.readouterr().out == ""


def test_rule_types(capsys):
    main(["rule-types"])
    ids = [line.split("\t")[0] for line in capsys.readouterr().out.strip().splitlines()]
    assert ids == ["targeting", "turnoff", "device", "geo", "user_role"]


def test_form_with_value(tmp_path, capsys):
    main(["placements", "add", "p1", "Header"])
    capsys.readouterr()
    path = _write(tmp_path, "value.json", {"rule_type_id": "device", "rule_settings": {"device": {"target": "tablet"}}})
    main(["form", "--value-file", path])
    form = json.loads(capsys.readouterr().out)
    assert form["children"][0]["default_value"] == "device"
    assert form["children"][2]["options"] == {"p1": "Header"}


def test_massage(tmp_path, capsys):
    path = _write(
        tmp_path,
        "values.json",
        [
            {"rule_type_id": "geo", "rule_settings": {"geo": {"countries": "us, de"}, "device": {"target": "x"}}},
            {"rule_type_id": ""},
        ],
    )
    main(["massage", "--file", path])
    assert json.loads(capsys.readouterr().out) == [
        {"rule_type_id": "geo", "apply_to": [], "rule_settings": {"geo": {"countries": ["US", "DE"]}}}
    ]


def test_massage_error_exits(tmp_path, capsys):
    path = _write(tmp_path, "values.json", [{"rule_type_id": "device", "apply_to": ["p9"]}])
    with pytest.raises(SystemExit):
        main(["massage", "--file", path])
    assert "illegal choice" in capsys.readouterr().err


def test_validate_reports_and_exits(tmp_path, capsys):
    path = _write(tmp_path, "values.json", [{"rule_type_id": "nope"}])
    with pytest.raises(SystemExit):
        main(["validate", "--file", path])
    report = json.loads(capsys.readouterr().out)
    assert report["valid"] is False
    assert "unknown rule type" in report["errors"][0]


def test_missing_file_exits(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["massage", "--file", str(tmp_path / "missing.json")])
    assert "file not found" in capsys.readouterr().err

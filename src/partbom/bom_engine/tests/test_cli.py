from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from partbom import database
from partbom.cli import app

pytestmark = pytest.mark.cli

runner = CliRunner()


@pytest.fixture()
def cli_db(engine, session_factory, monkeypatch):
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "SessionLocal", session_factory)
    return session_factory


def _invoke(*args):
    result = runner.invoke(app, list(args))
    return result


def test_version():
    result = _invoke("version")

    assert result.exit_code == 0
    assert result.output.strip() == "0.1.0"


def test_part_and_link_commands(cli_db):
    created = _invoke("part", "create", "--name", "Cart")
    assert created.exit_code == 0, created.output
    cart = json.loads(created.output)
    assert cart["partNumber"] == "PRT-000001"

    frame = json.loads(_invoke("part", "create", "--name", "Frame").output)

    linked = _invoke("link", "add", cart["id"], frame["id"], "--quantity", "3")
    assert linked.exit_code == 0, linked.output
    assert json.loads(linked.output)["quantity"] == 3

    shown = json.loads(_invoke("part", "show", cart["id"]).output)
    assert shown["childCount"] == 1
    assert shown["childParts"][0]["quantity"] == 3

    tree = json.loads(_invoke("tree", cart["id"], "--depth", "all").output)
    assert tree["nodeCount"] == 2
    assert tree["tree"]["children"][0]["part"]["id"] == frame["id"]

    found = json.loads(_invoke("part", "search", "-q", "fram").output)
    assert [p["name"] for p in found] == ["Frame"]


def test_cycle_is_reported_and_not_persisted(cli_db):
    a = json.loads(_invoke("part", "create", "--name", "A").output)
    b = json.loads(_invoke("part", "create", "--name", "B").output)
    assert _invoke("link", "add", a["id"], b["id"]).exit_code == 0

    result = _invoke("link", "add", b["id"], a["id"])

    assert result.exit_code == 1
    assert "CYCLE_DETECTED" in result.output
    assert "would introduce a cycle" in result.output

    audits = json.loads(_invoke("part", "audit", b["id"]).output)
    assert [entry["action"] for entry in audits] == ["BOM_LINK_CREATED", "PART_CREATED"]


def test_link_remove_and_missing_link(cli_db):
    a = json.loads(_invoke("part", "create", "--name", "A").output)
    b = json.loads(_invoke("part", "create", "--name", "B").output)
    _invoke("link", "add", a["id"], b["id"])

    removed = _invoke("link", "remove", a["id"], b["id"])
    assert removed.exit_code == 0
    assert json.loads(removed.output)["message"] == "BOM link removed successfully."

    missing = _invoke("link", "remove", a["id"], b["id"])
    assert missing.exit_code == 1
    assert "No BOM link exists between PRT-000001 and PRT-000002." in missing.output


def test_tree_rejects_bad_depth(cli_db):
    a = json.loads(_invoke("part", "create", "--name", "A").output)

    result = _invoke("tree", a["id"], "--depth", "9")

    assert result.exit_code == 1
    assert "Maximum supported depth is 5." in result.output

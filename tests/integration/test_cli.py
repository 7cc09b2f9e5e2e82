"""Integration tests for the operator CLI."""

import json

import pytest
import typer
from typer.testing import CliRunner

from formulary_service import cli

runner = CliRunner()
build_service = cli._service


@pytest.fixture(autouse=True)
def shared_service(monkeypatch, service):
    monkeypatch.setattr(cli, "_service", lambda plan_id: service)
    return service


def test_import_and_stats(tmp_path, sample_drugs):
    path = tmp_path / "drugs.json"
    payload = [d.model_dump(mode="json") for d in sample_drugs] + [{"ndc": "broken"}]
    path.write_text(json.dumps(payload))

    result = runner.invoke(cli.app, ["import-drugs", str(path)])
    assert result.exit_code == 0
    assert "Imported 5 drugs (1 failed)" in result.output

    result = runner.invoke(cli.app, ["stats"])
    assert result.exit_code == 0
    assert json.loads(result.output)["total_drugs"] == 5


def test_import_missing_file(tmp_path):
    result = runner.invoke(cli.app, ["import-drugs", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_import_malformed_json(tmp_path, service):
    path = tmp_path / "drugs.json"
    path.write_text("[{\"ndc\": \"1\",")

    result = runner.invoke(cli.app, ["import-drugs", str(path)])

    assert result.exit_code == 1
    assert "Invalid JSON" in result.output
    assert service.get_formulary_stats().total_drugs == 0


def test_plan_option_rejects_reserved_characters():
    with pytest.raises(typer.BadParameter, match="reserved characters"):
        build_service("med*")
    assert build_service("commercial-2025").plan_id == "commercial-2025"


def test_search_and_classes(loaded_service):
    result = runner.invoke(cli.app, ["search", "lipitor"])
    assert "Lipitor (Atorvastatin)" in result.output

    result = runner.invoke(cli.app, ["search", "statin"])
    assert "No matching drugs" in result.output

    result = runner.invoke(cli.app, ["classes"])
    assert result.output.split() == ["anticonvulsants", "antidepressants", "biologics", "statins"]


def test_export_to_file(tmp_path, loaded_service):
    output = tmp_path / "out" / "formulary.json"

    result = runner.invoke(cli.app, ["export", "--output", str(output)])

    assert result.exit_code == 0
    assert [d["tier"] for d in json.loads(output.read_text())] == [1, 2, 3, 4, 5]


def test_clear_requires_confirmation(loaded_service):
    result = runner.invoke(cli.app, ["clear"])
    assert result.exit_code == 1
    assert loaded_service.get_formulary_stats().total_drugs == 5

    result = runner.invoke(cli.app, ["clear", "--yes"])
    assert result.exit_code == 0
    assert loaded_service.get_formulary_stats().total_drugs == 0

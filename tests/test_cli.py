"""Tests for the command line client."""

import json

import pytest

from calorie_lens import cli
from calorie_lens.domain.errors import RateLimitedError
from calorie_lens.services.prompts import NUTRITION_PROMPT
from tests.conftest import JPEG_BYTES, FakeCompletionClient


@pytest.fixture
def photo(tmp_path):
    path = tmp_path / "meal.jpg"
    path.write_bytes(JPEG_BYTES)
    return path


@pytest.fixture
def patched_container(monkeypatch, container):
    monkeypatch.setattr(cli, "build_container", lambda settings: container)
    return container


def test_analyze_prints_summary(patched_container, photo, capsys) -> None:
    exit_code = cli.main(["analyze", str(photo)])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Salad: 300 kcal (confidence 90%)" in out
    assert "Protein 10 g" in out
    assert "DEMO" not in out


def test_analyze_prints_json(patched_container, photo, capsys) -> None:
    exit_code = cli.main(["analyze", str(photo), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["demo"] is False
    assert payload["record"]["foodName"] == "Salad"


def test_analyze_failure_exits_nonzero(
    patched_container, completion_client: FakeCompletionClient, photo, capsys
) -> None:
    completion_client.error = RateLimitedError("slow down")

    exit_code = cli.main(["analyze", str(photo)])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert captured.out == ""
    assert "Too many requests" in captured.err


def test_analyze_missing_file(patched_container, tmp_path, capsys) -> None:
    exit_code = cli.main(["analyze", str(tmp_path / "missing.jpg")])

    assert exit_code == 2
    assert "Cannot read photo" in capsys.readouterr().err


def test_demo_is_labelled(
    patched_container, completion_client: FakeCompletionClient, capsys
) -> None:
    exit_code = cli.main(["demo"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("[DEMO]")
    assert completion_client.calls == []


def test_prompt_command(capsys) -> None:
    assert cli.main(["prompt"]) == 0
    assert capsys.readouterr().out.strip() == NUTRITION_PROMPT.strip()

"""Tests for the CSV -> DuckDB build script."""

import importlib.util
from pathlib import Path

from mlbb_draft.repositories.draft_repository import DraftRepository

SCRIPT = Path(__file__).parent.parent / "scripts" / "build_duckdb.py"
REPO_CSV = Path(__file__).parent.parent.parent / "data" / "csv"


def load_script():
    spec = importlib.util.spec_from_file_location("build_duckdb", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_build_from_bundled_csv(tmp_path):
    db_path = load_script().build_duckdb(REPO_CSV, tmp_path / "draft.duckdb")

    repo = DraftRepository(db_path)
    assert len(repo.get_heroes()) == 22
    roster = repo.get_roster("Onic")
    assert [p.name for p in roster if p.is_substitute] == ["Lutpiii"]


def test_rebuild_keeps_saved_matches(tmp_path):
    script = load_script()
    db_path = script.build_duckdb(REPO_CSV, tmp_path / "draft.duckdb")
    match_id = DraftRepository(db_path).save_match({"winner": "Onic", "teams": []})

    script.build_duckdb(REPO_CSV, db_path)

    repo = DraftRepository(db_path)
    assert repo.get_match(match_id)["winner"] == "Onic"
    assert len(repo.get_heroes()) == 22


def test_missing_csv_is_skipped(tmp_path):
    db_path = load_script().build_duckdb(tmp_path, tmp_path / "empty.duckdb")
    assert DraftRepository(db_path).get_heroes() == []

"""Test the logs CLI group."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from click.testing import CliRunner

from dbwarden.cli import main


def test_logs_clean(tmp_path) -> None:
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    old = (datetime.now(UTC) - timedelta(days=10)).strftime("%Y-%m-%d")
    today = datetime.now(UTC).strftime("%Y-%m-%d")
    (project_dir / f"{old}.jsonl").write_text("{}\n")
    (project_dir / f"{today}.jsonl").write_text("{}\n")

    runner = CliRunner()
    with patch("dbwarden.querylog._LOG_ROOT", tmp_path), patch(
        "dbwarden.querylog.os.getcwd", return_value="/test/project"
    ):
        result = runner.invoke(main, ["logs", "clean", "--retention-days", "7"])

    assert result.exit_code == 0
    assert "Deleted 1 log file(s)." in result.output
    assert (project_dir / f"{today}.jsonl").exists()


def test_logs_clean_rejects_negative_retention() -> None:
    runner = CliRunner()
    result = runner.invoke(main, ["logs", "clean", "--retention-days", "-1"])
    assert result.exit_code == 2

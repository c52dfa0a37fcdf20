"""Integration tests for the `broadband-api pipeline` CLI commands.

Network and database work is patched out; these tests cover argument
handling, region defaults, output, and exit codes.
"""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from broadband_api.cli.app import app
from broadband_api.lib.bdc import BdcApiError, PipelineError
from broadband_api.services.pipeline_service import PipelineReport

runner = CliRunner()
MODULE = "broadband_api.cli.pipeline_cmd"


@pytest.fixture(autouse=True)
def _env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("PIPELINE_REGIONS", "37,45")


class TestVintages:
    def test_lists_releases(self) -> None:
        with patch(f"{MODULE}._list_vintages", new_callable=AsyncMock, return_value=["2025-06-30", "2024-12-31"]):
            result = runner.invoke(app, ["pipeline", "vintages"])

        assert result.exit_code == 0
        assert result.output.index("2025-06-30") < result.output.index("2024-12-31")

    def test_empty(self) -> None:
        with patch(f"{MODULE}._list_vintages", new_callable=AsyncMock, return_value=[]):
            result = runner.invoke(app, ["pipeline", "vintages"])

        assert result.exit_code == 0
        assert "No availability releases found" in result.output

    def test_api_error_exits_1(self) -> None:
        with patch(f"{MODULE}._list_vintages", new_callable=AsyncMock, side_effect=BdcApiError("HTTP 401")):
            result = runner.invoke(app, ["pipeline", "vintages"])

        assert result.exit_code == 1


class TestDownload:
    def test_defaults_to_configured_regions(self, tmp_path: Path) -> None:
        archive = tmp_path / "bdc_45_Fiber_fixed_broadband_J25_01dec2025.zip"
        with patch(f"{MODULE}._download", new_callable=AsyncMock, return_value=[archive]) as download:
            result = runner.invoke(app, ["pipeline", "download", "2025-06-30", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0
        download.assert_awaited_once_with("2025-06-30", ["37", "45"], tmp_path)
        assert "Acquired 1 file(s)" in result.output
        assert archive.name in result.output

    def test_explicit_regions(self) -> None:
        with patch(f"{MODULE}._download", new_callable=AsyncMock, return_value=[]) as download:
            result = runner.invoke(app, ["pipeline", "download", "2025-06-30", "--region", "13", "--region", "01"])

        assert result.exit_code == 0
        assert download.await_args.args[1] == ["13", "01"]


class TestImport:
    def test_region_from_file_name(self, tmp_path: Path) -> None:
        archive = tmp_path / "bdc_45_Cable_fixed_broadband_J25_01dec2025.zip"
        archive.write_bytes(b"")
        with patch(f"{MODULE}._import_file", new_callable=AsyncMock, return_value=1234) as do_import:
            result = runner.invoke(app, ["pipeline", "import", str(archive), "2025-06-30"])

        assert result.exit_code == 0
        do_import.assert_awaited_once_with(archive, "2025-06-30", "45")
        assert "Imported 1,234 rows" in result.output

    def test_unknown_region_requires_flag(self, tmp_path: Path) -> None:
        archive = tmp_path / "availability.zip"
        archive.write_bytes(b"")
        with patch(f"{MODULE}._import_file", new_callable=AsyncMock) as do_import:
            result = runner.invoke(app, ["pipeline", "import", str(archive), "2025-06-30"])

        assert result.exit_code == 1
        do_import.assert_not_awaited()

    def test_region_flag(self, tmp_path: Path) -> None:
        archive = tmp_path / "availability.zip"
        archive.write_bytes(b"")
        with patch(f"{MODULE}._import_file", new_callable=AsyncMock, return_value=0) as do_import:
            result = runner.invoke(app, ["pipeline", "import", str(archive), "2025-06-30", "--region", "13"])

        assert result.exit_code == 0
        assert do_import.await_args.args[2] == "13"

    def test_bad_release_exits_1(self, tmp_path: Path) -> None:
        archive = tmp_path / "bdc_45_Cable_fixed_broadband_J25_01dec2025.zip"
        archive.write_bytes(b"")
        with patch(f"{MODULE}._import_file", new_callable=AsyncMock, side_effect=ValueError("Invalid release id")):
            result = runner.invoke(app, ["pipeline", "import", str(archive), "June"])

        assert result.exit_code == 1


class TestRun:
    def test_success_prints_report(self) -> None:
        report = PipelineReport(
            release="2025-06-30",
            files_acquired=3,
            rows_by_region={"37": 1000, "45": 2500},
            record_count=3500,
        )
        with patch(f"{MODULE}._run", new_callable=AsyncMock, return_value=report) as do_run:
            result = runner.invoke(app, ["pipeline", "run"])

        assert result.exit_code == 0
        do_run.assert_awaited_once_with(None, ["37", "45"])
        assert "Release 2025-06-30 is active" in result.output
        assert "3,500" in result.output

    @pytest.mark.parametrize("error", [PipelineError("No files acquired"), BdcApiError("HTTP 503")])
    def test_failure_exits_1(self, error: Exception) -> None:
        with patch(f"{MODULE}._run", new_callable=AsyncMock, side_effect=error):
            result = runner.invoke(app, ["pipeline", "run", "--release", "2025-06-30"])

        assert result.exit_code == 1


class TestFinish:
    def test_activates(self) -> None:
        with patch(f"{MODULE}._finish", new_callable=AsyncMock, return_value=42) as do_finish:
            result = runner.invoke(app, ["pipeline", "finish", "2025-06-30", "--region", "45"])

        assert result.exit_code == 0
        do_finish.assert_awaited_once_with("2025-06-30", ["45"])
        assert "Release 2025-06-30 is active with 42 rows" in result.output

    def test_nothing_loaded_exits_1(self) -> None:
        with patch(f"{MODULE}._finish", new_callable=AsyncMock, side_effect=PipelineError("No rows found")):
            result = runner.invoke(app, ["pipeline", "finish", "2025-06-30"])

        assert result.exit_code == 1

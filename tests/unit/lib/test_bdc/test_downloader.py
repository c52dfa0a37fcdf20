"""Unit tests for rate-limited, resumable file acquisition."""

from pathlib import Path

import httpx
import pytest

from broadband_api.lib.bdc import (
    BDC_BASE_URL,
    BdcClient,
    BdcFileEntry,
    RequestPacer,
    acquire_release_files,
    download_file,
    is_already_downloaded,
    minimum_expected_size,
    resolve_download_path,
)

RELEASE = "2025-06-30"
LIST_URL = f"{BDC_BASE_URL}/downloads/listAvailabilityData/{RELEASE}"


def _download_url(file_id: int) -> str:
    return f"{BDC_BASE_URL}/downloads/downloadFile/availability/{file_id}"


def _entry(file_id: int = 7, record_count: int = 100) -> BdcFileEntry:
    return BdcFileEntry(
        file_id=file_id,
        file_name=f"bdc_45_Cable_fixed_broadband_J25_{file_id}",
        state_fips="45",
        record_count=record_count,
    )


def _catalog() -> dict:
    return {
        "data": [
            {"file_id": 1, "file_name": "bdc_45_Cable_fixed_broadband_J25", "state_fips": "45", "record_count": 100},
            {
                "file_id": 2,
                "file_name": "bdc_45_FibertothePremises_fixed_broadband_J25",
                "state_fips": "45",
                "record_count": 100,
            },
            {"file_id": 3, "file_name": "bdc_45_fixed_broadband_summary_J25", "state_fips": "45", "record_count": 9},
            {"file_id": 4, "file_name": "bdc_37_Cable_fixed_broadband_J25", "state_fips": "37", "record_count": 100},
        ]
    }


class TestSizeFloor:
    """Tests for the resume size check."""

    def test_minimum_expected_size(self) -> None:
        assert minimum_expected_size(_entry(record_count=100)) == 500
        assert minimum_expected_size(_entry(record_count=0)) == 1

    def test_missing_file(self, tmp_path: Path) -> None:
        assert not is_already_downloaded(tmp_path / "nope.zip", _entry())

    def test_undersized_file(self, tmp_path: Path) -> None:
        dest = tmp_path / "f.zip"
        dest.write_bytes(b"x" * 499)
        assert not is_already_downloaded(dest, _entry(record_count=100))

    def test_valid_file(self, tmp_path: Path) -> None:
        dest = tmp_path / "f.zip"
        dest.write_bytes(b"x" * 500)
        assert is_already_downloaded(dest, _entry(record_count=100))

    def test_resolve_download_path(self) -> None:
        assert resolve_download_path(_entry(7), Path("data")) == Path("data/bdc_45_Cable_fixed_broadband_J25_7.zip")


class TestDownloadFile:
    """Tests for download_file()."""

    @pytest.mark.asyncio
    async def test_success(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=_download_url(7), content=b"z" * 600)
        dest = tmp_path / "out" / "file.zip"

        result = await download_file(BdcClient(), _entry(7), dest, pacer=RequestPacer(0))

        assert result.success
        assert result.downloaded
        assert result.attempts == 1
        assert dest.read_bytes() == b"z" * 600
        assert not dest.with_suffix(".zip.part").exists()

    @pytest.mark.asyncio
    async def test_skips_existing_valid_file(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        dest = tmp_path / "file.zip"
        dest.write_bytes(b"x" * 1000)

        result = await download_file(BdcClient(), _entry(7), dest, pacer=RequestPacer(0))

        assert result.success
        assert not result.downloaded
        assert result.attempts == 0
        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_retries_after_server_error(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=_download_url(7), status_code=503)
        httpx_mock.add_response(url=_download_url(7), content=b"z" * 600)
        dest = tmp_path / "file.zip"

        result = await download_file(BdcClient(), _entry(7), dest, pacer=RequestPacer(0), backoff_base=0)

        assert result.success
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_gives_up_and_cleans_partial_file(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        for _ in range(3):
            httpx_mock.add_exception(httpx.ReadError("connection reset"), url=_download_url(7))
        dest = tmp_path / "file.zip"

        result = await download_file(
            BdcClient(), _entry(7), dest, pacer=RequestPacer(0), attempts=3, backoff_base=0
        )

        assert not result.success
        assert result.attempts == 3
        assert result.error is not None
        assert not dest.exists()
        assert not dest.with_suffix(".zip.part").exists()


class TestAcquireReleaseFiles:
    """Tests for acquire_release_files()."""

    @pytest.mark.asyncio
    async def test_downloads_selected_files_for_region(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=LIST_URL, json=_catalog())
        httpx_mock.add_response(url=_download_url(1), content=b"a" * 600)
        httpx_mock.add_response(url=_download_url(2), content=b"b" * 600)

        files = await acquire_release_files(BdcClient(), RELEASE, ["45"], tmp_path, rate_limit_delay=0)

        assert [f.path.name for f in files] == [
            "bdc_45_Cable_fixed_broadband_J25.zip",
            "bdc_45_FibertothePremises_fixed_broadband_J25.zip",
        ]
        assert all(f.region == "45" for f in files)
        assert all(f.path.parent == tmp_path / RELEASE for f in files)

    @pytest.mark.asyncio
    async def test_rerun_makes_no_network_calls(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=LIST_URL, json=_catalog())
        httpx_mock.add_response(url=_download_url(1), content=b"a" * 600)
        httpx_mock.add_response(url=_download_url(2), content=b"b" * 600)
        client = BdcClient()

        first = await acquire_release_files(client, RELEASE, ["45"], tmp_path, rate_limit_delay=0)
        requests_after_first = len(httpx_mock.get_requests())
        second = await acquire_release_files(client, RELEASE, ["45"], tmp_path, rate_limit_delay=0)

        assert requests_after_first == 3
        assert len(httpx_mock.get_requests()) == requests_after_first
        assert second == first

    @pytest.mark.asyncio
    async def test_existing_files_skip_downloads(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=LIST_URL, json=_catalog())
        release_dir = tmp_path / RELEASE
        release_dir.mkdir()
        (release_dir / "bdc_45_Cable_fixed_broadband_J25.zip").write_bytes(b"a" * 500)
        (release_dir / "bdc_45_FibertothePremises_fixed_broadband_J25.zip").write_bytes(b"b" * 500)

        files = await acquire_release_files(BdcClient(), RELEASE, ["45"], tmp_path, rate_limit_delay=0)

        assert len(files) == 2
        assert [str(r.url) for r in httpx_mock.get_requests()] == [LIST_URL]

    @pytest.mark.asyncio
    async def test_region_without_files_is_skipped(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=LIST_URL, json=_catalog())
        httpx_mock.add_response(url=_download_url(4), content=b"c" * 600)

        files = await acquire_release_files(BdcClient(), RELEASE, ["06", "37"], tmp_path, rate_limit_delay=0)

        assert [f.region for f in files] == ["37"]

    @pytest.mark.asyncio
    async def test_failed_file_left_out(self, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        httpx_mock.add_response(url=LIST_URL, json=_catalog())
        httpx_mock.add_response(url=_download_url(4), status_code=404)

        files = await acquire_release_files(
            BdcClient(), RELEASE, ["37"], tmp_path, rate_limit_delay=0, attempts=1, backoff_base=0
        )

        assert files == []

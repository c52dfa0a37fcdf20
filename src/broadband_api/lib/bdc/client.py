"""FCC Broadband Data Collection public API client.

All calls carry the ``username`` / ``hash_value`` credential headers the BDC
requires (tokens are issued at broadbandmap.fcc.gov → Manage API Access).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from loguru import logger
from tqdm import tqdm

from broadband_api.lib.bdc.types import AsOfDate, BdcApiError, BdcFileEntry

if TYPE_CHECKING:
    from pathlib import Path

BDC_BASE_URL = "https://broadbandmap.fcc.gov/api/public/map"
USER_AGENT = "BroadbandAPI-Pipeline/1.0"
DEFAULT_TIMEOUT = 60.0


class BdcClient:
    """Thin async client for the BDC listing and download endpoints.

    The availability file listing ignores server-side state filters and is
    large, so it is fetched once per release and memoized on the instance.

    Args:
        base_url: API base URL.
        username: BDC account username.
        hash_value: BDC API token.
        timeout: Timeout in seconds for listing calls.
    """

    def __init__(
        self,
        base_url: str = BDC_BASE_URL,
        username: str | None = None,
        hash_value: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._hash_value = hash_value
        self._timeout = timeout
        self._catalogs: dict[str, list[BdcFileEntry]] = {}
        if not username or not hash_value:
            logger.warning(
                "BDC_USERNAME and/or BDC_HASH_VALUE not set; some BDC endpoints may reject unauthenticated requests"
            )

    @property
    def headers(self) -> dict[str, str]:
        """Request headers including credentials when configured."""
        headers = {"User-Agent": USER_AGENT}
        if self._username:
            headers["username"] = self._username
        if self._hash_value:
            headers["hash_value"] = self._hash_value
        return headers

    async def _get_json(self, path: str) -> dict[str, Any]:
        """GET a listing endpoint and return its JSON object.

        Raises:
            BdcApiError: On non-2xx status, transport failure, or non-object body.
        """
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                response = await client.get(url, headers=self.headers)
                response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            msg = f"BDC request {path} failed: HTTP {e.response.status_code}"
            raise BdcApiError(msg, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            msg = f"BDC request {path} failed: {e}"
            raise BdcApiError(msg) from e
        except ValueError as e:
            msg = f"BDC request {path} returned invalid JSON"
            raise BdcApiError(msg) from e

        if not isinstance(data, dict):
            msg = f"BDC request {path} returned an unexpected payload"
            raise BdcApiError(msg)
        return data

    async def list_as_of_dates(self) -> list[AsOfDate]:
        """Fetch the category-tagged release dates.

        Returns:
            All entries, unfiltered; an absent ``data`` array yields an empty list.
        """
        data = await self._get_json("listAsOfDates")
        rows = data.get("data")
        if not isinstance(rows, list):
            return []
        return [
            AsOfDate(data_type=str(row.get("data_type", "")), as_of_date=str(row.get("as_of_date", "")))
            for row in rows
            if isinstance(row, dict) and row.get("as_of_date")
        ]

    async def list_availability_files(self, release: str) -> list[BdcFileEntry]:
        """Fetch (once per release) the complete availability file catalog.

        Args:
            release: Release id, e.g. "2025-06-30".

        Returns:
            Every well-formed catalog entry for the release.
        """
        if release in self._catalogs:
            return self._catalogs[release]

        logger.info("Fetching BDC file listing for release {}", release)
        data = await self._get_json(f"downloads/listAvailabilityData/{release}")
        rows = data.get("data")
        entries: list[BdcFileEntry] = []
        if isinstance(rows, list):
            for i, raw in enumerate(rows):
                try:
                    entries.append(BdcFileEntry.from_api(raw))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed catalog entry at index {i}: {e}")

        logger.info("Total files in BDC catalog for {}: {}", release, len(entries))
        self._catalogs[release] = entries
        return entries

    def download_url(self, file_id: int) -> str:
        """Return the download URL for a catalog file id."""
        return f"{self._base_url}/downloads/downloadFile/availability/{file_id}"

    async def download_to(self, entry: BdcFileEntry, dest: Path) -> int:
        """Stream a file to ``dest`` and return the number of bytes written.

        The caller owns timeouts and partial-file cleanup.

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status.
            OSError: On local write failure.
        """
        written = 0
        async with httpx.AsyncClient(timeout=httpx.Timeout(60.0, read=300.0), follow_redirects=True) as client:  # noqa: SIM117
            async with client.stream("GET", self.download_url(entry.file_id), headers=self.headers) as response:
                response.raise_for_status()
                total = int(response.headers.get("content-length") or 0) or None

                with (
                    dest.open("wb") as f,
                    tqdm(total=total, unit="B", unit_scale=True, desc=entry.file_name, leave=False) as pbar,
                ):
                    async for chunk in response.aiter_bytes(chunk_size=65536):
                        f.write(chunk)
                        written += len(chunk)
                        pbar.update(len(chunk))
        return written

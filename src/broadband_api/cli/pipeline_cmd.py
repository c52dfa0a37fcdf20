"""FCC BDC pipeline CLI commands: discover, download, import, run, and finish."""

import asyncio
from pathlib import Path

import typer

pipeline_app = typer.Typer()


def _client():  # noqa: ANN202
    from broadband_api.core.config import get_settings
    from broadband_api.lib.bdc import BdcClient

    settings = get_settings()
    return BdcClient(
        base_url=settings.bdc_base_url,
        username=settings.bdc_username,
        hash_value=settings.bdc_hash_value,
    )


def _regions(regions: list[str] | None) -> list[str]:
    from broadband_api.core.config import get_settings

    return regions or get_settings().pipeline_region_list


@pipeline_app.command("vintages")
def list_vintages() -> None:
    """List available BDC availability releases, newest first."""
    from broadband_api.lib.bdc import BdcApiError

    try:
        vintages = asyncio.run(_list_vintages())
    except BdcApiError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    if not vintages:
        typer.echo("No availability releases found.")
        return
    for vintage in vintages:
        typer.echo(vintage)


async def _list_vintages() -> list[str]:
    from broadband_api.lib.bdc import list_available_vintages

    return await list_available_vintages(_client())


@pipeline_app.command("download")
def download(
    release: str = typer.Argument(..., help="Release id, e.g. 2025-06-30"),
    region: list[str] | None = typer.Option(None, "--region", help="State FIPS code (repeatable)"),  # noqa: B008
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Download directory"),  # noqa: B008
) -> None:
    """Download the per-technology files of a release without importing them."""
    from broadband_api.lib.bdc import BdcApiError

    try:
        paths = asyncio.run(_download(release, _regions(region), output_dir))
    except BdcApiError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Acquired {len(paths)} file(s):")
    for path in paths:
        typer.echo(f"  {path}")


async def _download(release: str, regions: list[str], output_dir: Path | None) -> list[Path]:
    from broadband_api.core.config import get_settings
    from broadband_api.lib.bdc import acquire_release_files

    settings = get_settings()
    files = await acquire_release_files(
        _client(),
        release,
        regions,
        output_dir or Path(settings.bdc_download_dir),
        rate_limit_delay=settings.bdc_rate_limit_delay,
        attempts=settings.bdc_download_attempts,
        backoff_base=settings.bdc_backoff_base,
        timeout=settings.bdc_download_timeout,
    )
    return [f.path for f in files]


@pipeline_app.command("import")
def import_file(
    file: Path = typer.Argument(..., help="Path to a BDC zip archive", exists=True),  # noqa: B008
    release: str = typer.Argument(..., help="Release id the rows belong to"),
    region: str | None = typer.Option(None, "--region", help="State FIPS code (default: from file name)"),
) -> None:
    """Load a single archive into the raw availability table.

    Rows are appended; use ``pipeline run`` to replace a region's rows.
    """
    from broadband_api.lib.bdc import region_from_filename

    region = region or region_from_filename(file.name)
    if region is None:
        typer.echo("Error: cannot infer region from file name; pass --region", err=True)
        raise typer.Exit(code=1)

    try:
        rows = asyncio.run(_import_file(file, release, region))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Imported {rows:,} rows from {file.name} (release {release}, region {region})")


async def _import_file(file: Path, release: str, region: str) -> int:
    from broadband_api.core.config import get_settings
    from broadband_api.core.database import dispose_engine, get_session_factory, init_engine
    from broadband_api.lib.ingest import ingest_archive
    from broadband_api.services.vintage_service import validate_release_id

    validate_release_id(release)
    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            result = await ingest_archive(session, file, release, region)
            await session.commit()
            return result.rows_loaded
    finally:
        await dispose_engine()


@pipeline_app.command("run")
def run(
    release: str | None = typer.Option(None, "--release", help="Release id (default: newest available)"),
    region: list[str] | None = typer.Option(None, "--region", help="State FIPS code (repeatable)"),  # noqa: B008
) -> None:
    """Run the full pipeline: discover, download, import, and activate."""
    from broadband_api.lib.bdc import BdcApiError, PipelineError

    try:
        report = asyncio.run(_run(release, _regions(region)))
    except (BdcApiError, PipelineError, ValueError) as e:
        typer.echo(f"Pipeline failed: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"\nRelease {report.release} is active:")
    typer.echo(f"  Files acquired: {report.files_acquired}")
    for region_code, rows in report.rows_by_region.items():
        typer.echo(f"  Region {region_code}:     {rows:,} rows")
    typer.echo(f"  Total rows:     {report.record_count:,}")


async def _run(release: str | None, regions: list[str]):  # noqa: ANN202
    from broadband_api.core.config import get_settings
    from broadband_api.core.database import dispose_engine, get_session_factory, init_engine
    from broadband_api.services.pipeline_service import run_pipeline

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            return await run_pipeline(
                session,
                _client(),
                regions,
                Path(settings.bdc_download_dir),
                release=release,
                rate_limit_delay=settings.bdc_rate_limit_delay,
                download_attempts=settings.bdc_download_attempts,
                backoff_base=settings.bdc_backoff_base,
                download_timeout=settings.bdc_download_timeout,
            )
    finally:
        await dispose_engine()


@pipeline_app.command("finish")
def finish(
    release: str = typer.Argument(..., help="Release id whose rows are already loaded"),
    region: list[str] | None = typer.Option(None, "--region", help="State FIPS code (repeatable)"),  # noqa: B008
) -> None:
    """Activate an already-imported release and rebuild the aggregate view."""
    from broadband_api.lib.bdc import PipelineError

    try:
        count = asyncio.run(_finish(release, _regions(region)))
    except (PipelineError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Release {release} is active with {count:,} rows")


async def _finish(release: str, regions: list[str]) -> int:
    from broadband_api.core.config import get_settings
    from broadband_api.core.database import dispose_engine, get_session_factory, init_engine
    from broadband_api.services.vintage_service import resume_activation

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    try:
        factory = get_session_factory()
        async with factory() as session:
            return await resume_activation(session, release, regions)
    finally:
        await dispose_engine()

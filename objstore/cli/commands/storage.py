"""Storage commands for S3-compatible object storage.

Every command reads its configuration from STORAGE_* environment variables
(or .env) and opens one client for the duration of the command.
"""

from __future__ import annotations

import json
import mimetypes
from pathlib import Path
import sys

import click

from objstore.cli.utils import coro, error, info, section, success, warning
from objstore.core.settings import get_storage_settings
from objstore.infra.storage import (
    BatchOutcome,
    StorageClient,
    StorageError,
    StorageFileNotFoundError,
)


def _client() -> StorageClient:
    """Build a client from environment settings or exit with an error."""
    try:
        return StorageClient(get_storage_settings())
    except StorageError as e:
        error(e.message)
        info("Set STORAGE_ACCESS_KEY, STORAGE_SECRET_KEY and STORAGE_BUCKET")
        sys.exit(1)


@click.group(name="storage")
def storage() -> None:
    """S3-compatible object storage commands.

    Upload, delete, check and presign objects in the configured bucket.
    """


@storage.command(name="info")
def info_cmd() -> None:
    """Show storage configuration.

    Credentials are reported as configured or not, never printed.
    """
    settings = get_storage_settings()

    section("Storage Configuration")

    if settings.has_custom_endpoint:
        click.echo(f"Endpoint: {settings.endpoint}")
    else:
        click.echo("Endpoint: AWS S3 (default)")
    click.echo(f"Bucket: {settings.bucket or '(not set)'}")
    click.echo(f"Region: {settings.region}")
    click.echo(f"Path-style addressing: {settings.force_path_style}")
    click.echo(f"Signature version: {settings.signature_version}")
    click.echo(f"Presigned URL expiry: {settings.presigned_url_expiry_seconds}s")
    click.echo(f"Retries: {settings.max_retries} ({settings.retry_mode})")
    click.echo(f"Follow list pagination: {settings.list_all_pages}")
    click.echo(f"Presign concurrency: {settings.presign_max_concurrency or 'unbounded'}")

    if settings.is_configured:
        success("Credentials: Configured")
    else:
        warning("Credentials: Not configured")
        info("Set STORAGE_ACCESS_KEY and STORAGE_SECRET_KEY")


@storage.command(name="upload")
@click.argument("object_id")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--key", "-k", help="Key within the object ID (default: file name)")
@click.option("--content-type", "-t", help="MIME type (default: guessed from file name)")
@coro
async def upload(
    object_id: str,
    file_path: Path,
    key: str | None,
    content_type: str | None,
) -> None:
    """Upload FILE_PATH under OBJECT_ID and print a presigned URL.

    Examples:
        objstore storage upload invoice-42 ./scan.pdf
        objstore storage upload invoice-42 ./scan.pdf --key original.pdf
    """
    key = key or file_path.name
    if content_type is None:
        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"

    info(f"Uploading {file_path} to {object_id}/{key} ({content_type})...")

    try:
        async with _client() as client:
            with file_path.open("rb") as body:
                url = await client.upload_file(object_id, key, body, content_type)
    except StorageError as e:
        error(f"Upload failed: {e.message}")
        sys.exit(1)

    success(f"Uploaded {object_id}/{key}")
    click.echo(url)


@storage.command(name="delete")
@click.argument("key")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@coro
async def delete(key: str, yes: bool) -> None:
    """Delete the object stored under KEY."""
    if not yes:
        click.confirm(f"Delete {key}?", abort=True)

    try:
        async with _client() as client:
            await client.delete_file(key)
    except StorageError as e:
        error(f"Delete failed: {e.message}")
        sys.exit(1)

    success(f"Deleted {key}")


@storage.command(name="exists")
@click.argument("key")
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on errors other than not-found instead of reporting the object as absent",
)
@coro
async def exists(key: str, strict: bool) -> None:
    """Check whether KEY exists. Exits 0 if it does, 2 if it does not."""
    try:
        async with _client() as client:
            found = await client.file_exists(key, strict=strict)
    except StorageError as e:
        error(f"Existence check failed: {e.message}")
        sys.exit(1)

    if found:
        success(f"{key} exists")
        return

    warning(f"{key} does not exist")
    sys.exit(2)


@storage.command(name="presign")
@click.argument("key")
@click.option(
    "--expires-in",
    "-e",
    type=click.IntRange(min=1),
    help="Expiration in seconds (default: STORAGE_PRESIGNED_URL_EXPIRY_SECONDS)",
)
@coro
async def presign(key: str, expires_in: int | None) -> None:
    """Print a presigned GET URL for KEY."""
    try:
        async with _client() as client:
            url = await client.get_presigned_url(key, expires_in=expires_in)
    except StorageError as e:
        error(f"Failed to generate presigned URL: {e.message}")
        sys.exit(1)

    click.echo(url)


@storage.command(name="find-key")
@click.argument("url")
@click.option("--prefix", "-p", default="", help="Only search keys under this prefix")
@coro
async def find_key(url: str, prefix: str) -> None:
    """Print the key of the object a presigned URL points at."""
    try:
        async with _client() as client:
            key = await client.find_key_by_presigned_url(url, prefix)
    except StorageFileNotFoundError:
        error(f"No object under '{prefix}' matches the given URL")
        sys.exit(2)
    except StorageError as e:
        error(f"Search failed: {e.message}")
        sys.exit(1)

    click.echo(key)


@storage.command(name="list-urls")
@click.argument("prefix", default="")
@click.option("--json", "as_json", is_flag=True, help="Print the full batch result as JSON")
@coro
async def list_urls(prefix: str, as_json: bool) -> None:
    """Print presigned URLs for every object under PREFIX, in listing order.

    Objects that could not be signed are skipped with a warning. The command
    fails only when every object failed.

    Examples:
        objstore storage list-urls invoice-42/
        objstore storage list-urls invoice-42/ --json
    """
    try:
        async with _client() as client:
            batch = await client.presign_objects(prefix)
    except StorageError as e:
        error(f"Listing failed: {e.message}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(batch.to_dict(), indent=2))
        if batch.outcome is BatchOutcome.FAILED:
            sys.exit(1)
        return

    if batch.outcome is BatchOutcome.EMPTY:
        info(f"No objects under '{prefix}'")
        return

    if batch.outcome is BatchOutcome.FAILED:
        error(f"Failed to get presigned URLs: {batch.first_error}")
        sys.exit(1)

    for url in batch.urls:
        click.echo(url)

    if batch.outcome is BatchOutcome.PARTIAL:
        warning(f"{batch.failed} out of {batch.total} presigned URLs failed to generate")
        for failure in batch.failures:
            warning(f"  {failure.key}: {failure.error}")

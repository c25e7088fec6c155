"""Utility functions for backup/restore operations."""

import asyncio
import shutil
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any

import aiofiles
from bson import json_util
from pydantic import ValidationError

from .._utils import logger, filesystem_timestamp
from .exceptions import ArchiveError, ManifestError
from .models import BackupManifest

MANIFEST_FILENAME = "backup-info.json"
ARCHIVE_SUFFIX = ".zip"
COLLECTION_SUFFIX = ".json"

# Relaxed Extended JSON keeps ObjectIds and dates typed across a round trip
JSON_OPTIONS = json_util.RELAXED_JSON_OPTIONS


def generate_backup_name(cluster: str, database: str, created_at: datetime) -> str:
    """Generate backup name.

    Returns:
        Backup name in format: {cluster}-{database}-YYYY-MM-DDTHH-MM-SS-mmmZ
    """
    return f"{cluster}-{database}-{filesystem_timestamp(created_at)}"


def is_archive(path: Path) -> bool:
    return path.suffix == ARCHIVE_SUFFIX


def _write_zip(source_dir: Path, output_path: Path) -> int:
    with zipfile.ZipFile(
        output_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
    ) as zf:
        for file_path in sorted(source_dir.rglob("*")):
            if file_path.is_file():
                zf.write(file_path, file_path.relative_to(source_dir).as_posix())
    # The archive is complete only once the ZipFile has closed
    return output_path.stat().st_size


async def create_archive(source_dir: Path, output_path: Path) -> int:
    """Create zip archive from directory contents.

    Entries are stored relative to ``source_dir``; the directory name itself
    is not part of the archive. On failure the partial archive is removed and
    ``source_dir`` is left untouched.

    Args:
        source_dir: Directory to archive
        output_path: Output .zip file path

    Returns:
        Size of created archive in bytes
    """
    logger.info(f"Creating archive: {output_path}")

    try:
        archive_size = await asyncio.to_thread(_write_zip, source_dir, output_path)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        output_path.unlink(missing_ok=True)
        raise ArchiveError(f"Failed to create archive {output_path}: {e}") from e

    logger.info(f"Archive created: {archive_size:,} bytes")
    return archive_size


def _extract_zip(archive_path: Path, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive_path, "r") as zf:
        zf.extractall(output_dir)


async def extract_archive(archive_path: Path, output_dir: Path) -> None:
    """Extract zip archive to directory.

    Args:
        archive_path: Path to .zip archive
        output_dir: Directory to extract to
    """
    logger.info(f"Extracting archive: {archive_path} to {output_dir}")

    try:
        await asyncio.to_thread(_extract_zip, archive_path, output_dir)
    except (OSError, zipfile.BadZipFile) as e:
        raise ArchiveError(f"Failed to extract archive {archive_path}: {e}") from e

    logger.info("Archive extracted successfully")


async def remove_path(path: Path) -> None:
    """Delete an archive file or a backup directory tree."""
    if path.is_dir():
        await asyncio.to_thread(shutil.rmtree, path)
    else:
        await asyncio.to_thread(path.unlink)


def dumps_extended(data: Any) -> str:
    return json_util.dumps(data, json_options=JSON_OPTIONS, indent=2)


def loads_extended(text: str) -> Any:
    return json_util.loads(text, json_options=JSON_OPTIONS)


async def write_text(path: Path, text: str) -> None:
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(text)


async def read_text(path: Path) -> str:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        return await f.read()


async def save_manifest(manifest: BackupManifest, output_path: Path) -> None:
    """Save manifest JSON to file.

    Args:
        manifest: Backup manifest
        output_path: Output file path
    """
    await write_text(output_path, manifest.model_dump_json(by_alias=True, indent=2))
    logger.debug(f"Manifest saved: {output_path}")


async def load_manifest(manifest_path: Path) -> BackupManifest:
    """Load manifest JSON from file.

    Args:
        manifest_path: Manifest file path

    Returns:
        Parsed manifest

    Raises:
        ManifestError: If the file is missing, unreadable or not a valid manifest
    """
    try:
        text = await read_text(manifest_path)
        manifest = BackupManifest.model_validate_json(text)
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        raise ManifestError(f"Cannot load manifest {manifest_path}: {e}") from e

    logger.debug(f"Manifest loaded: {manifest_path}")
    return manifest

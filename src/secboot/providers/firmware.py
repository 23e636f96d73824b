# firmware.py
# Download + self-extract of NXP EULA-gated firmware packages.
from __future__ import annotations

import os
import shutil
import stat
import tempfile
import urllib.error
import urllib.request
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

from ..errors import ExternalToolError, FirmwareError
from ..ui.console import Console, get_console
from .process import CommandRunner, run_command

CHUNK_SIZE = 1024 * 1024


def archive_name(url: str) -> str:
    name = Path(urlparse(url).path).name
    if not name:
        raise FirmwareError("download", f"Cannot derive a file name from URL: {url}")
    return name


def extracted_dir_for(archive: Path) -> Path:
    # firmware-imx-8.21.bin extracts into firmware-imx-8.21/
    return archive.with_suffix("")


class EulaFirmwareFetcher:
    """Fetch self-extracting firmware archives and unpack them."""

    def __init__(
        self,
        runner: CommandRunner = run_command,
        console: Optional[Console] = None,
        opener: Callable = urllib.request.urlopen,
    ):
        self._run = runner
        self._open = opener
        self.console = console or get_console()

    def download(self, url: str, dest_dir: Path) -> Path:
        """
        Download url into dest_dir, keeping the URL's file name.

        Skipped when the target file already exists. Data goes to a temporary
        file first so an interrupted download never looks complete.
        """
        dest_dir = Path(dest_dir)
        target = dest_dir / archive_name(url)
        if target.is_file():
            self.console.info(f"Firmware package already present: {target.name}")
            return target

        dest_dir.mkdir(parents=True, exist_ok=True)
        self.console.info(f"Downloading {url}")
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(dest_dir))
        try:
            with os.fdopen(fd, "wb") as out, self._open(url) as response:
                shutil.copyfileobj(response, out, CHUNK_SIZE)
            os.replace(tmp_name, target)
        except (urllib.error.URLError, OSError) as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FirmwareError("download", f"Could not download {url}: {e}") from e

        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return target

    def self_extract(self, archive: Path, accept_eula: bool = False) -> Path:
        """
        Run the self-extracting archive, accepting its EULA.

        Raises:
            FirmwareError: accept_eula not set, or the extractor failed
        """
        archive = Path(archive)
        extracted = extracted_dir_for(archive)
        if extracted.is_dir():
            self.console.info(f"Firmware already extracted: {extracted.name}")
            return extracted
        if not accept_eula:
            raise FirmwareError(archive.name, f"Refusing to extract {archive.name} without EULA acceptance")
        if not archive.is_file():
            raise FirmwareError(archive.name, f"Archive not found: {archive}")

        archive.chmod(archive.stat().st_mode | stat.S_IXUSR)
        try:
            self._run([str(archive), "--auto-accept"], cwd=archive.parent, console=self.console)
        except ExternalToolError as e:
            raise FirmwareError(
                archive.name, f"Extraction failed: {e.message}", exit_code=e.exit_code, output=e.output
            ) from e
        if not extracted.is_dir():
            raise FirmwareError(archive.name, f"Extraction did not create {extracted.name}/")
        return extracted

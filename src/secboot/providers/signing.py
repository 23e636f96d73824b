# signing.py
# SPSDK-backed key management, SRK table computation and AHAB packaging.
# Everything runs inside a dedicated virtualenv under the workspace.
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..errors import ExternalToolError, MissingDependency
from ..deps import TOOL_HINTS
from ..ui.console import Console, get_console
from .process import CommandRunner, run_command

SPSDK_REQUIREMENT = "spsdk[examples]"
VENV_DIRNAME = "spsdk-venv"
SRKH_MARKER = "SRKH="

# Executed with the venv interpreter: argv = [table_path, pub0, pub1, ...]
SRK_TABLE_SCRIPT = """
import sys
from spsdk.crypto.utils import extract_public_key
from spsdk.image.ahab.ahab_srk import SRKTable
from spsdk.utils.misc import write_file

table_path, keys = sys.argv[1], sys.argv[2:]
srk = SRKTable()
for key in keys:
    print(f"Loading SRK key: {key}")
    srk.add_record(extract_public_key(key))
srk.update_fields()
print(srk)
write_file(srk.export(), table_path, mode="wb")
print(f"SRK table saved to: {table_path}")
print("SRKH=" + srk.compute_srk_hash().hex())
"""


def srkh_fuse_words(digest: bytes) -> List[int]:
    """Split the SRK hash into little-endian 32-bit OTP fuse words."""
    if len(digest) % 4:
        raise ValueError(f"SRK hash length must be a multiple of 4, got {len(digest)}")
    return [int.from_bytes(digest[i:i + 4], byteorder="little") for i in range(0, len(digest), 4)]


def _bin_dir(venv: Path) -> Path:
    return venv / ("Scripts" if os.name == "nt" else "bin")


class SpsdkSigningProvider:
    """Signing/packaging operations delegated to nxpcrypto / nxpimage."""

    def __init__(
        self,
        workdir: Path,
        runner: CommandRunner = run_command,
        console: Optional[Console] = None,
        base_python: str = sys.executable,
    ):
        self.workdir = Path(workdir)
        self.venv = self.workdir / VENV_DIRNAME
        self._run = runner
        self._base_python = base_python
        self.console = console or get_console()

    # ------------------------------------------------------------------
    # environment
    # ------------------------------------------------------------------

    def tool(self, name: str) -> Path:
        return _bin_dir(self.venv) / name

    @property
    def python(self) -> Path:
        return self.tool("python")

    def _tools_installed(self) -> bool:
        return self.tool("nxpimage").exists() and self.tool("nxpcrypto").exists()

    def _call(self, argv: Sequence[str]) -> str:
        return self._run([str(a) for a in argv], cwd=self.workdir, console=self.console)

    def prepare(self, upgrade: bool = False) -> None:
        """
        Create the venv and install SPSDK into it.

        With upgrade=False an existing installation is reused as-is.
        """
        if not self.venv.is_dir():
            self.console.info(f"Creating virtualenv {self.venv}")
            self._call([self._base_python, "-m", "venv", str(self.venv)])

        if upgrade or not self._tools_installed():
            self.console.info(f"Installing {SPSDK_REQUIREMENT}")
            self._call([self.python, "-m", "pip", "install", "-U", SPSDK_REQUIREMENT])

        for name in ("nxpimage", "nxpcrypto"):
            if not self.tool(name).exists():
                raise MissingDependency(name, hint=TOOL_HINTS.get(name))
        self._call([self.tool("nxpimage"), "--version"])
        self._call([self.tool("nxpcrypto"), "--version"])

    # ------------------------------------------------------------------
    # keys
    # ------------------------------------------------------------------

    def generate_key_pair(self, curve: str, private_path: Path) -> Tuple[Path, Path]:
        private_path = Path(private_path)
        self._call([self.tool("nxpcrypto"), "key", "generate", "-k", curve, "-o", private_path, "--force"])
        return private_path, private_path.with_suffix(".pub")

    def verify_key_pair(self, private_path: Path, public_path: Path) -> bool:
        try:
            self._call([self.tool("nxpcrypto"), "key", "verify", "-k1", private_path, "-k2", public_path])
        except ExternalToolError as e:
            self.console.warn(f"Key pair mismatch: {Path(private_path).name} / {Path(public_path).name} ({e.message})")
            return False
        return True

    def compute_srk_table(self, public_keys: Sequence[Path], table_path: Path) -> bytes:
        """
        Build the SRK table from public_keys and write it to table_path.

        Returns:
            The SRK hash (the value to burn into the SRKH fuses)
        """
        out = self._call([self.python, "-c", SRK_TABLE_SCRIPT, table_path, *public_keys])
        for text in reversed(out.splitlines()):
            if text.startswith(SRKH_MARKER):
                return bytes.fromhex(text[len(SRKH_MARKER):].strip())
        raise ExternalToolError("python", "SRK table computation did not report a hash", output=out[-4000:])

    # ------------------------------------------------------------------
    # packaging
    # ------------------------------------------------------------------

    def export_container(self, config_path: Path) -> None:
        self._call([self.tool("nxpimage"), "-v", "ahab", "export", "-c", config_path])

    def export_bootable_image(self, config_path: Path, output: Path) -> Path:
        self._call([self.tool("nxpimage"), "bootable-image", "export", "--config", config_path, "--output", output])
        return Path(output)

    def verify_bootable_image(self, binary: Path, family: str, revision: str, media: str) -> None:
        self._call([
            self.tool("nxpimage"), "-vv", "bootable-image", "verify",
            "--family", family,
            "--revision", revision,
            "--mem-type", media,
            "--binary", binary,
        ])

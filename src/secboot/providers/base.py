# base.py
# Contracts the steps rely on. Production classes live next door; tests
# substitute fakes that record calls and drop canned artifacts.
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple


class ToolchainProvider(Protocol):
    def clone(self, repo_url: str, dest: Path) -> Path: ...

    def run(self, local_dir: Path, argv: Sequence[str], env: Optional[Dict[str, str]] = None) -> str: ...

    def build(
        self,
        local_dir: Path,
        commands: Sequence[Sequence[str]],
        outputs: Sequence[str] = (),
        *,
        env: Optional[Dict[str, str]] = None,
        unset_env: Sequence[str] = (),
    ) -> List[Path]: ...


class FirmwareProvider(Protocol):
    def download(self, url: str, dest_dir: Path) -> Path: ...

    def self_extract(self, archive: Path, accept_eula: bool = False) -> Path: ...


class SigningProvider(Protocol):
    def prepare(self, upgrade: bool = False) -> None: ...

    def generate_key_pair(self, curve: str, private_path: Path) -> Tuple[Path, Path]: ...

    def verify_key_pair(self, private_path: Path, public_path: Path) -> bool: ...

    def compute_srk_table(self, public_keys: Sequence[Path], table_path: Path) -> bytes: ...

    def export_container(self, config_path: Path) -> None: ...

    def export_bootable_image(self, config_path: Path, output: Path) -> Path: ...

    def verify_bootable_image(self, binary: Path, family: str, revision: str, media: str) -> None: ...

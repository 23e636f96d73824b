"""Recording stand-ins for the external collaborators.

Each fake leaves behind the files the real tool would, so the runner's
precondition and output checks behave as they do in production.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import yaml

from secboot.providers.firmware import archive_name, extracted_dir_for
from secboot.steps.stage import DDR_FILES, DDR_SUBDIR, ELE_CONTAINER


class FakeToolchain:
    def __init__(self) -> None:
        self.calls: List[Tuple] = []
        self.clones: List[str] = []

    def clone(self, repo_url: str, dest: Path) -> Path:
        dest = Path(dest)
        if not dest.is_dir():
            self.clones.append(repo_url)
            dest.mkdir(parents=True)
        self.calls.append(("clone", repo_url, dest.name))
        return dest

    def run(self, local_dir: Path, argv: Sequence[str], env: Optional[Dict[str, str]] = None) -> str:
        self.calls.append(("run", Path(local_dir).name, tuple(argv)))
        return ""

    def build(self, local_dir, commands, outputs=(), *, env=None, unset_env=()):
        local_dir = Path(local_dir)
        self.calls.append(("build", local_dir.name, tuple(tuple(c) for c in commands), tuple(unset_env)))
        produced = []
        for rel in outputs:
            p = local_dir / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(b"\x00" * 16)
            produced.append(p)
        return produced


class FakeFirmware:
    def __init__(self) -> None:
        self.downloads: List[str] = []
        self.extractions: List[str] = []

    def download(self, url: str, dest_dir: Path) -> Path:
        target = Path(dest_dir) / archive_name(url)
        if not target.exists():
            self.downloads.append(url)
            target.write_bytes(b"#!/bin/sh\n")
        return target

    def self_extract(self, archive: Path, accept_eula: bool = False) -> Path:
        assert accept_eula
        out = extracted_dir_for(Path(archive))
        if out.is_dir():
            return out
        self.extractions.append(Path(archive).name)
        ddr = out / DDR_SUBDIR
        ddr.mkdir(parents=True)
        for name in DDR_FILES:
            (ddr / name).write_bytes(b"ddr")
        (out / ELE_CONTAINER).write_bytes(b"ele")
        return out


class FakeSigning:
    SRK_HASH = bytes(range(64))

    def __init__(self) -> None:
        self.calls: List[Tuple] = []

    def prepare(self, upgrade: bool = False) -> None:
        self.calls.append(("prepare", upgrade))

    def generate_key_pair(self, curve: str, private_path: Path):
        private_path = Path(private_path)
        public_path = private_path.with_suffix(".pub")
        private_path.write_text("private")
        public_path.write_text("public")
        self.calls.append(("generate", curve, private_path.name))
        return private_path, public_path

    def verify_key_pair(self, private_path: Path, public_path: Path) -> bool:
        self.calls.append(("verify", Path(private_path).name, Path(public_path).name))
        return True

    def compute_srk_table(self, public_keys, table_path: Path) -> bytes:
        Path(table_path).write_bytes(b"srk")
        self.calls.append(("srk_table", tuple(Path(k).name for k in public_keys)))
        return self.SRK_HASH

    def export_container(self, config_path: Path) -> None:
        config_path = Path(config_path)
        cfg = yaml.safe_load(config_path.read_text())
        out = (config_path.parent / cfg["output"]).resolve()
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(b"container")
        self.calls.append(("export_container", config_path.name))

    def export_bootable_image(self, config_path: Path, output: Path) -> Path:
        Path(output).write_bytes(b"image")
        self.calls.append(("export_bootable_image", Path(config_path).name, Path(output).name))
        return Path(output)

    def verify_bootable_image(self, binary: Path, family: str, revision: str, media: str) -> None:
        self.calls.append(("verify_bootable_image", Path(binary).name, family, revision, media))

    def names(self) -> List[str]:
        return [c[0] for c in self.calls]


class RecordingRunner:
    """Stands in for providers.process.run_command."""

    def __init__(self, output: str = "", fail_on: Optional[str] = None) -> None:
        self.commands: List[Tuple[str, ...]] = []
        self.output = output
        self.fail_on = fail_on

    def __call__(self, argv, *, cwd=None, env=None, unset_env=(), console=None) -> str:
        from secboot.errors import ExternalToolError

        argv = tuple(str(a) for a in argv)
        self.commands.append(argv)
        if self.fail_on and self.fail_on in argv:
            raise ExternalToolError(Path(argv[0]).name, "boom", exit_code=2, output="error output")
        return self.output

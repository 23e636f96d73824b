# steps/stage.py
# Step 3: fetch the EULA firmware packages and stage every binary the
# AHAB containers are built from into inputs/.
from __future__ import annotations

import shutil

from ..errors import FirmwareError
from ..model import Artifact, Step
from .build import BL31, UBOOT_BIN, UBOOT_SPL_BIN
from .context import StepContext

DDR_FILES = (
    "lpddr4_imem_1d_v202201.bin",
    "lpddr4_imem_2d_v202201.bin",
    "lpddr4_dmem_1d_v202201.bin",
    "lpddr4_dmem_2d_v202201.bin",
)
DDR_SUBDIR = "firmware/ddr/synopsys"
ELE_CONTAINER = "mx93a1-ahab-container.img"

STAGED_BUILD_OUTPUTS = {
    BL31: "inputs/bl31.bin",
    UBOOT_BIN: "inputs/u-boot.bin",
    UBOOT_SPL_BIN: "inputs/u-boot-spl.bin",
}

STAGED_INPUTS = tuple(STAGED_BUILD_OUTPUTS.values()) + tuple(f"inputs/{n}" for n in DDR_FILES) + (
    f"inputs/{ELE_CONTAINER}",
)


def download_and_stage(ctx: StepContext) -> None:
    ws = ctx.workspace

    ctx.console.header("Download DDR firmware (EULA)")
    ddr_archive = ctx.firmware.download(ctx.config.ddr_url, ws.root)
    ddr_dir = ctx.firmware.self_extract(ddr_archive, accept_eula=True)

    ctx.console.header("Download ELE firmware container (EULA)")
    ele_archive = ctx.firmware.download(ctx.config.ele_url, ws.root)
    ele_dir = ctx.firmware.self_extract(ele_archive, accept_eula=True)

    ctx.console.header("Copy required binaries into inputs/")
    for src, dst in STAGED_BUILD_OUTPUTS.items():
        shutil.copyfile(ws.path(src), ws.path(dst))

    ddr_src = ddr_dir / DDR_SUBDIR
    missing = [n for n in DDR_FILES if not (ddr_src / n).is_file()]
    if missing:
        raise FirmwareError(ddr_archive.name, f"DDR file missing: {ws.relative(ddr_src)}/{missing[0]}")
    for name in DDR_FILES:
        shutil.copyfile(ddr_src / name, ws.inputs / name)

    ele_src = ele_dir / ELE_CONTAINER
    if not ele_src.is_file():
        raise FirmwareError(ele_archive.name, "Missing ELE container after EULA extraction")
    shutil.copyfile(ele_src, ws.inputs / ELE_CONTAINER)


DOWNLOAD_STEP = Step(
    id=3,
    name="download",
    title="Download DDR+ELE, stage inputs/",
    flag="download",
    action=download_and_stage,
    requires=(
        Artifact(BL31, 1),
        Artifact(UBOOT_BIN, 2),
        Artifact(UBOOT_SPL_BIN, 2),
    ),
    produces=STAGED_INPUTS,
)

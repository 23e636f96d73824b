# steps/build.py
# Steps 1 and 2: cross-compile ARM Trusted Firmware and U-Boot.
from __future__ import annotations

import os

from ..config import defconfig_for
from ..deps import executable
from ..model import Step
from .context import StepContext

ATF_REPO = "https://github.com/nxp-imx/imx-atf/"
UBOOT_REPO = "https://github.com/nxp-imx/uboot-imx"

ATF_DIR = "imx-atf"
UBOOT_DIR = "uboot-imx"

BL31 = f"{ATF_DIR}/build/imx93/release/bl31.bin"
UBOOT_BIN = f"{UBOOT_DIR}/u-boot.bin"
UBOOT_SPL_BIN = f"{UBOOT_DIR}/spl/u-boot-spl.bin"

UBOOT_OPTIONS = ("CONFIG_AHAB_BOOT", "CONFIG_CONSOLE_MUX")

CROSS_TOOLS = (
    executable("git"),
    executable("make"),
    executable("gcc"),
    executable("aarch64-linux-gnu-gcc"),
    executable("aarch64-linux-gnu-objcopy"),
)
UBOOT_TOOLS = CROSS_TOOLS + (executable("bc"), executable("bison"), executable("flex"))


def build_atf(ctx: StepContext) -> None:
    src = ctx.toolchain.clone(ATF_REPO, ctx.workspace.path(ATF_DIR))
    # the ATF makefile breaks on a host LDFLAGS
    ctx.toolchain.build(
        src,
        [["make", "PLAT=imx93", "bl31"]],
        outputs=["build/imx93/release/bl31.bin"],
        unset_env=("LDFLAGS",),
    )


def build_uboot(ctx: StepContext) -> None:
    defconfig = defconfig_for(ctx.config.board)
    ctx.console.info(f"Board target: {ctx.config.board.value} -> {defconfig}")
    src = ctx.toolchain.clone(UBOOT_REPO, ctx.workspace.path(UBOOT_DIR))

    ctx.toolchain.build(src, [["make", defconfig]])

    config_script = src / "scripts" / "config"
    if config_script.is_file() and os.access(config_script, os.X_OK):
        for option in UBOOT_OPTIONS:
            ctx.toolchain.run(src, ["./scripts/config", "--enable", option])
    else:
        ctx.console.warn(f"{UBOOT_DIR}/scripts/config not found or not executable; skipping CONFIG_ toggles")

    ctx.toolchain.build(
        src,
        [["make", "olddefconfig"], ["make", f"-j{os.cpu_count() or 1}"]],
        outputs=["u-boot.bin", "spl/u-boot-spl.bin"],
    )


ATF_STEP = Step(
    id=1,
    name="atf",
    title="Build ARM Trusted Firmware (imx-atf)",
    flag="atf",
    action=build_atf,
    produces=(BL31,),
    tools=CROSS_TOOLS,
)

UBOOT_STEP = Step(
    id=2,
    name="uboot",
    title="Build U-Boot (uboot-imx) [EVK/FRDM]",
    flag="uboot",
    action=build_uboot,
    produces=(UBOOT_BIN, UBOOT_SPL_BIN),
    tools=UBOOT_TOOLS,
)

"""End-to-end runs of the real step registry against fake providers."""

import yaml

from secboot.errors import PreconditionError
from secboot.model import BoardVariant, BootMedia, StepStatus
from secboot.runner import run_pipeline
from secboot.steps.configs import ATF_CONFIG, BOOTABLE_CONFIG, SPL_CONFIG
from secboot.steps.export import SIGNED_IMAGE
from secboot.steps.keys import SRK_PUBLIC_KEYS, SRK_TABLE


def test_full_run_frdm_emmc(make_ctx, registry):
    ctx = make_ctx(board=BoardVariant.FRDM, media=BootMedia.EMMC)
    report = run_pipeline(registry, [1, 2, 3, 4, 5, 6, 7], ctx)

    assert report.ok, report.error
    assert report.statuses[7] is StepStatus.COMPLETED
    assert ctx.workspace.exists(SIGNED_IMAGE)
    assert ("verify_bootable_image", "signed-sd-flash.bin", "mimx9352", "a1", "emmc") in ctx.signing.calls

    builds = [c for c in ctx.toolchain.calls if c[0] == "build" and c[1] == "uboot-imx"]
    assert builds[0][2] == (("make", "imx93_11x11_frdm_defconfig"),)

    bootable = yaml.safe_load(ctx.workspace.path(BOOTABLE_CONFIG).read_text())
    assert bootable["memory_type"] == "emmc"


def test_signing_call_order(make_ctx, registry):
    ctx = make_ctx()
    run_pipeline(registry, None, ctx)
    names = ctx.signing.names()
    assert names.index("generate") < names.index("srk_table") < names.index("export_container")
    assert names.index("export_bootable_image") < names.index("verify_bootable_image")
    assert ("prepare", True) in ctx.signing.calls  # step 4 upgrades
    assert ctx.signing.calls.count(("verify", "srk0.pem", "srk0.pub")) == 1


def test_atf_build_drops_ldflags(make_ctx, registry):
    ctx = make_ctx()
    run_pipeline(registry, [1], ctx)
    build = [c for c in ctx.toolchain.calls if c[0] == "build"][0]
    assert build[2] == (("make", "PLAT=imx93", "bl31"),)
    assert build[3] == ("LDFLAGS",)


def test_second_run_is_idempotent(make_ctx, registry):
    ctx = make_ctx()
    assert run_pipeline(registry, None, ctx).ok
    first_image = ctx.workspace.path(SIGNED_IMAGE)

    ctx2 = make_ctx()
    ctx2.toolchain = ctx.toolchain
    ctx2.firmware = ctx.firmware
    assert run_pipeline(registry, None, ctx2).ok

    assert len(ctx.toolchain.clones) == 2
    assert len(ctx.firmware.downloads) == 2
    assert len(ctx.firmware.extractions) == 2
    assert ctx2.workspace.path(SIGNED_IMAGE) == first_image


def test_yaml_only_on_empty_workspace(make_ctx, registry):
    ctx = make_ctx()
    report = run_pipeline(registry, [6], ctx)

    assert report.statuses == {6: StepStatus.COMPLETED}
    for rel in (SPL_CONFIG, ATF_CONFIG, BOOTABLE_CONFIG):
        assert ctx.workspace.exists(rel)
    assert ctx.workspace.path("outputs/spl_img").is_dir()
    assert ctx.workspace.path("outputs/atf_img").is_dir()

    spl = yaml.safe_load(ctx.workspace.path(SPL_CONFIG).read_text())
    assert spl["family"] == "mimx9352"
    assert spl["containers"][0] == {"binary_container": {"path": "inputs/mx93a1-ahab-container.img"}}
    assert spl["containers"][1]["container"]["srk_table"]["srk_array"] == list(SRK_PUBLIC_KEYS)
    assert yaml.safe_load(ctx.workspace.path(BOOTABLE_CONFIG).read_text())["memory_type"] == "sd"


def test_all_no_keys_with_empty_keys_dir(make_ctx, registry):
    ctx = make_ctx(skip_keygen=True)
    report = run_pipeline(registry, None, ctx)

    assert report.statuses[5] is StepStatus.SKIPPED
    assert report.statuses[6] is StepStatus.COMPLETED
    assert report.statuses[7] is StepStatus.FAILED
    assert isinstance(report.error, PreconditionError)
    assert report.error.producer_id == 5
    assert "keys/srk0.pem" in report.error.missing
    assert "generate" not in ctx.signing.names()
    # the packaging provider was never reached
    assert "export_container" not in ctx.signing.names()


def test_all_no_keys_with_existing_keys(make_ctx, registry):
    ctx = make_ctx(skip_keygen=True)
    for i in range(4):
        ctx.workspace.path(f"keys/srk{i}.pem").write_text("k")
        ctx.workspace.path(f"keys/srk{i}.pub").write_text("k")
    report = run_pipeline(registry, None, ctx)
    assert report.ok
    assert report.statuses[5] is StepStatus.SKIPPED
    assert not ctx.workspace.exists(SRK_TABLE)


def test_export_alone_fails_before_signing(make_ctx, registry):
    ctx = make_ctx()
    report = run_pipeline(registry, [7], ctx)
    assert report.statuses[7] is StepStatus.FAILED
    assert isinstance(report.error, PreconditionError)
    assert report.error.producer_id == 3
    assert ctx.signing.calls == []


def test_keys_step_writes_srk_table(make_ctx, registry, capsys):
    ctx = make_ctx()
    report = run_pipeline(registry, [5], ctx)
    assert report.ok
    assert ctx.workspace.exists(SRK_TABLE)
    out = capsys.readouterr().out
    assert "SRKH[0] = 0x03020100" in out
    assert "SRKH[15] = 0x3F3E3D3C" in out

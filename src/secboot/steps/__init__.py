from .build import ATF_STEP, UBOOT_STEP
from .configs import YAML_STEP
from .context import StepContext
from .export import EXPORT_STEP
from .keys import KEYS_STEP, SPSDK_STEP
from .stage import DOWNLOAD_STEP

STEPS = (
    ATF_STEP,
    UBOOT_STEP,
    DOWNLOAD_STEP,
    SPSDK_STEP,
    KEYS_STEP,
    YAML_STEP,
    EXPORT_STEP,
)

__all__ = ["STEPS", "StepContext"]

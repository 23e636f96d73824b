__version__ = "6.7.0"

from .config import resolve
from .model import BoardVariant, BootMedia, PipelineConfig, Step, StepStatus
from .registry import StepRegistry, default_registry
from .runner import run_pipeline

__all__ = [
    "__version__",
    "resolve",
    "BoardVariant",
    "BootMedia",
    "PipelineConfig",
    "Step",
    "StepStatus",
    "StepRegistry",
    "default_registry",
    "run_pipeline",
]

"""核心模块包。

图像引擎适配、编辑应用以及单图转换和动画合并两条管线。
"""

from .cancellation import CancellationToken
from .edits import apply_edits, compute_target_size
from .engine import (
    DISPOSE_RESTORE_BACKGROUND,
    Frame,
    FrameCollection,
    ImageEngine,
    PillowEngine,
)
from .merge_pipeline import AnimationMergePipeline
from .single_pipeline import SingleImagePipeline


__all__ = [
    "DISPOSE_RESTORE_BACKGROUND",
    "AnimationMergePipeline",
    "CancellationToken",
    "Frame",
    "FrameCollection",
    "ImageEngine",
    "PillowEngine",
    "SingleImagePipeline",
    "apply_edits",
    "compute_target_size",
]

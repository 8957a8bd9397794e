"""编辑应用模块。

对单帧按固定顺序应用编辑：先旋转，再调整尺寸。
质量和目标格式由管线设置，不在这里处理。
"""

from ..models.edit_spec import EditSpec, NoResize, PercentResize, PixelResize, ResizeMode
from .engine import Frame, ImageEngine, fit_size


def compute_target_size(
    size: tuple[int, int], resize: ResizeMode
) -> tuple[int, int]:
    """计算尺寸调整后的结果尺寸

    Args:
        size: 源尺寸 (宽, 高)
        resize: 尺寸调整方式

    Returns:
        tuple: 调整后的尺寸，无需调整时与源尺寸相同
    """
    width, height = size
    match resize:
        case PercentResize(percent=percent):
            factor = percent / 100
            return max(1, round(width * factor)), max(1, round(height * factor))
        case PixelResize(width=None, height=None):
            return size
        case PixelResize(width=box_w, height=box_h, lock_ratio=True):
            # 未指定的维度使用源尺寸，由等比适配推导
            return fit_size(size, (box_w or width, box_h or height))
        case PixelResize(width=target_w, height=target_h):
            return target_w or width, target_h or height
        case _:
            return size


def apply_edits(engine: ImageEngine, frame: Frame, edits: EditSpec) -> None:
    """对单帧应用旋转和尺寸调整，原地修改帧"""
    if edits.has_rotation:
        engine.rotate(frame, edits.rotation_degrees)

    match edits.resize:
        case NoResize():
            return
        case PixelResize(width=None, height=None):
            return
        case PixelResize(width=box_w, height=box_h, lock_ratio=True):
            width, height = frame.size
            engine.resize(frame, box_w or width, box_h or height, keep_aspect=True)
        case resize:
            target_w, target_h = compute_target_size(frame.size, resize)
            engine.resize(frame, target_w, target_h)

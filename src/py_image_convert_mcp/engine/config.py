"""任务构建器模块。

把界面（或宿主）当前的配置值构建为不可变的 ConversionJob 快照，集成参数验证。
"""

from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..config import AppConfig, get_config
from ..exceptions import ValidationError
from ..models.constants import FormatCatalog
from ..models.conversion_job import ConversionJob, ImageItem
from ..models.edit_spec import EditSpec, NoResize, PercentResize, PixelResize
from ..utils.logging_helpers import get_logger


logger = get_logger()


class JobBuilder:
    """转换任务构建器

    提供统一的任务构建接口和参数验证。
    """

    def __init__(self, app_config: AppConfig | None = None):
        self.defaults = (app_config or get_config()).conversion

    def build(
        self,
        items: Sequence[ImageItem],
        target_format: str | None = None,
        quality: int | None = None,
        rotation_degrees: int = 0,
        resize_mode: str = "none",
        resize_percent: int = 100,
        resize_width: int | None = None,
        resize_height: int | None = None,
        lock_ratio: bool = True,
        bundle_as_zip: bool = False,
        merge_to_animation: bool = False,
        frame_delay_ms: int | None = None,
    ) -> ConversionJob:
        """构建任务快照

        Args:
            items: 输入图片（按顺序）
            target_format: 目标格式，None 使用默认格式
            quality: 输出质量 1-100，None 使用默认质量
            rotation_degrees: 旋转角度，任意整数
            resize_mode: none / percent / pixels
            resize_percent: 百分比模式的缩放比例 1-200
            resize_width: 像素模式的宽度
            resize_height: 像素模式的高度
            lock_ratio: 像素模式是否锁定宽高比
            bundle_as_zip: 是否打包为 zip
            merge_to_animation: 是否合并为动画
            frame_delay_ms: 动画帧间隔（毫秒），None 使用默认值

        Returns:
            ConversionJob: 不可变的任务快照

        Raises:
            ValidationError: 参数验证失败
        """
        if not items:
            raise ValidationError("没有可转换的图片")

        descriptor = FormatCatalog.get(target_format or self.defaults.TARGET_FORMAT)

        try:
            edits = EditSpec(
                rotation_degrees=rotation_degrees,
                resize=self._build_resize(
                    resize_mode, resize_percent, resize_width, resize_height, lock_ratio
                ),
                quality=quality if quality is not None else self.defaults.QUALITY,
            )
            job = ConversionJob(
                items=tuple(items),
                target_format=descriptor,
                edits=edits,
                merge_to_animation=merge_to_animation,
                animation_frame_delay_ms=(
                    frame_delay_ms
                    if frame_delay_ms is not None
                    else self.defaults.FRAME_DELAY_MS
                ),
                bundle_as_zip=bundle_as_zip,
            )
        except PydanticValidationError as e:
            raise ValidationError(self._format_validation_error(e)) from e

        if merge_to_animation and not descriptor.supports_animation_merge:
            logger.info(f"{descriptor.key} 不支持动画合并，按逐文件转换处理")

        return job

    def _build_resize(
        self,
        mode: str,
        percent: int,
        width: int | None,
        height: int | None,
        lock_ratio: bool,
    ) -> Any:
        match mode.lower():
            case "none" | "":
                return NoResize()
            case "percent":
                return PercentResize(percent=percent)
            case "pixels":
                return PixelResize(width=width, height=height, lock_ratio=lock_ratio)
            case _:
                raise ValidationError(
                    f"不支持的尺寸调整方式: {mode}，可选值: none, percent, pixels"
                )

    def _format_validation_error(self, error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)

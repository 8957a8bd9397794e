"""图像格式目录定义。

静态的格式能力表：扩展名、MIME 类型、是否支持多帧、是否可合并为动画。
所有能力判断都通过查表完成，不在调用方分散判断。
"""

from typing import Final

from pydantic import BaseModel, ConfigDict, Field


FALLBACK_EXTENSION: Final[str] = "dat"
FALLBACK_MIME_TYPE: Final[str] = "application/octet-stream"


class FormatDescriptor(BaseModel):
    """单个输出格式的描述信息"""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="格式标识（大写）")
    mime_type: str = Field(description="MIME 类型")
    file_extension: str = Field(description="文件扩展名（不含点）")
    is_multi_frame: bool = Field(False, description="是否可输出多帧")
    supports_animation_merge: bool = Field(False, description="是否可合并为动画")


def _descriptor(
    key: str,
    mime_type: str,
    file_extension: str,
    is_multi_frame: bool = False,
    supports_animation_merge: bool = False,
) -> FormatDescriptor:
    return FormatDescriptor(
        key=key,
        mime_type=mime_type,
        file_extension=file_extension,
        is_multi_frame=is_multi_frame,
        supports_animation_merge=supports_animation_merge,
    )


class FormatCatalog:
    """静态格式目录"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
        "TIF": "TIFF",
    }

    # 按界面展示顺序排列
    FORMATS: Final[dict[str, FormatDescriptor]] = {
        "PNG": _descriptor("PNG", "image/png", "png"),
        "JPEG": _descriptor("JPEG", "image/jpeg", "jpg"),
        "WEBP": _descriptor("WEBP", "image/webp", "webp", True, True),
        "GIF": _descriptor("GIF", "image/gif", "gif", True, True),
        "BMP": _descriptor("BMP", "image/bmp", "bmp"),
        "TIFF": _descriptor("TIFF", "image/tiff", "tiff", True),
        "ICO": _descriptor("ICO", "image/x-icon", "ico"),
        "AVIF": _descriptor("AVIF", "image/avif", "avif", True),
        "PDF": _descriptor("PDF", "application/pdf", "pdf", True),
    }

    @classmethod
    def normalize_key(cls, format_name: str) -> str:
        """标准化格式名称（大写并解析别名）"""
        format_upper = format_name.strip().upper()
        return cls.ALIASES.get(format_upper, format_upper)

    @classmethod
    def lookup(cls, format_name: str) -> FormatDescriptor | None:
        """查找格式描述，未知格式返回 None"""
        return cls.FORMATS.get(cls.normalize_key(format_name))

    @classmethod
    def get(cls, format_name: str) -> FormatDescriptor:
        """获取格式描述

        Raises:
            ValidationError: 格式不在目录中时
        """
        descriptor = cls.lookup(format_name)
        if descriptor is None:
            from ..exceptions import ValidationError

            available = ", ".join(cls.FORMATS)
            raise ValidationError(f"不支持的格式: {format_name}。可用格式: {available}")
        return descriptor

    @classmethod
    def all(cls) -> list[FormatDescriptor]:
        """按目录顺序返回所有格式"""
        return list(cls.FORMATS.values())

    @classmethod
    def multi_frame_keys(cls) -> set[str]:
        return {k for k, d in cls.FORMATS.items() if d.is_multi_frame}

    @classmethod
    def merge_keys(cls) -> set[str]:
        return {k for k, d in cls.FORMATS.items() if d.supports_animation_merge}


# 便捷访问函数
def _key_of(format_ref: str | FormatDescriptor) -> str:
    if isinstance(format_ref, FormatDescriptor):
        return format_ref.key
    return format_ref


def resolve_extension(format_ref: str | FormatDescriptor) -> str:
    """获取格式的输出扩展名，JPEG 系列统一为 jpg，未知格式为 dat"""
    descriptor = FormatCatalog.lookup(_key_of(format_ref))
    if descriptor is None:
        return FALLBACK_EXTENSION
    return descriptor.file_extension


def get_mime_type(format_ref: str | FormatDescriptor) -> str:
    """获取格式的 MIME 类型"""
    descriptor = FormatCatalog.lookup(_key_of(format_ref))
    return descriptor.mime_type if descriptor else FALLBACK_MIME_TYPE


def is_multi_frame(format_ref: str | FormatDescriptor) -> bool:
    """检查格式是否可输出多帧"""
    descriptor = FormatCatalog.lookup(_key_of(format_ref))
    return descriptor is not None and descriptor.is_multi_frame


def supports_animation_merge(format_ref: str | FormatDescriptor) -> bool:
    """检查格式是否可将多张图片合并为动画"""
    descriptor = FormatCatalog.lookup(_key_of(format_ref))
    return descriptor is not None and descriptor.supports_animation_merge

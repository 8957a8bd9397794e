"""运行结果模型。

定义单文件输出、zip 归档、进度状态以及错误分类结果。
"""

from enum import Enum
from typing import cast

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, model_validator


ARCHIVE_NAME = "converted_images.zip"


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes, binary=True)


class OutputFile(BaseModel):
    """单个输出文件"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="文件名")
    data: bytes = Field(repr=False, description="文件内容")
    mime_type: str = Field(description="MIME 类型")

    @property
    def size(self) -> int:
        return len(self.data)


class ArchiveEntry(BaseModel):
    """归档中的单个条目"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="条目名")
    data: bytes = Field(repr=False, description="条目内容")


class Archive(BaseModel):
    """zip 归档

    条目按处理顺序排列，同名条目不去重；解压时后写入的条目覆盖先写入的。
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(ARCHIVE_NAME, description="归档文件名")
    entries: tuple[ArchiveEntry, ...] = Field(description="归档条目")
    data: bytes = Field(repr=False, description="压缩后的归档内容")

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def mime_type(self) -> str:
        return "application/zip"


class RunResult(BaseModel):
    """一次成功运行的结果：单文件或归档，二者必居其一"""

    model_config = ConfigDict(frozen=True)

    single_output: OutputFile | None = Field(None, description="单文件输出")
    archive: Archive | None = Field(None, description="归档输出")

    @model_validator(mode="after")
    def validate_exactly_one(self) -> "RunResult":
        if (self.single_output is None) == (self.archive is None):
            raise ValueError("运行结果必须且只能包含单文件或归档之一")
        return self

    @property
    def delivered(self) -> OutputFile | Archive:
        """实际交付的输出：单文件或归档"""
        if self.archive is not None:
            return self.archive
        return cast(OutputFile, self.single_output)

    @property
    def name(self) -> str:
        return self.delivered.name

    @property
    def data(self) -> bytes:
        return self.delivered.data

    @property
    def mime_type(self) -> str:
        return self.delivered.mime_type

    def get_summary(self) -> str:
        """运行结果摘要"""
        if self.archive is not None:
            return (
                f"{self.archive.name}: {len(self.archive.entries)} 个文件, "
                f"{format_size(self.archive.size)}"
            )
        return f"{self.delivered.name}: {format_size(self.delivered.size)}"


class ProgressState(BaseModel):
    """进度状态快照"""

    model_config = ConfigDict(frozen=True)

    label: str = Field("", description="当前阶段说明")
    percent: float = Field(0.0, ge=0.0, le=100.0, description="完成百分比")

    @classmethod
    def empty(cls) -> "ProgressState":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.label and self.percent == 0.0


class ErrorCategory(str, Enum):
    """失败分类"""

    ENGINE_UNAVAILABLE = "engine_unavailable"
    UNSUPPORTED_EXTERNAL_CODEC = "unsupported_external_codec"
    FRAME_SIZE_MISMATCH = "frame_size_mismatch"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class ClassifiedError(BaseModel):
    """面向用户的错误信息"""

    model_config = ConfigDict(frozen=True)

    category: ErrorCategory = Field(description="错误分类")
    message: str = Field(description="提示信息")


class ConversionOutcome(BaseModel):
    """门面层返回的运行结果"""

    success: bool = Field(description="是否成功")
    result: RunResult | None = Field(None, description="运行结果")
    error: ClassifiedError | None = Field(None, description="错误信息")

    def get_summary(self) -> str:
        if self.success and self.result is not None:
            return self.result.get_summary()
        if self.error is not None:
            return f"失败: {self.error.message}"
        return "失败"

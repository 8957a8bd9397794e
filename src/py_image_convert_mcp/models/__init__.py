"""数据模型包。

定义格式目录、编辑参数、任务快照和运行结果等数据结构。
"""

from .constants import (
    FALLBACK_EXTENSION,
    FormatCatalog,
    FormatDescriptor,
    get_mime_type,
    is_multi_frame,
    resolve_extension,
    supports_animation_merge,
)
from .conversion_job import (
    ConversionJob,
    ImageItem,
    IngestionResult,
    SelectedFile,
)
from .edit_spec import (
    EditSpec,
    NoResize,
    PercentResize,
    PixelResize,
    ResizeMode,
)
from .run_result import (
    ARCHIVE_NAME,
    Archive,
    ArchiveEntry,
    ClassifiedError,
    ConversionOutcome,
    ErrorCategory,
    OutputFile,
    ProgressState,
    RunResult,
)


__all__ = [
    "ARCHIVE_NAME",
    "FALLBACK_EXTENSION",
    "Archive",
    "ArchiveEntry",
    "ClassifiedError",
    "ConversionJob",
    "ConversionOutcome",
    # 编辑参数
    "EditSpec",
    "ErrorCategory",
    # 格式目录
    "FormatCatalog",
    "FormatDescriptor",
    "ImageItem",
    "IngestionResult",
    "NoResize",
    "OutputFile",
    "PercentResize",
    "PixelResize",
    "ProgressState",
    "ResizeMode",
    "RunResult",
    "SelectedFile",
    "get_mime_type",
    "is_multi_frame",
    "resolve_extension",
    "supports_animation_merge",
]

"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .file_helpers import (
    guess_image_mime_type,
    partition_selection,
    read_selected_files,
)

# 从日志工具模块导入
from .logging_helpers import configure_logging, get_logger

# 从消息格式化模块导入
from .message_formatter import MessageFormatter

# 从命名助手模块导入
from .naming_helpers import (
    FileNamingStrategy,
    PathResolver,
    write_run_result,
)


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "PathResolver",
    "configure_logging",
    "get_logger",
    "guess_image_mime_type",
    "partition_selection",
    "read_selected_files",
    "write_run_result",
]

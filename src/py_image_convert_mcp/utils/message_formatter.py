"""消息格式化工具模块。

提供统一的错误消息、提示消息格式化功能。
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def validation_error(field: str, value: Any, reason: str | None = None) -> str:
        """参数验证错误消息"""
        msg = f"参数验证失败 - {field}: {value}"
        if reason:
            msg += f" ({reason})"
        return msg

    @staticmethod
    def format_error(operation: str, target: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{target}]: {error}"

    @staticmethod
    def rejected_files(names: Sequence[str], limit: int = 5) -> str | None:
        """被拒绝文件的提示，最多列出 limit 个文件名

        Returns:
            str | None: 没有被拒绝的文件时返回 None
        """
        if not names:
            return None

        shown = ", ".join(names[:limit])
        remaining = len(names) - limit
        if remaining > 0:
            shown += f", and {remaining} other{'s' if remaining > 1 else ''}."
        return f"Skipped non-image files: {shown}"

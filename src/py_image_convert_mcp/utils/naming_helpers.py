"""文件命名工具模块。

提供输出文件命名和结果落盘的路径生成功能。
"""

import itertools
from pathlib import Path, PurePosixPath

from ..models.constants import FormatDescriptor, resolve_extension
from ..models.run_result import RunResult


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def derive_output_name(
        original_name: str, target_format: str | FormatDescriptor
    ) -> str:
        """去掉原扩展名并追加目标格式扩展名

        Args:
            original_name: 原始文件名
            target_format: 目标格式

        Returns:
            str: 生成的文件名（不含路径）
        """
        # 只取文件名部分，丢弃浏览器或宿主带来的目录
        base_name = PurePosixPath(original_name.replace("\\", "/")).name
        stem = base_name.rsplit(".", 1)[0] if "." in base_name[1:] else base_name
        return f"{stem}.{resolve_extension(target_format)}"

    @staticmethod
    def animation_name(basename: str, target_format: str | FormatDescriptor) -> str:
        """动画合并输出的文件名"""
        return f"{basename}.{resolve_extension(target_format)}"


class PathResolver:
    """路径解析器"""

    @staticmethod
    def ensure_unique_path(path: Path) -> Path:
        """确保路径唯一，如果文件已存在则添加数字后缀

        Args:
            path: 原始路径

        Returns:
            Path: 唯一的路径
        """
        if not path.exists():
            return path

        base = path.stem
        suffix = path.suffix
        parent = path.parent

        for counter in itertools.count(1):
            new_path = parent / f"{base}_{counter}{suffix}"
            if not new_path.exists():
                return new_path

        return path  # pragma: no cover


def write_run_result(result: RunResult, output_dir: str | Path) -> Path:
    """把运行结果写入输出目录，不覆盖已有文件

    Returns:
        Path: 实际写入的文件路径
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = PathResolver.ensure_unique_path(output_dir / result.name)
    target.write_bytes(result.data)
    return target

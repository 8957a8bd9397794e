"""Python 图像批量转换库。

对一组图片应用相同的编辑并转换格式，输出单文件、zip 归档或合并的动画。
"""

__version__ = "0.1.0"
__description__ = "图像批量转换库，基于 Pillow"

# 核心功能导出
from .converter import ImageConverter
from .exceptions import ErrorClassifier
from .models import (
    ConversionJob,
    ConversionOutcome,
    EditSpec,
    FormatCatalog,
    RunResult,
    SelectedFile,
)


__all__ = [
    "ConversionJob",
    "ConversionOutcome",
    "EditSpec",
    "ErrorClassifier",
    "FormatCatalog",
    "ImageConverter",
    "RunResult",
    "SelectedFile",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__

"""转换编排包。

包含批量编排、任务构建、进度报告和归档等处理逻辑。
"""

from .archive import ArchiveBuilder
from .batch import BatchOrchestrator
from .config import JobBuilder
from .progress import ProgressReporter


__all__ = [
    "ArchiveBuilder",
    "BatchOrchestrator",
    "JobBuilder",
    "ProgressReporter",
]

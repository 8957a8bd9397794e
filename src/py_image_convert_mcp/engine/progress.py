"""进度报告模块。

把各阶段的完成情况映射为 0-100 的进度值，并通知监听者。
"""

from collections.abc import Callable

from ..models.run_result import ProgressState
from ..utils.logging_helpers import get_logger


logger = get_logger()

ProgressListener = Callable[[ProgressState], None]

# 逐文件路径：文件处理占 [0, 90]，打包占 [90, 100]
FILES_PHASE_END = 90.0
# 动画路径：帧收集占 [0, 80]，编码完成后直接到 100
FRAMES_PHASE_END = 80.0


class ProgressReporter:
    """运行进度报告器，只由正在运行的管线更新"""

    def __init__(self, listener: ProgressListener | None = None):
        self.listener = listener
        self.state = ProgressState.empty()

    def _publish(self, label: str, percent: float) -> None:
        self.state = ProgressState(label=label, percent=min(100.0, max(0.0, percent)))
        logger.debug(f"进度 {self.state.percent:.1f}% {label}")
        if self.listener is not None:
            self.listener(self.state)

    def start(self, label: str) -> None:
        self._publish(label, 0.0)

    def file_completed(self, index: int, total: int, label: str = "Converting") -> None:
        """第 index 个文件（从 1 开始）完成"""
        self._publish(f"{label} {index}/{total}", FILES_PHASE_END * index / total)

    def packaging(self, fraction: float, label: str = "Packaging") -> None:
        """打包阶段，fraction 为归档器自身的进度 [0, 1]"""
        span = 100.0 - FILES_PHASE_END
        self._publish(label, FILES_PHASE_END + span * fraction)

    def frame_ingested(self, index: int, total: int, label: str = "Adding frame") -> None:
        """第 index 帧（从 1 开始）已收集"""
        self._publish(f"{label} {index}/{total}", FRAMES_PHASE_END * index / total)

    def complete(self, label: str = "Done") -> None:
        self._publish(label, 100.0)

    def reset(self) -> None:
        """运行结束后恢复为空状态"""
        self.state = ProgressState.empty()
        if self.listener is not None:
            self.listener(self.state)

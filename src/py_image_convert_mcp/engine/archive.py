"""归档模块。

把转换结果打包为 zip，按条目报告进度。
"""

import zipfile
from collections.abc import Callable
from io import BytesIO

from ..exceptions import handle_engine_errors
from ..models.run_result import ARCHIVE_NAME, Archive, ArchiveEntry
from ..utils.logging_helpers import get_logger


logger = get_logger()

# 固定时间戳，保证相同输入生成相同的归档
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


class ArchiveBuilder:
    """zip 归档构建器

    同名条目不去重，按添加顺序写入。
    """

    def __init__(self, name: str = ARCHIVE_NAME):
        self.name = name
        self.entries: list[ArchiveEntry] = []

    def add(self, name: str, data: bytes) -> None:
        if any(entry.name == name for entry in self.entries):
            logger.warning(f"归档中存在同名条目，解压时后者覆盖前者: {name}")
        self.entries.append(ArchiveEntry(name=name, data=data))

    @handle_engine_errors("package")
    def build(self, on_progress: Callable[[float], None] | None = None) -> Archive:
        """生成压缩后的归档

        Args:
            on_progress: 进度回调，参数为 [0, 1] 的完成比例
        """
        buffer = BytesIO()
        total = len(self.entries)
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for index, entry in enumerate(self.entries, start=1):
                info = zipfile.ZipInfo(entry.name, date_time=ZIP_TIMESTAMP)
                info.compress_type = zipfile.ZIP_DEFLATED
                zf.writestr(info, entry.data)
                if on_progress is not None:
                    on_progress(index / total)

        logger.debug(f"归档完成: {self.name}, {total} 个条目")
        return Archive(name=self.name, entries=tuple(self.entries), data=buffer.getvalue())

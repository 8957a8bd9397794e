"""单图转换管线。

解码 → 合并帧 → 编辑所有帧 → 编码，处理一个输入文件。
"""

import asyncio

from ..models.constants import FormatDescriptor
from ..models.edit_spec import EditSpec
from ..utils.logging_helpers import get_logger
from .cancellation import CancellationToken, check_cancelled
from .edits import apply_edits
from .engine import ImageEngine


logger = get_logger()


class SingleImagePipeline:
    """单个文件的转换管线

    源文件为多帧时：目标格式支持多帧则保留所有帧，否则只输出第一帧。
    """

    def __init__(
        self,
        engine: ImageEngine,
        target_format: FormatDescriptor,
        edits: EditSpec,
    ):
        self.engine = engine
        self.target_format = target_format
        self.edits = edits

    async def convert(
        self, file_bytes: bytes, cancel: CancellationToken | None = None
    ) -> bytes:
        """转换单个文件

        Raises:
            DecodeError: 解码失败
            EditError: 编辑失败
            EncodeError: 编码失败
        """
        frames = await asyncio.to_thread(self.engine.decode, file_bytes)
        with frames:
            self.engine.coalesce(frames)
            logger.debug(f"解码得到 {len(frames)} 帧")

            for frame in frames:
                check_cancelled(cancel)
                apply_edits(self.engine, frame, self.edits)
                frame.format = self.target_format.key
                frame.quality = self.edits.quality

            if self.target_format.is_multi_frame:
                if self.target_format.key == "GIF":
                    self.engine.optimize(frames)
                return await asyncio.to_thread(self.engine.encode, frames, True)

            if len(frames) > 1:
                logger.debug(
                    f"{self.target_format.key} 不支持多帧，丢弃 {len(frames) - 1} 帧"
                )
            return await asyncio.to_thread(self.engine.encode, frames, False)

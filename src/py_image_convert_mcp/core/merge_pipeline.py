"""动画合并管线。

每个输入取一帧，编辑、统一画布、设置时间后收集为一个多帧输出。
输入顺序即播放顺序。
"""

import asyncio
from collections.abc import Callable, Sequence

from ..models.conversion_job import ConversionJob, ImageItem
from ..models.edit_spec import PixelResize
from ..utils.logging_helpers import get_logger
from .cancellation import CancellationToken, check_cancelled
from .edits import apply_edits
from .engine import DISPOSE_RESTORE_BACKGROUND, FrameCollection, ImageEngine


logger = get_logger()

FrameCallback = Callable[[int, int], None]


def padding_box(job: ConversionJob) -> tuple[int, int] | None:
    """仅在 GIF + 像素模式 + 锁定比例 + 宽高均设置时返回画布尺寸，否则为 None"""
    resize = job.edits.resize
    if (
        job.target_format.key == "GIF"
        and isinstance(resize, PixelResize)
        and resize.lock_ratio
        and resize.width is not None
        and resize.height is not None
    ):
        return resize.width, resize.height
    return None


def needs_canvas_padding(job: ConversionJob) -> bool:
    return padding_box(job) is not None


class AnimationMergePipeline:
    """把多张独立图片合并为一个动画"""

    def __init__(self, engine: ImageEngine):
        self.engine = engine

    async def build_collection(
        self,
        items: Sequence[ImageItem],
        job: ConversionJob,
        on_frame: FrameCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> FrameCollection:
        """逐个解码并编辑输入，返回帧集合，由调用方负责释放"""
        is_gif = job.target_format.key == "GIF"
        box = padding_box(job)
        delay = job.frame_delay_centiseconds
        total = len(items)

        collection = FrameCollection()
        try:
            for index, item in enumerate(items, start=1):
                check_cancelled(cancel)
                frame = await asyncio.to_thread(
                    self.engine.decode_first_frame, item.source_bytes
                )
                collection.append(frame)

                apply_edits(self.engine, frame, job.edits)
                if box is not None:
                    self.engine.extent(frame, *box)

                frame.delay = delay
                frame.disposal = DISPOSE_RESTORE_BACKGROUND if is_gif else None
                frame.format = job.target_format.key
                frame.quality = job.edits.quality

                logger.debug(f"第 {index}/{total} 帧: {item.name} {frame.size}")
                if on_frame is not None:
                    on_frame(index, total)
        except BaseException:
            collection.close()
            raise

        return collection

    async def merge(
        self,
        items: Sequence[ImageItem],
        job: ConversionJob,
        on_frame: FrameCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> bytes:
        """合并为单个多帧输出

        Raises:
            DecodeError: 解码失败
            EditError: 编辑失败
            SizeMismatchError: 帧尺寸不一致
            EncodeError: 编码失败
        """
        collection = await self.build_collection(items, job, on_frame, cancel)
        with collection:
            if job.target_format.key == "GIF":
                self.engine.optimize(collection)
            return await asyncio.to_thread(self.engine.encode, collection, True)

"""批量编排模块。

选择动画合并路径或逐文件路径，驱动迭代、决定打包方式并汇总进度。
"""

import asyncio

from ..config import AppConfig, get_config
from ..core.cancellation import CancellationToken, check_cancelled
from ..core.engine import ImageEngine
from ..core.merge_pipeline import AnimationMergePipeline
from ..core.single_pipeline import SingleImagePipeline
from ..models.conversion_job import ConversionJob
from ..models.run_result import OutputFile, RunResult
from ..utils.logging_helpers import get_logger
from ..utils.naming_helpers import FileNamingStrategy
from .archive import ArchiveBuilder
from .progress import ProgressReporter


logger = get_logger()


class BatchOrchestrator:
    """批量转换编排器

    任何一个条目失败都会中止整个运行，已经得到的输出全部丢弃。
    """

    def __init__(
        self,
        engine: ImageEngine,
        progress: ProgressReporter | None = None,
        app_config: AppConfig | None = None,
    ):
        self.engine = engine
        self.progress = progress or ProgressReporter()
        self.defaults = (app_config or get_config()).conversion

    async def run(
        self, job: ConversionJob, cancel: CancellationToken | None = None
    ) -> RunResult:
        """执行一次运行

        Raises:
            ConversionError: 任一条目转换失败或打包失败
        """
        if job.uses_merge_path:
            logger.info(
                f"合并 {len(job.items)} 张图片为 {job.target_format.key} 动画"
            )
            return await self._run_merge(job, cancel)

        logger.info(f"逐文件转换 {len(job.items)} 张图片为 {job.target_format.key}")
        return await self._run_per_file(job, cancel)

    async def _run_merge(
        self, job: ConversionJob, cancel: CancellationToken | None
    ) -> RunResult:
        self.progress.start("Building animation")
        pipeline = AnimationMergePipeline(self.engine)
        data = await pipeline.merge(
            job.items, job, on_frame=self.progress.frame_ingested, cancel=cancel
        )
        self.progress.complete()

        return RunResult(
            single_output=OutputFile(
                name=FileNamingStrategy.animation_name(
                    self.defaults.ANIMATION_BASENAME, job.target_format
                ),
                data=data,
                mime_type=job.target_format.mime_type,
            )
        )

    async def _run_per_file(
        self, job: ConversionJob, cancel: CancellationToken | None
    ) -> RunResult:
        self.progress.start("Converting")
        pipeline = SingleImagePipeline(self.engine, job.target_format, job.edits)
        outputs: list[tuple[str, bytes]] = []
        total = len(job.items)

        for index, item in enumerate(job.items, start=1):
            check_cancelled(cancel)
            data = await pipeline.convert(item.source_bytes, cancel)
            name = FileNamingStrategy.derive_output_name(item.name, job.target_format)
            outputs.append((name, data))
            logger.debug(f"完成 {index}/{total}: {item.name} -> {name}")
            self.progress.file_completed(index, total)

        if job.bundle_as_zip or len(outputs) > 1:
            check_cancelled(cancel)
            builder = ArchiveBuilder(self.defaults.ARCHIVE_NAME)
            for name, data in outputs:
                builder.add(name, data)
            archive = await asyncio.to_thread(builder.build, self.progress.packaging)
            self.progress.complete()
            return RunResult(archive=archive)

        name, data = outputs[0]
        self.progress.complete()
        return RunResult(
            single_output=OutputFile(
                name=name, data=data, mime_type=job.target_format.mime_type
            )
        )

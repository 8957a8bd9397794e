"""图像转换器接口。

基于转换核心的用户接口：引擎初始化、文件分拣、运行任务并对失败进行分类。
"""

import asyncio
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from .config import AppConfig, get_config
from .core.cancellation import CancellationToken
from .core.engine import ImageEngine, PillowEngine
from .engine.batch import BatchOrchestrator
from .engine.config import JobBuilder
from .engine.progress import ProgressListener, ProgressReporter
from .exceptions import ErrorClassifier, InitializationError
from .models import (
    ClassifiedError,
    ConversionJob,
    ConversionOutcome,
    ImageItem,
    IngestionResult,
    SelectedFile,
)
from .utils.file_helpers import partition_selection, read_selected_files
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()


class ImageConverter:
    """图像转换器。

    引擎初始化失败时记录一次错误，此后所有运行都直接返回该错误。
    每次运行使用独立的任务快照和进度报告器，运行结束后进度总是被重置。
    """

    def __init__(
        self,
        engine: ImageEngine | None = None,
        progress_listener: ProgressListener | None = None,
        app_config: AppConfig | None = None,
    ):
        """初始化转换器。

        Args:
            engine: 图像引擎，默认使用 Pillow 引擎
            progress_listener: 进度监听回调
            app_config: 应用配置，默认使用全局配置
        """
        self.app_config = app_config or get_config()
        self.job_builder = JobBuilder(self.app_config)
        self.progress_listener = progress_listener
        self.engine_error: ClassifiedError | None = None

        if engine is None:
            engine = PillowEngine(gif_loop=self.app_config.conversion.GIF_LOOP)
            try:
                engine.initialize()
            except InitializationError as e:
                logger.error(f"图像引擎不可用: {e}")
                self.engine_error = ErrorClassifier.classify(e)
        self.engine = engine

        logger.debug("初始化图像转换器")

    @property
    def engine_available(self) -> bool:
        return self.engine_error is None

    def ingest(self, files: Iterable[SelectedFile]) -> IngestionResult:
        """分拣选择的文件，非图片文件被拒绝但不影响其他文件"""
        return partition_selection(
            files, max_listed=self.app_config.conversion.MAX_REJECTED_NAMES
        )

    def build_job(self, items: Sequence[ImageItem], **options: Any) -> ConversionJob:
        """从当前配置构建任务快照，参数见 JobBuilder.build"""
        return self.job_builder.build(items, **options)

    async def run(
        self,
        job: ConversionJob,
        cancel: CancellationToken | None = None,
        progress_listener: ProgressListener | None = None,
    ) -> ConversionOutcome:
        """执行任务，失败时返回分类后的错误，不会返回部分结果

        每次运行使用独立的进度报告器，并发的运行互不影响。

        Args:
            job: 任务快照
            cancel: 取消信号
            progress_listener: 本次运行的进度监听回调，默认使用构造时传入的回调
        """
        if self.engine_error is not None:
            return ConversionOutcome(success=False, error=self.engine_error)

        progress = ProgressReporter(progress_listener or self.progress_listener)
        orchestrator = BatchOrchestrator(self.engine, progress, self.app_config)
        try:
            result = await orchestrator.run(job, cancel)
        except Exception as e:
            classified = ErrorClassifier.classify(e)
            logger.error(
                MessageFormatter.format_error(
                    "图像转换", f"{len(job.items)} 个文件", e
                )
            )
            return ConversionOutcome(success=False, error=classified)
        finally:
            progress.reset()

        logger.info(f"转换完成: {result.get_summary()}")
        return ConversionOutcome(success=True, result=result)

    def convert(
        self,
        job: ConversionJob,
        cancel: CancellationToken | None = None,
        progress_listener: ProgressListener | None = None,
    ) -> ConversionOutcome:
        """run 的同步版本"""
        return asyncio.run(self.run(job, cancel, progress_listener))

    def convert_paths(
        self, paths: Iterable[str | Path], **options: Any
    ) -> tuple[IngestionResult, ConversionOutcome | None]:
        """读取磁盘文件并转换

        Returns:
            tuple: (分拣结果, 运行结果)；没有可转换的图片时运行结果为 None
        """
        ingestion = self.ingest(read_selected_files(paths))
        if not ingestion.accepted:
            return ingestion, None

        job = self.build_job(ingestion.accepted, **options)
        return ingestion, self.convert(job)

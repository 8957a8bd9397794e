"""错误处理测试。

测试异常转换装饰器、错误分类器、文件分拣以及门面层的失败处理。
"""

import asyncio

import pytest
from PIL import UnidentifiedImageError

from py_image_convert_mcp.converter import ImageConverter
from py_image_convert_mcp.core.engine import PillowEngine
from py_image_convert_mcp.exceptions import (
    ConversionError,
    DecodeError,
    EditError,
    EncodeError,
    ErrorClassifier,
    ImageConvertError,
    InitializationError,
    MissingCodecError,
    PackagingError,
    RunCancelledError,
    SizeMismatchError,
    ValidationError,
    handle_engine_errors,
)
from py_image_convert_mcp.models import ErrorCategory
from py_image_convert_mcp.utils.message_formatter import MessageFormatter
from tests.conftest import make_image_bytes, make_item


class TestExceptionHierarchy:
    """异常层级测试"""

    def test_stage_errors_are_conversion_errors(self):
        """测试各阶段错误都属于转换错误"""
        for error_class in (DecodeError, EditError, EncodeError, PackagingError):
            assert issubclass(error_class, ConversionError)
        assert issubclass(MissingCodecError, EncodeError)
        assert issubclass(SizeMismatchError, EncodeError)
        assert issubclass(ValidationError, ImageConvertError)

    def test_message_and_item_name(self):
        """测试错误消息和条目名称"""
        error = DecodeError("bad header", item_name="a.png")
        assert error.message == "bad header"
        assert error.item_name == "a.png"
        assert str(error) == "bad header"


class TestHandleEngineErrors:
    """异常转换装饰器测试"""

    def test_maps_generic_error_to_stage(self):
        """测试普通异常转换为对应阶段的错误"""

        @handle_engine_errors("edit")
        def failing():
            raise ValueError("bad box")

        with pytest.raises(EditError) as exc_info:
            failing()
        assert exc_info.value.message == "bad box"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_unidentified_image_keeps_raw_message(self):
        """测试无法识别的图片保留引擎的原始消息"""
        raw = UnidentifiedImageError("cannot identify image file <_io.BytesIO>")

        @handle_engine_errors("decode")
        def failing():
            raise raw

        with pytest.raises(DecodeError) as exc_info:
            failing()
        assert exc_info.value.message == str(raw)

    def test_key_error_is_missing_codec_when_encoding(self):
        """测试编码阶段的 KeyError 视为缺少编码器"""

        @handle_engine_errors("encode")
        def failing():
            raise KeyError("AVIF")

        with pytest.raises(MissingCodecError, match="encoder not available"):
            failing()

    def test_key_error_elsewhere_stays_in_stage(self):
        """测试其他阶段的 KeyError 保持阶段错误"""

        @handle_engine_errors("decode")
        def failing():
            raise KeyError("x")

        with pytest.raises(DecodeError) as exc_info:
            failing()
        assert not isinstance(exc_info.value, MissingCodecError)

    def test_own_errors_pass_through(self):
        """测试自身的异常原样抛出"""

        @handle_engine_errors("encode")
        def failing():
            raise SizeMismatchError("frame size mismatch")

        with pytest.raises(SizeMismatchError):
            failing()

    def test_empty_message_uses_type_name(self):
        """测试空消息时使用异常类型名"""

        @handle_engine_errors("package")
        def failing():
            raise OSError()

        with pytest.raises(PackagingError, match="OSError"):
            failing()

    def test_return_value_untouched(self):
        """测试正常返回值不受影响"""

        @handle_engine_errors("decode")
        def working():
            return 42

        assert working() == 42


class TestErrorClassifier:
    """错误分类测试"""

    @pytest.mark.parametrize(
        ("error", "category"),
        [
            (InitializationError("no engine"), ErrorCategory.ENGINE_UNAVAILABLE),
            (MissingCodecError("x"), ErrorCategory.UNSUPPORTED_EXTERNAL_CODEC),
            (SizeMismatchError("x"), ErrorCategory.FRAME_SIZE_MISMATCH),
            (RunCancelledError("x"), ErrorCategory.CANCELLED),
            (EncodeError("no encoder for AVIF"), ErrorCategory.UNSUPPORTED_EXTERNAL_CODEC),
            (OSError("NoDecodeDelegateForThisImageFormat"), ErrorCategory.UNSUPPORTED_EXTERNAL_CODEC),
            (ValueError("unknown file extension: .heic"), ErrorCategory.UNSUPPORTED_EXTERNAL_CODEC),
            (ValueError("images do not match"), ErrorCategory.FRAME_SIZE_MISMATCH),
            (RuntimeError("frames must have the same dimensions"), ErrorCategory.FRAME_SIZE_MISMATCH),
            (DecodeError("truncated"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, error, category):
        """测试异常映射到正确的分类"""
        assert ErrorClassifier.classify(error).category == category

    def test_codec_hint_suggests_alternatives(self):
        """测试编码器提示建议可用的替代格式"""
        message = ErrorClassifier.classify(MissingCodecError("x")).message
        assert "GIF" in message and "WebP" in message

    def test_size_hint_mentions_lock_ratio(self):
        """测试尺寸提示提到锁定比例"""
        message = ErrorClassifier.classify(SizeMismatchError("x")).message
        assert "lock ratio" in message

    def test_unknown_keeps_raw_message(self):
        """测试未知错误保留原始消息"""
        classified = ErrorClassifier.classify(RuntimeError("something odd happened"))
        assert classified.category == ErrorCategory.UNKNOWN
        assert classified.message == "something odd happened"

    def test_unknown_stage_error_is_verbatim(self):
        """测试经过装饰器转换的未知错误消息不被改写"""

        @handle_engine_errors("edit")
        def failing():
            raise ValueError("tile cannot extend outside image")

        with pytest.raises(EditError) as exc_info:
            failing()
        classified = ErrorClassifier.classify(exc_info.value)
        assert classified.category == ErrorCategory.UNKNOWN
        assert classified.message == "tile cannot extend outside image"


class TestIngestion:
    """文件分拣测试"""

    def test_non_images_rejected(self, mixed_selection):
        """测试非图片文件被拒绝"""
        converter = ImageConverter(engine=PillowEngine())
        result = converter.ingest(mixed_selection)

        assert result.accepted_count == 1
        assert result.accepted[0].name == "photo.png"
        assert result.rejected == [f"doc{i}.txt" for i in range(1, 8)]
        assert result.rejection_message == (
            "Skipped non-image files: doc1.txt, doc2.txt, doc3.txt, doc4.txt, "
            "doc5.txt, and 2 others."
        )

    def test_no_rejections(self):
        """测试没有被拒绝的文件时不生成消息"""
        converter = ImageConverter(engine=PillowEngine())
        result = converter.ingest([])
        assert result.accepted_count == 0
        assert result.rejection_message is None

    def test_rejected_message_singular(self):
        """测试只剩一个未列出文件时使用单数"""
        names = [f"f{i}.txt" for i in range(6)]
        assert MessageFormatter.rejected_files(names).endswith("and 1 other.")

    def test_rejected_message_within_limit(self):
        """测试数量在上限内时全部列出"""
        assert (
            MessageFormatter.rejected_files(["a.txt", "b.pdf"])
            == "Skipped non-image files: a.txt, b.pdf"
        )


class TestConverterFailures:
    """门面层失败处理测试"""

    def test_failure_returns_classified_error(self, engine):
        """测试失败时返回分类错误且进度被重置"""
        states = []
        converter = ImageConverter(engine=engine, progress_listener=states.append)
        items = [
            make_item("one.png", make_image_bytes()),
            make_item("two.png", b"not an image"),
            make_item("three.png", make_image_bytes()),
        ]
        outcome = converter.convert(converter.build_job(items, target_format="JPEG"))

        assert not outcome.success
        assert outcome.result is None
        assert outcome.error.category == ErrorCategory.UNKNOWN
        # 未分类的错误原样展示引擎消息
        assert outcome.error.message.startswith("cannot identify image file")
        assert states[-1].is_empty

    def test_success_resets_progress(self, engine):
        """测试成功后进度被重置"""
        states = []
        converter = ImageConverter(engine=engine, progress_listener=states.append)
        items = [make_item("one.png", make_image_bytes())]
        outcome = converter.convert(converter.build_job(items))

        assert outcome.success
        assert outcome.result.name == "one.png"
        assert outcome.error is None
        assert [s.percent for s in states] == [0.0, 90.0, 100.0, 0.0]
        assert states[-1].is_empty

    def test_concurrent_runs_keep_separate_progress(self, engine, three_colored_items):
        """测试并发运行时各自的进度互不干扰"""
        converter = ImageConverter(engine=engine)
        batch_job = converter.build_job(three_colored_items, bundle_as_zip=True)
        single_job = converter.build_job(three_colored_items[:1])
        batch_states, single_states = [], []

        async def run_both():
            return await asyncio.gather(
                converter.run(batch_job, progress_listener=batch_states.append),
                converter.run(single_job, progress_listener=single_states.append),
            )

        batch_outcome, single_outcome = asyncio.run(run_both())

        assert batch_outcome.success and single_outcome.success
        assert batch_outcome.result.name == "converted_images.zip"
        assert single_outcome.result.name == "red.png"
        assert [round(s.percent, 2) for s in batch_states] == [
            0.0,
            30.0,
            60.0,
            90.0,
            93.33,
            96.67,
            100.0,
            100.0,
            0.0,
        ]
        assert [s.percent for s in single_states] == [0.0, 90.0, 100.0, 0.0]
        assert batch_states[-1].is_empty and single_states[-1].is_empty

    def test_run_listener_overrides_default(self, engine):
        """测试单次运行的监听回调优先于构造时的回调"""
        default_states, run_states = [], []
        converter = ImageConverter(engine=engine, progress_listener=default_states.append)
        job = converter.build_job([make_item("one.png", make_image_bytes())])
        converter.convert(job, progress_listener=run_states.append)

        assert default_states == []
        assert run_states[-1].is_empty

    def test_size_mismatch_classified(self, engine):
        """测试帧尺寸不一致被分类"""
        converter = ImageConverter(engine=engine)
        items = [
            make_item("wide.png", make_image_bytes((200, 100))),
            make_item("square.png", make_image_bytes((100, 100))),
        ]
        job = converter.build_job(items, target_format="WEBP", merge_to_animation=True)
        outcome = converter.convert(job)

        assert outcome.error.category == ErrorCategory.FRAME_SIZE_MISMATCH
        assert outcome.error.message == ErrorClassifier.SIZE_HINT

    def test_engine_unavailable(self, monkeypatch):
        """测试引擎初始化失败后所有运行被阻止"""

        def broken(self):
            raise InitializationError("plugins missing")

        monkeypatch.setattr(PillowEngine, "initialize", broken)
        converter = ImageConverter()
        assert not converter.engine_available

        items = [make_item("one.png", make_image_bytes())]
        outcome = converter.convert(converter.build_job(items))
        assert not outcome.success
        assert outcome.error.category == ErrorCategory.ENGINE_UNAVAILABLE
        assert outcome.get_summary() == f"失败: {ErrorClassifier.ENGINE_HINT}"

"""图像引擎适配模块。

以 Pillow 作为外部图像引擎，对外只暴露窄接口：解码、合并帧、旋转、
缩放、扩展画布、优化和编码。所有帧资源通过 FrameCollection 统一释放。
"""

from collections.abc import Iterator
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

from PIL import Image, ImageChops, ImageSequence

from ..exceptions import (
    InitializationError,
    MissingCodecError,
    SizeMismatchError,
    handle_engine_errors,
)
from ..utils.logging_helpers import get_logger
from .formats import get_save_parameters, prepare_for_format


logger = get_logger()

# GIF 帧处置方式：恢复为背景
DISPOSE_RESTORE_BACKGROUND = 2

# 多帧编码时要求所有帧尺寸一致的格式
UNIFORM_FRAME_FORMATS = frozenset({"GIF", "WEBP"})

TRANSPARENT = (0, 0, 0, 0)


@dataclass
class Frame:
    """单帧图像及其输出属性"""

    image: Image.Image
    delay: int | None = None  # 1/100 秒
    disposal: int | None = None
    format: str | None = None
    quality: int | None = None

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def replace(self, image: Image.Image) -> None:
        """替换帧图像并释放旧图像"""
        if image is not self.image:
            self.image.close()
            self.image = image

    def close(self) -> None:
        self.image.close()


class FrameCollection:
    """有序的帧集合，作为上下文管理器使用时退出即释放所有帧"""

    def __init__(self, frames: list[Frame] | None = None):
        self.frames: list[Frame] = frames or []
        self.optimized = False

    def append(self, frame: Frame) -> None:
        self.frames.append(frame)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.frames)

    def __len__(self) -> int:
        return len(self.frames)

    def __getitem__(self, index: int) -> Frame:
        return self.frames[index]

    def close(self) -> None:
        for frame in self.frames:
            frame.close()
        self.frames.clear()

    def __enter__(self) -> "FrameCollection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class ImageEngine(Protocol):
    """管线依赖的图像引擎接口"""

    def decode(self, data: bytes) -> FrameCollection: ...

    def decode_first_frame(self, data: bytes) -> Frame: ...

    def coalesce(self, frames: FrameCollection) -> None: ...

    def rotate(self, frame: Frame, degrees: int) -> None: ...

    def resize(
        self, frame: Frame, width: int, height: int, keep_aspect: bool = False
    ) -> None: ...

    def extent(self, frame: Frame, width: int, height: int) -> None: ...

    def optimize(self, frames: FrameCollection) -> None: ...

    def encode(self, frames: FrameCollection, all_frames: bool = True) -> bytes: ...


def fit_size(
    source: tuple[int, int], box: tuple[int, int]
) -> tuple[int, int]:
    """等比适配到边界框内（可放大），最小 1 像素"""
    src_width, src_height = source
    box_width, box_height = box
    ratio = min(box_width / src_width, box_height / src_height)
    return (
        max(1, round(src_width * ratio)),
        max(1, round(src_height * ratio)),
    )


class PillowEngine:
    """基于 Pillow 的图像引擎"""

    def __init__(self, gif_loop: int = 0):
        self.gif_loop = gif_loop
        self.initialized = False

    def initialize(self) -> None:
        """加载 Pillow 插件注册表

        Raises:
            InitializationError: 没有任何可用的编码器时
        """
        try:
            Image.init()
        except Exception as e:
            raise InitializationError(f"图像引擎初始化失败: {e}") from e

        if not Image.SAVE:
            raise InitializationError("图像引擎初始化失败: 没有可用的编码器")

        self.initialized = True
        logger.debug(f"可写格式: {sorted(Image.SAVE)}")

    # ------------------------------------------------------------------
    # 解码
    # ------------------------------------------------------------------

    @handle_engine_errors("decode")
    def decode(self, data: bytes) -> FrameCollection:
        """解码全部帧，静态图片只有一帧"""
        collection = FrameCollection()
        try:
            with Image.open(BytesIO(data)) as img:
                for page in ImageSequence.Iterator(img):
                    collection.append(self._frame_from(page))
        except BaseException:
            collection.close()
            raise

        if not len(collection):
            raise ValueError("图像不包含任何帧")
        return collection

    @handle_engine_errors("decode")
    def decode_first_frame(self, data: bytes) -> Frame:
        """只解码第一帧，忽略源文件的多帧结构"""
        with Image.open(BytesIO(data)) as img:
            img.seek(0)
            return self._frame_from(img)

    def _frame_from(self, page: Image.Image) -> Frame:
        duration = page.info.get("duration")
        delay = (int(duration) + 5) // 10 if duration is not None else None
        return Frame(
            image=page.copy(),
            delay=delay,
            disposal=getattr(page, "disposal_method", None),
        )

    @handle_engine_errors("decode")
    def coalesce(self, frames: FrameCollection) -> None:
        """使每一帧都成为完整、可独立编辑的画面

        Pillow 在 seek 时已经按处置方式合成画布，这里统一色彩模式和画布尺寸。
        """
        if not len(frames):
            return
        canvas_size = frames[0].size
        for frame in frames:
            image = frame.image
            has_alpha = image.mode in ("RGBA", "LA", "PA") or (
                "transparency" in image.info
            )
            image = image.convert("RGBA" if has_alpha else "RGB")
            if image.size != canvas_size:
                canvas = Image.new(
                    image.mode, canvas_size, TRANSPARENT if has_alpha else (0, 0, 0)
                )
                canvas.paste(image, (0, 0))
                image = canvas
            frame.replace(image)

    # ------------------------------------------------------------------
    # 编辑
    # ------------------------------------------------------------------

    @handle_engine_errors("edit")
    def rotate(self, frame: Frame, degrees: int) -> None:
        """顺时针旋转，90 的倍数使用无损转置"""
        normalized = degrees % 360
        if normalized == 0:
            return

        match normalized:
            case 90:
                rotated = frame.image.transpose(Image.Transpose.ROTATE_270)
            case 180:
                rotated = frame.image.transpose(Image.Transpose.ROTATE_180)
            case 270:
                rotated = frame.image.transpose(Image.Transpose.ROTATE_90)
            case _:
                source = frame.image
                if source.mode != "RGBA":
                    source = source.convert("RGBA")
                rotated = source.rotate(
                    -degrees,
                    resample=Image.Resampling.BICUBIC,
                    expand=True,
                    fillcolor=TRANSPARENT,
                )
        frame.replace(rotated)

    @handle_engine_errors("edit")
    def resize(
        self, frame: Frame, width: int, height: int, keep_aspect: bool = False
    ) -> None:
        """调整尺寸；keep_aspect 时把 width×height 视为边界框"""
        if keep_aspect:
            width, height = fit_size(frame.size, (width, height))
        if (width, height) == frame.size:
            return
        frame.replace(frame.image.resize((width, height), Image.Resampling.LANCZOS))

    @handle_engine_errors("edit")
    def extent(self, frame: Frame, width: int, height: int) -> None:
        """以中心为锚点把画布扩展到 width×height，新增区域完全透明"""
        if frame.size == (width, height):
            return
        source = frame.image if frame.image.mode == "RGBA" else frame.image.convert("RGBA")
        canvas = Image.new("RGBA", (width, height), TRANSPARENT)
        offset = ((width - source.width) // 2, (height - source.height) // 2)
        canvas.paste(source, offset)
        if source is not frame.image:
            source.close()
        frame.replace(canvas)

    # ------------------------------------------------------------------
    # 编码
    # ------------------------------------------------------------------

    def optimize(self, frames: FrameCollection) -> None:
        """启用体积与调色板优化"""
        frames.optimized = True

    @handle_engine_errors("encode")
    def encode(self, frames: FrameCollection, all_frames: bool = True) -> bytes:
        """编码为单个输出；all_frames 为 False 时只编码第一帧"""
        if not len(frames):
            raise ValueError("没有可编码的帧")

        selected = list(frames) if all_frames else [frames[0]]
        format_key = selected[0].format
        if not format_key:
            raise ValueError("未设置输出格式")

        multi = all_frames and len(selected) > 1
        self._ensure_codec(format_key, multi)
        if multi and format_key in UNIFORM_FRAME_FORMATS:
            self._ensure_uniform_size(selected)

        prepared = [prepare_for_format(f.image, format_key) for f in selected]
        params = get_save_parameters(format_key, selected[0].quality)
        params.update(self._animation_params(format_key, selected, frames.optimized))

        buffer = BytesIO()
        try:
            if multi:
                prepared[0].save(
                    buffer,
                    format=format_key,
                    save_all=True,
                    append_images=prepared[1:],
                    **params,
                )
            else:
                prepared[0].save(buffer, format=format_key, **params)
        finally:
            for image, frame in zip(prepared, selected):
                if image is not frame.image:
                    image.close()

        return buffer.getvalue()

    def _ensure_codec(self, format_key: str, multi: bool) -> None:
        registry = Image.SAVE_ALL if multi else Image.SAVE
        if format_key not in registry:
            raise MissingCodecError(
                f"encoder not available for {format_key}"
                + (" (multi-frame)" if multi else "")
            )

    def _ensure_uniform_size(self, frames: list[Frame]) -> None:
        sizes = {f.size for f in frames}
        if len(sizes) > 1:
            listed = ", ".join(f"{w}x{h}" for w, h in sorted(sizes))
            raise SizeMismatchError(
                f"frame size mismatch: all frames must have the same size ({listed})"
            )

    def _animation_params(
        self, format_key: str, frames: list[Frame], optimized: bool
    ) -> dict:
        """多帧格式的时间、循环和处置参数"""
        params: dict = {}
        if format_key not in UNIFORM_FRAME_FORMATS:
            return params

        if any(f.delay is not None for f in frames):
            params["duration"] = [(f.delay or 0) * 10 for f in frames]
            params["loop"] = self.gif_loop

        if format_key == "GIF":
            params["optimize"] = optimized
            if any(f.disposal is not None for f in frames):
                disposals = [f.disposal or 0 for f in frames]
                # Pillow 合并相同的连续帧；只剩一帧时按单帧保存，只接受单个处置值
                if len(set(disposals)) == 1 or _all_identical(frames):
                    params["disposal"] = disposals[0]
                else:
                    params["disposal"] = disposals

        return params


def _all_identical(frames: list[Frame]) -> bool:
    """所有帧的像素内容是否完全相同"""
    first = frames[0].image.convert("RGBA")
    try:
        for frame in frames[1:]:
            with frame.image.convert("RGBA") as other:
                if ImageChops.difference(first, other).getbbox() is not None:
                    return False
        return True
    finally:
        first.close()

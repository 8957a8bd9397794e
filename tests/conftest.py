"""测试配置文件。

提供测试所需的fixtures和图片构造工具，所有图片都在内存中生成。
"""

import tempfile
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_convert_mcp.core.engine import PillowEngine
from py_image_convert_mcp.models import ImageItem, SelectedFile


RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


def make_image_bytes(
    size: tuple[int, int] = (200, 100),
    color: tuple[int, ...] = RED,
    format: str = "PNG",
    mode: str = "RGB",
) -> bytes:
    """生成纯色图片并编码"""
    img = Image.new(mode, size, color)
    buffer = BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


def make_patterned_png(size: tuple[int, int] = (200, 100)) -> bytes:
    """生成带图案的 RGBA 图片"""
    img = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    for i in range(10):
        x, y = (i * 20) % size[0], (i * 10) % size[1]
        draw.rectangle([x, y, x + 30, y + 20], fill=(i * 25, 255 - i * 20, 128, 200))
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def make_animated_gif(
    colors: tuple[tuple[int, int, int], ...] = (RED, GREEN, BLUE),
    size: tuple[int, int] = (60, 40),
    duration: int = 100,
) -> bytes:
    """生成多帧 GIF，每帧一种颜色"""
    frames = [Image.new("RGB", size, color) for color in colors]
    buffer = BytesIO()
    frames[0].save(
        buffer,
        format="GIF",
        save_all=True,
        append_images=frames[1:],
        duration=duration,
        loop=0,
    )
    return buffer.getvalue()


def make_item(name: str, data: bytes, mime_type: str = "image/png") -> ImageItem:
    return ImageItem(name=name, mime_type=mime_type, source_bytes=data)


def open_output(data: bytes) -> Image.Image:
    return Image.open(BytesIO(data))


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def engine() -> PillowEngine:
    """已初始化的 Pillow 引擎"""
    pillow_engine = PillowEngine()
    pillow_engine.initialize()
    return pillow_engine


@pytest.fixture
def three_colored_items() -> list[ImageItem]:
    """三张不同颜色的同尺寸图片"""
    return [
        make_item(f"{name}.png", make_image_bytes((80, 60), color))
        for name, color in (("red", RED), ("green", GREEN), ("blue", BLUE))
    ]


@pytest.fixture
def mixed_selection() -> list[SelectedFile]:
    """7 个非图片文件和 1 个图片文件"""
    files = [
        SelectedFile(name=f"doc{i}.txt", data=b"text", mime_type="text/plain")
        for i in range(1, 8)
    ]
    files.insert(
        3,
        SelectedFile(name="photo.png", data=make_image_bytes(), mime_type="image/png"),
    )
    return files

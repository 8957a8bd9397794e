"""编辑应用测试。

测试尺寸计算以及旋转、缩放、扩展画布在 Pillow 引擎上的效果。
"""

from io import BytesIO

import pytest
from PIL import Image

from py_image_convert_mcp.core.edits import apply_edits, compute_target_size
from py_image_convert_mcp.core.engine import Frame, fit_size
from py_image_convert_mcp.models import (
    EditSpec,
    NoResize,
    PercentResize,
    PixelResize,
)
from tests.conftest import make_image_bytes


def _frame(size=(200, 100), mode="RGB", color=(255, 0, 0)) -> Frame:
    return Frame(image=Image.new(mode, size, color))


class TestComputeTargetSize:
    """尺寸计算测试"""

    def test_no_resize(self):
        """测试不调整尺寸"""
        assert compute_target_size((200, 100), NoResize()) == (200, 100)

    @pytest.mark.parametrize(
        ("percent", "expected"),
        [(50, (100, 50)), (100, (200, 100)), (200, (400, 200)), (1, (2, 1))],
    )
    def test_percent(self, percent: int, expected: tuple[int, int]):
        """测试百分比缩放"""
        assert compute_target_size((200, 100), PercentResize(percent=percent)) == expected

    def test_percent_never_below_one_pixel(self):
        """测试缩放结果至少 1 像素"""
        assert compute_target_size((10, 10), PercentResize(percent=1)) == (1, 1)

    def test_locked_width_only(self):
        """测试锁定比例只设置宽度"""
        resize = PixelResize(width=100, lock_ratio=True)
        assert compute_target_size((200, 100), resize) == (100, 50)

    def test_locked_height_only(self):
        """测试锁定比例只设置高度"""
        resize = PixelResize(height=50, lock_ratio=True)
        assert compute_target_size((200, 100), resize) == (100, 50)

    def test_locked_box_fits_inside(self):
        """测试锁定比例适配边界框"""
        resize = PixelResize(width=100, height=100, lock_ratio=True)
        assert compute_target_size((200, 100), resize) == (100, 50)
        assert compute_target_size((100, 200), resize) == (50, 100)

    def test_unlocked_is_exact(self):
        """测试不锁定比例时精确缩放"""
        resize = PixelResize(width=100, height=50, lock_ratio=False)
        assert compute_target_size((200, 100), resize) == (100, 50)
        resize = PixelResize(width=30, height=90, lock_ratio=False)
        assert compute_target_size((200, 100), resize) == (30, 90)

    def test_unlocked_single_dimension_keeps_other(self):
        """测试不锁定比例时未设置的边保持不变"""
        resize = PixelResize(width=50, lock_ratio=False)
        assert compute_target_size((200, 100), resize) == (50, 100)

    def test_pixels_without_dimensions_is_noop(self):
        """测试未设置尺寸时不调整"""
        assert compute_target_size((200, 100), PixelResize()) == (200, 100)

    def test_fit_size_can_enlarge(self):
        """测试适配可以放大"""
        assert fit_size((50, 25), (200, 200)) == (200, 100)


class TestApplyEdits:
    """编辑应用测试"""

    def test_percent_resize(self, engine):
        """测试百分比缩放"""
        frame = _frame()
        apply_edits(engine, frame, EditSpec(resize=PercentResize(percent=50)))
        assert frame.size == (100, 50)

    def test_locked_pixel_resize(self, engine):
        """测试锁定比例的像素缩放"""
        frame = _frame()
        apply_edits(engine, frame, EditSpec(resize=PixelResize(width=100)))
        assert frame.size == (100, 50)

    def test_unlocked_pixel_resize(self, engine):
        """测试不锁定比例的像素缩放"""
        frame = _frame()
        edits = EditSpec(resize=PixelResize(width=100, height=50, lock_ratio=False))
        apply_edits(engine, frame, edits)
        assert frame.size == (100, 50)

    def test_pixels_without_dimensions_leaves_frame(self, engine):
        """测试未设置尺寸时帧不变"""
        frame = _frame()
        original = frame.image
        apply_edits(engine, frame, EditSpec(resize=PixelResize()))
        assert frame.image is original

    @pytest.mark.parametrize("degrees", [90, -270, 450])
    def test_quarter_turn_swaps_dimensions(self, engine, degrees: int):
        """测试四分之一圈旋转交换宽高"""
        frame = _frame()
        apply_edits(engine, frame, EditSpec(rotation_degrees=degrees))
        assert frame.size == (100, 200)

    def test_rotation_is_clockwise(self, engine):
        """测试顺时针旋转"""
        # 左半红、右半蓝；顺时针 90° 后上半红、下半蓝
        img = Image.new("RGB", (20, 10), (0, 0, 255))
        img.paste((255, 0, 0), (0, 0, 10, 10))
        frame = Frame(image=img)
        engine.rotate(frame, 90)
        assert frame.image.getpixel((5, 2)) == (255, 0, 0)
        assert frame.image.getpixel((5, 17)) == (0, 0, 255)

    def test_full_turn_is_noop(self, engine):
        """测试整圈旋转不改变帧"""
        frame = _frame()
        original = frame.image
        apply_edits(engine, frame, EditSpec(rotation_degrees=360))
        assert frame.image is original

    def test_arbitrary_angle_expands_with_transparency(self, engine):
        """测试任意角度旋转扩展透明画布"""
        frame = _frame(size=(100, 100))
        engine.rotate(frame, 45)
        assert frame.image.mode == "RGBA"
        assert frame.size[0] > 100 and frame.size[1] > 100
        # 角落是新增的透明区域
        assert frame.image.getpixel((0, 0))[3] == 0

    def test_rotation_happens_before_resize(self, engine):
        """测试先旋转后缩放"""
        frame = _frame()
        edits = EditSpec(
            rotation_degrees=90,
            resize=PixelResize(width=50, height=100, lock_ratio=False),
        )
        apply_edits(engine, frame, edits)
        assert frame.size == (50, 100)

    def test_extent_centers_on_transparent_canvas(self, engine):
        """测试扩展画布居中对齐"""
        frame = _frame(size=(100, 50))
        engine.extent(frame, 100, 100)
        assert frame.size == (100, 100)
        assert frame.image.mode == "RGBA"
        assert frame.image.getpixel((50, 5))[3] == 0
        assert frame.image.getpixel((50, 50)) == (255, 0, 0, 255)

    def test_decoded_frame_carries_no_format(self, engine):
        """测试解码的帧不带输出格式"""
        frame = engine.decode_first_frame(make_image_bytes())
        try:
            assert frame.size == (200, 100)
            assert frame.format is None
        finally:
            frame.close()

    def test_decode_preserves_source_bytes(self, engine):
        """测试解码不修改源数据"""
        data = make_image_bytes()
        engine.decode(data).close()
        assert Image.open(BytesIO(data)).size == (200, 100)

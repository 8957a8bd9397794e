"""格式处理模块。

为目标格式准备帧的色彩模式，并生成 Pillow 的保存参数。
"""

from typing import Any

from PIL import Image


# 不支持透明度、需要合成到白色背景的格式
OPAQUE_FORMATS = frozenset({"JPEG", "BMP", "PDF"})


def flatten_alpha(
    img: Image.Image, background: tuple[int, int, int] = (255, 255, 255)
) -> Image.Image:
    """将带透明通道的图像合成到纯色背景上，返回 RGB 图像"""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        rgb_img = Image.new("RGB", rgba.size, background)
        rgb_img.paste(rgba, mask=rgba.split()[-1])
        return rgb_img
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def prepare_for_format(img: Image.Image, format_key: str) -> Image.Image:
    """为目标格式准备图片

    Args:
        img: PIL图片对象
        format_key: 目标格式

    Returns:
        Image.Image: 处理后的图片对象，可能与输入为同一对象
    """
    if format_key in OPAQUE_FORMATS:
        return flatten_alpha(img)

    match img.mode:
        case "RGB" | "RGBA":
            return img
        case "P" if "transparency" in img.info:
            return img.convert("RGBA")
        case "LA" | "PA":
            return img.convert("RGBA")
        case _:
            return img.convert("RGB")


def get_save_parameters(format_key: str, quality: int | None) -> dict[str, Any]:
    """获取单帧保存参数（不包含 format 与多帧相关参数）"""
    match format_key:
        case "JPEG":
            return get_jpeg_params(quality)
        case "PNG":
            return {"optimize": True}
        case "WEBP":
            return get_webp_params(quality)
        case "AVIF":
            return {"quality": quality} if quality is not None else {}
        case "PDF":
            return {"resolution": 72.0}
        case _:
            return {}


def get_jpeg_params(quality: int | None) -> dict[str, Any]:
    """获取JPEG压缩参数

    - quality: 1-100
    - optimize: 额外处理以找到最优编码设置
    - subsampling: 色度子采样，高质量时使用 4:2:2
    """
    jpeg_quality = max(1, min(100, quality if quality is not None else 92))
    params: dict[str, Any] = {
        "quality": jpeg_quality,
        "optimize": True,
        "progressive": False,
    }

    if jpeg_quality >= 85:
        params["subsampling"] = 1  # "4:2:2"
    else:
        params["subsampling"] = 2  # "4:2:0"

    return params


def get_webp_params(quality: int | None) -> dict[str, Any]:
    """获取WebP压缩参数

    quality 为 100 时使用无损模式；alpha_quality 控制透明通道质量。
    """
    if quality is None or quality >= 100:
        return {"lossless": True, "quality": 100, "method": 4, "exact": True}

    webp_quality = max(1, quality)
    params: dict[str, Any] = {
        "quality": webp_quality,
        "method": 4,
    }

    if webp_quality >= 85:
        params["alpha_quality"] = 100  # 透明通道无损
    elif webp_quality >= 70:
        params["alpha_quality"] = min(100, webp_quality + 10)
    else:
        params["alpha_quality"] = webp_quality

    return params

"""图像批量转换 MCP 服务器。

作为宿主环境：从磁盘读取选择的文件，构建任务快照，运行转换并把结果写入输出目录。
"""

from typing import Any

from fastmcp import FastMCP

from .converter import ImageConverter
from .exceptions import ValidationError
from .models import ClassifiedError, ErrorCategory, FormatCatalog
from .utils.file_helpers import read_selected_files
from .utils.logging_helpers import configure_logging
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import write_run_result


# MCP 服务器响应类型定义
MCPConversionResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str, field: str | None = None) -> dict[str, Any]:
        """构建验证错误结果。"""
        details = {"field": field} if field else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="validation",
            details=details,
        )

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        """构建文件相关错误结果。"""
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="file",
            details=details,
        )


# 配置日志
logger = configure_logging()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("图像批量转换服务")

# 全局转换器实例
converter = ImageConverter()


# ============================================================================
# 核心工具
# ============================================================================


@mcp.tool()
async def convert_images(
    input_paths: list[str],
    output_dir: str,
    target_format: str = "PNG",
    quality: int | None = None,
    rotation_degrees: int = 0,
    resize_mode: str = "none",
    resize_percent: int = 100,
    resize_width: int | None = None,
    resize_height: int | None = None,
    lock_ratio: bool = True,
    bundle_as_zip: bool = False,
    merge_to_animation: bool = False,
    frame_delay_ms: int | None = None,
) -> MCPConversionResponse:
    """批量转换图片

    对所有图片应用相同的旋转和尺寸调整，转换为目标格式。
    多个输出打包为 converted_images.zip；目标为 GIF/WebP 且 merge_to_animation
    为 True 时，把所有图片按顺序合并为一个动画。

    Args:
        input_paths: 输入文件路径（顺序即动画播放顺序）
        output_dir: 输出目录
        target_format: 目标格式，见 list_formats
        quality: 输出质量 1-100
        rotation_degrees: 顺时针旋转角度
        resize_mode: none / percent / pixels
        resize_percent: 百分比模式的比例 1-200
        resize_width: 像素模式的宽度
        resize_height: 像素模式的高度
        lock_ratio: 像素模式是否锁定宽高比
        bundle_as_zip: 单个输出时也打包为 zip
        merge_to_animation: 合并为动画
        frame_delay_ms: 动画帧间隔（毫秒）

    Returns:
        dict: 转换结果，包含输出路径或分类后的错误信息
    """
    engine_error = converter.engine_error
    if engine_error is not None:
        return MCPResponseBuilder.error(
            engine_error.message, engine_error.category.value
        )

    try:
        ingestion = converter.ingest(read_selected_files(input_paths))
    except FileNotFoundError as e:
        logger.error(MessageFormatter.operation_failed("读取文件", input_paths, e))
        return MCPResponseBuilder.file_error(str(e))

    if not ingestion.accepted:
        return MCPResponseBuilder.validation_error(
            ingestion.rejection_message or "No image files selected.", "input_paths"
        )

    try:
        job = converter.build_job(
            ingestion.accepted,
            target_format=target_format,
            quality=quality,
            rotation_degrees=rotation_degrees,
            resize_mode=resize_mode,
            resize_percent=resize_percent,
            resize_width=resize_width,
            resize_height=resize_height,
            lock_ratio=lock_ratio,
            bundle_as_zip=bundle_as_zip,
            merge_to_animation=merge_to_animation,
            frame_delay_ms=frame_delay_ms,
        )
    except ValidationError as e:
        return MCPResponseBuilder.validation_error(e.message)

    outcome = await converter.run(job)
    if not outcome.success or outcome.result is None:
        error = outcome.error or ClassifiedError(
            category=ErrorCategory.UNKNOWN, message=outcome.get_summary()
        )
        return MCPResponseBuilder.error(
            error.message,
            error.category.value,
            {"rejected": ingestion.rejection_message}
            if ingestion.rejection_message
            else None,
        )

    written = write_run_result(outcome.result, output_dir)
    return {
        "success": True,
        "output_path": str(written),
        "mime_type": outcome.result.mime_type,
        "is_archive": outcome.result.archive is not None,
        "entries": [e.name for e in outcome.result.archive.entries]
        if outcome.result.archive
        else [],
        "summary": outcome.result.get_summary(),
        "rejected": ingestion.rejected,
        "rejection_message": ingestion.rejection_message,
        "error": None,
    }


@mcp.tool()
def list_formats() -> list[dict[str, Any]]:
    """列出支持的输出格式及其能力"""
    return [descriptor.model_dump() for descriptor in FormatCatalog.all()]


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动图像批量转换 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()

"""文件工具模块。

提供文件选择的分拣和基于 Pillow 注册表的 MIME 类型推断。
"""

from collections.abc import Iterable
from pathlib import Path

from PIL import Image

from ..models.conversion_job import ImageItem, IngestionResult, SelectedFile
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def partition_selection(
    files: Iterable[SelectedFile], max_listed: int = 5
) -> IngestionResult:
    """把选择的文件分为接收和拒绝两部分

    只接收声明的 MIME 类型以 image/ 开头的文件，拒绝的文件不会影响接收的文件。

    Args:
        files: 文件选择结果
        max_listed: 拒绝提示中最多列出的文件名数量

    Returns:
        IngestionResult: 分拣结果
    """
    accepted: list[ImageItem] = []
    rejected: list[str] = []

    for selected in files:
        if selected.is_image:
            accepted.append(ImageItem.from_selected(selected))
        else:
            rejected.append(selected.name)

    message = MessageFormatter.rejected_files(rejected, limit=max_listed)
    if message:
        logger.warning(message)

    return IngestionResult(
        accepted=accepted, rejected=rejected, rejection_message=message
    )


def guess_image_mime_type(file_path: str | Path) -> str:
    """根据扩展名推断 MIME 类型

    使用 Pillow 的扩展名与 MIME 注册表；无法识别时返回 application/octet-stream。
    """
    Image.init()
    suffix = Path(file_path).suffix.lower()
    format_name = Image.registered_extensions().get(suffix)
    if format_name is None:
        return "application/octet-stream"
    return Image.MIME.get(format_name) or f"image/{format_name.lower()}"


def read_selected_files(paths: Iterable[str | Path]) -> list[SelectedFile]:
    """从磁盘读取文件，构造文件选择结果

    Raises:
        FileNotFoundError: 文件不存在时
    """
    selected = []
    for raw_path in paths:
        path = Path(raw_path)
        if not path.is_file():
            raise FileNotFoundError(MessageFormatter.file_not_found(path))
        selected.append(
            SelectedFile(
                name=path.name,
                data=path.read_bytes(),
                mime_type=guess_image_mime_type(path),
            )
        )
    return selected

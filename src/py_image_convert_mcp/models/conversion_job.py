"""转换任务模型。

定义输入图片、文件选择结果和一次运行的不可变任务快照。
"""

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from .constants import FormatDescriptor
from .edit_spec import EditSpec


class SelectedFile(BaseModel):
    """文件选择器交付的单个条目"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="文件名")
    data: bytes = Field(repr=False, description="文件内容")
    mime_type: str = Field("", description="声明的 MIME 类型")

    @property
    def is_image(self) -> bool:
        return self.mime_type.lower().startswith("image/")


class ImageItem(BaseModel):
    """已接收的输入图片"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex, description="运行期内稳定的标识")
    name: str = Field(description="原始文件名")
    mime_type: str = Field(description="声明的 MIME 类型")
    source_bytes: bytes = Field(repr=False, description="原始字节")
    render_error: bool = Field(False, description="预览渲染是否失败")

    @classmethod
    def from_selected(cls, selected: SelectedFile) -> "ImageItem":
        return cls(
            name=selected.name,
            mime_type=selected.mime_type,
            source_bytes=selected.data,
        )


class IngestionResult(BaseModel):
    """文件选择的分拣结果"""

    accepted: list[ImageItem] = Field(default_factory=list, description="接收的图片")
    rejected: list[str] = Field(default_factory=list, description="被拒绝的文件名")
    rejection_message: str | None = Field(None, description="拒绝提示")

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)


class ConversionJob(BaseModel):
    """一次运行的任务快照，运行期间不可变"""

    model_config = ConfigDict(frozen=True)

    items: tuple[ImageItem, ...] = Field(description="按顺序排列的输入图片")
    target_format: FormatDescriptor = Field(description="目标格式")
    edits: EditSpec = Field(default_factory=EditSpec, description="编辑参数")
    merge_to_animation: bool = Field(False, description="合并为动画")
    animation_frame_delay_ms: int = Field(500, gt=0, description="动画帧间隔（毫秒）")
    bundle_as_zip: bool = Field(False, description="打包为 zip")

    @property
    def uses_merge_path(self) -> bool:
        """是否走动画合并路径"""
        return (
            self.merge_to_animation
            and self.target_format.supports_animation_merge
            and len(self.items) >= 2
        )

    @property
    def frame_delay_centiseconds(self) -> int:
        """帧间隔换算为 1/100 秒，四舍五入取整"""
        return (self.animation_frame_delay_ms + 5) // 10

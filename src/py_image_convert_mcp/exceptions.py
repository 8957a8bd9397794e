"""图像转换异常处理模块。

定义统一的异常类、引擎异常转换装饰器和面向用户的错误分类器。
"""

import re
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.run_result import ClassifiedError, ErrorCategory


T = TypeVar("T")


# 统一的异常类型
class ImageConvertError(Exception):
    """图像转换相关错误基类"""

    def __init__(self, message: str, item_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.item_name = item_name


class InitializationError(ImageConvertError):
    """图像引擎初始化失败，所有运行都被阻止"""

    pass


class ValidationError(ImageConvertError):
    """参数验证错误 - 统一的验证错误类型"""

    pass


class ConversionError(ImageConvertError):
    """运行过程中的转换错误，中止整个运行"""

    pass


class DecodeError(ConversionError):
    """解码失败"""

    pass


class EditError(ConversionError):
    """编辑（旋转、缩放、扩展画布）失败"""

    pass


class EncodeError(ConversionError):
    """编码失败"""

    pass


class MissingCodecError(EncodeError):
    """目标格式需要的编码器不可用"""

    pass


class SizeMismatchError(EncodeError):
    """多帧输出要求所有帧尺寸一致"""

    pass


class PackagingError(ConversionError):
    """归档生成失败"""

    pass


class RunCancelledError(ConversionError):
    """运行被取消"""

    pass


_STAGE_ERRORS: dict[str, type[ConversionError]] = {
    "decode": DecodeError,
    "edit": EditError,
    "encode": EncodeError,
    "package": PackagingError,
}


# 引擎异常转换装饰器
def handle_engine_errors(stage: str):
    """将引擎抛出的底层异常统一转换为对应阶段的转换错误

    Args:
        stage: 处理阶段，decode / edit / encode / package
    """
    error_class = _STAGE_ERRORS[stage]

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ImageConvertError:
                raise
            except (UnidentifiedImageError, DecompressionBombError) as e:
                # 保留引擎的原始消息
                raise error_class(str(e)) from e
            except KeyError as e:
                # Pillow 保存时对未注册的格式抛出 KeyError
                if stage == "encode":
                    raise MissingCodecError(f"encoder not available: {e}") from e
                raise error_class(str(e)) from e
            except Exception as e:
                raise error_class(str(e) or type(e).__name__) from e

        return wrapper

    return decorator


class ErrorClassifier:
    """将运行失败映射为少量可操作的错误分类"""

    CODEC_HINT = (
        "The selected format needs an external encoder that is not available. "
        "Please choose a supported multi-frame format (GIF or WebP) instead."
    )
    SIZE_HINT = (
        "Frames have different sizes. When 'lock ratio' is enabled, "
        "check the resize width and height."
    )
    ENGINE_HINT = "The image engine failed to initialize. Reload to try again."
    CANCELLED_HINT = "Conversion was cancelled."

    _CODEC_SIGNATURE = re.compile(
        r"delegate|encoder not available|decoder not available|"
        r"unknown file extension|no encoder",
        re.IGNORECASE,
    )
    _SIZE_SIGNATURE = re.compile(
        r"same (size|dimensions)|size mismatch|images do not match",
        re.IGNORECASE,
    )

    @classmethod
    def classify(cls, error: BaseException) -> ClassifiedError:
        """根据异常类型和消息特征进行分类"""
        message = str(error)
        match error:
            case InitializationError():
                return ClassifiedError(
                    category=ErrorCategory.ENGINE_UNAVAILABLE, message=cls.ENGINE_HINT
                )
            case MissingCodecError():
                return cls._codec()
            case SizeMismatchError():
                return cls._size_mismatch()
            case RunCancelledError():
                return ClassifiedError(
                    category=ErrorCategory.CANCELLED, message=cls.CANCELLED_HINT
                )
            case _ if cls._CODEC_SIGNATURE.search(message):
                return cls._codec()
            case _ if cls._SIZE_SIGNATURE.search(message):
                return cls._size_mismatch()
            case _:
                return ClassifiedError(category=ErrorCategory.UNKNOWN, message=message)

    @classmethod
    def _codec(cls) -> ClassifiedError:
        return ClassifiedError(
            category=ErrorCategory.UNSUPPORTED_EXTERNAL_CODEC, message=cls.CODEC_HINT
        )

    @classmethod
    def _size_mismatch(cls) -> ClassifiedError:
        return ClassifiedError(
            category=ErrorCategory.FRAME_SIZE_MISMATCH, message=cls.SIZE_HINT
        )

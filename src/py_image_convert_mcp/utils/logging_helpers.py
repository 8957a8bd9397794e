"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler

from ..config import AppConfig, get_config


PACKAGE_LOGGER = "py_image_convert_mcp"


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        # 获取调用者的模块名
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(app_config: AppConfig | None = None) -> logging.Logger:
    """按照 LoggingDefaults 配置包级日志记录器。

    重复调用不会叠加处理器。

    Args:
        app_config: 应用配置，默认使用全局配置

    Returns:
        logging.Logger: 包级日志记录器
    """
    settings = (app_config or get_config()).logging
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(settings.LOG_LEVEL)

    formatter = logging.Formatter(settings.LOG_FORMAT)

    if not any(
        isinstance(h, logging.StreamHandler)
        and not isinstance(h, RotatingFileHandler)
        for h in package_logger.handlers
    ):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        package_logger.addHandler(stream_handler)

    if settings.ENABLE_FILE_LOGGING and not any(
        isinstance(h, RotatingFileHandler) for h in package_logger.handlers
    ):
        file_handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=settings.LOG_FILE_MAX_SIZE,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger

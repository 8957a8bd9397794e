"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ConversionDefaults:
    """转换相关的默认配置"""

    # 目标格式与质量
    TARGET_FORMAT: str = "PNG"
    QUALITY: int = 92

    # 动画合并
    FRAME_DELAY_MS: int = 500
    GIF_LOOP: int = 0  # 0 = 无限循环
    ANIMATION_BASENAME: str = "animation"

    # 打包
    ARCHIVE_NAME: str = "converted_images.zip"

    # 拒绝列表中最多展示的文件名数量
    MAX_REJECTED_NAMES: int = 5


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_convert.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.conversion = ConversionDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 转换配置
        if target_format := os.getenv("IMC_DEFAULT_FORMAT"):
            object.__setattr__(
                self.conversion, "TARGET_FORMAT", target_format.upper()
            )

        if quality := os.getenv("IMC_DEFAULT_QUALITY"):
            object.__setattr__(self.conversion, "QUALITY", int(quality))

        if frame_delay := os.getenv("IMC_FRAME_DELAY_MS"):
            object.__setattr__(self.conversion, "FRAME_DELAY_MS", int(frame_delay))

        # 日志配置
        if log_level := os.getenv("IMC_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("IMC_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()

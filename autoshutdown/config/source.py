"""
配置来源适配 (config/source.py)
=============================
把 Pydantic 配置对象适配为宿主风格的 get_option(key, default) 接口。

配置键沿用宿主模块的命名（可带或不带 "ServerAutoShutdown." 前缀）：

    Enabled               → enabled
    Time                  → time
    Weekday               → weekday
    EveryDays             → every_days
    PreAnnounce.Seconds   → pre_announce.seconds
    PreAnnounce.Message   → pre_announce.message
    StartEvents           → start_events
"""

from pathlib import Path
from typing import Any

from loguru import logger

from autoshutdown.config.loader import camel_to_snake, load_config
from autoshutdown.config.schema import Config
from autoshutdown.host.base import ConfigSource

OPTION_PREFIX = "ServerAutoShutdown."


class SettingsConfigSource(ConfigSource):
    """
    基于 Config 对象的配置来源。

    reload() 会重新读取配置文件，供热重载使用。
    """

    def __init__(self, config: Config | None = None, config_path: Path | None = None):
        """
        参数:
            config: 已加载的配置对象；为 None 时从 config_path 加载
            config_path: 配置文件路径；为 None 时使用默认路径
        """
        self.config_path = config_path
        self.config = config if config is not None else load_config(config_path)

    def reload(self) -> Config:
        """重新读取配置文件并返回新的配置对象。"""
        self.config = load_config(self.config_path)
        logger.info("AutoShutdown: configuration reloaded")
        return self.config

    def get_option(self, key: str, default: Any) -> Any:
        if key.startswith(OPTION_PREFIX):
            key = key[len(OPTION_PREFIX):]

        node: Any = self.config
        for part in key.split("."):
            name = camel_to_snake(part)
            if not hasattr(node, name):
                logger.debug(f"AutoShutdown: unknown option '{key}', using default")
                return default
            node = getattr(node, name)

        if node is None:
            return default
        return node

"""
宿主模块 - 调度器依赖的宿主能力接口，以及供 CLI 使用的控制台宿主实现。

本模块包含：
- ConfigSource / AnnouncementSink / ShutdownPrimitive / EventRegistry：宿主接口
- ShutdownMask / ExitCode：关服选项与退出码
- ConsoleHost：在终端中模拟宿主的实现
"""

from autoshutdown.host.base import (
    AnnouncementSink,
    ConfigSource,
    EventRegistry,
    ExitCode,
    ShutdownMask,
    ShutdownPrimitive,
)
from autoshutdown.host.console import ConsoleHost

__all__ = [
    "AnnouncementSink",
    "ConfigSource",
    "EventRegistry",
    "ExitCode",
    "ShutdownMask",
    "ShutdownPrimitive",
    "ConsoleHost",
]

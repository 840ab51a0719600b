"""
自动关服服务模块。

本模块提供 ShutdownService：根据配置构建关服计划，在预告时刻广播消息并
调用宿主关服原语；由宿主的 tick 驱动，不创建任何线程。
"""

from autoshutdown.service.shutdown import ShutdownService, format_announcement

__all__ = ["ShutdownService", "format_announcement"]

"""
宿主接口模块 - 定义关服调度器依赖的宿主能力。

调度器本身不了解游戏服务器的会话、世界对象或事件系统，
只通过以下窄接口与宿主交互（由宿主在启动时注入）：

- ConfigSource：读取配置项
- AnnouncementSink：向所有在线会话广播消息
- ShutdownPrimitive：发起/取消宿主关服（宿主负责宽限期倒计时）
- EventRegistry：启动游戏事件并查询事件描述
"""

from abc import ABC, abstractmethod
from enum import IntEnum, IntFlag
from typing import Any


class ShutdownMask(IntFlag):
    """关服选项位掩码。"""
    RESTART = 1  # 关服后由守护进程重启
    IDLE = 2     # 仅在没有在线玩家时关服


class ExitCode(IntEnum):
    """宿主进程退出码。"""
    SHUTDOWN = 0
    ERROR = 1
    RESTART = 2


class ConfigSource(ABC):
    """配置来源。"""

    @abstractmethod
    def get_option(self, key: str, default: Any) -> Any:
        """
        读取配置项。

        参数:
            key: 配置键（如 "ServerAutoShutdown.Time"）
            default: 配置缺失时的默认值，其类型决定返回值的类型

        返回:
            配置值
        """
        pass


class AnnouncementSink(ABC):
    """服务器广播通道。"""

    @abstractmethod
    def send_server_message(self, message: str) -> None:
        """向所有在线会话广播一条服务器消息。"""
        pass


class ShutdownPrimitive(ABC):
    """宿主关服原语。"""

    @abstractmethod
    def shutdown_serv(self, grace_s: int, mask: ShutdownMask, exit_code: ExitCode) -> None:
        """
        在 grace_s 秒宽限期后关闭宿主。重复调用会以最新一次为准。

        参数:
            grace_s: 宽限期（秒）
            mask: 关服选项
            exit_code: 宿主退出码
        """
        pass

    @abstractmethod
    def shutdown_cancel(self) -> None:
        """取消尚未生效的宿主关服；没有待生效的关服时什么也不做。"""
        pass


class EventRegistry(ABC):
    """游戏事件注册表。"""

    @abstractmethod
    def start_event(self, event_id: int) -> None:
        """启动指定 ID 的游戏事件。"""
        pass

    @abstractmethod
    def describe_event(self, event_id: int) -> str:
        """返回事件的可读描述（用于日志）。"""
        pass

"""
控制台宿主 - 在终端里模拟游戏服务器的广播、关服和事件能力。

供 CLI 的 run 命令使用：
- 广播消息打印到终端（Rich）并写入日志
- shutdown_serv() 启动宽限期倒计时，由 update() 推进，
  倒计时期间按固定节奏广播剩余时间
- 倒计时结束后记录退出码并进入 stopped 状态，由调用方退出进程
"""

from loguru import logger
from rich.console import Console
from rich.text import Text

from autoshutdown.host.base import AnnouncementSink, EventRegistry, ExitCode, ShutdownMask, ShutdownPrimitive
from autoshutdown.utils.helpers import format_duration

MINUTE = 60
HOUR = 60 * MINUTE


def _is_countdown_mark(remaining_s: int) -> bool:
    """判断倒计时剩余 remaining_s 秒时是否需要广播。"""
    if remaining_s <= 0:
        return False
    return (
        (remaining_s < 5 * MINUTE and remaining_s % 15 == 0)       # 5 分钟内：每 15 秒
        or (remaining_s < 15 * MINUTE and remaining_s % MINUTE == 0)   # 15 分钟内：每分钟
        or (remaining_s < 30 * MINUTE and remaining_s % (5 * MINUTE) == 0)  # 30 分钟内：每 5 分钟
        or (remaining_s < 12 * HOUR and remaining_s % HOUR == 0)    # 12 小时内：每小时
        or (remaining_s >= 12 * HOUR and remaining_s % (12 * HOUR) == 0)  # 更久：每 12 小时
    )


class ConsoleHost(AnnouncementSink, ShutdownPrimitive, EventRegistry):
    """
    终端宿主实现。

    属性:
        messages: 已广播的消息（按顺序）
        started_events: 已启动的事件 ID
        exit_code: 关服生效后的退出码；尚未关服时为 None
    """

    def __init__(self, console: Console | None = None, event_descriptions: dict[int, str] | None = None):
        """
        参数:
            console: Rich 控制台实例，默认新建
            event_descriptions: 事件 ID → 描述 的映射，用于日志
        """
        self.console = console or Console()
        self.event_descriptions = event_descriptions or {}
        self.messages: list[str] = []
        self.started_events: list[int] = []
        self.exit_code: ExitCode | None = None
        self._remaining_ms: int | None = None   # 关服倒计时（毫秒），None 表示没有待生效的关服
        self._mask = ShutdownMask(0)
        self._pending_exit = ExitCode.SHUTDOWN

    @property
    def stopped(self) -> bool:
        """关服是否已经生效。"""
        return self.exit_code is not None

    @property
    def shutdown_pending(self) -> bool:
        """是否有尚未生效的关服倒计时。"""
        return self._remaining_ms is not None

    @property
    def shutdown_remaining_s(self) -> int | None:
        """关服倒计时剩余秒数（向上取整）。"""
        if self._remaining_ms is None:
            return None
        return -(-self._remaining_ms // 1000)

    def send_server_message(self, message: str) -> None:
        self.messages.append(message)
        self.console.print(Text(message, style="bold yellow"))

    def shutdown_serv(self, grace_s: int, mask: ShutdownMask, exit_code: ExitCode) -> None:
        if self.stopped:
            return

        self._mask = mask
        self._pending_exit = exit_code
        if grace_s <= 0:
            self._finish()
            return

        self._remaining_ms = grace_s * 1000
        logger.info(f"Host: shutdown armed, {format_duration(grace_s)} grace (mask={int(mask)}, exit={int(exit_code)})")
        self._announce_countdown(grace_s)

    def shutdown_cancel(self) -> None:
        if self._remaining_ms is None:
            return
        self._remaining_ms = None
        logger.info("Host: pending shutdown cancelled")
        self.send_server_message(f"{self._verb()} cancelled.")

    def start_event(self, event_id: int) -> None:
        self.started_events.append(event_id)

    def describe_event(self, event_id: int) -> str:
        return self.event_descriptions.get(event_id, f"event #{event_id}")

    def update(self, diff_ms: int) -> None:
        """
        推进关服倒计时。

        参数:
            diff_ms: 距上次 update 经过的毫秒数
        """
        if self._remaining_ms is None or self.stopped:
            return

        before_s = self.shutdown_remaining_s or 0
        self._remaining_ms -= max(0, diff_ms)
        if self._remaining_ms <= 0:
            self._finish()
            return

        after_s = self.shutdown_remaining_s or 0
        # 本次 tick 跨过的整秒中，只广播最接近当前时刻的那个节点
        for remaining_s in range(after_s, before_s):
            if _is_countdown_mark(remaining_s):
                self._announce_countdown(remaining_s)
                break

    def _verb(self) -> str:
        return "Server restart" if ShutdownMask.RESTART in self._mask else "Server shutdown"

    def _announce_countdown(self, remaining_s: int) -> None:
        self.send_server_message(f"{self._verb()} in {format_duration(remaining_s, full_text=True)}.")

    def _finish(self) -> None:
        self._remaining_ms = None
        self.exit_code = self._pending_exit
        logger.info(f"Host: {self._verb().lower()} now (exit code {int(self.exit_code)})")

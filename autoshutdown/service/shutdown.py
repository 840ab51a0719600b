"""
自动关服服务 - 编排配置读取、关服计划、延时调度和宿主回调。

工作流程：
1. init()：读取配置快照，校验时间/星期/间隔，取消旧的待触发动作，
   构建关服计划并为每个计划项注册一个预告回调
2. 预告回调触发时：格式化预告消息并广播，然后调用宿主关服原语，
   以实际提前量作为宽限期（关服本身由宿主倒计时完成）
3. on_update()：宿主每个 tick 调用一次，把经过的时间转交给调度器

所有依赖（配置来源、广播通道、关服原语、事件注册表）都由构造函数注入，
不使用全局单例。任何配置错误只记录日志并回退/跳过，不会向宿主抛出异常。
"""

from datetime import datetime
from typing import Any, Callable

from loguru import logger

from autoshutdown.config.schema import DEFAULT_PRE_ANNOUNCE_MESSAGE
from autoshutdown.host.base import (
    AnnouncementSink,
    ConfigSource,
    EventRegistry,
    ExitCode,
    ShutdownMask,
    ShutdownPrimitive,
)
from autoshutdown.schedule.plan import build_plan, parse_times
from autoshutdown.schedule.scheduler import TaskScheduler
from autoshutdown.schedule.types import PlanEntry, RecurrenceRule, ShutdownPlan
from autoshutdown.utils.helpers import format_duration

OPTION_PREFIX = "ServerAutoShutdown."

DEFAULT_TIME = "04:00:00"
MAX_EVERY_DAYS = 365


def format_announcement(template: str, lead_s: int) -> str:
    """
    用剩余时间填充预告消息模板。

    模板使用一个位置占位符 {}；模板格式错误时回退到默认模板。

    参数:
        template: 消息模板
        lead_s: 距离关服的秒数

    返回:
        格式化后的消息
    """
    remaining = format_duration(lead_s, full_text=True)
    try:
        return template.format(remaining)
    except (IndexError, KeyError, ValueError) as e:
        logger.error(f"AutoShutdown: invalid pre-announce message template '{template}': {e}")
        return DEFAULT_PRE_ANNOUNCE_MESSAGE.format(remaining)


class ShutdownService:
    """
    自动关服服务。

    由宿主在启动时创建一次并持有；配置重载时再次调用 init() 即可，
    旧的待触发动作会被全部取消。
    """

    def __init__(
        self,
        config: ConfigSource,
        announcer: AnnouncementSink,
        world: ShutdownPrimitive,
        events: EventRegistry | None = None,
        scheduler: TaskScheduler | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        初始化自动关服服务。

        参数:
            config: 配置来源
            announcer: 广播通道（向所有在线会话发送消息）
            world: 宿主关服原语
            events: 游戏事件注册表（仅 start_persistent_events 使用）
            scheduler: 延时调度器，默认新建
            clock: 返回当前本地时间的函数，默认 datetime.now
        """
        self.config = config
        self.announcer = announcer
        self.world = world
        self.events = events
        self.scheduler = scheduler or TaskScheduler()
        self.clock = clock
        self.enabled = False
        self.plan: ShutdownPlan | None = None
        self._message_template = DEFAULT_PRE_ANNOUNCE_MESSAGE

    def _option(self, key: str, default: Any) -> Any:
        """读取配置项并转换为默认值的类型；转换失败时使用默认值。"""
        value = self.config.get_option(OPTION_PREFIX + key, default)
        if type(value) is type(default):
            return value
        # bool 是 int 的子类，数值项不接受 True/False
        if isinstance(value, bool):
            logger.error(f"AutoShutdown: invalid value '{value}' for option '{key}', using {default!r}")
            return default
        try:
            if isinstance(default, bool):
                return str(value).strip().lower() in ("1", "true", "yes", "on")
            return type(default)(value)
        except (TypeError, ValueError):
            logger.error(f"AutoShutdown: invalid value '{value}' for option '{key}', using {default!r}")
            return default

    def init(self) -> None:
        """
        （重新）初始化：读取配置、取消旧动作、构建计划并注册回调。

        以下情况会禁用模块（只记录日志，不抛异常）：
        - Enabled 为 false
        - Time 中没有任何合法的时间
        - EveryDays 不在 1-365 之间
        """
        self.enabled = self._option("Enabled", False)
        if not self.enabled:
            self.scheduler.cancel_all()
            self.plan = None
            logger.info("AutoShutdown: disabled")
            return

        raw_times = self._option("Time", DEFAULT_TIME)
        logger.info(f"AutoShutdown: loaded Time option: {raw_times}")
        times = parse_times(raw_times)

        if not times:
            logger.error("AutoShutdown: no valid shutdown times provided in config, disabling")
            self._disable()
            return

        weekday = self._option("Weekday", -1)
        every_days = self._option("EveryDays", 1)

        if weekday < -1 or weekday > 6:
            logger.warning(
                f"AutoShutdown: invalid weekday value '{weekday}'. "
                f"Must be -1 (disabled) or 0-6 (Sunday-Saturday). Using -1."
            )
            weekday = -1

        if every_days < 1 or every_days > MAX_EVERY_DAYS:
            logger.error(
                f"AutoShutdown: incorrect EveryDays value '{every_days}'. Must be 1-{MAX_EVERY_DAYS}, disabling"
            )
            self._disable()
            return

        lead_s = self._option("PreAnnounce.Seconds", 3600)
        self._message_template = self._option("PreAnnounce.Message", DEFAULT_PRE_ANNOUNCE_MESSAGE)

        # 取消所有旧动作，支持配置重载
        self.scheduler.cancel_all()
        self.world.shutdown_cancel()

        rule = RecurrenceRule.from_options(weekday, every_days)
        logger.info(f"AutoShutdown: scheduling {len(times)} time(s), {rule.describe()}")
        self.plan = build_plan(self.clock(), times, rule, lead_s)

        for entry in self.plan.entries:
            self.scheduler.schedule(
                entry.delay_s * 1000,
                self._make_pre_announce(entry),
                name=f"pre-announce {entry.time}",
            )

        if not self.plan.entries:
            logger.warning("AutoShutdown: every configured time was skipped, nothing scheduled")

    def _disable(self) -> None:
        self.enabled = False
        self.plan = None
        self.scheduler.cancel_all()

    def _make_pre_announce(self, entry: PlanEntry) -> Callable[[], None]:
        """为计划项创建预告回调（闭包捕获实际提前量和当时的消息模板）。"""
        lead_s = entry.lead_s
        template = self._message_template

        def fire() -> None:
            message = format_announcement(template, lead_s)
            logger.info(message)
            self.announcer.send_server_message(message)
            self.world.shutdown_serv(lead_s, ShutdownMask.RESTART, ExitCode.SHUTDOWN)

        return fire

    def on_update(self, diff_ms: int) -> None:
        """
        宿主 tick 回调。模块启用时把经过的时间转交给调度器。

        参数:
            diff_ms: 距上次调用经过的毫秒数
        """
        if not self.enabled:
            return
        self.scheduler.update(diff_ms)

    def start_persistent_events(self) -> None:
        """
        启动 StartEvents 中列出的游戏事件（空格分隔的事件 ID）。

        非数字的条目记录错误日志后跳过；没有注入事件注册表时什么也不做。
        """
        raw = self._option("StartEvents", "")
        if not raw.strip():
            return
        if self.events is None:
            logger.warning("AutoShutdown: StartEvents configured but no event registry available")
            return

        for token in raw.split():
            if not (token.isascii() and token.isdigit()):
                logger.error(f"AutoShutdown: invalid event id '{token}' in option 'StartEvents', skipping")
                continue
            event_id = int(token)
            try:
                self.events.start_event(event_id)
            except Exception as e:
                logger.error(f"AutoShutdown: failed to start event {event_id}: {e}")
                continue
            logger.info(f"AutoShutdown: starting event {self.events.describe_event(event_id)} ({event_id}).")

    def status(self) -> dict:
        """获取服务状态摘要（启用状态、待触发数、下次触发时间、计划项）。"""
        entries = self.plan.entries if self.plan else []
        return {
            "enabled": self.enabled,
            "pending": len(self.scheduler),
            "next_fire_in_ms": self.scheduler.next_due_in_ms(),
            "entries": len(entries),
        }

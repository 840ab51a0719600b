"""
关服计划构建 - 把配置的目标时刻列表转换为具体的预告/关服动作。

本模块负责：
- 解析 "HH:MM:SS;HH:MM:SS" 形式的时间列表（非法条目记录日志后丢弃）
- 校验并回退预告提前量
- 对每个目标时刻计算下一次关服时间、预告时间和实际提前量

规则：
1. 距离关服不足 MIN_REMAINING_S 秒的条目直接跳过（不是致命错误）
2. 提前量超出 [0, MAX_LEAD_S] 时回退为 DEFAULT_LEAD_S 并记录警告
3. 剩余时间小于提前量时，提前量缩短为剩余时间，预告在 1 秒后立即触发，
   保证预告消息总是先于关服发出
"""

from datetime import datetime, timedelta

from loguru import logger

from autoshutdown.schedule.types import (
    PlanEntry,
    RecurrenceRule,
    ScheduledAction,
    ShutdownPlan,
    TimeOfDay,
    TimeParseError,
    TimeRangeError,
)
from autoshutdown.utils.helpers import format_duration, format_timestamp

# 距离关服的最小安全时间（秒），不足则跳过
MIN_REMAINING_S = 10

# 预告提前量上限（1 天）以及越界时的回退值（1 小时）
MAX_LEAD_S = 86400
DEFAULT_LEAD_S = 3600

# 剩余时间不足提前量时，预告的触发延迟（秒）
SHORT_FUSE_DELAY_S = 1


def parse_times(raw: str) -> list[TimeOfDay]:
    """
    解析分号分隔的时间列表。

    空条目被忽略；格式错误或数值越界的条目记录错误日志后丢弃。
    重复的时间会原样保留，各自独立调度。

    参数:
        raw: 配置中的时间字符串，如 "04:00:00;20:00:00"

    返回:
        合法的 TimeOfDay 列表（保持配置顺序）
    """
    times: list[TimeOfDay] = []
    for token in raw.split(";"):
        token = token.strip()
        if not token:
            continue
        try:
            times.append(TimeOfDay.parse(token))
        except (TimeParseError, TimeRangeError) as e:
            logger.error(f"AutoShutdown: {e} in option 'Time', skipping")
    return times


def resolve_lead(lead_s: int) -> tuple[int, str | None]:
    """
    校验预告提前量。

    参数:
        lead_s: 配置的提前量（秒）

    返回:
        (实际提前量, 警告信息或 None)
    """
    if 0 <= lead_s <= MAX_LEAD_S:
        return lead_s, None
    warning = (
        f"Pre-announce lead {lead_s}s is outside 0-{MAX_LEAD_S}s, "
        f"falling back to {DEFAULT_LEAD_S}s"
    )
    return DEFAULT_LEAD_S, warning


def build_plan(
    now: datetime,
    times: list[TimeOfDay],
    rule: RecurrenceRule,
    lead_s: int,
) -> ShutdownPlan:
    """
    构建关服计划。

    参数:
        now: 当前本地时间（内部截断到整秒）
        times: 目标时刻列表
        rule: 重复规则
        lead_s: 请求的预告提前量（秒）

    返回:
        ShutdownPlan，每个保留下来的目标时刻对应一个 PlanEntry
    """
    now = now.replace(microsecond=0)
    plan = ShutdownPlan(now=now, rule=rule)

    lead_s, warning = resolve_lead(lead_s)
    if warning:
        logger.warning(f"AutoShutdown: {warning}")
        plan.warnings.append(warning)

    for tod in times:
        next_shutdown = rule.next_occurrence(now, tod)
        # 用时间戳相减，避免同一 tzinfo 下忽略夏令时偏移
        remaining_s = int(next_shutdown.timestamp() - now.timestamp())

        if remaining_s < MIN_REMAINING_S:
            logger.warning(
                f"AutoShutdown: next shutdown for {tod} is in {remaining_s}s "
                f"(< {MIN_REMAINING_S}s), skipping this time"
            )
            plan.skipped.append(tod)
            continue

        entry_lead_s = lead_s
        if remaining_s < entry_lead_s:
            entry_lead_s = remaining_s
            delay_s = SHORT_FUSE_DELAY_S
        else:
            delay_s = remaining_s - entry_lead_s
        announce_at = now + timedelta(seconds=delay_s)

        entry = PlanEntry(
            time=tod,
            pre_announce=ScheduledAction(kind="pre_announce", fire_at=announce_at, lead_s=entry_lead_s),
            shutdown=ScheduledAction(kind="shutdown", fire_at=next_shutdown, lead_s=entry_lead_s),
            delay_s=delay_s,
            remaining_s=remaining_s,
        )
        plan.entries.append(entry)

        logger.info(f"AutoShutdown: next shutdown at {format_timestamp(next_shutdown)} "
                    f"(in {format_duration(remaining_s)})")
        logger.info(f"AutoShutdown: pre-announce at {format_timestamp(announce_at)} "
                    f"(in {format_duration(delay_s)}, lead {format_duration(entry_lead_s)})")

    return plan

"""
关服调度类型定义 - 定义关服调度系统的所有数据模型。

本模块定义了调度系统的核心数据结构：
- TimeOfDay：一天中的目标时刻（时:分:秒）
- RecurrenceRule：重复规则（每 N 天 / 每周指定星期，二选一）
- ScheduledAction：计划动作（预告 / 关服）
- PlanEntry：单个目标时刻对应的一组计划动作
- ShutdownPlan：一次（重新）初始化得到的完整关服计划

星期编号沿用宿主配置的约定：0 = 周日，1 = 周一，……，6 = 周六。
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from autoshutdown.schedule.timemath import next_daily_occurrence, next_weekday_occurrence


class TimeParseError(ValueError):
    """时间格式错误（字段数量不对或包含非数字内容）。"""


class TimeRangeError(ValueError):
    """时间字段超出取值范围。"""


@dataclass(frozen=True)
class TimeOfDay:
    """
    一天中的某个时刻，不可变。

    属性:
        hour: 小时（0-23）
        minute: 分钟（0-59）
        second: 秒（0-59）
    """
    hour: int
    minute: int
    second: int

    @classmethod
    def parse(cls, text: str) -> "TimeOfDay":
        """
        解析 "HH:MM:SS" 格式的时间字符串。

        参数:
            text: 时间字符串，如 "04:00:00"

        返回:
            TimeOfDay 实例

        异常:
            TimeParseError: 字段数量不是 3，或字段不是非负整数
            TimeRangeError: 时/分/秒超出取值范围
        """
        tokens = [t.strip() for t in text.split(":") if t.strip()]
        if len(tokens) != 3:
            raise TimeParseError(f"Incorrect time format '{text}'")
        # 与宿主的 uint8 解析保持一致：只接受 0-255 的 ASCII 数字（"²" 之类的 Unicode 数字不算）
        if not all(t.isascii() and t.isdigit() and int(t) <= 255 for t in tokens):
            raise TimeParseError(f"Incorrect time '{text}'")

        hour, minute, second = (int(t) for t in tokens)
        if hour > 23 or minute > 59 or second > 59:
            raise TimeRangeError(f"Incorrect time value '{text}'")
        return cls(hour, minute, second)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"


@dataclass(frozen=True)
class RecurrenceRule:
    """
    关服重复规则。

    支持两种模式（同一时间只有一种生效）：
    - "every_days"：每隔 every_days 天在目标时刻关服
    - "weekday"：每周的 weekday（0=周日）在目标时刻关服
    """
    kind: Literal["every_days", "weekday"] = "every_days"
    every_days: int = 1          # "every_days" 模式：间隔天数（1-365）
    weekday: int | None = None   # "weekday" 模式：星期（0-6，0=周日）

    @classmethod
    def from_options(cls, weekday: int, every_days: int = 1) -> "RecurrenceRule":
        """
        根据配置项构造规则。weekday 在 0-6 之间时启用星期模式，否则按天间隔。

        参数:
            weekday: 星期配置值（-1 表示不启用星期模式）
            every_days: 天间隔配置值
        """
        if 0 <= weekday <= 6:
            return cls(kind="weekday", weekday=weekday)
        return cls(kind="every_days", every_days=every_days)

    def next_occurrence(self, now: datetime, tod: TimeOfDay) -> datetime:
        """计算 tod 在该规则下的下一次发生时间。"""
        if self.kind == "weekday" and self.weekday is not None:
            return next_weekday_occurrence(now, self.weekday, tod.hour, tod.minute, tod.second)
        return next_daily_occurrence(now, self.every_days, tod.hour, tod.minute, tod.second)

    def describe(self) -> str:
        """用于日志和 CLI 展示的人类可读描述。"""
        if self.kind == "weekday":
            names = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
            return f"every {names[self.weekday or 0]}"
        if self.every_days == 1:
            return "every day"
        return f"every {self.every_days} days"


@dataclass(frozen=True)
class ScheduledAction:
    """
    计划动作。

    属性:
        kind: 动作类型（"pre_announce" = 关服预告，"shutdown" = 关服生效）
        fire_at: 触发时间（本地时间）
        lead_s: 预告到关服之间的宽限秒数（同时作为关服原语的宽限期参数）
    """
    kind: Literal["pre_announce", "shutdown"]
    fire_at: datetime
    lead_s: int = 0


@dataclass(frozen=True)
class PlanEntry:
    """
    单个目标时刻的计划项：一次预告 + 一次关服。

    关服动作不会被单独调度，它是预告触发时的副作用，
    这里保留只是为了展示和日志。
    """
    time: TimeOfDay
    pre_announce: ScheduledAction
    shutdown: ScheduledAction
    delay_s: int                 # 从计划生成时刻到预告触发的秒数
    remaining_s: int             # 从计划生成时刻到关服的秒数

    @property
    def lead_s(self) -> int:
        """实际生效的预告提前量（秒）。"""
        return self.pre_announce.lead_s


@dataclass
class ShutdownPlan:
    """
    一次（重新）初始化得到的关服计划。

    属性:
        now: 计划生成时刻（已截断到整秒）
        rule: 使用的重复规则
        entries: 保留下来的计划项（按配置顺序，互相独立）
        skipped: 因距离过近被跳过的目标时刻
        warnings: 构建过程中产生的警告（如提前量越界回退）
    """
    now: datetime
    rule: RecurrenceRule
    entries: list[PlanEntry] = field(default_factory=list)
    skipped: list[TimeOfDay] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

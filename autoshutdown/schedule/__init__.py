"""
关服调度模块 - 目标时刻计算、关服计划构建和通用延时调度器。

本模块包含：
- next_daily_occurrence / next_weekday_occurrence：下一次发生时间计算
- build_plan：把配置的目标时刻转换为预告/关服动作
- TaskScheduler：由外部 tick 驱动的延时回调队列
"""

from autoshutdown.schedule.plan import build_plan, parse_times
from autoshutdown.schedule.scheduler import TaskScheduler
from autoshutdown.schedule.timemath import next_daily_occurrence, next_weekday_occurrence
from autoshutdown.schedule.types import RecurrenceRule, ShutdownPlan, TimeOfDay

__all__ = [
    "build_plan",
    "parse_times",
    "TaskScheduler",
    "next_daily_occurrence",
    "next_weekday_occurrence",
    "RecurrenceRule",
    "ShutdownPlan",
    "TimeOfDay",
]

"""
时间计算 - 计算目标时刻的下一次发生时间（纯函数，无状态）。

两个函数都在本地日历时间上运算：
- 参数 now 可以是朴素的本地时间（datetime.now()），也可以是带时区的时间
- 跨月、跨年的日期进位交给 datetime + timedelta 处理，不做手工天数计算
- 返回值与 now 使用相同的时区信息

星期编号沿用宿主配置约定（0=周日），与 Python 的 weekday()（0=周一）不同，
转换统一通过 host_weekday() 完成。
"""

from datetime import datetime, time, timedelta


def host_weekday(dt: datetime) -> int:
    """返回宿主约定的星期编号（0=周日，1=周一，……，6=周六）。"""
    return (dt.weekday() + 1) % 7


def next_daily_occurrence(now: datetime, every_days: int, hour: int, minute: int, second: int) -> datetime:
    """
    计算按天间隔的下一次发生时间。

    先把 now 的时分秒替换为目标时刻；如果 every_days > 1，或者替换后的时间
    不严格晚于 now，再向后推 every_days 天。
    every_days == 1 且目标时刻今天还没到时，当天触发。

    参数:
        now: 当前时间
        every_days: 天间隔（1-365）
        hour: 目标小时
        minute: 目标分钟
        second: 目标秒

    返回:
        下一次发生的时间
    """
    candidate = now.replace(hour=hour, minute=minute, second=second, microsecond=0)

    if every_days > 1 or candidate <= now:
        candidate += timedelta(days=every_days)

    return candidate


def next_weekday_occurrence(now: datetime, weekday: int, hour: int, minute: int, second: int) -> datetime:
    """
    计算每周指定星期的下一次发生时间。

    如果今天就是目标星期，且目标时刻已经过去或恰好等于当前时刻（按秒比较），
    则顺延到下周同一天；否则今天触发。

    参数:
        now: 当前时间
        weekday: 目标星期（0=周日，……，6=周六）
        hour: 目标小时
        minute: 目标分钟
        second: 目标秒

    返回:
        下一次发生的时间
    """
    days_until = (weekday - host_weekday(now) + 7) % 7

    if days_until == 0 and time(hour, minute, second) <= now.time().replace(microsecond=0):
        days_until = 7

    target_day = now + timedelta(days=days_until)
    return target_day.replace(hour=hour, minute=minute, second=second, microsecond=0)

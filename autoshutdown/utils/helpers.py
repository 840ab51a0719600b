"""
工具函数集合 - autoshutdown 项目全局通用的辅助函数。

函数分类：
- 时间格式化：format_duration, format_timestamp
"""

from datetime import datetime

# (单位秒数, 简写, 全称单数)
_UNITS = (
    (86400, "d", "day"),
    (3600, "h", "hour"),
    (60, "m", "minute"),
    (1, "s", "second"),
)


def format_duration(seconds: int, full_text: bool = False) -> str:
    """
    把秒数格式化为人类可读的时长，省略为 0 的单位。

    示例:
        format_duration(5405) → "1h 30m 5s"
        format_duration(5405, full_text=True) → "1 hour 30 minutes 5 seconds"

    参数:
        seconds: 秒数（负数按 0 处理）
        full_text: 是否使用完整英文单词（用于广播消息）

    返回:
        格式化后的字符串
    """
    seconds = max(0, int(seconds))
    parts = []
    for size, short, word in _UNITS:
        value, seconds = divmod(seconds, size)
        if not value:
            continue
        if full_text:
            parts.append(f"{value} {word}{'' if value == 1 else 's'}")
        else:
            parts.append(f"{value}{short}")

    if not parts:
        return "0 seconds" if full_text else "0s"
    return " ".join(parts)


def format_timestamp(dt: datetime) -> str:
    """格式化时间点，如 "Tue Jan 02 04:00:00 2024"。"""
    return dt.strftime("%a %b %d %H:%M:%S %Y")

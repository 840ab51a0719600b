"""
工具函数模块 - 提供日志和广播使用的时间格式化函数。
"""

from autoshutdown.utils.helpers import format_duration, format_timestamp

__all__ = ["format_duration", "format_timestamp"]

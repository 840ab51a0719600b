"""
通用延时任务调度器 - 由外部 tick 驱动的回调队列。

与业务无关，不了解任何关服语义：
- schedule()：注册一个在 delay_ms 毫秒后触发的回调
- cancel_all()：丢弃所有待触发回调（不会调用它们）
- update()：推进内部时钟，按到期时间升序触发所有到期回调，
  到期时间相同时按注册顺序触发

调度器是单线程协作式的：没有内部线程、不会阻塞，
所有状态只由调用 update() 的那个线程推进。
"""

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable

from loguru import logger


@dataclass(order=True)
class ScheduledTask:
    """
    调度器中的一个待触发任务（由调度器持有）。

    排序键为 (due_ms, seq)，保证到期时间相同时按注册顺序触发。
    """
    due_ms: int
    seq: int
    callback: Callable[[], None] = field(compare=False)
    name: str = field(default="", compare=False)


class TaskScheduler:
    """
    基于最小堆的延时回调队列。

    内部维护一个毫秒时钟（从 0 开始），只在 update() 时前进。
    """

    def __init__(self):
        self._heap: list[ScheduledTask] = []
        self._seq = itertools.count()
        self._now_ms = 0

    @property
    def now_ms(self) -> int:
        """调度器内部时钟（毫秒）。"""
        return self._now_ms

    def __len__(self) -> int:
        return len(self._heap)

    def schedule(self, delay_ms: int, callback: Callable[[], None], name: str = "") -> ScheduledTask:
        """
        注册回调，在不早于 delay_ms 毫秒后触发。负的延迟按 0 处理。

        参数:
            delay_ms: 延迟（毫秒）
            callback: 无参回调
            name: 任务名称（仅用于日志）

        返回:
            ScheduledTask 句柄（归调度器所有）
        """
        task = ScheduledTask(
            due_ms=self._now_ms + max(0, delay_ms),
            seq=next(self._seq),
            callback=callback,
            name=name,
        )
        heapq.heappush(self._heap, task)
        return task

    def cancel_all(self) -> None:
        """丢弃所有待触发任务。"""
        if self._heap:
            logger.debug(f"Scheduler: cancelled {len(self._heap)} pending tasks")
        self._heap.clear()

    def update(self, diff_ms: int) -> None:
        """
        推进内部时钟并触发所有到期任务。

        回调内可以注册新任务或调用 cancel_all()；被取消的任务不会再触发，
        新注册且已到期的任务会在本次 update 中继续触发。
        回调抛出的异常会被记录，不影响其他到期任务。

        参数:
            diff_ms: 距上次 update 经过的毫秒数
        """
        self._now_ms += max(0, diff_ms)

        while self._heap and self._heap[0].due_ms <= self._now_ms:
            task = heapq.heappop(self._heap)
            try:
                task.callback()
            except Exception as e:
                logger.error(f"Scheduler: task '{task.name or task.seq}' failed: {e}")

    def pending(self) -> list[ScheduledTask]:
        """按触发顺序返回所有待触发任务。"""
        return sorted(self._heap)

    def next_due_in_ms(self) -> int | None:
        """距离最早一个任务到期的毫秒数；没有任务时返回 None。"""
        if not self._heap:
            return None
        return max(0, self._heap[0].due_ms - self._now_ms)

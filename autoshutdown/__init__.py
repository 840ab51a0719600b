"""
autoshutdown - 游戏服务器定时自动关服/重启调度器

模块概述：
    本文件是 autoshutdown 包的入口文件（__init__.py），定义了包的元信息。

    核心功能包括：
    - 按每日（或每 N 天）/ 每周指定星期的时间点计算下一次关服时间
    - 在关服前按配置的提前量广播预告消息
    - 预告触发时调用宿主的关服原语（由宿主负责宽限期倒计时）
    - 由外部 tick 驱动的通用延时任务调度器
"""

# 版本号，遵循语义化版本规范（主版本.次版本.修订号）
__version__ = "0.1.0"

# 项目 logo 表情符号，用于 CLI 输出等场景的品牌标识
__logo__ = "⏻"

"""
配置数据模型定义 (config/schema.py)
=================================
本模块使用 Pydantic 定义 autoshutdown 的完整配置结构。
所有配置项都有默认值，用户只需在 config.json 中覆盖需要修改的部分。

整体配置结构（树形）：
Config (根配置)
├── enabled       - 是否启用自动关服
├── time          - 关服时间列表（"HH:MM:SS;HH:MM:SS"）
├── weekday       - 每周关服的星期（-1 关闭，0-6 = 周日-周六）
├── every_days    - 关服间隔天数（1-365）
├── pre_announce  - 关服预告（提前秒数、消息模板）
└── start_events  - 启动时自动开启的事件 ID（空格分隔）

注意：这里只做类型转换，不做取值范围校验。
越界值由 ShutdownService 在初始化时记录日志并回退，不会让整个配置加载失败。
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

DEFAULT_PRE_ANNOUNCE_MESSAGE = "[SERVER]: Automated (quick) server restart in {}"


class PreAnnounceConfig(BaseModel):
    """关服预告配置。"""
    seconds: int = 3600  # 预告提前量（秒），上限 86400
    message: str = DEFAULT_PRE_ANNOUNCE_MESSAGE  # 消息模板，{} 会被替换为剩余时间


class Config(BaseSettings):
    """
    autoshutdown 根配置类。

    继承自 Pydantic 的 BaseSettings，除了支持从 JSON 文件加载外，
    还支持从环境变量读取配置：
    - 环境变量前缀: AUTOSHUTDOWN_
    - 嵌套分隔符: __ (双下划线)
    - 示例: AUTOSHUTDOWN_PRE_ANNOUNCE__SECONDS=600 可覆盖 pre_announce.seconds
    """
    enabled: bool = False  # 是否启用自动关服
    time: str = "04:00:00"  # 关服时间列表，分号分隔
    weekday: int = -1  # 每周关服的星期，-1 表示按天间隔
    every_days: int = 1  # 关服间隔天数
    pre_announce: PreAnnounceConfig = Field(default_factory=PreAnnounceConfig)  # 关服预告配置
    start_events: str = ""  # 启动时开启的事件 ID，空格分隔

    model_config = ConfigDict(
        env_prefix="AUTOSHUTDOWN_",  # 环境变量前缀
        env_nested_delimiter="__"  # 嵌套配置的分隔符
    )

"""
配置加载工具模块 (config/loader.py)
=================================
本模块负责 autoshutdown 配置文件的加载、保存和格式转换：
- 配置文件默认路径: ~/.autoshutdown/config.json
- 配置文件使用 camelCase（驼峰命名），Python 内部使用 snake_case（下划线命名）
- 加载时自动将 camelCase → snake_case，保存时自动将 snake_case → camelCase
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from autoshutdown.config.schema import Config


def get_config_path() -> Path:
    """获取默认配置文件路径: ~/.autoshutdown/config.json"""
    return Path.home() / ".autoshutdown" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    从 JSON 文件加载配置，若文件不存在则返回默认配置。

    加载流程：
    1. 确定配置文件路径（传入的路径 或 默认路径）
    2. 读取 JSON 文件内容
    3. 将 camelCase 键名转换为 snake_case（convert_keys）
    4. 交给 Pydantic 做类型转换（未在文件中出现的字段可由环境变量覆盖）

    参数:
        config_path: 可选的配置文件路径。为 None 时使用默认路径。

    返回:
        Config 配置对象实例
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            # 通过构造函数（而非 model_validate）创建，文件中缺失的字段仍由
            # AUTOSHUTDOWN_ 环境变量覆盖
            return Config(**convert_keys(data))
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            # 配置文件损坏时降级使用默认配置，而非直接报错退出；
            # 顶层不是 JSON 对象（如数组）时 ** 解包会抛 TypeError，同样降级
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    将配置对象保存为 JSON 文件（camelCase 键名，带缩进）。

    参数:
        config: 要保存的配置对象
        config_path: 可选的保存路径。为 None 时使用默认路径。
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump())

    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def convert_keys(data: Any) -> Any:
    """
    递归地将字典中所有 camelCase 键名转换为 snake_case。

    示例: {"everyDays": 2} → {"every_days": 2}
    """
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """
    递归地将字典中所有 snake_case 键名转换为 camelCase。

    示例: {"every_days": 2} → {"everyDays": 2}
    """
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """
    将 camelCase 字符串转换为 snake_case。
    例: "everyDays" → "every_days", "preAnnounce" → "pre_announce"
    """
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """
    将 snake_case 字符串转换为 camelCase。
    例: "every_days" → "everyDays", "start_events" → "startEvents"
    """
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])

# 参考文档: DESIGN.md 配置部分
# 配置管理工具

import json
import os
import logging
from typing import Dict, Any
import re

REQUIRED_SECTIONS = ['app', 'server', 'backend', 'composition', 'logging']


def _replace_env_vars(value: str) -> str:
    """
    替换环境变量占位符
    将 ${ENV_VAR} 格式的占位符替换为实际的环境变量值
    """
    def replace_match(match):
        env_var = match.group(1)
        return os.getenv(env_var, match.group(0))  # 如果环境变量不存在，保持原样

    return re.sub(r'\$\{([^}]+)\}', replace_match, value)


def _process_config_values(config: Any) -> Any:
    """
    递归处理配置值，替换环境变量
    """
    if isinstance(config, dict):
        return {k: _process_config_values(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [_process_config_values(item) for item in config]
    elif isinstance(config, str):
        return _replace_env_vars(config)
    else:
        return config


def is_unresolved(value: Any) -> bool:
    """判断配置值是否为未解析的环境变量占位符"""
    return isinstance(value, str) and value.startswith('${') and value.endswith('}')


def load_config() -> Dict[str, Any]:
    """
    加载配置文件
    根据 CONFIG_ENV 环境变量选择配置文件

    Returns:
        配置字典
    """
    config_env = os.getenv('CONFIG_ENV', 'development')

    config_files = {
        'production': 'config/config-prod.json',
        'development': 'config/config-dev.json',
        'test': 'config/config-test.json'
    }

    config_file = config_files.get(config_env, 'config/config.json')

    # 从server目录开始查找配置文件
    if not os.path.isabs(config_file):
        script_dir = os.path.dirname(os.path.abspath(__file__))
        server_dir = os.path.dirname(script_dir)
        config_file = os.path.join(server_dir, config_file)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = json.load(f)

        config = _process_config_values(config)

        logging.info(f"成功加载配置文件: {config_file}")
        return config

    except FileNotFoundError:
        logging.error(f"配置文件不存在: {config_file}")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"配置文件JSON格式错误: {e}")
        raise


def validate_config(config: Dict[str, Any]) -> bool:
    """
    验证配置文件的完整性

    Args:
        config: 配置字典

    Returns:
        验证结果
    """
    for section in REQUIRED_SECTIONS:
        if section not in config:
            logging.error(f"配置文件缺少必需的section: {section}")
            return False

    backend_config = config.get('backend', {})
    if not backend_config.get('base_url'):
        logging.error("后端服务地址 backend.base_url 未配置")
        return False

    default_base_price = config.get('composition', {}).get('default_base_price')
    if not isinstance(default_base_price, int) or default_base_price < 0:
        logging.error(f"composition.default_base_price 无效: {default_base_price}")
        return False

    return True


class Config:
    """
    配置管理类
    """
    def __init__(self):
        self.env = os.getenv('CONFIG_ENV', 'development')
        self.config = load_config()

        if not validate_config(self.config):
            raise ValueError("配置文件验证失败")

    def get(self, key: str, default=None):
        """
        获取配置项，支持点号分隔的嵌套键

        Args:
            key: 配置键，支持 'backend.base_url' 格式
            default: 默认值

        Returns:
            配置值
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_backend_config(self) -> Dict[str, Any]:
        """
        获取后端服务配置，未解析的令牌占位符视为未配置

        Returns:
            后端配置字典
        """
        backend_config = self.config.get('backend', {}).copy()
        if is_unresolved(backend_config.get('api_token')):
            backend_config['api_token'] = None
        backend_config.setdefault('timeout_seconds', 15)
        return backend_config

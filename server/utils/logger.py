# 参考文档: DESIGN.md 日志部分
# 日志配置管理工具

import logging
import logging.handlers
import os
from typing import Dict, Any

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

# 第三方库日志过于冗长，统一压到WARNING
NOISY_LOGGERS = ('httpx', 'httpcore')


def _parse_size(size_str) -> int:
    """解析文件大小字符串，如 '10MB' -> 10485760"""
    if isinstance(size_str, int):
        return size_str

    size_str = size_str.strip().upper()
    units = {'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}

    for suffix, factor in units.items():
        if size_str.endswith(suffix):
            return int(size_str[:-2]) * factor
    return int(size_str)


def setup_logging(config: Dict[str, Any]):
    """
    根据配置设置日志系统

    Args:
        config: 完整配置字典，读取其中的 logging 段
    """
    log_config = config.get('logging', {})
    level_name = log_config.get('level', 'INFO')

    logger = logging.getLogger()

    # 清除现有的处理器，避免重复初始化时日志翻倍
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(log_config.get('format', DEFAULT_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_config.get('file_enabled', True):
        file_path = log_config.get('file_path', 'logs/composer.log')
        log_dir = os.path.dirname(file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=_parse_size(log_config.get('max_file_size', '10MB')),
            backupCount=log_config.get('backup_count', 5),
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"日志系统初始化完成，级别: {level_name}")

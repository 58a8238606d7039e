"""
配置管理
"""
import os
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional

from .services.error_handler import ConfigurationError


NOTIFY_EXPIRY_THRESHOLD = timedelta(days=28)
PROBE_TIMEOUT = 5.0
HTTPS_PORT = 443
MAIL_SUBJECT = "ssl-expiry-notifier: domain cert expiries"
DEFAULT_MAIL_COMMAND = "mail"

VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}


@dataclass(frozen=True)
class Settings:
    """运行配置"""
    notify_threshold: timedelta = NOTIFY_EXPIRY_THRESHOLD
    probe_timeout: float = PROBE_TIMEOUT
    port: int = HTTPS_PORT
    max_workers: Optional[int] = None
    mail_command: str = DEFAULT_MAIL_COMMAND
    mail_subject: str = MAIL_SUBJECT
    log_level: str = 'INFO'
    
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 default_log_level: str = 'INFO') -> 'Settings':
        """
        从环境变量加载配置
        
        Args:
            environ: 环境变量映射，默认为 os.environ
            default_log_level: 未设置 LOG_LEVEL 时使用的日志级别
        
        Returns:
            Settings: 验证后的配置
        
        Raises:
            ConfigurationError: 配置值无效
        """
        environ = os.environ if environ is None else environ
        
        threshold_days = _parse_number(environ, 'NOTIFY_THRESHOLD_DAYS', int)
        probe_timeout = _parse_number(environ, 'PROBE_TIMEOUT_SECONDS', float)
        max_workers = _parse_number(environ, 'MAX_WORKERS', int)
        
        if threshold_days is not None and threshold_days < 0:
            raise ConfigurationError("NOTIFY_THRESHOLD_DAYS 不能为负数")
        if probe_timeout is not None and probe_timeout <= 0:
            raise ConfigurationError("PROBE_TIMEOUT_SECONDS 必须大于0")
        if max_workers is not None and max_workers < 1:
            raise ConfigurationError("MAX_WORKERS 必须大于等于1")
        
        log_level = environ.get('LOG_LEVEL', default_log_level).upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"无效的日志级别: {log_level}，有效值: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        
        mail_command = environ.get('MAIL_COMMAND', '').strip() or DEFAULT_MAIL_COMMAND
        
        return cls(
            notify_threshold=(
                timedelta(days=threshold_days) if threshold_days is not None
                else NOTIFY_EXPIRY_THRESHOLD
            ),
            probe_timeout=probe_timeout if probe_timeout is not None else PROBE_TIMEOUT,
            max_workers=max_workers,
            mail_command=mail_command,
            log_level=log_level
        )
    
    def as_log_dict(self) -> Dict[str, Any]:
        """返回用于日志记录的配置字典"""
        return {
            'notify_threshold_days': self.notify_threshold.days,
            'probe_timeout_seconds': self.probe_timeout,
            'port': self.port,
            'max_workers': self.max_workers or 'unbounded',
            'mail_command': self.mail_command,
            'log_level': self.log_level
        }


def _parse_number(environ: Mapping[str, str], name: str, kind):
    raw = environ.get(name, '').strip()
    if not raw:
        return None
    try:
        return kind(raw)
    except ValueError:
        logging.getLogger(__name__).error(f"环境变量 {name} 的值无效: {raw}")
        raise ConfigurationError(f"{name} 的值无效: {raw!r}") from None

"""
域名列表读取服务
"""
import logging
from typing import Iterable, List

from .error_handler import DomainListError


logger = logging.getLogger(__name__)


def read_domains(stream: Iterable[str]) -> List[str]:
    """
    从输入流读取域名列表，每行一个
    
    每行去除首尾空白，空行原样保留。
    
    Args:
        stream: 文本输入流
    
    Returns:
        List[str]: 域名列表
    
    Raises:
        DomainListError: 读取输入流失败
    """
    try:
        domains = [line.strip() for line in stream]
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"读取域名列表失败: {e}")
        raise DomainListError(f"reading domains: {e}") from e
    
    logger.info(f"成功读取 {len(domains)} 个域名")
    return domains


def domains_from_env(value: str) -> List[str]:
    """
    解析逗号分隔的域名列表
    
    Args:
        value: 环境变量值，如 "a.example,b.example"
    
    Returns:
        List[str]: 域名列表（跳过空项）
    """
    return [domain.strip() for domain in value.split(',') if domain.strip()]

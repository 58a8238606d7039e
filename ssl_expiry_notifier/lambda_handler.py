"""
AWS Lambda函数入口点
"""
import os
from datetime import datetime, timezone
from typing import Any, Dict, List

from .config import Settings
from .monitor import CertificateExpiryMonitor
from .services.domain_reader import domains_from_env
from .services.error_handler import ConfigurationError, NotifierError
from .services.logger import LoggerService
from .services.notification import create_notification_service


def _event_domains(event: Dict[str, Any]) -> List[str]:
    domains = event.get('domains')
    if domains is None:
        return domains_from_env(os.getenv('DOMAINS', ''))
    if isinstance(domains, str):
        return domains_from_env(domains)
    return [str(domain).strip() for domain in domains]


def _event_recipient(event: Dict[str, Any]) -> str:
    recipient = (
        event.get('recipient')
        or os.getenv('NOTIFY_RECIPIENT')
        or os.getenv('SNS_TOPIC_ARN')
    )
    if not recipient:
        raise ConfigurationError("no recipient: set NOTIFY_RECIPIENT or SNS_TOPIC_ARN")
    return recipient


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda函数入口点
    
    Args:
        event: EventBridge触发事件，可包含 domains 和 recipient
        context: Lambda运行时上下文
    
    Returns:
        dict: 执行结果
    """
    event = event or {}
    logger_service = None
    
    try:
        settings = Settings.from_env()
        logger_service = LoggerService(log_level=settings.log_level)
        
        monitor = CertificateExpiryMonitor(
            settings=settings,
            notification_service=create_notification_service(_event_recipient(event), settings),
            logger_service=logger_service
        )
        result = monitor.execute(_event_domains(event))
    
    except NotifierError as e:
        if logger_service is not None:
            logger_service.logger.error(f"Lambda函数执行失败: {e}")
        return {
            'statusCode': 500,
            'body': {
                'message': 'SSL expiry check failed',
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        }
    
    return {
        'statusCode': 200,
        'body': {
            'message': 'SSL expiry check completed',
            'notify_needed': result.notify_needed,
            'summary': result.summary,
            'report': result.report_body.splitlines(),
            'execution_time_seconds': result.execution_time,
            'timestamp': result.checked_at.isoformat()
        }
    }

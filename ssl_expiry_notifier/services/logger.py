"""
日志服务
"""
import os
import sys
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from ..interfaces import LoggerServiceInterface
from ..models import ProbeResult


class LoggerService(LoggerServiceInterface):
    """日志服务实现
    
    日志输出到标准错误，标准输出只用于报告正文。
    """
    
    def __init__(self, logger_name: str = "ssl_expiry_notifier", log_level: Optional[str] = None):
        """
        初始化日志服务
        
        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
        
        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()
        
        # 执行统计
        self.execution_stats = {
            'start_time': None,
            'end_time': None,
            'total_domains': 0,
            'successful_checks': 0,
            'failed_checks': 0,
            'errors': []
        }
    
    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        self.logger.setLevel(level)
        
        # 避免重复添加处理器
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
        
        for handler in self.logger.handlers:
            handler.setLevel(level)
        
        # 防止日志传播到根日志器
        self.logger.propagate = False
    
    def log_check_start(self, domain_count: int):
        """
        记录检查开始
        
        Args:
            domain_count: 要检查的域名数量
        """
        self.execution_stats['start_time'] = datetime.now(timezone.utc)
        self.execution_stats['total_domains'] = domain_count
        
        self.logger.info(f"开始TLS证书检查，共 {domain_count} 个域名")
    
    def log_probe_result(self, result: ProbeResult, classification: str):
        """
        记录探测结果
        
        Args:
            result: 探测结果
            classification: 分类描述
        """
        if result.is_valid:
            self.execution_stats['successful_checks'] += 1
            self.logger.info(
                f"证书检查完成 - 域名: {result.domain}, "
                f"过期时间: {result.expiry.isoformat()}, "
                f"状态: {classification}"
            )
        else:
            self.execution_stats['failed_checks'] += 1
            self.execution_stats['errors'].append({
                'domain': result.domain,
                'error_message': result.error
            })
            self.logger.warning(f"证书检查失败 - 域名: {result.domain}, 错误: {result.error}")
    
    def log_check_end(self):
        """记录检查结束"""
        self.execution_stats['end_time'] = datetime.now(timezone.utc)
        summary = self.get_execution_summary()
        
        self.logger.info(f"TLS证书检查完成，总执行时间: {summary['duration_seconds']:.2f} 秒")
        self.logger.info(
            f"检查统计: 总计 {summary['total_domains']} 个域名, "
            f"成功 {summary['successful_checks']} 个, "
            f"失败 {summary['failed_checks']} 个"
        )
    
    def log_notification_sent(self, notification_type: str, domain_count: int, success: bool):
        """
        记录通知发送状态
        
        Args:
            notification_type: 通知类型（如 "mail"、"SNS"）
            domain_count: 报告中的域名数量
            success: 是否发送成功
        """
        if success:
            self.logger.info(f"{notification_type} 通知发送成功，报告域名数量: {domain_count}")
        else:
            self.logger.error(f"{notification_type} 通知发送失败，报告域名数量: {domain_count}")
    
    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息
        
        Args:
            config: 配置信息字典
        """
        self.logger.debug("系统配置信息:")
        for key, value in config.items():
            self.logger.debug(f"  {key}: {value}")
    
    def get_execution_summary(self) -> Dict[str, Any]:
        """
        获取执行摘要
        
        Returns:
            Dict[str, Any]: 执行摘要信息
        """
        stats = self.execution_stats
        duration = 0.0
        if stats['start_time'] and stats['end_time']:
            duration = (stats['end_time'] - stats['start_time']).total_seconds()
        
        return {
            'start_time': stats['start_time'].isoformat() if stats['start_time'] else None,
            'end_time': stats['end_time'].isoformat() if stats['end_time'] else None,
            'duration_seconds': duration,
            'total_domains': stats['total_domains'],
            'successful_checks': stats['successful_checks'],
            'failed_checks': stats['failed_checks'],
            'success_rate': (
                stats['successful_checks'] / stats['total_domains']
                if stats['total_domains'] > 0 else 0
            ),
            'error_count': len(stats['errors']),
            'errors': stats['errors']
        }


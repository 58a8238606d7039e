"""
错误处理服务
"""
import socket
import ssl
import logging


class ProbeError(Exception):
    """单个域名探测失败（作为结果数据记录，不中断整体运行）"""


class DeadlineExceededError(ProbeError):
    """探测超过截止时间"""
    
    def __init__(self, message: str = "deadline exceeded"):
        super().__init__(message)


class NoPeerCertificatesError(ProbeError):
    """握手成功但服务器未提供证书"""
    
    def __init__(self, message: str = "no peer certificates"):
        super().__init__(message)


class NotifierError(Exception):
    """致命错误基类，导致整个运行以非零状态退出"""


class DomainListError(NotifierError):
    """域名列表为空或无法读取"""


class NotificationError(NotifierError):
    """通知发送失败"""


class ConfigurationError(NotifierError):
    """配置无效"""


def describe_error(error: Exception) -> str:
    """
    生成写入报告的错误描述
    
    Args:
        error: 异常对象
    
    Returns:
        str: 错误描述
    """
    if isinstance(error, ProbeError):
        return str(error)
    if isinstance(error, socket.timeout):
        return str(DeadlineExceededError())
    message = str(error)
    if not message:
        return type(error).__name__
    return f"{type(error).__name__}: {message}"


class NetworkErrorHandler:
    """网络错误处理器"""
    
    def __init__(self):
        """初始化网络错误处理器"""
        self.logger = logging.getLogger(__name__)
    
    def handle_probe_error(self, domain: str, error: Exception) -> str:
        """
        处理探测错误，记录错误和建议处理方案
        
        Args:
            domain: 域名
            error: 异常对象
        
        Returns:
            str: 建议的处理方案
        """
        suggested_action = self._get_suggested_action(error)
        self.logger.warning(
            f"域名 {domain} 探测失败: {describe_error(error)}，建议: {suggested_action}"
        )
        return suggested_action
    
    def _get_suggested_action(self, error: Exception) -> str:
        """
        获取错误的建议处理方案
        
        Args:
            error: 异常对象
        
        Returns:
            str: 建议的处理方案
        """
        error_message = str(error).lower()
        
        if isinstance(error, (DeadlineExceededError, socket.timeout)):
            return "检查网络连接，确认443端口可达"
        elif isinstance(error, NoPeerCertificatesError):
            return "服务器未提供证书，检查TLS配置"
        elif isinstance(error, socket.gaierror):
            return "检查域名是否正确，DNS服务器是否可用"
        elif isinstance(error, ConnectionRefusedError):
            return "检查目标服务器是否运行，端口是否正确"
        elif isinstance(error, ssl.SSLError):
            if 'handshake failure' in error_message:
                return "SSL握手失败，检查SSL/TLS版本兼容性"
            return "SSL连接问题，检查服务器SSL配置"
        elif 'network is unreachable' in error_message:
            return "网络不可达，检查网络连接和路由"
        elif 'no route to host' in error_message:
            return "无法路由到主机，检查防火墙和网络配置"
        else:
            return "检查网络连接和服务器状态"


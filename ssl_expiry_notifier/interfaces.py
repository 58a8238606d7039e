"""
服务接口定义
"""
from abc import ABC, abstractmethod
from .models import ProbeResult


class ProberInterface(ABC):
    """TLS证书探测器接口"""
    
    @abstractmethod
    def probe(self, domain: str, deadline: float) -> ProbeResult:
        """探测单个域名的证书过期时间"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""
    
    name = "notification"
    
    @abstractmethod
    def send(self, subject: str, body: str) -> None:
        """发送通知，失败时抛出 NotificationError"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""
    
    @abstractmethod
    def log_check_start(self, domain_count: int):
        """记录检查开始"""
        pass
    
    @abstractmethod
    def log_probe_result(self, result: ProbeResult, classification: str):
        """记录探测结果"""
        pass


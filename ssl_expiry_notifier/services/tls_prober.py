"""
TLS证书探测服务
"""
import ssl
import socket
import threading
import time
import logging
from concurrent.futures import Future, TimeoutError as FuturesTimeoutError
from datetime import datetime
from typing import List, Tuple

from cryptography import x509

from ..config import HTTPS_PORT
from ..interfaces import ProberInterface
from ..models import ProbeResult
from .error_handler import (
    DeadlineExceededError,
    NetworkErrorHandler,
    NoPeerCertificatesError,
    describe_error,
)


class TLSCertificateProber(ProberInterface):
    """TLS证书探测器实现
    
    只读取服务器提供的叶子证书的过期时间，不做证书链验证。
    域名解析、TCP连接和TLS握手共用同一个截止时间。
    """
    
    def __init__(self, port: int = HTTPS_PORT):
        """
        初始化TLS证书探测器
        
        Args:
            port: TLS端口，默认443
        """
        self.port = port
        self.logger = logging.getLogger(__name__)
        self.error_handler = NetworkErrorHandler()
    
    def probe(self, domain: str, deadline: float) -> ProbeResult:
        """
        探测单个域名的证书过期时间
        
        Args:
            domain: 要探测的域名
            deadline: 截止时间（time.monotonic() 时刻）
        
        Returns:
            ProbeResult: 探测结果，失败时错误记录在 error 中
        """
        try:
            expiry = self.fetch_expiry(domain, deadline)
        except Exception as e:
            self.error_handler.handle_probe_error(domain, e)
            return ProbeResult(domain=domain, error=describe_error(e))
        
        self.logger.debug(f"域名 {domain} 证书过期时间: {expiry.isoformat()}")
        return ProbeResult(domain=domain, expiry=expiry)
    
    def fetch_expiry(self, domain: str, deadline: float) -> datetime:
        """
        获取叶子证书的过期时间
        
        Args:
            domain: 域名
            deadline: 截止时间（time.monotonic() 时刻）
        
        Returns:
            datetime: 证书 notAfter（UTC）
        
        Raises:
            DeadlineExceededError: 超过截止时间
            NoPeerCertificatesError: 服务器未提供证书
            OSError: 解析、连接或握手失败
        """
        der_cert = self._get_peer_certificate(domain, deadline)
        if not der_cert:
            raise NoPeerCertificatesError()
        
        cert = x509.load_der_x509_certificate(der_cert)
        return cert.not_valid_after_utc
    
    def _get_peer_certificate(self, domain: str, deadline: float):
        context = self._create_context()
        
        try:
            with self._connect(domain, deadline) as sock:
                # 握手使用剩余时间
                sock.settimeout(self._remaining(deadline))
                with context.wrap_socket(sock, server_hostname=domain) as ssock:
                    return ssock.getpeercert(binary_form=True)
        except socket.timeout:
            raise DeadlineExceededError() from None
    
    def _connect(self, domain: str, deadline: float) -> socket.socket:
        """依次连接解析得到的地址，每次连接重新计算剩余时间"""
        last_error = None
        for address in self._resolve(domain, deadline):
            try:
                return socket.create_connection(address, timeout=self._remaining(deadline))
            except socket.timeout:
                raise
            except OSError as e:
                last_error = e
        
        if last_error is None:
            raise OSError(f"no addresses for {domain}")
        raise last_error
    
    def _resolve(self, domain: str, deadline: float) -> List[Tuple[str, int]]:
        """
        在截止时间内解析域名
        
        getaddrinfo 无法中断，因此在守护线程中执行，超时后不再等待。
        
        Returns:
            List[Tuple[str, int]]: (地址, 端口) 列表
        
        Raises:
            DeadlineExceededError: 解析超过截止时间
        """
        timeout = self._remaining(deadline)
        resolved: Future = Future()
        
        def lookup():
            try:
                resolved.set_result(
                    socket.getaddrinfo(domain, self.port, type=socket.SOCK_STREAM)
                )
            except Exception as e:
                resolved.set_exception(e)
        
        threading.Thread(target=lookup, name=f"resolve-{domain}", daemon=True).start()
        try:
            infos = resolved.result(timeout=timeout)
        except FuturesTimeoutError:
            raise DeadlineExceededError() from None
        
        return [sockaddr[:2] for _, _, _, _, sockaddr in infos]
    
    def _create_context(self) -> ssl.SSLContext:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context
    
    def _remaining(self, deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DeadlineExceededError()
        return remaining

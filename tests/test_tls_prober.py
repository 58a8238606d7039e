"""
TLS证书探测器测试
"""
import pytest
import socket
import ssl
import time
from unittest.mock import patch, MagicMock
from datetime import datetime, timezone

from ssl_expiry_notifier.services.tls_prober import TLSCertificateProber
from ssl_expiry_notifier.services.error_handler import (
    DeadlineExceededError,
    NoPeerCertificatesError,
)
from ssl_expiry_notifier.models import ProbeResult


NOT_AFTER = datetime(2025, 1, 15, 8, 30, 0, tzinfo=timezone.utc)
ADDRESS = "192.0.2.10"


def _future_deadline(seconds: float = 5.0) -> float:
    return time.monotonic() + seconds


class TestTLSCertificateProber:
    """TLS证书探测器测试类"""
    
    def setup_method(self):
        """测试前准备"""
        self.prober = TLSCertificateProber()
    
    @pytest.fixture(autouse=True)
    def _certificate(self, make_der_certificate):
        self.der_cert = make_der_certificate(NOT_AFTER)
    
    @pytest.fixture(autouse=True)
    def _resolver(self, monkeypatch):
        self.addresses = [ADDRESS]
        monkeypatch.setattr(socket, "getaddrinfo", self._getaddrinfo)
    
    def _getaddrinfo(self, host, port, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (address, port))
                for address in self.addresses]
    
    def _mock_socket(self, mock_connection):
        mock_sock = MagicMock()
        mock_connection.return_value.__enter__.return_value = mock_sock
        mock_connection.return_value.__exit__.return_value = False
        return mock_sock
    
    def _mock_connection(self, mock_connection, mock_context, der_cert):
        mock_sock = self._mock_socket(mock_connection)
        
        mock_ssl_sock = MagicMock()
        mock_ssl_sock.getpeercert.return_value = der_cert
        wrapped = mock_context.return_value.wrap_socket.return_value
        wrapped.__enter__.return_value = mock_ssl_sock
        wrapped.__exit__.return_value = False
        return mock_sock, mock_ssl_sock, wrapped
    
    def test_context_disables_verification(self):
        """测试握手不验证证书链和主机名"""
        context = self.prober._create_context()
        
        assert context.verify_mode == ssl.CERT_NONE
        assert context.check_hostname is False
    
    @patch.object(TLSCertificateProber, '_create_context')
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_fetch_expiry_success(self, mock_connection, mock_context):
        """测试成功读取叶子证书过期时间"""
        mock_sock, mock_ssl_sock, wrapped = self._mock_connection(
            mock_connection, mock_context, self.der_cert
        )
        
        expiry = self.prober.fetch_expiry("example.com", _future_deadline())
        
        assert expiry == NOT_AFTER
        assert expiry.tzinfo is not None
        args, kwargs = mock_connection.call_args
        assert args[0] == (ADDRESS, 443)
        assert 0 < kwargs['timeout'] <= 5.0
        mock_context.return_value.wrap_socket.assert_called_once_with(
            mock_sock, server_hostname="example.com"
        )
        mock_ssl_sock.getpeercert.assert_called_once_with(binary_form=True)
        # 连接在成功路径上被关闭
        mock_connection.return_value.__exit__.assert_called_once()
        wrapped.__exit__.assert_called_once()
    
    @patch.object(TLSCertificateProber, '_create_context')
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_probe_success(self, mock_connection, mock_context):
        """测试成功探测返回过期时间"""
        self._mock_connection(mock_connection, mock_context, self.der_cert)
        
        result = self.prober.probe("example.com", _future_deadline())
        
        assert result == ProbeResult(domain="example.com", expiry=NOT_AFTER)
        assert result.is_valid is True
    
    @patch.object(TLSCertificateProber, '_create_context')
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_probe_no_peer_certificates(self, mock_connection, mock_context):
        """测试握手成功但没有证书"""
        _, _, wrapped = self._mock_connection(mock_connection, mock_context, None)
        
        with pytest.raises(NoPeerCertificatesError):
            self.prober.fetch_expiry("example.com", _future_deadline())
        
        result = self.prober.probe("example.com", _future_deadline())
        assert result.error == "no peer certificates"
        assert result.expiry is None
        assert wrapped.__exit__.call_count == 2
    
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_probe_connect_timeout(self, mock_connection):
        """测试连接超时报告为 deadline exceeded"""
        mock_connection.side_effect = socket.timeout("timed out")
        
        with pytest.raises(DeadlineExceededError):
            self.prober.fetch_expiry("slow.example", _future_deadline())
        
        result = self.prober.probe("slow.example", _future_deadline())
        assert result.error == "deadline exceeded"
    
    @patch.object(TLSCertificateProber, '_create_context')
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_probe_handshake_timeout_closes_connection(self, mock_connection, mock_context):
        """测试握手超时时连接被关闭"""
        self._mock_socket(mock_connection)
        mock_context.return_value.wrap_socket.side_effect = socket.timeout("handshake timed out")
        
        result = self.prober.probe("slow.example", _future_deadline())
        
        assert result.error == "deadline exceeded"
        mock_connection.return_value.__exit__.assert_called_once()
    
    @patch.object(TLSCertificateProber, '_create_context')
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_probe_handshake_failure(self, mock_connection, mock_context):
        """测试握手失败作为结果数据返回"""
        self._mock_socket(mock_connection)
        mock_context.return_value.wrap_socket.side_effect = ssl.SSLError("handshake failure")
        
        result = self.prober.probe("bad.example", _future_deadline())
        
        assert result.failed is True
        assert result.error.startswith("SSLError: ")
        assert "handshake failure" in result.error
        mock_connection.return_value.__exit__.assert_called_once()
    
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_probe_connection_refused(self, mock_connection):
        """测试连接被拒绝"""
        mock_connection.side_effect = ConnectionRefusedError(111, "Connection refused")
        
        result = self.prober.probe("closed.example", _future_deadline())
        
        assert result.domain == "closed.example"
        assert result.error == "ConnectionRefusedError: [Errno 111] Connection refused"
    
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_probe_past_deadline_does_not_connect(self, mock_connection):
        """测试截止时间已过时不建立连接"""
        result = self.prober.probe("example.com", time.monotonic() - 1)
        
        assert result.error == "deadline exceeded"
        mock_connection.assert_not_called()
    
    def test_custom_port(self):
        """测试自定义端口"""
        prober = TLSCertificateProber(port=8443)
        assert prober.port == 8443
    
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_slow_resolution_bounded_by_deadline(self, mock_connection, monkeypatch):
        """测试域名解析卡住时按截止时间返回"""
        def stalled_getaddrinfo(*args, **kwargs):
            time.sleep(2)
            return []
        monkeypatch.setattr(socket, "getaddrinfo", stalled_getaddrinfo)
        
        start = time.monotonic()
        result = self.prober.probe("stalled.example", _future_deadline(0.3))
        elapsed = time.monotonic() - start
        
        assert result.error == "deadline exceeded"
        assert elapsed < 1.0
        mock_connection.assert_not_called()
    
    @patch.object(TLSCertificateProber, '_create_context')
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_connect_timeout_excludes_resolution_time(self, mock_connection, mock_context,
                                                      monkeypatch):
        """测试连接超时扣除解析所用时间"""
        self._mock_connection(mock_connection, mock_context, self.der_cert)
        
        def slow_getaddrinfo(host, port, *args, **kwargs):
            time.sleep(0.3)
            return self._getaddrinfo(host, port)
        monkeypatch.setattr(socket, "getaddrinfo", slow_getaddrinfo)
        
        self.prober.fetch_expiry("example.com", _future_deadline(2.0))
        
        _, kwargs = mock_connection.call_args
        assert 0 < kwargs['timeout'] <= 1.7
    
    def test_resolution_failure(self, monkeypatch):
        """测试域名解析失败作为结果数据返回"""
        def failing_getaddrinfo(*args, **kwargs):
            raise socket.gaierror(-2, "Name or service not known")
        monkeypatch.setattr(socket, "getaddrinfo", failing_getaddrinfo)
        
        result = self.prober.probe("missing.example", _future_deadline())
        
        assert result.error == "gaierror: [Errno -2] Name or service not known"
    
    @patch.object(TLSCertificateProber, '_create_context')
    @patch('ssl_expiry_notifier.services.tls_prober.socket.create_connection')
    def test_tries_next_address_after_refusal(self, mock_connection, mock_context):
        """测试第一个地址被拒绝时尝试下一个地址"""
        self._mock_connection(mock_connection, mock_context, self.der_cert)
        connection = mock_connection.return_value
        mock_connection.side_effect = [ConnectionRefusedError(111, "Connection refused"),
                                       connection]
        self.addresses = ["192.0.2.11", ADDRESS]
        
        result = self.prober.probe("example.com", _future_deadline())
        
        assert result.expiry == NOT_AFTER
        assert [c.args[0] for c in mock_connection.call_args_list] == [
            ("192.0.2.11", 443), (ADDRESS, 443)
        ]

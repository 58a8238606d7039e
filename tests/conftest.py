"""
测试公共工具
"""
import os
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


def _make_der_certificate(not_after: datetime, common_name: str = "example.com") -> bytes:
    """生成指定过期时间的自签名证书（DER格式）"""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_after - timedelta(days=90))
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.DER)


@pytest.fixture
def aws_credentials(monkeypatch):
    """moto使用的假AWS凭证"""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def clean_env(monkeypatch):
    """清除会影响配置的环境变量"""
    for name in ('NOTIFY_THRESHOLD_DAYS', 'PROBE_TIMEOUT_SECONDS', 'MAX_WORKERS',
                 'MAIL_COMMAND', 'LOG_LEVEL', 'DOMAINS', 'NOTIFY_RECIPIENT', 'SNS_TOPIC_ARN'):
        monkeypatch.delenv(name, raising=False)
    return os.environ


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_der_certificate():
    return _make_der_certificate

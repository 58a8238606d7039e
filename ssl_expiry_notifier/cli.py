"""
命令行入口

从标准输入读取域名（每行一个），证书即将过期或已过期时
将报告输出到标准输出并发送给指定收件人。
"""
import argparse
import sys
from typing import List, Optional, TextIO

from .config import Settings
from .monitor import CertificateExpiryMonitor
from .services.domain_reader import read_domains
from .services.error_handler import NotifierError
from .services.logger import LoggerService
from .services.notification import create_notification_service


PROG = "ssl-expiry-notifier"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage="%(prog)s <recipient> < domains.txt",
        description="Report TLS certificates that expire soon or have expired."
    )
    parser.add_argument(
        "recipient",
        help="mail recipient, or an SNS topic ARN (arn:aws:sns:...)"
    )
    return parser


def main(argv: Optional[List[str]] = None,
         stdin: Optional[TextIO] = None,
         stdout: Optional[TextIO] = None,
         stderr: Optional[TextIO] = None) -> int:
    """
    命令行主函数
    
    Args:
        argv: 命令行参数，默认为 sys.argv[1:]
        stdin: 域名输入流
        stdout: 报告输出流
        stderr: 诊断信息输出流
    
    Returns:
        int: 退出状态（参数错误时 argparse 以状态2退出）
    """
    args = build_parser().parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    
    try:
        settings = Settings.from_env(default_log_level='WARNING')
        logger_service = LoggerService(log_level=settings.log_level)
        
        domains = read_domains(stdin)
        monitor = CertificateExpiryMonitor(
            settings=settings,
            notification_service=create_notification_service(args.recipient, settings),
            logger_service=logger_service
        )
        monitor.execute(domains, stdout=stdout)
    except NotifierError as e:
        print(f"{PROG}: {e}", file=stderr)
        return 1
    
    return 0

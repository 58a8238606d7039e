"""
证书过期监控器：并发探测、分类与报告
"""
import sys
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import List, Optional, Sequence, TextIO

from .config import Settings
from .interfaces import NotificationServiceInterface, ProberInterface
from .models import ProbeResult, RunResult
from .services.error_handler import DomainListError, NotificationError
from .services.expiry_calculator import ExpiryCalculator
from .services.logger import LoggerService
from .services.tls_prober import TLSCertificateProber


class CertificateExpiryMonitor:
    """证书过期监控器主类"""
    
    def __init__(self,
                 settings: Optional[Settings] = None,
                 prober: Optional[ProberInterface] = None,
                 notification_service: Optional[NotificationServiceInterface] = None,
                 logger_service: Optional[LoggerService] = None):
        """
        初始化监控器
        
        Args:
            settings: 运行配置
            prober: 证书探测器
            notification_service: 通知服务，为None时只输出报告
            logger_service: 日志服务
        """
        self.settings = settings or Settings()
        self.logger_service = logger_service or LoggerService(log_level=self.settings.log_level)
        self.prober = prober or TLSCertificateProber(port=self.settings.port)
        self.notification_service = notification_service
        self.expiry_calculator = ExpiryCalculator(threshold=self.settings.notify_threshold)
        
        self.logger_service.log_configuration_info(self.settings.as_log_dict())
    
    def probe_all(self, domains: Sequence[str]) -> List[ProbeResult]:
        """
        并发探测所有域名
        
        每个域名一个工作线程，共享同一个截止时间。工作线程 i 只写入结果槽位 i，
        所有探测完成后按输入顺序返回。
        
        Args:
            domains: 域名列表
        
        Returns:
            List[ProbeResult]: 按输入顺序排列的探测结果
        """
        deadline = time.monotonic() + self.settings.probe_timeout
        results: List[Optional[ProbeResult]] = [None] * len(domains)
        
        def worker(index: int):
            results[index] = self.prober.probe(domains[index], deadline)
        
        max_workers = self.settings.max_workers or max(len(domains), 1)
        with ThreadPoolExecutor(max_workers=max_workers,
                                thread_name_prefix="probe") as executor:
            futures = [executor.submit(worker, i) for i in range(len(domains))]
            wait(futures)
        
        for future in futures:
            future.result()
        
        return results
    
    def run(self, domains: Sequence[str], now: Optional[datetime] = None) -> RunResult:
        """
        探测、分类并生成报告
        
        Args:
            domains: 域名列表
            now: 评估时间，默认为当前UTC时间；无时区时按UTC处理
        
        Returns:
            RunResult: 运行结果
        
        Raises:
            DomainListError: 域名列表为空
        """
        if not domains:
            self.logger_service.logger.error("没有找到要检查的域名")
            raise DomainListError("no domains")
        
        start = time.monotonic()
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            # 证书过期时间均为UTC，无时区的时间按UTC处理
            now = now.replace(tzinfo=timezone.utc)
        
        self.logger_service.log_check_start(len(domains))
        results = self.probe_all(domains)
        
        for result in results:
            self.logger_service.log_probe_result(
                result, self.expiry_calculator.classify(result, now)
            )
        self.logger_service.log_check_end()
        
        notify_needed = self.expiry_calculator.any_needs_notify(results, now)
        report_body = self.expiry_calculator.render_report(results, now) if notify_needed else ""
        
        summary = self.expiry_calculator.summarize(results, now)
        if notify_needed:
            self.logger_service.logger.warning(
                f"需要通知: 已过期 {summary['expired']} 个, "
                f"即将过期 {summary['expiring']} 个, 检查失败 {summary['failed']} 个"
            )
        else:
            self.logger_service.logger.info("所有证书状态正常，无需发送通知")
        
        return RunResult(
            results=results,
            notify_needed=notify_needed,
            report_body=report_body,
            checked_at=now,
            execution_time=time.monotonic() - start,
            summary=summary
        )
    
    def execute(self, domains: Sequence[str], stdout: Optional[TextIO] = None,
                now: Optional[datetime] = None) -> RunResult:
        """
        执行一次完整检查：需要通知时输出报告并发送
        
        Args:
            domains: 域名列表
            stdout: 报告输出流，默认为标准输出
            now: 评估时间
        
        Returns:
            RunResult: 运行结果
        
        Raises:
            DomainListError: 域名列表为空
            NotificationError: 通知发送失败（报告已输出）
        """
        result = self.run(domains, now=now)
        if not result.notify_needed:
            return result
        
        stdout = stdout or sys.stdout
        stdout.write(result.report_body)
        stdout.flush()
        
        if self.notification_service is not None:
            self._send_report(result)
        
        return result
    
    def _send_report(self, result: RunResult):
        service = self.notification_service
        domain_count = len(result.results)
        try:
            service.send(self.settings.mail_subject, result.report_body)
        except NotificationError:
            self.logger_service.log_notification_sent(service.name, domain_count, False)
            raise
        self.logger_service.log_notification_sent(service.name, domain_count, True)

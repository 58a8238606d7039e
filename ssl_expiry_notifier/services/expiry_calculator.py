"""
证书过期分类服务
"""
from datetime import datetime, timedelta
from typing import Dict, Sequence

from ..config import NOTIFY_EXPIRY_THRESHOLD
from ..models import ProbeResult


ONE_DAY = timedelta(hours=24)

STATUS_OK = "ok"
STATUS_EXPIRED = "already expired"
STATUS_LESS_THAN_A_DAY = "expires in less than a day"


def pluralize(count: int, noun: str) -> str:
    if count == 1:
        return noun
    return noun + "s"


class ExpiryCalculator:
    """证书过期分类器"""
    
    def __init__(self, threshold: timedelta = NOTIFY_EXPIRY_THRESHOLD):
        """
        初始化过期分类器
        
        Args:
            threshold: 通知阈值，距离过期不超过该时长时需要通知
        """
        self.threshold = threshold
    
    def classify(self, result: ProbeResult, now: datetime) -> str:
        """
        对探测结果进行分类
        
        Args:
            result: 探测结果
            now: 当前时间
        
        Returns:
            str: 分类描述（错误时为错误描述原文）
        """
        if result.failed:
            return result.error
        
        gap = result.expiry - now
        if gap > self.threshold:
            return STATUS_OK
        if gap < timedelta(0):
            return STATUS_EXPIRED
        if gap < ONE_DAY:
            return STATUS_LESS_THAN_A_DAY
        
        days = gap // ONE_DAY
        return f"expires in {days} {pluralize(days, 'day')}"
    
    def needs_notify(self, result: ProbeResult, now: datetime) -> bool:
        """
        判断探测结果是否需要通知
        
        Args:
            result: 探测结果
            now: 当前时间
        
        Returns:
            bool: 探测失败或距离过期不超过阈值时为 True
        """
        if result.failed:
            return True
        return result.expiry - now <= self.threshold
    
    def any_needs_notify(self, results: Sequence[ProbeResult], now: datetime) -> bool:
        return any(self.needs_notify(result, now) for result in results)
    
    def format_line(self, result: ProbeResult, now: datetime) -> str:
        return f"{result.domain}: {self.classify(result, now)}"
    
    def render_report(self, results: Sequence[ProbeResult], now: datetime) -> str:
        """
        生成报告正文，每个域名一行，保持输入顺序
        
        Args:
            results: 按输入顺序排列的探测结果
            now: 当前时间
        
        Returns:
            str: 报告正文（每行以换行符结尾）
        """
        return "".join(self.format_line(result, now) + "\n" for result in results)
    
    def summarize(self, results: Sequence[ProbeResult], now: datetime) -> Dict[str, int]:
        """
        统计各分类的数量
        
        Args:
            results: 探测结果列表
            now: 当前时间
        
        Returns:
            Dict[str, int]: 分类统计
        """
        summary = {'total': len(results), 'ok': 0, 'expiring': 0, 'expired': 0, 'failed': 0}
        for result in results:
            if result.failed:
                summary['failed'] += 1
            elif result.expiry < now:
                summary['expired'] += 1
            elif self.needs_notify(result, now):
                summary['expiring'] += 1
            else:
                summary['ok'] += 1
        return summary


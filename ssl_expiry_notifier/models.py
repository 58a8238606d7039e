"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class ProbeResult:
    """单个域名的探测结果"""
    domain: str
    expiry: Optional[datetime] = None
    error: Optional[str] = None
    
    def __post_init__(self):
        if (self.expiry is None) == (self.error is None):
            raise ValueError("ProbeResult需要且只需要 expiry 或 error 之一")
    
    @property
    def is_valid(self) -> bool:
        """探测是否成功"""
        return self.error is None
    
    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class RunResult:
    """一次检查运行的结果"""
    results: List[ProbeResult]
    notify_needed: bool
    report_body: str
    checked_at: datetime
    execution_time: float = 0.0
    summary: dict = field(default_factory=dict)

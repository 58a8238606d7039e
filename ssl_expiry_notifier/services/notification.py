"""
通知服务
"""
import logging
import subprocess
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import Settings
from ..interfaces import NotificationServiceInterface
from .error_handler import NotificationError


class MailNotificationService(NotificationServiceInterface):
    """通过 mail(1) 发送通知"""
    
    name = "mail"
    
    def __init__(self, recipient: str, mail_command: str = "mail"):
        """
        初始化邮件通知服务
        
        Args:
            recipient: 收件人
            mail_command: mail 命令路径
        """
        self.recipient = recipient
        self.mail_command = mail_command
        self.logger = logging.getLogger(__name__)
    
    def send(self, subject: str, body: str) -> None:
        """
        发送邮件
        
        Args:
            subject: 邮件主题
            body: 邮件正文
        
        Raises:
            NotificationError: mail 命令无法执行或返回非零状态
        """
        command = [self.mail_command, "-s", subject, self.recipient]
        try:
            subprocess.run(command, input=body, text=True, check=True)
        except subprocess.CalledProcessError as e:
            self.logger.error(f"mail命令返回非零状态: {e.returncode}")
            raise NotificationError(f"{self.mail_command}: exit status {e.returncode}") from e
        except OSError as e:
            self.logger.error(f"无法执行mail命令: {e}")
            raise NotificationError(f"{self.mail_command}: {e}") from e
        
        self.logger.info(f"邮件已发送至 {self.recipient}")


class SNSNotificationService(NotificationServiceInterface):
    """通过 AWS SNS 发送通知"""
    
    name = "SNS"
    
    def __init__(self, topic_arn: str, region_name: Optional[str] = None):
        """
        初始化SNS通知服务
        
        Args:
            topic_arn: SNS主题ARN
            region_name: AWS区域名称，如果为None则从ARN中提取
        """
        self.topic_arn = topic_arn
        
        if region_name:
            self.region_name = region_name
        else:
            # 从SNS ARN中提取区域
            self.region_name = topic_arn.split(':')[3]
        
        self.logger = logging.getLogger(__name__)
        self.sns_client = boto3.client('sns', region_name=self.region_name)
    
    def send(self, subject: str, body: str) -> None:
        """
        发布SNS消息
        
        Args:
            subject: 消息主题
            body: 消息内容
        
        Raises:
            NotificationError: 发布失败
        """
        try:
            response = self.sns_client.publish(
                TopicArn=self.topic_arn,
                Subject=subject,
                Message=body
            )
        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
            raise NotificationError(f"sns publish: {error_code}: {error_message}") from e
        except BotoCoreError as e:
            self.logger.error(f"发送SNS通知时发生错误: {e}")
            raise NotificationError(f"sns publish: {e}") from e
        
        self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")


def is_sns_topic_arn(recipient: str) -> bool:
    parts = recipient.split(':')
    return recipient.startswith('arn:aws:sns:') and len(parts) == 6 and all(parts[3:])


def create_notification_service(recipient: str,
                                settings: Optional[Settings] = None) -> NotificationServiceInterface:
    """
    根据收件人类型创建通知服务
    
    Args:
        recipient: 收件人（邮件地址或SNS主题ARN）
        settings: 运行配置
    
    Returns:
        NotificationServiceInterface: SNS主题使用SNS，其余使用 mail(1)
    """
    settings = settings or Settings()
    if is_sns_topic_arn(recipient):
        return SNSNotificationService(topic_arn=recipient)
    return MailNotificationService(recipient, mail_command=settings.mail_command)

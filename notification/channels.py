#!/usr/bin/env python3
"""
Notification Channels

Provides the delivery channels used for tender match notifications:
- email: SMTP with STARTTLS, plain text plus optional HTML alternative
- sms: Twilio REST API

Channel credentials are read from the environment (SMTP_*, FROM_EMAIL,
TWILIO_*). Set NOTIFICATION_DRY_RUN=true to log messages instead of
sending them.

Usage:
    from notification.channels import NotificationChannelFactory

    channel = NotificationChannelFactory.get_channel('email')
    channel.send(recipient, subject, body, metadata)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import logging
import os

import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from twilio.base.exceptions import TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from notification.message_builder import NotificationMessageBuilder, DEFAULT_FRONTEND_URL

logger = logging.getLogger(__name__)

SMS_MAX_LENGTH = 320

# Network timeout for a single SMTP or Twilio call
DEFAULT_SEND_TIMEOUT_SECONDS = 30.0


def _is_dry_run_mode() -> bool:
    """Check if notification channels should run in dry-run (log-only) mode."""
    return os.environ.get('NOTIFICATION_DRY_RUN', '').lower() in ('true', '1', 'yes')


def _mask_email(email: str) -> str:
    """
    Mask email address for safe logging (PII protection).

    Shows only domain, e.g., "***@example.com"
    """
    if '@' not in email:
        return "***"
    local, domain = email.rsplit('@', 1)
    return f"***@{domain}"


def _mask_phone(phone: str) -> str:
    """Show only the last 3 digits, e.g. "***567"."""
    digits = ''.join(ch for ch in phone if ch.isdigit())
    if len(digits) < 4:
        return "***"
    return f"***{digits[-3:]}"


class NotificationChannel(ABC):
    """
    Abstract base class for all notification channels.

    Channels report failure by returning False; they never raise to callers.
    Every network call a channel makes is bounded by timeout_seconds.
    """

    def __init__(self, timeout_seconds: float = DEFAULT_SEND_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds

    @property
    @abstractmethod
    def channel_type(self) -> str:
        """Return the channel type identifier."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: Optional[str], body: str, metadata: Dict[str, Any]) -> bool:
        """
        Send a notification through this channel.

        Args:
            recipient: Target recipient (format depends on channel)
            subject: Notification subject/title (ignored by SMS)
            body: Plain-text notification body
            metadata: Additional channel-specific metadata

        Returns:
            True if sent successfully, False otherwise
        """
        pass

    def validate_config(self) -> bool:
        """
        Validate that the channel is properly configured.

        Returns:
            True if configured correctly, False otherwise
        """
        return True


class EmailChannel(NotificationChannel):
    """Email notification channel via SMTP."""

    @property
    def channel_type(self) -> str:
        return 'email'

    def validate_config(self) -> bool:
        required_vars = ['SMTP_SERVER', 'SMTP_PORT', 'SMTP_USERNAME', 'SMTP_PASSWORD']
        return all(os.environ.get(var) for var in required_vars)

    def build_message(self, recipient: str, subject: Optional[str], body: str, metadata: Dict[str, Any]) -> MIMEMultipart:
        from_email = os.environ.get('FROM_EMAIL', 'noreply@tenderfind.co.za')

        html_body = metadata.get('html_body')
        if not html_body and metadata.get('tender_title'):
            base_url = metadata.get('base_url') or os.environ.get('FRONTEND_URL', DEFAULT_FRONTEND_URL)
            html_body = NotificationMessageBuilder.build_match_html(metadata['tender_title'], body, base_url)

        msg = MIMEMultipart('alternative')
        msg['From'] = from_email
        msg['To'] = recipient
        msg['Subject'] = subject or ''
        msg.attach(MIMEText(body, 'plain', 'utf-8'))
        if html_body:
            msg.attach(MIMEText(html_body, 'html', 'utf-8'))
        return msg

    def send(self, recipient: str, subject: Optional[str], body: str, metadata: Dict[str, Any]) -> bool:
        if _is_dry_run_mode():
            logger.info(f"[DRY RUN] Email to {_mask_email(recipient)}: {subject}")
            return True

        if not self.validate_config():
            logger.error("Email not configured - SMTP environment variables not set")
            return False

        try:
            smtp_server = os.environ.get('SMTP_SERVER', 'smtp.gmail.com')
            smtp_port = int(os.environ.get('SMTP_PORT', '587'))
            username = os.environ.get('SMTP_USERNAME', '')
            password = os.environ.get('SMTP_PASSWORD', '')

            msg = self.build_message(recipient, subject, body, metadata or {})

            with smtplib.SMTP(smtp_server, smtp_port, timeout=self.timeout_seconds) as server:
                server.starttls()
                server.login(username, password)
                server.send_message(msg)

            logger.info(f"Email sent to {_mask_email(recipient)}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {_mask_email(recipient)}: {e}")
            return False


class SmsChannel(NotificationChannel):
    """SMS notification channel via Twilio."""

    @property
    def channel_type(self) -> str:
        return 'sms'

    def validate_config(self) -> bool:
        required_vars = ['TWILIO_ACCOUNT_SID', 'TWILIO_AUTH_TOKEN', 'TWILIO_PHONE_NUMBER']
        return all(os.environ.get(var) for var in required_vars)

    def send(self, recipient: str, subject: Optional[str], body: str, metadata: Dict[str, Any]) -> bool:
        text = (body or "")[:SMS_MAX_LENGTH]

        if _is_dry_run_mode():
            logger.info(f"[DRY RUN] SMS to {_mask_phone(recipient)}: {text}")
            return True

        if not self.validate_config():
            logger.error("SMS not configured - Twilio environment variables not set")
            return False

        try:
            client = Client(
                os.environ['TWILIO_ACCOUNT_SID'],
                os.environ['TWILIO_AUTH_TOKEN'],
                http_client=TwilioHttpClient(timeout=self.timeout_seconds),
            )
            client.messages.create(
                to=recipient,
                from_=os.environ['TWILIO_PHONE_NUMBER'],
                body=text,
            )
            logger.info(f"SMS sent to {_mask_phone(recipient)}")
            return True
        except TwilioRestException as e:
            logger.error(f"SMS send failed (Twilio) for {_mask_phone(recipient)}: {e}")
        except Exception as e:
            logger.error(f"SMS send failed for {_mask_phone(recipient)}: {e}")
        return False


class NotificationChannelFactory:
    """
    Factory for creating notification channels.

    New channels are added with register_channel() without modifying
    the factory code.
    """

    # Registry of available channels
    _channels: Dict[str, type] = {
        'email': EmailChannel,
        'sms': SmsChannel,
    }

    @classmethod
    def get_channel(cls, channel_type: str, **options) -> NotificationChannel:
        """
        Get a notification channel instance by type.

        Args:
            channel_type: Type of channel (email, sms)
            **options: Constructor arguments, e.g. timeout_seconds

        Returns:
            NotificationChannel instance

        Raises:
            ValueError: If channel type is not registered
        """
        channel_class = cls._channels.get(channel_type.lower())
        if not channel_class:
            raise ValueError(f"Unknown channel type: {channel_type}. "
                           f"Available: {', '.join(cls._channels.keys())}")

        return channel_class(**options)

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type):
        """
        Register a new notification channel.

        Args:
            channel_type: Type identifier for the channel
            channel_class: Class implementing NotificationChannel
        """
        if not issubclass(channel_class, NotificationChannel):
            raise ValueError("Channel class must extend NotificationChannel")

        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered new channel type: {channel_type}")

    @classmethod
    def list_channels(cls) -> list:
        """List all available channel types."""
        return list(cls._channels.keys())

#!/usr/bin/env python3
"""
Notification Channels

Transports that deliver one "new match" message to one recipient. The
dispatcher only knows the channel name from config; the factory maps that
name to a class.

Usage:
    from notification.channels import NotificationChannelFactory

    channel = NotificationChannelFactory.get_channel('webhook')
    channel.send(recipient, subject, body, payload)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import logging
import urllib.parse
import ipaddress
import socket

import requests

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT_SECONDS = 30
WEBHOOK_SCHEMES = ('http', 'https')


def _is_public_host(hostname: str) -> bool:
    """True when every address the host resolves to is publicly routable."""
    try:
        addresses = {info[4][0] for info in socket.getaddrinfo(hostname, None)}
    except socket.gaierror:
        logger.error(f"Could not resolve webhook host: {hostname}")
        return False

    for address in addresses:
        ip = ipaddress.ip_address(address)
        if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local:
            logger.error(f"Webhook host {hostname} resolves to non-public address {ip}")
            return False
    return True


def _validate_webhook_url(url: str) -> bool:
    """Reject non-HTTP schemes and hosts on internal networks (SSRF guard)."""
    try:
        parsed = urllib.parse.urlparse(url)
    except ValueError as e:
        logger.error(f"Malformed webhook URL: {e}")
        return False

    if parsed.scheme not in WEBHOOK_SCHEMES:
        logger.error(f"Webhook URL scheme not allowed: {parsed.scheme or '(none)'}")
        return False
    if not parsed.hostname:
        logger.error("Webhook URL has no host")
        return False
    return _is_public_host(parsed.hostname)


class NotificationChannel(ABC):
    """A delivery transport for match notifications."""

    @property
    @abstractmethod
    def channel_type(self) -> str:
        """Name used in config (notifications.channel)."""
        pass

    @abstractmethod
    def send(self, recipient: Optional[str], subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """
        Deliver one message.

        Args:
            recipient: Channel-specific target (webhook URL, ...); may be None
            subject: One-line summary of the match
            body: Plain-text details
            metadata: Match payload from build_match_payload

        Returns:
            True when delivered; False leaves the match pending
        """
        pass


class LogChannel(NotificationChannel):
    """Writes match notifications to the application log."""

    @property
    def channel_type(self) -> str:
        return 'log'

    def send(self, recipient: Optional[str], subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        logger.info(
            f"[MATCH] expert={metadata.get('expert_id')} request={metadata.get('service_request_id')} "
            f"score={metadata.get('total_score')} to={recipient or '-'}: {subject}"
        )
        return True


class WebhookChannel(NotificationChannel):
    """POSTs the match payload as JSON to the recipient URL."""

    @property
    def channel_type(self) -> str:
        return 'webhook'

    def send(self, recipient: Optional[str], subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        if not recipient or not _validate_webhook_url(recipient):
            logger.error(f"Refusing to deliver match {metadata.get('match_id')}: bad webhook URL {recipient!r}")
            return False

        payload = {
            'type': 'expert_match',
            'subject': subject,
            'body': body,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'match': metadata,
        }

        try:
            response = requests.post(
                recipient,
                json=payload,
                headers={'User-Agent': 'ExpertMatching-Notifier/1.0'},
                timeout=WEBHOOK_TIMEOUT_SECONDS
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Webhook delivery for match {metadata.get('match_id')} failed: {e}")
            return False

        host = urllib.parse.urlparse(recipient).hostname
        logger.info(f"Webhook delivered match {metadata.get('match_id')} to {host}")
        return True


class NotificationChannelFactory:
    """Channel classes by config name."""

    _channels: Dict[str, type] = {
        'log': LogChannel,
        'webhook': WebhookChannel,
    }

    @classmethod
    def get_channel(cls, channel_type: str) -> NotificationChannel:
        """
        Raises:
            ValueError: unknown channel name
        """
        channel_class = cls._channels.get(channel_type.lower())
        if channel_class is None:
            raise ValueError(
                f"Unknown channel type: {channel_type}. Available: {', '.join(sorted(cls._channels))}"
            )
        return channel_class()

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type):
        if not (isinstance(channel_class, type) and issubclass(channel_class, NotificationChannel)):
            raise ValueError("Channel class must extend NotificationChannel")
        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered notification channel: {channel_type}")

    @classmethod
    def list_channels(cls) -> list:
        return sorted(cls._channels)

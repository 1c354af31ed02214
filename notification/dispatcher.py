#!/usr/bin/env python3
"""
Match Notification Dispatcher

Reads matches whose expert has not been notified yet, delivers one message
per match, then bulk-marks the delivered ids as notified.

Delivery is either synchronous through a NotificationChannel or queued on
Redis (RQ) for notification.worker. A queued job counts as delivered once
it is enqueued; RQ retries handle transient channel failures. A failed
synchronous send leaves the match pending for the next pass.
"""

import os
import logging
from typing import Any, Dict, List, Optional

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue, Retry

from core.config_loader import NotificationConfig
from core.matcher import ExpertMatchingService
from database.models import MATCH_SOURCE_LABELS, MatchSide, MatchSource

from notification.channels import NotificationChannelFactory

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = 'redis://localhost:6379/0'


def build_match_payload(match) -> Dict[str, Any]:
    """Serializable summary of a match for channel metadata and queue jobs."""
    expert = getattr(match, 'expert', None)
    request = getattr(match, 'service_request', None)
    source = match.match_source
    return {
        'match_id': match.id,
        'expert_id': match.expert_id,
        'expert_name': expert.personal_name if expert else None,
        'service_request_id': match.service_request_id,
        'service_request_title': request.title if request else None,
        'total_score': float(match.total_score) if match.total_score is not None else None,
        'distance_km': float(match.distance_km) if match.distance_km is not None else None,
        'match_source': source,
        'match_source_label': MATCH_SOURCE_LABELS.get(MatchSource(source), 'Unknown') if source else 'Unknown',
        'created_at': match.created_at.isoformat() if match.created_at else None,
    }


def build_message(payload: Dict[str, Any]):
    title = payload.get('service_request_title') or payload['service_request_id']
    subject = f"New service request match: {title}"
    lines = [
        f"Score: {payload.get('total_score')}",
        f"Source: {payload.get('match_source_label')}",
    ]
    if payload.get('distance_km') is not None:
        lines.append(f"Distance: {payload['distance_km']} km")
    return subject, "\n".join(lines)


def process_match_notification(channel_type: str, recipient: Optional[str], payload: Dict[str, Any]) -> bool:
    """Deliver one match notification. Runs inline or inside the RQ worker."""
    channel = NotificationChannelFactory.get_channel(channel_type)
    subject, body = build_message(payload)
    success = channel.send(recipient, subject, body, payload)
    if success:
        logger.info(f"Notification for match {payload['match_id']} sent via {channel_type}")
    else:
        logger.error(f"Notification for match {payload['match_id']} failed via {channel_type}")
    return success


class MatchNotificationDispatcher:
    """
    Delivers pending match notifications and records them as notified.
    """

    def __init__(
        self,
        service: ExpertMatchingService,
        config: NotificationConfig,
        queue: Optional[Queue] = None
    ):
        """
        Args:
            service: Matching service bound to the caller's unit of work
            config: NotificationConfig (channel, recipient, queue settings)
            queue: Pre-built RQ queue; created from config when omitted and
                use_async_queue is on
        """
        self.service = service
        self.config = config
        self.queue = queue

        if self.queue is None and config.enabled and config.use_async_queue:
            redis_url = config.redis_url or os.environ.get('REDIS_URL', DEFAULT_REDIS_URL)
            try:
                redis_conn = Redis.from_url(redis_url)
                redis_conn.ping()
                self.queue = Queue(config.queue_name, connection=redis_conn)
                logger.info(f"Notification dispatcher connected to Redis queue '{config.queue_name}'")
            except RedisError as e:
                logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
                self.queue = None

    @property
    def async_mode(self) -> bool:
        return self.queue is not None

    def _deliver(self, payload: Dict[str, Any]) -> bool:
        if self.async_mode:
            job = self.queue.enqueue(
                process_match_notification,
                self.config.channel,
                self.config.recipient,
                payload,
                job_timeout='5m',
                result_ttl=86400,
                retry=Retry(max=3, interval=[30, 60, 120])
            )
            logger.debug(f"Queued notification for match {payload['match_id']} as job {job.id}")
            return True
        return process_match_notification(self.config.channel, self.config.recipient, payload)

    def dispatch_pending(self, expert_id: Optional[str] = None) -> int:
        """
        Deliver up to batch_size pending notifications.

        Returns:
            Number of matches marked as notified
        """
        if not self.config.enabled:
            logger.debug("Notifications disabled, skipping dispatch")
            return 0

        pending = self.service.get_pending_notifications(expert_id, limit=self.config.batch_size)
        if not pending:
            return 0

        delivered: List[str] = []
        for match in pending:
            if self._deliver(build_match_payload(match)):
                delivered.append(match.id)

        if delivered:
            self.service.mark_as_notified(delivered, MatchSide.EXPERT)

        logger.info(
            f"Notification pass: {len(delivered)}/{len(pending)} delivered "
            f"({'queued' if self.async_mode else 'sync'})"
        )
        return len(delivered)

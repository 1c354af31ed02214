#!/usr/bin/env python3
"""
Tests for match notification dispatch and channels.
"""

import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import Mock, patch

import requests

from core.config_loader import NotificationConfig
from core.matcher import ExpertMatchingService
from database.models import MatchSide
from notification import (
    LogChannel,
    MatchNotificationDispatcher,
    NotificationChannel,
    NotificationChannelFactory,
    WebhookChannel,
    build_match_payload,
    process_match_notification,
)


def _fake_match(match_id="m-1", expert_id="e-1"):
    return SimpleNamespace(
        id=match_id,
        expert_id=expert_id,
        expert=SimpleNamespace(personal_name="Li Wei"),
        service_request_id="r-1",
        service_request=SimpleNamespace(title="PLC commissioning"),
        total_score=87.5,
        distance_km=3.2,
        match_source="BUYER_SPECIFIED",
        created_at=datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc),
    )


class FailingChannel(NotificationChannel):
    @property
    def channel_type(self) -> str:
        return 'failing'

    def send(self, recipient, subject, body, metadata) -> bool:
        return False


class TestBuildPayload(unittest.TestCase):

    def test_payload_fields(self):
        payload = build_match_payload(_fake_match())

        self.assertEqual(payload['match_id'], "m-1")
        self.assertEqual(payload['expert_name'], "Li Wei")
        self.assertEqual(payload['service_request_title'], "PLC commissioning")
        self.assertEqual(payload['total_score'], 87.5)
        self.assertEqual(payload['match_source_label'], "Buyer Specified")
        self.assertEqual(payload['created_at'], "2026-03-02T12:00:00+00:00")

    def test_payload_without_relationships(self):
        match = _fake_match()
        match.expert = None
        match.service_request = None
        match.distance_km = None

        payload = build_match_payload(match)

        self.assertIsNone(payload['expert_name'])
        self.assertIsNone(payload['distance_km'])


class TestMatchNotificationDispatcher(unittest.TestCase):

    def setUp(self):
        self.service = Mock(spec=ExpertMatchingService)
        self.service.get_pending_notifications.return_value = [_fake_match("m-1"), _fake_match("m-2")]

    def tearDown(self):
        NotificationChannelFactory._channels.pop('failing', None)

    def test_disabled_does_nothing(self):
        dispatcher = MatchNotificationDispatcher(self.service, NotificationConfig(enabled=False))

        self.assertEqual(dispatcher.dispatch_pending(), 0)
        self.service.get_pending_notifications.assert_not_called()

    def test_sync_delivery_marks_notified(self):
        config = NotificationConfig(enabled=True, channel='log', batch_size=25)
        dispatcher = MatchNotificationDispatcher(self.service, config)

        delivered = dispatcher.dispatch_pending()

        self.assertEqual(delivered, 2)
        self.assertFalse(dispatcher.async_mode)
        self.service.get_pending_notifications.assert_called_once_with(None, limit=25)
        self.service.mark_as_notified.assert_called_once_with(["m-1", "m-2"], MatchSide.EXPERT)

    def test_failed_delivery_stays_pending(self):
        NotificationChannelFactory.register_channel('failing', FailingChannel)
        dispatcher = MatchNotificationDispatcher(self.service, NotificationConfig(enabled=True, channel='failing'))

        self.assertEqual(dispatcher.dispatch_pending(), 0)
        self.service.mark_as_notified.assert_not_called()

    def test_async_delivery_enqueues(self):
        queue = Mock()
        queue.enqueue.return_value = Mock(id="job-1")
        config = NotificationConfig(enabled=True, channel='webhook', recipient='https://hooks.example.com/x',
                                    use_async_queue=True)
        dispatcher = MatchNotificationDispatcher(self.service, config, queue=queue)

        delivered = dispatcher.dispatch_pending(expert_id="e-1")

        self.assertEqual(delivered, 2)
        self.assertTrue(dispatcher.async_mode)
        self.assertEqual(queue.enqueue.call_count, 2)
        args, kwargs = queue.enqueue.call_args
        self.assertIs(args[0], process_match_notification)
        self.assertEqual(args[1], 'webhook')
        self.assertEqual(args[2], 'https://hooks.example.com/x')
        self.assertEqual(args[3]['match_id'], "m-2")
        self.service.get_pending_notifications.assert_called_once_with("e-1", limit=100)
        self.service.mark_as_notified.assert_called_once_with(["m-1", "m-2"], MatchSide.EXPERT)

    def test_nothing_pending(self):
        self.service.get_pending_notifications.return_value = []
        dispatcher = MatchNotificationDispatcher(self.service, NotificationConfig(enabled=True))

        self.assertEqual(dispatcher.dispatch_pending(), 0)
        self.service.mark_as_notified.assert_not_called()


class TestChannels(unittest.TestCase):

    def test_factory_lookup(self):
        self.assertIsInstance(NotificationChannelFactory.get_channel('LOG'), LogChannel)
        self.assertIsInstance(NotificationChannelFactory.get_channel('webhook'), WebhookChannel)
        with self.assertRaises(ValueError):
            NotificationChannelFactory.get_channel('carrier-pigeon')
        self.assertIn('webhook', NotificationChannelFactory.list_channels())

    def test_register_rejects_non_channel(self):
        with self.assertRaises(ValueError):
            NotificationChannelFactory.register_channel('bogus', dict)

    def test_log_channel(self):
        self.assertTrue(LogChannel().send(None, "Subject", "Body", {'match_id': 'm-1'}))

    def test_process_match_notification(self):
        payload = build_match_payload(_fake_match())
        self.assertTrue(process_match_notification('log', None, payload))

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post')
    def test_webhook_posts_payload(self, mock_post, _mock_validate):
        mock_post.return_value = Mock(status_code=200)

        sent = WebhookChannel().send('https://hooks.example.com/x', "Subject", "Body", {'match_id': 'm-1'})

        self.assertTrue(sent)
        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs['json']['type'], 'expert_match')
        self.assertEqual(kwargs['json']['match'], {'match_id': 'm-1'})

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post', side_effect=requests.ConnectionError("down"))
    def test_webhook_failure(self, _mock_post, _mock_validate):
        self.assertFalse(WebhookChannel().send('https://hooks.example.com/x', "Subject", "Body", {}))

    def test_webhook_rejects_bad_scheme(self):
        self.assertFalse(WebhookChannel().send('ftp://hooks.example.com/x', "Subject", "Body", {}))
        self.assertFalse(WebhookChannel().send(None, "Subject", "Body", {}))


if __name__ == '__main__':
    unittest.main()

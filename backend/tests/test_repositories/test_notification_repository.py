"""
Unit tests for NotificationRepository
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from invenhub.domain.catalog import NotificationType
from invenhub.repositories.notification_repository import NotificationRepository


def _notification_row(**overrides):
    row = {
        'id': 1,
        'type': 'warning',
        'title': 'Low Stock Alert',
        'message': 'Notebook Set is running low (3 left, threshold: 5)',
        'link': '/inventory',
        'dedupe_key': 'stock:low:6',
        'read': False,
        'created_at': datetime(2025, 3, 15, 8, 0, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


def _mock_connection(mock_get_conn):
    mock_conn = MagicMock()
    mock_cursor = MagicMock()
    mock_get_conn.return_value = mock_conn
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


class TestNotificationRepository:

    @patch('invenhub.repositories.notification_repository.get_db_connection_dict')
    def test_find_all_unread_only(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_notification_row()]

        notifications = NotificationRepository().find_all(unread_only=True, limit=10)

        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.WARNING
        sql, params = mock_cursor.execute.call_args[0]
        assert 'read = FALSE' in sql
        assert params == (10,)

    @patch('invenhub.repositories.notification_repository.get_db_connection_dict')
    def test_exists_unread_by_dedupe_key(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = {'?column?': 1}

        assert NotificationRepository().exists_unread('stock:low:6') is True
        assert mock_cursor.execute.call_args[0][1] == ('stock:low:6',)

    @patch('invenhub.repositories.notification_repository.get_db_connection_dict')
    def test_create_commits(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _notification_row()

        notification = NotificationRepository().create(
            'warning', 'Low Stock Alert', 'Notebook Set is running low (3 left, threshold: 5)',
            link='/inventory', dedupe_key='stock:low:6'
        )

        assert notification.id == 1
        assert notification.read is False
        mock_conn.commit.assert_called_once()

    @patch('invenhub.repositories.notification_repository.get_db_connection_dict')
    def test_mark_read_missing_returns_none(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert NotificationRepository().mark_read(42) is None

    @patch('invenhub.repositories.notification_repository.get_db_connection_dict')
    def test_mark_all_read_returns_rowcount(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 3

        assert NotificationRepository().mark_all_read() == 3
        mock_conn.commit.assert_called_once()

    @patch('invenhub.repositories.notification_repository.get_db_connection_dict')
    def test_delete_all_returns_rowcount(self, mock_get_conn):
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 7

        assert NotificationRepository().delete_all() == 7

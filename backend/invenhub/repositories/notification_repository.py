"""
Notification Repository - Data Access Layer for Notifications
"""
from typing import List, Optional

from invenhub.core.database import get_db_connection_dict
from invenhub.domain.notification import Notification


NOTIFICATION_COLUMNS = "id, type, title, message, link, dedupe_key, read, created_at"


class NotificationRepository:
    """Repository for Notification data access"""

    def find_all(self, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            where_clause = "WHERE read = FALSE" if unread_only else ""
            cursor.execute(f"""
                SELECT {NOTIFICATION_COLUMNS}
                FROM notifications
                {where_clause}
                ORDER BY created_at DESC, id DESC
                LIMIT %s
            """, (limit,))
            return [Notification(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def unread_count(self) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT COUNT(*) AS total FROM notifications WHERE read = FALSE")
            return cursor.fetchone()['total']

        finally:
            cursor.close()
            conn.close()

    def exists_unread(self, dedupe_key: str) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT 1 FROM notifications
                WHERE dedupe_key = %s AND read = FALSE
                LIMIT 1
            """, (dedupe_key,))
            return cursor.fetchone() is not None

        finally:
            cursor.close()
            conn.close()

    def create(
        self,
        type: str,
        title: str,
        message: str,
        link: Optional[str] = None,
        dedupe_key: Optional[str] = None
    ) -> Notification:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO notifications (type, title, message, link, dedupe_key, read, created_at)
                VALUES (%s, %s, %s, %s, %s, FALSE, NOW())
                RETURNING {NOTIFICATION_COLUMNS}
            """, (type, title, message, link, dedupe_key))
            row = cursor.fetchone()
            conn.commit()
            return Notification(**dict(row))

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def mark_read(self, notification_id: int) -> Optional[Notification]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE notifications SET read = TRUE
                WHERE id = %s
                RETURNING {NOTIFICATION_COLUMNS}
            """, (notification_id,))
            row = cursor.fetchone()
            conn.commit()
            return Notification(**dict(row)) if row else None

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def mark_all_read(self) -> int:
        """Returns the number of notifications marked"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("UPDATE notifications SET read = TRUE WHERE read = FALSE")
            updated = cursor.rowcount
            conn.commit()
            return updated

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete(self, notification_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM notifications WHERE id = %s RETURNING id", (notification_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete_all(self) -> int:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM notifications")
            deleted = cursor.rowcount
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

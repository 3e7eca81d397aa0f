"""
User Repository - Data Access Layer for Users

Password hashes are only returned by find_credentials_by_email.
"""
from typing import List, Optional, Tuple

from psycopg2 import errors

from invenhub.core.database import get_db_connection_dict
from invenhub.core.exceptions import ValidationError
from invenhub.domain.user import User


USER_COLUMNS = "id, name, email, role, avatar, created_at, updated_at"


class UserRepository:

    def find_by_id(self, user_id: int) -> Optional[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
            row = cursor.fetchone()
            return User(**dict(row)) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_by_email(self, email: str) -> Optional[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE email = %s", (email.lower(),))
            row = cursor.fetchone()
            return User(**dict(row)) if row else None

        finally:
            cursor.close()
            conn.close()

    def find_credentials_by_email(self, email: str) -> Optional[Tuple[User, str]]:
        """User and stored password hash, for login"""
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(
                f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = %s",
                (email.lower(),)
            )
            row = cursor.fetchone()
            if not row:
                return None

            data = dict(row)
            password_hash = data.pop('password_hash')
            return User(**data), password_hash

        finally:
            cursor.close()
            conn.close()

    def find_all(self) -> List[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY created_at, id")
            return [User(**dict(row)) for row in cursor.fetchall()]

        finally:
            cursor.close()
            conn.close()

    def create(self, name: str, email: str, password_hash: str, role: str, avatar: Optional[str]) -> User:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO users (name, email, password_hash, role, avatar, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, NOW(), NOW())
                RETURNING {USER_COLUMNS}
            """, (name, email.lower(), password_hash, role, avatar))
            row = cursor.fetchone()
            conn.commit()
            return User(**dict(row))

        except errors.UniqueViolation:
            conn.rollback()
            raise ValidationError("User with this email already exists")
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def update_role(self, user_id: int, role: str) -> Optional[User]:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                UPDATE users SET role = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING {USER_COLUMNS}
            """, (role, user_id))
            row = cursor.fetchone()
            conn.commit()
            return User(**dict(row)) if row else None

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    def delete(self, user_id: int) -> bool:
        conn = get_db_connection_dict()
        cursor = conn.cursor()

        try:
            cursor.execute("DELETE FROM users WHERE id = %s RETURNING id", (user_id,))
            deleted = cursor.fetchone() is not None
            conn.commit()
            return deleted

        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

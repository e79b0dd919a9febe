import logging
import re
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ...core.messages import AuthMessages, TicketMessages
from ...domain.errors import DocumentValidationError, DuplicateKeyError, InvalidIdentifierError
from ...domain.models import MAX_INT64, FieldCriterion, Ticket, TicketPriority, TicketQuery, TicketStatus, User
from ...domain.ports.persistence import PersistenceGateway

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")

TICKET_FIELDS = (
    "id",
    "title",
    "description",
    "priority",
    "status",
    "due_date",
    "created_by",
    "created_at",
    "updated_at",
)
DATETIME_FIELDS = frozenset({"due_date", "created_at", "updated_at"})

_OPERATORS = {
    "$eq": "=",
    "$ne": "!=",
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
}


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed implementation of the persistence gateway.

    Each table behaves like a schema-validated document collection: documents
    are checked for required fields and enumerations before every write, and
    unique index violations are reported as ``DuplicateKeyError``.
    """

    def __init__(self, path: Path) -> None:
        if str(path) != ":memory:":
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()
        logger.info("Database opened at %s", path)

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS tickets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    priority TEXT NOT NULL DEFAULT 'Low',
                    status TEXT NOT NULL DEFAULT 'Open',
                    due_date TEXT NOT NULL,
                    created_by INTEGER NOT NULL REFERENCES users(id),
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_tickets_created_by
                    ON tickets(created_by);

                CREATE INDEX IF NOT EXISTS idx_tickets_due_date
                    ON tickets(due_date);
                """
            )

    def close(self) -> None:
        self._conn.close()

    # UserRepository API ----------------------------------------------------
    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE email = ?", (email.strip().lower(),))
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def get_user_by_id(self, user_id: Any) -> Optional[User]:
        key = self._cast_id(user_id)
        with self._lock:
            cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (key,))
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def get_users_by_ids(self, user_ids: Iterable[int]) -> Dict[int, User]:
        keys = sorted({int(user_id) for user_id in user_ids})
        if not keys:
            return {}
        placeholders = ", ".join("?" for _ in keys)
        with self._lock:
            cur = self._conn.execute(f"SELECT * FROM users WHERE id IN ({placeholders})", keys)
            rows = cur.fetchall()
        return {row["id"]: self._row_to_user(row) for row in rows}

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        normalized = (email or "").strip().lower()
        self._validate_user(name, normalized, password_hash)
        now = self._now()
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO users (name, email, password_hash, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (name, normalized, password_hash, now, now),
                )
                user_id = cur.lastrowid
                cur = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
                row = cur.fetchone()
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed" not in str(exc):
                raise
            raise DuplicateKeyError(self._unique_field(exc), normalized) from exc
        if not row:
            raise RuntimeError("Failed to persist user.")
        return self._row_to_user(row)

    # TicketRepository API --------------------------------------------------
    def create_ticket(
        self,
        title: Optional[str],
        description: Optional[str],
        priority: Optional[str],
        status: Optional[str],
        due_date: Optional[datetime],
        created_by: Optional[int],
    ) -> Ticket:
        document = {
            "title": title,
            "description": description,
            "priority": priority if priority is not None else TicketPriority.LOW.value,
            "status": status if status is not None else TicketStatus.OPEN.value,
            "due_date": due_date,
            "created_by": created_by,
        }
        self._validate_ticket(document)
        now = self._now()
        with self._lock, self._conn:
            cur = self._conn.execute(
                """
                INSERT INTO tickets (
                    title, description, priority, status, due_date,
                    created_by, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    document["title"],
                    document["description"],
                    document["priority"],
                    document["status"],
                    self._format_datetime(document["due_date"]),
                    document["created_by"],
                    now,
                    now,
                ),
            )
            ticket_id = cur.lastrowid
            cur = self._conn.execute("SELECT * FROM tickets WHERE id = ?", (ticket_id,))
            row = cur.fetchone()
        if not row:
            raise RuntimeError("Failed to persist ticket.")
        return self._row_to_ticket(row)

    def get_ticket(self, ticket_id: Any) -> Optional[Ticket]:
        key = self._cast_id(ticket_id)
        with self._lock:
            cur = self._conn.execute("SELECT * FROM tickets WHERE id = ?", (key,))
            row = cur.fetchone()
        return self._row_to_ticket(row) if row else None

    def update_ticket(self, ticket_id: Any, changes: Dict[str, Any]) -> Optional[Ticket]:
        key = self._cast_id(ticket_id)
        editable = ("title", "description", "priority", "status", "due_date")
        with self._lock, self._conn:
            cur = self._conn.execute("SELECT * FROM tickets WHERE id = ?", (key,))
            row = cur.fetchone()
            if not row:
                return None
            current = self._row_to_ticket(row)
            document = {
                "title": current.title,
                "description": current.description,
                "priority": current.priority.value,
                "status": current.status.value,
                "due_date": current.due_date,
                "created_by": current.created_by,
            }
            document.update({name: value for name, value in changes.items() if name in editable})
            self._validate_ticket(document)
            self._conn.execute(
                """
                UPDATE tickets
                SET title = ?, description = ?, priority = ?, status = ?,
                    due_date = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    document["title"],
                    document["description"],
                    document["priority"],
                    document["status"],
                    self._format_datetime(document["due_date"]),
                    self._now(),
                    key,
                ),
            )
            cur = self._conn.execute("SELECT * FROM tickets WHERE id = ?", (key,))
            row = cur.fetchone()
        return self._row_to_ticket(row) if row else None

    def delete_ticket(self, ticket_id: Any) -> bool:
        key = self._cast_id(ticket_id)
        with self._lock, self._conn:
            cur = self._conn.execute("DELETE FROM tickets WHERE id = ?", (key,))
            return cur.rowcount > 0

    def find_tickets(self, query: TicketQuery) -> List[Ticket]:
        where, params = self._build_where(query.criteria)
        statement = f"SELECT * FROM tickets{where}"
        if query.sort_field:
            column = self._column(query.sort_field)
            direction = "DESC" if query.descending else "ASC"
            statement += f" ORDER BY {column} {direction}, id ASC"
        else:
            statement += " ORDER BY id ASC"
        statement += " LIMIT ? OFFSET ?"
        params.extend([query.limit, query.skip])
        with self._lock:
            cur = self._conn.execute(statement, params)
            rows = cur.fetchall()
        return [self._row_to_ticket(row) for row in rows]

    def count_tickets(self, query: TicketQuery) -> int:
        where, params = self._build_where(query.criteria)
        with self._lock:
            cur = self._conn.execute(f"SELECT COUNT(*) FROM tickets{where}", params)
            (total,) = cur.fetchone()
        return int(total)

    # Schema validation -----------------------------------------------------
    @staticmethod
    def _validate_user(name: Optional[str], email: str, password_hash: Optional[str]) -> None:
        errors: Dict[str, str] = {}
        if not name:
            errors["name"] = AuthMessages.NAME_REQUIRED
        if not email:
            errors["email"] = AuthMessages.EMAIL_REQUIRED
        elif not EMAIL_PATTERN.match(email):
            errors["email"] = AuthMessages.INVALID_EMAIL
        if not password_hash:
            errors["password"] = AuthMessages.PASSWORD_REQUIRED
        if errors:
            raise DocumentValidationError(errors)

    @classmethod
    def _validate_ticket(cls, document: Dict[str, Any]) -> None:
        errors: Dict[str, str] = {}
        if not document.get("title"):
            errors["title"] = TicketMessages.TITLE_REQUIRED
        if not document.get("description"):
            errors["description"] = TicketMessages.DESCRIPTION_REQUIRED
        if document.get("priority") not in {item.value for item in TicketPriority}:
            errors["priority"] = TicketMessages.INVALID_PRIORITY
        if document.get("status") not in {item.value for item in TicketStatus}:
            errors["status"] = TicketMessages.INVALID_STATUS
        due_date = document.get("due_date")
        if not isinstance(due_date, datetime):
            errors["due_date"] = TicketMessages.DUE_DATE_REQUIRED
        else:
            try:
                document["due_date"] = cls._to_utc(due_date)
            except OverflowError:
                errors["due_date"] = TicketMessages.INVALID_DUE_DATE
        if document.get("created_by") is None:
            errors["created_by"] = TicketMessages.AUTHOR_REQUIRED
        if errors:
            raise DocumentValidationError(errors)

    # Helpers ----------------------------------------------------------------
    @staticmethod
    def _cast_id(value: Any, path: str = "id") -> int:
        if isinstance(value, int) and not isinstance(value, bool):
            key = value
        elif isinstance(value, str) and value.isdecimal():
            key = int(value)
        else:
            raise InvalidIdentifierError(path, value)
        if abs(key) > MAX_INT64:
            raise InvalidIdentifierError(path, value)
        return key

    @staticmethod
    def _column(field: str) -> str:
        if field not in TICKET_FIELDS:
            raise ValueError(f"Unknown ticket field: {field}")
        return field

    def _build_where(self, criteria: List[FieldCriterion]) -> Tuple[str, List[Any]]:
        clauses: List[str] = []
        params: List[Any] = []
        for criterion in criteria:
            column = self._column(criterion.field)
            if criterion.operator in ("$in", "$nin"):
                values = [self._to_storage(criterion.field, item) for item in criterion.value]
                if not values:
                    clauses.append("0" if criterion.operator == "$in" else "1")
                    continue
                placeholders = ", ".join("?" for _ in values)
                keyword = "IN" if criterion.operator == "$in" else "NOT IN"
                clauses.append(f"{column} {keyword} ({placeholders})")
                params.extend(values)
            elif criterion.operator in _OPERATORS:
                clauses.append(f"{column} {_OPERATORS[criterion.operator]} ?")
                params.append(self._to_storage(criterion.field, criterion.value))
            else:
                raise ValueError(f"Unsupported operator: {criterion.operator}")
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def _to_storage(self, field: str, value: Any) -> Any:
        if field in DATETIME_FIELDS and isinstance(value, datetime):
            return self._format_datetime(value)
        if isinstance(value, (TicketPriority, TicketStatus)):
            return value.value
        return value

    @staticmethod
    def _unique_field(exc: sqlite3.IntegrityError) -> str:
        # "UNIQUE constraint failed: users.email"
        return str(exc).rsplit(".", 1)[-1].strip()

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

    @staticmethod
    def _to_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @classmethod
    def _format_datetime(cls, value: datetime) -> str:
        return cls._to_utc(value).replace(microsecond=0).isoformat()

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        result = datetime.fromisoformat(value)
        if result.tzinfo is None:
            return result.replace(tzinfo=timezone.utc)
        return result.astimezone(timezone.utc)

    def _row_to_ticket(self, row: sqlite3.Row) -> Ticket:
        return Ticket(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            priority=TicketPriority(row["priority"]),
            status=TicketStatus(row["status"]),
            due_date=self._parse_datetime(row["due_date"]),
            created_by=row["created_by"],
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )

import builtins
import json
import sqlite3
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel

from pumpwork.adapters.realtime import RealtimeHub
from pumpwork.domain.entities import (
    AuthUser,
    Category,
    ChangeEvent,
    Contract,
    Conversation,
    JobApplication,
    JobPost,
    Message,
    Profile,
    Review,
    ServicePost,
    ServiceRequest,
    utc_now,
)

M = TypeVar("M", bound=BaseModel)


def db_timestamp(value: datetime) -> str:
    """Fixed-width UTC text, so TEXT columns sort and compare chronologically."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLiteTableRepo(Generic[M]):
    """Row mapping and change publishing shared by every table repo."""

    table: ClassVar[str]
    model: ClassVar[type[BaseModel]]
    json_fields: ClassVar[tuple[str, ...]] = ()
    bool_fields: ClassVar[tuple[str, ...]] = ()
    embedded: ClassVar[frozenset[str]] = frozenset()
    sortable: ClassVar[frozenset[str]] = frozenset({"created_at"})
    default_order: ClassVar[str] = "created_at"

    def __init__(self, db_path: str, feed: RealtimeHub | None = None):
        self.db_path = db_path
        self.feed = feed

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    # --- mapping ---

    def _to_row(self, item: BaseModel) -> dict[str, Any]:
        row = item.model_dump(mode="json", exclude=set(self.embedded))
        for name in row:
            value = getattr(item, name, None)
            if isinstance(value, datetime):
                row[name] = db_timestamp(value)
        for name in self.json_fields:
            row[name] = json.dumps(row.get(name) or ([] if name != "user_metadata" else {}))
        for name in self.bool_fields:
            row[name] = 1 if row.get(name) else 0
        return row

    def _from_row(self, row: dict[str, Any]) -> M:
        data = dict(row)
        for name in self.json_fields:
            raw = data.get(name)
            data[name] = json.loads(raw) if raw else ([] if name != "user_metadata" else {})
        for name in self.bool_fields:
            data[name] = bool(data.get(name))
        return self.model.model_validate(data)  # type: ignore[return-value]

    def _publish(
        self, event: str, new: dict[str, Any] | None = None, old: dict[str, Any] | None = None
    ) -> None:
        if self.feed is None:
            return
        self.feed.publish(
            ChangeEvent(
                event=event,  # type: ignore[arg-type]
                table=self.table,
                new=new or {},
                old=old or {},
            )
        )

    def _public_row(self, row: dict[str, Any]) -> dict[str, Any]:
        """Row as delivered to subscribers: decoded JSON columns."""
        data = dict(row)
        for name in self.json_fields:
            if isinstance(data.get(name), str):
                data[name] = json.loads(data[name])
        for name in self.bool_fields:
            data[name] = bool(data.get(name))
        return data

    # --- generic operations ---

    def _save(self, item: M) -> M:
        row = self._to_row(item)
        columns = list(row.keys())
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{c}=excluded.{c}" for c in columns if c not in ("id", "created_at"))
        conn = self._get_conn()
        try:
            existing = conn.execute(
                f"SELECT * FROM {self.table} WHERE id = ?", (row["id"],)
            ).fetchone()
            conn.execute(
                f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders}) "
                f"ON CONFLICT(id) DO UPDATE SET {updates}",
                tuple(row[c] for c in columns),
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        if existing is None:
            self._publish("INSERT", new=self._public_row(row))
        else:
            self._publish("UPDATE", new=self._public_row(row), old=self._public_row(existing))
        return item

    def save(self, item: M) -> M:
        return self._save(item)

    def get_by_id(self, item_id: UUID | str) -> M | None:
        rows = self._select("id = ?", [str(item_id)], limit=1)
        return rows[0] if rows else None

    def delete(self, item_id: UUID | str) -> bool:
        conn = self._get_conn()
        try:
            existing = conn.execute(
                f"SELECT * FROM {self.table} WHERE id = ?", (str(item_id),)
            ).fetchone()
            if existing is None:
                return False
            conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (str(item_id),))
            conn.commit()
        finally:
            conn.close()
        self._publish("DELETE", old=self._public_row(existing))
        return True

    def _select(
        self,
        where: str = "1=1",
        params: Iterable[Any] = (),
        order_by: str | None = None,
        ascending: bool = False,
        limit: int | None = None,
    ) -> builtins.list[M]:
        order_by = order_by or self.default_order
        if order_by not in self.sortable:
            raise ValueError(f"Cannot sort {self.table} by {order_by!r}")
        direction = "ASC" if ascending else "DESC"
        query = (
            f"SELECT * FROM {self.table} WHERE {where} "
            f"ORDER BY {order_by} IS NULL, {order_by} {direction}"
        )
        args = list(params)
        if limit is not None:
            query += " LIMIT ?"
            args.append(limit)
        conn = self._get_conn()
        try:
            rows = conn.execute(query, args).fetchall()
            return [self._from_row(r) for r in rows]
        finally:
            conn.close()

    def count(self, **equals: Any) -> int:
        clauses = []
        params: list[Any] = []
        for column, value in equals.items():
            if column not in self.model.model_fields:
                raise ValueError(f"Unknown column {column!r} for {self.table}")
            clauses.append(f"{column} = ?")
            params.append(str(value) if isinstance(value, UUID) else value)
        where = " AND ".join(clauses) or "1=1"
        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT COUNT(*) AS n FROM {self.table} WHERE {where}", params
            ).fetchone()
            return int(row["n"])
        finally:
            conn.close()

    def count_by(self, column: str) -> dict[str, int]:
        if column not in self.model.model_fields:
            raise ValueError(f"Unknown column {column!r} for {self.table}")
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT {column} AS k, COUNT(*) AS n FROM {self.table} GROUP BY {column}"
            ).fetchall()
            return {str(r["k"]): int(r["n"]) for r in rows}
        finally:
            conn.close()

    def recent(self, limit: int = 10) -> builtins.list[M]:
        return self._select(limit=limit)

    def list_all(self) -> builtins.list[M]:
        return self._select()

    @staticmethod
    def _skills_clause(table: str, skills: list[str], params: list[Any]) -> str:
        params.extend(skills)
        marks = ", ".join("?" for _ in skills)
        return (
            f"EXISTS (SELECT 1 FROM json_each({table}.skills) "
            f"WHERE json_each.value IN ({marks}))"
        )


# --- Hosted auth ---


class SQLiteAuthUserRepo(SQLiteTableRepo[AuthUser]):
    table = "auth_users"
    model = AuthUser
    json_fields = ("user_metadata",)

    def _publish(
        self, event: str, new: dict[str, Any] | None = None, old: dict[str, Any] | None = None
    ) -> None:
        # Rows carry password hashes; never broadcast them.
        return

    def get_by_email(self, email: str) -> AuthUser | None:
        rows = self._select("lower(email) = lower(?)", [email], limit=1)
        return rows[0] if rows else None


# --- Profiles ---


class SQLiteProfileRepo(SQLiteTableRepo[Profile]):
    table = "profiles"
    model = Profile
    json_fields = ("skills",)
    sortable = frozenset({"created_at", "updated_at", "rating", "nickname", "review_count"})

    def get_by_wallet(self, wallet_address: str) -> Profile | None:
        rows = self._select("wallet_address = ?", [wallet_address], limit=1)
        return rows[0] if rows else None

    def get_many(self, ids: Iterable[UUID | str]) -> dict[str, Profile]:
        keys = sorted({str(i) for i in ids if i})
        if not keys:
            return {}
        marks = ", ".join("?" for _ in keys)
        return {str(p.id): p for p in self._select(f"id IN ({marks})", keys)}

    def update_fields(self, profile_id: UUID | str, updates: dict[str, Any]) -> Profile | None:
        current = self.get_by_id(profile_id)
        if current is None:
            return None
        merged = current.model_copy(update={**updates, "updated_at": utc_now()})
        # Round-trip through validation so bad updates fail loudly
        validated = Profile.model_validate(merged.model_dump())
        return self._save(validated)

    def list(
        self,
        user_type: str | None = None,
        skills: builtins.list[str] | None = None,
        min_rating: float | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> builtins.list[Profile]:
        clauses: builtins.list[str] = []
        params: builtins.list[Any] = []
        if user_type:
            clauses.append("user_type = ?")
            params.append(user_type)
        if skills:
            clauses.append(self._skills_clause(self.table, skills, params))
        if min_rating:
            clauses.append("rating >= ?")
            params.append(min_rating)
        return self._select(
            " AND ".join(clauses) or "1=1",
            params,
            order_by=sort_by,
            ascending=sort_order == "asc",
        )

    def recompute_rating(self, profile_id: UUID | str) -> Profile | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT COUNT(*) AS n, AVG(rating) AS avg FROM reviews WHERE reviewee_id = ?",
                (str(profile_id),),
            ).fetchone()
        finally:
            conn.close()
        count = int(row["n"] or 0)
        average = round(float(row["avg"]), 2) if count else 0.0
        return self.update_fields(profile_id, {"rating": average, "review_count": count})


class SQLiteCategoryRepo(SQLiteTableRepo[Category]):
    table = "categories"
    model = Category
    sortable = frozenset({"name"})
    default_order = "name"

    def list_all(self) -> builtins.list[Category]:
        return self._select(order_by="name", ascending=True)

    def get_by_slug(self, slug: str) -> Category | None:
        rows = self._select("slug = ?", [slug], order_by="name", limit=1)
        return rows[0] if rows else None


# --- Posts ---


class SQLiteJobPostRepo(SQLiteTableRepo[JobPost]):
    table = "job_posts"
    model = JobPost
    json_fields = ("skills",)
    embedded = frozenset({"client"})
    sortable = frozenset({"created_at", "updated_at", "budget", "title", "deadline"})

    def list(
        self,
        statuses: builtins.list[str],
        category: str | None = None,
        skills: builtins.list[str] | None = None,
        budget_min: float | None = None,
        budget_max: float | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> builtins.list[JobPost]:
        params: builtins.list[Any] = list(statuses)
        clauses = [f"status IN ({', '.join('?' for _ in statuses)})"]
        if category:
            clauses.append("category = ?")
            params.append(category)
        if skills:
            clauses.append(self._skills_clause(self.table, skills, params))
        if budget_min is not None:
            clauses.append("budget >= ?")
            params.append(budget_min)
        if budget_max is not None:
            clauses.append("budget <= ?")
            params.append(budget_max)
        if search:
            clauses.append("(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\')")
            params.extend([_like(search), _like(search)])
        return self._select(
            " AND ".join(clauses), params, order_by=sort_by, ascending=sort_order == "asc"
        )

    def list_by_client(self, client_id: UUID | str) -> builtins.list[JobPost]:
        return self._select("client_id = ?", [str(client_id)])


class SQLiteServicePostRepo(SQLiteTableRepo[ServicePost]):
    table = "service_posts"
    model = ServicePost
    json_fields = ("skills",)
    embedded = frozenset({"freelancer"})
    sortable = frozenset({"created_at", "updated_at", "price", "title"})

    def list(
        self,
        statuses: builtins.list[str],
        category: str | None = None,
        skills: builtins.list[str] | None = None,
        price_min: float | None = None,
        price_max: float | None = None,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> builtins.list[ServicePost]:
        params: builtins.list[Any] = list(statuses)
        clauses = [f"status IN ({', '.join('?' for _ in statuses)})"]
        if category:
            clauses.append("category = ?")
            params.append(category)
        if skills:
            clauses.append(self._skills_clause(self.table, skills, params))
        if price_min is not None:
            clauses.append("price >= ?")
            params.append(price_min)
        if price_max is not None:
            clauses.append("price <= ?")
            params.append(price_max)
        if search:
            clauses.append("(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\')")
            params.extend([_like(search), _like(search)])
        return self._select(
            " AND ".join(clauses), params, order_by=sort_by, ascending=sort_order == "asc"
        )

    def list_by_freelancer(self, freelancer_id: UUID | str) -> builtins.list[ServicePost]:
        return self._select("freelancer_id = ?", [str(freelancer_id)])


# --- Hiring ---


class SQLiteApplicationRepo(SQLiteTableRepo[JobApplication]):
    table = "job_applications"
    model = JobApplication
    embedded = frozenset({"freelancer", "job_post"})

    def get_by_job_and_freelancer(
        self, job_post_id: UUID | str, freelancer_id: UUID | str
    ) -> JobApplication | None:
        rows = self._select(
            "job_post_id = ? AND freelancer_id = ?",
            [str(job_post_id), str(freelancer_id)],
            limit=1,
        )
        return rows[0] if rows else None

    def list_by_job(self, job_post_id: UUID | str) -> builtins.list[JobApplication]:
        return self._select("job_post_id = ?", [str(job_post_id)])

    def list_by_freelancer(self, freelancer_id: UUID | str) -> builtins.list[JobApplication]:
        return self._select("freelancer_id = ?", [str(freelancer_id)])


class SQLiteServiceRequestRepo(SQLiteTableRepo[ServiceRequest]):
    table = "service_requests"
    model = ServiceRequest
    embedded = frozenset({"client", "freelancer", "service_post"})

    def get_by_service_and_client(
        self, service_post_id: UUID | str, client_id: UUID | str
    ) -> ServiceRequest | None:
        rows = self._select(
            "service_post_id = ? AND client_id = ?",
            [str(service_post_id), str(client_id)],
            limit=1,
        )
        return rows[0] if rows else None

    def list_by_service(self, service_post_id: UUID | str) -> builtins.list[ServiceRequest]:
        return self._select("service_post_id = ?", [str(service_post_id)])

    def list_by_freelancer(self, freelancer_id: UUID | str) -> builtins.list[ServiceRequest]:
        return self._select("freelancer_id = ?", [str(freelancer_id)])

    def list_by_client(self, client_id: UUID | str) -> builtins.list[ServiceRequest]:
        return self._select("client_id = ?", [str(client_id)])


class SQLiteContractRepo(SQLiteTableRepo[Contract]):
    table = "contracts"
    model = Contract
    embedded = frozenset({"client", "freelancer"})

    def list_by_party(
        self, column: str, party_id: UUID | str, status: str | None = None
    ) -> builtins.list[Contract]:
        if column not in ("client_id", "freelancer_id"):
            raise ValueError(f"Unknown contract party column {column!r}")
        where = f"{column} = ?"
        params: builtins.list[Any] = [str(party_id)]
        if status:
            where += " AND status = ?"
            params.append(status)
        return self._select(where, params)


# --- Messaging ---


class SQLiteConversationRepo(SQLiteTableRepo[Conversation]):
    table = "conversations"
    model = Conversation
    embedded = frozenset({"participant_1", "participant_2"})
    sortable = frozenset({"created_at", "last_message_at"})

    def get_by_participants(
        self, participant_1_id: UUID | str, participant_2_id: UUID | str
    ) -> Conversation | None:
        rows = self._select(
            "participant_1_id = ? AND participant_2_id = ?",
            [str(participant_1_id), str(participant_2_id)],
            limit=1,
        )
        return rows[0] if rows else None

    def list_for_user(self, user_id: UUID | str) -> builtins.list[Conversation]:
        return self._select(
            "participant_1_id = ? OR participant_2_id = ?",
            [str(user_id), str(user_id)],
            order_by="last_message_at",
        )

    def ids_for_user(self, user_id: UUID | str) -> builtins.list[str]:
        return [str(c.id) for c in self.list_for_user(user_id)]

    def touch(self, conversation_id: UUID | str, at: datetime) -> Conversation | None:
        current = self.get_by_id(conversation_id)
        if current is None:
            return None
        return self._save(current.model_copy(update={"last_message_at": at}))


class SQLiteMessageRepo(SQLiteTableRepo[Message]):
    table = "messages"
    model = Message
    bool_fields = ("is_read",)
    embedded = frozenset({"sender"})

    def list_by_conversation(
        self,
        conversation_id: UUID | str,
        limit: int = 100,
        before: datetime | None = None,
    ) -> builtins.list[Message]:
        where = "conversation_id = ?"
        params: builtins.list[Any] = [str(conversation_id)]
        if before is not None:
            where += " AND created_at < ?"
            params.append(db_timestamp(before))
        return self._select(where, params, ascending=True, limit=limit)

    def mark_read(self, conversation_id: UUID | str, reader_id: UUID | str) -> int:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM messages WHERE conversation_id = ? AND sender_id != ? "
                "AND is_read = 0",
                (str(conversation_id), str(reader_id)),
            ).fetchall()
            conn.execute(
                "UPDATE messages SET is_read = 1 WHERE conversation_id = ? AND sender_id != ? "
                "AND is_read = 0",
                (str(conversation_id), str(reader_id)),
            )
            conn.commit()
        finally:
            conn.close()
        for row in rows:
            self._publish(
                "UPDATE", new=self._public_row({**row, "is_read": 1}), old=self._public_row(row)
            )
        return len(rows)

    def count_unread(self, user_id: UUID | str) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(
                """
                SELECT COUNT(*) AS n FROM messages m
                JOIN conversations c ON c.id = m.conversation_id
                WHERE (c.participant_1_id = ? OR c.participant_2_id = ?)
                  AND m.sender_id != ? AND m.is_read = 0
                """,
                (str(user_id), str(user_id), str(user_id)),
            ).fetchone()
            return int(row["n"])
        finally:
            conn.close()


# --- Reviews ---


class SQLiteReviewRepo(SQLiteTableRepo[Review]):
    table = "reviews"
    model = Review
    embedded = frozenset({"reviewer", "reviewee", "contract"})

    def get_by_contract_and_reviewer(
        self, contract_id: UUID | str, reviewer_id: UUID | str
    ) -> Review | None:
        rows = self._select(
            "contract_id = ? AND reviewer_id = ?", [str(contract_id), str(reviewer_id)], limit=1
        )
        return rows[0] if rows else None

    def list_by_reviewee(self, reviewee_id: UUID | str) -> builtins.list[Review]:
        return self._select("reviewee_id = ?", [str(reviewee_id)])

    def list_by_reviewer(self, reviewer_id: UUID | str) -> builtins.list[Review]:
        return self._select("reviewer_id = ?", [str(reviewer_id)])

    def average_rating(self) -> float:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT AVG(rating) AS avg FROM reviews").fetchone()
        finally:
            conn.close()
        return round(float(row["avg"]), 2) if row["avg"] is not None else 0.0

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
UserType = Literal["client", "freelancer", "admin"]
JobStatus = Literal["open", "in_progress", "completed", "cancelled"]
BudgetType = Literal["fixed", "hourly"]
ServiceStatus = Literal["active", "paused", "deleted"]
PriceType = Literal["fixed", "hourly", "starting_at"]
ApplicationStatus = Literal["pending", "accepted", "rejected", "withdrawn"]
ServiceRequestStatus = Literal["pending", "accepted", "rejected", "withdrawn"]
ContractStatus = Literal["active", "submitted", "completed", "cancelled", "disputed"]
ChangeEventType = Literal["INSERT", "UPDATE", "DELETE"]


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Hosted auth ---


class AuthUser(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    password_hash: str
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    status: Literal["active", "disabled"] = "active"
    email_confirmed_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str
    user: AuthUser
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)


# --- Profiles ---


class Profile(BaseModel):
    id: UUID
    email: str | None = None
    nickname: str
    user_type: UserType = "client"
    wallet_address: str | None = None
    token_balance: float = 0
    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    rating: float = 0
    review_count: int = 0
    jobs_completed: int = 0
    jobs_posted: int = 0
    total_earned: float = 0
    total_spent: float = 0
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ProfileSummary(BaseModel):
    """Embedded profile fields returned alongside marketplace rows."""

    id: UUID
    nickname: str
    rating: float = 0
    review_count: int = 0
    user_type: UserType = "client"
    skills: list[str] = Field(default_factory=list)
    wallet_address: str | None = None


class Category(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    slug: str
    description: str | None = None


# --- Posts ---


class JobPost(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    client_id: UUID
    title: str
    description: str
    category: str | None = None
    skills: list[str] = Field(default_factory=list)
    budget: float = 0
    budget_type: BudgetType = "fixed"
    deadline: datetime | None = None
    status: JobStatus = "open"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    client: ProfileSummary | None = None


class ServicePost(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    freelancer_id: UUID
    title: str
    description: str
    category: str | None = None
    skills: list[str] = Field(default_factory=list)
    price: float = 0
    price_type: PriceType = "fixed"
    delivery_time: str | None = None
    status: ServiceStatus = "active"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    freelancer: ProfileSummary | None = None


# --- Hiring ---


class JobApplication(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    job_post_id: UUID
    freelancer_id: UUID
    cover_letter: str = ""
    proposed_rate: float | None = None
    status: ApplicationStatus = "pending"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    freelancer: ProfileSummary | None = None
    job_post: JobPost | None = None


class ServiceRequest(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    service_post_id: UUID
    client_id: UUID
    freelancer_id: UUID
    message: str = ""
    budget: float | None = None
    status: ServiceRequestStatus = "pending"
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    client: ProfileSummary | None = None
    freelancer: ProfileSummary | None = None
    service_post: ServicePost | None = None


class Contract(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    client_id: UUID
    freelancer_id: UUID
    job_post_id: UUID | None = None
    service_post_id: UUID | None = None
    title: str
    description: str | None = None
    agreed_amount: float = 0
    escrow_amount: float = 0
    status: ContractStatus = "active"
    revision_notes: str | None = None
    revision_count: int = 0
    submitted_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    client: ProfileSummary | None = None
    freelancer: ProfileSummary | None = None


# --- Messaging ---


class Conversation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    participant_1_id: UUID
    participant_2_id: UUID
    last_message_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)

    participant_1: ProfileSummary | None = None
    participant_2: ProfileSummary | None = None


class Message(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    conversation_id: UUID
    sender_id: UUID
    content: str
    is_read: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    sender: ProfileSummary | None = None


# --- Reviews ---


class Review(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    contract_id: UUID
    reviewer_id: UUID
    reviewee_id: UUID
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    reviewer: ProfileSummary | None = None
    reviewee: ProfileSummary | None = None
    contract: Contract | None = None


# --- Realtime ---


class ChangeEvent(BaseModel):
    """A committed row change, as delivered to realtime subscribers."""

    event: ChangeEventType
    table: str
    schema_name: str = "public"
    new: dict[str, Any] = Field(default_factory=dict)
    old: dict[str, Any] = Field(default_factory=dict)
    committed_at: datetime = Field(default_factory=utc_now)


def summarize(profile: Profile | None) -> ProfileSummary | None:
    if profile is None:
        return None
    return ProfileSummary(
        id=profile.id,
        nickname=profile.nickname,
        rating=profile.rating,
        review_count=profile.review_count,
        user_type=profile.user_type,
        skills=list(profile.skills),
        wallet_address=profile.wallet_address,
    )


def attach_summaries(
    items: list[Any],
    lookup: Callable[[Iterable[Any]], dict[str, Profile]],
    **embeds: str,
) -> list[Any]:
    """
    Fill embedded profile summaries on marketplace rows.

    ``embeds`` maps the embedded attribute to its id column, e.g.
    ``client="client_id"``. Profiles are fetched in one lookup.
    """
    if not items:
        return []
    ids = {getattr(item, column) for item in items for column in embeds.values()}
    profiles = lookup(ids)
    return [
        item.model_copy(
            update={
                attr: summarize(profiles.get(str(getattr(item, column))))
                for attr, column in embeds.items()
            }
        )
        for item in items
    ]

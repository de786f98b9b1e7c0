from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel

from pumpwork.domain.entities import (
    BudgetType,
    Category,
    Contract,
    ContractStatus,
    Conversation,
    JobApplication,
    JobPost,
    JobStatus,
    Message,
    PriceType,
    Review,
    ServicePost,
    ServiceRequest,
    ServiceStatus,
    UserType,
)

# --- Auth ---


class SignUpRequest(BaseModel):
    email: str
    password: str
    nickname: str | None = None
    user_type: Literal["client", "freelancer"] = "client"
    wallet_address: str | None = None


class RefreshRequest(BaseModel):
    refresh_token: str


class WalletLoginRequest(BaseModel):
    wallet_address: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: UUID


# --- Profiles ---


class ProfileResponse(BaseModel):
    """Public view of a profile; the email stays private."""

    id: UUID
    nickname: str
    user_type: UserType
    wallet_address: str | None = None
    token_balance: float = 0
    bio: str | None = None
    skills: list[str] = []
    rating: float = 0
    review_count: int = 0
    jobs_completed: int = 0
    jobs_posted: int = 0
    total_earned: float = 0
    total_spent: float = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    identity: dict[str, Any]
    profile: ProfileResponse | None = None


class ProfileUpdateRequest(BaseModel):
    nickname: str | None = None
    email: str | None = None
    bio: str | None = None
    skills: list[str] | None = None
    wallet_address: str | None = None
    user_type: UserType | None = None
    # admin-only fields
    token_balance: float | None = None
    rating: float | None = None
    review_count: int | None = None
    jobs_completed: int | None = None
    jobs_posted: int | None = None
    total_earned: float | None = None
    total_spent: float | None = None


# --- Posts ---


class JobCreateRequest(BaseModel):
    title: str
    description: str
    category: str | None = None
    skills: list[str] = []
    budget: float = 0
    budget_type: BudgetType = "fixed"
    deadline: datetime | None = None


class JobUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None
    skills: list[str] | None = None
    budget: float | None = None
    budget_type: BudgetType | None = None
    deadline: datetime | None = None
    status: JobStatus | None = None


class ServiceCreateRequest(BaseModel):
    title: str
    description: str
    category: str | None = None
    skills: list[str] = []
    price: float = 0
    price_type: PriceType = "fixed"
    delivery_time: str | None = None


class ServiceUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None
    skills: list[str] | None = None
    price: float | None = None
    price_type: PriceType | None = None
    delivery_time: str | None = None
    status: ServiceStatus | None = None


# --- Hiring ---


class ApplicationCreateRequest(BaseModel):
    cover_letter: str = ""
    proposed_rate: float | None = None


class ServiceRequestCreateRequest(BaseModel):
    message: str = ""
    budget: float | None = None


class StatusUpdateRequest(BaseModel):
    status: str


class ExistsResponse(BaseModel):
    exists: bool
    id: UUID | None = None
    status: str | None = None


class ContractCreateRequest(BaseModel):
    freelancer_id: UUID
    title: str
    agreed_amount: float
    description: str | None = None
    escrow_amount: float = 0
    job_post_id: UUID | None = None
    service_post_id: UUID | None = None


class ContractStatusRequest(BaseModel):
    status: ContractStatus


class NotesRequest(BaseModel):
    notes: str | None = None


class EscrowRequest(BaseModel):
    amount: float


# --- Messaging ---


class ConversationCreateRequest(BaseModel):
    other_user_id: UUID


class MessageCreateRequest(BaseModel):
    content: str


class CountResponse(BaseModel):
    count: int


# --- Reviews ---


class ReviewCreateRequest(BaseModel):
    contract_id: UUID
    rating: int
    comment: str | None = None


# --- Admin ---


class RecentActivityResponse(BaseModel):
    recent_users: list[ProfileResponse]
    recent_jobs: list[JobPost]
    recent_contracts: list[Contract]


class SignUpResponse(BaseModel):
    user_id: UUID
    confirmation_required: bool
    session: TokenResponse | None = None


# --- Listings ---


class ProfileListResponse(BaseModel):
    items: list[ProfileResponse]
    total: int


class CategoryListResponse(BaseModel):
    items: list[Category]
    total: int


class JobListResponse(BaseModel):
    items: list[JobPost]
    total: int


class ServiceListResponse(BaseModel):
    items: list[ServicePost]
    total: int


class ApplicationListResponse(BaseModel):
    items: list[JobApplication]
    total: int


class ServiceRequestListResponse(BaseModel):
    items: list[ServiceRequest]
    total: int


class ContractListResponse(BaseModel):
    items: list[Contract]
    total: int


class ConversationListResponse(BaseModel):
    items: list[Conversation]
    total: int


class MessageListResponse(BaseModel):
    items: list[Message]
    total: int


class ReviewListResponse(BaseModel):
    items: list[Review]
    total: int


class ReviewCheckResponse(BaseModel):
    exists: bool
    review: Review | None = None

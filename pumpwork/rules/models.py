from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class TokenThresholdRules(BaseModel):
    client: float = 1_000
    freelancer: float = 10_000
    boosted_freelancer: float = 50_000


class TokenRules(BaseModel):
    mint: str
    rpc_url: str
    rpc_timeout_seconds: float = 10.0
    thresholds: TokenThresholdRules = Field(default_factory=TokenThresholdRules)


class SessionsRules(BaseModel):
    access_ttl_minutes: int = 60
    refresh_ttl_days: int = 30
    refresh_window_seconds: int = 60


class ProfileFetchRules(BaseModel):
    initial_timeout_seconds: float = 5.0
    timeout_seconds: float = 10.0
    background_timeout_seconds: float = 15.0
    background_retry_delay_seconds: float = 3.0
    retries: int = 2
    retry_base_delay_seconds: float = 1.0


class ReconcilerRules(BaseModel):
    init_fallback_seconds: float = 12.0
    visibility_throttle_seconds: float = 5.0
    signup_profile_delay_seconds: float = 0.5
    profile_fetch: ProfileFetchRules = Field(default_factory=ProfileFetchRules)


class WalletRules(BaseModel):
    synthetic_email_domain: str = "wallet.pumpwork.local"
    install_url: str = "https://phantom.app/"


class AuthRules(BaseModel):
    password_min_length: int = 6
    require_email_confirmation: bool = False
    sessions: SessionsRules = Field(default_factory=SessionsRules)


class RbacRules(BaseModel):
    roles: dict[str, list[str]]
    public_permissions: list[str] = Field(default_factory=list)


class ChatRules(BaseModel):
    conversation_cache_seconds: float = 5.0
    message_page_limit: int = 100
    max_message_length: int = 5000


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)
    data_dir_required: bool = True


class Rules(BaseModel):
    project: ProjectRules
    tokens: TokenRules
    auth: AuthRules = Field(default_factory=AuthRules)
    reconciler: ReconcilerRules = Field(default_factory=ReconcilerRules)
    wallet: WalletRules = Field(default_factory=WalletRules)
    rbac: RbacRules
    chat: ChatRules = Field(default_factory=ChatRules)
    ops: OpsRules = Field(default_factory=OpsRules)

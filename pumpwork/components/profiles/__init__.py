"""
Profiles component - marketplace profiles.
"""

from .component import (
    EDITABLE_FIELDS,
    WALLET_TAKEN,
    run_get_profile,
    run_get_profile_by_wallet,
    run_list_profiles,
    run_profile_stats,
    run_record_balance,
    run_update_profile,
)
from .models import (
    GetProfileByWalletInput,
    GetProfileInput,
    ListProfilesInput,
    ProfileListOutput,
    ProfileOutput,
    ProfileStats,
    ProfileStatsInput,
    ProfileStatsOutput,
    RecordBalanceInput,
    UpdateProfileInput,
)
from .ports import CountingRepoPort, ProfileRepoPort

__all__ = [
    # Entry points
    "run_get_profile",
    "run_get_profile_by_wallet",
    "run_list_profiles",
    "run_profile_stats",
    "run_record_balance",
    "run_update_profile",
    "EDITABLE_FIELDS",
    "WALLET_TAKEN",
    # Models
    "GetProfileByWalletInput",
    "GetProfileInput",
    "ListProfilesInput",
    "ProfileListOutput",
    "ProfileOutput",
    "ProfileStats",
    "ProfileStatsInput",
    "ProfileStatsOutput",
    "RecordBalanceInput",
    "UpdateProfileInput",
    # Ports
    "CountingRepoPort",
    "ProfileRepoPort",
]

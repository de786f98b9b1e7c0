"""
Admin component - platform statistics and user management views.
"""

from .component import run_list_all_users, run_platform_stats, run_recent_activity
from .models import (
    AdminInput,
    PlatformStats,
    PlatformStatsOutput,
    RecentActivityInput,
    RecentActivityOutput,
    UserListOutput,
)
from .ports import CountPort, GroupCountPort, PlatformSources, ProfileDirectoryPort, ReviewStatsPort

__all__ = [
    # Entry points
    "run_list_all_users",
    "run_platform_stats",
    "run_recent_activity",
    # Models
    "AdminInput",
    "PlatformStats",
    "PlatformStatsOutput",
    "RecentActivityInput",
    "RecentActivityOutput",
    "UserListOutput",
    # Ports
    "CountPort",
    "GroupCountPort",
    "PlatformSources",
    "ProfileDirectoryPort",
    "ReviewStatsPort",
]

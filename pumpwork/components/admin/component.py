"""
Admin component - platform dashboard.

Aggregate counts, recent activity and the full user list. Every entry point
requires an admin identity.
"""

from __future__ import annotations

import logging

from pumpwork.domain.entities import attach_summaries
from pumpwork.domain.errors import forbidden, invalid
from pumpwork.domain.policy import PolicyEngine

from .models import (
    AdminInput,
    PlatformStats,
    PlatformStatsOutput,
    RecentActivityInput,
    RecentActivityOutput,
    UserListOutput,
)
from .ports import PlatformSources

logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Admin access required"


def run_platform_stats(
    inp: AdminInput, sources: PlatformSources, policy: PolicyEngine
) -> PlatformStatsOutput:
    if not policy.can_view_admin(inp.actor):
        return PlatformStatsOutput(stats=None, success=False, error=forbidden(ADMIN_REQUIRED))

    stats = PlatformStats(
        users_by_type=sources.profiles.count_by("user_type"),
        jobs_by_status=sources.jobs.count_by("status"),
        services_by_status=sources.services.count_by("status"),
        applications_by_status=sources.applications.count_by("status"),
        contracts_by_status=sources.contracts.count_by("status"),
        message_count=sources.messages.count(),
        review_count=sources.reviews.count(),
        average_rating=round(sources.reviews.average_rating(), 2),
    )
    logger.debug("Platform stats computed: %s", stats)
    return PlatformStatsOutput(stats=stats, success=True)


def run_recent_activity(
    inp: RecentActivityInput, sources: PlatformSources, policy: PolicyEngine
) -> RecentActivityOutput:
    if not policy.can_view_admin(inp.actor):
        return RecentActivityOutput([], [], [], success=False, error=forbidden(ADMIN_REQUIRED))
    if inp.limit < 1:
        return RecentActivityOutput(
            [], [], [], success=False, error=invalid("Limit must be positive", field="limit")
        )

    lookup = sources.profiles.get_many
    return RecentActivityOutput(
        recent_users=sources.profiles.recent(inp.limit),
        recent_jobs=attach_summaries(sources.jobs.recent(inp.limit), lookup, client="client_id"),
        recent_contracts=attach_summaries(
            sources.contracts.recent(inp.limit),
            lookup,
            client="client_id",
            freelancer="freelancer_id",
        ),
    )


def run_list_all_users(
    inp: AdminInput, sources: PlatformSources, policy: PolicyEngine
) -> UserListOutput:
    if not policy.can_view_admin(inp.actor):
        return UserListOutput(users=[], total=0, success=False, error=forbidden(ADMIN_REQUIRED))
    users = sources.profiles.list_all()
    return UserListOutput(users=users, total=len(users))

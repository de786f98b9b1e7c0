from uuid import uuid4

import pytest

from pumpwork.domain.access import compute_identity
from pumpwork.domain.entities import Profile
from pumpwork.domain.policy import PolicyEngine
from pumpwork.rules.loader import load_rules


@pytest.fixture
def engine():
    # The shipped rules double as a smoke test of the rules file
    return PolicyEngine(load_rules())


def _identity(user_type, balance=20_000):
    return compute_identity(
        None, Profile(id=uuid4(), nickname=user_type, user_type=user_type, token_balance=balance)
    )


def test_public_permission(engine):
    assert engine.check_permission(None, "jobs:read") is True
    assert engine.check_permission(None, "categories:read") is True


def test_anonymous_denied(engine):
    assert engine.check_permission(None, "jobs:create") is False


def test_client_permissions(engine):
    client = _identity("client")
    assert engine.check_permission(client, "jobs:create")
    assert not engine.check_permission(client, "services:create")


def test_freelancer_permissions(engine):
    freelancer = _identity("freelancer")
    assert engine.check_permission(freelancer, "services:create")
    assert not engine.check_permission(freelancer, "jobs:create")


def test_freelancer_below_threshold_acts_as_client(engine):
    downgraded = _identity("freelancer", balance=2_000)
    assert engine.check_permission(downgraded, "jobs:create")
    assert not engine.check_permission(downgraded, "services:create")


def test_no_role_without_tokens(engine):
    broke = _identity("client", balance=0)
    assert not engine.check_permission(broke, "jobs:create")
    assert engine.check_permission(broke, "jobs:read")


def test_admin_wildcard(engine):
    admin = _identity("admin", balance=0)
    assert engine.check_permission(admin, "anything:at_all")


def test_explicit_roles_override(engine):
    client = _identity("client")
    assert engine.check_permission(client, "services:create", roles=["freelancer"])
    assert not engine.check_permission(client, "jobs:create", roles=[])


def test_scoped_wildcard():
    rules = load_rules()
    rules.rbac.roles["client"] = ["jobs:*"]
    engine = PolicyEngine(rules)
    client = _identity("client")
    assert engine.check_permission(client, "jobs:delete")
    assert not engine.check_permission(client, "services:create")


def test_is_party_and_can_manage(engine):
    client = _identity("client")
    other = uuid4()
    assert engine.is_party(client, other, client.profile_id)
    assert not engine.is_party(client, other, None)
    assert not engine.is_party(None, client.profile_id)

    assert engine.can_manage(client, "jobs:manage", client.profile_id)
    assert not engine.can_manage(client, "jobs:manage", other)
    assert not engine.can_manage(client, "services:manage", client.profile_id)


def test_admin_manages_everything(engine):
    admin = _identity("admin", balance=0)
    assert engine.can_manage(admin, "jobs:manage", uuid4())
    assert engine.can_view_admin(admin)
    assert not engine.can_view_admin(_identity("client"))
    assert not engine.can_view_admin(None)

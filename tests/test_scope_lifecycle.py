"""
Tests: scope lifecycle — creation, locking, in-place edits, latest lookup.
"""

import pytest

from scopeflow.core.exceptions import NotFoundError, ScopeLockedError, ValidationError
from scopeflow.models import db as _db
from scopeflow.models.scope import Scope
from scopeflow.services import project_service, scope_service


def test_new_scope_is_unlocked_with_default_price(project):
    scope = scope_service.create_scope(project.id, {"content": "Landing page"})

    assert scope.version == 1
    assert scope.locked is False
    assert scope.locked_at is None
    assert scope.price == 0


def test_create_scope_unknown_project(project):
    with pytest.raises(NotFoundError):
        scope_service.create_scope("no-such-project", {"content": "x", "price": 1})


@pytest.mark.parametrize("payload, field", [
    ({"content": "", "price": 10}, "content"),
    ({"content": "   ", "price": 10}, "content"),
    ({"price": 10}, "content"),
    ({"content": "ok", "price": -1}, "price"),
    ({"content": "ok", "price": "lots"}, "price"),
    ({"content": "ok", "price": "250"}, "price"),
    ({"content": "ok", "price": True}, "price"),
    ({"content": "ok", "price": 1e12}, "price"),
    ({"content": "ok", "price": 10.005}, "price"),
])
def test_create_scope_rejects_bad_input(project, payload, field):
    with pytest.raises(ValidationError) as exc_info:
        scope_service.create_scope(project.id, payload)

    assert field in exc_info.value.details
    assert Scope.query.count() == 0


def test_lock_scope_sets_flag_and_timestamp(project):
    scope = scope_service.create_scope(project.id, {"content": "v1", "price": 100})

    locked = scope_service.lock_scope(project.id, scope.id)

    assert locked.locked is True
    assert locked.locked_at is not None


def test_lock_scope_is_idempotent(project):
    scope = scope_service.create_scope(project.id, {"content": "v1", "price": 100})
    first = scope_service.lock_scope(project.id, scope.id)
    locked_at = first.locked_at

    second = scope_service.lock_scope(project.id, scope.id)

    assert second.locked is True
    assert second.locked_at == locked_at


def test_lock_scope_of_other_project_is_not_found(owner, project):
    other = project_service.create_project(owner.id, {"name": "Other"})
    scope = scope_service.create_scope(other.id, {"content": "theirs"})

    with pytest.raises(NotFoundError):
        scope_service.lock_scope(project.id, scope.id)


def test_locking_does_not_block_new_versions(project):
    v1 = scope_service.create_scope(project.id, {"content": "v1", "price": 100})
    scope_service.lock_scope(project.id, v1.id)

    v2 = scope_service.create_scope(project.id, {"content": "v2", "price": 150})

    assert v2.version == 2
    assert v2.locked is False


def test_update_unlocked_scope_in_place(project):
    scope = scope_service.create_scope(project.id, {"content": "draft", "price": 100})

    updated = scope_service.update_scope(project.id, scope.id, {"price": 120})

    assert updated.id == scope.id
    assert updated.version == 1
    assert updated.content == "draft"
    assert updated.price == 120


@pytest.mark.parametrize("price", [True, "120", 10_000_000_000, 120.001])
def test_update_scope_rejects_bad_price(project, price):
    scope = scope_service.create_scope(project.id, {"content": "draft", "price": 100})

    with pytest.raises(ValidationError) as exc_info:
        scope_service.update_scope(project.id, scope.id, {"price": price})

    assert "price" in exc_info.value.details
    _db.session.expire_all()
    assert _db.session.get(Scope, scope.id).price == 100


def test_update_locked_scope_is_rejected(project):
    scope = scope_service.create_scope(project.id, {"content": "final", "price": 100})
    scope_service.lock_scope(project.id, scope.id)

    with pytest.raises(ScopeLockedError) as exc_info:
        scope_service.update_scope(project.id, scope.id, {"content": "sneaky", "price": 1})

    assert exc_info.value.code == "CONFLICT"
    _db.session.expire_all()
    stored = _db.session.get(Scope, scope.id)
    assert stored.content == "final"
    assert stored.price == 100


def test_model_guard_blocks_direct_edit_of_locked_scope(project):
    """Writes that bypass the service are still refused at flush time."""
    scope = scope_service.create_scope(project.id, {"content": "final", "price": 100})
    scope_service.lock_scope(project.id, scope.id)

    scope.price = 999
    with pytest.raises(ScopeLockedError):
        _db.session.commit()
    _db.session.rollback()

    assert _db.session.get(Scope, scope.id).price == 100


def test_model_guard_blocks_unlocking(project):
    scope = scope_service.create_scope(project.id, {"content": "final", "price": 100})
    scope_service.lock_scope(project.id, scope.id)

    scope.locked = False
    with pytest.raises(ScopeLockedError):
        _db.session.commit()
    _db.session.rollback()

    assert _db.session.get(Scope, scope.id).locked is True


def test_latest_scope_none_without_scopes(project):
    assert scope_service.get_latest_scope(project.id) is None


def test_latest_scope_is_highest_version_regardless_of_lock(project):
    v1 = scope_service.create_scope(project.id, {"content": "v1", "price": 100})
    scope_service.lock_scope(project.id, v1.id)
    scope_service.create_scope(project.id, {"content": "v2", "price": 250})

    latest = scope_service.get_latest_scope(project.id)

    assert latest.version == 2
    assert latest.price == 250
    assert latest.locked is False


def test_latest_scope_pricing_with_unlocked_versions(project):
    scope_service.create_scope(project.id, {"content": "v1", "price": 100})
    scope_service.create_scope(project.id, {"content": "v2", "price": 250})

    assert scope_service.get_latest_scope(project.id).price == 250


def test_list_scopes_newest_first(project):
    for n in range(1, 4):
        scope_service.create_scope(project.id, {"content": f"v{n}", "price": n})

    assert [s.version for s in scope_service.list_scopes(project.id)] == [3, 2, 1]

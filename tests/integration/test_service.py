"""
Integration tests for LinkbioService.

Exercises the managers, aggregators and in-memory Storage together through
the facade, checking that domain errors come back as tagged failures and
that concurrent writers never lose clicks or corrupt link order.
"""

import random
import threading
from datetime import datetime, timedelta, timezone

import pytest

from linkbio_platform.errors import ConflictError, ErrorKind, PersistenceError


def _register(service, username="jane"):
    result = service.register_user(username, f"{username}@example.com")
    assert result.success
    return result.value["id"]


def _add(service, user_id, title):
    result = service.add_link(user_id, {"title": title, "url": f"https://{title.lower()}.example"})
    assert result.success
    return result.value["id"]


def test_add_and_list_in_order(service):
    user_id = _register(service)
    ids = [_add(service, user_id, t) for t in ("A", "B", "C")]

    links = service.list_links(user_id).value
    assert [link["id"] for link in links] == ids
    assert [link["order"] for link in links] == [0, 1, 2]
    assert all(link["clicks"] == 0 and link["is_active"] for link in links)


def test_failures_are_tagged(service):
    user_id = _register(service)

    missing = service.add_link(user_id, {"title": "", "url": "https://x.example"})
    assert not missing.success
    assert missing.error_kind is ErrorKind.VALIDATION
    assert missing.message == "Title and URL are required"

    ghost_user = service.list_links("ghost")
    assert ghost_user.error_kind is ErrorKind.NOT_FOUND

    ghost_link = service.update_link(user_id, "nope", {"title": "X"})
    assert ghost_link.error_kind is ErrorKind.NOT_FOUND

    unknown_field = service.update_link(user_id, "nope", {"clicks": 1000})
    assert unknown_field.error_kind is ErrorKind.VALIDATION

    assert service.list_links(user_id).value == []


@pytest.mark.parametrize(
    "error,kind",
    [
        (ConflictError("User was modified concurrently; reload and retry"), ErrorKind.CONFLICT),
        (PersistenceError("Storage unavailable"), ErrorKind.PERSISTENCE),
    ],
)
def test_storage_failures_are_tagged(service, storage, monkeypatch, error, kind):
    user_id = _register(service)

    def _fail(user):
        raise error

    monkeypatch.setattr(storage, "save_user", _fail)
    result = service.add_link(user_id, {"title": "A", "url": "https://a.example"})
    assert not result.success
    assert result.error_kind is kind
    assert result.message == error.message
    assert result.to_dict() == {"success": False, "error_kind": kind.value, "error": error.message}


def test_partial_update_only_touches_supplied_fields(service):
    user_id = _register(service)
    link_id = _add(service, user_id, "Blog")

    updated = service.update_link(user_id, link_id, {"description": "Posts"}).value
    assert updated["title"] == "Blog"
    assert updated["url"] == "https://blog.example"
    assert updated["description"] == "Posts"
    assert updated["is_active"] is True


def test_delete_and_reorder_with_ghost_ids(service):
    user_id = _register(service)
    a, b, c = (_add(service, user_id, t) for t in ("A", "B", "C"))

    deleted = service.delete_link(user_id, b)
    assert deleted.success and deleted.message == "Link deleted successfully"
    assert service.delete_link(user_id, b).error_kind is ErrorKind.NOT_FOUND

    reordered = service.reorder_links(user_id, [c, "ghost", a]).value
    assert [(link["id"], link["order"]) for link in reordered] == [(c, 0), (a, 1)]

    bad = service.reorder_links(user_id, "not-a-list")
    assert bad.error_kind is ErrorKind.VALIDATION


def test_click_flows_into_user_and_platform_stats(service):
    user_id = _register(service)
    a = _add(service, user_id, "A")
    b = _add(service, user_id, "B")

    for _ in range(3):
        assert service.record_click("JANE", a).message == "Click tracked successfully"
    service.record_click("jane", b)
    service.get_public_profile("jane")

    stats = service.get_user_stats(user_id).value
    assert stats["total_clicks"] == 4
    assert stats["monthly_clicks"] == 4
    assert stats["total_views"] == 1
    assert stats["top_links"][0] == {"id": a, "title": "A", "clicks": 3, "url": "https://a.example"}
    assert stats["click_through_rate"] == 400

    platform = service.get_platform_stats().value
    assert platform["total_users"] == 1
    assert platform["total_links"] == 2
    assert platform["total_clicks"] == 4
    assert platform["avg_links_per_user"] == 2


def test_click_on_unknown_link_or_user(service):
    user_id = _register(service)
    _add(service, user_id, "A")

    assert service.record_click("jane", "nope").error_kind is ErrorKind.NOT_FOUND
    assert service.record_click("nobody", "nope").error_kind is ErrorKind.NOT_FOUND
    assert service.record_click("", "nope").error_kind is ErrorKind.VALIDATION
    assert service.get_user_stats(user_id).value["total_clicks"] == 0


def test_reset_monthly_counters_keeps_totals(service):
    user_id = _register(service)
    link_id = _add(service, user_id, "A")
    service.record_click("jane", link_id)

    assert service.reset_monthly_counters().value == {"reset_users": 1}
    stats = service.get_user_stats(user_id).value
    assert stats["monthly_clicks"] == 0
    assert stats["total_clicks"] == 1
    assert service.reset_monthly_counters("ghost").error_kind is ErrorKind.NOT_FOUND


def test_platform_growth_window(service, storage):
    now = datetime(2026, 6, 30, tzinfo=timezone.utc)
    for name, age in (("old", 45), ("new1", 5), ("new2", 10)):
        user_id = _register(service, name)
        user = storage.get_user(user_id)
        user.created_at = now - timedelta(days=age)
        storage.save_user(user)

    stats = service.get_platform_stats(now=now).value
    assert stats["total_users"] == 3
    assert stats["monthly_growth"] == 100


def test_profile_update_and_username_check(service):
    user_id = _register(service)
    assert service.check_username("Jane").value == {"available": False}

    renamed = service.update_profile(user_id, {"username": "janedoe", "bio": "hi"})
    assert renamed.value["username"] == "janedoe"
    assert service.check_username("jane").value == {"available": True}
    assert service.resolve_user_id("JaneDoe").value == user_id

    bad = service.update_profile(user_id, ["not", "a", "mapping"])
    assert bad.error_kind is ErrorKind.VALIDATION


def test_concurrent_clicks_are_not_lost(service):
    user_id = _register(service)
    link_id = _add(service, user_id, "A")
    threads_n, per_thread = 8, 50

    def worker():
        for _ in range(per_thread):
            assert service.record_click("jane", link_id).success

    threads = [threading.Thread(target=worker) for _ in range(threads_n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    total = threads_n * per_thread
    assert service.list_links(user_id).value[0]["clicks"] == total
    stats = service.get_user_stats(user_id).value
    assert stats["total_clicks"] == total
    assert stats["monthly_clicks"] == total


def test_clicks_survive_concurrent_structural_edits(service):
    user_id = _register(service)
    link_id = _add(service, user_id, "A")
    errors = []

    def clicker():
        for _ in range(200):
            service.record_click("jane", link_id)

    def editor():
        for i in range(50):
            result = service.update_link(user_id, link_id, {"title": f"A{i}"})
            if not result.success:
                errors.append(result)

    threads = [threading.Thread(target=clicker), threading.Thread(target=editor)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert service.list_links(user_id).value[0]["clicks"] == 200


def test_reorder_racing_delete_keeps_strict_order(service):
    user_id = _register(service)
    ids = [_add(service, user_id, f"L{i}") for i in range(6)]
    doomed, survivors = ids[::2], ids[1::2]
    failures = []

    def reorderer(seed):
        rng = random.Random(seed)
        for _ in range(40):
            shuffled = list(ids)
            rng.shuffle(shuffled)
            result = service.reorder_links(user_id, shuffled)
            if not result.success:
                failures.append(result)

    def deleter():
        for link_id in doomed:
            result = service.delete_link(user_id, link_id)
            if not result.success:
                failures.append(result)

    threads = [threading.Thread(target=reorderer, args=(s,)) for s in range(3)]
    threads.append(threading.Thread(target=deleter))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert failures == []
    links = service.list_links(user_id).value
    orders = [link["order"] for link in links]
    assert sorted(link["id"] for link in links) == sorted(survivors)
    assert len(set(orders)) == len(orders)
    assert orders == sorted(orders)

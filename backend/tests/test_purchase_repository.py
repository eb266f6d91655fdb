# test_purchase_repository.py - Adaptador de la tabla purchases

from datetime import datetime, timezone

import httpx
import pytest

from app.core.errors import NotFoundError, StoreUnavailableError, ValidationError
from app.db.purchases import PurchaseRepository
from app.models.purchase import PurchaseCreate


def _purchase(client_id, day, details="Hat", amount=10.0):
    return PurchaseCreate(
        client=client_id,
        details=details,
        total_amount=amount,
        purchase_date=datetime(2024, 1, day, tzinfo=timezone.utc),
    )


@pytest.fixture
def repo(db):
    return PurchaseRepository(db)


async def test_create_assigns_id(repo, client_id):
    created = await repo.create(_purchase(client_id, 1))
    assert created.id
    assert created.client == client_id
    assert created.purchase_status is False


async def test_find_all_is_newest_first_with_client(repo, db, client_id):
    other = db.add_client("Bob")
    await repo.create(_purchase(client_id, 1))
    await repo.create(_purchase(other, 3))
    await repo.create(_purchase(client_id, 2))

    purchases = await repo.find_all()

    assert [p.purchase_date.day for p in purchases] == [3, 2, 1]
    assert purchases[0].client.name == "Bob"
    assert purchases[1].client.id == client_id


async def test_find_all_empty(repo):
    assert await repo.find_all() == []


async def test_find_by_id_resolves_client(repo, client_id):
    created = await repo.create(_purchase(client_id, 1))
    found = await repo.find_by_id(created.id)
    assert found.id == created.id
    assert found.client.purchase_count == 0


@pytest.mark.parametrize("purchase_id", ["00000000-0000-0000-0000-000000000000", "not-a-uuid"])
async def test_find_by_id_not_found(repo, purchase_id):
    with pytest.raises(NotFoundError):
        await repo.find_by_id(purchase_id)


async def test_find_by_client_filters_and_sorts(repo, db, client_id):
    other = db.add_client("Bob")
    await repo.create(_purchase(client_id, 1))
    await repo.create(_purchase(other, 5))
    await repo.create(_purchase(client_id, 4))

    purchases = await repo.find_by_client(client_id)

    assert [p.purchase_date.day for p in purchases] == [4, 1]
    assert all(p.client == client_id for p in purchases)


async def test_find_by_client_empty_and_malformed(repo, client_id):
    assert await repo.find_by_client(client_id) == []
    assert await repo.find_by_client("C1") == []


async def test_update_is_merge_patch(repo, client_id):
    created = await repo.create(_purchase(client_id, 1, details="Jeans", amount=49.99))

    updated = await repo.update_by_id(created.id, {"total_amount": 500})

    assert updated.total_amount == 500
    assert updated.details == "Jeans"
    assert updated.client == client_id
    assert updated.purchase_date == created.purchase_date


async def test_update_serializes_dates(repo, db, client_id):
    created = await repo.create(_purchase(client_id, 1))
    new_date = datetime(2024, 6, 1, tzinfo=timezone.utc)

    updated = await repo.update_by_id(created.id, {"purchase_date": new_date})

    assert updated.purchase_date == new_date
    assert isinstance(db.tables["purchases"][0]["purchase_date"], str)


@pytest.mark.parametrize("purchase_id", ["00000000-0000-0000-0000-000000000000", "not-a-uuid"])
async def test_update_unknown_id(repo, purchase_id):
    with pytest.raises(NotFoundError):
        await repo.update_by_id(purchase_id, {"details": "x"})


async def test_update_with_malformed_client_is_a_validation_error(repo, db, client_id):
    created = await repo.create(_purchase(client_id, 1))

    with pytest.raises(ValidationError) as exc:
        await repo.update_by_id(created.id, {"client": "C1"})

    assert exc.value.code == "INVALID_VALUE"
    assert exc.value.http_status == 400
    assert db.tables["purchases"][0]["client"] == client_id


async def test_create_with_malformed_client_is_a_validation_error(repo, db):
    with pytest.raises(ValidationError):
        await repo.create(_purchase("C1", 1))
    assert db.tables["purchases"] == []


async def test_malformed_ids_never_reach_the_store(repo, db):
    for lookup in (repo.find_by_id, repo.delete_by_id):
        with pytest.raises(NotFoundError):
            await lookup("not-a-uuid")
    assert db.calls == []


async def test_delete_returns_deleted_row(repo, db, client_id):
    created = await repo.create(_purchase(client_id, 1))

    deleted = await repo.delete_by_id(created.id)

    assert deleted.id == created.id
    assert deleted.client == client_id
    assert db.tables["purchases"] == []


async def test_delete_unknown_id(repo):
    with pytest.raises(NotFoundError):
        await repo.delete_by_id("00000000-0000-0000-0000-000000000000")


async def test_store_failure_is_store_unavailable(repo, db, client_id):
    db.fail("purchases", "insert")
    with pytest.raises(StoreUnavailableError) as exc:
        await repo.create(_purchase(client_id, 1))
    assert exc.value.operation == "create"
    assert exc.value.http_status == 500


async def test_network_failure_is_store_unavailable(repo, db):
    db.fail("purchases", "select", httpx.ConnectError("connection refused"))
    with pytest.raises(StoreUnavailableError):
        await repo.find_all()

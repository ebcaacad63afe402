"""Audit Trail — background audit writes and the admin listing.

Tests cover:
    - each product create/update/delete writes exactly one audit row
    - update audit details hold only the fields the admin sent
    - a failing audit write never changes the mutation's response
    - listing is admin-only and filterable by target/action
"""

import logging
from contextlib import asynccontextmanager

from sqlalchemy import select

import app.infrastructure.database as db_module
from app.models.audit_log import AuditLog
from app.models.product import Product
from tests.services.route_helpers import auth_header


class _BrokenManager:
    @asynccontextmanager
    async def session(self):
        raise RuntimeError("audit store down")
        yield


async def _create(client, token, title="Eclipse Radio"):
    res = await client.post(
        "/api/products", json={"title": title, "price": 25},
        headers=auth_header(token),
    )
    assert res.status_code == 201, res.text
    return res.json()["product"]


async def _audit_rows(test_db):
    result = await test_db.execute(
        select(AuditLog).order_by(AuditLog.created_at),
    )
    return list(result.scalars().all())


async def test_crud_writes_one_audit_row_each(
    client, admin_token, admin_user, test_db,
):
    product = await _create(client, admin_token)
    await client.put(
        f"/api/products/{product['id']}", json={"stock": 9},
        headers=auth_header(admin_token),
    )
    await client.delete(
        f"/api/products/{product['id']}", headers=auth_header(admin_token),
    )

    rows = await _audit_rows(test_db)
    assert [r.action for r in rows] == [
        "PRODUCT_CREATE", "PRODUCT_UPDATE", "PRODUCT_DELETE",
    ]
    assert all(str(r.target_id) == product["id"] for r in rows)
    assert all(r.actor_id == admin_user.id for r in rows)
    assert all(r.actor_email == "admin@example.com" for r in rows)
    assert rows[1].details == {"stock": 9}
    assert rows[2].details["slug"] == "eclipse-radio"


async def test_failed_mutation_writes_no_audit(client, admin_token, test_db):
    res = await client.post(
        "/api/products", json={"title": "X", "price": 1},
        headers=auth_header(admin_token),
    )
    assert res.status_code == 400
    assert await _audit_rows(test_db) == []


async def test_audit_failure_does_not_affect_response(
    client, admin_token, test_db, monkeypatch, caplog,
):
    monkeypatch.setattr(db_module, "db_manager", _BrokenManager())
    with caplog.at_level(logging.ERROR, logger="app.services.audit_service"):
        product = await _create(client, admin_token, title="Unaudited Lamp")

    assert product["slug"] == "unaudited-lamp"
    stored = (await test_db.execute(
        select(Product.title).where(Product.slug == "unaudited-lamp"),
    )).scalar_one()
    assert stored == "Unaudited Lamp"
    assert await _audit_rows(test_db) == []
    assert any("Audit write failed" in r.message for r in caplog.records)


async def test_audit_skipped_when_database_not_initialized(
    client, admin_token, monkeypatch, caplog,
):
    monkeypatch.setattr(db_module, "db_manager", None)
    with caplog.at_level(logging.ERROR, logger="app.services.audit_service"):
        await _create(client, admin_token)
    assert any("database not initialized" in r.message for r in caplog.records)


async def test_audit_listing_admin_only(client, user_token):
    res = await client.get("/api/audit", headers=auth_header(user_token))
    assert res.status_code == 403


async def test_audit_listing_filters(client, admin_token):
    first = await _create(client, admin_token, title="First Lamp")
    await _create(client, admin_token, title="Second Lamp")
    await client.put(
        f"/api/products/{first['id']}", json={"price": 3},
        headers=auth_header(admin_token),
    )

    everything = await client.get("/api/audit", headers=auth_header(admin_token))
    assert everything.json()["total"] == 3

    by_target = await client.get(
        "/api/audit", params={"target_id": first["id"]},
        headers=auth_header(admin_token),
    )
    assert by_target.json()["total"] == 2

    updates = await client.get(
        "/api/audit", params={"action": "PRODUCT_UPDATE"},
        headers=auth_header(admin_token),
    )
    items = updates.json()["items"]
    assert len(items) == 1
    assert items[0]["details"] == {"price": 3.0}
    assert items[0]["target_type"] == "product"

"""Cart Reconciliation — tests for the pure join, totals, and quantity planning.

Tests cover:
    - empty line list → zero totals, empty items
    - resolved lines carry live title/price/first image/slug
    - deleted or inactive products → sentinels, qty and id preserved
    - subtotal == total for every input
    - plan_quantity_change: remove / noop / overwrite / append / unavailable
"""

from uuid import uuid4

import pytest

from app.core.cart_reconcile import (
    UNKNOWN_PRODUCT_TITLE,
    CartLine,
    CartMutation,
    ProductSnapshot,
    distinct_product_ids,
    empty_cart_view,
    plan_quantity_change,
    reconcile,
)
from app.core.errors import BusinessRuleError, ProductUnavailableError


def _snapshot(price=50.0, active=True, images=None, **kw):
    return ProductSnapshot(
        id=kw.pop("id", uuid4()),
        title=kw.pop("title", "Speaker"),
        price=price,
        images=images if images is not None else ["a.png", "b.png"],
        slug=kw.pop("slug", "speaker"),
        active=active,
    )


# ─── reconcile ───────────────────────────────────────────────────

def test_empty_lines_yield_zero_totals():
    view = reconcile([], {})
    assert view.items == []
    assert view.subtotal == 0
    assert view.total == 0


def test_empty_cart_view_matches_reconcile_of_nothing():
    assert empty_cart_view() == reconcile([], [])


def test_single_line_scenario_price_50_qty_2():
    product = _snapshot(price=50)
    view = reconcile([CartLine(product.id, 2)], {product.id: product})
    assert len(view.items) == 1
    item = view.items[0]
    assert item.qty == 2
    assert item.price == 50
    assert item.title == "Speaker"
    assert item.image == "a.png"
    assert item.slug == "speaker"
    assert view.subtotal == 100
    assert view.total == 100


def test_products_may_be_given_as_iterable():
    product = _snapshot(price=10)
    view = reconcile([CartLine(product.id, 3)], [product])
    assert view.subtotal == 30


def test_deleted_product_renders_sentinels_and_keeps_line():
    missing_id = uuid4()
    view = reconcile([CartLine(missing_id, 4)], {})
    assert len(view.items) == 1
    item = view.items[0]
    assert item.product_id == missing_id
    assert item.qty == 4
    assert item.title == UNKNOWN_PRODUCT_TITLE
    assert item.price == 0
    assert item.image is None
    assert item.slug is None
    assert view.subtotal == 0


def test_inactive_product_renders_sentinels():
    product = _snapshot(price=99, active=False)
    view = reconcile([CartLine(product.id, 1)], {product.id: product})
    assert view.items[0].title == UNKNOWN_PRODUCT_TITLE
    assert view.items[0].price == 0
    assert view.total == 0


def test_product_without_images_has_null_image():
    product = _snapshot(images=[])
    view = reconcile([CartLine(product.id, 1)], {product.id: product})
    assert view.items[0].image is None


def test_mixed_lines_only_resolved_prices_count():
    a = _snapshot(price=19.99)
    b = _snapshot(price=0.01)
    lines = [CartLine(a.id, 3), CartLine(uuid4(), 5), CartLine(b.id, 10)]
    view = reconcile(lines, {a.id: a, b.id: b})
    assert [i.qty for i in view.items] == [3, 5, 10]
    assert view.subtotal == pytest.approx(19.99 * 3 + 0.01 * 10)


def test_line_order_is_preserved():
    a, b = _snapshot(title="A"), _snapshot(title="B")
    view = reconcile([CartLine(b.id, 1), CartLine(a.id, 1)], [a, b])
    assert [i.title for i in view.items] == ["B", "A"]


def test_decimal_prices_sum_without_drift():
    product = _snapshot(price=0.1)
    lines = [CartLine(product.id, 1)] * 10
    view = reconcile(lines, {product.id: product})
    assert view.subtotal == 1.0


@pytest.mark.parametrize("prices", [[], [0], [1.5, 2.25], [99.99, 0.01, 5]])
def test_subtotal_always_equals_total(prices):
    products = [_snapshot(price=p) for p in prices]
    lines = [CartLine(p.id, i + 1) for i, p in enumerate(products)]
    view = reconcile(lines, products)
    assert view.subtotal == view.total


def test_to_dict_shape():
    product = _snapshot(price=5)
    data = reconcile([CartLine(product.id, 2)], [product]).to_dict()
    assert set(data) == {"items", "subtotal", "total"}
    assert data["items"][0] == {
        "product_id": str(product.id),
        "qty": 2,
        "title": "Speaker",
        "price": 5,
        "image": "a.png",
        "slug": "speaker",
    }


def test_distinct_product_ids_dedupes_in_order():
    a, b = uuid4(), uuid4()
    lines = [CartLine(a, 1), CartLine(b, 1), CartLine(a, 2)]
    assert distinct_product_ids(lines) == [a, b]


# ─── plan_quantity_change ───────────────────────────────────────

def test_zero_qty_removes_existing_line():
    assert plan_quantity_change(uuid4(), 2, 0, True) is CartMutation.REMOVE


def test_zero_qty_without_line_is_noop():
    assert plan_quantity_change(uuid4(), None, 0, False) is CartMutation.NOOP


def test_positive_qty_overwrites_existing_line():
    """Existing qty=2, set qty=3 → overwrite (3), never add (5)."""
    assert plan_quantity_change(uuid4(), 2, 3, True) is CartMutation.OVERWRITE


def test_overwrite_does_not_require_active_product():
    assert plan_quantity_change(uuid4(), 2, 3, False) is CartMutation.OVERWRITE


def test_positive_qty_appends_for_active_product():
    assert plan_quantity_change(uuid4(), None, 1, True) is CartMutation.APPEND


def test_append_for_unavailable_product_raises():
    pid = uuid4()
    with pytest.raises(ProductUnavailableError) as exc_info:
        plan_quantity_change(pid, None, 1, False)
    assert exc_info.value.http_status == 404
    assert exc_info.value.context.product_id == str(pid)


def test_negative_qty_rejected():
    with pytest.raises(BusinessRuleError):
        plan_quantity_change(uuid4(), 1, -1, True)

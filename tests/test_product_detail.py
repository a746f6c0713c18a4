import asyncio

import pytest

from errors import CollaboratorUnavailable, NotFound
from product_detail import ProductDetailAggregator, related_products, specification_label
from tests.conftest import FakeCategoryService, FakeProductService, make_product


@pytest.fixture
def aggregator(catalog, categories):
    return ProductDetailAggregator(catalog, categories)


@pytest.mark.asyncio
async def test_related_products_exclude_subject_and_keep_order(aggregator, phones):
    view = await aggregator.load_product_detail("p1")

    assert view.product.id == "p1"
    assert view.category == phones
    assert [p.id for p in view.related_products] == ["p2", "p3", "p4", "p5"]


@pytest.mark.asyncio
async def test_related_products_capped_at_four(phones):
    products = FakeProductService([make_product(f"p{i}") for i in range(1, 9)])
    aggregator = ProductDetailAggregator(products, FakeCategoryService([phones]))

    view = await aggregator.load_product_detail("p3")

    assert [p.id for p in view.related_products] == ["p1", "p2", "p4", "p5"]


@pytest.mark.asyncio
async def test_product_without_category_has_no_related(aggregator):
    view = await aggregator.load_product_detail("solo")

    assert view.category is None
    assert view.related_products == []


@pytest.mark.asyncio
async def test_missing_category_is_tolerated(catalog):
    aggregator = ProductDetailAggregator(catalog, FakeCategoryService())

    view = await aggregator.load_product_detail("p2")

    assert view.category is None
    assert [p.id for p in view.related_products] == ["p1", "p3", "p4", "p5"]


@pytest.mark.asyncio
async def test_missing_product_raises_not_found(aggregator):
    with pytest.raises(NotFound) as exc:
        await aggregator.load_product_detail("nope")
    assert exc.value.entity_id == "nope"


@pytest.mark.asyncio
async def test_primary_failure_propagates(catalog, categories):
    catalog.unavailable.add("p1")
    with pytest.raises(CollaboratorUnavailable):
        await ProductDetailAggregator(catalog, categories).load_product_detail("p1")


@pytest.mark.asyncio
async def test_category_service_failure_propagates(catalog):
    aggregator = ProductDetailAggregator(catalog, FakeCategoryService(unavailable=True))
    with pytest.raises(CollaboratorUnavailable):
        await aggregator.load_product_detail("p1")


@pytest.mark.asyncio
async def test_related_lookup_failure_propagates(catalog, categories):
    catalog.category_unavailable = True
    with pytest.raises(CollaboratorUnavailable):
        await ProductDetailAggregator(catalog, categories).load_product_detail("p1")


@pytest.mark.asyncio
async def test_specification_rows_start_with_brand(categories):
    product = make_product("p1", specifications={"screenSize": "6.1 in", "ram": 8})
    aggregator = ProductDetailAggregator(FakeProductService([product]), categories)

    view = await aggregator.load_product_detail("p1")

    assert [(r.label, r.value) for r in view.specification_rows] == [
        ("Brand", "Acme"),
        ("Screen Size", "6.1 in"),
        ("Ram", 8),
    ]


def test_related_products_is_an_ordered_subsequence():
    subject = make_product("p3")
    candidates = [make_product(pid) for pid in ["p5", "p3", "p1", "p2"]]

    assert [p.id for p in related_products(subject, candidates)] == ["p5", "p1", "p2"]


@pytest.mark.parametrize("key,label", [
    ("weight", "Weight"),
    ("batteryLife", "Battery Life"),
    ("USB", "U S B"),
])
def test_specification_label(key, label):
    assert specification_label(key) == label


class SlowCategoryListing(FakeProductService):
    def __init__(self, products):
        super().__init__(products)
        self.cancelled = asyncio.Event()

    async def get_products_by_category(self, category_id):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled.set()
            raise
        return await super().get_products_by_category(category_id)


@pytest.mark.asyncio
async def test_failed_load_cancels_sibling_fetch():
    products = SlowCategoryListing([make_product("p1"), make_product("p2")])
    aggregator = ProductDetailAggregator(products, FakeCategoryService(unavailable=True))

    with pytest.raises(CollaboratorUnavailable):
        await aggregator.load_product_detail("p1")

    await asyncio.wait_for(products.cancelled.wait(), timeout=1)


@pytest.mark.asyncio
async def test_brand_row_present_without_brand(categories):
    product = make_product("p1", brand=None, specifications={"weight": "200 g"})
    aggregator = ProductDetailAggregator(FakeProductService([product]), categories)

    view = await aggregator.load_product_detail("p1")

    assert [(r.label, r.value) for r in view.specification_rows] == [("Brand", None), ("Weight", "200 g")]

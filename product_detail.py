import asyncio
import logging
import re
from typing import List, Sequence

from collaborators import CategoryService, ProductService
from errors import NotFound
from schemas import Product, ProductDetailView, SpecificationRow

logger = logging.getLogger(__name__)

RELATED_PRODUCTS_LIMIT = 4

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def specification_label(key: str) -> str:
    """'screenSize' -> 'Screen Size'"""
    spaced = _CAMEL_BOUNDARY.sub(r" \1", key).strip()
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


def specification_rows(product: Product) -> List[SpecificationRow]:
    rows = [SpecificationRow(label="Brand", value=product.brand)]
    for key, value in product.specifications.items():
        rows.append(SpecificationRow(label=specification_label(key), value=value))
    return rows


async def fetch_all(*coros):
    """gather() that cancels the remaining fetches as soon as one fails."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


def related_products(product: Product, category_products: Sequence[Product],
                     limit: int = RELATED_PRODUCTS_LIMIT) -> List[Product]:
    """Same-category products other than `product`, in collaborator order."""
    return [p for p in category_products if p.id != product.id][:limit]


class ProductDetailAggregator:
    """
    Builds the product detail view: the product, its category and up to four
    related products from the same category.

    A missing product raises NotFound. A missing category is tolerated and
    left empty, as is a product without a category. Any other collaborator
    failure propagates so the caller shows an error instead of partial data.
    """

    def __init__(self, products: ProductService, categories: CategoryService):
        self.products = products
        self.categories = categories

    async def load_product_detail(self, product_id: str) -> ProductDetailView:
        product = await self.products.get_product_by_id(product_id)
        if product is None:
            raise NotFound("Product", product_id)

        category = None
        related: List[Product] = []
        if product.category_id:
            category, category_products = await fetch_all(
                self.categories.get_category_by_id(product.category_id),
                self.products.get_products_by_category(product.category_id),
            )
            if category is None:
                logger.debug("category %s of product %s not found", product.category_id, product.id)
            related = related_products(product, category_products)

        return ProductDetailView(
            product=product,
            category=category,
            related_products=related,
            specification_rows=specification_rows(product),
        )

"""
Catalog API routes
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from otto.core.errors import CatalogInconsistencyError
from otto.data.catalog import PRODUCTS, get_product
from otto.schemas.commerce import Product, ProductCategory, TopicKey
from otto.schemas.products import ProductListResponse, TemplateResponse
from otto.services.query_classifier import search_products
from otto.services.solution_builder import resolve_template, resolve_template_products

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    category: Optional[ProductCategory] = Query(None),
    store: Optional[str] = Query(None),
):
    """List the catalog, optionally filtered by category and store"""
    products = [
        product
        for product in PRODUCTS
        if (category is None or product.category == category)
        and (store is None or product.store.lower() == store.lower())
    ]
    return ProductListResponse(products=products, total=len(products), category=category)


@router.get("/search", response_model=ProductListResponse)
async def search(
    q: str = Query(..., min_length=1, max_length=200),
    category: Optional[ProductCategory] = Query(None),
):
    """Keyword search over product names, descriptions and tags"""
    products = search_products(q, category)
    logger.info(f"Product search '{q}' returned {len(products)} results")
    return ProductListResponse(products=products, total=len(products), query=q, category=category)


@router.get("/templates/{topic}", response_model=TemplateResponse)
async def get_template_products(topic: TopicKey):
    """Solution template for a topic with its products resolved in order"""
    template = resolve_template(topic)
    try:
        products = resolve_template_products(template)
    except CatalogInconsistencyError as e:
        logger.error(f"Template {topic.value} is inconsistent: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return TemplateResponse(
        topic=topic,
        template=template,
        products=products,
        total_price=sum(product.price for product in products),
    )


@router.get("/{product_id}", response_model=Product)
async def get_product_detail(product_id: str):
    """Get a single product"""
    product = get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

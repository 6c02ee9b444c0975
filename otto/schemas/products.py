"""
Pydantic schemas for catalog browsing endpoints
"""
from typing import List, Optional

from pydantic import BaseModel

from otto.schemas.commerce import Product, ProductCategory, SolutionTemplate, TopicKey


class ProductListResponse(BaseModel):
    """Products matching a listing or search"""

    products: List[Product]
    total: int
    query: Optional[str] = None
    category: Optional[ProductCategory] = None


class TemplateResponse(BaseModel):
    """A solution template with its products resolved"""

    topic: TopicKey
    template: SolutionTemplate
    products: List[Product]
    total_price: float

"""
Expands a topic key into a priced Solution
"""
import logging
import uuid
from typing import List

from otto.core.errors import CatalogInconsistencyError
from otto.data.catalog import get_product, get_template
from otto.schemas.commerce import Product, Solution, SolutionItem, SolutionTemplate, TopicKey
from otto.services.query_classifier import find_matching_template

logger = logging.getLogger(__name__)

SOLUTION_CURRENCY = "CLP"


def resolve_template(topic: TopicKey) -> SolutionTemplate:
    """Return the template for a topic"""
    return get_template(topic)


def resolve_template_products(template: SolutionTemplate) -> List[Product]:
    """Resolve every product id of a template, in template order"""
    products = []
    for product_id in template.product_ids:
        product = get_product(product_id)
        if product is None:
            raise CatalogInconsistencyError(f"Template '{template.title}' references unknown product '{product_id}'")
        products.append(product)
    return products


def build_solution(topic: TopicKey) -> Solution:
    """
    Build the Solution for a topic.

    Items keep the template's order. The total is the plain sum of unit prices;
    quantities only exist in the cart.
    """
    template = resolve_template(topic)
    products = resolve_template_products(template)

    items = [SolutionItem(role=role, product=product) for role, product in zip(template.roles, products)]
    total_price = sum(item.product.price for item in items)

    solution = Solution(
        id=f"solution-{uuid.uuid4().hex[:12]}",
        title=template.title,
        description=template.description,
        items=items,
        total_price=total_price,
        currency=SOLUTION_CURRENCY,
    )
    logger.info(f"Built solution '{solution.title}' with {len(items)} items, total {total_price:.0f} {SOLUTION_CURRENCY}")
    return solution


def generate_solution(query: str) -> Solution:
    """Classify the query and build its Solution"""
    return build_solution(find_matching_template(query))

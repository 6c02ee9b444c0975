"""
Keyword-based query classification and product search.

Both tables are scanned in insertion order and the first substring hit wins,
so "room" in "bathroom" or "look" in "outlook" still match their topic.
"""
import logging
from typing import Dict, List, Optional, Tuple

from otto.data.catalog import PRODUCTS
from otto.schemas.commerce import Product, ProductCategory, TopicKey

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = TopicKey.LIVING_ROOM
DEFAULT_STYLE = "Japandi"

# Order matters: the first keyword found in the query decides the topic
KEYWORD_TO_TOPIC: Dict[str, TopicKey] = {
    # Living room
    "living": TopicKey.LIVING_ROOM,
    "sala": TopicKey.LIVING_ROOM,
    "sofá": TopicKey.LIVING_ROOM,
    "sofa": TopicKey.LIVING_ROOM,
    "room": TopicKey.LIVING_ROOM,
    "habitación": TopicKey.LIVING_ROOM,
    "decorar": TopicKey.LIVING_ROOM,
    "japandi": TopicKey.LIVING_ROOM,
    "minimalista": TopicKey.LIVING_ROOM,
    # Casual outfit
    "casual": TopicKey.CASUAL_OUTFIT,
    "weekend": TopicKey.CASUAL_OUTFIT,
    "fin de semana": TopicKey.CASUAL_OUTFIT,
    "outfit": TopicKey.CASUAL_OUTFIT,
    "look": TopicKey.CASUAL_OUTFIT,
    "ropa": TopicKey.CASUAL_OUTFIT,
    "vestir": TopicKey.CASUAL_OUTFIT,
    # Office style
    "office": TopicKey.OFFICE_STYLE,
    "oficina": TopicKey.OFFICE_STYLE,
    "trabajo": TopicKey.OFFICE_STYLE,
    "formal": TopicKey.OFFICE_STYLE,
    "profesional": TopicKey.OFFICE_STYLE,
    "reunión": TopicKey.OFFICE_STYLE,
    "meeting": TopicKey.OFFICE_STYLE,
    # Home improvement
    "diy": TopicKey.HOME_IMPROVEMENT,
    "arreglar": TopicKey.HOME_IMPROVEMENT,
    "reparar": TopicKey.HOME_IMPROVEMENT,
    "pintar": TopicKey.HOME_IMPROVEMENT,
    "herramienta": TopicKey.HOME_IMPROVEMENT,
    "tool": TopicKey.HOME_IMPROVEMENT,
    "mejora": TopicKey.HOME_IMPROVEMENT,
    "proyecto": TopicKey.HOME_IMPROVEMENT,
}

STYLE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "japandi": ("japandi", "japonés", "minimalista", "zen", "natural", "madera"),
    "modern": ("moderno", "contemporáneo", "actual", "trendy"),
    "classic": ("clásico", "tradicional", "elegante", "atemporal"),
    "industrial": ("industrial", "loft", "metal", "urbano"),
    "bohemian": ("boho", "bohemio", "ecléctico", "colorido"),
}


def find_matching_template(query: str) -> TopicKey:
    """Map free text to a topic key; unrecognised text falls back to the living room"""
    lower_query = query.lower()

    for keyword, topic in KEYWORD_TO_TOPIC.items():
        if keyword in lower_query:
            return topic

    return DEFAULT_TOPIC


def detect_style(query: str) -> str:
    """Return the capitalised style label of the first style keyword found"""
    lower_query = query.lower()

    for style, keywords in STYLE_KEYWORDS.items():
        if any(keyword in lower_query for keyword in keywords):
            return style.capitalize()

    return DEFAULT_STYLE


def search_products(query: str, category: Optional[ProductCategory] = None) -> List[Product]:
    """
    Keyword search over the mock catalog.

    A product matches when any whitespace-separated word of the query occurs in
    its name, description or one of its tags.
    """
    words = [word for word in query.lower().split() if word]
    if not words:
        return []

    results = []
    for product in PRODUCTS:
        if category and product.category != category:
            continue

        name = product.name.lower()
        description = product.description.lower()
        if any(
            word in name or word in description or any(word in tag for tag in product.tags) for word in words
        ):
            results.append(product)

    logger.debug(f"Product search '{query}' (category={category}) matched {len(results)} products")
    return results

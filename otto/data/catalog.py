"""
Static mock catalog and solution templates.

These records back the whole demo:
1. Solution building (template product ids resolve against PRODUCTS)
2. The SEARCH reasoning step (store names of a template's products)
3. Keyword product search and catalog browsing endpoints

Prices are in Chilean pesos (CLP).
"""
from typing import Dict, List, Optional

from otto.schemas.commerce import Product, ProductCategory, SolutionTemplate, TopicKey

PRODUCTS: List[Product] = [
    # ----- Home: living room -----
    Product(
        id="home-001",
        name="Sofá Modular Kivik 3 Cuerpos",
        description="Three-seat modular sofa in oat linen with solid oak legs",
        price=549990,
        store="IKEA",
        store_url="https://www.ikea.com/cl/es/",
        image_url="https://images.unsplash.com/photo-1555041469-a586c61ea9bc",
        category=ProductCategory.home,
        tags=["sofa", "living", "japandi", "linen", "minimalista"],
        delivery_days=5,
    ),
    Product(
        id="home-002",
        name="Mesa de Centro Roble Natural",
        description="Low rectangular coffee table in natural oak with rounded edges",
        price=189990,
        store="Falabella",
        store_url="https://www.falabella.com/falabella-cl",
        image_url="https://images.unsplash.com/photo-1533090481720-856c6e3c1fdc",
        category=ProductCategory.home,
        tags=["table", "coffee table", "oak", "madera", "japandi"],
        delivery_days=3,
    ),
    Product(
        id="home-003",
        name="Lámpara de Pie Papel Arroz",
        description="Floor lamp with rice paper shade casting warm diffused light",
        price=74990,
        store="Paris",
        store_url="https://www.paris.cl",
        image_url="https://images.unsplash.com/photo-1507473885765-e6ed057f782c",
        category=ProductCategory.home,
        tags=["lamp", "lighting", "zen", "natural"],
        delivery_days=4,
    ),
    Product(
        id="home-004",
        name="Alfombra Yute Tejida 160x230",
        description="Hand-woven jute rug in a neutral sand tone",
        price=129990,
        store="IKEA",
        store_url="https://www.ikea.com/cl/es/",
        image_url="https://images.unsplash.com/photo-1600166898405-da9535204843",
        category=ProductCategory.home,
        tags=["rug", "jute", "natural", "living"],
        delivery_days=5,
    ),
    Product(
        id="home-005",
        name="Set Cojines Lino Terracota",
        description="Pair of linen cushions in terracotta and sage",
        price=34990,
        store="Falabella",
        store_url="https://www.falabella.com/falabella-cl",
        image_url="https://images.unsplash.com/photo-1584100936595-c0654b55a2e2",
        category=ProductCategory.home,
        tags=["cushion", "textile", "linen", "decor"],
        delivery_days=3,
    ),
    Product(
        id="home-006",
        name="Planta Ficus Lyrata con Macetero",
        description="Fiddle-leaf fig in a matte ceramic planter",
        price=45990,
        store="Sodimac",
        store_url="https://www.sodimac.cl",
        image_url="https://images.unsplash.com/photo-1545241047-6083a3684587",
        category=ProductCategory.home,
        tags=["plant", "decor", "natural", "green"],
        delivery_days=2,
    ),
    # ----- Fashion: casual -----
    Product(
        id="fash-001",
        name="Chaqueta Denim Clásica",
        description="Mid-wash denim jacket with a relaxed fit",
        price=39990,
        store="H&M",
        store_url="https://www2.hm.com/es_cl/",
        image_url="https://images.unsplash.com/photo-1576995853123-5a10305d93c0",
        category=ProductCategory.fashion,
        tags=["jacket", "denim", "casual", "weekend"],
        delivery_days=3,
    ),
    Product(
        id="fash-002",
        name="Polera Algodón Orgánico Blanca",
        description="Organic cotton crew-neck t-shirt in white",
        price=12990,
        store="Zara",
        store_url="https://www.zara.com/cl/",
        image_url="https://images.unsplash.com/photo-1521572163474-6864f9cf17ab",
        category=ProductCategory.fashion,
        tags=["t-shirt", "cotton", "casual", "basic"],
        delivery_days=2,
    ),
    Product(
        id="fash-003",
        name="Pantalón Chino Beige",
        description="Slim-fit stretch chinos in beige",
        price=29990,
        store="Falabella",
        store_url="https://www.falabella.com/falabella-cl",
        image_url="https://images.unsplash.com/photo-1473966968600-fa801b869a1a",
        category=ProductCategory.fashion,
        tags=["pants", "chino", "casual", "office"],
        delivery_days=3,
    ),
    Product(
        id="fash-004",
        name="Zapatillas Urbanas Blancas",
        description="Minimal white leather sneakers with rubber sole",
        price=59990,
        store="Paris",
        store_url="https://www.paris.cl",
        image_url="https://images.unsplash.com/photo-1549298916-b41d501d3772",
        category=ProductCategory.fashion,
        tags=["sneakers", "shoes", "casual", "weekend"],
        delivery_days=4,
    ),
    # ----- Fashion: office -----
    Product(
        id="fash-005",
        name="Blazer Lana Azul Marino",
        description="Tailored navy wool-blend blazer",
        price=89990,
        store="Zara",
        store_url="https://www.zara.com/cl/",
        image_url="https://images.unsplash.com/photo-1507679799987-c73779587ccf",
        category=ProductCategory.fashion,
        tags=["blazer", "formal", "office", "wool"],
        delivery_days=3,
    ),
    Product(
        id="fash-006",
        name="Camisa Oxford Celeste",
        description="Light blue oxford shirt with button-down collar",
        price=24990,
        store="Falabella",
        store_url="https://www.falabella.com/falabella-cl",
        image_url="https://images.unsplash.com/photo-1596755094514-f87e34085b2c",
        category=ProductCategory.fashion,
        tags=["shirt", "oxford", "office", "formal"],
        delivery_days=2,
    ),
    Product(
        id="fash-007",
        name="Zapatos Derby Cuero Café",
        description="Brown leather derby shoes with stitched welt",
        price=79990,
        store="Ripley",
        store_url="https://simple.ripley.cl",
        image_url="https://images.unsplash.com/photo-1614252235316-8c857d38b5f4",
        category=ProductCategory.fashion,
        tags=["shoes", "leather", "formal", "office"],
        delivery_days=5,
    ),
    Product(
        id="fash-008",
        name="Bolso Maletín Cuero",
        description="Slim leather briefcase with laptop sleeve",
        price=99990,
        store="Ripley",
        store_url="https://simple.ripley.cl",
        image_url="https://images.unsplash.com/photo-1553062407-98eeb64c6a62",
        category=ProductCategory.fashion,
        tags=["bag", "briefcase", "leather", "office"],
        delivery_days=6,
    ),
    # ----- Home: DIY -----
    Product(
        id="diy-001",
        name="Taladro Percutor Inalámbrico 18V",
        description="Cordless 18V hammer drill with two batteries and charger",
        price=119990,
        store="Sodimac",
        store_url="https://www.sodimac.cl",
        image_url="https://images.unsplash.com/photo-1504148455328-c376907d081c",
        category=ProductCategory.home,
        tags=["drill", "tool", "diy", "herramienta"],
        delivery_days=2,
    ),
    Product(
        id="diy-002",
        name="Pintura Látex Interior 1 Galón",
        description="Washable matte interior latex paint, warm white",
        price=21990,
        store="Sodimac",
        store_url="https://www.sodimac.cl",
        image_url="https://images.unsplash.com/photo-1562259949-e8e7689d7828",
        category=ProductCategory.home,
        tags=["paint", "pintar", "wall", "diy"],
        delivery_days=2,
    ),
    Product(
        id="diy-003",
        name="Kit Rodillo y Brochas",
        description="Paint roller, tray and three synthetic brushes",
        price=12990,
        store="Easy",
        store_url="https://www.easy.cl",
        image_url="https://images.unsplash.com/photo-1589939705384-5185137a7f0f",
        category=ProductCategory.home,
        tags=["paint", "roller", "brush", "diy"],
        delivery_days=3,
    ),
    Product(
        id="diy-004",
        name="Caja de Herramientas 64 Piezas",
        description="64-piece household tool set in a hard case",
        price=49990,
        store="Easy",
        store_url="https://www.easy.cl",
        image_url="https://images.unsplash.com/photo-1581147036324-c1c89c2c8b5c",
        category=ProductCategory.home,
        tags=["tool", "set", "herramienta", "diy"],
        delivery_days=3,
    ),
]


SOLUTION_TEMPLATES: Dict[TopicKey, SolutionTemplate] = {
    TopicKey.LIVING_ROOM: SolutionTemplate(
        title="Project: Japandi Living Room",
        description="A calm living room built on natural wood, linen and soft warm light.",
        product_ids=["home-001", "home-002", "home-003", "home-004", "home-005", "home-006"],
        roles=["Main Sofa", "Coffee Table", "Accent Lamp", "Area Rug", "Soft Textiles", "Greenery"],
    ),
    TopicKey.CASUAL_OUTFIT: SolutionTemplate(
        title="Project: Weekend Casual Outfit",
        description="Easy layers for a relaxed weekend, from coffee to dinner.",
        product_ids=["fash-001", "fash-002", "fash-003", "fash-004"],
        roles=["Outer Layer", "Base Layer", "Bottoms", "Footwear"],
    ),
    TopicKey.OFFICE_STYLE: SolutionTemplate(
        title="Project: Monday Office Look",
        description="A sharp business-casual outfit ready for meetings.",
        product_ids=["fash-005", "fash-006", "fash-003", "fash-007", "fash-008"],
        roles=["Blazer", "Shirt", "Trousers", "Shoes", "Work Bag"],
    ),
    TopicKey.HOME_IMPROVEMENT: SolutionTemplate(
        title="Project: DIY Weekend Refresh",
        description="Everything needed to repaint a room and handle small repairs.",
        product_ids=["diy-001", "diy-002", "diy-003", "diy-004"],
        roles=["Power Tool", "Wall Paint", "Painting Kit", "Tool Set"],
    ),
}


_PRODUCTS_BY_ID: Dict[str, Product] = {product.id: product for product in PRODUCTS}


def get_product(product_id: str) -> Optional[Product]:
    """Look up a product by id"""
    return _PRODUCTS_BY_ID.get(product_id)


def get_template(topic: TopicKey) -> SolutionTemplate:
    """Return the solution template for a topic"""
    return SOLUTION_TEMPLATES[topic]

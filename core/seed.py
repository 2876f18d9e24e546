"""Starting catalog loaded into an empty database."""
import logging

from core import services
from core.constants import DEFAULT_COST, DEFAULT_SELLING_PRICE
from core.models import Variety

logger = logging.getLogger(__name__)

SEED_VARIETIES = {
    "WATER BASE": [
        "Blueberry", "Butterscotch", "Grape", "Green Apple", "Green Mango",
        "Litchi", "Mango", "Nellika", "Orange", "Passion Fruit",
        "Pineapple", "Pink Guva", "Rasamalai", "Watermelon",
    ],
    "MILK BASE": [
        "Avocado", "Banana", "Banofee", "Biriyani", "Blueberry", "Bounty",
        "Bubblegum", "Cherry", "Chocolate", "Coffee", "Dates & Nuts",
        "Delight", "Fig & Honey", "Gulab Jamun", "Guava Chilli", "Jack Fruit",
        "Kitkat", "Laddu", "Lotus", "Malai Kulfi", "Mango", "Munch",
        "Jaggary payasam", "Oreo", "Palada", "Payasam", "Pista",
        "Salted Caramel", "Shamam", "Sitafal", "Snickers", "Strawberry",
        "Tender Coconut", "Tutti Fruity", "Vanilla",
    ],
    "FAMILY PACK": [
        "Avocado - 500ml", "Chikku - 500ml", "Chocolate - 500ml", "Delight - 500ml",
    ],
    "4L TUBS": [
        "Chocolate - 4 L", "Mango - 4 L", "Vanilla - 4 L",
    ],
}


def seed_names():
    """Yield (name, category); names shared by two categories get a suffix."""
    seen = set()
    for category, names in SEED_VARIETIES.items():
        for name in names:
            label = name if name.lower() not in seen else f"{name} ({category.title()})"
            seen.add(label.lower())
            yield label, category


def seed_catalog(conn) -> int:
    """Insert the starting varieties if the catalog is empty. Returns rows added."""
    if services.list_varieties(conn):
        return 0
    added = 0
    for name, category in seed_names():
        services.add_variety(
            conn,
            Variety(
                id=None,
                name=name,
                category=category,
                stock=0,
                cost=DEFAULT_COST,
                selling_price=DEFAULT_SELLING_PRICE,
            ),
        )
        added += 1
    logger.info("Seeded catalog with %d varieties", added)
    return added

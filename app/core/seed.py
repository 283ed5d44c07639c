"""Category configuration: built-in defaults, optional JSON override, first-run seeding."""

import json
from pathlib import Path

from app.core.db import Category, CategoryStore
from app.core.utils import get_logger, new_id

logger = get_logger("money-whisper.db")

DEFAULT_CATEGORIES: list[dict[str, str]] = [
    {
        "name": "Groceries",
        "icon": "🛒",
        "color": "#4CAF50",
        "keywords": "grocery,food,fruit,vegetable,milk,bread,cheese,yogurt,curd,rice,flour,oil,spice,cereal,meat",
    },
    {
        "name": "Dining Out",
        "icon": "🍽️",
        "color": "#FF9800",
        "keywords": "restaurant,cafe,dining,lunch,dinner,breakfast,takeout,delivery,coffee,tea,bar,pub,snack",
    },
    {
        "name": "Transportation",
        "icon": "🚗",
        "color": "#2196F3",
        "keywords": "fuel,petrol,diesel,gas,uber,taxi,cab,bus,train,metro,subway,fare,ticket,auto,rickshaw,ola",
    },
    {
        "name": "Entertainment",
        "icon": "🎬",
        "color": "#9C27B0",
        "keywords": "movie,cinema,theatre,concert,show,game,event,ticket,streaming,subscription,netflix,amazon,disney",
    },
    {
        "name": "Shopping",
        "icon": "🛍️",
        "color": "#E91E63",
        "keywords": "clothes,clothing,shoes,dress,shirt,pants,accessories,bag,purse,electronics,gadget,phone",
    },
    {
        "name": "Utilities",
        "icon": "💡",
        "color": "#607D8B",
        "keywords": "electricity,water,gas,bill,internet,wifi,broadband,phone,mobile,recharge,dth,cable",
    },
    {
        "name": "Health",
        "icon": "💊",
        "color": "#F44336",
        "keywords": "medicine,doctor,medical,hospital,clinic,pharmacy,health,checkup,test,insurance,consultation",
    },
    {
        "name": "Housing",
        "icon": "🏠",
        "color": "#795548",
        "keywords": "rent,maintenance,repair,furniture,appliance,decor,cleaning,property,housing,apartment",
    },
    {
        "name": "Personal Care",
        "icon": "✂️",
        "color": "#FF5722",
        "keywords": "haircut,salon,spa,grooming,cosmetics,skincare,makeup,beauty,hygiene,personal",
    },
    {
        "name": "Education",
        "icon": "📚",
        "color": "#009688",
        "keywords": "book,course,class,tuition,fee,school,college,university,tutorial,learning,online,study",
    },
    {
        "name": "Miscellaneous",
        "icon": "📦",
        "color": "#9E9E9E",
        "keywords": "other,misc,miscellaneous,general,various,random,donation,gift",
    },
]


def load_category_config(path: str | Path | None = None) -> list[dict[str, str]]:
    """Load category definitions from a JSON file, or fall back to the built-in defaults.

    The file holds a list of ``{name, icon, color, keywords}`` objects; ``keywords`` may
    be a comma-separated string or a list of strings.
    """
    if path is None or not Path(path).exists():
        return [dict(entry) for entry in DEFAULT_CATEGORIES]
    logger.info(f"Loading category configuration from {path}")
    with Path(path).open(encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, list):
        msg = f"Category configuration in {path} must be a JSON list, got {type(raw).__name__}"
        raise ValueError(msg)
    entries = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("name"):
            msg = f"Invalid category entry in {path}: {item!r}"
            raise ValueError(msg)
        keywords = item.get("keywords") or ""
        if isinstance(keywords, list):
            keywords = ",".join(str(kw) for kw in keywords)
        entries.append(
            {
                "name": str(item["name"]),
                "icon": item.get("icon") or "",
                "color": item.get("color") or "",
                "keywords": keywords,
            }
        )
    return entries


def build_categories(entries: list[dict[str, str]]) -> list[Category]:
    """Turn configuration entries into Category rows, preserving their order."""
    return [
        Category(
            id=new_id(),
            name=entry["name"],
            icon=entry.get("icon") or None,
            color=entry.get("color") or None,
            keywords=entry.get("keywords") or None,
            position=index,
        )
        for index, entry in enumerate(entries)
    ]


def seed_categories(store: CategoryStore, entries: list[dict[str, str]] | None = None) -> int:
    """Insert the configured categories if the table is empty; return how many were added."""
    existing = store.count()
    if existing > 0:
        logger.info(f"Database already has {existing} categories. Skipping seed.")
        return 0
    categories = build_categories(entries if entries is not None else load_category_config())
    store.add_many(categories)
    for category in categories:
        logger.info(f"Seeded category {category.name} ({category.icon})")
    return len(categories)

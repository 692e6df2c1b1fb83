"""
Seed script for default categories and keyword rules.

Run with ``python -m vifin.seed``. Safe to run repeatedly.
"""

from vifin.database import Base, SessionLocal, engine
from vifin.models import Category, CategoryRule
from vifin.models.category import CategoryType
from vifin.services.text_normalizer import normalize


EXPENSE_CATEGORIES = [
    {"key": "food", "name": "Food", "icon": "restaurant", "color": "#FF6B6B", "priority": 1},
    {"key": "transport", "name": "Transport", "icon": "directions_car", "color": "#4ECDC4", "priority": 2},
    {"key": "bills", "name": "Bills", "icon": "receipt", "color": "#FFE66D", "priority": 3},
    {"key": "entertainment", "name": "Entertainment", "icon": "movie", "color": "#A8E6CF", "priority": 4},
    {"key": "shopping", "name": "Shopping", "icon": "shopping_bag", "color": "#FF8B94", "priority": 5},
    {"key": "health", "name": "Health", "icon": "local_hospital", "color": "#C7CEEA", "priority": 6},
    {"key": "education", "name": "Education", "icon": "school", "color": "#B4A7D6", "priority": 7},
    {"key": "travel", "name": "Travel", "icon": "flight", "color": "#FFD3B6", "priority": 8},
    {"key": "personal-care", "name": "Personal Care", "icon": "spa", "color": "#FFAAA5", "priority": 9},
    {"key": "gifts", "name": "Gifts & Donations", "icon": "card_giftcard", "color": "#FF8C94", "priority": 10},
    {"key": "insurance", "name": "Insurance", "icon": "shield", "color": "#A8DADC", "priority": 11},
    {"key": "debt", "name": "Debt & Credit", "icon": "credit_card", "color": "#E63946", "priority": 12},
    {"key": "other", "name": "Other", "icon": "category", "color": "#95A5A6", "priority": 99},
    {"key": "uncategorized", "name": "Uncategorized", "icon": "help_outline", "color": "#BDC3C7", "priority": 100},
]

INCOME_CATEGORIES = [
    {"key": "salary", "name": "Salary", "icon": "payments", "color": "#2ECC71", "priority": 1},
    {"key": "business", "name": "Business Income", "icon": "business", "color": "#27AE60", "priority": 2},
    {"key": "investment", "name": "Investment Returns", "icon": "trending_up", "color": "#16A085", "priority": 3},
    {"key": "freelance", "name": "Freelance", "icon": "laptop", "color": "#1ABC9C", "priority": 4},
    {"key": "rental", "name": "Rental Income", "icon": "home", "color": "#3498DB", "priority": 5},
    {"key": "gifts-received", "name": "Gifts Received", "icon": "redeem", "color": "#9B59B6", "priority": 6},
    {"key": "refunds", "name": "Refunds", "icon": "replay", "color": "#34495E", "priority": 7},
    {"key": "other-income", "name": "Other Income", "icon": "attach_money", "color": "#95A5A6", "priority": 99},
]

# Keyword -> priority, lower wins
CATEGORY_RULES = {
    "expense:food": [
        ("GRAB FOOD", 1), ("GRABFOOD", 1), ("SHOPEE FOOD", 1), ("SHOPEEFOOD", 1),
        ("NOW.VN", 1), ("BAEMIN", 1), ("GOFOOD", 1),
        ("HIGHLAND", 2), ("STARBUCKS", 2), ("PHUC LONG", 2), ("THE COFFEE HOUSE", 2),
        ("CAFE", 3), ("NHA HANG", 3), ("QUAN AN", 3),
    ],
    "expense:transport": [
        ("GRAB", 1), ("GOJEK", 1), ("XANH SM", 1),
        ("TAXI", 2), ("PETROLIMEX", 2), ("XANG DAU", 2), ("VIETJET", 2),
        ("VIETNAM AIRLINES", 2), ("BAMBOO AIRWAYS", 2),
        ("GUI XE", 3), ("PARKING", 3),
    ],
    "expense:bills": [
        ("TIEN DIEN", 1), ("EVN", 1), ("DIEN LUC", 1), ("TIEN NUOC", 1), ("CAP NUOC", 1),
        ("INTERNET", 1), ("VNPT", 1), ("FPT", 1), ("VIETTEL", 1), ("MOBIFONE", 1),
        ("NAP DIEN THOAI", 2),
    ],
}


def _seed_category_group(db, items, category_type: CategoryType) -> int:
    created = 0
    for item in items:
        default_key = f"{category_type.value}:{item['key']}"
        existing = db.query(Category).filter(Category.default_key == default_key).first()
        if existing:
            continue
        db.add(Category(
            name=item["name"],
            type=category_type,
            is_default=True,
            default_key=default_key,
            priority=item["priority"],
            icon=item["icon"],
            color=item["color"],
        ))
        created += 1
    return created


def _seed_rules(db) -> int:
    created = 0
    for default_key, rules in CATEGORY_RULES.items():
        category = db.query(Category).filter(Category.default_key == default_key).first()
        if not category:
            continue
        for keyword, priority in rules:
            existing = db.query(CategoryRule).filter(
                CategoryRule.keyword == keyword,
                CategoryRule.category_id == category.id
            ).first()
            if existing:
                continue
            db.add(CategoryRule(
                category_id=category.id,
                keyword=keyword,
                keyword_normalized=normalize(keyword),
                priority=priority,
                is_active=True,
            ))
            created += 1
    return created


def seed_defaults(db) -> dict:
    """Insert missing default categories and rules into an open session."""
    categories = _seed_category_group(db, EXPENSE_CATEGORIES, CategoryType.expense)
    categories += _seed_category_group(db, INCOME_CATEGORIES, CategoryType.income)
    db.flush()
    rules = _seed_rules(db)
    db.commit()
    return {"categories": categories, "rules": rules}


def seed_categories():
    """Create tables and seed default data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        counts = seed_defaults(db)
        print(f"Seeded {counts['categories']} categories and {counts['rules']} rules")
    except Exception as e:
        print(f"Error seeding categories: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_categories()

# grocery/data/seed.py
from decimal import Decimal

from sqlalchemy import select

from grocery.data.database import SessionLocal, init_db
from grocery.data.models import CategoryModel, ProductModel
from grocery.security.identity import Identity, bind_identity
from grocery.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

CATEGORIES = [
    ("Fruits & Vegetables", "फल और सब्जियां", "🥕", 1),
    ("Dairy & Bakery", "डेयरी और बेकरी", "🥛", 2),
    ("Snacks & Beverages", "स्नैक्स और पेय", "🥤", 3),
    ("Personal Care", "व्यक्तिगत देखभाल", "🧴", 4),
]

# name, name_hi, description, price, image, category, brand, unit, stock
PRODUCTS = [
    ("Banana", "केला", "Fresh bananas", "40.00",
     "https://images.unsplash.com/photo-1571771894821-ce9b6c11b08e?w=300&h=300&fit=crop",
     "Fruits & Vegetables", "Fresh", "kg", 100),
    ("Orange", "संतरा", "Juicy oranges", "60.00",
     "https://images.unsplash.com/photo-1547036967-23d11aacaee0?w=300&h=300&fit=crop",
     "Fruits & Vegetables", "Fresh", "kg", 50),
    ("Milk", "दूध", "Fresh milk", "55.00",
     "https://images.unsplash.com/photo-1563636619-e9143da7973b?w=300&h=300&fit=crop",
     "Dairy & Bakery", "Amul", "liter", 30),
    ("Chips", "चिप्स", "Crunchy potato chips", "25.00",
     "https://images.unsplash.com/photo-1566478989037-eec170784d0b?w=300&h=300&fit=crop",
     "Snacks & Beverages", "Lays", "packet", 75),
]


def seed(db) -> bool:
    """Insert the sample catalog when it is empty. ``db`` must carry the service role."""
    if db.execute(select(CategoryModel).limit(1)).first():
        return False

    categories = {}
    for name, name_hi, icon, sort_order in CATEGORIES:
        category = CategoryModel(name=name, name_hi=name_hi, icon_url=icon, sort_order=sort_order)
        db.add(category)
        categories[name] = category
    db.flush()

    for name, name_hi, description, price, image, category, brand, unit, stock in PRODUCTS:
        db.add(
            ProductModel(
                name=name,
                name_hi=name_hi,
                description=description,
                price=Decimal(price),
                image_url=image,
                category_id=categories[category].id,
                brand=brand,
                unit=unit,
                stock_quantity=stock,
            )
        )
    db.commit()
    logger.info(f"Seeded {len(CATEGORIES)} categories and {len(PRODUCTS)} products")
    return True


if __name__ == "__main__":
    configure_logging()
    init_db()
    session = bind_identity(SessionLocal(), Identity.service())
    try:
        seed(session)
    finally:
        session.close()

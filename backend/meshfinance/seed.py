import os
from sqlalchemy import select
from meshfinance.db.session import SessionLocal
from meshfinance.models.category import Category
from meshfinance.models.user import User
from meshfinance.core.security import hash_password

GLOBAL_CATEGORIES = [
    ("Food", "EXPENSE"),
    ("Housing", "EXPENSE"),
    ("Transport", "EXPENSE"),
    ("Leisure", "EXPENSE"),
    ("Health", "EXPENSE"),
    ("Education", "EXPENSE"),
    ("Shopping", "EXPENSE"),
    ("Subscriptions", "EXPENSE"),
    ("Salary", "INCOME"),
    ("Investments", "INCOME"),
    ("Freelance", "INCOME"),
    ("Gifts", "INCOME"),
    ("Other", "INCOME"),
]

def main():
    username = os.environ.get("SEED_USER", "demo")
    password = os.environ.get("SEED_PASS", "demo123")

    db = SessionLocal()
    try:
        existing = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if not existing:
            db.add(User(username=username, password_hash=hash_password(password)))

        have = set(
            db.execute(select(Category.name).where(Category.user_id.is_(None))).scalars().all()
        )
        for name, type_ in GLOBAL_CATEGORIES:
            if name not in have:
                db.add(Category(name=name, type=type_, user_id=None))
        db.commit()
    finally:
        db.close()

if __name__ == "__main__":
    main()

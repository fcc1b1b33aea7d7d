"""Seed sample users, a property and an apartment with units."""
from __future__ import annotations

from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

from propbook import db, models
from propbook.config import get_settings


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    db.create_all()
    session = db.get_sessionmaker()()

    try:
        asha = models.User(first_name="Asha", last_name="Menon", email="asha@example.com")
        ravi = models.User(first_name="Ravi", last_name="Kumar", email="ravi@example.com")
        villa = models.Property(name="Lakeside Villa", location="Kochi", price=Decimal("2500000.00"))
        tower = models.Apartment(name="Palm Towers", location="Bengaluru")
        session.add_all([asha, ravi, villa, tower])
        session.flush()

        session.add_all(
            [
                models.ApartmentUnit(
                    apartment_id=tower.id,
                    unit_number=f"{floor}0{idx}",
                    floor_number=floor,
                    bedrooms=2 if idx == 1 else 3,
                    bathrooms=2,
                    area=Decimal("1150.00") if idx == 1 else Decimal("1480.00"),
                    price=Decimal("45000.00") if idx == 1 else Decimal("60000.00"),
                )
                for floor in (1, 2)
                for idx in (1, 2)
            ]
        )
        session.commit()
        print("Seed data inserted.")
    finally:
        session.close()


if __name__ == "__main__":
    main()

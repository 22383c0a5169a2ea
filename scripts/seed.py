"""Seed sample data for local development."""
from __future__ import annotations

from datetime import date, time, timedelta

from dotenv import load_dotenv

load_dotenv()

from app import models  # noqa: E402
from app.config import get_settings  # noqa: E402
from app.db import create_all, get_sessionmaker, init_engine  # noqa: E402


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    init_engine()
    create_all()
    session = get_sessionmaker()()

    try:
        batch = models.Batch(name="Morning Robotics", capacity=20, start_date=date.today() - timedelta(days=7))
        alice = models.Member(name="Alice", email="alice@example.com", mobile="0700000001")
        bob = models.Member(name="Bob", email="bob@example.com", mobile="0700000002")
        coach = models.Partner(name="Coach Carter", email="carter@example.com", mobile="0700000009")
        batch.members.extend([alice, bob])
        batch.partners.append(coach)
        for offset in (-2, -1, 0, 1, 2):
            batch.sessions.append(
                models.BatchSession(
                    title=f"Robotics day {offset + 3}",
                    date=date.today() + timedelta(days=offset),
                    start_time=time(9, 0),
                    end_time=time(11, 0),
                )
            )
        session.add_all(
            [
                batch,
                models.Amenity(name="Wi-Fi", category=models.AmenityCategory.basic),
                models.Amenity(name="Parking", category=models.AmenityCategory.comfort),
            ]
        )
        session.commit()
        print("Seed data inserted.")
    finally:
        session.close()


if __name__ == "__main__":
    main()

# app/seed.py
"""Seed privileged accounts and a few sample listings.

Run with `python -m app.seed`. Safe to re-run: existing users are kept and
samples are only inserted into an empty listings table.
"""
import os

from .db import Base, SessionLocal, engine
from . import crud, models, services
from .schemas import ActingUser
from .security import hash_password
from .utils import logger

SAMPLE_LISTINGS = [
    {
        "title": "Reliable Maid (Morning shift)",
        "description": "Trustworthy maid available 6 days/week. Sweeping, mopping, utensils, cloth wash & folding.",
        "category": "maid",
        "type": "service",
        "contact_number": "9876543210",
        "is_community_posted": True,
        "state": "Karnataka",
        "city": "Bengaluru",
        "area": "Whitefield",
        "pincode": "560066",
        "location": "Near Forum Shantiniketan",
        "service_type": "housekeeping",
        "availability": "Mon-Sat, 7-11 AM",
        "_verified": True,
        "_review": (5, "Very punctual and sincere."),
    },
    {
        "title": "Home Cook (South Indian specialist)",
        "description": "Experienced home cook. Veg/Non-veg, breakfast & dinner. Can do weekly meal prep.",
        "category": "cook",
        "type": "service",
        "contact_number": "9876501234",
        "is_community_posted": True,
        "state": "Karnataka",
        "city": "Bengaluru",
        "area": "Indiranagar",
        "pincode": "560038",
        "availability": "Daily, 6-9 AM & 6-9 PM",
        "_review": (4, "Tasty and hygienic."),
    },
    {
        "title": "Plumber on-call (Emergency & Regular)",
        "description": "Fixes leaks, taps, flush tanks, RO fitting. Same-day visits possible.",
        "category": "plumbing",
        "type": "service",
        "contact_number": "9811112233",
        "state": "Karnataka",
        "city": "Bengaluru",
        "area": "Marathahalli",
        "pincode": "560037",
    },
    {
        "title": "Bicycle for Rent (MTB)",
        "description": "Well-maintained MTB, helmet included. Great for weekend rides.",
        "category": "bicycle",
        "type": "rental",
        "contact_number": "9898989898",
        "state": "Karnataka",
        "city": "Bengaluru",
        "area": "HSR Layout",
        "pincode": "560102",
        "rental_duration_unit": "day",
        "item_condition": "Good",
    },
]


def ensure_user(db, name, email, phone, password, role):
    user = crud.get_user_by_email(db, email)
    if user:
        logger.info("User already exists: %s", email)
        return user
    user = crud.create_user(db, {
        "name": name,
        "email": email,
        "phone": phone,
        "password_hash": hash_password(password),
        "role": role,
    })
    logger.info("Created %s user %s", role, email)
    return user


def seed(db):
    admin = ensure_user(
        db, "Admin", "admin@fixify.local", "9999999999",
        os.getenv("SEED_ADMIN_PASSWORD", "admin123"), "admin",
    )
    community = ensure_user(
        db, "Community Lead", "community@fixify.local", "8888888888",
        os.getenv("SEED_COMMUNITY_PASSWORD", "community123"), "community",
    )
    as_admin = ActingUser(id=admin.id, role=admin.role)
    as_community = ActingUser(id=community.id, role=community.role)

    count = db.query(models.Listing).count()
    if count:
        logger.info("Listings already exist: %d", count)
        return 0

    for sample in SAMPLE_LISTINGS:
        fields = {k: v for k, v in sample.items() if not k.startswith("_")}
        owner = as_community if sample["category"] == "cook" else as_admin
        listing = services.create_listing(db, fields, owner)
        if sample.get("_verified"):
            services.admin_verify(db, listing.id, as_admin)
        if sample.get("_review"):
            rating, comment = sample["_review"]
            services.upsert_review(db, listing.id, owner, rating, comment)
    logger.info("Inserted %d sample listings", len(SAMPLE_LISTINGS))
    return len(SAMPLE_LISTINGS)


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
    logger.info("Seed complete.")

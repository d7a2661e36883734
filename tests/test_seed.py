# tests/test_seed.py
from app import crud, models
from app.seed import seed


def test_seed_is_repeatable(db):
    assert seed(db) == 4
    assert seed(db) == 0
    assert db.query(models.Listing).count() == 4
    assert crud.get_user_by_email(db, "admin@fixify.local").role == "admin"
    assert crud.get_user_by_email(db, "community@fixify.local").role == "community"


def test_seeded_listings_are_normalized(db):
    seed(db)
    maid = db.query(models.Listing).filter(models.Listing.category == "maid").one()
    assert maid.contact_number == "+919876543210"
    assert maid.is_verified is True
    assert [r.rating for r in maid.reviews] == [5]
    bike = db.query(models.Listing).filter(models.Listing.type == "rental").one()
    assert bike.rental_duration_unit == "day"
    assert bike.is_verified is False

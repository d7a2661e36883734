# tests/test_crud.py
import pytest
from app import crud


@pytest.fixture
def owner(make_user):
    return make_user()


def _listing(db, owner, **overrides):
    payload = {
        "title": "Test Service",
        "category": "plumbing",
        "type": "service",
        "contact_number": "+919876543210",
        "posted_by": owner.id,
    }
    payload.update(overrides)
    return crud.create_listing(db, payload)


def _titles(db, filters, skip=0, limit=50):
    return [l.title for l in crud.list_listings(db, skip=skip, limit=limit, filters=filters)["items"]]


def test_create_and_get(db, owner):
    created = _listing(db, owner, title="Test Plumber", pincode="012345")
    obj = crud.get_listing(db, created.id)
    assert obj is not None
    assert obj.title == "Test Plumber"
    assert obj.pincode == "012345"
    assert obj.is_verified is False
    assert obj.reviews == []
    assert obj.endorser_ids == []
    assert obj.poster.name == owner.name


def test_get_missing_listing_returns_none(db):
    assert crud.get_listing(db, 404) is None


def test_pincode_is_a_prefix_match(db, owner):
    _listing(db, owner, title="Whitefield", pincode="560066")
    _listing(db, owner, title="Elsewhere", pincode="123456")
    assert _titles(db, {"pincode": "5600"}) == ["Whitefield"]
    assert _titles(db, {"pincode": "0066"}) == []


def test_city_and_area_are_case_insensitive_substrings(db, owner):
    _listing(db, owner, title="A", city="Bengaluru", area="HSR Layout")
    _listing(db, owner, title="B", city="Mysuru", area="Gokulam")
    assert _titles(db, {"city": "bengal"}) == ["A"]
    assert _titles(db, {"area": "layout"}) == ["A"]
    assert _titles(db, {"city": "uru"}) == ["B", "A"]


def test_category_and_type_are_exact(db, owner):
    _listing(db, owner, title="Pipes", category="plumbing")
    _listing(db, owner, title="Bike", category="bicycle", type="rental")
    assert _titles(db, {"category": "plumb"}) == []
    assert _titles(db, {"category": "plumbing"}) == ["Pipes"]
    assert _titles(db, {"type": "rental"}) == ["Bike"]


def test_free_text_matches_any_text_field(db, owner):
    _listing(db, owner, title="Maid", description="Morning SHIFT only")
    _listing(db, owner, title="Cook", location="near the lake")
    _listing(db, owner, title="Cycle", area="Indiranagar")
    _listing(db, owner, title="Painter", pincode="560038")
    assert _titles(db, {"q": "shift"}) == ["Maid"]
    assert _titles(db, {"q": "LAKE"}) == ["Cook"]
    assert _titles(db, {"q": "indira"}) == ["Cycle"]
    assert _titles(db, {"q": "60038"}) == ["Painter"]
    assert _titles(db, {"q": "plumbing"}) == ["Painter", "Cycle", "Cook", "Maid"]


def test_filters_combine_with_and(db, owner):
    _listing(db, owner, title="Match", city="Bengaluru", category="cook")
    _listing(db, owner, title="Wrong city", city="Chennai", category="cook")
    _listing(db, owner, title="Wrong category", city="Bengaluru", category="maid")
    assert _titles(db, {"city": "bengaluru", "category": "cook"}) == ["Match"]


def test_absent_filters_do_not_narrow(db, owner):
    for i in range(3):
        _listing(db, owner, title=f"L{i}")
    empty = {"q": None, "category": "", "type": None, "city": "", "area": None, "pincode": ""}
    assert len(_titles(db, empty)) == 3
    assert len(_titles(db, None)) == 3


def test_like_wildcards_are_literal(db, owner):
    _listing(db, owner, title="100% reliable")
    _listing(db, owner, title="1000 reviews")
    assert _titles(db, {"q": "100%"}) == ["100% reliable"]
    assert _titles(db, {"q": "_"}) == []


def test_newest_first_with_total(db, owner):
    for i in range(1, 6):
        _listing(db, owner, title=f"L{i}")
    res = crud.list_listings(db, skip=2, limit=2)
    assert res["total"] == 5
    assert [l.title for l in res["items"]] == ["L3", "L2"]


def test_toggle_endorsement_is_reversible(db, owner, make_user):
    listing = _listing(db, owner)
    fan = make_user()
    assert crud.toggle_endorsement(db, listing.id, fan.id, threshold=3) == ("added", 1, False)
    assert crud.toggle_endorsement(db, listing.id, fan.id, threshold=3) == ("removed", 0, False)
    assert crud.toggle_endorsement(db, listing.id, fan.id, threshold=1) == ("added", 1, True)


def test_listing_lock_selects_for_update(db, owner):
    from sqlalchemy.dialects import postgresql

    listing = _listing(db, owner)
    sql = str(crud.lock_listing(db, listing.id).statement.compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" in sql


def test_toggle_takes_listing_lock(db, owner, make_user, monkeypatch):
    listing = _listing(db, owner)
    fan = make_user()
    calls = []
    real_lock = crud.lock_listing

    def recording_lock(session, listing_id):
        calls.append(listing_id)
        return real_lock(session, listing_id)

    monkeypatch.setattr(crud, "lock_listing", recording_lock)
    assert crud.toggle_endorsement(db, listing.id, fan.id, threshold=3) == ("added", 1, False)
    assert calls == [listing.id]


def test_mark_verified_reports_change_once(db, owner):
    listing = _listing(db, owner)
    assert crud.mark_verified(db, listing.id) is True
    assert crud.mark_verified(db, listing.id) is False


def test_delete_removes_reviews_and_endorsements(db, owner, make_user):
    from app.models import Endorsement, Review

    listing = _listing(db, owner)
    other = make_user()
    crud.upsert_review(db, listing, other.id, 4, "fine")
    crud.toggle_endorsement(db, listing.id, other.id, threshold=3)
    crud.delete_listing(db, crud.get_listing(db, listing.id))
    assert db.query(Review).count() == 0
    assert db.query(Endorsement).count() == 0


def test_get_user_by_email_ignores_case(db, make_user):
    user = make_user()
    assert crud.get_user_by_email(db, user.email.upper()).id == user.id

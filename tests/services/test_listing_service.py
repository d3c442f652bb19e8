# mypy: ignore-errors
"""Tests for browsing, editing and contact reveal."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from dopelist.db.time import utcnow
from dopelist.models import Category, City, ContactView, Section
from dopelist.services import listings
from dopelist.services.errors import NotFoundError, ValidationError
from dopelist.services.listings import BrowseSort, ListingChanges


def test_browse_excludes_expired_and_inactive(db_session, anon_identity, make_listing) -> None:
    visible = make_listing(anon_identity)
    make_listing(anon_identity, created_at=utcnow() - timedelta(days=8))
    make_listing(anon_identity, active=False)

    rows = listings.browse(db_session)

    assert [row.id for row in rows] == [visible.id]


def test_browse_sorts_by_votes_then_recency(db_session, anon_identity, make_listing) -> None:
    older = make_listing(anon_identity, created_at=utcnow() - timedelta(hours=2), votes=5)
    newer = make_listing(anon_identity, votes=5)
    low = make_listing(anon_identity, votes=-1)

    top = listings.browse(db_session, sort=BrowseSort.TOP)
    new = listings.browse(db_session, sort=BrowseSort.NEW)

    assert [row.id for row in top] == [newer.id, older.id, low.id]
    assert new[-1].id == older.id


def test_browse_filters_by_city_section_and_category(
    db_session, anon_identity, make_listing, city, category
) -> None:
    other_city = City(name="Denver", slug="denver")
    jobs = Category(section=str(Section.JOBS), name="Software", slug="software")
    db_session.add_all([other_city, jobs])
    db_session.commit()
    bike = make_listing(anon_identity)
    make_listing(anon_identity, city_id=other_city.id)
    make_listing(anon_identity, category_id=jobs.id)

    assert [r.id for r in listings.browse(db_session, city="austin", category="bikes")] == [bike.id]
    assert len(listings.browse(db_session, section=Section.JOBS)) == 1
    assert len(listings.browse(db_session, city="denver")) == 1


def test_expiring_count(db_session, anon_identity, make_listing) -> None:
    make_listing(anon_identity, created_at=utcnow() - timedelta(days=6))
    make_listing(anon_identity)
    make_listing(anon_identity, created_at=utcnow() - timedelta(days=9))

    assert listings.expiring_count(db_session, anon_identity) == 1
    assert len(listings.list_owned(db_session, anon_identity)) == 3


def test_edit_updates_fields(db_session, anon_identity, listing) -> None:
    edited = listings.edit(
        db_session,
        listing.id,
        anon_identity,
        ListingChanges(title=" New title ", price=None, images=[f"{i}.jpg" for i in range(10)]),
    )

    assert edited.title == "New title"
    assert edited.price is None
    assert len(edited.images) == 10


def test_edit_leaves_unset_fields(db_session, anon_identity, make_listing) -> None:
    listing = make_listing(anon_identity, price="$10")
    edited = listings.edit(db_session, listing.id, anon_identity, ListingChanges(title="x"))
    assert edited.price == "$10"


def test_edit_by_non_owner(db_session, other_identity, listing) -> None:
    with pytest.raises(NotFoundError):
        listings.edit(db_session, listing.id, other_identity, ListingChanges(title="mine now"))


def test_edit_expired_listing(db_session, anon_identity, make_listing) -> None:
    expired = make_listing(anon_identity, created_at=utcnow() - timedelta(days=8))
    with pytest.raises(ValidationError):
        listings.edit(db_session, expired.id, anon_identity, ListingChanges(title="late"))


@pytest.mark.parametrize(
    "changes",
    [
        ListingChanges(title="   "),
        ListingChanges(title="t" * 201),
        ListingChanges(description="d" * 5001),
        ListingChanges(images=[f"{i}.jpg" for i in range(11)]),
        ListingChanges(city_id=9999),
        ListingChanges(contact_info={"fax": {"value": "123"}}),
    ],
)
def test_edit_validation(db_session, anon_identity, listing, changes) -> None:
    with pytest.raises(ValidationError):
        listings.edit(db_session, listing.id, anon_identity, changes)


def test_deactivate_hides_listing(db_session, anon_identity, listing) -> None:
    listings.deactivate(db_session, listing.id, anon_identity)

    assert listings.browse(db_session) == []
    assert listings.get_listing(db_session, listing.id).active is False


def test_public_contact_hides_private_entries(listing, anon_identity, other_identity) -> None:
    assert set(listings.public_contact_info(listing, other_identity.id)) == {"email"}
    assert set(listings.public_contact_info(listing, None)) == {"email"}
    assert set(listings.public_contact_info(listing, anon_identity.id)) == {"email", "phone"}


def test_reveal_contact_records_view(db_session, other_identity, listing) -> None:
    contact = listings.reveal_contact(db_session, listing.id, other_identity)

    assert contact["phone"]["value"] == "+1 555 0199"
    view = db_session.scalar(select(ContactView))
    assert view.viewer_id == other_identity.id


def test_owner_reveal_is_not_recorded(db_session, anon_identity, listing) -> None:
    listings.reveal_contact(db_session, listing.id, anon_identity)
    assert db_session.scalar(select(ContactView)) is None


def test_normalize_contact_info_drops_blank_entries() -> None:
    contact = listings.normalize_contact_info(
        {"email": {"value": " a@b.c "}, "phone": {"value": "  "}, "other": None}
    )
    assert contact == {"email": {"value": "a@b.c", "visible": True}}


def test_catalog_listing(db_session, city, category) -> None:
    assert [c.slug for c in listings.list_cities(db_session)] == ["austin"]
    assert [c.slug for c in listings.list_categories(db_session, Section.FOR_SALE)] == ["bikes"]
    assert listings.list_categories(db_session, Section.JOBS) == []
    assert len(listings.list_sections()) == 9

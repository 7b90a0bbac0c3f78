# tests/test_location_resolver.py
import pytest
from sqlmodel import select

from orderdesk.core.errors import ConstraintViolation
from orderdesk.models.location import City, District, Village, make_name_key
from orderdesk.schemas.location import FreeText, Reference, make_ref


def test_make_name_key_folds_cyrillic_case():
    assert make_name_key("  София ") == make_name_key("софия") == "софия"


def test_make_ref_prefers_selected_row():
    assert make_ref(4, "Typed") == Reference(4)
    assert make_ref(None, "  Typed ") == FreeText("Typed")
    assert make_ref(None, "   ") is None
    assert make_ref(None, None) is None


# ----- Cities -----


def test_free_text_city_is_created_once(session, resolver):
    first = resolver.resolve_city(session, FreeText("софия"))
    second = resolver.resolve_city(session, FreeText("София"))

    assert first.id == second.id
    assert second.name == "софия"  # first-seen casing kept
    assert len(session.exec(select(City)).all()) == 1


def test_city_reference_is_looked_up(session, resolver, location_repo):
    city, _ = location_repo.get_or_create_city(session, "Варна")

    assert resolver.resolve_city(session, Reference(city.id)).name == "Варна"


def test_missing_city_reference_degrades_to_none(session, resolver):
    assert resolver.resolve_city(session, Reference(999)) is None


def test_nothing_supplied_resolves_nothing(session, resolver):
    assert resolver.resolve_city(session, None) is None
    assert resolver.resolve_village(session, None) is None


# ----- Districts -----


def test_district_is_scoped_to_city(session, resolver):
    sofia = resolver.resolve_city(session, FreeText("София"))
    plovdiv = resolver.resolve_city(session, FreeText("Пловдив"))

    a = resolver.resolve_district(session, sofia, FreeText("Център"))
    b = resolver.resolve_district(session, plovdiv, FreeText("център"))
    c = resolver.resolve_district(session, sofia, FreeText("ЦЕНТЪР"))

    assert a.id != b.id
    assert a.id == c.id
    assert len(session.exec(select(District)).all()) == 2


def test_district_reference_of_other_city_is_ignored(session, resolver):
    sofia = resolver.resolve_city(session, FreeText("София"))
    plovdiv = resolver.resolve_city(session, FreeText("Пловдив"))
    district = resolver.resolve_district(session, plovdiv, FreeText("Тракия"))

    assert resolver.resolve_district(session, sofia, Reference(district.id)) is None
    assert resolver.resolve_district(session, plovdiv, Reference(district.id)).id == district.id


# ----- Villages -----


def test_village_is_reused_case_insensitively(session, resolver):
    first = resolver.resolve_village(session, FreeText("Бистрица"))
    second = resolver.resolve_village(session, FreeText("БИСТРИЦА"))

    assert first.id == second.id
    assert len(session.exec(select(Village)).all()) == 1


# ----- Order-level resolution -----


def test_resolve_city_order(session, resolver, make_input):
    payload = make_input(location_type="city", city_name="София", district_name="Лозенец")

    location = resolver.resolve(session, payload)

    assert location.location_type == "city"
    assert location.location_name == "София"
    assert location.district == "Лозенец"
    assert location.city_id is not None
    assert location.district_id is not None


def test_resolve_city_order_without_city_degrades(session, resolver, make_input):
    payload = make_input(location_type="city", city_id=42, district_name="Лозенец")

    location = resolver.resolve(session, payload)

    assert location.as_order_fields() == {
        "location_type": "city",
        "location_name": None,
        "district": None,
        "city_id": None,
        "district_id": None,
    }
    # No district is created without a city
    assert session.exec(select(District)).all() == []


def test_resolve_village_order_clears_city_fields(session, resolver, make_input):
    payload = make_input(
        location_type="village",
        location_name="бистрица",
        city_name="София",
        district_name="Лозенец",
    )

    location = resolver.resolve(session, payload)

    assert location.location_name == "бистрица"
    assert location.city_id is None
    assert location.district_id is None
    assert location.district is None
    assert session.exec(select(City)).all() == []


def test_resolve_village_order_by_reference(session, resolver, location_repo, make_input):
    village, _ = location_repo.get_or_create_village(session, "Бистрица")
    payload = make_input(location_type="village", village_id=village.id, location_name="typed")

    location = resolver.resolve(session, payload)

    assert location.location_name == "Бистрица"
    assert [v.name for v in session.exec(select(Village)).all()] == ["Бистрица"]


def test_missing_village_reference_uses_existing_row_for_typed_name(
    session, resolver, location_repo, make_input
):
    location_repo.get_or_create_village(session, "Бистрица")
    payload = make_input(location_type="village", village_id=999, location_name="бистрица")

    location = resolver.resolve(session, payload)

    assert location.location_name == "Бистрица"
    assert len(session.exec(select(Village)).all()) == 1


def test_missing_village_reference_creates_typed_village(session, resolver, make_input):
    payload = make_input(location_type="village", village_id=999, location_name="Ново")

    location = resolver.resolve(session, payload)

    assert location.location_name == "Ново"
    assert [v.name for v in session.exec(select(Village)).all()] == ["Ново"]


def test_missing_village_reference_without_name(session, resolver, make_input):
    location = resolver.resolve(session, make_input(location_type="village", village_id=999))

    assert location.location_type == "village"
    assert location.location_name is None


def test_resolve_without_location_type(session, resolver, make_input):
    payload = make_input(city_name="София", location_name="Бистрица")

    assert resolver.resolve(session, payload).as_order_fields() == {
        "location_type": None,
        "location_name": None,
        "district": None,
        "city_id": None,
        "district_id": None,
    }


# ----- Insert-if-absent races -----


def test_insert_race_is_recovered_by_reselect(session, location_repo):
    existing, _ = location_repo.get_or_create_city(session, "Русе")
    session.commit()

    calls = []

    def racy_lookup():
        # The first lookup misses, as if another transaction had not
        # committed yet; later lookups see the row.
        calls.append(1)
        if len(calls) == 1:
            return None
        return location_repo.get_city_by_name(session, "Русе")

    city, created = location_repo._get_or_insert(
        session,
        racy_lookup,
        lambda: City(name="РУСЕ", name_key=make_name_key("РУСЕ")),
    )

    assert created is False
    assert city.id == existing.id
    assert len(session.exec(select(City)).all()) == 1


def test_unrecoverable_race_raises_constraint_violation(session, resolver, monkeypatch):
    monkeypatch.setattr(
        resolver.repo,
        "get_or_create_city",
        lambda session, name: (None, False),
    )

    with pytest.raises(ConstraintViolation):
        resolver.resolve_city(session, FreeText("Бургас"))

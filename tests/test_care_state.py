"""Tests for needs-care predicates, ordering and counts."""

from datetime import datetime, timedelta

from conftest import NOW, make_dt, make_plant
from verdant.plants import care_state
from verdant.plants.models import CareTaskKind, CareTrack
from verdant.plants.schedule import Schedule, start_of_day

TODAY = start_of_day(NOW)
TOMORROW = TODAY + timedelta(days=1)


class TestIsDue:
    def test_start_of_today_is_due(self):
        assert care_state.is_due(TODAY, NOW) is True

    def test_later_today_is_due(self):
        assert care_state.is_due(NOW.replace(hour=23, minute=59), NOW) is True

    def test_past_is_due(self):
        assert care_state.is_due(NOW - timedelta(days=4), NOW) is True

    def test_start_of_tomorrow_is_not_due(self):
        assert care_state.is_due(TOMORROW, NOW) is False

    def test_missing_date_is_not_due(self):
        assert care_state.is_due(None, NOW) is False

    def test_naive_date_is_read_in_now_timezone(self):
        assert care_state.is_due(datetime(2026, 3, 10, 22, 0), NOW) is True
        assert care_state.is_due(datetime(2026, 3, 11, 0, 0), NOW) is False


class TestPredicates:
    def test_watering_due_today(self):
        plant = make_plant(next_watering=TODAY)
        assert care_state.needs_watering(plant, NOW)
        assert care_state.needs_any_care(plant, NOW)

    def test_watering_due_tomorrow(self):
        plant = make_plant(next_watering=TOMORROW)
        assert not care_state.needs_watering(plant, NOW)
        assert not care_state.needs_any_care(plant, NOW)

    def test_disabled_rotation_never_needs_care(self):
        plant = make_plant(rotation=Schedule.NONE, next_rotation=NOW - timedelta(days=10))
        assert care_state.needs_rotation(plant, NOW) is False

    def test_disabled_fertilizing_never_needs_care(self):
        plant = make_plant(fertilizing=Schedule.NONE, next_fertilizing=TODAY)
        assert care_state.needs_fertilizing(plant, NOW) is False

    def test_enabled_track_without_date_does_not_need_care(self):
        plant = make_plant(rotation=Schedule.MONTHLY, next_rotation=None)
        assert care_state.needs_rotation(plant, NOW) is False

    def test_enabled_tracks_due(self):
        plant = make_plant(
            rotation=Schedule.WEEKLY,
            next_rotation=TODAY,
            fertilizing=Schedule.MONTHLY,
            next_fertilizing=NOW - timedelta(days=1),
        )
        assert care_state.needs_rotation(plant, NOW)
        assert care_state.needs_fertilizing(plant, NOW)
        assert care_state.outstanding_kinds(plant, NOW) == [
            CareTaskKind.ROTATION,
            CareTaskKind.FERTILIZING,
        ]

    def test_needs_care_dispatches_by_kind(self):
        plant = make_plant(next_watering=TODAY, rotation=Schedule.WEEKLY, next_rotation=TOMORROW)
        assert care_state.needs_care(plant, CareTaskKind.WATERING, NOW)
        assert not care_state.needs_care(plant, CareTaskKind.ROTATION, NOW)
        assert not care_state.needs_care(plant, "fertilizing", NOW)


class TestNextCareDate:
    def test_watering_only(self):
        plant = make_plant(next_watering=make_dt(2026, 3, 14))
        assert care_state.next_care_date(plant) == make_dt(2026, 3, 14)

    def test_earliest_of_watering_and_rotation(self):
        plant = make_plant(
            next_watering=make_dt(2026, 3, 14),
            rotation=Schedule.WEEKLY,
            next_rotation=make_dt(2026, 3, 12),
        )
        assert care_state.next_care_date(plant) == make_dt(2026, 3, 12)

    def test_fertilizing_is_not_part_of_the_aggregate(self):
        plant = make_plant(
            next_watering=make_dt(2026, 3, 14),
            fertilizing=Schedule.MONTHLY,
            next_fertilizing=make_dt(2026, 3, 11),
        )
        assert care_state.next_care_date(plant) == make_dt(2026, 3, 14)


def test_sort_by_next_care_date_then_name():
    later = make_plant("Aloe", next_watering=make_dt(2026, 3, 20))
    tie_b = make_plant("Monstera", next_watering=make_dt(2026, 3, 12))
    tie_a = make_plant("Calathea", next_watering=make_dt(2026, 3, 12))
    earliest = make_plant("Pothos", next_watering=make_dt(2026, 3, 15), rotation=Schedule.WEEKLY,
                          next_rotation=make_dt(2026, 3, 11))

    ordered = care_state.sort_plants([later, tie_b, earliest, tie_a])

    assert [p.name for p in ordered] == ["Pothos", "Calathea", "Monstera", "Aloe"]


def test_plants_needing_care_filters_and_sorts():
    due_b = make_plant("Basil", next_watering=TODAY)
    due_a = make_plant("Aloe", next_watering=TODAY)
    overdue = make_plant("Zebra", next_watering=NOW - timedelta(days=2))
    fine = make_plant("Cactus", next_watering=TOMORROW)
    rotate = make_plant("Ivy", next_watering=TOMORROW, rotation=Schedule.WEEKLY, next_rotation=TODAY)

    result = care_state.plants_needing_care([due_b, fine, overdue, rotate, due_a], NOW)

    assert [p.name for p in result] == ["Zebra", "Aloe", "Basil", "Ivy"]


def test_count_care_needs():
    plants = [
        make_plant("A", next_watering=TODAY),
        make_plant("B", next_watering=TODAY, rotation=Schedule.WEEKLY, next_rotation=TODAY),
        make_plant("C", next_watering=TOMORROW, fertilizing=Schedule.MONTHLY, next_fertilizing=TODAY),
        make_plant("D", next_watering=TOMORROW),
    ]

    counts = care_state.count_care_needs(plants, NOW)

    assert (counts.water, counts.rotation, counts.fertilizing) == (2, 1, 1)
    assert counts.any_care == 3
    assert counts.total_tasks == 4
    assert counts.status_text == "4 tasks toward happy plants"


def test_status_text_singular():
    counts = care_state.count_care_needs([make_plant(next_watering=TODAY)], NOW)
    assert counts.status_text == "1 task toward happy plants"


def test_track_lookup_matches_kind():
    plant = make_plant(rotation=Schedule.MONTHLY, next_rotation=TOMORROW)
    assert plant.track(CareTaskKind.ROTATION) == CareTrack(schedule=Schedule.MONTHLY, next_date=TOMORROW)

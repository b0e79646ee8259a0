"""
Tests for performance search and id visibility.
"""

import uuid

import pytest

from festivalhub.core.permissions import AccountStatus, Actor, UserRole
from festivalhub.services.performance_service import PerformanceService


@pytest.fixture
async def catalog(performance_service, festival_service, organizer, artist):
    """Four performances across two festivals."""
    other = await festival_service.create_festival(organizer.id, name="Jazz Nights")
    rock = await festival_service.create_festival(organizer.id, name="Rock Days")

    rows = [
        (rock.id, "Thunder Road", "Rock", ["alice", "bob"]),
        (rock.id, "quiet storm", "rock", ["carol"]),
        (other.id, "Blue Notes", "Jazz", ["alice"]),
        (other.id, "100% Groove", "Funk", ["dave"]),
    ]
    for festival_id, name, genre, members in rows:
        await performance_service.create_performance(
            artist.id, festival_id, name=name, genre=genre, band_members=members
        )


class TestSearch:
    """Word matching and ordering."""

    async def test_no_filters_returns_everything_sorted(self, performance_service, catalog):
        results = await performance_service.search()
        assert [p.name for p in results] == [
            "100% Groove",
            "Blue Notes",
            "quiet storm",
            "Thunder Road",
        ]

    async def test_name_words_must_all_match(self, performance_service, catalog):
        results = await performance_service.search(name="ROAD thun")
        assert [p.name for p in results] == ["Thunder Road"]

        assert await performance_service.search(name="thunder storm") == []

    async def test_genre_is_case_insensitive(self, performance_service, catalog):
        results = await performance_service.search(genre="ROCK")
        assert [p.name for p in results] == ["quiet storm", "Thunder Road"]

    async def test_artist_matches_band_members(self, performance_service, catalog):
        results = await performance_service.search(artist="ALI")
        assert [p.name for p in results] == ["Blue Notes", "Thunder Road"]

    async def test_filters_combine(self, performance_service, catalog):
        results = await performance_service.search(artist="alice", genre="jazz")
        assert [p.name for p in results] == ["Blue Notes"]

    async def test_wildcards_are_literal(self, performance_service, catalog):
        results = await performance_service.search(name="100%")
        assert [p.name for p in results] == ["100% Groove"]

        assert await performance_service.search(name="_") == []


class TestIdVisibility:
    @pytest.mark.parametrize(
        ("role", "visible"),
        [
            (UserRole.ADMIN, True),
            (UserRole.ORGANIZER, True),
            (UserRole.ARTIST, True),
            (UserRole.STAFF, False),
            (UserRole.USER, False),
        ],
    )
    def test_roles(self, role, visible):
        actor = Actor(id=uuid.uuid4(), role=role)
        assert PerformanceService.can_see_ids(actor) is visible

    def test_anonymous(self):
        assert PerformanceService.can_see_ids(None) is False

    def test_inactive(self):
        actor = Actor(id=uuid.uuid4(), role=UserRole.ADMIN, account_status=AccountStatus.INACTIVE)
        assert PerformanceService.can_see_ids(actor) is False

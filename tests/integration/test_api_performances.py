"""
Integration tests for the performance endpoints.

Covers creation, search visibility, transitions, withdrawal and roster
changes through the HTTP layer, including the error kind of each failure.
"""

import uuid

from festivalhub.core.permissions import UserRole
from festivalhub.domain.festival_state import FestivalState

API = "/api/v1"


class TestCreatePerformanceAPI:
    async def test_create(self, test_client, auth_headers, artist, festival):
        headers = await auth_headers(artist)
        response = await test_client.post(
            f"{API}/performances",
            json={
                "festival_id": str(festival.id),
                "name": "Night Owls",
                "genre": "Electronic",
                "duration": 50,
                "band_members": ["dj_one"],
            },
            headers=headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["state"] == "CREATED"
        assert body["creator_id"] == str(artist.id)
        assert body["approved"] is False
        assert body["band_members"] == ["dj_one"]

    async def test_staff_forbidden(self, test_client, auth_headers, staff, festival):
        headers = await auth_headers(staff)
        response = await test_client.post(
            f"{API}/performances",
            json={"festival_id": str(festival.id), "name": "Staff Band"},
            headers=headers,
        )
        assert response.status_code == 403

    async def test_negative_duration(self, test_client, auth_headers, artist, festival):
        headers = await auth_headers(artist)
        response = await test_client.post(
            f"{API}/performances",
            json={"festival_id": str(festival.id), "name": "Time Travellers", "duration": -5},
            headers=headers,
        )
        assert response.status_code == 422

    async def test_duplicate_name(self, test_client, auth_headers, artist, performance):
        headers = await auth_headers(artist)
        response = await test_client.post(
            f"{API}/performances",
            json={"festival_id": str(performance.festival_id), "name": performance.name},
            headers=headers,
        )
        assert response.status_code == 409

    async def test_missing_festival(self, test_client, auth_headers, artist):
        headers = await auth_headers(artist)
        response = await test_client.post(
            f"{API}/performances",
            json={"festival_id": str(uuid.uuid4()), "name": "Lost Band"},
            headers=headers,
        )
        assert response.status_code == 404


class TestSearchAPI:
    """Ids are shown to admins, organizers and artists only."""

    async def test_anonymous_search_hides_ids(self, test_client, performance):
        response = await test_client.get(f"{API}/performances/search", params={"name": "headliners"})

        assert response.status_code == 200
        (result,) = response.json()
        assert result["name"] == "The Headliners"
        assert "id" not in result

    async def test_staff_search_hides_ids(self, test_client, auth_headers, staff, performance):
        headers = await auth_headers(staff)
        response = await test_client.get(f"{API}/performances/search", headers=headers)
        assert "id" not in response.json()[0]

    async def test_artist_search_shows_ids(self, test_client, auth_headers, artist, performance):
        headers = await auth_headers(artist)
        response = await test_client.get(
            f"{API}/performances/search", params={"genre": "rock"}, headers=headers
        )
        assert response.json()[0]["id"] == str(performance.id)

    async def test_no_match(self, test_client, performance):
        response = await test_client.get(f"{API}/performances/search", params={"artist": "nobody"})
        assert response.json() == []


class TestPerformanceTransitionsAPI:
    """Transitions and their error kinds."""

    async def test_submit_review_approve(
        self, test_client, auth_headers, advance_festival, organizer, artist, staff, festival, performance
    ):
        artist_headers = await auth_headers(artist)
        organizer_headers = await auth_headers(organizer)
        staff_headers = await auth_headers(staff)
        base = f"{API}/performances/{performance.id}"

        await advance_festival(organizer.id, festival.id, FestivalState.SUBMISSION)
        response = await test_client.post(f"{base}/submit", headers=artist_headers)
        assert response.json()["state"] == "SUBMITTED"

        await advance_festival(organizer.id, festival.id, FestivalState.ASSIGNMENT)
        response = await test_client.post(
            f"{base}/assign-staff", json={"staff_id": str(staff.id)}, headers=organizer_headers
        )
        assert response.json()["staff_assigned_id"] == str(staff.id)

        await advance_festival(organizer.id, festival.id, FestivalState.REVIEW)
        response = await test_client.post(
            f"{base}/review", json={"score": 8, "comments": "Crowd pleaser"}, headers=staff_headers
        )
        assert response.status_code == 200
        assert response.json()["review_score"] == 8

        await advance_festival(organizer.id, festival.id, FestivalState.SCHEDULING)
        response = await test_client.post(f"{base}/approve", headers=organizer_headers)
        assert response.json()["state"] == "APPROVED"

        response = await test_client.post(f"{base}/approve", headers=organizer_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "PreconditionFailed"

    async def test_review_without_comments(self, test_client, auth_headers, artist, performance):
        headers = await auth_headers(artist)
        response = await test_client.post(
            f"{API}/performances/{performance.id}/review", json={"score": 8}, headers=headers
        )

        assert response.status_code == 422
        assert response.json()["error"] == "ValidationFailed"

    async def test_review_with_text_score(self, test_client, auth_headers, organizer, performance):
        headers = await auth_headers(organizer)
        response = await test_client.post(
            f"{API}/performances/{performance.id}/review",
            json={"score": "great", "comments": "Loved it"},
            headers=headers,
        )
        assert response.status_code == 422

    async def test_reject_acceptable_score(
        self, test_client, auth_headers, advance_festival, review_performances, organizer, festival
    ):
        (performance,) = await review_performances({"Middling": 6})
        await advance_festival(organizer.id, festival.id, FestivalState.SCHEDULING)
        headers = await auth_headers(organizer)

        response = await test_client.post(
            f"{API}/performances/{performance.id}/reject",
            json={"rejection_reason": "Not this year"},
            headers=headers,
        )
        assert response.status_code == 400

    async def test_reject_low_score(
        self, test_client, auth_headers, advance_festival, review_performances, organizer, festival
    ):
        (performance,) = await review_performances({"Off Key": 3})
        await advance_festival(organizer.id, festival.id, FestivalState.SCHEDULING)
        headers = await auth_headers(organizer)

        response = await test_client.post(
            f"{API}/performances/{performance.id}/reject",
            json={"rejection_reason": "Not this year"},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["state"] == "REJECTED"

    async def test_final_submit_and_accept(
        self, test_client, auth_headers, advance_festival, review_performances,
        performance_service, organizer, artist, festival,
    ):
        (performance,) = await review_performances({"Finale": 9})
        await advance_festival(organizer.id, festival.id, FestivalState.SCHEDULING)
        await performance_service.approve(organizer.id, performance.id)
        await advance_festival(organizer.id, festival.id, FestivalState.FINAL_SUBMISSION)

        artist_headers = await auth_headers(artist)
        response = await test_client.post(
            f"{API}/performances/{performance.id}/final-submit",
            json={
                "setlist": ["Opener", "Closer"],
                "preferred_rehearsal_slots": ["Fri 09:00"],
                "preferred_performance_slots": ["Sat 22:00"],
            },
            headers=artist_headers,
        )
        assert response.status_code == 200
        assert response.json()["state"] == "FINAL_SUBMITTED"
        assert response.json()["approved"] is True

        await advance_festival(organizer.id, festival.id, FestivalState.DECISION)
        organizer_headers = await auth_headers(organizer)
        response = await test_client.post(
            f"{API}/performances/{performance.id}/accept", headers=organizer_headers
        )
        assert response.json()["state"] == "SCHEDULED"

    async def test_final_submit_without_setlist(self, test_client, auth_headers, artist, performance):
        headers = await auth_headers(artist)
        response = await test_client.post(
            f"{API}/performances/{performance.id}/final-submit",
            json={"preferred_rehearsal_slots": ["x"], "preferred_performance_slots": ["y"]},
            headers=headers,
        )
        assert response.status_code == 422


class TestWithdrawAPI:
    async def test_withdraw(self, test_client, auth_headers, artist, performance):
        headers = await auth_headers(artist)

        response = await test_client.delete(f"{API}/performances/{performance.id}", headers=headers)
        assert response.status_code == 204

        response = await test_client.get(f"{API}/performances/{performance.id}", headers=headers)
        assert response.status_code == 404

    async def test_withdraw_by_other_artist(self, test_client, auth_headers, other_artist, performance):
        headers = await auth_headers(other_artist)
        response = await test_client.delete(f"{API}/performances/{performance.id}", headers=headers)
        assert response.status_code == 403


class TestBandMembersAPI:
    async def test_add_member_elevates_user(
        self, test_client, auth_headers, create_user, artist, performance
    ):
        fan = await create_user(UserRole.USER, "bass_player")
        headers = await auth_headers(artist)

        response = await test_client.post(
            f"{API}/performances/{performance.id}/add-member",
            json={"username": "bass_player"},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["band_members"] == ["bass_player"]

        fan_headers = await auth_headers(fan)
        response = await test_client.get(f"{API}/auth/me", headers=fan_headers)
        assert response.json()["role"] == "ARTIST"

        response = await test_client.post(
            f"{API}/performances/{performance.id}/add-member",
            json={"username": "bass_player"},
            headers=headers,
        )
        assert response.status_code == 409


class TestUpdatePerformanceAPI:
    async def test_update(self, test_client, auth_headers, artist, performance):
        headers = await auth_headers(artist)
        response = await test_client.put(
            f"{API}/performances/{performance.id}", json={"duration": 75}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["duration"] == 75
        assert response.json()["genre"] == "Rock"

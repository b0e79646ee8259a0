#!/usr/bin/env python3
"""
Complete festival lifecycle flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_festival_lifecycle.py
    python scripts/flow_festival_lifecycle.py --base-url http://localhost:8000 --quiet

Flow:
    1. Register and login an organizer, an artist and a staff member
    2. Create a festival
    3. Create two performances
    4. Submission: submit both
    5. Assignment: assign the staff reviewer
    6. Review: review both
    7. Scheduling: approve both
    8. Final submission: final-submit the first only
    9. Decision: the second is rejected automatically, accept the first
    10. Announce
"""

import argparse
import asyncio
import json
import sys
import uuid
from typing import Any

import httpx

BASE_URL = "http://localhost:8000"
API = "/api/v1"
PASSWORD = "Test@1234"


class FlowError(Exception):
    """An API call in the flow returned an error status."""


class FlowClient:
    """Thin wrapper printing each call, like a human following the flow."""

    def __init__(self, client: httpx.AsyncClient, verbose: bool = True):
        self.client = client
        self.verbose = verbose
        self.step = 0

    def print_step(self, title: str) -> None:
        self.step += 1
        if self.verbose:
            print(f"\n{'='*60}")
            print(f"STEP {self.step}: {title}")
            print("=" * 60)

    async def call(
        self,
        method: str,
        endpoint: str,
        token: str | None = None,
        data: dict | None = None,
        fields: list[str] | None = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        response = await self.client.request(method, f"{API}{endpoint}", headers=headers, json=data)
        body = response.json() if response.content else {}

        if response.status_code >= 400:
            raise FlowError(f"{method} {endpoint} -> {response.status_code}: {json.dumps(body)}")

        if self.verbose:
            shown = {k: body.get(k) for k in fields if k in body} if fields and isinstance(body, dict) else body
            print(f"{method} {endpoint} -> {response.status_code}")
            print(json.dumps(shown, indent=2))
        return body

    async def register_and_login(self, username: str, role: str) -> str:
        await self.call("POST", "/auth/register", data={
            "username": username,
            "password": PASSWORD,
            "confirm_password": PASSWORD,
            "role": role,
        }, fields=["id", "username", "role"])
        tokens = await self.call("POST", "/auth/login", data={
            "username": username,
            "password": PASSWORD,
        }, fields=["token_type"])
        return tokens["access_token"]


async def run_flow(client: httpx.AsyncClient, verbose: bool = True) -> dict[str, Any]:
    """Drive one festival from creation to ANNOUNCED and return a summary."""
    flow = FlowClient(client, verbose=verbose)
    suffix = uuid.uuid4().hex[:8]

    flow.print_step("Register and login participants")
    organizer = await flow.register_and_login(f"org_{suffix}", "ORGANIZER")
    artist = await flow.register_and_login(f"artist_{suffix}", "ARTIST")
    staff_token = await flow.register_and_login(f"staff_{suffix}", "STAFF")
    staff = await flow.call("GET", "/auth/me", token=staff_token)

    flow.print_step("Create festival")
    festival = await flow.call("POST", "/festivals", token=organizer, data={
        "name": f"Summer Sounds {suffix}",
        "description": "Three days of live music",
        "venue": "Riverside Park",
        "start_date": "2027-07-01",
        "end_date": "2027-07-03",
    }, fields=["id", "name", "state"])
    festival_id = festival["id"]

    flow.print_step("Create performances")
    headliner = await flow.call("POST", "/performances", token=artist, data={
        "festival_id": festival_id,
        "name": "The Headliners",
        "genre": "Rock",
        "duration": 90,
    }, fields=["id", "name", "state"])
    opener = await flow.call("POST", "/performances", token=artist, data={
        "festival_id": festival_id,
        "name": "The Openers",
        "genre": "Jazz",
        "duration": 45,
    }, fields=["id", "name", "state"])
    performance_ids = [headliner["id"], opener["id"]]

    flow.print_step("Submission phase")
    await flow.call("POST", f"/festivals/{festival_id}/start-submission", token=organizer, fields=["state"])
    for performance_id in performance_ids:
        await flow.call("POST", f"/performances/{performance_id}/submit", token=artist, fields=["state"])

    flow.print_step("Assignment phase")
    await flow.call("POST", f"/festivals/{festival_id}/start-assignment", token=organizer, fields=["state"])
    for performance_id in performance_ids:
        await flow.call("POST", f"/performances/{performance_id}/assign-staff", token=organizer,
                        data={"staff_id": staff["id"]}, fields=["staff_assigned_id"])

    flow.print_step("Review phase")
    await flow.call("POST", f"/festivals/{festival_id}/start-review", token=organizer, fields=["state"])
    for performance_id, score in zip(performance_ids, (9, 7)):
        await flow.call("POST", f"/performances/{performance_id}/review", token=staff_token,
                        data={"score": score, "comments": "Tight set, great energy"},
                        fields=["state", "review_score"])

    flow.print_step("Scheduling phase")
    await flow.call("POST", f"/festivals/{festival_id}/start-scheduling", token=organizer, fields=["state"])
    for performance_id in performance_ids:
        await flow.call("POST", f"/performances/{performance_id}/approve", token=organizer, fields=["state"])

    flow.print_step("Final submission phase")
    await flow.call("POST", f"/festivals/{festival_id}/start-final-submission", token=organizer,
                    fields=["state"])
    await flow.call("POST", f"/performances/{headliner['id']}/final-submit", token=artist, data={
        "setlist": ["Opening Riff", "Encore"],
        "preferred_rehearsal_slots": ["2027-06-30T10:00"],
        "preferred_performance_slots": ["2027-07-02T21:00"],
    }, fields=["state"])

    flow.print_step("Decision phase")
    decision = await flow.call("POST", f"/festivals/{festival_id}/start-decision", token=organizer,
                               fields=["rejected_performances"])
    scheduled = await flow.call("POST", f"/performances/{headliner['id']}/accept", token=organizer,
                                fields=["name", "state"])

    flow.print_step("Announce")
    announced = await flow.call("POST", f"/festivals/{festival_id}/announce", token=organizer,
                                fields=["name", "state"])

    summary = {
        "festival_id": festival_id,
        "festival_state": announced["state"],
        "scheduled": [scheduled["name"]],
        "rejected": decision["rejected_performances"],
    }
    if verbose:
        print("\n" + "=" * 60)
        print("FULL FLOW COMPLETE")
        print("=" * 60)
        print(json.dumps(summary, indent=2))
    return summary


async def _main(base_url: str, verbose: bool) -> None:
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        await run_flow(client, verbose=verbose)


def main():
    parser = argparse.ArgumentParser(description="Complete festival lifecycle flow")
    parser.add_argument("--base-url", default=BASE_URL, help="API server URL")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    args = parser.parse_args()

    try:
        asyncio.run(_main(args.base_url, verbose=not args.quiet))
    except FlowError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

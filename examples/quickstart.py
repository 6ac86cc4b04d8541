#!/usr/bin/env python3
"""
tasklist quickstart — the full account + task lifecycle in one script.

Registers an account → logs in again → creates tasks → completes one →
deletes one → shows that a second account cannot see or touch them.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:3000
"""

import sys
import uuid

import httpx

BASE = "http://localhost:3000/api"


def _register(client: httpx.Client, email: str, password: str) -> dict:
    resp = client.post("/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, f"Failed: {resp.text}"
    return resp.json()


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        print("Start it with:  uvicorn tasklist.main:app --port 3000")
        sys.exit(1)
    health = resp.json()
    print(f"  Status:  {health['status']}")
    print(f"  Storage: {'✓' if health['storage'] == 'ok' else '✗'}")

    # ── Register ──────────────────────────────────────────────────
    email = f"Demo-{run_id}@Example.com"
    print(f"\n1. Registering {email}...")
    session = _register(client, email, "demo-password")
    print(f"   Account: {session['user']['email']} ({session['user']['id'][:8]}...)")

    # ── Login (email is case-insensitive) ─────────────────────────
    print("\n2. Logging in with the upper-cased email...")
    resp = client.post("/auth/login", json={"email": email.upper(), "password": "demo-password"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    assert resp.json()["user"]["id"] == session["user"]["id"]
    auth = {"Authorization": f"Bearer {resp.json()['token']}"}
    print("   Same account, fresh token")

    # ── Tasks ─────────────────────────────────────────────────────
    print("\n3. Creating tasks...")
    ids = []
    for title in ("Write release notes", "Tag v0.1.0", "Announce"):
        resp = client.post("/todos", json={"title": title}, headers=auth)
        assert resp.status_code == 201, f"Failed: {resp.text}"
        ids.append(resp.json()["id"])
        print(f"   #{ids[-1]} {title}")

    print("\n4. Completing the first task...")
    resp = client.patch(f"/todos/{ids[0]}", json={"completed": True}, headers=auth)
    assert resp.json()["completed"] is True

    print("\n5. Deleting the last task...")
    resp = client.delete(f"/todos/{ids[-1]}", headers=auth)
    assert resp.json() == {"deleted": True, "id": ids[-1]}

    resp = client.get("/todos", headers=auth)
    for task in resp.json():
        print(f"   [{'x' if task['completed'] else ' '}] #{task['id']} {task['title']}")

    # ── Isolation ─────────────────────────────────────────────────
    print("\n6. A second account sees nothing and cannot delete...")
    other = _register(client, f"other-{run_id}@example.com", "demo-password")
    other_auth = {"Authorization": f"Bearer {other['token']}"}
    assert client.get("/todos", headers=other_auth).json() == []
    resp = client.delete(f"/todos/{ids[0]}", headers=other_auth)
    print(f"   DELETE someone else's task → {resp.status_code} {resp.json()['error']}")

    print("\nDone.")


if __name__ == "__main__":
    main()

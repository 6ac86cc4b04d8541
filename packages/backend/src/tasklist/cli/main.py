"""tasklist CLI — register, log in, and manage your tasks from a terminal.

Usage:
    tasklist register you@example.com          # Create an account (prompts for password)
    tasklist login you@example.com             # Log in, stores the session token
    tasklist whoami                            # Show the account behind the stored token
    tasklist todos list                        # List your tasks, newest first
    tasklist todos add "buy milk"              # Add a task
    tasklist todos done 3                      # Mark task #3 completed (--undo to reopen)
    tasklist todos rm 3                        # Delete task #3
    tasklist logout                            # Forget the stored token

The session (token + user) lives in a small JSON file, by default
~/.tasklist/session.json (override with TASKLIST_SESSION_FILE).
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_SESSION_FILE = "~/.tasklist/session.json"


def _api_url() -> str:
    return os.environ.get("TASKLIST_API_URL", DEFAULT_API_URL).rstrip("/")


def _session_path() -> Path:
    return Path(os.environ.get("TASKLIST_SESSION_FILE", DEFAULT_SESSION_FILE)).expanduser()


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the tasklist backend."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _load_session() -> Optional[dict]:
    path = _session_path()
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError):
        return None


def _save_session(data: dict) -> None:
    path = _session_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    # Owner-only from creation; chmod also covers a file left by an older run.
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    os.fchmod(fd, 0o600)
    with os.fdopen(fd, "w") as f:
        json.dump({"token": data["token"], "user": data["user"]}, f)


def _clear_session() -> None:
    _session_path().unlink(missing_ok=True)


def _auth_headers() -> dict:
    session = _load_session()
    if not session or not session.get("token"):
        click.secho("Not logged in. Run: tasklist login <email>", fg="red", err=True)
        sys.exit(1)
    return {"Authorization": f"Bearer {session['token']}"}


def _check(r: httpx.Response) -> None:
    """Exit with the server's error code on a non-2xx response."""
    if not r.is_error:
        return
    try:
        code = r.json().get("error", "request_failed")
    except ValueError:
        code = "request_failed"
    click.secho(f"Error: {code} (HTTP {r.status_code})", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="tasklist")
def main():
    """tasklist — your tasks, behind a login."""


# ---------------------------------------------------------------------------
# Account commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def register(email: str, password: str):
    """Create an account and log in."""
    _run(_auth_impl("/api/auth/register", email, password))


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and store the session token."""
    _run(_auth_impl("/api/auth/login", email, password))


async def _auth_impl(path: str, email: str, password: str):
    async with _client() as c:
        r = await c.post(path, json={"email": email, "password": password})
        _check(r)
        data = r.json()
    _save_session(data)
    click.secho(f"Logged in as {data['user']['email']}", fg="green")


@main.command()
def logout():
    """Forget the stored session token."""
    _clear_session()
    click.echo("Logged out.")


@main.command()
def whoami():
    """Show the account the stored token belongs to."""
    _run(_whoami_impl())


async def _whoami_impl():
    headers = _auth_headers()
    async with _client() as c:
        r = await c.get("/api/auth/me", headers=headers)
        _check(r)
        me = r.json()
    click.echo(f"{me['email']} ({me['id']})")


# ---------------------------------------------------------------------------
# tasklist todos ...
# ---------------------------------------------------------------------------


@main.group()
def todos():
    """List and edit your tasks."""


@todos.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def list_todos(as_json: bool):
    """List your tasks, newest first."""
    _run(_list_impl(as_json))


async def _list_impl(as_json: bool):
    headers = _auth_headers()
    async with _client() as c:
        r = await c.get("/api/todos", headers=headers)
        _check(r)
        items = r.json()

    if as_json:
        click.echo(json.dumps(items, indent=2, default=str))
        return
    if not items:
        click.echo("No tasks yet.")
        return
    rows = [{**t, "done": "x" if t["completed"] else ""} for t in items]
    _print_table(rows, [("ID", "id", 6), ("DONE", "done", 4), ("TITLE", "title", 50)])


@todos.command("add")
@click.argument("title")
def add_todo(title: str):
    """Add a task."""
    _run(_add_impl(title))


async def _add_impl(title: str):
    headers = _auth_headers()
    async with _client() as c:
        r = await c.post("/api/todos", json={"title": title}, headers=headers)
        _check(r)
        task = r.json()
    click.secho(f"Task #{task['id']} created", fg="green")


@todos.command("done")
@click.argument("task_id", type=int)
@click.option("--undo", is_flag=True, help="Mark the task as not completed")
def done_todo(task_id: int, undo: bool):
    """Mark a task completed."""
    _run(_done_impl(task_id, not undo))


async def _done_impl(task_id: int, completed: bool):
    headers = _auth_headers()
    async with _client() as c:
        r = await c.patch(
            f"/api/todos/{task_id}", json={"completed": completed}, headers=headers
        )
        _check(r)
    state = "completed" if completed else "reopened"
    click.secho(f"Task #{task_id} {state}", fg="green")


@todos.command("rm")
@click.argument("task_id", type=int)
def remove_todo(task_id: int):
    """Delete a task."""
    _run(_rm_impl(task_id))


async def _rm_impl(task_id: int):
    headers = _auth_headers()
    async with _client() as c:
        r = await c.delete(f"/api/todos/{task_id}", headers=headers)
        _check(r)
    click.secho(f"Task #{task_id} deleted", fg="green")


if __name__ == "__main__":
    main()

"""acw-schedule MCP server.

Exposes the schedule access layer as tools: directory and schedule reads,
alias lookup, live hours, history, team overview, and the two shift
mutations (send and update).
"""
from __future__ import annotations

import argparse
import logging
import os
from dataclasses import asdict
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import HistoryWeek, ScheduleClient, TeamMemberStatus
from .config import load_env, runtime_config

mcp = FastMCP(
    "acw-schedule",
    host=os.getenv("HOST", "0.0.0.0"),
    port=int(os.getenv("PORT", "8080")),
    instructions=(
        "Schedule access for the ACW crew. "
        "Reads the employee directory and weekly schedules from the ACW web app, "
        "resolves employee aliases, computes live hours for open shifts, "
        "and sends or updates shifts on behalf of a manager."
    ),
)

_ENV_FILE: str | None = None
_CLIENT: ScheduleClient | None = None


def _client() -> ScheduleClient:
    global _CLIENT
    if _CLIENT is None:
        load_env(_ENV_FILE or os.getenv("ACW_ENV_FILE"))
        _CLIENT = ScheduleClient(runtime_config())
    return _CLIENT


def _history_row(week: HistoryWeek) -> dict[str, Any]:
    return {
        "offset": week.offset,
        "label": week.label,
        "total": round(week.total, 2),
        "days": [asdict(d) for d in week.days],
    }


def _team_row(member: TeamMemberStatus) -> dict[str, Any]:
    return {
        **member.record.to_dict(),
        "ok": member.schedule.ok,
        "total": round(member.schedule.total, 2),
        "live_state": member.live.state.value,
        "live_hours": round(member.live.hours, 2),
        "live_total": round(member.live.total, 2),
    }


# -- Reads --

@mcp.tool()
async def get_directory() -> dict[str, Any]:
    """Employee directory as returned by the backend (cached for a few minutes)."""
    return await _client().get_directory()


@mcp.tool()
async def get_schedule(identifier: str, week_offset: int = 0) -> dict[str, Any]:
    """Normalized week for an employee email (or phone).

    week_offset: 0 = current week, 1 = last week, -1 = next week.
    """
    return (await _client().get_schedule(identifier, week_offset)).to_dict()


@mcp.tool()
async def resolve_alias(email: str | None = None, phone: str | None = None) -> dict[str, Any]:
    """Canonical schedule alias (uppercase surname) for an email or phone."""
    if not email and not phone:
        raise ValueError("email or phone is required")
    res = await _client().resolve_alias(email=email, phone=phone)
    return {"alias": res.alias, "foundBy": res.found_by}


@mcp.tool()
async def live_status(email: str) -> dict[str, Any]:
    """Today's live state (NONE / IN_PROGRESS / COMPLETED) and hours for an employee."""
    status = await _client().live_status(email)
    return {
        "state": status.state.value,
        "hours": round(status.hours, 2),
        "total": round(status.total, 2),
    }


@mcp.tool()
async def schedule_history(email: str, weeks: int = 5) -> list[dict[str, Any]]:
    """Totals and days for the current week and the previous weeks, newest first."""
    if weeks < 1:
        raise ValueError("weeks must be >= 1")
    return [_history_row(w) for w in await _client().get_history(email, weeks)]


@mcp.tool()
async def team_overview(page: int = 0, page_size: int = 8) -> dict[str, Any]:
    """One page of the roster with week totals and live hours."""
    client = _client()
    records = await client.directory_records()
    start = max(0, page) * page_size
    members = await client.team_overview(records[start : start + page_size])
    return {
        "page": page,
        "pages": max(1, -(-len(records) // page_size)),
        "members": [_team_row(m) for m in members],
    }


# -- Mutations --

@mcp.tool()
async def send_shift(target_email: str, action: str, actor: str | None = None) -> dict[str, Any]:
    """Message an employee their shift. action: sendtoday or sendtomorrow."""
    return (await _client().send_shift(target_email, action, actor)).to_dict()


@mcp.tool()
async def update_shift(target_email: str, day: str, new_shift: str, actor: str) -> dict[str, Any]:
    """Overwrite one day's shift text (day in English or Spanish, e.g. Mon / Lunes)."""
    return (await _client().update_shift(target_email, day, new_shift, actor)).to_dict()


# -- Server entrypoints --

def http_app(api_key: str | None = None):
    """Streamable-HTTP app with ``/health`` and, when ``api_key`` is set, bearer auth."""
    from starlette.middleware.base import BaseHTTPMiddleware
    from starlette.responses import JSONResponse, PlainTextResponse
    from starlette.routing import Route

    class BearerAuth(BaseHTTPMiddleware):
        async def dispatch(self, request, call_next):
            if request.url.path == "/health":
                return await call_next(request)
            auth = request.headers.get("authorization", "")
            if auth != f"Bearer {api_key}":
                return JSONResponse({"error": "unauthorized"}, status_code=401)
            return await call_next(request)

    app = mcp.streamable_http_app()
    if api_key:
        app.add_middleware(BearerAuth)
    app.routes.append(Route("/health", lambda request: PlainTextResponse("ok")))
    return app


async def _serve_http(log_level: str) -> None:
    import uvicorn

    app = http_app(os.getenv("MCP_API_KEY"))
    server = uvicorn.Server(
        uvicorn.Config(app, host=mcp.settings.host, port=mcp.settings.port, log_level=log_level)
    )
    try:
        await server.serve()
    finally:
        if _CLIENT is not None:
            await _CLIENT.aclose()


def main() -> None:
    global _ENV_FILE

    parser = argparse.ArgumentParser(description="Serve the ACW schedule tools over MCP")
    parser.add_argument("--env-file", default=None, help="Path to .env file (default: ACW_ENV_FILE)")
    parser.add_argument(
        "--transport",
        default=None,
        choices=["stdio", "sse", "streamable-http"],
        help="MCP transport (default: streamable-http when PORT is set, else stdio)",
    )
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    args = parser.parse_args()
    _ENV_FILE = args.env_file
    logging.basicConfig(level=args.log_level.upper())

    transport = args.transport or ("streamable-http" if os.getenv("PORT") else "stdio")
    if transport == "streamable-http":
        import anyio

        anyio.run(_serve_http, args.log_level)
    else:
        mcp.run(transport=transport)


if __name__ == "__main__":
    main()

import argparse
import asyncio
import json
import logging
import re
import sys
from logging import getLogger

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from src.clockodo import ClockodoClient, ConfigurationError
from src.models import dump

logger = getLogger(__name__)

SERVER_NAME = "clockodo-mcp-server"
ISO_DATETIME = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z?")
USER_ID = re.compile(r"\d+")


def to_json(records) -> str:
    return json.dumps(dump(records), indent=2)


async def read_users(client: ClockodoClient) -> str:
    try:
        users = await asyncio.to_thread(client.get_users)
    except Exception as e:
        raise ValueError(f"Failed to fetch users: {e}") from e
    return to_json(users)


async def read_entries(client: ClockodoClient, user_id: str, time_since: str, time_until: str) -> str:
    try:
        if not USER_ID.fullmatch(user_id):
            raise ValueError("Invalid userId: must be a number")
        if not ISO_DATETIME.fullmatch(time_since) or not ISO_DATETIME.fullmatch(time_until):
            raise ValueError("Invalid date format. Use ISO 8601 format: YYYY-MM-DDTHH:mm:ssZ")

        entries = await asyncio.to_thread(client.get_entries, int(user_id), time_since, time_until)
    except Exception as e:
        raise ValueError(f"Failed to fetch entries: {e}") from e
    return to_json(entries)


async def read_projects(client: ClockodoClient) -> str:
    try:
        projects = await asyncio.to_thread(client.get_projects)
    except Exception as e:
        raise ValueError(f"Failed to fetch projects: {e}") from e
    return to_json(projects)


def create_server(client: ClockodoClient) -> FastMCP:
    mcp = FastMCP(SERVER_NAME)

    @mcp.resource(
        "clockodo://users",
        name="users",
        title="Clockodo Users",
        description="All registered users from your Clockodo instance",
        mime_type="application/json",
    )
    async def users() -> str:
        return await read_users(client)

    @mcp.resource(
        "clockodo://entries/{user_id}/{time_since}/{time_until}",
        name="entries",
        title="Clockodo Entries",
        description=(
            "Time entries for a specific user within a given timeframe. "
            "Use format: clockodo://entries/{user_id}/{time_since}/{time_until} where time_since and "
            "time_until are ISO 8601 dates (e.g., 2025-09-01T00:00:00Z)"
        ),
        mime_type="application/json",
    )
    async def entries(user_id: str, time_since: str, time_until: str) -> str:
        return await read_entries(client, user_id, time_since, time_until)

    @mcp.resource(
        "clockodo://projects",
        name="projects",
        title="Clockodo Projects",
        description="All projects from your Clockodo instance",
        mime_type="application/json",
    )
    async def projects() -> str:
        return await read_projects(client)

    return mcp


def setup_logging(debug=False, log_file=None):
    # stdout carries the MCP stream, so logs go to stderr
    root = getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(logging.DEBUG if debug else logging.INFO)
        handler.setFormatter(formatter)
        root.addHandler(handler)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serves Clockodo users, entries and projects as MCP resources")
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Run in debug mode"
    )
    parser.add_argument(
        "-l",
        "--log-file",
        help="Also write the log to this file"
    )
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logging(debug=args.debug, log_file=args.log_file)

    try:
        client = ClockodoClient(debug=args.debug)
    except ConfigurationError as e:
        logger.error(f"Cannot start {SERVER_NAME}: {e}")
        return 1

    logger.info(f"Starting {SERVER_NAME} against {client.base_url}")
    create_server(client).run(transport="stdio")
    return 0


if __name__ == "__main__":
    sys.exit(main())

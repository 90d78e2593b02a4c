# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from coreason_resolver.models import Outcome
from coreason_resolver.resolver import ResolverAsync
from coreason_resolver.utils.logger import logger

_resolver: ResolverAsync | None = None

# Initialize MCP Server
mcp = FastMCP("coreason-resolver")


def get_resolver() -> ResolverAsync:
    """Builds the resolver on first use from the process configuration."""
    global _resolver
    if _resolver is None:
        _resolver = ResolverAsync()
    return _resolver


@mcp.tool()  # type: ignore[misc]
async def resolve_record(record_id: str) -> list[TextContent]:
    """
    Check that a record, its linked document and the stored file all exist.
    Returns the outcome tag followed by diagnostic lines.
    """
    try:
        report = await get_resolver().resolve(record_id)
    except ValueError as e:
        return [TextContent(type="text", text=f"Error resolving record: {e!s}")]

    output = [TextContent(type="text", text=f"Outcome: {report.outcome.value}")]

    if report.record:
        output.append(TextContent(type="text", text=f"Record: {report.record.id} (status: {report.record.status})"))

    if report.storage_path:
        output.append(TextContent(type="text", text=f"Storage Path: {report.storage_path}"))

    if report.outcome is Outcome.SUCCESS:
        output.append(TextContent(type="text", text=f"Size: {report.size} bytes"))
        output.append(TextContent(type="text", text=f"Type: {report.content_type}"))
    else:
        output.append(TextContent(type="text", text=f"Message: {report.message}"))
        if report.detail:
            output.append(TextContent(type="text", text=f"Detail: {report.detail}"))

    return output


@mcp.tool()  # type: ignore[misc]
async def inspect_table(table: str) -> list[str]:
    """
    List the column names of a table, read from a sample row.
    """
    try:
        result = await get_resolver().inspect_table(table)
    except ValueError as e:
        return [f"Error inspecting table: {e!s}"]

    if result.error:
        return [f"Error fetching {table}: {result.error.get('message', result.error)}"]
    if not result.columns:
        return [f"No rows found in {table} to inspect."]
    return result.columns


@mcp.tool()  # type: ignore[misc]
async def inspect_record(record_id: str) -> list[str]:
    """
    Read a record and its linked document rows separately, without the join.
    """
    try:
        result = await get_resolver().inspect_record(record_id)
    except ValueError as e:
        return [f"Error inspecting record: {e!s}"]

    output = [f"Record: {result.record_error or result.record}"]
    if result.documents_error:
        output.append(f"Documents: {result.documents_error}")
    else:
        output.append(f"Documents: {len(result.documents)}")
        output.extend(str(doc) for doc in result.documents)
    return output


def main() -> None:
    """Entry point for the MCP server."""
    logger.info("Starting coreason-resolver MCP server")
    mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()

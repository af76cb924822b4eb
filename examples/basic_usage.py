#!/usr/bin/env python3
"""Basic usage example for SeqThink MCP.

Demonstrates the core workflow through the in-process FastMCP client:
1. Open an analysis session with a framework
2. Record sequential thoughts (including a branch) against it
3. Score candidate solutions
4. Export the session as Markdown

Run: python examples/basic_usage.py
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from fastmcp import Client

from seqthink.server import mcp


async def call(client: Client, tool: str, args: dict[str, Any]) -> dict[str, Any]:
    result = await client.call_tool(tool, args)
    data: dict[str, Any] = json.loads(result.data)
    if data.get("status") == "failed":
        raise RuntimeError(f"{tool} failed: {data['error']}")
    return data


async def main() -> None:
    """Run basic sequential-thinking workflow."""
    print("=" * 60)
    print("SeqThink Basic Usage Example")
    print("=" * 60)

    async with Client(mcp) as client:
        # 1. Open an analysis session
        print("\n[1] Analyzing problem...")
        analysis = await call(
            client,
            "analyze_problem",
            {
                "problem": "Nightly data export misses its 6am deadline twice a week",
                "framework": "root-cause",
                "context": "Export runs on a shared batch cluster",
                "stakeholders": ["finance", "data platform"],
            },
        )
        session_id = analysis["session_id"]
        print(f"    Session: {session_id}")
        print(f"    Next steps: {', '.join(analysis['next_steps'])}")

        # 2. Record thoughts
        print("\n[2] Recording thoughts...")
        steps: list[dict[str, Any]] = [
            {"text": "Late runs coincide with month-end batch load", "index": 1},
            {"text": "Export queues behind reconciliation jobs", "index": 2},
            {
                "text": "Alternative: the export query itself regressed",
                "index": 3,
                "branch_origin_index": 1,
                "branch_id": "query-regression",
            },
            {"text": "Queue priority is the root cause", "index": 4},
        ]
        for step in steps:
            result = await call(
                client,
                "submit_thought",
                {
                    **step,
                    "total_estimate": 3,
                    "continuation_needed": step["index"] < 4,
                    "session_id": session_id,
                },
            )
            print(
                f"    Thought {result['index']}/{result['total_estimate']} "
                f"(history={result['history_length']}, branches={result['branch_ids']})"
            )

        # 3. Score solutions
        print("\n[3] Planning solutions...")
        plan = await call(
            client,
            "plan_solution",
            {
                "problem": "Export misses deadline",
                "solutions": [
                    {"title": "Dedicated queue", "description": "Give exports their own queue",
                     "effort": "medium", "impact": "high", "risk": "low"},
                    {"title": "Bigger cluster", "description": "Add batch capacity",
                     "effort": "high", "impact": "medium", "risk": "low"},
                ],
            },
        )
        print(f"    {plan['recommendation']}")

        # 4. Export
        print("\n[4] Exporting session...")
        exported = await call(
            client, "export_analysis", {"session_id": session_id, "format": "markdown"}
        )
        print(exported["content"])

    print("\n" + "=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())

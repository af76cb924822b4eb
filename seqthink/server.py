"""SeqThink MCP Server.

FastMCP implementation exposing sequential-thinking and analysis tools.
The calling LLM does the reasoning; these tools record, score and report.

Tools:
1. submit_thought - Record a step in a sequential reasoning chain
2. analyze_problem - Apply an analysis framework (opens a session)
3. plan_solution - Score candidate solutions (opens a session)
4. evaluate_options - Weighted multi-criteria option ranking
5. save_session / export_analysis - Session persistence and reports
6. run_* - Synthetic reasoning-thread scorers
7. status - Server/session status

Run with: seqthink
Or: python -m seqthink.server
"""

# Note: We intentionally do NOT use `from __future__ import annotations` here
# because it causes issues with Pydantic/FastMCP type resolution at decorator time.

from typing import Annotated, Any

import orjson
from dotenv import load_dotenv
from fastmcp import FastMCP
from loguru import logger
from pydantic import WithJsonSchema

from seqthink import __version__
from seqthink.config import get_config
from seqthink.tools.frameworks import (
    apply_framework,
    evaluate_solutions,
    evaluation_analysis,
    get_framework,
    rank_options,
    recommend_solution,
    score_options,
)
from seqthink.tools.quantum_engine import QuantumReasoningEngine
from seqthink.tools.request_types import (
    CriterionInput,
    OptionInput,
    SolutionInput,
    parse_items,
)
from seqthink.tools.thinking_types import (
    QuantumThought,
    ReasoningThread,
    SessionKind,
    SessionStatus,
    utc_now,
)
from seqthink.tools.thought_ledger import ThoughtLedger
from seqthink.utils.errors import (
    SeqThinkException,
    SessionNotFoundError,
    ToolExecutionError,
    ValidationError,
)
from seqthink.utils.logging import configure_logging, log_context
from seqthink.utils.session_store import SessionStore

# Load environment variables from .env file (for local development)
load_dotenv()

# Thought fields are advertised with their JSON types but passed through
# unconverted, so ThoughtRecord rejects "2" or true for an index by name.
IndexParam = Annotated[Any, WithJsonSchema({"type": "integer", "minimum": 1})]
FlagParam = Annotated[Any, WithJsonSchema({"type": "boolean"})]
OptionalIndexParam = Annotated[
    Any, WithJsonSchema({"anyOf": [{"type": "integer", "minimum": 1}, {"type": "null"}]})
]
OptionalFlagParam = Annotated[Any, WithJsonSchema({"anyOf": [{"type": "boolean"}, {"type": "null"}]})]


def _json(data: dict[str, Any] | None, *, indent: bool = True) -> str:
    """Serialize data to JSON string with proper typing.

    Type-safe wrapper around orjson.dumps that returns str.
    """
    if data is None:
        data = {}
    opts = orjson.OPT_INDENT_2 if indent else 0
    result: bytes = orjson.dumps(data, option=opts, default=str)
    return result.decode("utf-8")


def _failure(error: SeqThinkException) -> str:
    """Failure envelope for an anticipated error."""
    payload: dict[str, Any] = {"error": str(error), "status": "failed"}
    if isinstance(error, ValidationError):
        payload["field"] = error.field
    elif isinstance(error, SessionNotFoundError):
        payload["session_id"] = error.session_id
    return _json(payload, indent=False)


def _unexpected(tool_name: str, error: Exception) -> str:
    """Failure envelope for an unanticipated error."""
    logger.error(f"{tool_name} failed: {error}")
    return _json(ToolExecutionError(tool_name, str(error)).to_dict(), indent=False)


TOOL_NAMES = (
    "submit_thought",
    "analyze_problem",
    "plan_solution",
    "evaluate_options",
    "save_session",
    "export_analysis",
    "run_quantum_reasoning",
    "run_ai_coach",
    "run_fusion_analysis",
    "run_predict_outcome",
    "run_optimize_thinking",
    "status",
)


# =============================================================================
# Initialize FastMCP Server
# =============================================================================

mcp = FastMCP(
    name=get_config().server.name,
    instructions="""SeqThink MCP Server - Sequential thinking and structured analysis.

ARCHITECTURE: You (the LLM) do ALL reasoning. These tools RECORD, SCORE, and REPORT.

=== SEQUENTIAL THINKING ===

1. submit_thought(text, index, total_estimate, continuation_needed, ...)
   - One call per reasoning step; index is 1-based
   - Revise an earlier step: is_revision=true, revises_index=N
   - Branch from a step: branch_origin_index=N, branch_id="name"
   - Pass session_id to attach the step to an analysis session

=== STRUCTURED ANALYSIS (opens a session, returns session_id) ===

2. analyze_problem(problem, framework) - swot | root-cause | design-thinking | systems
3. plan_solution(problem, solutions) - Scores effort/impact/risk, recommends one
4. evaluate_options(options, criteria) - Weighted multi-criteria ranking

=== SESSIONS ===

5. save_session(session_id, title?, notes?) - Rename/annotate a session
6. export_analysis(session_id, format) - json | markdown | summary

=== REASONING-THREAD SCORERS (synthetic, deterministic) ===

7. run_quantum_reasoning(problem, strategies?) - Parallel strategy threads + fusion
8. run_ai_coach(thoughts) - Coaching suggestions for a set of thoughts
9. run_fusion_analysis(threads) - Cluster and synthesise thread insights
10. run_predict_outcome(solution) - Success forecast
11. run_optimize_thinking(session) - Thinking-process recommendations

12. status(session_id?) - Server or session status

WORKFLOW:
1. analyze_problem(problem="Churn is rising", framework="root-cause") -> session_id
2. submit_thought(text="...", index=1, total_estimate=5, continuation_needed=true,
                  session_id=ID)
3. export_analysis(session_id=ID, format="markdown")
""",
)


# =============================================================================
# Tool Instances
# =============================================================================

_session_store: SessionStore | None = None
_thought_ledger: ThoughtLedger | None = None
_engine: QuantumReasoningEngine | None = None


def get_session_store() -> SessionStore:
    """Get or create the session store, loading persisted sessions once."""
    global _session_store
    if _session_store is None:
        sessions_dir = get_config().storage.get_validated_sessions_dir()
        _session_store = SessionStore(sessions_dir)
        _session_store.load()
    return _session_store


def get_thought_ledger() -> ThoughtLedger:
    """Get or create the process-wide thought ledger."""
    global _thought_ledger
    if _thought_ledger is None:
        config = get_config()
        _thought_ledger = ThoughtLedger(
            store=get_session_store(),
            render_thoughts=config.logging.render_thoughts,
            max_session_thoughts=config.input_limits.max_thoughts_per_session,
        )
    return _thought_ledger


def get_engine() -> QuantumReasoningEngine:
    global _engine
    if _engine is None:
        _engine = QuantumReasoningEngine()
    return _engine


def reset_state() -> None:
    """Drop the store, ledger and engine (for testing)."""
    global _session_store, _thought_ledger, _engine
    _session_store = None
    _thought_ledger = None
    _engine = None


# =============================================================================
# Input Validation Helpers (CWE-400 Prevention)
# =============================================================================


def _validate_input_sizes(
    problem: str | None = None,
    text: str | None = None,
    context: str | None = None,
    notes: str | None = None,
) -> None:
    """Reject oversized free-text inputs.

    Raises:
        ValidationError: Naming the first oversized field.

    """
    limits = get_config().input_limits
    checks = (
        ("problem", problem, limits.max_problem_size),
        ("text", text, limits.max_thought_size),
        ("context", context, limits.max_problem_size),
        ("notes", notes, limits.max_thought_size),
    )
    for field_name, value, max_size in checks:
        if value and len(value) > max_size:
            raise ValidationError(
                field_name, f"exceeds maximum size ({max_size:,} chars, got {len(value):,})"
            )


def _require_items(items: list[Any] | None, field_name: str) -> list[Any]:
    if not items:
        raise ValidationError(field_name, "at least one entry is required")
    return items


# =============================================================================
# TOOL 1: SUBMIT_THOUGHT
# =============================================================================


@mcp.tool
async def submit_thought(
    text: str,
    index: IndexParam,
    total_estimate: IndexParam,
    continuation_needed: FlagParam,
    is_revision: OptionalFlagParam = None,
    revises_index: OptionalIndexParam = None,
    branch_origin_index: OptionalIndexParam = None,
    branch_id: str | None = None,
    more_thoughts_needed: OptionalFlagParam = None,
    confidence: float | None = None,
    tags: list[str] | None = None,
    session_id: str | None = None,
) -> str:
    """Record one step of a sequential reasoning chain.

    Steps are kept in submission order. Revisions point back at an earlier
    step; branches fork a named alternative from an earlier step. If
    ``index`` exceeds ``total_estimate`` the estimate is raised to match.

    Args:
        text: The reasoning step itself
        index: 1-based position of this step
        total_estimate: Current estimate of total steps needed
        continuation_needed: Whether another step should follow
        is_revision: This step reconsiders an earlier one
        revises_index: Index of the step being revised
        branch_origin_index: Index of the step this branch forks from
        branch_id: Name of the branch (filed only with branch_origin_index)
        more_thoughts_needed: Estimate turned out too low
        confidence: Your confidence in this step (0-1)
        tags: Free-form labels
        session_id: Analysis session to attach this step to

    Returns:
        JSON with index, total_estimate, continuation_needed, branch_ids,
        history_length (and session_id when attached)

    """
    with log_context(tool_name="submit_thought", session_id=session_id):
        try:
            _validate_input_sizes(text=text)
            payload: dict[str, Any] = {
                "text": text,
                "index": index,
                "total_estimate": total_estimate,
                "continuation_needed": continuation_needed,
                "is_revision": is_revision,
                "revises_index": revises_index,
                "branch_origin_index": branch_origin_index,
                "branch_id": branch_id,
                "more_thoughts_needed": more_thoughts_needed,
                "confidence": confidence,
                "tags": tags,
            }
            result = get_thought_ledger().submit(payload, session_id=session_id)
            return _json(result)
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("submit_thought", e)


# =============================================================================
# TOOL 2-4: ANALYSIS
# =============================================================================


@mcp.tool
async def analyze_problem(
    problem: str,
    framework: str,
    context: str | None = None,
    stakeholders: list[str] | None = None,
    constraints: list[str] | None = None,
    objectives: list[str] | None = None,
) -> str:
    """Analyze a problem through a named framework and open a session.

    Frameworks: swot, root-cause, design-thinking, systems (unknown names
    use swot).

    Args:
        problem: Problem statement
        framework: Framework key
        context: Background context
        stakeholders: Parties affected
        constraints: Known constraints
        objectives: Desired outcomes

    Returns:
        JSON with session_id, analysis, framework, next_steps, status

    """
    with log_context(tool_name="analyze_problem"):
        try:
            _validate_input_sizes(problem=problem, context=context)
            chosen = get_framework(framework)
            session = get_session_store().create(
                title=f"Problem Analysis: {problem[:50]}...",
                kind=SessionKind.PROBLEM_ANALYSIS,
                metadata={"framework": framework, "problem": problem},
            )
            analysis = apply_framework(
                problem,
                chosen,
                context=context,
                stakeholders=stakeholders,
                constraints=constraints,
                objectives=objectives,
            )
            logger.info(f"Opened analysis session {session.id} ({chosen.title})")
            return _json(
                {
                    "session_id": session.id,
                    "analysis": analysis,
                    "framework": framework,
                    "next_steps": list(chosen.next_steps),
                    "status": "analysis_complete",
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("analyze_problem", e)


@mcp.tool
async def plan_solution(
    problem: str,
    solutions: list[dict[str, Any]],
    next_steps: list[str] | None = None,
) -> str:
    """Score candidate solutions and open a planning session.

    Each solution needs title, description, effort, impact and risk
    (low/medium/high); pros and cons are optional. Scores run 0-10: low
    effort, high impact and low risk score best.

    Args:
        problem: Problem being solved
        solutions: Candidate solutions
        next_steps: Planned follow-up actions, stored with the session

    Returns:
        JSON with session_id, problem, solutions, analysis, recommendation, status

    """
    with log_context(tool_name="plan_solution"):
        try:
            _validate_input_sizes(problem=problem)
            parsed = parse_items(SolutionInput, _require_items(solutions, "solutions"), "solutions")
            dumped = [s.model_dump() for s in parsed]
            metadata: dict[str, Any] = {"problem": problem, "solutions": dumped}
            if next_steps:
                metadata["next_steps"] = next_steps

            session = get_session_store().create(
                title=f"Solution Planning: {problem[:50]}...",
                kind=SessionKind.SOLUTION_PLANNING,
                metadata=metadata,
            )
            logger.info(f"Opened planning session {session.id} ({len(parsed)} solutions)")
            return _json(
                {
                    "session_id": session.id,
                    "problem": problem,
                    "solutions": dumped,
                    "analysis": evaluate_solutions(parsed),
                    "recommendation": recommend_solution(parsed),
                    "status": "planning_complete",
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("plan_solution", e)


@mcp.tool
async def evaluate_options(
    options: list[dict[str, Any]],
    criteria: list[dict[str, Any]],
) -> str:
    """Rank options by a weighted average of criterion scores.

    A criterion missing from an option scores 0; a zero total weight
    scores every option 0.

    Args:
        options: Each with name, optional description, and criteria
            mapping criterion name to a numeric score
        criteria: Each with name, weight and optional description

    Returns:
        JSON with evaluation, scores, ranking, recommendation, analysis, status

    """
    with log_context(tool_name="evaluate_options"):
        try:
            parsed_options = parse_items(
                OptionInput, _require_items(options, "options"), "options"
            )
            parsed_criteria = parse_items(CriterionInput, criteria or [], "criteria")

            scores = score_options(parsed_options, parsed_criteria)
            ranking = rank_options(scores, parsed_options)
            return _json(
                {
                    "evaluation": {
                        "options": [o.model_dump() for o in parsed_options],
                        "criteria": [c.model_dump() for c in parsed_criteria],
                    },
                    "scores": scores,
                    "ranking": ranking,
                    "recommendation": ranking[0],
                    "analysis": evaluation_analysis(ranking, parsed_criteria),
                    "status": "evaluation_complete",
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("evaluate_options", e)


# =============================================================================
# TOOL 5-6: SESSIONS
# =============================================================================


@mcp.tool
async def save_session(
    session_id: str | None = None,
    title: str | None = None,
    notes: str | None = None,
) -> str:
    """Rename and/or annotate an analysis session and persist it.

    Unknown or missing session ids are a no-op; the confirmation is
    returned either way, with ``saved`` false.

    Args:
        session_id: Session to update
        title: New title
        notes: Notes stored in the session metadata

    Returns:
        JSON with message, session_id, timestamp, saved

    """
    with log_context(tool_name="save_session", session_id=session_id):
        try:
            _validate_input_sizes(notes=notes)
            store = get_session_store()
            saved = False
            if session_id and store.session_exists(session_id):
                saved = store.update(session_id, title=title, notes=notes)
            else:
                logger.debug(f"save_session: no session to update ({session_id})")
            return _json(
                {
                    "message": "Session saved successfully",
                    "session_id": session_id,
                    "timestamp": utc_now().isoformat(),
                    "saved": saved,
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("save_session", e)


@mcp.tool
async def export_analysis(session_id: str, format: str = "json") -> str:  # noqa: A002
    """Export a session as JSON, Markdown or a short summary.

    Args:
        session_id: Session to export
        format: json | markdown | summary

    Returns:
        JSON with session_id, format, content, exported_at

    """
    with log_context(tool_name="export_analysis", session_id=session_id):
        try:
            content = get_session_store().export(session_id, format)
            return _json(
                {
                    "session_id": session_id,
                    "format": format,
                    "content": content,
                    "exported_at": utc_now().isoformat(),
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("export_analysis", e)


# =============================================================================
# TOOL 7-11: REASONING-THREAD SCORERS
# =============================================================================


@mcp.tool
async def run_quantum_reasoning(problem: str, strategies: list[str] | None = None) -> str:
    """Run synthetic strategy threads over a problem and fuse the results.

    Strategies: aggressive, creative, analytical, intuitive, conservative
    (all five by default). Unknown names produce an empty thread.

    Args:
        problem: Problem statement
        strategies: Strategy names, one thread each

    Returns:
        JSON with parallel_insights, quantum_fusion, breakthroughs,
        superhuman_score, next_optimization, status

    """
    with log_context(tool_name="run_quantum_reasoning"):
        try:
            _validate_input_sizes(problem=problem)
            result = get_engine().quantum_reasoning(problem, strategies)
            return _json(
                {
                    "type": "quantum_reasoning",
                    "problem": problem,
                    "parallel_insights": [
                        {
                            "thread_id": t.id,
                            "strategy": t.strategy,
                            "performance": t.performance,
                            "thoughts": len(t.thoughts),
                        }
                        for t in result["threads"]
                    ],
                    "quantum_fusion": result["fusion"].to_dict(),
                    "breakthroughs": result["breakthroughs"],
                    "superhuman_score": result["superhuman_score"],
                    "next_optimization": result["next_optimization"],
                    "status": "quantum_complete",
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("run_quantum_reasoning", e)


@mcp.tool
async def run_ai_coach(thoughts: list[dict[str, Any]]) -> str:
    """Coaching suggestions for a set of reasoning-thread thoughts.

    Args:
        thoughts: Thoughts with confidence, breakthrough_potential and
            connections

    Returns:
        JSON with up to three suggestions, coaching_score, status

    """
    with log_context(tool_name="run_ai_coach"):
        try:
            parsed = parse_items(QuantumThought, thoughts or [], "thoughts")
            suggestions = get_engine().ai_coach(parsed)
            return _json(
                {
                    "type": "ai_coaching",
                    "suggestions": [s.to_dict() for s in suggestions[:3]],
                    "coaching_score": suggestions[0].confidence if suggestions else 0.0,
                    "status": "coaching_complete",
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("run_ai_coach", e)


@mcp.tool
async def run_fusion_analysis(threads: list[dict[str, Any]]) -> str:
    """Cluster thread insights and synthesise a summary per cluster.

    Args:
        threads: Reasoning threads (id, strategy, thoughts)

    Returns:
        JSON with fusion_analysis and status

    """
    with log_context(tool_name="run_fusion_analysis"):
        try:
            parsed = parse_items(ReasoningThread, threads or [], "threads")
            return _json(
                {
                    "type": "fusion_analysis",
                    "fusion_analysis": get_engine().fusion_analysis(parsed),
                    "status": "fusion_complete",
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("run_fusion_analysis", e)


@mcp.tool
async def run_predict_outcome(solution: dict[str, Any]) -> str:
    """Forecast a solution's success probability.

    Args:
        solution: Solution description (any shape)

    Returns:
        JSON with the echoed solution, prediction and status

    """
    with log_context(tool_name="run_predict_outcome"):
        try:
            return _json(
                {
                    "type": "outcome_prediction",
                    "solution": solution,
                    "prediction": get_engine().predict_outcome(solution),
                    "status": "prediction_complete",
                }
            )
        except Exception as e:
            return _unexpected("run_predict_outcome", e)


@mcp.tool
async def run_optimize_thinking(session: dict[str, Any] | None = None) -> str:
    """Recommend adjustments to the reasoning process.

    Args:
        session: Current session description (any shape)

    Returns:
        JSON with optimization and status

    """
    with log_context(tool_name="run_optimize_thinking"):
        try:
            return _json(
                {
                    "type": "thinking_optimization",
                    "optimization": get_engine().optimize_thinking(session or {}),
                    "status": "optimization_complete",
                }
            )
        except Exception as e:
            return _unexpected("run_optimize_thinking", e)


# =============================================================================
# TOOL 12: STATUS
# =============================================================================


@mcp.tool
async def status(session_id: str | None = None) -> str:
    """Get server status or specific session status.

    Args:
        session_id: Optional session ID to get specific session status

    Returns:
        JSON with server info, ledger stats and session counts, or one
        session's state

    """
    with log_context(tool_name="status", session_id=session_id):
        try:
            store = get_session_store()
            if session_id:
                return _json(store.describe(session_id))

            config = get_config()
            with store.locked() as sessions:
                by_status = {s.value: 0 for s in SessionStatus}
                for session in sessions.values():
                    by_status[session.status.value] += 1

            return _json(
                {
                    "server": {
                        "name": config.server.name,
                        "transport": config.server.transport,
                        "version": __version__,
                        "tools": list(TOOL_NAMES),
                    },
                    "ledger": get_thought_ledger().stats(),
                    "sessions": {"total": store.session_count(), **by_status},
                    "storage": {"sessions_dir": str(store.sessions_dir)},
                }
            )
        except SeqThinkException as e:
            return _failure(e)
        except Exception as e:
            return _unexpected("status", e)


def main() -> None:
    """Run the SeqThink MCP server."""
    config = get_config()
    configure_logging(
        level=config.logging.level,
        log_format=config.logging.log_format,
        log_file=config.logging.log_file or None,
    )
    logger.info(f"Starting {config.server.name} (transport: {config.server.transport})")
    logger.debug(f"Configuration: {config.to_dict()}")

    store = get_session_store()
    logger.info(f"Session storage: {store.sessions_dir} ({store.session_count()} sessions)")

    transport = config.server.transport
    if transport == "stdio":
        mcp.run(transport="stdio")
    elif transport == "http":
        mcp.run(transport="streamable-http", host=config.server.host, port=config.server.port)
    elif transport == "sse":
        mcp.run(transport="sse", host=config.server.host, port=config.server.port)
    else:
        logger.warning(f"Unknown transport '{transport}', falling back to stdio")
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

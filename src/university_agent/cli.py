"""CLI entrypoint for the university agent."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from pydantic import BaseModel, ValidationError

from university_agent import __version__
from university_agent.core.agent import UniversityAgent
from university_agent.core.config import AgentConfig
from university_agent.workflow.definitions import list_workflows
from university_agent.workflow.tracker import generate_mermaid_diagram

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_WORKFLOW_FAILED = 4
EXIT_NOT_RECOGNIZED = 5


def _print_json(payload: Any) -> None:
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json", exclude_none=True)
    elif isinstance(payload, list):
        payload = [
            p.model_dump(mode="json", exclude_none=True) if isinstance(p, BaseModel) else p
            for p in payload
        ]
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="university-agent",
        description="Natural-language university workflow agent",
    )
    parser.add_argument("--version", action="version", version=f"university-agent {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Interpret and execute a command")
    run.add_argument("text", help="Command, e.g. 'Notify students under 75% attendance'")
    run.add_argument("--no-llm", action="store_true", help="Use regex parsing only")
    run.add_argument(
        "--show-trace",
        action="store_true",
        help="Include the execution trace and step timeline in the output",
    )

    parse = subparsers.add_parser("parse", help="Interpret a command without executing it")
    parse.add_argument("text", help="Command to interpret")
    parse.add_argument("--no-llm", action="store_true", help="Use regex parsing only")

    subparsers.add_parser("workflows", help="List available workflows")

    diagram = subparsers.add_parser("diagram", help="Print a workflow as a Mermaid diagram")
    diagram.add_argument("workflow_id", help="Workflow id or name")

    subparsers.add_parser("students", help="List students from the data store")
    subparsers.add_parser("logs", help="List action logs, newest first")
    subparsers.add_parser("assignments", help="List assignments")

    return parser


def _run(agent: UniversityAgent, args: argparse.Namespace) -> int:
    result = agent.run_command(args.text)
    payload = result.model_dump(mode="json", exclude_none=True)
    if args.show_trace and result.execution_id is not None:
        payload["timeline"] = [
            s.model_dump(mode="json", exclude_none=True)
            for s in agent.tracker.step_timeline(result.execution_id)
        ]
    else:
        payload.pop("execution", None)
    _print_json(payload)

    if result.status == "unknown":
        return EXIT_NOT_RECOGNIZED
    if result.status == "failed":
        return EXIT_WORKFLOW_FAILED
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in ("run", "parse") and not args.text.strip():
        print("Command is required", file=sys.stderr)
        return EXIT_CONFIG

    # Commands that never touch configured services.
    if args.command == "workflows":
        _print_json(list_workflows())
        return EXIT_OK
    if args.command == "diagram":
        diagram = generate_mermaid_diagram(args.workflow_id)
        if diagram is None:
            print(f"Unknown workflow: {args.workflow_id}", file=sys.stderr)
            return EXIT_CONFIG
        sys.stdout.write(diagram)
        return EXIT_OK

    try:
        config = AgentConfig()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG

    try:
        agent = UniversityAgent(config, use_llm=not getattr(args, "no_llm", False))
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        if args.command == "run":
            return _run(agent, args)

        if args.command == "parse":
            _print_json(agent.interpret(args.text))
            return EXIT_OK

        if args.command == "students":
            _print_json(agent.data_store.list_students())
            return EXIT_OK

        if args.command == "logs":
            _print_json(agent.data_store.list_logs())
            return EXIT_OK

        if args.command == "assignments":
            _print_json(agent.data_store.list_assignments())
            return EXIT_OK

        parser.error(f"Unknown command: {args.command}")
        return EXIT_CONFIG
    except Exception:
        logger.exception("Command failed", extra={"command": args.command})
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())

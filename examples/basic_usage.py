#!/usr/bin/env python3
"""Programmatic usage example.

Seeds a local data store with a few students, then runs commands through the
agent without any hosted services:

* settings come from `.env` / `UNIAGENT_*` (the LLM is used only if a key is set)
* messages are recorded by the mock messenger instead of sent
* every run is traced and can be rendered as a Mermaid diagram
"""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence
from pathlib import Path

from university_agent.core.agent import UniversityAgent
from university_agent.core.config import AgentConfig, DataStoreConfig
from university_agent.integrations.datastore import LocalDataStore
from university_agent.integrations.models import Assignment, Student
from university_agent.workflow.tracker import generate_mermaid_diagram

DEMO_STUDENTS = [
    Student(id=1, name="Asha Rao", phone="+15550000001", attendance=82),
    Student(id=2, name="Ben Ortiz", phone="+15550000002", attendance=71),
    Student(id=3, name="Chen Li", phone="+15550000003", attendance=58),
]

DEMO_ASSIGNMENTS = [
    Assignment(id=1, student_id=1, title="Lab 3", completed=1, total=1),
    Assignment(id=2, student_id=2, title="Essay", completed=0, total=1, due_date="Friday 5pm"),
    Assignment(id=3, student_id=3, title="Project", completed=1, total=4),
]


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run demo commands against a local data store.")
    parser.add_argument("--data-dir", type=Path, default=Path("agent_state/demo"), help="Demo data directory")
    parser.add_argument(
        "commands",
        nargs="*",
        default=["Notify students under 75% attendance", "Run a performance review"],
        help="Commands to run",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    LocalDataStore(args.data_dir).seed(students=DEMO_STUDENTS, assignments=DEMO_ASSIGNMENTS)
    agent = UniversityAgent(AgentConfig(data=DataStoreConfig(backend="local", local_path=args.data_dir)))

    for command in args.commands:
        result = agent.run_command(command)
        print(f"> {command}")
        print(json.dumps(result.model_dump(mode="json", exclude={"execution"}, exclude_none=True), indent=2))
        if result.workflow_id:
            print(generate_mermaid_diagram(result.workflow_id))

    print(agent.tracker.get_metrics().model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

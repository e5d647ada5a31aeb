"""research-swarm CLI

Run a deep research job on a topic and print the cited report.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from research_swarm.agents.orchestrator import ResearchOrchestrator
from research_swarm.errors import InvalidTopicError, ResearchError
from research_swarm.models.progress import ProgressState, StepStatus


def print_progress(state: ProgressState) -> None:
    print(f"\n[*] {state.completed_steps}/4 steps complete ({state.status.value})")
    for step in state.steps:
        mark = "+" if step.status == StepStatus.COMPLETED else " "
        print(f"  [{mark}] {step.id}. {step.action}: {step.description}")


async def run_research(topic: str, model: str | None = None, output: str | None = None) -> int:
    """Run research on the given topic."""
    print(f"Research topic: {topic}")
    print("-" * 50)

    orchestrator = ResearchOrchestrator(model=model)
    try:
        outcome = await orchestrator.run(topic, print_progress)
    except InvalidTopicError as e:
        print(f"\n[!] {e}")
        return 2
    except ResearchError as e:
        print(f"\n[!] Research failed: {e}")
        return 1

    state = outcome.final_state
    print(f"\n[*] Research Complete!")
    print(f"   Runtime: {state.execution_time}")
    print(f"   Sources: {state.total_sources}")
    print(f"\n{outcome.summary_text}")

    if output:
        Path(output).write_text(outcome.report_markdown, encoding="utf-8")
        print(f"\nReport written to {output}")
    else:
        print(f"\n{'=' * 50}")
        print("REPORT:")
        print(f"{'=' * 50}")
        print(outcome.report_markdown)
    return 0


def main():
    parser = argparse.ArgumentParser(description="research-swarm deep research")
    parser.add_argument("--topic", "-t", required=True, help="Research topic")
    parser.add_argument("--model", "-m", help="Model to use (default: from config)")
    parser.add_argument("--output", "-o", help="Write the report to this file")

    args = parser.parse_args()

    sys.exit(asyncio.run(run_research(args.topic, args.model, args.output)))


if __name__ == "__main__":
    main()

"""
CLI entry point for pairwise judging.

Parses arguments, validates config, and wires components.
"""

import argparse
import asyncio
import sys
from argparse import Namespace
from collections.abc import Sequence
from pathlib import Path
from typing import TypedDict

from prettytable import PrettyTable

from .assistant.completion_client import ChatCompletionClient
from .assistant.conversation import AssistantConversation
from .assistant.feedback_collector import FeedbackCollector
from .assistant.prompts import build_comparison_messages
from .assistant.summarizer import FeedbackSummarizer
from .config import AssistantConfig, StoreConfig
from .exceptions import CompletionError, ConfigurationError, UnknownParticipantError
from .judges.sim_judge import SimulatedJudge
from .logging_config import get_logger, setup_logging
from .models import Participant, new_participant_id
from .rankers.aggregate import RankedEntry, pooled_ranking
from .session import JudgingSession
from .storage.jsonl_storage import JSONLStore
from .storage.visibility import visible_participants


class CLIArgs(TypedDict):
    """Typed representation of parsed CLI arguments."""
    command: str
    data_dir: str
    seed_file: str | None
    min_visible: int
    debug: bool
    log_level: str
    # submit
    project_name: str | None
    team_name: str
    members: list[str]
    description: str
    demo_url: str
    presentation_url: str
    # judge
    simulate: bool
    noise: float
    judge_id: str
    # assist / compare
    participant_id: str | None
    questions: list[str]
    summarize: bool
    other_participant_id: str | None


def parse_args(argv: Sequence[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Pairwise Judging - Adaptive Pairwise Rating for Hackathon Judging"
    )
    _ = parser.add_argument(
        "--data-dir",
        required=True,
        help="Directory holding the shared JSONL store"
    )
    _ = parser.add_argument(
        "--seed-file",
        help="JSON list of placeholder participants loaded on first use"
    )
    _ = parser.add_argument(
        "--min-visible",
        type=int,
        default=10,
        help="Pad the visible population with seed participants up to this size (default: 10)"
    )
    _ = parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level (default: WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    _ = subparsers.add_parser("participants", help="List visible participants")

    submit = subparsers.add_parser("submit", help="Submit a project")
    _ = submit.add_argument("--project-name", required=True)
    _ = submit.add_argument("--team-name", default="")
    _ = submit.add_argument("--member", dest="members", action="append", default=[], help="Team member (repeatable)")
    _ = submit.add_argument("--description", default="")
    _ = submit.add_argument("--demo-url", default="")
    _ = submit.add_argument("--presentation-url", default="")

    judge = subparsers.add_parser("judge", help="Run a judging session over the visible participants")
    _ = judge.add_argument("--simulate", action="store_true", help="Let a simulated judge vote")
    _ = judge.add_argument("--noise", type=float, default=0.1, help="Noise level for simulated judge (0-1, default: 0.1)")
    _ = judge.add_argument("--judge-id", default="cli", help="Identifier recorded with every vote (default: cli)")

    _ = subparsers.add_parser("leaderboard", help="Show the pooled leaderboard over every judge's votes")

    assist = subparsers.add_parser("assist", help="Ask the judging assistant about a participant")
    _ = assist.add_argument("participant_id")
    _ = assist.add_argument("--question", dest="questions", action="append", default=[], help="Follow-up question (repeatable)")
    _ = assist.add_argument("--summarize", action="store_true", help="Record summarized feedback from the conversation")

    compare = subparsers.add_parser("compare", help="Ask the judging assistant to compare two participants")
    _ = compare.add_argument("participant_id")
    _ = compare.add_argument("other_participant_id")

    return parser.parse_args(argv)


def args_to_typed(ns: Namespace) -> CLIArgs:
    """Convert argparse Namespace to typed CLIArgs."""
    return CLIArgs(
        command=ns.command,
        data_dir=ns.data_dir,
        seed_file=ns.seed_file,
        min_visible=ns.min_visible,
        debug=ns.debug,
        log_level=ns.log_level,
        project_name=getattr(ns, "project_name", None),
        team_name=getattr(ns, "team_name", ""),
        members=getattr(ns, "members", []),
        description=getattr(ns, "description", ""),
        demo_url=getattr(ns, "demo_url", ""),
        presentation_url=getattr(ns, "presentation_url", ""),
        simulate=getattr(ns, "simulate", False),
        noise=getattr(ns, "noise", 0.1),
        judge_id=getattr(ns, "judge_id", "cli"),
        participant_id=getattr(ns, "participant_id", None),
        questions=getattr(ns, "questions", []),
        summarize=getattr(ns, "summarize", False),
        other_participant_id=getattr(ns, "other_participant_id", None),
    )


def build_store(args: CLIArgs) -> tuple[JSONLStore, StoreConfig]:
    """Validate store configuration and open the store."""
    config = StoreConfig(
        data_dir=Path(args["data_dir"]),
        seed_path=Path(args["seed_file"]) if args["seed_file"] else None,
        min_visible=args["min_visible"],
    )
    return JSONLStore(config.data_dir, config.seed_path), config


def print_ranking(entries: Sequence[RankedEntry]) -> None:
    """Print a ranking as a table."""
    table = PrettyTable()
    table.field_names = ["Rank", "Project", "Team", "Score", "Strength", "Uncertainty"]
    table.align["Rank"] = "r"
    table.align["Score"] = "r"
    table.align["Strength"] = "r"
    table.align["Uncertainty"] = "r"
    table.align["Project"] = "l"
    table.align["Team"] = "l"

    for i, entry in enumerate(entries, 1):
        table.add_row([
            i,
            entry.participant.project_name,
            entry.participant.team_name,
            entry.score,
            f"{entry.strength:.3f}",
            f"{entry.uncertainty:.3f}",
        ])
    print(table)


def cmd_participants(store: JSONLStore, config: StoreConfig) -> None:
    participants = visible_participants(store.load_participants(), config.min_visible)
    table = PrettyTable()
    table.field_names = ["ID", "Project", "Team", "Members", "Seed"]
    table.align = "l"
    for p in participants:
        table.add_row([p.id, p.project_name, p.team_name, ", ".join(p.team_members), "yes" if p.seed else ""])
    print(table)


def cmd_submit(store: JSONLStore, args: CLIArgs) -> None:
    project_name = args["project_name"]
    assert project_name is not None, "argparse requires --project-name"
    participant = Participant(
        id=new_participant_id({p.id for p in store.load_participants()}),
        project_name=project_name,
        team_name=args["team_name"],
        team_members=args["members"],
        description=args["description"],
        demo_url=args["demo_url"],
        presentation_url=args["presentation_url"],
    )
    store.add_participant(participant)
    print(f"Submitted {participant.project_name} as {participant.id}")


def _ask_human(first: Participant, second: Participant) -> str | None:
    """Prompt on the terminal; returns the winner id, or None to stop."""
    print(f"\n  1) {first.project_name} ({first.team_name})")
    if first.description:
        print(f"     {first.description}")
    print(f"  2) {second.project_name} ({second.team_name})")
    if second.description:
        print(f"     {second.description}")

    while True:
        answer = input("Which project is better? [1/2, q to stop] ").strip().lower()
        if answer == "1":
            return first.id
        if answer == "2":
            return second.id
        if answer == "q":
            return None


def cmd_judge(store: JSONLStore, config: StoreConfig, args: CLIArgs) -> None:
    logger = get_logger("judge")
    participants = visible_participants(store.load_participants(), config.min_visible)
    session = JudgingSession(participants, storage=store, judge_id=args["judge_id"])

    simulated: SimulatedJudge | None = None
    if args["simulate"]:
        # Earlier submissions are treated as stronger
        ground_truth = {p.id: float(len(participants) - i) for i, p in enumerate(participants)}
        simulated = SimulatedJudge(ground_truth, noise=args["noise"])
        logger.info(f"Simulated judge created with {len(ground_truth)} participants, noise={args['noise']}")

    pair = session.start_judging()
    while pair is not None:
        first, second = (session.get_participant(pid) for pid in pair)
        done, budget = session.progress
        print(f"\nComparison {done + 1}/{budget}")

        if simulated is not None:
            winner_id: str | None = simulated.pick_winner(first, second)
            print(f"  {first.project_name} vs {second.project_name} -> {session.get_participant(winner_id).project_name}")
        else:
            winner_id = _ask_human(first, second)
            if winner_id is None:
                logger.info("Judging stopped early by the judge")
                break

        pair = session.record_vote(winner_id)

    print("\nYour ranking:")
    print_ranking(session.ranked())


def cmd_leaderboard(store: JSONLStore, config: StoreConfig) -> None:
    leaderboard = pooled_ranking(store.load_all(), config.min_visible)
    print(f"Pooled leaderboard ({leaderboard.total_votes} votes)")
    print_ranking(leaderboard.entries)

    for entry in leaderboard.entries:
        feedback = leaderboard.feedback.get(entry.participant.id)
        if feedback is None or feedback.is_empty():
            continue
        feedback = feedback.deduplicated()
        print(f"\n{entry.participant.project_name}")
        for strength in feedback.strengths:
            print(f"  + {strength}")
        for weakness in feedback.weaknesses:
            print(f"  - {weakness}")


def _echo(delta: str) -> None:
    print(delta, end="", flush=True)


def find_participant(store: JSONLStore, participant_id: str | None) -> Participant:
    for participant in store.load_participants():
        if participant.id == participant_id:
            return participant
    raise UnknownParticipantError(f"Unknown participant: {participant_id}")


async def run_assist(store: JSONLStore, args: CLIArgs, client: ChatCompletionClient) -> None:
    async with client:
        participant = find_participant(store, args["participant_id"])
        conversation = AssistantConversation(participant, client)
        _ = await conversation.ask(on_delta=_echo)
        print()
        for question in args["questions"]:
            print(f"\n> {question}")
            _ = await conversation.ask(question, on_delta=_echo)
            print()

        if args["summarize"]:
            collector = FeedbackCollector(
                FeedbackSummarizer(client),
                sink=lambda pid, feedback: store.append_feedback(pid, feedback.strengths, feedback.weaknesses),
            )
            _ = collector.collect(participant, conversation.transcript())
            await collector.wait_idle()
            print("\nFeedback recorded.")


async def run_compare(store: JSONLStore, args: CLIArgs, client: ChatCompletionClient) -> None:
    async with client:
        first = find_participant(store, args["participant_id"])
        second = find_participant(store, args["other_participant_id"])
        async for delta in client.stream(build_comparison_messages(first, second)):
            _echo(delta)
        print()


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point."""
    raw_args = parse_args(argv)
    args = args_to_typed(raw_args)

    setup_logging(
        level=args["log_level"],
        debug=args["debug"],
        log_file=str(Path(args["data_dir"]) / "pairwise_judging.log"),
    )
    logger = get_logger("main")
    logger.info(f"Running command: {args['command']}")

    try:
        store, config = build_store(args)

        if args["command"] == "participants":
            cmd_participants(store, config)
        elif args["command"] == "submit":
            cmd_submit(store, args)
        elif args["command"] == "judge":
            cmd_judge(store, config, args)
        elif args["command"] == "leaderboard":
            cmd_leaderboard(store, config)
        elif args["command"] == "assist":
            asyncio.run(run_assist(store, args, ChatCompletionClient(AssistantConfig.from_env())))
        elif args["command"] == "compare":
            asyncio.run(run_compare(store, args, ChatCompletionClient(AssistantConfig.from_env())))
        else:
            raise ValueError(f"Unknown command: {args['command']}")

    except (ConfigurationError, CompletionError, UnknownParticipantError) as e:
        logger.error(str(e))
        print(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\nInterrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()

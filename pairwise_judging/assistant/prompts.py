"""
Prompt builders for the judging assistant.

Templates live as markdown files next to this module.
"""

from functools import cache
from pathlib import Path

from ..models import ChatMessage, Participant

PROMPTS_DIR = Path(__file__).parent / "prompts"

INITIAL_PROMPT = (
    "Analyze this project. Briefly summarize it, then evaluate how it aligns with the judging "
    "criteria (Innovation, Technical Execution, Design & UX, Impact). Note key strengths and concerns."
)

PRESENTATION_NOTE = (
    "\nIMPORTANT: For any project that has a Presentation URL, visit that URL, read the PDF content, "
    "and use it as primary context for your comparison.\n"
)


@cache
def load_template(name: str) -> str:
    """Read a markdown prompt template by file stem."""
    return (PROMPTS_DIR / f"{name}.md").read_text(encoding="utf-8")


def describe_participant(participant: Participant) -> str:
    """Bullet list describing a project for the model."""
    members = ", ".join(participant.team_members)
    lines = [
        f"- Name: {participant.project_name}",
        f"- Team: {participant.team_name} ({members})",
        f"- Description: {participant.description}",
        f"- Demo: {participant.demo_url}",
    ]
    if participant.presentation_url:
        lines.append(f"- Presentation: {participant.presentation_url}")
    return "\n".join(lines)


def build_system_message(participant: Participant) -> ChatMessage:
    """System prompt for a single-project conversation."""
    content = load_template("judging_assistant").format(
        project=describe_participant(participant),
        guidelines=load_template("project_guidelines").strip(),
        challenge=load_template("challenge_brief").strip(),
    )
    return ChatMessage(role="system", content=content)


def build_comparison_messages(first: Participant, second: Participant) -> list[ChatMessage]:
    """Opening messages for a side-by-side comparison of two projects."""
    has_presentation = bool(first.presentation_url or second.presentation_url)
    content = load_template("compare_projects").format(
        project_a=describe_participant(first),
        project_b=describe_participant(second),
        presentation_note=PRESENTATION_NOTE if has_presentation else "",
        guidelines=load_template("project_guidelines").strip(),
        challenge=load_template("challenge_brief").strip(),
    )
    return [
        ChatMessage(role="system", content=content),
        ChatMessage(
            role="user",
            content=f"Compare {first.project_name} and {second.project_name} against the judging criteria.",
        ),
    ]


def build_summary_request(project_name: str) -> ChatMessage:
    """Instruction asking for strict-JSON strengths and weaknesses."""
    return ChatMessage(role="user", content=load_template("summarize_feedback").format(project_name=project_name))

from pathlib import Path

from model_mapper import map_model_name
from models import SessionContext, SetupRequired, Transient, UsageResult

COLORS = {
    "reset": "\x1b[0m",
    "orange": "\x1b[38;5;208m",
    "blue": "\x1b[38;5;39m",
    "green": "\x1b[38;5;76m",
    "yellow": "\x1b[38;5;226m",
    "gray": "\x1b[38;5;245m",
    "red": "\x1b[38;5;196m",
}

BAR_FILLED = "█"
BAR_EMPTY = "░"
DIR_NAME_MAX = 15


def render_progress_bar(percent: int, width: int = 10) -> str:
    """Colored bar: green below 60%, yellow below 85%, red above."""
    filled = min(width, max(0, int(percent / 100 * width + 0.5)))
    if percent >= 85:
        color = COLORS["red"]
    elif percent >= 60:
        color = COLORS["yellow"]
    else:
        color = COLORS["green"]
    return (
        f"{color}{BAR_FILLED * filled}{COLORS['gray']}{BAR_EMPTY * (width - filled)}"
        f" {percent}%{COLORS['reset']}"
    )


def calculate_context_usage(session: SessionContext) -> int:
    window = session.context_window
    if not window or not window.context_window_size or not window.total_input_tokens:
        return 0
    return int(window.total_input_tokens * 100 / window.context_window_size + 0.5)


def current_dir_name(session: SessionContext) -> str:
    current_dir = session.workspace.current_dir if session.workspace else None
    if not current_dir:
        return ""
    return current_dir.replace("\\", "/").rstrip("/").split("/")[-1] or current_dir


def format_directory_name(name: str) -> str:
    if len(name) > DIR_NAME_MAX:
        return name[: DIR_NAME_MAX - 2] + "..."
    return name


def read_git_branch(cwd: Path | None = None) -> str:
    head = (cwd or Path.cwd()) / ".git" / "HEAD"
    try:
        content = head.read_text(encoding="utf-8").strip()
    except OSError:
        return ""
    if content.startswith("ref: refs/heads/"):
        return content[len("ref: refs/heads/"):]
    return ""


def format_output(result: UsageResult, session: SessionContext, cwd: Path | None = None) -> str:
    if isinstance(result, SetupRequired):
        return f"{COLORS['yellow']}⚠️ Setup required{COLORS['reset']}"
    if isinstance(result, Transient):
        return f"{COLORS['yellow']}⚠️ Loading...{COLORS['reset']}"

    gray, reset = COLORS["gray"], COLORS["reset"]

    # The session knows which model is actually in use
    model_name = result.model_name
    if session.model and session.model.display_name:
        model_name = map_model_name(session.model.display_name)

    context_bar = render_progress_bar(calculate_context_usage(session))
    reset_str = (
        f"{gray} | Reset: {result.next_reset_time_str}{reset}" if result.next_reset_time_str else ""
    )

    line1 = (
        f"{gray}🤖 {model_name} | {context_bar}{gray} | 5h: {result.token_percent}%"
        f" | Tool: {result.mcp_percent}% | ${result.total_cost}{reset_str}"
    )
    line2 = (
        f"📁 {format_directory_name(current_dir_name(session))}"
        f" | 🌿 git:({read_git_branch(cwd)}){reset}"
    )
    return f"{line1}\n{line2}"

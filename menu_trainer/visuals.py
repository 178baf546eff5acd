"""
Terminal styling shared by the study-mode handlers and the CLI.
"""

from __future__ import annotations

from rich import box
from rich.panel import Panel

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
    "mode": {
        "quick-fire": "magenta",
        "flashcard": "blue",
        "fill-blank": "cyan",
        "multiple-choice": "green",
        "practice-test": "yellow",
        "speedrun": "red",
        "customer-questions": "bright_blue",
    },
}

MODE_PROMPTS = {
    "quick-fire": "Describe it",
    "fill-blank": "Fill the blank",
    "multiple-choice": "Your pick",
    "flashcard": "Recall",
    "customer-questions": "Tell the guest",
    "default": "Answer",
}


def style_mode(mode: str) -> str:
    """Get styled study mode string."""
    color = STYLES["mode"].get(mode, "white")
    return f"[{color}]{mode}[/{color}]"


def get_prompt(mode: str, suffix: str = "") -> str:
    """
    Prompt text for a study mode.

    Args:
        mode: Study mode value
        suffix: Optional suffix like "[1-4]" or "(2/3)"

    Returns:
        Rich-formatted prompt string
    """
    base = MODE_PROMPTS.get(mode, MODE_PROMPTS["default"])
    if suffix:
        return f"[cyan]{base}[/cyan] {suffix}"
    return f"[cyan]{base}[/cyan]"


def question_panel(body: str, title: str) -> Panel:
    """Heavy cyan panel used to present a question."""
    return Panel(
        body,
        title=f"[bold cyan]{title}[/bold cyan]",
        border_style="cyan",
        box=box.HEAVY,
        padding=(1, 2),
    )


def result_panel(is_correct: bool, feedback: str, xp_gained: int = 0) -> Panel:
    """Feedback panel shown after grading."""
    style = STYLES["correct"] if is_correct else STYLES["incorrect"]
    icon = "[green]✓[/green]" if is_correct else "[red]✗[/red]"

    content = f"{icon} {feedback}"
    if xp_gained:
        content += f"\n\n[yellow]+{xp_gained} XP[/yellow]"

    return Panel(content, border_style=style, padding=(1, 2))

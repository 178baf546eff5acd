"""
Flashcard handler.

User sees the item and the segment, flips to reveal the answer, then
self-evaluates whether they recalled it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from menu_trainer.visuals import question_panel

from . import StudyMode, register
from .base import LINE_COMPONENT, AnswerResult, MatchKind, is_dont_know

if TYPE_CHECKING:
    from menu_trainer.delivery.menu_deck import Question


@register(StudyMode.FLASHCARD)
class FlashcardHandler:
    """Handler for self-assessed flashcards."""

    def validate(self, question: Question) -> bool:
        """Check if question has something to reveal."""
        return bool(question.answer or question.full_text)

    def present(self, question: Question, console: Console) -> None:
        """Display the front of the card."""
        body = f"[bold]{question.item_name}[/bold]\n\n{question.context or 'What goes here?'}"
        console.print(question_panel(body, f"FLASHCARD · {question.category}"))

    def get_input(self, question: Question, console: Console) -> dict:
        """Wait for flip, show back, get self-evaluation. '?' = I don't know."""
        Prompt.ask("\nPress Enter to flip", default="", show_default=False)

        console.print(
            Panel(
                question.full_text or question.answer,
                title="[bold green]ANSWER[/bold green]",
                border_style="green",
                box=box.HEAVY,
                padding=(1, 2),
            )
        )

        console.print("[dim]y=yes, n=no, ?=I didn't know this[/dim]")
        while True:
            response = Prompt.ask(
                "Did you recall correctly? [y/n/?]",
                default="y",
            ).strip().lower()

            if is_dont_know(response):
                return {"recalled": False, "dont_know": True}
            elif response in ("y", "yes"):
                return {"recalled": True, "dont_know": False}
            elif response in ("n", "no"):
                return {"recalled": False, "dont_know": False}
            else:
                console.print("[yellow]Please enter y, n, or ?[/yellow]")

    def check(self, question: Question, answer: Any) -> AnswerResult:
        """Check self-reported answer."""
        dont_know = False
        if isinstance(answer, dict):
            dont_know = bool(answer.get("dont_know"))
            is_correct = bool(answer.get("recalled", False)) and not dont_know
        else:
            is_correct = bool(answer)

        if dont_know:
            feedback = "Let's learn this one!"
        else:
            feedback = "Good recall!" if is_correct else "Keep practicing"

        return AnswerResult(
            correct=is_correct,
            feedback=feedback,
            user_answer="I don't know" if dont_know else ("yes" if is_correct else "no"),
            correct_answer=question.answer,
            partial_score=1.0 if is_correct else 0.0,
            match_kind=MatchKind.EXACT if is_correct else MatchKind.NONE,
            component_outcomes={LINE_COMPONENT: is_correct},
            dont_know=dont_know,
        )

    def hint(self, question: Question, attempt: int) -> str | None:
        """No hints for flashcards - it's pure recall."""
        return None

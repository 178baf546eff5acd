"""
Customer-questions handler.

A guest asks about a menu item ("Is the miso soup vegetarian?") and the
user answers in their own words. Grading is the same fuzzy validation as
quick fire against the prepared answer and its alternatives.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from menu_trainer.visuals import question_panel

from . import StudyMode, register
from .quick_fire import QuickFireHandler

if TYPE_CHECKING:
    from menu_trainer.delivery.menu_deck import Question


@register(StudyMode.CUSTOMER_QUESTIONS)
class CustomerQuestionsHandler(QuickFireHandler):
    """Handler for answering guests' questions about the menu."""

    prompt_mode = StudyMode.CUSTOMER_QUESTIONS

    def validate(self, question: Question) -> bool:
        """Needs both the guest's question and an answer."""
        return bool(question.context and question.answer)

    def present(self, question: Question, console: Console) -> None:
        """Display the guest's question."""
        body = (
            f"[bold]{question.item_name}[/bold]\n\n"
            f"[cyan]Customer asks:[/cyan]\n\"{question.context}\"\n\n"
            "[dim]Answer as if you're speaking to the customer[/dim]"
        )
        console.print(question_panel(body, f"CUSTOMER QUESTION · {question.category}"))

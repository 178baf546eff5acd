"""
Quick-fire handler.

The user types the whole underlined segment of a description line. All
blanks are joined into one expected answer, so ingredient lines are graded
as a list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.prompt import Prompt

from menu_trainer.visuals import get_prompt, question_panel

from . import StudyMode, register
from .base import LINE_COMPONENT, AnswerResult, is_dont_know, letter_hint
from .validator import validate_answer

if TYPE_CHECKING:
    from menu_trainer.delivery.menu_deck import Question


@register(StudyMode.QUICK_FIRE, StudyMode.SPEEDRUN)
class QuickFireHandler:
    """Handler for typed whole-line recall."""

    prompt_mode = StudyMode.QUICK_FIRE

    def validate(self, question: Question) -> bool:
        """Check if question has at least one blank with an answer."""
        return bool(question.answer)

    def present(self, question: Question, console: Console) -> None:
        """Display the item and the segment to recall."""
        body = f"[bold]{question.item_name}[/bold]\n\n{question.context or 'Describe this line'}"
        console.print(question_panel(body, f"QUICK FIRE · {question.category}"))

    def get_input(self, question: Question, console: Console) -> dict:
        """Get user's answer. 'h'=hint, '?'=I don't know."""
        console.print("[dim]Type your answer. 'h'=hint, '?'=I don't know[/dim]")

        hint_count = 0
        while True:
            user_input = Prompt.ask(get_prompt(self.prompt_mode.value))

            if is_dont_know(user_input):
                return {"dont_know": True, "hints_used": hint_count}

            if user_input.lower() == "h":
                hint_count += 1
                hint_text = self.hint(question, hint_count)
                if hint_text:
                    console.print(f"[yellow]Hint {hint_count}:[/yellow] {hint_text}")
                else:
                    console.print("[dim]No more hints available[/dim]")
                continue

            if not user_input.strip():
                console.print("[yellow]Please enter an answer[/yellow]")
                continue

            return {"answer": user_input, "hints_used": hint_count, "dont_know": False}

    def check(self, question: Question, answer: Any) -> AnswerResult:
        """Grade the joined answer with the fuzzy validator."""
        if isinstance(answer, dict):
            if answer.get("dont_know"):
                return AnswerResult(
                    correct=False,
                    feedback="Let's learn this one!",
                    user_answer="I don't know",
                    correct_answer=question.answer,
                    partial_score=0.0,
                    component_outcomes={LINE_COMPONENT: False},
                    dont_know=True,
                )
            user_answer = str(answer.get("answer", ""))
        else:
            user_answer = str(answer)

        validation = validate_answer(user_answer, question.answer, question.alternatives)

        return AnswerResult(
            correct=validation.is_correct,
            feedback=validation.feedback,
            user_answer=user_answer.strip(),
            correct_answer=question.answer,
            partial_score=1.0 if validation.is_correct else 0.0,
            match_kind=validation.match_kind,
            similarity=validation.similarity,
            component_outcomes={LINE_COMPONENT: validation.is_correct},
        )

    def hint(self, question: Question, attempt: int) -> str | None:
        """Progressive hints on the first blank."""
        if not question.blanks:
            return None
        return letter_hint(question.blanks[0].answer, attempt)

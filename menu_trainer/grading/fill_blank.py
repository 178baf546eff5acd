"""
Fill-in-the-blank handler.

Shows the full description line with each blank masked; every blank is
graded on its own against its answer and alternatives. The line counts as
correct only when every blank is.

Practice tests use the same grading and add a hint about what kind of
answer the line is asking for.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.prompt import Prompt

from menu_trainer.visuals import get_prompt, question_panel

from . import StudyMode, register
from .base import AnswerResult, blank_component, is_dont_know, letter_hint
from .validator import validate_answer

if TYPE_CHECKING:
    from menu_trainer.delivery.menu_deck import Question

BLANK_MARK = "_____"


def mask_blanks(question: Question) -> str:
    """Replace each blank's answer in the full text with a numbered gap."""
    text = question.full_text or question.context
    for i, blank in enumerate(question.blanks, 1):
        pattern = re.compile(re.escape(blank.answer), re.IGNORECASE)
        text, count = pattern.subn(f"{BLANK_MARK}({i})", text, count=1)
        if not count:
            text += f" {BLANK_MARK}({i})"
    return text


@register(StudyMode.FILL_BLANK)
class FillBlankHandler:
    """Handler for per-blank fill-in questions."""

    def validate(self, question: Question) -> bool:
        """Check if every blank has an answer."""
        return bool(question.blanks) and all(b.answer for b in question.blanks)

    def present(self, question: Question, console: Console) -> None:
        """Display the masked description line."""
        body = f"[bold]{question.item_name}[/bold]\n\n{mask_blanks(question)}"
        count = len(question.blanks)
        console.print(question_panel(body, f"FILL IN THE BLANK ({count}) · {question.category}"))

    def get_input(self, question: Question, console: Console) -> dict:
        """Collect one answer per blank. 'h'=hint, '?'=I don't know."""
        console.print("[dim]Answer each blank. 'h'=hint, '?'=I don't know[/dim]")

        answers: list[str] = []
        hint_count = 0
        total = len(question.blanks)

        while len(answers) < total:
            index = len(answers)
            user_input = Prompt.ask(
                get_prompt(StudyMode.FILL_BLANK.value, f"({index + 1}/{total})")
            )

            if is_dont_know(user_input):
                return {"dont_know": True, "answers": answers, "hints_used": hint_count}

            if user_input.lower() == "h":
                hint_count += 1
                hint_text = letter_hint(question.blanks[index].answer, hint_count)
                if hint_text:
                    console.print(f"[yellow]Hint {hint_count}:[/yellow] {hint_text}")
                else:
                    console.print("[dim]No more hints available[/dim]")
                continue

            answers.append(user_input)

        return {"answers": answers, "hints_used": hint_count, "dont_know": False}

    def check(self, question: Question, answer: Any) -> AnswerResult:
        """Grade every blank separately."""
        correct_answer = question.answer

        if isinstance(answer, dict):
            if answer.get("dont_know"):
                return AnswerResult(
                    correct=False,
                    feedback="Let's learn this one!",
                    user_answer="I don't know",
                    correct_answer=correct_answer,
                    partial_score=0.0,
                    component_outcomes={
                        blank_component(i): False for i in range(len(question.blanks))
                    },
                    dont_know=True,
                )
            user_answers = [str(a) for a in answer.get("answers", [])]
        elif isinstance(answer, str):
            user_answers = [answer]
        else:
            user_answers = [str(a) for a in answer or []]

        outcomes: dict[str, bool] = {}
        missed: list[str] = []
        for i, blank in enumerate(question.blanks):
            given = user_answers[i] if i < len(user_answers) else ""
            result = validate_answer(given, blank.answer, blank.alternatives)
            outcomes[blank_component(i)] = result.is_correct
            if not result.is_correct:
                missed.append(blank.answer)

        total = len(outcomes)
        hits = sum(outcomes.values())
        is_correct = total > 0 and hits == total

        if is_correct:
            feedback = "Correct! Every blank filled."
        elif hits:
            feedback = f"{hits} of {total} blanks correct. Missing: {', '.join(missed)}"
        else:
            feedback = f"Not quite. The correct answer is: {correct_answer}"

        return AnswerResult(
            correct=is_correct,
            feedback=feedback,
            user_answer=", ".join(a.strip() for a in user_answers),
            correct_answer=correct_answer,
            partial_score=hits / total if total else 0.0,
            component_outcomes=outcomes,
        )

    def hint(self, question: Question, attempt: int) -> str | None:
        """Progressive hints on the first blank."""
        if not question.blanks:
            return None
        return letter_hint(question.blanks[0].answer, attempt)


# (phrases in the description line, phrases that veto the match, hint) - first match wins
LINE_HINTS = (
    (("plate", "plated", "served on"), (), "How is it served/plated?"),
    (("oz", "ounce"), (), "How many ounces?"),
    (("pieces", "piece"), (), "How many pieces?"),
    (("size",), (), "What size/portion?"),
    (("topped",), (), "What is it topped with?"),
    (("garnish",), (), "What garnish?"),
    (("finished",), (), "What's the finishing touch?"),
    (("drizzle",), (), "What sauce is drizzled?"),
    (("sauce",), ("soy",), "What sauce?"),
    (("layered",), (), "What ingredients are layered?"),
    (("mixed",), (), "What's mixed in?"),
    (("made with", "consists of"), (), "What ingredients?"),
    (("tuna", "salmon", "fish"), (), "What type/grade of fish?"),
    (("shrimp", "crab"), (), "What type/grade of seafood?"),
    (("cheese",), (), "What type of cheese?"),
)


def context_hint(question: Question) -> str:
    """
    What kind of answer a description line wants.

    Looks for telling phrases in the line first, then falls back on the
    item's category.
    """
    line = question.full_text.lower()
    category = question.category.lower()

    for phrases, vetoes, hint in LINE_HINTS:
        if any(p in line for p in phrases) and not any(v in line for v in vetoes):
            return hint

    if "salad" in category:
        if "dressing" in line or "dressed" in line:
            return "What dressing?"
        if "lettuce" in line or "greens" in line:
            return "What type of greens?"
        return "What ingredients are in this salad?"

    if "soup" in category:
        if "contains" in line or "flour" in line:
            return "What allergens/ingredients?"
        if "served with" in line or "comes with" in line:
            return "What comes with it?"
        return "What's in this soup?"

    if "sushi" in category:
        return "What ingredient(s)?"

    if "dressing" in category or "sauce" in category:
        if "base" in line:
            return "What's the base?"
        return "What ingredients?"

    return "Fill in the blank(s)"


@register(StudyMode.PRACTICE_TEST)
class PracticeTestHandler(FillBlankHandler):
    """Fill-in grading with a hint about what each line asks for."""

    def present(self, question: Question, console: Console) -> None:
        """Display the masked line and its context hint."""
        body = (
            f"[bold]{question.item_name}[/bold]\n\n{mask_blanks(question)}\n\n"
            f"[yellow]{context_hint(question)}[/yellow]"
        )
        count = len(question.blanks)
        console.print(question_panel(body, f"PRACTICE TEST ({count}) · {question.category}"))

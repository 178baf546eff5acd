"""
Multiple choice handler.

- Correct option is the question's joined answer.
- Up to three distractors are drawn from other questions' answers.
- Grading is index equality; the fuzzy validator is not involved.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.prompt import Prompt

from menu_trainer.visuals import get_prompt, question_panel

from . import StudyMode, register
from .base import LINE_COMPONENT, AnswerResult, MatchKind, is_dont_know

if TYPE_CHECKING:
    from menu_trainer.delivery.menu_deck import Question

DISTRACTOR_COUNT = 3


@dataclass(frozen=True)
class ChoiceSet:
    """Shuffled options for one question."""

    choices: tuple[str, ...]
    correct_index: int

    @property
    def correct_choice(self) -> str:
        return self.choices[self.correct_index]


def build_choices(
    question: Question,
    pool: Sequence[Question],
    rng: random.Random | None = None,
) -> ChoiceSet:
    """
    Build a shuffled option list for a question.

    Args:
        question: Question being asked
        pool: Questions to draw distractors from
        rng: Random source (module random if None)

    Returns:
        ChoiceSet with the correct option's position
    """
    rng = rng or random.Random()
    correct = question.answer

    distractors: list[str] = []
    candidates = [q.answer for q in pool if q.id != question.id and q.answer and q.answer != correct]
    rng.shuffle(candidates)
    for candidate in candidates:
        if candidate not in distractors:
            distractors.append(candidate)
        if len(distractors) == DISTRACTOR_COUNT:
            break

    choices = [correct, *distractors]
    rng.shuffle(choices)
    return ChoiceSet(choices=tuple(choices), correct_index=choices.index(correct))


@register(StudyMode.MULTIPLE_CHOICE)
class MultipleChoiceHandler:
    """Handler for multiple choice questions."""

    def __init__(self) -> None:
        self._prepared: dict[str, ChoiceSet] = {}

    def prepare(
        self,
        question: Question,
        pool: Sequence[Question],
        rng: random.Random | None = None,
    ) -> ChoiceSet:
        """Build and remember the options for a question."""
        choice_set = build_choices(question, pool, rng)
        self._prepared[question.id] = choice_set
        return choice_set

    def choices_for(self, question: Question) -> ChoiceSet:
        """Options prepared for a question (a single-option set if never prepared)."""
        return self._prepared.get(question.id) or ChoiceSet((question.answer,), 0)

    def validate(self, question: Question) -> bool:
        """Check if the question has an answer to offer."""
        return bool(question.answer)

    def present(self, question: Question, console: Console) -> None:
        """Display the question with numbered options."""
        choice_set = self.choices_for(question)
        lines = [f"[bold]{question.item_name}[/bold]", "", question.context or "Pick the match", ""]
        for i, choice in enumerate(choice_set.choices, 1):
            lines.append(f"  {i}. {choice}")

        console.print(question_panel("\n".join(lines), f"MULTIPLE CHOICE · {question.category}"))

    def get_input(self, question: Question, console: Console) -> dict:
        """Get the selected option number. '?'=I don't know."""
        count = len(self.choices_for(question).choices)
        valid = [str(i) for i in range(1, count + 1)]

        while True:
            user_input = Prompt.ask(
                get_prompt(StudyMode.MULTIPLE_CHOICE.value, f"[1-{count}]")
            ).strip()

            if is_dont_know(user_input):
                return {"dont_know": True}
            if user_input in valid:
                return {"choice": int(user_input) - 1, "dont_know": False}

            console.print(f"[yellow]Enter a number from 1 to {count}[/yellow]")

    def check(self, question: Question, answer: Any) -> AnswerResult:
        """Compare the selected index with the correct index."""
        choice_set = self.choices_for(question)

        if isinstance(answer, dict):
            if answer.get("dont_know"):
                return AnswerResult(
                    correct=False,
                    feedback="Let's learn this one!",
                    user_answer="I don't know",
                    correct_answer=choice_set.correct_choice,
                    partial_score=0.0,
                    component_outcomes={LINE_COMPONENT: False},
                    dont_know=True,
                )
            selected = answer.get("choice")
        else:
            selected = answer

        is_correct = selected == choice_set.correct_index
        if isinstance(selected, int) and 0 <= selected < len(choice_set.choices):
            user_answer = choice_set.choices[selected]
        else:
            user_answer = ""

        return AnswerResult(
            correct=is_correct,
            feedback=(
                "Correct!"
                if is_correct
                else f"Not quite. The correct answer is: {choice_set.correct_choice}"
            ),
            user_answer=user_answer,
            correct_answer=choice_set.correct_choice,
            partial_score=1.0 if is_correct else 0.0,
            match_kind=MatchKind.EXACT if is_correct else MatchKind.NONE,
            component_outcomes={LINE_COMPONENT: is_correct},
        )

    def hint(self, question: Question, attempt: int) -> str | None:
        """First hint eliminates a wrong option."""
        choice_set = self.choices_for(question)
        wrong = [c for i, c in enumerate(choice_set.choices) if i != choice_set.correct_index]
        if attempt == 1 and wrong:
            return f"It's NOT: {wrong[0]}"
        return None

"""
Menu Trainer CLI.

A Rich terminal interface for memorizing a restaurant menu: typed recall,
fill-in-the-blank, multiple choice, flashcards and guest questions, ordered by weighted
spaced repetition.

Commands:
- menu-trainer study    - Start a study round
- menu-trainer stats    - Show profile, level and mastery
- menu-trainer due      - List questions due for review
- menu-trainer reset    - Clear progress (backup first)
- menu-trainer restore  - Restore progress from a backup
"""
from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from menu_trainer.config import get_settings
from menu_trainer.core.mastery import ItemStatus
from menu_trainer.core.xp import level_from_xp
from menu_trainer.grading import StudyMode, get_handler
from menu_trainer.visuals import STYLES, result_panel, style_mode

from .achievements import ACHIEVEMENTS_BY_ID, CATEGORY_BADGES, category_mastery
from .menu_deck import ContentLoadError, CustomerQuestionDeck, MenuDeck
from .scheduler import ReviewScheduler
from .session import StudySession
from .state_store import StateStore

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="menu-trainer",
    help="Menu Trainer: learn the menu by heart",
    no_args_is_help=True,
)
console = Console()


def _open_store() -> StateStore:
    settings = get_settings()
    return StateStore(db_path=settings.state_db_path, namespace=settings.storage_namespace)


def _load_deck(data_path: Optional[Path], deck_class: type[MenuDeck] = MenuDeck) -> MenuDeck:
    deck = deck_class(data_path or get_settings().menu_data_path)
    try:
        deck.load()
    except ContentLoadError as e:
        console.print(f"[red]Could not load menu data:[/red] {e}")
        raise typer.Exit(1)
    return deck


# =============================================================================
# Display Helpers
# =============================================================================


def _display_summary(session: StudySession) -> None:
    summary = session.finish()
    lines = [
        "[bold]Round Complete![/bold]",
        "",
        f"Mode: {style_mode(summary.mode)}",
        f"Score: {summary.correct_answers}/{summary.total_questions} "
        f"({summary.accuracy * 100:.0f}%)",
        f"Time: {summary.elapsed_ms / 1000:.1f}s",
        f"XP earned: [yellow]+{summary.xp_earned}[/yellow] (round bonus {summary.bonus_xp})",
    ]
    for achievement_id in summary.achievements:
        achievement = ACHIEVEMENTS_BY_ID[achievement_id]
        lines.append(f"{achievement.icon} Unlocked: [bold]{achievement.name}[/bold]")

    console.print("\n")
    console.print(Panel("\n".join(lines), title="Summary", border_style="green"))

    misses = [r for r in session.results if not r.result.correct]
    if misses:
        table = Table(title="Review these")
        table.add_column("Item")
        table.add_column("Answer")
        for r in misses:
            table.add_row(r.question.item_name, r.result.correct_answer)
        console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def study(
    mode: StudyMode = typer.Option(
        StudyMode.QUICK_FIRE,
        "--mode", "-m",
        help="Study mode",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count", "-n",
        min=1,
        help="Questions in the round (defaults to settings)",
    ),
    category: Optional[str] = typer.Option(
        None,
        "--category", "-c",
        help="Only study this category",
    ),
    data_path: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Menu dataset JSON file",
    ),
) -> None:
    """
    Start an interactive study round.

    Questions are picked by weighted random sampling: weak and stale items
    come up more often. Progress is saved after every answer.
    """
    settings = get_settings()
    deck = _load_deck(data_path)
    pool = deck
    if mode == StudyMode.CUSTOMER_QUESTIONS:
        pool = _load_deck(settings.customer_questions_path, CustomerQuestionDeck)

    if category and category not in pool.categories:
        raise typer.BadParameter(
            f"Unknown category {category!r}. Choose from: {', '.join(pool.categories)}",
            param_hint="--category",
        )

    handler = get_handler(mode)
    usable = [q for q in pool.questions if handler.validate(q)]

    store = _open_store()
    scheduler = ReviewScheduler(store.state.items_progress)
    questions = scheduler.select_next_questions(
        usable, count or settings.questions_per_round, category
    )

    if not questions:
        store.close()
        console.print("\n[yellow]No questions to study.[/yellow]")
        raise typer.Exit(0)

    session = StudySession(
        store,
        questions,
        mode=mode,
        deck_questions=deck.questions,
        auto_advance_seconds=settings.auto_advance_delay_seconds,
    )

    console.print(f"\n[bold cyan]Menu Trainer[/bold cyan] - {style_mode(mode.value)}")
    console.print("=" * 40)

    session.start()

    try:
        while session.current is not None:
            question = session.current
            console.print(
                f"\n[dim]Question {session.index + 1}/{len(session.questions)}  |  "
                f"Streak {store.state.user.current_session_streak}[/dim]"
            )
            handler.present(question, console)

            outcome = None
            while outcome is None:
                answer = handler.get_input(question, console)
                outcome = session.submit(answer)
                if outcome is None:
                    console.print("[yellow]Please enter an answer[/yellow]")

            feedback = outcome.result.feedback
            if not outcome.result.correct and outcome.result.correct_answer not in feedback:
                feedback += f"\n[dim]Answer: {outcome.result.correct_answer}[/dim]"
            if store.state.user.settings.timer_enabled:
                feedback += f"\n[dim]Time: {outcome.response_time_ms / 1000:.1f}s[/dim]"
            console.print(result_panel(outcome.result.correct, feedback, outcome.xp_gained))

            if session.auto_advance_pending:
                time.sleep(session.auto_advance_seconds)
                session.tick()
            elif session.index + 1 < len(session.questions):
                Prompt.ask("[dim]Press Enter for next question[/dim]", default="", show_default=False)
                session.advance()
            else:
                session.advance()

    except KeyboardInterrupt:
        console.print("\n\n[yellow]Round interrupted.[/yellow]")

    _display_summary(session)
    store.close()


@app.command()
def stats(
    data_path: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Menu dataset JSON file",
    ),
) -> None:
    """Show profile, level progress and category mastery."""
    store = _open_store()
    state = store.state
    user = state.user
    info = level_from_xp(user.xp)

    console.print("\n[bold cyan]Profile[/bold cyan]")
    console.print("=" * 40)

    filled = int(info.progress * 20)
    bar = "█" * filled + "░" * (20 - filled)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Level", f"{info.level}  {bar}  {info.current_level_xp}/{info.xp_to_next_level} XP")
    table.add_row("Total XP", str(user.xp))
    table.add_row("Day streak", str(user.streak_days))
    table.add_row("Best answer streak", str(user.best_ever_streak))
    table.add_row("Questions answered", str(user.total_questions_answered))
    table.add_row("Sessions completed", str(state.stats.sessions_completed))
    if state.stats.favorite_mode:
        table.add_row("Favorite mode", style_mode(state.stats.favorite_mode))
    if state.stats.strongest_category:
        table.add_row("Strongest category", state.stats.strongest_category)
    if state.stats.weakest_category:
        table.add_row("Weakest category", state.stats.weakest_category)
    table.add_row("Achievements", f"{len(user.achievements)}/{len(ACHIEVEMENTS_BY_ID)}")

    console.print(table)

    deck = _load_deck(data_path)

    counts = {status: 0 for status in ItemStatus}
    for question in deck.questions:
        progress = state.items_progress.get(question.id)
        counts[progress.status if progress else ItemStatus.NEW] += 1

    console.print("\n[bold]Mastery[/bold]")
    mastery_table = Table()
    mastery_table.add_column("Status")
    mastery_table.add_column("Questions", justify="right")
    for status, n in counts.items():
        mastery_table.add_row(f"[{status.color}]{status.emoji} {status.display_name}[/{status.color}]", str(n))
    console.print(mastery_table)

    console.print("\n[bold]Categories[/bold]")
    category_table = Table()
    category_table.add_column("Category")
    category_table.add_column("Mastered", justify="right")
    for name in deck.categories:
        percent = category_mastery(state.items_progress, deck.by_category(name))
        category_table.add_row(name, f"{percent}%")
    console.print(category_table)

    badges = ", ".join(
        ACHIEVEMENTS_BY_ID[a].name
        for a in CATEGORY_BADGES
        if a in user.achievements
    )
    if badges:
        console.print(f"[dim]Category badges: {badges}[/dim]")

    if state.practice_tests:
        console.print("\n[bold]Recent Practice Tests[/bold]")
        test_table = Table()
        test_table.add_column("Date")
        test_table.add_column("Score", justify="right")
        test_table.add_column("Weak areas")
        for test in state.practice_tests[-5:][::-1]:
            test_table.add_row(
                test.date.strftime("%Y-%m-%d %H:%M"),
                f"{test.score}%",
                ", ".join(test.weak_areas) or "-",
            )
        console.print(test_table)

    store.close()


@app.command()
def due(
    limit: int = typer.Option(20, "--limit", "-l", min=1, help="Rows to show"),
    data_path: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Menu dataset JSON file",
    ),
) -> None:
    """List questions due for review, highest weight first."""
    deck = _load_deck(data_path)
    store = _open_store()
    scheduler = ReviewScheduler(store.state.items_progress)

    due_list = scheduler.due_questions(deck.questions)
    if not due_list:
        console.print("\n[green]Nothing due for review![/green]")
        store.close()
        return

    console.print(f"\n[bold]{len(due_list)} questions due[/bold]\n")

    table = Table()
    table.add_column("ID")
    table.add_column("Item")
    table.add_column("Status")
    table.add_column("Weight", justify="right")
    table.add_column("Last seen")

    for entry in due_list[:limit]:
        status = entry.status
        last_seen = entry.last_seen.strftime("%Y-%m-%d") if entry.last_seen else "never"
        table.add_row(
            entry.question.id,
            entry.question.item_name,
            f"[{status.color}]{status.display_name}[/{status.color}]",
            f"{entry.weight:g}",
            last_seen,
        )

    console.print(table)
    store.close()


@app.command()
def reset(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
    no_backup: bool = typer.Option(
        False,
        "--no-backup",
        help="Do not save a backup first",
    ),
) -> None:
    """Clear all progress for a fresh start."""
    if not confirm and not Confirm.ask("Reset ALL progress?", default=False):
        raise typer.Exit(0)

    store = _open_store()
    backup_file = store.reset(backup=not no_backup)
    store.close()

    console.print("[green]All progress has been reset.[/green]")
    if backup_file:
        console.print(f"[dim]Backup saved to {backup_file}[/dim]")


@app.command()
def restore(
    backup_file: Optional[Path] = typer.Option(
        None,
        "--file", "-f",
        help="Backup file (defaults to the most recent)",
    ),
) -> None:
    """Restore progress from a backup."""
    store = _open_store()
    state = store.restore(backup_file)
    store.close()

    if state is None:
        console.print(f"[{STYLES['warning']}]No backup to restore.[/{STYLES['warning']}]")
        raise typer.Exit(1)

    console.print(
        f"[green]Progress restored:[/green] level {state.user.level}, "
        f"{len(state.items_progress)} items tracked"
    )


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()

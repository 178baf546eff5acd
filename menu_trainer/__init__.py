"""
Menu Trainer: terminal companion for memorizing a restaurant menu.

- core: similarity, mastery, progress and XP rules
- grading: answer validation and study-mode handlers
- delivery: content deck, scheduling, persistence, sessions and CLI
"""

__version__ = "1.0.0"

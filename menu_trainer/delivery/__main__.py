"""
Entry point for running the menu trainer as a module.

Usage:
    python -m menu_trainer.delivery study
    python -m menu_trainer.delivery stats
    python -m menu_trainer.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()

"""
Setup script for menu-trainer.

Menu Trainer is a terminal study companion for memorizing a restaurant
menu. Description lines become questions graded by a fuzzy answer
validator, mastery is tracked per question, and rounds are ordered by
weighted spaced repetition.

The 'menu-trainer' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="menu-trainer",
    version="1.0.0",
    description="Terminal menu memorization trainer with fuzzy grading and spaced repetition",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"menu_trainer": ["data/*.json"]},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Fuzzy matching
        "rapidfuzz>=3.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "menu-trainer=menu_trainer.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    keywords="menu training spaced-repetition cli quiz",
)

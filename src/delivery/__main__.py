"""
Entry point for running the learning CLI as a module.

Usage:
    python -m src.delivery path
    python -m src.delivery review word_1:4 word_2:2
    python -m src.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()

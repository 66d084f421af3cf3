#!/usr/bin/env python3
"""PomodoroTimer entry point.

Run with:
    python main.py
    python -m pomodorotimer
"""

from pomodorotimer.__main__ import main


if __name__ == "__main__":
    main()

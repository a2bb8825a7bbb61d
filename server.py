#!/usr/bin/env python3
"""
Local entrypoint for the Game Organizer API.

Use `python3 server.py`, or `uvicorn game_organizer.main:app`.
"""

from game_organizer.main import app, run


if __name__ == "__main__":
    run()

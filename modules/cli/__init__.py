"""
CLI Module.

Command-line client built with Typer for working with the notes
server.

Architecture:
- CLI is a thin presentation layer
- All hierarchy rules live in the backend
- CLI calls backend via HTTP (NotesClient over httpx)
- Sends X-Frontend-ID: cli header for log routing

Usage:
    python notes.py --help
    python notes.py tree
    python notes.py open 3
    python notes.py health status
"""

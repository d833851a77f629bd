"""
Application Modules.

- backend/: Note store, hierarchy services, HTTP and RPC API, database, configuration
- client/: API client, explorer tree builder and editor session
- cli/: Command-line client (Typer + Rich)
"""

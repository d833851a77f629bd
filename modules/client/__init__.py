"""
Notes client.

Caller-side pieces: the HTTP client for the notes API, the tree builder
used for display, and the editor session that keeps one note open.
"""

"""gitversioning - derive project versions from the state of a git repository."""

__version__ = "0.1.0"

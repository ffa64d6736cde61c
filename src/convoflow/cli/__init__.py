"""Command line interface for convoflow."""

"""patchbridge - unified diff engine for agent-driven text edits."""

__version__ = "0.1.0"

"""multiprompt: broadcast one prompt to several LLM provider accounts at once."""

__version__ = "1.0.0"

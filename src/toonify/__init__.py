"""toonify: decide when TOON beats JSON for LLM payloads and manage the round-trip."""

__version__ = "0.1.0"

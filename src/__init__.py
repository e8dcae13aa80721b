"""AI Tools Directory — bilingual catalog of AI tools with a GitHub-backed admin."""

__version__ = "0.1.0"

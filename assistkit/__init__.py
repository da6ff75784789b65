"""Chat assistant building blocks: messages, prompts, memory, tasks, tools and a Flask service."""

__version__ = "0.1.0"
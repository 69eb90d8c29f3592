"""Static catalog document source and the built-in default list."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from .errors import SourceUnavailableError


class DocumentSource(Protocol):
    """Anything that can produce the published catalog document."""

    def fetch(self) -> Any:
        ...


class StaticDocumentSource:
    """Read the published catalog from a JSON file.

    The file is read on every :meth:`fetch`; nothing is cached.
    """

    def __init__(self, path: Path) -> None:
        self._path = path.expanduser()

    @property
    def path(self) -> Path:
        """Return the resolved document path."""
        return self._path

    def fetch(self) -> Any:
        """Return the parsed document.

        Raises:
            SourceUnavailableError: If the file is missing, unreadable, or not JSON.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailableError(f"Cannot read {self._path}: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SourceUnavailableError(f"Invalid JSON in {self._path}: {exc}") from exc


DEFAULT_TOOLS: tuple[dict[str, Any], ...] = (
    {
        "name": "ChatGPT",
        "description": "AI chatbot for writing, coding, and problem solving.",
        "category": "AI Writing",
        "url": "https://chat.openai.com",
    },
    {
        "name": "Claude",
        "description": "Helpful, honest AI assistant for writing and research.",
        "category": "AI Writing",
        "url": "https://claude.ai/",
        "logo": "https://logo.clearbit.com/anthropic.com",
    },
    {
        "name": "Midjourney",
        "description": "AI image generation tool using text prompts.",
        "category": "Image",
        "url": "https://www.midjourney.com",
    },
    {
        "name": "Stable Diffusion",
        "description": "Open-source image generation for creative workflows.",
        "category": "Image",
        "url": "https://stability.ai/",
    },
    {
        "name": "Runway",
        "description": "AI video editing and generation platform.",
        "category": "Video",
        "url": "https://runwayml.com",
    },
    {
        "name": "Descript",
        "description": "Edit video like a doc with AI-powered features.",
        "category": "Video",
        "url": "https://www.descript.com/",
    },
    {
        "name": "GitHub Copilot",
        "description": "AI pair programmer that helps you write code faster.",
        "category": "Coding",
        "url": "https://github.com/features/copilot",
    },
    {
        "name": "Tabnine",
        "description": "AI code completions for multiple languages and IDEs.",
        "category": "Coding",
        "url": "https://www.tabnine.com/",
    },
    {
        "name": "Jasper",
        "description": "AI content platform for marketing and copywriting.",
        "category": "Marketing",
        "url": "https://www.jasper.ai/",
    },
    {
        "name": "Notion AI",
        "description": "AI-powered writing and organization inside Notion.",
        "category": "AI Writing",
        "url": "https://www.notion.so/product/ai",
    },
    {
        "name": "Canva Magic Write",
        "description": "Generate text and design with AI in Canva.",
        "category": "Marketing",
        "url": "https://www.canva.com/features/ai/",
    },
    {
        "name": "Cursor",
        "description": "AI code editor with chat and inline assistance.",
        "category": "Coding",
        "url": "https://cursor.com/",
    },
)


__all__ = ["DEFAULT_TOOLS", "DocumentSource", "StaticDocumentSource"]

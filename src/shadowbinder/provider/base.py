from __future__ import annotations

from typing import Protocol


class ProviderError(RuntimeError):
    pass


class TextProvider(Protocol):
    def generate_text(self, prompt: str) -> str:
        ...

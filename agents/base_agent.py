"""Base agent class with common provider and prompt utilities."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

from config.settings import Settings
from tools.generation_client import ClaudeGenerationProvider, GenerationProvider, GenerationRequest
from tools.retry import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PROMPTS_DIR = Path(__file__).parent.parent / "config" / "prompts"


@lru_cache(maxsize=32)
def _read_prompt_file(path: str) -> str:
    """Read and cache a prompt file by absolute path string."""
    return Path(path).read_text(encoding="utf-8")


class BaseAgent:
    """Base class for agents that talk to the generation provider.

    Every provider call goes through ``self.retry`` so rate limits are
    handled in one place.
    """

    prompt_name: str = ""

    def __init__(
        self,
        provider: Optional[GenerationProvider] = None,
        settings: Optional[Settings] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        self.settings = settings or Settings()
        self.provider = provider or ClaudeGenerationProvider(self.settings)
        self.retry = retry or RetryPolicy.from_settings(self.settings)

    def _load_prompt(self, template_name: Optional[str] = None) -> str:
        """Load a prompt template from config/prompts/ (cached after first read).

        Args:
            template_name: Filename without extension, e.g. 'writer'.

        Returns:
            The prompt template text.
        """
        path = _PROMPTS_DIR / f"{template_name or self.prompt_name}.md"
        if not path.exists():
            raise FileNotFoundError(f"Prompt template not found: {path}")
        return _read_prompt_file(str(path))

    def _extract_section(self, template: str, section_header: str) -> str:
        """Extract a specific section from a prompt template.

        Sections are delimited by '## ' headers in the markdown.
        """
        lines = template.split("\n")
        capturing = False
        result = []
        for line in lines:
            if line.strip().startswith("## ") and section_header in line:
                capturing = True
                continue
            elif line.strip().startswith("## ") and capturing:
                break
            elif capturing:
                result.append(line)
        return "\n".join(result).strip()

    def _section(self, section_header: str, **values) -> str:
        """Load this agent's template section and fill its placeholders."""
        text = self._extract_section(self._load_prompt(), section_header)
        return text.format(**values) if values else text

    def _request(self, prompt: str, model: str) -> GenerationRequest:
        return GenerationRequest(
            prompt=prompt,
            system_prompt=self._section("System Prompt"),
            model=model,
        )

    async def _call(self, fn: Callable[[], Awaitable[T]]) -> T:
        return await self.retry.run(fn)

    async def _generate_text(self, prompt: str, model: str) -> str:
        request = self._request(prompt, model)
        text = await self._call(lambda: self.provider.generate_once(request))
        return text.strip()

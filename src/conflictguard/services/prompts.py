"""
Prompt templates for the extraction and reasoning calls.

Templates live as text files under ``conflictguard/prompts`` so they can be
edited without touching code. Placeholders are replaced literally, so braces
inside document content are never interpreted.
"""

from functools import lru_cache
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"


class PromptTemplates:
    """Loads the four prompt templates and fills in their placeholders."""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR):
        self.entity_extraction_system_prompt = self._load(prompts_dir, "entity_extraction_system.txt")
        self._entity_extraction_user = self._load(prompts_dir, "entity_extraction_user.txt")
        self.conflict_reasoning_system_prompt = self._load(prompts_dir, "conflict_reasoning_system.txt")
        self._conflict_reasoning_user = self._load(prompts_dir, "conflict_reasoning_user.txt")
        logger.info("prompt_templates_loaded", count=4, path=str(prompts_dir))

    @staticmethod
    def _load(prompts_dir: Path, filename: str) -> str:
        return (prompts_dir / filename).read_text(encoding="utf-8")

    def entity_extraction_user_prompt(
        self, document_type: str, document_name: str, content: str
    ) -> str:
        return (
            self._entity_extraction_user.replace("{documentType}", document_type)
            .replace("{documentName}", document_name)
            .replace("{content}", content)
        )

    def conflict_reasoning_user_prompt(self, entities: str) -> str:
        return self._conflict_reasoning_user.replace("{entities}", entities)


@lru_cache()
def get_prompt_templates() -> PromptTemplates:
    """Get cached prompt templates."""
    return PromptTemplates()

# flowcraft/core/engine.py

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from flowcraft.core.models import AIAnalysis, GenerationResult

# Receives {"phase": str, "message": str, "progress"?: number}; zero or more calls.
EngineProgressCallback = Callable[[Dict[str, Any]], None]


class WorkflowEngine(ABC):
    """
    The collaborator that actually decides which nodes and integrations a
    prompt needs. The orchestrator only relies on this contract.
    """

    name: str = "engine"

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        on_progress: Optional[EngineProgressCallback] = None,
        blueprint: Optional[str] = None,
    ) -> GenerationResult:
        """Produce a workflow for `prompt`, optionally steered by an approved blueprint."""

    @abstractmethod
    async def analyze(self, prompt: str) -> AIAnalysis:
        """Produce a reviewable blueprint for `prompt`."""

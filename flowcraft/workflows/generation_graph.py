# flowcraft/workflows/generation_graph.py

from typing import Optional

from flowcraft.agents.orchestrator import GenerationOrchestrator
from flowcraft.core.config import GeneratorConfig
from flowcraft.core.models import Envelope
from flowcraft.core.progress import ProgressObserver
from flowcraft.integrations.openai_engine import create_engine


def build_orchestrator(config: Optional[GeneratorConfig] = None) -> GenerationOrchestrator:
    """
    Wire the orchestrator to the OpenAI engine factory.
    Configuration is read from the environment once per call unless given.
    """
    return GenerationOrchestrator(config or GeneratorConfig.from_env(), engine_factory=create_engine)


async def run_generation_flow(
    prompt: str,
    observer: Optional[ProgressObserver] = None,
    config: Optional[GeneratorConfig] = None,
) -> Envelope:
    """
    Convenience entrypoint for scripts: one prompt in, one envelope out.
    """
    return await build_orchestrator(config).generate(prompt, observer=observer)

# flowcraft/agents/orchestrator.py

from __future__ import annotations
import logging
from typing import Callable, Optional, Union

from flowcraft.agents.mock_engine import MockWorkflowEngine
from flowcraft.core.config import GeneratorConfig, resolve
from flowcraft.core.engine import WorkflowEngine
from flowcraft.core.errors import ConfigurationError, ValidationError, classify_failure
from flowcraft.core.models import Envelope, FallbackErrorEnvelope, RemediationEnvelope
from flowcraft.core.progress import Phase, ProgressChannel, ProgressObserver
from flowcraft.core.review import BlueprintReview
from flowcraft.utils.helpers import truncate
from flowcraft.workflows.envelope_builder import (
    build_success_envelope,
    fallback_error_envelope,
    remediation_envelope,
)

logger = logging.getLogger(__name__)

EngineFactory = Callable[[GeneratorConfig], WorkflowEngine]


def validate_prompt(prompt: Optional[str]) -> str:
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError("Prompt is required")
    return prompt


class GenerationOrchestrator:
    """
    Drives one prompt through the pipeline:
      1) validate the prompt
      2) gate on configuration (no credential -> remediation envelope)
      3) open a fresh engine session with its own progress channel
      4) map the engine outcome to a success / remediation / fallback envelope

    Holds no per-run state; concurrent calls share only the read-only config.
    Only ValidationError leaves this boundary.
    """

    def __init__(self, config: GeneratorConfig, engine_factory: EngineFactory) -> None:
        self.config = config
        self.engine_factory = engine_factory

    def _open_engine(self) -> Union[WorkflowEngine, RemediationEnvelope]:
        resolution = resolve(self.config)
        if not resolution.ai_available:
            logger.info("AI unavailable: returning remediation instructions")
            return remediation_envelope()
        if resolution.use_mock_data:
            return MockWorkflowEngine()
        return self.engine_factory(self.config)

    def _failure_envelope(self, error: Union[BaseException, str, None], kind: Optional[str] = None) -> Union[RemediationEnvelope, FallbackErrorEnvelope]:
        error_class = classify_failure(error, kind)
        text = error if isinstance(error, str) or error is None else (str(error) or type(error).__name__)
        if error_class is ConfigurationError:
            logger.warning("Generation hit a configuration fault: %s", truncate(text or "", 200))
            return remediation_envelope(error="OpenAI API key required")
        logger.warning("Generation failed: %s", truncate(text or "", 200))
        return fallback_error_envelope(text, kind=error_class.__name__)

    async def generate(
        self,
        prompt: str,
        observer: Optional[ProgressObserver] = None,
        blueprint: Optional[str] = None,
    ) -> Envelope:
        prompt = validate_prompt(prompt)
        logger.info("Starting workflow generation: %s", truncate(prompt))

        try:
            engine = self._open_engine()
            if isinstance(engine, RemediationEnvelope):
                return engine

            channel = ProgressChannel(observer)
            result = await engine.generate(prompt, on_progress=channel.engine_callback(), blueprint=blueprint)

            if not result.success:
                return self._failure_envelope(result.error, result.error_kind)

            if not channel.completed:
                channel.report(Phase.COMPLETE, "Workflow generation complete!")
            envelope = build_success_envelope(result, channel.updates)
            logger.info(
                "Workflow generated: %d nodes, %d edges, %d progress updates",
                len(envelope.workflow.nodes), len(envelope.workflow.edges), len(envelope.progress_updates),
            )
            return envelope

        except Exception as e:
            logger.exception("Unexpected fault during generation")
            return self._failure_envelope(e)

    async def analyze(self, prompt: str) -> Union[BlueprintReview, RemediationEnvelope, FallbackErrorEnvelope]:
        """
        Analysis sub-phase. The returned review, once approved, runs generate()
        with the approved blueprint text.
        """
        prompt = validate_prompt(prompt)
        logger.info("Analyzing prompt: %s", truncate(prompt))

        try:
            engine = self._open_engine()
            if isinstance(engine, RemediationEnvelope):
                return engine
            analysis = await engine.analyze(prompt)
        except Exception as e:
            logger.exception("Analysis failed")
            return self._failure_envelope(e)

        def on_approve(text: str):
            return self.generate(prompt, blueprint=text)

        return BlueprintReview(prompt, analysis, on_approve=on_approve)

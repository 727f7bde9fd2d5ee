# flowcraft/core/review.py

from __future__ import annotations
import uuid
from enum import Enum
from typing import Any, Callable, Optional

from flowcraft.core.errors import ReviewStateError, ValidationError
from flowcraft.core.models import AIAnalysis


class ReviewState(str, Enum):
    PROPOSED = "proposed"
    EDITING = "editing"
    APPROVED = "approved"
    REJECTED = "rejected"


TERMINAL_STATES = {ReviewState.APPROVED, ReviewState.REJECTED}


class BlueprintReview:
    """
    Holds one AI analysis while the user decides what to do with it.

      proposed -> editing | approved | rejected
      editing  -> editing (keeps draft) | approved
      approved, rejected: terminal (rejection discards the analysis)

    Only the blueprint text is editable; assumptions, recommendations and
    suggested nodes are advisory and stay as the engine produced them.
    """

    def __init__(
        self,
        prompt: str,
        analysis: AIAnalysis,
        on_approve: Optional[Callable[[str], Any]] = None,
        review_id: Optional[str] = None,
    ) -> None:
        self.review_id = review_id or uuid.uuid4().hex
        self.prompt = prompt
        self._analysis: Optional[AIAnalysis] = analysis.model_copy(deep=True)
        self._draft: Optional[str] = analysis.blueprint
        self._on_approve = on_approve
        self.state = ReviewState.PROPOSED

    @property
    def analysis(self) -> Optional[AIAnalysis]:
        """A copy of the engine's analysis; None once the review was rejected."""
        return self._analysis.model_copy(deep=True) if self._analysis is not None else None

    @property
    def blueprint(self) -> Optional[str]:
        """The currently displayed blueprint: original, or the latest edit."""
        return self._draft

    @property
    def original_blueprint(self) -> Optional[str]:
        return self._analysis.blueprint if self._analysis is not None else None

    def _require(self, *allowed: ReviewState) -> None:
        if self.state not in allowed:
            raise ReviewStateError(
                f"Review {self.review_id} is {self.state.value}; "
                f"expected one of: {', '.join(s.value for s in allowed)}."
            )

    def start_edit(self) -> None:
        self._require(ReviewState.PROPOSED, ReviewState.EDITING)
        self.state = ReviewState.EDITING

    def edit(self, new_text: str) -> None:
        self._require(ReviewState.PROPOSED, ReviewState.EDITING)
        if not (new_text or "").strip():
            raise ValidationError("Blueprint text cannot be empty.")
        self.state = ReviewState.EDITING
        self._draft = new_text

    def approve(self) -> Any:
        """
        Commit the displayed blueprint and hand it to generation.
        Returns whatever `on_approve` returns (a coroutine for the orchestrator).
        """
        self._require(ReviewState.PROPOSED, ReviewState.EDITING)
        self.state = ReviewState.APPROVED
        if self._on_approve is None:
            return None
        return self._on_approve(self._draft)

    def reject(self) -> None:
        self._require(ReviewState.PROPOSED, ReviewState.EDITING)
        self.state = ReviewState.REJECTED
        self._on_approve = None
        self._analysis = None
        self._draft = None

    def to_dict(self) -> dict:
        if self._analysis is None:
            return {"review_id": self.review_id, "state": self.state.value}
        return {
            "review_id": self.review_id,
            "state": self.state.value,
            "prompt": self.prompt,
            "blueprint": self._draft,
            "analysis": self._analysis.model_dump(by_alias=True, exclude_none=True),
        }

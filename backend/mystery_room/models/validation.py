"""
Action outcome models for the puzzle progression engine.

ActionResult represents the outcome of a mutation entry point (activate,
flip a card, report progress...). Entry points validate their
preconditions first and either apply the whole transition or none of it,
so a rejected result always means "nothing changed".

Example:
    >>> # Accepted action
    >>> result = ActionResult(
    ...     accepted=True,
    ...     context={"edge_index": 0},
    ... )

    >>> # Rejected action
    >>> result = ActionResult(
    ...     accepted=False,
    ...     rejection_code=RejectionCode.RESOLUTION_LOCKED,
    ...     rejection_reason="Two cards are already being compared.",
    ... )
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from mystery_room.models.event import RejectionCode


class ActionResult(BaseModel):
    """Result of a mutation entry point.

    Attributes:
        accepted: Whether the transition was applied
        rejection_code: Code indicating why it was refused (if rejected)
        rejection_reason: Human-readable reason (if rejected)
        context: Additional context for the presentation layer
    """

    accepted: bool

    # Rejection details (required if accepted=False)
    rejection_code: RejectionCode | None = None
    rejection_reason: str | None = None

    context: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_rejection_fields(self) -> "ActionResult":
        """Ensure rejection fields are present when accepted=False."""
        if not self.accepted:
            if self.rejection_code is None:
                raise ValueError("rejection_code is required when accepted=False")
            if self.rejection_reason is None:
                raise ValueError("rejection_reason is required when accepted=False")
        return self


# Convenience factory functions


def accepted_result(**context: object) -> ActionResult:
    """Create an accepted ActionResult.

    Args:
        **context: Additional context to include

    Returns:
        ActionResult with accepted=True

    Example:
        >>> result = accepted_result(placed=True, piece_id=2)
        >>> assert result.accepted
    """
    return ActionResult(accepted=True, context=dict(context))


def rejected_result(
    code: RejectionCode,
    reason: str,
    **context: object,
) -> ActionResult:
    """Create a rejected ActionResult.

    Args:
        code: The rejection code
        reason: Human-readable reason for rejection
        **context: Additional context to include

    Returns:
        ActionResult with accepted=False

    Example:
        >>> result = rejected_result(
        ...     RejectionCode.CARD_MATCHED,
        ...     "That card is already matched.",
        ...     index=4,
        ... )
        >>> assert not result.accepted
    """
    return ActionResult(
        accepted=False,
        rejection_code=code,
        rejection_reason=reason,
        context=dict(context),
    )

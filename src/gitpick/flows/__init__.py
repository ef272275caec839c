"""Interaction-flow engine: list, select, dispatch, confirm, execute, report."""

from .engine import dispatch, list_candidates, render_preview, run_entity_flow, run_menu_flow
from .guard import GuardAction, GuardDecision, GuardState, guard
from .model import (
    BulkAction,
    Candidate,
    EntityFlow,
    MenuFlow,
    MenuItem,
    Outcome,
    OutcomeStatus,
    Selection,
)

__all__ = [
    "BulkAction",
    "Candidate",
    "dispatch",
    "EntityFlow",
    "guard",
    "GuardAction",
    "GuardDecision",
    "GuardState",
    "list_candidates",
    "MenuFlow",
    "MenuItem",
    "Outcome",
    "OutcomeStatus",
    "render_preview",
    "run_entity_flow",
    "run_menu_flow",
    "Selection",
]

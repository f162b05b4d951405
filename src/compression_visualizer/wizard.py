"""Step sequencing for the compression wizard.

The controller owns a :class:`WorkflowSelection` and the current
:class:`Step`. Presentation layers report user intent through the public
methods and render whatever :attr:`WizardController.step` says.

Navigation is driven by two tables: ``_TRANSITIONS`` names the step that
follows each step for a given selection, and ``_PRECONDITIONS`` names what
must be true before leaving a step. A failed precondition makes
:meth:`WizardController.advance` a no-op.

Results are guarded by tickets. :meth:`WizardController.begin_results`
hands out a ticket when the results step is entered; every navigation or
selection change invalidates outstanding tickets, so an analysis that
finishes after the user left the results step is dropped by
:meth:`WizardController.deliver_result`.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .exceptions import SelectionError
from .models import (
    AnyResult,
    Asset,
    ConfigValue,
    Mode,
    Source,
    Technique,
    WorkflowSelection,
)
from .upload import build_asset, is_upload_valid

logger = logging.getLogger(__name__)


class Step(str, Enum):
    WELCOME = "welcome"
    MODE_SELECT = "mode_select"
    SOURCE_SELECT = "source_select"
    SUBJECT_PREDEFINED = "subject_predefined"
    SUBJECT_UPLOAD = "subject_upload"
    TECHNIQUE_SELECT = "technique_select"
    CONFIGURE = "configure"
    RESULTS = "results"


STEP_LABELS: Dict[Step, str] = {
    Step.WELCOME: "Welcome",
    Step.MODE_SELECT: "Mode",
    Step.SOURCE_SELECT: "Source",
    Step.SUBJECT_PREDEFINED: "Select",
    Step.SUBJECT_UPLOAD: "Upload",
    Step.TECHNIQUE_SELECT: "Technique",
    Step.CONFIGURE: "Configure",
    Step.RESULTS: "Results",
}


def _subject_step(selection: WorkflowSelection) -> Step:
    if selection.source is Source.UPLOAD:
        return Step.SUBJECT_UPLOAD
    return Step.SUBJECT_PREDEFINED


def _subject_matches(selection: WorkflowSelection) -> bool:
    return selection.subject is not None and selection.subject.mode is selection.mode


def _technique_matches(selection: WorkflowSelection) -> bool:
    return (
        selection.technique is not None
        and selection.technique.mode is selection.mode
    )


_TRANSITIONS: Dict[Step, Callable[[WorkflowSelection], Optional[Step]]] = {
    Step.WELCOME: lambda s: Step.MODE_SELECT,
    Step.MODE_SELECT: lambda s: Step.SOURCE_SELECT,
    Step.SOURCE_SELECT: _subject_step,
    Step.SUBJECT_PREDEFINED: lambda s: Step.TECHNIQUE_SELECT,
    Step.SUBJECT_UPLOAD: lambda s: Step.TECHNIQUE_SELECT,
    Step.TECHNIQUE_SELECT: lambda s: Step.CONFIGURE,
    Step.CONFIGURE: lambda s: Step.RESULTS,
    Step.RESULTS: lambda s: None,
}

_PRECONDITIONS: Dict[Step, Callable[[WorkflowSelection], bool]] = {
    Step.MODE_SELECT: lambda s: s.mode is not None,
    Step.SOURCE_SELECT: lambda s: s.mode is not None and s.source is not None,
    Step.SUBJECT_PREDEFINED: _subject_matches,
    Step.SUBJECT_UPLOAD: _subject_matches,
    Step.TECHNIQUE_SELECT: lambda s: _subject_matches(s) and _technique_matches(s),
}


class WizardController:
    """State machine behind the wizard screens."""

    def __init__(self) -> None:
        self.step: Step = Step.WELCOME
        self.selection = WorkflowSelection()
        self.result: Optional[AnyResult] = None
        self._generation = 0

    # --- derived views ---

    @property
    def mode(self) -> Optional[Mode]:
        return self.selection.mode

    def can_advance(self) -> bool:
        if _TRANSITIONS[self.step](self.selection) is None:
            return False
        check = _PRECONDITIONS.get(self.step)
        return check is None or check(self.selection)

    def path(self) -> List[Step]:
        """Return the sequence of steps for the branch currently chosen."""
        steps = [Step.WELCOME]
        nxt = _TRANSITIONS[Step.WELCOME](self.selection)
        while nxt is not None:
            steps.append(nxt)
            nxt = _TRANSITIONS[nxt](self.selection)
        return steps

    def progress(self) -> Tuple[int, int]:
        """Return ``(position, total)`` of the current step on :meth:`path`."""
        steps = self.path()
        return steps.index(self.step) + 1, len(steps)

    def effective_config(self) -> Dict[str, ConfigValue]:
        technique = self.selection.technique
        if technique is None:
            return {}
        return technique.effective_config(self.selection.config)

    # --- navigation ---

    def _move_to(self, step: Step) -> None:
        logger.debug("wizard step %s -> %s", self.step.value, step.value)
        self.step = step
        self._invalidate_results()

    def advance(self) -> bool:
        """Move to the next step if the current step is complete."""
        if not self.can_advance():
            logger.debug("advance from %s blocked", self.step.value)
            return False
        nxt = _TRANSITIONS[self.step](self.selection)
        if nxt is None:
            raise SelectionError(f"no step follows {self.step.value}")
        self._move_to(nxt)
        return True

    def go_back(self) -> bool:
        steps = self.path()
        idx = steps.index(self.step) if self.step in steps else 0
        if idx == 0:
            return False
        self._move_to(steps[idx - 1])
        return True

    def start_over(self) -> None:
        self.selection = WorkflowSelection()
        self._move_to(Step.MODE_SELECT)

    # --- compound selections ---

    def select_mode(self, mode: Mode | str) -> bool:
        if self.step is not Step.MODE_SELECT:
            return False
        mode = Mode(mode)
        if self.selection.mode is not mode:
            self.selection = WorkflowSelection(mode=mode)
        return self.advance()

    def select_source(self, source: Source | str) -> bool:
        if self.step is not Step.SOURCE_SELECT:
            return False
        source = Source(source)
        if self.selection.source is not source:
            self.selection.source = source
            self.selection.subject = None
        return self.advance()

    def submit_upload(self, fields: Mapping[str, Any]) -> bool:
        """Build an asset from form ``fields``, select it and advance.

        Returns False and leaves state untouched when the form is invalid.
        """
        if self.step is not Step.SUBJECT_UPLOAD or self.selection.mode is None:
            return False
        if not is_upload_valid(self.selection.mode, fields):
            return False
        self.set_subject(build_asset(self.selection.mode, fields))
        return self.advance()

    # --- setters ---

    def set_subject(self, asset: Asset) -> None:
        if self.selection.mode is None or asset.mode is not self.selection.mode:
            raise SelectionError(
                f"Cannot select {asset.mode.value} '{asset.name}' in "
                f"{self.selection.mode.value if self.selection.mode else 'unset'} mode."
            )
        self.selection.subject = asset
        self._invalidate_results()

    def set_technique(self, technique: Technique) -> None:
        if self.selection.mode is None or technique.mode is not self.selection.mode:
            raise SelectionError(
                f"Technique '{technique.id}' does not apply to "
                f"{self.selection.mode.value if self.selection.mode else 'unset'} mode."
            )
        current = self.selection.technique
        if current is None or current.id != technique.id:
            self.selection.config = {}
        self.selection.technique = technique
        self._invalidate_results()

    def set_config(self, partial: Mapping[str, Any]) -> None:
        """Merge ``partial`` into the configuration.

        All values are checked before any is applied.
        """
        technique = self.selection.technique
        if technique is None:
            raise SelectionError("Select a technique before configuring it.")
        coerced = {
            key: technique.parameter(key).coerce(value)
            for key, value in partial.items()
        }
        self.selection.config = {**self.selection.config, **coerced}
        self._invalidate_results()

    # --- results ---

    def _invalidate_results(self) -> None:
        self._generation += 1
        self.result = None

    def begin_results(self) -> int:
        """Return a ticket for an estimate started on the results step."""
        if self.step is not Step.RESULTS:
            raise SelectionError("Results can only be computed on the results step.")
        self._invalidate_results()
        return self._generation

    def deliver_result(self, ticket: int, result: AnyResult) -> bool:
        """Store ``result`` unless ``ticket`` has gone stale."""
        if self.step is not Step.RESULTS or ticket != self._generation:
            logger.info("Discarding stale simulation result (ticket %s)", ticket)
            return False
        self.result = result
        return True


__all__ = ["Step", "STEP_LABELS", "WizardController"]

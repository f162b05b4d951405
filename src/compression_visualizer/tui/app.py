from __future__ import annotations

from typing import Optional

from ..analysis import AnalysisService, build_analysis_service
from ..config import Config
from ..wizard import WizardController


def run_tui(
    controller: Optional[WizardController] = None,
    service: Optional[AnalysisService] = None,
    app_config: Optional[Config] = None,
):
    """Launch the Textual wizard and return the app once it exits."""
    try:
        import textual  # noqa: F401
    except Exception as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("Textual is required for the TUI") from exc

    from .screens import WizardApp

    app_config = app_config or Config()
    if service is None:
        service = build_analysis_service(app_config)
    app = WizardApp(
        controller or WizardController(),
        service,
        timeout=app_config.get("analysis_timeout"),
    )
    app.run()
    return app


__all__ = ["run_tui"]

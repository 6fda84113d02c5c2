"""Colored pipeline logger: ANSI-colored console logging for capture and search.

Provides a PipelineLogger with color-coded output per stage, making it easy
to follow a capture (classify → segments → storage → notify) or a search
(fuzzy → semantic → fusion) in the terminal.

Color scheme:
    🟢 Green  : Capture / Storage
    🔵 Blue   : Classification / Segments
    🟡 Yellow : Notifications
    🟣 Magenta: Semantic search
    🟠 Cyan   : Search / Fuzzy / Fusion
    🔴 Red    : Errors
    ⚪ Gray   : Timing / Stats
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


class PipelineStage:
    """Predefined stages with colors and icons."""

    CAPTURE = ("CAPTURE", _Colors.GREEN, "📥")
    CLASSIFY = ("CLASSIFY", _Colors.BLUE, "🏷️")
    SEGMENTS = ("SEGMENTS", _Colors.BLUE, "🗂️")
    STORAGE = ("STORAGE", _Colors.GREEN, "💾")
    NOTIFY = ("NOTIFY", _Colors.YELLOW, "📣")
    SEARCH = ("SEARCH", _Colors.CYAN, "🔎")
    FUZZY = ("FUZZY", _Colors.CYAN, "〰️")
    SEMANTIC = ("SEMANTIC", _Colors.MAGENTA, "🧠")
    FUSION = ("FUSION", _Colors.CYAN, "⚖️")
    ERROR = ("ERROR", _Colors.RED, "❌")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


def _format_kwargs(kwargs: dict[str, Any], color: str) -> str:
    if not kwargs:
        return ""
    details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {color}({details}){_Colors.RESET}"


class PipelineLogger:
    """Color-coded logger for multi-stage flows.

    Usage:
        log = PipelineLogger("CaptureService")
        log.step_start(PipelineStage.CAPTURE, "Capturing https://example.com")
        log.detail("segments", count=2)
        log.step_complete(PipelineStage.STORAGE, "Stored 2 rows")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_kwargs(kwargs, _Colors.GRAY))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + _format_kwargs(kwargs, _Colors.GRAY))

    def step_warning(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log a degraded-but-recovered step in yellow."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.YELLOW}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.YELLOW}⚠ {message}{_Colors.RESET}"
        )
        self._logger.warning(formatted + _format_kwargs(kwargs, _Colors.GRAY))

    def step_error(
        self, stage: tuple[str, str, str], message: str, error: Exception | None = None
    ) -> None:
        """Log a step error in red."""
        label, _, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.info(formatted + _format_kwargs(kwargs, _Colors.DIM))

    def stats(self, **kwargs: Any) -> None:
        parts = [f"{k}: {v}" for k, v in kwargs.items()]
        self._logger.info(f"   {_Colors.GRAY}📈 {' | '.join(parts)}{_Colors.RESET}")

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(PipelineStage.STORAGE, "Persisting rows"):
                await repository.insert_content_rows(rows)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message}: failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message}: {elapsed:.2f}s")

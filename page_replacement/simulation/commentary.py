"""Natural-language commentary on a finished simulation.

The commentary comes from an external text-generation endpoint.  It is
purely cosmetic: every failure is logged and replaced by a fixed
indicator, so nothing here can affect the simulation or its playback.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

import requests

from ..core.errors import CommentaryUnavailable
from ..core.timeline import SimulationResult

logger = logging.getLogger(__name__)

COMMENTARY_UNAVAILABLE = "Error fetching AI feedback."


@dataclass(frozen=True)
class CommentaryRequest:
    algorithm: str
    frame_count: int
    page_references: tuple[int, ...]
    page_faults: int

    @classmethod
    def from_result(cls, result: SimulationResult) -> CommentaryRequest:
        return cls(
            algorithm=result.algorithm,
            frame_count=result.frame_count,
            page_references=result.references,
            page_faults=result.total_faults,
        )


def build_prompt(request: CommentaryRequest) -> str:
    refs = ", ".join(str(p) for p in request.page_references)
    return (
        f"The user has completed a page replacement simulation using the "
        f"{request.algorithm} algorithm with {request.frame_count} frames and "
        f"the page reference sequence {refs}. There were {request.page_faults} "
        f"page faults. Provide a simple explanation of the results and suggest "
        f"if a different algorithm might perform better."
    )


class CommentaryClient:
    """POSTs ``{"prompt": ...}`` and expects ``{"feedback": ...}`` back.

    Parameters
    ----------
    url:
        Endpoint of the text-generation service.  ``None`` disables
        commentary; every request then yields the unavailable indicator.
    session:
        Anything with a ``requests.Session``-compatible ``post`` method.
    """

    def __init__(
        self,
        url: str | None,
        timeout: float = 10.0,
        session: Any = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self._executor: ThreadPoolExecutor | None = None

    def _request(self, request: CommentaryRequest) -> str:
        if not self.url:
            raise CommentaryUnavailable("No commentary endpoint configured")
        try:
            response = self.session.post(
                self.url,
                json={"prompt": build_prompt(request)},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise CommentaryUnavailable(str(exc)) from exc

        feedback = data.get("feedback") if isinstance(data, dict) else None
        if not isinstance(feedback, str):
            raise CommentaryUnavailable("Response carries no 'feedback' text")
        return feedback

    def fetch(self, request: CommentaryRequest) -> str:
        """Return the commentary, or :data:`COMMENTARY_UNAVAILABLE`."""
        try:
            return self._request(request)
        except CommentaryUnavailable as exc:
            logger.warning("Commentary unavailable: %s", exc)
            return COMMENTARY_UNAVAILABLE

    def submit(
        self,
        request: CommentaryRequest,
        callback: Callable[[str], None] | None = None,
    ) -> Future[str]:
        """Fetch in the background.  The future always resolves to text.

        *callback* runs on the worker thread before the future resolves.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="commentary")

        def run() -> str:
            text = self.fetch(request)
            if callback is not None:
                try:
                    callback(text)
                except Exception:
                    logger.exception("Commentary callback failed")
            return text

        return self._executor.submit(run)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

"""Compare an uploaded final file with the paper's online-authored content."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from .extraction import TextExtractor, canonical_mime_type
from .models._timestamps import utc_now
from .models.outline import iter_sections
from .models.paper import ConsistencyVerdict, Paper, VerdictStatus
from .normalization import normalize, strip_markup
from .resilience import BoundedRunner, TimeoutPolicy
from .settings import WorkflowSettings
from .similarity import DEFAULT_MIN_SENTENCE_WORDS, score, sentence_coverage
from .storage import PaperStore

LOGGER = logging.getLogger(__name__)


def editor_content(paper: Paper) -> str:
    """Return the authored HTML of a paper.

    Papers written section by section keep ``content`` empty; their section
    bodies are joined in document order instead.
    """

    if strip_markup(paper.content).strip():
        return paper.content
    return ". ".join(section.content for section in iter_sections(paper.structure) if section.content)


class ConsistencyVerifier:
    """Produce similarity evidence for a human reviewer of the final file.

    A completed run is always PENDING_VERIFICATION. Any failure while
    extracting or scoring yields a CHECK_ERROR verdict instead of an
    exception, so the upload that triggered it still succeeds. Storage
    failures are not caught.
    """

    def __init__(
        self,
        papers: PaperStore,
        *,
        extractor: TextExtractor | None = None,
        timeout_seconds: float | None = 30.0,
        min_sentence_words: int = DEFAULT_MIN_SENTENCE_WORDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._papers = papers
        self._extractor = extractor or TextExtractor()
        self._runner: BoundedRunner[str] = BoundedRunner(
            TimeoutPolicy(name="text-extraction", timeout_seconds=timeout_seconds)
        )
        self._min_sentence_words = min_sentence_words
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        papers: PaperStore,
        settings: WorkflowSettings,
        *,
        extractor: TextExtractor | None = None,
    ) -> "ConsistencyVerifier":
        return cls(
            papers,
            extractor=extractor,
            timeout_seconds=settings.extraction_timeout_seconds,
            min_sentence_words=settings.coverage_min_sentence_words,
        )

    def verify(self, paper_id: str, data: bytes, mime_type: str | None) -> ConsistencyVerdict:
        """Score ``data`` against the paper's content and persist the verdict."""

        paper = self._papers.load(paper_id)
        verdict = self.evaluate(paper, data, mime_type)
        self._papers.update(
            paper_id,
            lambda current: current.model_copy(update={"consistency_verdict": verdict}),
        )
        LOGGER.info(
            "consistency.verdict_recorded",
            extra={
                "extra_payload": {
                    "paper_id": paper_id,
                    "status": verdict.status.value,
                    "score": verdict.score,
                    "editor_text_length": verdict.editor_text_length,
                    "extracted_text_length": verdict.extracted_text_length,
                }
            },
        )
        return verdict

    def evaluate(self, paper: Paper, data: bytes, mime_type: str | None) -> ConsistencyVerdict:
        """Build a verdict without persisting it."""

        checked_at = self._clock()
        file_size = len(data) if data is not None else 0
        declared = canonical_mime_type(mime_type) or None
        editor_text = ""
        try:
            editor_text = normalize(strip_markup(editor_content(paper)))
            file_text = normalize(self._runner.run(lambda: self._extractor.extract(data, mime_type)))
            similarity = score(editor_text, file_text)
            coverage = sentence_coverage(editor_text, file_text, min_words=self._min_sentence_words)
        except Exception as exc:  # noqa: BLE001 - any check failure becomes CHECK_ERROR evidence
            LOGGER.warning(
                "consistency.check_failed",
                extra={
                    "extra_payload": {
                        "paper_id": paper.id,
                        "mime_type": declared,
                        "file_size": file_size,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    }
                },
            )
            return ConsistencyVerdict(
                score=0.0,
                status=VerdictStatus.CHECK_ERROR,
                checked_at=checked_at,
                editor_text_length=len(editor_text),
                extracted_text_length=0,
                mime_type=declared,
                file_size=file_size,
                error=str(exc) or type(exc).__name__,
            )

        return ConsistencyVerdict(
            score=similarity,
            status=VerdictStatus.PENDING_VERIFICATION,
            checked_at=checked_at,
            editor_text_length=len(editor_text),
            extracted_text_length=len(file_text),
            sentence_coverage=coverage,
            mime_type=declared,
            file_size=file_size,
        )


__all__ = ["ConsistencyVerifier", "editor_content"]

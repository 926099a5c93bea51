"""Natural-language summaries of employee records.

The summary is the text the duplicate check embeds and the text stored
alongside the record, so it must describe the person and the role
without volatile detail.  Two modes:

* ``"llm"`` -- the record projection is rewritten by an LLM into a short
  paragraph (temperature 0 by default so reruns stay close).
* ``"template"`` -- the projection itself is the summary.  Fully
  deterministic and needs no model.
"""

from __future__ import annotations

from typing import Literal

from src.interfaces.llm_provider import ILLMProvider
from src.models.employee import EmployeeRecord
from src.utils.errors import LLMError, SummaryError
from src.utils.logging import get_logger

SummaryMode = Literal["llm", "template"]

_SYSTEM_PROMPT = (
    "You write short, factual summaries of employee records for a search "
    "index. Use only the facts given. Do not invent details. Reply with a "
    "single plain-text paragraph."
)


def build_record_projection(record: EmployeeRecord) -> str:
    """Render the identifying facts of *record* as plain sentences.

    Blank fields are skipped, so two records with the same facts always
    produce the same text regardless of which optional fields the résumé
    happened to leave empty.
    """
    job = record.job_details
    parts: list[str] = []

    headline = record.full_name or "Unnamed employee"
    role = " in ".join(p for p in (job.job_title, job.department) if p)
    parts.append(f"{headline}, {role}." if role else f"{headline}.")

    if record.employee_id:
        parts.append(f"Employee ID: {record.employee_id}.")
    if record.skills:
        parts.append(f"Skills: {', '.join(record.skills)}.")
    if job.employment_type:
        parts.append(f"Employment type: {job.employment_type}.")
    if job.hire_date:
        parts.append(f"Hired: {job.hire_date}.")

    location = record.work_location
    if location.nearest_office or location.is_remote is not None:
        where = location.nearest_office or "unspecified office"
        if location.is_remote:
            where += " (remote)"
        parts.append(f"Location: {where}.")

    city = ", ".join(p for p in (record.address.city, record.address.country) if p)
    if city:
        parts.append(f"Based in {city}.")
    if record.reporting_manager:
        parts.append(f"Reports to {record.reporting_manager}.")

    reviews = [r.comments for r in record.performance_reviews if r.comments]
    if reviews:
        parts.append(f"Performance reviews: {' '.join(reviews)}")
    if record.notes:
        parts.append(f"Notes: {record.notes}")

    return " ".join(parts)


class SummaryGenerator:
    """Produces the summary string for an :class:`EmployeeRecord`."""

    def __init__(
        self,
        llm_provider: ILLMProvider | None = None,
        mode: SummaryMode = "llm",
        temperature: float = 0.0,
        max_tokens: int = 400,
    ) -> None:
        if mode == "llm" and llm_provider is None:
            raise ValueError("LLM summary mode needs an llm_provider")
        self._llm = llm_provider
        self._mode = mode
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = get_logger(__name__)

    @property
    def mode(self) -> SummaryMode:
        return self._mode

    async def summarize(self, record: EmployeeRecord) -> str:
        """Return the summary for *record*.

        Raises
        ------
        SummaryError
            If the model call fails for any reason or returns nothing usable.
        """
        projection = build_record_projection(record)
        if self._mode == "template":
            self._logger.info("summary_generated", mode="template", chars=len(projection))
            return projection

        assert self._llm is not None
        try:
            reply = await self._llm.complete(
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=f"Summarize this employee:\n\n{projection}",
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except LLMError as exc:
            raise SummaryError(
                message=f"Summary generation failed: {exc.message}",
                provider_name=self._llm.get_provider_name(),
            ) from exc
        except Exception as exc:
            raise SummaryError(
                message=f"Summary generation failed: {exc}",
                provider_name=self._llm.get_provider_name(),
            ) from exc

        summary = reply.strip()
        if not summary:
            raise SummaryError(
                message="LLM returned an empty summary",
                provider_name=self._llm.get_provider_name(),
            )

        self._logger.info(
            "summary_generated",
            mode="llm",
            provider=self._llm.get_provider_name(),
            chars=len(summary),
        )
        return summary

"""LLM-based employee record extraction from résumé text.

Sends the résumé text to an LLM provider with a prompt that lists every
field of :class:`EmployeeRecord` and the JSON schema the reply must follow.
The reply is parsed and validated into immutable Pydantic models.

Architecture: LLM-as-Parser
---------------------------
Résumés have no fixed layout, so rule-based field extraction would need
endless special cases.  The model does the parsing; this module only
builds the prompt and holds the reply to the schema.  There is no retry
pass: a reply that doesn't fit the schema fails the ingestion with
:class:`ExtractionSchemaError` so nothing half-parsed reaches the store.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import TypeAdapter, ValidationError

from src.interfaces.llm_provider import ILLMProvider
from src.models.employee import EMPLOYEE_FIELDS, EmployeeRecord
from src.utils.errors import ExtractionSchemaError
from src.utils.logging import get_logger

# Matches markdown code fences (```json ... ``` or ``` ... ```) that LLMs
# frequently wrap around JSON output despite being asked not to.
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

_RECORDS_ADAPTER: TypeAdapter[list[EmployeeRecord]] = TypeAdapter(list[EmployeeRecord])

_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates employee data from résumés. "
    "You reply with JSON only."
)


def _format_instructions() -> str:
    schema = json.dumps(_RECORDS_ADAPTER.json_schema())
    return (
        "You must format your output as a JSON value that adheres to the "
        "following JSON Schema instance.\n\n"
        "```json\n"
        f"{schema}\n"
        "```\n\n"
        "Return a JSON array of employee objects. Do not add any text "
        "before or after the JSON."
    )


class RecordExtractor:
    """Turns résumé text into a list of :class:`EmployeeRecord` via an LLM.

    One résumé normally yields one record, but the model is asked for a JSON
    array and the reply is kept list-typed; choosing which record to keep is
    the caller's job.
    """

    def __init__(
        self,
        llm_provider: ILLMProvider,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> None:
        self._llm = llm_provider
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract(self, text: str) -> list[EmployeeRecord]:
        """Extract employee records from résumé text.

        Parameters
        ----------
        text:
            Plain résumé text, already trimmed by the caller.

        Returns
        -------
        list[EmployeeRecord]
            The records the model produced, in reply order.

        Raises
        ------
        ExtractionSchemaError
            If the reply is not JSON, does not fit the record schema, or
            contains no records.
        src.utils.errors.LLMError
            If the model call itself fails.
        """
        provider_name = self._llm.get_provider_name()
        self._logger.info(
            "record_extraction_start",
            text_chars=len(text),
            llm_provider=provider_name,
        )

        response = await self._llm.complete(
            system_prompt=_SYSTEM_PROMPT,
            user_prompt=self._build_prompt(text),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )

        try:
            items = self._parse_llm_response(response)
        except (json.JSONDecodeError, ValueError) as exc:
            self._logger.warning(
                "record_extraction_unparseable",
                error=str(exc),
                response_preview=response[:200],
            )
            raise ExtractionSchemaError(
                message=f"LLM reply is not valid record JSON: {exc}",
                provider_name=provider_name,
            ) from exc

        for index, item in enumerate(items):
            missing = [field for field in EMPLOYEE_FIELDS if field not in item]
            if missing:
                self._logger.info("record_fields_missing", record_index=index, fields=missing)

        try:
            records = _RECORDS_ADAPTER.validate_python(items)
        except ValidationError as exc:
            self._logger.warning("record_extraction_invalid", errors=exc.error_count())
            raise ExtractionSchemaError(
                message=f"LLM reply does not match the employee schema: {exc}",
                provider_name=provider_name,
            ) from exc

        if not records:
            raise ExtractionSchemaError(
                message="LLM reply contained no employee records",
                provider_name=provider_name,
            )

        self._logger.info(
            "record_extraction_complete",
            records=len(records),
            employee_id=records[0].employee_id,
        )
        return records

    # ------------------------------------------------------------------
    # Prompt construction
    # ------------------------------------------------------------------

    @staticmethod
    def _build_prompt(text: str) -> str:
        fields = ", ".join(EMPLOYEE_FIELDS)
        return (
            "Generate 1 employee record from the resume that is provided. "
            f"This record should include the following fields: {fields}. "
            "If no data is included on the resume that matches a given field "
            "that I asked for, include the field but leave it blank.\n\n"
            f"Resume: {text}\n\n"
            f"{_format_instructions()}"
        )

    # ------------------------------------------------------------------
    # Response parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_llm_response(response: str) -> list[dict[str, Any]]:
        """Pull the JSON array of record objects out of a model reply.

        Handles markdown code fences and preamble text around the JSON.  A
        bare object is treated as a one-element array.

        Raises
        ------
        json.JSONDecodeError
            If no JSON can be decoded.
        ValueError
            If the JSON is neither an object nor an array of objects.
        """
        text = response.strip()

        fence_match = _JSON_FENCE_RE.search(text)
        if fence_match:
            text = fence_match.group(1).strip()

        # Outermost array or object, whichever opens first.
        if not text.startswith(("[", "{")):
            starts = [pos for pos in (text.find("["), text.find("{")) if pos != -1]
            if starts:
                start = min(starts)
                closer = "]" if text[start] == "[" else "}"
                end = text.rfind(closer)
                if end > start:
                    text = text[start : end + 1]

        parsed = json.loads(text)

        if isinstance(parsed, dict):
            parsed = [parsed]
        if not isinstance(parsed, list):
            raise ValueError("LLM reply is not a JSON array or object")
        if not all(isinstance(item, dict) for item in parsed):
            raise ValueError("LLM reply array holds non-object entries")
        return parsed

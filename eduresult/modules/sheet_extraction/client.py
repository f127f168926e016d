"""
Extraction Client
=================
Sends a photographed answer sheet to an extraction provider and returns a
partial student record, or raises ExtractionFailedException.

The result is deliberately partial: absent fields stay absent and are
filled in later by the record normalizer.
"""

import base64
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ...core.constants import SUBJECTS
from ...core.exceptions import ExtractionFailedException
from ...core.logger import extraction_logger
from ...schemas import AnswerSheetPayload, StudentInput
from ...utils import generate_record_id
from .providers import BaseExtractionProvider

logger = logging.getLogger(__name__)


EXTRACTION_INSTRUCTION = (
    "You are reading a photographed student answer sheet. Extract the student's "
    "name, roll number (rollNo), class (className), the exam name (examName) if "
    "it is printed on the sheet, and the marks for math, science, english, "
    "history and computer. Reply with a single JSON object only. Use an empty "
    "string for text you cannot read and 0 for marks you cannot read."
)

ANSWER_SHEET_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "rollNo": {"type": "string"},
        "className": {"type": "string"},
        "examName": {"type": "string"},
        "marks": {
            "type": "object",
            "properties": {subject: {"type": "number"} for subject in SUBJECTS},
            "required": list(SUBJECTS),
        },
    },
    "required": ["name", "rollNo", "className", "examName", "marks"],
}


class ExtractionState(str, Enum):
    """Lifecycle of a single extraction attempt"""
    IDLE = "idle"
    CAPTURING = "capturing"
    SUBMITTED = "submitted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_TRANSITIONS = {
    ExtractionState.IDLE: {ExtractionState.CAPTURING},
    ExtractionState.CAPTURING: {ExtractionState.SUBMITTED, ExtractionState.FAILED},
    ExtractionState.SUBMITTED: {ExtractionState.SUCCEEDED, ExtractionState.FAILED},
    ExtractionState.SUCCEEDED: set(),
    ExtractionState.FAILED: set(),
}


@dataclass
class ExtractionAttempt:
    """
    One capture-and-submit cycle.

    Attempts are never retried; a new photo means a new attempt.
    """
    attempt_id: str = field(default_factory=generate_record_id)
    state: ExtractionState = ExtractionState.IDLE
    error: Optional[str] = None
    result: Optional[StudentInput] = None
    history: List[ExtractionState] = field(default_factory=lambda: [ExtractionState.IDLE])

    @property
    def finished(self) -> bool:
        return self.state in (ExtractionState.SUCCEEDED, ExtractionState.FAILED)

    def advance(self, new_state: ExtractionState) -> None:
        """Move to ``new_state``; raises ValueError on an illegal transition."""
        if new_state not in _TRANSITIONS[self.state]:
            raise ValueError(
                f"Illegal extraction transition: {self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)


def parse_extraction_payload(raw: Union[str, bytes, Dict[str, Any]]) -> StudentInput:
    """
    Check a provider response against the answer sheet schema.

    Keys outside the schema are dropped and absent keys stay absent.

    Raises:
        ValueError: payload is not a JSON object or a field has the wrong type
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise ValueError(f"Response is not valid JSON: {e}")

    if not isinstance(raw, dict):
        raise ValueError(f"Expected a JSON object, got {type(raw).__name__}")

    try:
        payload = AnswerSheetPayload.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Response does not match the answer sheet schema: {e}")

    return StudentInput.model_validate(payload.model_dump(by_alias=True, exclude_none=True))


class ExtractionClient:
    """
    Client for answer sheet extraction.

    Example:
        client = ExtractionClient(ProviderFactory.create())
        partial = await client.extract(jpeg_bytes, fixed_exam_name="Finals")
        student = normalize(partial)
    """

    def __init__(
        self,
        provider: BaseExtractionProvider,
        instruction: str = EXTRACTION_INSTRUCTION,
        schema: Optional[Dict[str, Any]] = None
    ):
        self.provider = provider
        self.instruction = instruction
        self.schema = schema or ANSWER_SHEET_SCHEMA

    def _fail(self, attempt: ExtractionAttempt, reason: str) -> ExtractionFailedException:
        attempt.error = reason
        attempt.advance(ExtractionState.FAILED)
        extraction_logger.warning(f"Extraction attempt {attempt.attempt_id} failed: {reason}")
        return ExtractionFailedException(reason)

    async def extract(
        self,
        image_bytes: bytes,
        fixed_exam_name: Optional[str] = None,
        attempt: Optional[ExtractionAttempt] = None
    ) -> StudentInput:
        """
        Extract a partial student record from a JPEG image.

        Args:
            image_bytes: Raw JPEG bytes of the photographed sheet
            fixed_exam_name: Exam folder the operator is working in; replaces
                whatever exam label was read from the sheet
            attempt: Optional attempt object to track state on

        Returns:
            StudentInput with the fields the provider returned

        Raises:
            ExtractionFailedException: transport, parse or schema failure
        """
        attempt = attempt or ExtractionAttempt()
        attempt.advance(ExtractionState.CAPTURING)

        if not image_bytes:
            raise self._fail(attempt, "image is empty")

        image_b64 = base64.b64encode(image_bytes).decode("ascii")

        attempt.advance(ExtractionState.SUBMITTED)
        extraction_logger.info(
            f"Submitting attempt {attempt.attempt_id} to {self.provider.provider_name} "
            f"({len(image_bytes)} bytes)"
        )

        try:
            raw = await self.provider.extract_structured(image_b64, self.instruction, self.schema)
        except Exception as e:
            raise self._fail(attempt, f"provider error: {e}")

        try:
            partial = parse_extraction_payload(raw)
        except (ValueError, RecursionError) as e:
            raise self._fail(attempt, str(e))

        if fixed_exam_name:
            partial = partial.model_copy(update={"exam_name": fixed_exam_name})

        attempt.result = partial
        attempt.advance(ExtractionState.SUCCEEDED)
        extraction_logger.info(f"Extraction attempt {attempt.attempt_id} succeeded")
        return partial

"""
Unit tests for the sheet extraction module
"""
import asyncio
import base64
import json

import pytest
from langchain_core.messages import AIMessage

from eduresult.core import ExtractionFailedException
from eduresult.grader import normalize
from eduresult.modules.sheet_extraction import (
    ANSWER_SHEET_SCHEMA,
    ExtractionAttempt,
    ExtractionClient,
    ExtractionState,
    GroqVisionProvider,
    OllamaVisionProvider,
    ProviderFactory,
    build_vision_message,
    parse_extraction_payload,
    parse_json_content,
)
from eduresult.services import RecordStore
from tests.conftest import FakeProvider

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-body\xff\xd9"

FULL_REPLY = {
    "name": "Asha Rao",
    "rollNo": "2024-001",
    "className": "10-A",
    "examName": "Mid Term",
    "marks": {"math": 95, "science": 92, "english": 88, "history": 90, "computer": 85},
}


def run(coro):
    return asyncio.run(coro)


class TestExtractionClient:
    """Test cases for ExtractionClient.extract"""

    def test_success(self):
        provider = FakeProvider(reply=FULL_REPLY)
        partial = run(ExtractionClient(provider).extract(JPEG_BYTES))

        assert partial.name == "Asha Rao"
        assert partial.roll_no == "2024-001"
        assert partial.exam_name == "Mid Term"
        assert partial.marks["math"] == 95

        student = normalize(partial)
        assert student.total == 450
        assert student.percentage == 90.0
        assert student.grade.value == "A+"

    def test_submits_image_instruction_and_schema(self):
        provider = FakeProvider(reply=FULL_REPLY)
        run(ExtractionClient(provider).extract(JPEG_BYTES))

        call = provider.calls[0]
        assert base64.b64decode(call["image_b64"]) == JPEG_BYTES
        assert "answer sheet" in call["instruction"]
        assert call["schema"] == ANSWER_SHEET_SCHEMA

    def test_fixed_exam_name_overrides_sheet(self):
        provider = FakeProvider(reply=FULL_REPLY)
        partial = run(ExtractionClient(provider).extract(JPEG_BYTES, fixed_exam_name="Finals"))
        assert partial.exam_name == "Finals"

    def test_fixed_exam_name_fills_missing_label(self):
        reply = {k: v for k, v in FULL_REPLY.items() if k != "examName"}
        partial = run(ExtractionClient(FakeProvider(reply=reply)).extract(JPEG_BYTES, fixed_exam_name="Finals"))
        assert partial.exam_name == "Finals"

    def test_absent_fields_stay_absent(self):
        """Missing history and computer are left for the normalizer"""
        reply = {"name": "Ravi", "marks": {"math": 80, "science": 70, "english": 60}}
        partial = run(ExtractionClient(FakeProvider(reply=reply)).extract(JPEG_BYTES))

        assert partial.roll_no is None
        assert partial.exam_name is None
        assert set(partial.marks) == {"math", "science", "english"}

        student = normalize(partial)
        assert student.marks.history == 0
        assert student.marks.computer == 0
        assert student.total == 210
        assert student.percentage == 42.0

    def test_unknown_fields_dropped(self):
        reply = dict(FULL_REPLY, grade="A+", total=999, invigilator="X")
        partial = run(ExtractionClient(FakeProvider(reply=reply)).extract(JPEG_BYTES))
        assert "grade" not in partial.model_dump()
        assert normalize(partial).total == 450

    def test_json_string_reply(self):
        provider = FakeProvider(reply=json.dumps(FULL_REPLY))
        partial = run(ExtractionClient(provider).extract(JPEG_BYTES))
        assert partial.class_name == "10-A"

    @pytest.mark.parametrize("reply", [
        "not json at all",
        ["a", "list"],
        {"name": 12345},
        {"marks": "ninety"},
        {"marks": {"math": "lots"}},
        pytest.param("[" * 100000 + "]" * 100000, id="deeply-nested"),
    ])
    def test_non_conforming_reply_fails(self, reply):
        attempt = ExtractionAttempt()
        with pytest.raises(ExtractionFailedException):
            run(ExtractionClient(FakeProvider(reply=reply)).extract(JPEG_BYTES, attempt=attempt))
        assert attempt.state == ExtractionState.FAILED
        assert attempt.result is None

    def test_provider_error_fails(self):
        provider = FakeProvider(error=ConnectionError("connection refused"))
        with pytest.raises(ExtractionFailedException) as exc_info:
            run(ExtractionClient(provider).extract(JPEG_BYTES))
        assert exc_info.value.status_code == 502
        assert exc_info.value.error_code == "EXTRACTION_FAILED"
        assert "connection refused" in exc_info.value.detail

    def test_empty_image_fails_without_submitting(self):
        provider = FakeProvider(reply=FULL_REPLY)
        with pytest.raises(ExtractionFailedException):
            run(ExtractionClient(provider).extract(b""))
        assert provider.calls == []

    def test_failure_leaves_store_unchanged(self, store: RecordStore, backend):
        """A failed attempt never touches stored records"""
        store.add_exam("Finals")
        store.add_student(normalize({"rollNo": "1", "examName": "Finals", "marks": {"math": 50}}))
        before = store.snapshot()
        blobs_before = dict(backend._data)

        provider = FakeProvider(error=TimeoutError("timed out"))
        with pytest.raises(ExtractionFailedException):
            run(ExtractionClient(provider).extract(JPEG_BYTES, fixed_exam_name="Finals"))

        assert store.snapshot() == before
        assert backend._data == blobs_before


class TestExtractionAttempt:
    """Attempt state machine"""

    def test_success_path(self):
        attempt = ExtractionAttempt()
        run(ExtractionClient(FakeProvider(reply=FULL_REPLY)).extract(JPEG_BYTES, attempt=attempt))
        assert attempt.history == [
            ExtractionState.IDLE,
            ExtractionState.CAPTURING,
            ExtractionState.SUBMITTED,
            ExtractionState.SUCCEEDED,
        ]
        assert attempt.finished
        assert attempt.result is not None

    def test_failure_path_records_error(self):
        attempt = ExtractionAttempt()
        with pytest.raises(ExtractionFailedException):
            run(ExtractionClient(FakeProvider(error=RuntimeError("boom"))).extract(JPEG_BYTES, attempt=attempt))
        assert attempt.history[-2:] == [ExtractionState.SUBMITTED, ExtractionState.FAILED]
        assert "boom" in attempt.error

    def test_attempt_cannot_be_reused(self):
        """No automatic retries: a finished attempt cannot be resubmitted"""
        attempt = ExtractionAttempt()
        client = ExtractionClient(FakeProvider(reply=FULL_REPLY))
        run(client.extract(JPEG_BYTES, attempt=attempt))
        with pytest.raises(ValueError):
            run(client.extract(JPEG_BYTES, attempt=attempt))

    def test_illegal_transition(self):
        with pytest.raises(ValueError):
            ExtractionAttempt().advance(ExtractionState.SUCCEEDED)


class TestPayloadParsing:

    def test_numeric_strings_accepted(self):
        partial = parse_extraction_payload({"marks": {"math": "78"}})
        assert partial.marks == {"math": 78.0}

    def test_null_fields_treated_as_absent(self):
        partial = parse_extraction_payload({"name": None, "rollNo": "5"})
        assert partial.name is None
        assert partial.roll_no == "5"

    def test_parse_json_content_strips_fences(self):
        message = AIMessage(content='```json\n{"name": "Asha"}\n```')
        assert parse_json_content(message) == {"name": "Asha"}

    def test_parse_json_content_rejects_empty(self):
        with pytest.raises(ValueError):
            parse_json_content(AIMessage(content=""))

    def test_parse_json_content_rejects_deep_nesting(self):
        with pytest.raises(ValueError):
            parse_json_content(AIMessage(content="[" * 100000 + "]" * 100000))

    def test_parse_json_content_rejects_array(self):
        with pytest.raises(ValueError):
            parse_json_content(AIMessage(content="[1, 2]"))


class TestProviders:
    """Provider construction (no network)"""

    def test_vision_message_carries_image(self):
        message = build_vision_message("QUJD", "read it", {"type": "object"})
        text_part, image_part = message.content
        assert text_part["type"] == "text"
        assert "read it" in text_part["text"]
        assert '"type": "object"' in text_part["text"]
        assert image_part["image_url"]["url"] == "data:image/jpeg;base64,QUJD"

    def test_factory_creates_ollama(self):
        provider = ProviderFactory.create(provider="ollama", model="llava:latest")
        assert isinstance(provider, OllamaVisionProvider)
        assert provider.get_info()["model"] == "llava:latest"
        assert provider.provider_name == "ollama"

    def test_factory_rejects_unknown_provider(self):
        with pytest.raises(ValueError):
            ProviderFactory.create(provider="carrier-pigeon")

    def test_groq_requires_api_key(self):
        with pytest.raises(ValueError):
            GroqVisionProvider(api_key=None)

    def test_groq_with_key(self):
        provider = ProviderFactory.create(provider="groq", api_key="test-key")
        assert isinstance(provider, GroqVisionProvider)
        assert provider.provider_name == "groq"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

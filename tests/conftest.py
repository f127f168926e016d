"""
Shared fixtures and fakes
"""
from typing import Any, Dict, Optional

import pytest

from eduresult.modules.sheet_extraction import BaseExtractionProvider
from eduresult.services import MemoryBackend, PersistenceAdapter, RecordStore


class FakeProvider(BaseExtractionProvider):
    """In-process extraction provider returning a canned reply or raising"""

    def __init__(self, reply: Any = None, error: Optional[Exception] = None):
        super().__init__(model="fake-vision")
        self.reply = reply
        self.error = error
        self.calls = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def extract_structured(self, image_b64: str, instruction: str, schema: Dict[str, Any]):
        self.calls.append({"image_b64": image_b64, "instruction": instruction, "schema": schema})
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def persistence(backend):
    return PersistenceAdapter(backend)


@pytest.fixture
def store(persistence):
    return RecordStore(persistence)

"""Shared fixtures: in-memory collaborators and a mocked Gemini transport."""

import re
from typing import Callable, List, Optional, Tuple

import httpx
import pytest

from telecare.agents.triage_graph import TriagePipeline, create_pipeline
from telecare.config.settings import settings
from telecare.models.consultation import Consultation
from telecare.models.triage import DoctorRef
from telecare.tools.doctor_directory import DoctorDirectory
from telecare.tools.gemini_client import GeminiClient
from telecare.tools.reference_dataset import ReferenceDataset


class InMemoryDoctorDirectory(DoctorDirectory):
    """Directory over a fixed doctor list, matching like the Mongo regex query."""

    def __init__(self, doctors: Optional[List[DoctorRef]] = None, fail: bool = False):
        self.doctors = list(doctors or [])
        self.fail = fail
        self.patterns: List[str] = []

    async def find_by_specialization(self, pattern: str, limit: int = 1) -> List[DoctorRef]:
        self.patterns.append(pattern)
        if self.fail:
            raise RuntimeError("directory offline")
        matches = [d for d in self.doctors if re.search(pattern, d.specialization, re.IGNORECASE)]
        return matches[:limit]


class FakeConsultationService:
    """Stores exchanges in a list instead of MongoDB."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records: List[Consultation] = []

    async def record_exchange(self, user_id, query, response) -> str:
        if self.fail:
            raise RuntimeError("database unavailable")
        consultation = Consultation(
            user_id=user_id,
            query=query,
            message=response.message,
            complexity=response.complexity,
            should_see_doctor=response.should_see_doctor,
            specialization=response.specialization,
        )
        self.records.append(consultation)
        return consultation.consultation_id

    async def get_user_consultations(
        self, user_id: str, limit: int = 10, offset: int = 0
    ) -> Tuple[List[Consultation], int]:
        mine = [c for c in reversed(self.records) if c.user_id == user_id]
        return mine[offset : offset + limit], len(mine)


def gemini_reply(text: Optional[str]) -> httpx.Response:
    """A well-formed generateContent response carrying ``text``."""
    if text is None:
        return httpx.Response(200, json={"candidates": []})
    return httpx.Response(
        200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]}
    )


class RecordingHandler:
    """MockTransport handler that records requests and delegates the reply."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def calls(self) -> int:
        return len(self.requests)


def make_client(respond: Optional[Callable[[httpx.Request], httpx.Response]] = None):
    """Configured client whose HTTP traffic goes to a recording mock handler."""
    handler = RecordingHandler(respond or (lambda request: gemini_reply("ok")))
    client = GeminiClient(
        api_key="test-key",
        model="gemini-test",
        endpoint="https://gemini.test/v1beta",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )
    return client, handler


CARDIOLOGIST = DoctorRef(
    name="Dr. Asha Menon",
    email="asha.menon@example.com",
    phone="555-0101",
    specialization="Cardiologist",
    hospital="City Heart Centre",
    location="Kochi",
)
DERMATOLOGIST = DoctorRef(
    name="Dr. Ravi Kumar",
    email="ravi.kumar@example.com",
    specialization="Dermatologist",
    hospital="Skin Care Clinic",
)
GENERAL_PHYSICIAN = DoctorRef(
    name="Dr. Lena Ortiz",
    email="lena.ortiz@example.com",
    specialization="General Physician",
    hospital="Community Health",
)


@pytest.fixture
def dataset() -> ReferenceDataset:
    return ReferenceDataset.load(settings.symptoms_dataset_path, settings.medicines_dataset_path)


@pytest.fixture
def directory() -> InMemoryDoctorDirectory:
    return InMemoryDoctorDirectory([CARDIOLOGIST, DERMATOLOGIST, GENERAL_PHYSICIAN])


@pytest.fixture
def offline_client() -> GeminiClient:
    return GeminiClient(api_key=None)


@pytest.fixture
def pipeline(dataset, directory, offline_client) -> TriagePipeline:
    return create_pipeline(dataset=dataset, directory=directory, client=offline_client)

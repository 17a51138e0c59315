"""Triage workflows.

This module wires the pipeline components into two LangGraph workflows and
owns them for the lifetime of the process:

Chat advice:
    START ─┬─ classify ────────┐
           ├─ advise ──────────┼─ compose → END
           └─ match_medicines ─┘

Prescription:
    START → classify ─┬─ resolve_doctor ──┐
                      ├─ prescribe ───────┼─ compose → END
                      └─ match_medicines ─┘

Branches of a fan-out run concurrently and share no state; ``compose`` waits
for all of them.
"""

import logging
from typing import Any, Dict, Optional

from langgraph.graph import StateGraph, START, END

from telecare.agents.advice_generator import AdviceGenerator
from telecare.agents.prescription_generator import PrescriptionGenerator
from telecare.agents.state import ChatState, PrescriptionState
from telecare.agents.symptom_classifier import SymptomClassifier
from telecare.config.settings import settings
from telecare.models.advice import PrescriptionInput
from telecare.services.response_composer import ResponseComposer
from telecare.tools.doctor_directory import DoctorDirectory, MongoDoctorDirectory
from telecare.tools.gemini_client import GeminiClient
from telecare.tools.keyword_matcher import build_advice_matcher, build_medicine_matcher
from telecare.tools.reference_dataset import ReferenceDataset

logger = logging.getLogger(__name__)


class TriagePipeline:
    """Read-only components shared by every request, plus the compiled workflows.

    Args:
        dataset: Reference catalogs loaded at startup
        directory: Doctor directory collaborator
        client: Generative-text client
    """

    def __init__(
        self,
        dataset: ReferenceDataset,
        directory: DoctorDirectory,
        client: GeminiClient,
    ):
        self.dataset = dataset
        self.directory = directory
        self.client = client

        self.classifier = SymptomClassifier(directory)
        self.advice_generator = AdviceGenerator(client, build_advice_matcher(dataset.symptoms))
        self.prescription_generator = PrescriptionGenerator(client)
        self.medicine_matcher = build_medicine_matcher(dataset.medicines)
        self.composer = ResponseComposer(directory)

        self.chat_graph = self._build_chat_graph()
        self.prescription_graph = self._build_prescription_graph()

    # ------------------------------------------------------------------
    # Chat advice nodes
    # ------------------------------------------------------------------

    async def classify_chat_node(self, state: ChatState) -> Dict[str, Any]:
        return {"classification": await self.classifier.process_symptom(state["query"])}

    async def advise_node(self, state: ChatState) -> Dict[str, Any]:
        return {"advice": await self.advice_generator.generate_advice(state["query"])}

    async def match_chat_medicines_node(self, state: ChatState) -> Dict[str, Any]:
        return {"medicines": self.medicine_matcher.suggest_medicines(state["query"])}

    async def compose_chat_node(self, state: ChatState) -> Dict[str, Any]:
        response = self.composer.compose_chat(
            state["advice"], state["classification"], state["medicines"]
        )
        logger.info(
            f"Composed chat response: complexity={response.complexity.value}, "
            f"doctors={len(response.doctors)}, medicines={len(response.medicines)}"
        )
        return {"response": response}

    def _build_chat_graph(self):
        workflow = StateGraph(ChatState)

        workflow.add_node("classify", self.classify_chat_node)
        workflow.add_node("advise", self.advise_node)
        workflow.add_node("match_medicines", self.match_chat_medicines_node)
        workflow.add_node("compose", self.compose_chat_node)

        workflow.add_edge(START, "classify")
        workflow.add_edge(START, "advise")
        workflow.add_edge(START, "match_medicines")
        workflow.add_edge(["classify", "advise", "match_medicines"], "compose")
        workflow.add_edge("compose", END)

        graph = workflow.compile()
        logger.info("Chat advice workflow compiled successfully")
        return graph

    # ------------------------------------------------------------------
    # Prescription nodes
    # ------------------------------------------------------------------

    async def classify_prescription_node(self, state: PrescriptionState) -> Dict[str, Any]:
        classification = await self.classifier.process_symptom(state["symptoms"])
        specialization = (
            classification.specialization
            or self.classifier.get_doctor_specialization(state["symptoms"])
        )
        return {"classification": classification, "specialization": specialization}

    async def resolve_doctor_node(self, state: PrescriptionState) -> Dict[str, Any]:
        doctor = await self.composer.resolve_doctor(
            state["classification"], state["specialization"]
        )
        return {"doctor": doctor}

    async def prescribe_node(self, state: PrescriptionState) -> Dict[str, Any]:
        data = PrescriptionInput(
            symptoms=state["symptoms"],
            age=state["age"],
            weight=state["weight"],
            allergies=state["allergies"],
            medications=state["medications"],
            complexity=state["classification"].complexity,
            specialization=state["specialization"],
        )
        return {"prescription": await self.prescription_generator.generate_prescription(data)}

    async def match_prescription_medicines_node(self, state: PrescriptionState) -> Dict[str, Any]:
        return {"medicines": self.medicine_matcher.suggest_medicines(state["symptoms"])}

    async def compose_prescription_node(self, state: PrescriptionState) -> Dict[str, Any]:
        response = self.composer.compose_prescription(
            state["prescription"],
            state.get("doctor"),
            state["medicines"],
            state["classification"],
        )
        return {"response": response}

    def _build_prescription_graph(self):
        workflow = StateGraph(PrescriptionState)

        workflow.add_node("classify", self.classify_prescription_node)
        workflow.add_node("resolve_doctor", self.resolve_doctor_node)
        workflow.add_node("prescribe", self.prescribe_node)
        workflow.add_node("match_medicines", self.match_prescription_medicines_node)
        workflow.add_node("compose", self.compose_prescription_node)

        workflow.add_edge(START, "classify")
        workflow.add_edge("classify", "resolve_doctor")
        workflow.add_edge("classify", "prescribe")
        workflow.add_edge("classify", "match_medicines")
        workflow.add_edge(["resolve_doctor", "prescribe", "match_medicines"], "compose")
        workflow.add_edge("compose", END)

        graph = workflow.compile()
        logger.info("Prescription workflow compiled successfully")
        return graph

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run_chat(self, query: str) -> ChatState:
        """Run the chat workflow and return its final state."""
        return await self.chat_graph.ainvoke({"query": query})

    async def run_prescription(
        self,
        symptoms: str,
        age: Optional[str] = None,
        weight: Optional[str] = None,
        allergies: Optional[str] = None,
        medications: Optional[str] = None,
    ) -> PrescriptionState:
        """Run the prescription workflow; blank attributes get their defaults."""
        return await self.prescription_graph.ainvoke(
            {
                "symptoms": symptoms.strip(),
                "age": age or "Not specified",
                "weight": weight or "Not specified",
                "allergies": allergies or "None reported",
                "medications": medications or "None reported",
            }
        )


def create_pipeline(
    dataset: Optional[ReferenceDataset] = None,
    directory: Optional[DoctorDirectory] = None,
    client: Optional[GeminiClient] = None,
) -> TriagePipeline:
    """Build the pipeline from settings, loading the reference catalogs once."""
    if dataset is None:
        dataset = ReferenceDataset.load(
            settings.symptoms_dataset_path, settings.medicines_dataset_path
        )
    return TriagePipeline(
        dataset=dataset,
        directory=directory or MongoDoctorDirectory(),
        client=client or GeminiClient.from_settings(),
    )

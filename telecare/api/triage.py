"""Triage API endpoints.

- Chat advice: classification, generated advice and medicine suggestions
- Stand-alone symptom advice and the read-only symptoms catalog
- Prescription recommendations with a resolved doctor
- Medicines catalog
- Consultation history
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from telecare.agents.prompts import (
    ADVICE_FAILURE_MESSAGE,
    CHAT_FAILURE_MESSAGE,
    PRESCRIPTION_FAILURE_MESSAGE,
)
from telecare.agents.triage_graph import TriagePipeline
from telecare.api.dependencies import get_consultations, get_current_user, get_pipeline
from telecare.models.messages import (
    AdviceRequest,
    ChatAdviceResponse,
    ChatRequest,
    ConditionMedicinesResponse,
    ConsultationHistoryResponse,
    ConsultationSummary,
    ErrorResponse,
    MedicineCatalogEntry,
    MedicinesResponse,
    PrescriptionRequest,
    PrescriptionResponse,
    SpellSuggestionResponse,
    SymptomAdviceResponse,
    SymptomCatalogEntry,
    SymptomCatalogResponse,
    SymptomSearchResponse,
)
from telecare.models.reference import ReferenceCondition
from telecare.services.consultation_service import ConsultationService
from telecare.tools.spell_checker import find_spell_suggestions, search_with_spell_check

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Triage"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


def _as_text(value: Optional[Union[int, float, str]]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _catalog_entry(condition: ReferenceCondition) -> SymptomCatalogEntry:
    return SymptomCatalogEntry(
        condition=condition.name,
        symptoms=list(condition.keywords),
        advice=condition.advice,
    )


# ---------------------------------------------------------------------------
# Chat advice
# ---------------------------------------------------------------------------


@router.post("/chat", response_model=ChatAdviceResponse)
async def chat(
    request: ChatRequest,
    pipeline: TriagePipeline = Depends(get_pipeline),
    consultations: ConsultationService = Depends(get_consultations),
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    """
    Triage a free-text symptom message.

    Returns generated advice, the complexity classification, recommended
    doctors for complex cases and medicine suggestions from the dataset.
    """
    message = (request.message or "").strip()
    if not message:
        return _error(status.HTTP_400_BAD_REQUEST, "Message is required")

    try:
        state = await pipeline.run_chat(message)
        response: ChatAdviceResponse = state["response"]
    except Exception as e:
        logger.error(f"Chat advice failed: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, CHAT_FAILURE_MESSAGE)

    user_id = (current_user or {}).get("user_id") or request.user_id
    if user_id:
        try:
            await consultations.record_exchange(user_id, message, response)
        except Exception as e:
            logger.warning(f"Failed to record consultation for user {user_id}: {e}")

    return response


@router.get("/chat/history/{user_id}", response_model=ConsultationHistoryResponse)
async def get_chat_history(
    user_id: str,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    consultations: ConsultationService = Depends(get_consultations),
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    """
    Get a user's stored chat exchanges, newest first.

    Users may only read their own history unless they hold the admin role.
    """
    if (
        current_user
        and current_user.get("user_id") != user_id
        and current_user.get("role") != "admin"
    ):
        return _error(status.HTTP_403_FORBIDDEN, "Access denied to this history")

    try:
        items, total = await consultations.get_user_consultations(
            user_id=user_id, limit=limit, offset=offset
        )
    except Exception as e:
        logger.error(f"Failed to load consultation history for {user_id}: {e}")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve consultation history"
        )

    summaries = [
        ConsultationSummary(
            consultation_id=c.consultation_id,
            created_at=c.created_at,
            query=c.query,
            message=c.message,
            complexity=c.complexity,
            specialization=c.specialization,
        )
        for c in items
    ]

    return ConsultationHistoryResponse(
        total=total, limit=limit, offset=offset, consultations=summaries
    )


# ---------------------------------------------------------------------------
# Symptoms
# ---------------------------------------------------------------------------


@router.post("/symptoms/advice", response_model=SymptomAdviceResponse)
async def symptom_advice(
    request: AdviceRequest,
    pipeline: TriagePipeline = Depends(get_pipeline),
):
    """
    Generate professional advice for a symptom query.

    Responds 200 when advice was produced and 502 when the advice service
    could not produce any, with the classification attached either way.
    """
    query = (request.symptom_query or "").strip()
    if not query:
        return _error(status.HTTP_400_BAD_REQUEST, "symptomQuery is required")

    try:
        advice, classification = await asyncio.gather(
            pipeline.advice_generator.generate_advice(query),
            pipeline.classifier.process_symptom(query),
        )
        medicines = pipeline.medicine_matcher.suggest_medicines(query)
        specialization = (
            classification.specialization
            or pipeline.classifier.get_doctor_specialization(query)
        )

        response = SymptomAdviceResponse(
            success=advice.success,
            message=advice.message,
            complexity=classification.complexity,
            should_see_doctor=classification.should_see_doctor,
            specialization=specialization,
            doctors=list(classification.doctors),
            medicines=medicines,
        )
    except Exception as e:
        logger.error(f"Symptom advice failed: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, ADVICE_FAILURE_MESSAGE)

    status_code = status.HTTP_200_OK if advice.success else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(by_alias=True, mode="json"),
    )


@router.get("/symptoms", response_model=SymptomCatalogResponse)
async def list_symptoms(pipeline: TriagePipeline = Depends(get_pipeline)):
    """Full symptoms catalog."""
    entries = [_catalog_entry(c) for c in pipeline.dataset.symptoms]
    return SymptomCatalogResponse(total=len(entries), conditions=entries)


@router.get("/symptoms/search", response_model=SymptomSearchResponse)
async def search_symptoms(
    query: str = Query(""),
    pipeline: TriagePipeline = Depends(get_pipeline),
):
    """Catalog conditions whose name or symptoms contain the query, with spelling suggestions."""
    if not query.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Query is required")

    result = search_with_spell_check(query, pipeline.dataset.symptoms)
    return SymptomSearchResponse(
        matches=[_catalog_entry(c) for c in result["matches"]],
        spell_suggestions=result["spell_suggestions"],
        has_spelling_suggestions=result["has_spelling_suggestions"],
        original_query=result["original_query"],
    )


@router.get("/symptoms/suggestions", response_model=SpellSuggestionResponse)
async def symptom_suggestions(
    query: str = Query(""),
    pipeline: TriagePipeline = Depends(get_pipeline),
):
    if not query.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Query is required")

    return SpellSuggestionResponse(
        original_query=query,
        suggestions=find_spell_suggestions(query, pipeline.dataset.symptoms),
    )


@router.get("/symptoms/advice/{symptom:path}", response_model=SymptomCatalogEntry)
async def advice_for_symptom(
    symptom: str,
    pipeline: TriagePipeline = Depends(get_pipeline),
):
    """First catalog entry with a symptom keyword containing the term."""
    term = symptom.lower().strip()
    for condition in pipeline.dataset.symptoms:
        if term and any(term in k.lower() for k in condition.keywords):
            return _catalog_entry(condition)
    return _error(status.HTTP_404_NOT_FOUND, "No advice found for this symptom")


# ---------------------------------------------------------------------------
# Prescriptions
# ---------------------------------------------------------------------------


@router.post("/prescriptions", response_model=PrescriptionResponse)
async def create_prescription(
    request: PrescriptionRequest,
    pipeline: TriagePipeline = Depends(get_pipeline),
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    """
    Generate a structured prescription recommendation.

    Missing patient attributes get neutral defaults. The recommended doctor
    is the first complex-case specialist, else a directory match for the
    derived specialization, else a general practitioner.
    """
    symptoms = (request.symptoms or "").strip()
    if not symptoms:
        return _error(status.HTTP_400_BAD_REQUEST, "Symptoms are required")

    try:
        state = await pipeline.run_prescription(
            symptoms,
            age=_as_text(request.age),
            weight=_as_text(request.weight),
            allergies=_as_text(request.allergies),
            medications=_as_text(request.medications),
        )
    except Exception as e:
        logger.error(f"Prescription generation failed: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, PRESCRIPTION_FAILURE_MESSAGE)

    if current_user:
        logger.info(f"Prescription generated for user {current_user.get('user_id')}")
    return state["response"]


# ---------------------------------------------------------------------------
# Medicines
# ---------------------------------------------------------------------------


@router.get("/medicines", response_model=MedicinesResponse)
async def list_medicines(
    pipeline: TriagePipeline = Depends(get_pipeline),
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    """Medicines catalog."""
    return MedicinesResponse(
        conditions=[
            MedicineCatalogEntry(condition=c.name, medicines=list(c.medicines))
            for c in pipeline.dataset.medicines
        ]
    )


@router.get("/medicines/{condition:path}", response_model=ConditionMedicinesResponse)
async def medicines_for_condition(
    condition: str,
    pipeline: TriagePipeline = Depends(get_pipeline),
    current_user: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    entry = pipeline.dataset.medicines.find(condition)
    if entry is None:
        return _error(status.HTTP_404_NOT_FOUND, f"No medicines found for {condition}")
    return ConditionMedicinesResponse(condition=entry.name, medicines=list(entry.medicines))

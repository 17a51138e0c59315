"""Consultation history storage and retrieval service."""

from telecare.models.consultation import Consultation
from telecare.models.messages import ChatAdviceResponse
from telecare.config.database import get_consultations_collection
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class ConsultationService:
    """Service for storing triage chat exchanges."""

    async def record_exchange(
        self, user_id: str, query: str, response: ChatAdviceResponse
    ) -> str:
        """
        Store one chat exchange.

        Args:
            user_id: User identifier
            query: Patient's message
            response: Composed chat response

        Returns:
            Consultation ID
        """
        consultation = Consultation(
            user_id=user_id,
            query=query,
            message=response.message,
            complexity=response.complexity,
            should_see_doctor=response.should_see_doctor,
            specialization=response.specialization,
            doctor_emails=[d.email for d in response.doctors if d.email],
            matched_conditions=[m.condition for m in response.medicines],
        )

        collection = await get_consultations_collection()
        await collection.insert_one(consultation.model_dump())

        logger.info(
            f"Recorded consultation {consultation.consultation_id} for user {user_id}"
        )
        return consultation.consultation_id

    async def get_user_consultations(
        self, user_id: str, limit: int = 10, offset: int = 0
    ) -> Tuple[List[Consultation], int]:
        """
        Get a user's consultations, newest first.

        Args:
            user_id: User identifier
            limit: Maximum number of consultations to return
            offset: Number of consultations to skip

        Returns:
            Tuple of (consultations list, total count)
        """
        collection = await get_consultations_collection()

        total = await collection.count_documents({"user_id": user_id})

        cursor = (
            collection.find({"user_id": user_id})
            .sort("created_at", -1)
            .skip(offset)
            .limit(limit)
        )

        consultations = []
        async for doc in cursor:
            doc.pop("_id", None)
            consultations.append(Consultation(**doc))

        logger.info(
            f"Retrieved {len(consultations)} consultations for user {user_id} (total: {total})"
        )
        return consultations, total


# Global service instance
_consultation_service: Optional[ConsultationService] = None


def get_consultation_service() -> ConsultationService:
    """Get or create ConsultationService instance."""
    global _consultation_service
    if _consultation_service is None:
        _consultation_service = ConsultationService()
    return _consultation_service

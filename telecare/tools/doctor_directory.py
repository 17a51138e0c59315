"""Doctor directory lookups.

The directory is owned by the wider application; this service only reads it.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import List

from telecare.config.database import get_doctors_collection
from telecare.models.triage import DoctorRef

logger = logging.getLogger(__name__)

GENERAL_PRACTICE_PATTERN = r"general|family|primary"


def specialization_pattern(specialization: str) -> str:
    """Regex matching a specialization name anywhere in the stored field."""
    return re.escape(specialization.strip())


class DoctorDirectory(ABC):
    """Read-only doctor lookup by specialization regex."""

    @abstractmethod
    async def find_by_specialization(self, pattern: str, limit: int = 1) -> List[DoctorRef]:
        """Doctors whose specialization matches the case-insensitive pattern, at most ``limit``."""


class MongoDoctorDirectory(DoctorDirectory):
    """Doctor directory backed by the MongoDB ``doctors`` collection."""

    async def find_by_specialization(self, pattern: str, limit: int = 1) -> List[DoctorRef]:
        """
        Find doctors whose specialization matches a case-insensitive regex.

        Args:
            pattern: Regular expression applied to the specialization field
            limit: Maximum number of doctors to return

        Returns:
            Matching doctors in directory order
        """
        collection = get_doctors_collection()
        cursor = collection.find(
            {"specialization": {"$regex": pattern, "$options": "i"}}
        ).limit(limit)
        docs = await cursor.to_list(length=limit)

        logger.info(f"Directory lookup /{pattern}/i returned {len(docs)} doctors")
        return [DoctorRef.from_document(doc) for doc in docs]

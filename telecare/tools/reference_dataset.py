"""Static reference catalogs of conditions, symptom keywords, advice and medicines.

Both catalogs are loaded once at process start into a read-only
``ReferenceDataset`` that is handed to the components needing it. A missing
or corrupt file degrades to an empty catalog; it never fails a request.
"""

import json
import logging
from typing import Any, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from telecare.models.reference import Medicine, ReferenceCondition

logger = logging.getLogger(__name__)


class ConditionCatalog:
    """Ordered, immutable collection of reference conditions."""

    def __init__(self, conditions: Optional[List[ReferenceCondition]] = None):
        self._conditions: Tuple[ReferenceCondition, ...] = tuple(conditions or ())

    def __iter__(self) -> Iterator[ReferenceCondition]:
        return iter(self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)

    def find(self, name: str) -> Optional[ReferenceCondition]:
        """Case-insensitive lookup by condition name."""
        for condition in self._conditions:
            if condition.same_condition(name):
                return condition
        return None

    @property
    def conditions(self) -> Tuple[ReferenceCondition, ...]:
        return self._conditions


def _parse_entry(entry: Any) -> ReferenceCondition:
    if not isinstance(entry, dict):
        raise ValueError(f"expected an object, got {type(entry).__name__}")

    name = entry.get("condition") or entry.get("name")
    if not name:
        raise ValueError("entry has no condition name")

    keywords = entry.get("keywords") or entry.get("symptoms") or []
    return ReferenceCondition(
        name=name,
        keywords=[str(k) for k in keywords if k],
        advice=entry.get("advice") or "",
        medicines=[Medicine(**m) for m in entry.get("medicines") or []],
    )


def load_catalog(path: str) -> ConditionCatalog:
    """Load one catalog file.

    Accepts ``{"conditions": [...]}`` or a bare list of entries. Returns an
    empty catalog when the file is missing or unreadable.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        logger.error(f"Reference dataset not found at {path}")
        return ConditionCatalog()
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read reference dataset {path}: {e}")
        return ConditionCatalog()

    entries = data.get("conditions") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        logger.error(f"Reference dataset {path} has no condition list")
        return ConditionCatalog()

    conditions = []
    for index, entry in enumerate(entries):
        try:
            conditions.append(_parse_entry(entry))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Skipping malformed entry #{index} in {path}: {e}")

    logger.info(f"Loaded {len(conditions)} conditions from {path}")
    return ConditionCatalog(conditions)


class ReferenceDataset:
    """Symptoms/advice catalog plus medicines catalog, read-only for the process lifetime."""

    def __init__(self, symptoms: ConditionCatalog, medicines: ConditionCatalog):
        self.symptoms = symptoms
        self.medicines = medicines

    @classmethod
    def load(cls, symptoms_path: str, medicines_path: str) -> "ReferenceDataset":
        return cls(
            symptoms=load_catalog(symptoms_path),
            medicines=load_catalog(medicines_path),
        )

    @classmethod
    def empty(cls) -> "ReferenceDataset":
        return cls(ConditionCatalog(), ConditionCatalog())

"""Main-diagnosis invariant.

A patient's diagnosis list holds exactly one main diagnosis when it is
non-empty and none when it is empty. ``normalize_diagnoses`` is the
persistence-time guarantee and runs on every patient create and update.
``DiagnosisEditor`` implements the stricter rules of the patient form, where
the last explicit user action wins.
"""

import logging
from typing import Iterable, Optional

from nursecare.domain.models import Diagnosis
from nursecare.domain.ports import ValidationError

logger = logging.getLogger(__name__)


def normalize_diagnoses(diagnoses: Iterable[Diagnosis]) -> list[Diagnosis]:
    """Return the diagnosis list with exactly min(1, len) main entries.

    Order and text are preserved. When several entries are flagged main the
    first one in list order keeps the flag. When none is flagged the first
    entry becomes main. An empty list is returned unchanged.

    Parameters:
        diagnoses: Ordered diagnoses as supplied by the caller

    Returns:
        list[Diagnosis]: New list satisfying the invariant
    """
    items = list(diagnoses)
    main_count = sum(1 for d in items if d.is_main)

    if main_count == 1 or not items:
        return items

    if main_count == 0:
        return [items[0].model_copy(update={"is_main": True})] + items[1:]

    logger.debug(f"Clearing {main_count - 1} surplus main diagnosis flag(s)")
    normalized = []
    found_first = False
    for diagnosis in items:
        if diagnosis.is_main and found_first:
            diagnosis = diagnosis.model_copy(update={"is_main": False})
        elif diagnosis.is_main:
            found_first = True
        normalized.append(diagnosis)
    return normalized


def main_diagnosis(diagnoses: Iterable[Diagnosis]) -> Optional[Diagnosis]:
    """The first diagnosis flagged main, if any."""
    return next((d for d in diagnoses if d.is_main), None)


class DiagnosisEditor:
    """Interactive editing of a diagnosis list (patient form).

    Rules:
        - A newly added diagnosis is main only if the list was empty.
        - Checking an entry makes it the only main entry.
        - Unchecking the only entry is refused; unchecking another entry
          moves the flag to the first other entry.
        - Removing the main entry moves the flag to the new first entry.

    Every operation leaves a non-empty list with exactly one main entry.
    """

    def __init__(self, diagnoses: Optional[Iterable[Diagnosis]] = None):
        self._items: list[Diagnosis] = normalize_diagnoses(diagnoses or [])

    @property
    def items(self) -> list[Diagnosis]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise ValidationError(
                f"No diagnosis at position {index}",
                field="diagnoses",
                details={"size": len(self._items)}
            )

    def add(self, text: str) -> bool:
        """Append a diagnosis. Blank text is ignored.

        Returns:
            bool: True if a diagnosis was added
        """
        text = (text or "").strip()
        if not text:
            return False
        self._items.append(Diagnosis(text=text, is_main=not self._items))
        return True

    def update_text(self, index: int, text: str) -> None:
        self._check_index(index)
        self._items[index] = self._items[index].model_copy(update={"text": text})

    def remove(self, index: int) -> Diagnosis:
        """Remove the diagnosis at index and return it."""
        self._check_index(index)
        removed = self._items.pop(index)
        if removed.is_main and self._items:
            self._items[0] = self._items[0].model_copy(update={"is_main": True})
        return removed

    def set_main(self, index: int, checked: bool = True) -> None:
        """Check or uncheck the main flag of the entry at index."""
        self._check_index(index)
        if checked:
            winner = index
        elif len(self._items) == 1:
            return
        else:
            winner = next(i for i in range(len(self._items)) if i != index)

        self._items = [
            d.model_copy(update={"is_main": i == winner}) if d.is_main != (i == winner) else d
            for i, d in enumerate(self._items)
        ]

    def validate(self) -> None:
        """Apply the form submission rules.

        Raises:
            ValidationError: If the list is empty, does not have exactly one
                main entry, or contains blank text
        """
        if not self._items:
            raise ValidationError("At least one diagnosis is required", field="diagnoses")

        main_count = sum(1 for d in self._items if d.is_main)
        if main_count != 1:
            raise ValidationError(
                "Exactly one diagnosis must be marked as main",
                field="diagnoses",
                details={"main_count": main_count}
            )

        if any(not d.text.strip() for d in self._items):
            raise ValidationError("Diagnosis text is required", field="diagnoses")

    def to_list(self) -> list[Diagnosis]:
        """Submission payload: trimmed text, invariant enforced."""
        return normalize_diagnoses(
            d.model_copy(update={"text": d.text.strip()}) for d in self._items
        )


class AllergyEditor:
    """Interactive editing of a patient's allergy list.

    De-duplication by case-insensitive text happens here only; the
    storage layer accepts any list.
    """

    def __init__(self, allergies: Optional[Iterable[str]] = None):
        self._items: list[str] = list(allergies or [])

    @property
    def items(self) -> list[str]:
        return list(self._items)

    def add(self, text: str) -> bool:
        """Append an allergy unless blank or already present (any case)."""
        text = (text or "").strip()
        if not text:
            return False
        if any(a.strip().lower() == text.lower() for a in self._items):
            return False
        self._items.append(text)
        return True

    def update(self, index: int, text: str) -> None:
        if not 0 <= index < len(self._items):
            raise ValidationError(f"No allergy at position {index}", field="allergies")
        self._items[index] = text

    def remove(self, index: int) -> str:
        if not 0 <= index < len(self._items):
            raise ValidationError(f"No allergy at position {index}", field="allergies")
        return self._items.pop(index)

    def to_list(self) -> list[str]:
        """Submission payload: trimmed, blank entries dropped."""
        return [a.strip() for a in self._items if a.strip()]

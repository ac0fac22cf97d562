"""QuestionBankStore: loads the assessment question banks from YAML.

The banks ship inside this package under ``banks/``.  The store is loaded
once at startup and is read-only afterwards; every lookup returns ``None``
for unknown ids rather than raising, because callers routinely look up
optional relationships (pre-fill sources in other banks, for example).

Usage::

    store = QuestionBankStore()
    store.load()

    bank = store.get_bank("falls_risk")
    q = store.get_question_by_id("entrance_3")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from otassess_core.models.question import Question, QuestionBank, Section, question_mapper

logger = logging.getLogger(__name__)

_DEFAULT_BANK_DIR = Path(__file__).parent / "banks"


# ---------------------------------------------------------------------------
# YAML helper
# ---------------------------------------------------------------------------

def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# QuestionBankStore
# ---------------------------------------------------------------------------

class QuestionBankStore:
    """Loads every ``*.yaml`` bank in a directory and provides typed lookup.

    Attributes populated after :meth:`load`:

        banks            dict[bank_id, QuestionBank]
        by_type          dict[assessment_type, QuestionBank]
    """

    def __init__(self, bank_dir: str | Path | None = None) -> None:
        self._base = Path(bank_dir) if bank_dir is not None else _DEFAULT_BANK_DIR

        # Populated by load()
        self.banks: dict[str, QuestionBank] = {}
        self.by_type: dict[str, QuestionBank] = {}
        self._questions: dict[str, Question] = {}
        self._sections: dict[str, Section] = {}
        # question id -> (bank id, section id)
        self._owner: dict[str, tuple[str, str]] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse all bank files and validate cross-references.

        Raises ``FileNotFoundError`` when the directory holds no banks and
        ``ValueError`` for duplicate ids, unknown question types, or
        ``prefill_from`` entries that point at no known question.
        """
        paths = sorted(self._base.glob("*.yaml"))
        if not paths:
            raise FileNotFoundError(f"No question banks found in {self._base}")

        for path in paths:
            self._load_bank(path)
        self._validate_prefill_refs()

        logger.info(
            "QuestionBankStore loaded: %d banks, %d sections, %d questions",
            len(self.banks),
            len(self._sections),
            len(self._questions),
        )

    def _load_bank(self, path: Path) -> None:
        raw = load_yaml(path)
        sections: list[dict] = []
        for raw_section in raw.get("sections", []):
            questions = []
            for q_dict in raw_section.get("questions", []):
                qtype = q_dict.get("type")
                cls = question_mapper.get(qtype)
                if cls is None:
                    raise ValueError(
                        f"Unknown question type '{qtype}' in {path.name}/{raw_section.get('id')}"
                    )
                questions.append(cls(**q_dict))
            sections.append({**raw_section, "questions": questions})

        bank = QuestionBank(**{**raw, "sections": sections})
        if bank.id in self.banks:
            raise ValueError(f"Duplicate bank id '{bank.id}' in {path.name}")
        self.banks[bank.id] = bank

        for assessment_type in bank.assessment_types:
            if assessment_type in self.by_type:
                raise ValueError(
                    f"Assessment type '{assessment_type}' is served by more than one bank"
                )
            self.by_type[assessment_type] = bank

        for section in bank.sections:
            if section.id in self._sections:
                raise ValueError(f"Duplicate section id '{section.id}' in {path.name}")
            self._sections[section.id] = section
            for q in section.questions:
                if q.id in self._questions:
                    raise ValueError(f"Duplicate question id '{q.id}' in {path.name}")
                self._questions[q.id] = q
                self._owner[q.id] = (bank.id, section.id)

    def _validate_prefill_refs(self) -> None:
        for q in self._questions.values():
            for ref in q.prefill_from:
                if ref not in self._questions:
                    raise ValueError(
                        f"Question '{q.id}' has prefill_from reference to unknown question '{ref}'"
                    )
                if ref == q.id:
                    raise ValueError(f"Question '{q.id}' lists itself in prefill_from")

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get_bank(self, assessment_type: str) -> QuestionBank | None:
        """Bank driving the given assessment type, or None if unknown.

        Accepts the plain string or the ``AssessmentType`` member.
        """
        return self.by_type.get(getattr(assessment_type, "value", assessment_type))

    def get_all_questions(self, assessment_type: str | None = None) -> list[Question]:
        """Every question in wizard order.

        With ``assessment_type`` only that type's bank is returned;
        without it, all banks in load order.
        """
        if assessment_type is not None:
            bank = self.get_bank(assessment_type)
            banks = [bank] if bank is not None else []
        else:
            banks = list(self.banks.values())
        return [q for bank in banks for s in bank.sections for q in s.questions]

    def get_question_by_id(self, question_id: str) -> Question | None:
        return self._questions.get(question_id)

    def get_section_by_id(self, section_id: str) -> Section | None:
        return self._sections.get(section_id)

    def get_section_for_question(self, question_id: str) -> Section | None:
        owner = self._owner.get(question_id)
        if owner is None:
            return None
        return self._sections[owner[1]]

    def bank_contains(self, assessment_type: str, question_id: str) -> bool:
        """True when ``question_id`` belongs to the bank for ``assessment_type``."""
        bank = self.get_bank(assessment_type)
        owner = self._owner.get(question_id)
        return bank is not None and owner is not None and owner[0] == bank.id

    def total_questions(self, assessment_type: str) -> int:
        """Question count for the type's bank; 0 for an unknown type."""
        bank = self.get_bank(assessment_type)
        return bank.question_count if bank is not None else 0

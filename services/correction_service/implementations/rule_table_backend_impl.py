"""Rule-table backend: local, always available, terminal fallback."""

from __future__ import annotations

from services.correction_service.implementations.rule_table import find_rule_edits
from services.correction_service.implementations.upstream_reconciler import reconcile
from services.correction_service.internal_models import CorrectionResult, StructuredEdits
from services.correction_service.languages import resolve_language
from services.correction_service.protocols import CorrectionBackendProtocol

RULE_TABLE_BACKEND_NAME = "rule-table"


class RuleTableBackendImpl(CorrectionBackendProtocol):
    """Applies the local rule table. Performs no I/O."""

    name = RULE_TABLE_BACKEND_NAME

    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout_seconds = timeout_seconds

    def is_available(self) -> bool:
        return True

    async def try_correct(self, text: str, language: str) -> CorrectionResult:
        edits = StructuredEdits(candidates=find_rule_edits(text))
        return reconcile(text, edits, resolve_language(language), self.name)

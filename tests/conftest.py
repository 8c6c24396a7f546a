"""Shared fixtures: an in-memory SurveyStore standing in for the backend."""

import copy
from typing import Any, Dict, List, Optional

import pytest

from surveybuilder.errors import StorageError, SurveyNotFound
from surveybuilder.storage import SurveyResult, SurveyStore, SurveySummary


class InMemorySurveyStore(SurveyStore):
    """Dict-backed store. Set ``fail_with`` to make every call raise."""

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.results: Dict[str, List[SurveyResult]] = {}
        self.fail_with: Optional[Exception] = None
        self.saves = 0
        self._counter = 0

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _next_id(self) -> str:
        self._counter += 1
        return str(self._counter)

    def list_surveys(self) -> List[SurveySummary]:
        self._check()
        return [
            SurveySummary(id=i, name=d.get("title") or "Untitled Survey", created_at="", updated_at="")
            for i, d in self.documents.items()
        ]

    def read(self, survey_id: str) -> Dict[str, Any]:
        self._check()
        if survey_id not in self.documents:
            raise SurveyNotFound(survey_id)
        return copy.deepcopy(self.documents[survey_id])

    def save(self, schema: Dict[str, Any], survey_id: Optional[str] = None) -> str:
        self._check()
        if survey_id is not None and survey_id not in self.documents:
            raise SurveyNotFound(survey_id)
        survey_id = survey_id or self._next_id()
        self.documents[survey_id] = copy.deepcopy(schema)
        self.saves += 1
        return survey_id

    def delete(self, survey_id: str) -> None:
        self._check()
        if survey_id not in self.documents:
            raise SurveyNotFound(survey_id)
        del self.documents[survey_id]
        self.results.pop(survey_id, None)

    def submit_results(self, survey_id: str, answers: Dict[str, Any]) -> str:
        self._check()
        result_id = self._next_id()
        self.results.setdefault(survey_id, []).insert(
            0, SurveyResult(id=result_id, survey_id=survey_id, content=answers, created_at="")
        )
        return result_id

    def list_results(self, survey_id: str) -> List[SurveyResult]:
        self._check()
        return list(self.results.get(survey_id, []))


@pytest.fixture
def store():
    return InMemorySurveyStore()


@pytest.fixture
def broken_store():
    s = InMemorySurveyStore()
    s.fail_with = StorageError("backend unavailable")
    return s

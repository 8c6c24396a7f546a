"""
Survey stores: where schema documents and submitted answers live.

The builder only ever hands a store schema documents (plain dicts) and
receives schema documents back. The store never sees the document model.

FileSurveyStore layout:
    <directory>/<survey_id>.json
        {"content": <schema document>, "createdAt": ..., "updatedAt": ...}
    <directory>/results/<survey_id>/<result_id>.json
        {"content": <answers>, "createdAt": ...}

Survey ids are opaque strings derived from the file name. Timestamps are
ISO-8601 in UTC.
"""

import json
import logging
import shutil
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import Settings
from .errors import StorageError, SurveyNotFound


logger = logging.getLogger(__name__)

UNTITLED = "Untitled Survey"


@dataclass
class SurveySummary:
    """One entry of the survey list."""
    id: str
    name: str
    created_at: str
    updated_at: str


@dataclass
class SurveyResult:
    """One submitted set of answers, keyed by question name."""
    id: str
    survey_id: str
    content: Dict[str, Any]
    created_at: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SurveyStore(ABC):
    """
    Create/read/update/delete access to stored schema documents.

    Implementations raise SurveyNotFound for unknown ids and StorageError
    for anything else that goes wrong. They do not retry.
    """

    @abstractmethod
    def list_surveys(self) -> List[SurveySummary]:
        """All stored surveys, most recently updated first."""

    @abstractmethod
    def read(self, survey_id: str) -> Dict[str, Any]:
        """Return the schema document stored under ``survey_id``."""

    @abstractmethod
    def save(self, schema: Dict[str, Any], survey_id: Optional[str] = None) -> str:
        """Create (no id) or overwrite (id) a document. Returns its id."""

    @abstractmethod
    def delete(self, survey_id: str) -> None:
        """Remove a document together with its submitted results."""

    @abstractmethod
    def submit_results(self, survey_id: str, answers: Dict[str, Any]) -> str:
        """Store one set of answers for a survey. Returns the result id."""

    @abstractmethod
    def list_results(self, survey_id: str) -> List[SurveyResult]:
        """Submitted answers for a survey, newest first."""


class FileSurveyStore(SurveyStore):
    """Blob-file store: one JSON file per survey under a directory."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.results_directory = self.directory / "results"
        self.directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileSurveyStore":
        return cls(settings.storage_dir)

    def _survey_path(self, survey_id: str) -> Path:
        # Ids name files directly; refuse anything that could escape the directory.
        if not survey_id or Path(survey_id).name != survey_id or survey_id.startswith("."):
            raise SurveyNotFound(survey_id)
        return self.directory / f"{survey_id}.json"

    def _read_json(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                record = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {path.name}: {e}") from e
        if not isinstance(record, dict):
            raise StorageError(f"Cannot read {path.name}: not a record object")
        return record

    def _content(self, record: Dict[str, Any], name: str) -> Dict[str, Any]:
        # Older writers stored the document as a JSON string.
        content = record.get("content")
        if isinstance(content, str):
            try:
                content = json.loads(content)
            except ValueError as e:
                raise StorageError(f"Survey {name} has unreadable content: {e}") from e
        if not isinstance(content, dict):
            raise StorageError(f"Survey {name} has no document content")
        return content

    def _write_json(self, path: Path, data: Dict[str, Any]) -> None:
        temp_file = path.with_suffix(".tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            temp_file.replace(path)
        except (OSError, TypeError) as e:
            raise StorageError(f"Cannot write {path.name}: {e}") from e

    def _load_record(self, survey_id: str) -> Dict[str, Any]:
        path = self._survey_path(survey_id)
        if not path.exists():
            raise SurveyNotFound(survey_id)
        return self._read_json(path)

    def list_surveys(self) -> List[SurveySummary]:
        summaries = []
        for path in self.directory.glob("*.json"):
            record = self._read_json(path)
            content = self._content(record, path.stem)
            summaries.append(SurveySummary(
                id=path.stem,
                name=content.get("title") or UNTITLED,
                created_at=record.get("createdAt", ""),
                updated_at=record.get("updatedAt", ""),
            ))
        summaries.sort(key=lambda s: s.updated_at, reverse=True)
        return summaries

    def read(self, survey_id: str) -> Dict[str, Any]:
        return self._content(self._load_record(survey_id), survey_id)

    def save(self, schema: Dict[str, Any], survey_id: Optional[str] = None) -> str:
        now = _now()
        if survey_id:
            record = self._load_record(survey_id)
            record["content"] = schema
            record["updatedAt"] = now
            logger.info("Updating survey %s", survey_id)
        else:
            survey_id = uuid.uuid4().hex
            record = {"content": schema, "createdAt": now, "updatedAt": now}
            logger.info("Creating survey %s", survey_id)
        self._write_json(self._survey_path(survey_id), record)
        return survey_id

    def delete(self, survey_id: str) -> None:
        path = self._survey_path(survey_id)
        if not path.exists():
            raise SurveyNotFound(survey_id)
        results_dir = self.results_directory / survey_id
        try:
            if results_dir.exists():
                shutil.rmtree(results_dir)
            path.unlink()
        except OSError as e:
            raise StorageError(f"Cannot delete survey {survey_id}: {e}") from e
        logger.info("Deleted survey %s", survey_id)

    def submit_results(self, survey_id: str, answers: Dict[str, Any]) -> str:
        if not self._survey_path(survey_id).exists():
            raise SurveyNotFound(survey_id)
        results_dir = self.results_directory / survey_id
        results_dir.mkdir(parents=True, exist_ok=True)
        result_id = uuid.uuid4().hex
        self._write_json(results_dir / f"{result_id}.json", {
            "content": answers,
            "createdAt": _now(),
        })
        logger.info("Stored result %s for survey %s", result_id, survey_id)
        return result_id

    def list_results(self, survey_id: str) -> List[SurveyResult]:
        if not self._survey_path(survey_id).exists():
            raise SurveyNotFound(survey_id)
        results = []
        for path in (self.results_directory / survey_id).glob("*.json"):
            record = self._read_json(path)
            content = record.get("content")
            results.append(SurveyResult(
                id=path.stem,
                survey_id=survey_id,
                content=content if isinstance(content, dict) else {},
                created_at=record.get("createdAt", ""),
            ))
        results.sort(key=lambda r: r.created_at, reverse=True)
        return results

"""
Schema codec: Survey <-> portable schema document.

The schema document is what the form renderer consumes and what the store
persists. Encoding is deterministic and minimal: optional fields that are
empty are left out rather than written as null/empty. Decoding fills in
defaults for absent optional fields and hands out fresh ids, so ids are not
stable across a save/load round trip (names are).

Unknown keys in a decoded document are ignored and dropped.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List

import yaml

from surveybuilder.errors import SchemaError
from surveybuilder.model import (
    DEFAULT_SURVEY_TITLE,
    Locale,
    Question,
    QuestionType,
    Section,
    Survey,
)


SHOW_PROGRESS_BAR = "top"
SHOW_QUESTION_NUMBERS = "on"


def question_to_element(q: Question) -> Dict[str, Any]:
    element: Dict[str, Any] = {
        "type": q.type.value,
        "name": q.name,
        "title": q.title,
        "isRequired": q.is_required,
    }
    if q.type.has_choices and q.choices:
        element["choices"] = list(q.choices)
    if q.visible_if:
        element["visibleIf"] = q.visible_if
    return element


def section_to_page(s: Section) -> Dict[str, Any]:
    page: Dict[str, Any] = {
        "name": s.name,
        "title": s.title,
        "elements": [question_to_element(q) for q in s.questions],
    }
    if s.visible_if:
        page["visibleIf"] = s.visible_if
    return page


def survey_to_schema(s: Survey) -> Dict[str, Any]:
    return {
        "title": s.title,
        "description": s.description,
        "showProgressBar": SHOW_PROGRESS_BAR,
        "showQuestionNumbers": SHOW_QUESTION_NUMBERS,
        "locale": s.locale.value,
        "pages": [section_to_page(sec) for sec in s.sections],
    }


def _require_mapping(d: Any, what: str) -> Dict[str, Any]:
    if not isinstance(d, dict):
        raise SchemaError(f"Expected {what} to be an object, got {type(d).__name__}")
    return d


def _require_name(d: Dict[str, Any], what: str) -> str:
    name = d.get("name")
    if not isinstance(name, str) or not name.strip():
        raise SchemaError(f"{what} is missing a name")
    return name


def _text(d: Dict[str, Any], key: str, default: str) -> str:
    value = d.get(key)
    return default if value is None else str(value)


def _flag(d: Dict[str, Any], key: str) -> bool:
    value = d.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise SchemaError(f"Expected {key} to be true or false, got {value!r}")
    return value


def _choice_from_item(item: Any) -> str:
    # The renderer also accepts {"value": ..., "text": ...} items.
    if isinstance(item, dict):
        if "value" not in item:
            raise SchemaError(f"Choice object without a value: {item!r}")
        return str(item["value"])
    return str(item)


def _choices_from_list(d: Any) -> List[str]:
    if d is None:
        return []
    if not isinstance(d, list):
        raise SchemaError(f"Expected choices to be a list, got {type(d).__name__}")
    return [_choice_from_item(item) for item in d]


def question_from_element(survey: Survey, section: Section, d: Dict[str, Any]) -> Question:
    d = _require_mapping(d, "element")
    name = _require_name(d, "Element")
    try:
        q_type = QuestionType(d.get("type"))
    except ValueError:
        raise SchemaError(f"Element {name!r} has unsupported type {d.get('type')!r}")
    return survey.append_question(
        section,
        name=name,
        title=_text(d, "title", name),
        type=q_type,
        is_required=_flag(d, "isRequired"),
        choices=_choices_from_list(d.get("choices")),
        visible_if=_text(d, "visibleIf", ""),
    )


def section_from_page(survey: Survey, d: Dict[str, Any]) -> Section:
    d = _require_mapping(d, "page")
    name = _require_name(d, "Page")
    elements = d.get("elements")
    if not isinstance(elements, list) or not elements:
        raise SchemaError(f"Page {name!r} has no elements")
    section = survey.append_section(
        name=name,
        title=_text(d, "title", name),
        visible_if=_text(d, "visibleIf", ""),
    )
    for element in elements:
        question_from_element(survey, section, element)
    return section


def survey_from_schema(d: Any) -> Survey:
    d = _require_mapping(d, "schema document")
    pages = d.get("pages")
    if not isinstance(pages, list) or not pages:
        raise SchemaError("Schema document has no pages")
    try:
        locale = Locale(d.get("locale") or Locale.EN.value)
    except ValueError:
        raise SchemaError(f"Unsupported locale: {d.get('locale')!r}")
    s = Survey(
        title=_text(d, "title", DEFAULT_SURVEY_TITLE),
        description=_text(d, "description", ""),
        locale=locale,
    )
    for page in pages:
        section_from_page(s, page)
    return s


def survey_to_json(s: Survey, indent: int | None = None) -> str:
    return json.dumps(survey_to_schema(s), indent=indent, ensure_ascii=False)


def survey_from_json(s: str) -> Survey:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON: {e}") from e
    return survey_from_schema(d)


def survey_to_yaml(s: Survey) -> str:
    return yaml.safe_dump(survey_to_schema(s), sort_keys=False, allow_unicode=True)


def survey_from_yaml(s: str) -> Survey:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise SchemaError(f"Invalid YAML: {e}") from e
    return survey_from_schema(d)

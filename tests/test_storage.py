"""
Tests for the blob-file survey store.
"""

import json

import pytest

from surveybuilder.config import Settings
from surveybuilder.errors import ExternalIOFailure, StorageError, SurveyNotFound
from surveybuilder.examples import build_example_feedback_survey
from surveybuilder.model import new_survey
from surveybuilder.serialization import survey_from_schema, survey_to_schema
from surveybuilder.session import EditingSession
from surveybuilder.storage import FileSurveyStore


@pytest.fixture
def file_store(tmp_path):
    return FileSurveyStore(tmp_path / "surveys")


@pytest.fixture
def schema():
    return survey_to_schema(build_example_feedback_survey())


class TestFileSurveyStore:
    """CRUD on survey documents."""

    def test_creates_directory(self, tmp_path):
        FileSurveyStore(tmp_path / "a" / "b")
        assert (tmp_path / "a" / "b").is_dir()

    def test_from_settings(self, tmp_path):
        store = FileSurveyStore.from_settings(Settings(storage_dir=tmp_path / "configured"))
        assert store.directory == tmp_path / "configured"

    def test_save_and_read(self, file_store, schema):
        survey_id = file_store.save(schema)
        assert file_store.read(survey_id) == schema
        record = json.loads((file_store.directory / f"{survey_id}.json").read_text(encoding="utf-8"))
        assert record["content"] == schema
        assert record["createdAt"] == record["updatedAt"]

    def test_update_keeps_created_at(self, file_store, schema):
        survey_id = file_store.save(schema)
        path = file_store.directory / f"{survey_id}.json"
        created = json.loads(path.read_text(encoding="utf-8"))["createdAt"]

        schema["title"] = "Renamed"
        assert file_store.save(schema, survey_id) == survey_id
        record = json.loads(path.read_text(encoding="utf-8"))
        assert record["createdAt"] == created
        assert record["updatedAt"] >= created
        assert file_store.read(survey_id)["title"] == "Renamed"

    def test_update_missing(self, file_store, schema):
        with pytest.raises(SurveyNotFound):
            file_store.save(schema, "missing")

    def test_read_missing(self, file_store):
        with pytest.raises(SurveyNotFound):
            file_store.read("missing")

    @pytest.mark.parametrize("bad_id", ["../escape", "", ".hidden", "a/b"])
    def test_rejects_path_like_ids(self, file_store, bad_id):
        with pytest.raises(SurveyNotFound):
            file_store.read(bad_id)

    def test_corrupt_file(self, file_store):
        (file_store.directory / "broken.json").write_text("{oops", encoding="utf-8")
        with pytest.raises(StorageError):
            file_store.read("broken")

    @pytest.mark.parametrize("record", [
        ["not", "a", "record"],
        {"content": 5},
        {"content": "{oops"},
        {"createdAt": "2024-01-01T00:00:00+00:00"},
    ])
    def test_record_without_document(self, file_store, record):
        (file_store.directory / "odd.json").write_text(json.dumps(record), encoding="utf-8")
        with pytest.raises(StorageError):
            file_store.read("odd")
        with pytest.raises(StorageError):
            file_store.list_surveys()

    def test_string_content_is_decoded(self, file_store, schema):
        """Documents stored as JSON text read back as objects."""
        record = {"content": json.dumps(schema), "createdAt": "", "updatedAt": ""}
        (file_store.directory / "legacy.json").write_text(json.dumps(record), encoding="utf-8")
        assert file_store.read("legacy") == schema
        assert file_store.list_surveys()[0].name == "Customer Feedback"

    def test_list_surveys(self, file_store, schema):
        first = file_store.save(schema)
        untitled = survey_to_schema(new_survey())
        untitled["title"] = ""
        second = file_store.save(untitled)
        file_store.save(schema, first)

        summaries = file_store.list_surveys()
        assert [s.id for s in summaries] == [first, second]
        assert summaries[0].name == "Customer Feedback"
        assert summaries[1].name == "Untitled Survey"

    def test_delete(self, file_store, schema):
        survey_id = file_store.save(schema)
        file_store.submit_results(survey_id, {"full_name": "Ada"})
        file_store.delete(survey_id)
        assert file_store.list_surveys() == []
        assert not (file_store.results_directory / survey_id).exists()
        with pytest.raises(SurveyNotFound):
            file_store.delete(survey_id)

    def test_stored_document_decodes(self, file_store, schema):
        survey_id = file_store.save(schema)
        survey = survey_from_schema(file_store.read(survey_id))
        assert survey.title == "Customer Feedback"


class TestResults:
    """Submitted answers."""

    def test_submit_and_list(self, file_store, schema):
        survey_id = file_store.save(schema)
        first = file_store.submit_results(survey_id, {"full_name": "Ada", "satisfaction": 5})
        second = file_store.submit_results(survey_id, {"full_name": "Grace", "topics": ["Pricing"]})

        results = file_store.list_results(survey_id)
        assert {r.id for r in results} == {first, second}
        assert results[0].created_at >= results[1].created_at
        assert all(r.survey_id == survey_id for r in results)
        contents = [r.content for r in results]
        assert {"full_name": "Grace", "topics": ["Pricing"]} in contents

    def test_no_results(self, file_store, schema):
        survey_id = file_store.save(schema)
        assert file_store.list_results(survey_id) == []

    def test_submit_for_missing_survey(self, file_store):
        with pytest.raises(SurveyNotFound):
            file_store.submit_results("missing", {"a": 1})

    def test_unreadable_result_record(self, file_store, schema):
        survey_id = file_store.save(schema)
        results_dir = file_store.results_directory / survey_id
        results_dir.mkdir(parents=True)
        (results_dir / "bad.json").write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(StorageError):
            file_store.list_results(survey_id)

    def test_results_do_not_show_as_surveys(self, file_store, schema):
        survey_id = file_store.save(schema)
        file_store.submit_results(survey_id, {"a": 1})
        assert [s.id for s in file_store.list_surveys()] == [survey_id]


def test_session_round_trip_through_files(file_store):
    """Publish, reload in a fresh session: names survive, ids are reassigned."""
    author = EditingSession(file_store, survey=build_example_feedback_survey())
    author.delete_section(author.survey.sections[0].id)
    survey_id = author.publish()

    reader = EditingSession(file_store)
    reader.load(survey_id)
    assert [s.name for s in reader.survey.sections] == ["follow_up"]
    assert reader.survey.sections[0].id == 1
    assert [q.name for q in reader.survey.sections[0].questions] == ["email", "topics", "comments"]


def test_session_surfaces_bad_record(file_store):
    """A broken file in the store shows up as ExternalIOFailure."""
    (file_store.directory / "odd.json").write_text('"just text"', encoding="utf-8")
    session = EditingSession(file_store)
    with pytest.raises(ExternalIOFailure) as exc_info:
        session.list_surveys()
    assert isinstance(exc_info.value.__cause__, StorageError)
    with pytest.raises(ExternalIOFailure):
        session.load("odd")

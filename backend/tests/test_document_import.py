"""Tests for the document import pipeline."""

import json

import pytest

from services.document_import import (
    DocumentImportError,
    encode_document,
    guess_mime_type,
    import_document,
    shape_partial_cv,
)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

EXTRACTED = {
    "personal": {
        "firstName": "Ana",
        "lastName": "Torres",
        "email": "ana@mail.com",
        "linkedin": None,
    },
    "experience": [
        {
            "id": "exp-1",
            "role": "Analista",
            "company": "Interbank",
            "startDate": "2019-02",
            "endDate": "",
            "current": True,
            "description": "Reportes de riesgo.",
            "achievements": ["Automaticé reportes"],
        }
    ],
    "skills": [
        {"id": "s", "name": "SQL", "type": "Technical"},
        {"id": "s", "name": "Liderazgo", "type": "Soft"},
        {"name": "Excel", "type": "Technical"},
    ],
    "languages": [{"id": 1, "name": "Inglés", "level": "Intermedio"}],
}


class TestShape:
    def test_missing_sections_default_empty(self):
        partial = shape_partial_cv({"personal": {"firstName": "Ana"}})
        assert partial.personal.first_name == "Ana"
        assert partial.personal.city == ""
        assert partial.education == []
        assert partial.projects == []

    def test_ids_are_filled_and_unique(self):
        partial = shape_partial_cv(EXTRACTED)
        ids = [s.id for s in partial.skills]
        assert ids[0] == "s"
        assert all(ids)
        assert len(set(ids)) == 3
        assert partial.languages[0].id == "1"

    def test_null_personal_fields_default(self):
        partial = shape_partial_cv(EXTRACTED)
        assert partial.personal.linkedin == ""

    def test_section_not_a_list(self):
        with pytest.raises(DocumentImportError):
            shape_partial_cv({"experience": {"role": "Dev"}})

    def test_item_not_an_object(self):
        with pytest.raises(DocumentImportError):
            shape_partial_cv({"skills": ["Python"]})

    def test_invalid_enum_value(self):
        with pytest.raises(DocumentImportError):
            shape_partial_cv({"languages": [{"name": "Inglés", "level": "C1"}]})


class TestImport:
    @pytest.mark.asyncio
    async def test_import_pdf(self, gemini_reply):
        call = gemini_reply(json.dumps(EXTRACTED))
        partial = await import_document(encode_document(b"%PDF-1.4 data"), PDF)

        assert partial.personal.last_name == "Torres"
        assert partial.experience[0].role == "Analista"
        assert partial.experience[0].achievements == ["Automaticé reportes"]
        assert len(partial.skills) == 3
        blob = call.await_args.kwargs["contents"][0]
        assert blob.inline_data.data == b"%PDF-1.4 data"

    @pytest.mark.asyncio
    async def test_data_url_prefix(self, gemini_reply):
        gemini_reply(json.dumps({"personal": {}}))
        data = "data:application/pdf;base64," + encode_document(b"%PDF")
        partial = await import_document(data, PDF)
        assert partial.personal.first_name == ""

    @pytest.mark.asyncio
    async def test_invalid_json_is_a_failure(self, gemini_reply):
        gemini_reply("Lo siento, no pude leer el documento.")
        with pytest.raises(DocumentImportError):
            await import_document(encode_document(b"%PDF"), PDF)

    @pytest.mark.asyncio
    async def test_backend_error_is_a_failure(self, gemini_reply):
        gemini_reply(error=ConnectionError("down"))
        with pytest.raises(DocumentImportError):
            await import_document(encode_document(b"%PDF"), DOCX)

    @pytest.mark.asyncio
    async def test_unsupported_type(self, gemini_reply):
        call = gemini_reply("{}")
        with pytest.raises(DocumentImportError):
            await import_document(encode_document(b"hello"), "text/plain")
        call.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_base64(self, gemini_reply):
        gemini_reply("{}")
        with pytest.raises(DocumentImportError):
            await import_document("not base64!!", PDF)

    @pytest.mark.asyncio
    async def test_empty_document(self, gemini_reply):
        gemini_reply("{}")
        with pytest.raises(DocumentImportError):
            await import_document("", PDF)


class TestMimeType:
    def test_declared_type_wins(self):
        assert guess_mime_type("cv.bin", PDF) == PDF

    def test_from_extension(self):
        assert guess_mime_type("CV.DOCX", "application/octet-stream") == DOCX
        assert guess_mime_type("cv.doc", None) == "application/msword"

    def test_unknown(self):
        assert guess_mime_type("cv.txt", "text/plain") == "text/plain"

"""Shared fixtures: a sample CV, a clean workspace and a fake Gemini client."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from models.cv import CVData
from services import workspace


SAMPLE_CV = {
    "id": "1",
    "title": "Mi CV Profesional",
    "lastModified": "2024-01-01T00:00:00+00:00",
    "templateType": "ATS",
    "formality": "PROFESSIONAL",
    "language": "Español (Perú)",
    "personal": {
        "firstName": "Juan",
        "lastName": "Pérez García",
        "email": "juan.perez@email.com",
        "phone": "+51 987 654 321",
        "city": "Lima",
        "country": "Perú",
        "linkedin": "linkedin.com/in/juanperez",
        "website": "juanperez.dev",
        "profileSummary": "Ingeniero de Sistemas con más de 6 años de experiencia.",
    },
    "experience": [
        {
            "id": "e1",
            "role": "Dev",
            "company": "Banco de Crédito del Perú (BCP)",
            "location": "Lima, Perú",
            "startDate": "2021-01",
            "endDate": "",
            "current": True,
            "description": "Lideré el desarrollo de la nueva plataforma de banca móvil.",
        }
    ],
    "education": [
        {
            "id": "ed1",
            "degree": "Ingeniería de Sistemas",
            "institution": "PUCP",
            "location": "Lima, Perú",
            "startDate": "2014-03",
            "endDate": "2019-12",
        }
    ],
    "skills": [
        {"id": "s1", "name": "React & Redux", "type": "Technical"},
        {"id": "s2", "name": "Gestión de Equipos", "type": "Soft"},
    ],
    "languages": [
        {"id": "l1", "name": "Español", "level": "Nativo"},
        {"id": "l2", "name": "Inglés", "level": "Avanzado"},
    ],
    "certifications": [
        {"id": "c1", "name": "AWS Certified Solutions Architect", "issuer": "Amazon Web Services", "date": "2022"}
    ],
    "projects": [],
}


@pytest.fixture
def sample_cv() -> CVData:
    return CVData.model_validate(SAMPLE_CV)


@pytest.fixture(autouse=True)
def _reset_workspaces():
    """Fresh in-memory store for every test."""
    workspace.reset()
    yield
    workspace.reset()


@pytest.fixture
def gemini_reply():
    """Patch the Gemini client. Call with reply text or an exception.

    Returns the mocked ``generate_content`` so tests can inspect the request.
    """
    with patch("services.gemini_client.get_client") as mock_get:
        def _configure(text: str | None = None, error: Exception | None = None) -> AsyncMock:
            client = MagicMock()
            if error is not None:
                client.aio.models.generate_content = AsyncMock(side_effect=error)
            else:
                client.aio.models.generate_content = AsyncMock(
                    return_value=SimpleNamespace(text=text)
                )
            mock_get.return_value = client
            return client.aio.models.generate_content

        yield _configure

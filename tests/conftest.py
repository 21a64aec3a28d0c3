import pytest
from fastapi.testclient import TestClient
import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Keep the suite offline regardless of a developer's .env
os.environ["AI_SUGGESTIONS_ENABLED"] = "false"

from main import app
from resume_studio.services.stores import InMemoryProfileStore, InMemorySuggestionStore

@pytest.fixture
def client():
    app.state.suggestion_store = InMemorySuggestionStore()
    app.state.profile_store = InMemoryProfileStore()
    with TestClient(app) as c:
        yield c


@pytest.fixture
def profile():
    return {
        "targetJob": "Sales Manager",
        "contact": {"firstName": "Jane", "lastName": "Doe", "email": "jane@example.com"},
        "summary": {"content": "I am Responsable for sales."},
        "experience": [
            {
                "id": "e1",
                "position": "Account Manager",
                "company": "Acme",
                "startDate": "2021-01",
                "description": "Responsible for testing.",
                "achievements": ["Closed deals", "Worked on onboarding"],
            },
            {
                "id": "e2",
                "position": "Sales Associate",
                "company": "Globex",
                "startDate": "2018-03",
                "description": "Handled inbound leads.",
                "achievements": [],
            },
        ],
        "skills": {"Technical": ["Salesforce", "Excel"], "Soft": ["Negotiation"]},
    }

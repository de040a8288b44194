"""Integration tests for the FastAPI REST API."""

import pytest
from fastapi.testclient import TestClient

from conftest import make_pipeline, path_payload, structure_payload
from roadmap_ai.api.app import create_app
from roadmap_ai.core.config import MockConfig, RoadmapConfig
from roadmap_ai.core.pipeline import RoadmapPipeline
from roadmap_ai.retrieval.knowledge import KnowledgeBase


@pytest.fixture
def client(knowledge_base: KnowledgeBase) -> TestClient:
    config = MockConfig.with_overrides(embedding_dimensions=64)
    app = create_app(pipeline=RoadmapPipeline(config, knowledge_base=knowledge_base))
    return TestClient(app)


def scripted_client(config: RoadmapConfig, responses: list) -> TestClient:
    pipeline, _ = make_pipeline(config, responses)
    return TestClient(create_app(pipeline=pipeline))


class TestHealthEndpoint:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["mode"] == "mock"
        assert data["knowledge_documents"] == 3
        assert "version" in data


class TestStructureEndpoint:
    def test_generate_structure(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/structure",
            json={"careerTitle": "Data Engineer", "experienceLevel": "intermediate"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is False
        assert data["data"]["title"] == "Data Engineer"
        assert 4 <= len(data["data"]["sections"]) <= 6
        for section in data["data"]["sections"]:
            assert all(subtask["completed"] is False for subtask in section["subtasks"])

    def test_missing_title(self, client: TestClient) -> None:
        response = client.post("/roadmap/structure", json={})
        assert response.status_code == 422

    def test_blank_title(self, client: TestClient) -> None:
        response = client.post("/roadmap/structure", json={"careerTitle": "   "})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"

    def test_internal_value_error_is_server_error(
        self, mock_config: RoadmapConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        pipeline, _ = make_pipeline(mock_config, [structure_payload()])

        async def broken(*args: object, **kwargs: object) -> None:
            raise ValueError("Vectors must have the same dimensions")

        monkeypatch.setattr(pipeline, "generate_structure", broken)
        client = TestClient(create_app(pipeline=pipeline), raise_server_exceptions=False)
        response = client.post("/roadmap/structure", json={"careerTitle": "Chef"})
        assert response.status_code == 500

    def test_unknown_experience_level(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/structure", json={"careerTitle": "Chef", "experienceLevel": "guru"}
        )
        assert response.status_code == 422

    def test_fallback_is_flagged(self, mock_config: RoadmapConfig) -> None:
        client = scripted_client(mock_config, ["not json"])
        response = client.post("/roadmap/structure", json={"careerTitle": "Chef"})
        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is True
        assert data["data"]["title"] == "Chef"
        assert "fallback roadmap template" in data["notes"]

    def test_exhaustion_without_fallback(self) -> None:
        config = MockConfig.with_overrides(enable_fallbacks=False)
        client = scripted_client(config, [structure_payload(sections=2)])
        response = client.post("/roadmap/structure", json={"careerTitle": "Chef"})
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to generate roadmap structure"
        assert "2 sections" in body["details"]


class TestSubtaskEndpoints:
    def test_subtask_details(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/subtask-details",
            json={"roadmapTitle": "Data Engineer", "sectionTitle": "SQL", "subtaskTitle": "Joins"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["description"]) >= 100
        assert len(data["resources"]) >= 5
        assert len(data["practicalExercises"]) >= 3
        assert len(data["validationCriteria"]) >= 3

    def test_subtask_details_missing_field(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/subtask-details", json={"roadmapTitle": "Data Engineer", "sectionTitle": "SQL"}
        )
        assert response.status_code == 422

    def test_short_description(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/subtask-short-description",
            json={"roadmapTitle": "Data Engineer", "sectionTitle": "SQL", "subtaskTitle": "Joins"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["description"]


class TestTutorialEndpoint:
    def test_tutorial(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/section-tutorial",
            json={
                "roadmapTitle": "Data Engineer",
                "sectionTitle": "SQL",
                "sectionDescription": "Querying relational data",
                "subtasks": [{"title": "Joins"}, {"title": "Window functions"}],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["content"].startswith("# SQL")

    def test_subtasks_required(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/section-tutorial",
            json={"roadmapTitle": "Data Engineer", "sectionTitle": "SQL", "subtasks": []},
        )
        assert response.status_code == 422

    def test_exhaustion_is_server_error(self, mock_config: RoadmapConfig) -> None:
        client = scripted_client(mock_config, [""])
        response = client.post(
            "/roadmap/section-tutorial",
            json={"roadmapTitle": "Data Engineer", "sectionTitle": "SQL", "subtasks": [{"title": "Joins"}]},
        )
        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to generate tutorial",
            "details": "upstream_empty: empty response",
        }


class TestQuizEndpoint:
    def test_quiz(self, client: TestClient) -> None:
        response = client.post("/quiz/generate", json={"title": "SQL", "numberOfQuestions": 5})
        assert response.status_code == 200
        questions = response.json()["questions"]
        assert len(questions) == 5
        for question in questions:
            assert len(question["options"]) == 4
            assert 0 <= question["correctAnswerIndex"] < 4
            assert question["difficulty"] in ("easy", "medium", "hard")
            assert question["timeLimit"] > 0

    def test_invalid_question_count(self, client: TestClient) -> None:
        response = client.post("/quiz/generate", json={"title": "SQL", "numberOfQuestions": 0})
        assert response.status_code == 422

    def test_quiz_failure(self, mock_config: RoadmapConfig) -> None:
        client = scripted_client(mock_config, [{"questions": []}])
        response = client.post("/quiz/generate", json={"title": "SQL"})
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate quiz"


class TestDescriptionEndpoints:
    def test_roadmap_description(self, client: TestClient) -> None:
        response = client.post("/roadmap/description", json={"title": "Rust"})
        assert response.status_code == 200
        assert response.json()["data"]["description"].startswith("# Rust")

    def test_section_description(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/section-description",
            json={"roadmapTitle": "Rust", "sectionTitle": "Ownership"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["description"]

    def test_description_fallback(self, mock_config: RoadmapConfig) -> None:
        client = scripted_client(mock_config, [RuntimeError("down")])
        response = client.post("/roadmap/description", json={"title": "Rust"})
        assert response.status_code == 200
        assert response.json()["degraded"] is True


class TestFullRoadmapEndpoint:
    def test_generate(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/generate",
            json={
                "careerTitle": "Data Engineer",
                "careerField": "Retail",
                "experienceLevel": "beginner",
                "careerDescription": "Move from analytics into engineering",
                "preferredResources": ["projects"],
            },
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert 4 <= len(data["sections"]) <= 6


class TestLearningPathEndpoint:
    def test_learning_path(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/path",
            json={
                "roadmapTitle": "Data Analyst",
                "sectionTitle": "SQL",
                "subtaskTitle": "Joins",
                "experienceLevel": "intermediate",
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["degraded"] is False
        data = body["data"]
        assert len(data["lessons"]) >= 3
        assert len(data["test"]["questions"]) >= 5
        assert "realWorldApplications" in data
        assert data["metadata"] == {
            "subtaskTitle": "Joins",
            "sectionTitle": "SQL",
            "roadmapTitle": "Data Analyst",
            "experienceLevel": "intermediate",
        }

    def test_subtask_title_required(self, client: TestClient) -> None:
        response = client.post("/roadmap/path", json={"roadmapTitle": "Data Analyst"})
        assert response.status_code == 422

    def test_blank_roadmap_title(self, client: TestClient) -> None:
        response = client.post(
            "/roadmap/path", json={"roadmapTitle": "  ", "subtaskTitle": "Joins"}
        )
        assert response.status_code == 422
        assert response.json()["details"] == "Roadmap title cannot be empty"

    def test_padded_path_is_flagged(self, mock_config: RoadmapConfig) -> None:
        client = scripted_client(mock_config, [path_payload(exercises=0)])
        response = client.post(
            "/roadmap/path", json={"roadmapTitle": "Data Analyst", "subtaskTitle": "Joins"}
        )
        assert response.status_code == 200
        assert response.json()["notes"] == ["padded exercises"]

    def test_exhaustion_is_server_error(self, mock_config: RoadmapConfig) -> None:
        client = scripted_client(mock_config, ["no json"])
        response = client.post(
            "/roadmap/path", json={"roadmapTitle": "Data Analyst", "subtaskTitle": "Joins"}
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate path content after multiple attempts"


class TestChatEndpoint:
    def test_chat(self, client: TestClient) -> None:
        response = client.post(
            "/chat",
            json={"prompt": "What is a join?", "context": {"title": "SQL"}},
        )
        assert response.status_code == 200
        assert response.json()["message"]

    def test_missing_context(self, client: TestClient) -> None:
        response = client.post("/chat", json={"prompt": "What is a join?"})
        assert response.status_code == 422


class TestSearchEndpoint:
    def test_search(self, client: TestClient) -> None:
        response = client.post("/knowledge/search", json={"query": "databases", "topK": 2})
        assert response.status_code == 200
        results = response.json()["results"]
        assert len(results) == 2
        assert {"id", "title", "category", "score"} <= set(results[0])
        assert results[0]["score"] >= results[1]["score"]

    def test_top_k_bounds(self, client: TestClient) -> None:
        response = client.post("/knowledge/search", json={"query": "sql", "topK": 0})
        assert response.status_code == 422

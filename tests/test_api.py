"""
Tests for the tutor HTTP API.

Tests validate:
- Method handling (405, OPTIONS preflight) and CORS headers
- GET /health and GET /metrics
- Presence checks and input errors mapped to 400
- Structured responses for each tutoring route
- 500 bodies, with detail only in development
"""

import json

import pytest

from shared.llm_adapter import MockProvider, ModelType, ProviderError
from services.tutor_service.config import TutorConfig
from services.tutor_service.cors import cors_headers, is_allowed_origin

ALLOWED = ("https://tutor.example.com", "http://localhost:3000")


class TestCorsHelpers:

    @pytest.mark.parametrize(
        "origin",
        [
            None,
            "",
            "http://localhost:4000",
            "http://127.0.0.1:8080",
            "https://tutor-git-feature.vercel.app",
            "https://preview.vercel.dev",
            "https://tutor.example.com",
        ],
    )
    def test_allowed(self, origin):
        assert is_allowed_origin(origin, ALLOWED)

    def test_unknown_origin(self):
        assert not is_allowed_origin("https://evil.example.net", ALLOWED)

    def test_unknown_origin_gets_first_configured(self):
        headers = cors_headers("https://evil.example.net", ALLOWED)
        assert headers["Access-Control-Allow-Origin"] == "https://tutor.example.com"

    def test_missing_origin_gets_first_configured(self):
        assert cors_headers(None, ALLOWED)["Access-Control-Allow-Origin"] == ALLOWED[0]


class TestMethodsAndCors:

    @pytest.mark.parametrize(
        "path",
        [
            "/api/generate-content",
            "/api/resolve-doubt",
            "/api/generate-teaching-content",
            "/api/generate-quiz",
            "/api/classify-chat",
        ],
    )
    def test_get_on_post_route(self, client, path):
        response = client.get(path)
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    def test_post_on_health(self, client):
        response = client.post("/health")
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    def test_unknown_route(self, client):
        response = client.post("/api/generate-essay", json={"topic": "Cells"})
        assert response.status_code == 404
        assert response.json() == {"error": "Endpoint not found", "path": "/api/generate-essay"}

    def test_preflight(self, client):
        response = client.options(
            "/api/resolve-doubt", headers={"Origin": "http://localhost:5173"}
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert response.headers["access-control-allow-headers"] == (
            "Content-Type, Authorization, X-Requested-With"
        )
        assert response.headers["access-control-max-age"] == "86400"

    def test_preflight_from_unknown_origin_still_succeeds(self, client):
        response = client.options(
            "/api/generate-quiz", headers={"Origin": "https://evil.example.net"}
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_vercel_preview_is_echoed_on_post(self, client):
        origin = "https://tutor-pr-12.vercel.app"
        response = client.post(
            "/api/classify-chat", json={"message": ""}, headers={"Origin": origin}
        )
        assert response.headers["access-control-allow-origin"] == origin

    def test_error_responses_carry_cors_headers(self, client):
        response = client.get("/api/generate-quiz", headers={"Origin": "http://localhost:5173"})
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


class TestHealth:

    def test_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["provider"] == "mock"
        assert data["models"] == {"llama": True, "mistral": True}
        assert data["limits"] == {"maxPromptLength": 32000}
        assert data["version"] == "1.0.0"
        assert "timestamp" in data

    def test_unconfigured_secondary(self, make_client, providers, cfg):
        providers[ModelType.MISTRAL] = MockProvider(name="mistral", configured=False)
        data = make_client(cfg).get("/health").json()
        assert data["models"] == {"llama": True, "mistral": False}

    def test_metrics(self, client):
        client.post("/api/classify-chat", json={"message": ""})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "tutor_requests_total" in response.text


class TestGenerateContent:

    def test_success(self, client, llama):
        llama.script("Plants need sunlight.")
        response = client.post("/api/generate-content", json={"prompt": "Why do plants need sun?"})
        assert response.status_code == 200
        assert response.json() == {"content": "Plants need sunlight.", "model": "llama"}

    def test_mistral_selected(self, client, mistral):
        response = client.post("/api/generate-content", json={"prompt": "hi", "model": "mistral"})
        assert response.json()["model"] == "mistral"
        assert mistral.call_count == 1

    def test_unknown_model_selects_llama(self, client, llama):
        response = client.post("/api/generate-content", json={"prompt": "hi", "model": "gpt-4"})
        assert response.json()["model"] == "llama"
        assert llama.call_count == 1

    @pytest.mark.parametrize("body", [{}, {"prompt": None}, {"model": "llama"}])
    def test_missing_prompt(self, client, body):
        response = client.post("/api/generate-content", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}

    def test_no_body(self, client):
        response = client.post("/api/generate-content")
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}

    def test_non_object_body(self, client):
        response = client.post(
            "/api/generate-content",
            content=json.dumps(["prompt"]),
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt is required"}

    def test_empty_prompt(self, client, llama):
        response = client.post("/api/generate-content", json={"prompt": "   "})
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt cannot be empty"}
        assert llama.call_count == 0

    def test_too_long_prompt(self, client, llama):
        response = client.post("/api/generate-content", json={"prompt": "a" * 32_001})
        assert response.status_code == 400
        assert response.json() == {"error": "Prompt exceeds maximum length (32000 characters)"}
        assert llama.call_count == 0

    def test_wrong_field_type(self, client):
        response = client.post("/api/generate-content", json={"prompt": ["not", "text"]})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    def test_provider_failure_hides_detail(self, client, llama):
        llama.script(*[ProviderError("upstream exploded", 502)] * 3)
        response = client.post("/api/generate-content", json={"prompt": "hi"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate content"}

    def test_provider_failure_shows_detail_in_development(self, make_client, llama):
        dev = TutorConfig(app_env="development", retry_base_delay_ms=0)
        llama.script(*[ProviderError("upstream exploded", 502)] * 3)
        response = make_client(dev).post("/api/generate-content", json={"prompt": "hi"})
        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to generate content",
            "message": "upstream exploded",
        }

    def test_not_configured_is_500(self, make_client, providers, cfg):
        providers[ModelType.LLAMA] = MockProvider(name="llama", configured=False)
        response = make_client(cfg).post("/api/generate-content", json={"prompt": "hi"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate content"}


class TestResolveDoubt:

    def test_structured(self, client, llama):
        llama.script(
            'Answer: {"explanation": "Heat flows hot to cold.", "examples": ["Tea cools"], '
            '"quizQuestion": {"question": "q", "options": ["a","b","c","d"], "correctAnswer": 0}}'
        )
        response = client.post("/api/resolve-doubt", json={"question": "What is heat?"})
        assert response.status_code == 200
        data = response.json()
        assert data["explanation"] == "Heat flows hot to cold."
        assert data["examples"] == ["Tea cools"]
        assert data["quizQuestion"]["correctAnswer"] == 0

    def test_non_json_reply_is_still_200(self, client, llama):
        llama.script("Heat is energy in transit.")
        response = client.post("/api/resolve-doubt", json={"question": "What is heat?"})
        assert response.status_code == 200
        assert response.json() == {
            "explanation": "Heat is energy in transit.",
            "examples": [],
            "quizQuestion": None,
        }

    def test_curriculum_context_reaches_prompt(self, client, llama):
        client.post(
            "/api/resolve-doubt",
            json={
                "question": "Define velocity",
                "context": "Kinematics",
                "curriculumContext": {
                    "curriculumType": "school",
                    "board": "CBSE",
                    "grade": "Class 9",
                    "subject": "Physics",
                    "topic": "Motion",
                },
            },
        )
        prompt = llama.requests[0].messages[-1].content
        assert "Class 9 student, CBSE Board, Subject: Physics, Topic: Motion" in prompt
        assert "Topic Context: Kinematics" in prompt

    def test_missing_question(self, client):
        response = client.post("/api/resolve-doubt", json={"context": "x"})
        assert response.status_code == 400
        assert response.json() == {"error": "Question is required"}

    def test_empty_question(self, client):
        response = client.post("/api/resolve-doubt", json={"question": ""})
        assert response.status_code == 400
        assert response.json() == {"error": "Question cannot be empty"}

    def test_too_long_question(self, client):
        response = client.post("/api/resolve-doubt", json={"question": "q" * 32_001})
        assert response.status_code == 400
        assert response.json() == {"error": "Question exceeds maximum length (32000 characters)"}


class TestTeachingContent:

    def test_topic(self, client, llama):
        llama.script('{"title": "Atoms", "sections": [{"title": "Nucleus", "content": "c"}], "summary": "s"}')
        response = client.post("/api/generate-teaching-content", json={"topic": "Atoms"})
        assert response.status_code == 200
        assert response.json() == {
            "title": "Atoms",
            "sections": [{"title": "Nucleus", "content": "c"}],
            "summary": "s",
        }

    def test_prompt(self, client, llama):
        llama.script('{"sections": []}')
        response = client.post(
            "/api/generate-teaching-content", json={"prompt": "Lesson on atoms as JSON"}
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Lesson"

    def test_neither_topic_nor_prompt(self, client):
        response = client.post("/api/generate-teaching-content", json={"topic": ""})
        assert response.status_code == 400
        assert response.json() == {"error": "Topic is required"}

    def test_blank_prompt_falls_back_to_topic(self, client, llama):
        llama.script('{"title": "Cells", "sections": [], "summary": "s"}')
        response = client.post(
            "/api/generate-teaching-content", json={"topic": "Cells", "prompt": "   "}
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Cells"
        system, user = llama.requests[0].messages
        assert 'topic: "Cells"' in user.content

    def test_blank_topic_and_prompt(self, client, llama):
        response = client.post(
            "/api/generate-teaching-content", json={"topic": "  ", "prompt": "\n"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Topic is required"}
        assert llama.call_count == 0

    def test_prose_reply_is_500(self, client, llama):
        llama.script("Sorry, here is a lesson in prose.")
        response = client.post("/api/generate-teaching-content", json={"topic": "Atoms"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate teaching content"}


class TestQuiz:

    def test_success_on_mistral(self, client, llama, mistral):
        mistral.script('{"questions": [{"question": "q", "options": ["a","b","c","d"], "correctAnswer": 2}]}')
        response = client.post("/api/generate-quiz", json={"topic": "Cells", "model": "mistral"})
        assert response.status_code == 200
        assert response.json()["questions"][0]["correctAnswer"] == 2
        assert llama.call_count == 0

    def test_non_json_reply_is_500(self, client, llama):
        llama.script("1. What is a cell?")
        response = client.post("/api/generate-quiz", json={"topic": "Cells"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate quiz"}

    def test_missing_topic(self, client):
        response = client.post("/api/generate-quiz", json={"context": "Chapter 1"})
        assert response.status_code == 400
        assert response.json() == {"error": "Topic is required"}

    def test_blank_topic_never_reaches_provider(self, client, llama):
        response = client.post("/api/generate-quiz", json={"topic": "   "})
        assert response.status_code == 400
        assert response.json() == {"error": "Topic is required"}
        assert llama.call_count == 0

    def test_topic_is_trimmed(self, client, llama):
        llama.script('{"questions": []}')
        client.post("/api/generate-quiz", json={"topic": "  Cells  "})
        assert 'quiz about "Cells"' in llama.requests[0].messages[-1].content


class TestClassifyChat:

    def test_empty_message(self, client, llama):
        response = client.post("/api/classify-chat", json={"message": "  "})
        assert response.status_code == 200
        assert response.json() == {"mode": "general"}
        assert llama.call_count == 0

    def test_subject_specific(self, client, llama):
        llama.script("subject_specific")
        response = client.post(
            "/api/classify-chat",
            json={"message": "explain torque", "topicName": "Rotation", "subjectName": "Physics"},
        )
        assert response.json() == {"mode": "subject_specific"}
        assert "Context: Rotation, Physics" in llama.requests[0].messages[0].content

    def test_provider_failure_degrades_to_general(self, client, llama):
        llama.script(*[ProviderError("down", 503)] * 3)
        response = client.post("/api/classify-chat", json={"message": "explain torque"})
        assert response.status_code == 200
        assert response.json() == {"mode": "general"}

    def test_malformed_body_degrades_to_general(self, client):
        response = client.post("/api/classify-chat", json={"message": 12})
        assert response.status_code == 200
        assert response.json() == {"mode": "general"}

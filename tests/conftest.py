"""
Pytest 설정 및 공통 Fixtures
"""
import json
import pytest
from fastapi.testclient import TestClient
import sys
import os

# 경로 추가 - 프로젝트 루트 모듈을 import할 수 있도록
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# 테스트에서는 외부 API 를 호출하지 않는다
os.environ["AI_PROVIDER"] = "mock"

from main import app, get_book_controller
from providers.errors import StoryGenerationError
from providers.generation_client import MockProvider
from services.book_service import BookController
from fakes import FakeGenerationClient, make_story


@pytest.fixture
def fake_client():
    return FakeGenerationClient()


@pytest.fixture
def controller(fake_client):
    return BookController(fake_client)


@pytest.fixture
def api_controller():
    """API 테스트용 컨트롤러 (지연 없는 Mock Provider)"""
    return BookController(MockProvider(delay=0))


@pytest.fixture
def client(api_controller):
    """FastAPI 테스트 클라이언트"""
    app.dependency_overrides[get_book_controller] = lambda: api_controller
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def gemini_story_response():
    """Gemini 스토리 응답 (구조화 JSON)"""
    story = make_story().model_dump()
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": json.dumps(story, ensure_ascii=False)}]}}
        ]
    }


@pytest.fixture
def gemini_image_response():
    """Gemini 이미지 응답 (텍스트 + inlineData 파트)"""
    return {
        "candidates": [
            {
                "content": {
                    "role": "model",
                    "parts": [
                        {"text": "Here is your illustration."},
                        {"inlineData": {"mimeType": "image/png", "data": "iVBORw0KGgo="}},
                    ],
                }
            }
        ]
    }


@pytest.fixture
def story_failure():
    """스토리 요청 실패"""
    return StoryGenerationError("스토리 응답에 텍스트가 없습니다")

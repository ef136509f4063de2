"""
생성 클라이언트 테스트 (Gemini 응답 파싱 / Mock / 팩토리)
"""
import asyncio
import json
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp

from config.settings import Settings
from prompt.prompt_manager import IMAGE_STYLE_PREFIX, IMAGE_STYLE_SUFFIX
from providers.errors import GenerationError, ImageGenerationError, StoryGenerationError
from providers.generation_client import (
    GeminiProvider,
    GenerationClient,
    GenerationClientFactory,
    MockProvider,
)


def run(coro):
    return asyncio.run(coro)


def text_response(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def fake_session(status=200, body=None, text="", post_error=None):
    """aiohttp.ClientSession 대체 (async with 두 단계)"""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value=text)

    post_cm = MagicMock()
    post_cm.__aenter__ = AsyncMock(return_value=response)
    post_cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    if post_error is not None:
        session.post = MagicMock(side_effect=post_error)
    else:
        session.post = MagicMock(return_value=post_cm)

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return session_cm, session


@pytest.fixture
def provider():
    return GeminiProvider(api_key="test-key")


@pytest.mark.unit
class TestStoryRequest:
    """스토리 요청"""

    def test_parses_structured_story(self, provider, gemini_story_response):
        with patch.object(provider, "_generate_content", AsyncMock(return_value=gemini_story_response)):
            story = run(provider.request_story())

        assert story.title == "黛玉葬花"
        assert len(story.scenes) == 6
        assert story.scenes[0].visual_description == "scene 0 description"

    def test_sends_prompt_and_schema(self, provider, gemini_story_response):
        mock_call = AsyncMock(return_value=gemini_story_response)
        with patch.object(provider, "_generate_content", mock_call):
            run(provider.request_story())

        model, payload = mock_call.call_args.args
        assert model == "gemini-2.5-flash"
        prompt = payload["contents"][0]["parts"][0]["text"]
        assert "exactly 6 distinct scenes" in prompt
        config = payload["generationConfig"]
        assert config["responseMimeType"] == "application/json"
        assert config["responseSchema"]["required"] == ["title", "scenes"]
        scene_schema = config["responseSchema"]["properties"]["scenes"]["items"]
        assert scene_schema["required"] == ["title", "narrative_text", "visual_description"]

    def test_joins_text_parts(self, provider):
        story = {"title": "t", "scenes": [{"title": "a", "narrative_text": "b", "visual_description": "c"}]}
        text = json.dumps(story)
        result = {"candidates": [{"content": {"parts": [{"text": text[:10]}, {"text": text[10:]}]}}]}

        with patch.object(provider, "_generate_content", AsyncMock(return_value=result)):
            parsed = run(provider.request_story())

        assert parsed.scenes[0].title == "a"

    @pytest.mark.parametrize("result", [
        {},
        {"candidates": []},
        text_response(""),
        text_response("not json at all"),
        text_response(json.dumps({"title": "t"})),
        text_response(json.dumps({"title": "t", "scenes": [{"title": "a", "narrative_text": "b"}]})),
        text_response(json.dumps({"title": "t", "scenes": []})),
    ])
    def test_bad_responses_raise_story_error(self, provider, result):
        with patch.object(provider, "_generate_content", AsyncMock(return_value=result)):
            with pytest.raises(StoryGenerationError):
                run(provider.request_story())

    def test_transport_error_becomes_story_error(self, provider):
        failing = AsyncMock(side_effect=GenerationError("Gemini API 오류: 500"))
        with patch.object(provider, "_generate_content", failing):
            with pytest.raises(StoryGenerationError):
                run(provider.request_story())

    def test_missing_key_fails_at_call_time(self):
        provider = GeminiProvider(api_key="")
        assert not provider.is_available()

        with pytest.raises(StoryGenerationError):
            run(provider.request_story())


@pytest.mark.unit
class TestImageRequest:
    """이미지 요청"""

    def test_returns_data_uri_from_inline_part(self, provider, gemini_image_response):
        with patch.object(provider, "_generate_content", AsyncMock(return_value=gemini_image_response)):
            image_url = run(provider.request_image("Daiyu in the garden"))

        assert image_url == "data:image/png;base64,iVBORw0KGgo="

    def test_prompt_is_wrapped_with_style(self, provider, gemini_image_response):
        mock_call = AsyncMock(return_value=gemini_image_response)
        with patch.object(provider, "_generate_content", mock_call):
            run(provider.request_image("Daiyu in the garden"))

        model, payload = mock_call.call_args.args
        assert model == "gemini-2.5-flash-image"
        prompt = payload["contents"][0]["parts"][0]["text"]
        assert prompt == f"{IMAGE_STYLE_PREFIX} Daiyu in the garden. {IMAGE_STYLE_SUFFIX}"

    def test_uses_part_mime_type(self, provider):
        result = {"candidates": [{"content": {"parts": [
            {"inlineData": {"mimeType": "image/jpeg", "data": "abc"}},
        ]}}]}
        with patch.object(provider, "_generate_content", AsyncMock(return_value=result)):
            assert run(provider.request_image("x")) == "data:image/jpeg;base64,abc"

    def test_no_image_part_raises(self, provider):
        with patch.object(provider, "_generate_content", AsyncMock(return_value=text_response("sorry"))):
            with pytest.raises(ImageGenerationError):
                run(provider.request_image("Daiyu in the garden"))

    def test_empty_description_raises_without_call(self, provider):
        mock_call = AsyncMock()
        with patch.object(provider, "_generate_content", mock_call):
            with pytest.raises(ImageGenerationError):
                run(provider.request_image("   "))

        mock_call.assert_not_called()

    def test_transport_error_becomes_image_error(self, provider):
        failing = AsyncMock(side_effect=GenerationError("Gemini API 요청 시간 초과"))
        with patch.object(provider, "_generate_content", failing):
            with pytest.raises(ImageGenerationError):
                run(provider.request_image("x"))


@pytest.mark.unit
class TestGenerateContent:
    """generateContent HTTP 호출"""

    def test_posts_to_model_endpoint(self, provider):
        session_cm, session = fake_session(body={"candidates": []})
        with patch("providers.generation_client.aiohttp.ClientSession", return_value=session_cm):
            result = run(provider._generate_content("gemini-2.5-flash", {"contents": []}))

        assert result == {"candidates": []}
        url = session.post.call_args.args[0]
        assert url == "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent"
        assert session.post.call_args.kwargs["headers"]["x-goog-api-key"] == "test-key"
        assert session.post.call_args.kwargs["json"] == {"contents": []}

    def test_error_status_raises(self, provider):
        session_cm, _ = fake_session(status=403, text="PERMISSION_DENIED")
        with patch("providers.generation_client.aiohttp.ClientSession", return_value=session_cm):
            with pytest.raises(GenerationError, match="403"):
                run(provider._generate_content("gemini-2.5-flash", {}))

    def test_timeout_raises(self, provider):
        session_cm, _ = fake_session(post_error=asyncio.TimeoutError())
        with patch("providers.generation_client.aiohttp.ClientSession", return_value=session_cm):
            with pytest.raises(GenerationError, match="시간 초과"):
                run(provider._generate_content("gemini-2.5-flash", {}))

    def test_client_error_raises(self, provider):
        session_cm, _ = fake_session(post_error=aiohttp.ClientConnectionError("refused"))
        with patch("providers.generation_client.aiohttp.ClientSession", return_value=session_cm):
            with pytest.raises(GenerationError, match="HTTP"):
                run(provider._generate_content("gemini-2.5-flash", {}))


@pytest.mark.unit
class TestMockProvider:
    """Mock Provider"""

    def test_mock_story_has_six_scenes(self):
        story = run(MockProvider(delay=0).request_story())

        assert story.title == "黛玉葬花"
        assert len(story.scenes) == 6
        assert all(scene.visual_description for scene in story.scenes)

    def test_mock_image_is_data_uri(self):
        image_url = run(MockProvider(delay=0).request_image("a garden"))
        assert image_url.startswith("data:image/svg+xml;base64,")

    def test_mock_image_rejects_empty_description(self):
        with pytest.raises(ImageGenerationError):
            run(MockProvider(delay=0).request_image(""))


@pytest.mark.unit
class TestFactory:
    """클라이언트 팩토리"""

    def test_mock_provider_selected(self):
        client = GenerationClientFactory.get_client(Settings(AI_PROVIDER="mock"))
        assert isinstance(client, MockProvider)

    def test_gemini_provider_selected_without_key(self):
        client = GenerationClientFactory.get_client(Settings(AI_PROVIDER="gemini", GEMINI_API_KEY=""))
        assert isinstance(client, GeminiProvider)
        assert not client.is_available()

    def test_gemini_provider_uses_settings(self):
        settings = Settings(
            AI_PROVIDER="gemini",
            GEMINI_API_KEY="k",
            GEMINI_STORY_MODEL="story-model",
            GEMINI_IMAGE_MODEL="image-model",
            REQUEST_TIMEOUT=5,
        )
        client = GenerationClientFactory.get_client(settings)

        assert client.story_model == "story-model"
        assert client.image_model == "image-model"
        assert client.timeout == 5
        assert client.get_provider_name() == "Gemini story-model / image-model"

    def test_parse_story_is_shared(self):
        with pytest.raises(StoryGenerationError):
            GenerationClient.parse_story(None)

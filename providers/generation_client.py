"""
생성 모델 클라이언트 (Gemini REST / Mock)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
import asyncio
import aiohttp
import logging

from pydantic import ValidationError

from config.settings import Settings
from models.book_models import StoryScript
from prompt.prompt_manager import PromptManager, get_prompt_manager
from providers.errors import GenerationError, ImageGenerationError, StoryGenerationError

logger = logging.getLogger(__name__)

class GenerationClient(ABC):
    def __init__(self, prompt_manager: Optional[PromptManager] = None):
        self.prompt_manager = prompt_manager or get_prompt_manager()

    @abstractmethod
    async def request_story(self) -> StoryScript:
        """6개 장면 스토리보드 요청"""
        pass

    @abstractmethod
    async def request_image(self, visual_description: str) -> str:
        """장면 이미지 요청 - data URI 반환"""
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """프로바이더 사용 가능 여부"""
        pass

    @staticmethod
    def parse_story(text: Optional[str]) -> StoryScript:
        """구조화 응답 텍스트 → StoryScript"""
        if not text or not text.strip():
            raise StoryGenerationError("스토리 응답에 텍스트가 없습니다")
        try:
            story = StoryScript.model_validate_json(text)
        except ValidationError as e:
            logger.error("스토리 응답 파싱 실패: %s", e)
            logger.debug("  원본 콘텐츠: %s", text)
            raise StoryGenerationError(f"스토리 응답 형식 오류: {e.error_count()}개 필드") from e
        if not story.scenes:
            raise StoryGenerationError("스토리 응답에 장면이 없습니다")
        return story


class GeminiProvider(GenerationClient):
    """Google Gemini generateContent REST Provider"""

    def __init__(
        self,
        api_key: str,
        story_model: str = "gemini-2.5-flash",
        image_model: str = "gemini-2.5-flash-image",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 60,
        prompt_manager: Optional[PromptManager] = None,
    ):
        super().__init__(prompt_manager)
        self.api_key = api_key
        self.story_model = story_model
        self.image_model = image_model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    def get_provider_name(self) -> str:
        return f"Gemini {self.story_model} / {self.image_model}"

    async def request_story(self) -> StoryScript:
        payload = {
            "contents": [{"parts": [{"text": self.prompt_manager.get_story_prompt()}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": self.prompt_manager.get_story_response_schema(),
            },
        }

        try:
            result = await self._generate_content(self.story_model, payload)
        except GenerationError as e:
            raise StoryGenerationError(str(e)) from e

        story = self.parse_story(self._extract_text(result))
        logger.info("스토리 생성 완료: %s (%d 장면)", story.title, len(story.scenes))
        return story

    async def request_image(self, visual_description: str) -> str:
        if not visual_description or not visual_description.strip():
            raise ImageGenerationError("장면 묘사가 비어 있습니다")

        prompt = self.prompt_manager.build_image_prompt(visual_description)
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            result = await self._generate_content(self.image_model, payload)
        except GenerationError as e:
            raise ImageGenerationError(str(e)) from e

        inline_data = self._find_inline_image(result)
        if inline_data is None:
            logger.error("이미지 응답에 inlineData 파트가 없음")
            raise ImageGenerationError("Failed to generate image")

        mime_type = inline_data.get("mimeType") or "image/png"
        return f"data:{mime_type};base64,{inline_data['data']}"

    async def _generate_content(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """generateContent 호출 - 실패 시 GenerationError"""
        if not self.is_available():
            logger.error("GeminiProvider 사용 불가 - API 키 없음")
            raise GenerationError("Gemini API 키가 설정되지 않았습니다.")

        url = f"{self.api_base}/models/{model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, headers=headers, json=payload) as response:
                    if response.status == 200:
                        return await response.json()

                    error_text = await response.text()
                    logger.error("Gemini API 오류:")
                    logger.error("  모델: %s", model)
                    logger.error("  상태코드: %s", response.status)
                    logger.error("  오류 내용: %s", error_text[:500])
                    raise GenerationError(f"Gemini API 오류: {response.status}")

        except asyncio.TimeoutError as e:
            logger.error("Gemini API 타임아웃 (%s초 초과)", self.timeout)
            raise GenerationError("Gemini API 요청 시간 초과") from e
        except aiohttp.ClientError as e:
            logger.error("HTTP 클라이언트 오류: %s: %s", type(e).__name__, e)
            raise GenerationError(f"HTTP 클라이언트 오류: {e}") from e

    @staticmethod
    def _parts(result: Dict[str, Any]) -> List[Dict[str, Any]]:
        candidates = result.get("candidates") or []
        if not candidates:
            return []
        content = candidates[0].get("content") or {}
        return content.get("parts") or []

    @classmethod
    def _extract_text(cls, result: Dict[str, Any]) -> str:
        return "".join(part.get("text", "") for part in cls._parts(result))

    @classmethod
    def _find_inline_image(cls, result: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for part in cls._parts(result):
            inline_data = part.get("inlineData") or part.get("inline_data")
            if inline_data and inline_data.get("data"):
                return inline_data
        return None


class MockProvider(GenerationClient):
    """Mock 데이터 제공자"""

    def __init__(self, delay: float = 0.3, prompt_manager: Optional[PromptManager] = None):
        super().__init__(prompt_manager)
        from templates.mock_templates import MockStoryGenerator
        self.generator = MockStoryGenerator()
        self.delay = delay

    def is_available(self) -> bool:
        return True

    async def request_story(self) -> StoryScript:
        # 인위적 지연 (실제 API 호출 시뮬레이션)
        await asyncio.sleep(self.delay)
        return StoryScript.model_validate(self.generator.generate_story())

    async def request_image(self, visual_description: str) -> str:
        if not visual_description or not visual_description.strip():
            raise ImageGenerationError("장면 묘사가 비어 있습니다")
        await asyncio.sleep(self.delay)
        return self.generator.generate_image(self.prompt_manager.build_image_prompt(visual_description))

    def get_provider_name(self) -> str:
        return "Mock Provider"


class GenerationClientFactory:
    """GenerationClient 팩토리"""

    @staticmethod
    def get_client(settings: Optional[Settings] = None) -> GenerationClient:
        settings = settings or Settings()
        provider_name = settings.AI_PROVIDER.lower()

        if provider_name == "mock":
            return MockProvider()

        if provider_name != "gemini":
            logger.warning("알 수 없는 AI_PROVIDER '%s' - Gemini 사용", settings.AI_PROVIDER)

        # 키가 없어도 생성한다 (요청 시점에 실패)
        return GeminiProvider(
            api_key=settings.GEMINI_API_KEY,
            story_model=settings.GEMINI_STORY_MODEL,
            image_model=settings.GEMINI_IMAGE_MODEL,
            api_base=settings.GEMINI_API_BASE,
            timeout=settings.REQUEST_TIMEOUT,
        )

    @staticmethod
    def get_available_providers(settings: Optional[Settings] = None) -> Dict[str, bool]:
        """사용 가능한 Provider 목록"""
        settings = settings or Settings()
        return settings.get_available_providers()

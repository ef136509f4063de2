"""
프롬프트 관리 - 黛玉葬花 그림책
스토리보드 프롬프트 / 응답 스키마 / 이미지 스타일 래핑
"""

from typing import Dict, Any, Optional

SCENE_COUNT = 6

# 모든 장면이 같은 화풍을 갖도록 고정된 스타일 토큰
IMAGE_STYLE_PREFIX = (
    "Studio Ghibli style, Miyazaki Hayao art style, anime style, hand-drawn aesthetic, "
    "lush detailed background, soft natural lighting, vibrant colors, picturesque, emotive."
)
IMAGE_STYLE_SUFFIX = "Masterpiece, 8k resolution, highly detailed, cel shaded."


class PromptManager:
    """그림책 생성 프롬프트 관리"""

    def __init__(self, scene_count: int = SCENE_COUNT):
        self.scene_count = scene_count
        self.story_prompt = self._build_story_prompt()

    def _build_story_prompt(self) -> str:
        """스토리보드 요청 프롬프트"""
        return f"""
You are a master storyteller and artist of traditional Chinese Lianhuanhua (picture books).
Create a storyboard for the story "Daiyu Burying Flowers" (黛玉葬花) from Dream of the Red Chamber.

Break the story into exactly {self.scene_count} distinct scenes.
For each scene, provide:
1. A short poetic title (4-6 Chinese characters).
2. Narrative text in simplified Chinese. The style should be lyrical, classical yet accessible, fitting for a picture book.
3. A detailed visual description for an AI image generator. Describe the scene in English. Include details about the composition, Lin Daiyu's appearance (traditional Hanfu, frail, elegant), the setting (garden, fallen blossoms, flower hoe, silk bag), and the artistic style (Studio Ghibli style, Miyazaki Hayao art, lush greenery, beautiful clouds, vibrant colors, hand-drawn animation texture, emotional atmosphere).

Return the response in JSON format.
"""

    def get_story_prompt(self) -> str:
        return self.story_prompt

    def get_story_response_schema(self) -> Dict[str, Any]:
        """구조화 응답 스키마 (generationConfig.responseSchema)"""
        return {
            "type": "OBJECT",
            "properties": {
                "title": {"type": "STRING"},
                "scenes": {
                    "type": "ARRAY",
                    "items": {
                        "type": "OBJECT",
                        "properties": {
                            "title": {"type": "STRING"},
                            "narrative_text": {"type": "STRING"},
                            "visual_description": {"type": "STRING"},
                        },
                        "required": ["title", "narrative_text", "visual_description"],
                    },
                },
            },
            "required": ["title", "scenes"],
        }

    def build_image_prompt(self, visual_description: str) -> str:
        """장면 묘사에 고정 스타일 접두/접미어 추가"""
        return f"{IMAGE_STYLE_PREFIX} {visual_description.strip()}. {IMAGE_STYLE_SUFFIX}"


_prompt_manager: Optional[PromptManager] = None

def get_prompt_manager() -> PromptManager:
    """프로세스 공용 PromptManager"""
    global _prompt_manager
    if _prompt_manager is None:
        _prompt_manager = PromptManager()
    return _prompt_manager

"""
그림책 도메인 모델
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SceneScript(BaseModel):
    """생성 모델이 돌려준 장면 하나"""
    title: str = Field(..., description="장면 제목")
    narrative_text: str = Field(..., description="본문")
    visual_description: str = Field(..., description="이미지 생성용 영어 묘사")


class StoryScript(BaseModel):
    """스토리 요청 한 번의 결과"""
    title: str = Field(..., description="책 제목")
    scenes: List[SceneScript] = Field(..., description="장면 목록 (순서 유지)")


class ImageStatus(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"


class BookPhase(str, Enum):
    IDLE = "idle"
    LOADING_STORY = "loading_story"
    READING = "reading"


class Scene(BaseModel):
    """책의 한 페이지"""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="순서 (생성 시 고정)")
    title: str
    narrative_text: str
    visual_description: str
    image_status: ImageStatus = ImageStatus.EMPTY
    image_url: Optional[str] = None

    @model_validator(mode="after")
    def _check_image(self):
        if self.image_status == ImageStatus.READY and not self.image_url:
            raise ValueError("READY 상태에는 image_url 이 필요합니다")
        if self.image_status != ImageStatus.READY and self.image_url is not None:
            raise ValueError("image_url 은 READY 상태에서만 설정됩니다")
        return self

    @property
    def is_loading_image(self) -> bool:
        return self.image_status == ImageStatus.LOADING

    @property
    def has_image(self) -> bool:
        return self.image_status == ImageStatus.READY

    @classmethod
    def from_script(cls, index: int, script: SceneScript) -> "Scene":
        return cls(
            id=index,
            title=script.title,
            narrative_text=script.narrative_text,
            visual_description=script.visual_description,
        )

    def loading(self) -> "Scene":
        return self.model_copy(update={"image_status": ImageStatus.LOADING, "image_url": None})

    def with_image(self, image_url: str) -> "Scene":
        return Scene(
            **self.model_dump(exclude={"image_status", "image_url"}),
            image_status=ImageStatus.READY,
            image_url=image_url,
        )

    def without_image(self) -> "Scene":
        return self.model_copy(update={"image_status": ImageStatus.EMPTY, "image_url": None})


class BookState(BaseModel):
    """컨트롤러 상태 스냅샷 (뷰 렌더링용)"""
    model_config = ConfigDict(frozen=True)

    phase: BookPhase = BookPhase.IDLE
    book_title: Optional[str] = None
    scenes: List[Scene] = Field(default_factory=list)
    current_index: int = 0
    error: Optional[str] = None
    generation: int = 0

    @model_validator(mode="after")
    def _check_index(self):
        if self.scenes and not 0 <= self.current_index < len(self.scenes):
            raise ValueError(f"current_index 범위 오류: {self.current_index}")
        if not self.scenes and self.current_index != 0:
            raise ValueError("장면이 없으면 current_index 는 0 입니다")
        if self.phase == BookPhase.READING and not self.scenes:
            raise ValueError("READING 상태에는 장면이 필요합니다")
        return self

    def evolve(self, **changes) -> "BookState":
        """변경 사항을 적용한 새 스냅샷 (검증 포함)"""
        return BookState.model_validate({**dict(self), **changes})

    @property
    def has_started(self) -> bool:
        return self.phase == BookPhase.READING

    @property
    def is_loading_story(self) -> bool:
        return self.phase == BookPhase.LOADING_STORY

    @property
    def current_scene(self) -> Optional[Scene]:
        if not self.scenes:
            return None
        return self.scenes[self.current_index]

    @property
    def is_last_page(self) -> bool:
        return bool(self.scenes) and self.current_index == len(self.scenes) - 1

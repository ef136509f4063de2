"""
응답 모델 정의 (JSON API)
"""

from pydantic import BaseModel
from typing import List, Optional

from models.book_models import BookState, ImageStatus

class SceneResponse(BaseModel):
    id: int
    title: str
    narrative_text: str
    image_status: ImageStatus
    is_loading_image: bool
    image_url: Optional[str] = None

class BookStateResponse(BaseModel):
    has_started: bool
    is_loading_story: bool
    book_title: Optional[str] = None
    current_index: int
    total_scenes: int
    error: Optional[str] = None
    scenes: List[SceneResponse]

    @classmethod
    def from_state(cls, state: BookState) -> "BookStateResponse":
        return cls(
            has_started=state.has_started,
            is_loading_story=state.is_loading_story,
            book_title=state.book_title,
            current_index=state.current_index,
            total_scenes=len(state.scenes),
            error=state.error,
            scenes=[
                SceneResponse(
                    id=scene.id,
                    title=scene.title,
                    narrative_text=scene.narrative_text,
                    image_status=scene.image_status,
                    is_loading_image=scene.is_loading_image,
                    image_url=scene.image_url,
                )
                for scene in state.scenes
            ],
        )

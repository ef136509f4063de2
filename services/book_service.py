"""
그림책 상태 컨트롤러
장면 목록 / 현재 페이지 / 장면별 이미지 로딩 상태 관리
이미지 선로딩: 현재 페이지 + 다음 페이지
"""

import asyncio
import logging
from typing import Optional, Set

from models.book_models import BookPhase, BookState, ImageStatus, Scene
from providers.errors import GenerationError
from providers.generation_client import GenerationClient

logger = logging.getLogger(__name__)

STORY_ERROR_MESSAGE = "Failed to create the story. Please check your connection and try again."


class BookBusyError(Exception):
    """스토리 생성 요청이 이미 진행 중"""


class BookController:
    """단일 독자용 그림책 세션

    모든 메서드는 이벤트 루프 위에서 호출된다. 진행 중인 이미지 요청은
    요청 시점의 세션 세대(generation)를 기억하고, 완료 시 세대가 바뀌었으면
    결과를 버린다.
    """

    def __init__(self, client: GenerationClient):
        self.client = client
        self._state = BookState()
        self._image_tasks: Set[asyncio.Task] = set()
        self._story_task: Optional[asyncio.Task] = None

    def snapshot(self) -> BookState:
        """뷰 렌더링용 상태 (불변)"""
        return self._state

    async def start_story(self) -> bool:
        """스토리보드 요청 후 세션 구성 - 성공 여부 반환"""
        generation = self._begin_loading()
        return await self._load_story(generation)

    def begin_story(self) -> asyncio.Task:
        """스토리 생성을 백그라운드 작업으로 시작

        LOADING_STORY 상태는 즉시 반영되므로 바로 렌더링하면 로딩 화면이 보인다.
        """
        generation = self._begin_loading()
        task = asyncio.get_running_loop().create_task(self._load_story(generation))
        self._story_task = task
        return task

    async def wait_for_story(self) -> None:
        """백그라운드 스토리 생성 완료 대기"""
        task = self._story_task
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def _begin_loading(self) -> int:
        if self._state.is_loading_story:
            logger.warning("스토리 생성이 이미 진행 중 (generation=%d)", self._state.generation)
            raise BookBusyError("스토리를 생성하는 중입니다.")

        generation = self._state.generation + 1
        self._state = BookState(phase=BookPhase.LOADING_STORY, generation=generation)
        logger.info("스토리 생성 시작 (generation=%d, provider=%s)",
                    generation, self.client.get_provider_name())
        return generation

    async def _load_story(self, generation: int) -> bool:
        story = None
        try:
            story = await self.client.request_story()
        except GenerationError:
            logger.error("스토리 생성 실패", exc_info=True)
        finally:
            # 예상하지 못한 예외/취소에도 로딩 상태를 남기지 않는다
            if story is None and generation == self._state.generation:
                self._state = BookState(error=STORY_ERROR_MESSAGE, generation=generation)

        if story is None:
            return False

        if generation != self._state.generation:
            logger.info("reset 이후 도착한 스토리 결과 무시 (generation=%d)", generation)
            return False

        self._state = BookState(
            phase=BookPhase.READING,
            book_title=story.title,
            scenes=[Scene.from_script(index, script) for index, script in enumerate(story.scenes)],
            current_index=0,
            generation=generation,
        )
        logger.info("스토리 준비 완료: %s (%d 장면)", story.title, len(story.scenes))

        self._prefetch_around_current()
        return True

    def go_next(self) -> bool:
        state = self._state
        if not state.scenes or state.current_index >= len(state.scenes) - 1:
            return False
        self._move_to(state.current_index + 1)
        return True

    def go_prev(self) -> bool:
        if self._state.current_index <= 0:
            return False
        self._move_to(self._state.current_index - 1)
        return True

    def reset(self) -> None:
        """세션 폐기 - 진행 중인 요청은 취소하지 않고 결과만 버린다"""
        generation = self._state.generation + 1
        self._state = BookState(generation=generation)
        logger.info("세션 초기화 (generation=%d, 진행 중 이미지 %d개)",
                    generation, len(self._image_tasks))

    def prefetch(self, index: int) -> bool:
        """장면 이미지 요청 - 새 요청을 시작했으면 True

        범위 밖이거나 이미 이미지가 있거나 로딩 중이면 아무것도 하지 않는다.
        실패했던 장면은 EMPTY 로 돌아가므로 다시 호출되면 재시도된다.
        """
        scenes = self._state.scenes
        if index < 0 or index >= len(scenes):
            return False

        scene = scenes[index]
        if scene.image_status != ImageStatus.EMPTY:
            return False

        self._replace_scene(index, scene.loading())
        task = asyncio.get_running_loop().create_task(
            self._load_image(index, scene.visual_description, self._state.generation)
        )
        self._image_tasks.add(task)
        task.add_done_callback(self._image_tasks.discard)
        return True

    @property
    def pending_images(self) -> int:
        return len(self._image_tasks)

    async def wait_for_images(self) -> None:
        """진행 중인 이미지 요청 완료 대기"""
        while self._image_tasks:
            await asyncio.gather(*list(self._image_tasks), return_exceptions=True)

    def _move_to(self, index: int) -> None:
        self._state = self._state.evolve(current_index=index)
        self._prefetch_around_current()

    def _prefetch_around_current(self) -> None:
        current = self._state.current_index
        self.prefetch(current)
        self.prefetch(current + 1)

    async def _load_image(self, index: int, visual_description: str, generation: int) -> None:
        image_url: Optional[str] = None
        try:
            image_url = await self.client.request_image(visual_description)
        except GenerationError as e:
            logger.warning("장면 %d 이미지 생성 실패: %s", index, e)
        finally:
            self._finish_image(index, generation, image_url)

    def _finish_image(self, index: int, generation: int, image_url: Optional[str]) -> None:
        if generation != self._state.generation:
            logger.debug("이전 세션의 이미지 결과 무시 (scene=%d, generation=%d)", index, generation)
            return

        scene = self._state.scenes[index]
        if image_url:
            self._replace_scene(index, scene.with_image(image_url))
            logger.info("장면 %d 이미지 준비 완료", index)
        else:
            self._replace_scene(index, scene.without_image())

    def _replace_scene(self, index: int, scene: Scene) -> None:
        scenes = list(self._state.scenes)
        scenes[index] = scene
        self._state = self._state.evolve(scenes=scenes)

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse, RedirectResponse
import logging
from datetime import datetime

from config.settings import get_settings
from models.response_models import BookStateResponse
from providers.generation_client import GenerationClientFactory
from services.book_service import BookBusyError, BookController
from views.book_view import build_book_view, render_book_page

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)

for warning in settings.validate_settings():
    logger.warning("설정 경고: %s", warning)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # 진행 중인 스토리/이미지 요청 정리
    await book_controller.wait_for_story()
    await book_controller.wait_for_images()


app = FastAPI(
    title="Picture Book Server",
    description="黛玉葬花 - AI 그림책 (스토리보드 + 장면 삽화)",
    version="1.0.0",
    lifespan=lifespan,
)

book_controller = BookController(GenerationClientFactory.get_client(settings))


def get_book_controller() -> BookController:
    return book_controller


async def _start(controller: BookController) -> None:
    try:
        await controller.start_story()
    except BookBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.get("/", response_class=HTMLResponse)
async def book_page(controller: BookController = Depends(get_book_controller)):
    """그림책 화면"""
    return render_book_page(build_book_view(controller.snapshot()))


@app.post("/start")
async def start_page(controller: BookController = Depends(get_book_controller)):
    """스토리 생성은 백그라운드에서 진행 - 로딩 화면으로 바로 이동"""
    try:
        controller.begin_story()
    except BookBusyError:
        logger.info("스토리 생성 중 시작 요청 - 화면으로 이동")
    return RedirectResponse("/", status_code=303)


@app.post("/next")
async def next_page(controller: BookController = Depends(get_book_controller)):
    controller.go_next()
    return RedirectResponse("/", status_code=303)


@app.post("/prev")
async def prev_page(controller: BookController = Depends(get_book_controller)):
    controller.go_prev()
    return RedirectResponse("/", status_code=303)


@app.post("/reset")
async def reset_page(controller: BookController = Depends(get_book_controller)):
    controller.reset()
    return RedirectResponse("/", status_code=303)


@app.get("/api/book", response_model=BookStateResponse)
async def get_book(controller: BookController = Depends(get_book_controller)):
    return BookStateResponse.from_state(controller.snapshot())


@app.post("/api/book/start", response_model=BookStateResponse)
async def start_book(controller: BookController = Depends(get_book_controller)):
    await _start(controller)
    return BookStateResponse.from_state(controller.snapshot())


@app.post("/api/book/next", response_model=BookStateResponse)
async def next_book(controller: BookController = Depends(get_book_controller)):
    controller.go_next()
    return BookStateResponse.from_state(controller.snapshot())


@app.post("/api/book/prev", response_model=BookStateResponse)
async def prev_book(controller: BookController = Depends(get_book_controller)):
    controller.go_prev()
    return BookStateResponse.from_state(controller.snapshot())


@app.post("/api/book/reset", response_model=BookStateResponse)
async def reset_book(controller: BookController = Depends(get_book_controller)):
    controller.reset()
    return BookStateResponse.from_state(controller.snapshot())


@app.get("/health")
async def health_check(controller: BookController = Depends(get_book_controller)):
    """헬스체크"""
    return {
        "status": "healthy",
        "current_provider": controller.client.get_provider_name(),
        "available_providers": GenerationClientFactory.get_available_providers(settings),
        "pending_images": controller.pending_images,
        "timestamp": datetime.now().isoformat(),
    }


@app.get("/config")
async def get_config():
    """현재 설정 (비밀값 제외)"""
    return {
        "ai_provider": settings.AI_PROVIDER,
        "provider_info": settings.get_current_provider_info(),
        "gemini_configured": bool(settings.GEMINI_API_KEY),
        "request_timeout": settings.REQUEST_TIMEOUT,
        "warnings": settings.validate_settings(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

"""
그림책 화면 - 상태 스냅샷을 화면 모델과 HTML 로 변환
"""

from html import escape
from typing import Optional

from pydantic import BaseModel

from models.book_models import BookState, ImageStatus

BOOK_TITLE = "黛玉葬花"
REFRESH_SECONDS = 2

START_LABEL = "开始阅读 (Start)"
STARTING_LABEL = "正在创作故事..."
IMAGE_LOADING_LABEL = "宫崎骏风格绘制中..."
IMAGE_LOADING_HINT = "Creating Ghibli style art..."
IMAGE_PLACEHOLDER_LABEL = "等待绘制..."
PREV_LABEL = "上一页"
NEXT_LABEL = "下一页"
RESTART_LABEL = "重新阅读"


class BookView(BaseModel):
    """렌더링할 값만 담은 화면 모델"""
    mode: str  # start | reading
    book_title: str = BOOK_TITLE
    auto_refresh: bool = False

    # start mode
    start_label: str = START_LABEL
    start_disabled: bool = False
    error: Optional[str] = None

    # reading mode
    page_label: str = ""
    scene_title: str = ""
    narrative_text: str = ""
    image_area: str = "placeholder"  # loading | image | placeholder
    image_url: Optional[str] = None
    progress_percent: float = 0.0
    counter: str = ""
    prev_disabled: bool = True
    trailing_control: str = "next"  # next | restart


def build_book_view(state: BookState) -> BookView:
    if not state.has_started:
        return BookView(
            mode="start",
            start_label=STARTING_LABEL if state.is_loading_story else START_LABEL,
            start_disabled=state.is_loading_story,
            error=state.error,
            auto_refresh=state.is_loading_story,
        )

    scene = state.current_scene
    total = len(state.scenes)

    if scene.image_status == ImageStatus.LOADING:
        image_area = "loading"
    elif scene.image_status == ImageStatus.READY:
        image_area = "image"
    else:
        image_area = "placeholder"

    return BookView(
        mode="reading",
        book_title=state.book_title or BOOK_TITLE,
        page_label=f"第 {state.current_index + 1} 页",
        scene_title=scene.title,
        narrative_text=scene.narrative_text,
        image_area=image_area,
        image_url=scene.image_url,
        progress_percent=(state.current_index + 1) / total * 100,
        counter=f"{state.current_index + 1} / {total}",
        prev_disabled=state.current_index == 0,
        trailing_control="restart" if state.is_last_page else "next",
        auto_refresh=any(s.is_loading_image for s in state.scenes),
    )


_PAGE_STYLE = """
body { margin: 0; min-height: 100vh; background: #f4f1ea; color: #5c4033; font-family: serif; }
.start { max-width: 28rem; margin: 0 auto; padding: 6rem 1.5rem; text-align: center; }
.start h1 { font-size: 3rem; letter-spacing: .1em; }
.error { background: #fee2e2; border: 1px solid #f87171; color: #b91c1c; padding: .75rem 1rem; margin-bottom: 1.5rem; }
button { font: inherit; font-weight: bold; padding: .5rem 1rem; border: 0; border-radius: .25rem; cursor: pointer; background: transparent; color: #5c4033; }
button[disabled] { opacity: .3; cursor: not-allowed; }
.cta { width: 100%; padding: 1rem; background: #8b5a2b; color: #fdfbf7; }
.book { max-width: 56rem; margin: 2rem auto; background: #fdfbf7; border: 8px solid #5c4033; border-radius: .5rem; }
.pages { display: flex; flex-wrap: wrap; }
.picture { flex: 2 1 20rem; background: #f0ece2; min-height: 24rem; display: flex; align-items: center; justify-content: center; position: relative; }
.picture img { max-width: 100%; max-height: 60vh; }
.page-label { position: absolute; top: 1rem; left: 1rem; background: #8b5a2b; color: #fff; padding: .25rem .75rem; }
.text { flex: 1 1 14rem; padding: 2rem; }
.muted { color: #9ca3af; font-style: italic; }
.controls { display: flex; align-items: center; justify-content: space-between; padding: 0 2rem; height: 4rem; background: #f4f1ea; border-top: 1px solid #dcd0c0; }
.progress { width: 33%; height: 4px; background: #dcd0c0; }
.progress div { height: 100%; background: #8b5a2b; }
"""


def _action(path: str, label: str, disabled: bool = False, css_class: str = "") -> str:
    disabled_attr = " disabled" if disabled else ""
    class_attr = f' class="{css_class}"' if css_class else ""
    return (
        f'<form method="post" action="{path}">'
        f'<button type="submit"{class_attr}{disabled_attr}>{escape(label)}</button>'
        "</form>"
    )


def _render_start(view: BookView) -> str:
    error = f'<div class="error" role="alert">{escape(view.error)}</div>' if view.error else ""
    return (
        '<main class="start">'
        f"<h1>{escape(view.book_title)}</h1>"
        "<p>Traditional Chinese Picture Book Generator</p>"
        f"{error}"
        f'{_action("/start", view.start_label, view.start_disabled, "cta")}'
        "<p><small>Includes AI-generated script &amp; illustrations.</small></p>"
        "</main>"
    )


def _render_picture(view: BookView) -> str:
    if view.image_area == "loading":
        return f"<p>{escape(IMAGE_LOADING_LABEL)}</p><p><small>{escape(IMAGE_LOADING_HINT)}</small></p>"
    if view.image_area == "image":
        return f'<img src="{escape(view.image_url or "")}" alt="{escape(view.scene_title)}">'
    return f'<p class="muted">{escape(IMAGE_PLACEHOLDER_LABEL)}</p>'


def _render_reading(view: BookView) -> str:
    if view.trailing_control == "restart":
        trailing = _action("/reset", RESTART_LABEL)
    else:
        trailing = _action("/next", NEXT_LABEL)

    return (
        '<main class="book">'
        '<div class="pages">'
        '<section class="picture">'
        f'<span class="page-label">{escape(view.page_label)}</span>'
        f"{_render_picture(view)}"
        "</section>"
        '<section class="text">'
        f"<h2>{escape(view.scene_title)}</h2>"
        f"<p>{escape(view.narrative_text)}</p>"
        f"<p><small>{escape(view.book_title)} &middot; {escape(view.counter)}</small></p>"
        "</section>"
        "</div>"
        '<nav class="controls">'
        f'{_action("/prev", PREV_LABEL, view.prev_disabled)}'
        f'<div class="progress"><div style="width: {view.progress_percent:.1f}%"></div></div>'
        f"{trailing}"
        "</nav>"
        "</main>"
    )


def render_book_page(view: BookView) -> str:
    refresh = f'<meta http-equiv="refresh" content="{REFRESH_SECONDS}">' if view.auto_refresh else ""
    body = _render_start(view) if view.mode == "start" else _render_reading(view)
    return (
        "<!DOCTYPE html>"
        '<html lang="zh">'
        "<head>"
        '<meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"{refresh}"
        f"<title>{escape(view.book_title)}</title>"
        f"<style>{_PAGE_STYLE}</style>"
        "</head>"
        f"<body>{body}</body>"
        "</html>"
    )

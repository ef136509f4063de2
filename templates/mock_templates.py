"""
오프라인 Mock 템플릿
API 키 없이 그림책 흐름을 확인하기 위한 고정 스토리보드와 자리표시 이미지
"""

import base64
from typing import Dict, List, Any

MOCK_BOOK_TITLE = "黛玉葬花"

MOCK_SCENES: List[Dict[str, str]] = [
    {
        "title": "春暮花飞",
        "narrative_text": "暮春三月，大观园里落红成阵。风一吹，桃花瓣便簌簌地飘下来，铺满了沁芳闸边的小径。",
        "visual_description": "A late spring garden with peach blossoms drifting in the wind over a stone path beside a small sluice gate, soft clouds above",
    },
    {
        "title": "荷锄携囊",
        "narrative_text": "林黛玉肩上担着花锄，锄上挂着纱囊，手里拿着花帚，独自一人缓缓走进园中。",
        "visual_description": "Lin Daiyu in pale traditional Hanfu carrying a flower hoe over her shoulder with a silk bag hanging from it, walking alone into a lush garden",
    },
    {
        "title": "拾瓣入囊",
        "narrative_text": "她俯身把地上的落花一片片拾起，轻轻装进纱囊，生怕它们被人踩进泥里。",
        "visual_description": "Close view of Daiyu kneeling to gather fallen petals into a silk bag, delicate hands, petals glowing in soft afternoon light",
    },
    {
        "title": "花冢低吟",
        "narrative_text": "山坡背后有一座小小的花冢。黛玉将花瓣埋进土里，一边低声吟出《葬花吟》。",
        "visual_description": "A small flower grave on a hillside behind rocks, Daiyu burying petals with her hoe, tears in her eyes, willow branches swaying",
    },
    {
        "title": "侬今葬花",
        "narrative_text": "“侬今葬花人笑痴，他年葬侬知是谁？”诗句随着风声飘散，连鸟儿也静了下来。",
        "visual_description": "Wide shot of the garden at dusk, Daiyu standing still with petals swirling around her, birds resting quietly on branches, melancholic atmosphere",
    },
    {
        "title": "宝玉闻声",
        "narrative_text": "宝玉在山坡那边听得痴了，手中的落花撒了一地。两人隔着花影相望，无言良久。",
        "visual_description": "Jia Baoyu on the other side of the hill, petals falling from his hands, the two young people looking at each other through blossoming branches",
    },
]

# 장면별 자리표시 배경색
_PLACEHOLDER_COLORS = ["#f4f1ea", "#eaddcf", "#dcd0c0", "#f0ece2", "#e5e0d8", "#fdfbf7"]


class MockStoryGenerator:
    """고정 스토리보드 생성기"""

    def generate_story(self) -> Dict[str, Any]:
        """스토리보드 (StoryScript 형태의 dict)"""
        return {
            "title": MOCK_BOOK_TITLE,
            "scenes": [dict(scene) for scene in MOCK_SCENES],
        }

    def generate_image(self, visual_description: str) -> str:
        """묘사 길이로 색을 고른 SVG 자리표시 이미지 (data URI)"""
        color = _PLACEHOLDER_COLORS[len(visual_description) % len(_PLACEHOLDER_COLORS)]
        svg = (
            '<svg xmlns="http://www.w3.org/2000/svg" width="512" height="512">'
            f'<rect width="512" height="512" fill="{color}"/>'
            '<circle cx="256" cy="256" r="96" fill="#8b5a2b" opacity="0.35"/>'
            "</svg>"
        )
        data = base64.b64encode(svg.encode("utf-8")).decode("ascii")
        return f"data:image/svg+xml;base64,{data}"

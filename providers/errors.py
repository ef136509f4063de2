"""
생성 API 오류 정의
"""


class GenerationError(Exception):
    """생성 모델 호출 실패"""


class StoryGenerationError(GenerationError):
    """스토리 요청 실패 또는 응답 파싱 실패"""


class ImageGenerationError(GenerationError):
    """이미지 요청 실패 또는 이미지 파트 없음"""

"""
환경 설정 관리 (Gemini / Mock)
"""

import os
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # AI Provider 설정
    AI_PROVIDER: str = os.getenv("AI_PROVIDER", "gemini")

    # Gemini 설정 (API_KEY 도 허용)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))
    GEMINI_STORY_MODEL: str = os.getenv("GEMINI_STORY_MODEL", "gemini-2.5-flash")
    GEMINI_IMAGE_MODEL: str = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
    GEMINI_API_BASE: str = os.getenv(
        "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
    )

    # 요청 타임아웃 (초)
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "60"))

    # 로깅 설정
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        extra = "ignore"  # 추가 환경 변수 무시

    def get_available_providers(self) -> dict:
        """사용 가능한 Provider 목록"""
        return {
            "gemini": bool(self.GEMINI_API_KEY),
            "mock": True
        }

    def get_current_provider_info(self) -> dict:
        """현재 Provider 정보"""
        if self.AI_PROVIDER == "mock":
            return {
                "provider": "mock",
                "model": "mock_generator",
                "status": "offline"
            }
        return {
            "provider": "gemini",
            "story_model": self.GEMINI_STORY_MODEL,
            "image_model": self.GEMINI_IMAGE_MODEL,
            "status": "configured" if self.GEMINI_API_KEY else "missing_key"
        }

    def validate_settings(self) -> list:
        """설정 검증 및 경고 반환"""
        warnings = []

        if self.AI_PROVIDER not in ["gemini", "mock"]:
            warnings.append(f"알 수 없는 AI_PROVIDER: {self.AI_PROVIDER}")

        if self.AI_PROVIDER != "mock" and not self.GEMINI_API_KEY:
            warnings.append("Gemini 선택되었으나 API 키가 없습니다. 요청 시 실패합니다.")

        if self.REQUEST_TIMEOUT <= 0:
            warnings.append(f"REQUEST_TIMEOUT 값이 잘못되었습니다: {self.REQUEST_TIMEOUT}")

        return warnings


def get_settings() -> Settings:
    return Settings()

from .title_service import OpenAITitleService

__all__ = ["OpenAITitleService"]

from .settings import Settings, LLMSettings, RedditSettings, ReputationSettings, get_settings

__all__ = ["Settings", "LLMSettings", "RedditSettings", "ReputationSettings", "get_settings"]

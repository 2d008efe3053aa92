"""Environment-based configuration for the form agent service."""

from pydantic_settings import BaseSettings

from normalize import confidence
from normalize.confidence import ConfidencePolicy


class Settings(BaseSettings):
    """Form agent settings, loaded from environment variables."""

    # Server
    PORT: int = 8787

    # DashScope (OpenAI-compatible) connection; empty key = LLM unavailable
    DASHSCOPE_ENDPOINT: str = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"
    DASHSCOPE_MODEL: str = "qwen-plus"
    DASHSCOPE_API_KEY: str = ""

    # LLM timeouts and retry
    LLM_TIMEOUT_ENABLED: bool = True
    LLM_TIMEOUT_SECONDS: int = 20
    LLM_CONNECT_TIMEOUT: int = 10
    LLM_RETRY_ATTEMPTS: int = 2  # first call + one retry
    LLM_RETRY_DELAY: float = 1.0
    LLM_RETRY_BACKOFF: float = 2.0

    # Candidate scoring policy
    MIN_CONFIDENCE: float = confidence.MIN_CONFIDENCE
    OPTION_CONF_BASE: float = confidence.OPTION_CONF_BASE
    OPTION_CONF_CAP: float = confidence.OPTION_CONF_CAP
    OPTION_CONF_STEP: float = confidence.OPTION_CONF_STEP

    model_config = {"env_prefix": "", "case_sensitive": True}

    def confidence_policy(self) -> ConfidencePolicy:
        return ConfidencePolicy(
            min_confidence=self.MIN_CONFIDENCE,
            option_conf_base=self.OPTION_CONF_BASE,
            option_conf_cap=self.OPTION_CONF_CAP,
            option_conf_step=self.OPTION_CONF_STEP,
        )


settings = Settings()

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

from hackhub.ai.llm_client import LLMClient
from hackhub.core.config import settings

InType = TypeVar("InType", bound=BaseModel | str)
OutType = TypeVar("OutType", bound=BaseModel | str)


class BaseAgent(ABC, Generic[InType, OutType]):
    """Common base for the single-call LLM helpers."""

    def __init__(self, model_name: str | None = None, llm: LLMClient | None = None):
        self.llm = llm or LLMClient(model_name=model_name or settings.MODEL_DEFAULT)

    @abstractmethod
    async def run(self, input_data: InType) -> OutType:
        """Produce the agent's output for ``input_data``."""

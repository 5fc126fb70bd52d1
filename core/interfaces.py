"""Abstract base classes for Gridmind components"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class TextGenerator(ABC):
    """Language-model text-completion capability"""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
    ) -> str:
        """Return the full response text"""
        pass

    @abstractmethod
    async def stream(
        self,
        prompt: str,
        on_chunk: Callable[[str], None],
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> str:
        """Call ``on_chunk`` with each incremental piece and return the full text"""
        pass


class Bridge(ABC, Generic[InputT, OutputT]):
    """Boundary that turns a request into structured model output"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable bridge name"""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """Execute the bridge"""
        pass

    @abstractmethod
    def validate_input(self, input_data: InputT) -> bool:
        """Validate input before processing"""
        pass


class LLMTask(ABC):
    """Abstract base class for LLM-powered tasks"""

    @property
    @abstractmethod
    def prompt_template(self) -> str:
        """Prompt template for this task"""
        pass

    @abstractmethod
    def build_prompt(self, context: dict) -> str:
        """Build prompt from context"""
        pass

    @abstractmethod
    def parse_response(self, response: str):
        """Parse LLM response into structured data"""
        pass

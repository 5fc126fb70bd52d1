"""Multi-provider LLM client with fallback and streaming support"""

import asyncio
import threading
from typing import Callable, Iterator, List, Optional

from core.exceptions import LLMError
from core.enums import LLMProvider
from core.interfaces import TextGenerator
from config import settings
from utils.logging import get_logger

try:
    import anthropic
    ANTHROPIC_AVAILABLE = True
except ImportError:
    ANTHROPIC_AVAILABLE = False

try:
    import openai
    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False

try:
    from google import genai
    GEMINI_AVAILABLE = True
except ImportError:
    GEMINI_AVAILABLE = False

logger = get_logger(__name__)

_CHUNK = "chunk"
_DONE = "done"
_ERROR = "error"


class LLMClient(TextGenerator):
    """Multi-provider LLM client with automatic fallback"""

    def __init__(self):
        self.providers = self._initialize_providers()
        self.provider_priority = settings.get_llm_provider_priority()
        self.max_retries = settings.LLM_MAX_RETRIES
        self.retry_delay = settings.LLM_RETRY_DELAY
        self.timeout = settings.LLM_TIMEOUT

    def _initialize_providers(self) -> dict:
        """Initialize available LLM providers"""
        providers = {}

        if ANTHROPIC_AVAILABLE and settings.ANTHROPIC_API_KEY:
            providers[LLMProvider.ANTHROPIC] = anthropic.Anthropic(
                api_key=settings.ANTHROPIC_API_KEY,
                timeout=settings.LLM_TIMEOUT
            )

        if OPENAI_AVAILABLE and settings.OPENAI_API_KEY:
            providers[LLMProvider.OPENAI] = openai.OpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=settings.LLM_TIMEOUT
            )

        if GEMINI_AVAILABLE and settings.GOOGLE_API_KEY:
            providers[LLMProvider.GEMINI] = genai.Client(api_key=settings.GOOGLE_API_KEY)

        if not providers:
            logger.warning("No LLM providers configured; AI features will use fallbacks")

        return providers

    def _get_available_providers(self) -> List[LLMProvider]:
        """Get list of available providers in priority order"""
        available = []
        for provider_name in self.provider_priority:
            try:
                provider = LLMProvider(provider_name)
                if provider in self.providers:
                    available.append(provider)
            except ValueError:
                continue
        return available

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
        temperature: float = 0.0
    ) -> str:
        """
        Send completion request with automatic fallback

        Args:
            prompt: User prompt
            system: System prompt
            max_tokens: Maximum tokens to generate
            model: Model id overriding the provider's configured model
            temperature: Sampling temperature

        Returns:
            Response text

        Raises:
            LLMError: If all providers fail
        """
        max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        available_providers = self._get_available_providers()

        if not available_providers:
            raise LLMError("No available LLM providers")

        last_error = None

        for provider in available_providers:
            for attempt in range(self.max_retries):
                try:
                    return await self._call_provider(
                        provider=provider,
                        prompt=prompt,
                        system=system,
                        max_tokens=max_tokens,
                        model=model,
                        temperature=temperature
                    )
                except Exception as e:
                    last_error = e
                    logger.warning(
                        "LLM call failed",
                        provider=provider.value,
                        attempt=attempt + 1,
                        error=str(e),
                    )
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(self.retry_delay * (2 ** attempt))

        raise LLMError(
            f"All LLM providers failed. Last error: {last_error}",
            provider=available_providers[-1].value,
            retries=self.max_retries
        )

    async def stream(
        self,
        prompt: str,
        on_chunk: Callable[[str], None],
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        model: Optional[str] = None,
        cancel: Optional[asyncio.Event] = None,
        temperature: float = 0.0
    ) -> str:
        """
        Stream a completion, calling ``on_chunk`` for each text increment

        A provider is only retried or replaced while nothing has been
        delivered yet; once text reached ``on_chunk`` a failure is final.
        Setting ``cancel`` stops delivery and returns the text so far.

        Returns:
            The concatenated response text

        Raises:
            LLMError: If all providers fail or the stream breaks midway
        """
        max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        available_providers = self._get_available_providers()

        if not available_providers:
            raise LLMError("No available LLM providers")

        last_error = None

        for provider in available_providers:
            for attempt in range(self.max_retries):
                delivered: List[str] = []

                def _deliver(text: str) -> None:
                    delivered.append(text)
                    on_chunk(text)

                try:
                    await self._stream_provider(
                        provider=provider,
                        prompt=prompt,
                        system=system,
                        max_tokens=max_tokens,
                        model=model,
                        temperature=temperature,
                        on_chunk=_deliver,
                        cancel=cancel
                    )
                    return "".join(delivered)
                except Exception as e:
                    if delivered:
                        raise LLMError(
                            f"Stream interrupted: {e}",
                            provider=provider.value,
                            retries=attempt
                        ) from e
                    last_error = e
                    logger.warning(
                        "LLM stream failed",
                        provider=provider.value,
                        attempt=attempt + 1,
                        error=str(e),
                    )
                    if attempt < self.max_retries - 1:
                        await asyncio.sleep(self.retry_delay * (2 ** attempt))

        raise LLMError(
            f"All LLM providers failed. Last error: {last_error}",
            provider=available_providers[-1].value,
            retries=self.max_retries
        )

    async def _call_provider(
        self,
        provider: LLMProvider,
        prompt: str,
        system: Optional[str],
        max_tokens: int,
        model: Optional[str],
        temperature: float
    ) -> str:
        """Call specific LLM provider"""
        system_prompt = system or self._default_system_prompt()

        if provider == LLMProvider.ANTHROPIC:
            call = lambda: self._call_anthropic(prompt, system_prompt, max_tokens, model, temperature)
        elif provider == LLMProvider.OPENAI:
            call = lambda: self._call_openai(prompt, system_prompt, max_tokens, model, temperature)
        elif provider == LLMProvider.GEMINI:
            call = lambda: self._call_gemini(prompt, system_prompt, max_tokens, model, temperature)
        else:
            raise LLMError(f"Unknown provider: {provider}")

        # Run in executor to avoid blocking
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, call)

    def _call_anthropic(self, prompt, system_prompt, max_tokens, model, temperature) -> str:
        """Call Anthropic Claude API"""
        client = self.providers[LLMProvider.ANTHROPIC]
        response = client.messages.create(
            model=model or settings.ANTHROPIC_MODEL,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature
        )
        return response.content[0].text

    def _call_openai(self, prompt, system_prompt, max_tokens, model, temperature) -> str:
        """Call OpenAI API"""
        client = self.providers[LLMProvider.OPENAI]
        response = client.chat.completions.create(
            model=model or settings.OPENAI_MODEL,
            max_tokens=max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt}
            ],
            temperature=temperature
        )
        return response.choices[0].message.content

    def _call_gemini(self, prompt, system_prompt, max_tokens, model, temperature) -> str:
        """Call Google Gemini API"""
        client = self.providers[LLMProvider.GEMINI]
        response = client.models.generate_content(
            model=model or settings.GEMINI_MODEL_ID,
            contents=f"{system_prompt}\n\n{prompt}",
            config={
                "max_output_tokens": max_tokens,
                "temperature": temperature
            }
        )
        return response.text

    def _iter_chunks(
        self,
        provider: LLMProvider,
        prompt: str,
        system_prompt: str,
        max_tokens: int,
        model: Optional[str],
        temperature: float
    ) -> Iterator[str]:
        """Blocking iterator over a provider's streamed text"""
        if provider == LLMProvider.ANTHROPIC:
            client = self.providers[LLMProvider.ANTHROPIC]
            with client.messages.stream(
                model=model or settings.ANTHROPIC_MODEL,
                max_tokens=max_tokens,
                system=system_prompt,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature
            ) as stream:
                yield from stream.text_stream
        elif provider == LLMProvider.OPENAI:
            client = self.providers[LLMProvider.OPENAI]
            response = client.chat.completions.create(
                model=model or settings.OPENAI_MODEL,
                max_tokens=max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt}
                ],
                temperature=temperature,
                stream=True
            )
            for chunk in response:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        elif provider == LLMProvider.GEMINI:
            client = self.providers[LLMProvider.GEMINI]
            for chunk in client.models.generate_content_stream(
                model=model or settings.GEMINI_MODEL_ID,
                contents=f"{system_prompt}\n\n{prompt}",
                config={
                    "max_output_tokens": max_tokens,
                    "temperature": temperature
                }
            ):
                if chunk.text:
                    yield chunk.text
        else:
            raise LLMError(f"Unknown provider: {provider}")

    async def _stream_provider(
        self,
        provider: LLMProvider,
        prompt: str,
        system: Optional[str],
        max_tokens: int,
        model: Optional[str],
        temperature: float,
        on_chunk: Callable[[str], None],
        cancel: Optional[asyncio.Event]
    ) -> None:
        """Pump a blocking provider stream from a worker thread into the event loop"""
        loop = asyncio.get_event_loop()
        queue: asyncio.Queue = asyncio.Queue()
        stop = threading.Event()
        system_prompt = system or self._default_system_prompt()

        def _emit(kind: str, payload) -> None:
            if not stop.is_set():
                loop.call_soon_threadsafe(queue.put_nowait, (kind, payload))

        def _produce() -> None:
            try:
                for text in self._iter_chunks(
                    provider, prompt, system_prompt, max_tokens, model, temperature
                ):
                    if stop.is_set():
                        return
                    _emit(_CHUNK, text)
            except Exception as e:
                _emit(_ERROR, e)
            else:
                _emit(_DONE, None)

        loop.run_in_executor(None, _produce)

        try:
            while True:
                kind, payload = await self._next_event(queue, cancel)
                if kind == _CHUNK:
                    on_chunk(payload)
                elif kind == _ERROR:
                    raise payload
                else:
                    return
        finally:
            stop.set()

    async def _next_event(self, queue: asyncio.Queue, cancel: Optional[asyncio.Event]):
        if cancel is None:
            return await queue.get()
        if cancel.is_set():
            return _DONE, None

        getter = asyncio.ensure_future(queue.get())
        waiter = asyncio.ensure_future(cancel.wait())
        done, _ = await asyncio.wait({getter, waiter}, return_when=asyncio.FIRST_COMPLETED)
        if getter in done:
            waiter.cancel()
            return getter.result()
        getter.cancel()
        logger.info("LLM stream cancelled")
        return _DONE, None

    def _default_system_prompt(self) -> str:
        """Default system prompt for spreadsheet tasks"""
        return (
            "You are an expert spreadsheet assistant. "
            "Respond only with valid JSON when requested. "
            "No explanations or markdown unless specifically asked."
        )

import asyncio
from typing import Callable, List, Optional

import pytest

from core.exceptions import LLMError
from core.interfaces import TextGenerator
from editor import SpreadsheetEditor
from auth import AuthSession, User
from ui.notifications import BufferedNotifier


class FakeLLM(TextGenerator):
    """Scripted text generator.

    ``responses`` are returned by successive ``complete`` calls and
    ``chunks`` are streamed by ``stream``. An exception instance in either
    place is raised instead.
    """

    def __init__(self, responses=None, chunks=None):
        self.responses = list(responses or [])
        self.chunks = chunks
        self.prompts: List[str] = []
        self.max_tokens: List[Optional[int]] = []

    async def complete(self, prompt, system=None, max_tokens=None, model=None) -> str:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if not self.responses:
            raise LLMError("No scripted response")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def stream(
        self,
        prompt,
        on_chunk: Callable[[str], None],
        system=None,
        max_tokens=None,
        model=None,
        cancel: Optional[asyncio.Event] = None,
    ) -> str:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if isinstance(self.chunks, Exception):
            raise self.chunks
        delivered = []
        for chunk in self.chunks or []:
            if cancel is not None and cancel.is_set():
                break
            delivered.append(chunk)
            on_chunk(chunk)
            await asyncio.sleep(0)
        return "".join(delivered)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def user():
    return User(id="user-1", email="ada@example.com", full_name="Ada Lovelace")


@pytest.fixture
def make_editor(user):
    def _make(llm=None, signed_in=True):
        auth = AuthSession()
        editor = SpreadsheetEditor(
            llm=llm or FakeLLM(),
            notifier=BufferedNotifier(),
            auth=auth,
        )
        if signed_in:
            auth.sign_in(user)
        return editor
    return _make

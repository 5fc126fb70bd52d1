import pytest

from assistant.insights import InsightBridge, fallback_analysis
from core.exceptions import LLMError
from grid.store import CellStore

from conftest import FakeLLM

ANALYSIS = """{
    "insights": ["Phones lead both quarters"],
    "suggestions": ["Add a total row"],
    "chartRecommendations": [
        {"type": "line", "title": "Trend", "description": "Q1 vs Q2", "dataRange": "B1:C4"}
    ]
}"""


@pytest.fixture
def store():
    store = CellStore()
    store.set_cell_value(0, 0, "Product")
    store.set_cell_value(0, 1, "Sales Q1")
    store.set_cell_value(1, 0, "Phones")
    store.set_cell_value(1, 1, "25000")
    store.set_cell_value(2, 0, "")
    return store


@pytest.mark.asyncio
async def test_analysis_from_non_empty_values(store):
    llm = FakeLLM(responses=[ANALYSIS])
    bridge = InsightBridge(llm)

    analysis = await bridge.execute(store.cells)

    assert analysis.insights == ["Phones lead both quarters"]
    assert analysis.chart_recommendations[0].data_range == "B1:C4"
    assert bridge.analysis == analysis
    assert '["Product", "Sales Q1", "Phones", "25000"]' in llm.prompts[0]
    assert llm.max_tokens == [500]


@pytest.mark.asyncio
async def test_unchanged_data_is_not_reanalyzed(store):
    llm = FakeLLM(responses=[ANALYSIS])
    bridge = InsightBridge(llm)

    first = await bridge.execute(store.cells)
    second = await bridge.execute(store.cells)

    assert first == second
    assert len(llm.prompts) == 1


@pytest.mark.asyncio
async def test_changed_data_is_reanalyzed(store):
    llm = FakeLLM(responses=[ANALYSIS, ANALYSIS])
    bridge = InsightBridge(llm)

    await bridge.execute(store.cells)
    store.set_cell_value(1, 1, "26000")
    await bridge.execute(store.cells)

    assert len(llm.prompts) == 2


@pytest.mark.asyncio
async def test_empty_sheet_is_not_analyzed():
    llm = FakeLLM()
    bridge = InsightBridge(llm)

    assert await bridge.execute(CellStore().cells) is None
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_sample_is_capped():
    store = CellStore()
    for row in range(30):
        store.set_cell_value(row, 0, str(row))
    llm = FakeLLM(responses=[ANALYSIS])

    await InsightBridge(llm).execute(store.cells)

    assert '"19"' in llm.prompts[0]
    assert '"20"' not in llm.prompts[0]


@pytest.mark.asyncio
async def test_unparseable_reply_uses_fallback_and_retries_later(store):
    llm = FakeLLM(responses=["Your data looks interesting!", ANALYSIS])
    bridge = InsightBridge(llm)

    analysis = await bridge.execute(store.cells)
    assert analysis == fallback_analysis()

    analysis = await bridge.execute(store.cells)
    assert analysis.insights == ["Phones lead both quarters"]
    assert len(llm.prompts) == 2


@pytest.mark.asyncio
async def test_service_failure_keeps_previous_analysis(store):
    llm = FakeLLM(responses=[ANALYSIS, LLMError("down")])
    bridge = InsightBridge(llm)

    previous = await bridge.execute(store.cells)
    store.set_cell_value(3, 0, "Tablets")
    current = await bridge.execute(store.cells)

    assert current == previous
    assert bridge.is_busy is False


@pytest.mark.asyncio
async def test_service_failure_without_previous_analysis(store):
    bridge = InsightBridge(FakeLLM(responses=[LLMError("down")]))
    assert await bridge.execute(store.cells) is None

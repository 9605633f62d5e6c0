"""Tests for the text generator abstraction, prompt construction and the Ollama backend."""

import json
import os

import httpx
import pytest

from craftgraph.config import GeneratorConfig
from craftgraph.errors import ExternalCallFailed
from craftgraph.generation import build_text_generator
from craftgraph.generation.llm_client import MockTextGenerator, build_combination_prompt
from craftgraph.generation.local_llm import OllamaTextGenerator


class TestMockTextGenerator:
    @pytest.mark.asyncio
    async def test_default_response(self):
        generator = MockTextGenerator()
        completion = await generator.generate("FIRE", "WATER")
        assert completion.text == "RESPONSE:Fire Water ICON:✨"
        assert completion.created_at is None

    @pytest.mark.asyncio
    async def test_canned_responses_cycle(self):
        generator = MockTextGenerator(responses=["RESPONSE:A ICON:1", "RESPONSE:B ICON:2"])
        texts = [(await generator.generate("X", "Y")).text for _ in range(3)]
        assert texts == ["RESPONSE:A ICON:1", "RESPONSE:B ICON:2", "RESPONSE:A ICON:1"]

    @pytest.mark.asyncio
    async def test_call_count_and_calls(self):
        generator = MockTextGenerator()
        assert generator.call_count == 0
        await generator.generate("FIRE", "WATER")
        await generator.generate("STEAM", "WIND")
        assert generator.call_count == 2
        assert generator.calls == [("FIRE", "WATER"), ("STEAM", "WIND")]

    @pytest.mark.asyncio
    async def test_created_at_passthrough(self):
        generator = MockTextGenerator(created_at="2024-01-01T00:00:00Z")
        assert (await generator.generate("A", "B")).created_at == "2024-01-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_close_is_noop(self):
        await MockTextGenerator().close()


class TestBuildCombinationPrompt:
    def test_includes_inputs(self):
        prompt = build_combination_prompt("FIRE", "WATER")
        assert "INPUT1:FIRE INPUT2:WATER" in prompt

    def test_chat_template_order(self):
        prompt = build_combination_prompt("FIRE", "WATER")
        assert prompt.index("<|im_start|>system") < prompt.index("<|im_start|>user")
        assert prompt.endswith("<|im_start|>assistant\n")

    def test_describes_output_format(self):
        assert "RESPONSE:<word_or_short_phrase> ICON:<appropriate_emoji>" in build_combination_prompt("A", "B")

    def test_custom_system_prompt(self):
        prompt = build_combination_prompt("A", "B", system_prompt="Be brief.")
        assert "Be brief." in prompt
        assert "word crafting game" not in prompt


def _ollama(handler) -> OllamaTextGenerator:
    client = httpx.AsyncClient(base_url="http://ollama.test", transport=httpx.MockTransport(handler))
    return OllamaTextGenerator(base_url="http://ollama.test", model="llama3.2:3b", client=client)


class TestOllamaTextGenerator:
    @pytest.mark.asyncio
    async def test_generate_posts_prompt(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"response": "RESPONSE:Steam ICON:💨", "created_at": "2024-05-01T12:00:00Z", "done": True},
            )

        generator = _ollama(handler)
        completion = await generator.generate("FIRE", "WATER")
        await generator.close()

        assert seen["path"] == "/api/generate"
        assert seen["body"]["model"] == "llama3.2:3b"
        assert seen["body"]["stream"] is False
        assert "INPUT1:FIRE INPUT2:WATER" in seen["body"]["prompt"]
        assert completion.text == "RESPONSE:Steam ICON:💨"
        assert completion.created_at == "2024-05-01T12:00:00Z"

    @pytest.mark.asyncio
    async def test_missing_response_field_is_empty_text(self):
        generator = _ollama(lambda request: httpx.Response(200, json={"done": True}))
        completion = await generator.generate("FIRE", "WATER")
        assert completion.text == ""
        assert completion.created_at is None

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        generator = _ollama(lambda request: httpx.Response(500, text="model crashed"))
        with pytest.raises(ExternalCallFailed, match="Ollama request failed"):
            await generator.generate("FIRE", "WATER")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalCallFailed):
            await _ollama(handler).generate("FIRE", "WATER")

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        generator = _ollama(lambda request: httpx.Response(200, text="<html>not ollama</html>"))
        with pytest.raises(ExternalCallFailed, match="non-JSON"):
            await generator.generate("FIRE", "WATER")

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        generator = _ollama(lambda request: httpx.Response(200, json=["RESPONSE:Steam ICON:💨"]))
        with pytest.raises(ExternalCallFailed, match="Unexpected"):
            await generator.generate("FIRE", "WATER")

    @pytest.mark.asyncio
    async def test_non_string_response_field(self):
        generator = _ollama(lambda request: httpx.Response(200, json={"response": 42, "done": True}))
        with pytest.raises(ExternalCallFailed, match="expected str"):
            await generator.generate("FIRE", "WATER")

    @pytest.mark.asyncio
    async def test_is_available_with_model(self):
        generator = _ollama(
            lambda request: httpx.Response(200, json={"models": [{"name": "llama3.2:3b"}, {"name": "qwen3:1.7b"}]})
        )
        assert await generator.is_available() is True

    @pytest.mark.asyncio
    async def test_is_available_without_model(self):
        generator = _ollama(lambda request: httpx.Response(200, json={"models": [{"name": "qwen3:1.7b"}]}))
        assert await generator.is_available() is False

    @pytest.mark.asyncio
    async def test_is_available_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert await _ollama(handler).is_available() is False


class TestBuildTextGenerator:
    def test_mock(self):
        assert isinstance(build_text_generator(GeneratorConfig(backend="mock")), MockTextGenerator)

    @pytest.mark.asyncio
    async def test_ollama(self):
        generator = build_text_generator(GeneratorConfig(backend="ollama", base_url="http://ollama.test"))
        assert isinstance(generator, OllamaTextGenerator)
        await generator.close()

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown text generator backend"):
            build_text_generator(GeneratorConfig(backend="gpt"))


@pytest.mark.ollama
class TestLiveOllama:
    @pytest.mark.asyncio
    async def test_generate_against_local_server(self):
        generator = OllamaTextGenerator(
            base_url=os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434"),
            model=os.environ.get("CRAFTGRAPH_MODEL", "llama3.2:3b"),
        )
        try:
            if not await generator.is_available():
                pytest.skip("model not pulled")
            completion = await generator.generate("FIRE", "WATER")
            assert isinstance(completion.text, str)
        finally:
            await generator.close()

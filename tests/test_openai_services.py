"""Tests for the OpenAI-backed generator and synthesizer, with a mocked client."""
import asyncio
import base64
import json
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from comicgen.core.errors import GenerationError, SynthesisError
from comicgen.services.imaging import ImageRefResolver, OpenAIImageSynthesizer
from comicgen.services.llm import OpenAIContentGenerator, parse_generated_content
from comicgen.services.prompts import render_image_prompt, render_summary_prompt


def _chat_client(content):
    client = MagicMock()
    message = SimpleNamespace(content=content)
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)]))
    return client


def _image_client(url=None, b64_json=None):
    client = MagicMock()
    client.images.generate = AsyncMock(return_value=SimpleNamespace(data=[SimpleNamespace(url=url, b64_json=b64_json)]))
    return client


class TestPrompts:
    def test_summary_prompt_fills_part_count_and_format(self):
        prompt = render_summary_prompt(4)
        assert "4 parts" in prompt
        assert '"title"' in prompt and '"parts"' in prompt

    def test_summary_override_still_gets_format(self):
        prompt = render_summary_prompt(2, "Make it ${numParts} silly scenes")
        assert prompt.startswith("Make it 2 silly scenes")
        assert '"parts"' in prompt

    def test_image_prompt_template(self):
        assert render_image_prompt("a cat") == "Create a single comic panel style image: a cat"
        assert render_image_prompt("a cat", "Pixel art of ${prompt}!") == "Pixel art of a cat!"
        assert render_image_prompt("a cat", "Pixel art:") == "Pixel art: a cat"


class TestContentGenerator:
    def test_parses_title_summaries_and_prompts(self):
        reply = json.dumps({"title": "Bridge", "parts": [
            {"summary": "Council meets", "prompt": "A council chamber"},
            {"summary": "Vote passes", "prompt": "Cheering crowd"},
        ]})
        client = _chat_client(reply)
        generator = OpenAIContentGenerator(client=client, model="test-model")

        content = asyncio.run(generator.summarize("article", 2, "custom ${numParts}"))

        assert content.title == "Bridge"
        assert content.summaries == ["Council meets", "Vote passes"]
        assert content.prompts == ["A council chamber", "Cheering crowd"]
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["content"].startswith("custom 2")
        assert kwargs["messages"][1] == {"role": "user", "content": "article"}

    def test_empty_reply_is_generation_error(self):
        generator = OpenAIContentGenerator(client=_chat_client(None))
        with pytest.raises(GenerationError):
            asyncio.run(generator.summarize("article", 1))

    @pytest.mark.parametrize("reply", ["not json", "[]", '{"parts": "nope"}', '{"parts": ["x"]}'])
    def test_malformed_replies(self, reply):
        with pytest.raises(GenerationError):
            parse_generated_content(reply)

    def test_missing_title_gets_placeholder(self):
        content = parse_generated_content('{"parts": [{"summary": "s", "prompt": "p"}]}')
        assert content.title == "Untitled Comic"


class TestImageSynthesizer:
    def test_returns_url(self):
        client = _image_client(url="https://img.example.com/1.png")
        synth = OpenAIImageSynthesizer(client=client, model="img-model", size="512x512", quality="hd")

        ref = asyncio.run(synth.synthesize("a bridge", "Ink: ${prompt}"))

        assert ref == "https://img.example.com/1.png"
        kwargs = client.images.generate.call_args.kwargs
        assert kwargs["prompt"] == "Ink: a bridge"
        assert kwargs["size"] == "512x512"
        assert kwargs["n"] == 1

    def test_base64_payload_becomes_data_uri(self):
        payload = base64.b64encode(b"\x89PNG fake").decode()
        synth = OpenAIImageSynthesizer(client=_image_client(b64_json=payload))
        assert asyncio.run(synth.synthesize("a bridge")) == "data:image/png;base64," + payload

    def test_missing_image_is_synthesis_error(self):
        synth = OpenAIImageSynthesizer(client=_image_client())
        with pytest.raises(SynthesisError):
            asyncio.run(synth.synthesize("a bridge"))


class TestImageRefResolver:
    def test_data_uri(self):
        resolver = ImageRefResolver(scraper=MagicMock())
        good = "data:image/png;base64," + base64.b64encode(b"png").decode()
        assert asyncio.run(resolver(good)) is True
        assert asyncio.run(resolver("data:image/png;base64,@@not-base64@@")) is False

    def test_http_ref_is_probed(self):
        scraper = MagicMock()
        scraper.is_reachable = AsyncMock(return_value=True)
        resolver = ImageRefResolver(scraper=scraper)
        assert asyncio.run(resolver("https://img.example.com/1.png")) is True
        scraper.is_reachable.assert_awaited_once_with("https://img.example.com/1.png")

    def test_unknown_scheme(self):
        assert asyncio.run(ImageRefResolver(scraper=MagicMock())("file:///tmp/x.png")) is False

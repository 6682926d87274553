"""Tests for the completion-backed fallback generator."""
import json
from unittest.mock import Mock

import pytest

from nl2gherkin.completion import CompletionClient, CompletionRequest
from nl2gherkin.errors import CompletionError
from nl2gherkin.fallback import FallbackGenerator
from nl2gherkin.models import StepKeyword
from nl2gherkin.prompts import SYSTEM_PROMPT

from conftest import FakeCompletionClient


DEFAULT_STEPS = [
    (StepKeyword.GIVEN, "I am on the application homepage"),
    (StepKeyword.WHEN, "I perform the required action"),
    (StepKeyword.THEN, "I should see expected results"),
]

REPLY = {
    "feature": "Newsletter",
    "tags": ["@newsletter", "newsletter", "@smoke"],
    "scenario": "Subscribe to the newsletter",
    "steps": [
        {"type": "Given", "text": "I am on page \"/home\"", "parameters": {}},
        {"type": "When", "text": "I subscribe with \"a@b.c\"", "parameters": {"email": "a@b.c"}},
        {"type": "When", "text": "I confirm", "parameters": {}},
        {"type": "Given", "text": "I should see \"Subscribed\"", "parameters": {}},
    ],
}


def make_generator(config, mapper, reply="", error=None):
    client = FakeCompletionClient(reply=reply, error=error)
    return FallbackGenerator(client, config, mapper), client


def test_unparseable_reply_gives_default_feature(config, mapper, capsys):
    generator, _ = make_generator(config, mapper, reply="not json at all")

    result = generator.run("stay a while")

    assert result.fallback_used
    assert [(s.keyword, s.text) for s in result.feature.scenarios[0].steps] == DEFAULT_STEPS
    assert result.feature.title == "stay a while"
    assert "Warning" in capsys.readouterr().out


def test_fenced_json_reply(config, mapper):
    reply = "Here you go:\n```json\n" + json.dumps(REPLY) + "\n```\nEnjoy"
    generator, client = make_generator(config, mapper, reply=reply)

    result = generator.run("subscribe to the newsletter", ["I am on page {string}"])
    feature = result.feature

    assert not result.fallback_used
    assert feature.title == "Newsletter"
    assert feature.tags == ["@newsletter", "@smoke"]
    assert feature.scenarios[0].title == "Subscribe to the newsletter"
    assert [s.keyword for s in feature.scenarios[0].steps] == [
        StepKeyword.GIVEN, StepKeyword.WHEN, StepKeyword.AND, StepKeyword.AND,
    ]
    assert feature.scenarios[0].steps[1].data == {"email": "a@b.c"}
    assert feature.scenarios[0].steps[0].data is None

    request = client.requests[0]
    assert request.system_prompt == SYSTEM_PROMPT
    assert "subscribe to the newsletter" in request.user_prompt
    assert "I am on page {string}" in request.user_prompt
    assert request.temperature == 0.2
    assert request.max_tokens == config.completion.max_tokens


def test_bare_json_reply(config, mapper):
    generator, _ = make_generator(config, mapper, reply=json.dumps(REPLY))

    assert generator.run("x").feature.title == "Newsletter"


@pytest.mark.parametrize("payload", [
    [1, 2, 3],
    {"feature": "F", "scenario": "S"},
    {"feature": "F", "scenario": "S", "steps": []},
    {"feature": "", "scenario": "S", "steps": [{"type": "Given", "text": "x"}]},
    {"feature": "F", "scenario": "S", "steps": [{"type": "Given"}]},
    {"feature": "F", "scenario": "S", "steps": [{"text": "x"}], "tags": "oops"},
])
def test_invalid_payloads_give_default_feature(config, mapper, payload):
    generator, _ = make_generator(config, mapper, reply=json.dumps(payload))

    result = generator.run("do the thing")

    assert result.fallback_used
    assert [(s.keyword, s.text) for s in result.feature.scenarios[0].steps] == DEFAULT_STEPS


def test_missing_step_type_is_inferred(config, mapper):
    payload = {
        "feature": "F",
        "scenario": "S",
        "steps": [
            {"text": "I open the app"},
            {"text": "When I click go"},
            {"text": "I should see it"},
        ],
    }
    generator, _ = make_generator(config, mapper, reply=json.dumps(payload))

    steps = generator.run("x").feature.scenarios[0].steps

    assert [(s.keyword, s.text) for s in steps] == [
        (StepKeyword.GIVEN, "I open the app"),
        (StepKeyword.WHEN, "I click go"),
        (StepKeyword.THEN, "I should see it"),
    ]


def test_completion_error_propagates(config, mapper):
    generator, _ = make_generator(config, mapper, error=CompletionError("offline"))

    with pytest.raises(CompletionError):
        generator.run("anything")


def test_disabled_synthesis_skips_the_call(config, mapper):
    config.fallbacks.enable_llm_synthesis = False
    generator, client = make_generator(config, mapper, reply=json.dumps(REPLY))

    result = generator.run("anything")

    assert result.fallback_used
    assert client.requests == []


def test_client_requires_api_key(config, monkeypatch):
    monkeypatch.delenv(config.completion.api_key_env, raising=False)
    client = CompletionClient(config.completion)

    with pytest.raises(CompletionError):
        client.complete(CompletionRequest(system_prompt="s", user_prompt="u"))


def test_client_sends_chat_completion(config, monkeypatch):
    monkeypatch.setenv(config.completion.api_key_env, "test-key")
    client = CompletionClient(config.completion)
    fake_openai = Mock()
    fake_openai.chat.completions.create.return_value.choices = [Mock(message=Mock(content="reply"))]
    client._openai = fake_openai

    reply = client.complete(CompletionRequest(system_prompt="sys", user_prompt="user", max_tokens=10))

    assert reply == "reply"
    kwargs = fake_openai.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == config.completion.model
    assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
    assert kwargs["max_tokens"] == 10

"""Tests for feature assembly and Gherkin parsing."""
import json

import pytest

from nl2gherkin.emitter import to_gherkin
from nl2gherkin.errors import EmptyDescriptionError
from nl2gherkin.fallback import FallbackGenerator
from nl2gherkin.feature_assembler import create_title, determine_tags, narrative
from nl2gherkin.models import StepKeyword

from conftest import FakeCompletionClient


REGISTRATION_STEPS = [
    (StepKeyword.GIVEN, 'I am on page "/espace-client/visitor.php?action=register"'),
    (StepKeyword.AND, 'I set fullscreen'),
    (StepKeyword.WHEN, 'I register as new user with ":default"'),
    (StepKeyword.THEN, 'I should see "Un email de confirmation vient de vous être envoyé"'),
]


def test_registration_uses_curated_template(assembler, fake_client):
    feature = assembler.assemble("I want to register a new account")

    assert '@registration' in feature.tags
    assert feature.title == "User Registration"
    assert [(s.keyword, s.text) for s in feature.scenarios[0].steps] == REGISTRATION_STEPS
    assert fake_client.requests == []


@pytest.mark.parametrize("description", ["Sign up with a new email", "create account for Bob"])
def test_other_registration_phrasings(assembler, description):
    assert assembler.translate(description).source == "template"


@pytest.mark.parametrize("description", ["", "   ", "\n"])
def test_empty_description_is_rejected(assembler, description):
    with pytest.raises(EmptyDescriptionError):
        assembler.assemble(description)


def test_mapped_feature(assembler):
    result = assembler.translate('Go to "/login". Enter "bob" in the username field and click "Sign in". '
                                 'Verify "Welcome bob" is shown')
    feature = result.feature

    assert result.source == "mapped"
    assert feature.title == 'Go to "/login"'
    assert feature.tags == ['@automated', '@login']
    assert len(feature.scenarios) == 1
    assert feature.scenarios[0].title == feature.title
    assert [(s.keyword, s.text) for s in feature.scenarios[0].steps] == [
        (StepKeyword.GIVEN, 'I am on page "/login"'),
        (StepKeyword.WHEN, 'I enter "bob" in the username field'),
        (StepKeyword.AND, 'I click on "Sign in"'),
        (StepKeyword.THEN, 'I should see "Welcome bob"'),
    ]


def test_description_without_keywords_still_maps_as_custom(assembler, fake_client):
    result = assembler.translate("the cart keeps its items")

    assert result.source == "mapped"
    assert result.feature.scenarios[0].steps[0].keyword is StepKeyword.GIVEN
    assert fake_client.requests == []


def test_no_intents_goes_to_fallback(assembler, fake_client):
    fake_client.reply = "not json at all"

    result = assembler.translate("...")

    assert result.source == "default"
    assert len(fake_client.requests) == 1


def test_title_boundary():
    fifty = "a" * 50
    fifty_one = "b" * 51

    assert create_title(fifty + ". More text") == fifty
    assert create_title(fifty_one) == "b" * 47 + "..."
    assert len(create_title(fifty_one)) == 50


def test_title_uses_first_sentence_only():
    assert create_title("Search for shoes! Then buy them") == "Search for shoes"


def test_tags():
    assert determine_tags("Login then search the catalog") == ['@automated', '@login', '@search']
    assert determine_tags("sign in and sign up") == ['@automated', '@login', '@registration']
    assert determine_tags("look around") == ['@automated']


def test_narrative():
    assert narrative("Buy  a\nHat") == "As a user\nI want to buy a hat\nSo that I can complete my task"


def test_parse_gherkin_tags_and_scenarios(assembler):
    text = """# comment line
@smoke @checkout
Feature: Checkout
  As a shopper
  I want to pay
  So that I get my goods

  @fast
  Scenario: Pay by card
    Given I am on page "/cart"
    When I click on "Pay"
    Then I should see "Thanks"

  Scenario: Empty scenario

  Scenario: Pay later
    Given I am on page "/cart"
    But I should see "Later"
"""
    feature = assembler.parse_gherkin(text)

    assert feature.title == "Checkout"
    assert feature.tags == ['@smoke', '@checkout']
    assert feature.description == "As a shopper\nI want to pay\nSo that I get my goods"
    assert [s.title for s in feature.scenarios] == ["Pay by card", "Pay later"]
    assert feature.scenarios[0].tags == ['@fast']
    assert feature.scenarios[1].tags == []
    assert feature.scenarios[1].steps[1].keyword is StepKeyword.BUT


def test_parse_gherkin_without_scenarios_uses_registration_default(assembler):
    feature = assembler.parse_gherkin("Feature: Nothing here\n", description="do nothing")

    assert len(feature.scenarios) == 1
    assert [(s.keyword, s.text) for s in feature.scenarios[0].steps] == REGISTRATION_STEPS
    assert feature.description == narrative("do nothing")


@pytest.mark.parametrize("description", [
    "I want to register a new account",
    'Open "/shop" and click "Buy". I should see "Done"',
    "Wait for the page to load then take a screenshot",
    "   Search   for\n\"red shoes\" and verify the results are sorted",
])
def test_gherkin_round_trip(assembler, description):
    feature = assembler.assemble(description)
    rendered = to_gherkin(feature)

    assert to_gherkin(assembler.parse_gherkin(rendered)) == rendered


def test_completion_feature_round_trip(assembler, config, mapper):
    reply = json.dumps({
        "feature": "Session keep-alive",
        "tags": ["smoke test", "@ui", "@smoke"],
        "scenario": "Session survives idle time",
        "steps": [
            {"type": "Given", "text": "Given I am on page \"/account\"", "parameters": {}},
            {"type": "When", "text": "I stay idle for 5 minutes", "parameters": {"minutes": 5}},
            {"type": "Then", "text": "I should see \"Welcome back\"", "parameters": {}},
        ],
    })
    generator = FallbackGenerator(FakeCompletionClient(reply=reply), config, mapper)

    feature = generator.generate("keep the session alive")
    rendered = to_gherkin(feature)

    assert feature.tags == ["@smoke", "@test", "@ui"]
    assert to_gherkin(assembler.parse_gherkin(rendered)) == rendered


@pytest.mark.parametrize("description", [
    "click",
    "the end",
    "Go to /home, wait, check the box and see \"OK\"",
])
def test_assembled_features_always_have_steps(assembler, description):
    feature = assembler.assemble(description)

    assert feature.scenarios
    assert all(scenario.steps for scenario in feature.scenarios)

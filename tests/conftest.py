"""Shared fixtures for the translator tests."""
from pathlib import Path

import pytest

from nl2gherkin.catalog import StepCatalog
from nl2gherkin.config import config_from_dict
from nl2gherkin.feature_assembler import FeatureAssembler
from nl2gherkin.fallback import FallbackGenerator
from nl2gherkin.intent_extractor import IntentExtractor
from nl2gherkin.step_mapper import StepMapper


STEP_SOURCE = '''
from behave import given, when, then


@given('I am on page "{path}"')
def step_on_page(context, path):
    pass


@given('I set fullscreen')
def step_set_fullscreen(context):
    pass


@when('I click on "{text}"')
def step_click_on(context, text):
    pass


@when('I register as new user with "{profile}"')
def step_register(context, profile):
    pass


@then('I should see "{text}"')
def step_should_see(context, text):
    pass
'''

CUCUMBER_SOURCE = '''import { Given, When, Then } from '@cucumber/cucumber';

Given('I am logged in as {string}', async function (user) {});

When('I enter {string} in the {word} field', async function (value, field) {
  await this.page.fill(field, value);
});

When('I wait {int} seconds', async function (seconds) {});

Then('the total should be {float}', async function (total) {});
'''


class FakeCompletionClient:
    """Returns canned replies and records every request."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def steps_dir(tmp_path):
    directory = tmp_path / "steps"
    directory.mkdir()
    (directory / "common_steps.py").write_text(STEP_SOURCE, encoding="utf-8")
    (directory / "auth.steps.ts").write_text(CUCUMBER_SOURCE, encoding="utf-8")
    return directory


@pytest.fixture
def catalog(steps_dir):
    return StepCatalog.load([steps_dir])


@pytest.fixture
def config(tmp_path, steps_dir):
    return config_from_dict({
        'step_definitions': {'paths': [str(steps_dir)]},
        'output': {
            'features_dir': str(tmp_path / "features"),
            'step_stubs_dir': str(tmp_path / "stubs"),
        },
    })


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def mapper(catalog):
    return StepMapper(catalog)


@pytest.fixture
def assembler(config, catalog, mapper, fake_client):
    fallback = FallbackGenerator(fake_client, config, mapper)
    return FeatureAssembler(IntentExtractor(), mapper, catalog, fallback)

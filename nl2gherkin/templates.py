"""Curated Gherkin templates."""
from typing import List

from nl2gherkin.models import Scenario, Step, StepKeyword


REGISTRATION_KEYWORDS = ['register', 'sign up', 'create account']

REGISTRATION_SCENARIO_TITLE = "New user completes registration successfully"

REGISTRATION_TEMPLATE = """# Requested: {description}
@registration
Feature: User Registration
  As a new user
  I want to register an account
  So that I can access preventimmo services

  Scenario: New user completes registration successfully
    Given I am on page "/espace-client/visitor.php?action=register"
    And I set fullscreen
    When I register as new user with ":default"
    Then I should see "Un email de confirmation vient de vous être envoyé"
"""

DEFAULT_FEATURE_TITLE = "Automated Test"
DEFAULT_STEPS = [
    (StepKeyword.GIVEN, "I am on the application homepage"),
    (StepKeyword.WHEN, "I perform the required action"),
    (StepKeyword.THEN, "I should see expected results"),
]


def registration_template(description: str) -> str:
    """The registration feature text, with the request kept as a comment."""
    # Comments are single-line; collapse the request onto one line
    return REGISTRATION_TEMPLATE.format(description=' '.join(description.split()))


def default_registration_scenario() -> Scenario:
    return Scenario(
        title=REGISTRATION_SCENARIO_TITLE,
        steps=[
            Step(StepKeyword.GIVEN, 'I am on page "/espace-client/visitor.php?action=register"'),
            Step(StepKeyword.AND, 'I set fullscreen'),
            Step(StepKeyword.WHEN, 'I register as new user with ":default"'),
            Step(StepKeyword.THEN, 'I should see "Un email de confirmation vient de vous être envoyé"'),
        ]
    )


def default_steps() -> List[Step]:
    """Generic steps used when nothing better can be produced."""
    return [Step(keyword, text) for keyword, text in DEFAULT_STEPS]

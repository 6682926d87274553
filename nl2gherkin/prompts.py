
SYSTEM_PROMPT = (
    "You are a test automation expert specializing in Cucumber Gherkin syntax "
    "and BDD testing principles."
)

EXISTING_STEPS_BLOCK = """
Here are the existing step definitions that should be reused if possible:
{steps}
"""

STEP_GENERATION_TEMPLATE = """
I need to generate Cucumber Gherkin test steps from this natural language description:
"{description}"
{existing_steps}
IMPORTANT: For any navigation steps like "I am on page", always use a valid URL path like "/espace-client/visitor.php?action=register" for registration pages.

Examples of valid steps:
- Given I am on page "/espace-client/visitor.php?action=register"
- Given I am on page "/espace-client/login.php"
- Given I am on page "/search"

Please analyze the description and return a JSON structure with:
1. A feature title
2. A scenario title
3. An array of Given, When, Then steps matching the description
4. Any relevant tags

Format your response as valid JSON like this:

```json
{{
  "feature": "Feature title",
  "tags": ["@tag1", "@tag2"],
  "scenario": "Scenario title",
  "steps": [
    {{ "type": "Given", "text": "step text", "parameters": {{}} }},
    {{ "type": "When", "text": "step text", "parameters": {{}} }},
    {{ "type": "Then", "text": "step text", "parameters": {{}} }}
  ]
}}
```

Ensure the steps use ONLY existing step patterns when available, and propose new ones if needed.
"""


def build_step_generation_prompt(description, existing_steps=None):
    existing_steps = list(existing_steps or [])
    block = EXISTING_STEPS_BLOCK.format(steps='\n'.join(existing_steps)) if existing_steps else ''
    return STEP_GENERATION_TEMPLATE.format(description=description, existing_steps=block)


EXAMPLES_TEMPLATE = """
Generate {count} examples for this test scenario:

Scenario: {title}
{steps}

Parameters: {parameters}

Return the examples as a JSON array of objects.
"""


def build_examples_prompt(scenario, parameters, count):
    steps = '\n'.join(f"{step.keyword.value} {step.text}" for step in scenario.steps)
    return EXAMPLES_TEMPLATE.format(
        count=count,
        title=scenario.title,
        steps=steps,
        parameters=', '.join(parameters)
    )

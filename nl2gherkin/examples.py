"""Example data rows for the parameters of a scenario."""
import json
import re
from typing import Dict, List, Optional

from nl2gherkin.completion import CompletionRequest
from nl2gherkin.errors import CompletionError
from nl2gherkin.fallback import FENCED_JSON
from nl2gherkin.models import Scenario
from nl2gherkin.prompts import SYSTEM_PROMPT, build_examples_prompt


# "value", 'value' (not apostrophes) or <placeholder>
PARAMETER_PATTERN = re.compile(r'"([^"]+)"|(?<!\w)\'([^\']+)\'(?!\w)|<([^>]+)>')

DEFAULT_EXAMPLE_COUNT = 3
EXAMPLES_TEMPERATURE = 0.7


def extract_parameters(scenario: Scenario) -> List[str]:
    """Parameter names from the quoted and <angled> parts of the steps, in order."""
    names = []
    for step in scenario.steps:
        for match in PARAMETER_PATTERN.finditer(step.text):
            value = next(group for group in match.groups() if group is not None)
            name = re.sub(r'\s+', '_', value.strip().lower())
            if name and name not in names:
                names.append(name)
    return names


def default_examples(parameters: List[str], count: int = DEFAULT_EXAMPLE_COUNT) -> List[Dict[str, str]]:
    """Placeholder rows, with plausible values for emails, passwords, names and phones."""
    rows = []
    for i in range(1, count + 1):
        row = {}
        for name in parameters:
            if 'email' in name:
                row[name] = f"test{i}@example.com"
            elif 'password' in name:
                row[name] = f"Password{i}!"
            elif 'name' in name:
                row[name] = f"Test User {i}"
            elif 'phone' in name:
                row[name] = f"123-456-{7889 + i}"
            else:
                row[name] = f"Test {name} {i}"
        rows.append(row)
    return rows


def examples_table(rows: List[Dict[str, str]]) -> str:
    """Render rows as a Gherkin ``Examples:`` block."""
    if not rows:
        return ''
    headers = list(rows[0].keys())
    lines = ["    Examples:", "      | " + " | ".join(headers) + " |"]
    for row in rows:
        lines.append("      | " + " | ".join(str(row.get(h, '')).replace('|', '\\|') for h in headers) + " |")
    return '\n'.join(lines) + '\n'


class ExampleGenerator:
    """Asks the completion service for example rows, falling back to placeholder data."""

    def __init__(self, client, config):
        self.client = client
        self.config = config

    def generate(self, scenario: Scenario, count: int = DEFAULT_EXAMPLE_COUNT) -> List[Dict[str, str]]:
        """
        Example rows for the parameters of a scenario.

        Returns:
            One dict per row, keyed by parameter name; empty when the
            scenario has no parameters
        """
        parameters = extract_parameters(scenario)
        if not parameters:
            return []

        if not self.config.fallbacks.enable_llm_synthesis:
            return default_examples(parameters, count)

        request = CompletionRequest(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_examples_prompt(scenario, parameters, count),
            temperature=EXAMPLES_TEMPERATURE,
            max_tokens=self.config.completion.max_tokens
        )
        try:
            reply = self.client.complete(request)
        except CompletionError as e:
            print(f"Warning: could not generate examples ({e}). Using default data.")
            return default_examples(parameters, count)

        rows = self.parse_reply(reply)
        if rows is None:
            print("Warning: unusable examples output. Using default data.")
            return default_examples(parameters, count)
        return rows

    def parse_reply(self, reply: str) -> Optional[List[Dict[str, str]]]:
        """Rows from a fenced or bare JSON array of objects, or None."""
        reply = reply or ''
        match = FENCED_JSON.search(reply)
        if match:
            raw = match.group(1)
        elif reply.strip().startswith('[') and reply.strip().endswith(']'):
            raw = reply.strip()
        else:
            return None

        try:
            rows = json.loads(raw)
        except json.JSONDecodeError:
            return None

        if not isinstance(rows, list) or not rows or not all(isinstance(row, dict) for row in rows):
            return None
        return [{str(key): str(value) for key, value in row.items()} for row in rows]

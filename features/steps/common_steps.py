"""Shared browser steps."""
from behave import given, when, then


@given('I am on page "{path}"')
def step_on_page(context, path):
    context.page.goto(context.base_url + path)


@given('I set fullscreen')
def step_set_fullscreen(context):
    context.page.set_viewport_size({"width": 1920, "height": 1080})


@when('I click on "{text}"')
def step_click_on(context, text):
    context.page.get_by_text(text).first.click()


@when('I enter "{value}" in the {field} field')
def step_enter_in_field(context, value, field):
    context.page.get_by_label(field).fill(value)


@when('I wait for the page to load')
def step_wait_for_load(context):
    context.page.wait_for_load_state("networkidle")


@when('I register as new user with "{profile}"')
def step_register_new_user(context, profile):
    context.registration.register(profile)


@then('I should see "{text}"')
def step_should_see(context, text):
    assert context.page.get_by_text(text).first.is_visible()

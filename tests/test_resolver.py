from __future__ import annotations

from typing import List, Optional

import pytest

from klore.definition import Group, GroupKey, Template, Variable, VariableType
from klore.errors import PromptCancelled, ValidationError
from klore.install import Prompter, default_values, resolve_variables, validate_value
from klore.install.resolver import prompt_order


class ScriptedPrompter(Prompter):
    """Answers prompts from a list; running out of answers cancels."""

    def __init__(self, answers: List[str], confirm_answer: bool = True) -> None:
        self.answers = list(answers)
        self.confirm_answer = confirm_answer
        self.questions: List[str] = []
        self.sections: List[str] = []
        self.errors: List[str] = []

    def text(self, message: str, default: str = "") -> str:
        self.questions.append(message)
        if not self.answers:
            raise PromptCancelled(message)
        return self.answers.pop(0)

    def select(self, message: str, choices: List[str], default: Optional[str] = None) -> str:
        return default or choices[0]

    def confirm(self, message: str, default: bool = True) -> bool:
        return self.confirm_answer

    def section(self, title: str) -> None:
        self.sections.append(title)

    def error(self, message: str) -> None:
        self.errors.append(message)


@pytest.mark.parametrize(
    "var_type,value",
    [
        (VariableType.EMAIL, "hello@acme.io"),
        (VariableType.COLOR, "#FFF"),
        (VariableType.COLOR, "#ff7800"),
        (VariableType.PHONE, "+1 (555) 123-4567"),
        (VariableType.URL, "https://acme.io/about"),
        (VariableType.URL, "#"),
        (VariableType.URL, "mailto:hello@acme.io"),
        (VariableType.NUMBER, "3.5"),
        (VariableType.STRING, "anything at all"),
    ],
)
def test_valid_values(var_type: VariableType, value: str) -> None:
    validate_value(Variable("v", var_type), value)


@pytest.mark.parametrize(
    "var_type,value,message",
    [
        (VariableType.EMAIL, "not-an-email", "Please enter a valid email address"),
        (VariableType.COLOR, "#GGG", "Please enter a valid hex color (e.g., #FF7800)"),
        (VariableType.COLOR, "orange", "Please enter a valid hex color (e.g., #FF7800)"),
        (VariableType.PHONE, "call me", "Please enter a valid phone number"),
        (VariableType.URL, "not a url", "Please enter a valid URL"),
        (VariableType.URL, "https://", "Please enter a valid URL"),
        (VariableType.NUMBER, "twelve", "Please enter a number"),
    ],
)
def test_invalid_values(var_type: VariableType, value: str, message: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_value(Variable("v", var_type), value)
    assert str(excinfo.value) == message
    assert excinfo.value.variable == "v"


def test_empty_values() -> None:
    validate_value(Variable("optional", VariableType.EMAIL), "")
    with pytest.raises(ValidationError, match="This field is required"):
        validate_value(Variable("needed", required=True), "   ")


def test_invalid_answer_is_asked_again() -> None:
    template = Template(variables=(Variable("contactEmail", VariableType.EMAIL),))
    prompter = ScriptedPrompter(["not-an-email", "hello@acme.io"])

    values = resolve_variables(template, prompter)

    assert values == {"contactEmail": "hello@acme.io"}
    assert prompter.errors == ["Please enter a valid email address"]
    assert prompter.questions == ["What is your contact email?"] * 2


def test_empty_answer_takes_default() -> None:
    template = Template(variables=(Variable("appName", default="Acme", required=True),))
    assert resolve_variables(template, ScriptedPrompter([""])) == {"appName": "Acme"}


def test_required_without_default_insists() -> None:
    template = Template(variables=(Variable("appName", required=True),))
    prompter = ScriptedPrompter(["", "Globex"])
    assert resolve_variables(template, prompter) == {"appName": "Globex"}
    assert prompter.errors == ["This field is required"]


def test_supplied_values_skip_prompt_and_validation() -> None:
    template = Template(
        variables=(
            Variable("contactEmail", VariableType.EMAIL, "hi@acme.io"),
            Variable("appName", default="Acme"),
        )
    )
    prompter = ScriptedPrompter(["Globex"])
    values = resolve_variables(template, prompter, {"contactEmail": "bogus", "appName": ""})
    assert values == {"contactEmail": "bogus", "appName": "Globex"}
    assert prompter.questions == ["What is your store/company name?"]


def test_cancel_returns_none() -> None:
    template = Template(variables=(Variable("a"), Variable("b")))
    assert resolve_variables(template, ScriptedPrompter(["first"])) is None


def test_prompt_order_follows_groups() -> None:
    template = Template(
        variables=(
            Variable("footer"),
            Variable("brandColor", VariableType.COLOR, "#ff7800"),
            Variable("extra"),
            Variable("appName", default="Acme"),
            Variable("appName", default="Duplicate"),
        ),
        groups=(
            Group("colors", ("brandColor",)),
            Group("misc", ("extra",)),
            Group("branding", ("appName",)),
        ),
    )
    order = [(key, [v.name for v in variables]) for key, variables in prompt_order(template)]
    assert order == [
        (GroupKey.BRANDING, ["appName"]),
        (GroupKey.COLORS, ["brandColor"]),
        (GroupKey.OTHER, ["extra", "footer"]),
    ]

    prompter = ScriptedPrompter(["", "", "", ""])
    values = resolve_variables(template, prompter)
    assert values == {"appName": "Acme", "brandColor": "#ff7800", "extra": "", "footer": ""}
    assert prompter.sections == [
        GroupKey.BRANDING.title,
        GroupKey.COLORS.title,
        GroupKey.OTHER.title,
    ]


def test_default_values_gate_required() -> None:
    template = Template(
        variables=(
            Variable("appName", required=True),
            Variable("tagline", default="Best shop"),
            Variable("contactEmail", VariableType.EMAIL, required=True),
        )
    )
    with pytest.raises(ValidationError) as excinfo:
        default_values(template)
    assert "appName, contactEmail" in str(excinfo.value)

    values = default_values(template, {"appName": "Globex", "contactEmail": "a@b.co"})
    assert values == {"appName": "Globex", "tagline": "Best shop", "contactEmail": "a@b.co"}

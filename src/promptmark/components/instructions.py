#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/instructions.py
"""Captioned instruction blocks.

Each component here is a :class:`~promptmark.components.base.CaptionedComponent`
that differs only in its default caption, default caption style, XML tag and
whether it collapses trailing blank lines.

"""

from __future__ import annotations

from promptmark.components.base import CaptionedComponent
from promptmark.components.registry import register_component


@register_component("role")
class RoleComponent(CaptionedComponent):
    """The role the model should take on."""

    xml_tag = "role"
    default_caption = "Role"


@register_component("task")
class TaskComponent(CaptionedComponent):
    """The task to perform. Mixed content keeps its block spacing."""

    xml_tag = "task"
    default_caption = "Task"
    collapse_trailing = True


@register_component("hint")
class HintComponent(CaptionedComponent):
    xml_tag = "hint"
    default_caption = "Hint"


@register_component("output-format")
class OutputFormatComponent(CaptionedComponent):
    """Instructions on the shape of the expected answer."""

    xml_tag = "output-format"
    default_caption = "Output Format"


@register_component("stepwise-instructions")
class StepwiseInstructionsComponent(CaptionedComponent):
    xml_tag = "stepwise-instructions"
    default_caption = "Stepwise Instructions"


@register_component("introducer")
class IntroducerComponent(CaptionedComponent):
    """Lead-in text. The caption is hidden by default."""

    xml_tag = "introducer"
    default_caption = "Introducer"
    default_caption_style = "hidden"


@register_component("examples")
class ExamplesComponent(CaptionedComponent):
    """A group of ``<example>`` elements."""

    xml_tag = "examples"
    default_caption = "Examples"
    collapse_trailing = True


@register_component("input")
class InputComponent(CaptionedComponent):
    """Example input, captioned in bold by default."""

    xml_tag = "input"
    default_caption = "Input"
    default_caption_style = "bold"


@register_component("output")
class OutputComponent(CaptionedComponent):
    """Example output, captioned in bold by default."""

    xml_tag = "output"
    default_caption = "Output"
    default_caption_style = "bold"

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/messages.py
"""Chat messages and conversations.

With chat enabled on the context, the message components append a
``{"role", "content"}`` record to ``context.chat_messages`` and render
nothing, so the content is not duplicated in the linear output. With chat
disabled they render their content in place.

"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from promptmark.components.base import Component
from promptmark.components.registry import register_component
from promptmark.constants import CHAT_ROLES
from promptmark.utils.escape import escape_xml
from promptmark.utils.text import parse_json_attribute, parse_slice

logger = logging.getLogger(__name__)

_SPEAKER_LABELS = {
    "human": "Human",
    "user": "Human",
    "ai": "Assistant",
    "assistant": "Assistant",
    "system": "System",
}


class _MessageComponent(Component):
    role: ClassVar[str] = "user"
    speaker: ClassVar[str] = "human"

    def render(self) -> str:
        content = self.render_body()
        if self.context.chat:
            self.context.add_chat_message(self.role, content)
            return ""
        if self.xml_mode:
            return self.render_as_xml(content=content, attributes={"speaker": self.speaker})
        return f"{content}\n\n"


@register_component("human-message", "user-message", "human-msg", "user-msg")
class HumanMessageComponent(_MessageComponent):
    xml_tag = "user-msg"
    role = CHAT_ROLES["human-message"]
    speaker = "human"


@register_component("ai-message", "assistant-message", "ai-msg")
class AiMessageComponent(_MessageComponent):
    xml_tag = "ai-msg"
    role = CHAT_ROLES["ai-message"]
    speaker = "ai"


@register_component("system-message", "system-msg")
class SystemMessageComponent(_MessageComponent):
    xml_tag = "system-msg"
    role = CHAT_ROLES["system-message"]
    speaker = "system"


def _content_part_text(part: Any) -> str:
    if isinstance(part, str):
        return part
    if isinstance(part, dict):
        if "text" in part:
            return str(part["text"])
        return f"[{part.get('type', 'content')}]"
    return str(part)


@register_component("msg-content", "message-content")
class MessageContentComponent(Component):
    """Render the ``content`` attribute: a string or a JSON list of parts."""

    def render(self) -> str:
        raw = self.get_attribute("content", "")
        content = parse_json_attribute(raw, raw) if isinstance(raw, str) and raw.lstrip().startswith("[") else raw
        if isinstance(content, list):
            return "".join(_content_part_text(part) for part in content)
        return _content_part_text(content)


@register_component("conversation")
class ConversationComponent(Component):
    """A recorded conversation from the ``messages`` JSON attribute.

    ``selectedMessages`` takes slice notation, e.g. ``"-6:"`` for the last
    six messages.
    """

    xml_tag = "conversation"

    def messages(self) -> list[dict[str, Any]]:
        messages = self.get_data_attribute("messages", [])
        if not isinstance(messages, list):
            return []
        messages = [message for message in messages if isinstance(message, dict)]

        selection = self.get_attribute("selectedMessages")
        if selection is not None:
            bounds = parse_slice(str(selection), len(messages))
            if bounds is None:
                logger.debug("Ignoring invalid selectedMessages: %s", selection)
            else:
                messages = messages[bounds[0] : bounds[1]]
        return messages

    def render(self) -> str:
        messages = self.messages()
        if self.xml_mode:
            lines = ["<conversation>"]
            for message in messages:
                speaker = escape_xml(message.get("speaker", "human"), quote=True)
                lines.append(f'  <msg speaker="{speaker}">{escape_xml(message.get("content", ""))}</msg>')
            lines.append("</conversation>")
            return "\n".join(lines)

        lines = []
        for message in messages:
            speaker = str(message.get("speaker", "human"))
            label = _SPEAKER_LABELS.get(speaker.lower(), speaker.capitalize())
            lines.append(f"**{label}:** {message.get('content', '')}")
            lines.append("")
        return "\n".join(lines)


@register_component("qa", "question")
class QuestionAnswerComponent(Component):
    """A question followed by an empty answer caption."""

    xml_tag = "qa"

    def render(self) -> str:
        content = self.render_body()
        if self.xml_mode:
            return self.render_as_xml(content=content)
        question = self.get_attribute("questionCaption", "Question")
        answer = self.get_attribute("answerCaption", "Answer")
        return f"**{question}:** {content}\n\n**{answer}:**"

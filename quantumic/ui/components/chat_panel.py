"""
Chat panel component.

Displays the session transcript with auto-scroll. Message text is
segmented into paragraphs, code blocks, bullet and numbered lines.
"""

import logging

from rich.console import Group
from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, ScrollableContainer
from textual.widgets import Static

from quantumic.core.models import Message, Sender
from quantumic.ui.formatting import SegmentKind, segment_message, sender_label

logger = logging.getLogger("chat_panel")

# Theme colors (Rich markup)
COLOR_USER = "#66ccff"
COLOR_AGENT = "#44ffaa"
COLOR_SYSTEM = "#ffcc66"


def render_message_body(content: str) -> Group:
    """Build Rich renderables for one message's text."""
    parts = []
    for segment in segment_message(content):
        if segment.kind is SegmentKind.CODE_BLOCK:
            parts.append(Text(segment.text.strip("\n"), style="bold white on #222222"))
        elif segment.kind is SegmentKind.BULLET_LINE:
            parts.append(Text(f"  • {segment.text}"))
        elif segment.kind is SegmentKind.NUMBERED_LINE:
            parts.append(Text(f"  {segment.number}. {segment.text}"))
        else:
            parts.append(Text(segment.text))
    return Group(*parts)


def build_transcript_table(messages: tuple[Message, ...]) -> Table:
    """Build a Rich Table from the transcript."""
    table = Table(
        show_header=False,
        show_edge=False,
        box=None,
        padding=(0, 1),
        expand=True,
    )
    table.add_column("Who", width=10, no_wrap=True)
    table.add_column("Message", ratio=1)

    for message in messages:
        if message.role is Sender.USER:
            color = COLOR_USER
        elif message.role is Sender.ASSISTANT:
            color = COLOR_AGENT
        else:
            color = COLOR_SYSTEM

        label = Text(sender_label(message.role), style=f"bold {color}")
        if message.pending:
            body = Text(message.content, style="dim italic")
        else:
            body = render_message_body(message.content)
        table.add_row(label, body)

    return table


class ChatPanel(Container):
    """Panel displaying the conversation with the trading agent."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._rendered: tuple[Message, ...] | None = None

    def compose(self) -> ComposeResult:
        yield Static("💬 AI CHAT", classes="panel-title", id="chat-title")
        with ScrollableContainer(id="chat-scroll", classes="panel-content"):
            yield Static("", id="chat-content")

    def update_display(self, messages: tuple[Message, ...], force: bool = False) -> None:
        """
        Re-render the transcript.

        Args:
            messages: Transcript snapshot
            force: Re-render even if the transcript did not change
        """
        if not force and messages == self._rendered:
            return
        self._rendered = messages

        try:
            content = self.query_one("#chat-content", Static)
            content.update(build_transcript_table(messages))
            # Auto-scroll to bottom
            scroll = self.query_one("#chat-scroll", ScrollableContainer)
            scroll.scroll_end(animate=False)
        except Exception as e:
            logger.debug(f"Chat panel not ready: {e}")

"""Console front end that renders channel messages with rich."""

import logging
import threading
from typing import Any, List, Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.messages import MessageType, TranslationMessage
from ..models.transcript import Segment

logger = logging.getLogger(__name__)


def format_timestamp(seconds: int) -> str:
    """Format whole seconds as M:SS or H:MM:SS."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class TranscriptConsole:
    """Subscribes to the transcription and translation topics and prints progress."""

    def __init__(self,
                 transcription_topic: str,
                 translation_topic: Optional[str] = None,
                 console: Optional[Console] = None):
        self.console = console or Console()
        self.transcription_topic = transcription_topic
        self.translation_topic = translation_topic

        self.segments: List[Segment] = []
        self.partial_text = ""
        self.error: Optional[str] = None
        self.translation: Optional[str] = None

        self.transcription_finished = threading.Event()
        self.translation_finished = threading.Event()

        pub.subscribe(self.on_transcription_message, transcription_topic)
        if translation_topic:
            pub.subscribe(self.on_translation_message, translation_topic)
        logger.debug(f"TranscriptConsole subscribed to {transcription_topic}, {translation_topic}")

    def on_transcription_message(self, message: Any) -> None:
        """Handle one message from the transcription worker."""
        kind = message.type
        if kind == MessageType.LOADING:
            self.console.print(f"🔧 Model loading: {message.status.value}", style="blue")
        elif kind == MessageType.DOWNLOADING:
            self.console.print(
                f"⬇️  {message.file}: {message.progress:.0f}% ({message.loaded}/{message.total})",
                style="dim",
            )
        elif kind == MessageType.RESULT_PARTIAL:
            self.partial_text = message.result.text
            self.console.print(
                f"… [{format_timestamp(message.result.start)}] {message.result.text.strip()}",
                style="dim italic",
            )
        elif kind == MessageType.RESULT:
            self.segments = list(message.results)
            self.partial_text = ""
            self.console.print(
                f"📝 {len(self.segments)} segments, completed until "
                f"{format_timestamp(message.completed_until_timestamp)}",
                style="green",
            )
        elif kind == MessageType.INFERENCE_DONE:
            self.console.print("✅ Transcription complete", style="bold green")
            self.transcription_finished.set()
        elif kind == MessageType.INFERENCE_ERROR:
            self.error = message.error
            self.console.print(f"❌ Transcription failed during {message.stage}: {message.error}", style="bold red")
            self.transcription_finished.set()
        else:
            logger.warning(f"Unhandled transcription message type: {kind}")

    def on_translation_message(self, message: TranslationMessage) -> None:
        """Handle one message from the translation worker."""
        if message.status in ("initiate", "progress", "done", "ready"):
            logger.debug(f"Translation model status: {message.status} {message.data}")
            if message.status == "initiate":
                self.console.print("🔧 Loading translation model...", style="blue")
        elif message.status == "update":
            self.translation = message.output
        elif message.status == "complete":
            self.translation = " ".join(item["translation_text"] for item in message.output)
            self.console.print("✅ Translation complete", style="bold green")
            self.translation_finished.set()
        elif message.status == "error":
            self.console.print(f"❌ Translation failed: {message.output}", style="bold red")
            self.translation_finished.set()

    def render_transcript(self) -> None:
        """Print the current segment table and translation, if any."""
        table = Table(title="Transcript", show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Start", style="cyan")
        table.add_column("End", style="cyan")
        table.add_column("Text")
        for segment in self.segments:
            table.add_row(
                str(segment.index),
                format_timestamp(segment.start),
                format_timestamp(segment.end),
                segment.text,
            )
        self.console.print(table)

        if self.translation:
            self.console.print(Panel(Text(self.translation), title="Translation"))

    def close(self) -> None:
        """Unsubscribe from all topics."""
        try:
            pub.unsubscribe(self.on_transcription_message, self.transcription_topic)
            if self.translation_topic:
                pub.unsubscribe(self.on_translation_message, self.translation_topic)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")

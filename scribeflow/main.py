"""Main application entry point for Scribeflow."""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from scribeflow.models import InferenceRequest, Segment, transcript_text
from scribeflow.services import (
    TranscriptionWorker,
    TranslationWorker,
    TRANSCRIPTION_TOPIC,
    TRANSLATION_TOPIC,
)
from scribeflow.ui import TranscriptConsole

from .config import ScribeflowConfig
from . import __version__

logger = logging.getLogger(__name__)


class Application:
    """Wires the workers and the console for one command-line invocation."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = ScribeflowConfig(config_path)
        # Set up logging (command line overrides config)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

        self.transcription_worker: Optional[TranscriptionWorker] = None
        self.translation_worker: Optional[TranslationWorker] = None
        self.console: Optional[TranscriptConsole] = None

    def init(self) -> None:
        logger.info("Initializing services...")
        self.transcription_worker = TranscriptionWorker(self.config, TRANSCRIPTION_TOPIC)
        self.translation_worker = TranslationWorker(self.config, TRANSLATION_TOPIC)
        self.console = TranscriptConsole(TRANSCRIPTION_TOPIC, TRANSLATION_TOPIC)

        self.transcription_worker.start()
        self.translation_worker.start()

    def transcribe(self, waveform: np.ndarray, model_name: Optional[str] = None) -> Optional[List[Segment]]:
        """Submit a waveform and wait until the run ends.

        Returns:
            Final segments, or None if the run failed
        """
        self.transcription_worker.submit(InferenceRequest(audio=waveform, model_name=model_name))
        self.console.transcription_finished.wait()
        if self.console.error:
            return None
        return self.console.segments

    def translate(self, segments: List[Segment], target_language: str) -> None:
        self.translation_worker.submit({
            "text": transcript_text(segments, separator=" "),
            "src_lang": self.config.get('translation.src_lang', 'eng_Latn'),
            "tgt_lang": target_language,
        })
        self.console.translation_finished.wait()

    def cleanup(self) -> None:
        if self.transcription_worker:
            self.transcription_worker.shutdown(timeout=10.0)
        if self.translation_worker:
            self.translation_worker.shutdown(timeout=10.0)
        if self.console:
            self.console.close()


def load_input(args: argparse.Namespace, config: ScribeflowConfig) -> np.ndarray:
    """Load the waveform from a file or the microphone."""
    sample_rate = config.get('audio.sample_rate', 16000)
    if args.file:
        from scribeflow.audio import load_waveform
        return load_waveform(args.file, sample_rate)

    from scribeflow.audio.capture import MicrophoneRecorder
    recorder = MicrophoneRecorder(
        sample_rate=sample_rate,
        chunk_size=config.get('audio.chunk_size', 1024),
        channels=config.get('audio.channels', 1),
    )
    print(f"🎙️  Recording for {args.record} seconds...")
    return recorder.record(args.record)


def apply_overrides(config: ScribeflowConfig, args: argparse.Namespace) -> None:
    """Apply command-line settings that take precedence over the config file."""
    if getattr(args, "model", None):
        config.set('transcription.model_name', args.model)


def write_transcript(segments: List[Segment], output_path: str, config: ScribeflowConfig) -> None:
    """Write the plain-text transcript. Relative paths land in the configured output directory."""
    path = Path(output_path)
    if not path.is_absolute():
        path = Path(config.get_output_directory()) / path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(transcript_text(segments) + "\n", encoding="utf-8")
    logger.info(f"Transcript written to {path}")


def setup_logging(config, level: str = "INFO") -> None:

    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/scribeflow.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("Scribeflow starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def main() -> None:
    """Main entry point for Scribeflow."""
    parser = argparse.ArgumentParser(
        description="Scribeflow - speech transcription with optional translation"
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--file",
        type=str,
        help="WAV file to transcribe"
    )
    source.add_argument(
        "--record",
        type=float,
        metavar="SECONDS",
        help="Record from the microphone for this many seconds and transcribe"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--model",
        type=str,
        help="Speech recognition model (overrides config)"
    )

    parser.add_argument(
        "--translate-to",
        type=str,
        help="Translate the transcript into this language (name or NLLB code, e.g. 'French' or 'fra_Latn')"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write the plain-text transcript to this path (relative to storage.output_directory)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Scribeflow v{__version__}"
    )

    args = parser.parse_args()

    try:
        app = Application(args.config, args.log_level)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)
    apply_overrides(app.config, args)

    try:
        app.init()
        waveform = load_input(args, app.config)
        segments = app.transcribe(waveform)
        if segments is None:
            sys.exit(1)

        if args.translate_to:
            app.translate(segments, args.translate_to)

        app.console.render_transcript()
        if args.output:
            write_transcript(segments, args.output, app.config)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        app.cleanup()


if __name__ == "__main__":
    main()

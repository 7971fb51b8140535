"""Unit tests for the command-line entry point helpers."""

import argparse
import logging
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
import yaml

from scribeflow import main as cli
from scribeflow.config import ScribeflowConfig
from scribeflow.models import Segment


@pytest.fixture
def config_in_tmp(temp_data_dir):
    """Config file whose relative paths land in the temp directory."""
    path = Path(temp_data_dir) / "config.yaml"
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump({"logging": {"file_path": "logs/test.log", "console_output": False}}, f)
    yield str(path)
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, logging.FileHandler):
            handler.close()
            root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)


@pytest.mark.unit
class TestHelpers:

    def test_write_transcript_relative_to_output_dir(self, temp_data_dir):
        config = ScribeflowConfig()
        config.set('storage.output_directory', temp_data_dir)
        segments = [Segment(index=0, text="hello", start=0, end=1),
                    Segment(index=1, text="world", start=1, end=2)]

        cli.write_transcript(segments, "nested/out.txt", config)

        written = Path(temp_data_dir) / "nested" / "out.txt"
        assert written.read_text(encoding="utf-8") == "hello\nworld\n"

    def test_load_input_from_file(self, wav_file, sample_waveform):
        path = wav_file((sample_waveform * 32767).astype(np.int16))
        args = argparse.Namespace(file=path, record=None)

        waveform = cli.load_input(args, ScribeflowConfig())

        assert waveform.shape == sample_waveform.shape

    def test_model_flag_overrides_config(self):
        config = ScribeflowConfig()

        cli.apply_overrides(config, argparse.Namespace(model="openai/whisper-base"))

        assert config.get('transcription.model_name') == "openai/whisper-base"

    def test_config_model_kept_without_flag(self):
        config = ScribeflowConfig()
        default_model = config.get('transcription.model_name')

        cli.apply_overrides(config, argparse.Namespace(model=None))

        assert config.get('transcription.model_name') == default_model

    def test_setup_logging_writes_file(self, config_in_tmp):
        config = ScribeflowConfig(config_in_tmp)

        cli.setup_logging(config, "DEBUG")
        logging.getLogger("scribeflow.test").debug("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        log_file = Path(config.get('logging.file_path'))
        assert log_file.exists()
        assert "written to file" in log_file.read_text()
        assert logging.getLogger().level == logging.DEBUG


@pytest.mark.unit
class TestMain:

    def test_version(self, capsys):
        with patch("sys.argv", ["scribeflow", "--version"]):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 0
        assert "Scribeflow v" in capsys.readouterr().out

    def test_input_source_required(self):
        with patch("sys.argv", ["scribeflow"]):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 2

    def test_missing_config_exits(self, temp_data_dir, capsys):
        missing = str(Path(temp_data_dir) / "missing.yaml")
        with patch("sys.argv", ["scribeflow", "--file", "a.wav", "--config", missing]):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 1
        assert "Configuration error" in capsys.readouterr().out

    def test_application_cleanup_before_init(self, config_in_tmp):
        app = cli.Application(config_in_tmp)

        app.cleanup()

        assert app.transcription_worker is None

"""Unit tests for ScribeflowConfig."""

from pathlib import Path

import pytest
import yaml

from scribeflow.config import DEFAULT_CONFIG, ScribeflowConfig


def write_config(directory, data, name="config.yaml"):
    path = Path(directory) / name
    with open(path, 'w', encoding='utf-8') as f:
        if isinstance(data, str):
            f.write(data)
        else:
            yaml.safe_dump(data, f)
    return str(path)


@pytest.mark.unit
class TestScribeflowConfig:
    """Test cases for ScribeflowConfig."""

    def test_defaults_without_file(self):
        config = ScribeflowConfig()

        assert config.get('transcription.model_name') == "openai/whisper-tiny.en"
        assert config.get('transcription.stride_length_s') == 5
        assert config.get('transcription.partial_every') == 10

    def test_defaults_are_not_shared(self):
        config = ScribeflowConfig()
        config.set('transcription.model_name', "changed")

        assert DEFAULT_CONFIG['transcription']['model_name'] == "openai/whisper-tiny.en"

    def test_file_values_merge_over_defaults(self, temp_data_dir):
        path = write_config(temp_data_dir, {"transcription": {"model_name": "openai/whisper-base"}})

        config = ScribeflowConfig(path)

        assert config.get('transcription.model_name') == "openai/whisper-base"
        assert config.get('transcription.chunk_length_s') == 30
        assert config.get('translation.src_lang') == "eng_Latn"

    def test_relative_paths_resolve_against_config_dir(self, temp_data_dir):
        path = write_config(temp_data_dir, {
            "storage": {"output_directory": "out"},
            "logging": {"file_path": "logs/app.log"},
        })

        config = ScribeflowConfig(path)

        assert config.get('storage.output_directory') == str(Path(temp_data_dir) / "out")
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "logs/app.log")

    def test_absolute_paths_unchanged(self, temp_data_dir):
        absolute = str(Path(temp_data_dir).absolute() / "elsewhere")
        path = write_config(temp_data_dir, {"storage": {"output_directory": absolute}})

        assert ScribeflowConfig(path).get('storage.output_directory') == absolute

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            ScribeflowConfig(str(Path(temp_data_dir) / "nope.yaml"))

    @pytest.mark.parametrize("content", ["", "key: [unclosed", "- just\n- a list\n"])
    def test_invalid_files(self, temp_data_dir, content):
        path = write_config(temp_data_dir, content)

        with pytest.raises(ValueError):
            ScribeflowConfig(path)

    def test_get_default_for_missing_key(self):
        config = ScribeflowConfig()

        assert config.get('transcription.nothing', 42) == 42
        assert config.get('transcription.model_name.deeper') is None

    def test_set_creates_nested_keys(self):
        config = ScribeflowConfig()
        config.set('extra.section.value', 3)

        assert config.get('extra.section.value') == 3

    def test_output_directory_is_absolute(self):
        assert Path(ScribeflowConfig().get_output_directory()).is_absolute()

    def test_example_config_loads(self):
        example = Path(__file__).resolve().parents[2] / "scribeflow.example.yaml"

        config = ScribeflowConfig(str(example))

        assert config.get('transcription.chunk_length_s') > 2 * config.get('transcription.stride_length_s')

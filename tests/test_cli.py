"""Tests for the command-line interface."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from soundcurator.cli import cli
from soundcurator.errors import DownloadFailed
from soundcurator.sources.base import DownloadedFile, SoundCandidate


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("soundcurator")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def ffmpeg_present():
    with patch("soundcurator.cli.shutil.which", return_value="/usr/bin/ffmpeg"):
        yield


class FakeSource:
    name = "fake"

    def __init__(self, candidates=(), broken=()):
        self.candidates = list(candidates)
        self.broken = set(broken)
        self.closed = False

    def search(self, query, limit=20):
        return self.candidates[:limit]

    def fetch(self, sound_id, destination_dir):
        if sound_id in self.broken:
            raise DownloadFailed(f"Could not find audio URL for: {sound_id}")
        destination_dir = Path(destination_dir)
        destination_dir.mkdir(parents=True, exist_ok=True)
        path = destination_dir / f"{sound_id}.mp3"
        path.write_bytes(b"ID3")
        return DownloadedFile(path=path, sound_id=sound_id, provider=self.name)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def _candidate(sound_id):
    return SoundCandidate(
        id=sound_id, provider="pixabay", title=f"bell {sound_id}",
        source_url=f"https://pixabay.com/{sound_id}/", audio_url=f"https://cdn/{sound_id}.mp3",
    )


def _invoke(tmp_path, args, env=None):
    runner = CliRunner()
    base = [
        "--log-file", str(tmp_path / "curator.log"),
        "--packs-dir", str(tmp_path / "packs"),
    ]
    return runner.invoke(cli, base + args, env=env)


def _json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


def _fake_audio_segment():
    sound = MagicMock()
    sound.export.side_effect = lambda out, **kwargs: Path(out).write_bytes(b"FORM....AIFF")
    fake = MagicMock()
    fake.from_file.return_value = sound
    return fake


def test_help_lists_commands(tmp_path):
    result = _invoke(tmp_path, ["--help"])
    assert result.exit_code == 0
    for command in ("query", "download", "convert", "create-pack", "curate"):
        assert command in result.output


def test_unknown_command_fails(tmp_path):
    result = _invoke(tmp_path, ["frobnicate"])
    assert result.exit_code != 0


def test_verbose_and_quiet_are_exclusive(tmp_path):
    result = _invoke(tmp_path, ["-v", "-q", "providers"])
    assert result.exit_code != 0
    assert "mutually exclusive" in result.output


def test_providers_lists_builtins(tmp_path):
    result = _invoke(tmp_path, ["providers"])
    assert result.exit_code == 0
    assert result.output.split() == ["freesound", "pixabay"]


def test_unknown_preset_fails(tmp_path):
    result = _invoke(tmp_path, ["--preset", "nonexistent", "providers"])
    assert result.exit_code != 0


def test_query_prints_json_lines(tmp_path):
    source = FakeSource([_candidate("1"), _candidate("2")])
    with patch("soundcurator.sources.get_source", return_value=source):
        result = _invoke(tmp_path, ["-q", "query", "pixabay", "bell"])
    assert result.exit_code == 0
    rows = _json_lines(result.output)
    assert [r["id"] for r in rows] == ["1", "2"]
    assert rows[0]["audio_url"] == "https://cdn/1.mp3"
    assert rows[0]["url"] == "https://pixabay.com/1/"
    assert source.closed


def test_query_limit_option(tmp_path):
    source = FakeSource([_candidate(str(i)) for i in range(5)])
    with patch("soundcurator.sources.get_source", return_value=source):
        result = _invoke(tmp_path, ["-q", "query", "pixabay", "bell", "--limit", "2"])
    assert result.exit_code == 0
    assert len(_json_lines(result.output)) == 2


def test_query_unknown_provider_fails(tmp_path):
    result = _invoke(tmp_path, ["query", "soundcloud", "bell"])
    assert result.exit_code != 0
    assert "Unknown provider" in result.output


def test_query_missing_argument_fails(tmp_path):
    result = _invoke(tmp_path, ["query", "pixabay"])
    assert result.exit_code != 0


def test_query_freesound_without_key_fails(tmp_path):
    env = {"FREESOUND_API_KEY": "", "FREESOUND_OAUTH_TOKEN": ""}
    result = _invoke(tmp_path, ["query", "freesound", "bell"], env=env)
    assert result.exit_code == 1
    assert "FREESOUND_API_KEY" in result.output


def test_download_prints_path(tmp_path):
    source = FakeSource()
    out_dir = tmp_path / "dl"
    with patch("soundcurator.sources.get_source", return_value=source):
        result = _invoke(tmp_path, ["-q", "download", "pixabay", "42", str(out_dir)])
    assert result.exit_code == 0
    assert str(out_dir / "42.mp3") in result.output
    assert (out_dir / "42.mp3").exists()


def test_download_defaults_to_output_dir_env(tmp_path):
    source = FakeSource()
    with patch("soundcurator.sources.get_source", return_value=source):
        result = _invoke(tmp_path, ["-q", "download", "pixabay", "42"], env={"OUTPUT_DIR": str(tmp_path / "env-dl")})
    assert result.exit_code == 0
    assert (tmp_path / "env-dl" / "42.mp3").exists()


def test_download_failure_exits_nonzero(tmp_path):
    source = FakeSource(broken={"42"})
    with patch("soundcurator.sources.get_source", return_value=source):
        result = _invoke(tmp_path, ["download", "pixabay", "42", str(tmp_path / "dl")])
    assert result.exit_code == 1
    assert "Could not find audio URL for: 42" in result.output


def test_convert_requires_ffmpeg(tmp_path):
    (tmp_path / "in").mkdir()
    with patch("soundcurator.cli.shutil.which", return_value=None):
        result = _invoke(tmp_path, ["convert", str(tmp_path / "in"), str(tmp_path / "out")])
    assert result.exit_code != 0
    assert "FFmpeg not found" in result.output


def test_convert_reports_summary(tmp_path, ffmpeg_present):
    src = tmp_path / "in"
    src.mkdir()
    (src / "a.mp3").write_bytes(b"ID3")
    (src / "b.wav").write_bytes(b"RIFF")
    with patch("soundcurator.convert.AudioSegment", _fake_audio_segment()):
        result = _invoke(tmp_path, ["convert", str(src), str(tmp_path / "out")])
    assert result.exit_code == 0
    assert "Convert: 2 succeeded, 0 failed" in result.output
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["a.aiff", "b.aiff"]


def test_create_pack_prints_manifest(tmp_path):
    sounds = tmp_path / "aiff"
    sounds.mkdir()
    (sounds / "stop_chime.aiff").write_bytes(b"FORM")
    (sounds / "alert_bell.aiff").write_bytes(b"FORM")

    result = _invoke(tmp_path, ["-q", "create-pack", "soft-bells", "1.2.0", str(sounds)])
    assert result.exit_code == 0
    manifest = json.loads(result.output[result.output.index("{"):])
    assert manifest["name"] == "Soft Bells"
    assert manifest["version"] == "1.2.0"
    assert manifest["events"]["stop"] == "stop_chime.aiff"
    assert manifest["events"]["permission_prompt"] == "alert_bell.aiff"
    assert (tmp_path / "packs" / "soft-bells" / "pack.json").is_file()


def test_create_pack_missing_sounds_dir_fails(tmp_path):
    result = _invoke(tmp_path, ["create-pack", "p", "1.0.0", str(tmp_path / "missing")])
    assert result.exit_code != 0


def test_curate_end_to_end(tmp_path, ffmpeg_present):
    source = FakeSource([_candidate("1"), _candidate("2")], broken={"1"})
    with patch("soundcurator.sources.get_source", return_value=source), \
            patch("soundcurator.convert.AudioSegment", _fake_audio_segment()):
        result = _invoke(tmp_path, ["-q", "curate", "pixabay", "demo", "bell"])
    assert result.exit_code == 0
    manifest = json.loads(result.output[result.output.index("{"):])
    assert manifest["id"] == "demo"
    assert set(manifest["events"].values()) == {"2.aiff"}
    assert [p.name for p in (tmp_path / "packs" / "demo" / "sounds").iterdir()] == ["2.aiff"]


def test_curate_writes_log_file(tmp_path, ffmpeg_present):
    source = FakeSource([_candidate("7")])
    with patch("soundcurator.sources.get_source", return_value=source), \
            patch("soundcurator.convert.AudioSegment", _fake_audio_segment()):
        result = _invoke(tmp_path, ["curate", "pixabay", "demo", "bell", "--version", "2.0.0"])
    assert result.exit_code == 0
    for handler in logging.getLogger("soundcurator").handlers:
        handler.flush()
    log = (tmp_path / "curator.log").read_text()
    assert "Starting curation: fake -> demo" in log
    assert "[SUCCESS]" in log
    assert json.loads((tmp_path / "packs" / "demo" / "pack.json").read_text())["version"] == "2.0.0"


def test_presets_lists_bundled(tmp_path):
    result = _invoke(tmp_path, ["presets"])
    assert result.exit_code == 0
    assert "default" in result.output.split()
    assert "gentle" in result.output.split()


def test_convert_lists_failed_files(tmp_path, ffmpeg_present):
    from pydub.exceptions import CouldntDecodeError

    src = tmp_path / "in"
    src.mkdir()
    (src / "good.mp3").write_bytes(b"ID3")
    (src / "bad.mp3").write_bytes(b"junk")
    fake = _fake_audio_segment()
    good_sound = fake.from_file.return_value

    def from_file(path):
        if Path(path).name == "bad.mp3":
            raise CouldntDecodeError("bad frame")
        return good_sound

    fake.from_file.side_effect = from_file
    with patch("soundcurator.convert.AudioSegment", fake):
        result = _invoke(tmp_path, ["-q", "convert", str(src), str(tmp_path / "out")])
    assert result.exit_code == 0
    assert "bad.mp3:" in result.output
    assert [p.name for p in (tmp_path / "out").iterdir()] == ["good.aiff"]

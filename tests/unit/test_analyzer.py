"""Unit tests for ffprobe-based audio analysis."""

import json
import subprocess
from unittest.mock import Mock, patch

import pytest

from audiotrackselector.core.analyzer import AudioAnalyzer, parse_streams
from audiotrackselector.models.track import SpatialFormat

FFPROBE_OUTPUT = {
    "streams": [
        {
            "index": 1,
            "codec_name": "truehd",
            "codec_type": "audio",
            "profile": "Dolby TrueHD + Dolby Atmos",
            "channels": 8,
            "disposition": {"default": 1},
            "tags": {"language": "eng", "title": "English Atmos"},
        },
        {
            "index": 2,
            "codec_name": "dts",
            "codec_type": "audio",
            "profile": "DTS-HD MA + DTS:X",
            "channels": 8,
            "bit_rate": "4500000",
            "disposition": {"default": 0},
            "tags": {"language": "eng"},
        },
        {
            "index": 3,
            "codec_name": "dts",
            "codec_type": "audio",
            "profile": "DTS-HD HRA",
            "channels": 6,
            "bit_rate": "2000000",
            "tags": {"language": "ger"},
        },
        {
            "index": 4,
            "codec_name": "aac",
            "codec_type": "audio",
            "profile": "LC",
            "channels": 2,
            "bit_rate": "192000",
            "tags": {"language": "eng", "title": "Commentary"},
        },
    ]
}


class TestParseStreams:
    """Conversion of ffprobe JSON into tracks."""

    def test_parses_all_audio_streams(self):
        """Should parse every audio stream and name DTS-HD profiles."""
        tracks = parse_streams(FFPROBE_OUTPUT)

        assert [t.index for t in tracks] == [1, 2, 3, 4]
        assert [t.codec for t in tracks] == ["truehd", "dts-hd ma", "dts-hd hra", "aac"]

    def test_spatial_formats(self):
        """Should detect Atmos and DTS:X from the stream profile."""
        tracks = parse_streams(FFPROBE_OUTPUT)

        assert tracks[0].spatial_format is SpatialFormat.DOLBY_ATMOS
        assert tracks[1].spatial_format is SpatialFormat.DTSX
        assert tracks[2].spatial_format is SpatialFormat.NONE
        assert tracks[3].spatial_format is SpatialFormat.NONE

    def test_fields(self):
        """Should read default flag, bitrate, title and language."""
        first, second, _, last = parse_streams(FFPROBE_OUTPUT)

        assert first.is_default is True
        assert first.bitrate is None
        assert first.title == "English Atmos"
        assert second.bitrate == 4_500_000
        assert last.channels == 2
        assert last.language == "eng"

    def test_skips_non_audio_and_bad_numbers(self):
        """Should skip non-audio streams and treat bad numbers as unknown."""
        data = {
            "streams": [
                {"index": 0, "codec_name": "h264", "codec_type": "video"},
                {"index": 1, "codec_name": "ac3", "codec_type": "audio", "bit_rate": "N/A"},
            ]
        }

        tracks = parse_streams(data)

        assert len(tracks) == 1
        assert tracks[0].index == 1
        assert tracks[0].bitrate is None

    def test_empty_output(self):
        """Should return no tracks for empty ffprobe output."""
        assert parse_streams({}) == []


class TestAudioAnalyzer:
    """ffprobe invocation."""

    def test_missing_file(self, tmp_path):
        """Should raise FileNotFoundError for missing files."""
        with pytest.raises(FileNotFoundError):
            AudioAnalyzer().analyze(tmp_path / "missing.mkv")

    def test_analyze(self, tmp_path):
        """Should run ffprobe on the file and parse its output."""
        media = tmp_path / "movie.mkv"
        media.touch()

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout=json.dumps(FFPROBE_OUTPUT))
            tracks = AudioAnalyzer().analyze(media)

        assert len(tracks) == 4
        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "ffprobe"
        assert str(media) in cmd

    def test_ffprobe_failure_propagates(self, tmp_path):
        """Should re-raise ffprobe failures."""
        media = tmp_path / "movie.mkv"
        media.touch()

        with patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "ffprobe", stderr="bad file"),
        ):
            with pytest.raises(subprocess.CalledProcessError):
                AudioAnalyzer().analyze(media)

"""Tests for video_player module (mpv launched through subprocess)."""

import subprocess
import threading
from unittest.mock import MagicMock, patch

import pytest

from utils.exceptions import VideoPlaybackError
from utils.video_player import MpvPlayer, check_mpv, is_successful_exit, require_mpv


def fake_process(returncode):
    process = MagicMock()
    process.wait.return_value = returncode
    process.poll.return_value = returncode
    return process


@pytest.fixture
def mpv():
    player = MpvPlayer(binary="mpv")
    yield player
    player.shutdown()


class TestExitStatus:
    """Test exit status interpretation."""

    @pytest.mark.parametrize("code,expected", [(0, True), (-9, True), (1, False), (2, False)])
    def test_successful_exit(self, code, expected):
        """0 and the SIGKILL status count as played."""
        assert is_successful_exit(code) is expected


class TestPlay:
    """Test candidate fallback in the worker."""

    @patch("utils.video_player.subprocess.Popen")
    def test_first_candidate_plays(self, mock_popen, mpv):
        """Should stop at the first candidate that plays."""
        mock_popen.return_value = fake_process(0)

        future = mpv.play("Naruto", 2, ["http://a", "http://b"])

        assert future.result(timeout=5) is True
        assert mock_popen.call_count == 1

    @patch("utils.video_player.subprocess.Popen")
    def test_falls_back_to_next_candidate(self, mock_popen, mpv):
        """Should try the next URL when mpv fails."""
        mock_popen.side_effect = [fake_process(2), fake_process(0)]

        future = mpv.play("Naruto", 2, ["http://a", "http://b"])

        assert future.result(timeout=5) is True
        urls = [c[0][0][-1] for c in mock_popen.call_args_list]
        assert urls == ["http://a", "http://b"]

    @patch("utils.video_player.subprocess.Popen")
    def test_all_candidates_fail(self, mock_popen, mpv):
        """Should resolve False when nothing plays."""
        mock_popen.return_value = fake_process(2)

        future = mpv.play("Naruto", 2, ["http://a", "http://b"])

        assert future.result(timeout=5) is False
        assert mock_popen.call_count == 2

    @patch("utils.video_player.subprocess.Popen")
    def test_killed_player_counts_as_played(self, mock_popen, mpv):
        """SIGKILL exit status is an expected stop."""
        mock_popen.return_value = fake_process(-9)

        assert mpv.play("Naruto", 2, ["http://a"]).result(timeout=5) is True

    @patch("utils.video_player.subprocess.Popen", side_effect=FileNotFoundError("mpv"))
    def test_launch_failure(self, mock_popen, mpv):
        """Should resolve False when mpv cannot be launched."""
        assert mpv.play("Naruto", 2, ["http://a"]).result(timeout=5) is False

    @patch("utils.video_player.subprocess.Popen")
    def test_command_line(self, mock_popen, mpv):
        """Should pass the window title and silence the terminal."""
        mock_popen.return_value = fake_process(0)

        mpv.play("Naruto", 2, ["http://a"]).result(timeout=5)

        args = mock_popen.call_args[0][0]
        assert args == ["mpv", "--title=Naruto | Capitulo 2", "--no-terminal", "http://a"]
        assert mock_popen.call_args[1]["stdout"] is subprocess.DEVNULL

    @patch("utils.video_player.subprocess.Popen")
    def test_verbose_shows_output(self, mock_popen):
        """Verbose mode keeps mpv's terminal output."""
        mock_popen.return_value = fake_process(0)
        player = MpvPlayer(binary="mpv", verbose=True)
        try:
            player.play("Naruto", 2, ["http://a"]).result(timeout=5)
        finally:
            player.shutdown()

        args = mock_popen.call_args[0][0]
        assert "--no-terminal" not in args
        assert mock_popen.call_args[1]["stdout"] is None


class TestStop:
    """Test stopping a running player."""

    @patch("utils.video_player.subprocess.Popen")
    def test_stop_kills_running_process(self, mock_popen, mpv):
        """stop() kills mpv and the future resolves as played."""
        started = threading.Event()
        killed = threading.Event()
        process = MagicMock()
        process.poll.return_value = None

        def wait():
            started.set()
            killed.wait(timeout=5)
            return -9

        process.wait.side_effect = wait
        process.kill.side_effect = killed.set
        mock_popen.return_value = process

        future = mpv.play("Naruto", 2, ["http://a", "http://b"])
        assert started.wait(timeout=5)
        mpv.stop()

        assert future.result(timeout=5) is True
        process.kill.assert_called_once()
        assert mock_popen.call_count == 1

    @patch("utils.video_player.subprocess.Popen")
    def test_stop_while_launching_kills_new_process(self, mock_popen, mpv):
        """A stop() that lands while mpv is starting still kills it."""
        killed = threading.Event()
        process = MagicMock()
        process.poll.return_value = None
        process.wait.side_effect = lambda: -9 if killed.wait(timeout=5) else 0
        process.kill.side_effect = killed.set

        def launch(*args, **kwargs):
            mpv.stop()
            return process

        mock_popen.side_effect = launch

        future = mpv.play("Naruto", 1, ["http://a", "http://b"])

        assert future.result(timeout=5) is True
        assert killed.is_set()
        assert mock_popen.call_count == 1

    def test_stop_without_playback(self, mpv):
        """stop() is harmless when nothing plays."""
        mpv.stop()


class TestAvailability:
    """Test mpv detection."""

    @patch("utils.video_player.shutil.which", return_value="/usr/bin/mpv")
    def test_check_mpv_found(self, mock_which):
        assert check_mpv("mpv") is True

    @patch("utils.video_player.shutil.which", return_value=None)
    def test_require_mpv_missing(self, mock_which):
        """Missing binary raises VideoPlaybackError."""
        with pytest.raises(VideoPlaybackError):
            require_mpv("mpv")

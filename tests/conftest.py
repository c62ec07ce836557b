import subprocess

import pytest

from videotomp3.config import LocalStorage
from videotomp3.notifications import Notifier, Toast


class FakeRunner:
    """
    Stand-in for subprocess.run.

    responses maps a token to (returncode, stdout, stderr) or to an
    exception; the first token found in the command decides the reply.
    """

    def __init__(self, responses=None, default=(1, "", "")):
        self.responses = responses or {}
        self.default = default
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        reply = self.default
        for token, response in self.responses.items():
            if token in cmd:
                reply = response
                break
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(cmd)
        code, stdout, stderr = reply
        return subprocess.CompletedProcess(cmd, code, stdout, stderr)

    def flags(self):
        return [call[1] for call in self.calls]


class FakeProcess:
    def __init__(self, chunks, returncode=0, read_error=None):
        self.chunks = list(chunks)
        self.read_error = read_error
        self.returncode = returncode
        self.pid = 4242
        self.killed = False
        self.waited = False

    @property
    def stdout(self):
        for chunk in self.chunks:
            yield chunk
        if self.read_error is not None:
            raise self.read_error

    def kill(self):
        self.killed = True

    def wait(self, timeout=None):
        self.waited = True
        return self.returncode


class FakePopen:
    def __init__(self, chunks=(), returncode=0, error=None, read_error=None):
        self.chunks = chunks
        self.returncode = returncode
        self.error = error
        self.read_error = read_error
        self.calls = []
        self.processes = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((list(cmd), kwargs))
        if self.error is not None:
            raise self.error
        process = FakeProcess(self.chunks, self.returncode, self.read_error)
        self.processes.append(process)
        return process


class RecordingToast(Toast):
    def __init__(self, *args, **kwargs):
        self.history = []
        super().__init__(*args, **kwargs)

    def _render(self):
        self.history.append((self.visible, self.style, self.title, self.message))


class RecordingNotifier(Notifier):
    def __init__(self):
        self.toasts = []
        self.huds = []
        self.notifications = []

    def show_toast(self, style, title, message=""):
        toast = RecordingToast(style, title, message).show()
        self.toasts.append(toast)
        return toast

    def show_hud(self, message):
        self.huds.append(message)

    def notify(self, title, message, style=None):
        self.notifications.append((title, message, style))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(path=tmp_path / "config.json")


@pytest.fixture
def executable(tmp_path):
    exe = tmp_path / "bin" / "yt-dlp"
    exe.parent.mkdir()
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    return str(exe)


@pytest.fixture
def output_dir(tmp_path):
    out = tmp_path / "music"
    out.mkdir()
    return str(out)

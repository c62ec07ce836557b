import json
import subprocess
import threading

import pytest

from videotomp3.exceptions import MetadataError
from videotomp3.metadata import TitleFetcher, format_title, parse_info_json

from conftest import FakeRunner

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def json_reply(**info):
    return (0, json.dumps(info) + "\n", "")


def test_json_with_uploader():
    runner = FakeRunner({"-j": json_reply(title="T", uploader="U")})
    assert TitleFetcher("yt-dlp", runner).fetch_title(URL) == "U - T"
    assert runner.calls == [["yt-dlp", "-j", "--no-playlist", URL]]


def test_json_without_uploader():
    runner = FakeRunner({"-j": json_reply(title="T")})
    assert TitleFetcher("yt-dlp", runner).fetch_title(URL) == "T"


@pytest.mark.parametrize("info, expected", [
    ({"title": "T", "uploader_id": "@uid", "channel": "C"}, "@uid - T"),
    ({"title": "T", "channel": "C"}, "C - T"),
    ({"title": "T", "uploader": "", "channel": "C"}, "C - T"),
    ({"title": "T", "uploader": "U", "uploader_id": "@uid"}, "U - T"),
])
def test_uploader_field_preference(info, expected):
    runner = FakeRunner({"-j": json_reply(**info)})
    assert TitleFetcher("yt-dlp", runner).fetch_title(URL) == expected


def test_only_first_line_is_parsed():
    stdout = json.dumps({"title": "First"}) + "\n" + json.dumps({"title": "Second"}) + "\n"
    assert parse_info_json(stdout) == ("First", None)


def test_failed_json_query_issues_two_fallback_queries():
    runner = FakeRunner({
        "-j": (1, "", "ERROR: boom"),
        "--get-title": (0, "Fallback Title\n", ""),
        "--get-uploader": (0, "Fallback Uploader\n", ""),
    })
    display = TitleFetcher("yt-dlp", runner).fetch_title(URL)

    assert display == "Fallback Uploader - Fallback Title"
    assert runner.flags() == ["-j", "--get-title", "--get-uploader"]
    assert runner.calls[1] == ["yt-dlp", "--get-title", "--no-playlist", URL]
    assert runner.calls[2] == ["yt-dlp", "--get-uploader", "--no-playlist", URL]


def test_unparsable_json_falls_back():
    runner = FakeRunner({
        "-j": (0, "WARNING: not json\n", ""),
        "--get-title": (0, "T\n", ""),
        "--get-uploader": (1, "", ""),
    })
    assert TitleFetcher("yt-dlp", runner).fetch_title(URL) == "T"
    assert runner.flags() == ["-j", "--get-title", "--get-uploader"]


def test_no_title_anywhere_gives_none():
    runner = FakeRunner()
    assert TitleFetcher("yt-dlp", runner).fetch_title(URL) is None
    assert len(runner.calls) == 3


def test_spawn_errors_are_soft():
    runner = FakeRunner(default=OSError("exec format error"))
    assert TitleFetcher("yt-dlp", runner).fetch_title(URL) is None

    runner = FakeRunner(default=subprocess.TimeoutExpired(["yt-dlp"], 60))
    assert TitleFetcher("yt-dlp", runner).fetch_title(URL) is None


@pytest.mark.parametrize("stdout", ["", "[1, 2]", "{broken"])
def test_parse_info_json_errors(stdout):
    with pytest.raises(MetadataError):
        parse_info_json(stdout)


def test_format_title():
    assert format_title("T", "U") == "U - T"
    assert format_title("T") == "T"
    assert format_title(None, "U") is None


def test_async_fetch_calls_back():
    runner = FakeRunner({"-j": json_reply(title="T", uploader="U")})
    results = []

    TitleFetcher("yt-dlp", runner).fetch_async(URL, results.append).join(timeout=5)

    assert results == ["U - T"]


def test_superseded_fetch_is_discarded():
    release = threading.Event()
    first_url = URL
    second_url = "https://youtu.be/second"

    def slow(cmd):
        release.wait(timeout=5)
        return json_reply(title="Old")

    runner = FakeRunner({first_url: slow, second_url: json_reply(title="New")})
    fetcher = TitleFetcher("yt-dlp", runner)
    results = []

    first = fetcher.fetch_async(first_url, results.append)
    second = fetcher.fetch_async(second_url, results.append)
    second.join(timeout=5)
    release.set()
    first.join(timeout=5)

    assert results == ["New"]

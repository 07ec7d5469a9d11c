"""
tests/test_cli.py

Tests for the command line entry point.
"""

import json

from har_extractor.cli import build_parser, main

from conftest import har_entry_dict


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.inputs == ["-"]
        assert args.layout is None
        assert args.pretty_json is None
        assert args.clean is None

    def test_repeatable_options(self):
        args = build_parser().parse_args(["-u", "a", "-u", "b", "-x", "*.jpg", "--mirror", "-p", "x.har"])
        assert args.url_regex == ["a", "b"]
        assert args.exclude == ["*.jpg"]
        assert args.layout == "mirror"
        assert args.pretty_json is True
        assert args.inputs == ["x.har"]


class TestMain:
    def test_extracts_documents(self, write_har, tmp_path):
        first = write_har([har_entry_dict(text='{"b":1,"a":2}')], name="one.har")
        second = write_har([har_entry_dict(url="http://x/s.js", mime_type="text/javascript", text="1;")], name="two.har")
        out = tmp_path / "out"
        assert main(["-p", "-o", str(out), str(first), str(second)]) == 0
        assert json.loads((out / "one.har.d" / "response-data" / "harx-0001.json").read_text()) == {"a": 2, "b": 1}
        assert (out / "two.har.d" / "response-data" / "harx-0001.js").read_text() == "1;"

    def test_failed_document_does_not_stop_others(self, write_har, tmp_path):
        broken = tmp_path / "broken.har"
        broken.write_text("{", encoding="utf-8")
        good = write_har([har_entry_dict()], name="good.har")
        assert main([str(broken), str(good)]) == 1
        assert (tmp_path / "good.har.d" / "00INDEX.txt").exists()

    def test_non_utf8_document_does_not_stop_others(self, write_har, tmp_path):
        latin = tmp_path / "latin.har"
        latin.write_bytes('{"log": {"entries": [], "comment": "caf\xe9"}}'.encode("latin-1"))
        good = write_har([har_entry_dict()], name="good.har")
        assert main([str(latin), str(good)]) == 1
        assert (tmp_path / "good.har.d" / "00INDEX.txt").exists()

    def test_bad_config(self, write_har):
        good = write_har([har_entry_dict()])
        assert main(["-u", "(", str(good)]) == 2

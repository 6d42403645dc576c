"""Tests for the command-line entry point."""

from __future__ import annotations

import os
from unittest.mock import MagicMock, patch

import pytest

from html2rss import settings
from html2rss.__main__ import EXIT_ERROR, EXIT_OK, main
from html2rss.fetcher import FetchError
from html2rss.pipeline import InvalidURLError, NoArticlesError

URL = "https://example.com/"


def _patch_pipeline(run_result=None, run_error=None):
    pipeline_cls = MagicMock()
    if run_error is not None:
        pipeline_cls.return_value.run.side_effect = run_error
    else:
        pipeline_cls.return_value.run.return_value = run_result
    return patch("html2rss.__main__.Html2Rss", pipeline_cls), pipeline_cls


class TestMain:
    def test_success_writes_feed(self, capsys):
        patcher, _ = _patch_pipeline(run_result=b"<rss/>\n")
        with patcher:
            code = main([URL])
        out, err = capsys.readouterr()
        assert code == EXIT_OK
        assert out == "<rss/>\n"
        assert "error" not in err

    def test_options_reach_config(self):
        patcher, pipeline_cls = _patch_pipeline(run_result=b"")
        env = {settings.ALLOW_PAYWALL_ENV: "example.com"}
        with patcher, patch.dict(os.environ, env):
            main([URL, "-n", "5", "-t", "2500", "--strict-feed"])
        config = pipeline_cls.call_args.args[0]
        assert config.max_pages == 5
        assert config.timeout_ms == 2500
        assert config.strict_feed is True
        assert config.allow_paywall_domains == ("example.com",)
        pipeline_cls.return_value.run.assert_called_once_with(URL)

    def test_defaults(self):
        patcher, pipeline_cls = _patch_pipeline(run_result=b"")
        with patcher:
            main(["--max-pages", "20", URL])
        config = pipeline_cls.call_args.args[0]
        assert config.timeout_ms == settings.DEFAULT_TIMEOUT_MS

    @pytest.mark.parametrize("error", [
        NoArticlesError(),
        InvalidURLError("invalid URL 'x'"),
        FetchError("HTTP 500 fetching https://example.com/", status=500),
        OSError("broken pipe"),
    ])
    def test_errors_exit_4(self, capsys, error):
        patcher, _ = _patch_pipeline(run_error=error)
        with patcher:
            code = main([URL])
        out, err = capsys.readouterr()
        assert code == EXIT_ERROR == 4
        assert out == ""
        assert f"error: {error}" in err

    def test_no_articles_message(self, capsys):
        patcher, _ = _patch_pipeline(run_error=NoArticlesError())
        with patcher:
            main([URL])
        assert "error: no articles found" in capsys.readouterr().err

    @pytest.mark.parametrize("argv", [[], [URL, "--max-pages", "0"], [URL, "-t", "soon"]])
    def test_bad_arguments_exit_2(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 2

"""
Tests for the `python -m browser_e2e` helpers.

Run with: pytest tests/test_cli.py -v
"""
import os
from unittest.mock import patch

import httpx
import pytest

from browser_e2e.__main__ import check_host, list_environments, main
from browser_e2e.config import BrowserStackConfig, E2EConfig


class TestListEnvironments:
    """Tests for the environments command."""

    def test_lists_local_browsers(self, capsys):
        list_environments(E2EConfig(browser_host_url="http://localhost:3000", browsers=["chrome"]))

        out = capsys.readouterr().out
        assert "Host: http://localhost:3000" in out
        assert "Environments (local):" in out
        assert "chrome" in out
        assert "firefox" not in out

    def test_main_environments(self, capsys):
        with patch.dict(os.environ, {"E2E_BROWSER_HOST": "http://localhost:3000"}, clear=True):
            assert main(["environments"]) is True
        assert "Environments (local):" in capsys.readouterr().out

    def test_main_reports_config_errors(self, capsys):
        with patch.dict(os.environ, {"USE_BROWSERSTACK": "true"}, clear=True):
            assert main(["environments"]) is False
        assert "BROWSERSTACK_AUTH" in capsys.readouterr().out

    def test_main_honors_debug_env(self):
        environ = {"E2E_BROWSER_HOST": "http://localhost:3000", "E2E_DEBUG": "1"}
        with patch.dict(os.environ, environ, clear=True), \
                patch("browser_e2e.__main__.setup_logging") as setup_logging:
            assert main(["environments"]) is True
        setup_logging.assert_called_once_with(debug=True)


class TestCheckHost:
    """Tests for the host preflight check."""

    @pytest.mark.asyncio
    async def test_host_answers(self, capsys):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200)

        ok = await check_host(
            E2EConfig(browser_host_url="http://localhost:5757/"),
            transport=httpx.MockTransport(handler),
        )

        assert ok
        assert seen == ["http://localhost:5757/"]
        assert "answered 200" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_server_error(self):
        ok = await check_host(
            E2EConfig(browser_host_url="http://localhost:5757/"),
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        assert not ok

    @pytest.mark.asyncio
    async def test_unreachable(self, capsys):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        ok = await check_host(
            E2EConfig(browser_host_url="http://localhost:5757/"),
            transport=httpx.MockTransport(handler),
        )

        assert not ok
        assert "is not reachable" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_checks_localhost_behind_tunnel(self):
        seen = []

        def handler(request):
            seen.append(request.url.host)
            return httpx.Response(200)

        config = E2EConfig(
            browser_host_url="http://bs-local.com:5757/",
            browserstack=BrowserStackConfig(enabled=True, user="u", key="k", local_enabled=True),
        )
        await check_host(config, transport=httpx.MockTransport(handler))

        assert seen == ["localhost"]

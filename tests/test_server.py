"""
Tests for app assembly, HTTPS redirection and the entry point.
"""
import sys

import pytest
from fastapi.testclient import TestClient

from collector_app import main
from collector_app.exceptions import ConfigurationError
from collector_app.server import build_servers, create_app, create_redirect_app, https_redirect_url


class TestHTTPSRedirect:
    """Test the plain-port redirect"""

    @pytest.mark.parametrize("host, path, query, port, expected", [
        ("example.com", "/", "", 443, "https://example.com/"),
        ("example.com:80", "/a/b", "x=1&y=2", 443, "https://example.com/a/b?x=1&y=2"),
        ("example.com:8000", "/a", "", 8443, "https://example.com:8443/a"),
        ("[::1]:8000", "/", "q=1", 8443, "https://[::1]:8443/?q=1"),
    ])
    def test_redirect_url(self, host, path, query, port, expected):
        """Test the target keeps path and query and swaps the port"""
        assert https_redirect_url(host, path, query, port) == expected

    def test_redirect_app(self, settings):
        """Test every request on the plain port gets a 307 to HTTPS"""
        settings = settings.model_copy(update={"https_port": 8443})

        with TestClient(create_redirect_app(settings)) as client:
            response = client.post("/page?ref=home", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "https://testserver:8443/page?ref=home"


class TestBuildServers:
    """Test uvicorn server configuration per mode"""

    def test_plain_mode(self, settings, storage):
        """Test one plain server on the listen port"""
        servers = build_servers(settings, create_app(settings, storage))

        assert len(servers) == 1
        assert servers[0].config.port == 8000

    def test_tls_requires_certificates(self, settings, storage, tmp_path):
        """Test TLS without certificate files is a configuration error"""
        settings = settings.model_copy(update={"tls_enabled": True, "certs_dir": str(tmp_path)})

        with pytest.raises(ConfigurationError):
            build_servers(settings, create_app(settings, storage))

    def test_tls_mode(self, settings, storage, tmp_path):
        """Test TLS mode runs a redirect server and an HTTPS server"""
        settings = settings.model_copy(update={
            "tls_enabled": True,
            "certs_dir": str(tmp_path),
            "domain": "hits.example.com",
        })
        (tmp_path / "hits.example.com.crt").write_text("cert")
        (tmp_path / "hits.example.com.key").write_text("key")

        redirect, secure = build_servers(settings, create_app(settings, storage))

        assert redirect.config.port == 80
        assert secure.config.port == 443
        assert secure.config.ssl_certfile == str(tmp_path / "hits.example.com.crt")
        assert secure.config.ssl_keyfile == str(tmp_path / "hits.example.com.key")


class TestMain:
    """Test fatal startup errors become an exit code"""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self, monkeypatch):
        # Keep pytest's log capture intact
        monkeypatch.setattr(main, "setup_logging", lambda settings: None)

    def test_missing_config_file(self, tmp_path):
        """Test a missing config file exits with 1"""
        assert main.main([str(tmp_path / "missing.json")]) == 1

    def test_unreachable_database(self, tmp_path, monkeypatch):
        """Test a database that can't be reached exits with 1"""
        monkeypatch.delenv("CONFIG_FILE", raising=False)
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'no' / 'such' / 'hits.db'}")

        assert main.main([]) == 1

    def test_serves_after_startup(self, tmp_path, monkeypatch):
        """Test a good startup hands the app to serve()"""
        monkeypatch.delenv("CONFIG_FILE", raising=False)
        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'hits.db'}")
        served = []
        monkeypatch.setattr(main, "serve", lambda settings, app: served.append(app))

        assert main.main([]) == 0
        assert len(served) == 1
        assert served[0].state.hit_storage is not None
        served[0].state.hit_storage.close()

    def test_config_file_from_command_line(self, tmp_path, monkeypatch):
        """Test the first command-line argument is read as the config file"""
        monkeypatch.setattr(sys, "argv", ["hit-collector", str(tmp_path / "missing.json")])

        assert main.main() == 1

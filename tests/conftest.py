"""Shared test fixtures for the modcheck test suite."""

from __future__ import annotations

import base64
import hashlib
import io
import stat
import zipfile

import httpx
import pytest

from modcheck import config as config_module
from modcheck.config import ModCheckConfig
from modcheck.fetcher import ArchiveFetcher


def build_zip(entries: dict[str, bytes | None], symlinks: dict[str, str] | None = None) -> bytes:
    """Build a ZIP in memory. A ``None`` value (or a trailing slash) makes a directory."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            if data is None and not name.endswith("/"):
                name += "/"
            zf.writestr(name, data or b"")
        for name, target in (symlinks or {}).items():
            info = zipfile.ZipInfo(name)
            info.external_attr = (stat.S_IFLNK | 0o777) << 16
            zf.writestr(info, target)
    return buf.getvalue()


def expected_h1(files: dict[str, bytes], prefix: str) -> str:
    """Recompute an h1 digest from a {relative path: content} mapping."""
    lines = []
    for rel in sorted(files, key=lambda r: f"{prefix}/{r}"):
        lines.append(f"{hashlib.sha256(files[rel]).hexdigest()}  {prefix}/{rel}\n")
    summary = hashlib.sha256("".join(lines).encode()).digest()
    return "h1:" + base64.b64encode(summary).decode()


WIDGET_FILES = {
    "go.mod": b"module github.com/acme/widget\n\ngo 1.21\n",
    "widget.go": b"package widget\n\nfunc Name() string { return \"widget\" }\n",
    "internal/util/util.go": b"package util\n",
    "README.md": b"# widget\n",
}


def widget_archive(files: dict[str, bytes] = WIDGET_FILES, root: str = "widget-1.0.0") -> bytes:
    entries: dict[str, bytes | None] = {f"{root}/": None}
    for rel, data in files.items():
        entries[f"{root}/{rel}"] = data
    return build_zip(entries)


@pytest.fixture
def widget_zip() -> bytes:
    return widget_archive()


@pytest.fixture
def widget_digest() -> str:
    return expected_h1(WIDGET_FILES, "github.com/acme/widget@v1.0.0")


@pytest.fixture
def make_fetcher():
    """Build an ArchiveFetcher whose client is served by ``routes`` (url -> response)."""
    clients = []

    def _make(routes: dict, **kwargs) -> ArchiveFetcher:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(str(request.url))
            if route is None:
                return httpx.Response(404, request=request)
            if callable(route):
                return route(request)
            if isinstance(route, httpx.Response):
                return route
            return httpx.Response(200, content=route)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return ArchiveFetcher(client=client, **kwargs)

    yield _make
    for client in clients:
        client.close()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the global config at a temporary data and cache directory."""
    cfg = ModCheckConfig(data_dir=tmp_path / "data", cache_dir=tmp_path / "cache")
    monkeypatch.setattr(config_module, "_config", cfg)
    return cfg


DAMAGED_KINDS = ("unsupported_method", "corrupt_deflate", "bad_utf8_name")


def damaged_archive(kind: str, root: str = "root") -> bytes:
    """A ZIP with valid framing whose single entry zipfile cannot unpack."""
    name = f"{root}/a.txt".encode()
    data = bytearray(build_zip({f"{root}/a.txt": b"hello world\n" * 64}))
    local = data.find(b"PK\x03\x04")
    central = data.rfind(b"PK\x01\x02")

    if kind == "unsupported_method":
        # compression method 99 (AES) in both headers
        data[local + 8:local + 10] = (99).to_bytes(2, "little")
        data[central + 10:central + 12] = (99).to_bytes(2, "little")
    elif kind == "corrupt_deflate":
        name_len = int.from_bytes(data[local + 26:local + 28], "little")
        extra_len = int.from_bytes(data[local + 28:local + 30], "little")
        # first deflate byte with BTYPE=11, which is reserved
        data[local + 30 + name_len + extra_len] = 0xFF
    elif kind == "bad_utf8_name":
        bad = name[:-5] + b"\xff.txt"
        data = bytearray(bytes(data).replace(name, bad))
        central = data.rfind(b"PK\x01\x02")
        # general purpose flag bit 11: name is UTF-8
        data[central + 9] |= 0x08
    else:
        raise ValueError(kind)
    return bytes(data)

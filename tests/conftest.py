"""Shared fixtures: configuration, a quiet reporter and a fake content host."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from bestdori_webgal.config import Config, load_config
from bestdori_webgal.platforms.bestdori.naming import AssetNaming
from bestdori_webgal.report import Event, Reporter

ROOT = "https://bestdori.com/assets/jp/"


@pytest.fixture
def config() -> Config:
    """Bundled configuration with fast, single-retry fetching."""
    return load_config(max_workers=4, timeout=5.0, retries=1)


@pytest.fixture
def naming(config: Config) -> AssetNaming:
    return AssetNaming(config.urls)


@pytest.fixture
def events() -> list[Event]:
    return []


@pytest.fixture
def reporter(events: list[Event]) -> Reporter:
    """Reporter that records events instead of printing them."""
    return Reporter(events.append)


def build_data(
    costume: str,
    motions: tuple[str, ...] = ("idle01", "smile01"),
    expressions: tuple[str, ...] = ("default", "smile"),
) -> dict[str, Any]:
    """A buildData.asset document for one costume."""
    bundle = f"live2d/chara/{costume}"
    return {
        "Base": {
            "model": {"bundleName": bundle, "fileName": "model.moc"},
            "physics": {"bundleName": bundle, "fileName": "physics.json"},
            "textures": [{"bundleName": bundle, "fileName": "texture_00.png"}],
            "motions": [{"bundleName": f"{bundle}/motions", "fileName": f"{m}.mtn.bytes"} for m in motions],
            "expressions": [
                {"bundleName": f"{bundle}/expressions", "fileName": f"{e}.exp.json"} for e in expressions
            ],
        }
    }


class FakeHost:
    """Serves canned bodies by URL and records every request.

    Unknown URLs answer 404; URLs listed in ``failing`` answer with the given
    status every time.
    """

    def __init__(self) -> None:
        self.bodies: dict[str, bytes] = {}
        self.failing: dict[str, int] = {}
        self.requests: list[str] = []
        self.on_request: Callable[[str], None] | None = None

    def add(self, url: str, body: bytes | str | dict[str, Any]) -> None:
        if isinstance(body, dict):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.bodies[url] = body

    def add_costume(self, costume: str, **kwargs: Any) -> None:
        """Serve a costume's manifest and every file it lists."""
        document = build_data(costume, **kwargs)
        self.add(f"{ROOT}live2d/chara/{costume}_rip/buildData.asset", document)
        base = document["Base"]
        for entry in [base["model"], base["physics"], *base["textures"], *base["motions"], *base["expressions"]]:
            self.add(f"{ROOT}{entry['bundleName']}_rip/{entry['fileName']}", f"{costume}:{entry['fileName']}")

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if self.on_request is not None:
            self.on_request(url)
        if url in self.failing:
            return httpx.Response(self.failing[url])
        if url in self.bodies:
            return httpx.Response(200, content=self.bodies[url])
        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()

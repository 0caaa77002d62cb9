import os
import uuid
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ.setdefault("APP_KEY", "test-app-key-" + "x" * 32)

from app.core import db as db_module  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.entrypoint.config import BootstrapConfig  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import User  # noqa: E402

db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """Fresh database without an HTTP client."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client():
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_admin():
    """
    Factory fixture to create admin users directly via ORM for privileged endpoints.
    """

    async def _create_admin(password: str = "AdminPass!23") -> tuple[User, str]:
        user = await User.create(
            username=f"admin_{uuid.uuid4().hex[:6]}",
            email=f"admin_{uuid.uuid4().hex[:6]}@example.com",
            password_hash=hash_password(password),
            role="admin",
        )
        return user, password

    return _create_admin


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create regular users directly.
    """

    async def _create_user(password: str = "UserPass!23") -> tuple[User, str]:
        user = await User.create(
            username=f"user_{uuid.uuid4().hex[:6]}",
            email=f"{uuid.uuid4().hex[:6]}@example.com",
            password_hash=hash_password(password),
            role="user",
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(username: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/login",
            json={"username": username, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["api_token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


# ---------------------------------------------------------------------------
# Entrypoint helpers
# ---------------------------------------------------------------------------
class FakeRunner:
    """
    Stands in for subprocess execution.

    `codes` maps a command-argv prefix (tuple) to the exit code it returns;
    anything unmatched exits 0. Every call is recorded in `calls`.
    """

    def __init__(self, codes: dict | None = None):
        self.codes = codes or {}
        self.calls: list[list[str]] = []

    async def __call__(self, argv, cwd=None) -> int:
        argv = list(argv)
        self.calls.append(argv)
        for prefix, code in self.codes.items():
            if tuple(argv[-len(prefix):]) == tuple(prefix):
                return code
        return 0


class FakeExec:
    """Records the exec call instead of replacing the test process."""

    def __init__(self, error: OSError | None = None):
        self.error = error
        self.calls: list[tuple[str, list[str]]] = []

    def __call__(self, file, argv):
        self.calls.append((file, list(argv)))
        if self.error:
            raise self.error


@pytest.fixture
def make_config(tmp_path: Path):
    """
    Build a BootstrapConfig rooted in tmp_path.

    `env_file` writes a .env first (pass None for no file); the rest are
    environment variables.
    """

    def _make(env_file: str | None = "APP_KEY=base64:" + "A" * 43 + "=\n", **environ) -> BootstrapConfig:
        if env_file is not None:
            (tmp_path / ".env").write_text(env_file, encoding="utf-8")
        values = {
            "SEED_COMMAND": "seed",
            "MIGRATE_COMMAND": "migrate",
            "CACHE_COMMAND": "cache",
        }
        values.update({k: str(v) for k, v in environ.items()})
        return BootstrapConfig.from_env(values, base_dir=tmp_path)

    return _make


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def fake_exec():
    return FakeExec()


@pytest.fixture
def make_runner():
    """FakeRunner factory: make_runner({("build", "route"): 1})."""
    return FakeRunner

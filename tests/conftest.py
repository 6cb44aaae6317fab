# tests/conftest.py
import os

# Settings e o app Celery são carregados no import; o ambiente precisa existir antes
os.environ.update(
    {
        "PROJECT_NAME": "Lavanderia Test",
        "LOG_LEVEL": "WARNING",
        "MONGODB_URI": "mongodb://localhost:27017/lavanderia_test",
        "DEFAULT_ORG_ID": "org-1",
        "TIMEZONE": "America/Mexico_City",
        "STORAGE_URL": "https://storage.test",
        "MESSAGE_PACING_SECONDS": "0",
        "MESSAGE_MAX_CONCURRENCY": "1",
        "CELERY_BROKER_URL": "memory://",
        "CELERY_RESULT_BACKEND": "cache+memory://",
        "META_ACCESS_TOKEN": "",
        "META_PHONE_NUMBER_ID": "",
        "IDENTITY_JWT_SECRET": "",
    }
)

from typing import AsyncGenerator, Dict, List, Optional, Set, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from mongomock_motor import AsyncMongoMockClient  # noqa: E402

from lavanderia.core.config import get_settings  # noqa: E402
from lavanderia.core.database import get_database  # noqa: E402
from lavanderia.core.exceptions import Unauthenticated  # noqa: E402
from lavanderia.core.rate_limit import limiter  # noqa: E402
from lavanderia.services.identity_service import (  # noqa: E402
    AuthenticatedUser,
    SignInResult,
    get_identity_service,
)
from lavanderia.services.storage_service import get_storage_service  # noqa: E402
from lavanderia.services.whatsapp_service import get_whatsapp_service  # noqa: E402

ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"
MEMBER = "user-1"
OUTSIDER = "user-2"


class FakeIdentity:
    """Tokens no formato 'token-<user_id>'; senha válida é sempre 'secret'."""

    async def verify(self, token: str) -> AuthenticatedUser:
        if not token.startswith("token-"):
            raise Unauthenticated("Invalid token")
        user_id = token[len("token-"):]
        return AuthenticatedUser(user_id=user_id, email=f"{user_id}@lavanderia.test")

    async def sign_in(self, email: str, password: str) -> SignInResult:
        if password != "secret":
            raise Unauthenticated("Invalid login credentials")
        user_id = email.split("@")[0]
        return SignInResult(access_token=f"token-{user_id}", user={"id": user_id, "email": email})


class FakeStorage:
    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.removed: List[str] = []

    def public_url(self, path: str) -> str:
        return f"https://storage.test/storage/v1/object/public/evidencias/{path}"

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        self.files[path] = content
        return self.public_url(path)

    async def remove(self, path: str) -> bool:
        self.removed.append(path)
        return self.files.pop(path, None) is not None


class FakeSender:
    def __init__(self, failing: Optional[Set[str]] = None):
        self.failing = failing or set()
        self.sent: List[Tuple[str, str]] = []

    async def send(self, to: str, body: str) -> bool:
        self.sent.append((to, body))
        return to not in self.failing


@pytest.fixture
def settings():
    return get_settings()


@pytest_asyncio.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client["lavanderia_test"]
    await database["organizacion_miembros"].insert_many(
        [
            {"org_id": ORG_ID, "user_id": MEMBER, "rol": "admin"},
            {"org_id": OTHER_ORG_ID, "user_id": OUTSIDER, "rol": "admin"},
        ]
    )
    yield database


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def app(db, storage, sender):
    from lavanderia.main import create_app

    application = create_app()
    application.dependency_overrides[get_database] = lambda: db
    application.dependency_overrides[get_identity_service] = lambda: FakeIdentity()
    application.dependency_overrides[get_storage_service] = lambda: storage
    application.dependency_overrides[get_whatsapp_service] = lambda: sender
    limiter.reset()
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


@pytest_asyncio.fixture
async def authenticated_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Cliente autenticado como membro de org-1 (DEFAULT_ORG_ID)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
        headers={"Authorization": f"Bearer token-{MEMBER}"},
    ) as c:
        yield c

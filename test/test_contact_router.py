"""
API integration tests for contact router.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from contactbook.main import app
from contactbook.shared.database import engine_options, get_db_session


@pytest.fixture
def contact_payload() -> dict[str, Any]:
    return {
        "firstName": "Ann",
        "lastName": "Lee",
        "email": "a@x.com",
        "phone": "123456789",
    }


class TestCreateContactEndpoint:
    """Tests for POST /api/contacts."""

    @pytest.mark.asyncio
    async def test_create_contact(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        response = await async_client.post("/api/contacts", json=contact_payload)

        assert response.status_code == 201
        data = response.json()
        assert isinstance(data["id"], int)
        assert data["firstName"] == "Ann"
        assert data["lastName"] == "Lee"
        assert data["email"] == "a@x.com"
        assert data["phone"] == "123456789"
        assert data["additionalInfo"] is None
        assert data["verified"] is False
        assert "createdAt" in data
        assert "updatedAt" in data

    @pytest.mark.asyncio
    async def test_create_accepts_attribute_names(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/contacts",
            json={
                "first_name": "Ann",
                "last_name": "Lee",
                "email": "a@x.com",
                "phone": "123456789",
                "additional_info": "Neighbour",
            },
        )

        assert response.status_code == 201
        assert response.json()["additionalInfo"] == "Neighbour"

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/contacts", json={})

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "VALIDATION_ERROR"
        assert [e["field"] for e in detail["errors"]] == [
            "firstName",
            "lastName",
            "email",
            "phone",
        ]
        assert {e["kind"] for e in detail["errors"]} == {"required"}

    @pytest.mark.asyncio
    async def test_create_invalid_fields(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        contact_payload["email"] = "not-an-email"
        contact_payload["additionalInfo"] = "x" * 5001

        response = await async_client.post("/api/contacts", json=contact_payload)

        assert response.status_code == 400
        errors = response.json()["detail"]["errors"]
        assert [(e["field"], e["kind"]) for e in errors] == [
            ("email", "format"),
            ("additionalInfo", "length"),
        ]
        assert errors[0]["message"] == "Please enter a valid email address"

    @pytest.mark.asyncio
    async def test_create_duplicate_email(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        first = await async_client.post("/api/contacts", json=contact_payload)
        assert first.status_code == 201

        response = await async_client.post(
            "/api/contacts",
            json={**contact_payload, "phone": "987654321"},
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "UNIQUENESS_VIOLATION"
        assert detail["field"] == "email"
        assert detail["message"] == "This email is already registered"

        listing = await async_client.get("/api/contacts")
        assert len(listing.json()) == 1

    @pytest.mark.asyncio
    async def test_create_wrong_json_type(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        contact_payload["firstName"] = 123

        response = await async_client.post("/api/contacts", json=contact_payload)

        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "REQUEST_VALIDATION_ERROR"


class TestListContactsEndpoint:
    """Tests for GET /api/contacts."""

    @pytest.mark.asyncio
    async def test_list_empty(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/contacts")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_in_creation_order(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        await async_client.post("/api/contacts", json=contact_payload)
        await async_client.post(
            "/api/contacts",
            json={**contact_payload, "firstName": "Bob", "email": "b@x.com", "phone": "987654321"},
        )

        response = await async_client.get("/api/contacts")

        assert response.status_code == 200
        assert [c["firstName"] for c in response.json()] == ["Ann", "Bob"]


class TestUpdateContactEndpoint:
    """Tests for PUT /api/contacts/{id}."""

    @pytest.mark.asyncio
    async def test_update_partial(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        created = (await async_client.post("/api/contacts", json=contact_payload)).json()

        response = await async_client.put(
            f"/api/contacts/{created['id']}",
            json={"lastName": "Park", "verified": True},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["lastName"] == "Park"
        assert data["verified"] is True
        assert data["firstName"] == "Ann"
        assert data["email"] == "a@x.com"

    @pytest.mark.asyncio
    async def test_update_empty_body(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        created = (await async_client.post("/api/contacts", json=contact_payload)).json()

        response = await async_client.put(f"/api/contacts/{created['id']}", json={})

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_update_invalid_phone_keeps_stored_value(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        created = (await async_client.post("/api/contacts", json=contact_payload)).json()

        response = await async_client.put(
            f"/api/contacts/{created['id']}",
            json={"phone": "abc"},
        )

        assert response.status_code == 400
        errors = response.json()["detail"]["errors"]
        assert [(e["field"], e["kind"]) for e in errors] == [("phone", "format")]

        [stored] = (await async_client.get("/api/contacts")).json()
        assert stored["phone"] == "123456789"

    @pytest.mark.asyncio
    async def test_update_not_found(self, async_client: AsyncClient) -> None:
        response = await async_client.put("/api/contacts/999", json={"lastName": "Park"})

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["code"] == "CONTACT_NOT_FOUND"
        assert detail["message"] == "Contact not found"

    @pytest.mark.asyncio
    async def test_update_duplicate_phone(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        await async_client.post("/api/contacts", json=contact_payload)
        other = (
            await async_client.post(
                "/api/contacts",
                json={**contact_payload, "email": "b@x.com", "phone": "987654321"},
            )
        ).json()

        response = await async_client.put(
            f"/api/contacts/{other['id']}",
            json={"phone": "123456789"},
        )

        assert response.status_code == 409
        assert response.json()["detail"]["field"] == "phone"


class TestDeleteContactEndpoint:
    """Tests for DELETE /api/contacts/{id}."""

    @pytest.mark.asyncio
    async def test_delete_twice(
        self,
        async_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        created = (await async_client.post("/api/contacts", json=contact_payload)).json()

        response = await async_client.delete(f"/api/contacts/{created['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Contact deleted"}

        again = await async_client.delete(f"/api/contacts/{created['id']}")
        assert again.status_code == 404

        assert (await async_client.get("/api/contacts")).json() == []


class TestAppWiring:
    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_correlation_id_echoed(self, async_client: AsyncClient) -> None:
        response = await async_client.get(
            "/api/contacts",
            headers={"X-Request-ID": "req-123"},
        )

        assert response.headers["X-Correlation-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_correlation_id_generated(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.headers["X-Correlation-ID"]


class TestContactIdPath:
    """Path ids that are not integers."""

    @pytest.mark.asyncio
    async def test_update_non_integer_id(self, async_client: AsyncClient) -> None:
        response = await async_client.put("/api/contacts/abc", json={"lastName": "Park"})

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["code"] == "CONTACT_NOT_FOUND"
        assert detail["message"] == "Contact not found"

    @pytest.mark.asyncio
    async def test_delete_non_integer_id(self, async_client: AsyncClient) -> None:
        response = await async_client.delete("/api/contacts/abc")

        assert response.status_code == 404
        assert response.json()["detail"]["contact_id"] == "abc"


class TestStoreUnavailableEndpoint:
    """Storage failures map to 503."""

    @pytest_asyncio.fixture
    async def unavailable_client(self) -> AsyncGenerator[AsyncClient, None]:
        # engine with no contacts table
        url = "sqlite+aiosqlite:///:memory:"
        engine = create_async_engine(url, **engine_options(url))

        async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
            async with AsyncSession(engine) as session:
                yield session

        app.dependency_overrides[get_db_session] = override_get_db_session

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

        app.dependency_overrides.clear()
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_list_when_store_unavailable(self, unavailable_client: AsyncClient) -> None:
        response = await unavailable_client.get("/api/contacts")

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail["code"] == "STORE_UNAVAILABLE"
        assert detail["message"] == "Contact store unavailable"

    @pytest.mark.asyncio
    async def test_create_when_store_unavailable(
        self,
        unavailable_client: AsyncClient,
        contact_payload: dict[str, Any],
    ) -> None:
        response = await unavailable_client.post("/api/contacts", json=contact_payload)

        assert response.status_code == 503
        assert response.json()["detail"]["code"] == "STORE_UNAVAILABLE"

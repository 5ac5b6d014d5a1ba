"""
HTTP-level tests for the API routes.

Services are mocked; these tests cover status codes, auth and role checks,
request validation and response shapes.
"""

from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from agentsport.api.main import app
from agentsport.database.db import get_db_session
from agentsport.database.models import ClubCatalog
from agentsport.services import agent_service, auth_service, user_service
from agentsport.services.club_catalog_service import ClubDuplicateError
from agentsport.services.representation import InvalidTransitionError
from agentsport.services.representation_service import (
    AgentNotFoundError,
    InvitationNotFoundError,
    PlayerNotFoundError,
)
from agentsport.services.user_service import UserAlreadyExistsError


# ============================================================================
# Fixtures and helpers
# ============================================================================


@pytest.fixture(autouse=True)
def fake_db_session():
    """Routes never reach a real database in these tests."""
    session = AsyncMock()

    async def _override():
        yield session

    app.dependency_overrides[get_db_session] = _override
    yield session
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture
def client():
    return TestClient(app)


def _fake_agent(agent_id=5, user_id=1):
    return SimpleNamespace(
        id=agent_id,
        user_id=user_id,
        agency_name="Pro Sports",
        slug="pro-sports",
        logo=None,
        phone=None,
        location="Buenos Aires",
        bio=None,
        website=None,
        plan="free",
        status="active",
    )


def _fake_player(player_id=10, **overrides):
    fields = dict(
        id=player_id,
        first_name="Julian",
        last_name="Alvarez",
        position="Forward",
        birth_date=date(2000, 1, 31),
        nationality=None,
        foot=None,
        height=None,
        weight=None,
        avatar_url=None,
        video_url=None,
        status="signed",
        representation_status="REPRESENTED",
        agent_id=5,
        user_id=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_client_with_auth(monkeypatch, role="agent", user_id=1, agent=None):
    """Authenticated client for a user with ``role``."""

    def fake_verify_token(token):
        return {"user_id": user_id, "sub": str(user_id), "role": role}

    async def fake_get_user_by_id(session, uid):
        return {"id": user_id, "email": f"{role}@example.com", "role": role}

    async def fake_get_agent_by_user_id(session, uid):
        return agent

    monkeypatch.setattr(auth_service, "verify_token", fake_verify_token, raising=True)
    monkeypatch.setattr(user_service, "get_user_by_id", fake_get_user_by_id, raising=True)
    monkeypatch.setattr(agent_service, "get_agent_by_user_id", fake_get_agent_by_user_id, raising=True)

    return TestClient(app), {"Authorization": "Bearer dummy"}


# ============================================================================
# Auth
# ============================================================================


class TestAuthEndpoints:
    @patch("agentsport.services.account_service.issue_tokens", new_callable=AsyncMock)
    @patch("agentsport.services.account_service.register_user", new_callable=AsyncMock)
    def test_register_player_with_invitation(self, mock_register, mock_tokens, client):
        mock_register.return_value = {
            "user": {"id": 3, "email": "enzo@example.com", "role": "player"},
            "profile": {"player_id": 8},
            "representation_status": "PENDING_INVITATION",
        }
        mock_tokens.return_value = {
            "access_token": "access",
            "refresh_token": "refresh",
            "token_type": "bearer",
        }

        response = client.post(
            "/api/auth/register",
            json={
                "email": "enzo@example.com",
                "password": "secret123",
                "role": "player",
                "firstName": "Enzo",
                "representationMode": "REPRESENTED",
                "agentData": {"email": "agent@new.com", "name": "New Agent"},
            },
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["access_token"] == "access"
        assert data["user"]["role"] == "player"
        assert data["representation_status"] == "PENDING_INVITATION"
        kwargs = mock_register.call_args.kwargs
        assert kwargs["first_name"] == "Enzo"
        assert kwargs["agent_data"] == {"id": None, "email": "agent@new.com", "name": "New Agent"}

    def test_register_represented_requires_agent_data(self, client):
        response = client.post(
            "/api/auth/register",
            json={
                "email": "p@example.com",
                "password": "secret123",
                "role": "player",
                "representationMode": "REPRESENTED",
            },
        )
        assert response.status_code == 422

    def test_register_short_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "p@example.com", "password": "abc", "role": "agent"},
        )
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "error,status_code",
        [
            (UserAlreadyExistsError("taken"), 409),
            (AgentNotFoundError("Agent 9 not found"), 404),
            (PermissionError("nope"), 403),
            (ValueError("bad"), 400),
            (RuntimeError("boom"), 500),
        ],
    )
    def test_register_error_mapping(self, client, error, status_code):
        with patch(
            "agentsport.services.account_service.register_user",
            new_callable=AsyncMock,
            side_effect=error,
        ):
            response = client.post(
                "/api/auth/register",
                json={"email": "a@example.com", "password": "secret123", "role": "agent"},
            )
        assert response.status_code == status_code

    @patch("agentsport.services.account_service.authenticate", new_callable=AsyncMock)
    def test_login_invalid_credentials(self, mock_authenticate, client):
        mock_authenticate.return_value = None

        response = client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Email or password is incorrect"

    @patch("agentsport.services.account_service.issue_tokens", new_callable=AsyncMock)
    @patch("agentsport.services.account_service.authenticate", new_callable=AsyncMock)
    def test_login_success(self, mock_authenticate, mock_tokens, client):
        mock_authenticate.return_value = {"id": 1, "email": "a@example.com", "role": "agent"}
        mock_tokens.return_value = {"access_token": "a", "refresh_token": "r", "token_type": "bearer"}

        response = client.post("/api/auth/login", json={"email": "a@example.com", "password": "x"})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "a@example.com"

    def test_profile_requires_token(self, client):
        response = client.get("/api/auth/profile")
        assert response.status_code in (401, 403)

    def test_profile_invalid_token(self, client):
        response = client.get("/api/auth/profile", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    @patch("agentsport.services.user_service.get_role_profile", new_callable=AsyncMock)
    def test_profile(self, mock_profile, monkeypatch):
        mock_profile.return_value = {"agent_id": 5, "agent_slug": "pro-sports"}
        client, headers = make_client_with_auth(monkeypatch, role="agent")

        response = client.get("/api/auth/profile", headers=headers)

        assert response.status_code == 200
        assert response.json() == {
            "id": 1,
            "email": "agent@example.com",
            "role": "agent",
            "agent_id": 5,
            "agent_slug": "pro-sports",
        }


# ============================================================================
# Clubs
# ============================================================================


class TestClubEndpoints:
    @patch("agentsport.services.club_catalog_service.search_catalog", new_callable=AsyncMock)
    def test_search_short_query_skips_lookup(self, mock_search, client):
        response = client.get("/api/clubs/search?q=r")

        assert response.status_code == 200
        assert response.json() == []
        mock_search.assert_not_awaited()

    @patch("agentsport.services.club_catalog_service.search_catalog", new_callable=AsyncMock)
    def test_search(self, mock_search, client):
        mock_search.return_value = [
            ClubCatalog(id=1, official_name="Club Atletico River Plate", short_name="River", is_verified=True)
        ]

        response = client.get("/api/clubs/search?q=river")

        assert response.status_code == 200
        assert response.json()[0]["official_name"] == "Club Atletico River Plate"

    def test_propose_requires_auth(self, client):
        response = client.post("/api/clubs/propose", json={"name": "Boca Juniors"})
        assert response.status_code in (401, 403)

    def test_propose_short_name(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="player")
        response = client.post("/api/clubs/propose", json={"name": " ab "}, headers=headers)
        assert response.status_code == 400

    @patch("agentsport.services.club_catalog_service.propose_club", new_callable=AsyncMock)
    def test_propose_duplicate(self, mock_propose, monkeypatch):
        mock_propose.side_effect = ClubDuplicateError(
            'Club "Club Atletico River Plate" already exists',
            ["Club Atletico River Plate"],
            exact=True,
        )
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post(
            "/api/clubs/propose", json={"name": "club atletico river plate"}, headers=headers
        )

        assert response.status_code == 409
        assert "Club Atletico River Plate" in response.json()["detail"]

    @patch("agentsport.services.club_catalog_service.propose_club", new_callable=AsyncMock)
    def test_propose_created(self, mock_propose, monkeypatch):
        mock_propose.return_value = ClubCatalog(id=2, official_name="Boca Juniors", is_verified=False)
        client, headers = make_client_with_auth(monkeypatch, role="club")

        response = client.post("/api/clubs/propose", json={"name": "Boca Juniors"}, headers=headers)

        assert response.status_code == 201
        assert response.json()["is_verified"] is False
        mock_propose.assert_awaited_once()
        assert mock_propose.await_args.args[1] == "Boca Juniors"


# ============================================================================
# Agents
# ============================================================================


class TestAgentEndpoints:
    def test_create_agent_requires_superadmin(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post(
            "/api/agents",
            json={"email": "new@agency.com", "password": "secret123", "agencyName": "New"},
            headers=headers,
        )

        assert response.status_code == 403

    @patch("agentsport.services.agent_service.create_agent", new_callable=AsyncMock)
    def test_create_agent(self, mock_create, monkeypatch):
        mock_create.return_value = _fake_agent(agent_id=12, user_id=7)
        client, headers = make_client_with_auth(monkeypatch, role="superadmin")

        response = client.post(
            "/api/agents",
            json={"email": "new@agency.com", "password": "secret123", "agencyName": "Pro Sports"},
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["id"] == 12
        assert mock_create.await_args.kwargs["agency_name"] == "Pro Sports"

    @patch("agentsport.services.agent_service.create_agent", new_callable=AsyncMock)
    def test_create_agent_duplicate_email(self, mock_create, monkeypatch):
        mock_create.side_effect = UserAlreadyExistsError("taken")
        client, headers = make_client_with_auth(monkeypatch, role="superadmin")

        response = client.post(
            "/api/agents",
            json={"email": "new@agency.com", "password": "secret123", "agencyName": "Pro Sports"},
            headers=headers,
        )

        assert response.status_code == 409

    def test_me(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.get("/api/agents/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["slug"] == "pro-sports"

    def test_me_without_agency_profile(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=None)

        response = client.get("/api/agents/me", headers=headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Agent profile required"

    def test_me_as_player(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="player")
        response = client.get("/api/agents/me", headers=headers)
        assert response.status_code == 403

    @patch("agentsport.services.agent_service.update_agent", new_callable=AsyncMock)
    def test_update_slug_taken(self, mock_update, monkeypatch):
        mock_update.side_effect = ValueError("Slug 'elite' is already taken")
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.patch("/api/agents/me", json={"slug": "elite"}, headers=headers)

        assert response.status_code == 400
        assert mock_update.await_args.kwargs == {"slug": "elite"}

    @patch("agentsport.services.representation_service.confirm_representation", new_callable=AsyncMock)
    def test_confirm(self, mock_confirm, monkeypatch):
        mock_confirm.return_value = _fake_player(representation_status="REPRESENTED", agent_id=5)
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post("/api/agents/me/players/10/confirm", headers=headers)

        assert response.status_code == 200
        assert response.json() == {
            "player_id": 10,
            "representation_status": "REPRESENTED",
            "agent_id": 5,
        }

    @patch("agentsport.services.representation_service.release_representation", new_callable=AsyncMock)
    def test_release_not_found(self, mock_release, monkeypatch):
        mock_release.side_effect = PlayerNotFoundError("Player 10 not found")
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post("/api/agents/me/players/10/release", headers=headers)

        assert response.status_code == 404

    @patch("agentsport.services.representation_service.decline_representation", new_callable=AsyncMock)
    def test_decline_invalid_transition(self, mock_decline, monkeypatch):
        mock_decline.side_effect = InvalidTransitionError("Cannot apply AGENT_DECLINED to REPRESENTED")
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post("/api/agents/me/players/10/decline", headers=headers)

        assert response.status_code == 400


# ============================================================================
# Players
# ============================================================================


class TestPlayerEndpoints:
    @patch("agentsport.services.player_service.create_roster_player", new_callable=AsyncMock)
    def test_create(self, mock_create, monkeypatch):
        mock_create.return_value = _fake_player()
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post(
            "/api/players",
            json={
                "first_name": "Julian",
                "last_name": "Alvarez",
                "position": "Forward",
                "birth_date": "2000-01-31",
            },
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json()["representation_status"] == "REPRESENTED"

    def test_create_missing_required_fields(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post("/api/players", json={"first_name": "Julian"}, headers=headers)

        assert response.status_code == 422

    def test_create_invalid_status(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.post(
            "/api/players",
            json={
                "first_name": "Julian",
                "last_name": "Alvarez",
                "position": "Forward",
                "birth_date": "2000-01-31",
                "status": "retired",
            },
            headers=headers,
        )

        assert response.status_code == 422

    @patch("agentsport.services.player_service.list_roster", new_callable=AsyncMock)
    def test_list_with_status_filter(self, mock_list, monkeypatch):
        mock_list.return_value = [_fake_player(status="watchlist")]
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.get("/api/players?status=watchlist", headers=headers)

        assert response.status_code == 200
        assert len(response.json()) == 1
        assert mock_list.await_args.args[2] == "watchlist"

    @patch("agentsport.services.player_service.get_roster_player", new_callable=AsyncMock)
    def test_get_not_found(self, mock_get, monkeypatch):
        mock_get.side_effect = PlayerNotFoundError("Player 99 not found")
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.get("/api/players/99", headers=headers)

        assert response.status_code == 404

    @patch("agentsport.services.player_service.update_roster_player", new_callable=AsyncMock)
    def test_update_sends_only_set_fields(self, mock_update, monkeypatch):
        mock_update.return_value = _fake_player(position="Striker")
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.patch("/api/players/10", json={"position": "Striker"}, headers=headers)

        assert response.status_code == 200
        assert mock_update.await_args.args[3] == {"position": "Striker"}

    @patch("agentsport.services.player_service.update_roster_player", new_callable=AsyncMock)
    def test_update_null_required_field_is_bad_request(self, mock_update, monkeypatch):
        mock_update.side_effect = ValueError("last_name cannot be null")
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.patch("/api/players/10", json={"last_name": None}, headers=headers)

        assert response.status_code == 400
        assert mock_update.await_args.args[3] == {"last_name": None}

    @patch("agentsport.services.player_service.delete_roster_player", new_callable=AsyncMock)
    def test_delete(self, mock_delete, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.delete("/api/players/10", headers=headers)

        assert response.status_code == 204
        mock_delete.assert_awaited_once()


# ============================================================================
# Applications
# ============================================================================


def _application(**overrides):
    data = {
        "id": 1,
        "player_id": 8,
        "agent_id": 5,
        "status": "pending",
        "message": None,
        "player_name": "Enzo Fernandez",
        "agency_name": "Pro Sports",
        "created_at": "2024-01-01T00:00:00",
    }
    data.update(overrides)
    return data


class TestApplicationEndpoints:
    @patch("agentsport.services.application_service.create_application", new_callable=AsyncMock)
    def test_create(self, mock_create, monkeypatch):
        mock_create.return_value = _application()
        client, headers = make_client_with_auth(monkeypatch, role="player", user_id=3)

        response = client.post("/api/applications", json={"agentId": 5, "message": "Hi"}, headers=headers)

        assert response.status_code == 201
        assert mock_create.await_args.args[1:] == (3, 5, "Hi")

    def test_create_requires_player(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())
        response = client.post("/api/applications", json={"agentId": 5}, headers=headers)
        assert response.status_code == 403

    @patch("agentsport.services.application_service.create_application", new_callable=AsyncMock)
    def test_create_conflict(self, mock_create, monkeypatch):
        from agentsport.services.application_service import ApplicationConflictError

        mock_create.side_effect = ApplicationConflictError("pending")
        client, headers = make_client_with_auth(monkeypatch, role="player")

        response = client.post("/api/applications", json={"agentId": 5}, headers=headers)

        assert response.status_code == 409

    @patch("agentsport.services.application_service.list_applications_for_agent", new_callable=AsyncMock)
    def test_received(self, mock_list, monkeypatch):
        mock_list.return_value = [_application()]
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.get("/api/applications/received", headers=headers)

        assert response.status_code == 200
        assert response.json()[0]["player_name"] == "Enzo Fernandez"
        assert mock_list.await_args.args[1] == 5

    @patch("agentsport.services.application_service.update_application_status", new_callable=AsyncMock)
    def test_decide_already_decided(self, mock_update, monkeypatch):
        mock_update.side_effect = ValueError("Application is already rejected")
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())

        response = client.patch("/api/applications/1", json={"status": "accepted"}, headers=headers)

        assert response.status_code == 400

    def test_decide_invalid_status(self, monkeypatch):
        client, headers = make_client_with_auth(monkeypatch, role="agent", agent=_fake_agent())
        response = client.patch("/api/applications/1", json={"status": "maybe"}, headers=headers)
        assert response.status_code == 422


# ============================================================================
# Public
# ============================================================================


class TestPublicEndpoints:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @patch("agentsport.services.agent_service.list_agents", new_callable=AsyncMock)
    def test_directory_lists_active_agents(self, mock_list, client):
        mock_list.return_value = [_fake_agent()]

        response = client.get("/api/public/agents")

        assert response.status_code == 200
        assert response.json()[0]["slug"] == "pro-sports"
        assert "plan" not in response.json()[0]
        assert mock_list.await_args.kwargs == {"active_only": True}

    @patch("agentsport.services.agent_service.get_agent_portfolio", new_callable=AsyncMock)
    def test_portfolio_not_found(self, mock_portfolio, client):
        mock_portfolio.side_effect = AgentNotFoundError("Agency 'x' not found")
        response = client.get("/api/public/agents/x")
        assert response.status_code == 404

    @patch("agentsport.services.player_service.get_public_player", new_callable=AsyncMock)
    def test_public_player(self, mock_get, client):
        mock_get.return_value = {
            "id": 10,
            "first_name": "Julian",
            "last_name": "Alvarez",
            "birth_date": "2000-01-31",
            "age": 24,
            "agency_name": None,
        }

        response = client.get("/api/public/players/10")

        assert response.status_code == 200
        assert response.json()["agency_name"] is None

    @patch("agentsport.services.representation_service.get_invitation_details", new_callable=AsyncMock)
    def test_invitation(self, mock_details, client):
        mock_details.return_value = {
            "player_name": "Enzo Fernandez",
            "target_email": "agent@new.com",
            "target_name": "New Agent",
            "status": "pending",
        }

        response = client.get("/api/invitations/abc")

        assert response.status_code == 200
        assert response.json()["player_name"] == "Enzo Fernandez"

    @patch("agentsport.services.representation_service.get_invitation_details", new_callable=AsyncMock)
    def test_invitation_not_found(self, mock_details, client):
        mock_details.side_effect = InvitationNotFoundError("Invitation not found")
        response = client.get("/api/invitations/nope")
        assert response.status_code == 404

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from conftest import USER_A, USER_B, make_message

IS_PARTICIPANT = (
    "campus_connect.repositories.participant_repository"
    ".ParticipantRepository.is_participant"
)
CREATE_MESSAGE = (
    "campus_connect.repositories.message_repository.MessageRepository.create_message"
)
TOUCH = "campus_connect.repositories.conversation_repository.ConversationRepository.touch"


class TestRealtimeRouter:
    """Tests for the conversation event stream."""

    def test_receives_new_message(self, client: TestClient, auth_headers: dict) -> None:
        """Test a message sent over HTTP reaches an open socket."""
        message = make_message(id=21, conversation_id=10, sender_id=USER_B)
        with (
            patch(IS_PARTICIPANT, new_callable=AsyncMock, return_value=True),
            patch(CREATE_MESSAGE, new_callable=AsyncMock, return_value=message),
            patch(TOUCH, new_callable=AsyncMock),
        ):
            with client.websocket_connect(
                "/api/realtime/conversations/10/ws", headers=auth_headers
            ) as websocket:
                response = client.post(
                    "/api/messages",
                    json={"conversation_id": 10, "content": "hello"},
                    headers={"X-User-Id": USER_B},
                )
                assert response.status_code == 201

                frame = websocket.receive_json()

        assert frame["topic"] == "chat-10"
        assert frame["event"] == "new-message"
        assert frame["data"]["id"] == 21
        assert frame["data"]["sender_id"] == USER_B

    def test_receives_typing_status(self, client: TestClient, auth_headers: dict) -> None:
        with patch(IS_PARTICIPANT, new_callable=AsyncMock, return_value=True):
            with client.websocket_connect(
                "/api/realtime/conversations/10/ws", headers=auth_headers
            ) as websocket:
                response = client.post(
                    "/api/conversations/10/typing",
                    json={"is_typing": True},
                    headers={"X-User-Id": USER_B},
                )
                assert response.status_code == 204

                frame = websocket.receive_json()

        assert frame == {
            "topic": "chat-10-typing",
            "event": "typing-status",
            "data": {"user_id": USER_B, "is_typing": True},
        }

    def test_non_participant_rejected(self, client: TestClient, auth_headers: dict) -> None:
        with patch(IS_PARTICIPANT, new_callable=AsyncMock, return_value=False):
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with client.websocket_connect(
                    "/api/realtime/conversations/10/ws", headers=auth_headers
                ):
                    pass

        assert exc_info.value.code == 4403

    def test_missing_identity_rejected(self, client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/api/realtime/conversations/10/ws"):
                pass

        assert exc_info.value.code == 4401

    def test_query_identity_ignored(self, client: TestClient) -> None:
        """Test a user_id query parameter does not stand in for the identity header."""
        with patch(IS_PARTICIPANT, new_callable=AsyncMock, return_value=True) as mock_check:
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with client.websocket_connect(
                    f"/api/realtime/conversations/10/ws?user_id={USER_A}"
                ):
                    pass

        assert exc_info.value.code == 4401
        mock_check.assert_not_called()

"""Messages exchanged inside a session."""
import uuid

from sqlmodel import Session, select

from nakshatra_talks.db.models import (ChatMessage, ChatSession, MessageType,
                                       SenderType, SessionStatus)
from nakshatra_talks.errors import (BadRequestError, ForbiddenError,
                                    NotFoundError)
from nakshatra_talks.schemas import MessageOut


class SessionMessages:
    def __init__(self, session: Session) -> None:
        self._session = session

    def _participant_session(self, session_id: uuid.UUID, member_id: uuid.UUID) -> tuple[ChatSession, SenderType]:
        chat_session = self._session.get(ChatSession, session_id)
        if chat_session is None:
            raise NotFoundError("Session not found")
        if chat_session.user_id == member_id:
            return chat_session, SenderType.USER
        if chat_session.astrologer_id == member_id:
            return chat_session, SenderType.ASTROLOGER
        raise ForbiddenError("You are not a participant in this session")

    def send_message(
        self,
        session_id: uuid.UUID,
        sender_id: uuid.UUID,
        message: str,
        message_type: MessageType = MessageType.TEXT,
    ) -> MessageOut:
        """Post a message; only allowed while the session is active."""
        chat_session, sender_type = self._participant_session(session_id, sender_id)
        if chat_session.status != SessionStatus.ACTIVE:
            raise BadRequestError("Session is not active")

        chat_message = ChatMessage(
            session_id=session_id,
            sender_id=sender_id,
            sender_type=sender_type,
            message=message.strip(),
            type=message_type,
        )
        self._session.add(chat_message)
        self._session.flush()
        return MessageOut.model_validate(chat_message)

    def list_messages(self, session_id: uuid.UUID, member_id: uuid.UUID, limit: int = 50) -> list[MessageOut]:
        """Oldest-first messages of a session the member took part in."""
        self._participant_session(session_id, member_id)
        rows = self._session.exec(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc())
            .limit(limit)
        ).all()
        return [MessageOut.model_validate(row) for row in rows]

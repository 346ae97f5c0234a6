"""Pydantic models for inbound Telegram webhook updates."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Sender of a message."""

    id: int
    is_bot: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None


class Chat(BaseModel):
    """Chat a message was sent in."""

    id: int
    type: Optional[str] = None
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None


class Audio(BaseModel):
    """Audio attachment; only the file id is needed to resend it."""

    file_id: str
    file_unique_id: Optional[str] = None
    duration: Optional[int] = None
    performer: Optional[str] = None
    title: Optional[str] = None
    file_name: Optional[str] = None


class Message(BaseModel):
    """Subset of a Telegram message used by the relay."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: Chat
    from_user: Optional[User] = Field(None, alias="from")
    date: Optional[int] = None
    text: Optional[str] = None
    audio: Optional[Audio] = None

    def sender_name(self) -> str:
        """Best available name for addressing the sender."""
        user = self.from_user
        if user is not None:
            if user.username:
                return f"@{user.username}"
            if user.first_name:
                return user.first_name
            return str(user.id)
        if self.chat.username:
            return f"@{self.chat.username}"
        return self.chat.first_name or str(self.chat.id)


class Update(BaseModel):
    """A webhook update. Exactly one optional field besides update_id is set."""

    model_config = ConfigDict(extra="allow")

    update_id: int
    message: Optional[Message] = None

    @property
    def kind(self) -> str:
        """Name of the populated update field (message, edited_message, ...)."""
        if self.message is not None:
            return "message"
        extra = self.model_extra or {}
        return next(iter(extra), "unknown")

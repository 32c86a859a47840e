"""Configuration models for lessonchat."""

from pydantic import BaseModel, Field, field_validator

from lessonchat.models.block import (
    DEFAULT_CALLOUT_ICON,
    DEFAULT_CALLOUT_TITLE,
    check_speaker_label,
)


class EditorConfig(BaseModel):
    """Defaults used by the edit controller."""

    mentor_name: str = Field(
        default="Karan",
        min_length=1,
        description="Speaker label for mentor turns",
    )

    course_name: str = Field(
        default="Course",
        min_length=1,
        description="Speaker label for the course character",
    )

    history_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Maximum number of undo entries kept (oldest evicted first)",
    )

    default_callout_title: str = Field(
        default=DEFAULT_CALLOUT_TITLE,
        description="Title given to new and converted callouts",
    )

    default_callout_icon: str = Field(
        default=DEFAULT_CALLOUT_ICON,
        description="Icon given to new and converted callouts",
    )

    new_message_text: str = Field(
        default="New message...",
        description="Placeholder content for inserted messages",
    )

    new_callout_text: str = Field(
        default="Enter your takeaway content here...",
        description="Placeholder content for inserted callouts",
    )

    @field_validator("mentor_name", "course_name")
    @classmethod
    def validate_speaker(cls, v: str) -> str:
        """Speaker labels must survive a round trip through the mini-language."""
        return check_speaker_label(v)

    model_config = {"frozen": True}

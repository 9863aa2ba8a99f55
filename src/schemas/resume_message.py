"""Workflow resume message schema."""

from typing import Literal

from pydantic import BaseModel

SUCCESS = "Success"
FAILURE = "Failure"

FAILURE_MESSAGE = "Publication failed: pre-publication workflow returned an error"


class ResumeMessage(BaseModel):
    """Body of the request that resumes a paused Dataverse workflow.

    Attributes:
        status: "Success" lets publication continue, "Failure" aborts it
        reason: Detail of what went wrong, written to the Dataverse log
        message: Message shown to the user in the Dataverse UI
    """

    status: Literal["Success", "Failure"]
    reason: str = ""
    message: str = ""

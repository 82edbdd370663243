"""
Result type returned by WebhookClient.send().
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class WebhookResult(BaseModel):
    """
    Outcome of a single webhook call.

    Exactly one of `text` (success) or `error` (failure) is set. Build
    instances with `success()` / `failure()` rather than the constructor.
    """

    ok: bool = Field(description="True if the webhook answered with a 2xx status")
    text: str | None = Field(None, description="Response body rendered as text")
    error: str | None = Field(None, description="Failure description shown to the user")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_variant(self) -> "WebhookResult":
        if self.ok and (self.text is None or self.error is not None):
            raise ValueError("a successful result carries text and no error")
        if not self.ok and (self.error is None or self.text is not None):
            raise ValueError("a failed result carries an error and no text")
        return self

    @classmethod
    def success(cls, text: str) -> "WebhookResult":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, error: str) -> "WebhookResult":
        return cls(ok=False, error=error)

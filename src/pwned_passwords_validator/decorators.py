"""Hooks that enrich reported errors before they reach the form layer."""

from __future__ import annotations

from dataclasses import replace

from .models import ValidationContext, ValidationError


class IdentityDecorator:
    """Reports errors unchanged."""

    def decorate(self, error: ValidationError, context: ValidationContext) -> ValidationError:
        _ = context
        return error


class MessageKeyDecorator:
    """Attach a localization key such as ``PwnedPasswordsValidator.pwned``."""

    def __init__(self, prefix: str = "PwnedPasswordsValidator") -> None:
        self._prefix = prefix

    def decorate(self, error: ValidationError, context: ValidationContext) -> ValidationError:
        _ = context
        return replace(error, message_key=f"{self._prefix}.{error.key}")


identity_decorator = IdentityDecorator()

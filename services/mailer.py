"""Outbound mail delivery backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from flask import Flask, current_app
from flask_mail import Mail, Message


@dataclass
class OutgoingMessage:
    recipient: str
    subject: str
    body: str
    sender: str | None = None


class AbstractMailer(ABC):
    """Interface for mail delivery backends."""

    @abstractmethod
    def send(self, message: OutgoingMessage) -> None:
        """Deliver a message or raise on failure."""


class SmtpMailer(AbstractMailer):
    """Deliver mail through Flask-Mail using the app's ``MAIL_*`` settings."""

    def __init__(self, mail: Mail, default_sender: str | None = None):
        self.mail = mail
        self.default_sender = default_sender

    def send(self, message: OutgoingMessage) -> None:
        sender = message.sender or self.default_sender
        if not sender:
            raise RuntimeError("No sender address configured for outbound mail.")

        self.mail.send(
            Message(
                subject=message.subject,
                recipients=[message.recipient],
                body=message.body,
                sender=sender,
            )
        )


class MemoryMailer(AbstractMailer):
    """Collect messages in memory instead of sending them."""

    def __init__(self, fail: bool = False):
        self.outbox: list[OutgoingMessage] = []
        self.fail = fail

    def send(self, message: OutgoingMessage) -> None:
        if self.fail:
            raise ConnectionError("Mail delivery failed.")
        self.outbox.append(message)


def mailer_from_config(app: Flask) -> AbstractMailer:
    """Build the mailer selected by ``MAIL_BACKEND``."""

    backend = (app.config.get("MAIL_BACKEND") or "smtp").lower()
    if backend == "memory":
        return MemoryMailer()
    if backend == "smtp":
        return SmtpMailer(
            Mail(app),
            default_sender=app.config.get("MAIL_DEFAULT_SENDER")
            or app.config.get("MAIL_USERNAME"),
        )
    raise ValueError(f"Unknown MAIL_BACKEND: {backend!r}")


def init_mailer(app: Flask, mailer: AbstractMailer | None = None) -> AbstractMailer:
    mailer = mailer or mailer_from_config(app)
    app.extensions["mailer"] = mailer
    return mailer


def get_mailer() -> AbstractMailer:
    return current_app.extensions["mailer"]

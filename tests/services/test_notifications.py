import logging
from datetime import datetime, timezone

import pytest

from familink.services.notifications import (
    InvitationCreated,
    InvitationNotifier,
    LoggingInvitationNotifier,
)


def test_notifier_interface_is_abstract():
    with pytest.raises(TypeError):
        InvitationNotifier()


def test_logging_notifier_logs_without_token(caplog):
    event = InvitationCreated(
        token="a" * 64,
        email="b@x.com",
        family_id=7,
        expires_at=datetime(2026, 3, 8, 12, tzinfo=timezone.utc),
    )

    with caplog.at_level(logging.INFO, logger="familink.services.notifications"):
        LoggingInvitationNotifier().invitation_created(event)

    assert "b@x.com" in caplog.text
    assert "family 7" in caplog.text
    assert "a" * 64 not in caplog.text

from typing import Any, Optional

from sqlsession.adapters.dbapi import DbapiConnection
from sqlsession.config import SessionConfig
from sqlsession.driver.session import Session
from sqlsession.protocols import ConnectionProtocol

__all__ = ("session_of",)


def session_of(connection: Any, config: "Optional[SessionConfig]" = None, **options: Any) -> Session:
    """Create a :class:`Session` over ``connection``.

    ``connection`` may be a :class:`~sqlsession.protocols.ConnectionProtocol`
    implementation or a raw DB-API connection, which is wrapped in
    :class:`~sqlsession.adapters.dbapi.DbapiConnection`.

    Args:
        connection: The connection to drive.
        config: Base session options.
        **options: Individual overrides, e.g. ``strict=True``.

    Returns:
        A new session that owns ``connection``.
    """
    if not isinstance(connection, ConnectionProtocol):
        connection = DbapiConnection(connection)
    return Session(connection, config, **options)

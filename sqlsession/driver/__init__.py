"""Session and statement preparation."""

from sqlsession.driver._statement import StatementBuilder
from sqlsession.driver.session import Session, SessionState, TransactionalSession

__all__ = ("Session", "SessionState", "StatementBuilder", "TransactionalSession")

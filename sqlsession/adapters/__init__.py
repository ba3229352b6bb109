"""Connection capabilities for concrete drivers."""

from sqlsession.adapters.dbapi import DbapiConnection, DbapiStatement

__all__ = ("DbapiConnection", "DbapiStatement")

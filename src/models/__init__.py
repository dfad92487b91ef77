"""
SQLAlchemy models package.
All models are imported here for Alembic auto-generation to detect changes.
"""

from src.models.agent import Agent
from src.models.base import Base
from src.models.call import Call
from src.models.contact import CONTACT_SOURCES, Contact
from src.models.outbound_job import OutboundJob
from src.models.phone_number import PhoneNumber
from src.models.user import AuthSession, User
from src.models.workspace import Workspace

__all__ = [
    "Base",
    "User",
    "AuthSession",
    "Workspace",
    "Agent",
    "Call",
    "OutboundJob",
    "PhoneNumber",
    "Contact",
    "CONTACT_SOURCES",
]

"""
User Document Model for MongoDB.

Represents user accounts in the users collection.
"""
from datetime import datetime
from typing import Optional

from poolrent.models.base import BaseDocument


class UserDocument(BaseDocument):
    """
    User document for MongoDB.

    Collection: users

    Indexes:
        - email (unique)
        - created_at
        - reset_password_token (sparse)
    """

    first_name: str
    last_name: str
    email: str
    mobile_number: str
    hashed_password: str
    avatar_url: Optional[str] = None

    # Only a SHA-256 of the emailed reset token is stored.
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime] = None

"""
Input checks for the login, signup, password and review forms.

Each function returns an error message for the user, or None when the input
is acceptable. Nothing here touches the stores.
"""

from typing import Optional


def validate_signup(username: str, password: str, confirm_password: str) -> Optional[str]:
    if not username.strip() or not password or not confirm_password:
        return "All fields are required."
    if password != confirm_password:
        return "Passwords do not match."
    return None


def validate_credentials(username: str, password: str) -> Optional[str]:
    if not username.strip() or not password:
        return "Username and password cannot be empty."
    return None


def validate_new_password(new_password: str, confirm_password: str) -> Optional[str]:
    if not new_password or not confirm_password:
        return "New password fields cannot be empty."
    if new_password != confirm_password:
        return "New passwords do not match."
    return None


def validate_review_text(text: str) -> Optional[str]:
    if not text.strip():
        return "Review text cannot be empty."
    return None

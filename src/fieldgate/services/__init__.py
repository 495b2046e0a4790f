from .auth_session import AuthSession

__all__ = ["AuthSession"]

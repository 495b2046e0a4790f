from .auth import LoginRequest, LoginResponse

__all__ = ["LoginRequest", "LoginResponse"]

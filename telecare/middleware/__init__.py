from telecare.middleware.jwt_auth import JWTAuthMiddleware

__all__ = ["JWTAuthMiddleware"]

from gitnest.web.routes.repo.router import router

__all__ = ["router"]

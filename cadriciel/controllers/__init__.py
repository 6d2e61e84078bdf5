from .index import IndexController

__all__ = ["IndexController"]

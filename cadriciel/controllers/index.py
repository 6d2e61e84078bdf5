"""
Index Controller
Owner of the `/api/index` route table
"""

from fastapi import APIRouter


class IndexController:
    """
    Holds the router mounted under the index prefix

    The composition root only mounts `router`; the routes themselves are
    registered by whoever owns the controller.

    @openapi
    {
      "tags": [
        {"name": "Index", "description": "Routes served under /api/index"}
      ]
    }
    """

    def __init__(self, router: APIRouter = None):
        self.router = router or APIRouter(tags=["Index"])

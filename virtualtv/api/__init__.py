"""HTTP API routers."""

from virtualtv.api.virtual_channels import router as virtual_channels_router

__all__ = ["virtual_channels_router"]

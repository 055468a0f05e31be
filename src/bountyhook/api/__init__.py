"""FastAPI management API for bountyhook.

Webhook CRUD, delivery log, health, and a manual poll trigger.

Example:
    ```python
    import uvicorn
    from bountyhook.api import create_app

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=3200)
    ```

Or run directly:
    ```bash
    python -m bountyhook
    ```
"""

from .app import app, create_app, register_exception_handlers
from .router import router

__all__ = [
    "app",
    "create_app",
    "register_exception_handlers",
    "router",
]

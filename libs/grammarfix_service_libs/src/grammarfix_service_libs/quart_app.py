"""
Typed Quart application class for GrammarFix services.

Declares the infrastructure attributes every service sets up in its
`create_app`/startup code, so route and startup modules can access them
without setattr()/getattr() juggling.
"""

from __future__ import annotations

from typing import Any, Optional

from dishka import AsyncContainer
from quart import Quart


class GrammarFixApp(Quart):
    """Quart application with typed service infrastructure.

    Attributes:
        container: Dishka async container for dependency injection. Set by
            startup_setup before the app serves requests; absent in tests that
            wire QuartDishka themselves.
        extensions: Standard Quart extensions dictionary. Holds the metrics
            dict and the service start time.
    """

    container: Optional[AsyncContainer]
    extensions: dict[str, Any]

    def __init__(self, import_name: str, *args: Any, **kwargs: Any) -> None:
        super().__init__(import_name, *args, **kwargs)
        self.extensions = {}
        self.container = None

"""Serverless entrypoint (Netlify Functions / AWS Lambda proxy events).

Settings are read from the environment on every invocation and handed to
the request gateway; the gateway itself never touches ``os.environ``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from shared.settings import Settings

from .handler import handle


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return asyncio.run(handle(event, Settings()))

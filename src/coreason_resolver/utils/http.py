# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

from typing import Any

import httpx


def error_detail(response: httpx.Response) -> dict[str, Any]:
    """Returns the JSON error body of a failed response, with the HTTP status attached."""
    try:
        body = response.json()
    except ValueError:
        body = None

    detail: dict[str, Any] = dict(body) if isinstance(body, dict) else {"message": response.text or None}
    detail.setdefault("status", response.status_code)
    return detail

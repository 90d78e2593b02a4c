# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_resolver

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger


class SecretsIntegrator:
    """Reads service credentials from the process environment and a dotenv file.

    Looks up the plain key first (e.g. ``SUPABASE_SERVICE_ROLE_KEY``), then the
    ``COREASON_RESOLVER_`` prefixed variant. Process variables win over the file.
    """

    def __init__(self, env_file: str | Path | None = None):
        """Initializes the SecretsIntegrator.

        Args:
            env_file: Optional dotenv file consulted after the process environment.
        """
        self.file_values: dict[str, str | None] = {}
        if env_file is not None and Path(env_file).is_file():
            self.file_values = dotenv_values(env_file)

    def get_secret(self, key: str) -> str | None:
        """Fetch a secret from environment variables or the dotenv file.

        Args:
            key: The unprefixed variable name.

        Returns:
            str | None: The secret value, or None if unset or empty.
        """
        for name in (key, f"COREASON_RESOLVER_{key}"):
            val = os.getenv(name) or self.file_values.get(name)
            if val:
                return val

        logger.debug(f"Secret {key} not found in environment.")
        return None

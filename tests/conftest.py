from __future__ import annotations

import pytest

from codec_qr_tool.config import AppConfig
from codec_qr_tool.dispatcher import TransformDispatcher


@pytest.fixture()
def config() -> AppConfig:
    return AppConfig(
        pbkdf2_iterations=10_000,
        argon2_time_cost=1,
        argon2_memory_cost_kib=8_192,
        argon2_parallelism=1,
    )


@pytest.fixture()
def dispatcher(config: AppConfig) -> TransformDispatcher:
    return TransformDispatcher(config)

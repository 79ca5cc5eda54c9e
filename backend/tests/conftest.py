"""
测试配置文件 (Image compatibility service)

这个文件包含 pytest fixtures（测试夹具）。
Fixtures 是测试的"准备工作"：在测试运行前创建所需的对象和环境。

关键概念：
- @pytest.fixture：标记一个函数为 fixture
- 每个测试函数运行时都重新创建（默认 scope="function"）
- 缓存使用可控时钟，TTL 测试不需要 sleep
"""

import pytest
import sys
from pathlib import Path

# 添加 backend 目录到 Python 路径
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from akamai_compat.config import CompatConfig
from akamai_compat.translator import AkamaiTranslator
from dimension_cache.cache import DimensionCache


# ============================================
# Clock / Cache Fixtures
# ============================================

class FakeClock:
    """
    可控时钟。

    使用方式：
    ```python
    clock.advance(60)   # 向前拨 60 秒
    ```
    """

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """
    小容量缓存：max_size=3, ttl=60 秒。
    """
    return DimensionCache(max_size=3, ttl=60, clock=clock)


# ============================================
# Translator Fixtures
# ============================================

DERIVATIVES = {
    "thumbnail": {"width": 150, "height": 150, "fit": "cover", "quality": 80},
    "hero": {"width": 1600, "format": "auto"},
}


@pytest.fixture
def translator():
    """默认配置：兼容开启，高级功能关闭"""
    return AkamaiTranslator(CompatConfig())


@pytest.fixture
def advanced_config():
    return CompatConfig(enable_advanced_features=True, derivatives=dict(DERIVATIVES))


@pytest.fixture
def advanced_translator(advanced_config):
    """高级功能开启，带 derivatives"""
    return AkamaiTranslator(advanced_config)


# ============================================
# Helper Functions
# ============================================

def url(query: str) -> str:
    """
    构造测试 URL。

    使用方式：
    ```python
    translator.translate(url("imwidth=400"))
    ```
    """
    return f"https://images.example.com/photos/cat.jpg?{query}"


def assert_options(options, **expected):
    """
    断言 options 包含期望的键值（不要求完全相等）。

    使用方式：
    ```python
    assert_options(options, width=100, height=200)
    ```
    """
    for key, value in expected.items():
        assert key in options, f"Missing option '{key}' in {options}"
        assert options[key] == value, \
            f"Option '{key}' should be {value!r}, got: {options[key]!r}"


def assert_query(translated_url, **expected):
    """断言 URL 查询参数（按名称比较，忽略顺序）"""
    from urllib.parse import parse_qs, urlsplit

    query = parse_qs(urlsplit(translated_url).query, keep_blank_values=True)
    for key, value in expected.items():
        assert query.get(key) == [value], \
            f"Query '{key}' should be {value!r}, got: {query.get(key)!r} ({translated_url})"

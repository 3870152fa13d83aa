import pytest
from cachesim.config import SimConfig


@pytest.fixture
def direct_mapped_config():
    """64B direct-mapped cache with 16B lines: 4 sets, 4 offset bits, 2 index bits."""
    return SimConfig(set_size=1, line_size=16, total_cache_size=64)


@pytest.fixture
def sample_trace_lines():
    """Three reads: two to set 0 with the same tag, one to set 1."""
    return ["R:4:0x00", "R:4:0x10", "R:4:0x00"]

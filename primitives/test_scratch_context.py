import hashlib

import pytest

from crypto_errors import InternalError
from scratch_context import Context

def test_random_oracle_matches_construction(ctx):
    data = b"private join and compute"
    max_value = 2**64
    # 64 + 1 + 256 bits demandés : deux blocs SHA-256, 191 bits en excès
    blocks = hashlib.sha256(b"\x01" + data).digest() + hashlib.sha256(b"\x02" + data).digest()
    expected = (int.from_bytes(blocks, "big") >> 191) % max_value
    assert ctx.random_oracle_sha256(data, max_value) == expected

def test_random_oracle_is_deterministic_and_bounded():
    first, second = Context(), Context()
    max_value = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF000000000000000000000001
    for i in range(50):
        data = f"valeur {i}".encode()
        value = first.random_oracle_sha256(data, max_value)
        assert value == second.random_oracle_sha256(data, max_value)
        assert 0 <= value < max_value

def test_random_oracle_separates_inputs(ctx):
    values = {ctx.random_oracle_sha256(bytes([i]), 2**255) for i in range(100)}
    assert len(values) == 100

def test_random_oracle_rejects_empty_range(ctx):
    with pytest.raises(InternalError):
        ctx.random_oracle_sha256(b"x", 0)

def test_mod_mul_counts(ctx):
    assert ctx.mod_mul(7, 8, 10) == 6
    assert ctx.mod_mul(3, 3, 5) == 4
    assert ctx.multiplications == 2
    ctx.reset_counters()
    assert ctx.multiplications == 0

def test_mod_inverse(ctx):
    assert (ctx.mod_inverse(3, 11) * 3) % 11 == 1
    with pytest.raises(InternalError):
        ctx.mod_inverse(6, 12)

def test_random_between(ctx):
    draws = [ctx.generate_random_between(5, 8) for _ in range(200)]
    assert set(draws) <= {5, 6, 7}
    assert all(0 <= ctx.generate_random_less_than(3) < 3 for _ in range(50))
    with pytest.raises(InternalError):
        ctx.generate_random_between(4, 4)

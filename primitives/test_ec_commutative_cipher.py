"""
Le chiffrement est commutatif :

Encrypt_a(m) = a·H(m) où H hache m vers un point de la courbe.
Alors ReEncrypt_b(Encrypt_a(m)) = b·a·H(m) = a·b·H(m) = ReEncrypt_a(Encrypt_b(m)),
car la multiplication scalaire commute. Decrypt_a multiplie par a^(-1) mod n.
"""
import copy
import pickle

import pytest

from crypto_errors import InvalidArgumentError
from ec_commutative_cipher import ECCommutativeCipher
from ec_elgamal import ECEG_decrypt, ECEG_encrypt, ECEG_generate_keys
from ec_group import (
    NID_SECP224R1, NID_SECP384R1, NID_X9_62_PRIME256V1, SUPPORTED_CURVE_IDS, get_ec_group
)

MESSAGES = [b"", b"a", b"alice@example.com", b"\x00" * 64, "texte unicode é".encode()]

@pytest.fixture
def cipher(ctx):
    return ECCommutativeCipher.create_with_new_key(NID_SECP224R1, ctx)

@pytest.mark.parametrize("curve_id", SUPPORTED_CURVE_IDS)
def test_decrypt_returns_hashed_point(ctx, curve_id):
    cipher = ECCommutativeCipher.create_with_new_key(curve_id, ctx)
    for m in MESSAGES:
        encrypted = cipher.encrypt(m)
        assert encrypted != cipher.hash_to_curve(m)
        assert cipher.decrypt(encrypted) == cipher.hash_to_curve(m)

@pytest.mark.parametrize("curve_id", [NID_SECP224R1, NID_X9_62_PRIME256V1, NID_SECP384R1])
def test_commutativity(ctx, curve_id):
    alice = ECCommutativeCipher.create_with_new_key(curve_id, ctx)
    bob = ECCommutativeCipher.create_with_new_key(curve_id, ctx)
    for m in MESSAGES:
        assert alice.re_encrypt(bob.encrypt(m)) == bob.re_encrypt(alice.encrypt(m))

def test_intersection_detects_equal_values(ctx):
    alice = ECCommutativeCipher.create_with_new_key(NID_SECP224R1, ctx)
    bob = ECCommutativeCipher.create_with_new_key(NID_SECP224R1, ctx)
    alice_set = [b"1", b"2", b"3", b"4"]
    bob_set = [b"3", b"4", b"5"]

    alice_double = {bob.re_encrypt(alice.encrypt(v)): v for v in alice_set}
    bob_double = {alice.re_encrypt(bob.encrypt(v)) for v in bob_set}
    assert sorted(alice_double[c] for c in bob_double if c in alice_double) == [b"3", b"4"]

def test_decrypt_removes_one_layer(ctx):
    alice = ECCommutativeCipher.create_with_new_key(NID_SECP224R1, ctx)
    bob = ECCommutativeCipher.create_with_new_key(NID_SECP224R1, ctx)
    double = alice.re_encrypt(bob.encrypt(b"valeur"))
    assert alice.decrypt(double) == bob.encrypt(b"valeur")

def test_double_application(cipher):
    for m in MESSAGES:
        twice = cipher.re_encrypt(cipher.encrypt(m))
        assert cipher.decrypt(cipher.decrypt(twice)) == cipher.hash_to_curve(m)

def test_encrypt_is_deterministic(cipher):
    assert cipher.encrypt(b"x") == cipher.encrypt(b"x")
    assert cipher.encrypt(b"x") != cipher.encrypt(b"y")
    with pytest.raises(InvalidArgumentError):
        cipher.encrypt("x")

def test_re_encrypt_elgamal_ciphertext_is_pointwise(ctx, cipher):
    group = cipher.group
    _, public_key = ECEG_generate_keys(group, ctx)
    c1, c2 = ECEG_encrypt(group, ctx, public_key, cipher.hash_to_curve(b"m"))

    assert cipher.re_encrypt_elgamal_ciphertext((c1, c2)) == (cipher.re_encrypt(c1), cipher.re_encrypt(c2))

def test_re_encrypted_elgamal_decrypts_to_encrypted_message(ctx, cipher):
    group = cipher.group
    private_key, public_key = ECEG_generate_keys(group, ctx)
    hashed = cipher.hash_to_curve(b"m")
    ciphertext = ECEG_encrypt(group, ctx, public_key, hashed)

    re_encrypted = cipher.re_encrypt_elgamal_ciphertext(ciphertext)
    assert ECEG_decrypt(group, private_key, re_encrypted) == cipher.encrypt(b"m")

def test_create_from_key_is_deterministic(ctx, cipher):
    key = cipher.get_private_key_bytes()
    first = ECCommutativeCipher.create_from_key(NID_SECP224R1, key, ctx)
    second = ECCommutativeCipher.create_from_key(NID_SECP224R1, key, ctx)
    for m in MESSAGES:
        assert first.encrypt(m) == second.encrypt(m)

def test_key_round_trip(ctx, cipher):
    other = ECCommutativeCipher.create_with_new_key(NID_SECP224R1, ctx)
    restored = ECCommutativeCipher.create_from_key(NID_SECP224R1, cipher.get_private_key_bytes(), ctx)

    assert restored.get_private_key_bytes() == cipher.get_private_key_bytes()
    for m in MESSAGES:
        encrypted = other.encrypt(m)
        assert restored.encrypt(m) == cipher.encrypt(m)
        assert restored.re_encrypt(encrypted) == cipher.re_encrypt(encrypted)
        assert restored.decrypt(encrypted) == cipher.decrypt(encrypted)

def test_known_key(ctx):
    # d = 1 : le chiffré est le point haché lui-même
    identity = ECCommutativeCipher.create_from_key(NID_SECP224R1, b"\x01", ctx)
    assert identity.encrypt(b"m") == identity.hash_to_curve(b"m")
    assert identity.get_private_key_bytes() == b"\x01"

    # d = 2 : le chiffré est 2·H(m)
    double = ECCommutativeCipher.create_from_key(NID_SECP224R1, b"\x02", ctx)
    group = double.group
    hashed = group.get_point_by_hashing_to_curve(ctx, b"m")
    assert double.encrypt(b"m") == group.point_to_bytes_compressed(group.add(hashed, hashed))

@pytest.mark.parametrize("key_bytes", [
    b"",
    b"\x00",
    b"\x00\x00",
    get_ec_group(NID_SECP224R1).get_order().to_bytes(28, "big"),
    b"\xff" * 29,
    "01",
])
def test_invalid_key(ctx, key_bytes):
    with pytest.raises(InvalidArgumentError):
        ECCommutativeCipher.create_from_key(NID_SECP224R1, key_bytes, ctx)

def test_leading_zero_key_bytes(ctx):
    cipher = ECCommutativeCipher.create_from_key(NID_SECP224R1, b"\x00\x05", ctx)
    assert cipher.get_private_key_bytes() == b"\x05"

def test_unsupported_curve(ctx):
    with pytest.raises(InvalidArgumentError):
        ECCommutativeCipher.create_with_new_key(1, ctx)
    with pytest.raises(InvalidArgumentError):
        ECCommutativeCipher.create_from_key(1, b"\x01", ctx)

@pytest.mark.parametrize("ciphertext", [
    b"",
    b"\x02",
    b"\x02" + b"\x01" * 10,
    b"\x07" + b"\x01" * 28,
    b"\x02" + b"\xff" * 28,
    None,
])
def test_malformed_ciphertext(cipher, ciphertext):
    expected = cipher.encrypt(b"avant")
    key = cipher.get_private_key_bytes()

    with pytest.raises(InvalidArgumentError):
        cipher.decrypt(ciphertext)
    with pytest.raises(InvalidArgumentError):
        cipher.re_encrypt(ciphertext)

    # L'état du chiffrement est inchangé
    assert cipher.encrypt(b"avant") == expected
    assert cipher.get_private_key_bytes() == key

def test_malformed_elgamal_ciphertext(cipher):
    valid = cipher.encrypt(b"m")
    for ciphertext in [(valid, b""), (b"\x03", valid), (valid,), valid]:
        with pytest.raises(InvalidArgumentError):
            cipher.re_encrypt_elgamal_ciphertext(ciphertext)

def test_ciphertext_from_other_curve(ctx):
    p224 = ECCommutativeCipher.create_with_new_key(NID_SECP224R1, ctx)
    p256 = ECCommutativeCipher.create_with_new_key(NID_X9_62_PRIME256V1, ctx)
    with pytest.raises(InvalidArgumentError):
        p224.re_encrypt(p256.encrypt(b"m"))

def test_not_copyable(cipher):
    with pytest.raises(TypeError):
        copy.copy(cipher)
    with pytest.raises(TypeError):
        copy.deepcopy(cipher)
    with pytest.raises(TypeError):
        pickle.dumps(cipher)
    assert cipher.get_private_key_bytes().hex() not in repr(cipher)

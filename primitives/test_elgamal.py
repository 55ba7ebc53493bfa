"""
ElGamal est homomorphique multiplicatif :

Dans ElGamal classique, le chiffrement d'un message m est :
- r = g^k mod p
- c = m * y^k mod p (où y est la clé publique)

Quand on multiplie deux chiffrés (r1,c1) et (r2,c2) :
(r1*r2, c1*c2) = (g^(k1+k2), m1*m2 * y^(k1+k2))

g et y étant fixes, g^k et y^k passent par FixedBaseExp.
"""
import pytest

from crypto_errors import InvalidArgumentError
from elgamal import (
    PARAM_G, PARAM_P, PARAM_Q, EG_decrypt, EG_generate_keys, EG_multiply,
    ElGamalEncrypter, validate_params
)
from fixed_base_exp import ExpStrategy

def test_params():
    assert validate_params()
    assert not validate_params(g=1)
    assert not validate_params(g=PARAM_G + 1)

def test_generate_keys(ctx):
    private_key, public_key = EG_generate_keys(ctx)
    assert 0 < private_key < PARAM_Q
    assert public_key == pow(PARAM_G, private_key, PARAM_P)

def test_encrypt_decrypt(ctx):
    private_key, public_key = EG_generate_keys(ctx)
    encrypter = ElGamalEncrypter(public_key, ctx, expected_calls=100)
    for m in (1, 2, 0x2661b673f687c5c3142f806d500d2ce57b1182c9b25bfe4fa09529424b, PARAM_P - 1):
        r, c = encrypter.encrypt(m)
        assert EG_decrypt(private_key, r, c) == m

def test_multiplicative_homomorphism(ctx):
    m1 = 0x2661b673f687c5c3142f806d500d2ce57b1182c9b25bfe4fa09529424b
    m2 = 0x1c1c871caabca15828cf08ee3aa3199000b94ed15e743c3

    private_key, public_key = EG_generate_keys(ctx)
    encrypter = ElGamalEncrypter(public_key, ctx)
    product = EG_multiply(encrypter.encrypt(m1), encrypter.encrypt(m2))

    assert EG_decrypt(private_key, *product) == (m1 * m2) % PARAM_P

def test_uses_precomputed_tables(ctx):
    _, public_key = EG_generate_keys(ctx)
    encrypter = ElGamalEncrypter(public_key, ctx, expected_calls=1000)
    assert encrypter._g_exp.strategy is not ExpStrategy.DIRECT
    assert encrypter._y_exp.strategy is not ExpStrategy.DIRECT

    few = ElGamalEncrypter(public_key, ctx, expected_calls=1)
    assert few._g_exp.strategy is ExpStrategy.DIRECT

def test_invalid_inputs(ctx):
    private_key, public_key = EG_generate_keys(ctx)
    encrypter = ElGamalEncrypter(public_key, ctx, expected_calls=1)
    with pytest.raises(InvalidArgumentError):
        encrypter.encrypt(0)
    with pytest.raises(InvalidArgumentError):
        encrypter.encrypt(PARAM_P)
    with pytest.raises(InvalidArgumentError):
        ElGamalEncrypter(1, ctx)
    with pytest.raises(InvalidArgumentError):
        EG_decrypt(0, 2, 2)
    with pytest.raises(InvalidArgumentError):
        EG_decrypt(private_key, 0, 2)

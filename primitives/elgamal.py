from typing import Optional, Tuple

from crypto_errors import InvalidArgumentError
from fixed_base_exp import FixedBaseExp
from scratch_context import Context

# Paramètres du groupe (RFC 5114, groupe 2048 bits avec sous-groupe d'ordre premier de 256 bits)
PARAM_P = 0x87A8E61DB4B6663CFFBBD19C651959998CEEF608660DD0F25D2CEED4435E3B00E00DF8F1D61957D4FAF7DF4561B2AA3016C3D91134096FAA3BF4296D830E9A7C209E0C6497517ABD5A8A9D306BCF67ED91F9E6725B4758C022E0B1EF4275BF7B6C5BFC11D45F9088B941F54EB1E59BB8BC39A0BF12307F5C4FDB70C581B23F76B63ACAE1CAA6B7902D52526735488A0EF13C6D9A51BFA4AB3AD8347796524D8EF6A167B5A41825D967E144E5140564251CCACB83E6B486F6B3CA3F7971506026C0B857F689962856DED4010ABD0BE621C3A3960A54E710C375F26375D7014103A4B54330C198AF126116D2276E11715F693877FAD7EF09CADB094AE91E1A1597

PARAM_Q = 0x8CF83642A709A097B447997640129DA299B1A47D1EB3750BA308B0FE64F5FBD3

PARAM_G = 0x3FB32C9B73134D0B2E77506660EDBD484CA7B18F21EF205407F4793A1A0BA12510DBC15077BE463FFF4FED4AAC0BB555BE3A6C1B0C6B47B1BC3773BF7E8C6F62901228F8C28CBB18A55AE31341000A650196F931C77A57F2DDF463E5E9EC144B777DE62AAAB8A8628AC376D282D6ED3864E67982428EBC831D14348F6F2F9193B5045AF2767164E1DFC967C1FB3F2E55A4BD1BFFE83B9C80D052B985D182EA0ADB2A3B7313D3FE14C8484B1E052588B9B7D2BBD2DF016199ECD06E1557CD0915B3353BBB64E0EC377FD028370DF92B52C7891428CDC67EB6184B523D1DB246C32F63078490F00EF8D647D148D47954515E2327CFEF98C582664B4C0F6CC41659

Ciphertext = Tuple[int, int]

def validate_params(p: int = PARAM_P, q: int = PARAM_Q, g: int = PARAM_G) -> bool:
    """
    Vérifie que les paramètres du groupe sont valides
    """
    if p < 2 or q < 2:
        return False

    # Vérifie que g est un générateur valide
    if g <= 1 or g >= p:
        return False

    # Vérifie que g^q ≡ 1 (mod p)
    if pow(g, q, p) != 1:
        return False

    return True

def EG_generate_keys(ctx: Context, p: int = PARAM_P, q: int = PARAM_Q, g: int = PARAM_G) -> Tuple[int, int]:
    """
    Génère une paire de clés ElGamal

    Returns:
        Tuple[int, int]: (clé privée x dans [1, q-1], clé publique g^x mod p)

    Raises:
        InvalidArgumentError: Si les paramètres sont invalides
    """
    if not validate_params(p, q, g):
        raise InvalidArgumentError("Paramètres du groupe invalides")

    private_key = ctx.generate_random_between(1, q)
    public_key = pow(g, private_key, p)
    return private_key, public_key

class ElGamalEncrypter:
    """
    Chiffrement ElGamal multiplicatif vers une clé publique fixe.

    g et la clé publique y étant fixes, g^k et y^k sont calculés par deux
    FixedBaseExp dont les tables sont construites une fois et réutilisées
    pour tous les chiffrements.
    """

    def __init__(self, public_key: int, ctx: Context, expected_calls: Optional[int] = None,
                 p: int = PARAM_P, q: int = PARAM_Q, g: int = PARAM_G):
        if not validate_params(p, q, g):
            raise InvalidArgumentError("Paramètres du groupe invalides")
        if not 1 < public_key < p:
            raise InvalidArgumentError("Clé publique invalide")

        self._ctx = ctx
        self._p = p
        self._q = q
        self.public_key = public_key
        # Les exposants sont des aléas de [1, q-1]
        self._g_exp = FixedBaseExp.get_fixed_base_exp(
            ctx, g, p, expected_calls=expected_calls, max_exp_bits=q.bit_length())
        self._y_exp = FixedBaseExp.get_fixed_base_exp(
            ctx, public_key, p, expected_calls=expected_calls, max_exp_bits=q.bit_length())

    def encrypt(self, message: int) -> Ciphertext:
        """
        Chiffre un message avec ElGamal (version multiplicative)

        Args:
            message: Le message, dans ]0, p[

        Returns:
            Ciphertext: (r, c) = (g^k, m * y^k) mod p

        Raises:
            InvalidArgumentError: Si le message est hors de ]0, p[
        """
        if not 0 < message < self._p:
            raise InvalidArgumentError("Message invalide")

        # Génère un nombre aléatoire k
        k = self._ctx.generate_random_between(1, self._q)

        r = self._g_exp.mod_exp(k)
        c = (message * self._y_exp.mod_exp(k)) % self._p
        return r, c

def EG_decrypt(private_key: int, c1: int, c2: int, p: int = PARAM_P, q: int = PARAM_Q) -> int:
    """
    Déchiffre un message avec ElGamal (version multiplicative)

    Args:
        private_key: La clé privée
        c1, c2: Le texte chiffré

    Returns:
        int: Le message déchiffré

    Raises:
        InvalidArgumentError: Si la clé privée ou le chiffré est invalide
    """
    if not 0 < private_key < q:
        raise InvalidArgumentError("Clé privée invalide")
    if not (0 < c1 < p and 0 < c2 < p):
        raise InvalidArgumentError("Chiffré invalide")

    # Calcule s = c1^x mod p
    s = pow(c1, private_key, p)

    # Calcule m = c2 * s^(-1) mod p
    s_inv = pow(s, -1, p)
    return (c2 * s_inv) % p

def EG_multiply(first: Ciphertext, second: Ciphertext, p: int = PARAM_P) -> Ciphertext:
    """
    Multiplie deux chiffrés : (r1*r2, c1*c2) chiffre m1*m2 avec l'aléa k1+k2
    """
    r1, c1 = first
    r2, c2 = second
    return (r1 * r2) % p, (c1 * c2) % p

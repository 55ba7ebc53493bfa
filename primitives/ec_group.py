import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Tuple

from Crypto.Math.Numbers import Integer
from Crypto.PublicKey import ECC
from Crypto.Util.number import long_to_bytes

import crypto_config
from crypto_errors import InvalidArgumentError, InternalError
from scratch_context import Context

logger = logging.getLogger(__name__)

# Identifiants numériques des courbes nommées (NID OpenSSL)
NID_X9_62_PRIME192V1 = 409
NID_SECP224R1 = 713
NID_X9_62_PRIME256V1 = 415
NID_SECP384R1 = 715
NID_SECP521R1 = 716

# Préfixes de l'encodage SEC1 / ANSI X9.62
POINT_COMPRESSED_EVEN = 0x02
POINT_COMPRESSED_ODD = 0x03
POINT_UNCOMPRESSED = 0x04

# Paramètres des courbes NIST : y² = x³ - 3x + b (mod p)
# (nom pycryptodome, p, b, ordre, Gx, Gy)
_CURVES: Dict[int, Tuple[str, str, str, str, str, str]] = {
    NID_X9_62_PRIME192V1: (
        "P-192",
        "fffffffffffffffffffffffffffffffeffffffffffffffff",
        "64210519e59c80e70fa7e9ab72243049feb8deecc146b9b1",
        "ffffffffffffffffffffffff99def836146bc9b1b4d22831",
        "188da80eb03090f67cbf20eb43a18800f4ff0afd82ff1012",
        "07192b95ffc8da78631011ed6b24cdd573f977a11e794811"),
    NID_SECP224R1: (
        "P-224",
        "ffffffffffffffffffffffffffffffff000000000000000000000001",
        "b4050a850c04b3abf54132565044b0b7d7bfd8ba270b39432355ffb4",
        "ffffffffffffffffffffffffffff16a2e0b8f03e13dd29455c5c2a3d",
        "b70e0cbd6bb4bf7f321390b94a03c1d356c21122343280d6115c1d21",
        "bd376388b5f723fb4c22dfe6cd4375a05a07476444d5819985007e34"),
    NID_X9_62_PRIME256V1: (
        "P-256",
        "ffffffff00000001000000000000000000000000ffffffffffffffffffffffff",
        "5ac635d8aa3a93e7b3ebbd55769886bc651d06b0cc53b0f63bce3c3e27d2604b",
        "ffffffff00000000ffffffffffffffffbce6faada7179e84f3b9cac2fc632551",
        "6b17d1f2e12c4247f8bce6e563a440f277037d812deb33a0f4a13945d898c296",
        "4fe342e2fe1a7f9b8ee7eb4a7c0f9e162bce33576b315ececbb6406837bf51f5"),
    NID_SECP384R1: (
        "P-384",
        "fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffe"
        "ffffffff0000000000000000ffffffff",
        "b3312fa7e23ee7e4988e056be3f82d19181d9c6efe8141120314088f5013875a"
        "c656398d8a2ed19d2a85c8edd3ec2aef",
        "ffffffffffffffffffffffffffffffffffffffffffffffffc7634d81f4372ddf"
        "581a0db248b0a77aecec196accc52973",
        "aa87ca22be8b05378eb1c71ef320ad746e1d3b628ba79b9859f741e082542a38"
        "5502f25dbf55296c3a545e3872760ab7",
        "3617de4a96262c6f5d9e98bf9292dc29f8f41dbd289a147ce9da3113b5f0b8c0"
        "0a60b1ce1d7e819d7a431d7c90ea0e5f"),
    NID_SECP521R1: (
        "P-521",
        "01ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff"
        "ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff"
        "ffffffff",
        "0051953eb9618e1c9a1f929a21a0b68540eea2da725b99b315f3b8b489918ef1"
        "09e156193951ec7e937b1652c0bd3bb1bf073573df883d2c34f1ef451fd4"
        "6b503f00",
        "01ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff"
        "fffa51868783bf2f966b7fcc0148f709a5d03bb5c9b8899c47aebb6fb71e"
        "91386409",
        "00c6858e06b70404e9cd9e3ecb662395b4429c648139053fb521f828af606b4d"
        "3dbaa14b5e77efe75928fe1dc127a2ffa8de3348b3c1856a429bf97e7e31"
        "c2e5bd66",
        "011839296a789a3bc0045c8a5fb42c7d1bd998f54449579b446817afbd17273e"
        "662c97ee72995ef42640c550b9013fad0761353c7086a272c24088be9476"
        "9fd16650"),
}

SUPPORTED_CURVE_IDS = tuple(sorted(_CURVES))

@dataclass(frozen=True)
class ECGroup:
    """
    Description immuable d'une courbe nommée, partagée en lecture seule
    par tous les chiffrements utilisant cette courbe.

    L'arithmétique des points est déléguée à pycryptodome (ECC.EccPoint).
    """
    curve_id: int
    curve_name: str
    p: int
    a: int
    b: int
    order: int
    gx: int
    gy: int

    @property
    def field_size_in_bytes(self) -> int:
        return (self.p.bit_length() + 7) // 8

    def get_order(self) -> int:
        return self.order

    def get_generator(self) -> ECC.EccPoint:
        return ECC.EccPoint(self.gx, self.gy, curve=self.curve_name)

    def compute_y_square(self, x: int) -> int:
        return (pow(x, 3, self.p) + self.a * x + self.b) % self.p

    def is_private_key_valid(self, key: int) -> bool:
        """Une clé privée valide est dans [1, ordre-1]"""
        return 0 < key < self.order

    def generate_private_key(self, ctx: Context) -> int:
        """Tire une clé privée uniforme dans [1, ordre-1]"""
        return ctx.generate_random_between(1, self.order)

    def is_valid(self, point: ECC.EccPoint) -> bool:
        """Un point valide est sur la courbe et n'est pas le point à l'infini"""
        if point.is_point_at_infinity():
            return False
        x, y = int(point.x), int(point.y)
        return (y * y) % self.p == self.compute_y_square(x)

    def mul(self, point: ECC.EccPoint, scalar: int) -> ECC.EccPoint:
        """
        Multiplication scalaire d'un point

        Raises:
            InternalError: Si la bibliothèque de courbes échoue
        """
        try:
            return point * scalar
        except (ValueError, TypeError) as e:
            raise InternalError("Échec de la multiplication scalaire") from e

    def add(self, left: ECC.EccPoint, right: ECC.EccPoint) -> ECC.EccPoint:
        try:
            return left + right
        except (ValueError, TypeError) as e:
            raise InternalError("Échec de l'addition de points") from e

    def _sqrt(self, value: int) -> int:
        """Racine carrée modulo p, ValueError si value n'est pas un carré"""
        root = int(Integer(value).sqrt(Integer(self.p)))
        if (root * root) % self.p != value % self.p:
            raise ValueError("Pas de racine carrée")
        return root

    def create_ec_point(self, encoded: bytes) -> ECC.EccPoint:
        """
        Décode un point encodé selon ANSI X9.62 / SEC1

        Accepte la forme compressée (0x02 | 0x03 || x) et la forme non
        compressée (0x04 || x || y).

        Args:
            encoded: Les octets du point

        Returns:
            ECC.EccPoint: Le point décodé

        Raises:
            InvalidArgumentError: Si l'encodage n'est pas celui d'un point
                valide de cette courbe
        """
        if not isinstance(encoded, (bytes, bytearray)):
            raise InvalidArgumentError("Le point doit être une suite d'octets")
        size = self.field_size_in_bytes
        if len(encoded) == 0:
            raise InvalidArgumentError("Point vide")

        prefix = encoded[0]
        if prefix in (POINT_COMPRESSED_EVEN, POINT_COMPRESSED_ODD):
            if len(encoded) != 1 + size:
                raise InvalidArgumentError("Longueur de point compressé invalide")
            x = int.from_bytes(encoded[1:], byteorder='big')
            if x >= self.p:
                raise InvalidArgumentError("Coordonnée x hors du corps")
            try:
                y = self._sqrt(self.compute_y_square(x))
            except ValueError as e:
                raise InvalidArgumentError("Aucun point de la courbe pour cette abscisse") from e
            if (y & 1) != (prefix & 1):
                y = (self.p - y) % self.p
        elif prefix == POINT_UNCOMPRESSED:
            if len(encoded) != 1 + 2 * size:
                raise InvalidArgumentError("Longueur de point non compressé invalide")
            x = int.from_bytes(encoded[1:1 + size], byteorder='big')
            y = int.from_bytes(encoded[1 + size:], byteorder='big')
            if x >= self.p or y >= self.p:
                raise InvalidArgumentError("Coordonnée hors du corps")
        else:
            raise InvalidArgumentError("Préfixe de point invalide")

        try:
            point = ECC.EccPoint(x, y, curve=self.curve_name)
        except ValueError as e:
            raise InvalidArgumentError("Le point n'est pas sur la courbe") from e
        if not self.is_valid(point):
            raise InvalidArgumentError("Point invalide")
        return point

    def point_to_bytes_compressed(self, point: ECC.EccPoint) -> bytes:
        """Encode un point sous forme compressée (bit de parité || x)"""
        if point.is_point_at_infinity():
            raise InternalError("Le point à l'infini n'a pas d'encodage compressé")
        x, y = int(point.x), int(point.y)
        prefix = POINT_COMPRESSED_ODD if y & 1 else POINT_COMPRESSED_EVEN
        return bytes([prefix]) + x.to_bytes(self.field_size_in_bytes, byteorder='big')

    def get_point_by_hashing_to_curve(self, ctx: Context, message: bytes) -> ECC.EccPoint:
        """
        Hache un message vers un point de la courbe (essai-incrément SHA-256)

        x = RO(message) mod p, puis x = RO(x) tant que x³ + ax + b n'est pas
        un carré modulo p. La racine paire est retenue comme ordonnée.
        Modifier cette fonction rend les chiffrés existants incompatibles.

        Args:
            ctx: Le contexte de calcul
            message: Les octets à hacher

        Returns:
            ECC.EccPoint: Le point obtenu

        Raises:
            InvalidArgumentError: Si aucun point n'est trouvé dans la limite
                de crypto_config.HASH_TO_CURVE_MAX_ATTEMPTS essais
        """
        x = ctx.random_oracle_sha256(message, self.p)
        for _ in range(crypto_config.HASH_TO_CURVE_MAX_ATTEMPTS):
            try:
                y = self._sqrt(self.compute_y_square(x))
            except ValueError:
                x = ctx.random_oracle_sha256(long_to_bytes(x), self.p)
                continue
            if y & 1:
                y = (self.p - y) % self.p
            try:
                return ECC.EccPoint(x, y, curve=self.curve_name)
            except ValueError as e:
                raise InternalError("Point haché hors de la courbe") from e
        raise InvalidArgumentError("Impossible de hacher le message vers la courbe")

@lru_cache(maxsize=None)
def get_ec_group(curve_id: int = crypto_config.DEFAULT_CURVE_ID) -> ECGroup:
    """
    Retourne la description partagée de la courbe nommée curve_id

    Raises:
        InvalidArgumentError: Si la courbe n'est pas supportée
    """
    if curve_id not in _CURVES:
        raise InvalidArgumentError(f"Courbe non supportée: {curve_id}")
    name, p, b, order, gx, gy = _CURVES[curve_id]
    p = int(p, 16)
    group = ECGroup(
        curve_id=curve_id,
        curve_name=name,
        p=p,
        a=(-3) % p,
        b=int(b, 16),
        order=int(order, 16),
        gx=int(gx, 16),
        gy=int(gy, 16),
    )
    logger.debug("Groupe %s initialisé (%d bits)", name, p.bit_length())
    return group
